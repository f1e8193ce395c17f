import logging

from acadpilot.auth.passwords import DUMMY_HASH, MalformedHashError, verify_password
from acadpilot.auth.repository import AccountStore
from acadpilot.auth.schemas import LoginRequest, PublicUser, normalize_email
from acadpilot.auth.sessions import SessionManager
from acadpilot.core.errors import InternalError, InvalidCredentialsError, InvalidInputError

logger = logging.getLogger(__name__)


class Authenticator:
    def __init__(self, store: AccountStore, sessions: SessionManager) -> None:
        self.store = store
        self.sessions = sessions

    def login(self, data: LoginRequest) -> tuple[PublicUser, str]:
        email = normalize_email(data.email)
        if not email or not data.password:
            raise InvalidInputError('Please enter your email and password.')

        user = self.store.find_user_by_email(email)
        if user is None:
            # Same amount of work as a wrong password.
            verify_password(data.password, DUMMY_HASH)
            logger.info('Login rejected')
            raise InvalidCredentialsError()

        try:
            valid = verify_password(data.password, user.password_hash)
        except MalformedHashError as exc:
            logger.error('Stored password hash for user %s is malformed', user.id)
            raise InternalError() from exc

        if not valid:
            logger.info('Login rejected')
            raise InvalidCredentialsError()

        swept = self.sessions.sweep_expired(user.id)
        if swept:
            logger.debug('Removed %s expired sessions for user %s', swept, user.id)

        token = self.sessions.create(user.id)
        logger.info('User %s logged in', user.id)
        return PublicUser.model_validate(user), token
