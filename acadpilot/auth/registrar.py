import logging

from acadpilot.auth.passwords import hash_password
from acadpilot.auth.repository import AccountStore, DuplicateEmailError
from acadpilot.auth.schemas import PublicUser, SignupRequest, is_valid_email, normalize_email
from acadpilot.auth.sessions import SessionManager
from acadpilot.auth.verification import VerificationCodeStore
from acadpilot.core.errors import ConflictError, InvalidInputError
from acadpilot.models.user import ROLE_STUDENT, ROLES

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


def normalize_role(role: str | None) -> str:
    normalized = (role or '').strip().lower()
    return normalized if normalized in ROLES else ROLE_STUDENT


def validate_signup(data: SignupRequest) -> None:
    """Check the request fields in order; the first failing rule is reported."""
    if not (data.name or '').strip() or not normalize_email(data.email) or not (data.password or '').strip():
        raise InvalidInputError('Please fill in all required fields.')

    if len(data.password) < MIN_PASSWORD_LENGTH:
        raise InvalidInputError(f'Password must be at least {MIN_PASSWORD_LENGTH} characters.')

    if not is_valid_email(normalize_email(data.email)):
        raise InvalidInputError('Please enter a valid email address.')


class AccountRegistrar:
    def __init__(
        self,
        store: AccountStore,
        sessions: SessionManager,
        codes: VerificationCodeStore,
        require_verification: bool = True,
    ) -> None:
        self.store = store
        self.sessions = sessions
        self.codes = codes
        self.require_verification = require_verification

    def register(self, data: SignupRequest) -> tuple[PublicUser, str]:
        """Create the account and its first session.

        Returns the public view of the new user and the session token.
        """
        validate_signup(data)
        email = normalize_email(data.email)

        if self.store.find_user_by_email(email) is not None:
            raise ConflictError()

        if self.require_verification and not self.codes.is_verified(email):
            raise InvalidInputError('Please verify your email address first.')

        try:
            user = self.store.insert_user(
                email=email,
                name=data.name.strip(),
                password_hash=hash_password(data.password),
                role=normalize_role(data.role),
                institution=(data.institution or '').strip(),
            )
        except DuplicateEmailError as exc:
            # Lost a race with a concurrent signup for the same email.
            raise ConflictError() from exc

        token = self.sessions.create(user.id)
        if self.require_verification:
            self.codes.clear(email)

        logger.info('Registered user %s with role %s', user.id, user.role)
        return PublicUser.model_validate(user), token
