import logging
import secrets
from datetime import timedelta

from acadpilot.auth.repository import AccountStore
from acadpilot.auth.schemas import is_valid_email, normalize_email
from acadpilot.core import config
from acadpilot.core.clock import Clock, utcnow
from acadpilot.core.errors import InvalidCodeError, InvalidInputError, TooManyRequestsError

logger = logging.getLogger(__name__)

CODE_LENGTH = 6


def generate_code() -> str:
    return f'{secrets.randbelow(10 ** CODE_LENGTH):0{CODE_LENGTH}d}'


def is_well_formed_code(value: str) -> bool:
    return len(value) == CODE_LENGTH and value.isascii() and value.isdigit()


class VerificationCodeStore:
    """One-time sign-up codes proving control of an email address.

    At most one code is live per email. Consuming it marks the email as
    verified for ``VERIFIED_EMAIL_TTL_MINUTES``.
    """

    def __init__(self, store: AccountStore, clock: Clock = utcnow) -> None:
        self.store = store
        self.clock = clock

    def issue(self, email: str | None) -> str:
        normalized_email = normalize_email(email)
        if not normalized_email:
            raise InvalidInputError('Email is required.')
        if not is_valid_email(normalized_email):
            raise InvalidInputError('Please enter a valid email address.')

        now = self.clock()
        cooldown = config.VERIFICATION_RESEND_COOLDOWN_SECONDS
        if cooldown > 0:
            existing = self.store.find_verification_code(normalized_email)
            if existing is not None and existing.created_at > now - timedelta(seconds=cooldown):
                raise TooManyRequestsError(f'Please wait {cooldown} seconds before requesting another code.')

        code = generate_code()
        self.store.upsert_verification_code(
            normalized_email,
            code,
            created_at=now,
            expires_at=now + timedelta(minutes=config.VERIFICATION_CODE_TTL_MINUTES),
        )
        logger.info('Issued verification code for %s', normalized_email)
        return code

    def verify(self, email: str | None, submitted_code: str | None) -> None:
        normalized_email = normalize_email(email)
        code = (submitted_code or '').strip()
        if not normalized_email or not is_well_formed_code(code):
            raise InvalidCodeError()

        now = self.clock()
        verified_until = now + timedelta(minutes=config.VERIFIED_EMAIL_TTL_MINUTES)
        if not self.store.consume_verification_code(normalized_email, code, now, verified_until):
            raise InvalidCodeError()
        logger.info('Verified email %s', normalized_email)

    def is_verified(self, email: str) -> bool:
        return self.store.is_email_verified(normalize_email(email), self.clock())

    def clear(self, email: str) -> None:
        self.store.delete_verification_code(normalize_email(email))
