import secrets
from datetime import timedelta

from fastapi import Response

from acadpilot.auth.repository import AccountStore
from acadpilot.auth.schemas import PublicUser
from acadpilot.core import config
from acadpilot.core.clock import Clock, utcnow

TOKEN_BYTES = 32


def session_max_age_seconds() -> int:
    return config.SESSION_TTL_DAYS * 24 * 60 * 60


class SessionManager:
    """Issues, resolves and revokes opaque session tokens."""

    def __init__(self, store: AccountStore, clock: Clock = utcnow) -> None:
        self.store = store
        self.clock = clock

    def create(self, user_id: int) -> str:
        token = secrets.token_hex(TOKEN_BYTES)
        expires_at = self.clock() + timedelta(days=config.SESSION_TTL_DAYS)
        self.store.insert_session(token, user_id, expires_at)
        return token

    def resolve(self, token: str | None) -> PublicUser | None:
        if not token:
            return None
        user = self.store.find_session_with_user(token, self.clock())
        if user is None:
            return None
        return PublicUser.model_validate(user)

    def revoke(self, token: str | None) -> None:
        if token:
            self.store.delete_session(token)

    def sweep_expired(self, user_id: int) -> int:
        return self.store.delete_expired_sessions(user_id, self.clock())


def set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=config.SESSION_COOKIE_NAME,
        value=token,
        max_age=session_max_age_seconds(),
        path='/',
        httponly=True,
        secure=config.SESSION_COOKIE_SECURE,
        samesite='lax',
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(
        key=config.SESSION_COOKIE_NAME,
        path='/',
        httponly=True,
        secure=config.SESSION_COOKIE_SECURE,
        samesite='lax',
    )
