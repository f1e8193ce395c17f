from fastapi import Depends, Request
from fastapi.security import APIKeyCookie
from sqlalchemy.orm import Session

from acadpilot.auth.mailer import CodeSender, build_code_sender
from acadpilot.auth.repository import SqlAccountStore
from acadpilot.auth.schemas import PublicUser
from acadpilot.auth.sessions import SessionManager
from acadpilot.core import config
from acadpilot.core.errors import UnauthorizedError
from acadpilot.database import get_db

session_cookie = APIKeyCookie(name=config.SESSION_COOKIE_NAME, auto_error=False)


def get_account_store(db: Session = Depends(get_db)) -> SqlAccountStore:
    return SqlAccountStore(db)


def get_session_manager(store: SqlAccountStore = Depends(get_account_store)) -> SessionManager:
    return SessionManager(store)


def get_code_sender() -> CodeSender:
    return build_code_sender()


def get_optional_user(
    request: Request,
    token: str | None = Depends(session_cookie),
    sessions: SessionManager = Depends(get_session_manager),
) -> PublicUser | None:
    """Resolve the session cookie on every request; ``None`` means anonymous."""
    user = sessions.resolve(token)
    request.state.user = user
    return user


def get_current_user(user: PublicUser | None = Depends(get_optional_user)) -> PublicUser:
    if user is None:
        raise UnauthorizedError()
    return user
