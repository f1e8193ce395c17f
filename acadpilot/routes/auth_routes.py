import logging

from fastapi import APIRouter, Depends, Response

from acadpilot.auth.authenticator import Authenticator
from acadpilot.auth.dependencies import (
    get_account_store,
    get_code_sender,
    get_current_user,
    get_session_manager,
    session_cookie,
)
from acadpilot.auth.mailer import CodeSender, DeliveryError
from acadpilot.auth.registrar import AccountRegistrar
from acadpilot.auth.repository import SqlAccountStore
from acadpilot.auth.schemas import (
    LoginRequest,
    PublicUser,
    SendCodeRequest,
    SignupRequest,
    VerifyCodeRequest,
    normalize_email,
)
from acadpilot.auth.sessions import SessionManager, clear_session_cookie, set_session_cookie
from acadpilot.auth.verification import VerificationCodeStore
from acadpilot.core import config
from acadpilot.core.errors import InternalError

router = APIRouter(tags=['auth'])

logger = logging.getLogger(__name__)


@router.post('/send-code')
def send_code(
    data: SendCodeRequest,
    store: SqlAccountStore = Depends(get_account_store),
    sender: CodeSender = Depends(get_code_sender),
):
    codes = VerificationCodeStore(store)
    code = codes.issue(data.email)
    email = normalize_email(data.email)
    try:
        sender.send(email, code)
    except DeliveryError as exc:
        logger.exception('Could not deliver verification code to %s', email)
        # Let the caller retry right away instead of waiting out the cooldown.
        codes.clear(email)
        raise InternalError('Could not send the verification code. Please try again later.') from exc
    return {'success': True}


@router.post('/verify-code')
def verify_code(data: VerifyCodeRequest, store: SqlAccountStore = Depends(get_account_store)):
    VerificationCodeStore(store).verify(data.email, data.code)
    return {'success': True}


@router.post('/signup')
def signup(
    data: SignupRequest,
    response: Response,
    store: SqlAccountStore = Depends(get_account_store),
    sessions: SessionManager = Depends(get_session_manager),
):
    registrar = AccountRegistrar(
        store,
        sessions,
        VerificationCodeStore(store),
        require_verification=config.REQUIRE_EMAIL_VERIFICATION,
    )
    user, token = registrar.register(data)
    set_session_cookie(response, token)
    return {'success': True, 'user': user.model_dump()}


@router.post('/login')
def login(
    data: LoginRequest,
    response: Response,
    store: SqlAccountStore = Depends(get_account_store),
    sessions: SessionManager = Depends(get_session_manager),
):
    user, token = Authenticator(store, sessions).login(data)
    set_session_cookie(response, token)
    return {'success': True, 'user': user.model_dump()}


@router.post('/logout')
def logout(
    response: Response,
    token: str | None = Depends(session_cookie),
    sessions: SessionManager = Depends(get_session_manager),
):
    sessions.revoke(token)
    clear_session_cookie(response)
    return {'success': True}


@router.get('/me')
def me(current_user: PublicUser = Depends(get_current_user)):
    return {'user': current_user.model_dump()}
