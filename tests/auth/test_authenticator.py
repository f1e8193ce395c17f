import pytest

from acadpilot.auth.authenticator import Authenticator
from acadpilot.auth.passwords import hash_password
from acadpilot.auth.repository import SqlAccountStore
from acadpilot.auth.schemas import LoginRequest
from acadpilot.auth.sessions import SessionManager
from acadpilot.core.errors import InternalError, InvalidCredentialsError, InvalidInputError
from acadpilot.models.session import UserSession


@pytest.fixture
def store(account_db) -> SqlAccountStore:
    store = SqlAccountStore(account_db)
    store.insert_user(
        email='a@b.com',
        name='X',
        password_hash=hash_password('abcdef'),
        role='student',
        institution='',
    )
    return store


@pytest.fixture
def authenticator(store, clock) -> Authenticator:
    return Authenticator(store, SessionManager(store, clock=clock))


def test_login_returns_user_and_new_session(authenticator) -> None:
    user, token = authenticator.login(LoginRequest(email=' A@B.COM ', password='abcdef'))

    assert user.email == 'a@b.com'
    assert authenticator.sessions.resolve(token).id == user.id


def test_login_issues_different_token_each_time(authenticator) -> None:
    first_user, first_token = authenticator.login(LoginRequest(email='a@b.com', password='abcdef'))
    second_user, second_token = authenticator.login(LoginRequest(email='a@b.com', password='abcdef'))

    assert first_token != second_token
    assert first_user.id == second_user.id


def test_wrong_password_and_unknown_email_fail_identically(authenticator) -> None:
    with pytest.raises(InvalidCredentialsError) as wrong_password:
        authenticator.login(LoginRequest(email='a@b.com', password='abcdeg'))
    with pytest.raises(InvalidCredentialsError) as unknown_email:
        authenticator.login(LoginRequest(email='nobody@b.com', password='abcdef'))

    assert wrong_password.value.message == unknown_email.value.message
    assert wrong_password.value.status_code == unknown_email.value.status_code == 401


@pytest.mark.parametrize('payload', [{}, {'email': 'a@b.com'}, {'password': 'abcdef'}, {'email': '  ', 'password': 'x'}])
def test_login_requires_email_and_password(authenticator, payload: dict) -> None:
    with pytest.raises(InvalidInputError):
        authenticator.login(LoginRequest(**payload))


def test_login_sweeps_expired_sessions(authenticator, account_db, clock) -> None:
    _, old_token = authenticator.login(LoginRequest(email='a@b.com', password='abcdef'))
    clock.advance(days=8)

    _, new_token = authenticator.login(LoginRequest(email='a@b.com', password='abcdef'))

    tokens = {row.id for row in account_db.query(UserSession).all()}
    assert tokens == {new_token}
    assert old_token not in tokens


def test_login_with_malformed_stored_hash_is_internal_error(store, authenticator) -> None:
    store.insert_user(email='broken@b.com', name='B', password_hash='not-a-hash', role='student', institution='')

    with pytest.raises(InternalError):
        authenticator.login(LoginRequest(email='broken@b.com', password='abcdef'))
