import pytest

from acadpilot.auth.passwords import verify_password
from acadpilot.auth.registrar import AccountRegistrar, normalize_role, validate_signup
from acadpilot.auth.repository import DuplicateEmailError, SqlAccountStore
from acadpilot.auth.schemas import SignupRequest
from acadpilot.auth.sessions import SessionManager
from acadpilot.auth.verification import VerificationCodeStore
from acadpilot.core.errors import ConflictError, InvalidInputError
from acadpilot.models.user import User
from acadpilot.models.verification_code import VerificationCode


def _registrar(account_db, clock, require_verification: bool = False) -> AccountRegistrar:
    store = SqlAccountStore(account_db)
    return AccountRegistrar(
        store,
        SessionManager(store, clock=clock),
        VerificationCodeStore(store, clock=clock),
        require_verification=require_verification,
    )


@pytest.mark.parametrize(
    ('role', 'expected'),
    [('tutor', 'tutor'), ('student', 'student'), (' Tutor ', 'tutor'), ('admin', 'student'), (None, 'student')],
)
def test_normalize_role_defaults_to_student(role, expected: str) -> None:
    assert normalize_role(role) == expected


@pytest.mark.parametrize(
    ('payload', 'message'),
    [
        ({'email': 'a@b.com', 'password': 'abcdef'}, 'Please fill in all required fields.'),
        ({'email': '  ', 'password': 'abcdef', 'name': 'X'}, 'Please fill in all required fields.'),
        ({'email': 'a@b.com', 'password': '      ', 'name': 'X'}, 'Please fill in all required fields.'),
        ({'email': 'a@b.com', 'password': 'abc', 'name': 'X'}, 'Password must be at least 6 characters.'),
        ({'email': 'a@b', 'password': 'abcdef', 'name': 'X'}, 'Please enter a valid email address.'),
        ({'email': 'a b@c.com', 'password': 'abcdef', 'name': 'X'}, 'Please enter a valid email address.'),
        # Length is checked before the email shape.
        ({'email': 'nope', 'password': 'abc', 'name': 'X'}, 'Password must be at least 6 characters.'),
    ],
)
def test_validate_signup_reports_first_failing_rule(payload: dict, message: str) -> None:
    with pytest.raises(InvalidInputError) as exception_info:
        validate_signup(SignupRequest(**payload))

    assert exception_info.value.message == message


def test_register_creates_user_and_session(account_db, clock) -> None:
    registrar = _registrar(account_db, clock)

    user, token = registrar.register(SignupRequest(
        email=' A@B.com ',
        password='abcdef',
        name='  X  ',
        role='tutor',
        institution=' Rhodes College ',
    ))

    assert user.email == 'a@b.com'
    assert user.name == 'X'
    assert user.role == 'tutor'
    assert user.institution == 'Rhodes College'
    assert registrar.sessions.resolve(token).id == user.id

    row = account_db.query(User).filter(User.id == user.id).one()
    assert row.password_hash != 'abcdef'
    assert verify_password('abcdef', row.password_hash)


def test_register_rejects_duplicate_email_case_insensitively(account_db, clock) -> None:
    registrar = _registrar(account_db, clock)
    registrar.register(SignupRequest(email='a@b.com', password='abcdef', name='X'))

    with pytest.raises(ConflictError):
        registrar.register(SignupRequest(email='A@B.com', password='abcdef', name='Y'))

    assert account_db.query(User).count() == 1


def test_register_short_password_writes_nothing(account_db, clock) -> None:
    registrar = _registrar(account_db, clock)

    with pytest.raises(InvalidInputError):
        registrar.register(SignupRequest(email='a@b.com', password='abc', name='X'))

    assert account_db.query(User).count() == 0


def test_register_maps_unique_index_violation_to_conflict(account_db, clock, monkeypatch: pytest.MonkeyPatch) -> None:
    registrar = _registrar(account_db, clock)

    def lose_race(**kwargs):
        raise DuplicateEmailError(kwargs['email'])

    # Pre-check passes, insert loses to a concurrent signup.
    monkeypatch.setattr(registrar.store, 'insert_user', lose_race)

    with pytest.raises(ConflictError):
        registrar.register(SignupRequest(email='a@b.com', password='abcdef', name='X'))


def test_unique_index_rejects_second_insert(account_db) -> None:
    store = SqlAccountStore(account_db)
    store.insert_user(email='a@b.com', name='X', password_hash='00:00', role='student', institution='')

    with pytest.raises(DuplicateEmailError):
        store.insert_user(email='a@b.com', name='Y', password_hash='00:00', role='student', institution='')


def test_register_requires_server_side_verification(account_db, clock) -> None:
    registrar = _registrar(account_db, clock, require_verification=True)

    with pytest.raises(InvalidInputError) as exception_info:
        registrar.register(SignupRequest(email='a@b.com', password='abcdef', name='X'))

    assert exception_info.value.message == 'Please verify your email address first.'
    assert account_db.query(User).count() == 0


def test_register_rejects_issued_but_unverified_email(account_db, clock) -> None:
    registrar = _registrar(account_db, clock, require_verification=True)
    registrar.codes.issue('a@b.com')

    with pytest.raises(InvalidInputError):
        registrar.register(SignupRequest(email='a@b.com', password='abcdef', name='X'))


def test_register_with_verified_email_consumes_verification(account_db, clock) -> None:
    registrar = _registrar(account_db, clock, require_verification=True)
    registrar.codes.verify('a@b.com', registrar.codes.issue('a@b.com'))

    user, _ = registrar.register(SignupRequest(email='A@b.com', password='abcdef', name='X'))

    assert user.email == 'a@b.com'
    assert account_db.query(VerificationCode).count() == 0


def test_register_reports_conflict_before_verification(account_db, clock) -> None:
    registrar = _registrar(account_db, clock, require_verification=True)
    registrar.codes.verify('a@b.com', registrar.codes.issue('a@b.com'))
    registrar.register(SignupRequest(email='a@b.com', password='abcdef', name='X'))

    with pytest.raises(ConflictError):
        registrar.register(SignupRequest(email='a@b.com', password='abcdef', name='X'))
