"""Persistence for accounts, sessions and verification codes.

The auth services depend on ``AccountStore`` only. ``SqlAccountStore`` is the
SQLAlchemy implementation; every mutating method commits a single row
operation.
"""

from datetime import datetime
from typing import Optional, Protocol

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from acadpilot.models.session import UserSession
from acadpilot.models.user import User
from acadpilot.models.verification_code import VerificationCode


class DuplicateEmailError(Exception):
    """The unique index on ``users.email`` rejected an insert."""


class AccountStore(Protocol):
    def find_user_by_email(self, email: str) -> Optional[User]: ...

    def insert_user(self, *, email: str, name: str, password_hash: str, role: str, institution: str) -> User: ...

    def insert_session(self, token: str, user_id: int, expires_at: datetime) -> None: ...

    def find_session_with_user(self, token: str, now: datetime) -> Optional[User]: ...

    def delete_session(self, token: str) -> None: ...

    def delete_expired_sessions(self, user_id: int, now: datetime) -> int: ...

    def upsert_verification_code(self, email: str, code: str, created_at: datetime, expires_at: datetime) -> None: ...

    def find_verification_code(self, email: str) -> Optional[VerificationCode]: ...

    def consume_verification_code(self, email: str, code: str, now: datetime, verified_until: datetime) -> bool: ...

    def is_email_verified(self, email: str, now: datetime) -> bool: ...

    def delete_verification_code(self, email: str) -> None: ...


class SqlAccountStore:
    def __init__(self, db: Session) -> None:
        self.db = db

    def find_user_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email).first()

    def insert_user(self, *, email: str, name: str, password_hash: str, role: str, institution: str) -> User:
        user = User(
            email=email,
            name=name,
            password_hash=password_hash,
            role=role,
            institution=institution,
        )
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            raise DuplicateEmailError(email) from exc
        self.db.refresh(user)
        return user

    def insert_session(self, token: str, user_id: int, expires_at: datetime) -> None:
        self.db.add(UserSession(id=token, user_id=user_id, expires_at=expires_at))
        self.db.commit()

    def find_session_with_user(self, token: str, now: datetime) -> Optional[User]:
        return (
            self.db.query(User)
            .join(UserSession, UserSession.user_id == User.id)
            .filter(
                UserSession.id == token,
                UserSession.expires_at > now,
            )
            .first()
        )

    def delete_session(self, token: str) -> None:
        self.db.query(UserSession).filter(UserSession.id == token).delete(synchronize_session=False)
        self.db.commit()

    def delete_expired_sessions(self, user_id: int, now: datetime) -> int:
        deleted = self.db.query(UserSession).filter(
            UserSession.user_id == user_id,
            UserSession.expires_at <= now,
        ).delete(synchronize_session=False)
        self.db.commit()
        return deleted

    def upsert_verification_code(self, email: str, code: str, created_at: datetime, expires_at: datetime) -> None:
        values = {
            VerificationCode.code: code,
            VerificationCode.created_at: created_at,
            VerificationCode.expires_at: expires_at,
            VerificationCode.consumed: False,
            VerificationCode.verified_until: None,
        }
        updated = self.db.query(VerificationCode).filter(
            VerificationCode.email == email,
        ).update(values, synchronize_session=False)
        if updated:
            self.db.commit()
            return

        self.db.add(VerificationCode(
            email=email,
            code=code,
            created_at=created_at,
            expires_at=expires_at,
            consumed=False,
            verified_until=None,
        ))
        try:
            self.db.commit()
        except IntegrityError:
            # A concurrent request inserted first; the later code wins.
            self.db.rollback()
            self.db.query(VerificationCode).filter(
                VerificationCode.email == email,
            ).update(values, synchronize_session=False)
            self.db.commit()

    def find_verification_code(self, email: str) -> Optional[VerificationCode]:
        return self.db.query(VerificationCode).filter(VerificationCode.email == email).first()

    def consume_verification_code(self, email: str, code: str, now: datetime, verified_until: datetime) -> bool:
        updated = self.db.query(VerificationCode).filter(
            VerificationCode.email == email,
            VerificationCode.code == code,
            VerificationCode.consumed.is_(False),
            VerificationCode.expires_at > now,
        ).update(
            {VerificationCode.consumed: True, VerificationCode.verified_until: verified_until},
            synchronize_session=False,
        )
        self.db.commit()
        return updated == 1

    def is_email_verified(self, email: str, now: datetime) -> bool:
        record = self.db.query(VerificationCode.email).filter(
            VerificationCode.email == email,
            VerificationCode.consumed.is_(True),
            VerificationCode.verified_until > now,
        ).first()
        return record is not None

    def delete_verification_code(self, email: str) -> None:
        self.db.query(VerificationCode).filter(VerificationCode.email == email).delete(synchronize_session=False)
        self.db.commit()
