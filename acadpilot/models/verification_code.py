"""Email verification code model definitions."""

from sqlalchemy import Boolean, Column, DateTime, String
from acadpilot.database import Base


class VerificationCode(Base):
    """The single live sign-up code for an email address.

    Issuing a new code overwrites the row. Once the code is consumed the
    email counts as verified until ``verified_until``.
    """
    __tablename__ = "verification_codes"

    email = Column(String, primary_key=True)
    code = Column(String(6), nullable=False)
    created_at = Column(DateTime, nullable=False)
    expires_at = Column(DateTime, nullable=False)
    consumed = Column(Boolean, nullable=False, default=False)
    verified_until = Column(DateTime, nullable=True)
