"""User model definitions."""

from sqlalchemy import Column, DateTime, Integer, String
from acadpilot.core.clock import utcnow
from acadpilot.database import Base

ROLE_STUDENT = "student"
ROLE_TUTOR = "tutor"
ROLES = {ROLE_STUDENT, ROLE_TUTOR}


class User(Base):
    """Represents a registered account."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)  # trimmed, lower-cased
    name = Column(String, nullable=False)
    password_hash = Column(String, nullable=False)
    role = Column(String, nullable=False, default=ROLE_STUDENT)  # student/tutor
    institution = Column(String, nullable=False, default="")
    created_at = Column(DateTime, default=utcnow)
