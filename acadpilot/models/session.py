"""Login session model definitions."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from acadpilot.database import Base


class UserSession(Base):
    """An opaque bearer token mapped to a user until it expires."""
    __tablename__ = "sessions"

    id = Column(String(64), primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    expires_at = Column(DateTime, nullable=False)
