"""
User Preference Model

Durable per-user preference record. One row per user; ``data`` holds the
JSON-serialized preference and is replaced wholesale on every upsert.
"""

from datetime import datetime, timezone

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer
from sqlalchemy.orm import relationship

from preference_api.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UserPreference(Base):
    """Last-known preference payload for a user."""

    __tablename__ = "user_preferences"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    # 1:1 with users; the unique constraint makes upserts atomic per user
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True, index=True)

    # Opaque JSON payload, validated on read
    data = Column(JSON, nullable=False)

    # Timestamps
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow, nullable=False)

    # Relationships
    user = relationship("User", back_populates="preference")

    def __repr__(self) -> str:
        return f"<UserPreference(id={self.id}, user={self.user_id})>"
