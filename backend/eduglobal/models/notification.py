"""Global notification ledger: application-status events and other per-user messages.

user_id: who receives.
type: closed set (acceptance, rejection, waitlist, interview_scheduled, ...).
is_read / read_at: read state; read_at is set once, on the first mark-read.
expires_at: TTL; rows past this instant are hidden from every listing and purged by the daily job.
data: type-specific data (oldStatus, newStatus, universityName, note, ...).
"""
from sqlalchemy import Boolean, Column, DateTime, Index, Integer, String, false
from sqlalchemy.orm import validates
from sqlalchemy.sql import func

from eduglobal.core.constants import (
    NOTIFICATION_MESSAGE_MAX,
    NOTIFICATION_PRIORITIES,
    NOTIFICATION_TITLE_MAX,
    NOTIFICATION_TYPES,
)
from eduglobal.db.base import Base, JSONType


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, nullable=False, index=True)
    type = Column(String(32), nullable=False)
    title = Column(String(NOTIFICATION_TITLE_MAX), nullable=False)
    message = Column(String(NOTIFICATION_MESSAGE_MAX), nullable=False)
    is_read = Column(Boolean, nullable=False, default=False, server_default=false())
    read_at = Column(DateTime(timezone=True), nullable=True)
    application_id = Column(Integer, nullable=True)
    university_id = Column(Integer, nullable=True)
    data = Column(JSONType, nullable=False, default=dict)
    priority = Column(String(16), nullable=False, default="medium", server_default="medium")
    expires_at = Column(DateTime(timezone=True), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    __table_args__ = (
        Index("ix_notifications_user_read_created", "user_id", "is_read", "created_at"),
        Index("ix_notifications_user_type_created", "user_id", "type", "created_at"),
        Index("ix_notifications_user_application", "user_id", "application_id"),
    )

    @validates("type")
    def _validate_type(self, key, value):
        if value not in NOTIFICATION_TYPES:
            raise ValueError(f"type must be one of {', '.join(NOTIFICATION_TYPES)}")
        return value

    @validates("priority")
    def _validate_priority(self, key, value):
        if value not in NOTIFICATION_PRIORITIES:
            raise ValueError(f"priority must be one of {', '.join(NOTIFICATION_PRIORITIES)}")
        return value

    @validates("title", "message")
    def _validate_text(self, key, value):
        value = (value or "").strip()
        limit = NOTIFICATION_TITLE_MAX if key == "title" else NOTIFICATION_MESSAGE_MAX
        if not value:
            raise ValueError(f"{key} is required")
        return value[:limit]
