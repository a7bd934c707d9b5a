"""Deadline sub-ledger: per-profile reminders written by the daily sweep.

type: 'deadline_alert' (N days left, one per (university, program, days_left)) or
'deadline_overdue' (one per (university, program)).
dedupe_key encodes that identity; the unique (user_id, dedupe_key) index makes the sweep's
insert-if-absent idempotent even when two sweeps overlap.
Read entries older than the retention window are purged by the weekly cleanup job.
"""
from sqlalchemy import Boolean, Column, DateTime, Index, Integer, String, UniqueConstraint, false
from sqlalchemy.sql import func

from eduglobal.db.base import Base, JSONType


class DeadlineNotification(Base):
    __tablename__ = "deadline_notifications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, nullable=False, index=True)
    type = Column(String(32), nullable=False)  # deadline_alert | deadline_overdue
    title = Column(String(200), nullable=False)
    message = Column(String(500), nullable=False)
    university_id = Column(Integer, nullable=True)
    program_id = Column(Integer, nullable=True)
    data = Column(JSONType, nullable=False, default=dict)  # universityId, programId, deadline, daysLeft | daysOverdue
    is_read = Column(Boolean, nullable=False, default=False, server_default=false())
    read_at = Column(DateTime(timezone=True), nullable=True)
    expires_at = Column(DateTime(timezone=True), nullable=True)  # unused by the sweep; kept for the shared ledger interface
    dedupe_key = Column(String(128), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        UniqueConstraint("user_id", "dedupe_key", name="uq_deadline_notifications_user_dedupe"),
        Index("ix_deadline_notifications_user_read_created", "user_id", "is_read", "created_at"),
    )


def alert_dedupe_key(university_id: int, program_id: int, days_left: int) -> str:
    return f"deadline_alert:{university_id}:{program_id}:{days_left}"


def overdue_dedupe_key(university_id: int, program_id: int) -> str:
    return f"deadline_overdue:{university_id}:{program_id}"
