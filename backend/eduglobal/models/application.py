"""
Study-abroad application and its status history.

status follows pending -> under_review -> interview_scheduled -> final_review -> accepted | declined,
with waitlisted reachable from any open status. accepted/declined are terminal.
status_history is append-only; its last row always carries the current status.
The partial unique index allows one open (non-terminal) application per (user, university).
"""
from sqlalchemy import Boolean, Column, DateTime, Index, Integer, String, Text
from sqlalchemy.orm import validates
from sqlalchemy.sql import func

from eduglobal.core.constants import (
    APPLICATION_STATUSES,
    INITIAL_APPLICATION_STATUS,
    SCHOLARSHIP_TYPES,
    SEMESTERS,
    TERMINAL_APPLICATION_STATUSES,
)
from eduglobal.db.base import Base, JSONType

PERSONAL_STATEMENT_MIN = 100


class Application(Base):
    __tablename__ = "applications"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, nullable=False, index=True)
    university_id = Column(Integer, nullable=False, index=True)
    semester = Column(String(16), nullable=False)  # Fall | Spring | Summer | Winter
    academic_year = Column(String(16), nullable=False)
    subject = Column(String(255), nullable=False)
    preferred_start_date = Column(DateTime(timezone=True), nullable=False)
    applying_for_scholarship = Column(Boolean, nullable=False, default=False)
    scholarship_type = Column(String(32), nullable=True)
    personal_statement = Column(Text, nullable=False)
    status = Column(String(32), nullable=False, default=INITIAL_APPLICATION_STATUS, index=True)
    details = Column(JSONType, nullable=False, default=dict)  # gpa, testScores, documents, workExperience, additionalNotes
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    __table_args__ = (
        Index(
            "uq_applications_open_user_university",
            "user_id",
            "university_id",
            unique=True,
            postgresql_where=status.notin_(sorted(TERMINAL_APPLICATION_STATUSES)),
            sqlite_where=status.notin_(sorted(TERMINAL_APPLICATION_STATUSES)),
        ),
    )

    @validates("status")
    def _validate_status(self, key, value):
        if value not in APPLICATION_STATUSES:
            raise ValueError(f"status must be one of {', '.join(APPLICATION_STATUSES)}")
        return value

    @validates("semester")
    def _validate_semester(self, key, value):
        if value not in SEMESTERS:
            raise ValueError(f"semester must be one of {', '.join(SEMESTERS)}")
        return value

    @validates("scholarship_type")
    def _validate_scholarship_type(self, key, value):
        if value is not None and value not in SCHOLARSHIP_TYPES:
            raise ValueError(f"scholarship_type must be one of {', '.join(SCHOLARSHIP_TYPES)}")
        return value

    @validates("personal_statement")
    def _validate_statement(self, key, value):
        if len((value or "").strip()) < PERSONAL_STATEMENT_MIN:
            raise ValueError(f"personal_statement must be at least {PERSONAL_STATEMENT_MIN} characters")
        return value

    @validates("details")
    def _validate_details(self, key, value):
        value = dict(value or {})
        gpa = value.get("gpa")
        if gpa is not None and not 0 <= float(gpa) <= 4:
            raise ValueError("gpa must be between 0 and 4")
        return value

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_APPLICATION_STATUSES


class ApplicationStatusHistory(Base):
    __tablename__ = "application_status_history"

    id = Column(Integer, primary_key=True, autoincrement=True)
    application_id = Column(Integer, nullable=False, index=True)
    status = Column(String(32), nullable=False)
    changed_at = Column(DateTime(timezone=True), nullable=False)
    note = Column(String(500), nullable=True)
    updated_by = Column(Integer, nullable=True)  # user id of the actor; NULL for the owner's submission
