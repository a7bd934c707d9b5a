"""Deadline tracker entry: a (university, program) pair a user saved. The daily sweep reads these."""
from sqlalchemy import Column, DateTime, Integer, UniqueConstraint
from sqlalchemy.sql import func

from eduglobal.db.base import Base


class SavedProgram(Base):
    __tablename__ = "saved_programs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, nullable=False, index=True)
    university_id = Column(Integer, nullable=False)
    program_id = Column(Integer, nullable=False)
    saved_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        UniqueConstraint("user_id", "university_id", "program_id", name="uq_saved_programs_user_program"),
    )
