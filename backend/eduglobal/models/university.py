"""
University catalog and its programs.

Programs are owned by a university (the deadline tracker stores (university_id, program_id)
pairs) and are read-only from the scheduler's point of view. No foreign keys: a saved
program may outlive its university or program row, and readers must tolerate that.
"""
from sqlalchemy import Boolean, Column, DateTime, Float, Integer, String, Text, false, true
from sqlalchemy.orm import validates
from sqlalchemy.sql import func

from eduglobal.core.constants import ENGLISH_TESTS, PROGRAM_LEVELS, UNIVERSITY_TYPES
from eduglobal.db.base import Base, JSONType


class University(Base):
    __tablename__ = "universities"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False, index=True)
    country = Column(String(128), nullable=False, index=True)
    city = Column(String(128), nullable=False)
    type = Column(String(16), nullable=False)  # Public | Private | Community
    established_year = Column(Integer, nullable=True)
    world_ranking = Column(Integer, nullable=True)
    national_ranking = Column(Integer, nullable=True)
    logo_url = Column(String(512), nullable=True)
    description = Column(Text, nullable=True)
    costs = Column(JSONType, nullable=False, default=dict)  # tuition/living/visa figures used by the budget planner
    is_active = Column(Boolean, nullable=False, default=True, server_default=true())
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    @validates("type")
    def _validate_type(self, key, value):
        if value not in UNIVERSITY_TYPES:
            raise ValueError(f"type must be one of {', '.join(UNIVERSITY_TYPES)}")
        return value

    @validates("world_ranking", "national_ranking")
    def _validate_ranking(self, key, value):
        if value is not None and value < 1:
            raise ValueError(f"{key} must be >= 1")
        return value

    @validates("established_year")
    def _validate_year(self, key, value):
        if value is not None and value < 1000:
            raise ValueError("established_year must be >= 1000")
        return value


class Program(Base):
    __tablename__ = "programs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    university_id = Column(Integer, nullable=False, index=True)
    name = Column(String(255), nullable=False)
    level = Column(String(16), nullable=False)  # Bachelor | Master | PhD | Diploma | Certificate
    duration = Column(String(64), nullable=False)
    application_deadline = Column(DateTime(timezone=True), nullable=True)  # NULL only for rolling admission
    rolling = Column(Boolean, nullable=False, default=False, server_default=false())
    min_gpa = Column(Float, nullable=True)
    english_test = Column(String(16), nullable=True)
    english_min_score = Column(Float, nullable=True)

    @validates("level")
    def _validate_level(self, key, value):
        if value not in PROGRAM_LEVELS:
            raise ValueError(f"level must be one of {', '.join(PROGRAM_LEVELS)}")
        return value

    @validates("english_test")
    def _validate_english_test(self, key, value):
        if value is not None and value not in ENGLISH_TESTS:
            raise ValueError(f"english_test must be one of {', '.join(ENGLISH_TESTS)}")
        return value
