"""Scholarship catalog entry. Listing/filtering is served by the catalog service; this is the record shape."""
from sqlalchemy import Boolean, Column, DateTime, Float, Integer, String, Text
from sqlalchemy.orm import validates
from sqlalchemy.sql import func

from eduglobal.core.constants import SCHOLARSHIP_DEGREE_LEVELS
from eduglobal.db.base import Base


class Scholarship(Base):
    __tablename__ = "scholarships"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    university = Column(String(255), nullable=False)
    country = Column(String(128), nullable=False, index=True)
    city = Column(String(128), nullable=False)
    degree_level = Column(String(16), nullable=False, index=True)  # UG | Masters | PhD
    field_of_study = Column(String(255), nullable=False)
    merit_based = Column(Boolean, nullable=False, default=False)
    need_based = Column(Boolean, nullable=False, default=False)
    min_gpa = Column(Float, nullable=True)
    income_max_bdt = Column(Float, nullable=True)
    ielts_min = Column(Float, nullable=True)
    toefl_min = Column(Float, nullable=True)
    gre_min = Column(Float, nullable=True)
    coverage_percent = Column(Float, nullable=True)
    amount_bdt = Column(Float, nullable=True)
    stipend_monthly_bdt = Column(Float, nullable=True)
    application_fee_bdt = Column(Float, nullable=True)
    deadline = Column(DateTime(timezone=True), nullable=True)
    rolling = Column(Boolean, nullable=False, default=False)
    description = Column(Text, nullable=True)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    @validates("degree_level")
    def _validate_degree_level(self, key, value):
        if value not in SCHOLARSHIP_DEGREE_LEVELS:
            raise ValueError(f"degree_level must be one of {', '.join(SCHOLARSHIP_DEGREE_LEVELS)}")
        return value

    @validates("min_gpa")
    def _validate_gpa(self, key, value):
        if value is not None and not 0 <= value <= 4:
            raise ValueError("min_gpa must be between 0 and 4")
        return value

    @validates("coverage_percent")
    def _validate_coverage(self, key, value):
        if value is not None and not 0 <= value <= 100:
            raise ValueError("coverage_percent must be between 0 and 100")
        return value

    @validates("income_max_bdt", "ielts_min", "toefl_min", "gre_min", "amount_bdt", "stipend_monthly_bdt", "application_fee_bdt")
    def _validate_non_negative(self, key, value):
        if value is not None and value < 0:
            raise ValueError(f"{key} must be >= 0")
        return value
