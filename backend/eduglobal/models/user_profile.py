"""
Per-user profile: onboarding answers plus the deadline tracker's alert preferences.

One row per user. Saved programs and deadline notifications are the profile's embedded
lists, stored in saved_programs / deadline_notifications keyed by the same user_id.
"""
from sqlalchemy import Boolean, Column, DateTime, Float, Integer, String, true
from sqlalchemy.orm import validates
from sqlalchemy.sql import func

from eduglobal.core.constants import (
    DEFAULT_ALERT_DAYS,
    MAX_TARGET_COUNTRIES,
    PROFILE_EDUCATION_LEVELS,
    PROFILE_ENGLISH_TESTS,
    PROFILE_TARGET_DEGREES,
)
from eduglobal.db.base import Base, JSONType


def normalize_alert_days(values) -> list[int]:
    """Trigger offsets: distinct non-negative integers, largest first."""
    if values is None:
        return list(DEFAULT_ALERT_DAYS)
    out: set[int] = set()
    for v in values:
        if isinstance(v, bool) or not isinstance(v, int):
            raise ValueError("alert days must be integers")
        if v < 0:
            raise ValueError("alert days must be non-negative")
        out.add(v)
    return sorted(out, reverse=True)


class UserProfile(Base):
    __tablename__ = "user_profiles"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, nullable=False, unique=True, index=True)
    full_name = Column(String(128), nullable=True)
    phone = Column(String(32), nullable=True)
    current_city = Column(String(128), nullable=True)
    highest_education = Column(String(16), nullable=False, default="")
    gpa_or_cgpa = Column(String(16), nullable=True)
    english_test = Column(String(16), nullable=False, default="")
    english_score = Column(String(16), nullable=True)
    target_degree = Column(String(16), nullable=False, default="")
    target_countries = Column(JSONType, nullable=False, default=list)
    budget_monthly_bdt = Column(Float, nullable=True)
    onboarding_completed = Column(Boolean, nullable=False, default=False)

    # Alert preferences (deadline tracker)
    email_alerts = Column(Boolean, nullable=False, default=True, server_default=true())
    onsite_alerts = Column(Boolean, nullable=False, default=True, server_default=true())
    alert_days = Column(JSONType, nullable=False, default=lambda: list(DEFAULT_ALERT_DAYS))

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    @validates("alert_days")
    def _validate_alert_days(self, key, value):
        return normalize_alert_days(value)

    @validates("target_countries")
    def _validate_target_countries(self, key, value):
        value = [c.strip() for c in (value or []) if c and c.strip()]
        if len(value) > MAX_TARGET_COUNTRIES:
            raise ValueError(f"Maximum {MAX_TARGET_COUNTRIES} target countries allowed")
        return value

    @validates("budget_monthly_bdt")
    def _validate_budget(self, key, value):
        if value is not None and value < 0:
            raise ValueError("budget_monthly_bdt must be >= 0")
        return value

    @validates("highest_education", "english_test", "target_degree")
    def _validate_closed_sets(self, key, value):
        allowed = {
            "highest_education": PROFILE_EDUCATION_LEVELS,
            "english_test": PROFILE_ENGLISH_TESTS,
            "target_degree": PROFILE_TARGET_DEGREES,
        }[key]
        if value not in allowed:
            raise ValueError(f"{key} must be one of {', '.join(a for a in allowed if a)}")
        return value

    def trigger_offsets(self) -> frozenset[int]:
        return frozenset(DEFAULT_ALERT_DAYS if self.alert_days is None else self.alert_days)
