"""Platform account. Authentication (passwords, login) is handled by the auth service; only identity and role live here."""
import re

from sqlalchemy import Boolean, Column, DateTime, Integer, String, true
from sqlalchemy.orm import validates
from sqlalchemy.sql import func

from eduglobal.core.constants import USER_ROLES
from eduglobal.db.base import Base

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[A-Za-z]{2,}$")


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(50), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)  # stored lower-case
    role = Column(String(16), nullable=False, default="student", server_default="student")  # student | admin
    is_active = Column(Boolean, nullable=False, default=True, server_default=true())
    last_login = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    @validates("name")
    def _validate_name(self, key, value):
        value = (value or "").strip()
        if not value:
            raise ValueError("Name is required")
        if len(value) > 50:
            raise ValueError("Name cannot exceed 50 characters")
        return value

    @validates("email")
    def _validate_email(self, key, value):
        value = (value or "").strip().lower()
        if not _EMAIL_RE.match(value):
            raise ValueError("Please enter a valid email")
        return value

    @validates("role")
    def _validate_role(self, key, value):
        if value not in USER_ROLES:
            raise ValueError(f"role must be one of {', '.join(USER_ROLES)}")
        return value
