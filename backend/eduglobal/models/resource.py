"""Study-abroad resource library entry (guides, templates, videos)."""
from sqlalchemy import Boolean, Column, DateTime, Integer, String, Text
from sqlalchemy.orm import validates
from sqlalchemy.sql import func

from eduglobal.core.constants import (
    RESOURCE_AUDIENCES,
    RESOURCE_CATEGORIES,
    RESOURCE_DIFFICULTIES,
    RESOURCE_TYPES,
)
from eduglobal.db.base import Base


class Resource(Base):
    __tablename__ = "resources"

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    category = Column(String(64), nullable=False, index=True)
    type = Column(String(16), nullable=False)
    content = Column(Text, nullable=False)  # file URL, article body, or video embed
    file_url = Column(String(512), nullable=True)
    target_audience = Column(String(16), nullable=False, default="All")
    difficulty = Column(String(16), nullable=False, default="Beginner")
    author = Column(String(128), nullable=True)
    views = Column(Integer, nullable=False, default=0)
    likes = Column(Integer, nullable=False, default=0)
    featured = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    @validates("category", "type", "target_audience", "difficulty")
    def _validate_closed_sets(self, key, value):
        allowed = {
            "category": RESOURCE_CATEGORIES,
            "type": RESOURCE_TYPES,
            "target_audience": RESOURCE_AUDIENCES,
            "difficulty": RESOURCE_DIFFICULTIES,
        }[key]
        if value not in allowed:
            raise ValueError(f"{key} must be one of {', '.join(allowed)}")
        return value

    @validates("views", "likes")
    def _validate_counters(self, key, value):
        if value is not None and value < 0:
            raise ValueError(f"{key} must be >= 0")
        return value
