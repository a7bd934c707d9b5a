"""
Notification ledger: one interface over the two places notifications live.

category "status"   -> notifications table (application-status events; TTL via expires_at)
category "deadline" -> deadline_notifications table (sweep reminders; deduplicated by dedupe_key)

Every read and every per-user write skips rows whose expires_at has passed; purge_expired removes them physically.
create() does no uniqueness check: callers that need dedup use insert_if_absent, which relies on
the (user_id, dedupe_key) unique index instead of read-then-write.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable

from sqlalchemy import func, or_
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from eduglobal.core.clock import Clock, isoformat, utc_now
from eduglobal.core.constants import CATEGORY_DEADLINE, CATEGORY_STATUS, DEFAULT_PAGE_LIMIT
from eduglobal.models.deadline_notification import DeadlineNotification
from eduglobal.models.notification import Notification

logger = logging.getLogger(__name__)

LEDGER_MODELS = {
    CATEGORY_STATUS: Notification,
    CATEGORY_DEADLINE: DeadlineNotification,
}


@dataclass
class LedgerPage:
    items: list = field(default_factory=list)
    total: int = 0
    page: int = 1
    limit: int = DEFAULT_PAGE_LIMIT

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0


class NotificationLedger:
    def __init__(self, db: Session, category: str, clock: Clock = utc_now):
        if category not in LEDGER_MODELS:
            raise ValueError(f"unknown notification category: {category}")
        self.db = db
        self.category = category
        self.model = LEDGER_MODELS[category]
        self.clock = clock

    # --- Queries ---

    def _live(self, user_id: int, now: datetime | None = None):
        m = self.model
        now = now or self.clock()
        return self.db.query(m).filter(
            m.user_id == user_id,
            or_(m.expires_at.is_(None), m.expires_at > now),
        )

    def _newest_first(self, q):
        return q.order_by(self.model.created_at.desc(), self.model.id.desc())

    def get(self, user_id: int, notification_id: int):
        return self._live(user_id).filter(self.model.id == notification_id).first()

    def list(
        self,
        user_id: int,
        page: int = 1,
        limit: int = DEFAULT_PAGE_LIMIT,
        type: str | None = None,
        read: bool | None = None,
    ) -> LedgerPage:
        """Offset paging (skip = (page-1)*limit), newest first."""
        q = self._live(user_id)
        if type:
            q = q.filter(self.model.type == type)
        if read is not None:
            q = q.filter(self.model.is_read.is_(read))
        total = q.count()
        rows = self._newest_first(q).offset((page - 1) * limit).limit(limit).all()
        return LedgerPage(items=rows, total=total, page=page, limit=limit)

    def list_unread(self, user_id: int) -> list:
        return self._newest_first(self._live(user_id).filter(self.model.is_read.is_(False))).all()

    def unread_count(self, user_id: int) -> int:
        return self._live(user_id).filter(self.model.is_read.is_(False)).count()

    def stats(self, user_id: int) -> dict[str, Any]:
        m = self.model
        rows = (
            self._live(user_id)
            .with_entities(m.type, m.is_read, func.count(m.id))
            .group_by(m.type, m.is_read)
            .all()
        )
        total = unread = 0
        breakdown: dict[str, int] = {}
        for type_, is_read, count in rows:
            total += count
            if not is_read:
                unread += count
            breakdown[type_] = breakdown.get(type_, 0) + count
        return {"total": total, "unread": unread, "read": total - unread, "typeBreakdown": breakdown}

    def existing_dedupe_keys(self, user_id: int) -> set[str]:
        m = self.model
        return {k for (k,) in self.db.query(m.dedupe_key).filter(m.user_id == user_id).all()}

    # --- Writes ---

    def create(self, user_id: int, type: str, title: str, message: str, commit: bool = True, **fields):
        fields.setdefault("created_at", self.clock())
        row = self.model(user_id=user_id, type=type, title=title, message=message, **fields)
        self.db.add(row)
        self.db.flush()
        if commit:
            self.db.commit()
        return row

    def insert_if_absent(self, rows: list[dict[str, Any]]) -> int:
        """Bulk insert keyed by (user_id, dedupe_key); rows already present are skipped. Returns rows inserted."""
        if not rows:
            return 0
        table = self.model.__table__
        dialect = self.db.get_bind().dialect.name
        if dialect == "postgresql":
            stmt = pg_insert(table)
        elif dialect == "sqlite":
            stmt = sqlite_insert(table)
        else:
            return self._insert_one_by_one(rows)
        stmt = stmt.values(rows).on_conflict_do_nothing(index_elements=["user_id", "dedupe_key"])
        result = self.db.execute(stmt)
        if result.rowcount is None or result.rowcount < 0:
            return len(rows)
        return result.rowcount

    def _insert_one_by_one(self, rows: list[dict[str, Any]]) -> int:
        inserted = 0
        for values in rows:
            try:
                with self.db.begin_nested():
                    self.db.execute(self.model.__table__.insert().values(**values))
                inserted += 1
            except IntegrityError:
                logger.debug("Skip duplicate %s notification %s", self.category, values.get("dedupe_key"))
        return inserted

    def mark_read(self, user_id: int, ids: Iterable[int] | None = None) -> int:
        """Mark unread rows read; all of the user's unread rows when ids is None."""
        m = self.model
        q = self._live(user_id).filter(m.is_read.is_(False))
        if ids is not None:
            ids = list(ids)
            if not ids:
                return 0
            q = q.filter(m.id.in_(ids))
        updated = q.update({m.is_read: True, m.read_at: self.clock()}, synchronize_session=False)
        self.db.commit()
        return updated

    def mark_one_read(self, user_id: int, notification_id: int):
        """Returns the row (read timestamp kept if already read) or None when not found."""
        row = self.get(user_id, notification_id)
        if row is None:
            return None
        if not row.is_read:
            row.is_read = True
            row.read_at = self.clock()
            self.db.commit()
        return row

    def delete(self, user_id: int, ids: Iterable[int]) -> int:
        ids = list(ids)
        if not ids:
            return 0
        m = self.model
        deleted = self._live(user_id).filter(m.id.in_(ids)).delete(synchronize_session=False)
        self.db.commit()
        return deleted

    def delete_read(self, user_id: int) -> int:
        m = self.model
        deleted = self._live(user_id).filter(m.is_read.is_(True)).delete(synchronize_session=False)
        self.db.commit()
        return deleted

    # --- Maintenance (all users) ---

    def purge_expired(self) -> int:
        m = self.model
        deleted = (
            self.db.query(m)
            .filter(m.expires_at.isnot(None), m.expires_at <= self.clock())
            .delete(synchronize_session=False)
        )
        self.db.commit()
        return deleted

    def purge_read_older_than(self, cutoff: datetime) -> int:
        m = self.model
        deleted = (
            self.db.query(m)
            .filter(m.is_read.is_(True), m.created_at < cutoff)
            .delete(synchronize_session=False)
        )
        self.db.commit()
        return deleted


def serialize_notification(row) -> dict[str, Any]:
    out = {
        "id": row.id,
        "type": row.type,
        "title": row.title,
        "message": row.message,
        "read": bool(row.is_read),
        "read_at": isoformat(row.read_at),
        "created_at": isoformat(row.created_at),
        "expires_at": isoformat(row.expires_at),
        "university_id": row.university_id,
        "data": row.data or {},
    }
    if isinstance(row, Notification):
        out["priority"] = row.priority
        out["application_id"] = row.application_id
    else:
        out["program_id"] = row.program_id
    return out
