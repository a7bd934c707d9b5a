"""
Daily deadline sweep and weekly cleanup.

run_sweep: for every user with saved programs, evaluate each program's deadline and append at
most one ledger entry per distinct alert:
  - deadline_alert   when days_left is exactly one of the user's trigger offsets
                     (one per (university, program, days_left))
  - deadline_overdue when days_left < 0 (one per (university, program))
Users with on-site alerts off are skipped; saved programs whose university or program no longer
exists are skipped with a log line. Each user is processed in its own session and written in one
batch insert, so write volume is O(users). A failure for one user is logged and counted; the sweep
always runs to completion. Transient DB errors (OperationalError) are retried per user with
exponential backoff.

Idempotence: the in-memory check against the user's existing dedupe keys plus the
(user_id, dedupe_key) unique index mean re-running the sweep creates nothing new.

cleanup: delete deadline entries that are read and older than the retention window, and purge
expired status notifications.
"""
import logging
import time
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Callable

from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from eduglobal.core.clock import Clock, as_utc, utc_now
from eduglobal.core.constants import (
    CATEGORY_DEADLINE,
    CATEGORY_STATUS,
    DEADLINE_ALERT,
    DEADLINE_OVERDUE,
    DEFAULT_ALERT_DAYS,
)
from eduglobal.models.deadline_notification import alert_dedupe_key, overdue_dedupe_key
from eduglobal.models.saved_program import SavedProgram
from eduglobal.models.university import Program, University
from eduglobal.models.user_profile import UserProfile
from eduglobal.services.deadline_evaluator import evaluate
from eduglobal.services.deadline_service import program_of, resolve_programs
from eduglobal.services.notification_ledger import NotificationLedger

logger = logging.getLogger(__name__)

ALERT_TITLE = "Application Deadline Reminder"
OVERDUE_TITLE = "Application Deadline Passed"


@dataclass
class SweepResult:
    users: int = 0
    skipped: int = 0
    failed: int = 0
    created: int = 0


@dataclass
class CleanupResult:
    deadline_removed: int = 0
    expired_removed: int = 0


def alert_message(days_left: int, program_name: str, university_name: str) -> str:
    plural = "" if days_left == 1 else "s"
    return f"{days_left} day{plural} left to apply for {program_name} at {university_name}"


def overdue_message(program_name: str, university_name: str) -> str:
    return f"The application deadline for {program_name} at {university_name} has passed"


def _row(user_id: int, kind: str, title: str, message: str, university: University, program: Program,
         deadline: datetime, dedupe_key: str, now: datetime, extra: dict[str, Any]) -> dict[str, Any]:
    return {
        "user_id": user_id,
        "type": kind,
        "title": title,
        "message": message,
        "university_id": university.id,
        "program_id": program.id,
        "data": {
            "universityId": university.id,
            "programId": program.id,
            "universityName": university.name,
            "programName": program.name,
            "deadline": deadline.isoformat(),
            **extra,
        },
        "is_read": False,
        "dedupe_key": dedupe_key,
        "created_at": now,
    }


class DeadlineSweepService:
    def __init__(
        self,
        session_factory: Callable[[], Session],
        clock: Clock = utc_now,
        max_attempts: int = 1,
        backoff_seconds: float = 0.5,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.session_factory = session_factory
        self.clock = clock
        self.max_attempts = max(1, max_attempts)
        self.backoff_seconds = backoff_seconds
        self.sleep = sleep

    # --- Sweep ---

    def run_sweep(self) -> SweepResult:
        now = self.clock()
        result = SweepResult()
        db = self.session_factory()
        try:
            user_ids = [uid for (uid,) in db.query(SavedProgram.user_id).distinct().order_by(SavedProgram.user_id).all()]
        finally:
            db.close()

        for user_id in user_ids:
            result.users += 1
            try:
                created = self._sweep_user_with_retry(user_id, now)
            except Exception as e:
                result.failed += 1
                logger.exception("Deadline sweep failed for user %s: %s", user_id, e)
                continue
            if created is None:
                result.skipped += 1
            else:
                result.created += created

        logger.info(
            "Deadline sweep done: users=%s skipped=%s failed=%s created=%s",
            result.users, result.skipped, result.failed, result.created,
        )
        return result

    def _sweep_user_with_retry(self, user_id: int, now: datetime) -> int | None:
        attempt = 1
        while True:
            try:
                return self.sweep_user(user_id, now)
            except OperationalError as e:
                if attempt >= self.max_attempts:
                    raise
                delay = self.backoff_seconds * (2 ** (attempt - 1))
                logger.warning(
                    "Deadline sweep for user %s hit a database error (attempt %s/%s), retrying in %.1fs: %s",
                    user_id, attempt, self.max_attempts, delay, e,
                )
                self.sleep(delay)
                attempt += 1

    def sweep_user(self, user_id: int, now: datetime) -> int | None:
        """Process one user's saved programs. Returns entries created, or None when alerts are off."""
        db = self.session_factory()
        try:
            profile = db.query(UserProfile).filter(UserProfile.user_id == user_id).first()
            if profile is not None and not profile.onsite_alerts:
                return None
            offsets = profile.trigger_offsets() if profile is not None else frozenset(DEFAULT_ALERT_DAYS)

            saved = (
                db.query(SavedProgram)
                .filter(SavedProgram.user_id == user_id)
                .order_by(SavedProgram.id.asc())
                .all()
            )
            universities, programs = resolve_programs(db, saved)
            ledger = NotificationLedger(db, CATEGORY_DEADLINE, clock=self.clock)
            seen = ledger.existing_dedupe_keys(user_id)
            pending: list[dict[str, Any]] = []

            for sp in saved:
                university = universities.get(sp.university_id)
                program = program_of(university, programs, sp.program_id)
                if program is None:
                    logger.info(
                        "Deadline sweep: user %s saved program %s/%s no longer exists; skipping",
                        user_id, sp.university_id, sp.program_id,
                    )
                    continue
                if program.rolling:
                    continue
                deadline = as_utc(program.application_deadline)
                ev = evaluate(now, deadline, program.rolling, offsets)
                if ev.days_left is None:
                    continue

                if ev.due:
                    key = alert_dedupe_key(university.id, program.id, ev.days_left)
                    if key not in seen:
                        seen.add(key)
                        pending.append(_row(
                            user_id, DEADLINE_ALERT, ALERT_TITLE,
                            alert_message(ev.days_left, program.name, university.name),
                            university, program, deadline, key, now, {"daysLeft": ev.days_left},
                        ))

                if ev.overdue:
                    key = overdue_dedupe_key(university.id, program.id)
                    if key not in seen:
                        seen.add(key)
                        pending.append(_row(
                            user_id, DEADLINE_OVERDUE, OVERDUE_TITLE,
                            overdue_message(program.name, university.name),
                            university, program, deadline, key, now, {"daysOverdue": abs(ev.days_left)},
                        ))

            created = ledger.insert_if_absent(pending)
            db.commit()
            if created:
                logger.debug("Deadline sweep: %s new notifications for user %s", created, user_id)
            return created
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    # --- Expiry and weekly cleanup ---

    def purge_expired(self) -> int:
        """Physically remove status notifications past their expires_at (reads already hide them)."""
        db = self.session_factory()
        try:
            removed = NotificationLedger(db, CATEGORY_STATUS, clock=self.clock).purge_expired()
        finally:
            db.close()
        if removed:
            logger.info("Purged %s expired notifications", removed)
        return removed

    def cleanup(self, retention_days: int = 30) -> CleanupResult:
        cutoff = self.clock() - timedelta(days=retention_days)
        db = self.session_factory()
        try:
            result = CleanupResult(
                deadline_removed=NotificationLedger(db, CATEGORY_DEADLINE, clock=self.clock).purge_read_older_than(cutoff),
                expired_removed=NotificationLedger(db, CATEGORY_STATUS, clock=self.clock).purge_expired(),
            )
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()
        logger.info(
            "Deadline cleanup done: read deadline notifications removed=%s, expired notifications removed=%s",
            result.deadline_removed, result.expired_removed,
        )
        return result
