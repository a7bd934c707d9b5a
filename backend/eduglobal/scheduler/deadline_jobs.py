"""
Daily deadline sweep (09:00) and weekly cleanup (Sunday 02:00) in the configured timezone.

Each job builds its service with the process-wide SessionLocal and the wall clock; errors are
logged here so a failing run never kills the scheduler thread.
"""
import logging

from eduglobal.config import settings
from eduglobal.core.constants import DEADLINE_CLEANUP_JOB_ID, DEADLINE_SWEEP_JOB_ID
from eduglobal.db.session import SessionLocal
from eduglobal.scheduler.recurring import RecurringTask
from eduglobal.services.deadline_sweep import CleanupResult, DeadlineSweepService, SweepResult

logger = logging.getLogger(__name__)


def build_sweep_service() -> DeadlineSweepService:
    return DeadlineSweepService(
        SessionLocal,
        max_attempts=settings.sweep_max_attempts,
        backoff_seconds=settings.sweep_retry_backoff_seconds,
    )


def run_deadline_sweep_job() -> SweepResult | None:
    service = build_sweep_service()
    try:
        result = service.run_sweep()
        service.purge_expired()
        return result
    except Exception as e:
        logger.exception("Deadline sweep job failed: %s", e)
        return None


def run_deadline_cleanup_job() -> CleanupResult | None:
    try:
        return build_sweep_service().cleanup(settings.deadline_notification_retention_days)
    except Exception as e:
        logger.exception("Deadline cleanup job failed: %s", e)
        return None


def deadline_tasks() -> list[RecurringTask]:
    return [
        RecurringTask(
            id=DEADLINE_SWEEP_JOB_ID,
            func=run_deadline_sweep_job,
            schedule={"hour": settings.deadline_sweep_hour, "minute": settings.deadline_sweep_minute},
            timezone=settings.scheduler_timezone,
        ),
        RecurringTask(
            id=DEADLINE_CLEANUP_JOB_ID,
            func=run_deadline_cleanup_job,
            schedule={
                "day_of_week": settings.deadline_cleanup_day_of_week,
                "hour": settings.deadline_cleanup_hour,
                "minute": 0,
            },
            timezone=settings.scheduler_timezone,
        ),
    ]
