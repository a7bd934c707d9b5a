"""
Recurring tasks: what runs, when, and in which timezone, kept apart from the business logic.

A RecurringTask is just (id, function, trigger fields). register_tasks adds them to an APScheduler
instance; tests call the task function directly instead of waiting for the timer.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable

from apscheduler.schedulers.base import BaseScheduler

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RecurringTask:
    id: str
    func: Callable[[], Any]
    trigger: str = "cron"  # "cron" | "interval"
    schedule: dict[str, Any] = field(default_factory=dict)  # e.g. {"hour": 9, "minute": 0}
    timezone: str | None = None

    def trigger_kwargs(self) -> dict[str, Any]:
        kwargs = dict(self.schedule)
        if self.timezone and self.trigger == "cron":
            kwargs["timezone"] = self.timezone
        return kwargs


def register_tasks(scheduler: BaseScheduler, tasks: Iterable[RecurringTask]) -> list[str]:
    ids = []
    for task in tasks:
        scheduler.add_job(
            task.func,
            task.trigger,
            id=task.id,
            replace_existing=True,
            coalesce=True,  # a missed run fires once, not once per missed slot
            max_instances=1,
            misfire_grace_time=3600,
            **task.trigger_kwargs(),
        )
        ids.append(task.id)
        logger.info("Scheduled %s (%s %s, tz=%s)", task.id, task.trigger, task.schedule, task.timezone)
    return ids
