"""
Deadline math shared by the daily sweep and the deadline listing.

days_left = ceil((deadline - now) / 1 day), so a deadline exactly 7×24h away is 7 days left
and one that passed less than a day ago is still 0. An alert is due only when days_left is
exactly one of the user's trigger offsets; overdue (days_left < 0) is independent of offsets.
Rolling-admission programs have no countdown: days_left is None and nothing is ever due.
"""
import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable

from eduglobal.core.constants import URGENT_WITHIN_DAYS, WARNING_WITHIN_DAYS

ONE_DAY = timedelta(days=1)

EXPIRED = "expired"
URGENT = "urgent"
WARNING = "warning"
ACTIVE = "active"


@dataclass(frozen=True)
class DeadlineEvaluation:
    due: bool
    days_left: int | None
    urgency: str
    overdue: bool = False


def days_until(now: datetime, deadline: datetime) -> int:
    return math.ceil((deadline - now) / ONE_DAY)


def urgency_for(days_left: int | None) -> str:
    """Bucket for listings: expired < 0 <= urgent <= 7 < warning <= 30 < active."""
    if days_left is None:
        return ACTIVE
    if days_left < 0:
        return EXPIRED
    if days_left <= URGENT_WITHIN_DAYS:
        return URGENT
    if days_left <= WARNING_WITHIN_DAYS:
        return WARNING
    return ACTIVE


def evaluate(
    now: datetime,
    deadline: datetime | None,
    is_rolling: bool,
    trigger_offsets: Iterable[int],
) -> DeadlineEvaluation:
    if is_rolling or deadline is None:
        return DeadlineEvaluation(due=False, days_left=None, urgency=ACTIVE)
    days_left = days_until(now, deadline)
    return DeadlineEvaluation(
        due=days_left in set(trigger_offsets),
        days_left=days_left,
        urgency=urgency_for(days_left),
        overdue=days_left < 0,
    )
