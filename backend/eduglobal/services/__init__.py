from eduglobal.services.deadline_evaluator import DeadlineEvaluation, evaluate
from eduglobal.services.deadline_sweep import DeadlineSweepService, SweepResult
from eduglobal.services.notification_ledger import LedgerPage, NotificationLedger
from eduglobal.services.status_notifier import on_status_change

__all__ = [
    "DeadlineEvaluation",
    "DeadlineSweepService",
    "LedgerPage",
    "NotificationLedger",
    "SweepResult",
    "evaluate",
    "on_status_change",
]
