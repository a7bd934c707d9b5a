"""
Status-change notifier: turns an application status transition into a ledger entry.

Fires only for a real change (new != old) on an application that already existed; the
initial submission never notifies. Failures are logged and swallowed so a notification
problem can never fail the status update that triggered it.
"""
import logging
from dataclasses import dataclass
from datetime import timedelta

from sqlalchemy.orm import Session

from eduglobal.config import settings
from eduglobal.core.clock import Clock, utc_now
from eduglobal.core.constants import CATEGORY_STATUS
from eduglobal.models.application import Application
from eduglobal.models.notification import Notification
from eduglobal.models.university import University
from eduglobal.services.notification_ledger import NotificationLedger

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StatusTemplate:
    title: str
    message: str
    type: str
    priority: str


STATUS_TEMPLATES: dict[str, StatusTemplate] = {
    "pending": StatusTemplate(
        "Application Submitted", "Your application is being reviewed", "application_status_update", "medium"
    ),
    "under_review": StatusTemplate(
        "Application Under Review",
        "Your application is currently under review by the admissions committee",
        "application_status_update",
        "medium",
    ),
    "interview_scheduled": StatusTemplate(
        "Interview Scheduled", "An interview has been scheduled for your application", "interview_scheduled", "high"
    ),
    "final_review": StatusTemplate(
        "Final Review Stage", "Your application is in the final review stage", "application_status_update", "medium"
    ),
    "accepted": StatusTemplate(
        "Application Accepted! 🎉", "Congratulations! Your application has been accepted", "acceptance", "high"
    ),
    "declined": StatusTemplate(
        "Application Decision", "Your application status has been updated", "rejection", "high"
    ),
    "waitlisted": StatusTemplate("Waitlisted", "You have been placed on the waitlist", "waitlist", "medium"),
}

FALLBACK_TEMPLATE = StatusTemplate(
    "Application Update", "Your application status has been updated", "application_status_update", "medium"
)


def template_for(status: str) -> StatusTemplate:
    return STATUS_TEMPLATES.get(status, FALLBACK_TEMPLATE)


def build_message(template: StatusTemplate, note: str | None) -> str:
    note = (note or "").strip()
    if note:
        return f"{template.message}. Note: {note}"
    return template.message


def on_status_change(
    db: Session,
    application: Application,
    old_status: str | None,
    new_status: str,
    note: str | None = None,
    *,
    is_new: bool = False,
    clock: Clock = utc_now,
    ttl_days: int | None = None,
) -> Notification | None:
    """Create the status notification for this transition. Returns None when nothing fired or creation failed."""
    if is_new or new_status == old_status:
        return None
    ttl_days = settings.status_notification_ttl_days if ttl_days is None else ttl_days
    try:
        template = template_for(new_status)
        university = db.query(University).filter(University.id == application.university_id).first()
        now = clock()
        row = NotificationLedger(db, CATEGORY_STATUS, clock=clock).create(
            user_id=application.user_id,
            type=template.type,
            title=template.title,
            message=build_message(template, note),
            priority=template.priority,
            application_id=application.id,
            university_id=application.university_id,
            data={
                "oldStatus": old_status,
                "newStatus": new_status,
                "universityName": university.name if university else None,
                "subject": application.subject,
                "note": note,
            },
            created_at=now,
            expires_at=now + timedelta(days=ttl_days),
        )
        logger.info(
            "Status notification %s for application %s (%s -> %s)",
            row.id, application.id, old_status, new_status,
        )
        return row
    except Exception as e:
        logger.exception("Failed to create status notification for application %s: %s", application.id, e)
        db.rollback()
        return None
