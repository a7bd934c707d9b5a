"""
Deadline tracker API: saved programs, upcoming deadlines, deadline reminders and alert preferences.
"""
import logging
from typing import Any

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from eduglobal.core.constants import CATEGORY_DEADLINE
from eduglobal.core.errors import NotFound
from eduglobal.core.security import get_current_user
from eduglobal.db.session import get_db
from eduglobal.models.user import User
from eduglobal.services import deadline_service
from eduglobal.services.notification_ledger import NotificationLedger, serialize_notification

router = APIRouter()
logger = logging.getLogger(__name__)


class SaveProgramRequest(BaseModel):
    universityId: int | None = Field(None, description="University id")
    programId: int | None = Field(None, description="Program id (must belong to the university)")


class AlertPreferencesRequest(BaseModel):
    emailAlerts: bool | None = None
    onsiteAlerts: bool | None = None
    daysBefore: list[int] | None = Field(None, description="Days before a deadline to send a reminder")


@router.get("/deadlines")
def list_deadlines(
    withinDays: int | None = Query(None, ge=0, description="Only deadlines within this many days"),
    country: str | None = Query(None),
    degreeLevel: str | None = Query(None),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    data = deadline_service.list_deadlines(
        db, user.id, within_days=withinDays, country=country, degree_level=degreeLevel
    )
    return {"success": True, "data": data, "count": len(data)}


@router.post("/deadlines/save", status_code=201)
def save_program(
    body: SaveProgramRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    saved = deadline_service.save_program(db, user.id, body.universityId, body.programId)
    logger.info("User %s saved program %s/%s to deadline tracker", user.id, body.universityId, body.programId)
    return {"success": True, "message": "Program saved to deadline tracker", "data": saved}


@router.delete("/deadlines/remove/{saved_program_id}")
def remove_saved_program(
    saved_program_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    deadline_service.remove_saved_program(db, user.id, saved_program_id)
    return {"success": True, "message": "Program removed from deadline tracker"}


@router.get("/deadlines/notifications")
def unread_deadline_notifications(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    rows = NotificationLedger(db, CATEGORY_DEADLINE).list_unread(user.id)
    return {"success": True, "data": [serialize_notification(r) for r in rows], "count": len(rows)}


@router.put("/deadlines/notifications/{notification_id}/read")
def mark_deadline_notification_read(
    notification_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    if NotificationLedger(db, CATEGORY_DEADLINE).mark_one_read(user.id, notification_id) is None:
        raise NotFound("Notification not found")
    return {"success": True, "message": "Notification marked as read"}


@router.get("/deadlines/preferences")
def get_alert_preferences(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    return {"success": True, "data": deadline_service.alert_preferences(db, user.id)}


@router.put("/deadlines/preferences")
def update_alert_preferences(
    body: AlertPreferencesRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    data = deadline_service.update_alert_preferences(
        db,
        user.id,
        email_alerts=body.emailAlerts,
        onsite_alerts=body.onsiteAlerts,
        days_before=body.daysBefore,
    )
    return {"success": True, "message": "Alert preferences updated", "data": data}
