"""
Notifications API: the caller's global notification ledger (application-status events).

List with paging/filters, unread count, stats, mark read (one / many / all), delete (one / many / all read),
and a development-only test notification. Expired rows never appear in any response.
"""
import logging
from datetime import timedelta
from typing import Any

from fastapi import APIRouter, Body, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from eduglobal.config import settings
from eduglobal.core.constants import CATEGORY_STATUS, DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT, NOTIFICATION_TYPES
from eduglobal.core.errors import Forbidden, NotFound, ValidationFailed
from eduglobal.core.security import get_current_user
from eduglobal.db.session import get_db
from eduglobal.models.user import User
from eduglobal.services.notification_ledger import NotificationLedger, serialize_notification

router = APIRouter()
logger = logging.getLogger(__name__)


def _ledger(db: Session = Depends(get_db)) -> NotificationLedger:
    return NotificationLedger(db, CATEGORY_STATUS)


def _notification_ids(body: dict[str, Any] | None) -> list[int]:
    ids = (body or {}).get("notificationIds")
    if not isinstance(ids, list):
        raise ValidationFailed("Invalid notification IDs", errors={"notificationIds": "must be a list"})
    try:
        return [int(i) for i in ids]
    except (TypeError, ValueError):
        raise ValidationFailed("Invalid notification IDs", errors={"notificationIds": "must contain ids"})


# --- List ---


@router.get("/notifications")
def list_notifications(
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_LIMIT, ge=1, le=MAX_PAGE_LIMIT),
    type: str | None = Query(None),
    read: bool | None = Query(None),
    user: User = Depends(get_current_user),
    ledger: NotificationLedger = Depends(_ledger),
) -> dict[str, Any]:
    """Newest first; skip = (page-1)*limit."""
    if type and type not in NOTIFICATION_TYPES:
        raise ValidationFailed(errors={"type": f"must be one of {', '.join(NOTIFICATION_TYPES)}"})
    result = ledger.list(user.id, page=page, limit=limit, type=type, read=read)
    return {
        "success": True,
        "notifications": [serialize_notification(r) for r in result.items],
        "totalPages": result.total_pages,
        "currentPage": result.page,
        "total": result.total,
    }


@router.get("/notifications/unread-count")
def unread_count(
    user: User = Depends(get_current_user),
    ledger: NotificationLedger = Depends(_ledger),
) -> dict[str, Any]:
    return {"success": True, "unreadCount": ledger.unread_count(user.id)}


@router.get("/notifications/stats")
def notification_stats(
    user: User = Depends(get_current_user),
    ledger: NotificationLedger = Depends(_ledger),
) -> dict[str, Any]:
    return {"success": True, "stats": ledger.stats(user.id)}


# --- Mark read ---


@router.patch("/notifications/mark-all-read")
def mark_all_read(
    user: User = Depends(get_current_user),
    ledger: NotificationLedger = Depends(_ledger),
) -> dict[str, Any]:
    updated = ledger.mark_read(user.id)
    return {"success": True, "message": "All notifications marked as read", "modifiedCount": updated}


@router.patch("/notifications/mark-read")
def mark_many_read(
    body: dict[str, Any] | None = Body(None),
    user: User = Depends(get_current_user),
    ledger: NotificationLedger = Depends(_ledger),
) -> dict[str, Any]:
    updated = ledger.mark_read(user.id, _notification_ids(body))
    return {"success": True, "message": "Notifications marked as read", "modifiedCount": updated}


@router.patch("/notifications/{notification_id}/read")
def mark_notification_read(
    notification_id: int,
    user: User = Depends(get_current_user),
    ledger: NotificationLedger = Depends(_ledger),
) -> dict[str, Any]:
    row = ledger.mark_one_read(user.id, notification_id)
    if row is None:
        raise NotFound("Notification not found")
    return {"success": True, "message": "Notification marked as read", "notification": serialize_notification(row)}


# --- Delete (register /read before /{notification_id}) ---


@router.delete("/notifications/read")
def delete_read_notifications(
    user: User = Depends(get_current_user),
    ledger: NotificationLedger = Depends(_ledger),
) -> dict[str, Any]:
    deleted = ledger.delete_read(user.id)
    return {"success": True, "message": "Read notifications deleted successfully", "deletedCount": deleted}


@router.delete("/notifications/{notification_id}")
def delete_notification(
    notification_id: int,
    user: User = Depends(get_current_user),
    ledger: NotificationLedger = Depends(_ledger),
) -> dict[str, Any]:
    if not ledger.delete(user.id, [notification_id]):
        raise NotFound("Notification not found")
    return {"success": True, "message": "Notification deleted successfully"}


@router.delete("/notifications")
def delete_notifications(
    body: dict[str, Any] | None = Body(None),
    user: User = Depends(get_current_user),
    ledger: NotificationLedger = Depends(_ledger),
) -> dict[str, Any]:
    deleted = ledger.delete(user.id, _notification_ids(body))
    return {"success": True, "message": "Notifications deleted successfully", "deletedCount": deleted}


# --- Test notification (development only) ---


class TestNotificationRequest(BaseModel):
    type: str = Field("application_status_update", description="Notification type")
    title: str | None = Field(None, max_length=200)
    message: str | None = Field(None, max_length=500)


@router.post("/notifications/test")
def create_test_notification(
    body: TestNotificationRequest | None = None,
    user: User = Depends(get_current_user),
    ledger: NotificationLedger = Depends(_ledger),
) -> dict[str, Any]:
    if settings.is_production:
        raise Forbidden("Not allowed in production")
    body = body or TestNotificationRequest()
    if body.type not in NOTIFICATION_TYPES:
        raise ValidationFailed(errors={"type": f"must be one of {', '.join(NOTIFICATION_TYPES)}"})
    now = ledger.clock()
    row = ledger.create(
        user_id=user.id,
        type=body.type,
        title=body.title or "Test Notification",
        message=body.message or "This is a test notification",
        priority="medium",
        data={"test": True},
        created_at=now,
        expires_at=now + timedelta(hours=settings.test_notification_ttl_hours),
    )
    logger.info("Test notification %s created for user %s", row.id, user.id)
    return {"success": True, "message": "Test notification created", "notification": serialize_notification(row)}
