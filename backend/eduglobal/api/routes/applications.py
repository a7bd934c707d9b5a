"""
Applications API: student submissions, owner edits and withdrawal, and the admin status update
that drives status-change notifications.
"""
import logging
import math
from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from eduglobal.core.constants import APPLICATION_STATUSES, MAX_PAGE_LIMIT
from eduglobal.core.errors import ValidationFailed
from eduglobal.core.security import get_current_user, require_admin
from eduglobal.db.session import get_db
from eduglobal.models.university import University
from eduglobal.models.user import User
from eduglobal.services import application_service

router = APIRouter()
logger = logging.getLogger(__name__)


class ApplicationCreate(BaseModel):
    university_id: int
    semester: str
    academic_year: str
    subject: str = Field(..., min_length=1, max_length=255)
    preferred_start_date: datetime
    applying_for_scholarship: bool = False
    scholarship_type: str | None = None
    personal_statement: str
    details: dict[str, Any] = Field(default_factory=dict, description="gpa, testScores, documents, workExperience")


class ApplicationUpdate(BaseModel):
    semester: str | None = None
    academic_year: str | None = None
    subject: str | None = Field(None, min_length=1, max_length=255)
    preferred_start_date: datetime | None = None
    applying_for_scholarship: bool | None = None
    scholarship_type: str | None = None
    personal_statement: str | None = None
    details: dict[str, Any] | None = None


class StatusUpdate(BaseModel):
    status: str
    note: str | None = Field(None, max_length=500)


def _university(db: Session, university_id: int) -> University | None:
    return db.query(University).filter(University.id == university_id).first()


@router.post("/applications", status_code=201)
def submit_application(
    body: ApplicationCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    application = application_service.submit_application(db, user.id, body.model_dump())
    history = application_service.status_history(db, application.id)
    return {
        "success": True,
        "message": "Application submitted successfully",
        "application": application_service.serialize_application(
            application, history, _university(db, application.university_id)
        ),
    }


@router.get("/applications")
def list_applications(
    status: str | None = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=MAX_PAGE_LIMIT),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    if status and status not in APPLICATION_STATUSES:
        raise ValidationFailed(errors={"status": f"must be one of {', '.join(APPLICATION_STATUSES)}"})
    rows, total = application_service.list_applications(db, user.id, status=status, page=page, limit=limit)
    return {
        "success": True,
        "applications": [application_service.serialize_application(a) for a in rows],
        "totalPages": math.ceil(total / limit),
        "currentPage": page,
        "total": total,
    }


@router.get("/applications/university/{university_id}/check")
def check_active_application(
    university_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    application = application_service.active_application_for(db, user.id, university_id)
    return {
        "success": True,
        "hasActiveApplication": application is not None,
        "application": application_service.serialize_application(application) if application else None,
    }


@router.get("/applications/{application_id}")
def get_application(
    application_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    application = application_service.get_owned_application(db, user.id, application_id)
    history = application_service.status_history(db, application.id)
    return {
        "success": True,
        "application": application_service.serialize_application(
            application, history, _university(db, application.university_id)
        ),
    }


@router.get("/applications/{application_id}/progress")
def get_application_progress(
    application_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    application = application_service.get_owned_application(db, user.id, application_id)
    history = application_service.status_history(db, application.id)
    return {
        "success": True,
        "progress": {
            "currentStatus": application.status,
            "percentage": application_service.progress_percentage(application.status),
            "statusHistory": application_service.serialize_application(application, history)["status_history"],
        },
    }


@router.put("/applications/{application_id}")
def update_application(
    application_id: int,
    body: ApplicationUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    changes = body.model_dump(exclude_unset=True)
    application = application_service.update_application(db, user.id, application_id, changes)
    return {
        "success": True,
        "message": "Application updated successfully",
        "application": application_service.serialize_application(application),
    }


@router.delete("/applications/{application_id}")
def withdraw_application(
    application_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    application_service.withdraw_application(db, user.id, application_id)
    return {"success": True, "message": "Application withdrawn successfully"}


@router.put("/applications/admin/{application_id}/status")
def update_application_status(
    application_id: int,
    body: StatusUpdate,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
) -> dict[str, Any]:
    application = application_service.update_status(
        db, application_id, body.status, note=body.note, actor_id=admin.id
    )
    history = application_service.status_history(db, application.id)
    return {
        "success": True,
        "message": "Application status updated successfully",
        "application": application_service.serialize_application(application, history),
    }
