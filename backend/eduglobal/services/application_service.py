"""
Applications: submission, owner edits, withdrawal and admin status transitions.

Status rule: accepted/declined are terminal; from any open status the admissions team may move
to any other status except back to pending. Every transition appends a history row and, after
the status commit, hands off to the status-change notifier.
"""
import logging
from typing import Any, Callable

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from eduglobal.core.clock import Clock, as_utc, isoformat, utc_now
from eduglobal.core.constants import (
    APPLICATION_PROGRESS_STAGES,
    APPLICATION_STATUSES,
    INITIAL_APPLICATION_STATUS,
    TERMINAL_APPLICATION_STATUSES,
)
from eduglobal.core.errors import NotFound, ValidationFailed
from eduglobal.models.application import Application, ApplicationStatusHistory
from eduglobal.models.university import University
from eduglobal.services.status_notifier import on_status_change

logger = logging.getLogger(__name__)

MSG_ACTIVE_EXISTS = "You already have an active application for this university"
EDITABLE_FIELDS = (
    "semester",
    "academic_year",
    "subject",
    "preferred_start_date",
    "applying_for_scholarship",
    "scholarship_type",
    "personal_statement",
    "details",
)


def can_transition(old_status: str, new_status: str) -> bool:
    if old_status in TERMINAL_APPLICATION_STATUSES:
        return False
    return new_status in APPLICATION_STATUSES and new_status not in (old_status, INITIAL_APPLICATION_STATUS)


def progress_percentage(status: str) -> float:
    if status not in APPLICATION_PROGRESS_STAGES:
        return 0.0
    return (APPLICATION_PROGRESS_STAGES.index(status) + 1) / len(APPLICATION_PROGRESS_STAGES) * 100


def _open_application(db: Session, user_id: int, university_id: int) -> Application | None:
    return (
        db.query(Application)
        .filter(
            Application.user_id == user_id,
            Application.university_id == university_id,
            Application.status.notin_(sorted(TERMINAL_APPLICATION_STATUSES)),
        )
        .first()
    )


def submit_application(db: Session, user_id: int, fields: dict[str, Any], clock: Clock = utc_now) -> Application:
    university_id = fields.get("university_id")
    university = db.query(University).filter(University.id == university_id).first()
    if not university:
        raise NotFound("University not found")
    if _open_application(db, user_id, university_id):
        raise ValidationFailed(MSG_ACTIVE_EXISTS)
    values = {k: v for k, v in fields.items() if k in EDITABLE_FIELDS}
    if not values.get("applying_for_scholarship"):
        values.pop("scholarship_type", None)
    now = clock()
    try:
        application = Application(
            user_id=user_id,
            university_id=university_id,
            status=INITIAL_APPLICATION_STATUS,
            created_at=now,
            updated_at=now,
            **values,
        )
    except ValueError as e:
        raise ValidationFailed(str(e))
    db.add(application)
    try:
        db.flush()
    except IntegrityError:
        # Another request opened an application for the same pair first.
        db.rollback()
        raise ValidationFailed(MSG_ACTIVE_EXISTS)
    db.add(ApplicationStatusHistory(
        application_id=application.id,
        status=application.status,
        changed_at=now,
        note="Application submitted",
    ))
    db.commit()
    db.refresh(application)
    logger.info("Application %s submitted by user %s for university %s", application.id, user_id, university_id)
    return application


def list_applications(
    db: Session, user_id: int, status: str | None = None, page: int = 1, limit: int = 10
) -> tuple[list[Application], int]:
    q = db.query(Application).filter(Application.user_id == user_id)
    if status:
        q = q.filter(Application.status == status)
    total = q.count()
    rows = q.order_by(Application.created_at.desc(), Application.id.desc()).offset((page - 1) * limit).limit(limit).all()
    return rows, total


def get_owned_application(db: Session, user_id: int, application_id: int) -> Application:
    row = (
        db.query(Application)
        .filter(Application.id == application_id, Application.user_id == user_id)
        .first()
    )
    if not row:
        raise NotFound("Application not found")
    return row


def status_history(db: Session, application_id: int) -> list[ApplicationStatusHistory]:
    return (
        db.query(ApplicationStatusHistory)
        .filter(ApplicationStatusHistory.application_id == application_id)
        .order_by(ApplicationStatusHistory.changed_at.asc(), ApplicationStatusHistory.id.asc())
        .all()
    )


def update_application(db: Session, user_id: int, application_id: int, changes: dict[str, Any]) -> Application:
    """Owner edits, only while the application is still pending."""
    application = get_owned_application(db, user_id, application_id)
    if application.status != INITIAL_APPLICATION_STATUS:
        raise ValidationFailed("Cannot update application that is already under review")
    try:
        for key, value in changes.items():
            if key in EDITABLE_FIELDS and value is not None:
                setattr(application, key, value)
    except ValueError as e:
        db.rollback()
        raise ValidationFailed(str(e))
    db.commit()
    db.refresh(application)
    return application


def withdraw_application(db: Session, user_id: int, application_id: int) -> None:
    application = get_owned_application(db, user_id, application_id)
    if application.is_terminal:
        raise ValidationFailed("Cannot withdraw application that has already been decided")
    db.query(ApplicationStatusHistory).filter(
        ApplicationStatusHistory.application_id == application.id
    ).delete(synchronize_session=False)
    db.delete(application)
    db.commit()
    logger.info("Application %s withdrawn by user %s", application_id, user_id)


def active_application_for(db: Session, user_id: int, university_id: int) -> Application | None:
    return _open_application(db, user_id, university_id)


def update_status(
    db: Session,
    application_id: int,
    new_status: str,
    note: str | None = None,
    actor_id: int | None = None,
    clock: Clock = utc_now,
    notifier: Callable[..., Any] = on_status_change,
) -> Application:
    application = db.query(Application).filter(Application.id == application_id).first()
    if not application:
        raise NotFound("Application not found")
    if new_status not in APPLICATION_STATUSES:
        raise ValidationFailed(errors={"status": f"must be one of {', '.join(APPLICATION_STATUSES)}"})
    old_status = application.status
    if application.is_terminal:
        raise ValidationFailed("Cannot change the status of an application that has already been decided")
    changed = new_status != old_status
    if changed and not can_transition(old_status, new_status):
        raise ValidationFailed(f"Cannot move application from {old_status} to {new_status}")
    if not changed and not note:
        return application

    # History stays non-decreasing in time even if the clock steps back.
    history = status_history(db, application.id)
    now = clock()
    last_at = as_utc(history[-1].changed_at) if history else None
    changed_at = max(now, last_at) if last_at else now

    application.status = new_status
    application.updated_at = now
    db.add(ApplicationStatusHistory(
        application_id=application.id,
        status=new_status,
        changed_at=changed_at,
        note=note,
        updated_by=actor_id,
    ))
    db.commit()
    db.refresh(application)
    logger.info("Application %s status %s -> %s by %s", application.id, old_status, new_status, actor_id)

    if changed:
        notifier(db, application, old_status, new_status, note, clock=clock)
    return application


def serialize_application(
    application: Application,
    history: list[ApplicationStatusHistory] | None = None,
    university: University | None = None,
) -> dict[str, Any]:
    out = {
        "id": application.id,
        "user_id": application.user_id,
        "university_id": application.university_id,
        "semester": application.semester,
        "academic_year": application.academic_year,
        "subject": application.subject,
        "preferred_start_date": isoformat(application.preferred_start_date),
        "applying_for_scholarship": application.applying_for_scholarship,
        "scholarship_type": application.scholarship_type,
        "personal_statement": application.personal_statement,
        "status": application.status,
        "details": application.details or {},
        "progress": progress_percentage(application.status),
        "created_at": isoformat(application.created_at),
        "updated_at": isoformat(application.updated_at),
    }
    if history is not None:
        out["status_history"] = [
            {
                "status": h.status,
                "date": isoformat(h.changed_at),
                "note": h.note,
                "updated_by": h.updated_by,
            }
            for h in history
        ]
    if university is not None:
        out["university"] = {
            "id": university.id,
            "name": university.name,
            "country": university.country,
            "city": university.city,
            "logo_url": university.logo_url,
        }
    return out
