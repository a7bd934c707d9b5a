"""
Deadline tracker: saved programs, the upcoming-deadline listing and alert preferences.

The listing uses the same day math as the daily sweep (deadline_evaluator) so the
"N days left" a user sees always matches the reminders they receive.
"""
import logging
from datetime import timedelta
from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from eduglobal.core.clock import Clock, as_utc, isoformat, utc_now
from eduglobal.core.errors import NotFound, ValidationFailed
from eduglobal.models.saved_program import SavedProgram
from eduglobal.models.university import Program, University
from eduglobal.models.user_profile import UserProfile
from eduglobal.services.deadline_evaluator import evaluate

logger = logging.getLogger(__name__)


def get_profile(db: Session, user_id: int) -> UserProfile | None:
    return db.query(UserProfile).filter(UserProfile.user_id == user_id).first()


def get_or_create_profile(db: Session, user_id: int) -> UserProfile:
    profile = get_profile(db, user_id)
    if profile is None:
        profile = UserProfile(user_id=user_id)
        db.add(profile)
        db.flush()
    return profile


def resolve_programs(
    db: Session, saved: list[SavedProgram]
) -> tuple[dict[int, University], dict[int, Program]]:
    """Load the universities and programs referenced by saved entries (two queries, not one per entry)."""
    uni_ids = {s.university_id for s in saved}
    program_ids = {s.program_id for s in saved}
    universities = {u.id: u for u in db.query(University).filter(University.id.in_(uni_ids)).all()} if uni_ids else {}
    programs = {p.id: p for p in db.query(Program).filter(Program.id.in_(program_ids)).all()} if program_ids else {}
    return universities, programs


def program_of(university: University | None, programs: dict[int, Program], program_id: int) -> Program | None:
    program = programs.get(program_id)
    if university is None or program is None or program.university_id != university.id:
        return None
    return program


def save_program(db: Session, user_id: int, university_id: int | None, program_id: int | None) -> dict[str, Any]:
    if not university_id or not program_id:
        raise ValidationFailed("University ID and Program ID are required")
    university = db.query(University).filter(University.id == university_id).first()
    if not university or not university.is_active:
        raise NotFound("University not found or inactive")
    program = (
        db.query(Program)
        .filter(Program.id == program_id, Program.university_id == university.id)
        .first()
    )
    if not program:
        raise NotFound("Program not found")

    get_or_create_profile(db, user_id)
    existing = (
        db.query(SavedProgram)
        .filter(
            SavedProgram.user_id == user_id,
            SavedProgram.university_id == university_id,
            SavedProgram.program_id == program_id,
        )
        .first()
    )
    if existing:
        raise ValidationFailed("Program already saved to deadline tracker")
    row = SavedProgram(user_id=user_id, university_id=university_id, program_id=program_id)
    db.add(row)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ValidationFailed("Program already saved to deadline tracker")
    db.refresh(row)
    return {
        "id": row.id,
        "university": {"name": university.name, "country": university.country},
        "program": {"name": program.name, "level": program.level},
    }


def remove_saved_program(db: Session, user_id: int, saved_program_id: int) -> None:
    if get_profile(db, user_id) is None:
        raise NotFound("User profile not found")
    row = (
        db.query(SavedProgram)
        .filter(SavedProgram.id == saved_program_id, SavedProgram.user_id == user_id)
        .first()
    )
    if not row:
        raise NotFound("Saved program not found")
    db.delete(row)
    db.commit()


def list_deadlines(
    db: Session,
    user_id: int,
    within_days: int | None = None,
    country: str | None = None,
    degree_level: str | None = None,
    clock: Clock = utc_now,
) -> list[dict[str, Any]]:
    """Saved programs with days left and urgency. Rolling programs last, then soonest deadline first."""
    saved = (
        db.query(SavedProgram)
        .filter(SavedProgram.user_id == user_id)
        .order_by(SavedProgram.saved_at.asc(), SavedProgram.id.asc())
        .all()
    )
    if not saved:
        return []
    universities, programs = resolve_programs(db, saved)
    now = clock()
    within = now + timedelta(days=within_days) if within_days is not None else None
    country = (country or "").strip().lower()
    degree_level = (degree_level or "").strip().lower()

    out = []
    for sp in saved:
        university = universities.get(sp.university_id)
        if university is None or not university.is_active:
            continue
        program = program_of(university, programs, sp.program_id)
        if program is None:
            continue
        if country and university.country.lower() != country:
            continue
        if degree_level and program.level.lower() != degree_level:
            continue
        deadline = as_utc(program.application_deadline)
        if within is not None and not program.rolling and deadline is not None and deadline > within:
            continue
        ev = evaluate(now, deadline, program.rolling, ())
        out.append({
            "id": sp.id,
            "university": {
                "id": university.id,
                "name": university.name,
                "country": university.country,
                "city": university.city,
                "logo_url": university.logo_url,
            },
            "program": {
                "id": program.id,
                "name": program.name,
                "level": program.level,
                "duration": program.duration,
                "application_deadline": isoformat(deadline),
                "rolling": program.rolling,
            },
            "daysLeft": ev.days_left,
            "status": ev.urgency,
            "savedAt": isoformat(sp.saved_at),
        })

    out.sort(key=lambda d: (
        1 if d["program"]["rolling"] else 0,
        1 if d["daysLeft"] is None else 0,
        d["daysLeft"] or 0,
    ))
    return out


def alert_preferences(db: Session, user_id: int) -> dict[str, Any]:
    profile = get_profile(db, user_id) or UserProfile(user_id=user_id, email_alerts=True, onsite_alerts=True, alert_days=None)
    return {
        "emailAlerts": profile.email_alerts,
        "onsiteAlerts": profile.onsite_alerts,
        "daysBefore": list(profile.alert_days),
    }


def update_alert_preferences(
    db: Session,
    user_id: int,
    email_alerts: bool | None = None,
    onsite_alerts: bool | None = None,
    days_before: list[int] | None = None,
) -> dict[str, Any]:
    profile = get_or_create_profile(db, user_id)
    if email_alerts is not None:
        profile.email_alerts = email_alerts
    if onsite_alerts is not None:
        profile.onsite_alerts = onsite_alerts
    if days_before is not None:
        try:
            profile.alert_days = days_before
        except ValueError as e:
            db.rollback()
            raise ValidationFailed(errors={"daysBefore": str(e)})
    db.commit()
    return alert_preferences(db, user_id)
