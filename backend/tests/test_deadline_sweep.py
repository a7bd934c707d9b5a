from datetime import timedelta

import pytest
from sqlalchemy.exc import OperationalError

from eduglobal.models import DeadlineNotification, Notification, SavedProgram, UserProfile
from eduglobal.services.deadline_sweep import DeadlineSweepService


@pytest.fixture
def save(db):
    def _save(user, program):
        db.add(SavedProgram(user_id=user.id, university_id=program.university_id, program_id=program.id))
        db.commit()

    return _save


def _sweep(session_factory, at, **kwargs):
    return DeadlineSweepService(session_factory, clock=lambda: at, **kwargs)


def _entries(db, user_id=None):
    db.expire_all()
    q = db.query(DeadlineNotification)
    if user_id is not None:
        q = q.filter(DeadlineNotification.user_id == user_id)
    return q.order_by(DeadlineNotification.id).all()


def test_seven_day_alert_then_single_overdue(db, session_factory, now, make_user, make_university, make_program, save):
    user = make_user()
    uni = make_university()
    program = make_program(uni, deadline=now + timedelta(days=7))
    save(user, program)

    first = _sweep(session_factory, now).run_sweep()
    assert first.users == 1
    assert first.created == 1
    [alert] = _entries(db)
    assert alert.type == "deadline_alert"
    assert alert.title == "Application Deadline Reminder"
    assert alert.message == "7 days left to apply for MSc Computer Science at University of Toronto"
    assert alert.data["daysLeft"] == 7
    assert alert.data["universityName"] == "University of Toronto"
    assert alert.dedupe_key == f"deadline_alert:{uni.id}:{program.id}:7"

    # Same day again: nothing new
    assert _sweep(session_factory, now + timedelta(hours=2)).run_sweep().created == 0

    # Deadline passed more than a day ago: exactly one overdue, and only once
    after = now + timedelta(days=9)
    assert _sweep(session_factory, after).run_sweep().created == 1
    assert _sweep(session_factory, after + timedelta(days=1)).run_sweep().created == 0
    overdue = [e for e in _entries(db) if e.type == "deadline_overdue"]
    assert len(overdue) == 1
    assert overdue[0].title == "Application Deadline Passed"
    assert overdue[0].data["daysOverdue"] == 2


def test_one_day_left_message_is_singular(db, session_factory, now, make_user, make_university, make_program, save):
    user = make_user()
    program = make_program(make_university(), deadline=now + timedelta(hours=20))
    save(user, program)
    _sweep(session_factory, now).run_sweep()
    [alert] = _entries(db)
    assert alert.message.startswith("1 day left to apply")


def test_no_alert_between_offsets(db, session_factory, now, make_user, make_university, make_program, save):
    user = make_user()
    save(user, make_program(make_university(), deadline=now + timedelta(days=10)))
    assert _sweep(session_factory, now).run_sweep().created == 0


def test_rolling_programs_never_alert(db, session_factory, now, make_user, make_university, make_program, save):
    user = make_user()
    uni = make_university()
    save(user, make_program(uni, name="Rolling MBA", rolling=True))
    save(user, make_program(uni, name="Rolling BSc", level="Bachelor", rolling=True, deadline=now - timedelta(days=5)))
    for day in range(0, 40, 3):
        _sweep(session_factory, now + timedelta(days=day)).run_sweep()
    assert _entries(db) == []


def test_custom_offsets_and_disabled_alerts(db, session_factory, now, make_user, make_university, make_program, save):
    custom, muted = make_user(), make_user()
    program = make_program(make_university(), deadline=now + timedelta(days=3))
    save(custom, program)
    save(muted, program)
    db.add(UserProfile(user_id=custom.id, alert_days=[3]))
    db.add(UserProfile(user_id=muted.id, onsite_alerts=False))
    db.commit()

    result = _sweep(session_factory, now).run_sweep()
    assert result.users == 2
    assert result.skipped == 1
    assert result.created == 1
    assert len(_entries(db, custom.id)) == 1
    assert _entries(db, muted.id) == []


def test_missing_program_is_skipped(db, session_factory, now, make_user, make_university, make_program, save):
    user = make_user()
    uni = make_university()
    db.add(SavedProgram(user_id=user.id, university_id=uni.id, program_id=999))
    db.commit()
    save(user, make_program(uni, deadline=now + timedelta(days=14)))

    result = _sweep(session_factory, now).run_sweep()
    assert result.failed == 0
    assert result.created == 1


def test_one_user_failing_does_not_stop_the_sweep(db, session_factory, now, make_user, make_university, make_program, save):
    bad, good = make_user(), make_user()
    program = make_program(make_university(), deadline=now + timedelta(days=7))
    save(bad, program)
    save(good, program)

    class BrokenForOneUser(DeadlineSweepService):
        def sweep_user(self, user_id, at):
            if user_id == bad.id:
                raise RuntimeError("boom")
            return super().sweep_user(user_id, at)

    result = BrokenForOneUser(session_factory, clock=lambda: now).run_sweep()
    assert result.users == 2
    assert result.failed == 1
    assert result.created == 1
    assert len(_entries(db, good.id)) == 1


def test_transient_database_error_is_retried(db, session_factory, now, make_user, make_university, make_program, save):
    user = make_user()
    save(user, make_program(make_university(), deadline=now + timedelta(days=7)))
    sleeps = []

    class FlakyOnce(DeadlineSweepService):
        calls = 0

        def sweep_user(self, user_id, at):
            FlakyOnce.calls += 1
            if FlakyOnce.calls == 1:
                raise OperationalError("SELECT 1", {}, Exception("database is locked"))
            return super().sweep_user(user_id, at)

    result = FlakyOnce(session_factory, clock=lambda: now, max_attempts=3, backoff_seconds=0.5, sleep=sleeps.append).run_sweep()
    assert result.failed == 0
    assert result.created == 1
    assert sleeps == [0.5]


def test_retries_are_bounded(db, session_factory, now, make_user, make_university, make_program, save):
    user = make_user()
    save(user, make_program(make_university(), deadline=now + timedelta(days=7)))
    sleeps = []

    class AlwaysDown(DeadlineSweepService):
        def sweep_user(self, user_id, at):
            raise OperationalError("SELECT 1", {}, Exception("connection refused"))

    result = AlwaysDown(session_factory, clock=lambda: now, max_attempts=3, backoff_seconds=0.5, sleep=sleeps.append).run_sweep()
    assert result.failed == 1
    assert sleeps == [0.5, 1.0]


def test_weekly_cleanup_keeps_unread(db, session_factory, now):
    db.add_all([
        DeadlineNotification(
            user_id=1, type="deadline_alert", title="Application Deadline Reminder", message="old read",
            dedupe_key="deadline_alert:1:1:7", is_read=True, created_at=now - timedelta(days=31),
        ),
        DeadlineNotification(
            user_id=1, type="deadline_alert", title="Application Deadline Reminder", message="old unread",
            dedupe_key="deadline_alert:1:1:14", is_read=False, created_at=now - timedelta(days=40),
        ),
        Notification(
            user_id=1, type="acceptance", title="Application Accepted!", message="Congratulations",
            priority="high", created_at=now - timedelta(days=91), expires_at=now - timedelta(days=1),
        ),
    ])
    db.commit()

    result = _sweep(session_factory, now).cleanup(retention_days=30)
    assert result.deadline_removed == 1
    assert result.expired_removed == 1
    assert [e.message for e in _entries(db)] == ["old unread"]
    assert db.query(Notification).count() == 0


def test_empty_offsets_mean_no_day_alerts(db, session_factory, now, make_user, make_university, make_program, save):
    user = make_user()
    program = make_program(make_university(), deadline=now + timedelta(days=7))
    save(user, program)
    db.add(UserProfile(user_id=user.id, alert_days=[]))
    db.commit()

    assert _sweep(session_factory, now).run_sweep().created == 0
    # Overdue does not depend on offsets
    assert _sweep(session_factory, now + timedelta(days=9)).run_sweep().created == 1
    assert [e.type for e in _entries(db)] == ["deadline_overdue"]
