import typing
from datetime import timedelta

import pytest

from eduglobal.core.clock import as_utc
from eduglobal.models import DeadlineNotification, Notification
from eduglobal.services.notification_ledger import NotificationLedger, serialize_notification


def _add_status(db, user_id, created_at, **fields):
    fields.setdefault("type", "application_status_update")
    fields.setdefault("title", "Application Update")
    fields.setdefault("message", "Your application status has been updated")
    row = Notification(user_id=user_id, created_at=created_at, **fields)
    db.add(row)
    db.commit()
    return row


def test_unknown_category_is_rejected(db):
    with pytest.raises(ValueError):
        NotificationLedger(db, "email")


def test_second_page_returns_items_eleven_to_twenty(db, clock, now):
    for i in range(25):
        _add_status(db, 1, now - timedelta(minutes=i), title=f"n{i}")
    page = NotificationLedger(db, "status", clock=clock).list(1, page=2, limit=10)
    assert page.total == 25
    assert page.total_pages == 3
    assert [r.title for r in page.items] == [f"n{i}" for i in range(10, 20)]


def test_expired_rows_are_hidden_and_purged(db, clock, now):
    _add_status(db, 1, now - timedelta(days=2), expires_at=now - timedelta(seconds=1))
    live = _add_status(db, 1, now - timedelta(days=1), expires_at=now + timedelta(days=1))
    ledger = NotificationLedger(db, "status", clock=clock)

    assert [r.id for r in ledger.list(1).items] == [live.id]
    assert ledger.unread_count(1) == 1
    assert ledger.purge_expired() == 1
    assert db.query(Notification).count() == 1


def test_filters_by_type_and_read_state(db, clock, now):
    _add_status(db, 1, now, type="acceptance", priority="high")
    _add_status(db, 1, now, is_read=True)
    _add_status(db, 2, now)
    ledger = NotificationLedger(db, "status", clock=clock)

    assert ledger.list(1, type="acceptance").total == 1
    assert ledger.list(1, read=True).total == 1
    assert ledger.list(1, read=False).total == 1
    assert ledger.list(1).total == 2


def test_stats_counts_by_type(db, clock, now):
    _add_status(db, 1, now, type="acceptance", priority="high")
    _add_status(db, 1, now, is_read=True)
    _add_status(db, 1, now)
    stats = NotificationLedger(db, "status", clock=clock).stats(1)
    assert stats == {
        "total": 3,
        "unread": 2,
        "read": 1,
        "typeBreakdown": {"acceptance": 1, "application_status_update": 2},
    }


def test_mark_one_read_keeps_first_read_timestamp(db, now):
    row = _add_status(db, 1, now)
    first = NotificationLedger(db, "status", clock=lambda: now)
    assert first.mark_one_read(1, row.id).is_read is True

    later = NotificationLedger(db, "status", clock=lambda: now + timedelta(hours=5))
    again = later.mark_one_read(1, row.id)
    assert as_utc(again.read_at) == now


def test_mark_one_read_ignores_other_users(db, clock, now):
    row = _add_status(db, 1, now)
    assert NotificationLedger(db, "status", clock=clock).mark_one_read(2, row.id) is None


def test_mark_read_many_and_all(db, clock, now):
    rows = [_add_status(db, 1, now - timedelta(minutes=i)) for i in range(3)]
    ledger = NotificationLedger(db, "status", clock=clock)
    assert ledger.mark_read(1, [rows[0].id]) == 1
    assert ledger.mark_read(1, []) == 0
    assert ledger.mark_read(1) == 2
    assert ledger.unread_count(1) == 0


def test_delete_and_delete_read_are_scoped_to_user(db, clock, now):
    mine = _add_status(db, 1, now)
    _add_status(db, 1, now, is_read=True)
    theirs = _add_status(db, 2, now, is_read=True)
    ledger = NotificationLedger(db, "status", clock=clock)

    assert ledger.delete(1, [theirs.id]) == 0
    assert ledger.delete_read(1) == 1
    assert ledger.delete(1, [mine.id]) == 1
    assert db.query(Notification).count() == 1


def test_insert_if_absent_skips_existing_keys(db, clock, now):
    ledger = NotificationLedger(db, "deadline", clock=clock)
    row = {
        "user_id": 1,
        "type": "deadline_alert",
        "title": "Application Deadline Reminder",
        "message": "7 days left to apply for MSc at Toronto",
        "university_id": 1,
        "program_id": 1,
        "data": {"daysLeft": 7},
        "is_read": False,
        "dedupe_key": "deadline_alert:1:1:7",
        "created_at": now,
    }
    assert ledger.insert_if_absent([row]) == 1
    db.commit()
    assert ledger.insert_if_absent([row, dict(row, dedupe_key="deadline_alert:1:1:1")]) == 1
    db.commit()
    assert db.query(DeadlineNotification).count() == 2
    assert ledger.existing_dedupe_keys(1) == {"deadline_alert:1:1:7", "deadline_alert:1:1:1"}


def test_purge_read_older_than(db, clock, now):
    ledger = NotificationLedger(db, "deadline", clock=clock)
    for key, is_read, age in (("a", True, 31), ("b", False, 40), ("c", True, 5)):
        ledger.create(
            1, "deadline_alert", "Application Deadline Reminder", "soon",
            dedupe_key=key, is_read=is_read, created_at=now - timedelta(days=age),
        )
    assert ledger.purge_read_older_than(now - timedelta(days=30)) == 1
    assert {k for (k,) in db.query(DeadlineNotification.dedupe_key).all()} == {"b", "c"}


def test_serialize_status_and_deadline_rows(db, clock, now):
    status = _add_status(db, 1, now, application_id=9, priority="high", type="acceptance")
    out = serialize_notification(status)
    assert out["read"] is False
    assert out["priority"] == "high"
    assert out["application_id"] == 9
    assert out["created_at"] == now.isoformat()

    deadline = NotificationLedger(db, "deadline", clock=clock).create(
        1, "deadline_overdue", "Application Deadline Passed", "passed", dedupe_key="x", program_id=4,
    )
    out = serialize_notification(deadline)
    assert out["program_id"] == 4
    assert "priority" not in out


def test_expired_rows_are_not_counted_by_bulk_writes(db, clock, now):
    gone = now - timedelta(minutes=1)
    expired_unread = _add_status(db, 1, now - timedelta(days=2), expires_at=gone)
    expired_read = _add_status(db, 1, now - timedelta(days=2), expires_at=gone, is_read=True)
    live = _add_status(db, 1, now)
    ledger = NotificationLedger(db, "status", clock=clock)

    assert ledger.mark_read(1) == 1
    assert ledger.delete(1, [expired_unread.id, live.id]) == 1
    assert ledger.delete_read(1) == 0
    assert db.query(Notification).count() == 2


def test_ledger_annotations_resolve_to_builtins():
    hints = typing.get_type_hints(NotificationLedger.insert_if_absent)
    assert hints["rows"] == list[dict[str, typing.Any]]
    assert typing.get_type_hints(NotificationLedger.list_unread)["return"] is list
