from datetime import timedelta

from eduglobal.services.deadline_evaluator import days_until, evaluate, urgency_for

from conftest import FROZEN_NOW

OFFSETS = (30, 14, 7, 1)


def test_exactly_seven_days_is_due():
    ev = evaluate(FROZEN_NOW, FROZEN_NOW + timedelta(days=7), False, OFFSETS)
    assert ev.days_left == 7
    assert ev.due is True
    assert ev.overdue is False
    assert ev.urgency == "urgent"


def test_days_left_rounds_up():
    assert days_until(FROZEN_NOW, FROZEN_NOW + timedelta(days=6, hours=1)) == 7
    assert days_until(FROZEN_NOW, FROZEN_NOW + timedelta(hours=1)) == 1
    assert days_until(FROZEN_NOW, FROZEN_NOW) == 0


def test_offset_not_matched_is_not_due():
    ev = evaluate(FROZEN_NOW, FROZEN_NOW + timedelta(days=8), False, OFFSETS)
    assert ev.days_left == 8
    assert ev.due is False


def test_deadline_passed_less_than_a_day_ago_is_not_overdue():
    ev = evaluate(FROZEN_NOW, FROZEN_NOW - timedelta(hours=3), False, OFFSETS)
    assert ev.days_left == 0
    assert ev.overdue is False


def test_deadline_passed_more_than_a_day_ago_is_overdue():
    ev = evaluate(FROZEN_NOW, FROZEN_NOW - timedelta(days=1, hours=1), False, OFFSETS)
    assert ev.days_left == -1
    assert ev.overdue is True
    assert ev.due is False
    assert ev.urgency == "expired"


def test_rolling_is_never_due_or_overdue():
    for deadline in (None, FROZEN_NOW + timedelta(days=7), FROZEN_NOW - timedelta(days=10)):
        ev = evaluate(FROZEN_NOW, deadline, True, OFFSETS)
        assert ev.due is False
        assert ev.overdue is False
        assert ev.days_left is None
        assert ev.urgency == "active"


def test_missing_deadline_is_active():
    ev = evaluate(FROZEN_NOW, None, False, OFFSETS)
    assert ev.days_left is None
    assert ev.urgency == "active"


def test_urgency_buckets():
    assert urgency_for(-1) == "expired"
    assert urgency_for(0) == "urgent"
    assert urgency_for(7) == "urgent"
    assert urgency_for(8) == "warning"
    assert urgency_for(30) == "warning"
    assert urgency_for(31) == "active"
    assert urgency_for(None) == "active"
