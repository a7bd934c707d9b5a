from datetime import timedelta

import pytest
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from eduglobal.core.clock import utc_now
from eduglobal.models import SavedProgram
from eduglobal.scheduler import deadline_jobs
from eduglobal.scheduler.recurring import RecurringTask, register_tasks


def _field(trigger, name):
    return str(next(f for f in trigger.fields if f.name == name))


def test_deadline_tasks_are_registered_in_configured_timezone():
    scheduler = BackgroundScheduler()
    ids = register_tasks(scheduler, deadline_jobs.deadline_tasks())
    assert ids == ["deadline_sweep", "deadline_cleanup"]

    sweep = scheduler.get_job("deadline_sweep")
    assert isinstance(sweep.trigger, CronTrigger)
    assert _field(sweep.trigger, "hour") == "9"
    assert _field(sweep.trigger, "minute") == "0"
    assert str(sweep.trigger.timezone) == "Asia/Dhaka"

    cleanup = scheduler.get_job("deadline_cleanup")
    assert _field(cleanup.trigger, "day_of_week") == "sun"
    assert _field(cleanup.trigger, "hour") == "2"


def test_interval_task_ignores_timezone():
    task = RecurringTask(id="t", func=lambda: None, trigger="interval", schedule={"minutes": 5}, timezone="UTC")
    assert task.trigger_kwargs() == {"minutes": 5}


def test_sweep_job_runs_against_session_factory(
    monkeypatch, db, session_factory, make_user, make_university, make_program
):
    user = make_user()
    program = make_program(make_university(), deadline=utc_now() + timedelta(days=14))
    db.add(SavedProgram(user_id=user.id, university_id=program.university_id, program_id=program.id))
    db.commit()
    monkeypatch.setattr(deadline_jobs, "SessionLocal", session_factory)

    result = deadline_jobs.run_deadline_sweep_job()
    assert result.users == 1
    assert result.created == 1
    assert deadline_jobs.run_deadline_sweep_job().created == 0


def test_job_errors_are_logged_not_raised(monkeypatch, caplog):
    class Broken:
        def run_sweep(self):
            raise RuntimeError("database unavailable")

        def cleanup(self, retention_days):
            raise RuntimeError("database unavailable")

    monkeypatch.setattr(deadline_jobs, "build_sweep_service", lambda: Broken())
    assert deadline_jobs.run_deadline_sweep_job() is None
    assert deadline_jobs.run_deadline_cleanup_job() is None
    assert "Deadline sweep job failed" in caplog.text


@pytest.mark.parametrize("env", ["production", "staging"])
def test_default_jwt_secret_is_refused_outside_dev(env):
    from eduglobal.config import DEFAULT_JWT_SECRET, Settings

    with pytest.raises(ValueError):
        Settings(env=env, jwt_secret=DEFAULT_JWT_SECRET, _env_file=None)
