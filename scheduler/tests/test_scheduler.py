from datetime import datetime

import pytest
from django.core.management import call_command
from django.utils import timezone
from scheduler import jobs as jobs_module
from scheduler.jobs import Job, Scheduler, default_jobs


@pytest.fixture(autouse=True)
def no_connection_recycling(monkeypatch):
    # Test transactions must stay open between jobs.
    monkeypatch.setattr(jobs_module, "close_old_connections", lambda: None)


def at(hour, minute=0, day=15):
    return timezone.make_aware(datetime(2024, 1, day, hour, minute))


def recorder(calls, name, error=None):
    def run():
        calls.append(name)
        if error:
            raise error
        return name

    return run


def test_tick_jobs_run_every_time():
    calls = []
    scheduler = Scheduler([Job("sweep", recorder(calls, "sweep"))], tick_seconds=60)
    scheduler.run_pending(now=at(3))
    scheduler.run_pending(now=at(3, 1))
    assert calls == ["sweep", "sweep"]


def test_daily_job_runs_once_per_day_at_its_hour():
    calls = []
    scheduler = Scheduler([Job("audit", recorder(calls, "audit"), hour=11)])

    assert scheduler.run_pending(now=at(10, 59)) == []
    assert scheduler.run_pending(now=at(11, 0)) == ["audit"]
    assert scheduler.run_pending(now=at(11, 1)) == []
    assert scheduler.run_pending(now=at(12, 0)) == []
    assert scheduler.run_pending(now=at(11, 0, day=16)) == ["audit"]
    assert calls == ["audit", "audit"]


def test_failing_job_does_not_stop_the_others():
    calls = []
    scheduler = Scheduler(
        [
            Job("broken", recorder(calls, "broken", error=RuntimeError("boom"))),
            Job("healthy", recorder(calls, "healthy")),
        ]
    )
    assert scheduler.run_pending(now=at(3)) == ["broken", "healthy"]
    assert calls == ["broken", "healthy"]


def test_stop_ends_the_loop():
    calls = []
    scheduler = Scheduler([], tick_seconds=1)

    def stop_after_first_run():
        calls.append("tick")
        scheduler.stop()

    scheduler.jobs = [Job("once", stop_after_first_run), Job("skipped", recorder(calls, "skipped"))]
    scheduler.run_forever()
    assert calls == ["tick"]
    assert scheduler.stopped


def test_default_jobs_follow_settings(settings):
    settings.SCHEDULER_ABANDONED_CART_HOUR = 9
    settings.SCHEDULER_LOW_STOCK_HOUR = 21
    hours = {job.name: job.hour for job in default_jobs()}
    assert hours == {"cancel_expired_orders": None, "notify_abandoned_carts": 9, "audit_low_stock": 21}


@pytest.mark.django_db
def test_default_jobs_run_against_the_database():
    now = timezone.localtime()
    scheduler = Scheduler(default_jobs())
    for job in scheduler.jobs:
        job.hour = None if job.hour is None else now.hour
    assert scheduler.run_pending(now=now) == [
        "cancel_expired_orders",
        "notify_abandoned_carts",
        "audit_low_stock",
    ]


@pytest.mark.django_db
def test_run_scheduler_once(monkeypatch, capsys):
    calls = []
    monkeypatch.setattr(
        "scheduler.management.commands.run_scheduler.default_jobs",
        lambda: [Job("sweep", recorder(calls, "sweep"))],
    )
    call_command("run_scheduler", "--once")
    assert calls == ["sweep"]
    assert "sweep" in capsys.readouterr().out
