"""In-process job loop for the periodic maintenance tasks.

All jobs run sequentially on one thread, so a slow run can never overlap the
next run of the same job. Jobs with an ``hour`` fire once per local calendar
day during that hour; jobs without one fire on every tick.
"""

import logging
import threading

from django.conf import settings
from django.db import close_old_connections
from django.utils import timezone

logger = logging.getLogger("storefront.scheduler")


class Job:
    def __init__(self, name: str, func, hour: int | None = None):
        self.name = name
        self.func = func
        self.hour = hour
        self.last_run_on = None

    def __repr__(self) -> str:  # pragma: no cover
        return f"Job({self.name!r}, hour={self.hour})"

    def is_due(self, now) -> bool:
        if self.hour is None:
            return True
        local = timezone.localtime(now)
        return local.hour == self.hour and self.last_run_on != local.date()


def _cancel_expired_orders():
    from orders.services import cancel_expired_orders

    return cancel_expired_orders()


def _notify_abandoned_carts():
    from cart.services import notify_abandoned_carts

    return notify_abandoned_carts()


def _audit_low_stock():
    from inventory.services import audit_low_stock

    return audit_low_stock()


def default_jobs() -> list[Job]:
    return [
        Job("cancel_expired_orders", _cancel_expired_orders),
        Job(
            "notify_abandoned_carts",
            _notify_abandoned_carts,
            hour=getattr(settings, "SCHEDULER_ABANDONED_CART_HOUR", 10),
        ),
        Job("audit_low_stock", _audit_low_stock, hour=getattr(settings, "SCHEDULER_LOW_STOCK_HOUR", 11)),
    ]


class Scheduler:
    def __init__(self, jobs: list[Job], tick_seconds: int | None = None):
        self.jobs = list(jobs)
        if tick_seconds is None:
            tick_seconds = getattr(settings, "SCHEDULER_TICK_SECONDS", 60)
        self.tick_seconds = max(int(tick_seconds), 1)
        self._stop = threading.Event()

    @property
    def stopped(self) -> bool:
        return self._stop.is_set()

    def stop(self, *args) -> None:
        """Ask the loop to exit after the current job; usable as a signal handler."""
        if not self._stop.is_set():
            logger.info("scheduler.stopping", extra={"event": "scheduler.stopping"})
        self._stop.set()

    def run_pending(self, now=None) -> list[str]:
        """Run every due job once; returns the names of the jobs that ran."""

        now = now or timezone.now()
        ran = []
        for job in self.jobs:
            if self.stopped:
                break
            if not job.is_due(now):
                continue
            job.last_run_on = timezone.localtime(now).date()
            close_old_connections()
            try:
                result = job.func()
            except Exception:
                logger.exception("scheduler.job_failed", extra={"event": "scheduler.job_failed", "job": job.name})
            else:
                logger.info(
                    "scheduler.job_done",
                    extra={"event": "scheduler.job_done", "job": job.name, "result": result},
                )
            finally:
                close_old_connections()
            ran.append(job.name)
        return ran

    def run_forever(self) -> None:
        logger.info(
            "scheduler.started",
            extra={"event": "scheduler.started", "jobs": [job.name for job in self.jobs], "tick": self.tick_seconds},
        )
        while not self.stopped:
            self.run_pending()
            self._stop.wait(self.tick_seconds)
        logger.info("scheduler.stopped", extra={"event": "scheduler.stopped"})
