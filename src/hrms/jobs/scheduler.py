"""
APScheduler configuration for the reconciliation jobs.

Triggers fire in business-local time:
- 23:59 daily: mark absentees
- 00:05 on the 1st of each month: accrue leave balances
- 00:10 on 1 January: carry forward leave balances
"""

from __future__ import annotations

import logging
from typing import Callable

from apscheduler.executors.pool import ThreadPoolExecutor
from apscheduler.jobstores.memory import MemoryJobStore
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from ..core.constants import SCHEDULER_TIMEZONE
from .reconciliation import ReconciliationJobs

logger = logging.getLogger(__name__)

job_defaults = {
    "coalesce": True,  # Combine multiple pending executions into one
    "max_instances": 1,  # Only one instance of each job at a time
    "misfire_grace_time": 60,
}


def build_scheduler() -> BackgroundScheduler:
    return BackgroundScheduler(
        jobstores={"default": MemoryJobStore()},
        executors={"default": ThreadPoolExecutor(max_workers=1)},
        job_defaults=job_defaults,
        timezone=SCHEDULER_TIMEZONE,
    )


def run_job(job_name: str, job: Callable[[], dict]) -> None:
    """Run one job, logging instead of raising so the scheduler keeps ticking."""
    try:
        result = job()
        logger.info("Job '%s' completed: %s errors", job_name, len(result.get("errors", [])))
    except Exception:
        logger.exception("Job '%s' failed; will retry on the next schedule tick", job_name)


def register_jobs(scheduler: BackgroundScheduler, jobs: ReconciliationJobs) -> None:
    scheduler.add_job(
        run_job,
        CronTrigger(hour=23, minute=59, timezone=SCHEDULER_TIMEZONE),
        args=["mark_absentees", jobs.mark_absentees],
        id="mark_absentees",
        replace_existing=True,
    )
    scheduler.add_job(
        run_job,
        CronTrigger(day=1, hour=0, minute=5, timezone=SCHEDULER_TIMEZONE),
        args=["accrue_leave_balances", jobs.accrue_leave_balances],
        id="accrue_leave_balances",
        replace_existing=True,
    )
    scheduler.add_job(
        run_job,
        CronTrigger(month=1, day=1, hour=0, minute=10, timezone=SCHEDULER_TIMEZONE),
        args=["carry_forward_leave_balances", jobs.carry_forward_leave_balances],
        id="carry_forward_leave_balances",
        replace_existing=True,
    )


def start_scheduler(jobs: ReconciliationJobs) -> BackgroundScheduler:
    scheduler = build_scheduler()
    register_jobs(scheduler, jobs)
    scheduler.start()
    logger.info("Scheduler started with jobs: %s", ", ".join(j.id for j in scheduler.get_jobs()))
    return scheduler
