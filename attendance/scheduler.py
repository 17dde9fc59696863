"""
Background scheduler for recurring session generation.

Uses APScheduler to run the daily materialization job. The job itself is a
plain function, run_daily_materialization(), so it can also be triggered by
hand (or from tests) without a running scheduler.

At most one scheduler instance is expected to fire the daily job. Overlapping
runs, such as the daily job and a manual re-run, are harmless because
materialization skips dates that already have an instance.
"""
import uuid
from typing import Optional

import structlog
from apscheduler.events import EVENT_JOB_ERROR, EVENT_JOB_MISSED
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from attendance.core.clock import Clock
from attendance.core.config import settings
from attendance.core.constants import DEFAULT_DAYS_AHEAD
from attendance.core.logging_config import get_logger
from attendance.db import get_db_context
from attendance.main import create_materializer
from attendance.schemas.recurrence import MaterializationReport

logger = get_logger(__name__)

DAILY_JOB_ID = "generate_recurring_sessions"

# Global scheduler instance
scheduler: Optional[BackgroundScheduler] = None


def run_daily_materialization(clock: Optional[Clock] = None) -> MaterializationReport:
    """Generate upcoming instances for every recurring template (the daily job)."""
    with structlog.contextvars.bound_contextvars(job_id=str(uuid.uuid4()), job=DAILY_JOB_ID):
        with get_db_context() as db:
            return create_materializer(db, clock=clock).run_daily()


def run_materialization_now(template_id: int, days_ahead: int = DEFAULT_DAYS_AHEAD, clock: Optional[Clock] = None) -> int:
    """Generate instances for one template on demand; returns the number created."""
    with get_db_context() as db:
        return create_materializer(db, clock=clock).run_now(template_id, days_ahead)


def _on_job_error(event):
    logger.error(
        "scheduled_job_failed",
        job_id=event.job_id,
        error=str(event.exception),
        traceback=event.traceback,
    )


def _on_job_missed(event):
    logger.warning(
        "scheduled_job_missed",
        job_id=event.job_id,
        scheduled_run_time=str(event.scheduled_run_time),
    )


def init_scheduler(start: bool = True) -> BackgroundScheduler:
    """
    Initialize the background scheduler with the daily generation job.

    Args:
        start: Start the scheduler thread immediately (tests pass False)

    Returns:
        The global scheduler instance
    """
    global scheduler

    if scheduler is not None:
        logger.warning("scheduler_already_initialized")
        return scheduler

    scheduler = BackgroundScheduler(
        timezone=settings.TIMEZONE,
        job_defaults={
            'coalesce': True,  # Combine missed executions
            'max_instances': 1,  # Only one instance of each job at a time
            'misfire_grace_time': 3600
        }
    )

    scheduler.add_job(
        func=run_daily_materialization,
        trigger=CronTrigger(
            hour=settings.MATERIALIZE_CRON_HOUR,
            minute=settings.MATERIALIZE_CRON_MINUTE,
            timezone=settings.TIMEZONE,
        ),
        id=DAILY_JOB_ID,
        name='Generate Recurring Attendance Sessions',
        replace_existing=True
    )
    logger.info(
        "scheduled_job_registered",
        job_id=DAILY_JOB_ID,
        hour=settings.MATERIALIZE_CRON_HOUR,
        minute=settings.MATERIALIZE_CRON_MINUTE,
    )

    scheduler.add_listener(_on_job_error, EVENT_JOB_ERROR)
    scheduler.add_listener(_on_job_missed, EVENT_JOB_MISSED)

    if start:
        scheduler.start()
        logger.info("scheduler_started")

    return scheduler


def shutdown_scheduler() -> None:
    """Stop the scheduler if it is running and forget it."""
    global scheduler

    if scheduler is None:
        return

    if scheduler.running:
        scheduler.shutdown(wait=False)
        logger.info("scheduler_stopped")
    scheduler = None
