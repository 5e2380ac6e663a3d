"""
Background Job Scheduler

Provides scheduled task execution using APScheduler with AsyncIO support.
Handles job registration, execution, and graceful shutdown.

Design Principles:
- Jobs are idempotent (safe to run multiple times)
- Jobs open their own database sessions
- Failed jobs are logged but don't crash the scheduler
- Jobs can be triggered manually for testing
- Scheduler integrates with FastAPI lifespan

Usage:
    from schoolhub.core.scheduler import register_job, start_scheduler, stop_scheduler

    register_job("holidays_monthly_check", run_monthly_check, CronTrigger(day=1, hour=2))
    await start_scheduler()
"""

import logging
from collections.abc import Callable, Coroutine
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from apscheduler.events import EVENT_JOB_ERROR, EVENT_JOB_EXECUTED, JobExecutionEvent
from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.base import BaseTrigger

logger = logging.getLogger(__name__)

JobFunc = Callable[[], Coroutine[Any, Any, Any]]


@dataclass
class RegisteredJob:
    """A job known to the application, scheduled or not."""

    func: JobFunc
    trigger: BaseTrigger


# Global scheduler instance
_scheduler: AsyncIOScheduler | None = None

# Job registry for deferred scheduling and manual triggering
_job_registry: dict[str, RegisteredJob] = {}


class SchedulerConfig:
    """Configuration for the background scheduler."""

    TIMEZONE = "UTC"

    JOB_COALESCE = True  # Combine multiple missed executions into one
    JOB_MAX_INSTANCES = 1  # Only one instance of each job can run at a time
    JOB_MISFIRE_GRACE_TIME = 60 * 60  # 1 hour grace time for missed jobs

    EXECUTORS = {
        "default": {"type": "asyncio"},
    }

    JOB_DEFAULTS = {
        "coalesce": JOB_COALESCE,
        "max_instances": JOB_MAX_INSTANCES,
        "misfire_grace_time": JOB_MISFIRE_GRACE_TIME,
    }


def _job_listener(event: JobExecutionEvent) -> None:
    """Log job execution results."""
    if event.exception:
        logger.error(
            f"Job {event.job_id} failed with exception: {event.exception}",
            exc_info=event.exception,
        )
    else:
        logger.info(f"Job {event.job_id} executed successfully at {datetime.now(UTC).isoformat()}")


def get_scheduler() -> AsyncIOScheduler | None:
    """Return the global scheduler instance, or None if not started."""
    return _scheduler


def _schedule(job_id: str, job: RegisteredJob) -> None:
    assert _scheduler is not None
    _scheduler.add_job(
        job.func,
        trigger=job.trigger,
        id=job_id,
        replace_existing=True,
    )
    logger.info(f"Scheduled job: {job_id}")


async def start_scheduler() -> AsyncIOScheduler:
    """
    Initialize and start the background scheduler.

    Every job registered so far is added before the scheduler starts.

    Returns:
        The started scheduler instance
    """
    global _scheduler

    if _scheduler is not None and _scheduler.running:
        logger.warning("Scheduler already running, returning existing instance")
        return _scheduler

    logger.info("Initializing background job scheduler...")

    _scheduler = AsyncIOScheduler(
        timezone=SchedulerConfig.TIMEZONE,
        executors=SchedulerConfig.EXECUTORS,
        job_defaults=SchedulerConfig.JOB_DEFAULTS,
    )
    _scheduler.add_listener(_job_listener, EVENT_JOB_EXECUTED | EVENT_JOB_ERROR)

    for job_id, job in _job_registry.items():
        _schedule(job_id, job)

    _scheduler.start()

    logger.info(f"Background job scheduler started with {len(_job_registry)} job(s)")
    return _scheduler


async def stop_scheduler() -> None:
    """Stop the scheduler, waiting for running jobs to complete."""
    global _scheduler

    if _scheduler is None or not _scheduler.running:
        logger.debug("Scheduler not running, nothing to stop")
        return

    logger.info("Stopping background job scheduler...")
    _scheduler.shutdown(wait=True)
    logger.info("Background job scheduler stopped")
    _scheduler = None


def register_job(job_id: str, func: JobFunc, trigger: BaseTrigger) -> None:
    """
    Register a job with the scheduler.

    If the scheduler is already running the job is scheduled immediately,
    otherwise it is scheduled by ``start_scheduler``.

    Args:
        job_id: Unique identifier for the job
        func: Async function to execute
        trigger: APScheduler trigger (CronTrigger, IntervalTrigger, ...)
    """
    job = RegisteredJob(func=func, trigger=trigger)
    _job_registry[job_id] = job

    if _scheduler is None:
        logger.debug(f"Scheduler not initialized, job {job_id} will be scheduled on start")
        return

    _schedule(job_id, job)


async def trigger_job_manually(job_id: str) -> dict[str, Any]:
    """
    Run a registered job immediately, bypassing its schedule.

    Returns:
        Dict with job_id, status ("success" or "error"), executed_at,
        and result or error

    Raises:
        ValueError: If job_id is not registered
    """
    if job_id not in _job_registry:
        raise ValueError(
            f"Job {job_id} not found in registry. Available jobs: {list(_job_registry.keys())}"
        )

    executed_at = datetime.now(UTC)
    logger.info(f"Manually triggering job: {job_id}")

    try:
        result = await _job_registry[job_id].func()
        logger.info(f"Manual execution of job {job_id} completed successfully")
        return {
            "job_id": job_id,
            "status": "success",
            "executed_at": executed_at.isoformat(),
            "result": result,
        }
    except Exception as e:
        logger.error(f"Manual execution of job {job_id} failed: {e}", exc_info=True)
        return {
            "job_id": job_id,
            "status": "error",
            "executed_at": executed_at.isoformat(),
            "error": str(e),
        }


def list_registered_jobs() -> list[dict[str, Any]]:
    """List registered jobs with their next run time and pause state."""
    jobs = []

    for job_id in _job_registry:
        job_info: dict[str, Any] = {"job_id": job_id, "registered": True}

        if _scheduler is not None:
            scheduled_job = _scheduler.get_job(job_id)
            if scheduled_job:
                job_info["next_run_time"] = (
                    scheduled_job.next_run_time.isoformat() if scheduled_job.next_run_time else None
                )
                job_info["is_paused"] = scheduled_job.next_run_time is None
            else:
                job_info["next_run_time"] = None
                job_info["is_paused"] = True

        jobs.append(job_info)

    return jobs


def pause_job(job_id: str) -> bool:
    """Pause a scheduled job. Returns False if the job is unknown."""
    if _scheduler is None:
        logger.warning("Cannot pause job: scheduler not initialized")
        return False

    if _scheduler.get_job(job_id):
        _scheduler.pause_job(job_id)
        logger.info(f"Paused job: {job_id}")
        return True

    logger.warning(f"Job not found for pausing: {job_id}")
    return False


def resume_job(job_id: str) -> bool:
    """Resume a paused job. Returns False if the job is unknown."""
    if _scheduler is None:
        logger.warning("Cannot resume job: scheduler not initialized")
        return False

    if _scheduler.get_job(job_id):
        _scheduler.resume_job(job_id)
        logger.info(f"Resumed job: {job_id}")
        return True

    logger.warning(f"Job not found for resuming: {job_id}")
    return False
