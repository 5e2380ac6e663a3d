"""
Holiday Background Jobs

Scheduled wrappers around the holiday reconciler:
1. Annual generation - January 1st at 00:01 UTC, current year + 2
2. Monthly check - 1st of every month at 02:00 UTC, current year + 1

Design Principles:
- Jobs are idempotent (safe to run multiple times)
- Jobs handle their own database sessions
- Jobs log a summary of every run
- Jobs can also be triggered manually via the debug job endpoints
"""

import logging
from datetime import UTC, datetime
from typing import Any

from apscheduler.triggers.cron import CronTrigger

from schoolhub.core.config import settings
from schoolhub.core.database import async_session_maker
from schoolhub.core.scheduler import register_job
from schoolhub.modules.holidays.seeder import initialize_holidays, reconcile_holiday_calendar

logger = logging.getLogger(__name__)

# Job IDs for registration and manual triggering
JOB_ID_ANNUAL_GENERATION = "holidays_annual_generation"
JOB_ID_MONTHLY_CHECK = "holidays_monthly_check"


async def _run_reconciler(years: int, label: str) -> dict[str, Any]:
    executed_at = datetime.now(UTC)
    logger.info(f"Running {label} holiday generation for {years} year(s)")

    async with async_session_maker() as db:
        summary = await reconcile_holiday_calendar(db, executed_at, years)

    result = {
        "executed_at": executed_at.isoformat(),
        "years": summary,
        "total_created": sum(summary.values()),
    }
    logger.info(f"{label.capitalize()} holiday generation completed: {result}")
    return result


async def run_annual_generation() -> dict[str, Any]:
    """Generate holiday events for the new year and the two after it."""
    return await _run_reconciler(settings.holiday_backfill_years, "annual")


async def run_monthly_check() -> dict[str, Any]:
    """Fill in any missing holiday events for this year and next."""
    return await _run_reconciler(settings.holiday_monthly_years, "monthly")


async def initialize_holiday_system() -> dict[str, Any]:
    """
    Startup hook: seed the holiday calendar and backfill its events.

    Returns:
        Dict with the number of holidays seeded and events created per year
    """
    async with async_session_maker() as db:
        seeded = await initialize_holidays(db)
        summary = await reconcile_holiday_calendar(
            db, datetime.now(UTC), settings.holiday_backfill_years
        )
    return {"holidays_seeded": seeded, "years": summary}


def register_holiday_jobs() -> None:
    """
    Register the holiday jobs with the scheduler.

    Call during application startup, before the scheduler is started.
    """
    logger.info("Registering holiday background jobs...")

    register_job(
        job_id=JOB_ID_ANNUAL_GENERATION,
        func=run_annual_generation,
        trigger=CronTrigger(month=1, day=1, hour=0, minute=1, timezone="UTC"),
    )
    logger.info(f"Registered job: {JOB_ID_ANNUAL_GENERATION} (cron: Jan 1 00:01 UTC)")

    register_job(
        job_id=JOB_ID_MONTHLY_CHECK,
        func=run_monthly_check,
        trigger=CronTrigger(day=1, hour=2, minute=0, timezone="UTC"),
    )
    logger.info(f"Registered job: {JOB_ID_MONTHLY_CHECK} (cron: 1st of month 02:00 UTC)")
