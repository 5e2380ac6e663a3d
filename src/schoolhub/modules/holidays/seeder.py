"""
Holiday Seeder

Seeds the holiday calendar and turns it into calendar events.

Design Principles:
- Idempotent: events are only created when no identical holiday event exists
- Stateless: the reconciler takes ``now`` explicitly, so scheduled, startup
  and on-demand runs share one code path
- One failing year is logged and does not stop the remaining years
"""

import logging
import secrets
from datetime import UTC, datetime

from sqlalchemy.ext.asyncio import AsyncSession

from schoolhub.core.config import settings
from schoolhub.core.security import hash_password
from schoolhub.modules.events import repository as event_repository
from schoolhub.modules.events.models import Event, EventPriority, EventType, TargetAudience
from schoolhub.modules.holidays import repository
from schoolhub.modules.holidays.data import (
    HOLIDAY_EVENT_HEADER,
    PHILIPPINE_HOLIDAYS,
    holiday_message,
)
from schoolhub.modules.holidays.models import HolidayType
from schoolhub.modules.users.models import Admin, UserRole, UserStatus
from schoolhub.modules.users.repository import UserRepository

logger = logging.getLogger(__name__)

SYSTEM_ADMIN_USERNAME = "system_admin"
SYSTEM_ADMIN_CODE = "SYSTEM_ADMIN"


async def initialize_holidays(db: AsyncSession) -> int:
    """
    Insert the holiday calendar if the table is empty.

    Returns:
        Number of holidays inserted (0 when already seeded)
    """
    existing = await repository.count(db)
    if existing:
        logger.info(f"Holiday calendar already seeded ({existing} holidays)")
        return 0

    holidays = await repository.bulk_create(db, PHILIPPINE_HOLIDAYS)
    await db.commit()
    logger.info(f"Seeded {len(holidays)} holidays")
    return len(holidays)


async def get_system_author(db: AsyncSession) -> Admin:
    """The first Admin account, creating a system admin when none exists."""
    admin = await UserRepository.get_first_admin(db)
    if admin is not None:
        return admin

    logger.warning("No admin user found, creating system admin for holiday events")
    admin = await UserRepository.create(
        db,
        role=UserRole.ADMIN,
        username=SYSTEM_ADMIN_USERNAME,
        email=settings.system_admin_email,
        password_hash=hash_password(secrets.token_urlsafe(32)),
        first_name="System",
        last_name="Administrator",
        user_code=SYSTEM_ADMIN_CODE,
        status=UserStatus.ACTIVE,
        sex="Other",
        address="System Generated",
    )
    return admin


async def generate_holiday_events_for_year(db: AsyncSession, year: int) -> list[Event]:
    """
    Create the holiday events for ``year`` that do not exist yet.

    Each event is an all-day event at midnight UTC on the holiday's date.
    Dates that do not exist in ``year`` are skipped.

    Returns:
        The events created by this call
    """
    holidays = await repository.list_holidays(db, active_only=True)
    author = await get_system_author(db)

    created: list[Event] = []
    for holiday in holidays:
        try:
            event_date = datetime(year, holiday.month, holiday.day, tzinfo=UTC)
        except ValueError:
            logger.warning(
                f"Skipping {holiday.name}: {year}-{holiday.month:02d}-{holiday.day:02d} "
                "is not a valid date"
            )
            continue

        if await event_repository.holiday_event_exists(db, holiday.name, event_date, event_date):
            continue

        event = await event_repository.create(
            db,
            created_by=author.id,
            title=holiday.name,
            header=HOLIDAY_EVENT_HEADER,
            body=holiday_message(holiday.name),
            start_date=event_date,
            end_date=event_date,
            is_all_day=True,
            priority=(
                EventPriority.HIGH if holiday.type == HolidayType.REGULAR else EventPriority.MEDIUM
            ),
            target_audience=TargetAudience.ALL,
            event_type=EventType.HOLIDAY,
            images=[],
        )
        created.append(event)

    await db.commit()
    logger.info(f"Created {len(created)} holiday events for {year}")
    return created


async def reconcile_holiday_calendar(
    db: AsyncSession, now: datetime, years: int
) -> dict[int, int]:
    """
    Make sure holiday events exist for ``now.year`` and the following years.

    Args:
        db: Database session
        now: Reference time; the span starts at its year
        years: Number of years to cover, including the current one

    Returns:
        ``{year: events_created}``; a year that failed reports 0
    """
    summary: dict[int, int] = {}
    for year in range(now.year, now.year + years):
        try:
            created = await generate_holiday_events_for_year(db, year)
            summary[year] = len(created)
        except Exception as e:
            logger.exception(f"Error generating holiday events for {year}: {e}")
            await db.rollback()
            summary[year] = 0
    return summary
