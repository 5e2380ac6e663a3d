"""
Holidays Router

Endpoints:
- GET  /holidays          - Holiday calendar (any authenticated user)
- POST /holidays/generate - Generate missing holiday events now (Admin)
"""

import logging
from datetime import UTC, datetime

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from schoolhub.core.auth import CurrentUser, get_current_user, require_roles
from schoolhub.core.config import settings
from schoolhub.core.database import get_db
from schoolhub.modules.holidays import repository
from schoolhub.modules.holidays.schemas import (
    GenerateHolidaysRequest,
    GenerateHolidaysResponse,
    HolidayListResponse,
    HolidayResponse,
)
from schoolhub.modules.holidays.seeder import (
    generate_holiday_events_for_year,
    reconcile_holiday_calendar,
)
from schoolhub.modules.users.models import UserRole

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=HolidayListResponse, summary="List Holidays")
async def list_holidays(
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> HolidayListResponse:
    holidays = await repository.list_holidays(db)
    return HolidayListResponse(
        count=len(holidays),
        data=[HolidayResponse.model_validate(h) for h in holidays],
    )


@router.post("/generate", response_model=GenerateHolidaysResponse, summary="Generate Holiday Events")
async def generate_holidays(
    data: GenerateHolidaysRequest | None = None,
    user: CurrentUser = Depends(require_roles(UserRole.ADMIN)),
    db: AsyncSession = Depends(get_db),
) -> GenerateHolidaysResponse:
    """
    Create any missing holiday events.

    With a ``year`` only that year is generated; otherwise the current year
    and the following ones (``HOLIDAY_BACKFILL_YEARS`` in total).
    """
    if data is not None and data.year is not None:
        created = await generate_holiday_events_for_year(db, data.year)
        summary = {data.year: len(created)}
    else:
        summary = await reconcile_holiday_calendar(
            db, datetime.now(UTC), settings.holiday_backfill_years
        )

    total = sum(summary.values())
    logger.info(f"Holiday generation requested by {user.id}: {summary}")
    return GenerateHolidaysResponse(
        message=f"Created {total} holiday events",
        data=summary,
    )
