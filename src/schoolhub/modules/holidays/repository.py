"""
Holidays Repository
"""

from collections.abc import Iterable

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import Holiday


async def count(db: AsyncSession) -> int:
    result = await db.execute(select(func.count()).select_from(Holiday))
    return result.scalar_one()


async def bulk_create(db: AsyncSession, rows: Iterable[dict]) -> list[Holiday]:
    holidays = [Holiday(**row) for row in rows]
    db.add_all(holidays)
    await db.flush()
    return holidays


async def list_holidays(db: AsyncSession, active_only: bool = False) -> list[Holiday]:
    """Holidays in calendar order."""
    query = select(Holiday).order_by(Holiday.month, Holiday.day)
    if active_only:
        query = query.where(Holiday.is_active.is_(True))
    result = await db.execute(query)
    return list(result.scalars().all())
