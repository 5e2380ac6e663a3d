"""
Events Repository

Database operations for calendar events.
"""

from collections.abc import Sequence
from datetime import datetime
from typing import Any

from sqlalchemy import ColumnElement, and_, case, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import PRIORITY_RANK, Event, EventPriority, EventType, TargetAudience

_priority_order = case(
    dict(PRIORITY_RANK),
    value=Event.priority,
)


async def create(db: AsyncSession, **values: Any) -> Event:
    """Insert an event and flush."""
    event = Event(**values)
    db.add(event)
    await db.flush()
    await db.refresh(event)
    return event


async def get_by_id(db: AsyncSession, event_id: str) -> Event | None:
    return await db.get(Event, event_id)


async def save(db: AsyncSession, event: Event) -> Event:
    await db.flush()
    await db.refresh(event)
    return event


async def delete(db: AsyncSession, event: Event) -> None:
    await db.delete(event)
    await db.flush()


async def holiday_event_exists(
    db: AsyncSession, title: str, start_date: datetime, end_date: datetime
) -> bool:
    """Check for a holiday event with this exact title and dates."""
    result = await db.execute(
        select(Event.id)
        .where(
            Event.title == title,
            Event.start_date == start_date,
            Event.end_date == end_date,
            Event.event_type == EventType.HOLIDAY,
        )
        .limit(1)
    )
    return result.scalar_one_or_none() is not None


def audience_filter(audiences: Sequence[TargetAudience] | None) -> list[ColumnElement[bool]]:
    if not audiences:
        return []
    return [Event.target_audience.in_(list(audiences))]


def search_filter(term: str) -> ColumnElement[bool]:
    """Case-insensitive substring match; ``%`` and ``_`` in ``term`` match literally."""
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    pattern = f"%{escaped}%"
    return or_(
        *(column.ilike(pattern, escape="\\") for column in (Event.title, Event.header, Event.body))
    )


def overlap_filter(start: datetime, end: datetime) -> ColumnElement[bool]:
    """Events that start in, end in, or span the ``[start, end]`` window."""
    return or_(
        and_(Event.start_date >= start, Event.start_date <= end),
        and_(Event.end_date >= start, Event.end_date <= end),
        and_(Event.start_date <= start, Event.end_date >= end),
    )


async def list_events(
    db: AsyncSession,
    *,
    filters: Sequence[ColumnElement[bool]],
    offset: int = 0,
    limit: int | None = None,
    by_priority: bool = True,
) -> tuple[list[Event], int]:
    """
    Query events.

    Returns:
        (events, total matching events)
    """
    count_result = await db.execute(select(func.count()).select_from(Event).where(*filters))
    total = count_result.scalar_one()

    order_by = [_priority_order, Event.start_date] if by_priority else [Event.start_date]
    query = select(Event).where(*filters).order_by(*order_by).offset(offset)
    if limit is not None:
        query = query.limit(limit)

    result = await db.execute(query)
    return list(result.scalars().all()), total


async def get_stats(db: AsyncSession, today: datetime) -> dict[str, Any]:
    """Aggregate event counts for the admin dashboard."""
    overview_result = await db.execute(
        select(
            func.count().label("total_events"),
            func.count().filter(Event.start_date >= today).label("upcoming_events"),
            func.count()
            .filter(Event.start_date <= today, Event.end_date >= today)
            .label("ongoing_events"),
            func.count().filter(Event.end_date < today).label("past_events"),
            func.count().filter(Event.priority == EventPriority.HIGH).label("high_priority_events"),
        ).select_from(Event)
    )
    overview = dict(overview_result.one()._mapping)

    by_type = await db.execute(select(Event.event_type, func.count()).group_by(Event.event_type))
    by_audience = await db.execute(
        select(Event.target_audience, func.count()).group_by(Event.target_audience)
    )

    return {
        "overview": overview,
        "events_by_type": {row[0].value: row[1] for row in by_type.all()},
        "events_by_audience": {row[0].value: row[1] for row in by_audience.all()},
    }
