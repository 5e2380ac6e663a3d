"""
Events Service Layer

Calendar event reads scoped by the caller's role, and admin writes with
date normalization to midnight UTC.
"""

import logging
import math
from dataclasses import dataclass
from datetime import UTC, datetime

from sqlalchemy.ext.asyncio import AsyncSession

from schoolhub.core.auth import CurrentUser
from schoolhub.modules.events import repository
from schoolhub.modules.events.models import (
    Event,
    EventPriority,
    EventStatus,
    EventType,
    TargetAudience,
)
from schoolhub.modules.events.schemas import EventCreate, EventUpdate
from schoolhub.modules.shared import is_valid_id
from schoolhub.modules.users.models import UserRole

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 10
DEFAULT_UPCOMING_LIMIT = 5

# Audiences each non-admin role may see
_ROLE_AUDIENCES: dict[UserRole, tuple[TargetAudience, ...]] = {
    UserRole.STUDENT: (TargetAudience.ALL, TargetAudience.STUDENTS),
    UserRole.TEACHER: (TargetAudience.ALL, TargetAudience.TEACHERS),
}


class EventServiceError(Exception):
    """Base exception for event service errors."""

    def __init__(self, message: str, error_code: str, status_code: int = 400):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        super().__init__(message)


class InvalidEventIdError(EventServiceError):
    def __init__(self, event_id: str):
        super().__init__(
            message=f"Invalid event ID format: {event_id}",
            error_code="INVALID_EVENT_ID",
            status_code=400,
        )


class EventNotFoundError(EventServiceError):
    def __init__(self, event_id: str):
        super().__init__(
            message=f"Event not found with ID: {event_id}",
            error_code="EVENT_NOT_FOUND",
            status_code=404,
        )


class EventForbiddenError(EventServiceError):
    def __init__(self):
        super().__init__(
            message="You are not authorized to view this event",
            error_code="FORBIDDEN",
            status_code=403,
        )


class InvalidDateRangeError(EventServiceError):
    def __init__(self, message: str = "Start date must be before or on the same day as end date"):
        super().__init__(message=message, error_code="INVALID_DATE_RANGE", status_code=400)


@dataclass
class EventPage:
    items: list[Event]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0


def normalize_date(value: datetime) -> datetime:
    """Midnight UTC of the given moment's UTC date. Naive values are taken as UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).replace(hour=0, minute=0, second=0, microsecond=0)


def today_utc(now: datetime | None = None) -> datetime:
    return normalize_date(now or datetime.now(UTC))


def audiences_for(actor: CurrentUser) -> tuple[TargetAudience, ...] | None:
    """Audiences visible to ``actor``; None means unrestricted."""
    return _ROLE_AUDIENCES.get(actor.role)


def can_view(event: Event, actor: CurrentUser) -> bool:
    audiences = audiences_for(actor)
    return audiences is None or event.target_audience in audiences


async def _get_event_or_raise(db: AsyncSession, event_id: str) -> Event:
    if not is_valid_id(event_id):
        raise InvalidEventIdError(event_id)
    event = await repository.get_by_id(db, event_id)
    if event is None:
        raise EventNotFoundError(event_id)
    return event


# ============================================
# Reads
# ============================================


async def list_events(
    db: AsyncSession,
    actor: CurrentUser,
    *,
    page: int = 1,
    limit: int = DEFAULT_PAGE_SIZE,
    priority: EventPriority | None = None,
    target_audience: TargetAudience | None = None,
    event_type: EventType | None = None,
    status: EventStatus | None = None,
    search: str | None = None,
    now: datetime | None = None,
) -> EventPage:
    """
    List events visible to ``actor``, highest priority first then by start date.

    ``target_audience`` only applies to admins; other roles always see their
    own audiences plus ``all``.
    """
    today = today_utc(now)

    audiences = audiences_for(actor)
    if audiences is None and target_audience is not None:
        audiences = (target_audience,)
    filters = repository.audience_filter(audiences)

    if priority is not None:
        filters.append(Event.priority == priority)
    if event_type is not None:
        filters.append(Event.event_type == event_type)
    if search:
        filters.append(repository.search_filter(search))

    if status == EventStatus.UPCOMING:
        filters.append(Event.start_date > today)
    elif status == EventStatus.ONGOING:
        filters.extend([Event.start_date <= today, Event.end_date >= today])
    elif status == EventStatus.PAST:
        filters.append(Event.end_date < today)

    items, total = await repository.list_events(
        db, filters=filters, offset=(page - 1) * limit, limit=limit
    )
    return EventPage(items, total, page, limit)


async def get_upcoming_events(
    db: AsyncSession,
    actor: CurrentUser,
    limit: int = DEFAULT_UPCOMING_LIMIT,
    now: datetime | None = None,
) -> list[Event]:
    """Events starting today or later."""
    today = today_utc(now)
    filters = repository.audience_filter(audiences_for(actor))
    filters.append(Event.start_date >= today)
    items, _ = await repository.list_events(db, filters=filters, limit=limit)
    return items


async def get_events_in_range(
    db: AsyncSession,
    actor: CurrentUser,
    start_date: datetime,
    end_date: datetime,
) -> list[Event]:
    """Events overlapping ``[start_date, end_date]``, ordered by start date."""
    start, end = normalize_date(start_date), normalize_date(end_date)
    if start > end:
        raise InvalidDateRangeError("Start date must be before or equal to end date")

    filters = repository.audience_filter(audiences_for(actor))
    filters.append(repository.overlap_filter(start, end))
    items, _ = await repository.list_events(db, filters=filters, by_priority=False)
    return items


async def get_event(db: AsyncSession, event_id: str, actor: CurrentUser) -> Event:
    event = await _get_event_or_raise(db, event_id)
    if not can_view(event, actor):
        logger.warning(f"User {actor.id} denied event {event_id} ({event.target_audience.value})")
        raise EventForbiddenError()
    return event


async def get_event_stats(db: AsyncSession, now: datetime | None = None) -> dict:
    return await repository.get_stats(db, today_utc(now))


# ============================================
# Admin writes
# ============================================


async def create_event(db: AsyncSession, data: EventCreate, actor: CurrentUser) -> Event:
    start, end = normalize_date(data.start_date), normalize_date(data.end_date)
    if start > end:
        raise InvalidDateRangeError()

    values = data.model_dump()
    values.update(start_date=start, end_date=end, created_by=str(actor.id))
    event = await repository.create(db, **values)
    await db.commit()

    logger.info(f"Created event {event.id} ({event.title}) by {actor.id}")
    return event


async def update_event(
    db: AsyncSession, event_id: str, data: EventUpdate, actor: CurrentUser
) -> Event:
    event = await _get_event_or_raise(db, event_id)
    changes = data.model_dump(exclude_unset=True)

    if "start_date" in changes or "end_date" in changes:
        start = normalize_date(changes.get("start_date") or event.start_date)
        end = normalize_date(changes.get("end_date") or event.end_date)
        if start > end:
            raise InvalidDateRangeError()
        if changes.get("start_date") is not None:
            changes["start_date"] = start
        if changes.get("end_date") is not None:
            changes["end_date"] = end

    for key, value in changes.items():
        if value is not None:
            setattr(event, key, value)

    event = await repository.save(db, event)
    await db.commit()

    logger.info(f"Updated event {event.id} by {actor.id}")
    return event


async def delete_event(db: AsyncSession, event_id: str, actor: CurrentUser) -> None:
    event = await _get_event_or_raise(db, event_id)
    await repository.delete(db, event)
    await db.commit()
    logger.info(f"Deleted event {event_id} by {actor.id}")
