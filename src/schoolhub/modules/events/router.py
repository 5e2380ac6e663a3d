"""
Events Router

Endpoints:
- GET    /events               - List events visible to the caller
- GET    /events/upcoming      - Next events starting today or later
- GET    /events/date-range    - Events overlapping a date window
- GET    /events/admin/stats   - Event counts (Admin)
- GET    /events/{id}          - Get one event
- POST   /events               - Create event (Admin)
- PUT    /events/{id}          - Update event (Admin)
- DELETE /events/{id}          - Delete event (Admin)
"""

import logging
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from schoolhub.core.auth import CurrentUser, get_current_user, require_roles
from schoolhub.core.database import get_db
from schoolhub.modules.events import service
from schoolhub.modules.events.models import (
    Event,
    EventPriority,
    EventStatus,
    EventType,
    TargetAudience,
)
from schoolhub.modules.events.schemas import (
    EventCreate,
    EventEnvelope,
    EventListResponse,
    EventOverview,
    EventPagination,
    EventResponse,
    EventStatsResponse,
    EventUpdate,
)
from schoolhub.modules.events.service import EventServiceError
from schoolhub.modules.users.models import UserRole

logger = logging.getLogger(__name__)

router = APIRouter()

admin_only = require_roles(UserRole.ADMIN)


def _handle_service_error(e: EventServiceError) -> None:
    """Convert service errors to HTTPExceptions."""
    raise HTTPException(
        status_code=e.status_code,
        detail={
            "success": False,
            "error": e.error_code,
            "message": e.message,
        },
    )


def _to_response(event: Event, today: datetime) -> EventResponse:
    response = EventResponse.model_validate(event)
    response.status = event.status_at(today)
    return response


@router.get("", response_model=EventListResponse, summary="List Events")
async def list_events(
    page: int = Query(1, ge=1),
    limit: int = Query(service.DEFAULT_PAGE_SIZE, ge=1, le=100),
    priority: EventPriority | None = Query(None),
    target_audience: TargetAudience | None = Query(None, description="Admin only"),
    event_type: EventType | None = Query(None),
    status: EventStatus | None = Query(None),
    search: str | None = Query(None, min_length=1, max_length=100),
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> EventListResponse:
    result = await service.list_events(
        db,
        user,
        page=page,
        limit=limit,
        priority=priority,
        target_audience=target_audience,
        event_type=event_type,
        status=status,
        search=search,
    )
    today = service.today_utc()
    return EventListResponse(
        count=len(result.items),
        pagination=EventPagination(
            current_page=result.page,
            total_pages=result.total_pages,
            total_events=result.total,
            has_next_page=result.page < result.total_pages,
            has_prev_page=result.page > 1,
        ),
        data=[_to_response(event, today) for event in result.items],
    )


@router.get("/upcoming", response_model=EventListResponse, summary="Upcoming Events")
async def upcoming_events(
    limit: int = Query(service.DEFAULT_UPCOMING_LIMIT, ge=1, le=100),
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> EventListResponse:
    events = await service.get_upcoming_events(db, user, limit=limit)
    today = service.today_utc()
    return EventListResponse(count=len(events), data=[_to_response(e, today) for e in events])


@router.get("/date-range", response_model=EventListResponse, summary="Events In Date Range")
async def events_in_range(
    start_date: datetime = Query(...),
    end_date: datetime = Query(...),
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> EventListResponse:
    try:
        events = await service.get_events_in_range(db, user, start_date, end_date)
    except EventServiceError as e:
        _handle_service_error(e)
    today = service.today_utc()
    return EventListResponse(count=len(events), data=[_to_response(e, today) for e in events])


@router.get("/admin/stats", response_model=EventStatsResponse, summary="Event Statistics")
async def event_stats(
    user: CurrentUser = Depends(admin_only),
    db: AsyncSession = Depends(get_db),
) -> EventStatsResponse:
    stats = await service.get_event_stats(db)
    return EventStatsResponse(
        overview=EventOverview(**stats["overview"]),
        events_by_type=stats["events_by_type"],
        events_by_audience=stats["events_by_audience"],
    )


@router.get("/{event_id}", response_model=EventEnvelope, summary="Get Event")
async def get_event(
    event_id: str,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> EventEnvelope:
    try:
        event = await service.get_event(db, event_id, user)
    except EventServiceError as e:
        _handle_service_error(e)
    return EventEnvelope(data=_to_response(event, service.today_utc()))


@router.post(
    "",
    response_model=EventEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Create Event",
)
async def create_event(
    data: EventCreate,
    user: CurrentUser = Depends(admin_only),
    db: AsyncSession = Depends(get_db),
) -> EventEnvelope:
    try:
        event = await service.create_event(db, data, user)
    except EventServiceError as e:
        _handle_service_error(e)
    return EventEnvelope(data=_to_response(event, service.today_utc()))


@router.put("/{event_id}", response_model=EventEnvelope, summary="Update Event")
async def update_event(
    event_id: str,
    data: EventUpdate,
    user: CurrentUser = Depends(admin_only),
    db: AsyncSession = Depends(get_db),
) -> EventEnvelope:
    try:
        event = await service.update_event(db, event_id, data, user)
    except EventServiceError as e:
        _handle_service_error(e)
    return EventEnvelope(data=_to_response(event, service.today_utc()))


@router.delete("/{event_id}", summary="Delete Event")
async def delete_event(
    event_id: str,
    user: CurrentUser = Depends(admin_only),
    db: AsyncSession = Depends(get_db),
) -> dict:
    try:
        await service.delete_event(db, event_id, user)
    except EventServiceError as e:
        _handle_service_error(e)
    return {"success": True, "message": "Event deleted successfully", "data": {}}
