"""
Event Schemas

Pydantic schemas for request validation and response serialization.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .models import EventPriority, EventStatus, EventType, TargetAudience


def _date_only_to_datetime(value: Any) -> Any:
    # "2026-06-12" -> "2026-06-12T00:00:00"
    if isinstance(value, str) and len(value.strip()) == 10:
        return f"{value.strip()}T00:00:00"
    return value


class EventCreate(BaseModel):
    """Request body for POST /events."""

    title: str = Field(..., min_length=1, max_length=200)
    header: str = Field(..., min_length=1, max_length=300)
    body: str = Field(..., min_length=1, max_length=5000)
    images: list[str] = Field(default_factory=list)
    start_date: datetime
    end_date: datetime
    is_all_day: bool = True
    priority: EventPriority = EventPriority.MEDIUM
    target_audience: TargetAudience = TargetAudience.ALL
    event_type: EventType = EventType.OTHER

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def accept_plain_dates(cls, value: Any) -> Any:
        return _date_only_to_datetime(value)


class EventUpdate(BaseModel):
    """Request body for PUT /events/{id}. Only supplied fields change."""

    title: str | None = Field(None, min_length=1, max_length=200)
    header: str | None = Field(None, min_length=1, max_length=300)
    body: str | None = Field(None, min_length=1, max_length=5000)
    images: list[str] | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    is_all_day: bool | None = None
    priority: EventPriority | None = None
    target_audience: TargetAudience | None = None
    event_type: EventType | None = None

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def accept_plain_dates(cls, value: Any) -> Any:
        return _date_only_to_datetime(value)


class EventResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    header: str
    body: str
    images: list[str] = Field(default_factory=list)
    start_date: datetime
    end_date: datetime
    is_all_day: bool
    priority: EventPriority
    target_audience: TargetAudience
    event_type: EventType
    created_by: str
    status: EventStatus | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class EventEnvelope(BaseModel):
    success: bool = True
    message: str | None = None
    data: EventResponse | None = None


class EventPagination(BaseModel):
    current_page: int
    total_pages: int
    total_events: int
    has_next_page: bool
    has_prev_page: bool


class EventListResponse(BaseModel):
    success: bool = True
    count: int
    pagination: EventPagination | None = None
    data: list[EventResponse]


class EventOverview(BaseModel):
    total_events: int = 0
    upcoming_events: int = 0
    ongoing_events: int = 0
    past_events: int = 0
    high_priority_events: int = 0


class EventStatsResponse(BaseModel):
    success: bool = True
    overview: EventOverview
    events_by_type: dict[str, int]
    events_by_audience: dict[str, int]
