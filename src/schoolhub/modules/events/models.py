"""
Event Models

Calendar events shown to students, teachers and admins. Holiday events are
generated by the holiday seeder; everything else is created by admins.
"""

from datetime import datetime
from enum import Enum

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, String, Text, text
from sqlalchemy.dialects.postgresql import ARRAY, ENUM, UUID
from sqlalchemy.orm import Mapped, mapped_column

from schoolhub.modules.shared import BaseModel


class EventPriority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class TargetAudience(str, Enum):
    ALL = "all"
    STUDENTS = "students"
    TEACHERS = "teachers"
    ADMINS = "admins"


class EventType(str, Enum):
    ACADEMIC = "academic"
    ADMINISTRATIVE = "administrative"
    HOLIDAY = "holiday"
    MEETING = "meeting"
    DEADLINE = "deadline"
    OTHER = "other"


class EventStatus(str, Enum):
    """Derived from the event dates, never stored."""

    UPCOMING = "upcoming"
    ONGOING = "ongoing"
    PAST = "past"


def _enum_values(enum_cls: type[Enum]) -> list[str]:
    return [member.value for member in enum_cls]


# Sort rank, high first
PRIORITY_RANK = {EventPriority.HIGH: 0, EventPriority.MEDIUM: 1, EventPriority.LOW: 2}


class Event(BaseModel):
    """Calendar event. Dates are stored as midnight UTC."""

    __tablename__ = "events"

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    header: Mapped[str] = mapped_column(String(300), nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    images: Mapped[list[str]] = mapped_column(
        ARRAY(Text), nullable=False, server_default=text("'{}'"), default=list
    )

    start_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    end_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    is_all_day: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    priority: Mapped[EventPriority] = mapped_column(
        ENUM(EventPriority, name="event_priority", values_callable=_enum_values),
        nullable=False,
        default=EventPriority.MEDIUM,
    )
    target_audience: Mapped[TargetAudience] = mapped_column(
        ENUM(TargetAudience, name="target_audience", values_callable=_enum_values),
        nullable=False,
        default=TargetAudience.ALL,
    )
    event_type: Mapped[EventType] = mapped_column(
        ENUM(EventType, name="event_type", values_callable=_enum_values),
        nullable=False,
        default=EventType.OTHER,
    )

    created_by: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    __table_args__ = (
        Index("ix_events_dates", "start_date", "end_date"),
        Index("ix_events_priority", "priority"),
        Index("ix_events_target_audience", "target_audience"),
        Index("ix_events_event_type", "event_type"),
    )

    def __repr__(self) -> str:
        return f"<Event(id={self.id}, title={self.title}, start={self.start_date})>"

    def status_at(self, now: datetime) -> EventStatus:
        if now < self.start_date:
            return EventStatus.UPCOMING
        if now <= self.end_date:
            return EventStatus.ONGOING
        return EventStatus.PAST
