"""
Coursework Models

Activities (assignments, quizzes) and the grades students receive for them.
Both reference a subject and are removed when that subject is permanently
deleted.
"""

import enum
from datetime import datetime

from sqlalchemy import Boolean, DateTime, Float, ForeignKey, Index, String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import ENUM, UUID
from sqlalchemy.orm import Mapped, mapped_column

from schoolhub.modules.shared import BaseModel


class Quarter(str, enum.Enum):
    """Grading periods of the school year."""

    FIRST = "First Quarter"
    SECOND = "Second Quarter"
    THIRD = "3rd Quarter"
    FOURTH = "4th Quarter"


_quarter_enum = ENUM(
    Quarter,
    name="quarter",
    values_callable=lambda e: [m.value for m in e],
)


class Activity(BaseModel):
    """A graded activity posted in a subject."""

    __tablename__ = "activities"

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    visible_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    deadline: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    quarter: Mapped[Quarter] = mapped_column(_quarter_enum, nullable=False, default=Quarter.FIRST)
    points: Mapped[float | None] = mapped_column(Float, nullable=True)
    allow_late_submissions: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    attachment_path: Mapped[str | None] = mapped_column(Text, nullable=True)

    subject_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("subjects.id"),
        nullable=False,
        index=True,
    )
    created_by: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )


class Grade(BaseModel):
    """A student's score on one activity."""

    __tablename__ = "grades"

    student_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    activity_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("activities.id"),
        nullable=False,
    )
    subject_id: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("subjects.id"),
        nullable=False,
    )
    quarter: Mapped[Quarter] = mapped_column(_quarter_enum, nullable=False)
    score: Mapped[float] = mapped_column(Float, nullable=False)
    bonus_points: Mapped[float | None] = mapped_column(Float, nullable=True)
    comments: Mapped[str | None] = mapped_column(Text, nullable=True)
    graded_by: Mapped[str] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    __table_args__ = (
        UniqueConstraint("student_id", "activity_id", name="uq_grades_student_activity"),
        Index("ix_grades_subject_id", "subject_id"),
    )

    @property
    def total_score(self) -> float:
        return self.score + (self.bonus_points or 0)
