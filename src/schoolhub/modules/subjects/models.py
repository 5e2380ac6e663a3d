"""
Subject Models

A subject is one class offering (name + grade level + section + school year)
with at most one teacher of record and an ordered roster of students.
"""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, String, Text, text
from sqlalchemy.dialects.postgresql import ARRAY, UUID
from sqlalchemy.orm import Mapped, mapped_column

from schoolhub.modules.shared import BaseModel

# Capacity ceilings
MAX_STUDENTS_PER_SUBJECT = 30
MAX_SUBJECTS_PER_TEACHER = 10


class Subject(BaseModel):
    """
    Subject record.

    ``teacher_id`` mirrors ``Teacher.assigned_subjects`` and ``students``
    mirrors ``Student.enrolled_subjects``; both sides are written together.
    Archiving keeps ``teacher_id`` and ``students`` so the subject can be
    restored with the same relationships.
    """

    __tablename__ = "subjects"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    grade_level: Mapped[str | None] = mapped_column(String(50), nullable=True)
    section: Mapped[str | None] = mapped_column(String(100), nullable=True)
    school_year: Mapped[str] = mapped_column(String(20), nullable=False)

    teacher_id: Mapped[str | None] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    students: Mapped[list[str]] = mapped_column(
        ARRAY(UUID(as_uuid=False)),
        nullable=False,
        server_default=text("'{}'"),
        default=list,
    )

    # Archive state
    is_archived: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    archived_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    archived_by: Mapped[str | None] = mapped_column(
        UUID(as_uuid=False),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )

    __table_args__ = (
        # One live offering per name/grade/section/year; archived copies don't count
        Index(
            "uq_subjects_offering_active",
            "name",
            "grade_level",
            "section",
            "school_year",
            unique=True,
            postgresql_where=text("is_archived = false"),
        ),
        Index("ix_subjects_teacher_archived", "teacher_id", "is_archived"),
    )

    def __repr__(self) -> str:
        return f"<Subject(id={self.id}, name={self.name}, archived={self.is_archived})>"

    @property
    def student_count(self) -> int:
        return len(self.students or [])

    @property
    def is_full(self) -> bool:
        return self.student_count >= MAX_STUDENTS_PER_SUBJECT

    def has_student(self, student_id: str) -> bool:
        return str(student_id) in {str(sid) for sid in self.students or []}
