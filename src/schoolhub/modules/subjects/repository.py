"""
Subjects Repository

Database operations for subjects. No business rules live here; callers
decide when to commit.

Design Principles:
- All queries are parameterized
- Writes flush but never commit, so a service operation commits once
- Timezone-aware datetime handling (UTC)
"""

from collections.abc import Sequence
from typing import Any

from sqlalchemy import ColumnElement, Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from .models import Subject


async def create(
    db: AsyncSession,
    *,
    name: str,
    school_year: str,
    description: str | None = None,
    grade_level: str | None = None,
    section: str | None = None,
    teacher_id: str | None = None,
) -> Subject:
    """Insert a new, non-archived subject with an empty roster."""
    subject = Subject(
        name=name,
        school_year=school_year,
        description=description,
        grade_level=grade_level,
        section=section,
        teacher_id=teacher_id,
        students=[],
        is_archived=False,
    )
    db.add(subject)
    await db.flush()
    await db.refresh(subject)
    return subject


async def get_by_id(db: AsyncSession, subject_id: str) -> Subject | None:
    """Get subject by id."""
    return await db.get(Subject, subject_id)


async def save(db: AsyncSession, subject: Subject) -> Subject:
    """Flush pending changes on a subject and reload server-side values."""
    await db.flush()
    await db.refresh(subject)
    return subject


async def delete(db: AsyncSession, subject: Subject) -> None:
    """Delete a subject row."""
    await db.delete(subject)
    await db.flush()


async def count_active_for_teacher(db: AsyncSession, teacher_id: str) -> int:
    """Count the non-archived subjects a teacher is teacher-of-record for."""
    result = await db.execute(
        select(func.count())
        .select_from(Subject)
        .where(Subject.teacher_id == str(teacher_id), Subject.is_archived.is_(False))
    )
    return result.scalar_one()


def _base_query(filters: Sequence[ColumnElement[bool]]) -> Select:
    return select(Subject).where(*filters)


async def list_subjects(
    db: AsyncSession,
    *,
    filters: Sequence[ColumnElement[bool]],
    order_by: Sequence[Any],
    offset: int,
    limit: int,
) -> tuple[list[Subject], int]:
    """
    Page through subjects.

    Returns:
        (subjects on this page, total matching subjects)
    """
    total_result = await db.execute(
        select(func.count()).select_from(_base_query(filters).subquery())
    )
    total = total_result.scalar_one()

    result = await db.execute(
        _base_query(filters).order_by(*order_by).offset(offset).limit(limit)
    )
    return list(result.scalars().all()), total
