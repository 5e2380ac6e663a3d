"""
Coursework Repository
"""

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from .models import Activity, Grade


async def delete_for_subject(db: AsyncSession, subject_id: str) -> tuple[int, int]:
    """
    Delete every grade and activity that references a subject.

    Grades go first since they reference activities.

    Returns:
        (activities_deleted, grades_deleted)
    """
    grades = await db.execute(delete(Grade).where(Grade.subject_id == subject_id))
    activities = await db.execute(delete(Activity).where(Activity.subject_id == subject_id))
    return activities.rowcount, grades.rowcount
