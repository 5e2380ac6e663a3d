"""
Subject <-> User Relationship Bookkeeping

The only place that changes both ends of a subject relationship:

- ``Subject.teacher_id``  <->  ``Teacher.assigned_subjects``
- ``Subject.students``    <->  ``Student.enrolled_subjects``

Functions mutate the subject in memory and issue the user-side array updates
in the same session. Nothing here commits; the calling service commits once
so both sides land together or not at all.

Archived subjects are absent from every user-side set, so changes to an
archived subject only touch the subject row; restore relinks whatever the
subject holds at that point.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from sqlalchemy.ext.asyncio import AsyncSession

from schoolhub.modules.subjects.models import Subject
from schoolhub.modules.users.repository import UserRepository

logger = logging.getLogger(__name__)


@dataclass
class RelationUpdate:
    """Outcome of one user-side update."""

    subject_id: str
    user_ids: list[str] = field(default_factory=list)
    users_updated: int = 0

    @property
    def complete(self) -> bool:
        return self.users_updated == len(self.user_ids)


def _report(update: RelationUpdate, action: str) -> RelationUpdate:
    if not update.complete:
        logger.warning(
            f"Incomplete {action} for subject {update.subject_id}: "
            f"{update.users_updated}/{len(update.user_ids)} user rows updated"
        )
    return update


async def set_teacher(
    db: AsyncSession, subject: Subject, new_teacher_id: str
) -> list[RelationUpdate]:
    """
    Make ``new_teacher_id`` the subject's teacher of record.

    The previous teacher (if any and different) loses the subject from their
    assigned set; the new teacher gains it.
    """
    if subject.is_archived:
        subject.teacher_id = str(new_teacher_id)
        return []

    updates: list[RelationUpdate] = []
    old_teacher_id = subject.teacher_id

    if old_teacher_id and str(old_teacher_id) != str(new_teacher_id):
        updates.append(await _pull_teacher(db, subject.id, old_teacher_id))

    subject.teacher_id = str(new_teacher_id)
    count = await UserRepository.add_assigned_subject(db, new_teacher_id, subject.id)
    updates.append(
        _report(RelationUpdate(subject.id, [str(new_teacher_id)], count), "teacher assignment")
    )
    return updates


async def clear_teacher(db: AsyncSession, subject: Subject) -> RelationUpdate | None:
    """Remove the teacher of record. Returns None when there was none."""
    old_teacher_id = subject.teacher_id
    if not old_teacher_id:
        return None

    subject.teacher_id = None
    if subject.is_archived:
        return RelationUpdate(subject.id)
    return await _pull_teacher(db, subject.id, old_teacher_id)


async def _pull_teacher(db: AsyncSession, subject_id: str, teacher_id: str) -> RelationUpdate:
    count = await UserRepository.remove_assigned_subject(db, teacher_id, subject_id)
    return _report(RelationUpdate(subject_id, [str(teacher_id)], count), "teacher removal")


async def enroll(db: AsyncSession, subject: Subject, student_id: str) -> RelationUpdate:
    """Append a student to the roster and add the subject to their enrolled set."""
    # Reassign so the ORM sees the ARRAY change
    subject.students = [*(subject.students or []), str(student_id)]
    if subject.is_archived:
        return RelationUpdate(subject.id)
    count = await UserRepository.add_enrolled_subject(db, [student_id], subject.id)
    return _report(RelationUpdate(subject.id, [str(student_id)], count), "enrollment")


async def unenroll(db: AsyncSession, subject: Subject, student_id: str) -> RelationUpdate:
    """Drop a student from the roster and the subject from their enrolled set."""
    subject.students = [sid for sid in subject.students or [] if str(sid) != str(student_id)]
    if subject.is_archived:
        return RelationUpdate(subject.id)
    count = await UserRepository.remove_enrolled_subject(db, [student_id], subject.id)
    return _report(RelationUpdate(subject.id, [str(student_id)], count), "unenrollment")


async def unlink_roster(db: AsyncSession, subject: Subject) -> list[RelationUpdate]:
    """
    Remove the subject from its teacher's and students' sets.

    The subject keeps its own ``teacher_id`` and ``students`` so a later
    restore can relink the same people.
    """
    updates: list[RelationUpdate] = []
    if subject.teacher_id:
        updates.append(await _pull_teacher(db, subject.id, subject.teacher_id))

    students = _roster(subject.students)
    if students:
        count = await UserRepository.remove_enrolled_subject(db, students, subject.id)
        updates.append(_report(RelationUpdate(subject.id, students, count), "roster unlink"))
    return updates


async def link_roster(db: AsyncSession, subject: Subject) -> list[RelationUpdate]:
    """Re-add the subject to its teacher's and students' sets."""
    updates: list[RelationUpdate] = []
    if subject.teacher_id:
        count = await UserRepository.add_assigned_subject(db, subject.teacher_id, subject.id)
        updates.append(
            _report(RelationUpdate(subject.id, [str(subject.teacher_id)], count), "teacher relink")
        )

    students = _roster(subject.students)
    if students:
        count = await UserRepository.add_enrolled_subject(db, students, subject.id)
        updates.append(_report(RelationUpdate(subject.id, students, count), "roster relink"))
    return updates


def _roster(students: Sequence[str] | None) -> list[str]:
    return [str(sid) for sid in students or []]
