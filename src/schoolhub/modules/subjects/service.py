"""
Subjects Service Layer

Business logic for the subject lifecycle and teacher assignment.

This module implements:
1. Lifecycle:
   - Create, update, get, list
   - Archive (unlinks the subject from its teacher and students)
   - Restore (relinks the same teacher and students)
   - Permanent delete (archived subjects only; cascades coursework)

2. Teacher Assignment:
   - Assign by id, username, or email with the 10-subject capacity check
   - Unassign, keeping the former teacher's assigned set in step

Every operation validates all rules before mutating anything, then writes
both ends of each relationship through ``relations`` and commits once.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from datetime import UTC, datetime

from sqlalchemy.ext.asyncio import AsyncSession

from schoolhub.core.auth import CurrentUser
from schoolhub.modules.coursework import repository as coursework_repository
from schoolhub.modules.shared import is_valid_id
from schoolhub.modules.subjects import relations, repository
from schoolhub.modules.subjects.models import MAX_SUBJECTS_PER_TEACHER, Subject
from schoolhub.modules.subjects.query import InvalidQueryError, SubjectQuery, parse_subject_query
from schoolhub.modules.subjects.schemas import SubjectCreate, SubjectUpdate
from schoolhub.modules.users.models import Teacher, UserRole
from schoolhub.modules.users.repository import UserRepository

logger = logging.getLogger(__name__)

# Update values that clear the teacher of record
_CLEAR_TEACHER_VALUES = frozenset({"", "null"})


class SubjectServiceError(Exception):
    """Base exception for subject service errors."""

    def __init__(self, message: str, error_code: str, status_code: int = 400):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        super().__init__(message)


class SubjectValidationError(SubjectServiceError):
    """Raised for request data that fails a business validation."""

    def __init__(self, message: str):
        super().__init__(message=message, error_code="VALIDATION_ERROR", status_code=400)


class InvalidSubjectIdError(SubjectServiceError):
    """Raised when a subject id is not a valid id."""

    def __init__(self, subject_id: str):
        super().__init__(
            message="Invalid subject ID format",
            error_code="INVALID_SUBJECT_ID",
            status_code=400,
        )


class SubjectNotFoundError(SubjectServiceError):
    """Raised when a subject does not exist."""

    def __init__(self, subject_id: str):
        super().__init__(
            message=f"Subject not found with ID {subject_id}",
            error_code="SUBJECT_NOT_FOUND",
            status_code=404,
        )


class TeacherNotFoundError(SubjectServiceError):
    """Raised when no active teacher matches an identifier."""

    def __init__(self, identifier: str):
        super().__init__(
            message=f"Active teacher not found with identifier: {identifier}",
            error_code="TEACHER_NOT_FOUND",
            status_code=404,
        )


class TeacherCapacityError(SubjectServiceError):
    """Raised when a teacher already has the maximum number of active subjects."""

    def __init__(self, teacher: Teacher):
        super().__init__(
            message=(
                f"{teacher.first_name} {teacher.last_name} has already reached the maximum "
                f"limit of {MAX_SUBJECTS_PER_TEACHER} subjects. Please choose a different "
                "teacher or ask them to delete an existing subject."
            ),
            error_code="TEACHER_AT_CAPACITY",
            status_code=400,
        )


class SubjectAlreadyArchivedError(SubjectServiceError):
    def __init__(self):
        super().__init__(
            message="Subject is already archived",
            error_code="SUBJECT_ALREADY_ARCHIVED",
            status_code=400,
        )


class SubjectNotArchivedError(SubjectServiceError):
    def __init__(self):
        super().__init__(
            message="Subject is not archived",
            error_code="SUBJECT_NOT_ARCHIVED",
            status_code=400,
        )


class SubjectMustBeArchivedError(SubjectServiceError):
    def __init__(self):
        super().__init__(
            message="Subject must be archived before permanent deletion",
            error_code="SUBJECT_NOT_ARCHIVED",
            status_code=400,
        )


class SubjectForbiddenError(SubjectServiceError):
    """Raised when a teacher acts on a subject they do not teach."""

    def __init__(self, actor: CurrentUser, action: str):
        super().__init__(
            message=f"You are not authorized to {action} this subject.",
            error_code="FORBIDDEN",
            status_code=403,
        )


@dataclass
class SubjectPage:
    """One page of a subject listing."""

    items: list[Subject]
    total: int
    page: int
    limit: int
    fields: tuple[str, ...]

    @property
    def has_next(self) -> bool:
        return self.page * self.limit < self.total

    @property
    def has_prev(self) -> bool:
        return self.page > 1


@dataclass
class UnassignResult:
    subject: Subject
    former_teacher_id: str | None = None


@dataclass
class DeletionSummary:
    subject_id: str
    subject_name: str
    activities_deleted: int = 0
    grades_deleted: int = 0
    students_unlinked: list[str] = field(default_factory=list)


# ============================================
# Shared checks
# ============================================


async def get_subject_or_raise(db: AsyncSession, subject_id: str) -> Subject:
    """
    Load a subject by id.

    Raises:
        InvalidSubjectIdError: Malformed id
        SubjectNotFoundError: No such subject
    """
    if not is_valid_id(subject_id):
        raise InvalidSubjectIdError(subject_id)

    subject = await repository.get_by_id(db, subject_id)
    if subject is None:
        raise SubjectNotFoundError(subject_id)
    return subject


def ensure_can_manage(subject: Subject, actor: CurrentUser, action: str) -> None:
    """Admins manage any subject; teachers only the ones they teach."""
    if actor.is_admin:
        return
    if actor.is_teacher and subject.teacher_id and str(subject.teacher_id) == str(actor.id):
        return
    logger.warning(f"User {actor.id} ({actor.role.value}) denied {action} on subject {subject.id}")
    raise SubjectForbiddenError(actor, action)


async def resolve_teacher(db: AsyncSession, identifier: str) -> Teacher:
    teacher = await UserRepository.find_by_identifier(db, identifier, UserRole.TEACHER)
    if teacher is None:
        raise TeacherNotFoundError(identifier)
    return teacher


async def check_teacher_capacity(db: AsyncSession, teacher: Teacher) -> None:
    """Reject a teacher who already has the maximum number of active subjects."""
    active = await repository.count_active_for_teacher(db, teacher.id)
    if active >= MAX_SUBJECTS_PER_TEACHER:
        logger.warning(f"Teacher {teacher.id} at capacity ({active}/{MAX_SUBJECTS_PER_TEACHER})")
        raise TeacherCapacityError(teacher)


async def _commit(db: AsyncSession, subject: Subject) -> Subject:
    subject = await repository.save(db, subject)
    await db.commit()
    return subject


# ============================================
# Lifecycle
# ============================================


async def create_subject(db: AsyncSession, data: SubjectCreate, actor: CurrentUser) -> Subject:
    """
    Create a subject.

    A teacher who names no teacher teaches the subject themselves. The
    assigned teacher must be active and below the subject limit.
    """
    identifier = data.teacher or (actor.id if actor.is_teacher else None)

    teacher = None
    if identifier:
        teacher = await resolve_teacher(db, identifier)
        await check_teacher_capacity(db, teacher)

    subject = await repository.create(
        db,
        name=data.name,
        school_year=data.school_year,
        description=data.description,
        grade_level=data.grade_level,
        section=data.section,
    )
    if teacher is not None:
        await relations.set_teacher(db, subject, teacher.id)

    subject = await _commit(db, subject)
    logger.info(f"Created subject {subject.id} ({subject.name}) by {actor.id}")
    return subject


async def update_subject(
    db: AsyncSession, subject_id: str, data: SubjectUpdate, actor: CurrentUser
) -> Subject:
    """
    Apply a partial update.

    ``teacher`` of None, "" or "null" (any case) clears the teacher of
    record; any other value is resolved and capacity-checked unless it is
    the current teacher.
    """
    subject = await get_subject_or_raise(db, subject_id)
    ensure_can_manage(subject, actor, "update")

    changes = data.model_dump(exclude_unset=True)
    teacher_value = changes.pop("teacher", ...)

    for required in ("name", "school_year"):
        if required in changes and changes[required] is None:
            raise SubjectValidationError(f"Please add a {required.replace('_', ' ')}")

    new_teacher = None
    clear = False
    if teacher_value is not ...:
        if teacher_value is None or teacher_value.strip().lower() in _CLEAR_TEACHER_VALUES:
            clear = True
        else:
            new_teacher = await resolve_teacher(db, teacher_value.strip())
            if str(new_teacher.id) != str(subject.teacher_id):
                await check_teacher_capacity(db, new_teacher)
            else:
                new_teacher = None

    for key, value in changes.items():
        setattr(subject, key, value)

    if clear:
        await relations.clear_teacher(db, subject)
    elif new_teacher is not None:
        await relations.set_teacher(db, subject, new_teacher.id)

    subject = await _commit(db, subject)
    logger.info(f"Updated subject {subject.id} by {actor.id}")
    return subject


async def archive_subject(db: AsyncSession, subject_id: str, actor: CurrentUser) -> Subject:
    """Archive a subject and unlink it from its teacher and students."""
    subject = await get_subject_or_raise(db, subject_id)
    ensure_can_manage(subject, actor, "archive")

    if subject.is_archived:
        raise SubjectAlreadyArchivedError()

    await relations.unlink_roster(db, subject)
    subject.is_archived = True
    subject.archived_at = datetime.now(UTC)
    subject.archived_by = str(actor.id)

    subject = await _commit(db, subject)
    logger.info(f"Archived subject {subject.id} by {actor.id}")
    return subject


async def restore_subject(db: AsyncSession, subject_id: str, actor: CurrentUser) -> Subject:
    """Restore an archived subject and relink its teacher and students."""
    subject = await get_subject_or_raise(db, subject_id)

    if not subject.is_archived:
        raise SubjectNotArchivedError()

    subject.is_archived = False
    subject.archived_at = None
    subject.archived_by = None
    await relations.link_roster(db, subject)

    subject = await _commit(db, subject)
    logger.info(f"Restored subject {subject.id} by {actor.id}")
    return subject


async def permanently_delete_subject(
    db: AsyncSession, subject_id: str, actor: CurrentUser
) -> DeletionSummary:
    """
    Delete an archived subject for good.

    Removes the subject from its teacher's and students' sets, deletes its
    grades and activities, then the subject itself.
    """
    subject = await get_subject_or_raise(db, subject_id)

    if not subject.is_archived:
        raise SubjectMustBeArchivedError()

    summary = DeletionSummary(
        subject_id=subject.id,
        subject_name=subject.name,
        students_unlinked=list(subject.students or []),
    )

    await relations.unlink_roster(db, subject)
    summary.activities_deleted, summary.grades_deleted = (
        await coursework_repository.delete_for_subject(db, subject.id)
    )
    await repository.delete(db, subject)
    await db.commit()

    logger.info(
        f"Permanently deleted subject {summary.subject_id} by {actor.id}: "
        f"{summary.activities_deleted} activities, {summary.grades_deleted} grades"
    )
    return summary


async def get_subject(db: AsyncSession, subject_id: str) -> Subject:
    return await get_subject_or_raise(db, subject_id)


async def list_subjects(
    db: AsyncSession,
    params: Iterable[tuple[str, str]],
    actor: CurrentUser,
    archived: str | None = None,
    teacher: str | None = None,
) -> SubjectPage:
    """
    List subjects with filtering, field selection, sorting and pagination.

    Teachers only ever see their own subjects; the ``teacher`` filter is
    ignored for them.
    """
    try:
        query: SubjectQuery = parse_subject_query(params)
    except InvalidQueryError as e:
        raise SubjectValidationError(str(e)) from e

    query.filters.append(Subject.is_archived.is_(archived == "true"))

    if actor.is_teacher:
        query.filters.append(Subject.teacher_id == str(actor.id))
    elif teacher:
        found = await UserRepository.find_by_identifier(
            db, teacher, UserRole.TEACHER, require_active=False
        )
        if found is None:
            return SubjectPage([], 0, query.page, query.limit, query.fields)
        query.filters.append(Subject.teacher_id == str(found.id))

    items, total = await repository.list_subjects(
        db,
        filters=query.filters,
        order_by=query.order_by,
        offset=query.offset,
        limit=query.limit,
    )
    return SubjectPage(items, total, query.page, query.limit, query.fields)


# ============================================
# Teacher assignment
# ============================================


async def assign_teacher(
    db: AsyncSession, subject_id: str, teacher_identifier: str
) -> tuple[Subject, Teacher]:
    """
    Make a teacher the subject's teacher of record.

    Reassigning the current teacher is a no-op that still succeeds.
    """
    subject = await get_subject_or_raise(db, subject_id)
    teacher = await resolve_teacher(db, teacher_identifier.strip())

    if str(subject.teacher_id) != str(teacher.id):
        await check_teacher_capacity(db, teacher)
        await relations.set_teacher(db, subject, teacher.id)
        subject = await _commit(db, subject)
        logger.info(f"Assigned teacher {teacher.id} to subject {subject.id}")

    return subject, teacher


async def unassign_teacher(db: AsyncSession, subject_id: str) -> UnassignResult:
    """Clear the teacher of record. ``former_teacher_id`` is None when there was none."""
    subject = await get_subject_or_raise(db, subject_id)

    former_teacher_id = subject.teacher_id
    if not former_teacher_id:
        return UnassignResult(subject=subject)

    await relations.clear_teacher(db, subject)
    subject = await _commit(db, subject)
    logger.info(f"Unassigned teacher {former_teacher_id} from subject {subject.id}")
    return UnassignResult(subject=subject, former_teacher_id=str(former_teacher_id))
