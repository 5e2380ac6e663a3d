"""
Enrollment Service

Single and bulk student enrollment with the 30-student capacity limit.

Only an Admin or the subject's teacher of record may change its roster.
Single operations check every rule before mutating; bulk enrollment is the
one path that reports partial success.
"""

import logging
from dataclasses import dataclass, field

from sqlalchemy.ext.asyncio import AsyncSession

from schoolhub.core.auth import CurrentUser
from schoolhub.modules.subjects import relations, repository
from schoolhub.modules.subjects.models import MAX_STUDENTS_PER_SUBJECT, Subject
from schoolhub.modules.subjects.service import (
    SubjectServiceError,
    ensure_can_manage,
    get_subject_or_raise,
)
from schoolhub.modules.users.models import Student, UserRole
from schoolhub.modules.users.repository import UserRepository

logger = logging.getLogger(__name__)

# Failure reasons reported per identifier by bulk enrollment
REASON_AT_CAPACITY = f"Subject has reached maximum capacity of {MAX_STUDENTS_PER_SUBJECT} students"
REASON_NOT_FOUND = "Student not found or not active"
REASON_ALREADY_ENROLLED = "Student already enrolled"


class SubjectFullError(SubjectServiceError):
    def __init__(self, message: str | None = None):
        super().__init__(
            message=message
            or (
                f"Subject has reached maximum capacity of {MAX_STUDENTS_PER_SUBJECT} students. "
                "Please remove a student before enrolling a new one."
            ),
            error_code="SUBJECT_AT_CAPACITY",
            status_code=400,
        )


class StudentNotFoundError(SubjectServiceError):
    def __init__(self, identifier: str):
        super().__init__(
            message=f"Active student not found with identifier: {identifier}",
            error_code="STUDENT_NOT_FOUND",
            status_code=404,
        )


class AlreadyEnrolledError(SubjectServiceError):
    def __init__(self):
        super().__init__(
            message="Student is already enrolled in this subject",
            error_code="ALREADY_ENROLLED",
            status_code=400,
        )


class NotEnrolledError(SubjectServiceError):
    def __init__(self):
        super().__init__(
            message="Student is not enrolled in this subject",
            error_code="NOT_ENROLLED",
            status_code=400,
        )


@dataclass
class BulkEnrollmentResult:
    subject: Subject
    total_attempted: int
    enrolled: list[dict[str, str]] = field(default_factory=list)
    failed: list[dict[str, str]] = field(default_factory=list)

    @property
    def current_capacity(self) -> str:
        return f"{self.subject.student_count}/{MAX_STUDENTS_PER_SUBJECT}"

    @property
    def available_slots(self) -> int:
        return MAX_STUDENTS_PER_SUBJECT - self.subject.student_count

    @property
    def message(self) -> str:
        message = f"Bulk enrollment completed. Successfully enrolled: {len(self.enrolled)}"
        if self.failed:
            message += f", Failed: {len(self.failed)}"
        if self.enrolled and self.subject.is_full:
            message += f". Subject has reached maximum capacity of {MAX_STUDENTS_PER_SUBJECT} students."
        return message


async def _resolve_student(db: AsyncSession, identifier: str) -> Student | None:
    return await UserRepository.find_by_identifier(db, identifier, UserRole.STUDENT)


async def enroll_student(
    db: AsyncSession, subject_id: str, student_identifier: str, actor: CurrentUser
) -> tuple[Subject, Student]:
    """Enroll one student."""
    subject = await get_subject_or_raise(db, subject_id)
    ensure_can_manage(subject, actor, "enroll students in")

    if subject.is_full:
        raise SubjectFullError()

    student = await _resolve_student(db, student_identifier)
    if student is None:
        raise StudentNotFoundError(student_identifier)

    if subject.has_student(student.id):
        raise AlreadyEnrolledError()

    await relations.enroll(db, subject, student.id)
    subject = await repository.save(db, subject)
    await db.commit()

    logger.info(f"Enrolled student {student.id} in subject {subject.id}")
    return subject, student


async def unenroll_student(
    db: AsyncSession, subject_id: str, student_identifier: str, actor: CurrentUser
) -> tuple[Subject, Student]:
    """Remove one student from a subject."""
    subject = await get_subject_or_raise(db, subject_id)
    ensure_can_manage(subject, actor, "unenroll students from")

    student = await _resolve_student(db, student_identifier)
    if student is None:
        raise StudentNotFoundError(student_identifier)

    if not subject.has_student(student.id):
        raise NotEnrolledError()

    await relations.unenroll(db, subject, student.id)
    subject = await repository.save(db, subject)
    await db.commit()

    logger.info(f"Unenrolled student {student.id} from subject {subject.id}")
    return subject, student


async def bulk_enroll_students(
    db: AsyncSession, subject_id: str, identifiers: list[str], actor: CurrentUser
) -> BulkEnrollmentResult:
    """
    Enroll many students, reporting a result per identifier.

    Identifiers are processed in order. The capacity check comes first on
    every iteration, so once the subject fills up every remaining
    identifier fails with the capacity reason without being resolved.

    Only business failures are reported per identifier. A store error
    aborts the whole batch before the commit, so the request session rolls
    back and no student from the batch stays enrolled.
    """
    if not identifiers:
        raise SubjectServiceError(
            message="Please provide an array of student identifiers",
            error_code="VALIDATION_ERROR",
        )

    subject = await get_subject_or_raise(db, subject_id)
    ensure_can_manage(subject, actor, "enroll students in")

    if subject.is_full:
        raise SubjectFullError(
            f"Subject has reached maximum capacity of {MAX_STUDENTS_PER_SUBJECT} students. "
            "Please remove enrolled students before adding new ones."
        )

    result = BulkEnrollmentResult(subject=subject, total_attempted=len(identifiers))
    starting_count = subject.student_count

    for identifier in identifiers:
        if starting_count + len(result.enrolled) >= MAX_STUDENTS_PER_SUBJECT:
            result.failed.append({"identifier": identifier, "reason": REASON_AT_CAPACITY})
            continue

        student = await _resolve_student(db, identifier)
        if student is None:
            result.failed.append({"identifier": identifier, "reason": REASON_NOT_FOUND})
            continue

        if subject.has_student(student.id):
            result.failed.append({"identifier": identifier, "reason": REASON_ALREADY_ENROLLED})
            continue

        await relations.enroll(db, subject, student.id)
        result.enrolled.append(
            {"student_id": str(student.id), "name": student.full_name, "email": student.email}
        )

    if result.enrolled:
        result.subject = await repository.save(db, subject)
        await db.commit()

    logger.info(
        f"Bulk enrollment for subject {subject.id}: "
        f"{len(result.enrolled)} enrolled, {len(result.failed)} failed"
    )
    return result
