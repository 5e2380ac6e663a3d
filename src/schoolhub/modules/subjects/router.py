"""
Subjects Router

API endpoints for subjects, teacher assignment and enrollment.

Endpoints:
- POST   /subjects                                      - Create subject (Admin, Teacher)
- GET    /subjects                                      - List subjects
- GET    /subjects/{id}                                 - Get subject
- PUT    /subjects/{id}                                 - Update subject (Admin, owning Teacher)
- DELETE /subjects/{id}                                 - Archive subject (Admin, owning Teacher)
- PUT    /subjects/{id}/restore                         - Restore subject (Admin)
- DELETE /subjects/{id}/permanent                       - Permanently delete (Admin)
- PUT    /subjects/{subject_id}/assign-teacher          - Assign teacher (Admin)
- PUT    /subjects/{subject_id}/unassign-teacher        - Unassign teacher (Admin)
- PUT    /subjects/{subject_id}/enroll-student          - Enroll one student
- PUT    /subjects/{subject_id}/unenroll-student/{sid}  - Unenroll one student
- PUT    /subjects/{subject_id}/bulk-enroll-students    - Enroll many students

Security:
- All endpoints require a valid bearer token
- Role gates via require_roles; ownership checks in the service layer
- Rate limiting on bulk enrollment and permanent deletion
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from schoolhub.core.auth import CurrentUser, get_current_user, require_roles
from schoolhub.core.database import get_db
from schoolhub.core.rate_limit import limit_per_user
from schoolhub.modules.subjects import enrollment, service
from schoolhub.modules.subjects.models import Subject
from schoolhub.modules.subjects.schemas import (
    AssignTeacherRequest,
    BulkEnrollRequest,
    BulkEnrollResponse,
    EnrolledStudent,
    EnrollmentSummary,
    EnrollStudentRequest,
    FailedEnrollment,
    PageRef,
    Pagination,
    SubjectCreate,
    SubjectEnvelope,
    SubjectListResponse,
    SubjectResponse,
    SubjectUpdate,
)
from schoolhub.modules.subjects.service import SubjectServiceError
from schoolhub.modules.users.models import UserRole

logger = logging.getLogger(__name__)

router = APIRouter()

admin_only = require_roles(UserRole.ADMIN)
admin_or_teacher = require_roles(UserRole.ADMIN, UserRole.TEACHER)

# (limit, window_seconds) per user
RATE_LIMIT_BULK_ENROLL = (20, 60)
RATE_LIMIT_PERMANENT_DELETE = (10, 60)


# ============================================
# Helper Functions
# ============================================


def _handle_service_error(e: SubjectServiceError) -> None:
    """Convert service errors to HTTPExceptions."""
    if e.status_code >= 500:
        logger.error(f"Subject service error: {e.message}")
    else:
        logger.info(f"Subject request rejected ({e.error_code}): {e.message}")
    raise HTTPException(
        status_code=e.status_code,
        detail={
            "success": False,
            "error": e.error_code,
            "message": e.message,
        },
    )


def _to_response(subject: Subject) -> SubjectResponse:
    return SubjectResponse.model_validate(subject)


def _envelope(subject: Subject, message: str | None = None) -> SubjectEnvelope:
    return SubjectEnvelope(success=True, message=message, data=_to_response(subject))


# ============================================
# Lifecycle
# ============================================


@router.post(
    "",
    response_model=SubjectEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Create Subject",
)
async def create_subject(
    data: SubjectCreate,
    user: CurrentUser = Depends(admin_or_teacher),
    db: AsyncSession = Depends(get_db),
) -> SubjectEnvelope:
    """
    Create a subject. Teachers who omit ``teacher`` are assigned themselves.
    """
    try:
        subject = await service.create_subject(db, data, user)
    except SubjectServiceError as e:
        _handle_service_error(e)
    return _envelope(subject)


@router.get(
    "",
    response_model=SubjectListResponse,
    summary="List Subjects",
    description="""
List subjects with filtering, field selection, sorting and pagination.

**Parameters:**
- `archived`: `true` for archived subjects only; otherwise active subjects
- `teacher`: teacher id, username or email (ignored for Teacher callers)
- `select`: comma-separated fields; `id` is always returned
- `sort`: comma-separated fields, `-` prefix for descending. Default: `-created_at`
- `page` / `limit`: pagination. Default limit 25, max 100
- `field=value`, `field[gt|gte|lt|lte|in]=value`: column filters
""",
)
async def list_subjects(
    request: Request,
    archived: str | None = Query(None, description="'true' for archived subjects"),
    teacher: str | None = Query(None, description="Teacher id, username or email"),
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> SubjectListResponse:
    try:
        page = await service.list_subjects(
            db,
            request.query_params.multi_items(),
            user,
            archived=archived,
            teacher=teacher,
        )
    except SubjectServiceError as e:
        _handle_service_error(e)

    fields = set(page.fields)
    data = [
        _to_response(subject).model_dump(mode="json", include=fields) for subject in page.items
    ]
    pagination = Pagination(
        next=PageRef(page=page.page + 1, limit=page.limit) if page.has_next else None,
        prev=PageRef(page=page.page - 1, limit=page.limit) if page.has_prev else None,
    )
    return SubjectListResponse(
        success=True,
        count=len(data),
        total=page.total,
        pagination=pagination,
        data=data,
    )


@router.get("/{subject_id}", response_model=SubjectEnvelope, summary="Get Subject")
async def get_subject(
    subject_id: str,
    user: CurrentUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> SubjectEnvelope:
    try:
        subject = await service.get_subject(db, subject_id)
    except SubjectServiceError as e:
        _handle_service_error(e)
    return _envelope(subject)


@router.put("/{subject_id}", response_model=SubjectEnvelope, summary="Update Subject")
async def update_subject(
    subject_id: str,
    data: SubjectUpdate,
    user: CurrentUser = Depends(admin_or_teacher),
    db: AsyncSession = Depends(get_db),
) -> SubjectEnvelope:
    """Partial update. ``teacher`` of null, "" or "null" clears the teacher."""
    try:
        subject = await service.update_subject(db, subject_id, data, user)
    except SubjectServiceError as e:
        _handle_service_error(e)
    return _envelope(subject)


@router.delete("/{subject_id}", response_model=SubjectEnvelope, summary="Archive Subject")
async def archive_subject(
    subject_id: str,
    user: CurrentUser = Depends(admin_or_teacher),
    db: AsyncSession = Depends(get_db),
) -> SubjectEnvelope:
    try:
        subject = await service.archive_subject(db, subject_id, user)
    except SubjectServiceError as e:
        _handle_service_error(e)
    return _envelope(subject, "Subject archived successfully")


@router.put("/{subject_id}/restore", response_model=SubjectEnvelope, summary="Restore Subject")
async def restore_subject(
    subject_id: str,
    user: CurrentUser = Depends(admin_only),
    db: AsyncSession = Depends(get_db),
) -> SubjectEnvelope:
    try:
        subject = await service.restore_subject(db, subject_id, user)
    except SubjectServiceError as e:
        _handle_service_error(e)
    return _envelope(subject, "Subject restored successfully")


@router.delete(
    "/{subject_id}/permanent",
    summary="Permanently Delete Subject",
    dependencies=[Depends(limit_per_user("subject_permanent_delete", *RATE_LIMIT_PERMANENT_DELETE))],
)
async def permanently_delete_subject(
    subject_id: str,
    user: CurrentUser = Depends(admin_only),
    db: AsyncSession = Depends(get_db),
) -> dict:
    try:
        summary = await service.permanently_delete_subject(db, subject_id, user)
    except SubjectServiceError as e:
        _handle_service_error(e)
    return {
        "success": True,
        "message": "Subject permanently deleted",
        "data": {
            "id": summary.subject_id,
            "name": summary.subject_name,
            "activities_deleted": summary.activities_deleted,
            "grades_deleted": summary.grades_deleted,
        },
    }


# ============================================
# Teacher assignment
# ============================================


@router.put(
    "/{subject_id}/assign-teacher",
    response_model=SubjectEnvelope,
    summary="Assign Teacher",
)
async def assign_teacher(
    subject_id: str,
    data: AssignTeacherRequest,
    user: CurrentUser = Depends(admin_only),
    db: AsyncSession = Depends(get_db),
) -> SubjectEnvelope:
    try:
        subject, teacher = await service.assign_teacher(db, subject_id, data.teacher_identifier)
    except SubjectServiceError as e:
        _handle_service_error(e)
    return _envelope(
        subject,
        f"Teacher {teacher.first_name} {teacher.last_name} assigned to subject {subject.name}",
    )


@router.put(
    "/{subject_id}/unassign-teacher",
    response_model=SubjectEnvelope,
    summary="Unassign Teacher",
)
async def unassign_teacher(
    subject_id: str,
    user: CurrentUser = Depends(admin_only),
    db: AsyncSession = Depends(get_db),
) -> SubjectEnvelope:
    """
    Clear the teacher of record.

    A subject without a teacher is reported with ``success: false`` and
    HTTP 200 rather than as an error.
    """
    try:
        result = await service.unassign_teacher(db, subject_id)
    except SubjectServiceError as e:
        _handle_service_error(e)

    if result.former_teacher_id is None:
        return SubjectEnvelope(
            success=False,
            message=f"Subject {result.subject.name} does not have an assigned teacher to unassign.",
            data=_to_response(result.subject),
        )
    return _envelope(result.subject, f"Teacher unassigned from subject {result.subject.name}")


# ============================================
# Enrollment
# ============================================


@router.put(
    "/{subject_id}/enroll-student",
    response_model=SubjectEnvelope,
    summary="Enroll Student",
)
async def enroll_student(
    subject_id: str,
    data: EnrollStudentRequest,
    user: CurrentUser = Depends(admin_or_teacher),
    db: AsyncSession = Depends(get_db),
) -> SubjectEnvelope:
    try:
        subject, student = await enrollment.enroll_student(
            db, subject_id, data.student_identifier.strip(), user
        )
    except SubjectServiceError as e:
        _handle_service_error(e)
    return _envelope(
        subject, f"Student {student.full_name} enrolled in subject {subject.name}"
    )


@router.put(
    "/{subject_id}/unenroll-student/{student_identifier}",
    response_model=SubjectEnvelope,
    summary="Unenroll Student",
)
async def unenroll_student(
    subject_id: str,
    student_identifier: str,
    user: CurrentUser = Depends(admin_or_teacher),
    db: AsyncSession = Depends(get_db),
) -> SubjectEnvelope:
    try:
        subject, student = await enrollment.unenroll_student(
            db, subject_id, student_identifier, user
        )
    except SubjectServiceError as e:
        _handle_service_error(e)
    return _envelope(
        subject, f"Student {student.full_name} unenrolled from subject {subject.name}"
    )


@router.put(
    "/{subject_id}/bulk-enroll-students",
    response_model=BulkEnrollResponse,
    summary="Bulk Enroll Students",
    dependencies=[Depends(limit_per_user("subject_bulk_enroll", *RATE_LIMIT_BULK_ENROLL))],
)
async def bulk_enroll_students(
    subject_id: str,
    data: BulkEnrollRequest,
    user: CurrentUser = Depends(admin_or_teacher),
    db: AsyncSession = Depends(get_db),
) -> BulkEnrollResponse:
    """
    Enroll students one identifier at a time. Partial success is HTTP 200;
    per-identifier failures are listed in ``failed_enrollments``.
    """
    try:
        result = await enrollment.bulk_enroll_students(
            db, subject_id, [identifier.strip() for identifier in data.student_identifiers], user
        )
    except SubjectServiceError as e:
        _handle_service_error(e)

    return BulkEnrollResponse(
        success=True,
        message=result.message,
        data=_to_response(result.subject),
        enrollment_summary=EnrollmentSummary(
            total_attempted=result.total_attempted,
            successfully_enrolled=len(result.enrolled),
            failed=len(result.failed),
            current_capacity=result.current_capacity,
            available_slots=result.available_slots,
        ),
        successfully_enrolled=[EnrolledStudent(**item) for item in result.enrolled],
        failed_enrollments=[FailedEnrollment(**item) for item in result.failed],
    )
