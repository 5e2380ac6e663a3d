"""
Subject Schemas

Pydantic schemas for request validation and response serialization.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _strip(value: Any) -> Any:
    return value.strip() if isinstance(value, str) else value


class SubjectCreate(BaseModel):
    """Request body for POST /subjects."""

    name: str = Field(..., min_length=1, max_length=200)
    school_year: str = Field(..., min_length=1, max_length=20, examples=["2025 - 2026"])
    description: str | None = None
    grade_level: str | None = Field(None, max_length=50)
    section: str | None = Field(None, max_length=100)
    teacher: str | None = Field(
        None,
        description="Teacher id, username, or email. Teachers who omit it teach the subject themselves.",
    )

    @field_validator("name", "school_year", "grade_level", "section", mode="before")
    @classmethod
    def strip_text(cls, value: Any) -> Any:
        return _strip(value)


class SubjectUpdate(BaseModel):
    """
    Request body for PUT /subjects/{id}.

    Only supplied fields change. ``teacher`` set to null, "" or "null"
    clears the teacher of record.
    """

    name: str | None = Field(None, min_length=1, max_length=200)
    school_year: str | None = Field(None, min_length=1, max_length=20)
    description: str | None = None
    grade_level: str | None = Field(None, max_length=50)
    section: str | None = Field(None, max_length=100)
    teacher: str | None = None

    @field_validator("name", "school_year", "grade_level", "section", mode="before")
    @classmethod
    def strip_text(cls, value: Any) -> Any:
        return _strip(value)


class AssignTeacherRequest(BaseModel):
    """Request body for PUT /subjects/{id}/assign-teacher."""

    teacher_identifier: str = Field(..., min_length=1)


class EnrollStudentRequest(BaseModel):
    """Request body for PUT /subjects/{id}/enroll-student."""

    student_identifier: str = Field(..., min_length=1)


class BulkEnrollRequest(BaseModel):
    """Request body for PUT /subjects/{id}/bulk-enroll-students."""

    student_identifiers: list[str] = Field(..., min_length=1)


class SubjectResponse(BaseModel):
    """Serialized subject."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: str | None = None
    grade_level: str | None = None
    section: str | None = None
    school_year: str
    teacher_id: str | None = None
    students: list[str] = Field(default_factory=list)
    student_count: int = 0
    is_archived: bool = False
    archived_at: datetime | None = None
    archived_by: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class SubjectEnvelope(BaseModel):
    """Standard single-subject response."""

    success: bool = True
    message: str | None = None
    data: SubjectResponse | None = None


class PageRef(BaseModel):
    page: int
    limit: int


class Pagination(BaseModel):
    next: PageRef | None = None
    prev: PageRef | None = None


class SubjectListResponse(BaseModel):
    """Paginated subject list. ``data`` items honour the ``select`` parameter."""

    success: bool = True
    count: int
    total: int
    pagination: Pagination
    data: list[dict[str, Any]]


class EnrolledStudent(BaseModel):
    student_id: str
    name: str
    email: str


class FailedEnrollment(BaseModel):
    identifier: str
    reason: str


class EnrollmentSummary(BaseModel):
    total_attempted: int
    successfully_enrolled: int
    failed: int
    current_capacity: str
    available_slots: int


class BulkEnrollResponse(BaseModel):
    """Response for bulk enrollment. Partial success is still success."""

    success: bool = True
    message: str
    data: SubjectResponse
    enrollment_summary: EnrollmentSummary
    successfully_enrolled: list[EnrolledStudent]
    failed_enrollments: list[FailedEnrollment]
