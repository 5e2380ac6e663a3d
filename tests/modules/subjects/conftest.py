"""
Fixtures for subjects tests.
"""

from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from schoolhub.core.auth import CurrentUser
from schoolhub.modules.subjects.models import Subject
from schoolhub.modules.users.models import Student, Teacher, UserRole


@pytest.fixture
def mock_db():
    """Create a mock database session."""
    db = AsyncMock()
    db.commit = AsyncMock()
    db.rollback = AsyncMock()
    db.flush = AsyncMock()
    db.refresh = AsyncMock()
    db.get = AsyncMock()
    db.execute = AsyncMock()
    db.add = MagicMock()
    return db


@pytest.fixture
def admin_actor():
    return CurrentUser(id=str(uuid4()), role=UserRole.ADMIN, email="admin@school.test")


@pytest.fixture
def teacher_actor():
    return CurrentUser(id=str(uuid4()), role=UserRole.TEACHER, email="teacher@school.test")


@pytest.fixture
def make_subject():
    """Build an in-memory Subject; keyword arguments override the defaults."""

    def _make(**overrides) -> Subject:
        values = {
            "id": str(uuid4()),
            "name": "Mathematics 7",
            "school_year": "2025 - 2026",
            "description": None,
            "grade_level": "Grade 7",
            "section": "Rizal",
            "teacher_id": None,
            "students": [],
            "is_archived": False,
            "archived_at": None,
            "archived_by": None,
        }
        values.update(overrides)
        return Subject(**values)

    return _make


@pytest.fixture
def make_teacher():
    def _make(teacher_id: str | None = None, first_name: str = "Maria", last_name: str = "Santos"):
        teacher = MagicMock(spec=Teacher)
        teacher.id = teacher_id or str(uuid4())
        teacher.first_name = first_name
        teacher.last_name = last_name
        teacher.full_name = f"{first_name} {last_name}"
        teacher.email = f"{first_name.lower()}@school.test"
        teacher.role = UserRole.TEACHER
        return teacher

    return _make


@pytest.fixture
def make_student():
    def _make(student_id: str | None = None, first_name: str = "Juan", last_name: str = "Cruz"):
        student = MagicMock(spec=Student)
        student.id = student_id or str(uuid4())
        student.first_name = first_name
        student.last_name = last_name
        student.full_name = f"{first_name} {last_name}"
        student.email = f"{first_name.lower()}.{student.id[:8]}@school.test"
        student.role = UserRole.STUDENT
        return student

    return _make


def full_roster(size: int) -> list[str]:
    return [str(uuid4()) for _ in range(size)]


@pytest.fixture
def roster():
    """Factory for a list of ``size`` random student ids."""
    return full_roster
