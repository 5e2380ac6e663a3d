"""
Unit tests for single and bulk enrollment.

The repository and user-side updates are patched at their modules so the
real relations bookkeeping runs.
"""

from unittest.mock import AsyncMock, patch
from uuid import uuid4

import pytest

from schoolhub.modules.subjects import repository as subject_repository
from schoolhub.modules.subjects.enrollment import (
    REASON_ALREADY_ENROLLED,
    REASON_AT_CAPACITY,
    REASON_NOT_FOUND,
    AlreadyEnrolledError,
    NotEnrolledError,
    StudentNotFoundError,
    SubjectFullError,
    bulk_enroll_students,
    enroll_student,
    unenroll_student,
)
from schoolhub.modules.subjects.service import SubjectForbiddenError, SubjectServiceError
from schoolhub.modules.users.repository import UserRepository


def _returns_subject(db, subject):
    return subject


@pytest.fixture
def subject_store():
    """Patch subject lookups and saves on the repository module."""

    def _install(subject):
        return (
            patch.object(subject_repository, "get_by_id", AsyncMock(return_value=subject)),
            patch.object(subject_repository, "save", AsyncMock(side_effect=_returns_subject)),
        )

    return _install


class TestEnrollStudent:
    """Tests for enroll_student."""

    @pytest.mark.asyncio
    async def test_enroll_updates_both_sides(
        self, mock_db, admin_actor, make_subject, make_student, subject_store
    ):
        subject = make_subject(students=[])
        student = make_student()
        get_patch, save_patch = subject_store(subject)

        with (
            get_patch,
            save_patch,
            patch.object(UserRepository, "find_by_identifier", AsyncMock(return_value=student)),
            patch.object(UserRepository, "add_enrolled_subject", AsyncMock(return_value=1)) as add,
        ):
            result, enrolled = await enroll_student(mock_db, subject.id, "jcruz", admin_actor)

            assert enrolled is student
            assert result.students == [student.id]
            add.assert_awaited_once_with(mock_db, [student.id], subject.id)
            mock_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_full_subject(self, mock_db, admin_actor, make_subject, roster, subject_store):
        subject = make_subject(students=roster(30))
        get_patch, save_patch = subject_store(subject)

        with (
            get_patch,
            save_patch,
            patch.object(UserRepository, "find_by_identifier", AsyncMock()) as find,
        ):
            with pytest.raises(SubjectFullError) as exc_info:
                await enroll_student(mock_db, subject.id, "jcruz", admin_actor)

            assert "maximum capacity of 30 students" in exc_info.value.message
            find.assert_not_called()

    @pytest.mark.asyncio
    async def test_duplicate_enrollment(
        self, mock_db, admin_actor, make_subject, make_student, subject_store
    ):
        student = make_student()
        subject = make_subject(students=[student.id])
        get_patch, save_patch = subject_store(subject)

        with (
            get_patch,
            save_patch,
            patch.object(UserRepository, "find_by_identifier", AsyncMock(return_value=student)),
            patch.object(UserRepository, "add_enrolled_subject", AsyncMock()) as add,
        ):
            with pytest.raises(AlreadyEnrolledError):
                await enroll_student(mock_db, subject.id, student.id, admin_actor)

            assert subject.students == [student.id]
            add.assert_not_called()
            mock_db.commit.assert_not_called()

    @pytest.mark.asyncio
    async def test_inactive_or_unknown_student(
        self, mock_db, admin_actor, make_subject, subject_store
    ):
        subject = make_subject()
        get_patch, save_patch = subject_store(subject)

        with (
            get_patch,
            save_patch,
            patch.object(UserRepository, "find_by_identifier", AsyncMock(return_value=None)),
        ):
            with pytest.raises(StudentNotFoundError) as exc_info:
                await enroll_student(mock_db, subject.id, "nobody", admin_actor)

            assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_teacher_of_record_may_enroll(
        self, mock_db, teacher_actor, make_subject, make_student, subject_store
    ):
        subject = make_subject(teacher_id=teacher_actor.id)
        student = make_student()
        get_patch, save_patch = subject_store(subject)

        with (
            get_patch,
            save_patch,
            patch.object(UserRepository, "find_by_identifier", AsyncMock(return_value=student)),
            patch.object(UserRepository, "add_enrolled_subject", AsyncMock(return_value=1)),
        ):
            result, _ = await enroll_student(mock_db, subject.id, student.id, teacher_actor)

            assert result.has_student(student.id)

    @pytest.mark.asyncio
    async def test_other_teacher_may_not_enroll(
        self, mock_db, teacher_actor, make_subject, subject_store
    ):
        subject = make_subject(teacher_id=str(uuid4()))
        get_patch, save_patch = subject_store(subject)

        with get_patch, save_patch:
            with pytest.raises(SubjectForbiddenError):
                await enroll_student(mock_db, subject.id, "jcruz", teacher_actor)


class TestUnenrollStudent:
    """Tests for unenroll_student."""

    @pytest.mark.asyncio
    async def test_unenroll_updates_both_sides(
        self, mock_db, admin_actor, make_subject, make_student, roster, subject_store
    ):
        student = make_student()
        others = roster(2)
        subject = make_subject(students=[others[0], student.id, others[1]])
        get_patch, save_patch = subject_store(subject)

        with (
            get_patch,
            save_patch,
            patch.object(UserRepository, "find_by_identifier", AsyncMock(return_value=student)),
            patch.object(
                UserRepository, "remove_enrolled_subject", AsyncMock(return_value=1)
            ) as remove,
        ):
            result, _ = await unenroll_student(mock_db, subject.id, student.id, admin_actor)

            assert result.students == others
            remove.assert_awaited_once_with(mock_db, [student.id], subject.id)
            mock_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_student_not_on_roster(
        self, mock_db, admin_actor, make_subject, make_student, subject_store
    ):
        subject = make_subject(students=[str(uuid4())])
        get_patch, save_patch = subject_store(subject)

        with (
            get_patch,
            save_patch,
            patch.object(
                UserRepository, "find_by_identifier", AsyncMock(return_value=make_student())
            ),
        ):
            with pytest.raises(NotEnrolledError):
                await unenroll_student(mock_db, subject.id, "jcruz", admin_actor)


class TestBulkEnroll:
    """Tests for bulk_enroll_students."""

    @pytest.mark.asyncio
    async def test_fills_remaining_slots_then_reports_capacity(
        self, mock_db, admin_actor, make_subject, make_student, roster, subject_store
    ):
        subject = make_subject(students=roster(28))
        students = [make_student() for _ in range(5)]
        identifiers = [f"student{i}" for i in range(5)]
        get_patch, save_patch = subject_store(subject)

        with (
            get_patch,
            save_patch,
            patch.object(
                UserRepository, "find_by_identifier", AsyncMock(side_effect=students)
            ) as find,
            patch.object(UserRepository, "add_enrolled_subject", AsyncMock(return_value=1)),
        ):
            result = await bulk_enroll_students(mock_db, subject.id, identifiers, admin_actor)

            assert result.total_attempted == 5
            assert [e["student_id"] for e in result.enrolled] == [s.id for s in students[:2]]
            assert result.failed == [
                {"identifier": identifier, "reason": REASON_AT_CAPACITY}
                for identifier in identifiers[2:]
            ]
            # Capacity is checked before resolving, so only two lookups happen
            assert find.await_count == 2
            assert subject.student_count == 30
            assert result.current_capacity == "30/30"
            assert result.available_slots == 0
            assert result.message == (
                "Bulk enrollment completed. Successfully enrolled: 2, Failed: 3. "
                "Subject has reached maximum capacity of 30 students."
            )
            mock_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_reports_per_identifier_failures(
        self, mock_db, admin_actor, make_subject, make_student, subject_store
    ):
        existing = make_student()
        newcomer = make_student()
        subject = make_subject(students=[existing.id])
        get_patch, save_patch = subject_store(subject)

        with (
            get_patch,
            save_patch,
            patch.object(
                UserRepository,
                "find_by_identifier",
                AsyncMock(side_effect=[existing, None, newcomer, newcomer]),
            ),
            patch.object(UserRepository, "add_enrolled_subject", AsyncMock(return_value=1)),
        ):
            result = await bulk_enroll_students(
                mock_db, subject.id, ["existing", "ghost", "new", "new-again"], admin_actor
            )

            assert [e["student_id"] for e in result.enrolled] == [newcomer.id]
            assert result.failed == [
                {"identifier": "existing", "reason": REASON_ALREADY_ENROLLED},
                {"identifier": "ghost", "reason": REASON_NOT_FOUND},
                {"identifier": "new-again", "reason": REASON_ALREADY_ENROLLED},
            ]
            assert result.message == (
                "Bulk enrollment completed. Successfully enrolled: 1, Failed: 3"
            )
            assert subject.students == [existing.id, newcomer.id]

    @pytest.mark.asyncio
    async def test_nothing_enrolled_does_not_commit(
        self, mock_db, admin_actor, make_subject, subject_store
    ):
        subject = make_subject()
        get_patch, save_patch = subject_store(subject)

        with (
            get_patch,
            save_patch,
            patch.object(UserRepository, "find_by_identifier", AsyncMock(return_value=None)),
        ):
            result = await bulk_enroll_students(mock_db, subject.id, ["a", "b"], admin_actor)

            assert result.enrolled == []
            assert len(result.failed) == 2
            mock_db.commit.assert_not_called()

    @pytest.mark.asyncio
    async def test_store_error_aborts_batch_without_commit(
        self, mock_db, admin_actor, make_subject, make_student, subject_store
    ):
        subject = make_subject()
        students = [make_student(), make_student()]
        get_patch, save_patch = subject_store(subject)

        with (
            get_patch,
            save_patch as save,
            patch.object(UserRepository, "find_by_identifier", AsyncMock(side_effect=students)),
            patch.object(
                UserRepository,
                "add_enrolled_subject",
                AsyncMock(side_effect=[1, ConnectionError("connection lost")]),
            ),
        ):
            with pytest.raises(ConnectionError):
                await bulk_enroll_students(mock_db, subject.id, ["first", "second"], admin_actor)

            save.assert_not_called()
            mock_db.commit.assert_not_called()

    @pytest.mark.asyncio
    async def test_full_subject_is_rejected_up_front(
        self, mock_db, admin_actor, make_subject, roster, subject_store
    ):
        subject = make_subject(students=roster(30))
        get_patch, save_patch = subject_store(subject)

        with get_patch, save_patch:
            with pytest.raises(SubjectFullError) as exc_info:
                await bulk_enroll_students(mock_db, subject.id, ["a"], admin_actor)

            assert exc_info.value.message.endswith(
                "Please remove enrolled students before adding new ones."
            )

    @pytest.mark.asyncio
    async def test_empty_identifier_list(self, mock_db, admin_actor):
        with pytest.raises(SubjectServiceError) as exc_info:
            await bulk_enroll_students(mock_db, str(uuid4()), [], admin_actor)

        assert exc_info.value.error_code == "VALIDATION_ERROR"
