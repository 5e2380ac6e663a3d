"""
Unit tests for UserRepository identifier lookup and reference set updates.
"""

from unittest.mock import MagicMock
from uuid import uuid4

import pytest

from schoolhub.modules.users.models import Student, Teacher, UserRole, UserStatus
from schoolhub.modules.users.repository import UserRepository, generate_user_code


class TestFindByIdentifier:
    @pytest.mark.asyncio
    async def test_id_match_returns_immediately(self, mock_db, result_of):
        teacher = MagicMock(spec=Teacher)
        mock_db.execute.side_effect = [result_of(teacher)]

        found = await UserRepository.find_by_identifier(mock_db, str(uuid4()), UserRole.TEACHER)

        assert found is teacher
        assert mock_db.execute.await_count == 1

    @pytest.mark.asyncio
    async def test_id_miss_falls_through_to_username_and_email(self, mock_db, result_of):
        student = MagicMock(spec=Student)
        mock_db.execute.side_effect = [result_of(None), result_of(student)]

        found = await UserRepository.find_by_identifier(mock_db, str(uuid4()), UserRole.STUDENT)

        assert found is student
        assert mock_db.execute.await_count == 2

    @pytest.mark.asyncio
    async def test_non_id_goes_straight_to_username_and_email(self, mock_db, result_of):
        mock_db.execute.side_effect = [result_of(None)]

        found = await UserRepository.find_by_identifier(mock_db, "jcruz", UserRole.STUDENT)

        assert found is None
        assert mock_db.execute.await_count == 1

    @pytest.mark.asyncio
    async def test_active_filter_is_part_of_the_query(self, mock_db, result_of):
        mock_db.execute.side_effect = [result_of(None), result_of(None)]

        await UserRepository.find_by_identifier(mock_db, "msantos", UserRole.TEACHER)
        await UserRepository.find_by_identifier(
            mock_db, "msantos", UserRole.TEACHER, require_active=False
        )

        active_sql = str(mock_db.execute.await_args_list[0].args[0])
        any_sql = str(mock_db.execute.await_args_list[1].args[0])
        assert "users.status =" in active_sql
        assert "users.status =" not in any_sql


class TestReferenceSets:
    @pytest.mark.asyncio
    async def test_add_enrolled_subject_reports_rowcount(self, mock_db, result_of):
        mock_db.execute.return_value = result_of(rowcount=2)

        count = await UserRepository.add_enrolled_subject(
            mock_db, [str(uuid4()), str(uuid4())], str(uuid4())
        )

        assert count == 2
        assert "array_append" in str(mock_db.execute.await_args.args[0])

    @pytest.mark.asyncio
    async def test_empty_student_list_skips_query(self, mock_db):
        assert await UserRepository.remove_enrolled_subject(mock_db, [], str(uuid4())) == 0
        mock_db.execute.assert_not_called()

    @pytest.mark.asyncio
    async def test_remove_assigned_subject(self, mock_db, result_of):
        mock_db.execute.return_value = result_of(rowcount=1)

        count = await UserRepository.remove_assigned_subject(mock_db, str(uuid4()), str(uuid4()))

        assert count == 1
        assert "array_remove" in str(mock_db.execute.await_args.args[0])


class TestCreate:
    @pytest.mark.asyncio
    async def test_builds_role_variant_and_lowercases_email(self, mock_db):
        user = await UserRepository.create(
            mock_db,
            role=UserRole.STUDENT,
            username="jcruz",
            email="Juan.Cruz@School.Test",
            password_hash="hashed",
            first_name="Juan",
            last_name="Cruz",
            status=UserStatus.ACTIVE,
        )

        assert isinstance(user, Student)
        assert user.email == "juan.cruz@school.test"
        assert user.full_name == "Juan Cruz"
        assert user.is_active
        mock_db.add.assert_called_once_with(user)


def test_generate_user_code_format():
    year, number = generate_user_code().split("-")
    assert len(year) == 4
    assert 100000 <= int(number) <= 999999
