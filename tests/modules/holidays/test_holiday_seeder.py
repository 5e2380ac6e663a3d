"""
Unit tests for the holiday seeder and its scheduled jobs.

These tests cover:
- One-time seeding of the holiday calendar
- Per-year event generation (idempotent, skips impossible dates)
- Multi-year reconciliation with per-year failure isolation
- System author fallback
- Job registration
"""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from schoolhub.modules.events.models import EventPriority, EventType, TargetAudience
from schoolhub.modules.holidays.data import (
    DEFAULT_HOLIDAY_MESSAGE,
    HOLIDAY_EVENT_HEADER,
    PHILIPPINE_HOLIDAYS,
    holiday_message,
)
from schoolhub.modules.holidays.jobs import (
    JOB_ID_ANNUAL_GENERATION,
    JOB_ID_MONTHLY_CHECK,
    register_holiday_jobs,
)
from schoolhub.modules.holidays.models import HolidayType
from schoolhub.modules.holidays.seeder import (
    SYSTEM_ADMIN_CODE,
    generate_holiday_events_for_year,
    get_system_author,
    initialize_holidays,
    reconcile_holiday_calendar,
)
from schoolhub.modules.users.models import UserRole, UserStatus

SEEDER = "schoolhub.modules.holidays.seeder"


class TestHolidayData:
    def test_calendar_has_twelve_fixed_dates(self):
        assert len(PHILIPPINE_HOLIDAYS) == 12
        assert {(h["month"], h["day"]) for h in PHILIPPINE_HOLIDAYS} >= {(1, 1), (12, 25)}

    def test_known_holiday_has_its_own_message(self):
        assert holiday_message("Christmas Day") != DEFAULT_HOLIDAY_MESSAGE

    def test_unknown_holiday_uses_default_message(self):
        assert holiday_message("Founders' Day") == DEFAULT_HOLIDAY_MESSAGE


class TestInitializeHolidays:
    @pytest.mark.asyncio
    async def test_already_seeded(self, mock_db):
        with patch(f"{SEEDER}.repository") as mock_repo:
            mock_repo.count = AsyncMock(return_value=12)
            mock_repo.bulk_create = AsyncMock()

            assert await initialize_holidays(mock_db) == 0
            mock_repo.bulk_create.assert_not_called()
            mock_db.commit.assert_not_called()

    @pytest.mark.asyncio
    async def test_seeds_empty_table(self, mock_db):
        with patch(f"{SEEDER}.repository") as mock_repo:
            mock_repo.count = AsyncMock(return_value=0)
            mock_repo.bulk_create = AsyncMock(return_value=[MagicMock()] * 12)

            assert await initialize_holidays(mock_db) == 12
            mock_repo.bulk_create.assert_awaited_once_with(mock_db, PHILIPPINE_HOLIDAYS)
            mock_db.commit.assert_awaited_once()


class TestGenerateHolidayEvents:
    @pytest.mark.asyncio
    async def test_creates_missing_events_only(self, mock_db, make_holiday, system_admin):
        holidays = [
            make_holiday("Independence Day", 6, 12, HolidayType.REGULAR),
            make_holiday("Ninoy Aquino Day", 8, 21, HolidayType.SPECIAL),
            make_holiday("Christmas Day", 12, 25, HolidayType.REGULAR),
        ]

        with (
            patch(f"{SEEDER}.repository") as mock_repo,
            patch(f"{SEEDER}.event_repository") as mock_events,
            patch(f"{SEEDER}.UserRepository") as mock_users,
        ):
            mock_repo.list_holidays = AsyncMock(return_value=holidays)
            mock_users.get_first_admin = AsyncMock(return_value=system_admin)
            # Christmas already exists
            mock_events.holiday_event_exists = AsyncMock(side_effect=[False, False, True])
            mock_events.create = AsyncMock(side_effect=lambda db, **values: values)

            created = await generate_holiday_events_for_year(mock_db, 2027)

            assert [event["title"] for event in created] == [
                "Independence Day",
                "Ninoy Aquino Day",
            ]
            independence, ninoy = created
            assert independence["start_date"] == datetime(2027, 6, 12, tzinfo=UTC)
            assert independence["end_date"] == independence["start_date"]
            assert independence["priority"] == EventPriority.HIGH
            assert ninoy["priority"] == EventPriority.MEDIUM
            assert independence["header"] == HOLIDAY_EVENT_HEADER
            assert independence["event_type"] == EventType.HOLIDAY
            assert independence["target_audience"] == TargetAudience.ALL
            assert independence["is_all_day"] is True
            assert independence["created_by"] == system_admin.id
            mock_repo.list_holidays.assert_awaited_once_with(mock_db, active_only=True)
            mock_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_second_run_creates_nothing(self, mock_db, make_holiday, system_admin):
        holidays = [make_holiday("Labor Day", 5, 1), make_holiday("Rizal Day", 12, 30)]

        with (
            patch(f"{SEEDER}.repository") as mock_repo,
            patch(f"{SEEDER}.event_repository") as mock_events,
            patch(f"{SEEDER}.UserRepository") as mock_users,
        ):
            mock_repo.list_holidays = AsyncMock(return_value=holidays)
            mock_users.get_first_admin = AsyncMock(return_value=system_admin)
            mock_events.holiday_event_exists = AsyncMock(return_value=True)
            mock_events.create = AsyncMock()

            assert await generate_holiday_events_for_year(mock_db, 2027) == []
            mock_events.create.assert_not_called()

    @pytest.mark.asyncio
    async def test_impossible_date_is_skipped(self, mock_db, make_holiday, system_admin):
        holidays = [make_holiday("Leap Day", 2, 29), make_holiday("Labor Day", 5, 1)]

        with (
            patch(f"{SEEDER}.repository") as mock_repo,
            patch(f"{SEEDER}.event_repository") as mock_events,
            patch(f"{SEEDER}.UserRepository") as mock_users,
        ):
            mock_repo.list_holidays = AsyncMock(return_value=holidays)
            mock_users.get_first_admin = AsyncMock(return_value=system_admin)
            mock_events.holiday_event_exists = AsyncMock(return_value=False)
            mock_events.create = AsyncMock(side_effect=lambda db, **values: values)

            created = await generate_holiday_events_for_year(mock_db, 2027)

            assert [event["title"] for event in created] == ["Labor Day"]
            mock_events.holiday_event_exists.assert_awaited_once()


class TestReconcileHolidayCalendar:
    @pytest.mark.asyncio
    async def test_covers_current_and_following_years(self, mock_db):
        with patch(
            f"{SEEDER}.generate_holiday_events_for_year",
            AsyncMock(side_effect=[[1, 2], [], [3]]),
        ) as generate:
            summary = await reconcile_holiday_calendar(
                mock_db, datetime(2026, 10, 1, tzinfo=UTC), 3
            )

            assert summary == {2026: 2, 2027: 0, 2028: 1}
            assert [c.args[1] for c in generate.await_args_list] == [2026, 2027, 2028]

    @pytest.mark.asyncio
    async def test_failing_year_does_not_stop_the_rest(self, mock_db):
        with patch(
            f"{SEEDER}.generate_holiday_events_for_year",
            AsyncMock(side_effect=[[1], RuntimeError("connection reset"), [1, 2]]),
        ):
            summary = await reconcile_holiday_calendar(
                mock_db, datetime(2026, 1, 1, tzinfo=UTC), 3
            )

            assert summary == {2026: 1, 2027: 0, 2028: 2}
            mock_db.rollback.assert_awaited_once()


class TestSystemAuthor:
    @pytest.mark.asyncio
    async def test_uses_existing_admin(self, mock_db, system_admin):
        with patch(f"{SEEDER}.UserRepository") as mock_users:
            mock_users.get_first_admin = AsyncMock(return_value=system_admin)
            mock_users.create = AsyncMock()

            assert await get_system_author(mock_db) is system_admin
            mock_users.create.assert_not_called()

    @pytest.mark.asyncio
    async def test_creates_system_admin_when_none(self, mock_db, system_admin):
        with (
            patch(f"{SEEDER}.UserRepository") as mock_users,
            patch(f"{SEEDER}.hash_password", return_value="hashed"),
        ):
            mock_users.get_first_admin = AsyncMock(return_value=None)
            mock_users.create = AsyncMock(return_value=system_admin)

            assert await get_system_author(mock_db) is system_admin

            kwargs = mock_users.create.await_args.kwargs
            assert kwargs["role"] == UserRole.ADMIN
            assert kwargs["user_code"] == SYSTEM_ADMIN_CODE
            assert kwargs["status"] == UserStatus.ACTIVE
            assert kwargs["password_hash"]


class TestRegisterHolidayJobs:
    def test_registers_both_cron_jobs(self):
        with patch("schoolhub.modules.holidays.jobs.register_job") as register:
            register_holiday_jobs()

            job_ids = [c.kwargs["job_id"] for c in register.call_args_list]
            assert job_ids == [JOB_ID_ANNUAL_GENERATION, JOB_ID_MONTHLY_CHECK]
