"""
Unit tests for the events service layer.

These tests cover:
- Date normalization to midnight UTC
- Audience scoping per role
- Status filters and derived status
- Admin create/update validation of the date range
"""

from datetime import UTC, datetime, timedelta, timezone
from unittest.mock import AsyncMock, patch
from uuid import uuid4

import pytest

from schoolhub.modules.events import repository as event_repository
from schoolhub.modules.events.models import Event, EventStatus, TargetAudience
from schoolhub.modules.events.schemas import EventCreate, EventUpdate
from schoolhub.modules.events.service import (
    EventForbiddenError,
    EventNotFoundError,
    EventPage,
    InvalidDateRangeError,
    InvalidEventIdError,
    audiences_for,
    create_event,
    get_event,
    get_events_in_range,
    list_events,
    normalize_date,
    update_event,
)
from schoolhub.modules.users.models import UserRole

AUDIENCE_FILTER = event_repository.audience_filter


def _created(db, **values):
    return Event(id=str(uuid4()), **values)


def _returns_event(db, event):
    return event


class TestNormalizeDate:
    def test_truncates_to_midnight_utc(self):
        value = datetime(2026, 6, 12, 15, 45, 30, tzinfo=UTC)
        assert normalize_date(value) == datetime(2026, 6, 12, tzinfo=UTC)

    def test_converts_offsets_before_truncating(self):
        manila = timezone(timedelta(hours=8))
        value = datetime(2026, 6, 12, 3, 0, tzinfo=manila)
        assert normalize_date(value) == datetime(2026, 6, 11, tzinfo=UTC)

    def test_naive_values_are_utc(self):
        assert normalize_date(datetime(2026, 1, 1, 23, 59)) == datetime(2026, 1, 1, tzinfo=UTC)


class TestAudiences:
    def test_students_see_all_and_students(self, actor_for):
        assert audiences_for(actor_for(UserRole.STUDENT)) == (
            TargetAudience.ALL,
            TargetAudience.STUDENTS,
        )

    def test_teachers_see_all_and_teachers(self, actor_for):
        assert audiences_for(actor_for(UserRole.TEACHER)) == (
            TargetAudience.ALL,
            TargetAudience.TEACHERS,
        )

    def test_admins_are_unrestricted(self, actor_for):
        assert audiences_for(actor_for(UserRole.ADMIN)) is None


class TestListEvents:
    @pytest.mark.asyncio
    async def test_student_audience_filter_ignores_requested_audience(self, mock_db, actor_for):
        with (
            patch.object(event_repository, "list_events", AsyncMock(return_value=([], 0))) as q,
            patch.object(event_repository, "audience_filter", wraps=AUDIENCE_FILTER) as aud,
        ):
            await list_events(
                mock_db, actor_for(UserRole.STUDENT), target_audience=TargetAudience.ADMINS
            )

            aud.assert_called_once_with((TargetAudience.ALL, TargetAudience.STUDENTS))
            assert len(q.await_args.kwargs["filters"]) == 1

    @pytest.mark.asyncio
    async def test_admin_may_filter_by_audience(self, mock_db, actor_for):
        with (
            patch.object(event_repository, "list_events", AsyncMock(return_value=([], 0))),
            patch.object(event_repository, "audience_filter", wraps=AUDIENCE_FILTER) as aud,
        ):
            await list_events(
                mock_db, actor_for(UserRole.ADMIN), target_audience=TargetAudience.TEACHERS
            )

            aud.assert_called_once_with((TargetAudience.TEACHERS,))

    @pytest.mark.asyncio
    async def test_ongoing_status_adds_two_bounds(self, mock_db, actor_for):
        with patch.object(event_repository, "list_events", AsyncMock(return_value=([], 0))) as q:
            await list_events(mock_db, actor_for(UserRole.ADMIN), status=EventStatus.ONGOING)

            assert len(q.await_args.kwargs["filters"]) == 2

    @pytest.mark.asyncio
    async def test_page_offset(self, mock_db, actor_for):
        with patch.object(event_repository, "list_events", AsyncMock(return_value=([], 23))) as q:
            page = await list_events(mock_db, actor_for(UserRole.ADMIN), page=3, limit=10)

            assert q.await_args.kwargs["offset"] == 20
            assert page.total_pages == 3


class TestEventPage:
    def test_total_pages_rounds_up(self):
        assert EventPage([], 21, 1, 10).total_pages == 3
        assert EventPage([], 0, 1, 10).total_pages == 0


class TestEventStatus:
    def test_status_at(self, make_event):
        event = make_event(
            start_date=datetime(2026, 3, 10, tzinfo=UTC),
            end_date=datetime(2026, 3, 12, tzinfo=UTC),
        )
        assert event.status_at(datetime(2026, 3, 9, tzinfo=UTC)) == EventStatus.UPCOMING
        assert event.status_at(datetime(2026, 3, 10, tzinfo=UTC)) == EventStatus.ONGOING
        assert event.status_at(datetime(2026, 3, 12, tzinfo=UTC)) == EventStatus.ONGOING
        assert event.status_at(datetime(2026, 3, 13, tzinfo=UTC)) == EventStatus.PAST


class TestGetEvent:
    @pytest.mark.asyncio
    async def test_malformed_id(self, mock_db, actor_for):
        with pytest.raises(InvalidEventIdError):
            await get_event(mock_db, "123", actor_for(UserRole.ADMIN))

    @pytest.mark.asyncio
    async def test_missing_event(self, mock_db, actor_for):
        with patch.object(event_repository, "get_by_id", AsyncMock(return_value=None)):
            with pytest.raises(EventNotFoundError) as exc_info:
                await get_event(mock_db, str(uuid4()), actor_for(UserRole.ADMIN))

            assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_student_cannot_open_teacher_event(self, mock_db, actor_for, make_event):
        event = make_event(target_audience=TargetAudience.TEACHERS)

        with patch.object(event_repository, "get_by_id", AsyncMock(return_value=event)):
            with pytest.raises(EventForbiddenError) as exc_info:
                await get_event(mock_db, event.id, actor_for(UserRole.STUDENT))

            assert exc_info.value.status_code == 403

    @pytest.mark.asyncio
    async def test_teacher_can_open_teacher_event(self, mock_db, actor_for, make_event):
        event = make_event(target_audience=TargetAudience.TEACHERS)

        with patch.object(event_repository, "get_by_id", AsyncMock(return_value=event)):
            assert await get_event(mock_db, event.id, actor_for(UserRole.TEACHER)) is event


class TestDateRange:
    @pytest.mark.asyncio
    async def test_inverted_range(self, mock_db, actor_for):
        with pytest.raises(InvalidDateRangeError) as exc_info:
            await get_events_in_range(
                mock_db,
                actor_for(UserRole.ADMIN),
                datetime(2026, 5, 2, tzinfo=UTC),
                datetime(2026, 5, 1, tzinfo=UTC),
            )

        assert exc_info.value.message == "Start date must be before or equal to end date"

    @pytest.mark.asyncio
    async def test_same_day_range_is_allowed(self, mock_db, actor_for):
        with patch.object(event_repository, "list_events", AsyncMock(return_value=([], 0))) as q:
            await get_events_in_range(
                mock_db,
                actor_for(UserRole.ADMIN),
                datetime(2026, 5, 1, 8, tzinfo=UTC),
                datetime(2026, 5, 1, 17, tzinfo=UTC),
            )

            assert q.await_args.kwargs["by_priority"] is False


class TestCreateEvent:
    @pytest.mark.asyncio
    async def test_dates_are_normalized(self, mock_db, actor_for):
        admin = actor_for(UserRole.ADMIN)
        data = EventCreate(
            title="Foundation Day",
            header="School Foundation Day",
            body="Program starts at 8 AM.",
            start_date="2026-09-15",
            end_date=datetime(2026, 9, 15, 18, 30, tzinfo=UTC),
        )

        with patch.object(event_repository, "create", AsyncMock(side_effect=_created)):
            event = await create_event(mock_db, data, admin)

            assert event.start_date == datetime(2026, 9, 15, tzinfo=UTC)
            assert event.end_date == datetime(2026, 9, 15, tzinfo=UTC)
            assert event.created_by == admin.id
            mock_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_end_before_start(self, mock_db, actor_for):
        data = EventCreate(
            title="Exam Week",
            header="Quarterly Exams",
            body="Review your notes.",
            start_date="2026-10-20",
            end_date="2026-10-18",
        )

        with patch.object(event_repository, "create", AsyncMock()) as create:
            with pytest.raises(InvalidDateRangeError):
                await create_event(mock_db, data, actor_for(UserRole.ADMIN))

            create.assert_not_called()


class TestUpdateEvent:
    @pytest.mark.asyncio
    async def test_new_end_is_checked_against_stored_start(
        self, mock_db, actor_for, make_event
    ):
        event = make_event()

        with (
            patch.object(event_repository, "get_by_id", AsyncMock(return_value=event)),
            patch.object(event_repository, "save", AsyncMock(side_effect=_returns_event)),
        ):
            with pytest.raises(InvalidDateRangeError):
                await update_event(
                    mock_db,
                    event.id,
                    EventUpdate(end_date="2026-03-01"),
                    actor_for(UserRole.ADMIN),
                )

            mock_db.commit.assert_not_called()

    @pytest.mark.asyncio
    async def test_partial_update(self, mock_db, actor_for, make_event):
        event = make_event()

        with (
            patch.object(event_repository, "get_by_id", AsyncMock(return_value=event)),
            patch.object(event_repository, "save", AsyncMock(side_effect=_returns_event)),
        ):
            result = await update_event(
                mock_db,
                event.id,
                EventUpdate(title="Science & Math Fair", end_date="2026-03-14"),
                actor_for(UserRole.ADMIN),
            )

            assert result.title == "Science & Math Fair"
            assert result.end_date == datetime(2026, 3, 14, tzinfo=UTC)
            assert result.header == "Annual Science Fair"
            mock_db.commit.assert_awaited_once()
