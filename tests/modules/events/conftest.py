"""
Fixtures for events tests.
"""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from schoolhub.core.auth import CurrentUser
from schoolhub.modules.events.models import Event, EventPriority, EventType, TargetAudience
from schoolhub.modules.users.models import UserRole


@pytest.fixture
def mock_db():
    """Create a mock database session."""
    db = AsyncMock()
    db.commit = AsyncMock()
    db.flush = AsyncMock()
    db.refresh = AsyncMock()
    db.get = AsyncMock()
    db.execute = AsyncMock()
    db.add = MagicMock()
    return db


@pytest.fixture
def actor_for():
    def _make(role: UserRole) -> CurrentUser:
        return CurrentUser(id=str(uuid4()), role=role, email=f"{role.value.lower()}@school.test")

    return _make


@pytest.fixture
def make_event():
    def _make(**overrides) -> Event:
        values = {
            "id": str(uuid4()),
            "title": "Science Fair",
            "header": "Annual Science Fair",
            "body": "Projects are displayed in the gym.",
            "images": [],
            "start_date": datetime(2026, 3, 10, tzinfo=UTC),
            "end_date": datetime(2026, 3, 12, tzinfo=UTC),
            "is_all_day": True,
            "priority": EventPriority.MEDIUM,
            "target_audience": TargetAudience.ALL,
            "event_type": EventType.ACADEMIC,
            "created_by": str(uuid4()),
        }
        values.update(overrides)
        return Event(**values)

    return _make
