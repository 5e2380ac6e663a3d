"""
Fixtures for holiday tests.
"""

from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest

from schoolhub.modules.holidays.models import Holiday, HolidayType


@pytest.fixture
def mock_db():
    """Create a mock database session."""
    db = AsyncMock()
    db.commit = AsyncMock()
    db.rollback = AsyncMock()
    db.flush = AsyncMock()
    db.execute = AsyncMock()
    db.add = MagicMock()
    db.add_all = MagicMock()
    return db


@pytest.fixture
def make_holiday():
    def _make(name: str, month: int, day: int, holiday_type=HolidayType.REGULAR) -> Holiday:
        return Holiday(
            id=str(uuid4()),
            name=name,
            month=month,
            day=day,
            type=holiday_type,
            is_active=True,
        )

    return _make


@pytest.fixture
def system_admin():
    admin = MagicMock()
    admin.id = str(uuid4())
    return admin
