"""
Fixtures for user repository tests.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest


@pytest.fixture
def mock_db():
    """Create a mock database session."""
    db = AsyncMock()
    db.execute = AsyncMock()
    db.flush = AsyncMock()
    db.refresh = AsyncMock()
    db.add = MagicMock()
    return db


@pytest.fixture
def result_of():
    """Build a mock ``execute()`` result returning ``value`` from every accessor."""

    def _make(value=None, rowcount: int = 0):
        result = MagicMock()
        result.scalar_one_or_none.return_value = value
        result.scalars.return_value.first.return_value = value
        result.rowcount = rowcount
        return result

    return _make
