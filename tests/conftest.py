# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pytest configuration and shared fixtures.

Service tests run against an AsyncMock session whose ``execute`` side
effects are fed in query order; API tests mount the v1 router on a bare
FastAPI app and override the auth and database dependencies.
"""

from collections.abc import Callable
from typing import Any
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest


# =============================================================================
# Marker Configuration
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line(
        "markers", "integration: mark test as an API test with mocked services"
    )


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture
def mock_db() -> AsyncMock:
    """Create mock database session."""
    db = AsyncMock()
    db.add = MagicMock()
    db.add_all = MagicMock()
    db.delete = AsyncMock()
    db.flush = AsyncMock()
    db.commit = AsyncMock()
    db.rollback = AsyncMock()
    db.refresh = AsyncMock()
    db.execute = AsyncMock()
    return db


def _result(
    one: Any = None,
    many: list[Any] | None = None,
    scalar: Any = None,
    rows: list[Any] | None = None,
) -> MagicMock:
    result = MagicMock()
    result.scalar_one_or_none.return_value = one
    result.scalar_one.return_value = one if one is not None else scalar
    result.scalar.return_value = scalar
    result.scalars.return_value.all.return_value = many or []
    result.scalars.return_value.first.return_value = (many or [None])[0]
    result.all.return_value = rows or []
    result.first.return_value = (rows or [None])[0]
    result.one_or_none.return_value = (rows or [None])[0]
    return result


@pytest.fixture
def make_result() -> Callable[..., MagicMock]:
    """Build a mock ``Result`` for ``db.execute`` side effects.

    ``one`` backs scalar_one_or_none, ``many`` backs scalars().all(),
    ``scalar`` backs scalar() and ``rows`` backs all()/first().
    """
    return _result


# =============================================================================
# Helper Fixtures
# =============================================================================


@pytest.fixture
def college_id() -> str:
    """Provide a sample college ID."""
    return "550e8400-e29b-41d4-a716-446655440000"


@pytest.fixture
def user_id() -> str:
    """Provide a sample user ID."""
    return "550e8400-e29b-41d4-a716-446655440001"


@pytest.fixture
def new_id() -> Callable[[], str]:
    """Factory for string UUIDs as stored by the models."""
    return lambda: str(uuid4())


# =============================================================================
# Cache Fixtures
# =============================================================================


class FakeRedis:
    """In-memory RedisClient double. TTLs are recorded, never elapsed."""

    def __init__(self) -> None:
        self.values: dict[str, Any] = {}
        self.ttls: dict[str, int] = {}

    async def set(self, key: str, value: Any, expire_seconds: int | None = None) -> None:
        self.values[key] = value
        if expire_seconds:
            self.ttls[key] = expire_seconds

    async def get(self, key: str) -> Any:
        return self.values.get(key)

    async def delete(self, *keys: str) -> int:
        removed = 0
        for key in keys:
            if self.values.pop(key, None) is not None:
                removed += 1
            self.ttls.pop(key, None)
        return removed

    async def ttl(self, key: str) -> int:
        if key not in self.values:
            return -2
        return self.ttls.get(key, -1)

    async def incr(self, key: str, expire_seconds: int | None = None) -> int:
        if key not in self.values and expire_seconds:
            self.ttls[key] = expire_seconds
        self.values[key] = int(self.values.get(key, 0)) + 1
        return self.values[key]


@pytest.fixture
def fake_redis() -> FakeRedis:
    """Provide an empty in-memory Redis double."""
    return FakeRedis()
