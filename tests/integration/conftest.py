# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Fixtures for API tests.

The v1 router is mounted on a bare FastAPI app. A small middleware puts
the user chosen by the test on ``request.state.user`` so the real role
dependencies run, and ``get_db`` is overridden with the AsyncMock session.
"""

from collections.abc import Callable
from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient

from collegehub.api.dependencies import get_db
from collegehub.api.middleware.auth import CurrentUser
from collegehub.api.middleware.rate_limit import limiter
from collegehub.api.v1 import router as v1_router
from collegehub.domains.auth.jwt import TokenPayload


class UserHolder:
    """The user the next request is made as (None for anonymous)."""

    user: CurrentUser | None = None


@pytest.fixture
def make_user(college_id) -> Callable[..., CurrentUser]:
    def _make(role: str, college: str | None = college_id, user_id: str = "user-1") -> CurrentUser:
        return CurrentUser(
            TokenPayload(
                sub=user_id,
                type="access",
                role=role,
                name="Test User",
                email="user@college.edu",
                college_id=college,
                exp=0,
                iat=0,
                jti="test-jti",
            )
        )

    return _make


@pytest.fixture
def user_holder() -> UserHolder:
    return UserHolder()


@pytest.fixture
def app(user_holder: UserHolder, mock_db: AsyncMock) -> FastAPI:
    """Create test FastAPI app."""
    app = FastAPI()
    app.state.limiter = limiter
    app.include_router(v1_router)

    @app.middleware("http")
    async def inject_user(request: Request, call_next):
        request.state.user = user_holder.user
        return await call_next(request)

    async def override_db():
        yield mock_db

    app.dependency_overrides[get_db] = override_db
    return app


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    """Create test client."""
    return TestClient(app)
