# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Integration tests for the authentication middleware.

Tests the middleware in isolation from the database.
"""

from unittest.mock import MagicMock, patch
from uuid import uuid4

import pytest
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient
from pydantic import SecretStr

from collegehub.api.middleware.auth import AuthMiddleware, CurrentUser, get_current_user
from collegehub.domains.auth.jwt import JWTManager

pytestmark = pytest.mark.integration


@pytest.fixture
def jwt_settings() -> MagicMock:
    """Create mock JWT settings."""
    settings = MagicMock()
    settings.secret_key = SecretStr("test-secret-key-for-jwt-testing")
    settings.algorithm = "HS256"
    settings.access_token_expire_minutes = 30
    settings.refresh_token_expire_days = 7
    return settings


@pytest.fixture
def jwt_manager(jwt_settings: MagicMock) -> JWTManager:
    """Create JWT manager with test settings."""
    return JWTManager(jwt_settings)


def _app() -> FastAPI:
    app = FastAPI()
    app.add_middleware(AuthMiddleware)

    @app.get("/api/v1/test")
    async def test_endpoint(request: Request) -> dict:
        user = get_current_user(request)
        return {
            "user_id": user.id if user else None,
            "college_id": user.college_id if user else None,
            "role": user.role if user else None,
        }

    @app.get("/api/v1/shop/canvas/probe")
    async def public_endpoint(request: Request) -> dict:
        user = get_current_user(request)
        return {"user_id": user.id if user else None}

    return app


class TestAuthMiddleware:
    @patch("collegehub.api.middleware.auth.get_settings")
    def test_valid_token_sets_user(
        self,
        mock_settings: MagicMock,
        jwt_settings: MagicMock,
        jwt_manager: JWTManager,
        college_id: str,
    ) -> None:
        mock_settings.return_value.jwt = jwt_settings
        user_id = str(uuid4())
        token = jwt_manager.create_access_token(
            user_id=user_id, role="HOD", college_id=college_id
        )

        response = TestClient(_app()).get(
            "/api/v1/test", headers={"Authorization": f"Bearer {token}"}
        )

        assert response.status_code == 200
        assert response.json() == {"user_id": user_id, "college_id": college_id, "role": "HOD"}

    @patch("collegehub.api.middleware.auth.get_settings")
    def test_no_token_sets_user_none(
        self,
        mock_settings: MagicMock,
        jwt_settings: MagicMock,
    ) -> None:
        mock_settings.return_value.jwt = jwt_settings

        response = TestClient(_app()).get("/api/v1/test")

        assert response.status_code == 200
        assert response.json()["user_id"] is None

    @patch("collegehub.api.middleware.auth.get_settings")
    def test_invalid_token_sets_user_none(
        self,
        mock_settings: MagicMock,
        jwt_settings: MagicMock,
    ) -> None:
        mock_settings.return_value.jwt = jwt_settings

        response = TestClient(_app()).get(
            "/api/v1/test", headers={"Authorization": "Bearer invalid-token"}
        )

        assert response.status_code == 200
        assert response.json()["user_id"] is None

    @patch("collegehub.api.middleware.auth.get_settings")
    def test_refresh_token_is_not_accepted(
        self,
        mock_settings: MagicMock,
        jwt_settings: MagicMock,
        jwt_manager: JWTManager,
    ) -> None:
        mock_settings.return_value.jwt = jwt_settings
        pair = jwt_manager.create_token_pair(user_id=str(uuid4()), role="STUDENT")

        response = TestClient(_app()).get(
            "/api/v1/test", headers={"Authorization": f"Bearer {pair.refresh_token}"}
        )

        assert response.json()["user_id"] is None

    @patch("collegehub.api.middleware.auth.get_settings")
    def test_public_prefix_skips_token(
        self,
        mock_settings: MagicMock,
        jwt_settings: MagicMock,
        jwt_manager: JWTManager,
    ) -> None:
        mock_settings.return_value.jwt = jwt_settings
        token = jwt_manager.create_access_token(user_id=str(uuid4()), role="CUSTOMER")

        response = TestClient(_app()).get(
            "/api/v1/shop/canvas/probe", headers={"Authorization": f"Bearer {token}"}
        )

        assert response.status_code == 200
        assert response.json()["user_id"] is None


class TestCurrentUser:
    def _user(self, jwt_manager: JWTManager, role: str) -> CurrentUser:
        token = jwt_manager.create_access_token(user_id=str(uuid4()), role=role)
        return CurrentUser(jwt_manager.decode_token(token))

    def test_has_any_role(self, jwt_manager: JWTManager) -> None:
        user = self._user(jwt_manager, "TEACHER")

        assert user.has_role("TEACHER") is True
        assert user.has_any_role("HOD", "TEACHER") is True
        assert user.has_any_role("STUDENT") is False

    def test_role_groups(self, jwt_manager: JWTManager) -> None:
        assert self._user(jwt_manager, "ADM").is_college_admin is True
        assert self._user(jwt_manager, "FINANCE_MANAGER").is_staff is True
        assert self._user(jwt_manager, "STUDENT").is_staff is False
        assert self._user(jwt_manager, "CUSTOMER").is_customer is True
