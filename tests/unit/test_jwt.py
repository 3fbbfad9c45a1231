# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for JWT token utilities.

Tests the JWTManager class and token operations.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock
from uuid import uuid4

import pytest
from pydantic import SecretStr

from collegehub.domains.auth.jwt import (
    InvalidTokenError,
    JWTManager,
    TokenExpiredError,
    TokenPair,
)


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


class TestJWTManager:
    """Tests for JWTManager class."""

    def test_create_token_pair_returns_valid_tokens(self, jwt_manager: JWTManager) -> None:
        result = jwt_manager.create_token_pair(
            user_id=str(uuid4()),
            role="HOD",
            college_id=str(uuid4()),
        )

        assert isinstance(result, TokenPair)
        assert result.token_type == "Bearer"
        assert result.expires_in == 30 * 60
        assert result.refresh_expires_in == 7 * 24 * 60 * 60

    def test_access_token_carries_scope(self, jwt_manager: JWTManager) -> None:
        user_id = str(uuid4())
        college_id = uuid4()
        department_id = uuid4()

        token = jwt_manager.create_access_token(
            user_id=user_id,
            role="TEACHER",
            name="Asha Rao",
            email="asha@college.edu",
            college_id=college_id,
            department_id=department_id,
        )
        payload = jwt_manager.decode_token(token, "access")

        assert payload.sub == user_id
        assert payload.role == "TEACHER"
        assert payload.college_id == str(college_id)
        assert payload.department_id == str(department_id)
        assert payload.type == "access"

    def test_refresh_token_has_no_role(self, jwt_manager: JWTManager) -> None:
        pair = jwt_manager.create_token_pair(user_id="user-1", role="HOD")

        payload = jwt_manager.decode_token(pair.refresh_token, "refresh")

        assert payload.sub == "user-1"
        assert payload.role is None

    def test_wrong_token_type_rejected(self, jwt_manager: JWTManager) -> None:
        pair = jwt_manager.create_token_pair(user_id="user-1")

        with pytest.raises(InvalidTokenError):
            jwt_manager.decode_token(pair.refresh_token, "access")

    def test_expired_token_rejected(self, jwt_manager: JWTManager) -> None:
        past = datetime.now(timezone.utc) - timedelta(hours=2)
        token = jwt_manager.create_access_token(user_id="user-1", now=past)

        with pytest.raises(TokenExpiredError):
            jwt_manager.decode_token(token)

    def test_tampered_token_rejected(self, jwt_manager: JWTManager) -> None:
        token = jwt_manager.create_access_token(user_id="user-1")

        assert jwt_manager.verify_token(token + "x") is False
        assert jwt_manager.verify_token(token) is True

    def test_token_signed_with_other_key_rejected(self, jwt_settings: MagicMock) -> None:
        other = MagicMock()
        other.secret_key = SecretStr("another-secret")
        other.algorithm = "HS256"
        other.access_token_expire_minutes = 30
        token = JWTManager(other).create_access_token(user_id="user-1")

        with pytest.raises(InvalidTokenError):
            JWTManager(jwt_settings).decode_token(token)

    def test_hash_token_is_stable(self) -> None:
        assert JWTManager.hash_token("abc") == JWTManager.hash_token("abc")
        assert len(JWTManager.hash_token("abc")) == 64
