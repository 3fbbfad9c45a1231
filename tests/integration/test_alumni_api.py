# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Integration tests for alumni registration and verification endpoints."""

from unittest.mock import AsyncMock, MagicMock, patch
from uuid import uuid4

import pytest

from collegehub.api.middleware.auth import PUBLIC_PATHS
from collegehub.domains.alumni.service import AlumnusExistsError, AlumnusNotFoundError
from collegehub.models.alumni import AlumnusRegisterResponse, AlumnusResponse

pytestmark = pytest.mark.integration

REGISTRATION = {
    "email": "asha.rao@mail.com",
    "password": "Gr4duate!2020",
    "name": "Asha Rao",
    "department_id": str(uuid4()),
    "graduation_year": 2020,
}


class TestAlumniRegistration:
    def test_registration_is_public(self) -> None:
        assert "/api/v1/alumni/register" in PUBLIC_PATHS

    @patch("collegehub.api.v1.alumni.register_alumnus")
    def test_register_anonymous(self, mock_register, client) -> None:
        user_id = uuid4()
        mock_register.return_value = AlumnusRegisterResponse(user_id=user_id)

        response = client.post("/api/v1/alumni/register", json=REGISTRATION)

        assert response.status_code == 201
        assert response.json()["user_id"] == str(user_id)

    @patch("collegehub.api.v1.alumni.register_alumnus")
    def test_register_existing_email(self, mock_register, client) -> None:
        mock_register.side_effect = AlumnusExistsError("User already exists")

        response = client.post("/api/v1/alumni/register", json=REGISTRATION)

        assert response.status_code == 409

    def test_register_invalid_year(self, client) -> None:
        response = client.post(
            "/api/v1/alumni/register", json={**REGISTRATION, "graduation_year": 1800}
        )

        assert response.status_code == 422


class TestAlumniAdmin:
    def test_teacher_cannot_list(self, client, user_holder, make_user) -> None:
        user_holder.user = make_user("TEACHER")

        response = client.get("/api/v1/alumni")

        assert response.status_code == 403

    @patch("collegehub.api.v1.alumni._get_service")
    def test_verify(self, mock_get_service, client, user_holder, make_user) -> None:
        user_holder.user = make_user("COLLEGE_SUPER_ADMIN")
        alumnus_id = uuid4()
        service = MagicMock()
        service.set_verified = AsyncMock(
            return_value=AlumnusResponse(
                id=alumnus_id,
                user_id=uuid4(),
                name="Asha Rao",
                email="asha.rao@mail.com",
                department_id=uuid4(),
                graduation_year=2020,
                verified=True,
            )
        )
        mock_get_service.return_value = service

        response = client.post(f"/api/v1/alumni/{alumnus_id}/verify")

        assert response.status_code == 200
        assert response.json()["verified"] is True
        service.set_verified.assert_awaited_once_with(alumnus_id, True)

    @patch("collegehub.api.v1.alumni._get_service")
    def test_verify_unknown(self, mock_get_service, client, user_holder, make_user) -> None:
        user_holder.user = make_user("ADM")
        service = MagicMock()
        service.set_verified = AsyncMock(side_effect=AlumnusNotFoundError("Alumnus not found"))
        mock_get_service.return_value = service

        response = client.post(f"/api/v1/alumni/{uuid4()}/verify")

        assert response.status_code == 404
