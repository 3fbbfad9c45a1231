# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Integration tests for teacher designation and employee category endpoints."""

from uuid import uuid4

import pytest

from collegehub.infrastructure.database.models import EmployeeCategory, TeacherDesignation

pytestmark = pytest.mark.integration


class TestStaffAPIRouting:
    def test_routes_registered(self, app) -> None:
        routes = [getattr(route, "path", None) for route in app.routes]

        assert "/api/v1/staff/designations" in routes
        assert "/api/v1/staff/designations/{entry_id}" in routes
        assert "/api/v1/staff/employee-categories" in routes
        assert "/api/v1/staff/employee-categories/{entry_id}" in routes


class TestStaffAPIEndpoints:
    def test_teacher_can_list_designations(
        self, client, user_holder, make_user, mock_db, make_result, college_id
    ) -> None:
        user_holder.user = make_user("TEACHER")
        mock_db.execute.return_value = make_result(
            many=[
                TeacherDesignation(
                    id=str(uuid4()), college_id=college_id, name="Professor", alias="P"
                )
            ]
        )

        response = client.get("/api/v1/staff/designations")

        assert response.status_code == 200
        assert response.json()["total"] == 1
        assert response.json()["items"][0]["alias"] == "P"

    def test_student_cannot_list_categories(self, client, user_holder, make_user) -> None:
        user_holder.user = make_user("STUDENT")

        response = client.get("/api/v1/staff/employee-categories")

        assert response.status_code == 403

    def test_teacher_cannot_create(self, client, user_holder, make_user) -> None:
        user_holder.user = make_user("TEACHER")

        response = client.post(
            "/api/v1/staff/designations", json={"name": "Professor", "alias": "P"}
        )

        assert response.status_code == 403

    def test_duplicate_category_conflicts(
        self, client, user_holder, make_user, mock_db, make_result, college_id
    ) -> None:
        user_holder.user = make_user("ADM")
        mock_db.execute.return_value = make_result(
            one=EmployeeCategory(
                id=str(uuid4()), college_id=college_id, name="Teaching", alias="T"
            )
        )

        response = client.post(
            "/api/v1/staff/employee-categories", json={"name": "Teaching", "alias": "TS"}
        )

        assert response.status_code == 409
        assert response.json()["detail"] == "Category with this name or alias already exists"

    def test_unknown_designation(
        self, client, user_holder, make_user, mock_db, make_result
    ) -> None:
        user_holder.user = make_user("COLLEGE_SUPER_ADMIN")
        mock_db.execute.return_value = make_result(one=None)

        response = client.delete(f"/api/v1/staff/designations/{uuid4()}")

        assert response.status_code == 404

    def test_short_name_is_unprocessable(self, client, user_holder, make_user) -> None:
        user_holder.user = make_user("COLLEGE_SUPER_ADMIN")

        response = client.post("/api/v1/staff/designations", json={"name": "P", "alias": "P"})

        assert response.status_code == 422
