# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Integration tests for the canvas shop API endpoints."""

from types import SimpleNamespace
from uuid import uuid4

import pytest

pytestmark = pytest.mark.integration


class TestShopAPIRouting:
    def test_routes_registered(self, app) -> None:
        routes = [getattr(route, "path", None) for route in app.routes]

        assert "/api/v1/shop/catalog/products/{slug}" in routes
        assert "/api/v1/shop/catalog/quote" in routes
        assert "/api/v1/shop/canvas/presets" in routes
        assert "/api/v1/shop/canvas/drag" in routes
        assert "/api/v1/shop/designs" in routes
        assert "/api/v1/shop/cart" in routes
        assert "/api/v1/shop/orders" in routes
        assert "/api/v1/shop/addresses" in routes


class TestCanvasEndpoints:
    """Preview geometry needs no login."""

    def test_presets(self, client) -> None:
        response = client.get("/api/v1/shop/canvas/presets")

        assert response.status_code == 200
        body = response.json()
        assert body["layouts"]
        assert body["sizes"]
        assert body["image_effects"]["Sepia"] == "sepia(100%)"

    def test_panel_boxes(self, client) -> None:
        response = client.get("/api/v1/shop/canvas/layouts/4panel-1/panels")

        assert response.status_code == 200
        boxes = response.json()
        assert len(boxes) == 4
        assert boxes[0]["left"] == 0
        assert boxes[0]["width"] == 50

    def test_unknown_layout(self, client) -> None:
        response = client.get("/api/v1/shop/canvas/layouts/9panel-9/panels")

        assert response.status_code == 404

    def test_drag_is_clamped(self, client) -> None:
        response = client.post(
            "/api/v1/shop/canvas/drag",
            json={
                "start": {"x": 0, "y": 0},
                "client": {"x": 100, "y": -100},
                "dims": {"width": 100, "height": 100},
                "zoom": 200,
            },
        )

        assert response.status_code == 200
        assert response.json() == {"x": 0.5, "y": -0.5}

    def test_initial_zoom(self, client) -> None:
        response = client.post(
            "/api/v1/shop/canvas/initial-zoom",
            json={
                "natural": {"width": 100, "height": 100},
                "content": {"width": 300, "height": 300},
            },
        )

        assert response.status_code == 200
        assert response.json()["zoom"] == 100

    def test_preview_box(self, client) -> None:
        response = client.post(
            "/api/v1/shop/canvas/preview-box",
            json={
                "variation": {"width": 24, "height": 16},
                "container": {"width": 300, "height": 300},
            },
        )

        assert response.status_code == 200
        assert response.json() == {"width": 300, "height": 200}

    def test_dimensions_need_layout_or_size(self, client) -> None:
        response = client.post(
            "/api/v1/shop/canvas/dimensions",
            json={"mock_id": 1, "mock_width": 1000, "mock_height": 800},
        )

        assert response.status_code == 422

    def test_dimensions_unknown_layout(self, client) -> None:
        response = client.post(
            "/api/v1/shop/canvas/dimensions",
            json={
                "mock_id": 1,
                "mock_width": 1000,
                "mock_height": 800,
                "layout_id": "9panel-9",
            },
        )

        assert response.status_code == 404
        assert response.json()["detail"] == "Layout or size not found"

    def test_invalid_size_is_unprocessable(self, client) -> None:
        response = client.post(
            "/api/v1/shop/canvas/preview-box",
            json={
                "variation": {"width": 0, "height": 16},
                "container": {"width": 300, "height": 300},
            },
        )

        assert response.status_code == 422


class TestCustomerEndpoints:
    def test_cart_requires_login(self, client) -> None:
        response = client.get("/api/v1/shop/cart")

        assert response.status_code == 401

    def test_cart_is_for_customers_only(self, client, user_holder, make_user) -> None:
        user_holder.user = make_user("STUDENT")

        response = client.get("/api/v1/shop/cart")

        assert response.status_code == 403

    def test_empty_cart(self, client, user_holder, make_user, mock_db, make_result) -> None:
        user_holder.user = make_user("CUSTOMER", college=None)
        mock_db.execute.return_value = make_result(rows=[])

        response = client.get("/api/v1/shop/cart")

        assert response.status_code == 200
        assert response.json()["items"] == []
        assert response.json()["subtotal"] == 0

    def test_carting_foreign_design_is_forbidden(
        self, client, user_holder, make_user, mock_db, make_result
    ) -> None:
        user_holder.user = make_user("CUSTOMER", college=None)
        design = SimpleNamespace(id=str(uuid4()), customer_id="someone-else")
        mock_db.execute.return_value = make_result(one=design)

        response = client.post(
            "/api/v1/shop/cart", json={"saved_design_id": design.id, "quantity": 1}
        )

        assert response.status_code == 403
        assert response.json()["detail"] == "This design does not belong to you"
