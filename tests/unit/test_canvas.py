# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for canvas preview geometry."""

import pytest

from collegehub.domains.shop.canvas import (
    PANEL_LAYOUTS,
    ROOM_MOCKS,
    SIZE_OPTIONS,
    Position,
    Size,
    canvas_dimensions,
    change_zoom,
    drag,
    drag_origin,
    find_layout,
    find_size,
    image_filter,
    initial_zoom,
    max_offset,
    panel_boxes,
    preview_box,
)


class TestPresets:
    def test_catalogue_sizes(self) -> None:
        assert len(PANEL_LAYOUTS) == 11
        assert len(SIZE_OPTIONS) == 6
        assert [mock.canvas_scale for mock in ROOM_MOCKS] == [0.4, 0.35, 0.35]

    def test_lookup(self) -> None:
        assert find_layout("9panel-1").total_height == 72
        assert find_layout("missing") is None
        assert find_size('M (Portrait) - 12" x 16"').id == "medium-portrait"

    def test_panel_counts_match_layout_names(self) -> None:
        for layout in PANEL_LAYOUTS:
            assert len(layout.panels) == int(layout.id[0])

    @pytest.mark.parametrize(
        "effect,expected",
        [("B&W", "grayscale(100%)"), ("Sepia", "sepia(100%)"), ("Vintage", "none"), (None, "none")],
    )
    def test_image_filter(self, effect, expected) -> None:
        assert image_filter(effect) == expected


class TestZoom:
    def test_wide_image_fits_width(self) -> None:
        fit = initial_zoom(Size(1000, 500), Size(300, 300))

        # Height fit (60) overflows the width, so width fit (30) boosted by 20%
        assert fit.zoom == pytest.approx(36)
        assert fit.position == Position(0, 0)

    def test_small_image_is_capped(self) -> None:
        assert initial_zoom(Size(100, 100), Size(300, 300)).zoom == 100

    def test_max_offset(self) -> None:
        assert max_offset(100) == 0
        assert max_offset(50) == 0
        assert max_offset(200) == 0.5

    def test_change_zoom_reclamps(self) -> None:
        assert change_zoom(Position(0.4, -0.4), 150) == Position(0.25, -0.25)


class TestDrag:
    def test_drag_within_bounds(self) -> None:
        moved = drag(Position(0, 0), Position(50, 25), Size(100, 100), zoom=200)

        assert moved == Position(0.5, 0.25)

    def test_drag_is_clamped(self) -> None:
        moved = drag(Position(0, 0), Position(100, -100), Size(100, 100), zoom=200)

        assert moved == Position(0.5, -0.5)

    def test_drag_at_full_fit_cannot_move(self) -> None:
        assert drag(Position(0, 0), Position(30, 30), Size(100, 100), zoom=100) == Position(0, 0)

    def test_origin_then_drag_returns_to_position(self) -> None:
        dims = Size(200, 100)
        position = Position(0.25, 0.25)
        origin = drag_origin(Position(120, 60), position, dims)

        assert origin == Position(70, 35)
        assert drag(origin, Position(120, 60), dims, zoom=200) == position


class TestPanelBoxes:
    def test_grid_layout_percentages(self) -> None:
        boxes = panel_boxes(find_layout("4panel-1"))

        assert boxes[0].left == 0
        assert boxes[0].width == 50
        assert boxes[1].left == pytest.approx(25 / 48 * 100)
        assert boxes[3].top == pytest.approx(25 / 48 * 100)


class TestCanvasDimensions:
    def test_layout_aspect_is_width_over_height(self) -> None:
        result = canvas_dimensions(
            ROOM_MOCKS[0], 1000, 800, layout=find_layout("3panel-2")
        )

        assert result.width == pytest.approx(320)
        assert result.height == pytest.approx(160)

    def test_size_aspect_is_height_over_width(self) -> None:
        result = canvas_dimensions(
            ROOM_MOCKS[0], 1000, 800, size=find_size('S (Portrait) - 8" x 12"')
        )

        assert result.width == pytest.approx(320)
        assert result.height == pytest.approx(320 / 1.5)

    def test_requires_layout_or_size(self) -> None:
        with pytest.raises(ValueError):
            canvas_dimensions(ROOM_MOCKS[0], 1000, 800)


class TestPreviewBox:
    def test_landscape_fills_width(self) -> None:
        assert preview_box(Size(24, 16), Size(300, 300)) == Size(300, 200)

    def test_portrait_fills_height(self) -> None:
        result = preview_box(Size(16, 24), Size(300, 300))

        assert result.height == 300
        assert result.width == pytest.approx(200)
