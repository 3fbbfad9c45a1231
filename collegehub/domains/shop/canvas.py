# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Canvas preview geometry.

Pure functions behind the design preview: fitting an uploaded image,
dragging and zooming it inside its frame, placing multi-panel layouts
and sizing the canvas on a room mock-up. Positions are fractions of the
frame size, zoom is a percentage.
"""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Position:
    x: float = 0.0
    y: float = 0.0


@dataclass(frozen=True)
class Size:
    width: float
    height: float


@dataclass(frozen=True)
class Panel:
    id: str
    width: float
    height: float
    x: float
    y: float
    ratio: float


@dataclass(frozen=True)
class PanelLayout:
    id: str
    name: str
    description: str
    panels: tuple[Panel, ...]
    total_width: float
    total_height: float


@dataclass(frozen=True)
class SizeOption:
    id: str
    label: str
    width: float
    height: float
    price: float
    orientation: str


@dataclass(frozen=True)
class RoomMock:
    id: int
    name: str
    src: str
    canvas_position: Position
    canvas_scale: float


@dataclass(frozen=True)
class PanelBox:
    """Panel placement in percent of the layout's total size."""

    id: str
    left: float
    top: float
    width: float
    height: float


@dataclass(frozen=True)
class ZoomFit:
    zoom: float
    position: Position = field(default_factory=Position)


def _panels(*specs: tuple) -> tuple[Panel, ...]:
    return tuple(
        Panel(id=f"panel-{i}", width=w, height=h, x=x, y=y, ratio=r)
        for i, (w, h, x, y, r) in enumerate(specs, start=1)
    )


PANEL_LAYOUTS: tuple[PanelLayout, ...] = (
    PanelLayout(
        "3panel-1", "3 Panel Fabric (1)", "30x49, 24x24(2)",
        _panels((30, 49, 0, 0, 1.63), (24, 24, 31, 0, 1), (24, 24, 31, 25, 1)),
        54, 49,
    ),
    PanelLayout(
        "3panel-2", "3 Panel Fabric (2)", "24x36(3)",
        _panels((24, 36, -1, 0, 1.5), (24, 36, 25, 0, 1.5), (24, 36, 51, 0, 1.5)),
        72, 36,
    ),
    PanelLayout(
        "3panel-3", "3 Panel Fabric (3)", "24x24(2), 24x36",
        _panels((24, 24, -2, 6, 1), (24, 36, 24, 0, 1.5), (24, 24, 50, 6, 1)),
        72, 36,
    ),
    PanelLayout(
        "3panel-4", "3 Panel Fabric (4)", "24x16, 16x24, 12x16",
        _panels((24, 16, -1, 0, 0.67), (16, 24, 24, 0, 1.5), (16, 16, 24, 25, 1.33)),
        40, 40,
    ),
    PanelLayout(
        "4panel-1", "4 Panel Fabric (1)", "24x24 (4) WD",
        _panels((24, 24, 0, 0, 1), (24, 24, 25, 0, 1), (24, 24, 0, 25, 1), (24, 24, 25, 25, 1)),
        48, 48,
    ),
    PanelLayout(
        "4panel-2", "4 Panel Fabric (2)", "24x36(4) WD",
        _panels(
            (24, 36, -1, 0, 1.5), (24, 36, 24, 0, 1.5),
            (24, 36, 49, 0, 1.5), (24, 36, 74, 0, 1.5),
        ),
        96, 36,
    ),
    PanelLayout(
        "4panel-3", "4 Panel Fabric (3)", "30x49, 49x24, 24x24(2) WD",
        _panels(
            (30, 49, -2, 0, 1.63), (49, 24, 30, 0, 0.49),
            (24, 24, 30, 25, 1), (24, 24, 55, 25, 1),
        ),
        78, 49,
    ),
    PanelLayout(
        "4panel-4", "4 Panel Fabric (4)", "30x75, 24x24(3) WD",
        _panels(
            (30, 76, -1, 0, 2.5), (24, 24, 30, 0, 1),
            (24, 24, 30, 26, 1), (24, 24, 30, 52, 1),
        ),
        54, 75,
    ),
    PanelLayout(
        "5panel-1", "5 Panel Fabric (1)", "24x24(4), 36x49 WD",
        _panels(
            (24, 24, -1, 0, 1), (36, 49, 24, 0, 1.36), (24, 24, 61, 0, 1),
            (24, 24, -1, 25, 1), (24, 24, 61, 25, 1),
        ),
        84, 49,
    ),
    PanelLayout(
        "6panel-1", "6 Panel Fabric (1)", "24x24(6) WD",
        _panels(
            (24, 24, -1, 0, 1), (24, 24, 24, 0, 1), (24, 24, 49, 0, 1),
            (24, 24, -1, 25, 1), (24, 24, 24, 25, 1), (24, 24, 49, 25, 1),
        ),
        72, 48,
    ),
    PanelLayout(
        "9panel-1", "9 Panel Fabric (1)", "24x24(9) WD",
        _panels(
            (24, 24, -1, 0, 1), (24, 24, 24, 0, 1), (24, 24, 49, 0, 1),
            (24, 24, -1, 25, 1), (24, 24, 24, 25, 1), (24, 24, 49, 25, 1),
            (24, 24, -1, 50, 1), (24, 24, 24, 50, 1), (24, 24, 49, 50, 1),
        ),
        72, 72,
    ),
)

SIZE_OPTIONS: tuple[SizeOption, ...] = (
    SizeOption("small-portrait", 'S (Portrait) - 8" x 12"', 8, 12, 950.0, "Portrait"),
    SizeOption("medium-portrait", 'M (Portrait) - 12" x 16"', 12, 16, 1250.0, "Portrait"),
    SizeOption("large-portrait", 'L (Portrait) - 16" x 24"', 16, 24, 1950.0, "Portrait"),
    SizeOption("small-landscape", 'S (Landscape) - 12" x 8"', 12, 8, 950.0, "Landscape"),
    SizeOption("medium-landscape", 'M (Landscape) - 16" x 12"', 16, 12, 1250.0, "Landscape"),
    SizeOption("large-landscape", 'L (Landscape) - 24" x 16"', 24, 16, 1950.0, "Landscape"),
)

ROOM_MOCKS: tuple[RoomMock, ...] = (
    RoomMock(1, "Living Room", "/assets/room-mock/roomone.png", Position(0.5, 0.4), 0.4),
    RoomMock(2, "Bedroom", "/assets/room-mock/roomtwo.png", Position(0.3, 0.4), 0.35),
    RoomMock(3, "Office", "/assets/room-mock/roomthree.png", Position(0.7, 0.4), 0.35),
)

IMAGE_EFFECT_FILTERS = {
    "Original": "none",
    "B&W": "grayscale(100%)",
    "Sepia": "sepia(100%)",
}

MAX_ZOOM = 100.0
FIT_BOOST = 1.2


def find_layout(layout_id: str) -> PanelLayout | None:
    return next((layout for layout in PANEL_LAYOUTS if layout.id == layout_id), None)


def find_size(label: str) -> SizeOption | None:
    return next((size for size in SIZE_OPTIONS if size.label == label), None)


def image_filter(effect: str | None) -> str:
    """CSS filter for an image effect; unknown effects render unfiltered."""
    return IMAGE_EFFECT_FILTERS.get(effect or "", "none")


def initial_zoom(natural: Size, content: Size) -> ZoomFit:
    """Zoom that fits an image's height into the frame, or its width when
    height-fitting would overflow, boosted by 20% and capped at 100.
    """
    zoom = content.height / natural.height * 100
    if natural.width * zoom / 100 > content.width:
        zoom = content.width / natural.width * 100
    return ZoomFit(zoom=min(zoom * FIT_BOOST, MAX_ZOOM))


def max_offset(zoom: float) -> float:
    return max(0.0, (zoom / 100 - 1) / 2)


def clamp_position(position: Position, zoom: float) -> Position:
    limit = max_offset(zoom)
    return Position(
        x=max(-limit, min(limit, position.x)),
        y=max(-limit, min(limit, position.y)),
    )


def drag_origin(client: Position, position: Position, dims: Size) -> Position:
    """Pointer anchor recorded when a drag starts."""
    return Position(
        x=client.x - position.x * dims.width,
        y=client.y - position.y * dims.height,
    )


def drag(start: Position, client: Position, dims: Size, zoom: float) -> Position:
    moved = Position(
        x=(client.x - start.x) / dims.width,
        y=(client.y - start.y) / dims.height,
    )
    return clamp_position(moved, zoom)


def change_zoom(position: Position, zoom: float) -> Position:
    return clamp_position(position, zoom)


def panel_boxes(layout: PanelLayout) -> list[PanelBox]:
    return [
        PanelBox(
            id=panel.id,
            left=panel.x / layout.total_width * 100,
            top=panel.y / layout.total_height * 100,
            width=panel.width / layout.total_width * 100,
            height=panel.height / layout.total_height * 100,
        )
        for panel in layout.panels
    ]


def canvas_dimensions(
    mock: RoomMock,
    mock_width: float,
    mock_height: float,
    layout: PanelLayout | None = None,
    size: SizeOption | None = None,
) -> Size:
    """Canvas size drawn on a room mock-up.

    The aspect ratio comes from the layout when given, otherwise from the
    size option (height over width, as the designer has always drawn it).
    """
    base = min(mock_width, mock_height)
    if layout is not None:
        aspect = layout.total_width / layout.total_height
    elif size is not None:
        aspect = size.height / size.width
    else:
        raise ValueError("A layout or a size option is required")

    width = base * mock.canvas_scale
    height = width / aspect
    if height > base:
        height = base * mock.canvas_scale
        width = height * aspect
    return Size(width=width, height=height)


def preview_box(variation: Size, container: Size) -> Size:
    """Largest box with the variation's aspect ratio inside the container."""
    aspect = variation.width / variation.height
    width = container.width
    height = width / aspect
    if height > container.height:
        height = container.height
        width = height * aspect
    return Size(width=width, height=height)
