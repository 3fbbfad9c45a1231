# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Canvas preview geometry endpoints (public, stateless).

- GET /canvas/presets - Layouts, sizes, room mock-ups and effect filters
- GET /canvas/layouts/{layout_id}/panels - Panel boxes in percent
- POST /canvas/initial-zoom - Fit an image into its frame
- POST /canvas/drag - Image position after a drag
- POST /canvas/zoom - Position re-clamped for a new zoom
- POST /canvas/dimensions - Canvas size on a room mock-up
- POST /canvas/preview-box - Variation box inside a container
"""

from dataclasses import asdict

from fastapi import APIRouter, HTTPException, status

from collegehub.domains.shop import canvas
from collegehub.models.shop import (
    CanvasDimensionsRequest,
    CanvasPresetsResponse,
    ChangeZoomRequest,
    DragRequest,
    InitialZoomRequest,
    PanelBoxResponse,
    PointModel,
    PreviewBoxRequest,
    SizeModel,
    ZoomResponse,
)

router = APIRouter(prefix="/canvas")


def _size(model: SizeModel) -> canvas.Size:
    return canvas.Size(width=model.width, height=model.height)


def _point(model: PointModel) -> canvas.Position:
    return canvas.Position(x=model.x, y=model.y)


@router.get("/presets", response_model=CanvasPresetsResponse, summary="Designer presets")
async def get_presets() -> CanvasPresetsResponse:
    return CanvasPresetsResponse(
        layouts=[asdict(layout) for layout in canvas.PANEL_LAYOUTS],
        sizes=[asdict(size) for size in canvas.SIZE_OPTIONS],
        room_mocks=[asdict(mock) for mock in canvas.ROOM_MOCKS],
        image_effects=dict(canvas.IMAGE_EFFECT_FILTERS),
    )


@router.get(
    "/layouts/{layout_id}/panels",
    response_model=list[PanelBoxResponse],
    summary="Layout panel boxes",
)
async def get_panel_boxes(layout_id: str) -> list[PanelBoxResponse]:
    layout = canvas.find_layout(layout_id)
    if layout is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Layout not found")
    return [PanelBoxResponse(**asdict(box)) for box in canvas.panel_boxes(layout)]


@router.post("/initial-zoom", response_model=ZoomResponse, summary="Initial zoom")
async def initial_zoom(data: InitialZoomRequest) -> ZoomResponse:
    fit = canvas.initial_zoom(_size(data.natural), _size(data.content))
    return ZoomResponse(zoom=fit.zoom, position=PointModel(**asdict(fit.position)))


@router.post("/drag", response_model=PointModel, summary="Drag image")
async def drag(data: DragRequest) -> PointModel:
    moved = canvas.drag(_point(data.start), _point(data.client), _size(data.dims), data.zoom)
    return PointModel(**asdict(moved))


@router.post("/zoom", response_model=ZoomResponse, summary="Change zoom")
async def change_zoom(data: ChangeZoomRequest) -> ZoomResponse:
    position = canvas.change_zoom(_point(data.position), data.zoom)
    return ZoomResponse(zoom=data.zoom, position=PointModel(**asdict(position)))


@router.post("/dimensions", response_model=SizeModel, summary="Canvas size on mock-up")
async def canvas_dimensions(data: CanvasDimensionsRequest) -> SizeModel:
    mock = next((m for m in canvas.ROOM_MOCKS if m.id == data.mock_id), None)
    if mock is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Room mock not found")

    layout = canvas.find_layout(data.layout_id) if data.layout_id else None
    size = canvas.find_size(data.size_label) if data.size_label else None
    if layout is None and size is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Layout or size not found"
        )

    result = canvas.canvas_dimensions(
        mock, data.mock_width, data.mock_height, layout=layout, size=size
    )
    return SizeModel(width=result.width, height=result.height)


@router.post("/preview-box", response_model=SizeModel, summary="Preview box")
async def preview_box(data: PreviewBoxRequest) -> SizeModel:
    result = canvas.preview_box(_size(data.variation), _size(data.container))
    return SizeModel(width=result.width, height=result.height)
