# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""College management API endpoints.

This module provides endpoints for college management:
- POST / - Create a college (SBTE admin)
- GET / - List colleges (SBTE admin)
- GET /{college_id} - Get college details
- PUT /{college_id} - Update a college (SBTE admin)
- GET /{college_id}/stats - College statistics
- POST /{college_id}/departments - Create a department (SBTE admin)
- GET /{college_id}/departments - List departments

College users may read their own college only.
"""

import logging
from uuid import UUID

from fastapi import APIRouter, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from collegehub.api.dependencies import AuthenticatedUser, DBSession, SBTEAdmin
from collegehub.api.middleware.auth import CurrentUser
from collegehub.domains.college.service import (
    CollegeExistsError,
    CollegeNotFoundError,
    CollegeService,
    DepartmentExistsError,
)
from collegehub.models.college import (
    CollegeCreateRequest,
    CollegeListResponse,
    CollegeResponse,
    CollegeStatsResponse,
    CollegeUpdateRequest,
    DepartmentCreateRequest,
    DepartmentListResponse,
    DepartmentResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_service(db: AsyncSession) -> CollegeService:
    return CollegeService(db=db)


def _ensure_can_read(current_user: CurrentUser, college_id: UUID) -> None:
    if current_user.is_sbte_admin:
        return
    if current_user.college_id != str(college_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"College {college_id} not found",
        )


@router.post(
    "",
    response_model=CollegeResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create college",
    description="Register a new college. Requires SBTE admin access.",
)
async def create_college(
    data: CollegeCreateRequest,
    current_user: SBTEAdmin,
    db: DBSession,
) -> CollegeResponse:
    try:
        return await _get_service(db).create_college(data)
    except CollegeExistsError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))


@router.get(
    "",
    response_model=CollegeListResponse,
    summary="List colleges",
)
async def list_colleges(
    current_user: SBTEAdmin,
    db: DBSession,
    search: str | None = Query(None, description="Match on name or code"),
    is_active: bool | None = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
) -> CollegeListResponse:
    items, total = await _get_service(db).list_colleges(
        search=search, is_active=is_active, page=page, page_size=page_size
    )
    return CollegeListResponse(items=items, total=total)


@router.get(
    "/{college_id}",
    response_model=CollegeResponse,
    summary="Get college",
)
async def get_college(
    college_id: UUID,
    current_user: AuthenticatedUser,
    db: DBSession,
) -> CollegeResponse:
    _ensure_can_read(current_user, college_id)
    try:
        return await _get_service(db).get_college(college_id)
    except CollegeNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.put(
    "/{college_id}",
    response_model=CollegeResponse,
    summary="Update college",
)
async def update_college(
    college_id: UUID,
    data: CollegeUpdateRequest,
    current_user: SBTEAdmin,
    db: DBSession,
) -> CollegeResponse:
    try:
        return await _get_service(db).update_college(college_id, data)
    except CollegeNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except CollegeExistsError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))


@router.get(
    "/{college_id}/stats",
    response_model=CollegeStatsResponse,
    summary="College statistics",
    description="Counts of departments, programs, students and batches.",
)
async def get_college_stats(
    college_id: UUID,
    current_user: AuthenticatedUser,
    db: DBSession,
) -> CollegeStatsResponse:
    _ensure_can_read(current_user, college_id)
    try:
        return await _get_service(db).get_stats(college_id)
    except CollegeNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.post(
    "/{college_id}/departments",
    response_model=DepartmentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create department",
)
async def create_department(
    college_id: UUID,
    data: DepartmentCreateRequest,
    current_user: SBTEAdmin,
    db: DBSession,
) -> DepartmentResponse:
    try:
        return await _get_service(db).create_department(college_id, data)
    except CollegeNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except DepartmentExistsError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))


@router.get(
    "/{college_id}/departments",
    response_model=DepartmentListResponse,
    summary="List departments",
)
async def list_departments(
    college_id: UUID,
    current_user: AuthenticatedUser,
    db: DBSession,
) -> DepartmentListResponse:
    _ensure_can_read(current_user, college_id)
    try:
        items, total = await _get_service(db).list_departments(college_id)
    except CollegeNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return DepartmentListResponse(items=items, total=total)
