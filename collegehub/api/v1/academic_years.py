# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Academic year management API endpoints.

This module provides endpoints for academic year management:
- POST / - Create a new academic year
- GET / - List academic years
- GET /{year_id} - Get academic year details
- PUT /{year_id} - Update academic year
- DELETE /{year_id} - Delete academic year

Writes require college admin access.
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from collegehub.api.dependencies import get_db, require_college_admin, require_college_user
from collegehub.api.middleware.auth import CurrentUser
from collegehub.domains.academic_year.service import (
    AcademicYearExistsError,
    AcademicYearInUseError,
    AcademicYearNotFoundError,
    AcademicYearService,
    AcademicYearValidationError,
)
from collegehub.models.academic import (
    AcademicYearCreateRequest,
    AcademicYearListResponse,
    AcademicYearResponse,
    AcademicYearUpdateRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_service(db: AsyncSession, current_user: CurrentUser) -> AcademicYearService:
    return AcademicYearService(db=db, college_id=current_user.college_id)


@router.post(
    "",
    response_model=AcademicYearResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create academic year",
)
async def create_academic_year(
    data: AcademicYearCreateRequest,
    current_user: CurrentUser = Depends(require_college_admin),
    db: AsyncSession = Depends(get_db),
) -> AcademicYearResponse:
    try:
        return await _get_service(db, current_user).create_academic_year(data)
    except AcademicYearValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except AcademicYearExistsError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))


@router.get(
    "",
    response_model=AcademicYearListResponse,
    summary="List academic years",
)
async def list_academic_years(
    status_filter: bool | None = Query(None, alias="status"),
    current_user: CurrentUser = Depends(require_college_user),
    db: AsyncSession = Depends(get_db),
) -> AcademicYearListResponse:
    items, total = await _get_service(db, current_user).list_academic_years(status=status_filter)
    return AcademicYearListResponse(items=items, total=total)


@router.get(
    "/{year_id}",
    response_model=AcademicYearResponse,
    summary="Get academic year",
)
async def get_academic_year(
    year_id: UUID,
    current_user: CurrentUser = Depends(require_college_user),
    db: AsyncSession = Depends(get_db),
) -> AcademicYearResponse:
    try:
        return await _get_service(db, current_user).get_academic_year(year_id)
    except AcademicYearNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.put(
    "/{year_id}",
    response_model=AcademicYearResponse,
    summary="Update academic year",
)
async def update_academic_year(
    year_id: UUID,
    data: AcademicYearUpdateRequest,
    current_user: CurrentUser = Depends(require_college_admin),
    db: AsyncSession = Depends(get_db),
) -> AcademicYearResponse:
    try:
        return await _get_service(db, current_user).update_academic_year(year_id, data)
    except AcademicYearNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except AcademicYearValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except AcademicYearExistsError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))


@router.delete(
    "/{year_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete academic year",
    description="Refused while batches reference the year.",
)
async def delete_academic_year(
    year_id: UUID,
    current_user: CurrentUser = Depends(require_college_admin),
    db: AsyncSession = Depends(get_db),
) -> None:
    try:
        await _get_service(db, current_user).delete_academic_year(year_id)
    except AcademicYearNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except AcademicYearInUseError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
