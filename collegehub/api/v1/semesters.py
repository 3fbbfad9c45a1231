# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Semester API endpoints.

- POST / - Create semester
- GET / - List semesters (numerical ascending)
- GET /{semester_id} - Get semester
- PUT /{semester_id} - Update semester
- DELETE /{semester_id} - Delete semester
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from collegehub.api.dependencies import get_db, require_college_admin, require_college_user
from collegehub.api.middleware.auth import CurrentUser
from collegehub.domains.semester.service import (
    SemesterExistsError,
    SemesterNotFoundError,
    SemesterService,
)
from collegehub.models.academic import (
    SemesterCreateRequest,
    SemesterListResponse,
    SemesterResponse,
    SemesterUpdateRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_service(db: AsyncSession, current_user: CurrentUser) -> SemesterService:
    return SemesterService(db=db, college_id=current_user.college_id)


@router.post(
    "",
    response_model=SemesterResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create semester",
)
async def create_semester(
    data: SemesterCreateRequest,
    current_user: CurrentUser = Depends(require_college_admin),
    db: AsyncSession = Depends(get_db),
) -> SemesterResponse:
    try:
        return await _get_service(db, current_user).create_semester(data)
    except SemesterExistsError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))


@router.get("", response_model=SemesterListResponse, summary="List semesters")
async def list_semesters(
    current_user: CurrentUser = Depends(require_college_user),
    db: AsyncSession = Depends(get_db),
) -> SemesterListResponse:
    items, total = await _get_service(db, current_user).list_semesters()
    return SemesterListResponse(items=items, total=total)


@router.get("/{semester_id}", response_model=SemesterResponse, summary="Get semester")
async def get_semester(
    semester_id: UUID,
    current_user: CurrentUser = Depends(require_college_user),
    db: AsyncSession = Depends(get_db),
) -> SemesterResponse:
    try:
        return await _get_service(db, current_user).get_semester(semester_id)
    except SemesterNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.put("/{semester_id}", response_model=SemesterResponse, summary="Update semester")
async def update_semester(
    semester_id: UUID,
    data: SemesterUpdateRequest,
    current_user: CurrentUser = Depends(require_college_admin),
    db: AsyncSession = Depends(get_db),
) -> SemesterResponse:
    try:
        return await _get_service(db, current_user).update_semester(semester_id, data)
    except SemesterNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except SemesterExistsError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))


@router.delete(
    "/{semester_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete semester",
)
async def delete_semester(
    semester_id: UUID,
    current_user: CurrentUser = Depends(require_college_admin),
    db: AsyncSession = Depends(get_db),
) -> None:
    try:
        await _get_service(db, current_user).delete_semester(semester_id)
    except SemesterNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
