# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Admission year API endpoints.

- POST / - Create admission year
- GET / - List admission years (year descending)
- PUT /{year_id} - Update admission year
- DELETE /{year_id} - Delete admission year
"""

import logging
from uuid import UUID

from fastapi import APIRouter, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from collegehub.api.dependencies import CollegeAdmin, CollegeUser, DBSession
from collegehub.api.middleware.auth import CurrentUser
from collegehub.domains.admission_year.service import (
    AdmissionYearExistsError,
    AdmissionYearInUseError,
    AdmissionYearNotFoundError,
    AdmissionYearService,
)
from collegehub.models.academic import (
    AdmissionYearCreateRequest,
    AdmissionYearListResponse,
    AdmissionYearResponse,
    AdmissionYearUpdateRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_service(db: AsyncSession, current_user: CurrentUser) -> AdmissionYearService:
    return AdmissionYearService(db=db, college_id=current_user.college_id)


@router.post(
    "",
    response_model=AdmissionYearResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create admission year",
)
async def create_admission_year(
    data: AdmissionYearCreateRequest,
    current_user: CollegeAdmin,
    db: DBSession,
) -> AdmissionYearResponse:
    try:
        return await _get_service(db, current_user).create_admission_year(data)
    except AdmissionYearExistsError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))


@router.get("", response_model=AdmissionYearListResponse, summary="List admission years")
async def list_admission_years(
    current_user: CollegeUser,
    db: DBSession,
) -> AdmissionYearListResponse:
    items, total = await _get_service(db, current_user).list_admission_years()
    return AdmissionYearListResponse(items=items, total=total)


@router.put("/{year_id}", response_model=AdmissionYearResponse, summary="Update admission year")
async def update_admission_year(
    year_id: UUID,
    data: AdmissionYearUpdateRequest,
    current_user: CollegeAdmin,
    db: DBSession,
) -> AdmissionYearResponse:
    try:
        return await _get_service(db, current_user).update_admission_year(year_id, data)
    except AdmissionYearNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except AdmissionYearExistsError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))


@router.delete(
    "/{year_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete admission year",
)
async def delete_admission_year(
    year_id: UUID,
    current_user: CollegeAdmin,
    db: DBSession,
) -> None:
    try:
        await _get_service(db, current_user).delete_admission_year(year_id)
    except AdmissionYearNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except AdmissionYearInUseError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
