# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Program API endpoints.

- POST / - Create program
- GET / - List programs (optional department filter)
- GET /{program_id} - Get program
- PUT /{program_id} - Update program
- DELETE /{program_id} - Delete program
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from collegehub.api.dependencies import get_db, require_college_admin, require_college_user
from collegehub.api.middleware.auth import CurrentUser
from collegehub.domains.program.service import (
    DepartmentNotFoundError,
    ProgramExistsError,
    ProgramNotFoundError,
    ProgramService,
)
from collegehub.models.academic import (
    ProgramCreateRequest,
    ProgramListResponse,
    ProgramResponse,
    ProgramUpdateRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_service(db: AsyncSession, current_user: CurrentUser) -> ProgramService:
    return ProgramService(db=db, college_id=current_user.college_id)


@router.post(
    "",
    response_model=ProgramResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create program",
)
async def create_program(
    data: ProgramCreateRequest,
    current_user: CurrentUser = Depends(require_college_admin),
    db: AsyncSession = Depends(get_db),
) -> ProgramResponse:
    try:
        return await _get_service(db, current_user).create_program(data)
    except DepartmentNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ProgramExistsError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))


@router.get("", response_model=ProgramListResponse, summary="List programs")
async def list_programs(
    department_id: UUID | None = Query(None),
    status_filter: bool | None = Query(None, alias="status"),
    current_user: CurrentUser = Depends(require_college_user),
    db: AsyncSession = Depends(get_db),
) -> ProgramListResponse:
    items, total = await _get_service(db, current_user).list_programs(
        department_id=department_id, status=status_filter
    )
    return ProgramListResponse(items=items, total=total)


@router.get("/{program_id}", response_model=ProgramResponse, summary="Get program")
async def get_program(
    program_id: UUID,
    current_user: CurrentUser = Depends(require_college_user),
    db: AsyncSession = Depends(get_db),
) -> ProgramResponse:
    try:
        return await _get_service(db, current_user).get_program(program_id)
    except ProgramNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.put("/{program_id}", response_model=ProgramResponse, summary="Update program")
async def update_program(
    program_id: UUID,
    data: ProgramUpdateRequest,
    current_user: CurrentUser = Depends(require_college_admin),
    db: AsyncSession = Depends(get_db),
) -> ProgramResponse:
    try:
        return await _get_service(db, current_user).update_program(program_id, data)
    except (ProgramNotFoundError, DepartmentNotFoundError) as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ProgramExistsError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))


@router.delete(
    "/{program_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete program",
)
async def delete_program(
    program_id: UUID,
    current_user: CurrentUser = Depends(require_college_admin),
    db: AsyncSession = Depends(get_db),
) -> None:
    try:
        await _get_service(db, current_user).delete_program(program_id)
    except ProgramNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
