# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Subject API endpoints.

- POST /types, GET /types, PUT /types/{id}, DELETE /types/{id} - Subject types
- POST / - Create subject
- GET / - List subjects (program / semester filters)
- GET /{subject_id} - Get subject
- PUT /{subject_id} - Update subject
- DELETE /{subject_id} - Delete subject
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from collegehub.api.dependencies import get_db, require_college_admin, require_college_user
from collegehub.api.middleware.auth import CurrentUser
from collegehub.domains.subject.service import (
    SubjectExistsError,
    SubjectNotFoundError,
    SubjectService,
)
from collegehub.models.academic import (
    SubjectCreateRequest,
    SubjectListResponse,
    SubjectResponse,
    SubjectTypeCreateRequest,
    SubjectTypeListResponse,
    SubjectTypeResponse,
    SubjectTypeUpdateRequest,
    SubjectUpdateRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_service(db: AsyncSession, current_user: CurrentUser) -> SubjectService:
    return SubjectService(db=db, college_id=current_user.college_id)


@router.post(
    "/types",
    response_model=SubjectTypeResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create subject type",
)
async def create_subject_type(
    data: SubjectTypeCreateRequest,
    current_user: CurrentUser = Depends(require_college_admin),
    db: AsyncSession = Depends(get_db),
) -> SubjectTypeResponse:
    try:
        return await _get_service(db, current_user).create_subject_type(data)
    except SubjectExistsError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))


@router.get("/types", response_model=SubjectTypeListResponse, summary="List subject types")
async def list_subject_types(
    current_user: CurrentUser = Depends(require_college_user),
    db: AsyncSession = Depends(get_db),
) -> SubjectTypeListResponse:
    items, total = await _get_service(db, current_user).list_subject_types()
    return SubjectTypeListResponse(items=items, total=total)


@router.put(
    "/types/{subject_type_id}",
    response_model=SubjectTypeResponse,
    summary="Update subject type",
)
async def update_subject_type(
    subject_type_id: UUID,
    data: SubjectTypeUpdateRequest,
    current_user: CurrentUser = Depends(require_college_admin),
    db: AsyncSession = Depends(get_db),
) -> SubjectTypeResponse:
    try:
        return await _get_service(db, current_user).update_subject_type(subject_type_id, data)
    except SubjectNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except SubjectExistsError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))


@router.delete(
    "/types/{subject_type_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete subject type",
)
async def delete_subject_type(
    subject_type_id: UUID,
    current_user: CurrentUser = Depends(require_college_admin),
    db: AsyncSession = Depends(get_db),
) -> None:
    try:
        await _get_service(db, current_user).delete_subject_type(subject_type_id)
    except SubjectNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.post(
    "",
    response_model=SubjectResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create subject",
)
async def create_subject(
    data: SubjectCreateRequest,
    current_user: CurrentUser = Depends(require_college_admin),
    db: AsyncSession = Depends(get_db),
) -> SubjectResponse:
    try:
        return await _get_service(db, current_user).create_subject(data)
    except SubjectNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except SubjectExistsError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))


@router.get("", response_model=SubjectListResponse, summary="List subjects")
async def list_subjects(
    program_id: UUID | None = Query(None),
    semester_id: UUID | None = Query(None),
    current_user: CurrentUser = Depends(require_college_user),
    db: AsyncSession = Depends(get_db),
) -> SubjectListResponse:
    items, total = await _get_service(db, current_user).list_subjects(
        program_id=program_id, semester_id=semester_id
    )
    return SubjectListResponse(items=items, total=total)


@router.get("/{subject_id}", response_model=SubjectResponse, summary="Get subject")
async def get_subject(
    subject_id: UUID,
    current_user: CurrentUser = Depends(require_college_user),
    db: AsyncSession = Depends(get_db),
) -> SubjectResponse:
    try:
        return await _get_service(db, current_user).get_subject(subject_id)
    except SubjectNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.put("/{subject_id}", response_model=SubjectResponse, summary="Update subject")
async def update_subject(
    subject_id: UUID,
    data: SubjectUpdateRequest,
    current_user: CurrentUser = Depends(require_college_admin),
    db: AsyncSession = Depends(get_db),
) -> SubjectResponse:
    try:
        return await _get_service(db, current_user).update_subject(subject_id, data)
    except SubjectNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except SubjectExistsError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))


@router.delete(
    "/{subject_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete subject",
)
async def delete_subject(
    subject_id: UUID,
    current_user: CurrentUser = Depends(require_college_admin),
    db: AsyncSession = Depends(get_db),
) -> None:
    try:
        await _get_service(db, current_user).delete_subject(subject_id)
    except SubjectNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
