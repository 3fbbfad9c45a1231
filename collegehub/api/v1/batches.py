# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Batch API endpoints.

This module provides endpoints for batch management:
- POST /types - Create batch type
- GET /types - List batch types
- PUT /types/{batch_type_id} - Rename batch type
- DELETE /types/{batch_type_id} - Delete batch type
- POST / - Create batch
- GET / - List batches (program / academic year filters)
- GET /{batch_id} - Get batch
- PATCH /{batch_id} - Update batch status
- DELETE /{batch_id} - Delete batch
- POST /{batch_id}/subjects - Add a subject to the batch
- GET /{batch_id}/subjects - List batch subjects
- PUT /subjects/{batch_subject_id} - Update a batch subject
- DELETE /subjects/{batch_subject_id} - Remove a batch subject
- POST /{batch_id}/students - Assign students
- GET /{batch_id}/students - List students of the batch
- PATCH /students/{student_batch_id} - Update a student's batch status
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from collegehub.api.dependencies import (
    get_db,
    require_college_admin,
    require_college_user,
    require_staff,
)
from collegehub.api.middleware.auth import CurrentUser
from collegehub.domains.batch.service import (
    BatchExistsError,
    BatchNotFoundError,
    BatchReferenceNotFoundError,
    BatchService,
)
from collegehub.models.academic import (
    BatchCreateRequest,
    BatchListResponse,
    BatchResponse,
    BatchSubjectCreateRequest,
    BatchSubjectListResponse,
    BatchSubjectResponse,
    BatchSubjectUpdateRequest,
    BatchTypeListResponse,
    BatchTypeRequest,
    BatchTypeResponse,
    BatchUpdateRequest,
    StudentBatchAssignRequest,
    StudentBatchAssignResponse,
    StudentBatchListResponse,
    StudentBatchResponse,
    StudentBatchUpdateRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_service(db: AsyncSession, current_user: CurrentUser) -> BatchService:
    return BatchService(db=db, college_id=current_user.college_id)


def _not_found(e: Exception) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


def _conflict(e: Exception) -> HTTPException:
    return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))


# =========================================================================
# Batch types
# =========================================================================


@router.post(
    "/types",
    response_model=BatchTypeResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create batch type",
)
async def create_batch_type(
    data: BatchTypeRequest,
    current_user: CurrentUser = Depends(require_college_admin),
    db: AsyncSession = Depends(get_db),
) -> BatchTypeResponse:
    try:
        return await _get_service(db, current_user).create_batch_type(data)
    except BatchExistsError as e:
        raise _conflict(e)


@router.get("/types", response_model=BatchTypeListResponse, summary="List batch types")
async def list_batch_types(
    current_user: CurrentUser = Depends(require_college_user),
    db: AsyncSession = Depends(get_db),
) -> BatchTypeListResponse:
    items, total = await _get_service(db, current_user).list_batch_types()
    return BatchTypeListResponse(items=items, total=total)


@router.put(
    "/types/{batch_type_id}",
    response_model=BatchTypeResponse,
    summary="Update batch type",
)
async def update_batch_type(
    batch_type_id: UUID,
    data: BatchTypeRequest,
    current_user: CurrentUser = Depends(require_college_admin),
    db: AsyncSession = Depends(get_db),
) -> BatchTypeResponse:
    try:
        return await _get_service(db, current_user).update_batch_type(batch_type_id, data)
    except BatchNotFoundError as e:
        raise _not_found(e)
    except BatchExistsError as e:
        raise _conflict(e)


@router.delete(
    "/types/{batch_type_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete batch type",
)
async def delete_batch_type(
    batch_type_id: UUID,
    current_user: CurrentUser = Depends(require_college_admin),
    db: AsyncSession = Depends(get_db),
) -> None:
    try:
        await _get_service(db, current_user).delete_batch_type(batch_type_id)
    except BatchNotFoundError as e:
        raise _not_found(e)


# =========================================================================
# Batch subjects and student batches addressed by their own id
# =========================================================================


@router.put(
    "/subjects/{batch_subject_id}",
    response_model=BatchSubjectResponse,
    summary="Update batch subject",
)
async def update_batch_subject(
    batch_subject_id: UUID,
    data: BatchSubjectUpdateRequest,
    current_user: CurrentUser = Depends(require_college_admin),
    db: AsyncSession = Depends(get_db),
) -> BatchSubjectResponse:
    try:
        return await _get_service(db, current_user).update_batch_subject(batch_subject_id, data)
    except (BatchNotFoundError, BatchReferenceNotFoundError) as e:
        raise _not_found(e)


@router.delete(
    "/subjects/{batch_subject_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove batch subject",
)
async def remove_batch_subject(
    batch_subject_id: UUID,
    current_user: CurrentUser = Depends(require_college_admin),
    db: AsyncSession = Depends(get_db),
) -> None:
    try:
        await _get_service(db, current_user).remove_batch_subject(batch_subject_id)
    except BatchNotFoundError as e:
        raise _not_found(e)


@router.patch(
    "/students/{student_batch_id}",
    response_model=StudentBatchResponse,
    summary="Update student batch status",
)
async def update_student_batch(
    student_batch_id: UUID,
    data: StudentBatchUpdateRequest,
    current_user: CurrentUser = Depends(require_college_admin),
    db: AsyncSession = Depends(get_db),
) -> StudentBatchResponse:
    try:
        return await _get_service(db, current_user).update_student_batch(student_batch_id, data)
    except BatchNotFoundError as e:
        raise _not_found(e)


# =========================================================================
# Batches
# =========================================================================


@router.post(
    "",
    response_model=BatchResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create batch",
    description="Name is derived as {program code}-{semester alias}-{academic year}.",
)
async def create_batch(
    data: BatchCreateRequest,
    current_user: CurrentUser = Depends(require_college_admin),
    db: AsyncSession = Depends(get_db),
) -> BatchResponse:
    try:
        return await _get_service(db, current_user).create_batch(data)
    except BatchReferenceNotFoundError as e:
        raise _not_found(e)
    except BatchExistsError as e:
        raise _conflict(e)


@router.get("", response_model=BatchListResponse, summary="List batches")
async def list_batches(
    program_id: UUID | None = Query(None),
    academic_year_id: UUID | None = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=200),
    current_user: CurrentUser = Depends(require_college_user),
    db: AsyncSession = Depends(get_db),
) -> BatchListResponse:
    items, total = await _get_service(db, current_user).list_batches(
        program_id=program_id,
        academic_year_id=academic_year_id,
        page=page,
        page_size=page_size,
    )
    return BatchListResponse(items=items, total=total)


@router.get("/{batch_id}", response_model=BatchResponse, summary="Get batch")
async def get_batch(
    batch_id: UUID,
    current_user: CurrentUser = Depends(require_college_user),
    db: AsyncSession = Depends(get_db),
) -> BatchResponse:
    try:
        return await _get_service(db, current_user).get_batch(batch_id)
    except BatchNotFoundError as e:
        raise _not_found(e)


@router.patch("/{batch_id}", response_model=BatchResponse, summary="Update batch status")
async def update_batch(
    batch_id: UUID,
    data: BatchUpdateRequest,
    current_user: CurrentUser = Depends(require_college_admin),
    db: AsyncSession = Depends(get_db),
) -> BatchResponse:
    try:
        return await _get_service(db, current_user).update_batch(batch_id, data)
    except BatchNotFoundError as e:
        raise _not_found(e)


@router.delete(
    "/{batch_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete batch",
)
async def delete_batch(
    batch_id: UUID,
    current_user: CurrentUser = Depends(require_college_admin),
    db: AsyncSession = Depends(get_db),
) -> None:
    try:
        await _get_service(db, current_user).delete_batch(batch_id)
    except BatchNotFoundError as e:
        raise _not_found(e)


@router.post(
    "/{batch_id}/subjects",
    response_model=BatchSubjectResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add subject to batch",
)
async def add_batch_subject(
    batch_id: UUID,
    data: BatchSubjectCreateRequest,
    current_user: CurrentUser = Depends(require_college_admin),
    db: AsyncSession = Depends(get_db),
) -> BatchSubjectResponse:
    try:
        return await _get_service(db, current_user).add_batch_subject(batch_id, data)
    except (BatchNotFoundError, BatchReferenceNotFoundError) as e:
        raise _not_found(e)
    except BatchExistsError as e:
        raise _conflict(e)


@router.get(
    "/{batch_id}/subjects",
    response_model=BatchSubjectListResponse,
    summary="List batch subjects",
)
async def list_batch_subjects(
    batch_id: UUID,
    current_user: CurrentUser = Depends(require_college_user),
    db: AsyncSession = Depends(get_db),
) -> BatchSubjectListResponse:
    try:
        items, total = await _get_service(db, current_user).list_batch_subjects(batch_id)
    except BatchNotFoundError as e:
        raise _not_found(e)
    return BatchSubjectListResponse(items=items, total=total)


@router.post(
    "/{batch_id}/students",
    response_model=StudentBatchAssignResponse,
    summary="Assign students to batch",
    description="Students already in the batch are skipped and listed in the response.",
)
async def assign_students(
    batch_id: UUID,
    data: StudentBatchAssignRequest,
    current_user: CurrentUser = Depends(require_college_admin),
    db: AsyncSession = Depends(get_db),
) -> StudentBatchAssignResponse:
    try:
        return await _get_service(db, current_user).assign_students(batch_id, data)
    except (BatchNotFoundError, BatchReferenceNotFoundError) as e:
        raise _not_found(e)


@router.get(
    "/{batch_id}/students",
    response_model=StudentBatchListResponse,
    summary="List batch students",
)
async def list_batch_students(
    batch_id: UUID,
    current_user: CurrentUser = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
) -> StudentBatchListResponse:
    try:
        items, total = await _get_service(db, current_user).list_batch_students(batch_id)
    except BatchNotFoundError as e:
        raise _not_found(e)
    return StudentBatchListResponse(items=items, total=total)
