# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Attendance API endpoints.

- POST /classes, GET /classes, GET /classes/{id}, PUT /classes/{id},
  DELETE /classes/{id} - Monthly class counts of a batch subject
- POST / - Record one student's monthly attendance
- GET / - List attendance (monthly classes / student filters)
- POST /import - Import a month's attendance from xlsx
- GET /report/{batch_subject_id} - Aggregated attendance per student
- GET /me/{batch_subject_id} - Student's own aggregated attendance
- PUT /{attendance_id}, DELETE /{attendance_id}
"""

import logging
from uuid import UUID

from fastapi import (
    APIRouter,
    Depends,
    File,
    Form,
    HTTPException,
    Query,
    Request,
    UploadFile,
    status,
)
from sqlalchemy.ext.asyncio import AsyncSession

from collegehub.api.dependencies import get_db, require_staff, require_student
from collegehub.api.middleware.auth import CurrentUser
from collegehub.api.middleware.rate_limit import RATE_LIMIT_UPLOAD, limiter
from collegehub.domains.attendance.service import (
    AttendanceExistsError,
    AttendanceNotFoundError,
    AttendanceService,
    AttendanceValidationError,
)
from collegehub.models.attendance import (
    AttendanceCreateRequest,
    AttendanceImportResponse,
    AttendanceListResponse,
    AttendanceResponse,
    AttendanceUpdateRequest,
    BatchSubjectAttendanceReport,
    MonthlyClassesCreateRequest,
    MonthlyClassesListResponse,
    MonthlyClassesResponse,
    MonthlyClassesUpdateRequest,
)
from collegehub.utils.excel import ExcelFormatError

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_service(db: AsyncSession, current_user: CurrentUser) -> AttendanceService:
    return AttendanceService(db=db, college_id=current_user.college_id)


def _validation_failed(e: AttendanceValidationError) -> HTTPException:
    if e.errors:
        return HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"message": str(e), "errors": [err.to_dict() for err in e.errors]},
        )
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


# =========================================================================
# Monthly classes
# =========================================================================


@router.post(
    "/classes",
    response_model=MonthlyClassesResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record monthly classes",
)
async def create_monthly_classes(
    data: MonthlyClassesCreateRequest,
    current_user: CurrentUser = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
) -> MonthlyClassesResponse:
    try:
        return await _get_service(db, current_user).create_monthly_classes(data)
    except AttendanceNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except AttendanceExistsError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))


@router.get("/classes", response_model=MonthlyClassesListResponse, summary="List monthly classes")
async def list_monthly_classes(
    batch_subject_id: UUID | None = Query(None),
    current_user: CurrentUser = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
) -> MonthlyClassesListResponse:
    items, total = await _get_service(db, current_user).list_monthly_classes(
        batch_subject_id=batch_subject_id
    )
    return MonthlyClassesListResponse(items=items, total=total)


@router.get(
    "/classes/{classes_id}",
    response_model=MonthlyClassesResponse,
    summary="Get monthly classes",
)
async def get_monthly_classes(
    classes_id: UUID,
    current_user: CurrentUser = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
) -> MonthlyClassesResponse:
    try:
        return await _get_service(db, current_user).get_monthly_classes(classes_id)
    except AttendanceNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.put(
    "/classes/{classes_id}",
    response_model=MonthlyClassesResponse,
    summary="Update monthly classes",
)
async def update_monthly_classes(
    classes_id: UUID,
    data: MonthlyClassesUpdateRequest,
    current_user: CurrentUser = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
) -> MonthlyClassesResponse:
    try:
        return await _get_service(db, current_user).update_monthly_classes(classes_id, data)
    except AttendanceNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except AttendanceValidationError as e:
        raise _validation_failed(e)


@router.delete(
    "/classes/{classes_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete monthly classes",
)
async def delete_monthly_classes(
    classes_id: UUID,
    current_user: CurrentUser = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
) -> None:
    try:
        await _get_service(db, current_user).delete_monthly_classes(classes_id)
    except AttendanceNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


# =========================================================================
# Attendance
# =========================================================================


@router.post(
    "",
    response_model=AttendanceResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record attendance",
)
async def create_attendance(
    data: AttendanceCreateRequest,
    current_user: CurrentUser = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
) -> AttendanceResponse:
    try:
        return await _get_service(db, current_user).create_attendance(data)
    except AttendanceNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except AttendanceValidationError as e:
        raise _validation_failed(e)
    except AttendanceExistsError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))


@router.get("", response_model=AttendanceListResponse, summary="List attendance")
async def list_attendance(
    monthly_classes_id: UUID | None = Query(None),
    student_id: UUID | None = Query(None),
    current_user: CurrentUser = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
) -> AttendanceListResponse:
    items, total = await _get_service(db, current_user).list_attendance(
        monthly_classes_id=monthly_classes_id, student_id=student_id
    )
    return AttendanceListResponse(items=items, total=total)


@router.post(
    "/import",
    response_model=AttendanceImportResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Import monthly attendance",
    description=(
        "Columns: B name, C enrollment number, D attended theory, "
        "E attended practical. Nothing is imported when any row fails."
    ),
)
@limiter.limit(RATE_LIMIT_UPLOAD)
async def import_attendance(
    request: Request,
    file: UploadFile = File(...),
    monthly_classes_id: UUID = Form(...),
    current_user: CurrentUser = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
) -> AttendanceImportResponse:
    content = await file.read()
    try:
        count = await _get_service(db, current_user).import_attendance(
            content, monthly_classes_id
        )
    except ExcelFormatError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except AttendanceNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except AttendanceValidationError as e:
        raise _validation_failed(e)
    return AttendanceImportResponse(
        message=f"Successfully imported {count} attendance records.",
        imported_count=count,
    )


@router.get(
    "/report/{batch_subject_id}",
    response_model=BatchSubjectAttendanceReport,
    summary="Batch subject attendance report",
)
async def batch_subject_report(
    batch_subject_id: UUID,
    current_user: CurrentUser = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
) -> BatchSubjectAttendanceReport:
    try:
        return await _get_service(db, current_user).batch_subject_report(batch_subject_id)
    except AttendanceNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.get(
    "/me/{batch_subject_id}",
    response_model=BatchSubjectAttendanceReport,
    summary="Own attendance in a batch subject",
)
async def own_attendance(
    batch_subject_id: UUID,
    current_user: CurrentUser = Depends(require_student),
    db: AsyncSession = Depends(get_db),
) -> BatchSubjectAttendanceReport:
    service = _get_service(db, current_user)
    try:
        student_id = await service.student_id_for_user(current_user.id)
        return await service.batch_subject_report(batch_subject_id, student_id=student_id)
    except AttendanceNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.put(
    "/{attendance_id}",
    response_model=AttendanceResponse,
    summary="Update attendance",
)
async def update_attendance(
    attendance_id: UUID,
    data: AttendanceUpdateRequest,
    current_user: CurrentUser = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
) -> AttendanceResponse:
    try:
        return await _get_service(db, current_user).update_attendance(attendance_id, data)
    except AttendanceNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except AttendanceValidationError as e:
        raise _validation_failed(e)


@router.delete(
    "/{attendance_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete attendance",
)
async def delete_attendance(
    attendance_id: UUID,
    current_user: CurrentUser = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
) -> None:
    try:
        await _get_service(db, current_user).delete_attendance(attendance_id)
    except AttendanceNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
