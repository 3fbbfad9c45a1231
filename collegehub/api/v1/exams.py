# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Exam API endpoints.

This module provides endpoints for exam types and marks:
- POST /types, GET /types, GET /types/{id}, PUT /types/{id}, DELETE /types/{id}
- POST /marks - Record marks for one student
- GET /marks - List marks (batch subject / exam type filters)
- POST /marks/import - Import a batch subject's marks from xlsx
- GET /marks/report/{batch_subject_id} - Marks per student for a batch subject
- GET /marks/report/{batch_subject_id}/xlsx - The same report as a spreadsheet
- GET /marks/{mark_id}, PUT /marks/{mark_id}, DELETE /marks/{mark_id}
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
    Response,
    UploadFile,
    status,
)
from sqlalchemy.ext.asyncio import AsyncSession

from collegehub.api.dependencies import (
    DBSession,
    StaffUser,
    get_db,
    require_college_admin,
    require_college_user,
    require_staff,
)
from collegehub.api.middleware.auth import CurrentUser
from collegehub.api.middleware.rate_limit import RATE_LIMIT_UPLOAD, limiter
from collegehub.domains.exam.service import (
    ExamExistsError,
    ExamNotFoundError,
    ExamService,
    ExamValidationError,
)
from collegehub.models.exam import (
    BatchSubjectMarksReport,
    ExamMarkCreateRequest,
    ExamMarkImportResponse,
    ExamMarkListResponse,
    ExamMarkResponse,
    ExamMarkUpdateRequest,
    ExamTypeCreateRequest,
    ExamTypeListResponse,
    ExamTypeResponse,
    ExamTypeUpdateRequest,
)
from collegehub.utils.excel import XLSX_CONTENT_TYPE, ExcelFormatError, build_workbook

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_service(db: AsyncSession, current_user: CurrentUser) -> ExamService:
    return ExamService(db=db, college_id=current_user.college_id)


def _validation_failed(e: ExamValidationError) -> HTTPException:
    if e.errors:
        return HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"message": str(e), "errors": [err.to_dict() for err in e.errors]},
        )
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


# =========================================================================
# Exam types
# =========================================================================


@router.post(
    "/types",
    response_model=ExamTypeResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create exam type",
)
async def create_exam_type(
    data: ExamTypeCreateRequest,
    current_user: CurrentUser = Depends(require_college_admin),
    db: AsyncSession = Depends(get_db),
) -> ExamTypeResponse:
    try:
        return await _get_service(db, current_user).create_exam_type(data)
    except ExamExistsError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))


@router.get("/types", response_model=ExamTypeListResponse, summary="List exam types")
async def list_exam_types(
    status_filter: bool | None = Query(None, alias="status"),
    current_user: CurrentUser = Depends(require_college_user),
    db: AsyncSession = Depends(get_db),
) -> ExamTypeListResponse:
    items, total = await _get_service(db, current_user).list_exam_types(status=status_filter)
    return ExamTypeListResponse(items=items, total=total)


@router.get("/types/{exam_type_id}", response_model=ExamTypeResponse, summary="Get exam type")
async def get_exam_type(
    exam_type_id: UUID,
    current_user: CurrentUser = Depends(require_college_user),
    db: AsyncSession = Depends(get_db),
) -> ExamTypeResponse:
    try:
        return await _get_service(db, current_user).get_exam_type(exam_type_id)
    except ExamNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.put("/types/{exam_type_id}", response_model=ExamTypeResponse, summary="Update exam type")
async def update_exam_type(
    exam_type_id: UUID,
    data: ExamTypeUpdateRequest,
    current_user: CurrentUser = Depends(require_college_admin),
    db: AsyncSession = Depends(get_db),
) -> ExamTypeResponse:
    try:
        return await _get_service(db, current_user).update_exam_type(exam_type_id, data)
    except ExamNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ExamExistsError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except ExamValidationError as e:
        raise _validation_failed(e)


@router.delete(
    "/types/{exam_type_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete exam type",
)
async def delete_exam_type(
    exam_type_id: UUID,
    current_user: CurrentUser = Depends(require_college_admin),
    db: AsyncSession = Depends(get_db),
) -> None:
    try:
        await _get_service(db, current_user).delete_exam_type(exam_type_id)
    except ExamNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


# =========================================================================
# Exam marks
# =========================================================================


@router.post(
    "/marks",
    response_model=ExamMarkResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record exam marks",
)
async def create_exam_mark(
    data: ExamMarkCreateRequest,
    current_user: CurrentUser = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
) -> ExamMarkResponse:
    try:
        return await _get_service(db, current_user).create_exam_mark(data)
    except ExamNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ExamValidationError as e:
        raise _validation_failed(e)
    except ExamExistsError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))


@router.get("/marks", response_model=ExamMarkListResponse, summary="List exam marks")
async def list_exam_marks(
    batch_subject_id: UUID | None = Query(None),
    exam_type_id: UUID | None = Query(None),
    current_user: CurrentUser = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
) -> ExamMarkListResponse:
    items, total = await _get_service(db, current_user).list_exam_marks(
        batch_subject_id=batch_subject_id, exam_type_id=exam_type_id
    )
    return ExamMarkListResponse(items=items, total=total)


@router.post(
    "/marks/import",
    response_model=ExamMarkImportResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Import exam marks",
    description=(
        "Columns: B name, C enrollment number, D marks, E absent, F debarred, "
        "G malpractice (Yes/No). Nothing is imported when any row fails."
    ),
)
@limiter.limit(RATE_LIMIT_UPLOAD)
async def import_exam_marks(
    request: Request,
    file: UploadFile = File(...),
    batch_subject_id: UUID = Form(...),
    exam_type_id: UUID = Form(...),
    current_user: CurrentUser = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
) -> ExamMarkImportResponse:
    content = await file.read()
    try:
        count = await _get_service(db, current_user).import_exam_marks(
            content, batch_subject_id, exam_type_id
        )
    except ExcelFormatError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except ExamNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ExamValidationError as e:
        raise _validation_failed(e)
    return ExamMarkImportResponse(
        message=f"Successfully imported {count} exam marks.",
        success_count=count,
    )


@router.get(
    "/marks/report/{batch_subject_id}",
    response_model=BatchSubjectMarksReport,
    summary="Batch subject marks report",
)
async def batch_subject_report(
    batch_subject_id: UUID,
    current_user: CurrentUser = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
) -> BatchSubjectMarksReport:
    try:
        return await _get_service(db, current_user).batch_subject_report(batch_subject_id)
    except ExamNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.get(
    "/marks/report/{batch_subject_id}/xlsx",
    response_class=Response,
    summary="Batch subject marks report as xlsx",
)
async def export_batch_subject_report(
    batch_subject_id: UUID,
    current_user: StaffUser,
    db: DBSession,
) -> Response:
    try:
        report = await _get_service(db, current_user).batch_subject_report(batch_subject_id)
    except ExamNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    exam_names: list[str] = []
    for student in report.students:
        for mark in student.marks:
            if mark.exam_name not in exam_names:
                exam_names.append(mark.exam_name)

    rows = []
    for student in report.students:
        achieved = {
            mark.exam_name: "AB" if mark.was_absent else mark.achieved_marks
            for mark in student.marks
        }
        rows.append(
            [student.enrollment_no, student.student_name]
            + [achieved.get(name, "") for name in exam_names]
        )

    content = build_workbook(
        "Marks", ["Enrollment No", "Student Name", *exam_names], rows
    )
    logger.info(
        "Exported marks report for batch subject %s (%d students)",
        batch_subject_id,
        len(rows),
    )
    return Response(
        content=content,
        media_type=XLSX_CONTENT_TYPE,
        headers={
            "Content-Disposition": f'attachment; filename="marks_{batch_subject_id}.xlsx"'
        },
    )


@router.get("/marks/{mark_id}", response_model=ExamMarkResponse, summary="Get exam mark")
async def get_exam_mark(
    mark_id: UUID,
    current_user: CurrentUser = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
) -> ExamMarkResponse:
    try:
        return await _get_service(db, current_user).get_exam_mark(mark_id)
    except ExamNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.put("/marks/{mark_id}", response_model=ExamMarkResponse, summary="Update exam mark")
async def update_exam_mark(
    mark_id: UUID,
    data: ExamMarkUpdateRequest,
    current_user: CurrentUser = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
) -> ExamMarkResponse:
    try:
        return await _get_service(db, current_user).update_exam_mark(mark_id, data)
    except ExamNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ExamValidationError as e:
        raise _validation_failed(e)


@router.delete(
    "/marks/{mark_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete exam mark",
)
async def delete_exam_mark(
    mark_id: UUID,
    current_user: CurrentUser = Depends(require_college_admin),
    db: AsyncSession = Depends(get_db),
) -> None:
    try:
        await _get_service(db, current_user).delete_exam_mark(mark_id)
    except ExamNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
