# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Student API endpoints.

- POST / - Register a student (creates the login account)
- POST /import - Import students from an xlsx sheet
- GET / - List students (program / admission year / search filters)
- GET /me - Student's own profile
- GET /{student_id} - Get student
- PUT /{student_id} - Update student
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

from collegehub.api.dependencies import (
    get_db,
    get_email_sender,
    get_password_hasher,
    require_college_admin,
    require_staff,
    require_student,
)
from collegehub.api.middleware.auth import CurrentUser
from collegehub.api.middleware.rate_limit import RATE_LIMIT_UPLOAD, limiter
from collegehub.domains.auth.password import PasswordHasher
from collegehub.domains.student.service import (
    StudentExistsError,
    StudentImportError,
    StudentNotFoundError,
    StudentService,
)
from collegehub.infrastructure.notifications import EmailSender
from collegehub.models.student import (
    StudentCreateRequest,
    StudentImportResponse,
    StudentListResponse,
    StudentResponse,
    StudentUpdateRequest,
)
from collegehub.utils.excel import ExcelFormatError

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_service(
    db: AsyncSession,
    current_user: CurrentUser,
    password_hasher: PasswordHasher | None = None,
    email_sender: EmailSender | None = None,
) -> StudentService:
    return StudentService(
        db=db,
        college_id=current_user.college_id,
        password_hasher=password_hasher,
        email_sender=email_sender,
    )


@router.post(
    "",
    response_model=StudentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register student",
)
async def register_student(
    data: StudentCreateRequest,
    current_user: CurrentUser = Depends(require_college_admin),
    db: AsyncSession = Depends(get_db),
    password_hasher: PasswordHasher = Depends(get_password_hasher),
    email_sender: EmailSender = Depends(get_email_sender),
) -> StudentResponse:
    service = _get_service(db, current_user, password_hasher, email_sender)
    try:
        return await service.register_student(data)
    except StudentNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except StudentExistsError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))


@router.post(
    "/import",
    response_model=StudentImportResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Import students",
    description=(
        "Columns: A enrollment number, B name, C email, D phone, E date of birth, "
        "F gender. Nothing is imported when any row fails."
    ),
)
@limiter.limit(RATE_LIMIT_UPLOAD)
async def import_students(
    request: Request,
    file: UploadFile = File(...),
    program_id: UUID = Form(...),
    admission_year_id: UUID = Form(...),
    current_user: CurrentUser = Depends(require_college_admin),
    db: AsyncSession = Depends(get_db),
    password_hasher: PasswordHasher = Depends(get_password_hasher),
    email_sender: EmailSender = Depends(get_email_sender),
) -> StudentImportResponse:
    content = await file.read()
    service = _get_service(db, current_user, password_hasher, email_sender)
    try:
        count = await service.import_students(content, program_id, admission_year_id)
    except ExcelFormatError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except StudentNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except StudentImportError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"message": str(e), "errors": [err.to_dict() for err in e.errors]},
        )
    return StudentImportResponse(
        message=f"{count} students imported successfully",
        imported_count=count,
    )


@router.get("", response_model=StudentListResponse, summary="List students")
async def list_students(
    program_id: UUID | None = Query(None),
    admission_year_id: UUID | None = Query(None),
    search: str | None = Query(None, max_length=100),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=200),
    current_user: CurrentUser = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
) -> StudentListResponse:
    items, total = await _get_service(db, current_user).list_students(
        program_id=program_id,
        admission_year_id=admission_year_id,
        search=search,
        page=page,
        page_size=page_size,
    )
    return StudentListResponse(items=items, total=total, page=page, page_size=page_size)


@router.get("/me", response_model=StudentResponse, summary="Own student profile")
async def get_own_profile(
    current_user: CurrentUser = Depends(require_student),
    db: AsyncSession = Depends(get_db),
) -> StudentResponse:
    try:
        return await _get_service(db, current_user).get_student_for_user(current_user.id)
    except StudentNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.get("/{student_id}", response_model=StudentResponse, summary="Get student")
async def get_student(
    student_id: UUID,
    current_user: CurrentUser = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
) -> StudentResponse:
    try:
        return await _get_service(db, current_user).get_student(student_id)
    except StudentNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.put("/{student_id}", response_model=StudentResponse, summary="Update student")
async def update_student(
    student_id: UUID,
    data: StudentUpdateRequest,
    current_user: CurrentUser = Depends(require_college_admin),
    db: AsyncSession = Depends(get_db),
) -> StudentResponse:
    try:
        return await _get_service(db, current_user).update_student(student_id, data)
    except StudentNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
