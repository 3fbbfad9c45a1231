# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Grade card API endpoints.

- POST /internal/import - Import internal marks for a batch subject
- POST /external - Calculate external marks for a batch subject
- POST /generate - Grade all cards of a batch
- GET / - List grade cards (batch / semester / student filters)
- GET /me - Student's own grade cards
- GET /{card_id} - Grade card with subject details
- GET /{card_id}/pdf - Grade card PDF

Students may read and download only their own cards.
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
    get_app_settings,
    get_db,
    require_college_admin,
    require_college_user,
    require_staff,
    require_student,
)
from collegehub.api.middleware.auth import CurrentUser
from collegehub.api.middleware.rate_limit import (
    RATE_LIMIT_EXPENSIVE,
    RATE_LIMIT_UPLOAD,
    limiter,
)
from collegehub.core.config import Settings
from collegehub.domains.grade_card.pdf import render_grade_card
from collegehub.domains.grade_card.service import (
    GradeCardNotFoundError,
    GradeCardService,
    GradeCardValidationError,
)
from collegehub.models.common import UserRole
from collegehub.models.grade_card import (
    ExternalMarksRequest,
    GenerateGradesRequest,
    GradeCardListResponse,
    GradeCardResponse,
    GradeOperationResponse,
)
from collegehub.utils.excel import ExcelFormatError
from collegehub.utils.pdf import PDF_CONTENT_TYPE

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_service(
    db: AsyncSession,
    current_user: CurrentUser,
    settings: Settings | None = None,
) -> GradeCardService:
    return GradeCardService(
        db=db,
        college_id=current_user.college_id,
        settings=settings.grading if settings else None,
    )


def _validation_failed(e: GradeCardValidationError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail={"message": str(e), "errors": [err.to_dict() for err in e.errors]},
    )


def _owner_filter(current_user: CurrentUser) -> str | None:
    if current_user.has_role(UserRole.STUDENT.value):
        return current_user.id
    return None


@router.post(
    "/internal/import",
    response_model=GradeOperationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Import internal marks",
    description="Columns: C enrollment number, D internal marks (0..30).",
)
@limiter.limit(RATE_LIMIT_UPLOAD)
async def import_internal_marks(
    request: Request,
    file: UploadFile = File(...),
    batch_subject_id: UUID = Form(...),
    current_user: CurrentUser = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> GradeOperationResponse:
    content = await file.read()
    try:
        count = await _get_service(db, current_user, settings).import_internal_marks(
            content, batch_subject_id
        )
    except ExcelFormatError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except GradeCardNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except GradeCardValidationError as e:
        raise _validation_failed(e)
    return GradeOperationResponse(message=f"Successfully imported {count} records.", count=count)


@router.post(
    "/external",
    response_model=GradeOperationResponse,
    summary="Calculate external marks",
)
async def calculate_external_marks(
    data: ExternalMarksRequest,
    current_user: CurrentUser = Depends(require_college_admin),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> GradeOperationResponse:
    try:
        count = await _get_service(db, current_user, settings).calculate_external_marks(
            data.batch_subject_id
        )
    except GradeCardNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except GradeCardValidationError as e:
        raise _validation_failed(e)
    return GradeOperationResponse(message="External marks updated successfully.", count=count)


@router.post(
    "/generate",
    response_model=GradeOperationResponse,
    summary="Generate grades",
)
@limiter.limit(RATE_LIMIT_EXPENSIVE)
async def generate_grades(
    request: Request,
    data: GenerateGradesRequest,
    current_user: CurrentUser = Depends(require_college_admin),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> GradeOperationResponse:
    try:
        count = await _get_service(db, current_user, settings).generate_grades(
            data.batch_id, data.semester_id
        )
    except GradeCardNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except GradeCardValidationError as e:
        raise _validation_failed(e)
    return GradeOperationResponse(
        message="Grade calculations and updates successful.", count=count
    )


@router.get("", response_model=GradeCardListResponse, summary="List grade cards")
async def list_grade_cards(
    batch_id: UUID | None = Query(None),
    semester_id: UUID | None = Query(None),
    student_id: UUID | None = Query(None),
    current_user: CurrentUser = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
) -> GradeCardListResponse:
    items, total = await _get_service(db, current_user).list_grade_cards(
        batch_id=batch_id, semester_id=semester_id, student_id=student_id
    )
    return GradeCardListResponse(items=items, total=total)


@router.get("/me", response_model=GradeCardListResponse, summary="Own grade cards")
async def list_own_grade_cards(
    current_user: CurrentUser = Depends(require_student),
    db: AsyncSession = Depends(get_db),
) -> GradeCardListResponse:
    try:
        items, total = await _get_service(db, current_user).list_for_user(current_user.id)
    except GradeCardNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return GradeCardListResponse(items=items, total=total)


@router.get("/{card_id}", response_model=GradeCardResponse, summary="Get grade card")
async def get_grade_card(
    card_id: UUID,
    current_user: CurrentUser = Depends(require_college_user),
    db: AsyncSession = Depends(get_db),
) -> GradeCardResponse:
    try:
        return await _get_service(db, current_user).get_grade_card(
            card_id, student_user_id=_owner_filter(current_user)
        )
    except GradeCardNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.get(
    "/{card_id}/pdf",
    response_class=Response,
    summary="Download grade card PDF",
)
@limiter.limit(RATE_LIMIT_EXPENSIVE)
async def download_grade_card(
    request: Request,
    card_id: UUID,
    current_user: CurrentUser = Depends(require_college_user),
    db: AsyncSession = Depends(get_db),
) -> Response:
    try:
        card = await _get_service(db, current_user).get_grade_card(
            card_id, student_user_id=_owner_filter(current_user)
        )
    except GradeCardNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    content = render_grade_card(card)
    logger.info("Rendered grade card PDF %s", card.card_no)
    return Response(
        content=content,
        media_type=PDF_CONTENT_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{card.card_no}.pdf"'},
    )
