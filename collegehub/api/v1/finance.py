# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Finance API endpoints.

- POST /base-fees, GET /base-fees, PUT /base-fees/{id}, DELETE /base-fees/{id}
- POST /fees - Create a student exam fee
- GET /fees - List student fees (batch / student filters)
- PUT /fees/{fee_id}, DELETE /fees/{fee_id}
- POST /fees/auto-insert - Upsert the base fee for every student of a batch
- POST /payments - Open a payment for unpaid fees
- PUT /payments/{payment_id} - Record a completed payment
- GET /overview/{student_id} - Fee overview of a student
- GET /me - Student's own fee overview
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from collegehub.api.dependencies import (
    CollegeUser,
    DBSession,
    FinanceUser,
    StudentUser,
    get_app_settings,
)
from collegehub.api.middleware.auth import CurrentUser
from collegehub.core.config import Settings
from collegehub.domains.finance.service import (
    FinanceExistsError,
    FinanceNotFoundError,
    FinanceService,
    FinanceValidationError,
)
from collegehub.models.common import UserRole
from collegehub.models.finance import (
    AutoFeeInsertionRequest,
    AutoFeeInsertionResponse,
    BaseExamFeeCreateRequest,
    BaseExamFeeListResponse,
    BaseExamFeeResponse,
    BaseExamFeeUpdateRequest,
    PaymentCompleteRequest,
    PaymentCreateRequest,
    PaymentResponse,
    StudentFeeCreateRequest,
    StudentFeeListResponse,
    StudentFeeOverview,
    StudentFeeResponse,
    StudentFeeUpdateRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_service(
    db: AsyncSession,
    current_user: CurrentUser,
    settings: Settings | None = None,
) -> FinanceService:
    return FinanceService(
        db=db,
        college_id=current_user.college_id,
        settings=settings.finance if settings else None,
    )


def _student_scope(current_user: CurrentUser) -> str | None:
    if current_user.has_role(UserRole.STUDENT.value):
        return current_user.id
    if not current_user.has_any_role(
        UserRole.COLLEGE_SUPER_ADMIN.value,
        UserRole.ADM.value,
        UserRole.FINANCE_MANAGER.value,
    ):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Requires a finance role or a student account",
        )
    return None


# =========================================================================
# Base exam fees
# =========================================================================


@router.post(
    "/base-fees",
    response_model=BaseExamFeeResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create batch base exam fee",
)
async def create_base_fee(
    data: BaseExamFeeCreateRequest,
    current_user: FinanceUser,
    db: DBSession,
) -> BaseExamFeeResponse:
    try:
        return await _get_service(db, current_user).create_base_fee(data)
    except FinanceNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except FinanceExistsError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))


@router.get("/base-fees", response_model=BaseExamFeeListResponse, summary="List base exam fees")
async def list_base_fees(
    current_user: FinanceUser,
    db: DBSession,
) -> BaseExamFeeListResponse:
    items, total = await _get_service(db, current_user).list_base_fees()
    return BaseExamFeeListResponse(items=items, total=total)


@router.put(
    "/base-fees/{fee_id}",
    response_model=BaseExamFeeResponse,
    summary="Update base exam fee",
)
async def update_base_fee(
    fee_id: UUID,
    data: BaseExamFeeUpdateRequest,
    current_user: FinanceUser,
    db: DBSession,
) -> BaseExamFeeResponse:
    try:
        return await _get_service(db, current_user).update_base_fee(fee_id, data)
    except FinanceNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.delete(
    "/base-fees/{fee_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete base exam fee",
)
async def delete_base_fee(
    fee_id: UUID,
    current_user: FinanceUser,
    db: DBSession,
) -> None:
    try:
        await _get_service(db, current_user).delete_base_fee(fee_id)
    except FinanceNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


# =========================================================================
# Student exam fees
# =========================================================================


@router.post(
    "/fees",
    response_model=StudentFeeResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create student exam fee",
)
async def create_student_fee(
    data: StudentFeeCreateRequest,
    current_user: FinanceUser,
    db: DBSession,
) -> StudentFeeResponse:
    try:
        return await _get_service(db, current_user).create_student_fee(data)
    except FinanceNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except FinanceExistsError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))


@router.get("/fees", response_model=StudentFeeListResponse, summary="List student exam fees")
async def list_student_fees(
    current_user: FinanceUser,
    db: DBSession,
    batch_id: UUID | None = Query(None),
    student_id: UUID | None = Query(None),
) -> StudentFeeListResponse:
    items, total = await _get_service(db, current_user).list_student_fees(
        batch_id=batch_id, student_id=student_id
    )
    return StudentFeeListResponse(items=items, total=total)


@router.post(
    "/fees/auto-insert",
    response_model=AutoFeeInsertionResponse,
    summary="Insert base exam fee for a batch",
    description="Creates or updates the base exam fee of every student in the batch.",
)
async def insert_base_fees(
    data: AutoFeeInsertionRequest,
    current_user: FinanceUser,
    db: DBSession,
    settings: Settings = Depends(get_app_settings),
) -> AutoFeeInsertionResponse:
    try:
        return await _get_service(db, current_user, settings).insert_base_fees(
            data.batch_id, data.due_date
        )
    except FinanceNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.put("/fees/{fee_id}", response_model=StudentFeeResponse, summary="Update student fee")
async def update_student_fee(
    fee_id: UUID,
    data: StudentFeeUpdateRequest,
    current_user: FinanceUser,
    db: DBSession,
) -> StudentFeeResponse:
    try:
        return await _get_service(db, current_user).update_student_fee(fee_id, data)
    except FinanceNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except FinanceExistsError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))


@router.delete(
    "/fees/{fee_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete student fee",
)
async def delete_student_fee(
    fee_id: UUID,
    current_user: FinanceUser,
    db: DBSession,
) -> None:
    try:
        await _get_service(db, current_user).delete_student_fee(fee_id)
    except FinanceNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


# =========================================================================
# Payments
# =========================================================================


@router.post(
    "/payments",
    response_model=PaymentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Open payment",
)
async def create_payment(
    data: PaymentCreateRequest,
    current_user: CollegeUser,
    db: DBSession,
) -> PaymentResponse:
    student_user_id = _student_scope(current_user)
    try:
        return await _get_service(db, current_user).create_payment(
            data, student_user_id=student_user_id
        )
    except FinanceNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except FinanceValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.put(
    "/payments/{payment_id}",
    response_model=PaymentResponse,
    summary="Complete payment",
)
async def complete_payment(
    payment_id: UUID,
    data: PaymentCompleteRequest,
    current_user: CollegeUser,
    db: DBSession,
) -> PaymentResponse:
    student_user_id = _student_scope(current_user)
    try:
        return await _get_service(db, current_user).complete_payment(
            payment_id, data, student_user_id=student_user_id
        )
    except FinanceNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.get(
    "/overview/{student_id}",
    response_model=StudentFeeOverview,
    summary="Student fee overview",
)
async def fee_overview(
    student_id: UUID,
    current_user: FinanceUser,
    db: DBSession,
) -> StudentFeeOverview:
    try:
        return await _get_service(db, current_user).fee_overview(student_id=student_id)
    except FinanceNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.get("/me", response_model=StudentFeeOverview, summary="Own fee overview")
async def own_fee_overview(
    current_user: StudentUser,
    db: DBSession,
) -> StudentFeeOverview:
    try:
        return await _get_service(db, current_user).fee_overview(student_user_id=current_user.id)
    except FinanceNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
