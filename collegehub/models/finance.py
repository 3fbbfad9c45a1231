# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Exam fee and payment request/response models."""

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, Field

from collegehub.models.common import PaymentStatus


class BaseExamFeeCreateRequest(BaseModel):
    batch_id: UUID
    base_fee: float = Field(..., gt=0)


class BaseExamFeeUpdateRequest(BaseModel):
    base_fee: float = Field(..., gt=0)


class BaseExamFeeResponse(BaseModel):
    id: UUID
    batch_id: UUID
    batch_name: str | None = None
    base_fee: float


class BaseExamFeeListResponse(BaseModel):
    items: list[BaseExamFeeResponse]
    total: int


class StudentFeeCreateRequest(BaseModel):
    student_batch_id: UUID
    reason: str = Field(..., min_length=2, max_length=200)
    exam_fee: float = Field(..., gt=0)
    due_date: date


class StudentFeeUpdateRequest(BaseModel):
    reason: str | None = Field(None, min_length=2, max_length=200)
    exam_fee: float | None = Field(None, gt=0)
    due_date: date | None = None
    payment_status: PaymentStatus | None = None


class StudentFeeResponse(BaseModel):
    id: UUID
    student_batch_id: UUID
    student_id: UUID | None = None
    student_name: str | None = None
    enrollment_no: str | None = None
    batch_id: UUID | None = None
    batch_name: str | None = None
    reason: str
    exam_fee: float
    due_date: date
    payment_status: PaymentStatus
    payment_id: UUID | None = None


class StudentFeeListResponse(BaseModel):
    items: list[StudentFeeResponse]
    total: int


class AutoFeeInsertionRequest(BaseModel):
    batch_id: UUID
    due_date: date


class FailedFeeInsertion(BaseModel):
    student_name: str
    error: str


class AutoFeeInsertionResponse(BaseModel):
    message: str
    updated: list[str]
    created: list[str]
    failed: list[FailedFeeInsertion]


class PaymentCreateRequest(BaseModel):
    """Open a payment for unpaid fees.

    Without fee ids every unpaid fee of the student is included.
    """

    student_id: UUID | None = None
    fee_ids: list[UUID] | None = None
    gateway_order_id: str | None = Field(None, max_length=100)


class PaymentCompleteRequest(BaseModel):
    gateway_payment_id: str = Field(..., min_length=1, max_length=100)
    fee_ids: list[UUID] = Field(..., min_length=1)


class PaymentResponse(BaseModel):
    id: UUID
    student_id: UUID
    amount: float
    status: PaymentStatus
    gateway_order_id: str | None = None
    gateway_payment_id: str | None = None
    paid_at: datetime | None = None
    fee_ids: list[UUID] = Field(default_factory=list)


class StudentFeeOverview(BaseModel):
    student_id: UUID
    student_name: str
    enrollment_no: str
    total_fees: float
    paid: float
    pending: float
    fees: list[StudentFeeResponse]
