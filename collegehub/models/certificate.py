# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Certificate type and issuance request/response models."""

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, Field

from collegehub.models.common import PaymentStatus


class CertificateTypeCreateRequest(BaseModel):
    name: str = Field(..., min_length=3, max_length=100)
    description: str | None = Field(None, max_length=500)


class CertificateTypeUpdateRequest(BaseModel):
    name: str | None = Field(None, min_length=3, max_length=100)
    description: str | None = Field(None, max_length=500)


class CertificateTypeResponse(BaseModel):
    id: UUID
    name: str
    description: str | None = None


class CertificateTypeListResponse(BaseModel):
    items: list[CertificateTypeResponse]
    total: int


class CertificateIssueRequest(BaseModel):
    certificate_type_id: UUID
    student_id: UUID


class CertificateBulkIssueRequest(BaseModel):
    certificate_type_id: UUID
    student_ids: list[UUID] = Field(..., min_length=1)


class CertificateBulkIssueResponse(BaseModel):
    message: str
    count: int
    already_assigned_student_ids: list[UUID] = Field(default_factory=list)


class CertificateUpdateRequest(BaseModel):
    issue_date: date | None = None
    payment_status: PaymentStatus | None = None


class CertificateResponse(BaseModel):
    id: UUID
    certificate_type_id: UUID
    certificate_type_name: str | None = None
    student_id: UUID
    student_name: str | None = None
    enrollment_no: str | None = None
    issue_date: date | None = None
    payment_status: PaymentStatus
    created_at: datetime


class CertificateListResponse(BaseModel):
    items: list[CertificateResponse]
    total: int
    page: int
    page_size: int
