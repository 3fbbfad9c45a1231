# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Student request/response models."""

from datetime import date
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field

from collegehub.models.common import Gender


class StudentCreateRequest(BaseModel):
    """Student registration. The login account is created with a generated password."""

    enrollment_no: str = Field(..., min_length=3, max_length=30)
    name: str = Field(..., min_length=2, max_length=200)
    email: EmailStr
    phone: str | None = Field(None, max_length=20)
    dob: date | None = None
    gender: Gender
    address: str | None = Field(None, max_length=500)
    guardian_name: str | None = Field(None, max_length=200)
    program_id: UUID
    admission_year_id: UUID


class StudentUpdateRequest(BaseModel):
    name: str | None = Field(None, min_length=2, max_length=200)
    phone: str | None = Field(None, max_length=20)
    dob: date | None = None
    gender: Gender | None = None
    address: str | None = Field(None, max_length=500)
    guardian_name: str | None = Field(None, max_length=200)
    program_id: UUID | None = None
    admission_year_id: UUID | None = None


class StudentResponse(BaseModel):
    id: UUID
    user_id: UUID
    enrollment_no: str
    name: str
    email: str
    phone: str | None = None
    dob: date | None = None
    gender: Gender
    address: str | None = None
    guardian_name: str | None = None
    program_id: UUID
    department_id: UUID
    admission_year_id: UUID


class StudentListResponse(BaseModel):
    items: list[StudentResponse]
    total: int
    page: int
    page_size: int


class StudentImportResponse(BaseModel):
    message: str
    imported_count: int
