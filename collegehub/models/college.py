# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""College and department request/response models."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field


class CollegeCreateRequest(BaseModel):
    name: str = Field(..., min_length=3, max_length=200)
    code: str = Field(..., min_length=2, max_length=20, description="Unique college code")
    address: str | None = Field(None, max_length=500)
    email: EmailStr | None = None
    phone: str | None = Field(None, max_length=20)
    established_year: int | None = Field(None, ge=1800, le=2100)


class CollegeUpdateRequest(BaseModel):
    name: str | None = Field(None, min_length=3, max_length=200)
    code: str | None = Field(None, min_length=2, max_length=20)
    address: str | None = Field(None, max_length=500)
    email: EmailStr | None = None
    phone: str | None = Field(None, max_length=20)
    established_year: int | None = Field(None, ge=1800, le=2100)
    is_active: bool | None = None


class CollegeResponse(BaseModel):
    id: UUID
    name: str
    code: str
    address: str | None = None
    email: str | None = None
    phone: str | None = None
    established_year: int | None = None
    is_active: bool
    created_at: datetime


class CollegeListResponse(BaseModel):
    items: list[CollegeResponse]
    total: int


class CollegeStatsResponse(BaseModel):
    college_id: UUID
    departments: int
    programs: int
    students: int
    batches: int


class DepartmentCreateRequest(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    code: str = Field(..., min_length=2, max_length=20)


class DepartmentResponse(BaseModel):
    id: UUID
    college_id: UUID
    name: str
    code: str


class DepartmentListResponse(BaseModel):
    items: list[DepartmentResponse]
    total: int
