# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Alumni registration and verification models."""

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field, field_validator


class AlumnusRegisterRequest(BaseModel):
    """Public self-registration; the department decides the college."""

    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)
    name: str = Field(..., min_length=2, max_length=100)
    phone: str | None = Field(None, min_length=10, max_length=15)
    department_id: UUID
    program_id: UUID | None = None
    graduation_year: int = Field(..., ge=1900)
    date_of_birth: date | None = None
    address: str | None = Field(None, min_length=5, max_length=255)
    gpa: float | None = Field(None, ge=0, le=10)
    job_status: str | None = Field(None, max_length=100)
    current_employer: str | None = Field(None, max_length=200)
    current_position: str | None = Field(None, max_length=200)
    industry: str | None = Field(None, max_length=100)
    linkedin_profile: str | None = Field(None, max_length=255)
    achievements: str | None = None

    @field_validator("graduation_year")
    @classmethod
    def not_too_far_ahead(cls, value: int) -> int:
        if value > date.today().year + 5:
            raise ValueError("Graduation year is too far in the future")
        return value

    @field_validator("linkedin_profile")
    @classmethod
    def blank_or_url(cls, value: str | None) -> str | None:
        if not value:
            return None
        if not value.startswith(("http://", "https://")):
            raise ValueError("LinkedIn profile must be a URL")
        return value


class AlumnusRegisterResponse(BaseModel):
    user_id: UUID
    message: str = "Alumnus registered successfully. An administrator will verify your account."


class AlumnusResponse(BaseModel):
    id: UUID
    user_id: UUID
    name: str
    email: str
    department_id: UUID
    department_name: str | None = None
    program_id: UUID | None = None
    graduation_year: int
    current_employer: str | None = None
    current_position: str | None = None
    verified: bool
    created_at: datetime | None = None


class AlumnusListResponse(BaseModel):
    items: list[AlumnusResponse]
    total: int
