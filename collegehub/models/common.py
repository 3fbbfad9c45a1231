# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enumerations and response shapes shared across domains."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class UserRole(str, Enum):
    SBTE_ADMIN = "SBTE_ADMIN"
    COLLEGE_SUPER_ADMIN = "COLLEGE_SUPER_ADMIN"
    HOD = "HOD"
    TEACHER = "TEACHER"
    STUDENT = "STUDENT"
    FINANCE_MANAGER = "FINANCE_MANAGER"
    ADM = "ADM"
    EDUCATION_DEPARTMENT = "EDUCATION_DEPARTMENT"
    ALUMNUS = "ALUMNUS"
    CUSTOMER = "CUSTOMER"


COLLEGE_ADMIN_ROLES = (UserRole.COLLEGE_SUPER_ADMIN.value, UserRole.ADM.value)
STAFF_ROLES = (
    UserRole.COLLEGE_SUPER_ADMIN.value,
    UserRole.ADM.value,
    UserRole.HOD.value,
    UserRole.TEACHER.value,
    UserRole.FINANCE_MANAGER.value,
)


class ClassType(str, Enum):
    THEORY = "THEORY"
    PRACTICAL = "PRACTICAL"
    BOTH = "BOTH"


class BatchStatus(str, Enum):
    PROMOTED = "PROMOTED"
    DETAINED = "DETAINED"
    ONGOING = "ONGOING"
    COMPLETED = "COMPLETED"


class PaymentStatus(str, Enum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


class Gender(str, Enum):
    MALE = "MALE"
    FEMALE = "FEMALE"
    OTHER = "OTHER"


class Month(str, Enum):
    JANUARY = "JANUARY"
    FEBRUARY = "FEBRUARY"
    MARCH = "MARCH"
    APRIL = "APRIL"
    MAY = "MAY"
    JUNE = "JUNE"
    JULY = "JULY"
    AUGUST = "AUGUST"
    SEPTEMBER = "SEPTEMBER"
    OCTOBER = "OCTOBER"
    NOVEMBER = "NOVEMBER"
    DECEMBER = "DECEMBER"


class MessageResponse(BaseModel):
    """Plain acknowledgement."""

    message: str = Field(..., description="Human readable result")


class RowError(BaseModel):
    """A problem found in one row of a bulk operation."""

    row: int | None = Field(None, description="Spreadsheet row number, if any")
    enrollment_no: str | None = Field(None, description="Student enrollment number")
    student_id: str | None = Field(None, description="Student ID")
    message: str = Field(..., description="What is wrong with the row")

    def to_dict(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)
