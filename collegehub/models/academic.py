# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Academic structure request/response models.

Covers academic years, admission years, semesters, programs, batch types,
batches, batch subjects, student batch assignment, subject types and
subjects.
"""

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from collegehub.models.common import BatchStatus, ClassType


# =========================================================================
# Academic years
# =========================================================================


class AcademicYearCreateRequest(BaseModel):
    name: str = Field(..., min_length=3, max_length=100, description="e.g. 2024-25")
    start_date: date
    end_date: date
    status: bool = True

    @model_validator(mode="after")
    def check_dates(self) -> "AcademicYearCreateRequest":
        if self.end_date <= self.start_date:
            raise ValueError("End date must be after start date")
        return self


class AcademicYearUpdateRequest(BaseModel):
    name: str | None = Field(None, min_length=3, max_length=100)
    start_date: date | None = None
    end_date: date | None = None
    status: bool | None = None


class AcademicYearResponse(BaseModel):
    id: UUID
    name: str
    start_date: date
    end_date: date
    status: bool


class AcademicYearListResponse(BaseModel):
    items: list[AcademicYearResponse]
    total: int


# =========================================================================
# Admission years
# =========================================================================


class AdmissionYearCreateRequest(BaseModel):
    year: int = Field(..., ge=1900, le=2100)
    status: bool = True


class AdmissionYearUpdateRequest(BaseModel):
    year: int | None = Field(None, ge=1900, le=2100)
    status: bool | None = None


class AdmissionYearResponse(BaseModel):
    id: UUID
    year: int
    status: bool


class AdmissionYearListResponse(BaseModel):
    items: list[AdmissionYearResponse]
    total: int


# =========================================================================
# Semesters
# =========================================================================


class SemesterCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=50)
    alias: str = Field(..., min_length=1, max_length=20)
    numerical: int = Field(..., ge=1)


class SemesterUpdateRequest(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=50)
    alias: str | None = Field(None, min_length=1, max_length=20)
    numerical: int | None = Field(None, ge=1)


class SemesterResponse(BaseModel):
    id: UUID
    name: str
    alias: str
    numerical: int


class SemesterListResponse(BaseModel):
    items: list[SemesterResponse]
    total: int


# =========================================================================
# Programs
# =========================================================================


class ProgramCreateRequest(BaseModel):
    name: str = Field(..., min_length=3, max_length=100)
    code: str = Field(..., min_length=2, max_length=20)
    alias: str = Field(..., min_length=2, max_length=50)
    department_id: UUID
    status: bool = True


class ProgramUpdateRequest(BaseModel):
    name: str | None = Field(None, min_length=3, max_length=100)
    code: str | None = Field(None, min_length=2, max_length=20)
    alias: str | None = Field(None, min_length=2, max_length=50)
    department_id: UUID | None = None
    status: bool | None = None


class ProgramResponse(BaseModel):
    id: UUID
    name: str
    code: str
    alias: str
    department_id: UUID
    status: bool


class ProgramListResponse(BaseModel):
    items: list[ProgramResponse]
    total: int


# =========================================================================
# Batch types and batches
# =========================================================================


class BatchTypeRequest(BaseModel):
    name: str = Field(..., min_length=3, max_length=100)


class BatchTypeResponse(BaseModel):
    id: UUID
    name: str


class BatchTypeListResponse(BaseModel):
    items: list[BatchTypeResponse]
    total: int


class BatchCreateRequest(BaseModel):
    program_id: UUID
    semester_id: UUID
    academic_year_id: UUID
    batch_type_id: UUID
    status: bool = True


class BatchUpdateRequest(BaseModel):
    status: bool


class BatchResponse(BaseModel):
    id: UUID
    name: str
    program_id: UUID
    semester_id: UUID
    academic_year_id: UUID
    batch_type_id: UUID
    status: bool
    created_at: datetime | None = None


class BatchListResponse(BaseModel):
    items: list[BatchResponse]
    total: int


class BatchSubjectCreateRequest(BaseModel):
    subject_id: UUID
    subject_type_id: UUID
    class_type: ClassType
    credit_score: float = Field(..., ge=0, le=10)
    teacher_id: UUID | None = None


class BatchSubjectUpdateRequest(BaseModel):
    subject_type_id: UUID | None = None
    class_type: ClassType | None = None
    credit_score: float | None = Field(None, ge=0, le=10)
    teacher_id: UUID | None = None


class BatchSubjectResponse(BaseModel):
    id: UUID
    batch_id: UUID
    subject_id: UUID
    subject_type_id: UUID
    class_type: ClassType
    credit_score: float
    teacher_id: UUID | None = None


class BatchSubjectListResponse(BaseModel):
    items: list[BatchSubjectResponse]
    total: int


class StudentBatchAssignRequest(BaseModel):
    student_ids: list[UUID] = Field(..., min_length=1)
    batch_status: BatchStatus = BatchStatus.ONGOING


class StudentBatchAssignResponse(BaseModel):
    message: str
    assigned_count: int
    already_assigned_student_ids: list[UUID] = Field(default_factory=list)


class StudentBatchUpdateRequest(BaseModel):
    batch_status: BatchStatus


class StudentBatchResponse(BaseModel):
    id: UUID
    student_id: UUID
    batch_id: UUID
    batch_status: BatchStatus
    enrollment_no: str | None = None
    student_name: str | None = None


class StudentBatchListResponse(BaseModel):
    items: list[StudentBatchResponse]
    total: int


# =========================================================================
# Subjects
# =========================================================================


class SubjectTypeCreateRequest(BaseModel):
    name: str = Field(..., min_length=3, max_length=100)
    alias: str = Field(..., min_length=1, max_length=10)


class SubjectTypeUpdateRequest(BaseModel):
    name: str | None = Field(None, min_length=3, max_length=100)
    alias: str | None = Field(None, min_length=1, max_length=10)


class SubjectTypeResponse(BaseModel):
    id: UUID
    name: str
    alias: str


class SubjectTypeListResponse(BaseModel):
    items: list[SubjectTypeResponse]
    total: int


class SubjectCreateRequest(BaseModel):
    name: str = Field(..., min_length=2, max_length=150)
    code: str = Field(..., min_length=2, max_length=30)
    program_id: UUID
    semester_id: UUID
    credit_score: float = Field(..., ge=0, le=10)


class SubjectUpdateRequest(BaseModel):
    name: str | None = Field(None, min_length=2, max_length=150)
    code: str | None = Field(None, min_length=2, max_length=30)
    program_id: UUID | None = None
    semester_id: UUID | None = None
    credit_score: float | None = Field(None, ge=0, le=10)


class SubjectResponse(BaseModel):
    id: UUID
    name: str
    code: str
    program_id: UUID
    semester_id: UUID
    credit_score: float


class SubjectListResponse(BaseModel):
    items: list[SubjectResponse]
    total: int
