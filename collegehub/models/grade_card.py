# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Grade card request/response models."""

from uuid import UUID

from pydantic import BaseModel, Field


class ExternalMarksRequest(BaseModel):
    batch_subject_id: UUID


class GenerateGradesRequest(BaseModel):
    """Grade every card of a batch.

    The semester defaults to the batch's own semester.
    """

    batch_id: UUID
    semester_id: UUID | None = None


class GradeOperationResponse(BaseModel):
    message: str
    count: int = Field(..., description="Rows imported, updated or graded")


class SubjectGradeDetailResponse(BaseModel):
    id: UUID
    batch_subject_id: UUID
    subject_name: str | None = None
    subject_code: str | None = None
    class_type: str | None = None
    credit: float
    internal_marks: float | None = None
    external_marks: float | None = None
    total_marks: float | None = None
    grade: str | None = None
    grade_point: int | None = None
    quality_point: float | None = None


class GradeCardSummary(BaseModel):
    id: UUID
    card_no: str
    student_id: UUID
    student_name: str
    enrollment_no: str
    semester_id: UUID
    batch_id: UUID
    gpa: float | None = None
    cgpa: float | None = None


class GradeCardResponse(GradeCardSummary):
    semester_name: str
    semester_numerical: int
    program_name: str | None = None
    college_name: str | None = None
    total_graded_credit: float | None = None
    total_quality_point: float | None = None
    details: list[SubjectGradeDetailResponse]


class GradeCardListResponse(BaseModel):
    items: list[GradeCardSummary]
    total: int
