# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Exam type and exam mark request/response models."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field, model_validator


class ExamTypeCreateRequest(BaseModel):
    exam_name: str = Field(..., min_length=2, max_length=100)
    total_marks: int = Field(..., gt=0)
    passing_marks: int | None = Field(None, ge=0)
    status: bool = True

    @model_validator(mode="after")
    def check_passing_marks(self) -> "ExamTypeCreateRequest":
        if self.passing_marks is not None and self.passing_marks >= self.total_marks:
            raise ValueError("Passing marks must be less than total marks")
        return self


class ExamTypeUpdateRequest(BaseModel):
    exam_name: str | None = Field(None, min_length=2, max_length=100)
    total_marks: int | None = Field(None, gt=0)
    passing_marks: int | None = Field(None, ge=0)
    status: bool | None = None


class ExamTypeResponse(BaseModel):
    id: UUID
    exam_name: str
    total_marks: int
    passing_marks: int | None = None
    status: bool


class ExamTypeListResponse(BaseModel):
    items: list[ExamTypeResponse]
    total: int


class ExamMarkCreateRequest(BaseModel):
    """A single student's marks for one exam type in one batch subject."""

    exam_type_id: UUID
    student_id: UUID
    batch_subject_id: UUID
    achieved_marks: float = Field(..., ge=0)
    was_absent: bool = False
    debarred: bool = False
    malpractice: bool = False

    @model_validator(mode="after")
    def check_absent_marks(self) -> "ExamMarkCreateRequest":
        if self.was_absent and self.achieved_marks != 0:
            raise ValueError("If the student was absent, achieved marks must be 0.")
        return self


class ExamMarkUpdateRequest(BaseModel):
    achieved_marks: float | None = Field(None, ge=0)
    was_absent: bool | None = None
    debarred: bool | None = None
    malpractice: bool | None = None


class ExamMarkResponse(BaseModel):
    id: UUID
    exam_type_id: UUID
    student_id: UUID
    batch_subject_id: UUID
    achieved_marks: float
    was_absent: bool
    debarred: bool
    malpractice: bool
    created_at: datetime


class ExamMarkListResponse(BaseModel):
    items: list[ExamMarkResponse]
    total: int


class ExamMarkImportResponse(BaseModel):
    message: str
    success_count: int


class StudentExamMark(BaseModel):
    exam_mark_id: UUID
    exam_type_id: UUID
    exam_name: str
    total_marks: int
    passing_marks: int | None = None
    achieved_marks: float
    was_absent: bool
    debarred: bool
    malpractice: bool


class StudentMarksReport(BaseModel):
    student_id: UUID
    student_name: str
    enrollment_no: str
    marks: list[StudentExamMark]


class BatchSubjectMarksReport(BaseModel):
    batch_subject_id: UUID
    students: list[StudentMarksReport]
