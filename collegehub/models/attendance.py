# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Monthly classes and attendance request/response models."""

from uuid import UUID

from pydantic import BaseModel, Field, model_validator

from collegehub.models.common import Month


class MonthlyClassesCreateRequest(BaseModel):
    batch_subject_id: UUID
    month: Month
    total_theory_classes: int = Field(0, ge=0)
    completed_theory_classes: int = Field(0, ge=0)
    total_practical_classes: int = Field(0, ge=0)
    completed_practical_classes: int = Field(0, ge=0)

    @model_validator(mode="after")
    def completed_within_total(self) -> "MonthlyClassesCreateRequest":
        if (
            self.completed_theory_classes > self.total_theory_classes
            or self.completed_practical_classes > self.total_practical_classes
        ):
            raise ValueError("Completed classes cannot exceed the total classes.")
        return self


class MonthlyClassesUpdateRequest(BaseModel):
    total_theory_classes: int | None = Field(None, ge=0)
    completed_theory_classes: int | None = Field(None, ge=0)
    total_practical_classes: int | None = Field(None, ge=0)
    completed_practical_classes: int | None = Field(None, ge=0)


class MonthlyClassesResponse(BaseModel):
    id: UUID
    batch_subject_id: UUID
    month: Month
    total_theory_classes: int
    completed_theory_classes: int
    total_practical_classes: int
    completed_practical_classes: int


class MonthlyClassesListResponse(BaseModel):
    items: list[MonthlyClassesResponse]
    total: int


class AttendanceCreateRequest(BaseModel):
    monthly_classes_id: UUID
    student_id: UUID
    attended_theory_classes: int = Field(0, ge=0)
    attended_practical_classes: int = Field(0, ge=0)


class AttendanceUpdateRequest(BaseModel):
    attended_theory_classes: int | None = Field(None, ge=0)
    attended_practical_classes: int | None = Field(None, ge=0)


class AttendanceResponse(BaseModel):
    id: UUID
    monthly_classes_id: UUID
    student_id: UUID
    attended_theory_classes: int
    attended_practical_classes: int


class AttendanceListResponse(BaseModel):
    items: list[AttendanceResponse]
    total: int


class AttendanceImportResponse(BaseModel):
    message: str
    imported_count: int


class StudentAttendanceSummary(BaseModel):
    """One student's attendance summed over every month of a batch subject.

    Percentages are strings with two decimals, or "N/A" when no class of
    that kind was completed.
    """

    student_id: UUID
    student_name: str
    enrollment_no: str
    completed_theory_classes: int
    attended_theory_classes: int
    theory_percentage: str
    completed_practical_classes: int
    attended_practical_classes: int
    practical_percentage: str


class BatchSubjectAttendanceReport(BaseModel):
    batch_subject_id: UUID
    students: list[StudentAttendanceSummary]
