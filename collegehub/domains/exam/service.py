# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Exam service.

This module provides the ExamService class for:
- Exam type management
- Recording exam marks per student and batch subject
- Importing a batch subject's marks from an Excel sheet
- The batch-subject-wise marks report

Import layout (header row skipped):
    B student name, C enrollment number, D achieved marks,
    E absent, F debarred, G malpractice ("Yes" to set)
"""

import logging
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from collegehub.infrastructure.database.models import (
    BatchSubject,
    ExamMark,
    ExamType,
    Student,
)
from collegehub.models.common import RowError
from collegehub.models.exam import (
    BatchSubjectMarksReport,
    ExamMarkCreateRequest,
    ExamMarkResponse,
    ExamMarkUpdateRequest,
    ExamTypeCreateRequest,
    ExamTypeResponse,
    ExamTypeUpdateRequest,
    StudentExamMark,
    StudentMarksReport,
)
from collegehub.utils.excel import read_rows

logger = logging.getLogger(__name__)

IMPORT_CHUNK_SIZE = 10


class ExamServiceError(Exception):
    """Base exception for exam service errors."""

    pass


class ExamNotFoundError(ExamServiceError):
    """Raised when an exam type, mark, student or batch subject is not found."""

    pass


class ExamExistsError(ExamServiceError):
    """Raised when an exam type name or a mark entry already exists."""

    pass


class ExamValidationError(ExamServiceError):
    """Raised when marks or an exam type fail validation.

    Attributes:
        errors: Row level problems for imports, empty otherwise.
    """

    def __init__(self, message: str, errors: list[RowError] | None = None) -> None:
        super().__init__(message)
        self.errors = errors or []


def _exceeded_message(exam_type: ExamType) -> str:
    return (
        f"Achieved marks should not exceed the total marks of "
        f"{exam_type.total_marks} in exam Type {exam_type.exam_name}"
    )


class ExamService:
    """Service for exam types and marks within one college."""

    def __init__(self, db: AsyncSession, college_id: str) -> None:
        self.db = db
        self.college_id = college_id

    # =========================================================================
    # Exam types
    # =========================================================================

    async def create_exam_type(self, request: ExamTypeCreateRequest) -> ExamTypeResponse:
        await self._check_exam_name(request.exam_name)

        exam_type = ExamType(
            college_id=self.college_id,
            exam_name=request.exam_name,
            total_marks=request.total_marks,
            passing_marks=request.passing_marks,
            status=request.status,
        )
        self.db.add(exam_type)
        await self.db.commit()
        await self.db.refresh(exam_type)

        logger.info("Created exam type: %s (%s)", exam_type.exam_name, exam_type.id)
        return self._exam_type_response(exam_type)

    async def list_exam_types(
        self,
        status: bool | None = None,
    ) -> tuple[list[ExamTypeResponse], int]:
        query = select(ExamType).where(ExamType.college_id == self.college_id)
        if status is not None:
            query = query.where(ExamType.status == status)
        result = await self.db.execute(query.order_by(ExamType.created_at))
        items = [self._exam_type_response(e) for e in result.scalars().all()]
        return items, len(items)

    async def get_exam_type(self, exam_type_id: UUID | str) -> ExamTypeResponse:
        return self._exam_type_response(await self._get_exam_type(exam_type_id))

    async def update_exam_type(
        self,
        exam_type_id: UUID | str,
        request: ExamTypeUpdateRequest,
    ) -> ExamTypeResponse:
        """Update an exam type.

        Raises:
            ExamNotFoundError: If the exam type does not exist.
            ExamExistsError: If the new name is taken.
            ExamValidationError: If passing marks would reach total marks.
        """
        exam_type = await self._get_exam_type(exam_type_id)

        if request.exam_name is not None and request.exam_name != exam_type.exam_name:
            await self._check_exam_name(request.exam_name)
            exam_type.exam_name = request.exam_name

        total = request.total_marks if request.total_marks is not None else exam_type.total_marks
        passing = (
            request.passing_marks
            if "passing_marks" in request.model_fields_set
            else exam_type.passing_marks
        )
        if passing is not None and passing >= total:
            raise ExamValidationError("Passing marks must be less than total marks")

        exam_type.total_marks = total
        exam_type.passing_marks = passing
        if request.status is not None:
            exam_type.status = request.status

        await self.db.commit()
        await self.db.refresh(exam_type)

        logger.info("Updated exam type: %s", exam_type.id)
        return self._exam_type_response(exam_type)

    async def delete_exam_type(self, exam_type_id: UUID | str) -> None:
        exam_type = await self._get_exam_type(exam_type_id)
        await self.db.delete(exam_type)
        await self.db.commit()
        logger.info("Deleted exam type: %s", exam_type_id)

    # =========================================================================
    # Exam marks
    # =========================================================================

    async def create_exam_mark(self, request: ExamMarkCreateRequest) -> ExamMarkResponse:
        """Record one student's marks.

        Raises:
            ExamNotFoundError: If student, batch subject or exam type is missing.
            ExamValidationError: If the marks exceed the exam type total.
            ExamExistsError: If marks are already recorded.
        """
        student = await self._get_student(request.student_id)
        batch_subject = await self._get_batch_subject(request.batch_subject_id)
        exam_type = await self._get_exam_type(request.exam_type_id)

        if request.achieved_marks > exam_type.total_marks:
            raise ExamValidationError(_exceeded_message(exam_type))

        existing = await self.db.execute(
            select(ExamMark.id).where(
                ExamMark.exam_type_id == exam_type.id,
                ExamMark.student_id == student.id,
                ExamMark.batch_subject_id == batch_subject.id,
            )
        )
        if existing.scalar_one_or_none():
            raise ExamExistsError(
                "Exam mark entry already exists for this exam, student, "
                "and batch subject combination"
            )

        mark = ExamMark(
            exam_type_id=exam_type.id,
            student_id=student.id,
            batch_subject_id=batch_subject.id,
            achieved_marks=request.achieved_marks,
            was_absent=request.was_absent,
            debarred=request.debarred,
            malpractice=request.malpractice,
        )
        self.db.add(mark)
        await self.db.commit()
        await self.db.refresh(mark)

        logger.info(
            "Recorded exam mark %s for student %s in %s",
            mark.id,
            student.enrollment_no,
            exam_type.exam_name,
        )
        return self._mark_response(mark)

    async def list_exam_marks(
        self,
        batch_subject_id: UUID | None = None,
        exam_type_id: UUID | None = None,
    ) -> tuple[list[ExamMarkResponse], int]:
        query = (
            select(ExamMark)
            .join(ExamType, ExamType.id == ExamMark.exam_type_id)
            .where(ExamType.college_id == self.college_id)
        )
        if batch_subject_id:
            query = query.where(ExamMark.batch_subject_id == str(batch_subject_id))
        if exam_type_id:
            query = query.where(ExamMark.exam_type_id == str(exam_type_id))

        result = await self.db.execute(query.order_by(ExamMark.created_at))
        items = [self._mark_response(m) for m in result.scalars().all()]
        return items, len(items)

    async def get_exam_mark(self, mark_id: UUID | str) -> ExamMarkResponse:
        mark, _ = await self._get_mark(mark_id)
        return self._mark_response(mark)

    async def update_exam_mark(
        self,
        mark_id: UUID | str,
        request: ExamMarkUpdateRequest,
    ) -> ExamMarkResponse:
        mark, exam_type = await self._get_mark(mark_id)

        achieved = (
            request.achieved_marks if request.achieved_marks is not None else mark.achieved_marks
        )
        was_absent = request.was_absent if request.was_absent is not None else mark.was_absent
        if was_absent and achieved != 0:
            raise ExamValidationError("If the student was absent, achieved marks must be 0.")
        if achieved > exam_type.total_marks:
            raise ExamValidationError(_exceeded_message(exam_type))

        mark.achieved_marks = achieved
        mark.was_absent = was_absent
        if request.debarred is not None:
            mark.debarred = request.debarred
        if request.malpractice is not None:
            mark.malpractice = request.malpractice

        await self.db.commit()
        await self.db.refresh(mark)

        logger.info("Updated exam mark: %s", mark.id)
        return self._mark_response(mark)

    async def delete_exam_mark(self, mark_id: UUID | str) -> None:
        mark, _ = await self._get_mark(mark_id)
        await self.db.delete(mark)
        await self.db.commit()
        logger.info("Deleted exam mark: %s", mark_id)

    async def import_exam_marks(
        self,
        content: bytes,
        batch_subject_id: UUID | str,
        exam_type_id: UUID | str,
    ) -> int:
        """Import one exam's marks for a batch subject.

        Every row is checked first; marks are written in chunks only when
        no row failed.

        Returns:
            Number of marks created.

        Raises:
            ExcelFormatError: If the payload is not a workbook.
            ExamNotFoundError: If the batch subject or exam type is missing.
            ExamValidationError: With one entry per failing row.
        """
        batch_subject = await self._get_batch_subject(batch_subject_id)
        exam_type = await self._get_exam_type(exam_type_id)

        rows = read_rows(content)
        enrollments = [row.text("C") for row in rows if row.text("C")]

        students: dict[str, Student] = {}
        if enrollments:
            result = await self.db.execute(
                select(Student).where(
                    Student.college_id == self.college_id,
                    Student.enrollment_no.in_(enrollments),
                )
            )
            students = {s.enrollment_no: s for s in result.scalars().all()}

        existing_ids: set[str] = set()
        if students:
            result = await self.db.execute(
                select(ExamMark.student_id).where(
                    ExamMark.exam_type_id == exam_type.id,
                    ExamMark.batch_subject_id == batch_subject.id,
                    ExamMark.student_id.in_([s.id for s in students.values()]),
                )
            )
            existing_ids = set(result.scalars().all())

        errors: list[RowError] = []
        marks: list[ExamMark] = []
        seen: set[str] = set()
        for row in rows:
            enrollment_no = row.text("C")
            student = students.get(enrollment_no) if enrollment_no else None
            if student is None:
                errors.append(
                    RowError(
                        row=row.number,
                        enrollment_no=enrollment_no,
                        message="Missing or invalid student enrollment number",
                    )
                )
                continue
            if student.id in seen:
                errors.append(
                    RowError(
                        row=row.number,
                        enrollment_no=enrollment_no,
                        message="Duplicate enrollment number in file",
                    )
                )
                continue
            seen.add(student.id)

            was_absent = row.flag("E")
            achieved = row.number_value("D")
            if achieved is None:
                if row.text("D") is not None or not was_absent:
                    errors.append(
                        RowError(
                            row=row.number,
                            enrollment_no=enrollment_no,
                            message="Missing or invalid achieved marks",
                        )
                    )
                    continue
                achieved = 0.0
            if was_absent and achieved != 0:
                errors.append(
                    RowError(
                        row=row.number,
                        enrollment_no=enrollment_no,
                        message="If the student was absent, achieved marks must be 0.",
                    )
                )
                continue
            if achieved < 0:
                errors.append(
                    RowError(
                        row=row.number,
                        enrollment_no=enrollment_no,
                        message="Achieved marks cannot be less than 0.",
                    )
                )
                continue
            if achieved > exam_type.total_marks:
                errors.append(
                    RowError(
                        row=row.number,
                        enrollment_no=enrollment_no,
                        message=_exceeded_message(exam_type),
                    )
                )
                continue
            if student.id in existing_ids:
                errors.append(
                    RowError(
                        row=row.number,
                        enrollment_no=enrollment_no,
                        message="Marks already exist for this student",
                    )
                )
                continue

            marks.append(
                ExamMark(
                    exam_type_id=exam_type.id,
                    student_id=student.id,
                    batch_subject_id=batch_subject.id,
                    achieved_marks=achieved,
                    was_absent=was_absent,
                    debarred=row.flag("F"),
                    malpractice=row.flag("G"),
                )
            )

        if errors:
            logger.warning(
                "Exam mark import rejected for %s: %d errors", batch_subject.id, len(errors)
            )
            raise ExamValidationError("Exam mark import failed", errors)

        for start in range(0, len(marks), IMPORT_CHUNK_SIZE):
            self.db.add_all(marks[start : start + IMPORT_CHUNK_SIZE])
            await self.db.flush()
        await self.db.commit()

        logger.info(
            "Imported %d exam marks for batch subject %s (%s)",
            len(marks),
            batch_subject.id,
            exam_type.exam_name,
        )
        return len(marks)

    async def batch_subject_report(self, batch_subject_id: UUID | str) -> BatchSubjectMarksReport:
        """Marks of every student of a batch subject grouped per student.

        Students are ordered by enrollment number and each student's marks
        by exam type creation.
        """
        batch_subject = await self._get_batch_subject(batch_subject_id)

        result = await self.db.execute(
            select(ExamMark, Student, ExamType)
            .join(Student, Student.id == ExamMark.student_id)
            .join(ExamType, ExamType.id == ExamMark.exam_type_id)
            .where(ExamMark.batch_subject_id == batch_subject.id)
            .order_by(Student.enrollment_no, ExamType.created_at)
        )

        reports: dict[str, StudentMarksReport] = {}
        for mark, student, exam_type in result.all():
            report = reports.get(student.id)
            if report is None:
                report = StudentMarksReport(
                    student_id=UUID(student.id),
                    student_name=student.name,
                    enrollment_no=student.enrollment_no,
                    marks=[],
                )
                reports[student.id] = report
            report.marks.append(
                StudentExamMark(
                    exam_mark_id=UUID(mark.id),
                    exam_type_id=UUID(exam_type.id),
                    exam_name=exam_type.exam_name,
                    total_marks=exam_type.total_marks,
                    passing_marks=exam_type.passing_marks,
                    achieved_marks=mark.achieved_marks,
                    was_absent=mark.was_absent,
                    debarred=mark.debarred,
                    malpractice=mark.malpractice,
                )
            )

        return BatchSubjectMarksReport(
            batch_subject_id=UUID(batch_subject.id),
            students=list(reports.values()),
        )

    # =========================================================================
    # Helpers
    # =========================================================================

    async def _check_exam_name(self, exam_name: str) -> None:
        result = await self.db.execute(
            select(func.count()).select_from(ExamType).where(
                ExamType.college_id == self.college_id,
                func.lower(ExamType.exam_name) == exam_name.lower(),
            )
        )
        if (result.scalar() or 0) > 0:
            raise ExamExistsError("Exam type with this name already exists")

    async def _get_exam_type(self, exam_type_id: UUID | str) -> ExamType:
        result = await self.db.execute(
            select(ExamType).where(
                ExamType.id == str(exam_type_id),
                ExamType.college_id == self.college_id,
            )
        )
        exam_type = result.scalar_one_or_none()
        if not exam_type:
            raise ExamNotFoundError("Exam type not found")
        return exam_type

    async def _get_student(self, student_id: UUID | str) -> Student:
        result = await self.db.execute(
            select(Student).where(
                Student.id == str(student_id),
                Student.college_id == self.college_id,
            )
        )
        student = result.scalar_one_or_none()
        if not student:
            raise ExamNotFoundError("Student not found")
        return student

    async def _get_batch_subject(self, batch_subject_id: UUID | str) -> BatchSubject:
        result = await self.db.execute(
            select(BatchSubject).where(
                BatchSubject.id == str(batch_subject_id),
                BatchSubject.college_id == self.college_id,
            )
        )
        batch_subject = result.scalar_one_or_none()
        if not batch_subject:
            raise ExamNotFoundError("Batch subject not found")
        return batch_subject

    async def _get_mark(self, mark_id: UUID | str) -> tuple[ExamMark, ExamType]:
        result = await self.db.execute(
            select(ExamMark, ExamType)
            .join(ExamType, ExamType.id == ExamMark.exam_type_id)
            .where(
                ExamMark.id == str(mark_id),
                ExamType.college_id == self.college_id,
            )
        )
        row = result.first()
        if not row:
            raise ExamNotFoundError(f"Exam mark {mark_id} not found")
        return row[0], row[1]

    def _exam_type_response(self, exam_type: ExamType) -> ExamTypeResponse:
        return ExamTypeResponse(
            id=UUID(exam_type.id),
            exam_name=exam_type.exam_name,
            total_marks=exam_type.total_marks,
            passing_marks=exam_type.passing_marks,
            status=exam_type.status,
        )

    def _mark_response(self, mark: ExamMark) -> ExamMarkResponse:
        return ExamMarkResponse(
            id=UUID(mark.id),
            exam_type_id=UUID(mark.exam_type_id),
            student_id=UUID(mark.student_id),
            batch_subject_id=UUID(mark.batch_subject_id),
            achieved_marks=mark.achieved_marks,
            was_absent=mark.was_absent,
            debarred=mark.debarred,
            malpractice=mark.malpractice,
            created_at=mark.created_at,
        )
