# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Attendance service.

This module provides the AttendanceService class for:
- Monthly class counts per batch subject
- Monthly attendance of a student in a batch subject
- Importing a month's attendance from an Excel sheet
- The batch-subject-wise aggregated attendance report

Import layout (header row skipped):
    B student name, C enrollment number, D attended theory classes,
    E attended practical classes
"""

import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from collegehub.infrastructure.database.models import (
    BatchSubject,
    MonthlyBatchSubjectAttendance,
    MonthlyBatchSubjectClasses,
    Student,
    StudentBatch,
)
from collegehub.models.attendance import (
    AttendanceCreateRequest,
    AttendanceResponse,
    AttendanceUpdateRequest,
    BatchSubjectAttendanceReport,
    MonthlyClassesCreateRequest,
    MonthlyClassesResponse,
    MonthlyClassesUpdateRequest,
    StudentAttendanceSummary,
)
from collegehub.models.common import RowError
from collegehub.utils.excel import read_rows

logger = logging.getLogger(__name__)

ATTENDED_EXCEEDS_COMPLETED = (
    "Attended classes cannot exceed the completed classes for theory or practical."
)


class AttendanceServiceError(Exception):
    """Base exception for attendance service errors."""

    pass


class AttendanceNotFoundError(AttendanceServiceError):
    """Raised when monthly classes, attendance or a student is not found."""

    pass


class AttendanceExistsError(AttendanceServiceError):
    """Raised when monthly classes or attendance already exist."""

    pass


class AttendanceValidationError(AttendanceServiceError):
    """Raised when class counts are inconsistent.

    Attributes:
        errors: Row level problems for imports, empty otherwise.
    """

    def __init__(self, message: str, errors: list[RowError] | None = None) -> None:
        super().__init__(message)
        self.errors = errors or []


def attendance_percentage(attended: int, completed: int) -> str:
    """Attended share of completed classes, "N/A" when none were completed."""
    if completed <= 0:
        return "N/A"
    return "{:.2f}".format(attended / completed * 100)


def _within_completed(theory: int, practical: int, classes: MonthlyBatchSubjectClasses) -> bool:
    return (
        theory <= classes.completed_theory_classes
        and practical <= classes.completed_practical_classes
    )


class AttendanceService:
    """Service for monthly classes and attendance within one college."""

    def __init__(self, db: AsyncSession, college_id: str) -> None:
        self.db = db
        self.college_id = college_id

    # =========================================================================
    # Monthly classes
    # =========================================================================

    async def create_monthly_classes(
        self,
        request: MonthlyClassesCreateRequest,
    ) -> MonthlyClassesResponse:
        """Record the class counts of a batch subject for one month.

        Raises:
            AttendanceNotFoundError: If the batch subject is not found.
            AttendanceExistsError: If the month is already recorded.
        """
        batch_subject = await self._get_batch_subject(request.batch_subject_id)

        existing = await self.db.execute(
            select(MonthlyBatchSubjectClasses.id).where(
                MonthlyBatchSubjectClasses.batch_subject_id == batch_subject.id,
                MonthlyBatchSubjectClasses.month == request.month.value,
            )
        )
        if existing.scalar_one_or_none():
            raise AttendanceExistsError(
                f"Classes for {request.month.value} already exist for this batch subject"
            )

        classes = MonthlyBatchSubjectClasses(
            batch_subject_id=batch_subject.id,
            month=request.month.value,
            total_theory_classes=request.total_theory_classes,
            completed_theory_classes=request.completed_theory_classes,
            total_practical_classes=request.total_practical_classes,
            completed_practical_classes=request.completed_practical_classes,
        )
        self.db.add(classes)
        await self.db.commit()
        await self.db.refresh(classes)

        logger.info(
            "Created monthly classes %s for batch subject %s (%s)",
            classes.id,
            batch_subject.id,
            classes.month,
        )
        return self._classes_response(classes)

    async def list_monthly_classes(
        self,
        batch_subject_id: UUID | None = None,
    ) -> tuple[list[MonthlyClassesResponse], int]:
        query = (
            select(MonthlyBatchSubjectClasses)
            .join(BatchSubject, BatchSubject.id == MonthlyBatchSubjectClasses.batch_subject_id)
            .where(BatchSubject.college_id == self.college_id)
        )
        if batch_subject_id:
            query = query.where(
                MonthlyBatchSubjectClasses.batch_subject_id == str(batch_subject_id)
            )
        result = await self.db.execute(query.order_by(MonthlyBatchSubjectClasses.created_at))
        items = [self._classes_response(c) for c in result.scalars().all()]
        return items, len(items)

    async def get_monthly_classes(self, classes_id: UUID | str) -> MonthlyClassesResponse:
        return self._classes_response(await self._get_classes(classes_id))

    async def update_monthly_classes(
        self,
        classes_id: UUID | str,
        request: MonthlyClassesUpdateRequest,
    ) -> MonthlyClassesResponse:
        classes = await self._get_classes(classes_id)

        for field, value in request.model_dump(exclude_unset=True).items():
            if value is not None:
                setattr(classes, field, value)

        if (
            classes.completed_theory_classes > classes.total_theory_classes
            or classes.completed_practical_classes > classes.total_practical_classes
        ):
            await self.db.rollback()
            raise AttendanceValidationError("Completed classes cannot exceed the total classes.")

        await self.db.commit()
        await self.db.refresh(classes)

        logger.info("Updated monthly classes: %s", classes.id)
        return self._classes_response(classes)

    async def delete_monthly_classes(self, classes_id: UUID | str) -> None:
        classes = await self._get_classes(classes_id)
        await self.db.delete(classes)
        await self.db.commit()
        logger.info("Deleted monthly classes: %s", classes_id)

    # =========================================================================
    # Attendance
    # =========================================================================

    async def create_attendance(self, request: AttendanceCreateRequest) -> AttendanceResponse:
        """Record one student's attendance for a month.

        Raises:
            AttendanceNotFoundError: If the classes or student are missing,
                or the student is not in the batch.
            AttendanceValidationError: If attended exceeds completed.
            AttendanceExistsError: If attendance is already recorded.
        """
        classes = await self._get_classes(request.monthly_classes_id)
        batch_subject = await self._get_batch_subject(classes.batch_subject_id)
        student = await self._get_student(request.student_id)
        await self._check_enrolled(student.id, batch_subject.batch_id)

        if not _within_completed(
            request.attended_theory_classes, request.attended_practical_classes, classes
        ):
            raise AttendanceValidationError(ATTENDED_EXCEEDS_COMPLETED)

        existing = await self.db.execute(
            select(MonthlyBatchSubjectAttendance.id).where(
                MonthlyBatchSubjectAttendance.monthly_classes_id == classes.id,
                MonthlyBatchSubjectAttendance.student_id == student.id,
            )
        )
        if existing.scalar_one_or_none():
            raise AttendanceExistsError("Attendance already recorded for this student and month")

        attendance = MonthlyBatchSubjectAttendance(
            monthly_classes_id=classes.id,
            student_id=student.id,
            attended_theory_classes=request.attended_theory_classes,
            attended_practical_classes=request.attended_practical_classes,
        )
        self.db.add(attendance)
        await self.db.commit()
        await self.db.refresh(attendance)

        logger.info(
            "Recorded attendance %s for student %s (%s)",
            attendance.id,
            student.enrollment_no,
            classes.month,
        )
        return self._attendance_response(attendance)

    async def list_attendance(
        self,
        monthly_classes_id: UUID | None = None,
        student_id: UUID | None = None,
    ) -> tuple[list[AttendanceResponse], int]:
        query = (
            select(MonthlyBatchSubjectAttendance)
            .join(
                MonthlyBatchSubjectClasses,
                MonthlyBatchSubjectClasses.id == MonthlyBatchSubjectAttendance.monthly_classes_id,
            )
            .join(BatchSubject, BatchSubject.id == MonthlyBatchSubjectClasses.batch_subject_id)
            .where(BatchSubject.college_id == self.college_id)
        )
        if monthly_classes_id:
            query = query.where(
                MonthlyBatchSubjectAttendance.monthly_classes_id == str(monthly_classes_id)
            )
        if student_id:
            query = query.where(MonthlyBatchSubjectAttendance.student_id == str(student_id))

        result = await self.db.execute(query.order_by(MonthlyBatchSubjectAttendance.created_at))
        items = [self._attendance_response(a) for a in result.scalars().all()]
        return items, len(items)

    async def update_attendance(
        self,
        attendance_id: UUID | str,
        request: AttendanceUpdateRequest,
    ) -> AttendanceResponse:
        attendance, classes = await self._get_attendance(attendance_id)

        theory = (
            request.attended_theory_classes
            if request.attended_theory_classes is not None
            else attendance.attended_theory_classes
        )
        practical = (
            request.attended_practical_classes
            if request.attended_practical_classes is not None
            else attendance.attended_practical_classes
        )
        if not _within_completed(theory, practical, classes):
            raise AttendanceValidationError(ATTENDED_EXCEEDS_COMPLETED)

        attendance.attended_theory_classes = theory
        attendance.attended_practical_classes = practical
        await self.db.commit()
        await self.db.refresh(attendance)

        logger.info("Updated attendance: %s", attendance.id)
        return self._attendance_response(attendance)

    async def delete_attendance(self, attendance_id: UUID | str) -> None:
        attendance, _ = await self._get_attendance(attendance_id)
        await self.db.delete(attendance)
        await self.db.commit()
        logger.info("Deleted attendance: %s", attendance_id)

    async def import_attendance(self, content: bytes, monthly_classes_id: UUID | str) -> int:
        """Import a month's attendance for a batch subject.

        Nothing is written when any row fails.

        Returns:
            Number of attendance rows created.

        Raises:
            ExcelFormatError: If the payload is not a workbook.
            AttendanceNotFoundError: If the monthly classes are missing.
            AttendanceValidationError: With one entry per failing row.
        """
        classes = await self._get_classes(monthly_classes_id)
        batch_subject = await self._get_batch_subject(classes.batch_subject_id)

        rows = read_rows(content)
        enrollments = [row.text("C") for row in rows if row.text("C")]

        students: dict[str, Student] = {}
        enrolled_ids: set[str] = set()
        existing_ids: set[str] = set()
        if enrollments:
            result = await self.db.execute(
                select(Student).where(
                    Student.college_id == self.college_id,
                    Student.enrollment_no.in_(enrollments),
                )
            )
            students = {s.enrollment_no: s for s in result.scalars().all()}
        if students:
            student_ids = [s.id for s in students.values()]
            result = await self.db.execute(
                select(StudentBatch.student_id).where(
                    StudentBatch.batch_id == batch_subject.batch_id,
                    StudentBatch.student_id.in_(student_ids),
                )
            )
            enrolled_ids = set(result.scalars().all())
            result = await self.db.execute(
                select(MonthlyBatchSubjectAttendance.student_id).where(
                    MonthlyBatchSubjectAttendance.monthly_classes_id == classes.id,
                    MonthlyBatchSubjectAttendance.student_id.in_(student_ids),
                )
            )
            existing_ids = set(result.scalars().all())

        errors: list[RowError] = []
        records: list[MonthlyBatchSubjectAttendance] = []
        seen: set[str] = set()
        for row in rows:
            enrollment_no = row.text("C")

            def fail(message: str) -> None:
                errors.append(
                    RowError(row=row.number, enrollment_no=enrollment_no, message=message)
                )

            if not enrollment_no:
                fail("Enrollment number is required.")
                continue
            student = students.get(enrollment_no)
            if student is None:
                fail("Student not found in the system")
                continue
            if student.id not in enrolled_ids:
                fail("Student is not enrolled in this batch")
                continue
            if student.id in existing_ids or student.id in seen:
                fail("Attendance already recorded for this student")
                continue

            theory = row.number_value("D")
            practical = row.number_value("E")
            if theory is None or practical is None:
                fail("Attended theory and practical classes are required.")
                continue
            if theory < 0 or practical < 0:
                fail("Attended classes cannot be negative.")
                continue
            if not _within_completed(theory, practical, classes):
                fail(ATTENDED_EXCEEDS_COMPLETED)
                continue

            seen.add(student.id)
            records.append(
                MonthlyBatchSubjectAttendance(
                    monthly_classes_id=classes.id,
                    student_id=student.id,
                    attended_theory_classes=int(theory),
                    attended_practical_classes=int(practical),
                )
            )

        if errors:
            logger.warning(
                "Attendance import rejected for %s: %d errors", classes.id, len(errors)
            )
            raise AttendanceValidationError("Attendance import failed", errors)

        self.db.add_all(records)
        await self.db.commit()

        logger.info(
            "Imported %d attendance rows for monthly classes %s", len(records), classes.id
        )
        return len(records)

    async def batch_subject_report(
        self,
        batch_subject_id: UUID | str,
        student_id: UUID | str | None = None,
    ) -> BatchSubjectAttendanceReport:
        """Attendance summed per student over every recorded month."""
        batch_subject = await self._get_batch_subject(batch_subject_id)

        query = (
            select(MonthlyBatchSubjectAttendance, MonthlyBatchSubjectClasses, Student)
            .join(
                MonthlyBatchSubjectClasses,
                MonthlyBatchSubjectClasses.id == MonthlyBatchSubjectAttendance.monthly_classes_id,
            )
            .join(Student, Student.id == MonthlyBatchSubjectAttendance.student_id)
            .where(MonthlyBatchSubjectClasses.batch_subject_id == batch_subject.id)
        )
        if student_id:
            query = query.where(Student.id == str(student_id))
        result = await self.db.execute(query.order_by(Student.enrollment_no))

        totals: dict[str, dict] = {}
        for attendance, classes, student in result.all():
            entry = totals.setdefault(
                student.id,
                {
                    "student": student,
                    "completed_theory": 0,
                    "attended_theory": 0,
                    "completed_practical": 0,
                    "attended_practical": 0,
                },
            )
            entry["completed_theory"] += classes.completed_theory_classes or 0
            entry["attended_theory"] += attendance.attended_theory_classes or 0
            entry["completed_practical"] += classes.completed_practical_classes or 0
            entry["attended_practical"] += attendance.attended_practical_classes or 0

        students = [
            StudentAttendanceSummary(
                student_id=UUID(entry["student"].id),
                student_name=entry["student"].name,
                enrollment_no=entry["student"].enrollment_no,
                completed_theory_classes=entry["completed_theory"],
                attended_theory_classes=entry["attended_theory"],
                theory_percentage=attendance_percentage(
                    entry["attended_theory"], entry["completed_theory"]
                ),
                completed_practical_classes=entry["completed_practical"],
                attended_practical_classes=entry["attended_practical"],
                practical_percentage=attendance_percentage(
                    entry["attended_practical"], entry["completed_practical"]
                ),
            )
            for entry in totals.values()
        ]
        return BatchSubjectAttendanceReport(
            batch_subject_id=UUID(batch_subject.id), students=students
        )

    async def student_id_for_user(self, user_id: str) -> str:
        result = await self.db.execute(
            select(Student.id).where(
                Student.user_id == user_id,
                Student.college_id == self.college_id,
            )
        )
        student_id = result.scalar_one_or_none()
        if not student_id:
            raise AttendanceNotFoundError("Student profile not found")
        return student_id

    # =========================================================================
    # Helpers
    # =========================================================================

    async def _get_batch_subject(self, batch_subject_id: UUID | str) -> BatchSubject:
        result = await self.db.execute(
            select(BatchSubject).where(
                BatchSubject.id == str(batch_subject_id),
                BatchSubject.college_id == self.college_id,
            )
        )
        batch_subject = result.scalar_one_or_none()
        if not batch_subject:
            raise AttendanceNotFoundError("Batch subject not found")
        return batch_subject

    async def _get_classes(self, classes_id: UUID | str) -> MonthlyBatchSubjectClasses:
        result = await self.db.execute(
            select(MonthlyBatchSubjectClasses)
            .join(BatchSubject, BatchSubject.id == MonthlyBatchSubjectClasses.batch_subject_id)
            .where(
                MonthlyBatchSubjectClasses.id == str(classes_id),
                BatchSubject.college_id == self.college_id,
            )
        )
        classes = result.scalar_one_or_none()
        if not classes:
            raise AttendanceNotFoundError("Monthly classes not found")
        return classes

    async def _get_student(self, student_id: UUID | str) -> Student:
        result = await self.db.execute(
            select(Student).where(
                Student.id == str(student_id),
                Student.college_id == self.college_id,
            )
        )
        student = result.scalar_one_or_none()
        if not student:
            raise AttendanceNotFoundError("Student not found")
        return student

    async def _check_enrolled(self, student_id: str, batch_id: str) -> None:
        result = await self.db.execute(
            select(StudentBatch.id).where(
                StudentBatch.student_id == student_id,
                StudentBatch.batch_id == batch_id,
            )
        )
        if not result.scalar_one_or_none():
            raise AttendanceNotFoundError("Student is not enrolled in this batch")

    async def _get_attendance(
        self,
        attendance_id: UUID | str,
    ) -> tuple[MonthlyBatchSubjectAttendance, MonthlyBatchSubjectClasses]:
        result = await self.db.execute(
            select(MonthlyBatchSubjectAttendance, MonthlyBatchSubjectClasses)
            .join(
                MonthlyBatchSubjectClasses,
                MonthlyBatchSubjectClasses.id == MonthlyBatchSubjectAttendance.monthly_classes_id,
            )
            .join(BatchSubject, BatchSubject.id == MonthlyBatchSubjectClasses.batch_subject_id)
            .where(
                MonthlyBatchSubjectAttendance.id == str(attendance_id),
                BatchSubject.college_id == self.college_id,
            )
        )
        row = result.first()
        if not row:
            raise AttendanceNotFoundError(f"Attendance {attendance_id} not found")
        return row[0], row[1]

    def _classes_response(self, classes: MonthlyBatchSubjectClasses) -> MonthlyClassesResponse:
        return MonthlyClassesResponse(
            id=UUID(classes.id),
            batch_subject_id=UUID(classes.batch_subject_id),
            month=classes.month,
            total_theory_classes=classes.total_theory_classes,
            completed_theory_classes=classes.completed_theory_classes,
            total_practical_classes=classes.total_practical_classes,
            completed_practical_classes=classes.completed_practical_classes,
        )

    def _attendance_response(self, attendance: MonthlyBatchSubjectAttendance) -> AttendanceResponse:
        return AttendanceResponse(
            id=UUID(attendance.id),
            monthly_classes_id=UUID(attendance.monthly_classes_id),
            student_id=UUID(attendance.student_id),
            attended_theory_classes=attendance.attended_theory_classes,
            attended_practical_classes=attendance.attended_practical_classes,
        )
