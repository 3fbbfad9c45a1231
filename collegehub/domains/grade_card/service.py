# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Grade card service.

Grade cards are produced in three steps, each of which validates the whole
batch first and writes nothing when any problem is found:

1. import_internal_marks: internal marks per batch subject from a sheet
   (C enrollment number, D internal marks). Creates the student's card for
   the batch and semester when missing.
2. calculate_external_marks: scales the latest semester exam marks of a
   batch subject to the external component.
3. generate_grades: grades every detail and computes GPA and CGPA.
"""

import logging
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from collegehub.core.config import GradingSettings
from collegehub.domains.grade_card.grading import (
    card_number,
    cumulative_average,
    grade_point_average,
    grade_subject,
    scale_external_marks,
)
from collegehub.infrastructure.database.models import (
    Batch,
    BatchSubject,
    College,
    ExamMark,
    ExamType,
    GradeCard,
    Program,
    Semester,
    Student,
    StudentBatch,
    Subject,
    SubjectGradeDetail,
)
from collegehub.infrastructure.database.models.base import new_uuid
from collegehub.models.common import RowError
from collegehub.models.grade_card import (
    GradeCardResponse,
    GradeCardSummary,
    SubjectGradeDetailResponse,
)
from collegehub.utils.excel import read_rows

logger = logging.getLogger(__name__)


class GradeCardServiceError(Exception):
    """Base exception for grade card service errors."""

    pass


class GradeCardNotFoundError(GradeCardServiceError):
    """Raised when a grade card, batch or batch subject is not found."""

    pass


class GradeCardValidationError(GradeCardServiceError):
    """Raised when a grading step finds problems.

    Attributes:
        errors: One entry per student or row that failed.
    """

    def __init__(self, message: str, errors: list[RowError]) -> None:
        super().__init__(message)
        self.errors = errors


def _subject_label(subject: Subject) -> str:
    return f"{subject.name} ({subject.code})"


class GradeCardService:
    """Service for grade cards of one college.

    Attributes:
        db: Async database session.
        college_id: College the caller belongs to.
        settings: Internal/external maxima and the semester exam keyword.
    """

    def __init__(
        self,
        db: AsyncSession,
        college_id: str,
        settings: GradingSettings | None = None,
    ) -> None:
        self.db = db
        self.college_id = college_id
        self.settings = settings or GradingSettings()

    # =========================================================================
    # Internal marks
    # =========================================================================

    async def import_internal_marks(self, content: bytes, batch_subject_id: UUID | str) -> int:
        """Import internal marks for one batch subject.

        Returns:
            Number of subject grade details created.

        Raises:
            ExcelFormatError: If the payload is not a workbook.
            GradeCardNotFoundError: If the batch subject is not in the college.
            GradeCardValidationError: If any row fails.
        """
        batch_subject, batch = await self._get_batch_subject(batch_subject_id)
        semester = await self._get_semester(batch.semester_id)
        max_marks = self.settings.internal_max_marks

        errors: list[RowError] = []
        parsed: list[tuple[int, str, float]] = []
        seen: set[str] = set()
        for row in read_rows(content):
            enrollment_no = row.text("C")
            if not enrollment_no:
                errors.append(RowError(row=row.number, message="Missing enrollment number"))
                continue
            marks = row.number_value("D")
            if marks is None:
                errors.append(
                    RowError(
                        row=row.number,
                        enrollment_no=enrollment_no,
                        message="Missing internal marks",
                    )
                )
                continue
            if marks < 0:
                errors.append(
                    RowError(
                        row=row.number,
                        enrollment_no=enrollment_no,
                        message="Internal marks must be a positive number",
                    )
                )
                continue
            if marks > max_marks:
                errors.append(
                    RowError(
                        row=row.number,
                        enrollment_no=enrollment_no,
                        message=f"Internal marks cannot exceed {max_marks}",
                    )
                )
                continue
            if enrollment_no in seen:
                errors.append(
                    RowError(
                        row=row.number,
                        enrollment_no=enrollment_no,
                        message="Duplicate enrollment number in file",
                    )
                )
                continue
            seen.add(enrollment_no)
            parsed.append((row.number, enrollment_no, marks))

        students: dict[str, Student] = {}
        if parsed:
            result = await self.db.execute(
                select(Student).where(
                    Student.college_id == self.college_id,
                    Student.enrollment_no.in_([p[1] for p in parsed]),
                )
            )
            students = {s.enrollment_no: s for s in result.scalars().all()}

        already_graded: set[str] = set()
        if students:
            result = await self.db.execute(
                select(GradeCard.student_id)
                .join(SubjectGradeDetail, SubjectGradeDetail.grade_card_id == GradeCard.id)
                .where(
                    SubjectGradeDetail.batch_subject_id == batch_subject.id,
                    GradeCard.student_id.in_([s.id for s in students.values()]),
                )
            )
            already_graded = set(result.scalars().all())

        for row_number, enrollment_no, _ in parsed:
            student = students.get(enrollment_no)
            if student is None:
                errors.append(
                    RowError(
                        row=row_number,
                        enrollment_no=enrollment_no,
                        message="Student not found in the system",
                    )
                )
            elif student.id in already_graded:
                errors.append(
                    RowError(
                        row=row_number,
                        enrollment_no=enrollment_no,
                        student_id=student.id,
                        message="Internal marks already exist for this student.",
                    )
                )

        if errors:
            errors.sort(key=lambda e: e.row or 0)
            logger.warning(
                "Internal marks import rejected for %s: %d errors",
                batch_subject.id,
                len(errors),
            )
            raise GradeCardValidationError("Internal marks import failed", errors)

        result = await self.db.execute(
            select(GradeCard).where(
                GradeCard.batch_id == batch.id,
                GradeCard.semester_id == semester.id,
            )
        )
        cards = {card.student_id: card for card in result.scalars().all()}
        used_numbers = {card.card_no for card in cards.values()}

        for _, enrollment_no, marks in parsed:
            student = students[enrollment_no]
            card = cards.get(student.id)
            if card is None:
                sequence = len(cards) + 1
                card_no = card_number(enrollment_no, semester.numerical, sequence)
                while card_no in used_numbers:
                    sequence += 1
                    card_no = card_number(enrollment_no, semester.numerical, sequence)
                used_numbers.add(card_no)

                card = GradeCard(
                    id=new_uuid(),
                    student_id=student.id,
                    semester_id=semester.id,
                    batch_id=batch.id,
                    card_no=card_no,
                )
                cards[student.id] = card
                self.db.add(card)

            self.db.add(
                SubjectGradeDetail(
                    grade_card_id=card.id,
                    batch_subject_id=batch_subject.id,
                    internal_marks=marks,
                    credit=batch_subject.credit_score,
                )
            )

        await self.db.commit()
        logger.info(
            "Imported internal marks for %d students in batch subject %s",
            len(parsed),
            batch_subject.id,
        )
        return len(parsed)

    # =========================================================================
    # External marks
    # =========================================================================

    async def calculate_external_marks(self, batch_subject_id: UUID | str) -> int:
        """Scale the latest semester exam marks into external marks.

        Returns:
            Number of details updated.

        Raises:
            GradeCardNotFoundError: If the batch subject is not in the college.
            GradeCardValidationError: If any student lacks marks, card or internal marks.
        """
        batch_subject, batch = await self._get_batch_subject(batch_subject_id)
        subject = await self.db.get(Subject, batch_subject.subject_id)
        label = _subject_label(subject) if subject else batch_subject.id

        keyword = self.settings.semester_exam_keyword
        result = await self.db.execute(
            select(ExamType)
            .where(
                ExamType.college_id == self.college_id,
                ExamType.exam_name.ilike(f"%{keyword}%"),
            )
            .order_by(ExamType.created_at.desc())
            .limit(1)
        )
        exam_type = result.scalar_one_or_none()
        if exam_type is None:
            raise GradeCardValidationError(
                "External marks calculation failed",
                [RowError(message=f"No semester exam found for batch subject {label}")],
            )

        result = await self.db.execute(
            select(Student)
            .join(StudentBatch, StudentBatch.student_id == Student.id)
            .where(StudentBatch.batch_id == batch.id)
            .order_by(Student.enrollment_no)
        )
        students = list(result.scalars().all())

        result = await self.db.execute(
            select(ExamMark).where(
                ExamMark.batch_subject_id == batch_subject.id,
                ExamMark.exam_type_id == exam_type.id,
            )
        )
        marks = {mark.student_id: mark for mark in result.scalars().all()}

        result = await self.db.execute(
            select(GradeCard).where(
                GradeCard.batch_id == batch.id,
                GradeCard.semester_id == batch.semester_id,
            )
        )
        cards = {card.student_id: card for card in result.scalars().all()}

        errors: list[RowError] = []
        updates: list[tuple[SubjectGradeDetail, int]] = []
        for student in students:
            mark = marks.get(student.id)
            if mark is None:
                errors.append(
                    RowError(
                        enrollment_no=student.enrollment_no,
                        student_id=student.id,
                        message=(
                            f"Missing semester exam marks for student {student.name} "
                            f"with ER No. {student.enrollment_no} in {label}"
                        ),
                    )
                )
                continue
            card = cards.get(student.id)
            if card is None:
                errors.append(
                    RowError(
                        enrollment_no=student.enrollment_no,
                        student_id=student.id,
                        message=(
                            f"Grade card not found for student {student.name} - "
                            f"{student.enrollment_no} for {label}"
                        ),
                    )
                )
                continue
            detail = next(
                (d for d in card.details if d.batch_subject_id == batch_subject.id),
                None,
            )
            if detail is None or detail.internal_marks is None:
                errors.append(
                    RowError(
                        enrollment_no=student.enrollment_no,
                        student_id=student.id,
                        message=(
                            f"Internal mark missing for student {student.name} - "
                            f"{student.enrollment_no} for Batch Subject {label}"
                        ),
                    )
                )
                continue
            external = scale_external_marks(
                mark.achieved_marks,
                exam_type.total_marks,
                self.settings.external_max_marks,
            )
            updates.append((detail, external))

        if errors:
            logger.warning(
                "External marks rejected for %s: %d errors", batch_subject.id, len(errors)
            )
            raise GradeCardValidationError(
                "Errors occurred during external marks calculation.", errors
            )

        for detail, external in updates:
            detail.external_marks = external
        await self.db.commit()

        logger.info(
            "Calculated external marks for %d students in batch subject %s from %s",
            len(updates),
            batch_subject.id,
            exam_type.exam_name,
        )
        return len(updates)

    # =========================================================================
    # Grades
    # =========================================================================

    async def generate_grades(
        self,
        batch_id: UUID | str,
        semester_id: UUID | str | None = None,
    ) -> int:
        """Grade every card of a batch and semester.

        Returns:
            Number of grade cards graded.

        Raises:
            GradeCardNotFoundError: If the batch has no cards.
            GradeCardValidationError: If any detail lacks internal or external marks.
        """
        batch = await self._get_batch(batch_id)
        semester = await self._get_semester(semester_id or batch.semester_id)

        result = await self.db.execute(
            select(GradeCard).where(
                GradeCard.batch_id == batch.id,
                GradeCard.semester_id == semester.id,
            )
        )
        cards = list(result.scalars().all())
        if not cards:
            raise GradeCardNotFoundError("No student grade cards found for this batch.")

        result = await self.db.execute(
            select(Student).where(Student.id.in_([card.student_id for card in cards]))
        )
        students = {s.id: s for s in result.scalars().all()}

        result = await self.db.execute(
            select(BatchSubject, Subject)
            .join(Subject, Subject.id == BatchSubject.subject_id)
            .where(BatchSubject.batch_id == batch.id)
        )
        batch_subjects = {bs.id: (bs, subject) for bs, subject in result.all()}

        errors: list[RowError] = []
        graded: list[tuple[GradeCard, list, float, float]] = []
        for card in cards:
            student = students.get(card.student_id)
            total_credit = 0.0
            total_quality = 0.0
            results = []
            for detail in card.details:
                bs, subject = batch_subjects.get(detail.batch_subject_id, (None, None))
                if detail.internal_marks is None or detail.external_marks is None:
                    errors.append(
                        RowError(
                            enrollment_no=student.enrollment_no if student else None,
                            student_id=card.student_id,
                            message=(
                                "Missing internal or external marks for student "
                                f"{student.name if student else card.student_id} in subject "
                                f"{_subject_label(subject) if subject else detail.batch_subject_id}"
                            ),
                        )
                    )
                    continue
                subject_grade = grade_subject(
                    detail.internal_marks,
                    detail.external_marks,
                    detail.credit,
                    bs.class_type if bs else "",
                )
                total_credit += detail.credit
                total_quality += subject_grade.quality_point
                results.append((detail, subject_grade))
            graded.append((card, results, total_credit, total_quality))

        if errors:
            logger.warning("Grade generation rejected for batch %s: %d errors", batch.id, len(errors))
            raise GradeCardValidationError("Grade generation failed", errors)

        for card, results, total_credit, total_quality in graded:
            for detail, subject_grade in results:
                detail.total_marks = subject_grade.total
                detail.grade = subject_grade.grade
                detail.grade_point = subject_grade.grade_point
                detail.quality_point = subject_grade.quality_point

            card.total_graded_credit = total_credit
            card.total_quality_point = total_quality
            card.gpa = grade_point_average(total_quality, total_credit)
            if semester.numerical > 1:
                earlier = await self._earlier_totals(card, semester.numerical)
                card.cgpa = cumulative_average((total_credit, total_quality), earlier)

        await self.db.commit()
        logger.info(
            "Generated grades for %d cards in batch %s semester %s",
            len(graded),
            batch.id,
            semester.numerical,
        )
        return len(graded)

    async def _earlier_totals(self, card: GradeCard, numerical: int) -> list[tuple[float, float]]:
        result = await self.db.execute(
            select(GradeCard.total_graded_credit, GradeCard.total_quality_point)
            .join(Semester, Semester.id == GradeCard.semester_id)
            .where(
                GradeCard.student_id == card.student_id,
                GradeCard.id != card.id,
                Semester.numerical < numerical,
                GradeCard.total_graded_credit.is_not(None),
                GradeCard.total_quality_point.is_not(None),
            )
        )
        return [(credit, quality) for credit, quality in result.all()]

    # =========================================================================
    # Reading
    # =========================================================================

    async def list_grade_cards(
        self,
        batch_id: UUID | None = None,
        semester_id: UUID | None = None,
        student_id: UUID | str | None = None,
    ) -> tuple[list[GradeCardSummary], int]:
        query = (
            select(GradeCard, Student)
            .join(Student, Student.id == GradeCard.student_id)
            .where(Student.college_id == self.college_id)
        )
        if batch_id:
            query = query.where(GradeCard.batch_id == str(batch_id))
        if semester_id:
            query = query.where(GradeCard.semester_id == str(semester_id))
        if student_id:
            query = query.where(GradeCard.student_id == str(student_id))

        count_query = select(func.count()).select_from(query.subquery())
        total_result = await self.db.execute(count_query)
        total = total_result.scalar() or 0

        result = await self.db.execute(query.order_by(GradeCard.card_no))
        items = [self._to_summary(card, student) for card, student in result.all()]
        return items, total

    async def list_for_user(self, user_id: str) -> tuple[list[GradeCardSummary], int]:
        result = await self.db.execute(
            select(Student.id).where(
                Student.user_id == user_id,
                Student.college_id == self.college_id,
            )
        )
        student_id = result.scalar_one_or_none()
        if student_id is None:
            raise GradeCardNotFoundError("No student profile for this account")
        return await self.list_grade_cards(student_id=student_id)

    async def get_grade_card(
        self,
        card_id: UUID | str,
        student_user_id: str | None = None,
    ) -> GradeCardResponse:
        """Get a grade card with subject details.

        Args:
            card_id: Grade card ID.
            student_user_id: When set, the card must belong to this student account.
        """
        query = (
            select(GradeCard, Student, Semester)
            .join(Student, Student.id == GradeCard.student_id)
            .join(Semester, Semester.id == GradeCard.semester_id)
            .where(
                GradeCard.id == str(card_id),
                Student.college_id == self.college_id,
            )
        )
        if student_user_id:
            query = query.where(Student.user_id == student_user_id)
        result = await self.db.execute(query)
        row = result.first()
        if not row:
            raise GradeCardNotFoundError(f"Grade card {card_id} not found")
        card, student, semester = row

        program = await self.db.get(Program, student.program_id)
        college = await self.db.get(College, self.college_id)

        subjects: dict[str, tuple[BatchSubject, Subject]] = {}
        if card.details:
            result = await self.db.execute(
                select(BatchSubject, Subject)
                .join(Subject, Subject.id == BatchSubject.subject_id)
                .where(BatchSubject.id.in_([d.batch_subject_id for d in card.details]))
            )
            subjects = {bs.id: (bs, subject) for bs, subject in result.all()}

        details = []
        for detail in card.details:
            bs, subject = subjects.get(detail.batch_subject_id, (None, None))
            details.append(
                SubjectGradeDetailResponse(
                    id=UUID(detail.id),
                    batch_subject_id=UUID(detail.batch_subject_id),
                    subject_name=subject.name if subject else None,
                    subject_code=subject.code if subject else None,
                    class_type=bs.class_type if bs else None,
                    credit=detail.credit,
                    internal_marks=detail.internal_marks,
                    external_marks=detail.external_marks,
                    total_marks=detail.total_marks,
                    grade=detail.grade,
                    grade_point=detail.grade_point,
                    quality_point=detail.quality_point,
                )
            )
        details.sort(key=lambda d: d.subject_code or "")

        summary = self._to_summary(card, student)
        return GradeCardResponse(
            **summary.model_dump(),
            semester_name=semester.name,
            semester_numerical=semester.numerical,
            program_name=program.name if program else None,
            college_name=college.name if college else None,
            total_graded_credit=card.total_graded_credit,
            total_quality_point=card.total_quality_point,
            details=details,
        )

    # =========================================================================
    # Helpers
    # =========================================================================

    async def _get_batch(self, batch_id: UUID | str) -> Batch:
        result = await self.db.execute(
            select(Batch).where(
                Batch.id == str(batch_id),
                Batch.college_id == self.college_id,
            )
        )
        batch = result.scalar_one_or_none()
        if not batch:
            raise GradeCardNotFoundError(f"Batch {batch_id} not found")
        return batch

    async def _get_batch_subject(self, batch_subject_id: UUID | str) -> tuple[BatchSubject, Batch]:
        result = await self.db.execute(
            select(BatchSubject, Batch)
            .join(Batch, Batch.id == BatchSubject.batch_id)
            .where(
                BatchSubject.id == str(batch_subject_id),
                BatchSubject.college_id == self.college_id,
            )
        )
        row = result.first()
        if not row:
            raise GradeCardNotFoundError(f"Batch subject {batch_subject_id} not found")
        return row[0], row[1]

    async def _get_semester(self, semester_id: UUID | str) -> Semester:
        result = await self.db.execute(
            select(Semester).where(
                Semester.id == str(semester_id),
                Semester.college_id == self.college_id,
            )
        )
        semester = result.scalar_one_or_none()
        if not semester:
            raise GradeCardNotFoundError(f"Semester {semester_id} not found")
        return semester

    def _to_summary(self, card: GradeCard, student: Student) -> GradeCardSummary:
        return GradeCardSummary(
            id=UUID(card.id),
            card_no=card.card_no,
            student_id=UUID(card.student_id),
            student_name=student.name,
            enrollment_no=student.enrollment_no,
            semester_id=UUID(card.semester_id),
            batch_id=UUID(card.batch_id),
            gpa=card.gpa,
            cgpa=card.cgpa,
        )
