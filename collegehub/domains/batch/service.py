# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Batch service.

This module provides the BatchService class for:
- Batch type CRUD
- Batch creation from program, semester, academic year and batch type
- Batch subject assignment
- Student batch assignment and status updates

A batch is named ``{program.code}-{semester.alias}-{academic_year.name}``
and the four-part composition is unique.
"""

import logging
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from collegehub.infrastructure.database.models import (
    AcademicYear,
    Batch,
    BatchSubject,
    BatchType,
    Program,
    Semester,
    Student,
    StudentBatch,
    Subject,
    SubjectType,
    User,
)
from collegehub.models.academic import (
    BatchCreateRequest,
    BatchResponse,
    BatchSubjectCreateRequest,
    BatchSubjectResponse,
    BatchSubjectUpdateRequest,
    BatchTypeRequest,
    BatchTypeResponse,
    BatchUpdateRequest,
    StudentBatchAssignRequest,
    StudentBatchAssignResponse,
    StudentBatchResponse,
    StudentBatchUpdateRequest,
)
from collegehub.models.common import BatchStatus, ClassType

logger = logging.getLogger(__name__)


class BatchServiceError(Exception):
    """Base exception for batch service errors."""

    pass


class BatchNotFoundError(BatchServiceError):
    """Raised when a batch, batch type, batch subject or student batch is missing."""

    pass


class BatchReferenceNotFoundError(BatchServiceError):
    """Raised when a referenced program, semester, year, subject or student is missing."""

    pass


class BatchExistsError(BatchServiceError):
    """Raised when a duplicate batch, batch type or batch subject is created."""

    pass


class BatchService:
    """Service for batches of one college.

    Attributes:
        db: Async database session.
        college_id: College the caller belongs to.
    """

    def __init__(self, db: AsyncSession, college_id: str) -> None:
        self.db = db
        self.college_id = college_id

    # =========================================================================
    # Batch types
    # =========================================================================

    async def create_batch_type(self, request: BatchTypeRequest) -> BatchTypeResponse:
        if await self._find_batch_type_by_name(request.name):
            raise BatchExistsError("Batch type with this name already exists")

        batch_type = BatchType(college_id=self.college_id, name=request.name)
        self.db.add(batch_type)
        await self.db.commit()
        await self.db.refresh(batch_type)

        logger.info("Created batch type: %s (%s)", batch_type.name, batch_type.id)
        return BatchTypeResponse(id=UUID(batch_type.id), name=batch_type.name)

    async def list_batch_types(self) -> tuple[list[BatchTypeResponse], int]:
        result = await self.db.execute(
            select(BatchType)
            .where(BatchType.college_id == self.college_id)
            .order_by(BatchType.name)
        )
        items = [BatchTypeResponse(id=UUID(t.id), name=t.name) for t in result.scalars().all()]
        return items, len(items)

    async def update_batch_type(
        self, batch_type_id: UUID | str, request: BatchTypeRequest
    ) -> BatchTypeResponse:
        batch_type = await self._get_batch_type(batch_type_id)
        existing = await self._find_batch_type_by_name(request.name)
        if existing and existing.id != batch_type.id:
            raise BatchExistsError("Batch type with this name already exists")

        batch_type.name = request.name
        await self.db.commit()
        await self.db.refresh(batch_type)

        logger.info("Updated batch type: %s", batch_type.id)
        return BatchTypeResponse(id=UUID(batch_type.id), name=batch_type.name)

    async def delete_batch_type(self, batch_type_id: UUID | str) -> None:
        batch_type = await self._get_batch_type(batch_type_id)
        await self.db.delete(batch_type)
        await self.db.commit()
        logger.info("Deleted batch type: %s", batch_type_id)

    # =========================================================================
    # Batches
    # =========================================================================

    async def create_batch(self, request: BatchCreateRequest) -> BatchResponse:
        """Create a batch.

        Raises:
            BatchReferenceNotFoundError: If any referenced entity is not in
                the college.
            BatchExistsError: If the same composition already exists.
        """
        program = await self._get_scoped(Program, request.program_id, "Program")
        semester = await self._get_scoped(Semester, request.semester_id, "Semester")
        academic_year = await self._get_scoped(
            AcademicYear, request.academic_year_id, "Academic year"
        )
        batch_type = await self._get_scoped(BatchType, request.batch_type_id, "Batch type")

        result = await self.db.execute(
            select(Batch).where(
                Batch.program_id == program.id,
                Batch.semester_id == semester.id,
                Batch.academic_year_id == academic_year.id,
                Batch.batch_type_id == batch_type.id,
            )
        )
        if result.scalar_one_or_none():
            raise BatchExistsError("Batch already exists")

        batch = Batch(
            college_id=self.college_id,
            program_id=program.id,
            semester_id=semester.id,
            academic_year_id=academic_year.id,
            batch_type_id=batch_type.id,
            name=f"{program.code}-{semester.alias}-{academic_year.name}",
            status=request.status,
        )
        self.db.add(batch)
        await self.db.commit()
        await self.db.refresh(batch)

        logger.info("Created batch: %s (%s)", batch.name, batch.id)
        return self._to_batch_response(batch)

    async def list_batches(
        self,
        program_id: UUID | None = None,
        academic_year_id: UUID | None = None,
        page: int = 1,
        page_size: int = 50,
    ) -> tuple[list[BatchResponse], int]:
        """List batches, newest first."""
        query = select(Batch).where(Batch.college_id == self.college_id)
        if program_id:
            query = query.where(Batch.program_id == str(program_id))
        if academic_year_id:
            query = query.where(Batch.academic_year_id == str(academic_year_id))

        count_query = select(func.count()).select_from(query.subquery())
        total_result = await self.db.execute(count_query)
        total = total_result.scalar() or 0

        query = (
            query.order_by(Batch.created_at.desc())
            .offset((page - 1) * page_size)
            .limit(page_size)
        )
        result = await self.db.execute(query)
        return [self._to_batch_response(b) for b in result.scalars().all()], total

    async def get_batch(self, batch_id: UUID | str) -> BatchResponse:
        return self._to_batch_response(await self.get_batch_model(batch_id))

    async def update_batch(self, batch_id: UUID | str, request: BatchUpdateRequest) -> BatchResponse:
        batch = await self.get_batch_model(batch_id)
        batch.status = request.status
        await self.db.commit()
        await self.db.refresh(batch)

        logger.info("Updated batch status: %s -> %s", batch.id, batch.status)
        return self._to_batch_response(batch)

    async def delete_batch(self, batch_id: UUID | str) -> None:
        batch = await self.get_batch_model(batch_id)
        await self.db.delete(batch)
        await self.db.commit()
        logger.info("Deleted batch: %s", batch_id)

    async def get_batch_model(self, batch_id: UUID | str) -> Batch:
        result = await self.db.execute(
            select(Batch).where(
                Batch.id == str(batch_id),
                Batch.college_id == self.college_id,
            )
        )
        batch = result.scalar_one_or_none()
        if not batch:
            raise BatchNotFoundError(f"Batch {batch_id} not found")
        return batch

    # =========================================================================
    # Batch subjects
    # =========================================================================

    async def add_batch_subject(
        self,
        batch_id: UUID | str,
        request: BatchSubjectCreateRequest,
    ) -> BatchSubjectResponse:
        """Attach a subject to a batch.

        Raises:
            BatchNotFoundError: If the batch is not in the college.
            BatchReferenceNotFoundError: If subject, subject type or teacher
                is not in the college.
            BatchExistsError: If the subject is already in the batch.
        """
        batch = await self.get_batch_model(batch_id)
        subject = await self._get_scoped(Subject, request.subject_id, "Subject")
        subject_type = await self._get_scoped(
            SubjectType, request.subject_type_id, "Subject type"
        )
        if request.teacher_id:
            await self._get_scoped(User, request.teacher_id, "Teacher")

        result = await self.db.execute(
            select(BatchSubject).where(
                BatchSubject.batch_id == batch.id,
                BatchSubject.subject_id == subject.id,
            )
        )
        if result.scalar_one_or_none():
            raise BatchExistsError("Subject is already assigned to this batch")

        batch_subject = BatchSubject(
            college_id=self.college_id,
            batch_id=batch.id,
            subject_id=subject.id,
            subject_type_id=subject_type.id,
            class_type=request.class_type.value,
            credit_score=request.credit_score,
            teacher_id=str(request.teacher_id) if request.teacher_id else None,
        )
        self.db.add(batch_subject)
        await self.db.commit()
        await self.db.refresh(batch_subject)

        logger.info("Added subject %s to batch %s", subject.code, batch.id)
        return self._to_batch_subject_response(batch_subject)

    async def list_batch_subjects(
        self, batch_id: UUID | str
    ) -> tuple[list[BatchSubjectResponse], int]:
        batch = await self.get_batch_model(batch_id)
        result = await self.db.execute(
            select(BatchSubject)
            .where(BatchSubject.batch_id == batch.id)
            .order_by(BatchSubject.created_at)
        )
        items = [self._to_batch_subject_response(bs) for bs in result.scalars().all()]
        return items, len(items)

    async def update_batch_subject(
        self,
        batch_subject_id: UUID | str,
        request: BatchSubjectUpdateRequest,
    ) -> BatchSubjectResponse:
        batch_subject = await self.get_batch_subject_model(batch_subject_id)

        if request.subject_type_id is not None:
            await self._get_scoped(SubjectType, request.subject_type_id, "Subject type")
            batch_subject.subject_type_id = str(request.subject_type_id)
        if request.teacher_id is not None:
            await self._get_scoped(User, request.teacher_id, "Teacher")
            batch_subject.teacher_id = str(request.teacher_id)
        if request.class_type is not None:
            batch_subject.class_type = request.class_type.value
        if request.credit_score is not None:
            batch_subject.credit_score = request.credit_score

        await self.db.commit()
        await self.db.refresh(batch_subject)

        logger.info("Updated batch subject: %s", batch_subject.id)
        return self._to_batch_subject_response(batch_subject)

    async def remove_batch_subject(self, batch_subject_id: UUID | str) -> None:
        batch_subject = await self.get_batch_subject_model(batch_subject_id)
        await self.db.delete(batch_subject)
        await self.db.commit()
        logger.info("Removed batch subject: %s", batch_subject_id)

    async def get_batch_subject_model(self, batch_subject_id: UUID | str) -> BatchSubject:
        result = await self.db.execute(
            select(BatchSubject).where(
                BatchSubject.id == str(batch_subject_id),
                BatchSubject.college_id == self.college_id,
            )
        )
        batch_subject = result.scalar_one_or_none()
        if not batch_subject:
            raise BatchNotFoundError(f"Batch subject {batch_subject_id} not found")
        return batch_subject

    # =========================================================================
    # Student batches
    # =========================================================================

    async def assign_students(
        self,
        batch_id: UUID | str,
        request: StudentBatchAssignRequest,
    ) -> StudentBatchAssignResponse:
        """Assign several students to a batch.

        Students already in the batch are skipped and reported.

        Raises:
            BatchNotFoundError: If the batch is not in the college.
            BatchReferenceNotFoundError: If any student is not in the college.
        """
        batch = await self.get_batch_model(batch_id)
        requested = list(dict.fromkeys(str(sid) for sid in request.student_ids))

        result = await self.db.execute(
            select(Student.id).where(
                Student.id.in_(requested),
                Student.college_id == self.college_id,
            )
        )
        found = set(result.scalars().all())
        missing = [sid for sid in requested if sid not in found]
        if missing:
            raise BatchReferenceNotFoundError(
                f"Students not found: {', '.join(missing)}"
            )

        result = await self.db.execute(
            select(StudentBatch.student_id).where(
                StudentBatch.batch_id == batch.id,
                StudentBatch.student_id.in_(requested),
            )
        )
        already = set(result.scalars().all())
        new_ids = [sid for sid in requested if sid not in already]

        for student_id in new_ids:
            self.db.add(
                StudentBatch(
                    student_id=student_id,
                    batch_id=batch.id,
                    batch_status=request.batch_status.value,
                )
            )
        if new_ids:
            await self.db.commit()

        logger.info(
            "Assigned %d students to batch %s (%d already assigned)",
            len(new_ids),
            batch.id,
            len(already),
        )
        message = (
            f"{len(new_ids)} students assigned to the batch"
            if new_ids
            else "All students are already assigned to this batch"
        )
        return StudentBatchAssignResponse(
            message=message,
            assigned_count=len(new_ids),
            already_assigned_student_ids=[UUID(sid) for sid in requested if sid in already],
        )

    async def list_batch_students(
        self, batch_id: UUID | str
    ) -> tuple[list[StudentBatchResponse], int]:
        batch = await self.get_batch_model(batch_id)
        result = await self.db.execute(
            select(StudentBatch, Student)
            .join(Student, Student.id == StudentBatch.student_id)
            .where(StudentBatch.batch_id == batch.id)
            .order_by(Student.enrollment_no)
        )
        items = [
            self._to_student_batch_response(sb, student) for sb, student in result.all()
        ]
        return items, len(items)

    async def update_student_batch(
        self,
        student_batch_id: UUID | str,
        request: StudentBatchUpdateRequest,
    ) -> StudentBatchResponse:
        result = await self.db.execute(
            select(StudentBatch)
            .join(Batch, Batch.id == StudentBatch.batch_id)
            .where(
                StudentBatch.id == str(student_batch_id),
                Batch.college_id == self.college_id,
            )
        )
        student_batch = result.scalar_one_or_none()
        if not student_batch:
            raise BatchNotFoundError(f"Student batch {student_batch_id} not found")

        student_batch.batch_status = request.batch_status.value
        await self.db.commit()
        await self.db.refresh(student_batch)

        logger.info(
            "Student batch %s status -> %s", student_batch.id, student_batch.batch_status
        )
        return self._to_student_batch_response(student_batch)

    # =========================================================================
    # Helpers
    # =========================================================================

    async def _get_scoped(self, model, entity_id: UUID | str, label: str):
        result = await self.db.execute(
            select(model).where(
                model.id == str(entity_id),
                model.college_id == self.college_id,
            )
        )
        entity = result.scalar_one_or_none()
        if not entity:
            raise BatchReferenceNotFoundError(f"{label} {entity_id} not found")
        return entity

    async def _get_batch_type(self, batch_type_id: UUID | str) -> BatchType:
        result = await self.db.execute(
            select(BatchType).where(
                BatchType.id == str(batch_type_id),
                BatchType.college_id == self.college_id,
            )
        )
        batch_type = result.scalar_one_or_none()
        if not batch_type:
            raise BatchNotFoundError(f"Batch type {batch_type_id} not found")
        return batch_type

    async def _find_batch_type_by_name(self, name: str) -> BatchType | None:
        result = await self.db.execute(
            select(BatchType).where(
                BatchType.college_id == self.college_id,
                BatchType.name == name,
            )
        )
        return result.scalar_one_or_none()

    def _to_batch_response(self, batch: Batch) -> BatchResponse:
        return BatchResponse(
            id=UUID(batch.id),
            name=batch.name,
            program_id=UUID(batch.program_id),
            semester_id=UUID(batch.semester_id),
            academic_year_id=UUID(batch.academic_year_id),
            batch_type_id=UUID(batch.batch_type_id),
            status=batch.status,
            created_at=batch.created_at,
        )

    def _to_batch_subject_response(self, batch_subject: BatchSubject) -> BatchSubjectResponse:
        return BatchSubjectResponse(
            id=UUID(batch_subject.id),
            batch_id=UUID(batch_subject.batch_id),
            subject_id=UUID(batch_subject.subject_id),
            subject_type_id=UUID(batch_subject.subject_type_id),
            class_type=ClassType(batch_subject.class_type),
            credit_score=batch_subject.credit_score,
            teacher_id=UUID(batch_subject.teacher_id) if batch_subject.teacher_id else None,
        )

    def _to_student_batch_response(
        self,
        student_batch: StudentBatch,
        student: Student | None = None,
    ) -> StudentBatchResponse:
        return StudentBatchResponse(
            id=UUID(student_batch.id),
            student_id=UUID(student_batch.student_id),
            batch_id=UUID(student_batch.batch_id),
            batch_status=BatchStatus(student_batch.batch_status),
            enrollment_no=student.enrollment_no if student else None,
            student_name=student.name if student else None,
        )
