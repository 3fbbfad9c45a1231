# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Subject service.

This module provides the SubjectService class for:
- Subject type CRUD (name unique per college)
- Subject CRUD (code unique per college) with program and semester filters
"""

import logging
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from collegehub.infrastructure.database.models import Program, Semester, Subject, SubjectType
from collegehub.models.academic import (
    SubjectCreateRequest,
    SubjectResponse,
    SubjectTypeCreateRequest,
    SubjectTypeResponse,
    SubjectTypeUpdateRequest,
    SubjectUpdateRequest,
)

logger = logging.getLogger(__name__)


class SubjectServiceError(Exception):
    """Base exception for subject service errors."""

    pass


class SubjectNotFoundError(SubjectServiceError):
    """Raised when a subject, subject type, program or semester is missing."""

    pass


class SubjectExistsError(SubjectServiceError):
    """Raised when a subject code or subject type name is taken."""

    pass


class SubjectService:
    """Service for subjects and subject types of one college.

    Attributes:
        db: Async database session.
        college_id: College the caller belongs to.
    """

    def __init__(self, db: AsyncSession, college_id: str) -> None:
        self.db = db
        self.college_id = college_id

    # =========================================================================
    # Subject types
    # =========================================================================

    async def create_subject_type(
        self, request: SubjectTypeCreateRequest
    ) -> SubjectTypeResponse:
        if await self._find_type_by_name(request.name):
            raise SubjectExistsError("Subject type with this name already exists")

        subject_type = SubjectType(
            college_id=self.college_id,
            name=request.name,
            alias=request.alias,
        )
        self.db.add(subject_type)
        await self.db.commit()
        await self.db.refresh(subject_type)

        logger.info("Created subject type: %s (%s)", subject_type.name, subject_type.id)
        return self._to_type_response(subject_type)

    async def list_subject_types(self) -> tuple[list[SubjectTypeResponse], int]:
        result = await self.db.execute(
            select(SubjectType)
            .where(SubjectType.college_id == self.college_id)
            .order_by(SubjectType.name)
        )
        items = [self._to_type_response(t) for t in result.scalars().all()]
        return items, len(items)

    async def update_subject_type(
        self,
        subject_type_id: UUID | str,
        request: SubjectTypeUpdateRequest,
    ) -> SubjectTypeResponse:
        subject_type = await self._get_type(subject_type_id)

        if request.name is not None:
            existing = await self._find_type_by_name(request.name)
            if existing and existing.id != subject_type.id:
                raise SubjectExistsError("Subject type with this name already exists")
            subject_type.name = request.name
        if request.alias is not None:
            subject_type.alias = request.alias

        await self.db.commit()
        await self.db.refresh(subject_type)

        logger.info("Updated subject type: %s", subject_type.id)
        return self._to_type_response(subject_type)

    async def delete_subject_type(self, subject_type_id: UUID | str) -> None:
        subject_type = await self._get_type(subject_type_id)
        await self.db.delete(subject_type)
        await self.db.commit()
        logger.info("Deleted subject type: %s", subject_type_id)

    # =========================================================================
    # Subjects
    # =========================================================================

    async def create_subject(self, request: SubjectCreateRequest) -> SubjectResponse:
        """Create a subject.

        Raises:
            SubjectNotFoundError: If program or semester is not in the college.
            SubjectExistsError: If the code is taken.
        """
        await self._ensure_scoped(Program, request.program_id, "Program")
        await self._ensure_scoped(Semester, request.semester_id, "Semester")

        code = request.code.upper()
        if await self._find_by_code(code):
            raise SubjectExistsError(f"Subject with code {code} already exists")

        subject = Subject(
            college_id=self.college_id,
            program_id=str(request.program_id),
            semester_id=str(request.semester_id),
            name=request.name,
            code=code,
            credit_score=request.credit_score,
        )
        self.db.add(subject)
        await self.db.commit()
        await self.db.refresh(subject)

        logger.info("Created subject: %s (%s)", subject.code, subject.id)
        return self._to_response(subject)

    async def list_subjects(
        self,
        program_id: UUID | None = None,
        semester_id: UUID | None = None,
    ) -> tuple[list[SubjectResponse], int]:
        query = select(Subject).where(Subject.college_id == self.college_id)
        if program_id:
            query = query.where(Subject.program_id == str(program_id))
        if semester_id:
            query = query.where(Subject.semester_id == str(semester_id))

        count_query = select(func.count()).select_from(query.subquery())
        total_result = await self.db.execute(count_query)
        total = total_result.scalar() or 0

        result = await self.db.execute(query.order_by(Subject.code))
        return [self._to_response(s) for s in result.scalars().all()], total

    async def get_subject(self, subject_id: UUID | str) -> SubjectResponse:
        return self._to_response(await self._get_subject(subject_id))

    async def update_subject(
        self,
        subject_id: UUID | str,
        request: SubjectUpdateRequest,
    ) -> SubjectResponse:
        subject = await self._get_subject(subject_id)

        if request.program_id is not None:
            await self._ensure_scoped(Program, request.program_id, "Program")
            subject.program_id = str(request.program_id)
        if request.semester_id is not None:
            await self._ensure_scoped(Semester, request.semester_id, "Semester")
            subject.semester_id = str(request.semester_id)
        if request.code is not None:
            code = request.code.upper()
            existing = await self._find_by_code(code)
            if existing and existing.id != subject.id:
                raise SubjectExistsError(f"Subject with code {code} already exists")
            subject.code = code
        if request.name is not None:
            subject.name = request.name
        if request.credit_score is not None:
            subject.credit_score = request.credit_score

        await self.db.commit()
        await self.db.refresh(subject)

        logger.info("Updated subject: %s", subject.id)
        return self._to_response(subject)

    async def delete_subject(self, subject_id: UUID | str) -> None:
        subject = await self._get_subject(subject_id)
        await self.db.delete(subject)
        await self.db.commit()
        logger.info("Deleted subject: %s", subject_id)

    # =========================================================================
    # Helpers
    # =========================================================================

    async def _ensure_scoped(self, model, entity_id: UUID | str, label: str) -> None:
        result = await self.db.execute(
            select(model.id).where(
                model.id == str(entity_id),
                model.college_id == self.college_id,
            )
        )
        if not result.scalar_one_or_none():
            raise SubjectNotFoundError(f"{label} {entity_id} not found")

    async def _get_subject(self, subject_id: UUID | str) -> Subject:
        result = await self.db.execute(
            select(Subject).where(
                Subject.id == str(subject_id),
                Subject.college_id == self.college_id,
            )
        )
        subject = result.scalar_one_or_none()
        if not subject:
            raise SubjectNotFoundError(f"Subject {subject_id} not found")
        return subject

    async def _find_by_code(self, code: str) -> Subject | None:
        result = await self.db.execute(
            select(Subject).where(
                Subject.college_id == self.college_id,
                Subject.code == code,
            )
        )
        return result.scalar_one_or_none()

    async def _get_type(self, subject_type_id: UUID | str) -> SubjectType:
        result = await self.db.execute(
            select(SubjectType).where(
                SubjectType.id == str(subject_type_id),
                SubjectType.college_id == self.college_id,
            )
        )
        subject_type = result.scalar_one_or_none()
        if not subject_type:
            raise SubjectNotFoundError(f"Subject type {subject_type_id} not found")
        return subject_type

    async def _find_type_by_name(self, name: str) -> SubjectType | None:
        result = await self.db.execute(
            select(SubjectType).where(
                SubjectType.college_id == self.college_id,
                SubjectType.name == name,
            )
        )
        return result.scalar_one_or_none()

    def _to_type_response(self, subject_type: SubjectType) -> SubjectTypeResponse:
        return SubjectTypeResponse(
            id=UUID(subject_type.id),
            name=subject_type.name,
            alias=subject_type.alias,
        )

    def _to_response(self, subject: Subject) -> SubjectResponse:
        return SubjectResponse(
            id=UUID(subject.id),
            name=subject.name,
            code=subject.code,
            program_id=UUID(subject.program_id),
            semester_id=UUID(subject.semester_id),
            credit_score=subject.credit_score,
        )
