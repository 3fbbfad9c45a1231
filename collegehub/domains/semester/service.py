# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Semester service.

Name, alias and numerical position are each unique within a college; the
conflict message names the field that clashed.
"""

import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from collegehub.infrastructure.database.models import Semester
from collegehub.models.academic import (
    SemesterCreateRequest,
    SemesterResponse,
    SemesterUpdateRequest,
)

logger = logging.getLogger(__name__)

_UNIQUE_FIELDS = ("name", "alias", "numerical")


class SemesterServiceError(Exception):
    """Base exception for semester service errors."""

    pass


class SemesterNotFoundError(SemesterServiceError):
    pass


class SemesterExistsError(SemesterServiceError):
    """Raised when name, alias or numerical clashes with another semester."""

    pass


class SemesterService:
    """Service for the semesters of one college.

    Attributes:
        db: Async database session.
        college_id: College the caller belongs to.
    """

    def __init__(self, db: AsyncSession, college_id: str) -> None:
        self.db = db
        self.college_id = college_id

    async def create_semester(self, request: SemesterCreateRequest) -> SemesterResponse:
        """Create a semester.

        Raises:
            SemesterExistsError: If name, alias or numerical is taken.
        """
        await self._check_unique(request.model_dump())

        semester = Semester(
            college_id=self.college_id,
            name=request.name,
            alias=request.alias,
            numerical=request.numerical,
        )
        self.db.add(semester)
        await self.db.commit()
        await self.db.refresh(semester)

        logger.info("Created semester: %s (%s)", semester.name, semester.id)
        return self._to_response(semester)

    async def list_semesters(self) -> tuple[list[SemesterResponse], int]:
        result = await self.db.execute(
            select(Semester)
            .where(Semester.college_id == self.college_id)
            .order_by(Semester.numerical.asc())
        )
        items = [self._to_response(s) for s in result.scalars().all()]
        return items, len(items)

    async def get_semester(self, semester_id: UUID | str) -> SemesterResponse:
        return self._to_response(await self._get_by_id(semester_id))

    async def update_semester(
        self,
        semester_id: UUID | str,
        request: SemesterUpdateRequest,
    ) -> SemesterResponse:
        semester = await self._get_by_id(semester_id)
        changes = request.model_dump(exclude_unset=True, exclude_none=True)
        await self._check_unique(changes, exclude_id=semester.id)

        for field, value in changes.items():
            setattr(semester, field, value)

        await self.db.commit()
        await self.db.refresh(semester)

        logger.info("Updated semester: %s", semester.id)
        return self._to_response(semester)

    async def delete_semester(self, semester_id: UUID | str) -> None:
        semester = await self._get_by_id(semester_id)
        await self.db.delete(semester)
        await self.db.commit()
        logger.info("Deleted semester: %s", semester_id)

    async def _check_unique(self, values: dict, exclude_id: str | None = None) -> None:
        for field in _UNIQUE_FIELDS:
            if values.get(field) is None:
                continue
            column = getattr(Semester, field)
            query = select(Semester).where(
                Semester.college_id == self.college_id,
                column == values[field],
            )
            if exclude_id:
                query = query.where(Semester.id != exclude_id)
            result = await self.db.execute(query)
            if result.scalar_one_or_none():
                raise SemesterExistsError(f"Semester with this {field} already exists")

    async def _get_by_id(self, semester_id: UUID | str) -> Semester:
        result = await self.db.execute(
            select(Semester).where(
                Semester.id == str(semester_id),
                Semester.college_id == self.college_id,
            )
        )
        semester = result.scalar_one_or_none()
        if not semester:
            raise SemesterNotFoundError(f"Semester {semester_id} not found")
        return semester

    def _to_response(self, semester: Semester) -> SemesterResponse:
        return SemesterResponse(
            id=UUID(semester.id),
            name=semester.name,
            alias=semester.alias,
            numerical=semester.numerical,
        )
