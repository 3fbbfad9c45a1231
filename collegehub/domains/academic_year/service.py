# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Academic year service for managing academic year operations.

This module provides the AcademicYearService class for:
- Academic year CRUD operations within a college
- Date and name validation
"""

import logging
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from collegehub.infrastructure.database.models import AcademicYear, Batch
from collegehub.models.academic import (
    AcademicYearCreateRequest,
    AcademicYearResponse,
    AcademicYearUpdateRequest,
)

logger = logging.getLogger(__name__)


class AcademicYearServiceError(Exception):
    """Base exception for academic year service errors."""

    pass


class AcademicYearNotFoundError(AcademicYearServiceError):
    """Raised when academic year is not found."""

    pass


class AcademicYearExistsError(AcademicYearServiceError):
    """Raised when the name is already used in the college."""

    pass


class AcademicYearValidationError(AcademicYearServiceError):
    """Raised when dates are invalid."""

    pass


class AcademicYearInUseError(AcademicYearServiceError):
    """Raised when deleting a year that batches still reference."""

    pass


class AcademicYearService:
    """Service for managing the academic years of one college.

    Attributes:
        db: Async database session.
        college_id: College the caller belongs to.
    """

    def __init__(self, db: AsyncSession, college_id: str) -> None:
        self.db = db
        self.college_id = college_id

    async def create_academic_year(
        self,
        request: AcademicYearCreateRequest,
    ) -> AcademicYearResponse:
        """Create a new academic year.

        Raises:
            AcademicYearValidationError: If end date is not after start date.
            AcademicYearExistsError: If the name is already used.
        """
        if request.end_date <= request.start_date:
            raise AcademicYearValidationError("End date must be after start date")
        if await self._get_by_name(request.name):
            raise AcademicYearExistsError("Academic year with this name already exists")

        academic_year = AcademicYear(
            college_id=self.college_id,
            name=request.name,
            start_date=request.start_date,
            end_date=request.end_date,
            status=request.status,
        )
        self.db.add(academic_year)
        await self.db.commit()
        await self.db.refresh(academic_year)

        logger.info("Created academic year: %s (%s)", academic_year.name, academic_year.id)
        return self._to_response(academic_year)

    async def list_academic_years(
        self,
        status: bool | None = None,
    ) -> tuple[list[AcademicYearResponse], int]:
        """List academic years, newest start date first.

        Returns:
            Tuple of (list of academic years, total count).
        """
        query = select(AcademicYear).where(AcademicYear.college_id == self.college_id)
        if status is not None:
            query = query.where(AcademicYear.status == status)

        count_query = select(func.count()).select_from(query.subquery())
        total_result = await self.db.execute(count_query)
        total = total_result.scalar() or 0

        result = await self.db.execute(query.order_by(AcademicYear.start_date.desc()))
        return [self._to_response(y) for y in result.scalars().all()], total

    async def get_academic_year(self, year_id: UUID | str) -> AcademicYearResponse:
        return self._to_response(await self._get_by_id(year_id))

    async def update_academic_year(
        self,
        year_id: UUID | str,
        request: AcademicYearUpdateRequest,
    ) -> AcademicYearResponse:
        """Update an academic year.

        Raises:
            AcademicYearNotFoundError: If year not found.
            AcademicYearValidationError: If the resulting dates are invalid.
            AcademicYearExistsError: If the new name is taken.
        """
        academic_year = await self._get_by_id(year_id)

        new_start = request.start_date or academic_year.start_date
        new_end = request.end_date or academic_year.end_date
        if new_end <= new_start:
            raise AcademicYearValidationError("End date must be after start date")

        if request.name is not None and request.name != academic_year.name:
            existing = await self._get_by_name(request.name)
            if existing and existing.id != academic_year.id:
                raise AcademicYearExistsError("Academic year with this name already exists")
            academic_year.name = request.name

        academic_year.start_date = new_start
        academic_year.end_date = new_end
        if request.status is not None:
            academic_year.status = request.status

        await self.db.commit()
        await self.db.refresh(academic_year)

        logger.info("Updated academic year: %s", academic_year.id)
        return self._to_response(academic_year)

    async def delete_academic_year(self, year_id: UUID | str) -> None:
        """Delete an academic year.

        Raises:
            AcademicYearNotFoundError: If year not found.
            AcademicYearInUseError: If batches reference it.
        """
        academic_year = await self._get_by_id(year_id)

        result = await self.db.execute(
            select(func.count()).select_from(Batch).where(
                Batch.academic_year_id == academic_year.id
            )
        )
        batch_count = result.scalar() or 0
        if batch_count > 0:
            raise AcademicYearInUseError(
                f"Cannot delete academic year with {batch_count} associated batches"
            )

        await self.db.delete(academic_year)
        await self.db.commit()

        logger.info("Deleted academic year: %s", year_id)

    async def _get_by_id(self, year_id: UUID | str) -> AcademicYear:
        result = await self.db.execute(
            select(AcademicYear).where(
                AcademicYear.id == str(year_id),
                AcademicYear.college_id == self.college_id,
            )
        )
        academic_year = result.scalar_one_or_none()
        if not academic_year:
            raise AcademicYearNotFoundError(f"Academic year {year_id} not found")
        return academic_year

    async def _get_by_name(self, name: str) -> AcademicYear | None:
        result = await self.db.execute(
            select(AcademicYear).where(
                AcademicYear.college_id == self.college_id,
                AcademicYear.name == name,
            )
        )
        return result.scalar_one_or_none()

    def _to_response(self, academic_year: AcademicYear) -> AcademicYearResponse:
        return AcademicYearResponse(
            id=UUID(academic_year.id),
            name=academic_year.name,
            start_date=academic_year.start_date,
            end_date=academic_year.end_date,
            status=academic_year.status,
        )
