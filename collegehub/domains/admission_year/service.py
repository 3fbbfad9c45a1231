# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Admission year service."""

import logging
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from collegehub.infrastructure.database.models import AdmissionYear, Student
from collegehub.models.academic import (
    AdmissionYearCreateRequest,
    AdmissionYearResponse,
    AdmissionYearUpdateRequest,
)

logger = logging.getLogger(__name__)


class AdmissionYearServiceError(Exception):
    """Base exception for admission year service errors."""

    pass


class AdmissionYearNotFoundError(AdmissionYearServiceError):
    pass


class AdmissionYearExistsError(AdmissionYearServiceError):
    pass


class AdmissionYearInUseError(AdmissionYearServiceError):
    pass


class AdmissionYearService:
    def __init__(self, db: AsyncSession, college_id: str) -> None:
        self.db = db
        self.college_id = college_id

    async def create_admission_year(
        self, request: AdmissionYearCreateRequest
    ) -> AdmissionYearResponse:
        if await self._get_by_year(request.year):
            raise AdmissionYearExistsError("Admission year already exists")

        admission_year = AdmissionYear(
            college_id=self.college_id,
            year=request.year,
            status=request.status,
        )
        self.db.add(admission_year)
        await self.db.commit()
        await self.db.refresh(admission_year)

        logger.info("Created admission year: %d (%s)", admission_year.year, admission_year.id)
        return self._to_response(admission_year)

    async def list_admission_years(self) -> tuple[list[AdmissionYearResponse], int]:
        result = await self.db.execute(
            select(AdmissionYear)
            .where(AdmissionYear.college_id == self.college_id)
            .order_by(AdmissionYear.year.desc())
        )
        items = [self._to_response(y) for y in result.scalars().all()]
        return items, len(items)

    async def update_admission_year(
        self,
        year_id: UUID | str,
        request: AdmissionYearUpdateRequest,
    ) -> AdmissionYearResponse:
        admission_year = await self._get_by_id(year_id)

        if request.year is not None and request.year != admission_year.year:
            if await self._get_by_year(request.year):
                raise AdmissionYearExistsError("Admission year already exists")
            admission_year.year = request.year
        if request.status is not None:
            admission_year.status = request.status

        await self.db.commit()
        await self.db.refresh(admission_year)

        logger.info("Updated admission year: %s", admission_year.id)
        return self._to_response(admission_year)

    async def delete_admission_year(self, year_id: UUID | str) -> None:
        admission_year = await self._get_by_id(year_id)

        result = await self.db.execute(
            select(func.count()).select_from(Student).where(
                Student.admission_year_id == admission_year.id
            )
        )
        if (result.scalar() or 0) > 0:
            raise AdmissionYearInUseError("Cannot delete an admission year with students")

        await self.db.delete(admission_year)
        await self.db.commit()
        logger.info("Deleted admission year: %s", year_id)

    async def _get_by_id(self, year_id: UUID | str) -> AdmissionYear:
        result = await self.db.execute(
            select(AdmissionYear).where(
                AdmissionYear.id == str(year_id),
                AdmissionYear.college_id == self.college_id,
            )
        )
        admission_year = result.scalar_one_or_none()
        if not admission_year:
            raise AdmissionYearNotFoundError(f"Admission year {year_id} not found")
        return admission_year

    async def _get_by_year(self, year: int) -> AdmissionYear | None:
        result = await self.db.execute(
            select(AdmissionYear).where(
                AdmissionYear.college_id == self.college_id,
                AdmissionYear.year == year,
            )
        )
        return result.scalar_one_or_none()

    def _to_response(self, admission_year: AdmissionYear) -> AdmissionYearResponse:
        return AdmissionYearResponse(
            id=UUID(admission_year.id),
            year=admission_year.year,
            status=admission_year.status,
        )
