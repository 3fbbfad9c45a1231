# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Staff classification services.

This module provides per-college CRUD for:
- Teacher designations (Professor, Assistant Professor, ...)
- Employee categories (Teaching, Non-teaching, Contract, ...)

Both tables hold a name and an alias that must each be unique within the
college, so one base service carries the logic.
"""

import logging
from typing import ClassVar
from uuid import UUID

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from collegehub.infrastructure.database.models import EmployeeCategory, TeacherDesignation
from collegehub.models.staff import (
    StaffLabelCreateRequest,
    StaffLabelResponse,
    StaffLabelUpdateRequest,
)

logger = logging.getLogger(__name__)


class StaffLabelServiceError(Exception):
    """Base exception for staff classification errors."""

    pass


class StaffLabelNotFoundError(StaffLabelServiceError):
    """Raised when the designation or category is not in the college."""

    pass


class StaffLabelExistsError(StaffLabelServiceError):
    """Raised when the name or alias is already used in the college."""

    pass


class _StaffLabelService:
    """Shared CRUD over a college-scoped name/alias table.

    Attributes:
        db: Async database session.
        college_id: College the caller belongs to.
    """

    model: ClassVar[type[TeacherDesignation] | type[EmployeeCategory]]
    label: ClassVar[str]

    def __init__(self, db: AsyncSession, college_id: str) -> None:
        self.db = db
        self.college_id = college_id

    async def create_entry(self, request: StaffLabelCreateRequest) -> StaffLabelResponse:
        """Create an entry.

        Raises:
            StaffLabelExistsError: If the name or alias is taken.
        """
        await self._ensure_unique(request.name, request.alias)

        entry = self.model(
            college_id=self.college_id,
            name=request.name,
            alias=request.alias,
            description=request.description,
        )
        self.db.add(entry)
        await self.db.commit()
        await self.db.refresh(entry)

        logger.info("Created %s: %s (%s)", self.label.lower(), entry.name, entry.id)
        return self._to_response(entry)

    async def list_entries(self) -> tuple[list[StaffLabelResponse], int]:
        """List entries ordered by name.

        Returns:
            Tuple of (entries, total count).
        """
        result = await self.db.execute(
            select(self.model)
            .where(self.model.college_id == self.college_id)
            .order_by(self.model.name)
        )
        items = [self._to_response(e) for e in result.scalars().all()]
        return items, len(items)

    async def get_entry(self, entry_id: UUID | str) -> StaffLabelResponse:
        return self._to_response(await self._get_by_id(entry_id))

    async def update_entry(
        self,
        entry_id: UUID | str,
        request: StaffLabelUpdateRequest,
    ) -> StaffLabelResponse:
        """Update an entry.

        Raises:
            StaffLabelNotFoundError: If the entry is not in the college.
            StaffLabelExistsError: If the new name or alias is taken.
        """
        entry = await self._get_by_id(entry_id)

        if request.name is not None or request.alias is not None:
            await self._ensure_unique(request.name, request.alias, exclude_id=entry.id)

        if request.name is not None:
            entry.name = request.name
        if request.alias is not None:
            entry.alias = request.alias
        if request.description is not None:
            entry.description = request.description

        await self.db.commit()
        await self.db.refresh(entry)

        logger.info("Updated %s: %s", self.label.lower(), entry.id)
        return self._to_response(entry)

    async def delete_entry(self, entry_id: UUID | str) -> None:
        """Delete an entry.

        Raises:
            StaffLabelNotFoundError: If the entry is not in the college.
        """
        entry = await self._get_by_id(entry_id)
        await self.db.delete(entry)
        await self.db.commit()

        logger.info("Deleted %s: %s", self.label.lower(), entry_id)

    async def _ensure_unique(
        self,
        name: str | None,
        alias: str | None,
        exclude_id: str | None = None,
    ) -> None:
        clauses = []
        if name is not None:
            clauses.append(func.lower(self.model.name) == name.lower())
        if alias is not None:
            clauses.append(func.lower(self.model.alias) == alias.lower())

        query = select(self.model).where(
            self.model.college_id == self.college_id,
            or_(*clauses),
        )
        if exclude_id is not None:
            query = query.where(self.model.id != exclude_id)

        result = await self.db.execute(query.limit(1))
        if result.scalar_one_or_none():
            raise StaffLabelExistsError(f"{self.label} with this name or alias already exists")

    async def _get_by_id(self, entry_id: UUID | str):
        result = await self.db.execute(
            select(self.model).where(
                self.model.id == str(entry_id),
                self.model.college_id == self.college_id,
            )
        )
        entry = result.scalar_one_or_none()
        if not entry:
            raise StaffLabelNotFoundError(f"{self.label} {entry_id} not found")
        return entry

    def _to_response(self, entry) -> StaffLabelResponse:
        return StaffLabelResponse(
            id=UUID(entry.id),
            name=entry.name,
            alias=entry.alias,
            description=entry.description,
        )


class TeacherDesignationService(_StaffLabelService):
    """Teacher designations of one college."""

    model = TeacherDesignation
    label = "Designation"


class EmployeeCategoryService(_StaffLabelService):
    """Employee categories of one college."""

    model = EmployeeCategory
    label = "Category"
