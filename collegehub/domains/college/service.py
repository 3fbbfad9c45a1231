# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""College service for platform level college management.

This module provides the CollegeService class for:
- College CRUD operations (SBTE admin)
- Department management within a college
- College statistics
"""

import logging
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from collegehub.infrastructure.database.models import (
    Batch,
    College,
    Department,
    Program,
    Student,
)
from collegehub.models.college import (
    CollegeCreateRequest,
    CollegeResponse,
    CollegeStatsResponse,
    CollegeUpdateRequest,
    DepartmentCreateRequest,
    DepartmentResponse,
)

logger = logging.getLogger(__name__)


class CollegeServiceError(Exception):
    """Base exception for college service errors."""

    pass


class CollegeNotFoundError(CollegeServiceError):
    """Raised when a college is not found."""

    pass


class CollegeExistsError(CollegeServiceError):
    """Raised when a college code is already taken."""

    pass


class DepartmentExistsError(CollegeServiceError):
    """Raised when a department code is already used in the college."""

    pass


class CollegeService:
    """Service for managing colleges and their departments.

    Attributes:
        db: Async database session.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def create_college(self, request: CollegeCreateRequest) -> CollegeResponse:
        """Create a new college.

        Raises:
            CollegeExistsError: If the code is already used.
        """
        code = request.code.upper()
        if await self._get_by_code(code):
            raise CollegeExistsError(f"College with code {code} already exists")

        college = College(
            name=request.name,
            code=code,
            address=request.address,
            email=request.email,
            phone=request.phone,
            established_year=request.established_year,
            is_active=True,
        )
        self.db.add(college)
        await self.db.commit()
        await self.db.refresh(college)

        logger.info("Created college: %s (%s)", college.code, college.id)
        return self._to_response(college)

    async def list_colleges(
        self,
        search: str | None = None,
        is_active: bool | None = None,
        page: int = 1,
        page_size: int = 20,
    ) -> tuple[list[CollegeResponse], int]:
        """List colleges.

        Returns:
            Tuple of (colleges on the page, total count).
        """
        query = select(College)
        if search:
            pattern = f"%{search}%"
            query = query.where(College.name.ilike(pattern) | College.code.ilike(pattern))
        if is_active is not None:
            query = query.where(College.is_active == is_active)

        count_query = select(func.count()).select_from(query.subquery())
        total_result = await self.db.execute(count_query)
        total = total_result.scalar() or 0

        query = query.order_by(College.name).offset((page - 1) * page_size).limit(page_size)
        result = await self.db.execute(query)
        return [self._to_response(c) for c in result.scalars().all()], total

    async def get_college(self, college_id: UUID | str) -> CollegeResponse:
        return self._to_response(await self._get_by_id(college_id))

    async def update_college(
        self,
        college_id: UUID | str,
        request: CollegeUpdateRequest,
    ) -> CollegeResponse:
        """Update a college.

        Raises:
            CollegeNotFoundError: If the college does not exist.
            CollegeExistsError: If the new code is taken.
        """
        college = await self._get_by_id(college_id)
        changes = request.model_dump(exclude_unset=True)

        if "code" in changes and changes["code"]:
            changes["code"] = changes["code"].upper()
            existing = await self._get_by_code(changes["code"])
            if existing and existing.id != college.id:
                raise CollegeExistsError(f"College with code {changes['code']} already exists")

        for field, value in changes.items():
            setattr(college, field, value)

        await self.db.commit()
        await self.db.refresh(college)

        logger.info("Updated college: %s", college.id)
        return self._to_response(college)

    async def get_stats(self, college_id: UUID | str) -> CollegeStatsResponse:
        """Count departments, programs, students and batches of a college."""
        college = await self._get_by_id(college_id)

        counts = {}
        for key, model in (
            ("departments", Department),
            ("programs", Program),
            ("students", Student),
            ("batches", Batch),
        ):
            result = await self.db.execute(
                select(func.count()).select_from(model).where(model.college_id == college.id)
            )
            counts[key] = result.scalar() or 0

        return CollegeStatsResponse(college_id=UUID(college.id), **counts)

    # =========================================================================
    # Departments
    # =========================================================================

    async def create_department(
        self,
        college_id: UUID | str,
        request: DepartmentCreateRequest,
    ) -> DepartmentResponse:
        """Create a department inside a college.

        Raises:
            CollegeNotFoundError: If the college does not exist.
            DepartmentExistsError: If the code is already used in the college.
        """
        college = await self._get_by_id(college_id)
        code = request.code.upper()

        result = await self.db.execute(
            select(Department).where(
                Department.college_id == college.id,
                Department.code == code,
            )
        )
        if result.scalar_one_or_none():
            raise DepartmentExistsError(f"Department with code {code} already exists")

        department = Department(college_id=college.id, name=request.name, code=code)
        self.db.add(department)
        await self.db.commit()
        await self.db.refresh(department)

        logger.info("Created department: %s in college %s", department.code, college.id)
        return self._to_department_response(department)

    async def list_departments(
        self, college_id: UUID | str
    ) -> tuple[list[DepartmentResponse], int]:
        college = await self._get_by_id(college_id)
        result = await self.db.execute(
            select(Department)
            .where(Department.college_id == college.id)
            .order_by(Department.name)
        )
        items = [self._to_department_response(d) for d in result.scalars().all()]
        return items, len(items)

    async def _get_by_id(self, college_id: UUID | str) -> College:
        result = await self.db.execute(select(College).where(College.id == str(college_id)))
        college = result.scalar_one_or_none()
        if not college:
            raise CollegeNotFoundError(f"College {college_id} not found")
        return college

    async def _get_by_code(self, code: str) -> College | None:
        result = await self.db.execute(select(College).where(College.code == code))
        return result.scalar_one_or_none()

    def _to_response(self, college: College) -> CollegeResponse:
        return CollegeResponse(
            id=UUID(college.id),
            name=college.name,
            code=college.code,
            address=college.address,
            email=college.email,
            phone=college.phone,
            established_year=college.established_year,
            is_active=college.is_active,
            created_at=college.created_at,
        )

    def _to_department_response(self, department: Department) -> DepartmentResponse:
        return DepartmentResponse(
            id=UUID(department.id),
            college_id=UUID(department.college_id),
            name=department.name,
            code=department.code,
        )
