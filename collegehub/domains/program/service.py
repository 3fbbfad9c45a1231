# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Program service.

This module provides the ProgramService class for:
- Program CRUD within a college
- Department ownership checks
"""

import logging
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from collegehub.infrastructure.database.models import Department, Program
from collegehub.models.academic import (
    ProgramCreateRequest,
    ProgramResponse,
    ProgramUpdateRequest,
)

logger = logging.getLogger(__name__)


class ProgramServiceError(Exception):
    """Base exception for program service errors."""

    pass


class ProgramNotFoundError(ProgramServiceError):
    """Raised when a program is not found."""

    pass


class ProgramExistsError(ProgramServiceError):
    """Raised when the program code is already used in the college."""

    pass


class DepartmentNotFoundError(ProgramServiceError):
    """Raised when the department is not part of the college."""

    pass


class ProgramService:
    """Service for the programs of one college.

    Attributes:
        db: Async database session.
        college_id: College the caller belongs to.
    """

    def __init__(self, db: AsyncSession, college_id: str) -> None:
        self.db = db
        self.college_id = college_id

    async def create_program(self, request: ProgramCreateRequest) -> ProgramResponse:
        """Create a program.

        Raises:
            DepartmentNotFoundError: If the department is not in the college.
            ProgramExistsError: If the code is already used.
        """
        await self._ensure_department(request.department_id)
        code = request.code.upper()
        if await self._get_by_code(code):
            raise ProgramExistsError(f"Program with code {code} already exists")

        program = Program(
            college_id=self.college_id,
            department_id=str(request.department_id),
            name=request.name,
            code=code,
            alias=request.alias,
            status=request.status,
        )
        self.db.add(program)
        await self.db.commit()
        await self.db.refresh(program)

        logger.info("Created program: %s (%s)", program.code, program.id)
        return self._to_response(program)

    async def list_programs(
        self,
        department_id: UUID | None = None,
        status: bool | None = None,
    ) -> tuple[list[ProgramResponse], int]:
        query = select(Program).where(Program.college_id == self.college_id)
        if department_id:
            query = query.where(Program.department_id == str(department_id))
        if status is not None:
            query = query.where(Program.status == status)

        count_query = select(func.count()).select_from(query.subquery())
        total_result = await self.db.execute(count_query)
        total = total_result.scalar() or 0

        result = await self.db.execute(query.order_by(Program.name))
        return [self._to_response(p) for p in result.scalars().all()], total

    async def get_program(self, program_id: UUID | str) -> ProgramResponse:
        return self._to_response(await self._get_by_id(program_id))

    async def update_program(
        self,
        program_id: UUID | str,
        request: ProgramUpdateRequest,
    ) -> ProgramResponse:
        """Update a program.

        Raises:
            ProgramNotFoundError: If the program does not exist.
            DepartmentNotFoundError: If the new department is not in the college.
            ProgramExistsError: If the new code is taken.
        """
        program = await self._get_by_id(program_id)

        if request.department_id is not None:
            await self._ensure_department(request.department_id)
            program.department_id = str(request.department_id)

        if request.code is not None:
            code = request.code.upper()
            existing = await self._get_by_code(code)
            if existing and existing.id != program.id:
                raise ProgramExistsError(f"Program with code {code} already exists")
            program.code = code

        if request.name is not None:
            program.name = request.name
        if request.alias is not None:
            program.alias = request.alias
        if request.status is not None:
            program.status = request.status

        await self.db.commit()
        await self.db.refresh(program)

        logger.info("Updated program: %s", program.id)
        return self._to_response(program)

    async def delete_program(self, program_id: UUID | str) -> None:
        program = await self._get_by_id(program_id)
        await self.db.delete(program)
        await self.db.commit()
        logger.info("Deleted program: %s", program_id)

    async def _ensure_department(self, department_id: UUID | str) -> Department:
        result = await self.db.execute(
            select(Department).where(
                Department.id == str(department_id),
                Department.college_id == self.college_id,
            )
        )
        department = result.scalar_one_or_none()
        if not department:
            raise DepartmentNotFoundError(f"Department {department_id} not found")
        return department

    async def _get_by_id(self, program_id: UUID | str) -> Program:
        result = await self.db.execute(
            select(Program).where(
                Program.id == str(program_id),
                Program.college_id == self.college_id,
            )
        )
        program = result.scalar_one_or_none()
        if not program:
            raise ProgramNotFoundError(f"Program {program_id} not found")
        return program

    async def _get_by_code(self, code: str) -> Program | None:
        result = await self.db.execute(
            select(Program).where(
                Program.college_id == self.college_id,
                Program.code == code,
            )
        )
        return result.scalar_one_or_none()

    def _to_response(self, program: Program) -> ProgramResponse:
        return ProgramResponse(
            id=UUID(program.id),
            name=program.name,
            code=program.code,
            alias=program.alias,
            department_id=UUID(program.department_id),
            status=program.status,
        )
