# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Alumni registration and verification.

Graduates register themselves through a public endpoint. The account is
created with the ALUMNUS role and stays unable to sign in until a college
admin verifies it, which sets ``User.is_verified_alumnus``.
"""

import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from collegehub.domains.auth.password import (
    PasswordHasher,
    PasswordPolicyError,
    validate_password_strength,
)
from collegehub.infrastructure.database.models import Alumnus, Department, Program, User
from collegehub.infrastructure.database.models.base import new_uuid
from collegehub.models.alumni import (
    AlumnusRegisterRequest,
    AlumnusRegisterResponse,
    AlumnusResponse,
)
from collegehub.models.common import UserRole

logger = logging.getLogger(__name__)


class AlumniServiceError(Exception):
    """Base exception for alumni service errors."""

    pass


class AlumnusNotFoundError(AlumniServiceError):
    """Raised when the alumnus is not in the college."""

    pass


class AlumnusExistsError(AlumniServiceError):
    """Raised when the email is already registered."""

    pass


class AlumnusValidationError(AlumniServiceError):
    """Raised when the department or program does not exist."""

    pass


async def register_alumnus(
    db: AsyncSession,
    password_hasher: PasswordHasher,
    request: AlumnusRegisterRequest,
) -> AlumnusRegisterResponse:
    """Create an unverified ALUMNUS account with its profile.

    Raises:
        AlumnusExistsError: If the email is already registered.
        AlumnusValidationError: If the department or program is unknown.
        PasswordPolicyError: If the password is too weak.
    """
    email = request.email.lower()
    result = await db.execute(select(User.id).where(User.email == email))
    if result.scalar_one_or_none():
        raise AlumnusExistsError("User already exists")

    result = await db.execute(
        select(Department).where(Department.id == str(request.department_id))
    )
    department = result.scalar_one_or_none()
    if not department:
        raise AlumnusValidationError("Department not found")

    if request.program_id:
        result = await db.execute(
            select(Program.id).where(
                Program.id == str(request.program_id),
                Program.department_id == department.id,
            )
        )
        if not result.scalar_one_or_none():
            raise AlumnusValidationError("Program not found in this department")

    errors = validate_password_strength(request.password)
    if errors:
        raise PasswordPolicyError(errors)

    user = User(
        id=new_uuid(),
        email=email,
        password_hash=password_hasher.hash(request.password),
        name=request.name,
        phone=request.phone,
        role=UserRole.ALUMNUS.value,
        college_id=department.college_id,
        department_id=department.id,
        is_active=True,
        is_verified_alumnus=False,
    )
    alumnus = Alumnus(
        user_id=user.id,
        college_id=department.college_id,
        department_id=department.id,
        program_id=str(request.program_id) if request.program_id else None,
        graduation_year=request.graduation_year,
        date_of_birth=request.date_of_birth,
        address=request.address,
        gpa=request.gpa,
        job_status=request.job_status,
        current_employer=request.current_employer,
        current_position=request.current_position,
        industry=request.industry,
        linkedin_profile=request.linkedin_profile,
        achievements=request.achievements,
    )
    db.add_all([user, alumnus])
    await db.commit()

    logger.info("Alumnus registered: %s (college %s)", user.id, department.college_id)
    return AlumnusRegisterResponse(user_id=UUID(user.id))


class AlumniService:
    """College admin view over the alumni of one college.

    Attributes:
        db: Async database session.
        college_id: College the caller belongs to.
    """

    def __init__(self, db: AsyncSession, college_id: str) -> None:
        self.db = db
        self.college_id = college_id

    async def list_alumni(
        self,
        verified: bool | None = None,
        department_id: UUID | None = None,
    ) -> tuple[list[AlumnusResponse], int]:
        """List alumni, most recent graduates first.

        Returns:
            Tuple of (alumni, total count).
        """
        query = self._base_query()
        if verified is not None:
            query = query.where(User.is_verified_alumnus == verified)
        if department_id is not None:
            query = query.where(Alumnus.department_id == str(department_id))

        result = await self.db.execute(
            query.order_by(Alumnus.graduation_year.desc(), User.name)
        )
        items = [self._to_response(*row) for row in result.all()]
        return items, len(items)

    async def get_alumnus(self, alumnus_id: UUID | str) -> AlumnusResponse:
        return self._to_response(*await self._get_row(alumnus_id))

    async def set_verified(self, alumnus_id: UUID | str, verified: bool = True) -> AlumnusResponse:
        """Grant or revoke sign-in for an alumnus.

        Raises:
            AlumnusNotFoundError: If the alumnus is not in the college.
        """
        alumnus, user, department_name = await self._get_row(alumnus_id)
        user.is_verified_alumnus = verified
        await self.db.commit()

        logger.info("Alumnus %s verified=%s", alumnus.id, verified)
        return self._to_response(alumnus, user, department_name)

    async def delete_alumnus(self, alumnus_id: UUID | str) -> None:
        """Delete the profile and its login account.

        Raises:
            AlumnusNotFoundError: If the alumnus is not in the college.
        """
        alumnus, user, _ = await self._get_row(alumnus_id)
        await self.db.delete(alumnus)
        await self.db.delete(user)
        await self.db.commit()

        logger.info("Deleted alumnus: %s", alumnus_id)

    def _base_query(self):
        return (
            select(Alumnus, User, Department.name)
            .join(User, User.id == Alumnus.user_id)
            .join(Department, Department.id == Alumnus.department_id)
            .where(Alumnus.college_id == self.college_id)
        )

    async def _get_row(self, alumnus_id: UUID | str):
        result = await self.db.execute(
            self._base_query().where(Alumnus.id == str(alumnus_id))
        )
        row = result.first()
        if not row:
            raise AlumnusNotFoundError(f"Alumnus {alumnus_id} not found")
        return row

    def _to_response(
        self, alumnus: Alumnus, user: User, department_name: str | None
    ) -> AlumnusResponse:
        return AlumnusResponse(
            id=UUID(alumnus.id),
            user_id=UUID(user.id),
            name=user.name,
            email=user.email,
            department_id=UUID(alumnus.department_id),
            department_name=department_name,
            program_id=UUID(alumnus.program_id) if alumnus.program_id else None,
            graduation_year=alumnus.graduation_year,
            current_employer=alumnus.current_employer,
            current_position=alumnus.current_position,
            verified=user.is_verified_alumnus,
            created_at=alumnus.created_at,
        )
