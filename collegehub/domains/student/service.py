# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Student service.

This module provides the StudentService class for:
- Student registration with a STUDENT login account
- Listing, reading and updating students
- Bulk import from an Excel sheet

Import layout (header row skipped):
    A enrollment number, B name, C email, D phone, E date of birth, F gender

An import is all or nothing: every row is validated first and nothing is
written when any row fails.
"""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional
from uuid import UUID

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from collegehub.domains.auth.password import PasswordHasher, generate_initial_password
from collegehub.infrastructure.database.models import (
    AdmissionYear,
    Program,
    Student,
    User,
)
from collegehub.infrastructure.database.models.base import new_uuid
from collegehub.models.common import Gender, RowError, UserRole
from collegehub.models.student import (
    StudentCreateRequest,
    StudentResponse,
    StudentUpdateRequest,
)
from collegehub.utils.excel import ExcelRow, read_rows

if TYPE_CHECKING:
    from collegehub.infrastructure.notifications.email import EmailSender

logger = logging.getLogger(__name__)


class StudentServiceError(Exception):
    """Base exception for student service errors."""

    pass


class StudentNotFoundError(StudentServiceError):
    """Raised when a student, program or admission year is not found."""

    pass


class StudentExistsError(StudentServiceError):
    """Raised when the enrollment number or email is already registered."""

    pass


class StudentImportError(StudentServiceError):
    """Raised when an import has invalid rows.

    Attributes:
        errors: One entry per problem found.
    """

    def __init__(self, message: str, errors: list[RowError]) -> None:
        super().__init__(message)
        self.errors = errors


@dataclass
class _ImportedStudent:
    row: int
    enrollment_no: str
    name: str
    email: str
    phone: str | None
    dob: object
    gender: str


def _parse_gender(value: str | None) -> str | None:
    if not value:
        return None
    normalized = value.strip().upper()
    if normalized in ("M", "F"):
        normalized = "MALE" if normalized == "M" else "FEMALE"
    return normalized if normalized in Gender.__members__ else None


class StudentService:
    """Service for the students of one college.

    Attributes:
        db: Async database session.
        college_id: College the caller belongs to.
    """

    def __init__(
        self,
        db: AsyncSession,
        college_id: str,
        password_hasher: PasswordHasher | None = None,
        email_sender: Optional["EmailSender"] = None,
    ) -> None:
        self.db = db
        self.college_id = college_id
        self._password_hasher = password_hasher or PasswordHasher()
        self._email_sender = email_sender

    async def register_student(self, request: StudentCreateRequest) -> StudentResponse:
        """Register a student and create the login account.

        Raises:
            StudentNotFoundError: If program or admission year is not in the college.
            StudentExistsError: If the enrollment number or email is taken.
        """
        program = await self._get_program(request.program_id)
        await self._get_admission_year(request.admission_year_id)

        email = request.email.lower()
        if await self._enrollment_exists(request.enrollment_no):
            raise StudentExistsError("Student with this enrollment number already exists")
        if await self._email_exists(email):
            raise StudentExistsError("User with this email already exists")

        initial_password = generate_initial_password()
        user, student = self._build_student(
            enrollment_no=request.enrollment_no,
            name=request.name,
            email=email,
            phone=request.phone,
            dob=request.dob,
            gender=request.gender.value,
            program=program,
            admission_year_id=str(request.admission_year_id),
            initial_password=initial_password,
        )
        student.address = request.address
        student.guardian_name = request.guardian_name

        self.db.add(user)
        self.db.add(student)
        await self.db.commit()
        await self.db.refresh(student)

        logger.info("Registered student: %s (%s)", student.enrollment_no, student.id)

        if self._email_sender is not None:
            await self._email_sender.send_welcome(email, student.name, initial_password)

        return self._to_response(student)

    async def list_students(
        self,
        program_id: UUID | None = None,
        admission_year_id: UUID | None = None,
        search: str | None = None,
        page: int = 1,
        page_size: int = 20,
    ) -> tuple[list[StudentResponse], int]:
        """List students with optional filters.

        Args:
            program_id: Only students of this program.
            admission_year_id: Only students admitted in this year.
            search: Case-insensitive match on name, enrollment number or email.
        """
        query = select(Student).where(Student.college_id == self.college_id)
        if program_id:
            query = query.where(Student.program_id == str(program_id))
        if admission_year_id:
            query = query.where(Student.admission_year_id == str(admission_year_id))
        if search:
            pattern = f"%{search}%"
            query = query.where(
                or_(
                    Student.name.ilike(pattern),
                    Student.enrollment_no.ilike(pattern),
                    Student.email.ilike(pattern),
                )
            )

        count_query = select(func.count()).select_from(query.subquery())
        total_result = await self.db.execute(count_query)
        total = total_result.scalar() or 0

        query = (
            query.order_by(Student.enrollment_no)
            .offset((page - 1) * page_size)
            .limit(page_size)
        )
        result = await self.db.execute(query)
        return [self._to_response(s) for s in result.scalars().all()], total

    async def get_student(self, student_id: UUID | str) -> StudentResponse:
        return self._to_response(await self.get_student_model(student_id))

    async def get_student_for_user(self, user_id: str) -> StudentResponse:
        result = await self.db.execute(
            select(Student).where(
                Student.user_id == user_id,
                Student.college_id == self.college_id,
            )
        )
        student = result.scalar_one_or_none()
        if not student:
            raise StudentNotFoundError("No student profile for this account")
        return self._to_response(student)

    async def update_student(
        self,
        student_id: UUID | str,
        request: StudentUpdateRequest,
    ) -> StudentResponse:
        student = await self.get_student_model(student_id)

        if request.program_id is not None:
            program = await self._get_program(request.program_id)
            student.program_id = program.id
            student.department_id = program.department_id
        if request.admission_year_id is not None:
            await self._get_admission_year(request.admission_year_id)
            student.admission_year_id = str(request.admission_year_id)

        changes = request.model_dump(
            exclude_unset=True, exclude={"program_id", "admission_year_id"}
        )
        if changes.get("gender") is not None:
            changes["gender"] = changes["gender"].value
        for field, value in changes.items():
            setattr(student, field, value)

        await self.db.commit()
        await self.db.refresh(student)

        logger.info("Updated student: %s", student.id)
        return self._to_response(student)

    async def get_student_model(self, student_id: UUID | str) -> Student:
        result = await self.db.execute(
            select(Student).where(
                Student.id == str(student_id),
                Student.college_id == self.college_id,
            )
        )
        student = result.scalar_one_or_none()
        if not student:
            raise StudentNotFoundError(f"Student {student_id} not found")
        return student

    # =========================================================================
    # Import
    # =========================================================================

    async def import_students(
        self,
        content: bytes,
        program_id: UUID | str,
        admission_year_id: UUID | str,
    ) -> int:
        """Import students from an xlsx payload.

        Returns:
            Number of students created.

        Raises:
            ExcelFormatError: If the payload is not a workbook.
            StudentNotFoundError: If program or admission year is not in the college.
            StudentImportError: If any row is invalid; nothing is written.
        """
        program = await self._get_program(program_id)
        await self._get_admission_year(admission_year_id)

        rows = read_rows(content)
        if not rows:
            raise StudentImportError("The uploaded file has no data rows", [])

        parsed, errors = self._parse_rows(rows)

        enrollments = [p.enrollment_no for p in parsed]
        emails = [p.email for p in parsed]
        if enrollments:
            result = await self.db.execute(
                select(Student.enrollment_no).where(Student.enrollment_no.in_(enrollments))
            )
            for enrollment_no in result.scalars().all():
                errors.append(
                    RowError(
                        row=next(p.row for p in parsed if p.enrollment_no == enrollment_no),
                        enrollment_no=enrollment_no,
                        message="Enrollment number already exists",
                    )
                )
        if emails:
            result = await self.db.execute(select(User.email).where(User.email.in_(emails)))
            for email in result.scalars().all():
                match = next(p for p in parsed if p.email == email)
                errors.append(
                    RowError(
                        row=match.row,
                        enrollment_no=match.enrollment_no,
                        message=f"Email {email} is already registered",
                    )
                )

        if errors:
            errors.sort(key=lambda e: e.row or 0)
            logger.warning("Student import rejected: %d errors", len(errors))
            raise StudentImportError("Student import failed", errors)

        credentials: list[tuple[str, str, str]] = []
        for item in parsed:
            initial_password = generate_initial_password()
            user, student = self._build_student(
                enrollment_no=item.enrollment_no,
                name=item.name,
                email=item.email,
                phone=item.phone,
                dob=item.dob,
                gender=item.gender,
                program=program,
                admission_year_id=str(admission_year_id),
                initial_password=initial_password,
            )
            self.db.add(user)
            self.db.add(student)
            credentials.append((item.email, item.name, initial_password))

        await self.db.commit()
        logger.info("Imported %d students into program %s", len(parsed), program.id)

        if self._email_sender is not None:
            for email, name, initial_password in credentials:
                await self._email_sender.send_welcome(email, name, initial_password)

        return len(parsed)

    def _parse_rows(self, rows: list[ExcelRow]) -> tuple[list[_ImportedStudent], list[RowError]]:
        parsed: list[_ImportedStudent] = []
        errors: list[RowError] = []
        seen_enrollments: dict[str, int] = {}
        seen_emails: dict[str, int] = {}

        for row in rows:
            enrollment_no = row.text("A")
            name = row.text("B")
            email = (row.text("C") or "").lower() or None
            gender = _parse_gender(row.text("F"))

            missing = [
                label
                for label, value in (
                    ("enrollment number", enrollment_no),
                    ("name", name),
                    ("email", email),
                    ("gender", row.text("F")),
                )
                if not value
            ]
            if missing:
                errors.append(
                    RowError(
                        row=row.number,
                        enrollment_no=enrollment_no,
                        message=f"Missing {', '.join(missing)}",
                    )
                )
                continue
            if gender is None:
                errors.append(
                    RowError(
                        row=row.number,
                        enrollment_no=enrollment_no,
                        message=f"Invalid gender {row.text('F')}",
                    )
                )
                continue
            if row["E"] is not None and row.date_value("E") is None:
                errors.append(
                    RowError(
                        row=row.number,
                        enrollment_no=enrollment_no,
                        message="Invalid date of birth",
                    )
                )
                continue
            if enrollment_no in seen_enrollments:
                errors.append(
                    RowError(
                        row=row.number,
                        enrollment_no=enrollment_no,
                        message=f"Duplicate enrollment number (also in row {seen_enrollments[enrollment_no]})",
                    )
                )
                continue
            if email in seen_emails:
                errors.append(
                    RowError(
                        row=row.number,
                        enrollment_no=enrollment_no,
                        message=f"Duplicate email (also in row {seen_emails[email]})",
                    )
                )
                continue

            seen_enrollments[enrollment_no] = row.number
            seen_emails[email] = row.number
            parsed.append(
                _ImportedStudent(
                    row=row.number,
                    enrollment_no=enrollment_no,
                    name=name,
                    email=email,
                    phone=row.text("D"),
                    dob=row.date_value("E"),
                    gender=gender,
                )
            )

        return parsed, errors

    # =========================================================================
    # Helpers
    # =========================================================================

    def _build_student(
        self,
        enrollment_no: str,
        name: str,
        email: str,
        phone: str | None,
        dob,
        gender: str,
        program: Program,
        admission_year_id: str,
        initial_password: str,
    ) -> tuple[User, Student]:
        user = User(
            id=new_uuid(),
            email=email,
            password_hash=self._password_hasher.hash(initial_password),
            name=name,
            phone=phone,
            role=UserRole.STUDENT.value,
            college_id=self.college_id,
            department_id=program.department_id,
            is_active=True,
        )
        student = Student(
            college_id=self.college_id,
            user_id=user.id,
            program_id=program.id,
            department_id=program.department_id,
            admission_year_id=admission_year_id,
            enrollment_no=enrollment_no,
            name=name,
            email=email,
            phone=phone,
            dob=dob,
            gender=gender,
        )
        return user, student

    async def _get_program(self, program_id: UUID | str) -> Program:
        result = await self.db.execute(
            select(Program).where(
                Program.id == str(program_id),
                Program.college_id == self.college_id,
            )
        )
        program = result.scalar_one_or_none()
        if not program:
            raise StudentNotFoundError(f"Program {program_id} not found")
        return program

    async def _get_admission_year(self, admission_year_id: UUID | str) -> AdmissionYear:
        result = await self.db.execute(
            select(AdmissionYear).where(
                AdmissionYear.id == str(admission_year_id),
                AdmissionYear.college_id == self.college_id,
            )
        )
        admission_year = result.scalar_one_or_none()
        if not admission_year:
            raise StudentNotFoundError(f"Admission year {admission_year_id} not found")
        return admission_year

    async def _enrollment_exists(self, enrollment_no: str) -> bool:
        result = await self.db.execute(
            select(Student.id).where(Student.enrollment_no == enrollment_no)
        )
        return result.scalar_one_or_none() is not None

    async def _email_exists(self, email: str) -> bool:
        result = await self.db.execute(select(User.id).where(User.email == email))
        return result.scalar_one_or_none() is not None

    def _to_response(self, student: Student) -> StudentResponse:
        return StudentResponse(
            id=UUID(student.id),
            user_id=UUID(student.user_id),
            enrollment_no=student.enrollment_no,
            name=student.name,
            email=student.email,
            phone=student.phone,
            dob=student.dob,
            gender=Gender(student.gender),
            address=student.address,
            guardian_name=student.guardian_name,
            program_id=UUID(student.program_id),
            department_id=UUID(student.department_id),
            admission_year_id=UUID(student.admission_year_id),
        )
