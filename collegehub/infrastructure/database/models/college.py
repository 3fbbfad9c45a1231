# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Institution and account models: colleges, departments, users, staff
classifications and alumni profiles."""

from datetime import date, datetime
from typing import Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from collegehub.infrastructure.database.models.base import (
    Base,
    TimestampMixin,
    UUIDPrimaryKeyMixin,
    uuid_fk,
)

USER_ROLES = (
    "SBTE_ADMIN",
    "COLLEGE_SUPER_ADMIN",
    "HOD",
    "TEACHER",
    "STUDENT",
    "FINANCE_MANAGER",
    "ADM",
    "EDUCATION_DEPARTMENT",
    "ALUMNUS",
    "CUSTOMER",
)


class College(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "colleges"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    code: Mapped[str] = mapped_column(String(20), nullable=False, unique=True)
    address: Mapped[Optional[str]] = mapped_column(String(500))
    email: Mapped[Optional[str]] = mapped_column(String(255))
    phone: Mapped[Optional[str]] = mapped_column(String(20))
    established_year: Mapped[Optional[int]] = mapped_column(Integer)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class Department(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "departments"
    __table_args__ = (
        UniqueConstraint("college_id", "code", name="uq_departments_college_code"),
    )

    college_id: Mapped[str] = uuid_fk("colleges.id")
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    code: Mapped[str] = mapped_column(String(20), nullable=False)


class User(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """Login account for staff, students and shop customers."""

    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint(
            "role IN (" + ", ".join(f"'{r}'" for r in USER_ROLES) + ")",
            name="valid_role",
        ),
    )

    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(String(20))
    role: Mapped[str] = mapped_column(String(30), nullable=False)
    college_id: Mapped[Optional[str]] = uuid_fk("colleges.id", nullable=True)
    department_id: Mapped[Optional[str]] = uuid_fk(
        "departments.id", nullable=True, ondelete="SET NULL"
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    is_verified_alumnus: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    failed_login_attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    lockout_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    locked_until: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    last_login_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))


class TeacherDesignation(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "teacher_designations"
    __table_args__ = (
        UniqueConstraint("college_id", "name", name="uq_teacher_designations_college_name"),
        UniqueConstraint("college_id", "alias", name="uq_teacher_designations_college_alias"),
    )

    college_id: Mapped[str] = uuid_fk("colleges.id")
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    alias: Mapped[str] = mapped_column(String(50), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)


class EmployeeCategory(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "employee_categories"
    __table_args__ = (
        UniqueConstraint("college_id", "name", name="uq_employee_categories_college_name"),
        UniqueConstraint("college_id", "alias", name="uq_employee_categories_college_alias"),
    )

    college_id: Mapped[str] = uuid_fk("colleges.id")
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    alias: Mapped[str] = mapped_column(String(50), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)


class Alumnus(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """Self-registered graduate; verification lives on ``User.is_verified_alumnus``."""

    __tablename__ = "alumni"

    user_id: Mapped[str] = uuid_fk("users.id", unique=True)
    college_id: Mapped[str] = uuid_fk("colleges.id")
    department_id: Mapped[str] = uuid_fk("departments.id")
    program_id: Mapped[Optional[str]] = uuid_fk(
        "programs.id", nullable=True, ondelete="SET NULL"
    )
    graduation_year: Mapped[int] = mapped_column(Integer, nullable=False)
    date_of_birth: Mapped[Optional[date]] = mapped_column(Date)
    address: Mapped[Optional[str]] = mapped_column(String(255))
    gpa: Mapped[Optional[float]] = mapped_column(Numeric(4, 2, asdecimal=False))
    job_status: Mapped[Optional[str]] = mapped_column(String(100))
    current_employer: Mapped[Optional[str]] = mapped_column(String(200))
    current_position: Mapped[Optional[str]] = mapped_column(String(200))
    industry: Mapped[Optional[str]] = mapped_column(String(100))
    linkedin_profile: Mapped[Optional[str]] = mapped_column(String(255))
    achievements: Mapped[Optional[str]] = mapped_column(Text)
