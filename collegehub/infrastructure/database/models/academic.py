# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Academic structure models.

Every table carries ``college_id``; uniqueness rules are per college.
"""

from datetime import date
from typing import Optional

from sqlalchemy import (
    CheckConstraint,
    Date,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from collegehub.infrastructure.database.models.base import (
    Base,
    TimestampMixin,
    UUIDPrimaryKeyMixin,
    uuid_fk,
)


class AcademicYear(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "academic_years"
    __table_args__ = (
        UniqueConstraint("college_id", "name", name="uq_academic_years_college_name"),
        CheckConstraint("end_date > start_date", name="valid_dates"),
    )

    college_id: Mapped[str] = uuid_fk("colleges.id")
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[bool] = mapped_column(nullable=False, default=True)


class AdmissionYear(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "admission_years"
    __table_args__ = (
        UniqueConstraint("college_id", "year", name="uq_admission_years_college_year"),
        CheckConstraint("year BETWEEN 1900 AND 2100", name="valid_year"),
    )

    college_id: Mapped[str] = uuid_fk("colleges.id")
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[bool] = mapped_column(nullable=False, default=True)


class Semester(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "semesters"
    __table_args__ = (
        UniqueConstraint("college_id", "name", name="uq_semesters_college_name"),
        UniqueConstraint("college_id", "alias", name="uq_semesters_college_alias"),
        UniqueConstraint("college_id", "numerical", name="uq_semesters_college_numerical"),
        CheckConstraint("numerical >= 1", name="positive_numerical"),
    )

    college_id: Mapped[str] = uuid_fk("colleges.id")
    name: Mapped[str] = mapped_column(String(50), nullable=False)
    alias: Mapped[str] = mapped_column(String(20), nullable=False)
    numerical: Mapped[int] = mapped_column(Integer, nullable=False)


class Program(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "programs"
    __table_args__ = (
        UniqueConstraint("college_id", "code", name="uq_programs_college_code"),
    )

    college_id: Mapped[str] = uuid_fk("colleges.id")
    department_id: Mapped[str] = uuid_fk("departments.id")
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    code: Mapped[str] = mapped_column(String(20), nullable=False)
    alias: Mapped[str] = mapped_column(String(50), nullable=False)
    status: Mapped[bool] = mapped_column(nullable=False, default=True)


class BatchType(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "batch_types"
    __table_args__ = (
        UniqueConstraint("college_id", "name", name="uq_batch_types_college_name"),
    )

    college_id: Mapped[str] = uuid_fk("colleges.id")
    name: Mapped[str] = mapped_column(String(100), nullable=False)


class Batch(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "batches"
    __table_args__ = (
        UniqueConstraint(
            "program_id",
            "semester_id",
            "academic_year_id",
            "batch_type_id",
            name="uq_batches_composition",
        ),
    )

    college_id: Mapped[str] = uuid_fk("colleges.id")
    program_id: Mapped[str] = uuid_fk("programs.id")
    semester_id: Mapped[str] = uuid_fk("semesters.id")
    academic_year_id: Mapped[str] = uuid_fk("academic_years.id", ondelete="RESTRICT")
    batch_type_id: Mapped[str] = uuid_fk("batch_types.id")
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    status: Mapped[bool] = mapped_column(nullable=False, default=True)


class SubjectType(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "subject_types"
    __table_args__ = (
        UniqueConstraint("college_id", "name", name="uq_subject_types_college_name"),
    )

    college_id: Mapped[str] = uuid_fk("colleges.id")
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    alias: Mapped[str] = mapped_column(String(10), nullable=False)


class Subject(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "subjects"
    __table_args__ = (
        UniqueConstraint("college_id", "code", name="uq_subjects_college_code"),
        CheckConstraint("credit_score BETWEEN 0 AND 10", name="valid_credit"),
    )

    college_id: Mapped[str] = uuid_fk("colleges.id")
    program_id: Mapped[str] = uuid_fk("programs.id")
    semester_id: Mapped[str] = uuid_fk("semesters.id")
    name: Mapped[str] = mapped_column(String(150), nullable=False)
    code: Mapped[str] = mapped_column(String(30), nullable=False)
    credit_score: Mapped[float] = mapped_column(Numeric(4, 1, asdecimal=False), nullable=False, default=0)


class BatchSubject(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "batch_subjects"
    __table_args__ = (
        UniqueConstraint("batch_id", "subject_id", name="uq_batch_subjects_batch_subject"),
        CheckConstraint(
            "class_type IN ('THEORY', 'PRACTICAL', 'BOTH')",
            name="valid_class_type",
        ),
    )

    college_id: Mapped[str] = uuid_fk("colleges.id")
    batch_id: Mapped[str] = uuid_fk("batches.id")
    subject_id: Mapped[str] = uuid_fk("subjects.id")
    subject_type_id: Mapped[str] = uuid_fk("subject_types.id")
    teacher_id: Mapped[Optional[str]] = uuid_fk("users.id", nullable=True, ondelete="SET NULL")
    class_type: Mapped[str] = mapped_column(String(20), nullable=False)
    credit_score: Mapped[float] = mapped_column(Numeric(4, 1, asdecimal=False), nullable=False, default=0)


class Student(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "students"
    __table_args__ = (
        CheckConstraint("gender IN ('MALE', 'FEMALE', 'OTHER')", name="valid_gender"),
    )

    college_id: Mapped[str] = uuid_fk("colleges.id")
    user_id: Mapped[str] = uuid_fk("users.id")
    program_id: Mapped[str] = uuid_fk("programs.id")
    department_id: Mapped[str] = uuid_fk("departments.id")
    admission_year_id: Mapped[str] = uuid_fk("admission_years.id")
    enrollment_no: Mapped[str] = mapped_column(String(30), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(String(20))
    dob: Mapped[Optional[date]] = mapped_column(Date)
    gender: Mapped[str] = mapped_column(String(10), nullable=False)
    address: Mapped[Optional[str]] = mapped_column(String(500))
    guardian_name: Mapped[Optional[str]] = mapped_column(String(200))


class StudentBatch(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "student_batches"
    __table_args__ = (
        UniqueConstraint("student_id", "batch_id", name="uq_student_batches_student_batch"),
        CheckConstraint(
            "batch_status IN ('PROMOTED', 'DETAINED', 'ONGOING', 'COMPLETED')",
            name="valid_batch_status",
        ),
    )

    student_id: Mapped[str] = uuid_fk("students.id")
    batch_id: Mapped[str] = uuid_fk("batches.id")
    batch_status: Mapped[str] = mapped_column(String(20), nullable=False, default="ONGOING")
