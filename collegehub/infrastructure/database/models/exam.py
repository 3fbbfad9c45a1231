# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Examination models: exam types, marks, grade cards and certificates."""

from datetime import date
from typing import Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from collegehub.infrastructure.database.models.base import (
    Base,
    TimestampMixin,
    UUIDPrimaryKeyMixin,
    uuid_fk,
)


class ExamType(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "exam_types"
    __table_args__ = (
        UniqueConstraint("college_id", "exam_name", name="uq_exam_types_college_name"),
        CheckConstraint("total_marks > 0", name="positive_total"),
    )

    college_id: Mapped[str] = uuid_fk("colleges.id")
    exam_name: Mapped[str] = mapped_column(String(100), nullable=False)
    total_marks: Mapped[int] = mapped_column(Integer, nullable=False)
    passing_marks: Mapped[Optional[int]] = mapped_column(Integer)
    status: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class ExamMark(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "exam_marks"
    __table_args__ = (
        UniqueConstraint(
            "exam_type_id",
            "student_id",
            "batch_subject_id",
            name="uq_exam_marks_exam_student_subject",
        ),
        CheckConstraint("achieved_marks >= 0", name="non_negative_marks"),
    )

    exam_type_id: Mapped[str] = uuid_fk("exam_types.id")
    student_id: Mapped[str] = uuid_fk("students.id")
    batch_subject_id: Mapped[str] = uuid_fk("batch_subjects.id")
    achieved_marks: Mapped[float] = mapped_column(Numeric(6, 2, asdecimal=False), nullable=False, default=0)
    was_absent: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    debarred: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    malpractice: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)


class GradeCard(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "grade_cards"
    __table_args__ = (
        UniqueConstraint(
            "student_id", "semester_id", "batch_id", name="uq_grade_cards_student_term"
        ),
    )

    student_id: Mapped[str] = uuid_fk("students.id")
    semester_id: Mapped[str] = uuid_fk("semesters.id")
    batch_id: Mapped[str] = uuid_fk("batches.id")
    card_no: Mapped[str] = mapped_column(String(30), nullable=False, unique=True)
    total_graded_credit: Mapped[Optional[float]] = mapped_column(Numeric(6, 1, asdecimal=False))
    total_quality_point: Mapped[Optional[float]] = mapped_column(Numeric(8, 2, asdecimal=False))
    gpa:Mapped[Optional[float]] = mapped_column(Numeric(4, 2, asdecimal=False))
    cgpa: Mapped[Optional[float]] = mapped_column(Numeric(4, 2, asdecimal=False))

    details: Mapped[list["SubjectGradeDetail"]] = relationship(
        back_populates="grade_card",
        cascade="all, delete-orphan",
        lazy="selectin",
    )


class SubjectGradeDetail(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "subject_grade_details"
    __table_args__ = (
        UniqueConstraint(
            "grade_card_id", "batch_subject_id", name="uq_subject_grade_details_card_subject"
        ),
    )

    grade_card_id: Mapped[str] = uuid_fk("grade_cards.id")
    batch_subject_id: Mapped[str] = uuid_fk("batch_subjects.id")
    credit: Mapped[float] = mapped_column(Numeric(4, 1, asdecimal=False), nullable=False, default=0)
    internal_marks: Mapped[Optional[float]] = mapped_column(Numeric(6, 2, asdecimal=False))
    external_marks: Mapped[Optional[float]] = mapped_column(Numeric(6, 2, asdecimal=False))
    total_marks: Mapped[Optional[float]] = mapped_column(Numeric(6, 2, asdecimal=False))
    grade: Mapped[Optional[str]] = mapped_column(String(2))
    grade_point: Mapped[Optional[int]] = mapped_column(Integer)
    quality_point: Mapped[Optional[float]] = mapped_column(Numeric(6, 2, asdecimal=False))

    grade_card: Mapped[GradeCard] = relationship(back_populates="details")


class CertificateType(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "certificate_types"
    __table_args__ = (
        UniqueConstraint("college_id", "name", name="uq_certificate_types_college_name"),
    )

    college_id: Mapped[str] = uuid_fk("colleges.id")
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(String(500))


class Certificate(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "certificates"
    __table_args__ = (
        UniqueConstraint(
            "certificate_type_id", "student_id", name="uq_certificates_type_student"
        ),
        CheckConstraint(
            "payment_status IN ('PENDING', 'COMPLETED', 'FAILED')",
            name="valid_payment_status",
        ),
    )

    college_id: Mapped[str] = uuid_fk("colleges.id")
    certificate_type_id: Mapped[str] = uuid_fk("certificate_types.id")
    student_id: Mapped[str] = uuid_fk("students.id")
    issue_date: Mapped[Optional[date]] = mapped_column(Date)
    payment_status: Mapped[str] = mapped_column(String(20), nullable=False, default="PENDING")
