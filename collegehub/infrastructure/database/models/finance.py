# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Fee, payment, attendance and feedback models."""

from datetime import date, datetime
from typing import Optional

from sqlalchemy import (
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

PAYMENT_STATUSES = "'PENDING', 'COMPLETED', 'FAILED'"
MONTHS = (
    "JANUARY",
    "FEBRUARY",
    "MARCH",
    "APRIL",
    "MAY",
    "JUNE",
    "JULY",
    "AUGUST",
    "SEPTEMBER",
    "OCTOBER",
    "NOVEMBER",
    "DECEMBER",
)


class BatchBaseExamFee(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "batch_base_exam_fees"
    __table_args__ = (CheckConstraint("base_fee > 0", name="positive_fee"),)

    college_id: Mapped[str] = uuid_fk("colleges.id")
    batch_id: Mapped[str] = uuid_fk("batches.id", unique=True)
    base_fee: Mapped[float] = mapped_column(Numeric(10, 2, asdecimal=False), nullable=False)


class Payment(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "payments"
    __table_args__ = (
        CheckConstraint(f"status IN ({PAYMENT_STATUSES})", name="valid_status"),
    )

    college_id: Mapped[str] = uuid_fk("colleges.id")
    student_id: Mapped[str] = uuid_fk("students.id")
    amount: Mapped[float] = mapped_column(Numeric(10, 2, asdecimal=False), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="PENDING")
    gateway_order_id: Mapped[Optional[str]] = mapped_column(String(100), unique=True)
    gateway_payment_id: Mapped[Optional[str]] = mapped_column(String(100))
    paid_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))


class StudentBatchExamFee(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "student_batch_exam_fees"
    __table_args__ = (
        UniqueConstraint(
            "student_batch_id", "reason", name="uq_student_batch_exam_fees_reason"
        ),
        CheckConstraint("exam_fee > 0", name="positive_fee"),
        CheckConstraint(f"payment_status IN ({PAYMENT_STATUSES})", name="valid_status"),
    )

    student_batch_id: Mapped[str] = uuid_fk("student_batches.id")
    payment_id: Mapped[Optional[str]] = uuid_fk(
        "payments.id", nullable=True, ondelete="SET NULL"
    )
    reason: Mapped[str] = mapped_column(String(200), nullable=False)
    exam_fee: Mapped[float] = mapped_column(Numeric(10, 2, asdecimal=False), nullable=False)
    due_date: Mapped[date] = mapped_column(Date, nullable=False)
    payment_status: Mapped[str] = mapped_column(String(20), nullable=False, default="PENDING")


class MonthlyBatchSubjectClasses(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "monthly_batch_subject_classes"
    __table_args__ = (
        UniqueConstraint(
            "batch_subject_id", "month", name="uq_monthly_classes_subject_month"
        ),
        CheckConstraint(
            "month IN (" + ", ".join(f"'{m}'" for m in MONTHS) + ")",
            name="valid_month",
        ),
        CheckConstraint(
            "completed_theory_classes <= total_theory_classes "
            "AND completed_practical_classes <= total_practical_classes",
            name="completed_within_total",
        ),
    )

    batch_subject_id: Mapped[str] = uuid_fk("batch_subjects.id")
    month: Mapped[str] = mapped_column(String(10), nullable=False)
    total_theory_classes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    completed_theory_classes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_practical_classes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    completed_practical_classes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class MonthlyBatchSubjectAttendance(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "monthly_batch_subject_attendance"
    __table_args__ = (
        UniqueConstraint(
            "monthly_classes_id", "student_id", name="uq_monthly_attendance_student"
        ),
    )

    monthly_classes_id: Mapped[str] = uuid_fk("monthly_batch_subject_classes.id")
    student_id: Mapped[str] = uuid_fk("students.id")
    attended_theory_classes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    attended_practical_classes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)


class Feedback(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "feedback"
    __table_args__ = (
        UniqueConstraint("batch_subject_id", "student_id", name="uq_feedback_student_subject"),
        CheckConstraint("rating BETWEEN 1 AND 5", name="valid_rating"),
    )

    batch_subject_id: Mapped[str] = uuid_fk("batch_subjects.id")
    student_id: Mapped[str] = uuid_fk("students.id")
    rating: Mapped[int] = mapped_column(Integer, nullable=False)
    comment: Mapped[Optional[str]] = mapped_column(Text)
