# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Initial collegehub schema.

Revision ID: 001_initial
Revises: None
Create Date: 2025-01-15
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

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
PAYMENT_STATUSES = ("PENDING", "COMPLETED", "FAILED")
OPTION_KINDS = (
    "image_effect",
    "edge_design",
    "hanging_mechanism_variety",
    "frame_colour",
    "frame_thickness",
    "product_type",
    "frame_type",
    "floating_frame_colour",
)
APPLICABILITY = ("all", "specific", "canvas", "fabric", "photo")
MODIFIERS = ("hanging_mechanism", "acrylic_cover")

# Creation order; downgrade drops in reverse.
TABLES = (
    "colleges",
    "departments",
    "users",
    "teacher_designations",
    "employee_categories",
    "academic_years",
    "admission_years",
    "semesters",
    "programs",
    "alumni",
    "batch_types",
    "batches",
    "subject_types",
    "subjects",
    "batch_subjects",
    "students",
    "student_batches",
    "exam_types",
    "exam_marks",
    "grade_cards",
    "subject_grade_details",
    "certificate_types",
    "certificates",
    "batch_base_exam_fees",
    "payments",
    "student_batch_exam_fees",
    "monthly_batch_subject_classes",
    "monthly_batch_subject_attendance",
    "feedback",
    "products",
    "product_variations",
    "attribute_options",
    "variation_attribute_prices",
    "modifier_base_prices",
    "variation_modifier_prices",
    "shipping_types",
    "saved_designs",
    "saved_design_attributes",
    "saved_design_images",
    "shopping_cart_items",
    "addresses",
    "orders",
    "order_addresses",
    "order_items",
    "order_item_attributes",
    "order_item_images",
)


def _id() -> sa.Column:
    return sa.Column(
        "id",
        postgresql.UUID(as_uuid=False),
        server_default=sa.text("gen_random_uuid()"),
        primary_key=True,
    )


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
    ]


def _fk(
    name: str,
    target: str,
    nullable: bool = False,
    ondelete: str = "CASCADE",
    unique: bool = False,
) -> sa.Column:
    return sa.Column(
        name,
        postgresql.UUID(as_uuid=False),
        sa.ForeignKey(target, ondelete=ondelete),
        nullable=nullable,
        unique=unique,
    )


def _money(name: str, precision: int = 10, default: str | None = None) -> sa.Column:
    return sa.Column(
        name,
        sa.Numeric(precision, 2),
        nullable=False,
        server_default=default,
    )


def _flag(name: str, default: bool = True) -> sa.Column:
    return sa.Column(
        name, sa.Boolean, nullable=False, server_default="true" if default else "false"
    )


def _check_in(table: str, column: str, values: tuple[str, ...], name: str) -> sa.CheckConstraint:
    quoted = ", ".join(f"'{v}'" for v in values)
    return sa.CheckConstraint(f"{column} IN ({quoted})", name=f"ck_{table}_{name}")


def _index(table: str, *columns: str) -> None:
    for column in columns:
        op.create_index(f"ix_{table}_{column}", table, [column])


def upgrade() -> None:
    """Create all tables."""
    op.execute('CREATE EXTENSION IF NOT EXISTS "pgcrypto"')

    # =========================================================================
    # INSTITUTION
    # =========================================================================

    op.create_table(
        "colleges",
        _id(),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("code", sa.String(20), nullable=False, unique=True),
        sa.Column("address", sa.String(500), nullable=True),
        sa.Column("email", sa.String(255), nullable=True),
        sa.Column("phone", sa.String(20), nullable=True),
        sa.Column("established_year", sa.Integer, nullable=True),
        _flag("is_active"),
        *_timestamps(),
    )

    op.create_table(
        "departments",
        _id(),
        _fk("college_id", "colleges.id"),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("code", sa.String(20), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("college_id", "code", name="uq_departments_college_code"),
    )
    _index("departments", "college_id")

    op.create_table(
        "users",
        _id(),
        sa.Column("email", sa.String(255), nullable=False, unique=True),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("phone", sa.String(20), nullable=True),
        sa.Column("role", sa.String(30), nullable=False),
        _fk("college_id", "colleges.id", nullable=True),
        _fk("department_id", "departments.id", nullable=True, ondelete="SET NULL"),
        _flag("is_active"),
        _flag("is_verified_alumnus", default=False),
        sa.Column("failed_login_attempts", sa.Integer, nullable=False, server_default="0"),
        sa.Column("lockout_count", sa.Integer, nullable=False, server_default="0"),
        sa.Column("locked_until", sa.DateTime(timezone=True), nullable=True),
        sa.Column("last_login_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        _check_in("users", "role", USER_ROLES, "valid_role"),
    )
    _index("users", "college_id", "department_id")

    for table in ("teacher_designations", "employee_categories"):
        op.create_table(
            table,
            _id(),
            _fk("college_id", "colleges.id"),
            sa.Column("name", sa.String(100), nullable=False),
            sa.Column("alias", sa.String(50), nullable=False),
            sa.Column("description", sa.Text, nullable=True),
            *_timestamps(),
            sa.UniqueConstraint("college_id", "name", name=f"uq_{table}_college_name"),
            sa.UniqueConstraint("college_id", "alias", name=f"uq_{table}_college_alias"),
        )
        _index(table, "college_id")

    # =========================================================================
    # ACADEMIC STRUCTURE
    # =========================================================================

    op.create_table(
        "academic_years",
        _id(),
        _fk("college_id", "colleges.id"),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("start_date", sa.Date, nullable=False),
        sa.Column("end_date", sa.Date, nullable=False),
        _flag("status"),
        *_timestamps(),
        sa.UniqueConstraint("college_id", "name", name="uq_academic_years_college_name"),
        sa.CheckConstraint("end_date > start_date", name="ck_academic_years_valid_dates"),
    )
    _index("academic_years", "college_id")

    op.create_table(
        "admission_years",
        _id(),
        _fk("college_id", "colleges.id"),
        sa.Column("year", sa.Integer, nullable=False),
        _flag("status"),
        *_timestamps(),
        sa.UniqueConstraint("college_id", "year", name="uq_admission_years_college_year"),
        sa.CheckConstraint(
            "year BETWEEN 1900 AND 2100", name="ck_admission_years_valid_year"
        ),
    )
    _index("admission_years", "college_id")

    op.create_table(
        "semesters",
        _id(),
        _fk("college_id", "colleges.id"),
        sa.Column("name", sa.String(50), nullable=False),
        sa.Column("alias", sa.String(20), nullable=False),
        sa.Column("numerical", sa.Integer, nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("college_id", "name", name="uq_semesters_college_name"),
        sa.UniqueConstraint("college_id", "alias", name="uq_semesters_college_alias"),
        sa.UniqueConstraint("college_id", "numerical", name="uq_semesters_college_numerical"),
        sa.CheckConstraint("numerical >= 1", name="ck_semesters_positive_numerical"),
    )
    _index("semesters", "college_id")

    op.create_table(
        "programs",
        _id(),
        _fk("college_id", "colleges.id"),
        _fk("department_id", "departments.id"),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("code", sa.String(20), nullable=False),
        sa.Column("alias", sa.String(50), nullable=False),
        _flag("status"),
        *_timestamps(),
        sa.UniqueConstraint("college_id", "code", name="uq_programs_college_code"),
    )
    _index("programs", "college_id", "department_id")

    op.create_table(
        "alumni",
        _id(),
        _fk("user_id", "users.id", unique=True),
        _fk("college_id", "colleges.id"),
        _fk("department_id", "departments.id"),
        _fk("program_id", "programs.id", nullable=True, ondelete="SET NULL"),
        sa.Column("graduation_year", sa.Integer, nullable=False),
        sa.Column("date_of_birth", sa.Date, nullable=True),
        sa.Column("address", sa.String(255), nullable=True),
        sa.Column("gpa", sa.Numeric(4, 2), nullable=True),
        sa.Column("job_status", sa.String(100), nullable=True),
        sa.Column("current_employer", sa.String(200), nullable=True),
        sa.Column("current_position", sa.String(200), nullable=True),
        sa.Column("industry", sa.String(100), nullable=True),
        sa.Column("linkedin_profile", sa.String(255), nullable=True),
        sa.Column("achievements", sa.Text, nullable=True),
        *_timestamps(),
    )
    _index("alumni", "college_id", "department_id", "program_id")

    op.create_table(
        "batch_types",
        _id(),
        _fk("college_id", "colleges.id"),
        sa.Column("name", sa.String(100), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("college_id", "name", name="uq_batch_types_college_name"),
    )
    _index("batch_types", "college_id")

    op.create_table(
        "batches",
        _id(),
        _fk("college_id", "colleges.id"),
        _fk("program_id", "programs.id"),
        _fk("semester_id", "semesters.id"),
        _fk("academic_year_id", "academic_years.id", ondelete="RESTRICT"),
        _fk("batch_type_id", "batch_types.id"),
        sa.Column("name", sa.String(200), nullable=False),
        _flag("status"),
        *_timestamps(),
        sa.UniqueConstraint(
            "program_id",
            "semester_id",
            "academic_year_id",
            "batch_type_id",
            name="uq_batches_composition",
        ),
    )
    _index(
        "batches",
        "college_id",
        "program_id",
        "semester_id",
        "academic_year_id",
        "batch_type_id",
    )

    op.create_table(
        "subject_types",
        _id(),
        _fk("college_id", "colleges.id"),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("alias", sa.String(10), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("college_id", "name", name="uq_subject_types_college_name"),
    )
    _index("subject_types", "college_id")

    op.create_table(
        "subjects",
        _id(),
        _fk("college_id", "colleges.id"),
        _fk("program_id", "programs.id"),
        _fk("semester_id", "semesters.id"),
        sa.Column("name", sa.String(150), nullable=False),
        sa.Column("code", sa.String(30), nullable=False),
        sa.Column("credit_score", sa.Numeric(4, 1), nullable=False, server_default="0"),
        *_timestamps(),
        sa.UniqueConstraint("college_id", "code", name="uq_subjects_college_code"),
        sa.CheckConstraint("credit_score BETWEEN 0 AND 10", name="ck_subjects_valid_credit"),
    )
    _index("subjects", "college_id", "program_id", "semester_id")

    op.create_table(
        "batch_subjects",
        _id(),
        _fk("college_id", "colleges.id"),
        _fk("batch_id", "batches.id"),
        _fk("subject_id", "subjects.id"),
        _fk("subject_type_id", "subject_types.id"),
        _fk("teacher_id", "users.id", nullable=True, ondelete="SET NULL"),
        sa.Column("class_type", sa.String(20), nullable=False),
        sa.Column("credit_score", sa.Numeric(4, 1), nullable=False, server_default="0"),
        *_timestamps(),
        sa.UniqueConstraint("batch_id", "subject_id", name="uq_batch_subjects_batch_subject"),
        _check_in(
            "batch_subjects",
            "class_type",
            ("THEORY", "PRACTICAL", "BOTH"),
            "valid_class_type",
        ),
    )
    _index(
        "batch_subjects",
        "college_id",
        "batch_id",
        "subject_id",
        "subject_type_id",
        "teacher_id",
    )

    op.create_table(
        "students",
        _id(),
        _fk("college_id", "colleges.id"),
        _fk("user_id", "users.id"),
        _fk("program_id", "programs.id"),
        _fk("department_id", "departments.id"),
        _fk("admission_year_id", "admission_years.id"),
        sa.Column("enrollment_no", sa.String(30), nullable=False, unique=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("phone", sa.String(20), nullable=True),
        sa.Column("dob", sa.Date, nullable=True),
        sa.Column("gender", sa.String(10), nullable=False),
        sa.Column("address", sa.String(500), nullable=True),
        sa.Column("guardian_name", sa.String(200), nullable=True),
        *_timestamps(),
        _check_in("students", "gender", ("MALE", "FEMALE", "OTHER"), "valid_gender"),
    )
    _index(
        "students",
        "college_id",
        "user_id",
        "program_id",
        "department_id",
        "admission_year_id",
    )

    op.create_table(
        "student_batches",
        _id(),
        _fk("student_id", "students.id"),
        _fk("batch_id", "batches.id"),
        sa.Column("batch_status", sa.String(20), nullable=False, server_default="ONGOING"),
        *_timestamps(),
        sa.UniqueConstraint("student_id", "batch_id", name="uq_student_batches_student_batch"),
        _check_in(
            "student_batches",
            "batch_status",
            ("PROMOTED", "DETAINED", "ONGOING", "COMPLETED"),
            "valid_batch_status",
        ),
    )
    _index("student_batches", "student_id", "batch_id")

    # =========================================================================
    # EXAMINATIONS
    # =========================================================================

    op.create_table(
        "exam_types",
        _id(),
        _fk("college_id", "colleges.id"),
        sa.Column("exam_name", sa.String(100), nullable=False),
        sa.Column("total_marks", sa.Integer, nullable=False),
        sa.Column("passing_marks", sa.Integer, nullable=True),
        _flag("status"),
        *_timestamps(),
        sa.UniqueConstraint("college_id", "exam_name", name="uq_exam_types_college_name"),
        sa.CheckConstraint("total_marks > 0", name="ck_exam_types_positive_total"),
    )
    _index("exam_types", "college_id")

    op.create_table(
        "exam_marks",
        _id(),
        _fk("exam_type_id", "exam_types.id"),
        _fk("student_id", "students.id"),
        _fk("batch_subject_id", "batch_subjects.id"),
        sa.Column("achieved_marks", sa.Numeric(6, 2), nullable=False, server_default="0"),
        _flag("was_absent", default=False),
        _flag("debarred", default=False),
        _flag("malpractice", default=False),
        *_timestamps(),
        sa.UniqueConstraint(
            "exam_type_id",
            "student_id",
            "batch_subject_id",
            name="uq_exam_marks_exam_student_subject",
        ),
        sa.CheckConstraint("achieved_marks >= 0", name="ck_exam_marks_non_negative_marks"),
    )
    _index("exam_marks", "exam_type_id", "student_id", "batch_subject_id")

    op.create_table(
        "grade_cards",
        _id(),
        _fk("student_id", "students.id"),
        _fk("semester_id", "semesters.id"),
        _fk("batch_id", "batches.id"),
        sa.Column("card_no", sa.String(30), nullable=False, unique=True),
        sa.Column("total_graded_credit", sa.Numeric(6, 1), nullable=True),
        sa.Column("total_quality_point", sa.Numeric(8, 2), nullable=True),
        sa.Column("gpa", sa.Numeric(4, 2), nullable=True),
        sa.Column("cgpa", sa.Numeric(4, 2), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint(
            "student_id", "semester_id", "batch_id", name="uq_grade_cards_student_term"
        ),
    )
    _index("grade_cards", "student_id", "semester_id", "batch_id")

    op.create_table(
        "subject_grade_details",
        _id(),
        _fk("grade_card_id", "grade_cards.id"),
        _fk("batch_subject_id", "batch_subjects.id"),
        sa.Column("credit", sa.Numeric(4, 1), nullable=False, server_default="0"),
        sa.Column("internal_marks", sa.Numeric(6, 2), nullable=True),
        sa.Column("external_marks", sa.Numeric(6, 2), nullable=True),
        sa.Column("total_marks", sa.Numeric(6, 2), nullable=True),
        sa.Column("grade", sa.String(2), nullable=True),
        sa.Column("grade_point", sa.Integer, nullable=True),
        sa.Column("quality_point", sa.Numeric(6, 2), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint(
            "grade_card_id",
            "batch_subject_id",
            name="uq_subject_grade_details_card_subject",
        ),
    )
    _index("subject_grade_details", "grade_card_id", "batch_subject_id")

    op.create_table(
        "certificate_types",
        _id(),
        _fk("college_id", "colleges.id"),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("description", sa.String(500), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("college_id", "name", name="uq_certificate_types_college_name"),
    )
    _index("certificate_types", "college_id")

    op.create_table(
        "certificates",
        _id(),
        _fk("college_id", "colleges.id"),
        _fk("certificate_type_id", "certificate_types.id"),
        _fk("student_id", "students.id"),
        sa.Column("issue_date", sa.Date, nullable=True),
        sa.Column("payment_status", sa.String(20), nullable=False, server_default="PENDING"),
        *_timestamps(),
        sa.UniqueConstraint(
            "certificate_type_id", "student_id", name="uq_certificates_type_student"
        ),
        _check_in("certificates", "payment_status", PAYMENT_STATUSES, "valid_payment_status"),
    )
    _index("certificates", "college_id", "certificate_type_id", "student_id")

    # =========================================================================
    # FINANCE, ATTENDANCE AND FEEDBACK
    # =========================================================================

    op.create_table(
        "batch_base_exam_fees",
        _id(),
        _fk("college_id", "colleges.id"),
        _fk("batch_id", "batches.id", unique=True),
        _money("base_fee"),
        *_timestamps(),
        sa.CheckConstraint("base_fee > 0", name="ck_batch_base_exam_fees_positive_fee"),
    )
    _index("batch_base_exam_fees", "college_id")

    op.create_table(
        "payments",
        _id(),
        _fk("college_id", "colleges.id"),
        _fk("student_id", "students.id"),
        _money("amount"),
        sa.Column("status", sa.String(20), nullable=False, server_default="PENDING"),
        sa.Column("gateway_order_id", sa.String(100), nullable=True, unique=True),
        sa.Column("gateway_payment_id", sa.String(100), nullable=True),
        sa.Column("paid_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        _check_in("payments", "status", PAYMENT_STATUSES, "valid_status"),
    )
    _index("payments", "college_id", "student_id")

    op.create_table(
        "student_batch_exam_fees",
        _id(),
        _fk("student_batch_id", "student_batches.id"),
        _fk("payment_id", "payments.id", nullable=True, ondelete="SET NULL"),
        sa.Column("reason", sa.String(200), nullable=False),
        _money("exam_fee"),
        sa.Column("due_date", sa.Date, nullable=False),
        sa.Column("payment_status", sa.String(20), nullable=False, server_default="PENDING"),
        *_timestamps(),
        sa.UniqueConstraint(
            "student_batch_id", "reason", name="uq_student_batch_exam_fees_reason"
        ),
        sa.CheckConstraint("exam_fee > 0", name="ck_student_batch_exam_fees_positive_fee"),
        _check_in(
            "student_batch_exam_fees", "payment_status", PAYMENT_STATUSES, "valid_status"
        ),
    )
    _index("student_batch_exam_fees", "student_batch_id", "payment_id")

    op.create_table(
        "monthly_batch_subject_classes",
        _id(),
        _fk("batch_subject_id", "batch_subjects.id"),
        sa.Column("month", sa.String(10), nullable=False),
        sa.Column("total_theory_classes", sa.Integer, nullable=False, server_default="0"),
        sa.Column("completed_theory_classes", sa.Integer, nullable=False, server_default="0"),
        sa.Column("total_practical_classes", sa.Integer, nullable=False, server_default="0"),
        sa.Column(
            "completed_practical_classes", sa.Integer, nullable=False, server_default="0"
        ),
        *_timestamps(),
        sa.UniqueConstraint(
            "batch_subject_id", "month", name="uq_monthly_classes_subject_month"
        ),
        _check_in("monthly_batch_subject_classes", "month", MONTHS, "valid_month"),
        sa.CheckConstraint(
            "completed_theory_classes <= total_theory_classes "
            "AND completed_practical_classes <= total_practical_classes",
            name="ck_monthly_batch_subject_classes_completed_within_total",
        ),
    )
    _index("monthly_batch_subject_classes", "batch_subject_id")

    op.create_table(
        "monthly_batch_subject_attendance",
        _id(),
        _fk("monthly_classes_id", "monthly_batch_subject_classes.id"),
        _fk("student_id", "students.id"),
        sa.Column("attended_theory_classes", sa.Integer, nullable=False, server_default="0"),
        sa.Column(
            "attended_practical_classes", sa.Integer, nullable=False, server_default="0"
        ),
        *_timestamps(),
        sa.UniqueConstraint(
            "monthly_classes_id", "student_id", name="uq_monthly_attendance_student"
        ),
    )
    _index("monthly_batch_subject_attendance", "monthly_classes_id", "student_id")

    op.create_table(
        "feedback",
        _id(),
        _fk("batch_subject_id", "batch_subjects.id"),
        _fk("student_id", "students.id"),
        sa.Column("rating", sa.Integer, nullable=False),
        sa.Column("comment", sa.Text, nullable=True),
        *_timestamps(),
        sa.UniqueConstraint(
            "batch_subject_id", "student_id", name="uq_feedback_student_subject"
        ),
        sa.CheckConstraint("rating BETWEEN 1 AND 5", name="ck_feedback_valid_rating"),
    )
    _index("feedback", "batch_subject_id", "student_id")

    # =========================================================================
    # CANVAS SHOP CATALOG
    # =========================================================================

    op.create_table(
        "products",
        _id(),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("slug", sa.String(200), nullable=False, unique=True),
        sa.Column("category", sa.String(20), nullable=False),
        sa.Column("type", sa.String(20), nullable=False, server_default="single"),
        sa.Column("description", sa.String(2000), nullable=True),
        sa.Column("image", sa.String(500), nullable=True),
        _flag("status"),
        *_timestamps(),
        _check_in("products", "category", ("canvas", "fabric", "photo"), "valid_category"),
        _check_in("products", "type", ("single", "layout", "split"), "valid_type"),
    )

    op.create_table(
        "product_variations",
        _id(),
        _fk("product_id", "products.id"),
        sa.Column("label", sa.String(100), nullable=False),
        sa.Column("horizontal_length", sa.Float, nullable=False),
        sa.Column("vertical_length", sa.Float, nullable=False),
        _money("price"),
        sa.Column("image_count", sa.Integer, nullable=False, server_default="1"),
        sa.Column("layout_key", sa.String(30), nullable=True),
        _flag("status"),
        *_timestamps(),
        sa.CheckConstraint("price >= 0", name="ck_product_variations_non_negative_price"),
    )
    _index("product_variations", "product_id")

    op.create_table(
        "attribute_options",
        _id(),
        sa.Column("kind", sa.String(40), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("thumbnail", sa.String(500), nullable=True),
        sa.Column("applicability", sa.String(20), nullable=False, server_default="all"),
        _fk("product_id", "products.id", nullable=True),
        _money("price", default="0"),
        _flag("status"),
        *_timestamps(),
        _check_in("attribute_options", "kind", OPTION_KINDS, "valid_kind"),
        _check_in("attribute_options", "applicability", APPLICABILITY, "valid_applicability"),
    )
    _index("attribute_options", "kind", "product_id")

    op.create_table(
        "variation_attribute_prices",
        _id(),
        _fk("variation_id", "product_variations.id"),
        _fk("option_id", "attribute_options.id"),
        _money("price"),
        _flag("status"),
        *_timestamps(),
        sa.UniqueConstraint(
            "variation_id", "option_id", name="uq_variation_attribute_prices_pair"
        ),
    )
    _index("variation_attribute_prices", "variation_id", "option_id")

    op.create_table(
        "modifier_base_prices",
        _id(),
        sa.Column("modifier", sa.String(30), nullable=False),
        sa.Column("applicability", sa.String(20), nullable=False, server_default="all"),
        _fk("product_id", "products.id", nullable=True),
        _money("price"),
        _flag("status"),
        *_timestamps(),
        _check_in("modifier_base_prices", "modifier", MODIFIERS, "valid_modifier"),
        _check_in(
            "modifier_base_prices", "applicability", APPLICABILITY, "valid_applicability"
        ),
    )
    _index("modifier_base_prices", "modifier", "product_id")

    op.create_table(
        "variation_modifier_prices",
        _id(),
        _fk("variation_id", "product_variations.id"),
        sa.Column("modifier", sa.String(30), nullable=False),
        _money("price"),
        _flag("status"),
        *_timestamps(),
        sa.UniqueConstraint(
            "variation_id", "modifier", name="uq_variation_modifier_prices_pair"
        ),
        _check_in("variation_modifier_prices", "modifier", MODIFIERS, "valid_modifier"),
    )
    _index("variation_modifier_prices", "variation_id")

    op.create_table(
        "shipping_types",
        _id(),
        sa.Column("name", sa.String(100), nullable=False),
        _money("price", default="0"),
        _flag("status"),
        *_timestamps(),
    )

    # =========================================================================
    # CANVAS SHOP CUSTOMER SIDE
    # =========================================================================

    op.create_table(
        "saved_designs",
        _id(),
        _fk("customer_id", "users.id"),
        _fk("variation_id", "product_variations.id"),
        sa.Column("thumbnail", sa.String(500), nullable=True),
        sa.Column("status", sa.String(20), nullable=False, server_default="Draft"),
        *_timestamps(),
        _check_in("saved_designs", "status", ("Draft", "Finalized", "Carted"), "valid_status"),
    )
    _index("saved_designs", "customer_id", "variation_id")

    op.create_table(
        "saved_design_attributes",
        _id(),
        _fk("saved_design_id", "saved_designs.id"),
        sa.Column("name", sa.String(50), nullable=False),
        sa.Column("value", sa.String(100), nullable=False),
        sa.UniqueConstraint(
            "saved_design_id", "name", name="uq_saved_design_attributes_name"
        ),
    )
    _index("saved_design_attributes", "saved_design_id")

    op.create_table(
        "saved_design_images",
        _id(),
        _fk("saved_design_id", "saved_designs.id"),
        sa.Column("image_url", sa.String(1000), nullable=False),
        sa.Column("position", sa.Integer, nullable=False, server_default="0"),
        sa.Column("offset_x", sa.Float, nullable=False, server_default="0"),
        sa.Column("offset_y", sa.Float, nullable=False, server_default="0"),
        sa.Column("zoom", sa.Float, nullable=False, server_default="100"),
    )
    _index("saved_design_images", "saved_design_id")

    op.create_table(
        "shopping_cart_items",
        _id(),
        _fk("customer_id", "users.id"),
        _fk("saved_design_id", "saved_designs.id"),
        sa.Column("quantity", sa.Integer, nullable=False, server_default="1"),
        *_timestamps(),
        sa.UniqueConstraint("customer_id", "saved_design_id", name="uq_cart_customer_design"),
        sa.CheckConstraint("quantity >= 1", name="ck_shopping_cart_items_positive_quantity"),
    )
    _index("shopping_cart_items", "customer_id", "saved_design_id")

    op.create_table(
        "addresses",
        _id(),
        _fk("customer_id", "users.id"),
        sa.Column("title", sa.String(100), nullable=True),
        sa.Column("recipient_name", sa.String(200), nullable=False),
        sa.Column("phone_number", sa.String(20), nullable=False),
        sa.Column("alternate_phone", sa.String(20), nullable=True),
        sa.Column("address_line_1", sa.String(255), nullable=False),
        sa.Column("address_line_2", sa.String(255), nullable=True),
        sa.Column("city", sa.String(100), nullable=False),
        sa.Column("state", sa.String(100), nullable=False),
        sa.Column("postal_code", sa.String(20), nullable=False),
        sa.Column("country", sa.String(100), nullable=False),
        _flag("is_default", default=False),
        *_timestamps(),
    )
    _index("addresses", "customer_id")

    op.create_table(
        "orders",
        _id(),
        _fk("customer_id", "users.id"),
        _fk("shipping_type_id", "shipping_types.id", ondelete="RESTRICT"),
        sa.Column("order_status", sa.String(20), nullable=False, server_default="pending"),
        sa.Column("payment_status", sa.String(20), nullable=False, server_default="pending"),
        _flag("is_same_billing_shipping"),
        _money("shipping_price", default="0"),
        _money("total_amount", precision=12),
        *_timestamps(),
        _check_in(
            "orders",
            "order_status",
            ("pending", "processing", "shipped", "delivered", "cancelled"),
            "valid_order_status",
        ),
        _check_in(
            "orders",
            "payment_status",
            ("pending", "paid", "failed", "refunded"),
            "valid_payment_status",
        ),
    )
    _index("orders", "customer_id", "shipping_type_id")

    op.create_table(
        "order_addresses",
        _id(),
        _fk("order_id", "orders.id"),
        sa.Column("kind", sa.String(10), nullable=False),
        sa.Column("recipient_name", sa.String(200), nullable=False),
        sa.Column("phone_number", sa.String(20), nullable=False),
        sa.Column("alternate_phone", sa.String(20), nullable=True),
        sa.Column("address_line_1", sa.String(255), nullable=False),
        sa.Column("address_line_2", sa.String(255), nullable=True),
        sa.Column("city", sa.String(100), nullable=False),
        sa.Column("state", sa.String(100), nullable=False),
        sa.Column("postal_code", sa.String(20), nullable=False),
        sa.Column("country", sa.String(100), nullable=False),
        _check_in("order_addresses", "kind", ("shipping", "billing"), "valid_kind"),
    )
    _index("order_addresses", "order_id")

    op.create_table(
        "order_items",
        _id(),
        _fk("order_id", "orders.id"),
        _fk("variation_id", "product_variations.id", ondelete="RESTRICT"),
        _fk("saved_design_id", "saved_designs.id", nullable=True, ondelete="SET NULL"),
        sa.Column("quantity", sa.Integer, nullable=False),
        _money("unit_price"),
        _money("total_price", precision=12),
        sa.Column("thumbnail", sa.String(500), nullable=True),
    )
    _index("order_items", "order_id", "variation_id", "saved_design_id")

    op.create_table(
        "order_item_attributes",
        _id(),
        _fk("order_item_id", "order_items.id"),
        sa.Column("name", sa.String(50), nullable=False),
        sa.Column("value", sa.String(100), nullable=False),
        _money("price", default="0"),
    )
    _index("order_item_attributes", "order_item_id")

    op.create_table(
        "order_item_images",
        _id(),
        _fk("order_item_id", "order_items.id"),
        sa.Column("image_url", sa.String(1000), nullable=False),
        sa.Column("position", sa.Integer, nullable=False, server_default="0"),
        sa.Column("offset_x", sa.Float, nullable=False, server_default="0"),
        sa.Column("offset_y", sa.Float, nullable=False, server_default="0"),
        sa.Column("zoom", sa.Float, nullable=False, server_default="100"),
    )
    _index("order_item_images", "order_item_id")


def downgrade() -> None:
    """Drop all tables."""
    for table in reversed(TABLES):
        op.drop_table(table)
