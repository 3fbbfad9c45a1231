# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""SQLAlchemy ORM models.

Importing this package registers every table on ``Base.metadata``.
"""

from collegehub.infrastructure.database.models.academic import (
    AcademicYear,
    AdmissionYear,
    Batch,
    BatchSubject,
    BatchType,
    Program,
    Semester,
    Student,
    StudentBatch,
    Subject,
    SubjectType,
)
from collegehub.infrastructure.database.models.base import (
    Base,
    TimestampMixin,
    UUIDPrimaryKeyMixin,
)
from collegehub.infrastructure.database.models.college import (
    Alumnus,
    College,
    Department,
    EmployeeCategory,
    TeacherDesignation,
    User,
)
from collegehub.infrastructure.database.models.exam import (
    Certificate,
    CertificateType,
    ExamMark,
    ExamType,
    GradeCard,
    SubjectGradeDetail,
)
from collegehub.infrastructure.database.models.finance import (
    BatchBaseExamFee,
    Feedback,
    MonthlyBatchSubjectAttendance,
    MonthlyBatchSubjectClasses,
    Payment,
    StudentBatchExamFee,
)
from collegehub.infrastructure.database.models.shop import (
    Address,
    AttributeOption,
    ModifierBasePrice,
    Order,
    OrderAddress,
    OrderItem,
    OrderItemAttribute,
    OrderItemImage,
    Product,
    ProductVariation,
    SavedDesign,
    SavedDesignAttribute,
    SavedDesignImage,
    ShippingType,
    ShoppingCartItem,
    VariationAttributePrice,
    VariationModifierPrice,
)

__all__ = [
    "Base",
    "TimestampMixin",
    "UUIDPrimaryKeyMixin",
    # Institution
    "College",
    "Department",
    "User",
    "TeacherDesignation",
    "EmployeeCategory",
    "Alumnus",
    # Academic
    "AcademicYear",
    "AdmissionYear",
    "Semester",
    "Program",
    "BatchType",
    "Batch",
    "SubjectType",
    "Subject",
    "BatchSubject",
    "Student",
    "StudentBatch",
    # Exams
    "ExamType",
    "ExamMark",
    "GradeCard",
    "SubjectGradeDetail",
    "CertificateType",
    "Certificate",
    # Finance, attendance, feedback
    "BatchBaseExamFee",
    "StudentBatchExamFee",
    "Payment",
    "MonthlyBatchSubjectClasses",
    "MonthlyBatchSubjectAttendance",
    "Feedback",
    # Shop
    "Product",
    "ProductVariation",
    "AttributeOption",
    "VariationAttributePrice",
    "ModifierBasePrice",
    "VariationModifierPrice",
    "ShippingType",
    "SavedDesign",
    "SavedDesignAttribute",
    "SavedDesignImage",
    "ShoppingCartItem",
    "Address",
    "Order",
    "OrderAddress",
    "OrderItem",
    "OrderItemAttribute",
    "OrderItemImage",
]
