# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""API v1 routes package.

This package contains all v1 API endpoint definitions.
Each module provides a FastAPI router for a specific domain.

Modules:
    auth: Login, captcha, OTP, lockout and password reset endpoints.
    colleges: College and department management endpoints.
    staff: Teacher designation and employee category endpoints.
    alumni: Alumni self-registration and admin verification.
    academic_years / admission_years / semesters: Calendar endpoints.
    programs: Program management endpoints.
    batches: Batches, batch subjects and student enrollment endpoints.
    subjects: Subject and subject type endpoints.
    students: Student registration, import and profile endpoints.
    exams: Exam types, marks, imports and reports.
    grade_cards: Internal/external marks, grade generation and PDFs.
    certificates: Certificate types, issuance and PDFs.
    finance: Exam fees, automated fee insertion and payments.
    attendance: Monthly classes, attendance and reports.
    feedback: Student feedback on batch subjects.
    shop: Canvas shop catalog, designs, cart, orders and preview geometry.
"""

from fastapi import APIRouter

from collegehub.api.v1 import (
    academic_years,
    admission_years,
    alumni,
    attendance,
    auth,
    batches,
    certificates,
    colleges,
    exams,
    feedback,
    finance,
    grade_cards,
    programs,
    semesters,
    staff,
    students,
    subjects,
)
from collegehub.api.v1.shop import router as shop_router

# Create the main v1 router
router = APIRouter(prefix="/api/v1")

# Include domain routers
router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
router.include_router(colleges.router, prefix="/colleges", tags=["Colleges"])
router.include_router(staff.router, prefix="/staff", tags=["Staff"])
router.include_router(alumni.router, prefix="/alumni", tags=["Alumni"])
router.include_router(academic_years.router, prefix="/academic-years", tags=["Academic Years"])
router.include_router(admission_years.router, prefix="/admission-years", tags=["Admission Years"])
router.include_router(semesters.router, prefix="/semesters", tags=["Semesters"])
router.include_router(programs.router, prefix="/programs", tags=["Programs"])
router.include_router(batches.router, prefix="/batches", tags=["Batches"])
router.include_router(subjects.router, prefix="/subjects", tags=["Subjects"])
router.include_router(students.router, prefix="/students", tags=["Students"])
router.include_router(exams.router, prefix="/exams", tags=["Exams"])
router.include_router(grade_cards.router, prefix="/grade-cards", tags=["Grade Cards"])
router.include_router(certificates.router, prefix="/certificates", tags=["Certificates"])
router.include_router(finance.router, prefix="/finance", tags=["Finance"])
router.include_router(attendance.router, prefix="/attendance", tags=["Attendance"])
router.include_router(feedback.router, prefix="/feedback", tags=["Feedback"])

# Customer shop (catalog and canvas routes are public)
router.include_router(shop_router, prefix="/shop", tags=["Shop"])

__all__ = ["router"]
