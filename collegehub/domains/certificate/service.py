# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Certificate service.

This module provides the CertificateService class for:
- Certificate type management
- Assigning certificates to one or many students
- Tracking issue date and payment status
- Student access to their own certificates

A certificate is created without an issue date and with a PENDING
payment; it can be downloaded once the payment is COMPLETED.
"""

import logging
from typing import TYPE_CHECKING, Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from collegehub.infrastructure.database.models import (
    Certificate,
    CertificateType,
    College,
    Student,
)
from collegehub.models.certificate import (
    CertificateBulkIssueRequest,
    CertificateBulkIssueResponse,
    CertificateIssueRequest,
    CertificateResponse,
    CertificateTypeCreateRequest,
    CertificateTypeResponse,
    CertificateTypeUpdateRequest,
    CertificateUpdateRequest,
)
from collegehub.models.common import PaymentStatus
from collegehub.utils.datetime import utc_now

if TYPE_CHECKING:
    from collegehub.infrastructure.notifications.email import EmailSender

logger = logging.getLogger(__name__)


class CertificateServiceError(Exception):
    """Base exception for certificate service errors."""

    pass


class CertificateNotFoundError(CertificateServiceError):
    """Raised when a certificate, type or student is not found."""

    pass


class CertificateExistsError(CertificateServiceError):
    """Raised when a type name or an assignment already exists."""

    pass


class CertificateNotReadyError(CertificateServiceError):
    """Raised when a certificate is downloaded before payment completes."""

    pass


class CertificateService:
    """Service for certificates of one college."""

    def __init__(
        self,
        db: AsyncSession,
        college_id: str,
        email_sender: Optional["EmailSender"] = None,
    ) -> None:
        self.db = db
        self.college_id = college_id
        self._email_sender = email_sender

    # =========================================================================
    # Certificate types
    # =========================================================================

    async def create_certificate_type(
        self, request: CertificateTypeCreateRequest
    ) -> CertificateTypeResponse:
        await self._check_type_name(request.name)

        certificate_type = CertificateType(
            college_id=self.college_id,
            name=request.name,
            description=request.description,
        )
        self.db.add(certificate_type)
        await self.db.commit()
        await self.db.refresh(certificate_type)

        logger.info("Created certificate type: %s (%s)", certificate_type.name, certificate_type.id)
        return self._type_response(certificate_type)

    async def list_certificate_types(self) -> tuple[list[CertificateTypeResponse], int]:
        result = await self.db.execute(
            select(CertificateType)
            .where(CertificateType.college_id == self.college_id)
            .order_by(CertificateType.name)
        )
        items = [self._type_response(t) for t in result.scalars().all()]
        return items, len(items)

    async def update_certificate_type(
        self,
        certificate_type_id: UUID | str,
        request: CertificateTypeUpdateRequest,
    ) -> CertificateTypeResponse:
        certificate_type = await self._get_type(certificate_type_id)

        if request.name is not None and request.name != certificate_type.name:
            await self._check_type_name(request.name)
            certificate_type.name = request.name
        if "description" in request.model_fields_set:
            certificate_type.description = request.description

        await self.db.commit()
        await self.db.refresh(certificate_type)

        logger.info("Updated certificate type: %s", certificate_type.id)
        return self._type_response(certificate_type)

    async def delete_certificate_type(self, certificate_type_id: UUID | str) -> None:
        certificate_type = await self._get_type(certificate_type_id)
        await self.db.delete(certificate_type)
        await self.db.commit()
        logger.info("Deleted certificate type: %s", certificate_type_id)

    # =========================================================================
    # Issuance
    # =========================================================================

    async def issue_certificate(self, request: CertificateIssueRequest) -> CertificateResponse:
        """Assign a certificate to one student.

        Raises:
            CertificateNotFoundError: If the student or type is missing.
            CertificateExistsError: If the student already has this certificate.
        """
        student = await self._get_student(request.student_id)
        certificate_type = await self._get_type(request.certificate_type_id)

        existing = await self.db.execute(
            select(Certificate.id).where(
                Certificate.certificate_type_id == certificate_type.id,
                Certificate.student_id == student.id,
            )
        )
        if existing.scalar_one_or_none():
            raise CertificateExistsError("Certificate already assigned to this student")

        certificate = Certificate(
            college_id=self.college_id,
            certificate_type_id=certificate_type.id,
            student_id=student.id,
            issue_date=None,
            payment_status=PaymentStatus.PENDING.value,
        )
        self.db.add(certificate)
        await self.db.commit()
        await self.db.refresh(certificate)

        logger.info(
            "Assigned certificate %s to student %s", certificate_type.name, student.enrollment_no
        )
        await self._notify(student, certificate_type)
        return self._to_response(certificate, certificate_type, student)

    async def issue_certificates(
        self, request: CertificateBulkIssueRequest
    ) -> CertificateBulkIssueResponse:
        """Assign a certificate to many students.

        Students that already hold the certificate are skipped and
        reported back.

        Raises:
            CertificateNotFoundError: If the type or any student is missing.
        """
        certificate_type = await self._get_type(request.certificate_type_id)
        requested = list(dict.fromkeys(str(sid) for sid in request.student_ids))

        result = await self.db.execute(
            select(Student).where(
                Student.id.in_(requested),
                Student.college_id == self.college_id,
            )
        )
        students = {s.id: s for s in result.scalars().all()}
        missing = [sid for sid in requested if sid not in students]
        if missing:
            raise CertificateNotFoundError(f"Students not found: {', '.join(missing)}")

        result = await self.db.execute(
            select(Certificate.student_id).where(
                Certificate.certificate_type_id == certificate_type.id,
                Certificate.student_id.in_(requested),
            )
        )
        already_assigned = set(result.scalars().all())
        new_ids = [sid for sid in requested if sid not in already_assigned]
        already_list = [UUID(sid) for sid in requested if sid in already_assigned]

        if not new_ids:
            return CertificateBulkIssueResponse(
                message="All selected students already have this certificate",
                count=0,
                already_assigned_student_ids=already_list,
            )

        for sid in new_ids:
            self.db.add(
                Certificate(
                    college_id=self.college_id,
                    certificate_type_id=certificate_type.id,
                    student_id=sid,
                    issue_date=None,
                    payment_status=PaymentStatus.PENDING.value,
                )
            )
        await self.db.commit()

        logger.info(
            "Assigned certificate %s to %d students (%d skipped)",
            certificate_type.name,
            len(new_ids),
            len(already_list),
        )
        for sid in new_ids:
            await self._notify(students[sid], certificate_type)

        return CertificateBulkIssueResponse(
            message=f"Certificate assigned to {len(new_ids)} students",
            count=len(new_ids),
            already_assigned_student_ids=already_list,
        )

    async def update_certificate(
        self,
        certificate_id: UUID | str,
        request: CertificateUpdateRequest,
    ) -> CertificateResponse:
        certificate = await self._get_certificate(certificate_id)

        if "issue_date" in request.model_fields_set:
            certificate.issue_date = request.issue_date
        if request.payment_status is not None:
            certificate.payment_status = request.payment_status.value
            if request.payment_status == PaymentStatus.COMPLETED and certificate.issue_date is None:
                certificate.issue_date = utc_now().date()

        await self.db.commit()
        await self.db.refresh(certificate)

        logger.info(
            "Updated certificate %s: payment %s", certificate.id, certificate.payment_status
        )
        return await self._load_response(certificate)

    async def delete_certificate(self, certificate_id: UUID | str) -> None:
        certificate = await self._get_certificate(certificate_id)
        await self.db.delete(certificate)
        await self.db.commit()
        logger.info("Deleted certificate: %s", certificate_id)

    async def list_certificates(
        self,
        certificate_type_id: UUID | None = None,
        student_id: UUID | str | None = None,
        payment_status: PaymentStatus | None = None,
        page: int = 1,
        page_size: int = 50,
    ) -> tuple[list[CertificateResponse], int]:
        query = (
            select(Certificate, CertificateType, Student)
            .join(CertificateType, CertificateType.id == Certificate.certificate_type_id)
            .join(Student, Student.id == Certificate.student_id)
            .where(Certificate.college_id == self.college_id)
        )
        if certificate_type_id:
            query = query.where(Certificate.certificate_type_id == str(certificate_type_id))
        if student_id:
            query = query.where(Certificate.student_id == str(student_id))
        if payment_status:
            query = query.where(Certificate.payment_status == payment_status.value)

        count_query = select(func.count()).select_from(query.subquery())
        total_result = await self.db.execute(count_query)
        total = total_result.scalar() or 0

        query = (
            query.order_by(Certificate.created_at.desc())
            .offset((page - 1) * page_size)
            .limit(page_size)
        )
        result = await self.db.execute(query)
        items = [self._to_response(c, t, s) for c, t, s in result.all()]
        return items, total

    async def list_for_user(self, user_id: str) -> tuple[list[CertificateResponse], int]:
        """Certificates of the student behind a login account."""
        student_id = await self._student_id_for_user(user_id)
        return await self.list_certificates(student_id=student_id, page_size=500)

    async def get_certificate(
        self,
        certificate_id: UUID | str,
        student_user_id: str | None = None,
    ) -> CertificateResponse:
        certificate = await self._get_certificate(certificate_id)
        if student_user_id:
            student_id = await self._student_id_for_user(student_user_id)
            if certificate.student_id != student_id:
                raise CertificateNotFoundError(f"Certificate {certificate_id} not found")
        return await self._load_response(certificate)

    async def get_printable(
        self,
        certificate_id: UUID | str,
        student_user_id: str | None = None,
    ) -> tuple[CertificateResponse, Student, str]:
        """Get a certificate, its student and the college name for rendering.

        Raises:
            CertificateNotFoundError: If not found or not the caller's.
            CertificateNotReadyError: If the payment is not completed.
        """
        response = await self.get_certificate(certificate_id, student_user_id)
        if response.payment_status != PaymentStatus.COMPLETED:
            raise CertificateNotReadyError(
                "Certificate is available once the payment is completed"
            )
        student = await self._get_student(response.student_id)
        college = await self.db.get(College, self.college_id)
        return response, student, college.name if college else ""

    # =========================================================================
    # Helpers
    # =========================================================================

    async def _notify(self, student: Student, certificate_type: CertificateType) -> None:
        if self._email_sender is None:
            return
        await self._email_sender.send_certificate_issued(
            student.email, student.name, certificate_type.name
        )

    async def _check_type_name(self, name: str) -> None:
        result = await self.db.execute(
            select(func.count()).select_from(CertificateType).where(
                CertificateType.college_id == self.college_id,
                func.lower(CertificateType.name) == name.lower(),
            )
        )
        if (result.scalar() or 0) > 0:
            raise CertificateExistsError("Certificate type with this name already exists")

    async def _get_type(self, certificate_type_id: UUID | str) -> CertificateType:
        result = await self.db.execute(
            select(CertificateType).where(
                CertificateType.id == str(certificate_type_id),
                CertificateType.college_id == self.college_id,
            )
        )
        certificate_type = result.scalar_one_or_none()
        if not certificate_type:
            raise CertificateNotFoundError("Certificate type not found")
        return certificate_type

    async def _get_student(self, student_id: UUID | str) -> Student:
        result = await self.db.execute(
            select(Student).where(
                Student.id == str(student_id),
                Student.college_id == self.college_id,
            )
        )
        student = result.scalar_one_or_none()
        if not student:
            raise CertificateNotFoundError("Student not found")
        return student

    async def _student_id_for_user(self, user_id: str) -> str:
        result = await self.db.execute(
            select(Student.id).where(
                Student.user_id == user_id,
                Student.college_id == self.college_id,
            )
        )
        student_id = result.scalar_one_or_none()
        if student_id is None:
            raise CertificateNotFoundError("No student profile for this account")
        return student_id

    async def _get_certificate(self, certificate_id: UUID | str) -> Certificate:
        result = await self.db.execute(
            select(Certificate).where(
                Certificate.id == str(certificate_id),
                Certificate.college_id == self.college_id,
            )
        )
        certificate = result.scalar_one_or_none()
        if not certificate:
            raise CertificateNotFoundError(f"Certificate {certificate_id} not found")
        return certificate

    async def _load_response(self, certificate: Certificate) -> CertificateResponse:
        certificate_type = await self.db.get(CertificateType, certificate.certificate_type_id)
        student = await self.db.get(Student, certificate.student_id)
        return self._to_response(certificate, certificate_type, student)

    def _type_response(self, certificate_type: CertificateType) -> CertificateTypeResponse:
        return CertificateTypeResponse(
            id=UUID(certificate_type.id),
            name=certificate_type.name,
            description=certificate_type.description,
        )

    def _to_response(
        self,
        certificate: Certificate,
        certificate_type: CertificateType | None,
        student: Student | None,
    ) -> CertificateResponse:
        return CertificateResponse(
            id=UUID(certificate.id),
            certificate_type_id=UUID(certificate.certificate_type_id),
            certificate_type_name=certificate_type.name if certificate_type else None,
            student_id=UUID(certificate.student_id),
            student_name=student.name if student else None,
            enrollment_no=student.enrollment_no if student else None,
            issue_date=certificate.issue_date,
            payment_status=PaymentStatus(certificate.payment_status),
            created_at=certificate.created_at,
        )
