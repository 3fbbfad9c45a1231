# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for Certificate service."""

from datetime import date, datetime, timezone
from unittest.mock import AsyncMock, MagicMock
from uuid import UUID, uuid4

import pytest

from collegehub.domains.certificate.pdf import render_certificate
from collegehub.domains.certificate.service import (
    CertificateExistsError,
    CertificateNotFoundError,
    CertificateNotReadyError,
    CertificateService,
)
from collegehub.infrastructure.database.models import Certificate
from collegehub.models.certificate import (
    CertificateBulkIssueRequest,
    CertificateIssueRequest,
    CertificateResponse,
    CertificateUpdateRequest,
)
from collegehub.models.common import PaymentStatus


@pytest.fixture
def email_sender() -> MagicMock:
    sender = MagicMock()
    sender.send_certificate_issued = AsyncMock()
    return sender


@pytest.fixture
def certificate_service(mock_db, college_id, email_sender) -> CertificateService:
    return CertificateService(mock_db, college_id, email_sender=email_sender)


def _student(enrollment_no: str = "E21CS04001") -> MagicMock:
    student = MagicMock()
    student.id = str(uuid4())
    student.name = "Asha Rao"
    student.email = "asha@college.edu"
    student.enrollment_no = enrollment_no
    return student


@pytest.fixture
def certificate_type() -> MagicMock:
    certificate_type = MagicMock()
    certificate_type.id = str(uuid4())
    certificate_type.name = "Bonafide Certificate"
    return certificate_type


def _certificate(college_id: str, certificate_type, student, status: str = "PENDING"):
    return Certificate(
        id=str(uuid4()),
        college_id=college_id,
        certificate_type_id=certificate_type.id,
        student_id=student.id,
        issue_date=None,
        payment_status=status,
        created_at=datetime.now(timezone.utc),
    )


async def _stamp(obj) -> None:
    obj.id = obj.id or str(uuid4())
    obj.created_at = datetime.now(timezone.utc)


class TestIssueCertificate:
    @pytest.mark.asyncio
    async def test_issue_creates_pending_certificate(
        self, certificate_service, mock_db, make_result, certificate_type, email_sender
    ) -> None:
        student = _student()
        mock_db.execute.side_effect = [
            make_result(one=student),
            make_result(one=certificate_type),
            make_result(one=None),
        ]
        mock_db.refresh.side_effect = _stamp

        result = await certificate_service.issue_certificate(
            CertificateIssueRequest(
                certificate_type_id=UUID(certificate_type.id), student_id=UUID(student.id)
            )
        )

        certificate = mock_db.add.call_args[0][0]
        assert certificate.issue_date is None
        assert certificate.payment_status == "PENDING"
        assert result.payment_status == PaymentStatus.PENDING
        assert result.certificate_type_name == "Bonafide Certificate"
        email_sender.send_certificate_issued.assert_awaited_once_with(
            "asha@college.edu", "Asha Rao", "Bonafide Certificate"
        )

    @pytest.mark.asyncio
    async def test_issue_twice_is_rejected(
        self, certificate_service, mock_db, make_result, certificate_type, email_sender
    ) -> None:
        student = _student()
        mock_db.execute.side_effect = [
            make_result(one=student),
            make_result(one=certificate_type),
            make_result(one=str(uuid4())),
        ]

        with pytest.raises(CertificateExistsError):
            await certificate_service.issue_certificate(
                CertificateIssueRequest(
                    certificate_type_id=UUID(certificate_type.id), student_id=UUID(student.id)
                )
            )
        mock_db.add.assert_not_called()
        email_sender.send_certificate_issued.assert_not_called()

    @pytest.mark.asyncio
    async def test_bulk_issue_skips_already_assigned(
        self, certificate_service, mock_db, make_result, certificate_type
    ) -> None:
        fresh, holder = _student("E21CS04001"), _student("E21CS04002")
        mock_db.execute.side_effect = [
            make_result(one=certificate_type),
            make_result(many=[fresh, holder]),
            make_result(many=[holder.id]),
        ]

        result = await certificate_service.issue_certificates(
            CertificateBulkIssueRequest(
                certificate_type_id=UUID(certificate_type.id),
                student_ids=[UUID(fresh.id), UUID(holder.id), UUID(fresh.id)],
            )
        )

        assert result.count == 1
        assert result.already_assigned_student_ids == [UUID(holder.id)]
        assert mock_db.add.call_count == 1
        assert mock_db.add.call_args[0][0].student_id == fresh.id

    @pytest.mark.asyncio
    async def test_bulk_issue_all_assigned(
        self, certificate_service, mock_db, make_result, certificate_type
    ) -> None:
        holder = _student()
        mock_db.execute.side_effect = [
            make_result(one=certificate_type),
            make_result(many=[holder]),
            make_result(many=[holder.id]),
        ]

        result = await certificate_service.issue_certificates(
            CertificateBulkIssueRequest(
                certificate_type_id=UUID(certificate_type.id), student_ids=[UUID(holder.id)]
            )
        )

        assert result.count == 0
        assert result.message == "All selected students already have this certificate"
        mock_db.commit.assert_not_called()

    @pytest.mark.asyncio
    async def test_bulk_issue_unknown_student(
        self, certificate_service, mock_db, make_result, certificate_type
    ) -> None:
        mock_db.execute.side_effect = [
            make_result(one=certificate_type),
            make_result(many=[]),
        ]

        with pytest.raises(CertificateNotFoundError):
            await certificate_service.issue_certificates(
                CertificateBulkIssueRequest(
                    certificate_type_id=UUID(certificate_type.id), student_ids=[uuid4()]
                )
            )


class TestUpdateCertificate:
    @pytest.mark.asyncio
    async def test_completed_payment_sets_issue_date(
        self, certificate_service, mock_db, make_result, college_id, certificate_type
    ) -> None:
        student = _student()
        certificate = _certificate(college_id, certificate_type, student)
        mock_db.execute.return_value = make_result(one=certificate)
        mock_db.get = AsyncMock(side_effect=[certificate_type, student])

        result = await certificate_service.update_certificate(
            certificate.id, CertificateUpdateRequest(payment_status=PaymentStatus.COMPLETED)
        )

        assert certificate.payment_status == "COMPLETED"
        assert certificate.issue_date is not None
        assert result.payment_status == PaymentStatus.COMPLETED

    @pytest.mark.asyncio
    async def test_explicit_issue_date_is_kept(
        self, certificate_service, mock_db, make_result, college_id, certificate_type
    ) -> None:
        student = _student()
        certificate = _certificate(college_id, certificate_type, student)
        mock_db.execute.return_value = make_result(one=certificate)
        mock_db.get = AsyncMock(side_effect=[certificate_type, student])

        await certificate_service.update_certificate(
            certificate.id,
            CertificateUpdateRequest(
                issue_date=date(2025, 1, 15), payment_status=PaymentStatus.COMPLETED
            ),
        )

        assert certificate.issue_date == date(2025, 1, 15)


class TestStudentAccess:
    @pytest.mark.asyncio
    async def test_other_students_certificate_is_hidden(
        self, certificate_service, mock_db, make_result, college_id, certificate_type
    ) -> None:
        certificate = _certificate(college_id, certificate_type, _student())
        mock_db.execute.side_effect = [
            make_result(one=certificate),
            make_result(one=str(uuid4())),
        ]

        with pytest.raises(CertificateNotFoundError):
            await certificate_service.get_certificate(certificate.id, student_user_id="user-1")

    @pytest.mark.asyncio
    async def test_printable_requires_completed_payment(
        self, certificate_service, mock_db, make_result, college_id, certificate_type
    ) -> None:
        student = _student()
        certificate = _certificate(college_id, certificate_type, student)
        mock_db.execute.return_value = make_result(one=certificate)
        mock_db.get = AsyncMock(side_effect=[certificate_type, student])

        with pytest.raises(CertificateNotReadyError):
            await certificate_service.get_printable(certificate.id)

    @pytest.mark.asyncio
    async def test_printable_returns_college_name(
        self, certificate_service, mock_db, make_result, college_id, certificate_type
    ) -> None:
        student = _student()
        certificate = _certificate(college_id, certificate_type, student, status="COMPLETED")
        college = MagicMock()
        college.name = "Government Engineering College"
        mock_db.execute.side_effect = [
            make_result(one=certificate),
            make_result(one=student),
        ]
        mock_db.get = AsyncMock(side_effect=[certificate_type, student, college])

        response, found, college_name = await certificate_service.get_printable(certificate.id)

        assert response.id == UUID(certificate.id)
        assert found is student
        assert college_name == "Government Engineering College"


class TestRenderCertificate:
    def test_renders_pdf_bytes(self) -> None:
        student = _student()
        certificate = CertificateResponse(
            id=uuid4(),
            certificate_type_id=uuid4(),
            certificate_type_name="Bonafide Certificate",
            student_id=UUID(student.id),
            issue_date=date(2025, 1, 15),
            payment_status=PaymentStatus.COMPLETED,
            created_at=datetime.now(timezone.utc),
        )

        content = render_certificate(certificate, student, "Government Engineering College")

        assert content.startswith(b"%PDF")
