# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Certificate API endpoints.

- POST /types, GET /types, PUT /types/{id}, DELETE /types/{id} - Certificate types
- POST / - Assign a certificate to one student
- POST /bulk - Assign a certificate to many students
- GET / - List certificates (type / student / payment status filters)
- GET /me - Student's own certificates
- GET /{certificate_id} - Get certificate
- PATCH /{certificate_id} - Update issue date or payment status
- DELETE /{certificate_id} - Delete certificate
- GET /{certificate_id}/pdf - Download certificate (payment completed)
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from collegehub.api.dependencies import (
    get_db,
    get_email_sender,
    require_college_admin,
    require_college_user,
    require_staff,
    require_student,
)
from collegehub.api.middleware.auth import CurrentUser
from collegehub.api.middleware.rate_limit import RATE_LIMIT_EXPENSIVE, limiter
from collegehub.domains.certificate.pdf import render_certificate
from collegehub.domains.certificate.service import (
    CertificateExistsError,
    CertificateNotFoundError,
    CertificateNotReadyError,
    CertificateService,
)
from collegehub.infrastructure.notifications import EmailSender
from collegehub.models.certificate import (
    CertificateBulkIssueRequest,
    CertificateBulkIssueResponse,
    CertificateIssueRequest,
    CertificateListResponse,
    CertificateResponse,
    CertificateTypeCreateRequest,
    CertificateTypeListResponse,
    CertificateTypeResponse,
    CertificateTypeUpdateRequest,
    CertificateUpdateRequest,
)
from collegehub.models.common import PaymentStatus, UserRole
from collegehub.utils.pdf import PDF_CONTENT_TYPE

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_service(
    db: AsyncSession,
    current_user: CurrentUser,
    email_sender: EmailSender | None = None,
) -> CertificateService:
    return CertificateService(
        db=db, college_id=current_user.college_id, email_sender=email_sender
    )


def _owner_filter(current_user: CurrentUser) -> str | None:
    if current_user.has_role(UserRole.STUDENT.value):
        return current_user.id
    return None


# =========================================================================
# Certificate types
# =========================================================================


@router.post(
    "/types",
    response_model=CertificateTypeResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create certificate type",
)
async def create_certificate_type(
    data: CertificateTypeCreateRequest,
    current_user: CurrentUser = Depends(require_college_admin),
    db: AsyncSession = Depends(get_db),
) -> CertificateTypeResponse:
    try:
        return await _get_service(db, current_user).create_certificate_type(data)
    except CertificateExistsError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))


@router.get(
    "/types",
    response_model=CertificateTypeListResponse,
    summary="List certificate types",
)
async def list_certificate_types(
    current_user: CurrentUser = Depends(require_college_user),
    db: AsyncSession = Depends(get_db),
) -> CertificateTypeListResponse:
    items, total = await _get_service(db, current_user).list_certificate_types()
    return CertificateTypeListResponse(items=items, total=total)


@router.put(
    "/types/{certificate_type_id}",
    response_model=CertificateTypeResponse,
    summary="Update certificate type",
)
async def update_certificate_type(
    certificate_type_id: UUID,
    data: CertificateTypeUpdateRequest,
    current_user: CurrentUser = Depends(require_college_admin),
    db: AsyncSession = Depends(get_db),
) -> CertificateTypeResponse:
    try:
        return await _get_service(db, current_user).update_certificate_type(
            certificate_type_id, data
        )
    except CertificateNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except CertificateExistsError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))


@router.delete(
    "/types/{certificate_type_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete certificate type",
)
async def delete_certificate_type(
    certificate_type_id: UUID,
    current_user: CurrentUser = Depends(require_college_admin),
    db: AsyncSession = Depends(get_db),
) -> None:
    try:
        await _get_service(db, current_user).delete_certificate_type(certificate_type_id)
    except CertificateNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


# =========================================================================
# Certificates
# =========================================================================


@router.post(
    "",
    response_model=CertificateResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Assign certificate",
)
async def issue_certificate(
    data: CertificateIssueRequest,
    current_user: CurrentUser = Depends(require_college_admin),
    db: AsyncSession = Depends(get_db),
    email_sender: EmailSender = Depends(get_email_sender),
) -> CertificateResponse:
    try:
        return await _get_service(db, current_user, email_sender).issue_certificate(data)
    except CertificateNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except CertificateExistsError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))


@router.post(
    "/bulk",
    response_model=CertificateBulkIssueResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Assign certificate to many students",
    description="Students already holding the certificate are skipped and listed.",
)
async def issue_certificates(
    data: CertificateBulkIssueRequest,
    current_user: CurrentUser = Depends(require_college_admin),
    db: AsyncSession = Depends(get_db),
    email_sender: EmailSender = Depends(get_email_sender),
) -> CertificateBulkIssueResponse:
    try:
        return await _get_service(db, current_user, email_sender).issue_certificates(data)
    except CertificateNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.get("", response_model=CertificateListResponse, summary="List certificates")
async def list_certificates(
    certificate_type_id: UUID | None = Query(None),
    student_id: UUID | None = Query(None),
    payment_status: PaymentStatus | None = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=200),
    current_user: CurrentUser = Depends(require_staff),
    db: AsyncSession = Depends(get_db),
) -> CertificateListResponse:
    items, total = await _get_service(db, current_user).list_certificates(
        certificate_type_id=certificate_type_id,
        student_id=student_id,
        payment_status=payment_status,
        page=page,
        page_size=page_size,
    )
    return CertificateListResponse(items=items, total=total, page=page, page_size=page_size)


@router.get("/me", response_model=CertificateListResponse, summary="Own certificates")
async def list_own_certificates(
    current_user: CurrentUser = Depends(require_student),
    db: AsyncSession = Depends(get_db),
) -> CertificateListResponse:
    try:
        items, total = await _get_service(db, current_user).list_for_user(current_user.id)
    except CertificateNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return CertificateListResponse(items=items, total=total, page=1, page_size=max(total, 1))


@router.get(
    "/{certificate_id}",
    response_model=CertificateResponse,
    summary="Get certificate",
)
async def get_certificate(
    certificate_id: UUID,
    current_user: CurrentUser = Depends(require_college_user),
    db: AsyncSession = Depends(get_db),
) -> CertificateResponse:
    try:
        return await _get_service(db, current_user).get_certificate(
            certificate_id, student_user_id=_owner_filter(current_user)
        )
    except CertificateNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.patch(
    "/{certificate_id}",
    response_model=CertificateResponse,
    summary="Update certificate",
)
async def update_certificate(
    certificate_id: UUID,
    data: CertificateUpdateRequest,
    current_user: CurrentUser = Depends(require_college_admin),
    db: AsyncSession = Depends(get_db),
) -> CertificateResponse:
    try:
        return await _get_service(db, current_user).update_certificate(certificate_id, data)
    except CertificateNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.delete(
    "/{certificate_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete certificate",
)
async def delete_certificate(
    certificate_id: UUID,
    current_user: CurrentUser = Depends(require_college_admin),
    db: AsyncSession = Depends(get_db),
) -> None:
    try:
        await _get_service(db, current_user).delete_certificate(certificate_id)
    except CertificateNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.get(
    "/{certificate_id}/pdf",
    response_class=Response,
    summary="Download certificate PDF",
)
@limiter.limit(RATE_LIMIT_EXPENSIVE)
async def download_certificate(
    request: Request,
    certificate_id: UUID,
    current_user: CurrentUser = Depends(require_college_user),
    db: AsyncSession = Depends(get_db),
) -> Response:
    try:
        certificate, student, college_name = await _get_service(
            db, current_user
        ).get_printable(certificate_id, student_user_id=_owner_filter(current_user))
    except CertificateNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except CertificateNotReadyError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))

    content = render_certificate(certificate, student, college_name)
    filename = f"certificate-{student.enrollment_no}.pdf"
    return Response(
        content=content,
        media_type=PDF_CONTENT_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
