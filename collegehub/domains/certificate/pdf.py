# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Certificate PDF rendering."""

from reportlab.platypus import Paragraph, Spacer

from collegehub.infrastructure.database.models import Student
from collegehub.models.certificate import CertificateResponse
from collegehub.utils import pdf


def render_certificate(
    certificate: CertificateResponse,
    student: Student,
    college_name: str,
) -> bytes:
    s = pdf.styles()
    elements: list = []
    title = certificate.certificate_type_name or "Certificate"

    pdf.header(elements, s, college_name or "Certificate", title)
    issued = certificate.issue_date.strftime("%d-%m-%Y") if certificate.issue_date else "-"
    elements.append(
        pdf.key_value_table(
            [
                ("Ref. No.", str(certificate.id).split("-")[0].upper()),
                ("Date of Issue", issued),
            ],
            s,
        )
    )
    elements.append(Spacer(1, 28))
    elements.append(Paragraph("To whomsoever it may concern", s["heading"]))
    elements.append(Spacer(1, 18))
    elements.append(
        Paragraph(
            f"This is to certify that <b>{student.name}</b> "
            f"(Enrollment No.: <b>{student.enrollment_no}</b>) is a student of "
            f"<b>{college_name}</b>. This {title.lower()} is issued on request "
            "for official purpose.",
            s["body"],
        )
    )
    elements.append(Spacer(1, 140))
    pdf.sign_block(elements, s, "Head of Department", "Principal")

    return pdf.build_pdf(elements, title=f"{title} {student.enrollment_no}")
