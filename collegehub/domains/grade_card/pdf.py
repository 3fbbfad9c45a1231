# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Grade card PDF rendering."""

from reportlab.lib.units import cm
from reportlab.platypus import Paragraph, Spacer

from collegehub.models.grade_card import GradeCardResponse
from collegehub.utils import pdf


def _number(value: float | None) -> str:
    if value is None:
        return "-"
    return f"{value:g}"


def render_grade_card(card: GradeCardResponse) -> bytes:
    """Render a grade card with its subject table and GPA/CGPA."""
    s = pdf.styles()
    elements: list = []

    pdf.header(
        elements,
        s,
        card.college_name or "Grade Card",
        f"Grade Card - {card.semester_name}",
    )
    elements.append(
        pdf.key_value_table(
            [
                ("Grade Card No.", card.card_no),
                ("Name", card.student_name),
                ("Enrollment No.", card.enrollment_no),
                ("Program", card.program_name or "-"),
                ("Semester", card.semester_name),
            ],
            s,
        )
    )
    elements.append(Spacer(1, 14))

    rows = [
        [
            detail.subject_code or "",
            Paragraph(detail.subject_name or "", s["meta"]),
            _number(detail.credit),
            _number(detail.internal_marks),
            _number(detail.external_marks),
            detail.grade or "-",
            _number(detail.grade_point),
            _number(detail.quality_point),
        ]
        for detail in card.details
    ]
    elements.append(
        pdf.grid_table(
            ["Code", "Subject", "Credit", "Int.", "Ext.", "Grade", "GP", "QP"],
            rows,
            col_widths=[2.2 * cm, 5.6 * cm, 1.4 * cm, 1.4 * cm, 1.4 * cm, 1.5 * cm, 1.2 * cm, 1.5 * cm],
        )
    )
    elements.append(Spacer(1, 14))
    elements.append(
        pdf.key_value_table(
            [
                ("Total Credits", _number(card.total_graded_credit)),
                ("Total Quality Points", _number(card.total_quality_point)),
                ("GPA", f"{card.gpa or 0:.2f}"),
                ("CGPA", f"{card.cgpa:.2f}" if card.cgpa is not None else "-"),
            ],
            s,
        )
    )
    elements.append(Spacer(1, 60))
    pdf.sign_block(elements, s, "Controller of Examinations", "Principal")

    return pdf.build_pdf(elements, title=f"Grade Card {card.card_no}")
