# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""PDF building blocks shared by grade card and certificate documents.

Documents are rendered in memory with reportlab's platypus layer and
returned as bytes, ready for a streaming response.
"""

from collections.abc import Sequence
from io import BytesIO
from typing import Any

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import cm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

PDF_CONTENT_TYPE = "application/pdf"
CONTENT_WIDTH = 17.0 * cm


def styles() -> dict[str, ParagraphStyle]:
    base = getSampleStyleSheet()
    return {
        "title": ParagraphStyle(
            "title",
            parent=base["Normal"],
            fontName="Times-Bold",
            fontSize=22,
            alignment=1,
            leading=26,
        ),
        "sub": ParagraphStyle(
            "sub",
            parent=base["Normal"],
            fontName="Times-Roman",
            fontSize=12,
            alignment=1,
            leading=16,
        ),
        "heading": ParagraphStyle(
            "heading",
            parent=base["Normal"],
            fontName="Times-Bold",
            fontSize=16,
            alignment=1,
            leading=20,
        ),
        "meta": ParagraphStyle(
            "meta",
            parent=base["Normal"],
            fontName="Times-Roman",
            fontSize=11,
            leading=14,
        ),
        "body": ParagraphStyle(
            "body",
            parent=base["Normal"],
            fontName="Times-Roman",
            fontSize=13,
            leading=22,
            alignment=4,
        ),
        "small_center": ParagraphStyle(
            "small_center",
            parent=base["Normal"],
            fontName="Times-Roman",
            fontSize=10,
            alignment=1,
        ),
    }


def rule() -> Table:
    """Full-width horizontal line."""
    t = Table([[""]], colWidths=[CONTENT_WIDTH], rowHeights=[0.1 * cm])
    t.setStyle(TableStyle([("LINEABOVE", (0, 0), (-1, -1), 1.2, colors.black)]))
    return t


def header(elements: list, s: dict[str, ParagraphStyle], college_name: str, subtitle: str) -> None:
    elements.append(Paragraph(college_name, s["title"]))
    elements.append(Spacer(1, 4))
    elements.append(Paragraph(subtitle, s["sub"]))
    elements.append(Spacer(1, 6))
    elements.append(rule())
    elements.append(Spacer(1, 10))


def key_value_table(rows: Sequence[tuple[str, Any]], s: dict[str, ParagraphStyle]) -> Table:
    """Two-column label/value block."""
    data = [
        [Paragraph(f"<b>{label}</b>", s["meta"]), Paragraph(str(value), s["meta"])]
        for label, value in rows
    ]
    t = Table(data, colWidths=[5.0 * cm, CONTENT_WIDTH - 5.0 * cm])
    t.setStyle(TableStyle([("VALIGN", (0, 0), (-1, -1), "TOP")]))
    return t


def grid_table(
    headers: Sequence[str],
    rows: Sequence[Sequence[Any]],
    col_widths: Sequence[float] | None = None,
) -> Table:
    """Bordered table with a shaded header row."""
    data = [list(headers)] + [[("" if v is None else v) for v in row] for row in rows]
    t = Table(data, colWidths=col_widths, repeatRows=1)
    t.setStyle(
        TableStyle(
            [
                ("FONTNAME", (0, 0), (-1, 0), "Times-Bold"),
                ("FONTNAME", (0, 1), (-1, -1), "Times-Roman"),
                ("FONTSIZE", (0, 0), (-1, -1), 10),
                ("BACKGROUND", (0, 0), (-1, 0), colors.lightgrey),
                ("GRID", (0, 0), (-1, -1), 0.5, colors.black),
                ("ALIGN", (1, 1), (-1, -1), "CENTER"),
                ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
            ]
        )
    )
    return t


def sign_block(elements: list, s: dict[str, ParagraphStyle], left: str, right: str) -> None:
    sign = Table(
        [[
            Paragraph(f"<b>______________________________</b><br/><b>{left}</b>", s["small_center"]),
            Paragraph(f"<b>______________________________</b><br/><b>{right}</b>", s["small_center"]),
        ]],
        colWidths=[CONTENT_WIDTH / 2, CONTENT_WIDTH / 2],
    )
    sign.setStyle(TableStyle([("ALIGN", (0, 0), (-1, -1), "CENTER")]))
    elements.append(sign)


def build_pdf(elements: list, title: str) -> bytes:
    """Lay out flowables on A4 and return the document bytes."""
    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        leftMargin=2 * cm,
        rightMargin=2 * cm,
        topMargin=1.5 * cm,
        bottomMargin=1.3 * cm,
        title=title,
    )
    doc.build(elements)
    return buffer.getvalue()
