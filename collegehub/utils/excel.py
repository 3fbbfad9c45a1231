# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Excel helpers for bulk imports and exports.

Imports read the first worksheet of an uploaded ``.xlsx`` file, skip the
header row and hand back ``ExcelRow`` objects addressed by column letter so
importers can mirror the documented template layout (``row["C"]``).

Exports build a single-sheet workbook with a bold, frozen header row.
"""

from __future__ import annotations

import logging
import zipfile
from dataclasses import dataclass
from datetime import date, datetime
from io import BytesIO
from typing import Any, Iterable, Sequence

from openpyxl import Workbook, load_workbook
from openpyxl.styles import Alignment, Font
from openpyxl.utils import column_index_from_string, get_column_letter
from openpyxl.utils.exceptions import InvalidFileException

logger = logging.getLogger(__name__)

XLSX_CONTENT_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


class ExcelFormatError(ValueError):
    """Raised when an uploaded file cannot be read as an xlsx workbook."""

    pass


@dataclass(frozen=True)
class ExcelRow:
    """One worksheet row.

    Attributes:
        number: 1-based row number as shown in spreadsheet software.
        values: Raw cell values in column order.
    """

    number: int
    values: tuple[Any, ...]

    def __getitem__(self, column: str) -> Any:
        index = column_index_from_string(column) - 1
        if index >= len(self.values):
            return None
        return self.values[index]

    def text(self, column: str) -> str | None:
        """Get a stripped string value, None for blank cells."""
        value = self[column]
        if value is None:
            return None
        if isinstance(value, float) and value.is_integer():
            value = int(value)
        text = str(value).strip()
        return text or None

    def number_value(self, column: str) -> float | None:
        """Get a numeric value, None for blank or non-numeric cells."""
        value = self[column]
        if value is None or value == "":
            return None
        try:
            return float(value)
        except (TypeError, ValueError):
            return None

    def flag(self, column: str) -> bool:
        """Interpret a Yes/No cell."""
        text = self.text(column)
        return bool(text) and text.lower() in ("yes", "y", "true", "1")

    def date_value(self, column: str) -> date | None:
        """Get a date from a date cell or an ISO / dd-mm-yyyy string."""
        value = self[column]
        if value is None:
            return None
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        text = str(value).strip()
        for fmt in ("%Y-%m-%d", "%d-%m-%Y", "%d/%m/%Y"):
            try:
                return datetime.strptime(text, fmt).date()
            except ValueError:
                continue
        return None

    @property
    def is_blank(self) -> bool:
        return all(v is None or (isinstance(v, str) and not v.strip()) for v in self.values)


def read_rows(content: bytes, skip_header: bool = True) -> list[ExcelRow]:
    """Read the first worksheet of an xlsx payload.

    Args:
        content: Raw bytes of the uploaded file.
        skip_header: Whether the first row holds column titles.

    Returns:
        Non-blank rows in sheet order.

    Raises:
        ExcelFormatError: If the payload is not a readable workbook.
    """
    try:
        wb = load_workbook(BytesIO(content), read_only=True, data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, OSError, KeyError, ValueError) as e:
        raise ExcelFormatError("Invalid file format. Please upload an .xlsx file.") from e

    try:
        ws = wb.worksheets[0] if wb.worksheets else None
        if ws is None:
            raise ExcelFormatError("Workbook has no worksheets")

        rows: list[ExcelRow] = []
        start = 2 if skip_header else 1
        for number, values in enumerate(ws.iter_rows(min_row=start, values_only=True), start=start):
            row = ExcelRow(number=number, values=tuple(values or ()))
            if not row.is_blank:
                rows.append(row)
    finally:
        wb.close()

    logger.debug("Read %d rows from workbook", len(rows))
    return rows


def build_workbook(
    title: str,
    headers: Sequence[str],
    rows: Iterable[Sequence[Any]],
    column_width: int = 18,
) -> bytes:
    """Build a single-sheet workbook.

    Args:
        title: Worksheet title.
        headers: Column titles.
        rows: Data rows.
        column_width: Width applied to every column.

    Returns:
        The xlsx file as bytes.
    """
    wb = Workbook()
    ws = wb.active
    ws.title = title[:31]

    ws.append(list(headers))
    header_font = Font(bold=True)
    center = Alignment(horizontal="center", vertical="center", wrap_text=True)
    for col in range(1, len(headers) + 1):
        cell = ws.cell(row=1, column=col)
        cell.font = header_font
        cell.alignment = center
        ws.column_dimensions[get_column_letter(col)].width = column_width
    ws.freeze_panes = "A2"

    for row in rows:
        ws.append(list(row))

    buffer = BytesIO()
    wb.save(buffer)
    return buffer.getvalue()
