# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for Excel import and export helpers."""

from datetime import date, datetime

import pytest

from collegehub.utils.excel import ExcelFormatError, ExcelRow, build_workbook, read_rows


class TestReadRows:
    def test_skips_header_and_blank_rows(self) -> None:
        content = build_workbook(
            "Students",
            ["A", "B"],
            [["E21CS04001", "Asha"], [None, "  "], ["E21CS04002", "Ravi"]],
        )

        rows = read_rows(content)

        assert [row.number for row in rows] == [2, 4]
        assert rows[1]["B"] == "Ravi"

    def test_rejects_non_workbook(self) -> None:
        with pytest.raises(ExcelFormatError):
            read_rows(b"enrollment,name\nE1,Asha\n")


class TestExcelRow:
    def test_text_normalises_numbers_and_blanks(self) -> None:
        row = ExcelRow(number=2, values=(12.0, "  x  ", ""))

        assert row.text("A") == "12"
        assert row.text("B") == "x"
        assert row.text("C") is None
        assert row.text("Z") is None

    def test_number_value(self) -> None:
        row = ExcelRow(number=2, values=("18", "abc", None, 7))

        assert row.number_value("A") == 18.0
        assert row.number_value("B") is None
        assert row.number_value("C") is None
        assert row.number_value("D") == 7.0

    def test_flag(self) -> None:
        row = ExcelRow(number=2, values=("Yes", "no", "Y", None))

        assert [row.flag(c) for c in "ABCD"] == [True, False, True, False]

    def test_date_value_formats(self) -> None:
        row = ExcelRow(
            number=2,
            values=(datetime(2003, 5, 1, 0, 0), "2003-05-01", "01-05-2003", "01/05/2003", "May 1"),
        )

        assert row.date_value("A") == date(2003, 5, 1)
        assert row.date_value("B") == date(2003, 5, 1)
        assert row.date_value("C") == date(2003, 5, 1)
        assert row.date_value("D") == date(2003, 5, 1)
        assert row.date_value("E") is None
