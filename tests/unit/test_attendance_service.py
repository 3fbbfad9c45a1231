# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for Attendance service."""

from unittest.mock import MagicMock
from uuid import UUID, uuid4

import pytest

from collegehub.domains.attendance.service import (
    ATTENDED_EXCEEDS_COMPLETED,
    AttendanceExistsError,
    AttendanceNotFoundError,
    AttendanceService,
    AttendanceValidationError,
    attendance_percentage,
)
from collegehub.infrastructure.database.models import (
    MonthlyBatchSubjectAttendance,
    MonthlyBatchSubjectClasses,
)
from collegehub.models.attendance import (
    AttendanceCreateRequest,
    MonthlyClassesCreateRequest,
    MonthlyClassesUpdateRequest,
)
from collegehub.models.common import Month
from collegehub.utils.excel import build_workbook

HEADERS = ["Sr", "Name", "Enrollment No", "Theory Attended", "Practical Attended"]


@pytest.fixture
def attendance_service(mock_db, college_id) -> AttendanceService:
    return AttendanceService(mock_db, college_id)


@pytest.fixture
def batch_subject() -> MagicMock:
    batch_subject = MagicMock()
    batch_subject.id = str(uuid4())
    batch_subject.batch_id = str(uuid4())
    return batch_subject


@pytest.fixture
def classes(batch_subject) -> MonthlyBatchSubjectClasses:
    return MonthlyBatchSubjectClasses(
        id=str(uuid4()),
        batch_subject_id=batch_subject.id,
        month="JANUARY",
        total_theory_classes=20,
        completed_theory_classes=16,
        total_practical_classes=10,
        completed_practical_classes=8,
    )


def _student(enrollment_no: str) -> MagicMock:
    student = MagicMock()
    student.id = str(uuid4())
    student.enrollment_no = enrollment_no
    student.name = f"Student {enrollment_no}"
    return student


async def _stamp(obj) -> None:
    obj.id = obj.id or str(uuid4())


class TestAttendancePercentage:
    def test_two_decimals(self) -> None:
        assert attendance_percentage(14, 16) == "87.50"
        assert attendance_percentage(1, 3) == "33.33"

    def test_no_completed_classes(self) -> None:
        assert attendance_percentage(0, 0) == "N/A"


class TestMonthlyClasses:
    def test_completed_cannot_exceed_total(self) -> None:
        with pytest.raises(ValueError):
            MonthlyClassesCreateRequest(
                batch_subject_id=uuid4(),
                month=Month.JANUARY,
                total_theory_classes=10,
                completed_theory_classes=12,
            )

    @pytest.mark.asyncio
    async def test_create_monthly_classes(
        self, attendance_service, mock_db, make_result, batch_subject
    ) -> None:
        mock_db.execute.side_effect = [
            make_result(one=batch_subject),
            make_result(one=None),
        ]
        mock_db.refresh.side_effect = _stamp

        result = await attendance_service.create_monthly_classes(
            MonthlyClassesCreateRequest(
                batch_subject_id=UUID(batch_subject.id),
                month=Month.FEBRUARY,
                total_theory_classes=20,
                completed_theory_classes=18,
            )
        )

        added = mock_db.add.call_args[0][0]
        assert isinstance(added, MonthlyBatchSubjectClasses)
        assert result.month == Month.FEBRUARY
        assert result.completed_theory_classes == 18

    @pytest.mark.asyncio
    async def test_month_recorded_once(
        self, attendance_service, mock_db, make_result, batch_subject
    ) -> None:
        mock_db.execute.side_effect = [
            make_result(one=batch_subject),
            make_result(one=str(uuid4())),
        ]

        with pytest.raises(AttendanceExistsError) as exc_info:
            await attendance_service.create_monthly_classes(
                MonthlyClassesCreateRequest(batch_subject_id=UUID(batch_subject.id), month=Month.MARCH)
            )

        assert "MARCH" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_update_checks_merged_counts(
        self, attendance_service, mock_db, make_result, classes
    ) -> None:
        mock_db.execute.return_value = make_result(one=classes)

        with pytest.raises(AttendanceValidationError):
            await attendance_service.update_monthly_classes(
                classes.id, MonthlyClassesUpdateRequest(total_theory_classes=12)
            )
        mock_db.rollback.assert_awaited_once()
        mock_db.commit.assert_not_called()


class TestCreateAttendance:
    @pytest.mark.asyncio
    async def test_records_attendance(
        self, attendance_service, mock_db, make_result, classes, batch_subject
    ) -> None:
        student = _student("E21CS04001")
        mock_db.execute.side_effect = [
            make_result(one=classes),
            make_result(one=batch_subject),
            make_result(one=student),
            make_result(one=str(uuid4())),
            make_result(one=None),
        ]
        mock_db.refresh.side_effect = _stamp

        result = await attendance_service.create_attendance(
            AttendanceCreateRequest(
                monthly_classes_id=UUID(classes.id),
                student_id=UUID(student.id),
                attended_theory_classes=14,
                attended_practical_classes=8,
            )
        )

        added = mock_db.add.call_args[0][0]
        assert isinstance(added, MonthlyBatchSubjectAttendance)
        assert result.attended_theory_classes == 14

    @pytest.mark.asyncio
    async def test_attended_cannot_exceed_completed(
        self, attendance_service, mock_db, make_result, classes, batch_subject
    ) -> None:
        student = _student("E21CS04001")
        mock_db.execute.side_effect = [
            make_result(one=classes),
            make_result(one=batch_subject),
            make_result(one=student),
            make_result(one=str(uuid4())),
        ]

        with pytest.raises(AttendanceValidationError) as exc_info:
            await attendance_service.create_attendance(
                AttendanceCreateRequest(
                    monthly_classes_id=UUID(classes.id),
                    student_id=UUID(student.id),
                    attended_theory_classes=17,
                )
            )

        assert str(exc_info.value) == ATTENDED_EXCEEDS_COMPLETED

    @pytest.mark.asyncio
    async def test_student_outside_batch(
        self, attendance_service, mock_db, make_result, classes, batch_subject
    ) -> None:
        mock_db.execute.side_effect = [
            make_result(one=classes),
            make_result(one=batch_subject),
            make_result(one=_student("E21CS04001")),
            make_result(one=None),
        ]

        with pytest.raises(AttendanceNotFoundError):
            await attendance_service.create_attendance(
                AttendanceCreateRequest(monthly_classes_id=UUID(classes.id), student_id=uuid4())
            )


class TestImportAttendance:
    @pytest.mark.asyncio
    async def test_import_success(
        self, attendance_service, mock_db, make_result, classes, batch_subject
    ) -> None:
        first, second = _student("E21CS04001"), _student("E21CS04002")
        content = build_workbook(
            "Attendance",
            HEADERS,
            [[1, first.name, first.enrollment_no, 15, 8], [2, second.name, second.enrollment_no, 10, 0]],
        )
        mock_db.execute.side_effect = [
            make_result(one=classes),
            make_result(one=batch_subject),
            make_result(many=[first, second]),
            make_result(many=[first.id, second.id]),
            make_result(many=[]),
        ]

        count = await attendance_service.import_attendance(content, classes.id)

        assert count == 2
        records = mock_db.add_all.call_args[0][0]
        assert [(r.attended_theory_classes, r.attended_practical_classes) for r in records] == [
            (15, 8),
            (10, 0),
        ]
        mock_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_import_collects_row_errors(
        self, attendance_service, mock_db, make_result, classes, batch_subject
    ) -> None:
        enrolled = _student("E21CS04001")
        outsider = _student("E21CS04002")
        recorded = _student("E21CS04003")
        content = build_workbook(
            "Attendance",
            HEADERS,
            [
                [1, "No Number", None, 10, 5],
                [2, "Ghost", "E21CS04999", 10, 5],
                [3, outsider.name, outsider.enrollment_no, 10, 5],
                [4, recorded.name, recorded.enrollment_no, 10, 5],
                [5, enrolled.name, enrolled.enrollment_no, 20, 5],
            ],
        )
        mock_db.execute.side_effect = [
            make_result(one=classes),
            make_result(one=batch_subject),
            make_result(many=[enrolled, outsider, recorded]),
            make_result(many=[enrolled.id, recorded.id]),
            make_result(many=[recorded.id]),
        ]

        with pytest.raises(AttendanceValidationError) as exc_info:
            await attendance_service.import_attendance(content, classes.id)

        assert [(e.row, e.message) for e in exc_info.value.errors] == [
            (2, "Enrollment number is required."),
            (3, "Student not found in the system"),
            (4, "Student is not enrolled in this batch"),
            (5, "Attendance already recorded for this student"),
            (6, ATTENDED_EXCEEDS_COMPLETED),
        ]
        mock_db.add_all.assert_not_called()


class TestAttendanceReport:
    @pytest.mark.asyncio
    async def test_sums_months_per_student(
        self, attendance_service, mock_db, make_result, batch_subject, classes
    ) -> None:
        student = _student("E21CS04001")
        february = MonthlyBatchSubjectClasses(
            id=str(uuid4()),
            batch_subject_id=batch_subject.id,
            month="FEBRUARY",
            total_theory_classes=10,
            completed_theory_classes=4,
            total_practical_classes=0,
            completed_practical_classes=0,
        )

        def attended(theory: int, practical: int) -> MonthlyBatchSubjectAttendance:
            return MonthlyBatchSubjectAttendance(
                attended_theory_classes=theory, attended_practical_classes=practical
            )

        mock_db.execute.side_effect = [
            make_result(one=batch_subject),
            make_result(
                rows=[(attended(14, 6), classes, student), (attended(4, 0), february, student)]
            ),
        ]

        report = await attendance_service.batch_subject_report(batch_subject.id)

        summary = report.students[0]
        assert summary.completed_theory_classes == 20
        assert summary.attended_theory_classes == 18
        assert summary.theory_percentage == "90.00"
        assert summary.practical_percentage == "75.00"
