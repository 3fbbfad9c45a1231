# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for Exam service."""

from datetime import datetime, timezone
from unittest.mock import MagicMock
from uuid import UUID, uuid4

import pytest

from collegehub.domains.exam.service import (
    IMPORT_CHUNK_SIZE,
    ExamExistsError,
    ExamNotFoundError,
    ExamService,
    ExamValidationError,
)
from collegehub.infrastructure.database.models import ExamMark, ExamType
from collegehub.models.exam import (
    ExamMarkCreateRequest,
    ExamMarkUpdateRequest,
    ExamTypeCreateRequest,
    ExamTypeUpdateRequest,
)
from collegehub.utils.excel import build_workbook

HEADERS = ["Sr", "Name", "Enrollment No", "Marks", "Absent", "Debarred", "Malpractice"]


@pytest.fixture
def exam_service(mock_db, college_id) -> ExamService:
    return ExamService(mock_db, college_id)


@pytest.fixture
def exam_type(college_id) -> ExamType:
    return ExamType(
        id=str(uuid4()),
        college_id=college_id,
        exam_name="Mid Term",
        total_marks=30,
        passing_marks=12,
        status=True,
    )


def _record(id_: str | None = None) -> MagicMock:
    record = MagicMock()
    record.id = id_ or str(uuid4())
    return record


def _student(enrollment_no: str) -> MagicMock:
    student = _record()
    student.enrollment_no = enrollment_no
    student.name = f"Student {enrollment_no}"
    return student


async def _stamp(obj) -> None:
    obj.id = obj.id or str(uuid4())
    obj.created_at = datetime.now(timezone.utc)


class TestExamTypes:
    @pytest.mark.asyncio
    async def test_create_exam_type(self, exam_service, mock_db, make_result) -> None:
        mock_db.execute.return_value = make_result(scalar=0)
        mock_db.refresh.side_effect = _stamp

        result = await exam_service.create_exam_type(
            ExamTypeCreateRequest(exam_name="Semester", total_marks=70, passing_marks=28)
        )

        added = mock_db.add.call_args[0][0]
        assert isinstance(added, ExamType)
        assert result.exam_name == "Semester"
        assert result.total_marks == 70
        mock_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_create_exam_type_duplicate_name(
        self, exam_service, mock_db, make_result
    ) -> None:
        mock_db.execute.return_value = make_result(scalar=1)

        with pytest.raises(ExamExistsError):
            await exam_service.create_exam_type(
                ExamTypeCreateRequest(exam_name="Semester", total_marks=70)
            )
        mock_db.add.assert_not_called()

    def test_passing_marks_must_be_below_total(self) -> None:
        with pytest.raises(ValueError):
            ExamTypeCreateRequest(exam_name="Quiz", total_marks=10, passing_marks=10)

    @pytest.mark.asyncio
    async def test_update_rejects_passing_at_total(
        self, exam_service, mock_db, make_result, exam_type
    ) -> None:
        mock_db.execute.return_value = make_result(one=exam_type)

        with pytest.raises(ExamValidationError):
            await exam_service.update_exam_type(
                exam_type.id, ExamTypeUpdateRequest(total_marks=12)
            )
        mock_db.commit.assert_not_called()

    @pytest.mark.asyncio
    async def test_get_exam_type_not_found(self, exam_service, mock_db, make_result) -> None:
        mock_db.execute.return_value = make_result(one=None)

        with pytest.raises(ExamNotFoundError):
            await exam_service.get_exam_type(uuid4())


class TestExamMarks:
    def _request(self, exam_type: ExamType, marks: float) -> ExamMarkCreateRequest:
        return ExamMarkCreateRequest(
            exam_type_id=UUID(exam_type.id),
            student_id=uuid4(),
            batch_subject_id=uuid4(),
            achieved_marks=marks,
        )

    @pytest.mark.asyncio
    async def test_create_exam_mark(
        self, exam_service, mock_db, make_result, exam_type
    ) -> None:
        student = _student("E21CS001")
        batch_subject = _record()
        mock_db.execute.side_effect = [
            make_result(one=student),
            make_result(one=batch_subject),
            make_result(one=exam_type),
            make_result(one=None),
        ]
        mock_db.refresh.side_effect = _stamp

        result = await exam_service.create_exam_mark(self._request(exam_type, 25))

        mark = mock_db.add.call_args[0][0]
        assert isinstance(mark, ExamMark)
        assert mark.student_id == student.id
        assert mark.batch_subject_id == batch_subject.id
        assert result.achieved_marks == 25

    @pytest.mark.asyncio
    async def test_create_exam_mark_exceeding_total(
        self, exam_service, mock_db, make_result, exam_type
    ) -> None:
        mock_db.execute.side_effect = [
            make_result(one=_student("E21CS001")),
            make_result(one=_record()),
            make_result(one=exam_type),
        ]

        with pytest.raises(ExamValidationError) as exc_info:
            await exam_service.create_exam_mark(self._request(exam_type, 31))

        assert str(exc_info.value) == (
            "Achieved marks should not exceed the total marks of 30 in exam Type Mid Term"
        )
        mock_db.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_create_exam_mark_duplicate(
        self, exam_service, mock_db, make_result, exam_type
    ) -> None:
        mock_db.execute.side_effect = [
            make_result(one=_student("E21CS001")),
            make_result(one=_record()),
            make_result(one=exam_type),
            make_result(one=str(uuid4())),
        ]

        with pytest.raises(ExamExistsError):
            await exam_service.create_exam_mark(self._request(exam_type, 20))

    def test_absent_student_must_have_zero_marks(self, exam_type) -> None:
        with pytest.raises(ValueError):
            ExamMarkCreateRequest(
                exam_type_id=UUID(exam_type.id),
                student_id=uuid4(),
                batch_subject_id=uuid4(),
                achieved_marks=5,
                was_absent=True,
            )

    @pytest.mark.asyncio
    async def test_update_exam_mark_checks_total(
        self, exam_service, mock_db, make_result, exam_type
    ) -> None:
        mark = ExamMark(
            id=str(uuid4()),
            exam_type_id=exam_type.id,
            student_id=str(uuid4()),
            batch_subject_id=str(uuid4()),
            achieved_marks=10,
            was_absent=False,
        )
        mock_db.execute.return_value = make_result(rows=[(mark, exam_type)])

        with pytest.raises(ExamValidationError):
            await exam_service.update_exam_mark(
                mark.id, ExamMarkUpdateRequest(achieved_marks=40)
            )
        assert mark.achieved_marks == 10

    @pytest.mark.asyncio
    async def test_delete_exam_mark_not_found(
        self, exam_service, mock_db, make_result
    ) -> None:
        mock_db.execute.return_value = make_result(rows=None)

        with pytest.raises(ExamNotFoundError):
            await exam_service.delete_exam_mark(uuid4())
        mock_db.delete.assert_not_called()


class TestImportExamMarks:
    @pytest.mark.asyncio
    async def test_import_writes_in_chunks(
        self, exam_service, mock_db, make_result, exam_type
    ) -> None:
        students = [_student(f"E21CS{i:03d}") for i in range(IMPORT_CHUNK_SIZE + 2)]
        rows = [[i, s.name, s.enrollment_no, 20, "No", "No", "No"] for i, s in enumerate(students)]
        mock_db.execute.side_effect = [
            make_result(one=_record()),
            make_result(one=exam_type),
            make_result(many=students),
            make_result(many=[]),
        ]

        count = await exam_service.import_exam_marks(
            build_workbook("Marks", HEADERS, rows), uuid4(), exam_type.id
        )

        assert count == IMPORT_CHUNK_SIZE + 2
        assert mock_db.add_all.call_count == 2
        assert mock_db.flush.await_count == 2
        mock_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_import_rejects_whole_sheet_on_row_errors(
        self, exam_service, mock_db, make_result, exam_type
    ) -> None:
        known = _student("E21CS001")
        existing = _student("E21CS002")
        over = _student("E21CS003")
        rows = [
            [1, known.name, known.enrollment_no, 25, "", "", ""],
            [2, "Ghost", "E21CS999", 10, "", "", ""],
            [3, over.name, over.enrollment_no, 45, "", "", ""],
            [4, existing.name, existing.enrollment_no, 12, "", "", ""],
        ]
        mock_db.execute.side_effect = [
            make_result(one=_record()),
            make_result(one=exam_type),
            make_result(many=[known, existing, over]),
            make_result(many=[existing.id]),
        ]

        with pytest.raises(ExamValidationError) as exc_info:
            await exam_service.import_exam_marks(
                build_workbook("Marks", HEADERS, rows), uuid4(), exam_type.id
            )

        errors = exc_info.value.errors
        assert [e.row for e in errors] == [3, 4, 5]
        assert errors[0].message == "Missing or invalid student enrollment number"
        assert errors[1].message.startswith("Achieved marks should not exceed")
        assert errors[2].message == "Marks already exist for this student"
        mock_db.add_all.assert_not_called()
        mock_db.commit.assert_not_called()

    @pytest.mark.asyncio
    async def test_import_rejects_repeated_enrollment(
        self, exam_service, mock_db, make_result, exam_type
    ) -> None:
        student = _student("E21CS001")
        rows = [
            [1, student.name, student.enrollment_no, 20, "", "", ""],
            [2, student.name, student.enrollment_no, 22, "", "", ""],
        ]
        mock_db.execute.side_effect = [
            make_result(one=_record()),
            make_result(one=exam_type),
            make_result(many=[student]),
            make_result(many=[]),
        ]

        with pytest.raises(ExamValidationError) as exc_info:
            await exam_service.import_exam_marks(
                build_workbook("Marks", HEADERS, rows), uuid4(), exam_type.id
            )

        errors = exc_info.value.errors
        assert [(e.row, e.message) for e in errors] == [
            (3, "Duplicate enrollment number in file")
        ]
        mock_db.add_all.assert_not_called()

    @pytest.mark.asyncio
    async def test_import_checks_absent_and_blank_marks(
        self, exam_service, mock_db, make_result, exam_type
    ) -> None:
        students = [_student(f"E21CS00{i}") for i in range(1, 5)]
        rows = [
            [1, students[0].name, students[0].enrollment_no, 15, "Yes", "", ""],
            [2, students[1].name, students[1].enrollment_no, None, "", "", ""],
            [3, students[2].name, students[2].enrollment_no, "AB", "Yes", "", ""],
            [4, students[3].name, students[3].enrollment_no, None, "Yes", "", ""],
        ]
        mock_db.execute.side_effect = [
            make_result(one=_record()),
            make_result(one=exam_type),
            make_result(many=students),
            make_result(many=[]),
        ]

        with pytest.raises(ExamValidationError) as exc_info:
            await exam_service.import_exam_marks(
                build_workbook("Marks", HEADERS, rows), uuid4(), exam_type.id
            )

        errors = exc_info.value.errors
        assert [(e.row, e.message) for e in errors] == [
            (2, "If the student was absent, achieved marks must be 0."),
            (3, "Missing or invalid achieved marks"),
            (4, "Missing or invalid achieved marks"),
        ]
        mock_db.add_all.assert_not_called()


class TestBatchSubjectReport:
    @pytest.mark.asyncio
    async def test_groups_marks_per_student(
        self, exam_service, mock_db, make_result, exam_type
    ) -> None:
        batch_subject = _record()
        student = _student("E21CS001")
        final = ExamType(id=str(uuid4()), exam_name="Semester", total_marks=70, passing_marks=28)

        def mark(et: ExamType, value: float) -> ExamMark:
            return ExamMark(
                id=str(uuid4()),
                exam_type_id=et.id,
                student_id=student.id,
                batch_subject_id=batch_subject.id,
                achieved_marks=value,
                was_absent=False,
                debarred=False,
                malpractice=False,
            )

        mock_db.execute.side_effect = [
            make_result(one=batch_subject),
            make_result(
                rows=[(mark(exam_type, 22), student, exam_type), (mark(final, 55), student, final)]
            ),
        ]

        report = await exam_service.batch_subject_report(batch_subject.id)

        assert len(report.students) == 1
        entry = report.students[0]
        assert entry.enrollment_no == "E21CS001"
        assert [m.exam_name for m in entry.marks] == ["Mid Term", "Semester"]
        assert [m.achieved_marks for m in entry.marks] == [22, 55]
