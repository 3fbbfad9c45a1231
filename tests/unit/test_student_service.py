# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for Student service."""

from unittest.mock import AsyncMock, MagicMock
from uuid import UUID, uuid4

import pytest

from collegehub.domains.auth.password import PasswordHasher
from collegehub.domains.student.service import (
    StudentExistsError,
    StudentImportError,
    StudentNotFoundError,
    StudentService,
)
from collegehub.infrastructure.database.models import Student, User
from collegehub.models.student import StudentCreateRequest
from collegehub.utils.excel import build_workbook

HEADERS = ["Enrollment No", "Name", "Email", "Phone", "DOB", "Gender"]


@pytest.fixture
def email_sender() -> MagicMock:
    sender = MagicMock()
    sender.send_welcome = AsyncMock()
    return sender


@pytest.fixture
def student_service(mock_db, college_id, email_sender) -> StudentService:
    return StudentService(
        mock_db, college_id, password_hasher=PasswordHasher(rounds=4), email_sender=email_sender
    )


@pytest.fixture
def program() -> MagicMock:
    program = MagicMock()
    program.id = str(uuid4())
    program.department_id = str(uuid4())
    return program


def _workbook(*rows) -> bytes:
    return build_workbook("Students", HEADERS, rows)


class TestRegisterStudent:
    @pytest.mark.asyncio
    async def test_register_creates_user_and_student(
        self, student_service, mock_db, make_result, program, email_sender
    ) -> None:
        mock_db.execute.side_effect = [
            make_result(one=program),
            make_result(one=MagicMock()),
            make_result(one=None),
            make_result(one=None),
        ]

        async def mock_refresh(obj):
            obj.id = str(uuid4())

        mock_db.refresh.side_effect = mock_refresh
        request = StudentCreateRequest(
            enrollment_no="E21CS04001",
            name="Asha Rao",
            email="Asha@College.edu",
            gender="FEMALE",
            program_id=UUID(program.id),
            admission_year_id=uuid4(),
        )

        result = await student_service.register_student(request)

        added = [call.args[0] for call in mock_db.add.call_args_list]
        user, student = added
        assert isinstance(user, User) and isinstance(student, Student)
        assert user.role == "STUDENT"
        assert student.user_id == user.id
        assert student.department_id == program.department_id
        assert result.email == "asha@college.edu"
        email_sender.send_welcome.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_register_duplicate_enrollment(
        self, student_service, mock_db, make_result, program
    ) -> None:
        mock_db.execute.side_effect = [
            make_result(one=program),
            make_result(one=MagicMock()),
            make_result(one=str(uuid4())),
        ]
        request = StudentCreateRequest(
            enrollment_no="E21CS04001",
            name="Asha Rao",
            email="asha@college.edu",
            gender="FEMALE",
            program_id=UUID(program.id),
            admission_year_id=uuid4(),
        )

        with pytest.raises(StudentExistsError):
            await student_service.register_student(request)

        mock_db.commit.assert_not_called()

    @pytest.mark.asyncio
    async def test_get_student_not_found(self, student_service, mock_db, make_result) -> None:
        mock_db.execute.return_value = make_result(one=None)

        with pytest.raises(StudentNotFoundError):
            await student_service.get_student(uuid4())


class TestImportStudents:
    @pytest.mark.asyncio
    async def test_import_success(
        self, student_service, mock_db, make_result, program, email_sender
    ) -> None:
        mock_db.execute.side_effect = [
            make_result(one=program),
            make_result(one=MagicMock()),
            make_result(many=[]),
            make_result(many=[]),
        ]
        content = _workbook(
            ["E21CS04001", "Asha Rao", "asha@college.edu", "9000000001", "2003-05-01", "F"],
            ["E21CS04002", "Ravi Kumar", "ravi@college.edu", None, None, "Male"],
        )

        count = await student_service.import_students(content, program.id, uuid4())

        assert count == 2
        assert mock_db.add.call_count == 4
        mock_db.commit.assert_awaited_once()
        assert email_sender.send_welcome.await_count == 2
        students = [c.args[0] for c in mock_db.add.call_args_list if isinstance(c.args[0], Student)]
        assert [s.gender for s in students] == ["FEMALE", "MALE"]

    @pytest.mark.asyncio
    async def test_import_is_all_or_nothing(
        self, student_service, mock_db, make_result, program
    ) -> None:
        mock_db.execute.side_effect = [
            make_result(one=program),
            make_result(one=MagicMock()),
            make_result(many=["E21CS04003"]),
            make_result(many=[]),
        ]
        content = _workbook(
            ["E21CS04001", None, "asha@college.edu", None, None, "F"],
            ["E21CS04002", "Ravi Kumar", "ravi@college.edu", None, None, "X"],
            ["E21CS04003", "Meena Das", "meena@college.edu", None, None, "F"],
            ["E21CS04003", "Meena Copy", "copy@college.edu", None, None, "F"],
            ["E21CS04005", "Bad Date", "bad@college.edu", None, "someday", "M"],
        )

        with pytest.raises(StudentImportError) as exc_info:
            await student_service.import_students(content, program.id, uuid4())

        messages = {(e.row, e.message) for e in exc_info.value.errors}
        assert (2, "Missing name") in messages
        assert (3, "Invalid gender X") in messages
        assert (4, "Enrollment number already exists") in messages
        assert (5, "Duplicate enrollment number (also in row 4)") in messages
        assert (6, "Invalid date of birth") in messages
        rows = [e.row for e in exc_info.value.errors]
        assert rows == sorted(rows)
        mock_db.add.assert_not_called()
        mock_db.commit.assert_not_called()

    @pytest.mark.asyncio
    async def test_import_existing_email(
        self, student_service, mock_db, make_result, program
    ) -> None:
        mock_db.execute.side_effect = [
            make_result(one=program),
            make_result(one=MagicMock()),
            make_result(many=[]),
            make_result(many=["asha@college.edu"]),
        ]
        content = _workbook(["E21CS04001", "Asha Rao", "Asha@College.edu", None, None, "F"])

        with pytest.raises(StudentImportError) as exc_info:
            await student_service.import_students(content, program.id, uuid4())

        assert exc_info.value.errors[0].message == "Email asha@college.edu is already registered"

    @pytest.mark.asyncio
    async def test_empty_sheet(self, student_service, mock_db, make_result, program) -> None:
        mock_db.execute.side_effect = [make_result(one=program), make_result(one=MagicMock())]

        with pytest.raises(StudentImportError, match="no data rows"):
            await student_service.import_students(_workbook(), program.id, uuid4())
