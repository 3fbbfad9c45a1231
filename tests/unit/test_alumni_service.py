# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for alumni registration and verification."""

from types import SimpleNamespace
from uuid import UUID, uuid4

import pytest

from collegehub.domains.alumni.service import (
    AlumniService,
    AlumnusExistsError,
    AlumnusNotFoundError,
    AlumnusValidationError,
    register_alumnus,
)
from collegehub.domains.auth.password import PasswordHasher, PasswordPolicyError
from collegehub.infrastructure.database.models import Alumnus, User
from collegehub.models.alumni import AlumnusRegisterRequest

HASHER = PasswordHasher(rounds=4)


@pytest.fixture
def department(college_id) -> SimpleNamespace:
    return SimpleNamespace(id=str(uuid4()), college_id=college_id, name="Computer Science")


def _request(department_id: str, **overrides) -> AlumnusRegisterRequest:
    data = {
        "email": "Asha.Rao@mail.com",
        "password": "Gr4duate!2020",
        "name": "Asha Rao",
        "department_id": department_id,
        "graduation_year": 2020,
        "current_employer": "Infosys",
    }
    data.update(overrides)
    return AlumnusRegisterRequest(**data)


def _row(college_id: str, verified: bool = False) -> tuple[Alumnus, User, str]:
    user = User(
        id=str(uuid4()),
        email="asha.rao@mail.com",
        name="Asha Rao",
        role="ALUMNUS",
        college_id=college_id,
        is_verified_alumnus=verified,
    )
    alumnus = Alumnus(
        id=str(uuid4()),
        user_id=user.id,
        college_id=college_id,
        department_id=str(uuid4()),
        graduation_year=2020,
    )
    return alumnus, user, "Computer Science"


class TestRegisterAlumnus:
    @pytest.mark.asyncio
    async def test_creates_unverified_account(self, mock_db, make_result, department) -> None:
        mock_db.execute.side_effect = [
            make_result(one=None),
            make_result(one=department),
        ]

        result = await register_alumnus(mock_db, HASHER, _request(department.id))

        user, alumnus = mock_db.add_all.call_args[0][0]
        assert user.role == "ALUMNUS"
        assert user.email == "asha.rao@mail.com"
        assert user.is_verified_alumnus is False
        assert user.college_id == department.college_id
        assert HASHER.verify("Gr4duate!2020", user.password_hash)
        assert alumnus.user_id == user.id
        assert alumnus.current_employer == "Infosys"
        assert result.user_id == UUID(user.id)
        mock_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_existing_email(self, mock_db, make_result, department) -> None:
        mock_db.execute.return_value = make_result(one=str(uuid4()))

        with pytest.raises(AlumnusExistsError):
            await register_alumnus(mock_db, HASHER, _request(department.id))

        mock_db.add_all.assert_not_called()

    @pytest.mark.asyncio
    async def test_unknown_department(self, mock_db, make_result, department) -> None:
        mock_db.execute.side_effect = [make_result(one=None), make_result(one=None)]

        with pytest.raises(AlumnusValidationError):
            await register_alumnus(mock_db, HASHER, _request(department.id))

    @pytest.mark.asyncio
    async def test_program_must_belong_to_department(
        self, mock_db, make_result, department
    ) -> None:
        mock_db.execute.side_effect = [
            make_result(one=None),
            make_result(one=department),
            make_result(one=None),
        ]

        with pytest.raises(AlumnusValidationError) as exc_info:
            await register_alumnus(
                mock_db, HASHER, _request(department.id, program_id=str(uuid4()))
            )

        assert str(exc_info.value) == "Program not found in this department"

    @pytest.mark.asyncio
    async def test_weak_password(self, mock_db, make_result, department) -> None:
        mock_db.execute.side_effect = [make_result(one=None), make_result(one=department)]

        with pytest.raises(PasswordPolicyError):
            await register_alumnus(mock_db, HASHER, _request(department.id, password="password1"))

    def test_linkedin_must_be_url(self, department) -> None:
        with pytest.raises(ValueError):
            _request(department.id, linkedin_profile="asha-rao")

        assert _request(department.id, linkedin_profile="").linkedin_profile is None


class TestAlumniService:
    @pytest.mark.asyncio
    async def test_list_pending(self, mock_db, make_result, college_id) -> None:
        mock_db.execute.return_value = make_result(rows=[_row(college_id)])
        service = AlumniService(mock_db, college_id)

        items, total = await service.list_alumni(verified=False)

        assert total == 1
        assert items[0].verified is False
        assert items[0].department_name == "Computer Science"

    @pytest.mark.asyncio
    async def test_verify_sets_flag(self, mock_db, make_result, college_id) -> None:
        alumnus, user, department_name = _row(college_id)
        mock_db.execute.return_value = make_result(rows=[(alumnus, user, department_name)])
        service = AlumniService(mock_db, college_id)

        result = await service.set_verified(alumnus.id)

        assert user.is_verified_alumnus is True
        assert result.verified is True
        mock_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_verify_unknown(self, mock_db, make_result, college_id) -> None:
        mock_db.execute.return_value = make_result(rows=[])
        service = AlumniService(mock_db, college_id)

        with pytest.raises(AlumnusNotFoundError):
            await service.set_verified(uuid4())

        mock_db.commit.assert_not_called()

    @pytest.mark.asyncio
    async def test_delete_removes_account(self, mock_db, make_result, college_id) -> None:
        alumnus, user, department_name = _row(college_id, verified=True)
        mock_db.execute.return_value = make_result(rows=[(alumnus, user, department_name)])
        service = AlumniService(mock_db, college_id)

        await service.delete_alumnus(alumnus.id)

        deleted = [c.args[0] for c in mock_db.delete.await_args_list]
        assert deleted == [alumnus, user]
