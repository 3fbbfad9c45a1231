# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for teacher designation and employee category services."""

from uuid import uuid4

import pytest

from collegehub.domains.staff.service import (
    EmployeeCategoryService,
    StaffLabelExistsError,
    StaffLabelNotFoundError,
    TeacherDesignationService,
)
from collegehub.infrastructure.database.models import EmployeeCategory, TeacherDesignation
from collegehub.models.staff import StaffLabelCreateRequest, StaffLabelUpdateRequest


def _designation(college_id: str, name: str = "Assistant Professor", alias: str = "AP"):
    return TeacherDesignation(
        id=str(uuid4()), college_id=college_id, name=name, alias=alias, description=None
    )


class TestTeacherDesignationService:
    @pytest.mark.asyncio
    async def test_create(self, mock_db, make_result, college_id) -> None:
        mock_db.execute.return_value = make_result(one=None)

        async def mock_refresh(obj):
            obj.id = str(uuid4())

        mock_db.refresh.side_effect = mock_refresh
        service = TeacherDesignationService(mock_db, college_id)

        result = await service.create_entry(
            StaffLabelCreateRequest(name="Assistant Professor", alias="AP")
        )

        entry = mock_db.add.call_args[0][0]
        assert isinstance(entry, TeacherDesignation)
        assert entry.college_id == college_id
        assert result.alias == "AP"
        mock_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_create_duplicate_name_or_alias(
        self, mock_db, make_result, college_id
    ) -> None:
        mock_db.execute.return_value = make_result(one=_designation(college_id))
        service = TeacherDesignationService(mock_db, college_id)

        with pytest.raises(StaffLabelExistsError) as exc_info:
            await service.create_entry(StaffLabelCreateRequest(name="Professor", alias="AP"))

        assert str(exc_info.value) == "Designation with this name or alias already exists"
        mock_db.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_list(self, mock_db, make_result, college_id) -> None:
        mock_db.execute.return_value = make_result(
            many=[_designation(college_id), _designation(college_id, "Professor", "P")]
        )
        service = TeacherDesignationService(mock_db, college_id)

        items, total = await service.list_entries()

        assert total == 2
        assert [i.alias for i in items] == ["AP", "P"]

    @pytest.mark.asyncio
    async def test_update_checks_other_entries(self, mock_db, make_result, college_id) -> None:
        designation = _designation(college_id)
        mock_db.execute.side_effect = [
            make_result(one=designation),
            make_result(one=None),
        ]
        service = TeacherDesignationService(mock_db, college_id)

        result = await service.update_entry(
            designation.id, StaffLabelUpdateRequest(name="Associate Professor", alias="ASP")
        )

        assert result.name == "Associate Professor"
        assert designation.alias == "ASP"

    @pytest.mark.asyncio
    async def test_update_description_skips_uniqueness(
        self, mock_db, make_result, college_id
    ) -> None:
        designation = _designation(college_id)
        mock_db.execute.return_value = make_result(one=designation)
        service = TeacherDesignationService(mock_db, college_id)

        await service.update_entry(designation.id, StaffLabelUpdateRequest(description="Grade II"))

        assert mock_db.execute.await_count == 1
        assert designation.description == "Grade II"

    @pytest.mark.asyncio
    async def test_delete_unknown(self, mock_db, make_result, college_id) -> None:
        mock_db.execute.return_value = make_result(one=None)
        service = TeacherDesignationService(mock_db, college_id)

        with pytest.raises(StaffLabelNotFoundError):
            await service.delete_entry(uuid4())

        mock_db.delete.assert_not_called()


class TestEmployeeCategoryService:
    @pytest.mark.asyncio
    async def test_creates_category(self, mock_db, make_result, college_id) -> None:
        mock_db.execute.return_value = make_result(one=None)

        async def mock_refresh(obj):
            obj.id = str(uuid4())

        mock_db.refresh.side_effect = mock_refresh
        service = EmployeeCategoryService(mock_db, college_id)

        result = await service.create_entry(
            StaffLabelCreateRequest(name="Non-teaching", alias="NT", description="Office staff")
        )

        assert isinstance(mock_db.add.call_args[0][0], EmployeeCategory)
        assert result.description == "Office staff"

    @pytest.mark.asyncio
    async def test_not_found_message(self, mock_db, make_result, college_id) -> None:
        mock_db.execute.return_value = make_result(one=None)
        service = EmployeeCategoryService(mock_db, college_id)

        with pytest.raises(StaffLabelNotFoundError) as exc_info:
            await service.get_entry("missing")

        assert str(exc_info.value) == "Category missing not found"
