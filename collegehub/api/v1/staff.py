# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Staff classification API endpoints.

Teacher designations (/designations) and employee categories
(/employee-categories) expose the same operations:
- POST / - Create an entry
- GET / - List entries
- GET /{entry_id} - Get an entry
- PUT /{entry_id} - Update an entry
- DELETE /{entry_id} - Delete an entry

Staff may read; writes require college admin access.
"""

from uuid import UUID

from fastapi import APIRouter, HTTPException, status

from collegehub.api.dependencies import CollegeAdmin, DBSession, StaffUser
from collegehub.domains.staff.service import (
    EmployeeCategoryService,
    StaffLabelExistsError,
    StaffLabelNotFoundError,
    TeacherDesignationService,
)
from collegehub.models.staff import (
    StaffLabelCreateRequest,
    StaffLabelListResponse,
    StaffLabelResponse,
    StaffLabelUpdateRequest,
)


def _label_router(
    service_cls: type[TeacherDesignationService] | type[EmployeeCategoryService],
    noun: str,
    plural: str,
) -> APIRouter:
    router = APIRouter()

    @router.post(
        "",
        response_model=StaffLabelResponse,
        status_code=status.HTTP_201_CREATED,
        summary=f"Create {noun}",
    )
    async def create_entry(
        data: StaffLabelCreateRequest,
        current_user: CollegeAdmin,
        db: DBSession,
    ) -> StaffLabelResponse:
        try:
            return await service_cls(db, current_user.college_id).create_entry(data)
        except StaffLabelExistsError as e:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

    @router.get("", response_model=StaffLabelListResponse, summary=f"List {plural}")
    async def list_entries(current_user: StaffUser, db: DBSession) -> StaffLabelListResponse:
        items, total = await service_cls(db, current_user.college_id).list_entries()
        return StaffLabelListResponse(items=items, total=total)

    @router.get("/{entry_id}", response_model=StaffLabelResponse, summary=f"Get {noun}")
    async def get_entry(
        entry_id: UUID,
        current_user: StaffUser,
        db: DBSession,
    ) -> StaffLabelResponse:
        try:
            return await service_cls(db, current_user.college_id).get_entry(entry_id)
        except StaffLabelNotFoundError as e:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    @router.put("/{entry_id}", response_model=StaffLabelResponse, summary=f"Update {noun}")
    async def update_entry(
        entry_id: UUID,
        data: StaffLabelUpdateRequest,
        current_user: CollegeAdmin,
        db: DBSession,
    ) -> StaffLabelResponse:
        try:
            return await service_cls(db, current_user.college_id).update_entry(entry_id, data)
        except StaffLabelNotFoundError as e:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
        except StaffLabelExistsError as e:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

    @router.delete(
        "/{entry_id}",
        status_code=status.HTTP_204_NO_CONTENT,
        summary=f"Delete {noun}",
    )
    async def delete_entry(
        entry_id: UUID,
        current_user: CollegeAdmin,
        db: DBSession,
    ) -> None:
        try:
            await service_cls(db, current_user.college_id).delete_entry(entry_id)
        except StaffLabelNotFoundError as e:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    return router


router = APIRouter()
router.include_router(
    _label_router(TeacherDesignationService, "teacher designation", "teacher designations"),
    prefix="/designations",
)
router.include_router(
    _label_router(EmployeeCategoryService, "employee category", "employee categories"),
    prefix="/employee-categories",
)
