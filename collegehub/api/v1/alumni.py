# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Alumni API endpoints.

- POST /register - Public alumni self-registration
- GET / - List alumni of the college
- GET /{alumnus_id} - Get alumnus details
- POST /{alumnus_id}/verify - Allow the alumnus to sign in
- POST /{alumnus_id}/unverify - Revoke sign-in
- DELETE /{alumnus_id} - Delete the alumnus and the account

Everything except registration requires college admin access.
"""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from collegehub.api.dependencies import CollegeAdmin, DBSession, get_password_hasher
from collegehub.api.middleware.auth import CurrentUser
from collegehub.api.middleware.rate_limit import RATE_LIMIT_AUTH, get_ip_only, limiter
from collegehub.domains.alumni.service import (
    AlumniService,
    AlumnusExistsError,
    AlumnusNotFoundError,
    AlumnusValidationError,
    register_alumnus,
)
from collegehub.domains.auth.password import PasswordHasher, PasswordPolicyError
from collegehub.models.alumni import (
    AlumnusListResponse,
    AlumnusRegisterRequest,
    AlumnusRegisterResponse,
    AlumnusResponse,
)

router = APIRouter()


def _get_service(db: AsyncSession, current_user: CurrentUser) -> AlumniService:
    return AlumniService(db=db, college_id=current_user.college_id)


@router.post(
    "/register",
    response_model=AlumnusRegisterResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register as alumnus",
    description="The account cannot sign in until a college admin verifies it.",
)
@limiter.limit(RATE_LIMIT_AUTH, key_func=get_ip_only)
async def register(
    request: Request,
    data: AlumnusRegisterRequest,
    db: DBSession,
    password_hasher: PasswordHasher = Depends(get_password_hasher),
) -> AlumnusRegisterResponse:
    try:
        return await register_alumnus(db, password_hasher, data)
    except AlumnusExistsError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except AlumnusValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except PasswordPolicyError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"message": "Password does not meet the policy", "errors": e.errors},
        )


@router.get("", response_model=AlumnusListResponse, summary="List alumni")
async def list_alumni(
    current_user: CollegeAdmin,
    db: DBSession,
    verified: bool | None = Query(None),
    department_id: UUID | None = Query(None),
) -> AlumnusListResponse:
    items, total = await _get_service(db, current_user).list_alumni(
        verified=verified, department_id=department_id
    )
    return AlumnusListResponse(items=items, total=total)


@router.get("/{alumnus_id}", response_model=AlumnusResponse, summary="Get alumnus")
async def get_alumnus(
    alumnus_id: UUID,
    current_user: CollegeAdmin,
    db: DBSession,
) -> AlumnusResponse:
    try:
        return await _get_service(db, current_user).get_alumnus(alumnus_id)
    except AlumnusNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.post("/{alumnus_id}/verify", response_model=AlumnusResponse, summary="Verify alumnus")
async def verify_alumnus(
    alumnus_id: UUID,
    current_user: CollegeAdmin,
    db: DBSession,
) -> AlumnusResponse:
    try:
        return await _get_service(db, current_user).set_verified(alumnus_id, True)
    except AlumnusNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.post(
    "/{alumnus_id}/unverify", response_model=AlumnusResponse, summary="Revoke verification"
)
async def unverify_alumnus(
    alumnus_id: UUID,
    current_user: CollegeAdmin,
    db: DBSession,
) -> AlumnusResponse:
    try:
        return await _get_service(db, current_user).set_verified(alumnus_id, False)
    except AlumnusNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.delete(
    "/{alumnus_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete alumnus",
)
async def delete_alumnus(
    alumnus_id: UUID,
    current_user: CollegeAdmin,
    db: DBSession,
) -> None:
    try:
        await _get_service(db, current_user).delete_alumnus(alumnus_id)
    except AlumnusNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
