# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Saved design endpoints.

- POST /designs - Save a design
- GET /designs - Own designs (optional status filter)
- GET /designs/{design_id} - Own design
- DELETE /designs/{design_id} - Delete a draft design
"""

from uuid import UUID

from fastapi import APIRouter, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from collegehub.api.dependencies import CustomerUser, DBSession
from collegehub.api.middleware.auth import CurrentUser
from collegehub.domains.shop.designs import DesignService
from collegehub.domains.shop.errors import ShopNotFoundError, ShopValidationError
from collegehub.models.shop import (
    DesignStatus,
    SavedDesignCreateRequest,
    SavedDesignListResponse,
    SavedDesignResponse,
)

router = APIRouter()


def _get_service(db: AsyncSession, current_user: CurrentUser) -> DesignService:
    return DesignService(db=db, customer_id=current_user.id)


@router.post(
    "/designs",
    response_model=SavedDesignResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Save design",
)
async def create_design(
    data: SavedDesignCreateRequest,
    current_user: CustomerUser,
    db: DBSession,
) -> SavedDesignResponse:
    try:
        return await _get_service(db, current_user).create_design(data)
    except ShopNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ShopValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("/designs", response_model=SavedDesignListResponse, summary="List own designs")
async def list_designs(
    current_user: CustomerUser,
    db: DBSession,
    design_status: DesignStatus | None = Query(None, alias="status"),
) -> SavedDesignListResponse:
    items, total = await _get_service(db, current_user).list_designs(status=design_status)
    return SavedDesignListResponse(items=items, total=total)


@router.get(
    "/designs/{design_id}",
    response_model=SavedDesignResponse,
    summary="Get own design",
)
async def get_design(
    design_id: UUID,
    current_user: CustomerUser,
    db: DBSession,
) -> SavedDesignResponse:
    try:
        return await _get_service(db, current_user).get_design(design_id)
    except ShopNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.delete(
    "/designs/{design_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete draft design",
)
async def delete_design(
    design_id: UUID,
    current_user: CustomerUser,
    db: DBSession,
) -> None:
    try:
        await _get_service(db, current_user).delete_design(design_id)
    except ShopNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ShopValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
