# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Shopping cart endpoints.

- GET /cart - Priced cart
- POST /cart - Add a saved design
- PUT /cart/{item_id} - Change quantity
- DELETE /cart/{item_id} - Remove a line
- DELETE /cart - Empty the cart
"""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from collegehub.api.dependencies import get_app_settings, get_db, require_customer
from collegehub.api.middleware.auth import CurrentUser
from collegehub.core.config import Settings
from collegehub.domains.shop.cart import CartService
from collegehub.domains.shop.errors import ShopForbiddenError, ShopNotFoundError
from collegehub.models.shop import (
    CartItemCreateRequest,
    CartItemUpdateRequest,
    CartResponse,
)

router = APIRouter()


def _get_service(
    db: AsyncSession,
    current_user: CurrentUser,
    settings: Settings,
) -> CartService:
    return CartService(db=db, customer_id=current_user.id, settings=settings.shop)


@router.get("/cart", response_model=CartResponse, summary="Get cart")
async def get_cart(
    current_user: CurrentUser = Depends(require_customer),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> CartResponse:
    return await _get_service(db, current_user, settings).get_cart()


@router.post(
    "/cart",
    response_model=CartResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add to cart",
)
async def add_to_cart(
    data: CartItemCreateRequest,
    current_user: CurrentUser = Depends(require_customer),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> CartResponse:
    try:
        return await _get_service(db, current_user, settings).add_item(
            data.saved_design_id, data.quantity
        )
    except ShopNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ShopForbiddenError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))


@router.put("/cart/{item_id}", response_model=CartResponse, summary="Update quantity")
async def update_cart_item(
    item_id: UUID,
    data: CartItemUpdateRequest,
    current_user: CurrentUser = Depends(require_customer),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> CartResponse:
    try:
        return await _get_service(db, current_user, settings).update_item(
            item_id, data.quantity
        )
    except ShopNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.delete(
    "/cart/{item_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove cart item",
)
async def remove_cart_item(
    item_id: UUID,
    current_user: CurrentUser = Depends(require_customer),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> None:
    try:
        await _get_service(db, current_user, settings).remove_item(item_id)
    except ShopNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.delete("/cart", status_code=status.HTTP_204_NO_CONTENT, summary="Clear cart")
async def clear_cart(
    current_user: CurrentUser = Depends(require_customer),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> None:
    await _get_service(db, current_user, settings).clear()
