# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Address book and order endpoints.

- POST /addresses, GET /addresses, PUT /addresses/{id}, DELETE /addresses/{id}
- POST /orders - Place an order from saved designs
- GET /orders - Own orders
- GET /orders/{order_id} - Own order
"""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from collegehub.api.dependencies import get_db, require_customer
from collegehub.api.middleware.auth import CurrentUser
from collegehub.api.middleware.rate_limit import RATE_LIMIT_EXPENSIVE, limiter
from collegehub.domains.shop.errors import ShopNotFoundError, ShopValidationError
from collegehub.domains.shop.orders import AddressService, OrderService
from collegehub.models.shop import (
    AddressCreateRequest,
    AddressListResponse,
    AddressResponse,
    AddressUpdateRequest,
    OrderListResponse,
    OrderResponse,
    PlaceOrderRequest,
)

router = APIRouter()


# =========================================================================
# Addresses
# =========================================================================


@router.post(
    "/addresses",
    response_model=AddressResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add address",
)
async def create_address(
    data: AddressCreateRequest,
    current_user: CurrentUser = Depends(require_customer),
    db: AsyncSession = Depends(get_db),
) -> AddressResponse:
    return await AddressService(db, current_user.id).create_address(data)


@router.get("/addresses", response_model=AddressListResponse, summary="List addresses")
async def list_addresses(
    current_user: CurrentUser = Depends(require_customer),
    db: AsyncSession = Depends(get_db),
) -> AddressListResponse:
    items, total = await AddressService(db, current_user.id).list_addresses()
    return AddressListResponse(items=items, total=total)


@router.put(
    "/addresses/{address_id}",
    response_model=AddressResponse,
    summary="Update address",
)
async def update_address(
    address_id: UUID,
    data: AddressUpdateRequest,
    current_user: CurrentUser = Depends(require_customer),
    db: AsyncSession = Depends(get_db),
) -> AddressResponse:
    try:
        return await AddressService(db, current_user.id).update_address(address_id, data)
    except ShopNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.delete(
    "/addresses/{address_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete address",
)
async def delete_address(
    address_id: UUID,
    current_user: CurrentUser = Depends(require_customer),
    db: AsyncSession = Depends(get_db),
) -> None:
    try:
        await AddressService(db, current_user.id).delete_address(address_id)
    except ShopNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


# =========================================================================
# Orders
# =========================================================================


@router.post(
    "/orders",
    response_model=OrderResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Place order",
)
@limiter.limit(RATE_LIMIT_EXPENSIVE)
async def place_order(
    request: Request,
    data: PlaceOrderRequest,
    current_user: CurrentUser = Depends(require_customer),
    db: AsyncSession = Depends(get_db),
) -> OrderResponse:
    try:
        return await OrderService(db, current_user.id).place_order(data)
    except ShopNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ShopValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.get("/orders", response_model=OrderListResponse, summary="List own orders")
async def list_orders(
    current_user: CurrentUser = Depends(require_customer),
    db: AsyncSession = Depends(get_db),
) -> OrderListResponse:
    items, total = await OrderService(db, current_user.id).list_orders()
    return OrderListResponse(items=items, total=total)


@router.get("/orders/{order_id}", response_model=OrderResponse, summary="Get own order")
async def get_order(
    order_id: UUID,
    current_user: CurrentUser = Depends(require_customer),
    db: AsyncSession = Depends(get_db),
) -> OrderResponse:
    try:
        return await OrderService(db, current_user.id).get_order(order_id)
    except ShopNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
