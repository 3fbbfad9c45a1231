# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Shop catalog endpoints (public, mounted under /catalog).

- GET /products/{slug} - Product detail with variations and options
- GET /shipping-types - Active shipping types
- POST /quote - Price a variation with attribute choices
"""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from collegehub.api.dependencies import get_app_settings, get_db
from collegehub.core.config import Settings
from collegehub.domains.shop.catalog import CatalogService
from collegehub.domains.shop.errors import ShopNotFoundError
from collegehub.models.shop import (
    PriceQuoteRequest,
    PriceQuoteResponse,
    ProductDetailResponse,
    ShippingTypeResponse,
)

router = APIRouter()


@router.get(
    "/products/{slug}",
    response_model=ProductDetailResponse,
    summary="Product detail",
)
async def get_product(
    slug: str,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> ProductDetailResponse:
    try:
        return await CatalogService(db, settings.shop).get_product(slug)
    except ShopNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.get(
    "/shipping-types",
    response_model=list[ShippingTypeResponse],
    summary="Shipping types",
)
async def list_shipping_types(
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> list[ShippingTypeResponse]:
    return await CatalogService(db, settings.shop).list_shipping_types()


@router.post("/quote", response_model=PriceQuoteResponse, summary="Price quote")
async def quote_price(
    data: PriceQuoteRequest,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> PriceQuoteResponse:
    try:
        return await CatalogService(db, settings.shop).quote_price(data)
    except ShopNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
