# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Shop catalog service.

Product detail pages, shipping types and price quotes. Only active rows
are ever exposed.
"""

import logging
from uuid import UUID

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from collegehub.core.config import ShopSettings
from collegehub.domains.shop.errors import ShopNotFoundError
from collegehub.domains.shop.pricing import load_price_book, option_ids_of, quote
from collegehub.infrastructure.database.models import (
    AttributeOption,
    Product,
    ProductVariation,
    ShippingType,
)
from collegehub.models.shop import (
    AttributeOptionResponse,
    PriceQuoteRequest,
    PriceQuoteResponse,
    ProductDetailResponse,
    ProductVariationResponse,
    ShippingTypeResponse,
)

logger = logging.getLogger(__name__)


def media_url(path: str | None, settings: ShopSettings) -> str | None:
    """Prefix stored relative media paths with the media base URL."""
    if not path or path.startswith(("http://", "https://", "/")):
        return path
    return f"{settings.media_base_url.rstrip('/')}/{path}"


class CatalogService:
    def __init__(self, db: AsyncSession, settings: ShopSettings | None = None) -> None:
        self.db = db
        self.settings = settings or ShopSettings()

    async def get_product(self, slug: str) -> ProductDetailResponse:
        """Product with its active variations and applicable options.

        Options apply when their applicability is ``all``, the product's
        category, or ``specific`` to this product.

        Raises:
            ShopNotFoundError: If no active product has the slug.
        """
        result = await self.db.execute(
            select(Product).where(Product.slug == slug, Product.status.is_(True))
        )
        product = result.scalar_one_or_none()
        if not product:
            raise ShopNotFoundError(f"Product '{slug}' not found")

        result = await self.db.execute(
            select(ProductVariation)
            .where(
                ProductVariation.product_id == product.id,
                ProductVariation.status.is_(True),
            )
            .order_by(ProductVariation.price)
        )
        variations = result.scalars().all()

        result = await self.db.execute(
            select(AttributeOption)
            .where(
                AttributeOption.status.is_(True),
                or_(
                    AttributeOption.applicability == "all",
                    AttributeOption.applicability == product.category,
                    (AttributeOption.applicability == "specific")
                    & (AttributeOption.product_id == product.id),
                ),
            )
            .order_by(AttributeOption.kind, AttributeOption.name)
        )
        options: dict[str, list[AttributeOptionResponse]] = {}
        for option in result.scalars().all():
            options.setdefault(option.kind, []).append(
                AttributeOptionResponse(
                    id=UUID(option.id),
                    kind=option.kind,
                    name=option.name,
                    thumbnail=media_url(option.thumbnail, self.settings),
                    applicability=option.applicability,
                    price=option.price,
                )
            )

        return ProductDetailResponse(
            id=UUID(product.id),
            name=product.name,
            slug=product.slug,
            category=product.category,
            type=product.type,
            description=product.description,
            image=media_url(product.image, self.settings),
            variations=[
                ProductVariationResponse(
                    id=UUID(v.id),
                    label=v.label,
                    horizontal_length=v.horizontal_length,
                    vertical_length=v.vertical_length,
                    price=v.price,
                    image_count=v.image_count,
                    layout_key=v.layout_key,
                )
                for v in variations
            ],
            options=options,
        )

    async def list_shipping_types(self) -> list[ShippingTypeResponse]:
        result = await self.db.execute(
            select(ShippingType)
            .where(ShippingType.status.is_(True))
            .order_by(ShippingType.price)
        )
        return [
            ShippingTypeResponse(id=UUID(s.id), name=s.name, price=s.price)
            for s in result.scalars().all()
        ]

    async def get_variation(self, variation_id: UUID | str) -> ProductVariation:
        result = await self.db.execute(
            select(ProductVariation).where(
                ProductVariation.id == str(variation_id),
                ProductVariation.status.is_(True),
            )
        )
        variation = result.scalar_one_or_none()
        if not variation or variation.product is None:
            raise ShopNotFoundError("Product variation not found")
        return variation

    async def quote_price(self, request: PriceQuoteRequest) -> PriceQuoteResponse:
        variation = await self.get_variation(request.variation_id)
        book = await load_price_book(
            self.db, [variation.id], option_ids_of([request.attributes])
        )
        result = quote(variation, request.attributes, request.quantity, book)
        return PriceQuoteResponse(
            variation_id=UUID(variation.id),
            quantity=request.quantity,
            base_price=float(variation.price or 0),
            attribute_prices=result.attribute_prices,
            unit_price=result.unit_price,
            total_price=result.total_price,
            currency=self.settings.currency,
        )
