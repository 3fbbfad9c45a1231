# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Shopping cart service.

Cart lines reference saved designs. Prices are never stored on the cart;
every listing re-prices each line from the current price rows.
"""

import logging
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from collegehub.core.config import ShopSettings
from collegehub.domains.shop.errors import ShopForbiddenError, ShopNotFoundError
from collegehub.domains.shop.pricing import (
    PriceBook,
    load_price_book,
    option_ids_of,
    quote,
)
from collegehub.infrastructure.database.models import (
    ProductVariation,
    SavedDesign,
    ShoppingCartItem,
)
from collegehub.models.shop import CartItemResponse, CartResponse, DesignStatus

logger = logging.getLogger(__name__)


def _option_name(book: PriceBook, option_id: str | None) -> str | None:
    if not option_id:
        return None
    option = book.options.get(option_id)
    return option.name if option is not None else None


class CartService:
    def __init__(
        self,
        db: AsyncSession,
        customer_id: str,
        settings: ShopSettings | None = None,
    ) -> None:
        self.db = db
        self.customer_id = customer_id
        self.settings = settings or ShopSettings()

    async def add_item(self, saved_design_id: UUID | str, quantity: int) -> CartResponse:
        """Put a saved design in the cart and mark it Carted.

        Adding a design already in the cart raises its quantity.

        Raises:
            ShopNotFoundError: If the design does not exist.
            ShopForbiddenError: If the design belongs to another customer.
        """
        result = await self.db.execute(
            select(SavedDesign).where(SavedDesign.id == str(saved_design_id))
        )
        design = result.scalar_one_or_none()
        if not design:
            raise ShopNotFoundError("Design not found")
        if design.customer_id != self.customer_id:
            raise ShopForbiddenError("This design does not belong to you")

        result = await self.db.execute(
            select(ShoppingCartItem).where(
                ShoppingCartItem.customer_id == self.customer_id,
                ShoppingCartItem.saved_design_id == design.id,
            )
        )
        item = result.scalar_one_or_none()
        if item:
            item.quantity += quantity
        else:
            self.db.add(
                ShoppingCartItem(
                    customer_id=self.customer_id,
                    saved_design_id=design.id,
                    quantity=quantity,
                )
            )
        design.status = DesignStatus.CARTED.value
        await self.db.commit()

        logger.info("Customer %s carted design %s", self.customer_id, design.id)
        return await self.get_cart()

    async def get_cart(self) -> CartResponse:
        result = await self.db.execute(
            select(ShoppingCartItem, SavedDesign, ProductVariation)
            .join(SavedDesign, SavedDesign.id == ShoppingCartItem.saved_design_id)
            .join(ProductVariation, ProductVariation.id == SavedDesign.variation_id)
            .where(ShoppingCartItem.customer_id == self.customer_id)
            .order_by(ShoppingCartItem.created_at)
        )
        rows = result.all()

        attribute_sets = [
            {a.name: a.value for a in design.attributes} for _, design, _ in rows
        ]
        book = await load_price_book(
            self.db,
            [variation.id for _, _, variation in rows],
            option_ids_of(attribute_sets),
        )

        items = []
        for (item, design, variation), attributes in zip(rows, attribute_sets):
            priced = quote(variation, attributes, item.quantity, book)
            items.append(
                CartItemResponse(
                    id=UUID(item.id),
                    saved_design_id=UUID(design.id),
                    quantity=item.quantity,
                    variation_id=UUID(variation.id),
                    variation_label=variation.label,
                    product_name=variation.product.name,
                    thumbnail=design.thumbnail,
                    unit_price=priced.unit_price,
                    total_price=priced.total_price,
                    image_effect=_option_name(book, attributes.get("image_effect")),
                    edge_design=_option_name(book, attributes.get("edge_design")),
                    hanging_mechanism=attributes.get("hanging_mechanism"),
                )
            )

        return CartResponse(
            items=items,
            subtotal=sum(i.total_price for i in items),
            currency=self.settings.currency,
        )

    async def update_item(self, item_id: UUID | str, quantity: int) -> CartResponse:
        item = await self._get_item(item_id)
        item.quantity = quantity
        await self.db.commit()
        logger.info("Cart item %s quantity set to %d", item.id, quantity)
        return await self.get_cart()

    async def remove_item(self, item_id: UUID | str) -> None:
        item = await self._get_item(item_id)
        await self.db.delete(item)
        await self.db.commit()
        logger.info("Removed cart item %s", item_id)

    async def clear(self) -> None:
        await self.db.execute(
            delete(ShoppingCartItem).where(ShoppingCartItem.customer_id == self.customer_id)
        )
        await self.db.commit()
        logger.info("Cleared cart of customer %s", self.customer_id)

    async def _get_item(self, item_id: UUID | str) -> ShoppingCartItem:
        result = await self.db.execute(
            select(ShoppingCartItem).where(
                ShoppingCartItem.id == str(item_id),
                ShoppingCartItem.customer_id == self.customer_id,
            )
        )
        item = result.scalar_one_or_none()
        if not item:
            raise ShopNotFoundError("Cart item not found")
        return item
