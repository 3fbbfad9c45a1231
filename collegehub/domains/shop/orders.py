# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Address book and order placement.

Placing an order re-prices every line from the current price rows and
refuses the order when the client's total disagrees with the computed
one at two decimals. The order, its addresses, its items with copied
attributes and images, the design status changes and the cart cleanup
are committed together.
"""

import logging
from uuid import UUID

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from collegehub.domains.shop.errors import ShopNotFoundError, ShopValidationError
from collegehub.domains.shop.pricing import load_price_book, option_ids_of, quote
from collegehub.infrastructure.database.models import (
    Address,
    Order,
    OrderAddress,
    OrderItem,
    OrderItemAttribute,
    OrderItemImage,
    ProductVariation,
    SavedDesign,
    ShippingType,
    ShoppingCartItem,
)
from collegehub.models.shop import (
    AddressCreateRequest,
    AddressFields,
    AddressResponse,
    AddressUpdateRequest,
    DesignImageResponse,
    DesignStatus,
    OrderAddressResponse,
    OrderItemResponse,
    OrderResponse,
    PlaceOrderRequest,
)

logger = logging.getLogger(__name__)

ADDRESS_FIELDS = tuple(AddressFields.model_fields)


class AddressService:
    def __init__(self, db: AsyncSession, customer_id: str) -> None:
        self.db = db
        self.customer_id = customer_id

    async def create_address(self, request: AddressCreateRequest) -> AddressResponse:
        if request.is_default:
            await self._clear_default()
        address = Address(customer_id=self.customer_id, **request.model_dump())
        self.db.add(address)
        await self.db.commit()
        await self.db.refresh(address)

        logger.info("Created address %s for customer %s", address.id, self.customer_id)
        return self._response(address)

    async def list_addresses(self) -> tuple[list[AddressResponse], int]:
        result = await self.db.execute(
            select(Address)
            .where(Address.customer_id == self.customer_id)
            .order_by(Address.is_default.desc(), Address.created_at)
        )
        items = [self._response(a) for a in result.scalars().all()]
        return items, len(items)

    async def update_address(
        self,
        address_id: UUID | str,
        request: AddressUpdateRequest,
    ) -> AddressResponse:
        address = await self._get_address(address_id)
        changes = request.model_dump(exclude_unset=True)
        if changes.get("is_default"):
            await self._clear_default(exclude_id=address.id)
        for field, value in changes.items():
            if value is not None or field in ("title", "alternate_phone", "address_line_2"):
                setattr(address, field, value)

        await self.db.commit()
        await self.db.refresh(address)

        logger.info("Updated address %s", address.id)
        return self._response(address)

    async def delete_address(self, address_id: UUID | str) -> None:
        address = await self._get_address(address_id)
        await self.db.delete(address)
        await self.db.commit()
        logger.info("Deleted address %s", address_id)

    async def _clear_default(self, exclude_id: str | None = None) -> None:
        stmt = (
            update(Address)
            .where(Address.customer_id == self.customer_id, Address.is_default.is_(True))
            .values(is_default=False)
        )
        if exclude_id:
            stmt = stmt.where(Address.id != exclude_id)
        await self.db.execute(stmt)

    async def _get_address(self, address_id: UUID | str) -> Address:
        result = await self.db.execute(
            select(Address).where(
                Address.id == str(address_id),
                Address.customer_id == self.customer_id,
            )
        )
        address = result.scalar_one_or_none()
        if not address:
            raise ShopNotFoundError("Address not found")
        return address

    def _response(self, address: Address) -> AddressResponse:
        return AddressResponse(
            id=UUID(address.id),
            title=address.title,
            is_default=address.is_default,
            **{field: getattr(address, field) for field in ADDRESS_FIELDS},
        )


class OrderService:
    def __init__(self, db: AsyncSession, customer_id: str) -> None:
        self.db = db
        self.customer_id = customer_id

    async def place_order(self, request: PlaceOrderRequest) -> OrderResponse:
        """Create an order from saved designs.

        Raises:
            ShopNotFoundError: If the shipping type or a design is missing.
            ShopValidationError: If the sent total does not match.
        """
        result = await self.db.execute(
            select(ShippingType).where(
                ShippingType.id == str(request.shipping_type_id),
                ShippingType.status.is_(True),
            )
        )
        shipping_type = result.scalar_one_or_none()
        if not shipping_type:
            raise ShopNotFoundError("Shipping type not found")

        design_ids = [str(line.saved_design_id) for line in request.items]
        result = await self.db.execute(
            select(SavedDesign, ProductVariation)
            .join(ProductVariation, ProductVariation.id == SavedDesign.variation_id)
            .where(
                SavedDesign.id.in_(design_ids),
                SavedDesign.customer_id == self.customer_id,
            )
        )
        designs = {design.id: (design, variation) for design, variation in result.all()}
        missing = [d for d in design_ids if d not in designs]
        if missing:
            raise ShopNotFoundError(f"Designs not found: {', '.join(missing)}")

        attribute_sets = {
            design.id: {a.name: a.value for a in design.attributes}
            for design, _ in designs.values()
        }
        book = await load_price_book(
            self.db,
            [variation.id for _, variation in designs.values()],
            option_ids_of(attribute_sets.values()),
        )

        order = Order(
            customer_id=self.customer_id,
            shipping_type_id=shipping_type.id,
            order_status="pending",
            payment_status="pending",
            is_same_billing_shipping=request.is_same_billing_shipping,
            shipping_price=shipping_type.price,
            total_amount=0,
            addresses=[],
            items=[],
        )

        calculated = float(shipping_type.price or 0)
        for line in request.items:
            design, variation = designs[str(line.saved_design_id)]
            attributes = attribute_sets[design.id]
            priced = quote(variation, attributes, line.quantity, book)
            calculated += priced.total_price
            order.items.append(
                OrderItem(
                    variation_id=variation.id,
                    saved_design_id=design.id,
                    quantity=line.quantity,
                    unit_price=priced.unit_price,
                    total_price=priced.total_price,
                    thumbnail=design.thumbnail,
                    attributes=[
                        OrderItemAttribute(
                            name=name,
                            value=value,
                            price=priced.attribute_prices.get(name, 0.0),
                        )
                        for name, value in attributes.items()
                    ],
                    images=[
                        OrderItemImage(
                            image_url=image.image_url,
                            position=image.position,
                            offset_x=image.offset_x,
                            offset_y=image.offset_y,
                            zoom=image.zoom,
                        )
                        for image in design.images
                    ],
                )
            )

        sent = round(request.total_amount, 2)
        calculated = round(calculated, 2)
        if sent != calculated:
            raise ShopValidationError(
                f"Total amount mismatch. Sent: {sent}, Calculated: {calculated}"
            )
        order.total_amount = calculated

        order.addresses.append(
            OrderAddress(kind="shipping", **request.shipping_address.model_dump())
        )
        if not request.is_same_billing_shipping and request.billing_address is not None:
            order.addresses.append(
                OrderAddress(kind="billing", **request.billing_address.model_dump())
            )

        for design, _ in designs.values():
            design.status = DesignStatus.FINALIZED.value

        self.db.add(order)
        await self.db.execute(
            delete(ShoppingCartItem).where(
                ShoppingCartItem.customer_id == self.customer_id,
                ShoppingCartItem.saved_design_id.in_(design_ids),
            )
        )
        await self.db.commit()
        await self.db.refresh(order)

        logger.info(
            "Order %s placed by customer %s: %d items, total %.2f",
            order.id,
            self.customer_id,
            len(order.items),
            calculated,
        )
        return await self._response(order)

    async def list_orders(self) -> tuple[list[OrderResponse], int]:
        result = await self.db.execute(
            select(Order)
            .where(Order.customer_id == self.customer_id)
            .order_by(Order.created_at.desc())
        )
        orders = result.scalars().all()
        items = [await self._response(o) for o in orders]
        return items, len(items)

    async def get_order(self, order_id: UUID | str) -> OrderResponse:
        result = await self.db.execute(
            select(Order).where(
                Order.id == str(order_id),
                Order.customer_id == self.customer_id,
            )
        )
        order = result.scalar_one_or_none()
        if not order:
            raise ShopNotFoundError("Order not found")
        return await self._response(order)

    async def _response(self, order: Order) -> OrderResponse:
        variation_ids = list({item.variation_id for item in order.items})
        variations: dict[str, ProductVariation] = {}
        if variation_ids:
            result = await self.db.execute(
                select(ProductVariation).where(ProductVariation.id.in_(variation_ids))
            )
            variations = {v.id: v for v in result.scalars().all()}

        items = []
        for item in order.items:
            variation = variations.get(item.variation_id)
            items.append(
                OrderItemResponse(
                    id=UUID(item.id),
                    variation_id=UUID(item.variation_id),
                    variation_label=variation.label if variation else None,
                    product_name=variation.product.name if variation else None,
                    quantity=item.quantity,
                    unit_price=item.unit_price,
                    total_price=item.total_price,
                    thumbnail=item.thumbnail,
                    attributes={a.name: a.value for a in item.attributes},
                    images=[
                        DesignImageResponse(
                            image_url=i.image_url,
                            position=i.position,
                            offset_x=i.offset_x,
                            offset_y=i.offset_y,
                            zoom=i.zoom,
                        )
                        for i in item.images
                    ],
                )
            )

        return OrderResponse(
            id=UUID(order.id),
            shipping_type_id=UUID(order.shipping_type_id),
            order_status=order.order_status,
            payment_status=order.payment_status,
            is_same_billing_shipping=order.is_same_billing_shipping,
            shipping_price=order.shipping_price,
            total_amount=order.total_amount,
            addresses=[
                OrderAddressResponse(
                    kind=a.kind, **{field: getattr(a, field) for field in ADDRESS_FIELDS}
                )
                for a in order.addresses
            ],
            items=items,
            created_at=order.created_at,
        )
