# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Canvas print shop models.

Catalog:
    Product -> ProductVariation (size and base price)
    AttributeOption (image effects, edge designs, frame options, ...)
    VariationAttributePrice (per-variation override of an option price)
    ModifierBasePrice / VariationModifierPrice (yes/no add-ons such as the
    hanging mechanism and acrylic cover)

Customer side:
    SavedDesign -> SavedDesignAttribute, SavedDesignImage
    ShoppingCartItem, Address
    Order -> OrderAddress, OrderItem -> OrderItemAttribute, OrderItemImage

Customers are ``users`` rows with role CUSTOMER.
"""

from typing import Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Float,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from collegehub.infrastructure.database.models.base import (
    Base,
    TimestampMixin,
    UUIDPrimaryKeyMixin,
    uuid_fk,
)

OPTION_KINDS = (
    "image_effect",
    "edge_design",
    "hanging_mechanism_variety",
    "frame_colour",
    "frame_thickness",
    "product_type",
    "frame_type",
    "floating_frame_colour",
)
APPLICABILITY = ("all", "specific", "canvas", "fabric", "photo")
MODIFIERS = ("hanging_mechanism", "acrylic_cover")


def _in(column: str, values: tuple[str, ...]) -> str:
    return f"{column} IN (" + ", ".join(f"'{v}'" for v in values) + ")"


class Product(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "products"
    __table_args__ = (
        CheckConstraint(_in("category", ("canvas", "fabric", "photo")), name="valid_category"),
        CheckConstraint(_in("type", ("single", "layout", "split")), name="valid_type"),
    )

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    slug: Mapped[str] = mapped_column(String(200), nullable=False, unique=True)
    category: Mapped[str] = mapped_column(String(20), nullable=False)
    type: Mapped[str] = mapped_column(String(20), nullable=False, default="single")
    description: Mapped[Optional[str]] = mapped_column(String(2000))
    image: Mapped[Optional[str]] = mapped_column(String(500))
    status: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class ProductVariation(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "product_variations"
    __table_args__ = (CheckConstraint("price >= 0", name="non_negative_price"),)

    product_id: Mapped[str] = uuid_fk("products.id")
    label: Mapped[str] = mapped_column(String(100), nullable=False)
    horizontal_length: Mapped[float] = mapped_column(Float, nullable=False)
    vertical_length: Mapped[float] = mapped_column(Float, nullable=False)
    price: Mapped[float] = mapped_column(Numeric(10, 2, asdecimal=False), nullable=False)
    image_count: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    layout_key: Mapped[Optional[str]] = mapped_column(String(30))
    status: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    product: Mapped[Product] = relationship(lazy="joined")


class AttributeOption(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "attribute_options"
    __table_args__ = (
        CheckConstraint(_in("kind", OPTION_KINDS), name="valid_kind"),
        CheckConstraint(_in("applicability", APPLICABILITY), name="valid_applicability"),
    )

    kind: Mapped[str] = mapped_column(String(40), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    thumbnail: Mapped[Optional[str]] = mapped_column(String(500))
    applicability: Mapped[str] = mapped_column(String(20), nullable=False, default="all")
    product_id: Mapped[Optional[str]] = uuid_fk("products.id", nullable=True)
    price: Mapped[float] = mapped_column(Numeric(10, 2, asdecimal=False), nullable=False, default=0)
    status: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class VariationAttributePrice(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "variation_attribute_prices"
    __table_args__ = (
        UniqueConstraint("variation_id", "option_id", name="uq_variation_attribute_prices_pair"),
    )

    variation_id: Mapped[str] = uuid_fk("product_variations.id")
    option_id: Mapped[str] = uuid_fk("attribute_options.id")
    price: Mapped[float] = mapped_column(Numeric(10, 2, asdecimal=False), nullable=False)
    status: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class ModifierBasePrice(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "modifier_base_prices"
    __table_args__ = (
        CheckConstraint(_in("modifier", MODIFIERS), name="valid_modifier"),
        CheckConstraint(_in("applicability", APPLICABILITY), name="valid_applicability"),
    )

    modifier: Mapped[str] = mapped_column(String(30), nullable=False, index=True)
    applicability: Mapped[str] = mapped_column(String(20), nullable=False, default="all")
    product_id: Mapped[Optional[str]] = uuid_fk("products.id", nullable=True)
    price: Mapped[float] = mapped_column(Numeric(10, 2, asdecimal=False), nullable=False)
    status: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class VariationModifierPrice(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "variation_modifier_prices"
    __table_args__ = (
        UniqueConstraint("variation_id", "modifier", name="uq_variation_modifier_prices_pair"),
        CheckConstraint(_in("modifier", MODIFIERS), name="valid_modifier"),
    )

    variation_id: Mapped[str] = uuid_fk("product_variations.id")
    modifier: Mapped[str] = mapped_column(String(30), nullable=False)
    price: Mapped[float] = mapped_column(Numeric(10, 2, asdecimal=False), nullable=False)
    status: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class ShippingType(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "shipping_types"

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    price: Mapped[float] = mapped_column(Numeric(10, 2, asdecimal=False), nullable=False, default=0)
    status: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class SavedDesign(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "saved_designs"
    __table_args__ = (
        CheckConstraint(_in("status", ("Draft", "Finalized", "Carted")), name="valid_status"),
    )

    customer_id: Mapped[str] = uuid_fk("users.id")
    variation_id: Mapped[str] = uuid_fk("product_variations.id")
    thumbnail: Mapped[Optional[str]] = mapped_column(String(500))
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="Draft")

    attributes: Mapped[list["SavedDesignAttribute"]] = relationship(
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    images: Mapped[list["SavedDesignImage"]] = relationship(
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="SavedDesignImage.position",
    )


class SavedDesignAttribute(UUIDPrimaryKeyMixin, Base):
    __tablename__ = "saved_design_attributes"
    __table_args__ = (
        UniqueConstraint("saved_design_id", "name", name="uq_saved_design_attributes_name"),
    )

    saved_design_id: Mapped[str] = uuid_fk("saved_designs.id")
    name: Mapped[str] = mapped_column(String(50), nullable=False)
    value: Mapped[str] = mapped_column(String(100), nullable=False)


class SavedDesignImage(UUIDPrimaryKeyMixin, Base):
    __tablename__ = "saved_design_images"

    saved_design_id: Mapped[str] = uuid_fk("saved_designs.id")
    image_url: Mapped[str] = mapped_column(String(1000), nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    offset_x: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    offset_y: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    zoom: Mapped[float] = mapped_column(Float, nullable=False, default=100)


class ShoppingCartItem(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "shopping_cart_items"
    __table_args__ = (
        UniqueConstraint("customer_id", "saved_design_id", name="uq_cart_customer_design"),
        CheckConstraint("quantity >= 1", name="positive_quantity"),
    )

    customer_id: Mapped[str] = uuid_fk("users.id")
    saved_design_id: Mapped[str] = uuid_fk("saved_designs.id")
    quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=1)


class Address(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "addresses"

    customer_id: Mapped[str] = uuid_fk("users.id")
    title: Mapped[Optional[str]] = mapped_column(String(100))
    recipient_name: Mapped[str] = mapped_column(String(200), nullable=False)
    phone_number: Mapped[str] = mapped_column(String(20), nullable=False)
    alternate_phone: Mapped[Optional[str]] = mapped_column(String(20))
    address_line_1: Mapped[str] = mapped_column(String(255), nullable=False)
    address_line_2: Mapped[Optional[str]] = mapped_column(String(255))
    city: Mapped[str] = mapped_column(String(100), nullable=False)
    state: Mapped[str] = mapped_column(String(100), nullable=False)
    postal_code: Mapped[str] = mapped_column(String(20), nullable=False)
    country: Mapped[str] = mapped_column(String(100), nullable=False)
    is_default: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)


class Order(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = "orders"
    __table_args__ = (
        CheckConstraint(
            _in("order_status", ("pending", "processing", "shipped", "delivered", "cancelled")),
            name="valid_order_status",
        ),
        CheckConstraint(
            _in("payment_status", ("pending", "paid", "failed", "refunded")),
            name="valid_payment_status",
        ),
    )

    customer_id: Mapped[str] = uuid_fk("users.id")
    shipping_type_id: Mapped[str] = uuid_fk("shipping_types.id", ondelete="RESTRICT")
    order_status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")
    payment_status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")
    is_same_billing_shipping: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    shipping_price: Mapped[float] = mapped_column(Numeric(10, 2, asdecimal=False), nullable=False, default=0)
    total_amount: Mapped[float] = mapped_column(Numeric(12, 2, asdecimal=False), nullable=False)

    addresses: Mapped[list["OrderAddress"]] = relationship(
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    items: Mapped[list["OrderItem"]] = relationship(
        cascade="all, delete-orphan",
        lazy="selectin",
    )


class OrderAddress(UUIDPrimaryKeyMixin, Base):
    __tablename__ = "order_addresses"
    __table_args__ = (
        CheckConstraint(_in("kind", ("shipping", "billing")), name="valid_kind"),
    )

    order_id: Mapped[str] = uuid_fk("orders.id")
    kind: Mapped[str] = mapped_column(String(10), nullable=False)
    recipient_name: Mapped[str] = mapped_column(String(200), nullable=False)
    phone_number: Mapped[str] = mapped_column(String(20), nullable=False)
    alternate_phone: Mapped[Optional[str]] = mapped_column(String(20))
    address_line_1: Mapped[str] = mapped_column(String(255), nullable=False)
    address_line_2: Mapped[Optional[str]] = mapped_column(String(255))
    city: Mapped[str] = mapped_column(String(100), nullable=False)
    state: Mapped[str] = mapped_column(String(100), nullable=False)
    postal_code: Mapped[str] = mapped_column(String(20), nullable=False)
    country: Mapped[str] = mapped_column(String(100), nullable=False)


class OrderItem(UUIDPrimaryKeyMixin, Base):
    __tablename__ = "order_items"

    order_id: Mapped[str] = uuid_fk("orders.id")
    variation_id: Mapped[str] = uuid_fk("product_variations.id", ondelete="RESTRICT")
    saved_design_id: Mapped[Optional[str]] = uuid_fk(
        "saved_designs.id", nullable=True, ondelete="SET NULL"
    )
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price: Mapped[float] = mapped_column(Numeric(10, 2, asdecimal=False), nullable=False)
    total_price: Mapped[float] = mapped_column(Numeric(12, 2, asdecimal=False), nullable=False)
    thumbnail: Mapped[Optional[str]] = mapped_column(String(500))

    attributes: Mapped[list["OrderItemAttribute"]] = relationship(
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    images: Mapped[list["OrderItemImage"]] = relationship(
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="OrderItemImage.position",
    )


class OrderItemAttribute(UUIDPrimaryKeyMixin, Base):
    __tablename__ = "order_item_attributes"

    order_item_id: Mapped[str] = uuid_fk("order_items.id")
    name: Mapped[str] = mapped_column(String(50), nullable=False)
    value: Mapped[str] = mapped_column(String(100), nullable=False)
    price: Mapped[float] = mapped_column(Numeric(10, 2, asdecimal=False), nullable=False, default=0)


class OrderItemImage(UUIDPrimaryKeyMixin, Base):
    __tablename__ = "order_item_images"

    order_item_id: Mapped[str] = uuid_fk("order_items.id")
    image_url: Mapped[str] = mapped_column(String(1000), nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    offset_x: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    offset_y: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    zoom: Mapped[float] = mapped_column(Float, nullable=False, default=100)
