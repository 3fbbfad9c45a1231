# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Canvas shop request/response models."""

from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel, Field, model_validator


class DesignStatus(str, Enum):
    DRAFT = "Draft"
    FINALIZED = "Finalized"
    CARTED = "Carted"


# =========================================================================
# Catalog
# =========================================================================


class AttributeOptionResponse(BaseModel):
    id: UUID
    kind: str
    name: str
    thumbnail: str | None = None
    applicability: str
    price: float


class ProductVariationResponse(BaseModel):
    id: UUID
    label: str
    horizontal_length: float
    vertical_length: float
    price: float
    image_count: int
    layout_key: str | None = None


class ProductDetailResponse(BaseModel):
    id: UUID
    name: str
    slug: str
    category: str
    type: str
    description: str | None = None
    image: str | None = None
    variations: list[ProductVariationResponse]
    options: dict[str, list[AttributeOptionResponse]] = Field(
        default_factory=dict,
        description="Applicable attribute options grouped by kind",
    )


class ShippingTypeResponse(BaseModel):
    id: UUID
    name: str
    price: float


class PriceQuoteRequest(BaseModel):
    variation_id: UUID
    attributes: dict[str, str] = Field(default_factory=dict)
    quantity: int = Field(1, ge=1)


class PriceQuoteResponse(BaseModel):
    variation_id: UUID
    quantity: int
    base_price: float
    attribute_prices: dict[str, float]
    unit_price: float
    total_price: float
    currency: str


# =========================================================================
# Saved designs
# =========================================================================


class DesignImageInput(BaseModel):
    image_url: str = Field(..., min_length=1, max_length=1000)
    position: int = Field(0, ge=0)
    offset_x: float = 0.0
    offset_y: float = 0.0
    zoom: float = Field(100.0, gt=0)


class SavedDesignCreateRequest(BaseModel):
    variation_id: UUID
    thumbnail: str | None = Field(None, max_length=500)
    attributes: dict[str, str] = Field(default_factory=dict)
    images: list[DesignImageInput] = Field(..., min_length=1)


class DesignImageResponse(BaseModel):
    image_url: str
    position: int
    offset_x: float
    offset_y: float
    zoom: float


class SavedDesignResponse(BaseModel):
    id: UUID
    variation_id: UUID
    thumbnail: str | None = None
    status: DesignStatus
    attributes: dict[str, str]
    images: list[DesignImageResponse]
    created_at: datetime | None = None


class SavedDesignListResponse(BaseModel):
    items: list[SavedDesignResponse]
    total: int


# =========================================================================
# Cart
# =========================================================================


class CartItemCreateRequest(BaseModel):
    saved_design_id: UUID
    quantity: int = Field(1, ge=1)


class CartItemUpdateRequest(BaseModel):
    quantity: int = Field(..., ge=1)


class CartItemResponse(BaseModel):
    id: UUID
    saved_design_id: UUID
    quantity: int
    variation_id: UUID
    variation_label: str
    product_name: str
    thumbnail: str | None = None
    unit_price: float
    total_price: float
    image_effect: str | None = None
    edge_design: str | None = None
    hanging_mechanism: str | None = None


class CartResponse(BaseModel):
    items: list[CartItemResponse]
    subtotal: float
    currency: str


# =========================================================================
# Addresses
# =========================================================================


class AddressFields(BaseModel):
    recipient_name: str = Field(..., min_length=1, max_length=200)
    phone_number: str = Field(..., min_length=5, max_length=20)
    alternate_phone: str | None = Field(None, max_length=20)
    address_line_1: str = Field(..., min_length=1, max_length=255)
    address_line_2: str | None = Field(None, max_length=255)
    city: str = Field(..., min_length=1, max_length=100)
    state: str = Field(..., min_length=1, max_length=100)
    postal_code: str = Field(..., min_length=3, max_length=20)
    country: str = Field(..., min_length=2, max_length=100)


class AddressCreateRequest(AddressFields):
    title: str | None = Field(None, max_length=100)
    is_default: bool = False


class AddressUpdateRequest(BaseModel):
    title: str | None = Field(None, max_length=100)
    recipient_name: str | None = Field(None, min_length=1, max_length=200)
    phone_number: str | None = Field(None, min_length=5, max_length=20)
    alternate_phone: str | None = Field(None, max_length=20)
    address_line_1: str | None = Field(None, min_length=1, max_length=255)
    address_line_2: str | None = Field(None, max_length=255)
    city: str | None = Field(None, min_length=1, max_length=100)
    state: str | None = Field(None, min_length=1, max_length=100)
    postal_code: str | None = Field(None, min_length=3, max_length=20)
    country: str | None = Field(None, min_length=2, max_length=100)
    is_default: bool | None = None


class AddressResponse(AddressFields):
    id: UUID
    title: str | None = None
    is_default: bool


class AddressListResponse(BaseModel):
    items: list[AddressResponse]
    total: int


# =========================================================================
# Orders
# =========================================================================


class OrderLineRequest(BaseModel):
    saved_design_id: UUID
    quantity: int = Field(..., ge=1)


class PlaceOrderRequest(BaseModel):
    shipping_type_id: UUID
    is_same_billing_shipping: bool = True
    shipping_address: AddressFields
    billing_address: AddressFields | None = None
    items: list[OrderLineRequest] = Field(..., min_length=1)
    total_amount: float = Field(..., ge=0)

    @model_validator(mode="after")
    def billing_required(self) -> "PlaceOrderRequest":
        if not self.is_same_billing_shipping and self.billing_address is None:
            raise ValueError("Billing address is required when it differs from shipping.")
        return self


class OrderAddressResponse(AddressFields):
    kind: str


class OrderItemResponse(BaseModel):
    id: UUID
    variation_id: UUID
    variation_label: str | None = None
    product_name: str | None = None
    quantity: int
    unit_price: float
    total_price: float
    thumbnail: str | None = None
    attributes: dict[str, str] = Field(default_factory=dict)
    images: list[DesignImageResponse] = Field(default_factory=list)


class OrderResponse(BaseModel):
    id: UUID
    shipping_type_id: UUID
    order_status: str
    payment_status: str
    is_same_billing_shipping: bool
    shipping_price: float
    total_amount: float
    addresses: list[OrderAddressResponse]
    items: list[OrderItemResponse]
    created_at: datetime | None = None


class OrderListResponse(BaseModel):
    items: list[OrderResponse]
    total: int


# =========================================================================
# Canvas preview geometry
# =========================================================================


class PointModel(BaseModel):
    x: float = 0.0
    y: float = 0.0


class SizeModel(BaseModel):
    width: float = Field(..., gt=0)
    height: float = Field(..., gt=0)


class InitialZoomRequest(BaseModel):
    natural: SizeModel
    content: SizeModel


class ZoomResponse(BaseModel):
    zoom: float
    position: PointModel


class DragRequest(BaseModel):
    start: PointModel
    client: PointModel
    dims: SizeModel
    zoom: float = Field(..., gt=0)


class ChangeZoomRequest(BaseModel):
    position: PointModel
    zoom: float = Field(..., gt=0)


class CanvasDimensionsRequest(BaseModel):
    mock_id: int
    mock_width: float = Field(..., gt=0)
    mock_height: float = Field(..., gt=0)
    layout_id: str | None = None
    size_label: str | None = None

    @model_validator(mode="after")
    def layout_or_size(self) -> "CanvasDimensionsRequest":
        if not self.layout_id and not self.size_label:
            raise ValueError("Either layout_id or size_label is required.")
        return self


class PreviewBoxRequest(BaseModel):
    variation: SizeModel
    container: SizeModel


class PanelBoxResponse(BaseModel):
    id: str
    left: float
    top: float
    width: float
    height: float


class CanvasPresetsResponse(BaseModel):
    layouts: list[dict]
    sizes: list[dict]
    room_mocks: list[dict]
    image_effects: dict[str, str]
