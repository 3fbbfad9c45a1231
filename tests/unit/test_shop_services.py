# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the canvas shop services (designs, cart, addresses, orders)."""

from datetime import datetime, timezone
from types import SimpleNamespace
from uuid import UUID, uuid4

import pytest

from collegehub.core.config import ShopSettings
from collegehub.domains.shop.cart import CartService
from collegehub.domains.shop.designs import DesignService, max_images
from collegehub.domains.shop.errors import (
    ShopForbiddenError,
    ShopNotFoundError,
    ShopValidationError,
)
from collegehub.domains.shop.orders import AddressService, OrderService
from collegehub.infrastructure.database.models import (
    Address,
    Order,
    SavedDesign,
    ShoppingCartItem,
)
from collegehub.models.shop import (
    AddressCreateRequest,
    AddressFields,
    DesignImageInput,
    DesignStatus,
    OrderLineRequest,
    PlaceOrderRequest,
    SavedDesignCreateRequest,
)


@pytest.fixture
def customer_id(user_id) -> str:
    return user_id


@pytest.fixture
def product():
    return SimpleNamespace(
        id=str(uuid4()), name="Canvas Print", category="canvas", type="single"
    )


@pytest.fixture
def variation(product):
    return SimpleNamespace(
        id=str(uuid4()), label="12x18", price=1000.0, image_count=1, product=product
    )


def _images(count: int) -> list[DesignImageInput]:
    return [
        DesignImageInput(image_url=f"https://cdn.example.com/{i}.jpg", position=i)
        for i in range(count)
    ]


def _design(customer_id: str, variation, attributes: dict[str, str] | None = None, status="Draft"):
    return SimpleNamespace(
        id=str(uuid4()),
        customer_id=customer_id,
        variation_id=variation.id,
        thumbnail="thumbs/1.png",
        status=status,
        attributes=[SimpleNamespace(name=k, value=v) for k, v in (attributes or {}).items()],
        images=[
            SimpleNamespace(
                image_url="https://cdn.example.com/0.jpg",
                position=0,
                offset_x=0.0,
                offset_y=0.0,
                zoom=100.0,
            )
        ],
    )


def _modifier_price(variation, modifier: str, price: float):
    return SimpleNamespace(variation_id=variation.id, modifier=modifier, price=price)


async def _stamp(obj) -> None:
    obj.id = obj.id or str(uuid4())
    obj.created_at = datetime.now(timezone.utc)


class TestDesigns:
    def test_max_images(self, variation) -> None:
        assert max_images(variation) == 1
        variation.product.type = "layout"
        variation.image_count = 3
        assert max_images(variation) == 3

    @pytest.mark.asyncio
    async def test_create_design_as_draft(
        self, mock_db, make_result, customer_id, variation
    ) -> None:
        option = SimpleNamespace(
            id=str(uuid4()), kind="image_effect", name="Sepia", applicability="all", product_id=None
        )
        mock_db.execute.side_effect = [
            make_result(one=variation),
            make_result(many=[option]),
        ]
        mock_db.refresh.side_effect = _stamp

        result = await DesignService(mock_db, customer_id).create_design(
            SavedDesignCreateRequest(
                variation_id=UUID(variation.id),
                attributes={"hanging_mechanism": "Yes", "image_effect": option.id},
                images=_images(1),
            )
        )

        design = mock_db.add.call_args[0][0]
        assert isinstance(design, SavedDesign)
        assert design.status == "Draft"
        assert result.status == DesignStatus.DRAFT
        assert result.attributes == {"hanging_mechanism": "yes", "image_effect": option.id}
        assert len(result.images) == 1

    @pytest.mark.asyncio
    async def test_unsupported_attribute(
        self, mock_db, make_result, customer_id, variation
    ) -> None:
        mock_db.execute.return_value = make_result(one=variation)

        with pytest.raises(ShopValidationError) as exc_info:
            await DesignService(mock_db, customer_id).create_design(
                SavedDesignCreateRequest(
                    variation_id=UUID(variation.id),
                    attributes={"glitter": "yes"},
                    images=_images(1),
                )
            )

        assert str(exc_info.value) == "Unsupported attribute: glitter"

    @pytest.mark.asyncio
    async def test_modifier_must_be_yes_or_no(
        self, mock_db, make_result, customer_id, variation
    ) -> None:
        mock_db.execute.return_value = make_result(one=variation)

        with pytest.raises(ShopValidationError):
            await DesignService(mock_db, customer_id).create_design(
                SavedDesignCreateRequest(
                    variation_id=UUID(variation.id),
                    attributes={"acrylic_cover": "maybe"},
                    images=_images(1),
                )
            )

    @pytest.mark.asyncio
    async def test_option_for_other_product(
        self, mock_db, make_result, customer_id, variation
    ) -> None:
        option = SimpleNamespace(
            id=str(uuid4()),
            kind="edge_design",
            name="Mirror Edge",
            applicability="specific",
            product_id=str(uuid4()),
        )
        mock_db.execute.side_effect = [
            make_result(one=variation),
            make_result(many=[option]),
        ]

        with pytest.raises(ShopValidationError) as exc_info:
            await DesignService(mock_db, customer_id).create_design(
                SavedDesignCreateRequest(
                    variation_id=UUID(variation.id),
                    attributes={"edge_design": option.id},
                    images=_images(1),
                )
            )

        assert str(exc_info.value) == "Mirror Edge is not available for this product"

    @pytest.mark.asyncio
    async def test_too_many_images(self, mock_db, make_result, customer_id, variation) -> None:
        mock_db.execute.return_value = make_result(one=variation)

        with pytest.raises(ShopValidationError) as exc_info:
            await DesignService(mock_db, customer_id).create_design(
                SavedDesignCreateRequest(variation_id=UUID(variation.id), images=_images(2))
            )

        assert str(exc_info.value) == "This product accepts at most 1 image"

    @pytest.mark.asyncio
    async def test_only_drafts_are_deleted(
        self, mock_db, make_result, customer_id, variation
    ) -> None:
        mock_db.execute.return_value = make_result(
            one=_design(customer_id, variation, status="Carted")
        )

        with pytest.raises(ShopValidationError):
            await DesignService(mock_db, customer_id).delete_design(uuid4())
        mock_db.delete.assert_not_called()


class TestCart:
    @pytest.mark.asyncio
    async def test_adding_carted_design_raises_quantity(
        self, mock_db, make_result, customer_id, variation
    ) -> None:
        design = _design(customer_id, variation, {"hanging_mechanism": "yes"})
        item = ShoppingCartItem(
            id=str(uuid4()), customer_id=customer_id, saved_design_id=design.id, quantity=1
        )
        mock_db.execute.side_effect = [
            make_result(one=design),
            make_result(one=item),
            make_result(rows=[(item, design, variation)]),
            make_result(many=[_modifier_price(variation, "hanging_mechanism", 150.0)]),
            make_result(many=[]),
        ]

        cart = await CartService(mock_db, customer_id, ShopSettings()).add_item(design.id, 2)

        assert item.quantity == 3
        assert design.status == "Carted"
        mock_db.add.assert_not_called()
        line = cart.items[0]
        assert line.unit_price == 1150.0
        assert line.total_price == 3450.0
        assert line.hanging_mechanism == "yes"
        assert cart.subtotal == 3450.0

    @pytest.mark.asyncio
    async def test_new_design_creates_line(
        self, mock_db, make_result, customer_id, variation
    ) -> None:
        design = _design(customer_id, variation)
        mock_db.execute.side_effect = [
            make_result(one=design),
            make_result(one=None),
            make_result(rows=[]),
        ]

        cart = await CartService(mock_db, customer_id).add_item(design.id, 1)

        item = mock_db.add.call_args[0][0]
        assert isinstance(item, ShoppingCartItem)
        assert item.quantity == 1
        assert cart.items == []

    @pytest.mark.asyncio
    async def test_foreign_design(self, mock_db, make_result, customer_id, variation) -> None:
        mock_db.execute.return_value = make_result(one=_design(str(uuid4()), variation))

        with pytest.raises(ShopForbiddenError):
            await CartService(mock_db, customer_id).add_item(uuid4(), 1)

    @pytest.mark.asyncio
    async def test_remove_missing_item(self, mock_db, make_result, customer_id) -> None:
        mock_db.execute.return_value = make_result(one=None)

        with pytest.raises(ShopNotFoundError):
            await CartService(mock_db, customer_id).remove_item(uuid4())


def _address_fields() -> AddressFields:
    return AddressFields(
        recipient_name="Asha Rao",
        phone_number="9876543210",
        address_line_1="12 MG Road",
        city="Bengaluru",
        state="Karnataka",
        postal_code="560001",
        country="India",
    )


class TestAddresses:
    @pytest.mark.asyncio
    async def test_new_default_clears_previous(self, mock_db, customer_id) -> None:
        mock_db.refresh.side_effect = _stamp
        request = AddressCreateRequest(**_address_fields().model_dump(), is_default=True)

        result = await AddressService(mock_db, customer_id).create_address(request)

        mock_db.execute.assert_awaited_once()
        address = mock_db.add.call_args[0][0]
        assert isinstance(address, Address)
        assert result.is_default is True
        assert result.city == "Bengaluru"


class TestPlaceOrder:
    def _request(self, design, quantity: int, total: float) -> PlaceOrderRequest:
        return PlaceOrderRequest(
            shipping_type_id=uuid4(),
            shipping_address=_address_fields(),
            items=[OrderLineRequest(saved_design_id=UUID(design.id), quantity=quantity)],
            total_amount=total,
        )

    @pytest.mark.asyncio
    async def test_place_order(self, mock_db, make_result, customer_id, variation) -> None:
        shipping = SimpleNamespace(id=str(uuid4()), price=50.0)
        design = _design(customer_id, variation, {"acrylic_cover": "yes"}, status="Carted")
        mock_db.execute.side_effect = [
            make_result(one=shipping),
            make_result(rows=[(design, variation)]),
            make_result(many=[_modifier_price(variation, "acrylic_cover", 300.0)]),
            make_result(many=[]),
            make_result(),
            make_result(many=[variation]),
        ]

        async def stamp_order(order):
            await _stamp(order)
            for item in order.items:
                item.id = str(uuid4())

        mock_db.refresh.side_effect = stamp_order

        result = await OrderService(mock_db, customer_id).place_order(
            self._request(design, 2, 2650.0)
        )

        order = mock_db.add.call_args[0][0]
        assert isinstance(order, Order)
        assert order.total_amount == 2650.0
        assert design.status == "Finalized"
        assert [a.kind for a in order.addresses] == ["shipping"]
        item = order.items[0]
        assert (item.unit_price, item.total_price) == (1300.0, 2600.0)
        assert {a.name: a.price for a in item.attributes} == {"acrylic_cover": 300.0}
        assert len(item.images) == 1
        assert result.items[0].product_name == "Canvas Print"
        assert mock_db.execute.await_count == 6
        mock_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_total_mismatch(self, mock_db, make_result, customer_id, variation) -> None:
        shipping = SimpleNamespace(id=str(uuid4()), price=50.0)
        design = _design(customer_id, variation)
        mock_db.execute.side_effect = [
            make_result(one=shipping),
            make_result(rows=[(design, variation)]),
            make_result(many=[]),
            make_result(many=[]),
        ]

        with pytest.raises(ShopValidationError) as exc_info:
            await OrderService(mock_db, customer_id).place_order(self._request(design, 2, 100))

        assert str(exc_info.value) == "Total amount mismatch. Sent: 100.0, Calculated: 2050.0"
        assert design.status == "Draft"
        mock_db.add.assert_not_called()
        mock_db.commit.assert_not_called()

    @pytest.mark.asyncio
    async def test_foreign_design_is_missing(
        self, mock_db, make_result, customer_id, variation
    ) -> None:
        mock_db.execute.side_effect = [
            make_result(one=SimpleNamespace(id=str(uuid4()), price=50.0)),
            make_result(rows=[]),
        ]

        with pytest.raises(ShopNotFoundError):
            await OrderService(mock_db, customer_id).place_order(
                self._request(_design(str(uuid4()), variation), 1, 1050.0)
            )
