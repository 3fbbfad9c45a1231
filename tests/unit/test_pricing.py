# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for design attribute pricing."""

from types import SimpleNamespace

import pytest

from collegehub.domains.shop.pricing import (
    PriceBook,
    is_yes,
    load_price_book,
    option_applies,
    option_ids_of,
    quote,
    resolve_attribute_price,
)


@pytest.fixture
def product():
    return SimpleNamespace(id="prod-1", category="canvas")


@pytest.fixture
def variation(product):
    return SimpleNamespace(id="var-1", price=1000.0, product=product)


def _base(applicability, price, product_id=None, modifier="hanging_mechanism"):
    return SimpleNamespace(
        modifier=modifier, applicability=applicability, price=price, product_id=product_id
    )


def _option(option_id, kind, price, applicability="all", product_id=None):
    return SimpleNamespace(
        id=option_id,
        kind=kind,
        price=price,
        applicability=applicability,
        product_id=product_id,
    )


class TestModifierPrices:
    def test_variation_override_wins(self, variation) -> None:
        book = PriceBook(
            variation_modifiers={("var-1", "hanging_mechanism"): 150.0},
            base_modifiers=[_base("all", 50.0)],
        )

        assert resolve_attribute_price("hanging_mechanism", "Yes", variation, book) == 150.0

    def test_only_yes_is_priced(self, variation) -> None:
        book = PriceBook(variation_modifiers={("var-1", "acrylic_cover"): 300.0})

        assert resolve_attribute_price("acrylic_cover", "no", variation, book) == 0
        assert resolve_attribute_price("acrylic_cover", " YES ", variation, book) == 300.0

    def test_specific_beats_category_beats_all(self, variation) -> None:
        rows = [_base("all", 50.0), _base("canvas", 80.0), _base("specific", 120.0, "prod-1")]

        assert resolve_attribute_price(
            "hanging_mechanism", "yes", variation, PriceBook(base_modifiers=rows)
        ) == 120.0
        assert resolve_attribute_price(
            "hanging_mechanism", "yes", variation, PriceBook(base_modifiers=rows[:2])
        ) == 80.0

    def test_other_products_and_categories_ignored(self, variation) -> None:
        rows = [
            _base("specific", 500.0, "prod-2"),
            _base("fabric", 400.0),
            _base("all", 60.0, modifier="acrylic_cover"),
        ]

        assert resolve_attribute_price(
            "hanging_mechanism", "yes", variation, PriceBook(base_modifiers=rows)
        ) == 0


class TestOptionPrices:
    def test_variation_override_wins(self, variation) -> None:
        book = PriceBook(
            variation_options={("var-1", "opt-1"): 250.0},
            options={"opt-1": _option("opt-1", "image_effect", 100.0)},
        )

        assert resolve_attribute_price("image_effect", "opt-1", variation, book) == 250.0

    def test_option_price_by_applicability(self, variation) -> None:
        book = PriceBook(
            options={
                "all": _option("all", "edge_design", 100.0),
                "canvas": _option("canvas", "edge_design", 110.0, "canvas"),
                "fabric": _option("fabric", "edge_design", 120.0, "fabric"),
                "mine": _option("mine", "edge_design", 130.0, "specific", "prod-1"),
                "theirs": _option("theirs", "edge_design", 140.0, "specific", "prod-2"),
            }
        )

        prices = {
            key: resolve_attribute_price("edge_design", key, variation, book)
            for key in book.options
        }

        assert prices == {"all": 100.0, "canvas": 110.0, "fabric": 0, "mine": 130.0, "theirs": 0}

    def test_kind_mismatch_costs_nothing(self, variation) -> None:
        book = PriceBook(options={"opt-1": _option("opt-1", "frame_colour", 90.0)})

        assert resolve_attribute_price("edge_design", "opt-1", variation, book) == 0

    def test_unknown_attribute_and_empty_value(self, variation) -> None:
        book = PriceBook(variation_modifiers={("var-1", "hanging_mechanism"): 150.0})

        assert resolve_attribute_price("engraving", "yes", variation, book) == 0
        assert resolve_attribute_price("hanging_mechanism", "", variation, book) == 0


class TestQuote:
    def test_unit_and_total_price(self, variation) -> None:
        book = PriceBook(
            variation_modifiers={("var-1", "hanging_mechanism"): 150.0},
            options={"opt-1": _option("opt-1", "image_effect", 200.0)},
        )

        result = quote(
            variation,
            {"hanging_mechanism": "yes", "image_effect": "opt-1", "acrylic_cover": "no"},
            quantity=2,
            book=book,
        )

        assert result.unit_price == 1350.0
        assert result.total_price == 2700.0
        assert result.attribute_prices == {
            "hanging_mechanism": 150.0,
            "image_effect": 200.0,
            "acrylic_cover": 0,
        }


class TestHelpers:
    def test_is_yes(self) -> None:
        assert is_yes("Yes")
        assert not is_yes("y")

    def test_option_applies(self, product) -> None:
        assert option_applies(_option("a", "edge_design", 0), product)
        assert option_applies(_option("b", "edge_design", 0, "canvas"), product)
        assert not option_applies(_option("c", "edge_design", 0, "photo"), product)
        assert not option_applies(_option("d", "edge_design", 0, "specific", "prod-2"), product)

    def test_option_ids_skip_modifiers(self) -> None:
        ids = option_ids_of(
            [
                {"image_effect": "opt-1", "hanging_mechanism": "yes"},
                {"edge_design": "opt-2", "frame_colour": ""},
            ]
        )

        assert ids == {"opt-1", "opt-2"}


class TestLoadPriceBook:
    @pytest.mark.asyncio
    async def test_no_variations_skips_queries(self, mock_db) -> None:
        book = await load_price_book(mock_db, [])

        assert book == PriceBook()
        mock_db.execute.assert_not_called()

    @pytest.mark.asyncio
    async def test_loads_all_tables(self, mock_db, make_result) -> None:
        modifier_row = SimpleNamespace(variation_id="var-1", modifier="acrylic_cover", price=300.0)
        base_row = _base("all", 50.0)
        option_price = SimpleNamespace(variation_id="var-1", option_id="opt-1", price=75.0)
        option = _option("opt-1", "image_effect", 20.0)
        mock_db.execute.side_effect = [
            make_result(many=[modifier_row]),
            make_result(many=[base_row]),
            make_result(many=[option_price]),
            make_result(many=[option]),
        ]

        book = await load_price_book(mock_db, ["var-1", "var-1"], ["opt-1"])

        assert book.variation_modifiers == {("var-1", "acrylic_cover"): 300.0}
        assert book.base_modifiers == [base_row]
        assert book.variation_options == {("var-1", "opt-1"): 75.0}
        assert book.options == {"opt-1": option}

    @pytest.mark.asyncio
    async def test_without_options_runs_two_queries(self, mock_db, make_result) -> None:
        mock_db.execute.side_effect = [make_result(), make_result()]

        await load_price_book(mock_db, ["var-1"])

        assert mock_db.execute.await_count == 2
