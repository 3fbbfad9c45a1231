# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Attribute price resolution for canvas designs.

A design's unit price is its variation price plus the price of every
chosen attribute. Prices are looked up in a ``PriceBook`` holding the
active price rows relevant to a set of variations, so resolution itself
is synchronous and can be repeated for every cart line without extra
queries.

Resolution rules:
    * an empty value costs nothing;
    * ``hanging_mechanism`` and ``acrylic_cover`` ("yes" to add) use the
      variation's own modifier price, falling back to the base modifier
      price with the most specific applicability
      (specific > product category > all);
    * option attributes (image effect, edge design, frame options, ...)
      use the variation's override for that option, falling back to the
      option price when the option applies to the variation's product;
    * unknown attributes cost nothing.
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from collegehub.infrastructure.database.models import (
    AttributeOption,
    ModifierBasePrice,
    VariationAttributePrice,
    VariationModifierPrice,
)
from collegehub.infrastructure.database.models.shop import MODIFIERS, OPTION_KINDS

logger = logging.getLogger(__name__)

CATEGORIES = ("canvas", "fabric", "photo")


@dataclass
class PriceBook:
    """Active price rows keyed for lookup.

    Attributes:
        variation_modifiers: (variation id, modifier) -> price.
        base_modifiers: Active ModifierBasePrice rows.
        variation_options: (variation id, option id) -> price.
        options: option id -> active AttributeOption.
    """

    variation_modifiers: dict[tuple[str, str], float] = field(default_factory=dict)
    base_modifiers: list = field(default_factory=list)
    variation_options: dict[tuple[str, str], float] = field(default_factory=dict)
    options: dict[str, object] = field(default_factory=dict)


@dataclass(frozen=True)
class Quote:
    unit_price: float
    total_price: float
    attribute_prices: dict[str, float]


def is_yes(value) -> bool:
    return str(value).strip().lower() == "yes"


def _modifier_price(modifier: str, variation, book: PriceBook) -> float:
    override = book.variation_modifiers.get((variation.id, modifier))
    if override is not None:
        return float(override)

    product = variation.product
    rank = {"specific": 0, product.category: 1, "all": 2}
    candidates = [
        row
        for row in book.base_modifiers
        if row.modifier == modifier
        and (
            row.applicability == "all"
            or row.applicability == product.category
            or (row.applicability == "specific" and row.product_id == product.id)
        )
    ]
    if not candidates:
        return 0.0
    best = min(candidates, key=lambda row: rank.get(row.applicability, len(rank)))
    return float(best.price)


def _option_price(kind: str, option_id: str, variation, book: PriceBook) -> float:
    override = book.variation_options.get((variation.id, option_id))
    if override is not None:
        return float(override)

    option = book.options.get(option_id)
    if option is None or option.kind != kind:
        return 0.0

    product = variation.product
    applicability = option.applicability or "all"
    if applicability == "all":
        return float(option.price or 0)
    if applicability == "specific":
        return float(option.price or 0) if option.product_id == product.id else 0.0
    if applicability in CATEGORIES:
        return float(option.price or 0) if product.category == applicability else 0.0
    return 0.0


def resolve_attribute_price(attribute_name: str, value, variation, book: PriceBook) -> float:
    """Price of one design attribute for a variation."""
    if not value:
        return 0.0
    if attribute_name in MODIFIERS:
        return _modifier_price(attribute_name, variation, book) if is_yes(value) else 0.0
    if attribute_name in OPTION_KINDS:
        return _option_price(attribute_name, str(value), variation, book)
    return 0.0


def quote(
    variation,
    attributes: Mapping[str, str],
    quantity: int,
    book: PriceBook,
) -> Quote:
    attribute_prices = {
        name: resolve_attribute_price(name, value, variation, book)
        for name, value in attributes.items()
    }
    unit_price = float(variation.price or 0) + sum(attribute_prices.values())
    return Quote(
        unit_price=unit_price,
        total_price=unit_price * quantity,
        attribute_prices=attribute_prices,
    )


def option_applies(option, product) -> bool:
    """Whether an attribute option may be chosen for a product."""
    if option.applicability == "all":
        return True
    if option.applicability == "specific":
        return option.product_id == product.id
    return option.applicability == product.category


async def load_price_book(
    db: AsyncSession,
    variation_ids: Iterable[str],
    option_ids: Iterable[str] = (),
) -> PriceBook:
    """Fetch the active prices needed to price the given variations."""
    variation_ids = list(set(variation_ids))
    option_ids = list(set(option_ids))
    book = PriceBook()
    if not variation_ids:
        return book

    result = await db.execute(
        select(VariationModifierPrice).where(
            VariationModifierPrice.variation_id.in_(variation_ids),
            VariationModifierPrice.status.is_(True),
        )
    )
    book.variation_modifiers = {
        (row.variation_id, row.modifier): row.price for row in result.scalars().all()
    }

    result = await db.execute(
        select(ModifierBasePrice).where(ModifierBasePrice.status.is_(True))
    )
    book.base_modifiers = list(result.scalars().all())

    if option_ids:
        result = await db.execute(
            select(VariationAttributePrice).where(
                VariationAttributePrice.variation_id.in_(variation_ids),
                VariationAttributePrice.option_id.in_(option_ids),
                VariationAttributePrice.status.is_(True),
            )
        )
        book.variation_options = {
            (row.variation_id, row.option_id): row.price for row in result.scalars().all()
        }

        result = await db.execute(
            select(AttributeOption).where(
                AttributeOption.id.in_(option_ids),
                AttributeOption.status.is_(True),
            )
        )
        book.options = {row.id: row for row in result.scalars().all()}

    logger.debug(
        "Loaded price book for %d variations and %d options",
        len(variation_ids),
        len(option_ids),
    )
    return book


def option_ids_of(attribute_sets: Iterable[Mapping[str, str]]) -> set[str]:
    """Option ids referenced by attribute maps, ignoring yes/no modifiers."""
    return {
        str(value)
        for attributes in attribute_sets
        for name, value in attributes.items()
        if value and name in OPTION_KINDS
    }
