# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Saved design service.

A saved design pins a product variation, the customer's attribute choices
and the positioned images. Designs are private to their customer: another
customer's design behaves as if it did not exist.
"""

import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from collegehub.domains.shop.errors import ShopNotFoundError, ShopValidationError
from collegehub.domains.shop.pricing import option_applies
from collegehub.infrastructure.database.models import (
    AttributeOption,
    ProductVariation,
    SavedDesign,
    SavedDesignAttribute,
    SavedDesignImage,
)
from collegehub.infrastructure.database.models.shop import MODIFIERS, OPTION_KINDS
from collegehub.models.shop import (
    DesignImageResponse,
    DesignStatus,
    SavedDesignCreateRequest,
    SavedDesignResponse,
)

logger = logging.getLogger(__name__)


def max_images(variation: ProductVariation) -> int:
    """Layout products take one image per panel, others a single image."""
    if variation.product.type == "layout":
        return max(variation.image_count or 1, 1)
    return 1


class DesignService:
    def __init__(self, db: AsyncSession, customer_id: str) -> None:
        self.db = db
        self.customer_id = customer_id

    async def create_design(self, request: SavedDesignCreateRequest) -> SavedDesignResponse:
        """Validate and store a design as a draft.

        Raises:
            ShopNotFoundError: If the variation or its product is missing.
            ShopValidationError: On unsupported attributes, bad yes/no
                values, options not applicable to the product, or too
                many images.
        """
        result = await self.db.execute(
            select(ProductVariation).where(
                ProductVariation.id == str(request.variation_id),
                ProductVariation.status.is_(True),
            )
        )
        variation = result.scalar_one_or_none()
        if not variation or variation.product is None:
            raise ShopNotFoundError("Product variation not found")

        await self._validate_attributes(request.attributes, variation)

        limit = max_images(variation)
        if len(request.images) > limit:
            raise ShopValidationError(
                f"This product accepts at most {limit} image{'s' if limit > 1 else ''}"
            )

        design = SavedDesign(
            customer_id=self.customer_id,
            variation_id=variation.id,
            thumbnail=request.thumbnail,
            status=DesignStatus.DRAFT.value,
            attributes=[
                SavedDesignAttribute(
                    name=name,
                    value=value.lower() if name in MODIFIERS else value,
                )
                for name, value in request.attributes.items()
                if value
            ],
            images=[
                SavedDesignImage(
                    image_url=image.image_url,
                    position=image.position,
                    offset_x=image.offset_x,
                    offset_y=image.offset_y,
                    zoom=image.zoom,
                )
                for image in request.images
            ],
        )
        self.db.add(design)
        await self.db.commit()
        await self.db.refresh(design)

        logger.info(
            "Saved design %s for customer %s (variation %s)",
            design.id,
            self.customer_id,
            variation.id,
        )
        return design_response(design)

    async def list_designs(
        self,
        status: DesignStatus | None = None,
    ) -> tuple[list[SavedDesignResponse], int]:
        query = select(SavedDesign).where(SavedDesign.customer_id == self.customer_id)
        if status is not None:
            query = query.where(SavedDesign.status == status.value)
        result = await self.db.execute(query.order_by(SavedDesign.created_at.desc()))
        items = [design_response(d) for d in result.scalars().all()]
        return items, len(items)

    async def get_design(self, design_id: UUID | str) -> SavedDesignResponse:
        return design_response(await self._get_design(design_id))

    async def delete_design(self, design_id: UUID | str) -> None:
        design = await self._get_design(design_id)
        if design.status != DesignStatus.DRAFT.value:
            raise ShopValidationError("Only draft designs can be deleted")
        await self.db.delete(design)
        await self.db.commit()
        logger.info("Deleted design %s", design_id)

    async def _get_design(self, design_id: UUID | str) -> SavedDesign:
        result = await self.db.execute(
            select(SavedDesign).where(
                SavedDesign.id == str(design_id),
                SavedDesign.customer_id == self.customer_id,
            )
        )
        design = result.scalar_one_or_none()
        if not design:
            raise ShopNotFoundError("Design not found")
        return design

    async def _validate_attributes(
        self,
        attributes: dict[str, str],
        variation: ProductVariation,
    ) -> None:
        option_ids: dict[str, str] = {}
        for name, value in attributes.items():
            if name in MODIFIERS:
                if value and value.strip().lower() not in ("yes", "no"):
                    raise ShopValidationError(f"{name} must be 'yes' or 'no'")
            elif name in OPTION_KINDS:
                if value:
                    option_ids[name] = value
            else:
                raise ShopValidationError(f"Unsupported attribute: {name}")

        if not option_ids:
            return

        result = await self.db.execute(
            select(AttributeOption).where(
                AttributeOption.id.in_(list(option_ids.values())),
                AttributeOption.status.is_(True),
            )
        )
        options = {o.id: o for o in result.scalars().all()}
        for name, option_id in option_ids.items():
            option = options.get(option_id)
            if option is None or option.kind != name:
                raise ShopValidationError(f"Invalid option for {name}")
            if not option_applies(option, variation.product):
                raise ShopValidationError(f"{option.name} is not available for this product")


def design_response(design: SavedDesign) -> SavedDesignResponse:
    return SavedDesignResponse(
        id=UUID(design.id),
        variation_id=UUID(design.variation_id),
        thumbnail=design.thumbnail,
        status=design.status,
        attributes={a.name: a.value for a in design.attributes},
        images=[
            DesignImageResponse(
                image_url=i.image_url,
                position=i.position,
                offset_x=i.offset_x,
                offset_y=i.offset_y,
                zoom=i.zoom,
            )
            for i in design.images
        ],
        created_at=design.created_at,
    )
