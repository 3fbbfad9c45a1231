# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Canvas shop API routers."""

from fastapi import APIRouter

from collegehub.api.v1.shop.canvas import router as canvas_router
from collegehub.api.v1.shop.cart import router as cart_router
from collegehub.api.v1.shop.catalog import router as catalog_router
from collegehub.api.v1.shop.designs import router as designs_router
from collegehub.api.v1.shop.orders import router as orders_router

router = APIRouter()
router.include_router(catalog_router, prefix="/catalog")
router.include_router(canvas_router)
router.include_router(designs_router)
router.include_router(cart_router)
router.include_router(orders_router)

__all__ = ["router"]
