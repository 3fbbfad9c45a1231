# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Shop service exceptions."""


class ShopServiceError(Exception):
    """Base exception for shop service errors."""

    pass


class ShopNotFoundError(ShopServiceError):
    """Raised when a product, design, cart item, address or order is not found."""

    pass


class ShopForbiddenError(ShopServiceError):
    """Raised when a customer touches another customer's design."""

    pass


class ShopValidationError(ShopServiceError):
    """Raised when a design, cart change or order fails validation."""

    pass
