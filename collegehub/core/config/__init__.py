# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Configuration package for collegehub.

Example:
    >>> from collegehub.core.config import get_settings
    >>> settings = get_settings()
    >>> print(settings.environment)
    'development'
"""

from collegehub.core.config.settings import (
    APISettings,
    CORSSettings,
    DatabaseSettings,
    FinanceSettings,
    GradingSettings,
    JWTSettings,
    RateLimitSettings,
    RedisSettings,
    SecuritySettings,
    Settings,
    ShopSettings,
    SMTPSettings,
    clear_settings_cache,
    get_settings,
)

__all__ = [
    # Settings
    "Settings",
    "get_settings",
    "clear_settings_cache",
    # Subsettings
    "DatabaseSettings",
    "RedisSettings",
    "JWTSettings",
    "SecuritySettings",
    "SMTPSettings",
    "GradingSettings",
    "FinanceSettings",
    "ShopSettings",
    "RateLimitSettings",
    "CORSSettings",
    "APISettings",
]
