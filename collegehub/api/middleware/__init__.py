# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""API middleware components.

Exports:
    AuthMiddleware: JWT authentication middleware.
    RequestContextMiddleware: Request ID logging context.
    limiter: slowapi limiter shared by the routers.
"""

from collegehub.api.middleware.auth import AuthMiddleware, CurrentUser
from collegehub.api.middleware.rate_limit import limiter
from collegehub.api.middleware.request_context import RequestContextMiddleware

__all__ = [
    "AuthMiddleware",
    "CurrentUser",
    "RequestContextMiddleware",
    "limiter",
]
