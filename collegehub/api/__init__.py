# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""HTTP layer: the FastAPI application and its routers."""

from collegehub.api.app import create_app

__all__ = ["create_app"]
