# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Domain services.

Each sub-package exposes a service class that receives an AsyncSession,
raises its own exception hierarchy and returns Pydantic response models.
"""
