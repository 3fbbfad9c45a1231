# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""collegehub: college administration and canvas print shop backend."""

__version__ = "1.0.0"
