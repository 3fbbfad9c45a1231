# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Outbound notifications."""

from collegehub.infrastructure.notifications.email import EmailResult, EmailSender

__all__ = ["EmailResult", "EmailSender"]
