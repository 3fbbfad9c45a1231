# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Database migrations package.

Revisions live in ``versions/`` and run against the single college
database (colleges, academics, exams, finance and the canvas shop).
"""
