# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Feedback request/response models."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field


class FeedbackCreateRequest(BaseModel):
    batch_subject_id: UUID
    rating: int = Field(..., ge=1, le=5)
    comment: str | None = Field(None, max_length=2000)


class FeedbackResponse(BaseModel):
    id: UUID
    batch_subject_id: UUID
    student_id: UUID
    student_name: str | None = None
    rating: int
    comment: str | None = None
    created_at: datetime | None = None


class FeedbackListResponse(BaseModel):
    items: list[FeedbackResponse]
    total: int
    average_rating: float | None = None
