# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Staff classification request/response models.

Teacher designations and employee categories share one shape: a name and
an alias, each unique within the college, plus a free-text description.
"""

from uuid import UUID

from pydantic import BaseModel, Field


class StaffLabelCreateRequest(BaseModel):
    name: str = Field(..., min_length=3, max_length=100, description="e.g. Assistant Professor")
    alias: str = Field(..., min_length=1, max_length=50, description="e.g. AP")
    description: str | None = None


class StaffLabelUpdateRequest(BaseModel):
    name: str | None = Field(None, min_length=3, max_length=100)
    alias: str | None = Field(None, min_length=1, max_length=50)
    description: str | None = None


class StaffLabelResponse(BaseModel):
    id: UUID
    name: str
    alias: str
    description: str | None = None


class StaffLabelListResponse(BaseModel):
    items: list[StaffLabelResponse]
    total: int
