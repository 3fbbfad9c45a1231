# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Feedback API endpoints.

- POST / - Student submits feedback for a batch subject
- GET /me - Student's own feedback
- GET /batch-subject/{batch_subject_id} - Feedback with average rating
"""

from uuid import UUID

from fastapi import APIRouter, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from collegehub.api.dependencies import DBSession, StaffUser, StudentUser
from collegehub.api.middleware.auth import CurrentUser
from collegehub.domains.feedback.service import (
    FeedbackExistsError,
    FeedbackNotEnrolledError,
    FeedbackNotFoundError,
    FeedbackService,
)
from collegehub.models.feedback import (
    FeedbackCreateRequest,
    FeedbackListResponse,
    FeedbackResponse,
)

router = APIRouter()


def _get_service(db: AsyncSession, current_user: CurrentUser) -> FeedbackService:
    return FeedbackService(db=db, college_id=current_user.college_id)


@router.post(
    "",
    response_model=FeedbackResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Submit feedback",
)
async def submit_feedback(
    data: FeedbackCreateRequest,
    current_user: StudentUser,
    db: DBSession,
) -> FeedbackResponse:
    try:
        return await _get_service(db, current_user).submit_feedback(current_user.id, data)
    except FeedbackNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except FeedbackNotEnrolledError as e:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(e))
    except FeedbackExistsError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))


@router.get("/me", response_model=FeedbackListResponse, summary="Own feedback")
async def list_own_feedback(
    current_user: StudentUser,
    db: DBSession,
) -> FeedbackListResponse:
    try:
        items, total = await _get_service(db, current_user).list_own_feedback(current_user.id)
    except FeedbackNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return FeedbackListResponse(items=items, total=total)


@router.get(
    "/batch-subject/{batch_subject_id}",
    response_model=FeedbackListResponse,
    summary="Batch subject feedback",
)
async def list_feedback(
    batch_subject_id: UUID,
    current_user: StaffUser,
    db: DBSession,
) -> FeedbackListResponse:
    try:
        items, total, average = await _get_service(db, current_user).list_feedback(
            batch_subject_id
        )
    except FeedbackNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    return FeedbackListResponse(items=items, total=total, average_rating=average)
