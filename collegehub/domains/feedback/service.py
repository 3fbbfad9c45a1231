# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Feedback service.

Students rate each batch subject they are enrolled in once; staff read
the feedback of a batch subject together with its average rating.
"""

import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from collegehub.infrastructure.database.models import (
    BatchSubject,
    Feedback,
    Student,
    StudentBatch,
)
from collegehub.models.feedback import FeedbackCreateRequest, FeedbackResponse

logger = logging.getLogger(__name__)


class FeedbackServiceError(Exception):
    """Base exception for feedback service errors."""

    pass


class FeedbackNotFoundError(FeedbackServiceError):
    """Raised when the student or batch subject is not found."""

    pass


class FeedbackExistsError(FeedbackServiceError):
    """Raised when the student already rated the batch subject."""

    pass


class FeedbackNotEnrolledError(FeedbackServiceError):
    """Raised when the student is not enrolled in the batch subject."""

    pass


class FeedbackService:
    def __init__(self, db: AsyncSession, college_id: str) -> None:
        self.db = db
        self.college_id = college_id

    async def submit_feedback(
        self,
        user_id: str,
        request: FeedbackCreateRequest,
    ) -> FeedbackResponse:
        """Store a student's feedback for a batch subject.

        Raises:
            FeedbackNotFoundError: If the student or batch subject is missing.
            FeedbackNotEnrolledError: If the student is not in the batch.
            FeedbackExistsError: If feedback was already given.
        """
        student = await self._get_student_for_user(user_id)
        batch_subject = await self._get_batch_subject(request.batch_subject_id)

        enrolled = await self.db.execute(
            select(StudentBatch.id).where(
                StudentBatch.student_id == student.id,
                StudentBatch.batch_id == batch_subject.batch_id,
            )
        )
        if not enrolled.scalar_one_or_none():
            raise FeedbackNotEnrolledError("You are not enrolled in this batch subject")

        existing = await self.db.execute(
            select(Feedback.id).where(
                Feedback.batch_subject_id == batch_subject.id,
                Feedback.student_id == student.id,
            )
        )
        if existing.scalar_one_or_none():
            raise FeedbackExistsError("Feedback already submitted for this batch subject")

        feedback = Feedback(
            batch_subject_id=batch_subject.id,
            student_id=student.id,
            rating=request.rating,
            comment=request.comment,
        )
        self.db.add(feedback)
        await self.db.commit()
        await self.db.refresh(feedback)

        logger.info(
            "Feedback %s submitted by %s for batch subject %s",
            feedback.id,
            student.enrollment_no,
            batch_subject.id,
        )
        return self._response(feedback, student.name)

    async def list_feedback(
        self,
        batch_subject_id: UUID | str,
    ) -> tuple[list[FeedbackResponse], int, float | None]:
        """Feedback of a batch subject with the average rating.

        The average is rounded to 2 decimals and None without feedback.
        """
        batch_subject = await self._get_batch_subject(batch_subject_id)

        result = await self.db.execute(
            select(Feedback, Student.name)
            .join(Student, Student.id == Feedback.student_id)
            .where(Feedback.batch_subject_id == batch_subject.id)
            .order_by(Feedback.created_at.desc())
        )
        items = [self._response(feedback, name) for feedback, name in result.all()]
        average = (
            round(sum(item.rating for item in items) / len(items), 2) if items else None
        )
        return items, len(items), average

    async def list_own_feedback(self, user_id: str) -> tuple[list[FeedbackResponse], int]:
        student = await self._get_student_for_user(user_id)
        result = await self.db.execute(
            select(Feedback)
            .where(Feedback.student_id == student.id)
            .order_by(Feedback.created_at.desc())
        )
        items = [self._response(f, student.name) for f in result.scalars().all()]
        return items, len(items)

    async def _get_student_for_user(self, user_id: str) -> Student:
        result = await self.db.execute(
            select(Student).where(
                Student.user_id == user_id,
                Student.college_id == self.college_id,
            )
        )
        student = result.scalar_one_or_none()
        if not student:
            raise FeedbackNotFoundError("Student profile not found")
        return student

    async def _get_batch_subject(self, batch_subject_id: UUID | str) -> BatchSubject:
        result = await self.db.execute(
            select(BatchSubject).where(
                BatchSubject.id == str(batch_subject_id),
                BatchSubject.college_id == self.college_id,
            )
        )
        batch_subject = result.scalar_one_or_none()
        if not batch_subject:
            raise FeedbackNotFoundError("Batch subject not found")
        return batch_subject

    def _response(self, feedback: Feedback, student_name: str | None) -> FeedbackResponse:
        return FeedbackResponse(
            id=UUID(feedback.id),
            batch_subject_id=UUID(feedback.batch_subject_id),
            student_id=UUID(feedback.student_id),
            student_name=student_name,
            rating=feedback.rating,
            comment=feedback.comment,
            created_at=feedback.created_at,
        )
