# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for Feedback service."""

from unittest.mock import MagicMock
from uuid import UUID, uuid4

import pytest

from collegehub.domains.feedback.service import (
    FeedbackExistsError,
    FeedbackNotEnrolledError,
    FeedbackNotFoundError,
    FeedbackService,
)
from collegehub.infrastructure.database.models import Feedback
from collegehub.models.feedback import FeedbackCreateRequest


@pytest.fixture
def feedback_service(mock_db, college_id) -> FeedbackService:
    return FeedbackService(mock_db, college_id)


@pytest.fixture
def student() -> MagicMock:
    student = MagicMock()
    student.id = str(uuid4())
    student.name = "Asha Rao"
    student.enrollment_no = "E21CS04001"
    return student


@pytest.fixture
def batch_subject() -> MagicMock:
    batch_subject = MagicMock()
    batch_subject.id = str(uuid4())
    batch_subject.batch_id = str(uuid4())
    return batch_subject


def _feedback(batch_subject_id: str, rating: int) -> Feedback:
    return Feedback(
        id=str(uuid4()),
        batch_subject_id=batch_subject_id,
        student_id=str(uuid4()),
        rating=rating,
    )


class TestSubmitFeedback:
    @pytest.mark.asyncio
    async def test_submit(
        self, feedback_service, mock_db, make_result, student, batch_subject, user_id
    ) -> None:
        mock_db.execute.side_effect = [
            make_result(one=student),
            make_result(one=batch_subject),
            make_result(one=str(uuid4())),
            make_result(one=None),
        ]

        async def mock_refresh(obj):
            obj.id = str(uuid4())

        mock_db.refresh.side_effect = mock_refresh

        result = await feedback_service.submit_feedback(
            user_id,
            FeedbackCreateRequest(
                batch_subject_id=UUID(batch_subject.id), rating=4, comment="Clear lectures"
            ),
        )

        feedback = mock_db.add.call_args[0][0]
        assert feedback.student_id == student.id
        assert result.rating == 4
        assert result.student_name == "Asha Rao"

    @pytest.mark.asyncio
    async def test_not_enrolled(
        self, feedback_service, mock_db, make_result, student, batch_subject, user_id
    ) -> None:
        mock_db.execute.side_effect = [
            make_result(one=student),
            make_result(one=batch_subject),
            make_result(one=None),
        ]

        with pytest.raises(FeedbackNotEnrolledError):
            await feedback_service.submit_feedback(
                user_id, FeedbackCreateRequest(batch_subject_id=UUID(batch_subject.id), rating=3)
            )

    @pytest.mark.asyncio
    async def test_only_once(
        self, feedback_service, mock_db, make_result, student, batch_subject, user_id
    ) -> None:
        mock_db.execute.side_effect = [
            make_result(one=student),
            make_result(one=batch_subject),
            make_result(one=str(uuid4())),
            make_result(one=str(uuid4())),
        ]

        with pytest.raises(FeedbackExistsError):
            await feedback_service.submit_feedback(
                user_id, FeedbackCreateRequest(batch_subject_id=UUID(batch_subject.id), rating=5)
            )
        mock_db.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_account_without_student_profile(
        self, feedback_service, mock_db, make_result, user_id
    ) -> None:
        mock_db.execute.return_value = make_result(one=None)

        with pytest.raises(FeedbackNotFoundError):
            await feedback_service.submit_feedback(
                user_id, FeedbackCreateRequest(batch_subject_id=uuid4(), rating=5)
            )

    def test_rating_range(self) -> None:
        with pytest.raises(ValueError):
            FeedbackCreateRequest(batch_subject_id=uuid4(), rating=6)


class TestListFeedback:
    @pytest.mark.asyncio
    async def test_average_rounded(
        self, feedback_service, mock_db, make_result, batch_subject
    ) -> None:
        rows = [
            (_feedback(batch_subject.id, rating), f"Student {i}")
            for i, rating in enumerate((5, 4, 4))
        ]
        mock_db.execute.side_effect = [
            make_result(one=batch_subject),
            make_result(rows=rows),
        ]

        items, total, average = await feedback_service.list_feedback(batch_subject.id)

        assert total == 3
        assert average == 4.33
        assert items[0].student_name == "Student 0"

    @pytest.mark.asyncio
    async def test_no_feedback(self, feedback_service, mock_db, make_result, batch_subject) -> None:
        mock_db.execute.side_effect = [
            make_result(one=batch_subject),
            make_result(rows=[]),
        ]

        items, total, average = await feedback_service.list_feedback(batch_subject.id)

        assert items == []
        assert total == 0
        assert average is None
