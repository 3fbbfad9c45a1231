# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for Finance service."""

from datetime import date
from unittest.mock import AsyncMock, MagicMock, patch
from uuid import UUID, uuid4

import pytest
from sqlalchemy.exc import OperationalError

from collegehub.core.config import FinanceSettings
from collegehub.domains.finance.service import (
    FinanceExistsError,
    FinanceNotFoundError,
    FinanceService,
    FinanceValidationError,
)
from collegehub.infrastructure.database.models import Payment, StudentBatchExamFee
from collegehub.models.finance import (
    BaseExamFeeCreateRequest,
    PaymentCompleteRequest,
    PaymentCreateRequest,
)

DUE = date(2025, 3, 31)


@pytest.fixture
def finance_settings() -> FinanceSettings:
    return FinanceSettings(batch_size=2, max_retries=2, retry_delay_seconds=0)


@pytest.fixture
def finance_service(mock_db, college_id, finance_settings) -> FinanceService:
    return FinanceService(mock_db, college_id, finance_settings)


def _mock(**attrs) -> MagicMock:
    obj = MagicMock()
    obj.id = attrs.pop("id", str(uuid4()))
    for key, value in attrs.items():
        setattr(obj, key, value)
    return obj


def _savepoint(fail: bool = False) -> MagicMock:
    """Async context manager standing in for ``begin_nested``."""
    ctx = MagicMock()
    if fail:
        ctx.__aenter__ = AsyncMock(
            side_effect=OperationalError("INSERT", {}, Exception("deadlock detected"))
        )
    else:
        ctx.__aenter__ = AsyncMock(return_value=None)
    ctx.__aexit__ = AsyncMock(return_value=False)
    return ctx


def _fee(student_batch_id: str, amount: float, status: str = "PENDING") -> StudentBatchExamFee:
    return StudentBatchExamFee(
        id=str(uuid4()),
        student_batch_id=student_batch_id,
        reason="Base Exam Fee",
        exam_fee=amount,
        due_date=DUE,
        payment_status=status,
    )


class TestBaseFees:
    @pytest.mark.asyncio
    async def test_one_base_fee_per_batch(self, finance_service, mock_db, make_result) -> None:
        batch = _mock(name="CSE 2021")
        mock_db.execute.side_effect = [
            make_result(one=batch),
            make_result(one=str(uuid4())),
        ]

        with pytest.raises(FinanceExistsError):
            await finance_service.create_base_fee(
                BaseExamFeeCreateRequest(batch_id=UUID(batch.id), base_fee=1500)
            )
        mock_db.add.assert_not_called()

    @pytest.mark.asyncio
    async def test_unknown_batch(self, finance_service, mock_db, make_result) -> None:
        mock_db.execute.return_value = make_result(one=None)

        with pytest.raises(FinanceNotFoundError):
            await finance_service.create_base_fee(
                BaseExamFeeCreateRequest(batch_id=uuid4(), base_fee=1500)
            )


class TestInsertBaseFees:
    def _members(self, *names: str) -> list[tuple[MagicMock, MagicMock]]:
        return [(_mock(), _mock(name=name)) for name in names]

    @pytest.mark.asyncio
    async def test_updates_existing_and_creates_missing(
        self, finance_service, mock_db, make_result
    ) -> None:
        batch = _mock(name="CSE 2021")
        members = self._members("Asha", "Bala", "Chitra")
        existing = _fee(members[0][0].id, 1000)
        mock_db.execute.side_effect = [
            make_result(one=batch),
            make_result(one=_mock(base_fee=1500)),
            make_result(rows=members),
            make_result(many=[existing]),
        ]
        mock_db.begin_nested = MagicMock(side_effect=lambda: _savepoint())

        result = await finance_service.insert_base_fees(batch.id, DUE)

        assert result.updated == ["Asha"]
        assert result.created == ["Bala", "Chitra"]
        assert result.failed == []
        assert existing.exam_fee == 1500
        assert existing.due_date == DUE
        created = [call.args[0] for call in mock_db.add.call_args_list]
        assert {fee.student_batch_id for fee in created} == {members[1][0].id, members[2][0].id}
        assert all(fee.payment_status == "PENDING" for fee in created)
        assert result.message == "Processed 3 students: 1 updated, 2 created, 0 failed"
        mock_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_failed_student_is_retried_then_reported(
        self, finance_service, mock_db, make_result
    ) -> None:
        batch = _mock(name="CSE 2021")
        members = self._members("Asha", "Bala")
        mock_db.execute.side_effect = [
            make_result(one=batch),
            make_result(one=_mock(base_fee=1500)),
            make_result(rows=members),
            make_result(many=[]),
        ]
        # Asha fails on both attempts; Bala succeeds.
        savepoints = iter([_savepoint(fail=True), _savepoint(fail=True), _savepoint()])
        mock_db.begin_nested = MagicMock(side_effect=lambda: next(savepoints))

        with patch("collegehub.domains.finance.service.asyncio.sleep", new=AsyncMock()) as sleep:
            result = await finance_service.insert_base_fees(batch.id, DUE)

        assert [f.student_name for f in result.failed] == ["Asha"]
        assert "deadlock detected" in result.failed[0].error
        assert result.created == ["Bala"]
        sleep.assert_awaited_once()
        mock_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_missing_base_fee(self, finance_service, mock_db, make_result) -> None:
        mock_db.execute.side_effect = [
            make_result(one=_mock(name="CSE 2021")),
            make_result(one=None),
        ]

        with pytest.raises(FinanceNotFoundError) as exc_info:
            await finance_service.insert_base_fees(uuid4(), DUE)

        assert str(exc_info.value) == "No base exam fee found for the batch"


class TestPayments:
    @pytest.mark.asyncio
    async def test_create_payment_sums_unpaid_fees(
        self, finance_service, mock_db, make_result
    ) -> None:
        student = _mock(enrollment_no="E21CS04001")
        fees = [_fee(str(uuid4()), 1500), _fee(str(uuid4()), 250.5)]
        mock_db.execute.side_effect = [
            make_result(one=student),
            make_result(many=fees),
        ]

        result = await finance_service.create_payment(
            PaymentCreateRequest(gateway_order_id="order_123"), student_user_id="user-1"
        )

        payment = mock_db.add.call_args[0][0]
        assert isinstance(payment, Payment)
        assert payment.amount == 1750.5
        assert payment.status == "PENDING"
        assert all(fee.payment_id == payment.id for fee in fees)
        assert result.fee_ids == [UUID(fee.id) for fee in fees]

    @pytest.mark.asyncio
    async def test_create_payment_nothing_to_pay(
        self, finance_service, mock_db, make_result
    ) -> None:
        mock_db.execute.side_effect = [
            make_result(one=_mock(enrollment_no="E21CS04001")),
            make_result(many=[]),
        ]

        with pytest.raises(FinanceValidationError):
            await finance_service.create_payment(PaymentCreateRequest(student_id=uuid4()))

    @pytest.mark.asyncio
    async def test_create_payment_requires_student(self, finance_service) -> None:
        with pytest.raises(FinanceValidationError):
            await finance_service.create_payment(PaymentCreateRequest())

    @pytest.mark.asyncio
    async def test_complete_payment_marks_fees(
        self, finance_service, mock_db, make_result, college_id
    ) -> None:
        student_id = str(uuid4())
        payment = Payment(
            id=str(uuid4()),
            college_id=college_id,
            student_id=student_id,
            amount=1500,
            status="PENDING",
        )
        fee = _fee(str(uuid4()), 1500)
        mock_db.execute.side_effect = [
            make_result(one=payment),
            make_result(many=[fee]),
        ]

        result = await finance_service.complete_payment(
            payment.id,
            PaymentCompleteRequest(gateway_payment_id="pay_456", fee_ids=[UUID(fee.id)]),
        )

        assert payment.status == "COMPLETED"
        assert payment.paid_at is not None
        assert fee.payment_status == "COMPLETED"
        assert result.gateway_payment_id == "pay_456"
        mock_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_complete_payment_with_foreign_fee(
        self, finance_service, mock_db, make_result, college_id
    ) -> None:
        payment = Payment(
            id=str(uuid4()),
            college_id=college_id,
            student_id=str(uuid4()),
            amount=1500,
            status="PENDING",
        )
        mock_db.execute.side_effect = [
            make_result(one=payment),
            make_result(many=[]),
        ]

        with pytest.raises(FinanceNotFoundError):
            await finance_service.complete_payment(
                payment.id,
                PaymentCompleteRequest(gateway_payment_id="pay_456", fee_ids=[uuid4()]),
            )
        assert payment.status == "PENDING"
        mock_db.commit.assert_not_called()
