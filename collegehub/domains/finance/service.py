# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Finance service.

This module provides the FinanceService class for:
- Batch base exam fees (one per batch)
- Student exam fees
- Automated base fee insertion for every student of a batch
- Payments and the student fee overview

Payment gateways are not called here: the gateway order and payment ids
are recorded as reported by the client.
"""

import asyncio
import logging
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from collegehub.core.config import FinanceSettings
from collegehub.infrastructure.database.models import (
    Batch,
    BatchBaseExamFee,
    Payment,
    Student,
    StudentBatch,
    StudentBatchExamFee,
)
from collegehub.infrastructure.database.models.base import new_uuid
from collegehub.models.common import PaymentStatus
from collegehub.models.finance import (
    AutoFeeInsertionResponse,
    BaseExamFeeCreateRequest,
    BaseExamFeeResponse,
    BaseExamFeeUpdateRequest,
    FailedFeeInsertion,
    PaymentCompleteRequest,
    PaymentCreateRequest,
    PaymentResponse,
    StudentFeeCreateRequest,
    StudentFeeOverview,
    StudentFeeResponse,
    StudentFeeUpdateRequest,
)
from collegehub.utils.datetime import utc_now

logger = logging.getLogger(__name__)


class FinanceServiceError(Exception):
    """Base exception for finance service errors."""

    pass


class FinanceNotFoundError(FinanceServiceError):
    """Raised when a fee, payment, batch or student is not found."""

    pass


class FinanceExistsError(FinanceServiceError):
    """Raised when a base fee or a student fee reason already exists."""

    pass


class FinanceValidationError(FinanceServiceError):
    """Raised when a payment request cannot be honoured."""

    pass


class FinanceService:
    """Service for exam fees and payments of one college."""

    def __init__(
        self,
        db: AsyncSession,
        college_id: str,
        settings: FinanceSettings | None = None,
    ) -> None:
        self.db = db
        self.college_id = college_id
        self.settings = settings or FinanceSettings()

    # =========================================================================
    # Base exam fees
    # =========================================================================

    async def create_base_fee(self, request: BaseExamFeeCreateRequest) -> BaseExamFeeResponse:
        batch = await self._get_batch(request.batch_id)

        existing = await self.db.execute(
            select(BatchBaseExamFee.id).where(BatchBaseExamFee.batch_id == batch.id)
        )
        if existing.scalar_one_or_none():
            raise FinanceExistsError("A base exam fee already exists for this batch")

        fee = BatchBaseExamFee(
            college_id=self.college_id,
            batch_id=batch.id,
            base_fee=request.base_fee,
        )
        self.db.add(fee)
        await self.db.commit()
        await self.db.refresh(fee)

        logger.info("Created base exam fee for batch %s: %s", batch.name, fee.base_fee)
        return self._base_fee_response(fee, batch.name)

    async def list_base_fees(self) -> tuple[list[BaseExamFeeResponse], int]:
        result = await self.db.execute(
            select(BatchBaseExamFee, Batch.name)
            .join(Batch, Batch.id == BatchBaseExamFee.batch_id)
            .where(BatchBaseExamFee.college_id == self.college_id)
            .order_by(Batch.name)
        )
        items = [self._base_fee_response(fee, name) for fee, name in result.all()]
        return items, len(items)

    async def update_base_fee(
        self,
        fee_id: UUID | str,
        request: BaseExamFeeUpdateRequest,
    ) -> BaseExamFeeResponse:
        fee = await self._get_base_fee(fee_id)
        fee.base_fee = request.base_fee
        await self.db.commit()
        await self.db.refresh(fee)

        logger.info("Updated base exam fee %s: %s", fee.id, fee.base_fee)
        return self._base_fee_response(fee)

    async def delete_base_fee(self, fee_id: UUID | str) -> None:
        fee = await self._get_base_fee(fee_id)
        await self.db.delete(fee)
        await self.db.commit()
        logger.info("Deleted base exam fee: %s", fee_id)

    # =========================================================================
    # Student exam fees
    # =========================================================================

    async def create_student_fee(self, request: StudentFeeCreateRequest) -> StudentFeeResponse:
        student_batch = await self._get_student_batch(request.student_batch_id)

        existing = await self.db.execute(
            select(StudentBatchExamFee.id).where(
                StudentBatchExamFee.student_batch_id == student_batch.id,
                StudentBatchExamFee.reason == request.reason,
            )
        )
        if existing.scalar_one_or_none():
            raise FinanceExistsError("A fee with this reason already exists for the student")

        fee = StudentBatchExamFee(
            student_batch_id=student_batch.id,
            reason=request.reason,
            exam_fee=request.exam_fee,
            due_date=request.due_date,
            payment_status=PaymentStatus.PENDING.value,
        )
        self.db.add(fee)
        await self.db.commit()
        await self.db.refresh(fee)

        logger.info("Created exam fee %s (%s) for student batch %s", fee.id, fee.reason, student_batch.id)
        return self._fee_response(fee, student_batch)

    async def list_student_fees(
        self,
        batch_id: UUID | None = None,
        student_id: UUID | str | None = None,
    ) -> tuple[list[StudentFeeResponse], int]:
        query = (
            select(StudentBatchExamFee, StudentBatch, Student, Batch)
            .join(StudentBatch, StudentBatch.id == StudentBatchExamFee.student_batch_id)
            .join(Student, Student.id == StudentBatch.student_id)
            .join(Batch, Batch.id == StudentBatch.batch_id)
            .where(Batch.college_id == self.college_id)
        )
        if batch_id:
            query = query.where(StudentBatch.batch_id == str(batch_id))
        if student_id:
            query = query.where(StudentBatch.student_id == str(student_id))

        result = await self.db.execute(
            query.order_by(Student.enrollment_no, StudentBatchExamFee.due_date)
        )
        items = [
            self._fee_response(fee, student_batch, student, batch)
            for fee, student_batch, student, batch in result.all()
        ]
        return items, len(items)

    async def update_student_fee(
        self,
        fee_id: UUID | str,
        request: StudentFeeUpdateRequest,
    ) -> StudentFeeResponse:
        fee, student_batch = await self._get_student_fee(fee_id)

        if request.reason is not None and request.reason != fee.reason:
            existing = await self.db.execute(
                select(StudentBatchExamFee.id).where(
                    StudentBatchExamFee.student_batch_id == fee.student_batch_id,
                    StudentBatchExamFee.reason == request.reason,
                )
            )
            if existing.scalar_one_or_none():
                raise FinanceExistsError("A fee with this reason already exists for the student")
            fee.reason = request.reason
        if request.exam_fee is not None:
            fee.exam_fee = request.exam_fee
        if request.due_date is not None:
            fee.due_date = request.due_date
        if request.payment_status is not None:
            fee.payment_status = request.payment_status.value

        await self.db.commit()
        await self.db.refresh(fee)

        logger.info("Updated exam fee: %s", fee.id)
        return self._fee_response(fee, student_batch)

    async def delete_student_fee(self, fee_id: UUID | str) -> None:
        fee, _ = await self._get_student_fee(fee_id)
        await self.db.delete(fee)
        await self.db.commit()
        logger.info("Deleted exam fee: %s", fee_id)

    async def insert_base_fees(
        self,
        batch_id: UUID | str,
        due_date,
    ) -> AutoFeeInsertionResponse:
        """Upsert the base exam fee for every student of a batch.

        Students are processed in slices; a student whose write fails is
        retried with a growing delay and reported as failed after the last
        attempt. Other students are not affected by one student's failure.

        Raises:
            FinanceNotFoundError: If the batch or its base fee is missing.
        """
        batch = await self._get_batch(batch_id)
        result = await self.db.execute(
            select(BatchBaseExamFee).where(BatchBaseExamFee.batch_id == batch.id)
        )
        base_fee = result.scalar_one_or_none()
        if base_fee is None:
            raise FinanceNotFoundError("No base exam fee found for the batch")

        result = await self.db.execute(
            select(StudentBatch, Student)
            .join(Student, Student.id == StudentBatch.student_id)
            .where(StudentBatch.batch_id == batch.id)
            .order_by(Student.enrollment_no)
        )
        members = list(result.all())

        reason = self.settings.base_fee_reason
        result = await self.db.execute(
            select(StudentBatchExamFee).where(
                StudentBatchExamFee.student_batch_id.in_([sb.id for sb, _ in members]),
                StudentBatchExamFee.reason == reason,
            )
        )
        existing = {fee.student_batch_id: fee for fee in result.scalars().all()}

        updated: list[str] = []
        created: list[str] = []
        failed: list[FailedFeeInsertion] = []
        size = max(1, self.settings.batch_size)
        for start in range(0, len(members), size):
            for student_batch, student in members[start : start + size]:
                fee = existing.get(student_batch.id)
                error = await self._upsert_with_retry(
                    student_batch, fee, base_fee.base_fee, due_date, reason
                )
                if error is not None:
                    failed.append(FailedFeeInsertion(student_name=student.name, error=error))
                elif fee is not None:
                    updated.append(student.name)
                else:
                    created.append(student.name)

        await self.db.commit()
        logger.info(
            "Base fee insertion for batch %s: %d updated, %d created, %d failed",
            batch.name,
            len(updated),
            len(created),
            len(failed),
        )
        return AutoFeeInsertionResponse(
            message=(
                f"Processed {len(members)} students: {len(updated)} updated, "
                f"{len(created)} created, {len(failed)} failed"
            ),
            updated=updated,
            created=created,
            failed=failed,
        )

    async def _upsert_with_retry(
        self,
        student_batch: StudentBatch,
        fee: StudentBatchExamFee | None,
        amount: float,
        due_date,
        reason: str,
    ) -> str | None:
        """Write one student's base fee, returning the last error text on failure."""
        attempts = max(1, self.settings.max_retries)
        last_error = "Unknown error"
        for attempt in range(1, attempts + 1):
            try:
                async with self.db.begin_nested():
                    if fee is not None:
                        fee.exam_fee = amount
                        fee.due_date = due_date
                    else:
                        self.db.add(
                            StudentBatchExamFee(
                                student_batch_id=student_batch.id,
                                reason=reason,
                                exam_fee=amount,
                                due_date=due_date,
                                payment_status=PaymentStatus.PENDING.value,
                            )
                        )
                return None
            except SQLAlchemyError as e:
                last_error = str(e)
                logger.warning(
                    "Fee write for student batch %s failed (attempt %d/%d): %s",
                    student_batch.id,
                    attempt,
                    attempts,
                    e,
                )
                if attempt < attempts:
                    await asyncio.sleep(self.settings.retry_delay_seconds * attempt)
        return last_error

    # =========================================================================
    # Payments
    # =========================================================================

    async def create_payment(
        self,
        request: PaymentCreateRequest,
        student_user_id: str | None = None,
    ) -> PaymentResponse:
        """Open a pending payment for a student's unpaid fees.

        Args:
            request: Student and optional fee selection.
            student_user_id: Set when a student pays for themselves.

        Raises:
            FinanceNotFoundError: If the student or a selected fee is missing.
            FinanceValidationError: If there is nothing left to pay.
        """
        student = await self._resolve_student(request.student_id, student_user_id)

        query = (
            select(StudentBatchExamFee)
            .join(StudentBatch, StudentBatch.id == StudentBatchExamFee.student_batch_id)
            .where(
                StudentBatch.student_id == student.id,
                StudentBatchExamFee.payment_status != PaymentStatus.COMPLETED.value,
            )
        )
        if request.fee_ids:
            requested = [str(fid) for fid in request.fee_ids]
            query = query.where(StudentBatchExamFee.id.in_(requested))
        result = await self.db.execute(query)
        fees = list(result.scalars().all())

        if request.fee_ids:
            found = {fee.id for fee in fees}
            missing = [fid for fid in requested if fid not in found]
            if missing:
                raise FinanceNotFoundError(f"Unpaid fees not found: {', '.join(missing)}")
        if not fees:
            raise FinanceValidationError("No unpaid fees for this student")

        payment = Payment(
            id=new_uuid(),
            college_id=self.college_id,
            student_id=student.id,
            amount=round(sum(fee.exam_fee for fee in fees), 2),
            status=PaymentStatus.PENDING.value,
            gateway_order_id=request.gateway_order_id,
        )
        self.db.add(payment)
        for fee in fees:
            fee.payment_id = payment.id
        await self.db.commit()
        await self.db.refresh(payment)

        logger.info(
            "Opened payment %s for student %s: %s", payment.id, student.enrollment_no, payment.amount
        )
        return self._payment_response(payment, [fee.id for fee in fees])

    async def complete_payment(
        self,
        payment_id: UUID | str,
        request: PaymentCompleteRequest,
        student_user_id: str | None = None,
    ) -> PaymentResponse:
        """Mark a payment and its fees COMPLETED in one transaction."""
        payment = await self._get_payment(payment_id)
        if student_user_id:
            student = await self._resolve_student(None, student_user_id)
            if payment.student_id != student.id:
                raise FinanceNotFoundError("Payment not found")

        fee_ids = [str(fid) for fid in request.fee_ids]
        result = await self.db.execute(
            select(StudentBatchExamFee)
            .join(StudentBatch, StudentBatch.id == StudentBatchExamFee.student_batch_id)
            .where(
                StudentBatchExamFee.id.in_(fee_ids),
                StudentBatch.student_id == payment.student_id,
            )
        )
        fees = list(result.scalars().all())
        if len(fees) != len(set(fee_ids)):
            raise FinanceNotFoundError("Some fees do not belong to this payment's student")

        payment.status = PaymentStatus.COMPLETED.value
        payment.gateway_payment_id = request.gateway_payment_id
        payment.paid_at = utc_now()
        for fee in fees:
            fee.payment_status = PaymentStatus.COMPLETED.value
            fee.payment_id = payment.id

        await self.db.commit()
        await self.db.refresh(payment)

        logger.info("Payment %s completed (%d fees)", payment.id, len(fees))
        return self._payment_response(payment, [fee.id for fee in fees])

    async def fee_overview(
        self,
        student_id: UUID | str | None = None,
        student_user_id: str | None = None,
    ) -> StudentFeeOverview:
        student = await self._resolve_student(student_id, student_user_id)
        fees, _ = await self.list_student_fees(student_id=student.id)

        total = sum(fee.exam_fee for fee in fees)
        paid = sum(fee.exam_fee for fee in fees if fee.payment_status == PaymentStatus.COMPLETED)
        return StudentFeeOverview(
            student_id=UUID(student.id),
            student_name=student.name,
            enrollment_no=student.enrollment_no,
            total_fees=round(total, 2),
            paid=round(paid, 2),
            pending=round(total - paid, 2),
            fees=fees,
        )

    # =========================================================================
    # Helpers
    # =========================================================================

    async def _get_batch(self, batch_id: UUID | str) -> Batch:
        result = await self.db.execute(
            select(Batch).where(
                Batch.id == str(batch_id),
                Batch.college_id == self.college_id,
            )
        )
        batch = result.scalar_one_or_none()
        if not batch:
            raise FinanceNotFoundError("Batch not found")
        return batch

    async def _get_base_fee(self, fee_id: UUID | str) -> BatchBaseExamFee:
        result = await self.db.execute(
            select(BatchBaseExamFee).where(
                BatchBaseExamFee.id == str(fee_id),
                BatchBaseExamFee.college_id == self.college_id,
            )
        )
        fee = result.scalar_one_or_none()
        if not fee:
            raise FinanceNotFoundError("Base exam fee not found")
        return fee

    async def _get_student_batch(self, student_batch_id: UUID | str) -> StudentBatch:
        result = await self.db.execute(
            select(StudentBatch)
            .join(Batch, Batch.id == StudentBatch.batch_id)
            .where(
                StudentBatch.id == str(student_batch_id),
                Batch.college_id == self.college_id,
            )
        )
        student_batch = result.scalar_one_or_none()
        if not student_batch:
            raise FinanceNotFoundError("Student batch not found")
        return student_batch

    async def _get_student_fee(
        self, fee_id: UUID | str
    ) -> tuple[StudentBatchExamFee, StudentBatch]:
        result = await self.db.execute(
            select(StudentBatchExamFee, StudentBatch)
            .join(StudentBatch, StudentBatch.id == StudentBatchExamFee.student_batch_id)
            .join(Batch, Batch.id == StudentBatch.batch_id)
            .where(
                StudentBatchExamFee.id == str(fee_id),
                Batch.college_id == self.college_id,
            )
        )
        row = result.first()
        if not row:
            raise FinanceNotFoundError("Exam fee not found")
        return row[0], row[1]

    async def _get_payment(self, payment_id: UUID | str) -> Payment:
        result = await self.db.execute(
            select(Payment).where(
                Payment.id == str(payment_id),
                Payment.college_id == self.college_id,
            )
        )
        payment = result.scalar_one_or_none()
        if not payment:
            raise FinanceNotFoundError("Payment not found")
        return payment

    async def _resolve_student(
        self,
        student_id: UUID | str | None,
        student_user_id: str | None,
    ) -> Student:
        query = select(Student).where(Student.college_id == self.college_id)
        if student_user_id:
            query = query.where(Student.user_id == student_user_id)
        elif student_id:
            query = query.where(Student.id == str(student_id))
        else:
            raise FinanceValidationError("student_id is required")
        result = await self.db.execute(query)
        student = result.scalar_one_or_none()
        if not student:
            raise FinanceNotFoundError("Student not found")
        return student

    def _base_fee_response(
        self, fee: BatchBaseExamFee, batch_name: str | None = None
    ) -> BaseExamFeeResponse:
        return BaseExamFeeResponse(
            id=UUID(fee.id),
            batch_id=UUID(fee.batch_id),
            batch_name=batch_name,
            base_fee=fee.base_fee,
        )

    def _fee_response(
        self,
        fee: StudentBatchExamFee,
        student_batch: StudentBatch,
        student: Student | None = None,
        batch: Batch | None = None,
    ) -> StudentFeeResponse:
        return StudentFeeResponse(
            id=UUID(fee.id),
            student_batch_id=UUID(fee.student_batch_id),
            student_id=UUID(student_batch.student_id),
            student_name=student.name if student else None,
            enrollment_no=student.enrollment_no if student else None,
            batch_id=UUID(student_batch.batch_id),
            batch_name=batch.name if batch else None,
            reason=fee.reason,
            exam_fee=fee.exam_fee,
            due_date=fee.due_date,
            payment_status=PaymentStatus(fee.payment_status),
            payment_id=UUID(fee.payment_id) if fee.payment_id else None,
        )

    def _payment_response(self, payment: Payment, fee_ids: list[str]) -> PaymentResponse:
        return PaymentResponse(
            id=UUID(payment.id),
            student_id=UUID(payment.student_id),
            amount=payment.amount,
            status=PaymentStatus(payment.status),
            gateway_order_id=payment.gateway_order_id,
            gateway_payment_id=payment.gateway_payment_id,
            paid_at=payment.paid_at,
            fee_ids=[UUID(fid) for fid in fee_ids],
        )
