"""RecordPayment Use Case

Adds a payment to an invoice's ledger and reconciles the invoice's derived
fields in the same transaction.
"""

import asyncio
import logging
from typing import Optional
from datetime import datetime, timezone
from libs.result import Result, Return
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.audit_emitter import AuditEmitter
from src.app.services.invoice_lock import InvoiceLockManager
from src.app.services.invoice_reconciler import InvoiceReconciler
from src.app.repositories.invoice_repository import InvoiceRepository
from src.app.repositories.payment_repository import PaymentRepository
from src.domain.activity_log import ActivityAction
from src.domain.exceptions import (
    InvalidAmount,
    InvariantViolation,
    InvoiceNotFound,
    PaymentExceedsTotal,
)
from src.domain.money import Money, MONEY_DECIMAL_PLACES
from src.domain.payment import Payment, PaymentMethod
from .dtos import (
    RecordPaymentCommandDTO,
    RecordPaymentResponseDTO,
    PaymentDTO,
    InvoicePaymentStateDTO,
)
from .errors import error_from_exception

logger = logging.getLogger(__name__)


def _as_utc_naive(value: Optional[datetime]) -> Optional[datetime]:
    """Stored timestamps are naive UTC"""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def validate_payment_amount(amount) -> Money:
    """
    Validate a payment amount

    Raises:
        InvalidAmount: amount is not a number, not positive, or has more
            than 2 decimal places
    """
    try:
        money = Money.of(amount)
    except ValueError as e:
        raise InvalidAmount(f"Invalid payment amount: {amount!r}") from e

    if not money.is_positive:
        raise InvalidAmount(f"Payment amount must be greater than 0, got {money.amount}")
    if money.decimal_places > MONEY_DECIMAL_PLACES:
        raise InvalidAmount(
            f"Payment amount must have at most {MONEY_DECIMAL_PLACES} decimal places, "
            f"got {money.amount}"
        )
    return money


class RecordPayment:
    """
    Use Case: Record a payment against an invoice

    Business Rules:
    1. Amount must be > 0 (checked before any storage access)
    2. Invoice must exist
    3. Optional: the new paid amount may not exceed the invoice total
    4. Paid amount, status and last payment date are recomputed from all
       payments, never incremented
    5. Mutations on one invoice are serialized
    6. Audit entry is written after the commit; its failure is non-fatal

    Flow:
    1. Validate amount
    2. Acquire invoice lock
    3. Load invoice (SELECT FOR UPDATE)
    4. Check overpayment (if enabled)
    5. Insert payment
    6. Reconcile invoice
    7. Commit transaction
    8. Emit audit entry
    9. Return response
    """

    def __init__(
        self,
        uow: UnitOfWork,
        invoice_repo: InvoiceRepository,
        payment_repo: PaymentRepository,
        audit_emitter: AuditEmitter,
        lock_manager: InvoiceLockManager,
        storage_timeout_seconds: float = 10.0,
        prevent_overpayment: bool = False,
    ):
        self.uow = uow
        self.invoice_repo = invoice_repo
        self.payment_repo = payment_repo
        self.audit_emitter = audit_emitter
        self.lock_manager = lock_manager
        self.reconciler = InvoiceReconciler(invoice_repo, payment_repo)
        self.storage_timeout_seconds = storage_timeout_seconds
        self.prevent_overpayment = prevent_overpayment

    async def execute(self, command: RecordPaymentCommandDTO) -> Result[RecordPaymentResponseDTO]:
        """
        Execute payment recording

        Args:
            command: RecordPaymentCommandDTO with invoice_id, amount, method

        Returns:
            Result[RecordPaymentResponseDTO]: Payment and updated invoice state, or error
        """
        # Step 1: Validate amount before touching the ledger
        try:
            amount = validate_payment_amount(command.amount)
        except InvalidAmount as e:
            return Return.err(error_from_exception(e, "Invalid payment amount"))

        try:
            # Steps 2-7: Critical section for this invoice
            async with self.lock_manager.hold(command.invoice_id):
                invoice, payment, state = await asyncio.wait_for(
                    self._record(command, amount),
                    timeout=self.storage_timeout_seconds,
                )
                # Commit is not bounded by the storage timeout
                await self.uow.commit()

        except InvariantViolation:
            await self.uow.rollback()
            logger.critical(f"Invariant violated while recording payment on invoice {command.invoice_id}")
            raise

        except Exception as e:
            await self.uow.rollback()
            logger.warning(f"Recording payment on invoice {command.invoice_id} failed: {e}")
            return Return.err(error_from_exception(e, "Failed to record payment"))

        # Step 8: Audit after the financial state is committed
        await self.audit_emitter.record(
            actor_id=command.actor_id,
            action=ActivityAction.RECORD_PAYMENT,
            entity_type="invoice",
            entity_id=invoice.id,
            details={
                "payment_id": payment.id,
                "amount": amount.to_money_string(),
                "payment_method": PaymentMethod(payment.payment_method).value,
            },
        )

        logger.info(
            f"Recorded payment {payment.id} of {amount} on invoice {invoice.id} "
            f"(paid={state.paid_amount}, status={state.status.value})"
        )

        # Step 9: Build response
        return Return.ok(
            RecordPaymentResponseDTO(
                payment=PaymentDTO.from_entity(payment),
                invoice=InvoicePaymentStateDTO.from_state(invoice, state),
            )
        )

    async def _record(self, command: RecordPaymentCommandDTO, amount: Money):
        invoice = await self.invoice_repo.get_by_id(command.invoice_id, for_update=True)
        if not invoice:
            raise InvoiceNotFound(command.invoice_id)

        if self.prevent_overpayment:
            current_paid = Money.of(await self.payment_repo.get_sum_by_invoice(invoice.id))
            projected = current_paid + amount
            if projected > Money.of(invoice.total):
                raise PaymentExceedsTotal(
                    f"Payment amount exceeds total invoice amount "
                    f"(paid={current_paid}, payment={amount}, total={Money.of(invoice.total)})"
                )

        payment = Payment(
            invoice_id=invoice.id,
            amount=amount.amount,
            payment_method=command.payment_method,
            payment_date=_as_utc_naive(command.payment_date) or datetime.utcnow(),
            transaction_reference=command.transaction_reference,
            notes=command.notes,
            recorded_by=command.actor_id,
        )
        created_payment = await self.payment_repo.create(payment)

        state = await self.reconciler.reconcile(invoice)

        return invoice, created_payment, state
