"""DeletePayment Use Case

Removes a payment record and reconciles the owning invoice in the same
transaction.
"""

import asyncio
import logging
from libs.result import Result, Return
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.audit_emitter import AuditEmitter
from src.app.services.invoice_lock import InvoiceLockManager
from src.app.services.invoice_reconciler import InvoiceReconciler
from src.app.repositories.invoice_repository import InvoiceRepository
from src.app.repositories.payment_repository import PaymentRepository
from src.domain.activity_log import ActivityAction
from src.domain.exceptions import InvariantViolation, InvoiceNotFound, PaymentNotFound
from src.domain.money import Money
from .dtos import DeletePaymentCommandDTO, DeletePaymentResponseDTO, InvoicePaymentStateDTO
from .errors import error_from_exception

logger = logging.getLogger(__name__)


class DeletePayment:
    """
    Use Case: Delete a payment record

    Business Rules:
    1. Unknown payment id fails with PAYMENT_NOT_FOUND ("Payment record not found")
       and changes nothing
    2. The owning invoice's paid amount, status and last payment date are
       recomputed from the remaining payments before the commit
    3. Mutations on one invoice are serialized
    4. Audit entry is written after the commit; its failure is non-fatal

    Flow:
    1. Resolve payment to find its invoice
    2. Acquire invoice lock
    3. Load invoice (SELECT FOR UPDATE)
    4. Delete payment (fails if it vanished meanwhile)
    5. Reconcile invoice
    6. Commit transaction
    7. Emit audit entry
    8. Return response
    """

    def __init__(
        self,
        uow: UnitOfWork,
        invoice_repo: InvoiceRepository,
        payment_repo: PaymentRepository,
        audit_emitter: AuditEmitter,
        lock_manager: InvoiceLockManager,
        storage_timeout_seconds: float = 10.0,
    ):
        self.uow = uow
        self.invoice_repo = invoice_repo
        self.payment_repo = payment_repo
        self.audit_emitter = audit_emitter
        self.lock_manager = lock_manager
        self.reconciler = InvoiceReconciler(invoice_repo, payment_repo)
        self.storage_timeout_seconds = storage_timeout_seconds

    async def execute(self, command: DeletePaymentCommandDTO) -> Result[DeletePaymentResponseDTO]:
        """
        Execute payment deletion

        Args:
            command: DeletePaymentCommandDTO with payment_id and actor_id

        Returns:
            Result[DeletePaymentResponseDTO]: Updated invoice state or error
        """
        try:
            # Step 1: Resolve the payment's invoice
            payment = await asyncio.wait_for(
                self.payment_repo.get_by_id(command.payment_id),
                timeout=self.storage_timeout_seconds,
            )
            if not payment:
                raise PaymentNotFound(command.payment_id)

            # Steps 2-6: Critical section for the owning invoice
            async with self.lock_manager.hold(payment.invoice_id):
                invoice, state = await asyncio.wait_for(
                    self._delete(command.payment_id, payment.invoice_id),
                    timeout=self.storage_timeout_seconds,
                )
                await self.uow.commit()

        except InvariantViolation:
            await self.uow.rollback()
            logger.critical(f"Invariant violated while deleting payment {command.payment_id}")
            raise

        except Exception as e:
            await self.uow.rollback()
            logger.warning(f"Deleting payment {command.payment_id} failed: {e}")
            return Return.err(error_from_exception(e, "Failed to delete payment"))

        # Step 7: Audit after the financial state is committed
        await self.audit_emitter.record(
            actor_id=command.actor_id,
            action=ActivityAction.DELETE_PAYMENT,
            entity_type="invoice",
            entity_id=invoice.id,
            details={
                "payment_id": payment.id,
                "amount": Money.of(payment.amount).to_money_string(),
            },
        )

        logger.info(
            f"Deleted payment {payment.id} from invoice {invoice.id} "
            f"(paid={state.paid_amount}, status={state.status.value})"
        )

        # Step 8: Build response
        return Return.ok(
            DeletePaymentResponseDTO(
                deleted_payment_id=command.payment_id,
                invoice=InvoicePaymentStateDTO.from_state(invoice, state),
            )
        )

    async def _delete(self, payment_id: str, invoice_id: str):
        invoice = await self.invoice_repo.get_by_id(invoice_id, for_update=True)
        if not invoice:
            raise InvoiceNotFound(invoice_id)

        deleted = await self.payment_repo.delete(payment_id)
        if not deleted:
            # Removed by a concurrent request between lookup and lock
            raise PaymentNotFound(payment_id)

        state = await self.reconciler.reconcile(invoice)

        return invoice, state
