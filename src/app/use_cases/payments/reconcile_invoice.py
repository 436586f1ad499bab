"""ReconcileInvoice Use Case

Recomputes one invoice's payment-derived fields on demand.
"""

import asyncio
import logging
from typing import Optional
from libs.result import Result, Return
from src.app.services.unit_of_work import UnitOfWork
from src.app.services.audit_emitter import AuditEmitter
from src.app.services.invoice_lock import InvoiceLockManager
from src.app.services.invoice_reconciler import InvoiceReconciler
from src.app.repositories.invoice_repository import InvoiceRepository
from src.app.repositories.payment_repository import PaymentRepository
from src.domain.activity_log import ActivityAction
from src.domain.exceptions import InvariantViolation, InvoiceNotFound
from .dtos import InvoicePaymentStateDTO
from .errors import error_from_exception

logger = logging.getLogger(__name__)


class ReconcileInvoice:
    """
    Use Case: Reconcile an invoice against its payments

    Idempotent: running it twice with no payment change in between yields
    identical fields. Runs under the same invoice lock as payment mutations.
    An audit entry is written only when an actor is given.
    """

    def __init__(
        self,
        uow: UnitOfWork,
        invoice_repo: InvoiceRepository,
        payment_repo: PaymentRepository,
        lock_manager: InvoiceLockManager,
        audit_emitter: Optional[AuditEmitter] = None,
        storage_timeout_seconds: float = 10.0,
    ):
        self.uow = uow
        self.invoice_repo = invoice_repo
        self.lock_manager = lock_manager
        self.audit_emitter = audit_emitter
        self.reconciler = InvoiceReconciler(invoice_repo, payment_repo)
        self.storage_timeout_seconds = storage_timeout_seconds

    async def execute(
        self, invoice_id: str, actor_id: Optional[str] = None
    ) -> Result[InvoicePaymentStateDTO]:
        """
        Execute reconciliation of one invoice

        Args:
            invoice_id: Invoice ID
            actor_id: Acting user; when set, the run is written to the activity log

        Returns:
            Result[InvoicePaymentStateDTO]: Reconciled invoice state or error
        """
        try:
            async with self.lock_manager.hold(invoice_id):
                invoice, state = await asyncio.wait_for(
                    self._reconcile(invoice_id),
                    timeout=self.storage_timeout_seconds,
                )
                await self.uow.commit()

        except InvariantViolation:
            await self.uow.rollback()
            logger.critical(f"Invariant violated while reconciling invoice {invoice_id}")
            raise

        except Exception as e:
            await self.uow.rollback()
            logger.warning(f"Reconciling invoice {invoice_id} failed: {e}")
            return Return.err(error_from_exception(e, "Failed to reconcile invoice"))

        if actor_id and self.audit_emitter:
            await self.audit_emitter.record(
                actor_id=actor_id,
                action=ActivityAction.RECONCILE_INVOICE,
                entity_type="invoice",
                entity_id=invoice.id,
            )

        return Return.ok(InvoicePaymentStateDTO.from_state(invoice, state))

    async def _reconcile(self, invoice_id: str):
        invoice = await self.invoice_repo.get_by_id(invoice_id, for_update=True)
        if not invoice:
            raise InvoiceNotFound(invoice_id)

        state = await self.reconciler.reconcile(invoice)

        return invoice, state
