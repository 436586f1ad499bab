"""Invoice Reconciler

Recomputes an invoice's paid amount, status and last payment date from
its full current payment set and writes them back.
"""

import logging
from src.app.repositories.invoice_repository import InvoiceRepository
from src.app.repositories.payment_repository import PaymentRepository
from src.domain.invoice import Invoice
from src.domain.payment_state import PaymentState, derive_payment_state

logger = logging.getLogger(__name__)


class InvoiceReconciler:
    """
    Full-resummation reconciliation of one invoice

    Always recomputes from scratch, so calling it twice in a row yields the
    same fields and a missed update is corrected by the next call. Callers
    hold the invoice lock and own the transaction; this service does not
    commit.
    """

    def __init__(self, invoice_repo: InvoiceRepository, payment_repo: PaymentRepository):
        self.invoice_repo = invoice_repo
        self.payment_repo = payment_repo

    async def reconcile(self, invoice: Invoice) -> PaymentState:
        payments = await self.payment_repo.list_by_invoice(invoice.id)
        state = derive_payment_state(payments, invoice.total)

        await self.invoice_repo.update_derived_fields(
            invoice.id,
            paid_amount=state.paid_amount.amount,
            status=state.status,
            last_payment_date=state.last_payment_date,
            remaining_amount=state.remaining_amount.amount,
        )

        logger.debug(
            f"Reconciled invoice {invoice.id}: payments={state.payment_count}, "
            f"paid={state.paid_amount.amount}, status={state.status.value}"
        )
        return state
