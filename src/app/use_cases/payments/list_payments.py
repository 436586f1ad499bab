"""ListPayments Use Case

Returns an invoice's payment history.
"""

import logging
from libs.result import Result, Return
from src.app.repositories.invoice_repository import InvoiceRepository
from src.app.repositories.payment_repository import PaymentRepository
from src.domain.exceptions import InvoiceNotFound
from src.domain.invoice import InvoiceStatus
from src.domain.money import Money
from src.domain.payment_state import PaymentState
from .dtos import PaymentHistoryResponseDTO, PaymentDTO, InvoicePaymentStateDTO
from .errors import error_from_exception

logger = logging.getLogger(__name__)


class ListPayments:
    """
    Use Case: Payment history of an invoice

    Read-only. Payments are returned most recent first together with the
    invoice's stored derived fields.
    """

    def __init__(self, invoice_repo: InvoiceRepository, payment_repo: PaymentRepository):
        self.invoice_repo = invoice_repo
        self.payment_repo = payment_repo

    async def execute(self, invoice_id: str) -> Result[PaymentHistoryResponseDTO]:
        try:
            invoice = await self.invoice_repo.get_by_id(invoice_id)
            if not invoice:
                raise InvoiceNotFound(invoice_id)

            payments = await self.payment_repo.list_by_invoice(invoice_id)

        except Exception as e:
            logger.warning(f"Listing payments of invoice {invoice_id} failed: {e}")
            return Return.err(error_from_exception(e, "Failed to fetch payment history"))

        stored_state = PaymentState(
            paid_amount=Money.of(invoice.paid_amount),
            remaining_amount=Money.of(invoice.remaining_amount),
            status=InvoiceStatus(invoice.status),
            last_payment_date=invoice.last_payment_date,
            payment_count=len(payments),
        )

        return Return.ok(
            PaymentHistoryResponseDTO(
                invoice=InvoicePaymentStateDTO.from_state(invoice, stored_state),
                payments=[PaymentDTO.from_entity(payment) for payment in payments],
            )
        )
