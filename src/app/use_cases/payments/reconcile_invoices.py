"""ReconcileInvoices Use Case

Sweeps all invoices for drift between their stored payment-derived fields
and the state recomputed from their payment records, optionally repairing
what it finds.
"""

import logging
import time
from datetime import datetime
from typing import Optional
from libs.result import Result, Return, Error
from src.app.repositories.invoice_repository import InvoiceRepository
from src.app.repositories.payment_repository import PaymentRepository
from src.domain.exceptions import InvariantViolation
from src.domain.money import Money
from src.domain.invoice import Invoice, InvoiceStatus
from src.domain.payment_state import PaymentState, derive_payment_state
from .reconcile_invoice import ReconcileInvoice
from .dtos import InvoiceDiscrepancyDTO, InvoiceReconciliationResultDTO

logger = logging.getLogger(__name__)


def find_drifted_fields(invoice: Invoice, state: PaymentState) -> list[str]:
    """Names of the stored derived fields that differ from ``state``"""
    drifted = []
    if Money.of(invoice.paid_amount) != state.paid_amount:
        drifted.append("paid_amount")
    if Money.of(invoice.remaining_amount) != state.remaining_amount:
        drifted.append("remaining_amount")
    if InvoiceStatus(invoice.status) != state.status:
        drifted.append("status")
    if invoice.last_payment_date != state.last_payment_date:
        drifted.append("last_payment_date")
    return drifted


class ReconcileInvoices:
    """
    Use Case: Detect (and repair) payment drift across all invoices

    Business Rules:
    1. Retrieves all invoices
    2. For each invoice, recomputes the derived state from its payment records
    3. An invoice has drifted when any stored derived field (paid amount,
       remaining amount, status, last payment date) differs from it
    4. With a repairer, drifted invoices are re-reconciled under their lock;
       without one, nothing is modified
    5. Repairs are written to the activity log when an actor is given

    Flow:
    1. Get all invoices
    2. For each invoice:
       a. Derive state from its payments
       b. Compare with the stored derived fields
       c. Record discrepancy, repair if enabled
    3. Return result with all discrepancies
    """

    def __init__(
        self,
        invoice_repo: InvoiceRepository,
        payment_repo: PaymentRepository,
        repairer: Optional[ReconcileInvoice] = None,
        actor_id: Optional[str] = None,
    ):
        self.invoice_repo = invoice_repo
        self.payment_repo = payment_repo
        self.repairer = repairer
        self.actor_id = actor_id

    async def execute(self) -> Result[InvoiceReconciliationResultDTO]:
        """
        Execute the drift sweep

        Returns:
            Result[InvoiceReconciliationResultDTO]: Sweep result with any discrepancies
        """
        start_time = time.time()
        reconciliation_time = datetime.utcnow()

        try:
            logger.info("Starting invoice payment reconciliation")

            # Step 1: Get all invoices
            invoices = await self.invoice_repo.get_all()
            total_invoices = len(invoices)

            logger.info(f"Found {total_invoices} invoices to reconcile")

            # Step 2: Check each invoice
            discrepancies: list[InvoiceDiscrepancyDTO] = []
            repaired_count = 0

            for invoice in invoices:
                payments = await self.payment_repo.list_by_invoice(invoice.id)
                expected = derive_payment_state(payments, invoice.total)
                stored_paid = Money.of(invoice.paid_amount)
                stored_status = InvoiceStatus(invoice.status)

                drifted_fields = find_drifted_fields(invoice, expected)
                if not drifted_fields:
                    continue

                repaired = False
                if self.repairer:
                    result = await self.repairer.execute(invoice.id, actor_id=self.actor_id)
                    repaired = result.is_ok()
                    if repaired:
                        repaired_count += 1
                    else:
                        logger.error(
                            f"Could not repair invoice {invoice.id}: {result.error.message}"
                        )

                discrepancy = InvoiceDiscrepancyDTO(
                    invoice_id=invoice.id,
                    invoice_number=invoice.invoice_number,
                    stored_paid_amount=stored_paid.amount,
                    calculated_paid_amount=expected.paid_amount.amount,
                    discrepancy=(stored_paid - expected.paid_amount).amount,
                    drifted_fields=drifted_fields,
                    repaired=repaired,
                )
                discrepancies.append(discrepancy)

                logger.warning(
                    f"Drift found for invoice {invoice.invoice_number} "
                    f"(invoice_id={invoice.id}): "
                    f"fields={','.join(drifted_fields)}, "
                    f"stored_paid={stored_paid.amount}, "
                    f"payment_sum={expected.paid_amount.amount}, "
                    f"stored_status={stored_status.value}, "
                    f"expected_status={expected.status.value}, "
                    f"repaired={repaired}"
                )

            # Step 3: Build response
            execution_time_ms = int((time.time() - start_time) * 1000)

            response = InvoiceReconciliationResultDTO(
                total_invoices_checked=total_invoices,
                discrepancies_found=len(discrepancies),
                discrepancies=discrepancies,
                repaired_count=repaired_count,
                reconciliation_time=reconciliation_time,
                execution_time_ms=execution_time_ms,
            )

            if discrepancies:
                logger.warning(
                    f"Reconciliation complete. Found {len(discrepancies)} drifted invoices "
                    f"out of {total_invoices} ({repaired_count} repaired) in {execution_time_ms}ms"
                )
            else:
                logger.info(
                    f"Reconciliation complete. All {total_invoices} invoices consistent "
                    f"in {execution_time_ms}ms"
                )

            return Return.ok(response)

        except InvariantViolation:
            logger.critical("Invariant violated during invoice reconciliation")
            raise

        except Exception as e:
            logger.error(f"Invoice reconciliation failed: {e}")
            return Return.err(
                Error(
                    code="RECONCILIATION_FAILED",
                    message="Failed to reconcile invoice payments",
                    reason=str(e),
                )
            )
