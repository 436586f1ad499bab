"""In-memory repositories for use case tests

Each storage call yields to the event loop so concurrent use case runs
interleave at every await, the way they would against a real database.
"""

import asyncio
from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional

from src.app.repositories.activity_log_repository import ActivityLogRepository
from src.app.repositories.invoice_repository import InvoiceRepository
from src.app.repositories.payment_repository import PaymentRepository
from src.domain.activity_log import ActivityLogEntry
from src.domain.invoice import Invoice, InvoiceStatus
from src.domain.payment import Payment


class FakeInvoiceRepository(InvoiceRepository):
    def __init__(self):
        self.invoices: Dict[str, Invoice] = {}

    async def create(self, invoice: Invoice) -> Invoice:
        await asyncio.sleep(0)
        self.invoices[invoice.id] = invoice
        return invoice

    async def get_by_id(self, invoice_id: str, for_update: bool = False) -> Optional[Invoice]:
        await asyncio.sleep(0)
        return self.invoices.get(invoice_id)

    async def get_all(self) -> List[Invoice]:
        await asyncio.sleep(0)
        return list(self.invoices.values())

    async def update_derived_fields(
        self,
        invoice_id: str,
        paid_amount: Decimal,
        status: InvoiceStatus,
        last_payment_date: Optional[datetime],
        remaining_amount: Decimal,
    ) -> Invoice:
        await asyncio.sleep(0)
        invoice = self.invoices[invoice_id]
        invoice.paid_amount = paid_amount
        invoice.status = status
        invoice.last_payment_date = last_payment_date
        invoice.remaining_amount = remaining_amount
        return invoice


class FakePaymentRepository(PaymentRepository):
    def __init__(self):
        self.payments: Dict[str, Payment] = {}

    async def get_by_id(self, payment_id: str) -> Optional[Payment]:
        await asyncio.sleep(0)
        return self.payments.get(payment_id)

    async def list_by_invoice(self, invoice_id: str) -> List[Payment]:
        await asyncio.sleep(0)
        payments = [p for p in self.payments.values() if p.invoice_id == invoice_id]
        return sorted(payments, key=lambda p: p.payment_date, reverse=True)

    async def create(self, payment: Payment) -> Payment:
        await asyncio.sleep(0)
        self.payments[payment.id] = payment
        return payment

    async def delete(self, payment_id: str) -> bool:
        await asyncio.sleep(0)
        return self.payments.pop(payment_id, None) is not None

    async def get_sum_by_invoice(self, invoice_id: str) -> Decimal:
        await asyncio.sleep(0)
        return sum(
            (p.amount for p in self.payments.values() if p.invoice_id == invoice_id),
            Decimal("0"),
        )


class FakeActivityLogRepository(ActivityLogRepository):
    def __init__(self):
        self.entries: List[ActivityLogEntry] = []

    async def append(self, entry: ActivityLogEntry) -> ActivityLogEntry:
        self.entries.append(entry)
        return entry

    async def list_by_entity(self, entity_type: str, entity_id: str) -> List[ActivityLogEntry]:
        return [
            e for e in self.entries
            if e.entity_type == entity_type and e.entity_id == entity_id
        ]
