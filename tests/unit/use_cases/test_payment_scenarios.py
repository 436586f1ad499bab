"""Payment ledger scenarios against in-memory repositories

Tests cover:
- Record/delete sequences and the derived invoice fields after each step
- Delete of an unknown payment leaves everything unchanged
- Audit entries written for each mutation
"""

import asyncio
import pytest
from datetime import datetime
from decimal import Decimal
from unittest.mock import AsyncMock

from src.app.services.audit_emitter import AuditEmitter
from src.app.services.invoice_lock import InvoiceLockManager
from src.app.use_cases.payments import (
    RecordPayment,
    DeletePayment,
    RecordPaymentCommandDTO,
    DeletePaymentCommandDTO,
)
from src.domain.activity_log import ActivityAction
from src.domain.invoice import Invoice, InvoiceStatus
from src.domain.payment import PaymentMethod
from tests.fixtures.fake_repositories import (
    FakeActivityLogRepository,
    FakeInvoiceRepository,
    FakePaymentRepository,
)


class Ledger:
    """Use cases wired to one set of in-memory repositories"""

    def __init__(self, uow):
        self.invoice_repo = FakeInvoiceRepository()
        self.payment_repo = FakePaymentRepository()
        self.activity_log_repo = FakeActivityLogRepository()
        self.lock_manager = InvoiceLockManager(timeout_seconds=1.0, max_retries=3)
        audit_emitter = AuditEmitter(uow, self.activity_log_repo)
        self.record = RecordPayment(
            uow, self.invoice_repo, self.payment_repo, audit_emitter, self.lock_manager
        )
        self.delete = DeletePayment(
            uow, self.invoice_repo, self.payment_repo, audit_emitter, self.lock_manager
        )

    async def add_invoice(self, total: str, invoice_id: str = "inv-1") -> Invoice:
        invoice = Invoice(
            id=invoice_id,
            invoice_number=f"INV-{invoice_id}",
            total=Decimal(total),
            paid_amount=Decimal("0"),
            remaining_amount=Decimal(total),
            status=InvoiceStatus.PENDING,
        )
        return await self.invoice_repo.create(invoice)

    async def pay(self, amount: str, day: int, invoice_id: str = "inv-1"):
        result = await self.record.execute(
            RecordPaymentCommandDTO(
                invoice_id=invoice_id,
                actor_id="user_1",
                amount=Decimal(amount),
                payment_method=PaymentMethod.BANK_TRANSFER,
                payment_date=datetime(2024, 3, day),
            )
        )
        assert result.is_ok(), result.error
        return result.value

    async def remove(self, payment_id: str):
        return await self.delete.execute(
            DeletePaymentCommandDTO(payment_id=payment_id, actor_id="user_2")
        )


@pytest.fixture
def ledger(mock_uow):
    return Ledger(mock_uow)


@pytest.mark.asyncio
class TestPaymentScenarios:
    async def test_three_payments_then_delete_middle_one(self, ledger):
        """
        Given: Invoice total 10000 with payments 5000, 3000, 2000
        When: The 3000 payment is deleted
        Then: Paid 7000, partial, last payment date is the max of the remaining two
        """
        await ledger.add_invoice("10000")
        await ledger.pay("5000", day=1)
        second = await ledger.pay("3000", day=20)
        third = await ledger.pay("2000", day=10)

        assert third.invoice.paid_amount == Decimal("10000.00")
        assert third.invoice.status == "paid"
        assert third.invoice.last_payment_date == datetime(2024, 3, 20)

        result = await ledger.remove(second.payment.payment_id)

        assert result.is_ok()
        invoice = ledger.invoice_repo.invoices["inv-1"]
        assert invoice.paid_amount == Decimal("7000")
        assert invoice.remaining_amount == Decimal("3000")
        assert invoice.status == InvoiceStatus.PARTIAL
        assert invoice.last_payment_date == datetime(2024, 3, 10)
        assert result.value.deleted_payment_id == second.payment.payment_id
        assert result.value.invoice.status == "partial"
        assert result.value.invoice.payment_count == 2

    async def test_delete_only_full_payment_returns_to_pending(self, ledger):
        await ledger.add_invoice("10000")
        paid = await ledger.pay("10000", day=5)
        assert paid.invoice.status == "paid"

        result = await ledger.remove(paid.payment.payment_id)

        assert result.is_ok()
        invoice = ledger.invoice_repo.invoices["inv-1"]
        assert invoice.paid_amount == Decimal("0")
        assert invoice.status == InvoiceStatus.PENDING
        assert invoice.last_payment_date is None
        assert invoice.remaining_amount == Decimal("10000")

    async def test_delete_only_partial_payment_returns_to_pending(self, ledger):
        await ledger.add_invoice("10000")
        partial = await ledger.pay("5000", day=5)
        assert partial.invoice.status == "partial"

        result = await ledger.remove(partial.payment.payment_id)

        assert result.is_ok()
        assert result.value.invoice.status == "pending"
        assert result.value.invoice.paid_amount == Decimal("0.00")

    async def test_delete_unknown_payment_changes_nothing(self, ledger, mock_uow):
        await ledger.add_invoice("10000")
        await ledger.pay("4000", day=5)
        commits_before = mock_uow.commit.call_count
        entries_before = len(ledger.activity_log_repo.entries)

        result = await ledger.remove("does-not-exist")

        assert result.is_err()
        assert result.error.code == "PAYMENT_NOT_FOUND"
        assert result.error.message == "Payment record not found"
        invoice = ledger.invoice_repo.invoices["inv-1"]
        assert invoice.paid_amount == Decimal("4000")
        assert invoice.status == InvoiceStatus.PARTIAL
        assert len(ledger.payment_repo.payments) == 1
        assert mock_uow.commit.call_count == commits_before
        assert len(ledger.activity_log_repo.entries) == entries_before

    async def test_delete_is_audited(self, ledger):
        await ledger.add_invoice("500")
        paid = await ledger.pay("125.25", day=2)

        await ledger.remove(paid.payment.payment_id)

        entries = await ledger.activity_log_repo.list_by_entity("invoice", "inv-1")
        assert [e.action for e in entries] == [
            ActivityAction.RECORD_PAYMENT,
            ActivityAction.DELETE_PAYMENT,
        ]
        delete_entry = entries[-1]
        assert delete_entry.user_id == "user_2"
        assert delete_entry.details == {
            "payment_id": paid.payment.payment_id,
            "amount": "125.25",
        }

    async def test_cent_payments_sum_exactly(self, ledger):
        await ledger.add_invoice("0.30")
        await ledger.pay("0.10", day=1)
        result = await ledger.pay("0.20", day=2)

        assert result.invoice.paid_amount == Decimal("0.30")
        assert result.invoice.status == "paid"

    async def test_slow_commit_on_delete_is_not_reported_as_failure(self, ledger, mock_uow):
        await ledger.add_invoice("1000")
        paid = await ledger.pay("400", day=1)

        async def slow_commit():
            await asyncio.sleep(0.05)

        mock_uow.commit = AsyncMock(side_effect=slow_commit)
        delete = DeletePayment(
            mock_uow,
            ledger.invoice_repo,
            ledger.payment_repo,
            AuditEmitter(mock_uow, ledger.activity_log_repo),
            ledger.lock_manager,
            storage_timeout_seconds=0.01,
        )

        result = await delete.execute(
            DeletePaymentCommandDTO(payment_id=paid.payment.payment_id, actor_id="user_2")
        )

        assert result.is_ok()
        assert result.value.invoice.status == "pending"
        mock_uow.rollback.assert_not_called()
