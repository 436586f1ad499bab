"""Concurrent ledger mutations on one invoice

After any interleaving of record and delete operations the invoice's
derived fields must equal the fold over its surviving payments.
"""

import asyncio
import random
import pytest
from datetime import datetime, timedelta
from decimal import Decimal

from src.app.services.audit_emitter import AuditEmitter
from src.app.services.invoice_lock import InvoiceLockManager
from src.app.use_cases.payments import (
    RecordPayment,
    DeletePayment,
    RecordPaymentCommandDTO,
    DeletePaymentCommandDTO,
)
from src.domain.invoice import Invoice, InvoiceStatus
from src.domain.money import Money
from src.domain.payment import PaymentMethod
from src.domain.payment_state import resolve_status
from tests.fixtures.fake_repositories import (
    FakeActivityLogRepository,
    FakeInvoiceRepository,
    FakePaymentRepository,
)


@pytest.fixture
def repos():
    return FakeInvoiceRepository(), FakePaymentRepository(), FakeActivityLogRepository()


def assert_no_drift(invoice: Invoice, payment_repo: FakePaymentRepository):
    surviving = [p for p in payment_repo.payments.values() if p.invoice_id == invoice.id]
    expected_paid = Money.total(p.amount for p in surviving)

    assert Money.of(invoice.paid_amount) == expected_paid
    assert invoice.status == resolve_status(expected_paid, invoice.total)
    assert invoice.last_payment_date == max(
        (p.payment_date for p in surviving), default=None
    )


@pytest.mark.asyncio
class TestConcurrentPayments:
    async def test_concurrent_records_do_not_lose_updates(self, mock_uow, repos):
        invoice_repo, payment_repo, log_repo = repos
        invoice = await invoice_repo.create(
            Invoice(id="inv-1", invoice_number="INV-1", total=Decimal("1000"), paid_amount=Decimal("0"))
        )
        lock_manager = InvoiceLockManager(timeout_seconds=5.0, max_retries=3)
        use_case = RecordPayment(
            mock_uow, invoice_repo, payment_repo, AuditEmitter(mock_uow, log_repo), lock_manager
        )

        results = await asyncio.gather(*[
            use_case.execute(
                RecordPaymentCommandDTO(
                    invoice_id="inv-1",
                    actor_id=f"user_{i}",
                    amount=Decimal("12.34"),
                    payment_method=PaymentMethod.CASH,
                    payment_date=datetime(2024, 1, 1) + timedelta(hours=i),
                )
            )
            for i in range(25)
        ])

        assert all(r.is_ok() for r in results)
        assert invoice.paid_amount == Decimal("308.50")
        assert invoice.status == InvoiceStatus.PARTIAL
        assert_no_drift(invoice, payment_repo)
        assert lock_manager.active_count() == 0

    async def test_interleaved_records_and_deletes_match_surviving_payments(self, mock_uow, repos):
        invoice_repo, payment_repo, log_repo = repos
        invoice = await invoice_repo.create(
            Invoice(id="inv-1", invoice_number="INV-1", total=Decimal("500"), paid_amount=Decimal("0"))
        )
        lock_manager = InvoiceLockManager(timeout_seconds=5.0, max_retries=3)
        audit_emitter = AuditEmitter(mock_uow, log_repo)
        record = RecordPayment(mock_uow, invoice_repo, payment_repo, audit_emitter, lock_manager)
        delete = DeletePayment(mock_uow, invoice_repo, payment_repo, audit_emitter, lock_manager)

        rng = random.Random(20240301)
        seeded = []
        for i in range(10):
            result = await record.execute(
                RecordPaymentCommandDTO(
                    invoice_id="inv-1",
                    actor_id="seed",
                    amount=Decimal(rng.randint(1, 9000)) / 100,
                    payment_method=PaymentMethod.UPI,
                    payment_date=datetime(2024, 2, 1) + timedelta(days=i),
                )
            )
            seeded.append(result.value.payment.payment_id)

        operations = [
            delete.execute(DeletePaymentCommandDTO(payment_id=payment_id, actor_id="remover"))
            for payment_id in rng.sample(seeded, 6)
        ]
        operations += [
            record.execute(
                RecordPaymentCommandDTO(
                    invoice_id="inv-1",
                    actor_id="adder",
                    amount=Decimal(rng.randint(1, 9000)) / 100,
                    payment_method=PaymentMethod.CHECK,
                    payment_date=datetime(2024, 3, 1) + timedelta(days=i),
                )
            )
            for i in range(8)
        ]
        rng.shuffle(operations)

        results = await asyncio.gather(*operations)

        assert all(r.is_ok() for r in results)
        assert len(payment_repo.payments) == 12
        assert_no_drift(invoice, payment_repo)

    async def test_same_payment_deleted_twice_concurrently(self, mock_uow, repos):
        invoice_repo, payment_repo, log_repo = repos
        invoice = await invoice_repo.create(
            Invoice(id="inv-1", invoice_number="INV-1", total=Decimal("100"), paid_amount=Decimal("0"))
        )
        lock_manager = InvoiceLockManager(timeout_seconds=5.0, max_retries=3)
        audit_emitter = AuditEmitter(mock_uow, log_repo)
        record = RecordPayment(mock_uow, invoice_repo, payment_repo, audit_emitter, lock_manager)
        delete = DeletePayment(mock_uow, invoice_repo, payment_repo, audit_emitter, lock_manager)

        recorded = await record.execute(
            RecordPaymentCommandDTO(
                invoice_id="inv-1",
                actor_id="user_1",
                amount=Decimal("40"),
                payment_method=PaymentMethod.CASH,
            )
        )
        payment_id = recorded.value.payment.payment_id

        first, second = await asyncio.gather(
            delete.execute(DeletePaymentCommandDTO(payment_id=payment_id, actor_id="a")),
            delete.execute(DeletePaymentCommandDTO(payment_id=payment_id, actor_id="b")),
        )

        outcomes = sorted([first.is_ok(), second.is_ok()])
        assert outcomes == [False, True]
        failed = first if first.is_err() else second
        assert failed.error.code == "PAYMENT_NOT_FOUND"
        assert invoice.status == InvoiceStatus.PENDING
        assert_no_drift(invoice, payment_repo)
