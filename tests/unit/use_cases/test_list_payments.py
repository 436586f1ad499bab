"""Unit tests for ListPayments use case"""

import pytest
from datetime import datetime
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

from src.app.use_cases.payments import ListPayments
from src.domain.invoice import Invoice, InvoiceStatus
from src.domain.payment import Payment, PaymentMethod


@pytest.fixture
def invoice():
    return Invoice(
        id="inv-1",
        invoice_number="INV-2024-010",
        total=Decimal("800.00"),
        paid_amount=Decimal("300.00"),
        remaining_amount=Decimal("500.00"),
        status=InvoiceStatus.PARTIAL,
        last_payment_date=datetime(2024, 6, 2),
    )


@pytest.mark.asyncio
class TestListPayments:
    async def test_returns_history_and_stored_state(self, invoice):
        payments = [
            Payment(
                id="pay-2",
                invoice_id="inv-1",
                amount=Decimal("200.00"),
                payment_method=PaymentMethod.CREDIT_CARD,
                payment_date=datetime(2024, 6, 2),
                recorded_by="user_1",
            ),
            Payment(
                id="pay-1",
                invoice_id="inv-1",
                amount=Decimal("100.00"),
                payment_method=PaymentMethod.CASH,
                payment_date=datetime(2024, 6, 1),
                recorded_by="user_1",
            ),
        ]
        invoice_repo = MagicMock()
        invoice_repo.get_by_id = AsyncMock(return_value=invoice)
        payment_repo = MagicMock()
        payment_repo.list_by_invoice = AsyncMock(return_value=payments)

        result = await ListPayments(invoice_repo, payment_repo).execute("inv-1")

        assert result.is_ok()
        assert [p.payment_id for p in result.value.payments] == ["pay-2", "pay-1"]
        assert result.value.payments[0].payment_method == "credit_card"
        assert result.value.invoice.paid_amount == Decimal("300.00")
        assert result.value.invoice.status == "partial"
        assert result.value.invoice.payment_count == 2

    async def test_unknown_invoice(self):
        invoice_repo = MagicMock()
        invoice_repo.get_by_id = AsyncMock(return_value=None)
        payment_repo = MagicMock()
        payment_repo.list_by_invoice = AsyncMock()

        result = await ListPayments(invoice_repo, payment_repo).execute("missing")

        assert result.is_err()
        assert result.error.code == "INVOICE_NOT_FOUND"
        payment_repo.list_by_invoice.assert_not_called()
