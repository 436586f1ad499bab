"""Unit tests for CalculateTotals use case"""

import pytest
from decimal import Decimal

from src.app.use_cases.payments import CalculateTotals, CalculateTotalsCommandDTO, LineItemDTO


@pytest.mark.asyncio
class TestCalculateTotals:
    async def test_presents_rounded_breakdown(self):
        command = CalculateTotalsCommandDTO(
            line_items=[LineItemDTO(quantity=Decimal("10"), unit_price=Decimal("100.00"))],
            discount_percent=Decimal("10"),
            shipping_charges=Decimal("50"),
            cgst=Decimal("9"),
            sgst=Decimal("9"),
        )

        result = await CalculateTotals().execute(command)

        assert result.is_ok()
        totals = result.value
        assert totals.subtotal == Decimal("1000.00")
        assert totals.discount_amount == Decimal("100.00")
        assert totals.taxable_amount == Decimal("900.00")
        assert totals.cgst_amount == Decimal("81.00")
        assert totals.sgst_amount == Decimal("81.00")
        assert totals.igst_amount == Decimal("0.00")
        assert totals.shipping == Decimal("50.00")
        assert totals.total == Decimal("1112.00")
        assert str(totals.total) == "1112.00"

    async def test_empty_command(self):
        result = await CalculateTotals().execute(CalculateTotalsCommandDTO())

        assert result.is_ok()
        assert result.value.total == Decimal("0.00")

    async def test_invalid_line_item(self):
        command = CalculateTotalsCommandDTO(
            line_items=[LineItemDTO(quantity=Decimal("-1"), unit_price=Decimal("5"))]
        )

        result = await CalculateTotals().execute(command)

        assert result.is_err()
        assert result.error.code == "INVALID_LINE_ITEM"

    async def test_invalid_rate(self):
        result = await CalculateTotals().execute(CalculateTotalsCommandDTO(igst=Decimal("101")))

        assert result.is_err()
        assert result.error.code == "INVALID_RATE"

    async def test_negative_shipping(self):
        result = await CalculateTotals().execute(
            CalculateTotalsCommandDTO(shipping_charges=Decimal("-1"))
        )

        assert result.is_err()
        assert result.error.code == "INVALID_AMOUNT"
