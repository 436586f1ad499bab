"""Totals Calculator

Computes the monetary breakdown of a quote or invoice from its line items,
discount percentage, tax rates and shipping charges.

Calculation order (fixed):
1. subtotal = sum(quantity * unit_price)
2. discount_amount = subtotal * discount_percent / 100
3. taxable_amount = subtotal - discount_amount
4. each tax = taxable_amount * rate / 100 (taxes do not compound)
5. total = taxable_amount + cgst + sgst + igst + shipping

No rounding happens inside the chain. Use TotalsBreakdown.as_presented()
when a value is displayed or stored.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Optional, Sequence

from src.domain.exceptions import InvalidAmount, InvalidLineItem, InvalidRate
from src.domain.money import Money, MoneyLike, to_decimal

MAX_RATE = Decimal(100)


@dataclass(frozen=True)
class LineItem:
    quantity: Decimal
    unit_price: Decimal
    description: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "quantity", to_decimal(self.quantity))
        object.__setattr__(self, "unit_price", to_decimal(self.unit_price))

    @property
    def line_total(self) -> Money:
        return Money.of(self.unit_price) * self.quantity


@dataclass(frozen=True)
class TaxRates:
    """Percentages of the three tax components (intra-state pair + inter-state)"""

    cgst: Decimal = field(default_factory=lambda: Decimal(0))
    sgst: Decimal = field(default_factory=lambda: Decimal(0))
    igst: Decimal = field(default_factory=lambda: Decimal(0))

    def __post_init__(self) -> None:
        for name in ("cgst", "sgst", "igst"):
            object.__setattr__(self, name, to_decimal(getattr(self, name)))


@dataclass(frozen=True)
class TotalsBreakdown:
    subtotal: Money
    discount_amount: Money
    taxable_amount: Money
    cgst_amount: Money
    sgst_amount: Money
    igst_amount: Money
    shipping: Money
    total: Money

    @property
    def total_tax(self) -> Money:
        return Money.total([self.cgst_amount, self.sgst_amount, self.igst_amount])

    def as_presented(self) -> "TotalsBreakdown":
        """Copy with every field rounded to 2 decimal places"""
        return TotalsBreakdown(
            subtotal=self.subtotal.quantize(),
            discount_amount=self.discount_amount.quantize(),
            taxable_amount=self.taxable_amount.quantize(),
            cgst_amount=self.cgst_amount.quantize(),
            sgst_amount=self.sgst_amount.quantize(),
            igst_amount=self.igst_amount.quantize(),
            shipping=self.shipping.quantize(),
            total=self.total.quantize(),
        )


def _validate_rate(name: str, rate: Decimal) -> None:
    if rate < 0 or rate > MAX_RATE:
        raise InvalidRate(f"{name} must be between 0 and 100, got {rate}")


def _validate_line_items(line_items: Sequence[LineItem]) -> None:
    for index, item in enumerate(line_items):
        if item.quantity < 0:
            raise InvalidLineItem(
                f"Line item {index} has negative quantity {item.quantity}"
            )
        if item.unit_price < 0:
            raise InvalidLineItem(
                f"Line item {index} has negative unit price {item.unit_price}"
            )


def calculate_totals(
    line_items: Sequence[LineItem],
    discount_percent: MoneyLike = None,
    shipping_charges: MoneyLike = None,
    tax_rates: Optional[TaxRates] = None,
) -> TotalsBreakdown:
    """
    Calculate the totals breakdown for a document

    All inputs are validated before any arithmetic, so a failure never
    yields a partial result.

    Args:
        line_items: Ordered line items (quantity, unit price)
        discount_percent: Discount percentage in [0, 100]
        shipping_charges: Flat shipping amount (>= 0)
        tax_rates: CGST/SGST/IGST percentages, each in [0, 100]

    Returns:
        TotalsBreakdown with unrounded values

    Raises:
        InvalidLineItem: a quantity or unit price is negative
        InvalidRate: discount or a tax rate is outside [0, 100]
        InvalidAmount: shipping charges are negative
    """
    tax_rates = tax_rates or TaxRates()
    discount = to_decimal(discount_percent)
    shipping = Money.of(shipping_charges)

    _validate_line_items(line_items)
    _validate_rate("discount_percent", discount)
    _validate_rate("cgst", tax_rates.cgst)
    _validate_rate("sgst", tax_rates.sgst)
    _validate_rate("igst", tax_rates.igst)
    if shipping.is_negative:
        raise InvalidAmount(f"shipping_charges must not be negative, got {shipping.amount}")

    subtotal = Money.total(item.line_total for item in line_items)
    discount_amount = subtotal.percent(discount)
    taxable_amount = subtotal - discount_amount

    cgst_amount = taxable_amount.percent(tax_rates.cgst)
    sgst_amount = taxable_amount.percent(tax_rates.sgst)
    igst_amount = taxable_amount.percent(tax_rates.igst)

    total = taxable_amount + cgst_amount + sgst_amount + igst_amount + shipping

    return TotalsBreakdown(
        subtotal=subtotal,
        discount_amount=discount_amount,
        taxable_amount=taxable_amount,
        cgst_amount=cgst_amount,
        sgst_amount=sgst_amount,
        igst_amount=igst_amount,
        shipping=shipping,
        total=total,
    )
