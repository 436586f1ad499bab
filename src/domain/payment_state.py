"""Invoice payment state derivation

Pure functions that compute an invoice's derived payment fields from the
complete set of its current payments. Nothing here is incremental: the
result depends only on the payments passed in and the invoice total.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional

from src.domain.exceptions import InvariantViolation
from src.domain.invoice import InvoiceStatus
from src.domain.money import Money, MoneyLike
from src.domain.payment import Payment


@dataclass(frozen=True)
class PaymentState:
    paid_amount: Money
    remaining_amount: Money
    status: InvoiceStatus
    last_payment_date: Optional[datetime]
    payment_count: int


def resolve_status(paid_amount: MoneyLike, total: MoneyLike) -> InvoiceStatus:
    """
    Map (paid_amount, total) to a payment status

    paid <= 0            -> pending
    0 < paid < total     -> partial
    paid >= total        -> paid
    """
    paid = Money.of(paid_amount)
    if paid <= 0:
        return InvoiceStatus.PENDING
    if paid < Money.of(total):
        return InvoiceStatus.PARTIAL
    return InvoiceStatus.PAID


def derive_payment_state(payments: Iterable[Payment], total: MoneyLike) -> PaymentState:
    """
    Recompute derived invoice fields from the full payment set

    Raises:
        InvariantViolation: a stored payment is non-positive or the sum is negative
    """
    payments = list(payments)
    for payment in payments:
        if Money.of(payment.amount) <= 0:
            raise InvariantViolation(
                f"Payment {payment.id} has non-positive amount {payment.amount}"
            )

    paid_amount = Money.total(payment.amount for payment in payments)
    if paid_amount.is_negative:
        raise InvariantViolation(f"Computed paid amount is negative: {paid_amount.amount}")

    last_payment_date = max((payment.payment_date for payment in payments), default=None)

    return PaymentState(
        paid_amount=paid_amount,
        remaining_amount=(Money.of(total) - paid_amount).clamp_to_zero(),
        status=resolve_status(paid_amount, total),
        last_payment_date=last_payment_date,
        payment_count=len(payments),
    )
