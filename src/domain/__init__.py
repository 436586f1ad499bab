from .base import BaseModel, generate_uuid
from .money import Money, to_decimal
from .totals import LineItem, TaxRates, TotalsBreakdown, calculate_totals
from .invoice import Invoice, InvoiceStatus
from .payment import Payment, PaymentMethod
from .payment_state import PaymentState, derive_payment_state, resolve_status
from .activity_log import ActivityLogEntry, ActivityAction

__all__ = [
    "BaseModel",
    "generate_uuid",
    "Money",
    "to_decimal",
    "LineItem",
    "TaxRates",
    "TotalsBreakdown",
    "calculate_totals",
    "Invoice",
    "InvoiceStatus",
    "Payment",
    "PaymentMethod",
    "PaymentState",
    "derive_payment_state",
    "resolve_status",
    "ActivityLogEntry",
    "ActivityAction",
]
