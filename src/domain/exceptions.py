"""Domain exceptions for totals calculation and payment reconciliation

Use cases translate these into Result errors. InvariantViolation is the
exception: it marks an internal bug and is never converted.
"""


class BillingDomainError(Exception):
    """Base class for expected, user-facing domain failures"""

    code = "BILLING_ERROR"


class InvalidLineItem(BillingDomainError):
    """Line item with a negative quantity or unit price"""

    code = "INVALID_LINE_ITEM"


class InvalidRate(BillingDomainError):
    """Discount or tax percentage outside [0, 100]"""

    code = "INVALID_RATE"


class InvalidAmount(BillingDomainError):
    """Non-positive payment amount or malformed money value"""

    code = "INVALID_AMOUNT"


class PaymentNotFound(BillingDomainError):
    """No payment record with the requested id"""

    code = "PAYMENT_NOT_FOUND"

    def __init__(self, payment_id: str):
        super().__init__("Payment record not found")
        self.payment_id = payment_id


class InvoiceNotFound(BillingDomainError):
    """No invoice with the requested id"""

    code = "INVOICE_NOT_FOUND"

    def __init__(self, invoice_id: str):
        super().__init__(f"Invoice with ID {invoice_id} not found")
        self.invoice_id = invoice_id


class PaymentExceedsTotal(BillingDomainError):
    """Payment would push the paid amount above the invoice total"""

    code = "PAYMENT_EXCEEDS_TOTAL"


class ConcurrentModification(BillingDomainError):
    """Per-invoice serialization could not be acquired in time"""

    code = "CONCURRENT_MODIFICATION"

    def __init__(self, invoice_id: str, attempts: int):
        super().__init__(
            f"Invoice {invoice_id} is being modified concurrently "
            f"(lock not acquired after {attempts} attempts)"
        )
        self.invoice_id = invoice_id
        self.attempts = attempts


class StorageFailure(BillingDomainError):
    """Persistence collaborator failed or timed out"""

    code = "STORAGE_FAILURE"


class InvariantViolation(AssertionError):
    """A financial invariant does not hold; indicates a bug, never clamped"""
    pass
