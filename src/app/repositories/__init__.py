from .invoice_repository import InvoiceRepository
from .payment_repository import PaymentRepository
from .activity_log_repository import ActivityLogRepository

__all__ = [
    "InvoiceRepository",
    "PaymentRepository",
    "ActivityLogRepository",
]
