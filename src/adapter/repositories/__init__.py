from .invoice_repository import SqlAlchemyInvoiceRepository
from .payment_repository import SqlAlchemyPaymentRepository
from .activity_log_repository import SqlAlchemyActivityLogRepository

__all__ = [
    "SqlAlchemyInvoiceRepository",
    "SqlAlchemyPaymentRepository",
    "SqlAlchemyActivityLogRepository",
]
