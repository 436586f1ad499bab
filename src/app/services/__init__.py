from .unit_of_work import UnitOfWork
from .invoice_lock import InvoiceLockManager
from .invoice_reconciler import InvoiceReconciler
from .audit_emitter import AuditEmitter

__all__ = [
    "UnitOfWork",
    "InvoiceLockManager",
    "InvoiceReconciler",
    "AuditEmitter",
]
