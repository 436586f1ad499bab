"""Background workers for the payment ledger"""
from .invoice_reconciler import InvoiceReconcilerWorker

__all__ = ["InvoiceReconcilerWorker"]
