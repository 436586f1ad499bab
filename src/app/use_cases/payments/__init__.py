"""Payment ledger and totals use cases"""
from .record_payment import RecordPayment, validate_payment_amount
from .delete_payment import DeletePayment
from .reconcile_invoice import ReconcileInvoice
from .reconcile_invoices import ReconcileInvoices
from .list_payments import ListPayments
from .calculate_totals import CalculateTotals
from .dtos import (
    RecordPaymentCommandDTO,
    DeletePaymentCommandDTO,
    PaymentDTO,
    InvoicePaymentStateDTO,
    RecordPaymentResponseDTO,
    DeletePaymentResponseDTO,
    PaymentHistoryResponseDTO,
    LineItemDTO,
    CalculateTotalsCommandDTO,
    TotalsResponseDTO,
    InvoiceDiscrepancyDTO,
    InvoiceReconciliationResultDTO,
)

__all__ = [
    "RecordPayment",
    "validate_payment_amount",
    "DeletePayment",
    "ReconcileInvoice",
    "ReconcileInvoices",
    "ListPayments",
    "CalculateTotals",
    "RecordPaymentCommandDTO",
    "DeletePaymentCommandDTO",
    "PaymentDTO",
    "InvoicePaymentStateDTO",
    "RecordPaymentResponseDTO",
    "DeletePaymentResponseDTO",
    "PaymentHistoryResponseDTO",
    "LineItemDTO",
    "CalculateTotalsCommandDTO",
    "TotalsResponseDTO",
    "InvoiceDiscrepancyDTO",
    "InvoiceReconciliationResultDTO",
]
