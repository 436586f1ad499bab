"""Data Transfer Objects for Payment and Totals Use Cases

Pydantic models for command inputs and response outputs. Money fields in
responses are rounded to 2 decimal places.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional, List
from pydantic import BaseModel, Field

from src.domain.invoice import Invoice
from src.domain.payment import Payment, PaymentMethod
from src.domain.payment_state import PaymentState
from src.domain.money import Money
from src.domain.totals import TotalsBreakdown


class RecordPaymentCommandDTO(BaseModel):
    """
    Command DTO for recording a payment against an invoice

    Used as input to RecordPayment use case. Amount validation (> 0, at most
    2 decimal places) belongs to the use case.
    """

    invoice_id: str = Field(
        ...,
        description="Invoice identifier"
    )

    actor_id: str = Field(
        ...,
        description="ID of the user recording the payment"
    )

    amount: Decimal = Field(
        ...,
        description="Payment amount (must be > 0)"
    )

    payment_method: PaymentMethod = Field(
        ...,
        description="Payment method"
    )

    payment_date: Optional[datetime] = Field(
        default=None,
        description="Date the payment was received (defaults to now)"
    )

    transaction_reference: Optional[str] = Field(
        default=None,
        description="External transaction reference"
    )

    notes: Optional[str] = Field(
        default=None,
        description="Free-form notes"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "invoice_id": "4f1c2a9e-0d7b-4b8e-9a51-6f3f0c1d2e3a",
                "actor_id": "user_42",
                "amount": "5000.00",
                "payment_method": "bank_transfer",
                "payment_date": "2024-02-10T00:00:00Z",
                "transaction_reference": "UTR123456",
                "notes": "First instalment"
            }
        }


class DeletePaymentCommandDTO(BaseModel):
    """Command DTO for deleting a payment record"""

    payment_id: str = Field(
        ...,
        description="Payment identifier"
    )

    actor_id: str = Field(
        ...,
        description="ID of the user deleting the payment"
    )


class PaymentDTO(BaseModel):
    """A recorded payment"""

    payment_id: str
    invoice_id: str
    amount: Decimal
    payment_method: str
    payment_date: datetime
    transaction_reference: Optional[str] = None
    notes: Optional[str] = None
    recorded_by: str
    created_at: datetime

    @classmethod
    def from_entity(cls, payment: Payment) -> "PaymentDTO":
        return cls(
            payment_id=payment.id,
            invoice_id=payment.invoice_id,
            amount=Money.of(payment.amount).quantize().amount,
            payment_method=PaymentMethod(payment.payment_method).value,
            payment_date=payment.payment_date,
            transaction_reference=payment.transaction_reference,
            notes=payment.notes,
            recorded_by=payment.recorded_by,
            created_at=payment.created_at,
        )


class InvoicePaymentStateDTO(BaseModel):
    """
    Payment-derived state of an invoice

    Returned after every ledger mutation and reconciliation.
    """

    invoice_id: str = Field(
        ...,
        description="Invoice identifier"
    )

    invoice_number: str = Field(
        ...,
        description="Invoice number"
    )

    total: Decimal = Field(
        ...,
        description="Invoice total"
    )

    paid_amount: Decimal = Field(
        ...,
        description="Sum of current payments"
    )

    remaining_amount: Decimal = Field(
        ...,
        description="Outstanding amount"
    )

    status: str = Field(
        ...,
        description="Payment status (pending, partial, paid)"
    )

    last_payment_date: Optional[datetime] = Field(
        default=None,
        description="Most recent payment date"
    )

    payment_count: int = Field(
        ...,
        description="Number of payments on the invoice"
    )

    @classmethod
    def from_state(cls, invoice: Invoice, state: PaymentState) -> "InvoicePaymentStateDTO":
        return cls(
            invoice_id=invoice.id,
            invoice_number=invoice.invoice_number,
            total=Money.of(invoice.total).quantize().amount,
            paid_amount=state.paid_amount.quantize().amount,
            remaining_amount=state.remaining_amount.quantize().amount,
            status=state.status.value,
            last_payment_date=state.last_payment_date,
            payment_count=state.payment_count,
        )

    class Config:
        json_schema_extra = {
            "example": {
                "invoice_id": "4f1c2a9e-0d7b-4b8e-9a51-6f3f0c1d2e3a",
                "invoice_number": "INV-2024-001",
                "total": "10000.00",
                "paid_amount": "7000.00",
                "remaining_amount": "3000.00",
                "status": "partial",
                "last_payment_date": "2024-02-10T00:00:00Z",
                "payment_count": 2
            }
        }


class RecordPaymentResponseDTO(BaseModel):
    """Response DTO for RecordPayment"""

    payment: PaymentDTO
    invoice: InvoicePaymentStateDTO


class DeletePaymentResponseDTO(BaseModel):
    """Response DTO for DeletePayment"""

    deleted_payment_id: str
    invoice: InvoicePaymentStateDTO


class PaymentHistoryResponseDTO(BaseModel):
    """Response DTO for ListPayments (most recent payment first)"""

    invoice: InvoicePaymentStateDTO
    payments: List[PaymentDTO]


class LineItemDTO(BaseModel):
    """Line item input for totals calculation"""

    quantity: Decimal = Field(
        ...,
        description="Quantity (must be >= 0)"
    )

    unit_price: Decimal = Field(
        ...,
        description="Unit price (must be >= 0)"
    )

    description: Optional[str] = Field(
        default=None,
        description="Line description"
    )


class CalculateTotalsCommandDTO(BaseModel):
    """
    Command DTO for computing document totals

    Used as input to CalculateTotals use case.
    """

    line_items: List[LineItemDTO] = Field(
        default_factory=list,
        description="Ordered line items"
    )

    discount_percent: Decimal = Field(
        default=Decimal("0"),
        description="Discount percentage (0-100)"
    )

    shipping_charges: Decimal = Field(
        default=Decimal("0"),
        description="Flat shipping charges"
    )

    cgst: Decimal = Field(
        default=Decimal("0"),
        description="Central GST rate percentage (0-100)"
    )

    sgst: Decimal = Field(
        default=Decimal("0"),
        description="State GST rate percentage (0-100)"
    )

    igst: Decimal = Field(
        default=Decimal("0"),
        description="Integrated GST rate percentage (0-100)"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "line_items": [
                    {"quantity": "10", "unit_price": "100.00", "description": "Router"}
                ],
                "discount_percent": "10",
                "shipping_charges": "50",
                "cgst": "9",
                "sgst": "9",
                "igst": "0"
            }
        }


class TotalsResponseDTO(BaseModel):
    """Totals breakdown rounded for presentation"""

    subtotal: Decimal
    discount_amount: Decimal
    taxable_amount: Decimal
    cgst_amount: Decimal
    sgst_amount: Decimal
    igst_amount: Decimal
    shipping: Decimal
    total: Decimal

    @classmethod
    def from_breakdown(cls, breakdown: TotalsBreakdown) -> "TotalsResponseDTO":
        presented = breakdown.as_presented()
        return cls(
            subtotal=presented.subtotal.amount,
            discount_amount=presented.discount_amount.amount,
            taxable_amount=presented.taxable_amount.amount,
            cgst_amount=presented.cgst_amount.amount,
            sgst_amount=presented.sgst_amount.amount,
            igst_amount=presented.igst_amount.amount,
            shipping=presented.shipping.amount,
            total=presented.total.amount,
        )

    class Config:
        json_schema_extra = {
            "example": {
                "subtotal": "1000.00",
                "discount_amount": "100.00",
                "taxable_amount": "900.00",
                "cgst_amount": "81.00",
                "sgst_amount": "81.00",
                "igst_amount": "0.00",
                "shipping": "50.00",
                "total": "1112.00"
            }
        }


class InvoiceDiscrepancyDTO(BaseModel):
    """Invoice whose stored derived fields differ from its payment records"""

    invoice_id: str
    invoice_number: str
    stored_paid_amount: Decimal
    calculated_paid_amount: Decimal
    discrepancy: Decimal
    drifted_fields: List[str] = Field(default_factory=list)
    repaired: bool = False


class InvoiceReconciliationResultDTO(BaseModel):
    """Result of a drift sweep over all invoices"""

    total_invoices_checked: int
    discrepancies_found: int
    discrepancies: List[InvoiceDiscrepancyDTO]
    repaired_count: int
    reconciliation_time: datetime
    execution_time_ms: int
