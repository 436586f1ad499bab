"""Request schemas for Payment and Totals API

Pydantic models for validating incoming HTTP requests.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional, List
from pydantic import BaseModel, Field

from src.domain.payment import PaymentMethod


class RecordPaymentRequestSchema(BaseModel):
    """
    Request schema for recording a payment

    Used for POST /billing/invoices/{invoice_id}/payments endpoint.
    Positivity and precision of the amount are checked by the use case so
    that they surface as INVALID_AMOUNT.
    """

    amount: Decimal = Field(
        ...,
        description="Payment amount (must be > 0, at most 2 decimal places)"
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
        max_length=255,
        description="External transaction reference (e.g. UTR, cheque number)"
    )

    notes: Optional[str] = Field(
        default=None,
        description="Free-form notes"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "amount": "5000.00",
                "payment_method": "bank_transfer",
                "payment_date": "2024-02-10T00:00:00Z",
                "transaction_reference": "UTR123456",
                "notes": "First instalment"
            }
        }


class LineItemSchema(BaseModel):
    quantity: Decimal = Field(..., description="Quantity")
    unit_price: Decimal = Field(..., description="Unit price")
    description: Optional[str] = Field(default=None, description="Line description")


class CalculateTotalsRequestSchema(BaseModel):
    """
    Request schema for computing document totals

    Used for POST /billing/totals endpoint. Range checks on rates and
    amounts happen in the totals calculation.
    """

    line_items: List[LineItemSchema] = Field(
        default_factory=list,
        description="Ordered line items"
    )

    discount_percent: Decimal = Field(default=Decimal("0"), description="Discount percentage")
    shipping_charges: Decimal = Field(default=Decimal("0"), description="Flat shipping charges")
    cgst: Decimal = Field(default=Decimal("0"), description="CGST rate percentage")
    sgst: Decimal = Field(default=Decimal("0"), description="SGST rate percentage")
    igst: Decimal = Field(default=Decimal("0"), description="IGST rate percentage")

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
