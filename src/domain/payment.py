"""Payment Domain Entity

A single payment recorded against an invoice.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import CheckConstraint, ForeignKey, Numeric, String
from src.domain.base import BaseModel, generate_uuid


class PaymentMethod(str, Enum):
    """How a payment was made"""
    BANK_TRANSFER = "bank_transfer"
    CREDIT_CARD = "credit_card"
    CHECK = "check"
    CASH = "cash"
    UPI = "upi"
    OTHER = "other"


class Payment(BaseModel, table=True):
    """
    Payment - Money received against an invoice

    Domain Rules:
    - amount is strictly positive with at most 2 decimal places
    - Many payments per invoice
    - Created and deleted by user actions, never updated in place
    """

    __tablename__ = "payments"
    __table_args__ = (
        CheckConstraint('amount > 0', name='payment_amount_positive'),
        Index('ix_payments_invoice_id', 'invoice_id'),
    )

    id: str = Field(
        default_factory=generate_uuid,
        primary_key=True,
        description="Unique payment identifier (UUID)"
    )

    invoice_id: str = Field(
        sa_column=Column(String(36), ForeignKey("invoices.id", ondelete="CASCADE"), nullable=False),
        description="Foreign key to Invoice"
    )

    amount: Decimal = Field(
        sa_column=Column(Numeric(18, 2), nullable=False),
        description="Payment amount (must be > 0, precision: 18,2)"
    )

    payment_method: PaymentMethod = Field(
        description="Payment method (bank_transfer, credit_card, check, cash, upi, other)"
    )

    payment_date: datetime = Field(
        default_factory=datetime.utcnow,
        description="Date the payment was received"
    )

    transaction_reference: Optional[str] = Field(
        default=None,
        sa_column=Column(String(255), nullable=True),
        description="External transaction reference (bank ref, cheque number)"
    )

    notes: Optional[str] = Field(
        default=None,
        description="Free-form notes"
    )

    recorded_by: str = Field(
        description="ID of the user who recorded the payment"
    )

    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Record creation timestamp"
    )

    class Config:
        """SQLModel configuration"""
        json_schema_extra = {
            "example": {
                "id": "9b2e4c1f-5a3d-4e6b-8c7a-1d2f3e4a5b6c",
                "invoice_id": "4f1c2a9e-0d7b-4b8e-9a51-6f3f0c1d2e3a",
                "amount": "5000.00",
                "payment_method": "bank_transfer",
                "payment_date": "2024-02-10T00:00:00Z",
                "transaction_reference": "UTR123456",
                "notes": None,
                "recorded_by": "user_42",
                "created_at": "2024-02-10T09:15:00Z"
            }
        }
