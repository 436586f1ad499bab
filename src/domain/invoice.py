"""Invoice Domain Entity

Tracks an invoice's total and its payment-derived state.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional
from sqlmodel import Field, Column, Index
from sqlalchemy import Numeric, String
from src.domain.base import BaseModel, generate_uuid


class InvoiceStatus(str, Enum):
    """Invoice payment status, derived from paid_amount and total"""
    PENDING = "pending"
    PARTIAL = "partial"
    PAID = "paid"


class Invoice(BaseModel, table=True):
    """
    Invoice - Billing document that receives payments

    Domain Rules:
    - invoice_number must be unique
    - total is fixed by finalization and read-only for payment handling
    - paid_amount always equals the sum of the invoice's payments
    - status is recomputed from (paid_amount, total) on every payment change
    - last_payment_date is the latest payment_date, None without payments
    """

    __tablename__ = "invoices"
    __table_args__ = (
        Index('ix_invoices_status', 'status'),
        Index('ix_invoices_invoice_number', 'invoice_number', unique=True),
    )

    id: str = Field(
        default_factory=generate_uuid,
        primary_key=True,
        description="Unique invoice identifier (UUID)"
    )

    invoice_number: str = Field(
        sa_column=Column(String(50), nullable=False, unique=True),
        description="Unique invoice number (e.g., INV-2024-001)"
    )

    total: Decimal = Field(
        sa_column=Column(Numeric(18, 2), nullable=False),
        description="Invoice total (precision: 18,2)"
    )

    paid_amount: Decimal = Field(
        default=Decimal("0"),
        sa_column=Column(Numeric(18, 2), nullable=False, default=0),
        description="Sum of recorded payments (derived)"
    )

    remaining_amount: Decimal = Field(
        default=Decimal("0"),
        sa_column=Column(Numeric(18, 2), nullable=False, default=0),
        description="Outstanding amount, max(total - paid_amount, 0) (derived)"
    )

    status: InvoiceStatus = Field(
        default=InvoiceStatus.PENDING,
        description="Payment status (pending, partial, paid)"
    )

    last_payment_date: Optional[datetime] = Field(
        default=None,
        description="Date of the most recent payment (derived)"
    )

    created_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Invoice creation timestamp"
    )

    updated_at: datetime = Field(
        default_factory=datetime.utcnow,
        description="Last update timestamp"
    )

    class Config:
        """SQLModel configuration"""
        json_schema_extra = {
            "example": {
                "id": "4f1c2a9e-0d7b-4b8e-9a51-6f3f0c1d2e3a",
                "invoice_number": "INV-2024-001",
                "total": "10000.00",
                "paid_amount": "7000.00",
                "remaining_amount": "3000.00",
                "status": "partial",
                "last_payment_date": "2024-02-10T00:00:00Z",
                "created_at": "2024-01-31T00:00:00Z",
                "updated_at": "2024-02-10T00:00:00Z"
            }
        }
