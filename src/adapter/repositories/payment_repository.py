"""SQLAlchemy Payment Repository Implementation

Implements the payment ledger's persistence using SQLAlchemy async session.
"""

from typing import Optional, List
from decimal import Decimal
from sqlalchemy import delete, func
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.payment_repository import PaymentRepository
from src.domain.money import Money
from src.domain.payment import Payment


class SqlAlchemyPaymentRepository(PaymentRepository):
    """
    SQLAlchemy implementation of PaymentRepository

    Uses async session for database operations. Writes are flushed, not
    committed; the use case's unit of work owns the commit.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, payment_id: str) -> Optional[Payment]:
        """
        Retrieve payment by ID

        Args:
            payment_id: Payment ID

        Returns:
            Payment if found, None otherwise
        """
        statement = select(Payment).where(Payment.id == payment_id)
        result = await self.session.execute(statement)
        return result.scalar_one_or_none()

    async def list_by_invoice(self, invoice_id: str) -> List[Payment]:
        """
        Retrieve all payments of an invoice, most recent payment_date first

        Args:
            invoice_id: Invoice ID

        Returns:
            List of payments
        """
        statement = (
            select(Payment)
            .where(Payment.invoice_id == invoice_id)
            .order_by(Payment.payment_date.desc(), Payment.created_at.desc())
        )
        result = await self.session.execute(statement)
        return list(result.scalars().all())

    async def create(self, payment: Payment) -> Payment:
        """
        Insert a new payment

        Args:
            payment: Payment entity to persist

        Returns:
            Created Payment
        """
        self.session.add(payment)
        await self.session.flush()
        await self.session.refresh(payment)
        return payment

    async def delete(self, payment_id: str) -> bool:
        """
        Delete a payment

        Args:
            payment_id: Payment ID

        Returns:
            True if a row was deleted, False otherwise
        """
        statement = delete(Payment).where(Payment.id == payment_id)
        result = await self.session.execute(statement)
        await self.session.flush()
        return result.rowcount > 0

    async def get_sum_by_invoice(self, invoice_id: str) -> Decimal:
        """
        Sum of payment amounts of an invoice

        Args:
            invoice_id: Invoice ID

        Returns:
            Sum of amounts (0 when the invoice has no payments)
        """
        statement = (
            select(func.coalesce(func.sum(Payment.amount), 0))
            .where(Payment.invoice_id == invoice_id)
        )
        result = await self.session.execute(statement)
        total = result.scalar_one()
        # SQLite sums NUMERIC as REAL; stored amounts have 2 decimal places
        return Money.of(Decimal(str(total))).quantize().amount
