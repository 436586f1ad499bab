"""SQLAlchemy Invoice Repository Implementation

Implements invoice persistence using SQLAlchemy async session.
"""

from typing import Optional, List
from datetime import datetime
from decimal import Decimal
from sqlmodel import select
from sqlmodel.ext.asyncio.session import AsyncSession
from src.app.repositories.invoice_repository import InvoiceRepository
from src.domain.invoice import Invoice, InvoiceStatus


class SqlAlchemyInvoiceRepository(InvoiceRepository):
    """
    SQLAlchemy implementation of InvoiceRepository

    Features:
    - Pessimistic locking via SELECT FOR UPDATE (ignored by SQLite)
    - Derived-field updates flushed inside the caller's transaction
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, invoice: Invoice) -> Invoice:
        """
        Create a new invoice

        Args:
            invoice: Invoice entity to persist

        Returns:
            Created Invoice
        """
        self.session.add(invoice)
        await self.session.flush()
        await self.session.refresh(invoice)
        return invoice

    async def get_by_id(self, invoice_id: str, for_update: bool = False) -> Optional[Invoice]:
        """
        Retrieve invoice by ID with optional row-level locking

        Args:
            invoice_id: Invoice ID
            for_update: If True, locks the row with SELECT FOR UPDATE

        Returns:
            Invoice if found, None otherwise
        """
        statement = select(Invoice).where(Invoice.id == invoice_id)

        if for_update:
            statement = statement.with_for_update()

        result = await self.session.execute(statement)
        return result.scalar_one_or_none()

    async def get_all(self) -> List[Invoice]:
        """
        Retrieve all invoices ordered by creation time

        Returns:
            List of invoices
        """
        statement = select(Invoice).order_by(Invoice.created_at)
        result = await self.session.execute(statement)
        return list(result.scalars().all())

    async def update_derived_fields(
        self,
        invoice_id: str,
        paid_amount: Decimal,
        status: InvoiceStatus,
        last_payment_date: Optional[datetime],
        remaining_amount: Decimal,
    ) -> Invoice:
        """
        Write the payment-derived fields of an invoice

        Note:
            Should be called within a transaction with the invoice already locked

        Raises:
            LookupError: invoice does not exist
        """
        invoice = await self.get_by_id(invoice_id)
        if invoice is None:
            raise LookupError(f"Invoice {invoice_id} not found")

        invoice.paid_amount = paid_amount
        invoice.remaining_amount = remaining_amount
        invoice.status = status
        invoice.last_payment_date = last_payment_date
        invoice.updated_at = datetime.utcnow()

        self.session.add(invoice)
        await self.session.flush()
        await self.session.refresh(invoice)
        return invoice
