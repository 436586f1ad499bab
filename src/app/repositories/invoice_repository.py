"""Invoice Repository Interface

Defines the contract for invoice persistence operations.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from decimal import Decimal
from typing import Optional, List
from src.domain.invoice import Invoice, InvoiceStatus


class InvoiceRepository(ABC):
    """
    Repository interface for Invoice persistence

    Payment handling only writes the derived fields; the total is owned by
    invoice finalization.
    """

    @abstractmethod
    async def create(self, invoice: Invoice) -> Invoice:
        """
        Create a new invoice

        Args:
            invoice: Invoice entity to persist

        Returns:
            Created Invoice
        """
        pass

    @abstractmethod
    async def get_by_id(self, invoice_id: str, for_update: bool = False) -> Optional[Invoice]:
        """
        Retrieve invoice by ID with optional row-level locking

        Args:
            invoice_id: Invoice ID
            for_update: If True, locks the row with SELECT FOR UPDATE

        Returns:
            Invoice if found, None otherwise
        """
        pass

    @abstractmethod
    async def get_all(self) -> List[Invoice]:
        """
        Retrieve all invoices

        Used by the drift sweep.

        Returns:
            List of invoices
        """
        pass

    @abstractmethod
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

        Args:
            invoice_id: Invoice ID
            paid_amount: Sum of current payments
            status: Derived payment status
            last_payment_date: Latest payment date or None
            remaining_amount: Outstanding amount

        Returns:
            Updated Invoice
        """
        pass
