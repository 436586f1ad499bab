"""Payment Repository Interface

Defines the contract for the payment ledger's persistence.
"""

from abc import ABC, abstractmethod
from decimal import Decimal
from typing import Optional, List
from src.domain.payment import Payment


class PaymentRepository(ABC):
    """
    Repository interface for Payment persistence

    Payments are inserted and deleted, never updated.
    """

    @abstractmethod
    async def get_by_id(self, payment_id: str) -> Optional[Payment]:
        """
        Retrieve payment by ID

        Args:
            payment_id: Payment ID

        Returns:
            Payment if found, None otherwise
        """
        pass

    @abstractmethod
    async def list_by_invoice(self, invoice_id: str) -> List[Payment]:
        """
        Retrieve all payments of an invoice, most recent payment_date first

        Args:
            invoice_id: Invoice ID

        Returns:
            List of payments (empty if none)
        """
        pass

    @abstractmethod
    async def create(self, payment: Payment) -> Payment:
        """
        Insert a new payment

        Args:
            payment: Payment entity to persist

        Returns:
            Created Payment
        """
        pass

    @abstractmethod
    async def delete(self, payment_id: str) -> bool:
        """
        Delete a payment

        Args:
            payment_id: Payment ID

        Returns:
            True if a payment was deleted, False if none matched
        """
        pass

    @abstractmethod
    async def get_sum_by_invoice(self, invoice_id: str) -> Decimal:
        """
        Sum of payment amounts of an invoice

        Args:
            invoice_id: Invoice ID

        Returns:
            Sum of amounts (0 when the invoice has no payments)
        """
        pass
