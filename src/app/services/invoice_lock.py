"""Per-invoice lock manager

Serializes payment mutations on the same invoice inside one process.
Different invoices never contend. Cross-process serialization is provided
by SELECT FOR UPDATE on the invoice row inside the locked section.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict
from src.domain.exceptions import ConcurrentModification

logger = logging.getLogger(__name__)


class InvoiceLockManager:
    """
    Registry of asyncio locks keyed by invoice ID

    Locks are created on first use and dropped once nobody holds or waits
    for them, so the registry does not grow with the number of invoices.

    Usage:
        async with lock_manager.hold(invoice_id):
            ...  # mutate ledger, reconcile, commit
    """

    def __init__(self, timeout_seconds: float = 5.0, max_retries: int = 3):
        """
        Args:
            timeout_seconds: Wait per acquisition attempt
            max_retries: Attempts before giving up with ConcurrentModification
        """
        self.timeout_seconds = timeout_seconds
        self.max_retries = max(1, max_retries)
        self._locks: Dict[str, asyncio.Lock] = {}
        self._users: Dict[str, int] = {}

    @asynccontextmanager
    async def hold(self, invoice_id: str) -> AsyncIterator[None]:
        lock = self._locks.get(invoice_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[invoice_id] = lock
        self._users[invoice_id] = self._users.get(invoice_id, 0) + 1

        try:
            await self._acquire(invoice_id, lock)
            try:
                yield
            finally:
                lock.release()
        finally:
            self._users[invoice_id] -= 1
            if self._users[invoice_id] == 0:
                del self._users[invoice_id]
                del self._locks[invoice_id]

    async def _acquire(self, invoice_id: str, lock: asyncio.Lock) -> None:
        for attempt in range(1, self.max_retries + 1):
            try:
                await asyncio.wait_for(lock.acquire(), timeout=self.timeout_seconds)
                return
            except asyncio.TimeoutError:
                logger.warning(
                    f"Lock for invoice {invoice_id} not acquired "
                    f"(attempt {attempt}/{self.max_retries}, timeout={self.timeout_seconds}s)"
                )

        raise ConcurrentModification(invoice_id, self.max_retries)

    def active_count(self) -> int:
        """Number of invoices with a held or awaited lock"""
        return len(self._locks)
