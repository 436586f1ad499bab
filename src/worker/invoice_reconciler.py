"""Invoice Reconciliation Background Worker

Periodically compares each invoice's stored paid amount against the sum of
its payment records, and optionally repairs drifted invoices.
Can be run as a standalone script or integrated with a scheduler.
"""

import asyncio
import logging
from datetime import datetime
from typing import Optional
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from src.adapter.repositories.invoice_repository import SqlAlchemyInvoiceRepository
from src.adapter.repositories.payment_repository import SqlAlchemyPaymentRepository
from src.adapter.repositories.activity_log_repository import SqlAlchemyActivityLogRepository
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.app.services.audit_emitter import AuditEmitter
from src.app.services.invoice_lock import InvoiceLockManager
from src.app.use_cases.payments import (
    ReconcileInvoice,
    ReconcileInvoices,
    InvoiceReconciliationResultDTO,
)

logger = logging.getLogger(__name__)

SYSTEM_ACTOR_ID = "system:invoice-reconciler"


class InvoiceReconcilerWorker:
    """
    Background worker for invoice payment reconciliation

    Features:
    - Compares stored paid amounts against payment sums
    - Logs discrepancies for investigation
    - Repairs drifted invoices when repair is enabled
    - Can run once or continuously

    Usage:
        # Run once
        worker = InvoiceReconcilerWorker()
        result = await worker.run_once()

        # Run continuously
        worker = InvoiceReconcilerWorker()
        await worker.run_forever(interval_seconds=86400)  # Daily
    """

    def __init__(
        self,
        db_uri: Optional[str] = None,
        repair: Optional[bool] = None,
    ):
        """
        Initialize the worker

        Args:
            db_uri: Database URI (defaults to ApplicationConfig.DB_URI)
            repair: Repair drifted invoices (defaults to ApplicationConfig.RECONCILIATION_REPAIR_DRIFT)
        """
        self.db_uri = db_uri or ApplicationConfig.DB_URI
        self.repair = ApplicationConfig.RECONCILIATION_REPAIR_DRIFT if repair is None else repair

        self.engine = create_async_engine(self.db_uri, echo=False, future=True)
        self.async_session_factory = sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
        )
        self.lock_manager = InvoiceLockManager(
            timeout_seconds=ApplicationConfig.INVOICE_LOCK_TIMEOUT_SECONDS,
            max_retries=ApplicationConfig.INVOICE_LOCK_MAX_RETRIES,
        )

        logger.info(f"InvoiceReconcilerWorker initialized (repair={self.repair})")

    async def run_once(self) -> InvoiceReconciliationResultDTO:
        """
        Run reconciliation once

        Returns:
            InvoiceReconciliationResultDTO with reconciliation results
        """
        if not ApplicationConfig.RECONCILIATION_ENABLED:
            logger.info("Invoice reconciliation is disabled, skipping")
            return InvoiceReconciliationResultDTO(
                total_invoices_checked=0,
                discrepancies_found=0,
                discrepancies=[],
                repaired_count=0,
                reconciliation_time=datetime.utcnow(),
                execution_time_ms=0,
            )

        async with self.async_session_factory() as session:
            uow = SqlAlchemyUnitOfWork(session)
            invoice_repo = SqlAlchemyInvoiceRepository(session)
            payment_repo = SqlAlchemyPaymentRepository(session)

            repairer = None
            if self.repair:
                repairer = ReconcileInvoice(
                    uow,
                    invoice_repo,
                    payment_repo,
                    self.lock_manager,
                    audit_emitter=AuditEmitter(uow, SqlAlchemyActivityLogRepository(session)),
                    storage_timeout_seconds=ApplicationConfig.STORAGE_TIMEOUT_SECONDS,
                )

            use_case = ReconcileInvoices(
                invoice_repo=invoice_repo,
                payment_repo=payment_repo,
                repairer=repairer,
                actor_id=SYSTEM_ACTOR_ID,
            )

            result = await use_case.execute()

            if result.is_err():
                logger.error(f"Reconciliation failed: {result.error.message}")
                raise RuntimeError(f"Reconciliation failed: {result.error.message}")

            response = result.value

            if response.discrepancies_found > 0:
                logger.error(
                    f"ALERT: {response.discrepancies_found} invoices have drifted from their payments!"
                )
                for d in response.discrepancies:
                    logger.error(
                        f"  - Invoice {d.invoice_number} (invoice_id={d.invoice_id}): "
                        f"fields={','.join(d.drifted_fields)}, "
                        f"expected={d.calculated_paid_amount}, actual={d.stored_paid_amount}, "
                        f"diff={d.discrepancy}, repaired={d.repaired}"
                    )

            return response

    async def run_forever(self, interval_seconds: int = 86400):
        """
        Run reconciliation continuously at specified interval

        Args:
            interval_seconds: Seconds between reconciliation runs (default: 24 hours)
        """
        logger.info(
            f"Starting continuous invoice reconciliation with {interval_seconds}s interval"
        )

        while True:
            try:
                result = await self.run_once()
                logger.info(
                    f"Reconciliation cycle complete. "
                    f"Checked {result.total_invoices_checked} invoices, "
                    f"found {result.discrepancies_found} discrepancies "
                    f"({result.repaired_count} repaired) in {result.execution_time_ms}ms"
                )
            except Exception as e:
                logger.error(f"Reconciliation cycle failed: {e}")

            await asyncio.sleep(interval_seconds)

    async def shutdown(self):
        """Cleanup resources"""
        await self.engine.dispose()
        logger.info("InvoiceReconcilerWorker shutdown complete")


async def main():
    """
    Entry point for running the worker as a standalone script

    Usage:
        # Run once
        python -m src.worker.invoice_reconciler --once

        # Run once and repair drifted invoices
        python -m src.worker.invoice_reconciler --once --repair

        # Run continuously with custom interval (in seconds)
        python -m src.worker.invoice_reconciler --interval 3600
    """
    import argparse

    logging.basicConfig(
        level=getattr(logging, str(ApplicationConfig.LOG_LEVEL).upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    parser = argparse.ArgumentParser(description="Invoice Reconciliation Worker")
    parser.add_argument(
        "--once", action="store_true", help="Run once and exit"
    )
    parser.add_argument(
        "--repair", action="store_true", default=None,
        help="Repair drifted invoices (default: RECONCILIATION_REPAIR_DRIFT)"
    )
    parser.add_argument(
        "--interval", type=int, default=ApplicationConfig.RECONCILIATION_INTERVAL_SECONDS,
        help="Interval between runs in seconds (default: RECONCILIATION_INTERVAL_SECONDS)"
    )
    args = parser.parse_args()

    worker = InvoiceReconcilerWorker(repair=args.repair)

    try:
        if args.once:
            result = await worker.run_once()
            print("Reconciliation complete:")
            print(f"  Total invoices checked: {result.total_invoices_checked}")
            print(f"  Discrepancies found: {result.discrepancies_found}")
            print(f"  Repaired: {result.repaired_count}")
            print(f"  Execution time: {result.execution_time_ms}ms")
            if result.discrepancies:
                print("\nDiscrepancies:")
                for d in result.discrepancies:
                    print(
                        f"  - Invoice {d.invoice_number}: "
                        f"expected={d.calculated_paid_amount}, "
                        f"actual={d.stored_paid_amount}, "
                        f"diff={d.discrepancy}"
                    )
        else:
            await worker.run_forever(interval_seconds=args.interval)
    except KeyboardInterrupt:
        logger.info("Received shutdown signal")
    finally:
        await worker.shutdown()


if __name__ == "__main__":
    asyncio.run(main())
