"""Invoice Link Reconciliation Background Worker

Periodically checks that every invoice's source orders point back at it
and repairs links left incomplete by an interrupted invoice creation.
Can be run as a standalone script or integrated with a scheduler.
"""

import asyncio
import logging
from datetime import datetime, timezone
from typing import Optional
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from src.adapter.repositories.invoice_repository import DocumentInvoiceRepository
from src.adapter.repositories.order_repository import DocumentOrderRepository
from src.adapter.services.sql_document_store import SqlAlchemyDocumentStore
from src.app.services.document_store import DocumentStore
from src.app.use_cases.invoicing import ReconcileInvoiceLinks, LinkReconciliationResultDTO

logger = logging.getLogger(__name__)


class InvoiceLinkReconcilerWorker:
    """
    Background worker for invoice link reconciliation

    Features:
    - Links source orders that were never marked invoiced
    - Logs orders claimed by another invoice for investigation
    - Can run once or continuously

    Usage:
        # Run once
        worker = InvoiceLinkReconcilerWorker()
        result = await worker.run_once()

        # Run continuously
        worker = InvoiceLinkReconcilerWorker()
        await worker.run_forever(interval_seconds=3600)
    """

    def __init__(
        self,
        db_uri: Optional[str] = None,
        store: Optional[DocumentStore] = None,
    ):
        """
        Initialize the worker

        Args:
            db_uri: Database URI (defaults to ApplicationConfig.DB_URI)
            store: Document store to use instead of opening the database
        """
        self.engine = None
        if store is None:
            self.db_uri = db_uri or ApplicationConfig.DB_URI
            self.engine = create_async_engine(self.db_uri, echo=False, future=True)
            session_factory = sessionmaker(
                self.engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
            )
            store = SqlAlchemyDocumentStore(
                session_factory, max_retries=ApplicationConfig.COUNTER_MAX_RETRIES
            )
        self.store = store

        logger.info("InvoiceLinkReconcilerWorker initialized")

    async def run_once(self) -> LinkReconciliationResultDTO:
        """
        Run reconciliation once

        Returns:
            LinkReconciliationResultDTO with reconciliation results
        """
        if not ApplicationConfig.LINK_RECONCILIATION_ENABLED:
            logger.info("Invoice link reconciliation is disabled, skipping")
            return LinkReconciliationResultDTO(
                total_invoices_checked=0,
                orders_repaired=0,
                discrepancies_found=0,
                discrepancies=[],
                reconciliation_time=datetime.now(timezone.utc),
                execution_time_ms=0,
            )

        use_case = ReconcileInvoiceLinks(
            invoice_repo=DocumentInvoiceRepository(
                self.store, collection_path=ApplicationConfig.INVOICES_PATH
            ),
            order_repo_for=lambda collection: DocumentOrderRepository(
                self.store, collection_path=collection
            ),
            default_collection=ApplicationConfig.ORDERS_PATH,
        )

        result = await use_case.execute()

        if result.is_err():
            logger.error(f"Reconciliation failed: {result.error.message}")
            raise RuntimeError(f"Reconciliation failed: {result.error.message}")

        response = result.value

        if response.discrepancies_found > 0:
            logger.error(
                f"ALERT: {response.discrepancies_found} invoice link discrepancies found!"
            )
            for d in response.discrepancies:
                logger.error(
                    f"  - Invoice {d.invoice_number}, order {d.order_id}: "
                    f"{d.reason} (linked_to={d.linked_to})"
                )

        return response

    async def run_forever(self, interval_seconds: int = 3600):
        """
        Run reconciliation continuously at specified interval

        Args:
            interval_seconds: Seconds between reconciliation runs (default: 1 hour)
        """
        logger.info(
            f"Starting continuous invoice link reconciliation with {interval_seconds}s interval"
        )

        while True:
            try:
                result = await self.run_once()
                logger.info(
                    f"Reconciliation cycle complete. "
                    f"Checked {result.total_invoices_checked} invoices, "
                    f"repaired {result.orders_repaired} orders, "
                    f"found {result.discrepancies_found} discrepancies "
                    f"in {result.execution_time_ms}ms"
                )
            except Exception as e:
                logger.error(f"Reconciliation cycle failed: {e}")

            await asyncio.sleep(interval_seconds)

    async def shutdown(self):
        """Cleanup resources"""
        if self.engine is not None:
            await self.engine.dispose()
        logger.info("InvoiceLinkReconcilerWorker shutdown complete")


async def main():
    """
    Entry point for running the worker as a standalone script

    Usage:
        # Run once
        python -m src.worker.invoice_link_reconciler --once

        # Run continuously (default: hourly)
        python -m src.worker.invoice_link_reconciler

        # Run continuously with custom interval (in seconds)
        python -m src.worker.invoice_link_reconciler --interval 600
    """
    import argparse

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    parser = argparse.ArgumentParser(description="Invoice Link Reconciliation Worker")
    parser.add_argument(
        "--once", action="store_true", help="Run once and exit"
    )
    parser.add_argument(
        "--interval", type=int, default=ApplicationConfig.LINK_RECONCILIATION_INTERVAL_SECONDS,
        help="Interval between runs in seconds (default: 3600 = 1 hour)"
    )
    args = parser.parse_args()

    worker = InvoiceLinkReconcilerWorker()

    try:
        if args.once:
            result = await worker.run_once()
            print("Reconciliation complete:")
            print(f"  Total invoices checked: {result.total_invoices_checked}")
            print(f"  Orders repaired: {result.orders_repaired}")
            print(f"  Discrepancies found: {result.discrepancies_found}")
            print(f"  Execution time: {result.execution_time_ms}ms")
            if result.discrepancies:
                print("\nDiscrepancies:")
                for d in result.discrepancies:
                    print(
                        f"  - Invoice {d.invoice_number}: order {d.order_id} "
                        f"{d.reason} (linked_to={d.linked_to})"
                    )
        else:
            await worker.run_forever(interval_seconds=args.interval)
    except KeyboardInterrupt:
        logger.info("Received shutdown signal")
    finally:
        await worker.shutdown()


if __name__ == "__main__":
    asyncio.run(main())
