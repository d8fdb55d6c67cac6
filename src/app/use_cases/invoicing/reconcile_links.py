"""ReconcileInvoiceLinks Use Case

Finds invoices whose source orders do not point back at them and
repairs the links that can still be made.
"""

import logging
import time
from datetime import datetime, timezone
from typing import List
from libs.result import Result, Return, Error
from src.app.repositories.invoice_repository import InvoiceRepository
from src.app.repositories.order_repository import LinkStatus
from .dtos import LinkDiscrepancyDTO, LinkReconciliationResultDTO
from .link_orders import OrderRepositoryFactory

logger = logging.getLogger(__name__)


class ReconcileInvoiceLinks:
    """
    Use Case: Reconcile invoice -> order links

    Business Rules:
    1. Every source order of an invoice should be invoiced with its number
    2. An order that is not invoiced yet is linked now (repair)
    3. An order invoiced under another number is reported, never moved
    4. A source order that no longer exists is reported

    Flow:
    1. List all invoices
    2. For each source order, compare its invoice number with the invoice
    3. Repair or record a discrepancy
    4. Return counts and discrepancies
    """

    def __init__(
        self,
        invoice_repo: InvoiceRepository,
        order_repo_for: OrderRepositoryFactory,
        default_collection: str = "orders",
    ):
        self.invoice_repo = invoice_repo
        self.order_repo_for = order_repo_for
        self.default_collection = default_collection

    async def execute(self) -> Result[LinkReconciliationResultDTO]:
        start_time = time.time()
        reconciliation_time = datetime.now(timezone.utc)

        try:
            logger.info("Starting invoice link reconciliation")

            invoices = await self.invoice_repo.list_all()
            discrepancies: List[LinkDiscrepancyDTO] = []
            repaired = 0

            for invoice in invoices:
                order_repo = self.order_repo_for(invoice.source_collection or self.default_collection)

                for order_id in invoice.source_order_ids:
                    order = await order_repo.get_by_id(order_id)
                    if order is None:
                        discrepancies.append(
                            LinkDiscrepancyDTO(
                                invoice_number=invoice.number,
                                order_id=order_id,
                                reason="order_missing",
                            )
                        )
                        continue

                    if order.is_invoiced and order.invoice_number == invoice.number:
                        continue

                    if order.is_invoiced:
                        discrepancies.append(
                            LinkDiscrepancyDTO(
                                invoice_number=invoice.number,
                                order_id=order_id,
                                linked_to=order.invoice_number,
                                reason="linked_to_other_invoice",
                            )
                        )
                        continue

                    status = await order_repo.mark_invoiced(order_id, invoice.number)
                    if status in (LinkStatus.LINKED, LinkStatus.ALREADY_LINKED):
                        repaired += 1
                        logger.info(f"Repaired link of order {order_id} to invoice {invoice.number}")
                    else:
                        current = await order_repo.get_by_id(order_id)
                        discrepancies.append(
                            LinkDiscrepancyDTO(
                                invoice_number=invoice.number,
                                order_id=order_id,
                                linked_to=current.invoice_number if current else None,
                                reason="order_missing" if current is None else "linked_to_other_invoice",
                            )
                        )

            execution_time_ms = int((time.time() - start_time) * 1000)

            if discrepancies:
                logger.warning(
                    f"Link reconciliation complete. {len(discrepancies)} discrepancies, "
                    f"{repaired} repaired, across {len(invoices)} invoices in {execution_time_ms}ms"
                )
            else:
                logger.info(
                    f"Link reconciliation complete. {len(invoices)} invoices consistent, "
                    f"{repaired} repaired in {execution_time_ms}ms"
                )

            return Return.ok(
                LinkReconciliationResultDTO(
                    total_invoices_checked=len(invoices),
                    orders_repaired=repaired,
                    discrepancies_found=len(discrepancies),
                    discrepancies=discrepancies,
                    reconciliation_time=reconciliation_time,
                    execution_time_ms=execution_time_ms,
                )
            )

        except Exception as e:
            logger.error(f"Invoice link reconciliation failed: {e}")
            return Return.err(
                Error(
                    code="RECONCILIATION_FAILED",
                    message="Failed to reconcile invoice links",
                    reason=str(e),
                )
            )
