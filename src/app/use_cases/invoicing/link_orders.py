"""LinkOrdersToInvoice Use Case

Marks an invoice's source orders as invoiced. Runs as the last step of
invoice creation and again on demand when that step was incomplete;
it never reserves a new invoice number.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable, List
from libs.result import Result, Return, Error
from src.app.repositories.invoice_repository import InvoiceRepository
from src.app.repositories.order_repository import OrderRepository, LinkStatus
from src.app.services.document_store import DocumentStoreError
from src.app.use_cases.store_errors import store_error
from .dtos import LinkOrdersResponseDTO

logger = logging.getLogger(__name__)

OrderRepositoryFactory = Callable[[str], OrderRepository]


@dataclass
class LinkReport:
    """Per-order outcome of a linking pass"""
    linked: List[str] = field(default_factory=list)
    already_linked: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
    conflicting: List[str] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return not self.failed and not self.conflicting


async def link_source_orders(
    order_repo: OrderRepository,
    invoice_number: int,
    order_ids: Iterable[str],
) -> LinkReport:
    """
    Mark each order invoiced with invoice_number, one after another

    Store failures on one order do not stop the others; they are
    collected as failed so the caller can report and retry.
    """
    report = LinkReport()
    for order_id in order_ids:
        try:
            status = await order_repo.mark_invoiced(order_id, invoice_number)
        except DocumentStoreError as e:
            logger.error(f"Failed to link order {order_id} to invoice {invoice_number}: {e}")
            report.failed.append(order_id)
            continue

        if status == LinkStatus.LINKED:
            report.linked.append(order_id)
        elif status == LinkStatus.ALREADY_LINKED:
            report.already_linked.append(order_id)
        else:
            logger.warning(
                f"Order {order_id} cannot be linked to invoice {invoice_number}: {status.value}"
            )
            report.conflicting.append(order_id)

    if not report.complete:
        logger.error(
            f"DATA CONSISTENCY: invoice {invoice_number} is partially linked; "
            f"failed={report.failed}, conflicting={report.conflicting}"
        )
    return report


class LinkOrdersToInvoice:
    """
    Use Case: Retry linking an existing invoice's source orders

    Business Rules:
    1. Invoice must exist
    2. Orders already pointing at this invoice count as linked
    3. Orders pointing at another invoice are conflicts, never overwritten
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

    async def execute(self, invoice_number: int) -> Result[LinkOrdersResponseDTO]:
        try:
            invoice = await self.invoice_repo.get_by_number(invoice_number)
            if invoice is None:
                return Return.err(
                    Error(
                        code="INVOICE_NOT_FOUND",
                        message=f"Invoice {invoice_number} not found",
                        reason="Invoice does not exist",
                    )
                )

            order_repo = self.order_repo_for(invoice.source_collection or self.default_collection)
            report = await link_source_orders(order_repo, invoice.number, invoice.source_order_ids)

            return Return.ok(
                LinkOrdersResponseDTO(
                    invoice_number=invoice.number,
                    complete=report.complete,
                    linked_order_ids=report.linked,
                    already_linked_order_ids=report.already_linked,
                    failed_order_ids=report.failed,
                    conflicting_order_ids=report.conflicting,
                )
            )

        except DocumentStoreError as e:
            return Return.err(store_error(e))
        except Exception as e:
            return Return.err(
                Error(
                    code="LINK_ORDERS_FAILED",
                    message=f"Failed to link orders to invoice {invoice_number}",
                    reason=str(e),
                )
            )
