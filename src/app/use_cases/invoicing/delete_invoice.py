"""DeleteInvoice Use Case

Administrative removal of an invoice and release of its source orders.
"""

import logging
from libs.result import Result, Return, Error
from src.app.repositories.invoice_repository import InvoiceRepository
from src.app.services.document_store import DocumentStoreError
from src.app.use_cases.store_errors import store_error
from .dtos import DeleteInvoiceResponseDTO
from .link_orders import OrderRepositoryFactory

logger = logging.getLogger(__name__)


class DeleteInvoice:
    """
    Use Case: Delete an invoice

    Business Rules:
    1. Invoice must exist
    2. Source orders still pointing at this invoice are detached first
       and get back the status they had before invoicing
    3. Orders pointing elsewhere are left alone
    4. The invoice number is never handed out again

    Flow:
    1. Load invoice
    2. Detach source orders (a store failure stops before the delete)
    3. Remove the invoice record
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

    async def execute(self, invoice_number: int) -> Result[DeleteInvoiceResponseDTO]:
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
            detached, skipped = [], []
            for order_id in invoice.source_order_ids:
                if await order_repo.detach(order_id, invoice.number):
                    detached.append(order_id)
                else:
                    skipped.append(order_id)

            await self.invoice_repo.delete(invoice.number)
            logger.info(
                f"Deleted invoice {invoice.number}; detached {len(detached)} orders, "
                f"skipped {len(skipped)}"
            )

            return Return.ok(
                DeleteInvoiceResponseDTO(
                    invoice_number=invoice.number,
                    detached_order_ids=detached,
                    skipped_order_ids=skipped,
                )
            )

        except DocumentStoreError as e:
            logger.error(f"Store failure while deleting invoice {invoice_number}: {e}")
            return Return.err(store_error(e))
        except Exception as e:
            return Return.err(
                Error(
                    code="DELETE_INVOICE_FAILED",
                    message=f"Failed to delete invoice {invoice_number}",
                    reason=str(e),
                )
            )
