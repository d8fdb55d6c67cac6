"""UpdateInvoiceStatus Use Case

Moves an invoice along its payment lifecycle.
"""

import logging
from libs.result import Result, Return, Error
from src.app.repositories.invoice_repository import InvoiceRepository
from src.app.services.document_store import DocumentStoreError
from src.app.use_cases.store_errors import store_error
from src.domain.invoice import InvoiceStatus
from .dtos import InvoiceDTO

logger = logging.getLogger(__name__)


class UpdateInvoiceStatus:
    """
    Use Case: Change an invoice's payment status

    Business Rules:
    1. created -> pending -> paid, or created -> paid directly
    2. paid is terminal
    3. Setting the current status again is a no-op
    """

    def __init__(self, invoice_repo: InvoiceRepository):
        self.invoice_repo = invoice_repo

    async def execute(self, invoice_number: int, status: str) -> Result[InvoiceDTO]:
        try:
            try:
                target = InvoiceStatus.parse(status)
            except ValueError:
                return Return.err(
                    Error(
                        code="INVALID_STATUS",
                        message=f"Unknown invoice status '{status}'",
                        reason=f"Expected one of {[s.value for s in InvoiceStatus]}",
                    )
                )

            invoice = await self.invoice_repo.get_by_number(invoice_number)
            if invoice is None:
                return Return.err(
                    Error(
                        code="INVOICE_NOT_FOUND",
                        message=f"Invoice {invoice_number} not found",
                        reason="Invoice does not exist",
                    )
                )

            if invoice.status == target:
                return Return.ok(InvoiceDTO.from_invoice(invoice))

            if not invoice.can_transition_to(target):
                return Return.err(
                    Error(
                        code="INVALID_STATUS_TRANSITION",
                        message=f"Cannot change invoice {invoice_number} from "
                                f"{invoice.status.value} to {target.value}",
                        reason="Paid invoices are final",
                    )
                )

            updated = await self.invoice_repo.update_status(invoice_number, target)
            if updated is None:
                return Return.err(
                    Error(
                        code="INVOICE_NOT_FOUND",
                        message=f"Invoice {invoice_number} not found",
                        reason="Invoice was removed during the update",
                    )
                )

            logger.info(f"Invoice {invoice_number} status {invoice.status.value} -> {target.value}")
            return Return.ok(InvoiceDTO.from_invoice(updated))

        except DocumentStoreError as e:
            return Return.err(store_error(e))
        except Exception as e:
            return Return.err(
                Error(
                    code="UPDATE_INVOICE_STATUS_FAILED",
                    message="Failed to update invoice status",
                    reason=str(e),
                )
            )
