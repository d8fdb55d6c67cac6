"""GetInvoice Use Case

Retrieves a stored invoice by number.
"""

from libs.result import Result, Return, Error
from src.app.repositories.invoice_repository import InvoiceRepository
from src.app.services.document_store import DocumentStoreError
from src.app.use_cases.store_errors import store_error
from .dtos import InvoiceDTO


class GetInvoice:
    """Use Case: Fetch one invoice"""

    def __init__(self, invoice_repo: InvoiceRepository):
        self.invoice_repo = invoice_repo

    async def execute(self, invoice_number: int) -> Result[InvoiceDTO]:
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
            return Return.ok(InvoiceDTO.from_invoice(invoice))

        except DocumentStoreError as e:
            return Return.err(store_error(e))
        except Exception as e:
            return Return.err(
                Error(
                    code="GET_INVOICE_FAILED",
                    message="Failed to retrieve invoice",
                    reason=str(e),
                )
            )
