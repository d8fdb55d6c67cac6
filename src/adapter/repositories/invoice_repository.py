"""Document Store Invoice Repository Implementation

Invoices are stored at `invoices/{number}`.
"""

import logging
from typing import List, Optional
from pydantic import ValidationError
from src.app.repositories.invoice_repository import InvoiceRepository, InvoiceAlreadyExistsError
from src.app.services.document_store import ABORT, DocumentStore, join_path
from src.domain.base import utc_now
from src.domain.invoice import Invoice, InvoiceStatus

logger = logging.getLogger(__name__)


class DocumentInvoiceRepository(InvoiceRepository):
    """DocumentStore implementation of InvoiceRepository"""

    def __init__(self, store: DocumentStore, collection_path: str = "invoices"):
        self.store = store
        self.collection_path = collection_path

    def _path(self, number: int) -> str:
        return join_path(self.collection_path, str(number))

    async def create(self, invoice: Invoice) -> Invoice:
        document = invoice.to_document()

        # Never overwrite: a number maps to exactly one invoice
        result = await self.store.transaction(
            self._path(invoice.number),
            lambda current: ABORT if current is not None else document,
        )
        if not result.committed:
            raise InvoiceAlreadyExistsError(f"Invoice {invoice.number} already exists")
        return invoice

    async def get_by_number(self, number: int) -> Optional[Invoice]:
        document = await self.store.get(self._path(number))
        if document is None:
            return None
        return Invoice.from_document(document)

    async def list_all(self, customer_id: Optional[str] = None) -> List[Invoice]:
        documents = await self.store.list_children(self.collection_path)
        invoices = []
        for key, document in documents.items():
            try:
                invoice = Invoice.from_document(document)
            except ValidationError as e:
                logger.warning(f"Skipping malformed invoice {self._path(key)}: {e.error_count()} errors")
                continue
            if customer_id is None or invoice.customer_id == customer_id:
                invoices.append(invoice)
        return sorted(invoices, key=lambda inv: inv.number)

    async def update_status(self, number: int, status: InvoiceStatus) -> Optional[Invoice]:
        def change(current):
            if not isinstance(current, dict):
                return ABORT
            updated = dict(current)
            updated["status"] = status.value
            updated["updatedAt"] = utc_now().isoformat()
            return updated

        result = await self.store.transaction(self._path(number), change)
        if not result.committed:
            return None
        return Invoice.from_document(result.value)

    async def delete(self, number: int) -> None:
        await self.store.remove(self._path(number))
