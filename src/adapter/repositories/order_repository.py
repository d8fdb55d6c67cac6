"""Document Store Order Repository Implementation

Orders live one document per order under a collection path
(e.g. `orders/{id}` or `salesOrders/{id}`).
"""

import logging
from typing import List, Optional
from pydantic import ValidationError
from src.app.repositories.order_repository import OrderRepository, LinkStatus
from src.app.services.document_store import ABORT, DocumentStore, join_path
from src.domain.base import utc_now
from src.domain.order import Order, OrderStatus

logger = logging.getLogger(__name__)


class DocumentOrderRepository(OrderRepository):
    """
    DocumentStore implementation of OrderRepository

    Linking writes go through store transactions and only touch the
    invoicing fields, so fields this service does not model are kept.
    """

    def __init__(self, store: DocumentStore, collection_path: str = "orders"):
        self.store = store
        self.collection_path = collection_path

    @property
    def collection(self) -> str:
        return self.collection_path

    def _path(self, order_id: str) -> str:
        return join_path(self.collection_path, order_id)

    def _to_order(self, order_id: str, document) -> Optional[Order]:
        if not isinstance(document, dict):
            logger.warning(f"Skipping non-object order {self._path(order_id)}")
            return None
        try:
            return Order.from_document(document, id=order_id)
        except ValidationError as e:
            logger.warning(f"Skipping malformed order {self._path(order_id)}: {e.error_count()} errors")
            return None

    async def list_orders(self) -> List[Order]:
        documents = await self.store.list_children(self.collection_path)
        orders = []
        for order_id, document in documents.items():
            order = self._to_order(order_id, document)
            if order is not None:
                orders.append(order)
        return orders

    async def get_by_id(self, order_id: str) -> Optional[Order]:
        document = await self.store.get(self._path(order_id))
        if document is None:
            return None
        return self._to_order(order_id, document)

    async def mark_invoiced(self, order_id: str, invoice_number: int) -> LinkStatus:
        def mark(current):
            if not isinstance(current, dict):
                return ABORT
            if current.get("invoiced") or current.get("invoiceNumber") is not None:
                return ABORT
            updated = dict(current)
            updated["invoiced"] = True
            updated["invoiceNumber"] = invoice_number
            if current.get("status") is not None:
                updated["statusBeforeInvoicing"] = current["status"]
            updated["status"] = OrderStatus.INVOICED.value
            updated["updatedAt"] = utc_now().isoformat()
            return updated

        result = await self.store.transaction(self._path(order_id), mark)
        if result.committed:
            return LinkStatus.LINKED

        current = result.value
        if not isinstance(current, dict):
            return LinkStatus.MISSING
        linked_to = current.get("invoiceNumber")
        if linked_to is not None and str(linked_to) == str(invoice_number):
            return LinkStatus.ALREADY_LINKED
        return LinkStatus.CONFLICT

    async def detach(self, order_id: str, invoice_number: int) -> bool:
        def unmark(current):
            if not isinstance(current, dict):
                return ABORT
            if str(current.get("invoiceNumber")) != str(invoice_number):
                return ABORT
            updated = dict(current)
            updated["invoiced"] = False
            updated.pop("invoiceNumber", None)
            previous = updated.pop("statusBeforeInvoicing", None)
            if previous is not None:
                updated["status"] = previous
            updated["updatedAt"] = utc_now().isoformat()
            return updated

        result = await self.store.transaction(self._path(order_id), unmark)
        return result.committed
