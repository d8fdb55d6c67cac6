"""Order Repository Interface

Defines the contract for reading orders and linking them to invoices.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import List, Optional
from src.domain.order import Order


class LinkStatus(str, Enum):
    """Outcome of marking one order as invoiced"""
    LINKED = "linked"
    ALREADY_LINKED = "already_linked"
    CONFLICT = "conflict"
    MISSING = "missing"


class OrderRepository(ABC):
    """
    Repository interface for Order persistence

    Read-only to the invoicing flow except for the invoiced transition.
    """

    @property
    @abstractmethod
    def collection(self) -> str:
        """Store path of the order collection (recorded on invoices)"""
        pass

    @abstractmethod
    async def list_orders(self) -> List[Order]:
        """
        Retrieve every order in the collection

        Returns:
            Orders in stored key order (records that fail validation are skipped)
        """
        pass

    @abstractmethod
    async def get_by_id(self, order_id: str) -> Optional[Order]:
        """
        Retrieve order by ID

        Returns:
            Order if found, None otherwise
        """
        pass

    @abstractmethod
    async def mark_invoiced(self, order_id: str, invoice_number: int) -> LinkStatus:
        """
        Conditionally mark an order as invoiced

        The write only happens if the stored order is not yet invoiced.
        An order already pointing at the same invoice number counts as
        ALREADY_LINKED; one pointing at another invoice is a CONFLICT.

        Args:
            order_id: Order identifier
            invoice_number: Invoice the order is billed on

        Returns:
            LinkStatus
        """
        pass

    @abstractmethod
    async def detach(self, order_id: str, invoice_number: int) -> bool:
        """
        Clear the invoiced mark if the order points at invoice_number

        Restores the status the order had before invoicing.

        Returns:
            True if the order was detached
        """
        pass
