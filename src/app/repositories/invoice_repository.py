"""Invoice Repository Interface

Defines the contract for invoice persistence operations.
"""

from abc import ABC, abstractmethod
from typing import List, Optional
from src.domain.invoice import Invoice, InvoiceStatus


class InvoiceAlreadyExistsError(Exception):
    """An invoice is already stored under this number"""


class InvoiceRepository(ABC):
    """
    Repository interface for Invoice persistence

    Invoices are keyed by their number.
    """

    @abstractmethod
    async def create(self, invoice: Invoice) -> Invoice:
        """
        Persist a new invoice under its number

        Raises:
            InvoiceAlreadyExistsError: the number is already taken
        """
        pass

    @abstractmethod
    async def get_by_number(self, number: int) -> Optional[Invoice]:
        """
        Retrieve invoice by number

        Returns:
            Invoice if found, None otherwise
        """
        pass

    @abstractmethod
    async def list_all(self, customer_id: Optional[str] = None) -> List[Invoice]:
        """
        Retrieve invoices, optionally for one customer

        Returns:
            Invoices ordered by number
        """
        pass

    @abstractmethod
    async def update_status(self, number: int, status: InvoiceStatus) -> Optional[Invoice]:
        """
        Change the payment status of an invoice

        Returns:
            Updated Invoice, or None if it does not exist
        """
        pass

    @abstractmethod
    async def delete(self, number: int) -> None:
        """Remove an invoice record"""
        pass
