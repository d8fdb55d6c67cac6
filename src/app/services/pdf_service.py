"""PDF Generation Service Interface

Defines the contract for rendering invoice documents.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List


@dataclass
class InvoiceDocument:
    """
    Everything the drawing collaborator needs for one invoice

    rows are already formatted strings in the fixed column order:
    sequence no., item code, description, quantity, unit price, line total.
    """
    company_name: str
    company_address: str
    company_phone: str
    recipient_name: str
    recipient_city: str
    invoice_number: str
    invoice_date: str
    order_numbers: str
    rows: List[List[str]] = field(default_factory=list)
    grand_total: str = ""
    currency_symbol: str = "Rs."


INVOICE_COLUMNS = ["No", "Item (SKU)", "Description", "Qty", "Price", "Total"]


class PdfService(ABC):
    """
    Service interface for PDF generation

    Provides PDF generation capabilities for invoices.
    """

    @abstractmethod
    def render_invoice(self, document: InvoiceDocument) -> bytes:
        """
        Render an invoice PDF

        Args:
            document: Header fields, formatted table rows and grand total

        Returns:
            PDF document as bytes
        """
        pass
