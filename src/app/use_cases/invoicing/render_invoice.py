"""RenderInvoiceDocument Use Case

Produces the printable PDF for a stored invoice.
"""

import base64
import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Sequence
from pydantic import ValidationError
from libs.result import Result, Return, Error
from src.app.repositories.invoice_repository import InvoiceRepository
from src.app.repositories.settings_repository import SettingsRepository
from src.app.services.document_store import DocumentStoreError
from src.app.services.pdf_service import INVOICE_COLUMNS, InvoiceDocument, PdfService
from src.app.use_cases.store_errors import store_error
from src.domain.invoice import AggregatedLineItem, Invoice
from .dtos import RenderedInvoiceDTO

logger = logging.getLogger(__name__)

REQUIRED_INVOICE_FIELDS = ("number", "issueDate", "customerId", "items")

# Order number lists longer than this are shortened on the document
MAX_LISTED_ORDERS = 5
LISTED_ORDERS_WHEN_TRUNCATED = 3


def format_amount(amount: Decimal, symbol: str = "Rs.") -> str:
    return f"{symbol} {amount:,.2f}"


def summarize_order_numbers(order_ids: Sequence[str]) -> str:
    """'a, b, c + 4 more' once more than five orders are listed"""
    if len(order_ids) > MAX_LISTED_ORDERS:
        shown = ", ".join(order_ids[:LISTED_ORDERS_WHEN_TRUNCATED])
        return f"{shown} + {len(order_ids) - LISTED_ORDERS_WHEN_TRUNCATED} more"
    return ", ".join(order_ids)


def build_invoice_rows(
    items: Sequence[AggregatedLineItem],
    symbol: str = "Rs.",
    min_rows: int = 15,
) -> List[List[str]]:
    """Six-column table rows, padded with blank rows up to min_rows"""
    rows = [
        [
            str(index),
            item.item_code,
            item.description,
            str(item.quantity),
            format_amount(item.unit_price, symbol),
            format_amount(item.total, symbol),
        ]
        for index, item in enumerate(items, start=1)
    ]
    while len(rows) < min_rows:
        rows.append([""] * len(INVOICE_COLUMNS))
    return rows


def missing_invoice_fields(error: ValidationError) -> List[str]:
    """
    Names of required fields absent from a stored invoice document

    Returns an empty list when the validation failure is about
    something other than missing required fields.
    """
    missing = set()
    for detail in error.errors():
        if detail["type"] != "missing" or len(detail["loc"]) != 1:
            continue
        missing.add(str(detail["loc"][0]))
        document = detail.get("input")
        if isinstance(document, dict) and not document.get("items"):
            missing.add("items")
    return [name for name in REQUIRED_INVOICE_FIELDS if name in missing]


class RenderInvoiceDocument:
    """
    Use Case: Render an invoice as a PDF document

    Business Rules:
    1. Invoice must exist
    2. number, issue date, customer and at least one item are required;
       the error names every missing field
    3. Company header falls back to configured defaults
    4. Recipient falls back to the invoice customer name and "Unknown City"

    Flow:
    1. Load invoice and check required fields
    2. Load company and customer profiles
    3. Format table rows and header block
    4. Draw the PDF and return it base64 encoded
    """

    def __init__(
        self,
        invoice_repo: InvoiceRepository,
        settings_repo: SettingsRepository,
        pdf_service: PdfService,
        currency_symbol: str = "Rs.",
        min_rows: int = 15,
    ):
        self.invoice_repo = invoice_repo
        self.settings_repo = settings_repo
        self.pdf_service = pdf_service
        self.currency_symbol = currency_symbol
        self.min_rows = min_rows

    def _missing_fields_error(self, invoice_number: int, fields: List[str]) -> Error:
        logger.warning(f"Invoice {invoice_number} cannot be rendered, missing {fields}")
        return Error(
            code="MISSING_INVOICE_FIELDS",
            message=f"Invoice is missing required fields: {', '.join(fields)}",
            reason="Invoice record is incomplete",
        )

    async def execute(self, invoice_number: int) -> Result[RenderedInvoiceDTO]:
        """
        Execute invoice rendering

        Args:
            invoice_number: Number of the stored invoice

        Returns:
            Result[RenderedInvoiceDTO]: PDF as base64 or error
        """
        try:
            # Step 1: Load and validate
            try:
                invoice = await self.invoice_repo.get_by_number(invoice_number)
            except ValidationError as e:
                fields = missing_invoice_fields(e)
                if not fields:
                    raise
                return Return.err(self._missing_fields_error(invoice_number, fields))

            if invoice is None:
                return Return.err(
                    Error(
                        code="INVOICE_NOT_FOUND",
                        message=f"Invoice {invoice_number} not found",
                        reason="Invoice does not exist",
                    )
                )

            fields = self._blank_fields(invoice)
            if fields:
                return Return.err(self._missing_fields_error(invoice_number, fields))

            # Step 2: Profiles
            company = await self.settings_repo.get_company_profile()
            customer = await self.settings_repo.get_customer_profile(invoice.customer_id)
            recipient_name = customer.to_name if customer else (invoice.customer_name or invoice.customer_id)
            recipient_city = customer.to_city if customer else "Unknown City"

            # Step 3: Format
            document = InvoiceDocument(
                company_name=company.name,
                company_address=company.address_line,
                company_phone=company.phone,
                recipient_name=recipient_name,
                recipient_city=recipient_city,
                invoice_number=str(invoice.number),
                invoice_date=invoice.issue_date.strftime("%d/%m/%Y"),
                order_numbers=summarize_order_numbers(invoice.source_order_ids),
                rows=build_invoice_rows(invoice.items, self.currency_symbol, self.min_rows),
                grand_total=format_amount(invoice.total, self.currency_symbol),
                currency_symbol=self.currency_symbol,
            )

            # Step 4: Draw
            pdf_bytes = self.pdf_service.render_invoice(document)
            pdf_base64 = base64.b64encode(pdf_bytes).decode("utf-8")

            return Return.ok(
                RenderedInvoiceDTO(
                    invoice_number=invoice.number,
                    file_name=f"Invoice_{invoice.number}_{invoice.issue_date.strftime('%d-%m-%Y')}.pdf",
                    pdf_base64=pdf_base64,
                    generated_at=datetime.now(timezone.utc),
                )
            )

        except DocumentStoreError as e:
            return Return.err(store_error(e))
        except Exception as e:
            logger.exception(f"Failed to render invoice {invoice_number}")
            return Return.err(
                Error(
                    code="RENDER_INVOICE_FAILED",
                    message="Failed to render invoice",
                    reason=str(e),
                )
            )

    @staticmethod
    def _blank_fields(invoice: Invoice) -> List[str]:
        fields = []
        if not invoice.customer_id:
            fields.append("customerId")
        if not invoice.items:
            fields.append("items")
        return fields
