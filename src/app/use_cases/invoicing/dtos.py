"""Data Transfer Objects for Invoicing Use Cases

Pydantic models for command inputs and response outputs.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import FrozenSet, List, Optional
from pydantic import BaseModel, Field, model_validator

from src.domain.invoice import AggregatedLineItem, Invoice
from .eligibility import EligibilityPredicate, ReadyOrdersRule, StatusDateRule


class OrderSelection(str, Enum):
    """Which eligibility rule selects the orders"""
    READY_ORDERS = "ready_orders"
    FILTERED = "filtered"


class InvoiceOutcome(str, Enum):
    """Result of an invoice creation attempt"""
    CREATED = "created"
    PARTIALLY_LINKED = "partially_linked"
    NOTHING_TO_INVOICE = "nothing_to_invoice"


class CreateInvoiceCommandDTO(BaseModel):
    """
    Command DTO for consolidating orders into an invoice

    Used as input to CreateInvoiceFromOrders and PreviewInvoice.
    """

    customer_id: str = Field(
        ...,
        min_length=1,
        description="Customer whose orders are invoiced"
    )

    customer_name: str = Field(
        default="",
        description="Display name copied onto the invoice"
    )

    selection: OrderSelection = Field(
        default=OrderSelection.READY_ORDERS,
        description="ready_orders: eligible states only; filtered: status/date filter"
    )

    status: Optional[str] = Field(
        default="all",
        description="Exact status to match for the filtered selection ('all' disables)"
    )

    start_date: Optional[date] = Field(
        default=None,
        description="Inclusive start of the order date range (filtered selection)"
    )

    end_date: Optional[date] = Field(
        default=None,
        description="Inclusive end of the order date range (filtered selection)"
    )

    counter_namespace: str = Field(
        default="invoiceCounter",
        description="Counter the invoice number is reserved from"
    )

    issue_date: Optional[date] = Field(
        default=None,
        description="Issue date printed on the invoice (defaults to today)"
    )

    @model_validator(mode="after")
    def _check_range(self):
        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise ValueError("start_date must not be after end_date")
        return self

    def eligibility_rule(self, eligible_statuses: FrozenSet[str]) -> EligibilityPredicate:
        """Build the predicate for this command's selection"""
        if self.selection == OrderSelection.FILTERED:
            return StatusDateRule(
                status=self.status,
                start_date=self.start_date,
                end_date=self.end_date,
            )
        return ReadyOrdersRule(eligible_statuses=frozenset(eligible_statuses))

    class Config:
        json_schema_extra = {
            "example": {
                "customer_id": "cust_cotton_feel",
                "customer_name": "Cotton Feel",
                "selection": "ready_orders",
                "counter_namespace": "invoiceCounter"
            }
        }


class AggregatedItemDTO(BaseModel):
    """Aggregated invoice row"""

    item_code: str = Field(..., description="Item / SKU code")
    description: str = Field(default="", description="First non-empty description seen")
    quantity: int = Field(..., description="Summed quantity")
    unit_price: Decimal = Field(..., description="Unit price in local currency")
    total: Decimal = Field(..., description="quantity x unit_price")

    @classmethod
    def from_item(cls, item: AggregatedLineItem) -> "AggregatedItemDTO":
        return cls(
            item_code=item.item_code,
            description=item.description,
            quantity=item.quantity,
            unit_price=item.unit_price,
            total=item.total,
        )


class InvoiceCreationResponseDTO(BaseModel):
    """
    Response DTO for invoice creation

    outcome=nothing_to_invoice carries no invoice number and means
    nothing was written.
    """

    outcome: InvoiceOutcome = Field(..., description="created, partially_linked or nothing_to_invoice")
    message: str = Field(..., description="Human readable summary")
    customer_id: str = Field(..., description="Customer identifier")
    invoice_number: Optional[int] = Field(default=None, description="Reserved invoice number")
    total: Optional[Decimal] = Field(default=None, description="Invoice total in local currency")
    currency: Optional[str] = Field(default=None, description="Settlement currency")
    items: List[AggregatedItemDTO] = Field(default_factory=list)
    source_order_ids: List[str] = Field(default_factory=list)
    orders_consumed: int = Field(default=0, description="Orders that contributed at least one item")
    linked_order_ids: List[str] = Field(default_factory=list)
    failed_order_ids: List[str] = Field(
        default_factory=list,
        description="Orders whose link write failed (retry with link-orders)"
    )
    conflicting_order_ids: List[str] = Field(
        default_factory=list,
        description="Orders already linked to another invoice or no longer present"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "outcome": "created",
                "message": "Invoice 10001 created from 2 orders",
                "customer_id": "cust_cotton_feel",
                "invoice_number": 10001,
                "total": "350.00",
                "currency": "LKR",
                "items": [
                    {"item_code": "X1", "description": "", "quantity": 3,
                     "unit_price": "100", "total": "300"}
                ],
                "source_order_ids": ["order_a", "order_b"],
                "orders_consumed": 2,
                "linked_order_ids": ["order_a", "order_b"],
                "failed_order_ids": [],
                "conflicting_order_ids": []
            }
        }


class InvoicePreviewResponseDTO(BaseModel):
    """Response DTO for a dry-run consolidation (nothing written)"""

    customer_id: str
    nothing_to_invoice: bool = Field(..., description="True if no rows would be invoiced")
    message: str
    eligible_order_ids: List[str] = Field(default_factory=list)
    items: List[AggregatedItemDTO] = Field(default_factory=list)
    total: Decimal = Field(default=Decimal("0"))
    currency: str
    orders_consumed: int = 0
    skipped_items: int = Field(default=0, description="Invalid items excluded from aggregation")


class LinkOrdersResponseDTO(BaseModel):
    """Response DTO for (re)linking an invoice's source orders"""

    invoice_number: int
    complete: bool = Field(..., description="True if every source order points at the invoice")
    linked_order_ids: List[str] = Field(default_factory=list)
    already_linked_order_ids: List[str] = Field(default_factory=list)
    failed_order_ids: List[str] = Field(default_factory=list)
    conflicting_order_ids: List[str] = Field(default_factory=list)


class InvoiceDTO(BaseModel):
    """Response DTO for a stored invoice"""

    number: int
    customer_id: str
    customer_name: str
    status: str
    items: List[AggregatedItemDTO]
    subtotal: Decimal
    total: Decimal
    currency: str
    issue_date: date
    source_order_ids: List[str]
    orders_consumed: int
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_invoice(cls, invoice: Invoice) -> "InvoiceDTO":
        return cls(
            number=invoice.number,
            customer_id=invoice.customer_id,
            customer_name=invoice.customer_name,
            status=invoice.status.value,
            items=[AggregatedItemDTO.from_item(item) for item in invoice.items],
            subtotal=invoice.subtotal,
            total=invoice.total,
            currency=invoice.currency,
            issue_date=invoice.issue_date,
            source_order_ids=invoice.source_order_ids,
            orders_consumed=invoice.orders_consumed,
            created_at=invoice.created_at,
            updated_at=invoice.updated_at,
        )


class RenderedInvoiceDTO(BaseModel):
    """Response DTO for a rendered invoice document"""

    invoice_number: int
    file_name: str = Field(..., description="Suggested download file name")
    pdf_base64: str = Field(..., description="PDF document, base64 encoded")
    generated_at: datetime


class DeleteInvoiceResponseDTO(BaseModel):
    """Response DTO for administrative invoice deletion"""

    invoice_number: int
    detached_order_ids: List[str] = Field(default_factory=list)
    skipped_order_ids: List[str] = Field(
        default_factory=list,
        description="Source orders no longer pointing at this invoice"
    )


class LinkDiscrepancyDTO(BaseModel):
    """Source order that cannot be linked to its invoice"""

    invoice_number: int
    order_id: str
    linked_to: Optional[int] = Field(default=None, description="Invoice the order points at instead")
    reason: str


class LinkReconciliationResultDTO(BaseModel):
    """Result of a link reconciliation pass"""

    total_invoices_checked: int
    orders_repaired: int
    discrepancies_found: int
    discrepancies: List[LinkDiscrepancyDTO] = Field(default_factory=list)
    reconciliation_time: datetime
    execution_time_ms: int
