"""Invoice Domain Entity

Consolidated billing document built from one customer's orders.
"""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional
from pydantic import Field, field_validator, model_validator
from src.domain.base import BaseModel, Money, utc_now


class InvoiceStatus(str, Enum):
    """Invoice payment status"""
    CREATED = "created"
    PENDING = "pending"
    PAID = "paid"

    @classmethod
    def parse(cls, value) -> "InvoiceStatus":
        if isinstance(value, cls):
            return value
        return cls(str(value).strip().lower())


# Allowed payment status moves; paid is terminal
STATUS_TRANSITIONS = {
    InvoiceStatus.CREATED: {InvoiceStatus.PENDING, InvoiceStatus.PAID},
    InvoiceStatus.PENDING: {InvoiceStatus.PAID},
    InvoiceStatus.PAID: set(),
}


@dataclass(frozen=True)
class InvoiceDefaults:
    """Values stamped on every newly created invoice"""
    status: InvoiceStatus = InvoiceStatus.CREATED
    currency: str = "LKR"


class AggregatedLineItem(BaseModel):
    """
    Aggregated row on an invoice

    Built in memory for each invoice-generation attempt from all
    order line items sharing the same (code, converted unit price).
    """

    item_code: str
    description: str = ""
    quantity: int
    unit_price: Money
    total: Money

    @model_validator(mode="after")
    def _check_total(self):
        if self.total != self.unit_price * self.quantity:
            raise ValueError(
                f"Line total {self.total} does not equal "
                f"{self.quantity} x {self.unit_price}"
            )
        return self


class Invoice(BaseModel):
    """
    Invoice - billing document keyed by its number

    Domain Rules:
    - number is unique and strictly increasing (reserved from a counter)
    - total equals the sum of all item totals (no tax step)
    - only status changes after creation
    """

    number: int
    customer_id: str
    customer_name: str = ""
    items: List[AggregatedLineItem] = Field(default_factory=list)
    subtotal: Money
    total: Money
    currency: str = "LKR"
    issue_date: date
    status: InvoiceStatus = InvoiceStatus.CREATED
    source_order_ids: List[str] = Field(default_factory=list)
    orders_consumed: int = 0
    counter_namespace: Optional[str] = None
    source_collection: Optional[str] = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @field_validator("status", mode="before")
    @classmethod
    def _parse_status(cls, v):
        return InvoiceStatus.parse(v)

    @model_validator(mode="after")
    def _check_totals(self):
        items_sum = sum((item.total for item in self.items), Decimal("0"))
        if self.subtotal != items_sum:
            raise ValueError(f"Subtotal {self.subtotal} does not equal item sum {items_sum}")
        if self.total != self.subtotal:
            raise ValueError(f"Total {self.total} does not equal subtotal {self.subtotal}")
        return self

    @classmethod
    def build(
        cls,
        number: int,
        customer_id: str,
        customer_name: str,
        items: List[AggregatedLineItem],
        source_order_ids: List[str],
        orders_consumed: int,
        issue_date: date,
        currency: str,
        counter_namespace: Optional[str] = None,
        source_collection: Optional[str] = None,
        status: InvoiceStatus = InvoiceStatus.CREATED,
    ) -> "Invoice":
        """Build a new invoice, computing subtotal and total from the items"""
        subtotal = sum((item.total for item in items), Decimal("0"))
        return cls(
            number=number,
            customer_id=customer_id,
            customer_name=customer_name,
            items=items,
            subtotal=subtotal,
            total=subtotal,
            currency=currency,
            issue_date=issue_date,
            status=status,
            source_order_ids=list(source_order_ids),
            orders_consumed=orders_consumed,
            counter_namespace=counter_namespace,
            source_collection=source_collection,
        )

    def can_transition_to(self, status: InvoiceStatus) -> bool:
        return status in STATUS_TRANSITIONS[self.status]
