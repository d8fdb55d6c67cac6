"""Order Domain Entity

A confirmed customer purchase awaiting invoicing.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import List, Optional
from pydantic import AliasChoices, Field, field_validator
from src.domain.base import BaseModel


def normalize_status(value) -> str:
    """Lower-case status with '_' and spaces folded to '-' ('IN_PROGRESS' -> 'in-progress')"""
    if isinstance(value, Enum):
        value = value.value
    return str(value).strip().lower().replace("_", "-").replace(" ", "-")


class OrderStatus(str, Enum):
    """Known order workflow states; stored orders may carry others"""
    CONFIRMED = "confirmed"
    READY = "ready"
    INVOICED = "invoiced"
    CANCELLED = "cancelled"
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"

    @classmethod
    def parse(cls, value) -> "OrderStatus":
        """Case-insensitive lookup; accepts 'IN_PROGRESS' and 'in progress' too"""
        if isinstance(value, cls):
            return value
        return cls(normalize_status(value))


class OrderLineItem(BaseModel):
    """
    Line item on an order

    Quantity and price are stored as entered; invalid values
    (quantity <= 0, negative price) are kept and filtered out at
    aggregation time.
    """

    item_code: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("itemCode", "item_code", "code"),
        description="Item / SKU code",
    )
    item_name: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("itemName", "item_name", "item"),
        description="Item name, used as aggregation key when code is absent",
    )
    description: str = Field(default="")
    quantity: int = Field(
        default=0,
        validation_alias=AliasChoices("quantity", "qty"),
    )
    unit_price: Decimal = Field(
        default=Decimal("0"),
        validation_alias=AliasChoices("unitPrice", "unit_price", "price"),
    )
    currency: Optional[str] = Field(
        default=None,
        description="Currency code or symbol; falls back to the configured default",
    )

    @field_validator("description", mode="before")
    @classmethod
    def _none_description(cls, v):
        return "" if v is None else v

    @property
    def line_total(self) -> Decimal:
        return self.unit_price * self.quantity

    @property
    def key_code(self) -> str:
        """Code used to group this item (code, then name)"""
        return self.item_code or self.item_name or "Unknown"


class Order(BaseModel):
    """
    Order - customer purchase read by the consolidation engine

    Domain Rules:
    - invoiced orders carry exactly one invoice_number
    - invoiced orders are never selected again for invoicing
    - the engine only performs the invoiced transition
    """

    id: str
    customer_id: str = Field(
        validation_alias=AliasChoices("customerId", "customer_id"),
    )
    customer_name: Optional[str] = None
    ordered_on: Optional[date] = Field(
        default=None,
        validation_alias=AliasChoices("orderedOn", "ordered_on", "date"),
    )
    status: str = OrderStatus.PENDING.value
    items: List[OrderLineItem] = Field(default_factory=list)
    invoiced: bool = False
    invoice_number: Optional[int] = None
    status_before_invoicing: Optional[str] = None

    @field_validator("status", "status_before_invoicing", mode="before")
    @classmethod
    def _parse_status(cls, v):
        if v is None:
            return v
        return normalize_status(v)

    @field_validator("ordered_on", mode="before")
    @classmethod
    def _parse_date(cls, v):
        # ISO timestamps are stored by some entry flows; keep the date part
        if isinstance(v, str) and "T" in v:
            return v.split("T", 1)[0]
        if v == "":
            return None
        return v

    @field_validator("items", mode="before")
    @classmethod
    def _items_as_list(cls, v):
        # Stores that persist arrays as index-keyed maps
        if v is None:
            return []
        if isinstance(v, dict):
            return [v[k] for k in sorted(v, key=lambda k: int(k) if str(k).isdigit() else k)]
        return v

    @property
    def is_invoiced(self) -> bool:
        return self.invoiced or self.invoice_number is not None
