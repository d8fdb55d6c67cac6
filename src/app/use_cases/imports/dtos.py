"""Data Transfer Objects for Import Use Cases"""

from decimal import Decimal
from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, Field

from src.domain.order import OrderLineItem
from src.domain.tabular_import import SourceKind


class ImportOutcome(str, Enum):
    """Result of an import attempt"""
    IMPORTED = "imported"
    NOTHING_TO_IMPORT = "nothing_to_import"


class ImportedItemDTO(BaseModel):
    """Line item ready to be placed in an order being edited"""

    item_code: str = Field(..., description="Style number")
    description: str = Field(default="")
    quantity: int = Field(..., description="Quantity (defaulted when absent from the file)")
    unit_price: Decimal = Field(..., description="Unit price as found in the file")

    @classmethod
    def from_line_item(cls, item: OrderLineItem) -> "ImportedItemDTO":
        return cls(
            item_code=item.item_code or "",
            description=item.description or "",
            quantity=item.quantity,
            unit_price=item.unit_price,
        )


class ImportLineItemsResponseDTO(BaseModel):
    """
    Response DTO for a line-item import

    outcome=nothing_to_import means the file held no recognizable rows.
    """

    outcome: ImportOutcome
    message: str
    file_name: str
    source_kind: SourceKind
    sheet_name: Optional[str] = None
    row_count: Optional[int] = Field(default=None, description="Non-blank rows sent for classification")
    items: List[ImportedItemDTO] = Field(default_factory=list)
    skipped_rows: int = Field(default=0, description="Classified rows rejected (e.g. negative price)")

    class Config:
        json_schema_extra = {
            "example": {
                "outcome": "imported",
                "message": "Found 2 items ready to import",
                "file_name": "stock.xlsx",
                "source_kind": "xlsx",
                "sheet_name": "Sheet1",
                "row_count": 3,
                "items": [
                    {"item_code": "ST-101", "description": "Cotton shirt",
                     "quantity": 1, "unit_price": "1450.00"}
                ],
                "skipped_rows": 0
            }
        }
