"""Tabular import records

Transient records produced while ingesting an uploaded spreadsheet or
CSV file. Nothing here is persisted directly.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Optional
from pydantic import AliasChoices, Field
from src.domain.base import BaseModel


class SourceKind(str, Enum):
    """Detected source format of an upload"""
    CSV = "csv"
    XLSX = "xlsx"


@dataclass(frozen=True)
class TabularDocument:
    """Canonical comma-separated rendering of an upload"""
    content: str
    source_kind: SourceKind
    sheet_name: Optional[str] = None
    row_count: Optional[int] = None


@dataclass(frozen=True)
class ImportDefaults:
    """Values applied when an imported row omits a field"""
    quantity: int = 1
    description: str = ""


class TabularImportRow(BaseModel):
    """One item row returned by schema inference"""

    style_no: str = Field(validation_alias=AliasChoices("styleNo", "style_no"))
    description: Optional[str] = None
    quantity: Optional[int] = None
    unit_price: Decimal = Field(validation_alias=AliasChoices("unitPrice", "unit_price"))
