from .base import BaseModel, generate_push_key, utc_now
from .order import Order, OrderLineItem, OrderStatus, normalize_status
from .invoice import Invoice, InvoiceStatus, InvoiceDefaults, AggregatedLineItem
from .profile import CompanyProfile, CustomerProfile
from .tabular_import import TabularImportRow, TabularDocument, SourceKind, ImportDefaults
from .stored_document import StoredDocument

__all__ = [
    "BaseModel",
    "generate_push_key",
    "utc_now",
    "Order",
    "OrderLineItem",
    "OrderStatus",
    "normalize_status",
    "Invoice",
    "InvoiceStatus",
    "InvoiceDefaults",
    "AggregatedLineItem",
    "CompanyProfile",
    "CustomerProfile",
    "TabularImportRow",
    "TabularDocument",
    "SourceKind",
    "ImportDefaults",
    "StoredDocument",
]
