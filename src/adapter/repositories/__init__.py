from .order_repository import DocumentOrderRepository
from .invoice_repository import DocumentInvoiceRepository
from .counter_repository import DocumentCounterRepository
from .settings_repository import DocumentSettingsRepository

__all__ = [
    "DocumentOrderRepository",
    "DocumentInvoiceRepository",
    "DocumentCounterRepository",
    "DocumentSettingsRepository",
]
