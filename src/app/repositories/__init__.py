from .order_repository import OrderRepository, LinkStatus
from .invoice_repository import InvoiceRepository, InvoiceAlreadyExistsError
from .counter_repository import CounterRepository, CounterReservationError
from .settings_repository import SettingsRepository

__all__ = [
    "OrderRepository",
    "LinkStatus",
    "InvoiceRepository",
    "InvoiceAlreadyExistsError",
    "CounterRepository",
    "CounterReservationError",
    "SettingsRepository",
]
