import pytest
from decimal import Decimal

from src.adapter.repositories.counter_repository import DocumentCounterRepository
from src.adapter.repositories.invoice_repository import DocumentInvoiceRepository
from src.adapter.repositories.order_repository import DocumentOrderRepository
from src.adapter.repositories.settings_repository import DocumentSettingsRepository
from src.adapter.services.in_memory_document_store import InMemoryDocumentStore
from src.app.use_cases.invoicing.aggregation import CurrencyPolicy
from src.domain.order import OrderStatus
from src.domain.profile import CompanyProfile
from tests.fixtures.orders import item, order_document

COUNTER_SEEDS = {
    "invoiceCounter": 10000,
    "salesInvoiceCounter": 10000,
    "salesOrderCounter": 10000,
    "customerOrderCounter": 10004,
}

EXCHANGE_RATE_PATH = "settings/exchangeRates/usdToLkr"


@pytest.fixture
def store():
    return InMemoryDocumentStore()


@pytest.fixture
def order_repo(store):
    return DocumentOrderRepository(store, collection_path="orders")


@pytest.fixture
def sales_order_repo(store):
    return DocumentOrderRepository(store, collection_path="salesOrders")


@pytest.fixture
def invoice_repo(store):
    return DocumentInvoiceRepository(store, collection_path="invoices")


@pytest.fixture
def counter_repo(store):
    return DocumentCounterRepository(store, seeds=COUNTER_SEEDS)


@pytest.fixture
def settings_repo(store):
    return DocumentSettingsRepository(
        store,
        exchange_rate_path=EXCHANGE_RATE_PATH,
        default_company=CompanyProfile(
            name="Sevinro Distributors",
            address_line="No : 138/A, Akaravita, Gampaha",
            phone="071 39 65 580",
        ),
    )


@pytest.fixture
def order_repo_for(store):
    return lambda collection: DocumentOrderRepository(store, collection_path=collection)


@pytest.fixture
def currency_policy():
    return CurrencyPolicy(default_currency="LKR", foreign_codes=frozenset({"USD", "$"}))


@pytest.fixture
def eligible_statuses():
    return frozenset({OrderStatus.CONFIRMED.value, OrderStatus.READY.value})


@pytest.fixture
def scenario_orders():
    """Customer C: A = X1 x2 @100; B = X1 x1 @100 + Y2 x1 @50"""
    return {
        "orders/order_a": order_document("C", [item("X1", 2, 100)]),
        "orders/order_b": order_document("C", [item("X1", 1, 100), item("Y2", 1, 50)], status="ready"),
    }


@pytest.fixture
def usd_rate():
    return Decimal("300")
