"""Unit tests for the document-store repositories"""

import pytest
from decimal import Decimal

from src.adapter.repositories.counter_repository import DocumentCounterRepository
from src.app.repositories.counter_repository import CounterReservationError
from src.app.repositories.order_repository import LinkStatus
from src.app.repositories.invoice_repository import InvoiceAlreadyExistsError
from src.domain.invoice import Invoice, InvoiceStatus
from tests.fixtures.invoices import invoice_document
from tests.fixtures.orders import item, order_document


@pytest.mark.asyncio
class TestCounterRepository:
    """Sequential number reservation"""

    async def test_first_reservation_returns_seed(self, counter_repo):
        assert await counter_repo.reserve("invoiceCounter") == 10000
        assert await counter_repo.reserve("invoiceCounter") == 10001

    async def test_peek_does_not_reserve(self, store, counter_repo):
        assert await counter_repo.peek("invoiceCounter") is None
        await counter_repo.reserve("invoiceCounter")

        assert await counter_repo.peek("invoiceCounter") == 10000
        assert await counter_repo.peek("invoiceCounter") == 10000

    async def test_unknown_namespace(self, counter_repo):
        with pytest.raises(CounterReservationError):
            await counter_repo.reserve("mystery")

    async def test_seed_ignored_once_counter_exists(self, store):
        await store.set("salesOrderCounter", 12)
        repo = DocumentCounterRepository(store, seeds={"salesOrderCounter": 10000})

        assert await repo.reserve("salesOrderCounter") == 13


@pytest.mark.asyncio
class TestOrderRepository:
    """Order reads and link writes"""

    async def test_malformed_orders_are_skipped(self, store, order_repo):
        await store.set("orders/good", order_document("C", [item("X1", 1, 10)]))
        await store.set("orders/bad", {"items": "not a list"})
        await store.set("orders/scalar", 5)

        orders = await order_repo.list_orders()

        assert [o.id for o in orders] == ["good"]

    async def test_orders_with_unlisted_status_are_kept(self, store, order_repo):
        await store.set("orders/o1", order_document("C", [item("X1", 1, 10)], status="Delivered"))

        orders = await order_repo.list_orders()

        assert [(o.id, o.status) for o in orders] == [("o1", "delivered")]

    async def test_mark_invoiced_keeps_unmodelled_fields(self, store, order_repo):
        await store.set("orders/o1", order_document("C", [item("X1", 1, 10)], notes="fragile"))

        status = await order_repo.mark_invoiced("o1", 10000)

        assert status == LinkStatus.LINKED
        stored = await store.get("orders/o1")
        assert stored["notes"] == "fragile"
        assert stored["statusBeforeInvoicing"] == "confirmed"

    async def test_mark_invoiced_outcomes(self, store, order_repo):
        await store.set("orders/o1", order_document("C", [item("X1", 1, 10)]))
        await order_repo.mark_invoiced("o1", 10000)

        assert await order_repo.mark_invoiced("o1", 10000) == LinkStatus.ALREADY_LINKED
        assert await order_repo.mark_invoiced("o1", 10001) == LinkStatus.CONFLICT
        assert await order_repo.mark_invoiced("ghost", 10000) == LinkStatus.MISSING

    async def test_detach_only_own_invoice(self, store, order_repo):
        await store.set("orders/o1", order_document("C", [item("X1", 1, 10)]))
        await order_repo.mark_invoiced("o1", 10000)

        assert await order_repo.detach("o1", 10001) is False
        assert await order_repo.detach("o1", 10000) is True
        assert (await order_repo.get_by_id("o1")).is_invoiced is False


@pytest.mark.asyncio
class TestInvoiceRepository:
    """Invoice records"""

    async def test_create_never_overwrites(self, store, invoice_repo):
        invoice = Invoice.from_document(invoice_document(10000))
        await invoice_repo.create(invoice)

        with pytest.raises(InvoiceAlreadyExistsError):
            await invoice_repo.create(invoice)

    async def test_list_all_filters_and_sorts(self, store, invoice_repo):
        await store.set("invoices/10002", invoice_document(10002, customer_id="C"))
        await store.set("invoices/10001", invoice_document(10001, customer_id="D"))
        await store.set("invoices/10000", invoice_document(10000, customer_id="C"))

        invoices = await invoice_repo.list_all(customer_id="C")

        assert [i.number for i in invoices] == [10000, 10002]

    async def test_update_status_missing_invoice(self, invoice_repo):
        assert await invoice_repo.update_status(1, InvoiceStatus.PAID) is None


@pytest.mark.asyncio
class TestSettingsRepository:
    """Exchange rate and profiles"""

    async def test_exchange_rate(self, store, settings_repo):
        assert await settings_repo.get_exchange_rate() is None

        await store.set("settings/exchangeRates/usdToLkr", 302.5)

        assert await settings_repo.get_exchange_rate() == Decimal("302.5")

    @pytest.mark.parametrize("stored", [0, -3, "abc"])
    async def test_unusable_rate_is_none(self, store, settings_repo, stored):
        await store.set("settings/exchangeRates/usdToLkr", stored)

        assert await settings_repo.get_exchange_rate() is None

    async def test_company_defaults(self, settings_repo):
        company = await settings_repo.get_company_profile()

        assert company.name == "Sevinro Distributors"

    async def test_customer_profile_aliases(self, store, settings_repo):
        await store.set("customers/C", {"name": "Cotton Feel", "city": "Colombo"})

        customer = await settings_repo.get_customer_profile("C")

        assert customer.to_name == "Cotton Feel"
        assert customer.to_city == "Colombo"
