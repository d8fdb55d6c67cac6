"""Unit tests for ReconcileInvoiceLinks use case"""

import pytest
from unittest.mock import AsyncMock, MagicMock

from src.app.use_cases.invoicing.reconcile_links import ReconcileInvoiceLinks
from tests.fixtures.invoices import invoice_document
from tests.fixtures.orders import item, order_document


@pytest.fixture
def use_case(invoice_repo, order_repo_for):
    return ReconcileInvoiceLinks(invoice_repo=invoice_repo, order_repo_for=order_repo_for)


@pytest.mark.asyncio
class TestReconcileInvoiceLinks:
    """Invoice to order link reconciliation"""

    async def test_consistent_invoices(self, store, use_case):
        await store.set("invoices/10000", invoice_document(10000, source_order_ids=["order_a"]))
        await store.set(
            "orders/order_a", order_document("C", [item("X1", 1, 10)], invoiced=True, invoiceNumber=10000)
        )

        result = await use_case.execute()

        assert result.is_ok()
        assert result.value.total_invoices_checked == 1
        assert result.value.orders_repaired == 0
        assert result.value.discrepancies_found == 0

    async def test_unlinked_order_is_repaired(self, store, use_case):
        await store.set("invoices/10000", invoice_document(10000, source_order_ids=["order_a"]))
        await store.set("orders/order_a", order_document("C", [item("X1", 1, 10)]))

        result = await use_case.execute()

        assert result.value.orders_repaired == 1
        assert (await store.get("orders/order_a"))["invoiceNumber"] == 10000

    async def test_discrepancies_reported(self, store, use_case):
        """
        Given: invoice 10001 lists an order linked to 10000 and an order that is gone
        When: reconciliation runs
        Then: both are reported and nothing is moved
        """
        # Arrange
        await store.set("invoices/10001", invoice_document(10001, source_order_ids=["order_a", "ghost"]))
        await store.set(
            "orders/order_a", order_document("C", [item("X1", 1, 10)], invoiced=True, invoiceNumber=10000)
        )

        # Act
        result = await use_case.execute()

        # Assert
        assert result.value.discrepancies_found == 2
        reasons = {(d.order_id, d.reason, d.linked_to) for d in result.value.discrepancies}
        assert reasons == {
            ("order_a", "linked_to_other_invoice", 10000),
            ("ghost", "order_missing", None),
        }
        assert (await store.get("orders/order_a"))["invoiceNumber"] == 10000

    async def test_failure_returns_error(self):
        invoice_repo = MagicMock()
        invoice_repo.list_all = AsyncMock(side_effect=RuntimeError("boom"))

        result = await ReconcileInvoiceLinks(invoice_repo, lambda _c: None).execute()

        assert result.is_err()
        assert result.error.code == "RECONCILIATION_FAILED"
