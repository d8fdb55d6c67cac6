"""Integration tests for Invoice API endpoints"""

import base64
import pytest
from decimal import Decimal
from httpx import AsyncClient

from tests.fixtures.orders import item, order_document


async def seed_scenario(sql_store):
    await sql_store.set("orders/order_a", order_document("C", [item("X1", 2, 100)]))
    await sql_store.set(
        "orders/order_b", order_document("C", [item("X1", 1, 100), item("Y2", 1, 50)], status="ready")
    )


async def create_invoice(client: AsyncClient, **payload):
    body = {"customer_id": "C", "customer_name": "Cotton Feel", "issue_date": "2024-11-30"}
    body.update(payload)
    return await client.post("/invoices/from-orders", json=body)


class TestCreateInvoiceAPI:
    """POST /invoices/from-orders"""

    @pytest.mark.asyncio
    async def test_create_invoice_success(self, client: AsyncClient, sql_store):
        """Two eligible orders become invoice 10000 with total 350"""
        # Arrange
        await seed_scenario(sql_store)

        # Act
        response = await create_invoice(client)

        # Assert
        assert response.status_code == 200
        data = response.json()
        assert data["outcome"] == "created"
        assert data["invoice_number"] == 10000
        assert Decimal(data["total"]) == Decimal("350")
        assert data["linked_order_ids"] == ["order_a", "order_b"]

        stored = await sql_store.get("invoices/10000")
        assert stored["customerId"] == "C"
        assert (await sql_store.get("orders/order_a"))["invoiceNumber"] == 10000
        assert await sql_store.get("invoiceCounter") == 10000

    @pytest.mark.asyncio
    async def test_second_run_has_nothing_to_invoice(self, client: AsyncClient, sql_store):
        await seed_scenario(sql_store)
        await create_invoice(client)

        response = await create_invoice(client)

        assert response.status_code == 200
        assert response.json()["outcome"] == "nothing_to_invoice"
        assert response.json()["invoice_number"] is None
        assert await sql_store.get("invoiceCounter") == 10000

    @pytest.mark.asyncio
    async def test_missing_exchange_rate_returns_422(self, client: AsyncClient, sql_store):
        await sql_store.set("orders/o1", order_document("C", [item("X1", 1, 2, currency="USD")]))

        response = await create_invoice(client)

        assert response.status_code == 422
        error = response.json()["error"]
        assert error["code"] == "MISSING_EXCHANGE_RATE"
        assert "settings/exchangeRates/usdToLkr" in error["message"]

    @pytest.mark.asyncio
    async def test_filtered_selection_bills_sales_orders(self, client: AsyncClient, sql_store):
        await sql_store.set(
            "salesOrders/s1",
            order_document("C", [item("X1", 4, 25)], status="completed", date="2024-11-15"),
        )
        await sql_store.set(
            "salesOrders/s2",
            order_document("C", [item("X1", 1, 25)], status="pending", date="2024-11-16"),
        )

        response = await create_invoice(
            client,
            selection="filtered",
            status="completed",
            start_date="2024-11-01",
            end_date="2024-11-30",
        )

        assert response.status_code == 200
        data = response.json()
        assert data["source_order_ids"] == ["s1"]
        assert Decimal(data["total"]) == Decimal("100")
        assert await sql_store.get("salesInvoiceCounter") == 10000
        assert await sql_store.get("invoiceCounter") is None

    @pytest.mark.asyncio
    async def test_empty_customer_id_rejected(self, client: AsyncClient):
        response = await client.post("/invoices/from-orders", json={"customer_id": ""})

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_reversed_date_range_rejected(self, client: AsyncClient):
        response = await client.post(
            "/invoices/from-orders",
            json={"customer_id": "C", "start_date": "2024-12-01", "end_date": "2024-11-01"},
        )

        assert response.status_code == 422


class TestPreviewAPI:
    """POST /invoices/preview"""

    @pytest.mark.asyncio
    async def test_preview_writes_nothing(self, client: AsyncClient, sql_store):
        await seed_scenario(sql_store)

        response = await client.post("/invoices/preview", json={"customer_id": "C"})

        assert response.status_code == 200
        data = response.json()
        assert data["nothing_to_invoice"] is False
        assert Decimal(data["total"]) == Decimal("350")
        assert await sql_store.get("invoiceCounter") is None
        assert await sql_store.list_children("invoices") == {}


class TestInvoiceLifecycleAPI:
    """Read, render, status, relink and delete"""

    @pytest.mark.asyncio
    async def test_get_invoice(self, client: AsyncClient, sql_store):
        await seed_scenario(sql_store)
        await create_invoice(client)

        response = await client.get("/invoices/10000")

        assert response.status_code == 200
        data = response.json()
        assert data["number"] == 10000
        assert data["status"] == "created"
        assert data["issue_date"] == "2024-11-30"
        assert {i["item_code"] for i in data["items"]} == {"X1", "Y2"}

    @pytest.mark.asyncio
    async def test_get_invoice_not_found(self, client: AsyncClient):
        response = await client.get("/invoices/424242")

        assert response.status_code == 404
        assert response.json() == {
            "error": {"code": "INVOICE_NOT_FOUND", "message": "Invoice 424242 not found"}
        }

    @pytest.mark.asyncio
    async def test_download_pdf(self, client: AsyncClient, sql_store):
        await seed_scenario(sql_store)
        await create_invoice(client)

        response = await client.get("/invoices/10000/pdf")

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert "Invoice_10000_30-11-2024.pdf" in response.headers["content-disposition"]
        assert response.content.startswith(b"%PDF")

    @pytest.mark.asyncio
    async def test_rendered_document(self, client: AsyncClient, sql_store):
        await seed_scenario(sql_store)
        await create_invoice(client)

        response = await client.get("/invoices/10000/document")

        assert response.status_code == 200
        assert base64.b64decode(response.json()["pdf_base64"]).startswith(b"%PDF")

    @pytest.mark.asyncio
    async def test_incomplete_invoice_cannot_render(self, client: AsyncClient, sql_store):
        await sql_store.set("invoices/10009", {"customerId": "C", "items": [], "subtotal": "0", "total": "0"})

        response = await client.get("/invoices/10009/pdf")

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "MISSING_INVOICE_FIELDS"

    @pytest.mark.asyncio
    async def test_status_transitions(self, client: AsyncClient, sql_store):
        await seed_scenario(sql_store)
        await create_invoice(client)

        paid = await client.patch("/invoices/10000/status", json={"status": "paid"})
        back = await client.patch("/invoices/10000/status", json={"status": "pending"})
        unknown = await client.patch("/invoices/10000/status", json={"status": "void"})

        assert paid.status_code == 200
        assert paid.json()["status"] == "paid"
        assert back.status_code == 409
        assert back.json()["error"]["code"] == "INVALID_STATUS_TRANSITION"
        assert unknown.status_code == 400
        assert unknown.json()["error"]["code"] == "INVALID_STATUS"

    @pytest.mark.asyncio
    async def test_relink_after_interrupted_creation(self, client: AsyncClient, sql_store):
        await seed_scenario(sql_store)
        await create_invoice(client)
        await sql_store.update("orders/order_b", {"invoiced": False, "invoiceNumber": None})

        response = await client.post("/invoices/10000/link-orders")

        assert response.status_code == 200
        data = response.json()
        assert data["complete"] is True
        assert data["linked_order_ids"] == ["order_b"]
        assert data["already_linked_order_ids"] == ["order_a"]

    @pytest.mark.asyncio
    async def test_delete_releases_orders(self, client: AsyncClient, sql_store):
        await seed_scenario(sql_store)
        await create_invoice(client)

        response = await client.delete("/invoices/10000")
        followup = await client.get("/invoices/10000")

        assert response.status_code == 200
        assert response.json()["detached_order_ids"] == ["order_a", "order_b"]
        assert followup.status_code == 404
        order_b = await sql_store.get("orders/order_b")
        assert order_b["invoiced"] is False
        assert order_b["status"] == "ready"
        assert await sql_store.get("invoiceCounter") == 10000

    @pytest.mark.asyncio
    async def test_health(self, client: AsyncClient):
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}
