"""Integration tests for SqlAlchemyDocumentStore on SQLite"""

import asyncio
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from src.adapter.repositories.counter_repository import DocumentCounterRepository
from src.adapter.repositories.order_repository import DocumentOrderRepository
from src.adapter.services.sql_document_store import SqlAlchemyDocumentStore
from src.app.repositories.order_repository import LinkStatus
from src.app.services.document_store import ABORT

COUNTER_SEEDS = {"invoiceCounter": 10000, "customerOrderCounter": 10004}


@pytest_asyncio.fixture
async def file_store(tmp_path):
    """Document store on a SQLite file, so every session has its own connection"""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'documents.db'}",
        echo=False,
        future=True,
        connect_args={"timeout": 30},
    )
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    Session = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)
    yield SqlAlchemyDocumentStore(Session, max_retries=50)

    await engine.dispose()


class TestSqlDocumentStore:
    """Document semantics against a real database"""

    @pytest.mark.asyncio
    async def test_set_get_and_nested_get(self, sql_store):
        await sql_store.set("orders/o1", {"customerId": "C", "items": [{"itemCode": "X1"}]})

        assert await sql_store.get("orders/o1") == {"customerId": "C", "items": [{"itemCode": "X1"}]}
        assert await sql_store.get("orders/o1/customerId") == "C"
        assert await sql_store.get("orders/o2") is None

    @pytest.mark.asyncio
    async def test_overwrite_bumps_version(self, sql_store, engine):
        await sql_store.set("invoiceCounter", 1)
        await sql_store.set("invoiceCounter", 2)

        async with engine.connect() as conn:
            row = (await conn.exec_driver_sql(
                "SELECT version FROM documents WHERE path = 'invoiceCounter'"
            )).one()

        assert row[0] == 2
        assert await sql_store.get("invoiceCounter") == 2

    @pytest.mark.asyncio
    async def test_list_children_only_direct_children(self, sql_store):
        await sql_store.set("sales_orders/a", {"n": 1})
        await sql_store.set("sales_orders/b", {"n": 2})
        await sql_store.set("sales_orders/b/notes/1", {"n": 3})
        await sql_store.set("salesXorders/c", {"n": 4})

        children = await sql_store.list_children("sales_orders")

        assert list(children) == ["a", "b"]

    @pytest.mark.asyncio
    async def test_update_and_remove(self, sql_store):
        await sql_store.set("orders/o1", {"a": 1, "b": 2})
        await sql_store.update("orders/o1", {"b": None, "c": 3})

        assert await sql_store.get("orders/o1") == {"a": 1, "c": 3}

        await sql_store.remove("orders")

        assert await sql_store.get("orders/o1") is None

    @pytest.mark.asyncio
    async def test_transaction_abort(self, sql_store):
        await sql_store.set("orders/o1", {"invoiced": True})

        result = await sql_store.transaction("orders/o1", lambda current: ABORT)

        assert result.committed is False
        assert result.value == {"invoiced": True}

    @pytest.mark.asyncio
    async def test_transaction_to_none_deletes(self, sql_store):
        await sql_store.set("orders/o1", {"a": 1})

        result = await sql_store.transaction("orders/o1", lambda current: None)

        assert result.committed is True
        assert await sql_store.get("orders/o1") is None

    @pytest.mark.asyncio
    async def test_counter_reservations_are_sequential(self, sql_store):
        counters = DocumentCounterRepository(sql_store, seeds=COUNTER_SEEDS)

        numbers = [await counters.reserve("invoiceCounter") for _ in range(5)]

        assert numbers == [10000, 10001, 10002, 10003, 10004]
        assert await counters.reserve("customerOrderCounter") == 10004

    @pytest.mark.asyncio
    async def test_push_creates_sortable_children(self, sql_store):
        first = await sql_store.push("customerOrders", {"n": 1})
        second = await sql_store.push("customerOrders", {"n": 2})

        children = await sql_store.list_children("customerOrders")

        assert set(children) == {first, second}
        assert children[first] == {"n": 1}

    @pytest.mark.asyncio
    async def test_listener_sees_committed_writes(self, sql_store):
        seen = []
        sql_store.subscribe("invoices", lambda path, value: seen.append(path))

        await sql_store.set("invoices/10000", {"number": 10000})
        await sql_store.set("orders/o1", {"a": 1})

        assert seen == ["invoices/10000"]

    @pytest.mark.asyncio
    async def test_every_write_stamps_updated_at(self, sql_store, engine):
        await sql_store.set("invoices/10000", {"number": 10000})
        await sql_store.update("invoices/10000", {"status": "paid"})

        async with engine.connect() as conn:
            row = (await conn.exec_driver_sql(
                "SELECT version, updated_at FROM documents WHERE path = 'invoices/10000'"
            )).one()

        assert row[0] == 2
        assert row[1] is not None
        assert await sql_store.get("invoices/10000") == {"number": 10000, "status": "paid"}


class TestNestedDocuments:
    """Children stored inside a collection-level document"""

    @pytest.mark.asyncio
    async def test_transaction_rewrites_the_holding_document(self, sql_store, engine):
        await sql_store.set("orders", {"o1": {"customerId": "C"}, "o2": {"customerId": "D"}})

        result = await sql_store.transaction("orders/o1", lambda current: {**current, "invoiced": True})

        assert result.committed is True
        assert await sql_store.get("orders/o1") == {"customerId": "C", "invoiced": True}
        assert await sql_store.get("orders/o2") == {"customerId": "D"}
        async with engine.connect() as conn:
            paths = (await conn.exec_driver_sql("SELECT path FROM documents")).scalars().all()
        assert paths == ["orders"]

    @pytest.mark.asyncio
    async def test_nested_order_is_linked_once(self, sql_store):
        await sql_store.set("orders", {"o1": {"customerId": "C", "status": "confirmed"}})
        orders = DocumentOrderRepository(sql_store, collection_path="orders")

        first = await orders.mark_invoiced("o1", 10000)
        second = await orders.mark_invoiced("o1", 10001)

        assert first == LinkStatus.LINKED
        assert second == LinkStatus.CONFLICT
        assert (await orders.get_by_id("o1")).invoice_number == 10000

    @pytest.mark.asyncio
    async def test_remove_drops_nested_value(self, sql_store):
        await sql_store.set("orders", {"o1": {"a": 1}, "o2": {"a": 2}})

        await sql_store.remove("orders/o1")

        assert await sql_store.get("orders/o1") is None
        assert list(await sql_store.list_children("orders")) == ["o2"]


class TestConcurrentReservations:
    """Counter uniqueness through the version check"""

    @pytest.mark.asyncio
    async def test_parallel_reservations_are_distinct_and_consecutive(self, file_store):
        counters = DocumentCounterRepository(file_store, seeds=COUNTER_SEEDS)

        numbers = await asyncio.gather(*(counters.reserve("invoiceCounter") for _ in range(20)))

        assert sorted(numbers) == list(range(10000, 10020))
        assert await file_store.get("invoiceCounter") == 10019

    @pytest.mark.asyncio
    async def test_parallel_links_to_one_order_pick_a_single_invoice(self, file_store):
        await file_store.set("orders/o1", {"customerId": "C", "status": "confirmed"})
        orders = DocumentOrderRepository(file_store, collection_path="orders")

        outcomes = await asyncio.gather(*(orders.mark_invoiced("o1", n) for n in range(10000, 10005)))

        assert outcomes.count(LinkStatus.LINKED) == 1
        assert outcomes.count(LinkStatus.CONFLICT) == 4
