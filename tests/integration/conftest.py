import pytest_asyncio
from unittest.mock import AsyncMock, MagicMock
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession
from config import ApplicationConfig
from src.adapter.services.pdf_service import ReportLabPdfService
from src.adapter.services.sql_document_store import SqlAlchemyDocumentStore
from src.depends import get_document_store, get_pdf_service, get_schema_inference_service
from src.domain.stored_document import StoredDocument  # noqa: F401


class IntegrationConfig(ApplicationConfig):
    API_PREFIX = ""
    AUTO_CREATE_TABLES = False
    ENABLE_LOGGING_MIDDLEWARE = False


@pytest_asyncio.fixture(scope="function")
async def engine():
    """In-memory SQLite shared by every session of one test"""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        echo=False,
        future=True,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def sql_store(engine):
    """Document store on the test database"""
    Session = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)
    return SqlAlchemyDocumentStore(Session, max_retries=ApplicationConfig.COUNTER_MAX_RETRIES)


@pytest_asyncio.fixture
async def schema_service():
    """Classifier stand-in; tests set classify's return value or side effect"""
    service = MagicMock()
    service.classify = AsyncMock(return_value=[])
    return service


@pytest_asyncio.fixture
async def client(sql_store, schema_service):
    """Create test client with store and collaborator overrides"""
    from src.api.app import create_app

    app = create_app(IntegrationConfig)

    app.dependency_overrides[get_document_store] = lambda: sql_store
    app.dependency_overrides[get_pdf_service] = lambda: ReportLabPdfService()
    app.dependency_overrides[get_schema_inference_service] = lambda: schema_service

    # Use ASGITransport for httpx AsyncClient
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
