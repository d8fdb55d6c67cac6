from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession
from config import ApplicationConfig
from src.adapter.repositories.counter_repository import DocumentCounterRepository
from src.adapter.repositories.invoice_repository import DocumentInvoiceRepository
from src.adapter.repositories.order_repository import DocumentOrderRepository
from src.adapter.repositories.settings_repository import DocumentSettingsRepository
from src.adapter.services.pdf_service import ReportLabPdfService
from src.adapter.services.schema_inference_service import GatewaySchemaInferenceService
from src.adapter.services.sql_document_store import SqlAlchemyDocumentStore
from src.app.services.document_store import DocumentStore
from src.app.services.pdf_service import PdfService
from src.app.services.schema_inference_service import SchemaInferenceService
from src.app.use_cases.invoicing.aggregation import CurrencyPolicy
from src.domain.invoice import InvoiceDefaults
from src.domain.order import normalize_status
from src.domain.profile import CompanyProfile
from src.domain.tabular_import import ImportDefaults

engine = create_async_engine(ApplicationConfig.DB_URI, echo=False, future=True)

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)

document_store = SqlAlchemyDocumentStore(
    AsyncSessionLocal, max_retries=ApplicationConfig.COUNTER_MAX_RETRIES
)


def get_document_store() -> DocumentStore:
    return document_store


def get_pdf_service() -> PdfService:
    return ReportLabPdfService()


def get_schema_inference_service() -> SchemaInferenceService:
    return GatewaySchemaInferenceService(
        api_url=ApplicationConfig.CLASSIFIER_API_URL,
        api_key=ApplicationConfig.CLASSIFIER_API_KEY,
        model=ApplicationConfig.CLASSIFIER_MODEL,
        timeout=ApplicationConfig.CLASSIFIER_TIMEOUT_SECONDS,
    )


def currency_policy() -> CurrencyPolicy:
    return CurrencyPolicy(
        default_currency=ApplicationConfig.DEFAULT_ITEM_CURRENCY,
        foreign_codes=frozenset(ApplicationConfig.FOREIGN_CURRENCY_CODES),
    )


def eligible_statuses() -> frozenset:
    return frozenset(normalize_status(s) for s in ApplicationConfig.ELIGIBLE_ORDER_STATUSES)


def invoice_defaults() -> InvoiceDefaults:
    return InvoiceDefaults(currency=ApplicationConfig.LOCAL_CURRENCY)


def import_defaults() -> ImportDefaults:
    return ImportDefaults(
        quantity=ApplicationConfig.IMPORT_DEFAULT_QUANTITY,
        description=ApplicationConfig.IMPORT_DEFAULT_DESCRIPTION,
    )


def order_repository(store: DocumentStore, collection: str = ApplicationConfig.ORDERS_PATH) -> DocumentOrderRepository:
    return DocumentOrderRepository(store, collection_path=collection)


def order_repository_factory(store: DocumentStore):
    """Maps an order collection path to its repository"""
    return lambda collection: DocumentOrderRepository(store, collection_path=collection)


def invoice_repository(store: DocumentStore) -> DocumentInvoiceRepository:
    return DocumentInvoiceRepository(store, collection_path=ApplicationConfig.INVOICES_PATH)


def counter_repository(store: DocumentStore) -> DocumentCounterRepository:
    return DocumentCounterRepository(store, seeds=ApplicationConfig.COUNTER_SEEDS)


def settings_repository(store: DocumentStore) -> DocumentSettingsRepository:
    return DocumentSettingsRepository(
        store,
        exchange_rate_path=ApplicationConfig.EXCHANGE_RATE_PATH,
        default_company=CompanyProfile(
            name=ApplicationConfig.COMPANY_NAME,
            address_line=ApplicationConfig.COMPANY_ADDRESS,
            phone=ApplicationConfig.COMPANY_PHONE,
        ),
        company_path=ApplicationConfig.COMPANY_PATH,
        customers_path=ApplicationConfig.CUSTOMERS_PATH,
    )
