from .in_memory_document_store import InMemoryDocumentStore
from .sql_document_store import SqlAlchemyDocumentStore
from .pdf_service import ReportLabPdfService
from .schema_inference_service import GatewaySchemaInferenceService

__all__ = [
    "InMemoryDocumentStore",
    "SqlAlchemyDocumentStore",
    "ReportLabPdfService",
    "GatewaySchemaInferenceService",
]
