from .document_store import (
    ABORT,
    DocumentStore,
    DocumentStoreError,
    PermissionDeniedError,
    StoreUnavailableError,
    TransactionContentionError,
    TransactionResult,
)
from .pdf_service import PdfService, InvoiceDocument
from .schema_inference_service import (
    SchemaInferenceService,
    SchemaInferenceError,
    RateLimitedError,
    PaymentRequiredError,
)

__all__ = [
    "ABORT",
    "DocumentStore",
    "DocumentStoreError",
    "PermissionDeniedError",
    "StoreUnavailableError",
    "TransactionContentionError",
    "TransactionResult",
    "PdfService",
    "InvoiceDocument",
    "SchemaInferenceService",
    "SchemaInferenceError",
    "RateLimitedError",
    "PaymentRequiredError",
]
