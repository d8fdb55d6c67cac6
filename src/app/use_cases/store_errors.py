"""Mapping of document store failures to use case errors

Permission problems and connectivity problems are kept apart so the
caller can give different guidance.
"""

from libs.result import Error
from src.app.services.document_store import DocumentStoreError, PermissionDeniedError


def store_error(e: DocumentStoreError) -> Error:
    if isinstance(e, PermissionDeniedError):
        return Error(
            code="PERMISSION_DENIED",
            message="Permission denied by the data store",
            reason=str(e),
        )
    return Error(
        code="STORE_UNAVAILABLE",
        message="Data store is unavailable",
        reason=str(e),
    )
