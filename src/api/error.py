"""API error mapping

Use case errors become JSON responses shaped
{"error": {"code": ..., "message": ...}}.
"""

from fastapi import Request, status
from fastapi.responses import JSONResponse
from libs.result import Error

ERROR_STATUS_CODES = {
    "INVOICE_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "PERMISSION_DENIED": status.HTTP_403_FORBIDDEN,
    "STORE_UNAVAILABLE": status.HTTP_503_SERVICE_UNAVAILABLE,
    "COUNTER_RESERVATION_FAILED": status.HTTP_409_CONFLICT,
    "INVOICE_ALREADY_EXISTS": status.HTTP_409_CONFLICT,
    "INVALID_STATUS_TRANSITION": status.HTTP_409_CONFLICT,
    "MISSING_EXCHANGE_RATE": status.HTTP_422_UNPROCESSABLE_ENTITY,
    "MISSING_INVOICE_FIELDS": status.HTTP_422_UNPROCESSABLE_ENTITY,
    "INVALID_TABULAR_FILE": status.HTTP_422_UNPROCESSABLE_ENTITY,
    "UNSUPPORTED_FILE_TYPE": status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
    "CLASSIFIER_RATE_LIMITED": status.HTTP_429_TOO_MANY_REQUESTS,
    "CLASSIFIER_PAYMENT_REQUIRED": status.HTTP_402_PAYMENT_REQUIRED,
    "CLASSIFIER_FAILED": status.HTTP_502_BAD_GATEWAY,
}


class ClientError(Exception):
    """Use case error surfaced to the HTTP client"""

    def __init__(self, error: Error, status_code: int = status.HTTP_400_BAD_REQUEST):
        super().__init__(error.message)
        self.error = error
        self.status_code = status_code

    @classmethod
    def from_error(cls, error: Error) -> "ClientError":
        """Pick the HTTP status from the error code (400 if unmapped)"""
        return cls(error, status_code=ERROR_STATUS_CODES.get(error.code, status.HTTP_400_BAD_REQUEST))


async def client_error_handler(request: Request, exc: ClientError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": {"code": exc.error.code, "message": exc.error.message}},
    )
