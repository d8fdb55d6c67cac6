"""Invoice API Routes

FastAPI routes for consolidating orders into invoices and managing them.
"""

import base64
from fastapi import APIRouter, Depends, status
from fastapi.responses import Response

from config import ApplicationConfig
from src.api.error import ClientError
from src.api.schemas.invoice_request import CreateInvoiceRequestSchema, UpdateInvoiceStatusRequestSchema
from src.app.services.document_store import DocumentStore
from src.app.services.pdf_service import PdfService
from src.app.use_cases.invoicing.create_invoice import CreateInvoiceFromOrders
from src.app.use_cases.invoicing.delete_invoice import DeleteInvoice
from src.app.use_cases.invoicing.dtos import (
    CreateInvoiceCommandDTO,
    DeleteInvoiceResponseDTO,
    InvoiceCreationResponseDTO,
    InvoiceDTO,
    InvoicePreviewResponseDTO,
    LinkOrdersResponseDTO,
    OrderSelection,
    RenderedInvoiceDTO,
)
from src.app.use_cases.invoicing.get_invoice import GetInvoice
from src.app.use_cases.invoicing.link_orders import LinkOrdersToInvoice
from src.app.use_cases.invoicing.preview_invoice import PreviewInvoice
from src.app.use_cases.invoicing.render_invoice import RenderInvoiceDocument
from src.app.use_cases.invoicing.update_invoice_status import UpdateInvoiceStatus
from src.depends import (
    counter_repository,
    currency_policy,
    eligible_statuses,
    get_document_store,
    get_pdf_service,
    invoice_defaults,
    invoice_repository,
    order_repository,
    order_repository_factory,
    settings_repository,
)

router = APIRouter(prefix="/invoices", tags=["Invoices"])

# selection -> (order collection, counter namespace)
SELECTION_SOURCES = {
    OrderSelection.READY_ORDERS: (ApplicationConfig.ORDERS_PATH, "invoiceCounter"),
    OrderSelection.FILTERED: (ApplicationConfig.SALES_ORDERS_PATH, "salesInvoiceCounter"),
}


def _error_example(code: str, message: str) -> dict:
    return {
        "content": {
            "application/json": {
                "example": {"error": {"code": code, "message": message}}
            }
        }
    }


NOT_FOUND = {"description": "Invoice not found", **_error_example("INVOICE_NOT_FOUND", "Invoice 10001 not found")}
STORE_DENIED = {"description": "Store refused access", **_error_example("PERMISSION_DENIED", "Permission denied")}
STORE_DOWN = {"description": "Store unavailable", **_error_example("STORE_UNAVAILABLE", "Document store unavailable")}


def _command(request: CreateInvoiceRequestSchema) -> CreateInvoiceCommandDTO:
    _, namespace = SELECTION_SOURCES[request.selection]
    return CreateInvoiceCommandDTO(
        customer_id=request.customer_id,
        customer_name=request.customer_name,
        selection=request.selection,
        status=request.status,
        start_date=request.start_date,
        end_date=request.end_date,
        counter_namespace=namespace,
        issue_date=request.issue_date,
    )


@router.post(
    "/from-orders",
    response_model=InvoiceCreationResponseDTO,
    status_code=status.HTTP_200_OK,
    responses={
        409: {
            "description": "Invoice number could not be reserved",
            **_error_example("COUNTER_RESERVATION_FAILED", "Could not reserve an invoice number"),
        },
        422: {
            "description": "Exchange rate missing",
            **_error_example(
                "MISSING_EXCHANGE_RATE",
                "Cannot generate invoice. Missing settings/exchangeRates/usdToLkr.",
            ),
        },
        403: STORE_DENIED,
        503: STORE_DOWN,
    }
)
async def create_invoice_from_orders(
    request: CreateInvoiceRequestSchema,
    store: DocumentStore = Depends(get_document_store),
):
    """
    Consolidate a customer's eligible orders into one invoice.

    **Request body:**
    - `customer_id` (required): Customer identifier
    - `selection` (optional): `ready_orders` (default) or `filtered`
    - `status`, `start_date`, `end_date` (optional): filters for `filtered`

    **Returns:**
    - 200: Invoice created, partially linked, or nothing to invoice (see `outcome`)
    - 409: Counter reservation failed, nothing written
    - 422: Foreign-currency items without an exchange rate
    """
    collection, _ = SELECTION_SOURCES[request.selection]

    use_case = CreateInvoiceFromOrders(
        order_repo=order_repository(store, collection),
        invoice_repo=invoice_repository(store),
        counter_repo=counter_repository(store),
        settings_repo=settings_repository(store),
        currency_policy=currency_policy(),
        eligible_statuses=eligible_statuses(),
        defaults=invoice_defaults(),
    )
    result = await use_case.execute(_command(request))

    if result.is_err():
        raise ClientError.from_error(result.error)

    return result.value


@router.post(
    "/preview",
    response_model=InvoicePreviewResponseDTO,
    status_code=status.HTTP_200_OK,
    responses={403: STORE_DENIED, 503: STORE_DOWN},
)
async def preview_invoice(
    request: CreateInvoiceRequestSchema,
    store: DocumentStore = Depends(get_document_store),
):
    """
    Show the rows an invoice would contain without writing anything.

    **Returns:**
    - 200: Preview (check `nothing_to_invoice`)
    - 422: Foreign-currency items without an exchange rate
    """
    collection, _ = SELECTION_SOURCES[request.selection]

    use_case = PreviewInvoice(
        order_repo=order_repository(store, collection),
        settings_repo=settings_repository(store),
        currency_policy=currency_policy(),
        eligible_statuses=eligible_statuses(),
        local_currency=ApplicationConfig.LOCAL_CURRENCY,
    )
    result = await use_case.execute(_command(request))

    if result.is_err():
        raise ClientError.from_error(result.error)

    return result.value


@router.get(
    "/{invoice_number}",
    response_model=InvoiceDTO,
    status_code=status.HTTP_200_OK,
    responses={404: NOT_FOUND},
)
async def get_invoice(
    invoice_number: int,
    store: DocumentStore = Depends(get_document_store),
):
    """Fetch a stored invoice by number."""
    result = await GetInvoice(invoice_repository(store)).execute(invoice_number)

    if result.is_err():
        raise ClientError.from_error(result.error)

    return result.value


async def _render(invoice_number: int, store: DocumentStore, pdf_service: PdfService):
    use_case = RenderInvoiceDocument(
        invoice_repo=invoice_repository(store),
        settings_repo=settings_repository(store),
        pdf_service=pdf_service,
        currency_symbol=ApplicationConfig.LOCAL_CURRENCY_SYMBOL,
        min_rows=ApplicationConfig.INVOICE_TEMPLATE_MIN_ROWS,
    )
    result = await use_case.execute(invoice_number)

    if result.is_err():
        raise ClientError.from_error(result.error)

    return result.value


@router.get(
    "/{invoice_number}/document",
    response_model=RenderedInvoiceDTO,
    status_code=status.HTTP_200_OK,
    responses={
        404: NOT_FOUND,
        422: {
            "description": "Invoice record incomplete",
            **_error_example("MISSING_INVOICE_FIELDS", "Invoice is missing required fields: issueDate"),
        },
    }
)
async def render_invoice_document(
    invoice_number: int,
    store: DocumentStore = Depends(get_document_store),
    pdf_service: PdfService = Depends(get_pdf_service),
):
    """Render the invoice PDF and return it base64 encoded."""
    return await _render(invoice_number, store, pdf_service)


@router.get(
    "/{invoice_number}/pdf",
    responses={
        200: {
            "content": {"application/pdf": {}},
            "description": "PDF document"
        },
        404: NOT_FOUND,
        422: {
            "description": "Invoice record incomplete",
            **_error_example("MISSING_INVOICE_FIELDS", "Invoice is missing required fields: issueDate"),
        },
    }
)
async def download_invoice_pdf(
    invoice_number: int,
    store: DocumentStore = Depends(get_document_store),
    pdf_service: PdfService = Depends(get_pdf_service),
):
    """
    Download the invoice as a PDF file.

    **Returns:**
    - 200: PDF file as binary response
    - 404: Invoice not found
    - 422: Invoice is missing number, date, customer or items
    """
    rendered = await _render(invoice_number, store, pdf_service)
    pdf_bytes = base64.b64decode(rendered.pdf_base64)

    return Response(
        content=pdf_bytes,
        media_type="application/pdf",
        headers={
            "Content-Disposition": f"attachment; filename={rendered.file_name}"
        }
    )


@router.patch(
    "/{invoice_number}/status",
    response_model=InvoiceDTO,
    status_code=status.HTTP_200_OK,
    responses={
        404: NOT_FOUND,
        409: {
            "description": "Transition not allowed",
            **_error_example("INVALID_STATUS_TRANSITION", "Cannot change invoice 10001 from paid to pending"),
        },
    }
)
async def update_invoice_status(
    invoice_number: int,
    request: UpdateInvoiceStatusRequestSchema,
    store: DocumentStore = Depends(get_document_store),
):
    """
    Change the payment status (created -> pending -> paid).

    **Returns:**
    - 200: Updated invoice
    - 400: Unknown status
    - 404: Invoice not found
    - 409: Paid invoices are final
    """
    result = await UpdateInvoiceStatus(invoice_repository(store)).execute(invoice_number, request.status)

    if result.is_err():
        raise ClientError.from_error(result.error)

    return result.value


@router.post(
    "/{invoice_number}/link-orders",
    response_model=LinkOrdersResponseDTO,
    status_code=status.HTTP_200_OK,
    responses={404: NOT_FOUND, 403: STORE_DENIED, 503: STORE_DOWN},
)
async def link_invoice_orders(
    invoice_number: int,
    store: DocumentStore = Depends(get_document_store),
):
    """
    Retry marking an invoice's source orders as invoiced.

    Never reserves a new invoice number. Orders already linked to another
    invoice are returned in `conflicting_order_ids`.
    """
    use_case = LinkOrdersToInvoice(
        invoice_repo=invoice_repository(store),
        order_repo_for=order_repository_factory(store),
        default_collection=ApplicationConfig.ORDERS_PATH,
    )
    result = await use_case.execute(invoice_number)

    if result.is_err():
        raise ClientError.from_error(result.error)

    return result.value


@router.delete(
    "/{invoice_number}",
    response_model=DeleteInvoiceResponseDTO,
    status_code=status.HTTP_200_OK,
    responses={404: NOT_FOUND, 403: STORE_DENIED, 503: STORE_DOWN},
)
async def delete_invoice(
    invoice_number: int,
    store: DocumentStore = Depends(get_document_store),
):
    """
    Delete an invoice and release its source orders.

    The invoice number is not reused.
    """
    use_case = DeleteInvoice(
        invoice_repo=invoice_repository(store),
        order_repo_for=order_repository_factory(store),
        default_collection=ApplicationConfig.ORDERS_PATH,
    )
    result = await use_case.execute(invoice_number)

    if result.is_err():
        raise ClientError.from_error(result.error)

    return result.value
