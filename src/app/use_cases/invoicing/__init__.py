"""Invoicing use cases"""
from .aggregation import CurrencyPolicy, MissingExchangeRateError, aggregate_line_items
from .eligibility import ReadyOrdersRule, StatusDateRule, filter_eligible_orders
from .create_invoice import CreateInvoiceFromOrders
from .preview_invoice import PreviewInvoice
from .get_invoice import GetInvoice
from .link_orders import LinkOrdersToInvoice, link_source_orders
from .render_invoice import RenderInvoiceDocument
from .update_invoice_status import UpdateInvoiceStatus
from .delete_invoice import DeleteInvoice
from .reconcile_links import ReconcileInvoiceLinks
from .dtos import (
    OrderSelection,
    InvoiceOutcome,
    CreateInvoiceCommandDTO,
    AggregatedItemDTO,
    InvoiceCreationResponseDTO,
    InvoicePreviewResponseDTO,
    LinkOrdersResponseDTO,
    InvoiceDTO,
    RenderedInvoiceDTO,
    DeleteInvoiceResponseDTO,
    LinkDiscrepancyDTO,
    LinkReconciliationResultDTO,
)

__all__ = [
    "CurrencyPolicy",
    "MissingExchangeRateError",
    "aggregate_line_items",
    "ReadyOrdersRule",
    "StatusDateRule",
    "filter_eligible_orders",
    "CreateInvoiceFromOrders",
    "PreviewInvoice",
    "GetInvoice",
    "LinkOrdersToInvoice",
    "link_source_orders",
    "RenderInvoiceDocument",
    "UpdateInvoiceStatus",
    "DeleteInvoice",
    "ReconcileInvoiceLinks",
    "OrderSelection",
    "InvoiceOutcome",
    "CreateInvoiceCommandDTO",
    "AggregatedItemDTO",
    "InvoiceCreationResponseDTO",
    "InvoicePreviewResponseDTO",
    "LinkOrdersResponseDTO",
    "InvoiceDTO",
    "RenderedInvoiceDTO",
    "DeleteInvoiceResponseDTO",
    "LinkDiscrepancyDTO",
    "LinkReconciliationResultDTO",
]
