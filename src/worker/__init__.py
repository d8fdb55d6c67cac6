"""Background workers for the invoicing service"""
from .invoice_link_reconciler import InvoiceLinkReconcilerWorker

__all__ = ["InvoiceLinkReconcilerWorker"]
