"""CreateInvoiceFromOrders Use Case

Consolidates a customer's eligible orders into one invoice with a
unique sequential number and links the orders back to it.
"""

import logging
from datetime import date
from typing import FrozenSet
from libs.result import Result, Return, Error
from src.app.repositories.counter_repository import CounterRepository, CounterReservationError
from src.app.repositories.invoice_repository import InvoiceRepository, InvoiceAlreadyExistsError
from src.app.repositories.order_repository import OrderRepository
from src.app.repositories.settings_repository import SettingsRepository
from src.app.services.document_store import DocumentStoreError, TransactionContentionError
from src.app.use_cases.store_errors import store_error
from src.domain.invoice import Invoice, InvoiceDefaults
from .aggregation import CurrencyPolicy, MissingExchangeRateError
from .consolidation import OrderConsolidator
from .dtos import (
    AggregatedItemDTO,
    CreateInvoiceCommandDTO,
    InvoiceCreationResponseDTO,
    InvoiceOutcome,
)
from .link_orders import link_source_orders

logger = logging.getLogger(__name__)


class CreateInvoiceFromOrders:
    """
    Use Case: Create one invoice from a customer's eligible orders

    Business Rules:
    1. No eligible orders or no valid items: nothing is written
    2. Foreign-currency items need a stored exchange rate
    3. Invoice number comes from an atomic counter reservation
    4. Invoice total equals the sum of the aggregated rows
    5. Every source order ends up pointing at the invoice number

    Flow:
    1. Select eligible orders and aggregate their items
    2. Reserve the next invoice number
    3. Write the invoice under its number
    4. Mark each source order invoiced with that number
    5. Return response (partially_linked if step 4 was incomplete)
    """

    def __init__(
        self,
        order_repo: OrderRepository,
        invoice_repo: InvoiceRepository,
        counter_repo: CounterRepository,
        settings_repo: SettingsRepository,
        currency_policy: CurrencyPolicy,
        eligible_statuses: FrozenSet[str],
        defaults: InvoiceDefaults = InvoiceDefaults(),
    ):
        self.order_repo = order_repo
        self.invoice_repo = invoice_repo
        self.counter_repo = counter_repo
        self.consolidator = OrderConsolidator(
            order_repo=order_repo,
            settings_repo=settings_repo,
            currency_policy=currency_policy,
            eligible_statuses=eligible_statuses,
        )
        self.defaults = defaults

    async def execute(self, command: CreateInvoiceCommandDTO) -> Result[InvoiceCreationResponseDTO]:
        """
        Execute invoice creation

        Args:
            command: CreateInvoiceCommandDTO with customer and selection

        Returns:
            Result[InvoiceCreationResponseDTO]: outcome of the attempt or error
        """
        try:
            # Step 1: Select and aggregate
            try:
                consolidation = await self.consolidator.consolidate(command)
            except MissingExchangeRateError as e:
                logger.warning(f"Invoice for customer {command.customer_id} blocked: {e}")
                return Return.err(
                    Error(
                        code="MISSING_EXCHANGE_RATE",
                        message=f"Cannot generate invoice. {e}.",
                        reason="Foreign-currency items present without a conversion rate",
                    )
                )

            if consolidation.nothing_to_invoice:
                logger.info(f"Nothing to invoice for customer {command.customer_id}: {consolidation.reason}")
                return Return.ok(
                    InvoiceCreationResponseDTO(
                        outcome=InvoiceOutcome.NOTHING_TO_INVOICE,
                        message=consolidation.reason,
                        customer_id=command.customer_id,
                    )
                )

            aggregation = consolidation.aggregation

            # Step 2: Reserve invoice number
            try:
                invoice_number = await self.counter_repo.reserve(command.counter_namespace)
            except (CounterReservationError, TransactionContentionError) as e:
                logger.warning(f"Invoice number reservation failed on {command.counter_namespace}: {e}")
                return Return.err(
                    Error(
                        code="COUNTER_RESERVATION_FAILED",
                        message="Could not reserve an invoice number",
                        reason=str(e),
                    )
                )

            # Step 3: Write invoice
            invoice = Invoice.build(
                number=invoice_number,
                customer_id=command.customer_id,
                customer_name=command.customer_name,
                items=aggregation.items,
                source_order_ids=consolidation.order_ids,
                orders_consumed=aggregation.orders_consumed,
                issue_date=command.issue_date or date.today(),
                currency=self.defaults.currency,
                counter_namespace=command.counter_namespace,
                source_collection=self.order_repo.collection,
                status=self.defaults.status,
            )

            try:
                await self.invoice_repo.create(invoice)
            except InvoiceAlreadyExistsError as e:
                return Return.err(
                    Error(
                        code="INVOICE_ALREADY_EXISTS",
                        message=f"Invoice number {invoice_number} is already in use",
                        reason=str(e),
                    )
                )

            # Step 4: Link source orders
            report = await link_source_orders(self.order_repo, invoice_number, invoice.source_order_ids)

            if report.complete:
                outcome = InvoiceOutcome.CREATED
                message = f"Invoice {invoice_number} created from {len(invoice.source_order_ids)} orders"
                logger.info(
                    f"Created invoice {invoice_number} for customer {command.customer_id}: "
                    f"{len(invoice.items)} rows, total {invoice.total}"
                )
            else:
                outcome = InvoiceOutcome.PARTIALLY_LINKED
                message = (
                    f"Invoice {invoice_number} created but "
                    f"{len(report.failed) + len(report.conflicting)} orders could not be linked"
                )

            return Return.ok(
                InvoiceCreationResponseDTO(
                    outcome=outcome,
                    message=message,
                    customer_id=command.customer_id,
                    invoice_number=invoice_number,
                    total=invoice.total,
                    currency=invoice.currency,
                    items=[AggregatedItemDTO.from_item(item) for item in invoice.items],
                    source_order_ids=invoice.source_order_ids,
                    orders_consumed=invoice.orders_consumed,
                    linked_order_ids=report.linked + report.already_linked,
                    failed_order_ids=report.failed,
                    conflicting_order_ids=report.conflicting,
                )
            )

        except DocumentStoreError as e:
            logger.error(f"Store failure while invoicing customer {command.customer_id}: {e}")
            return Return.err(store_error(e))
        except Exception as e:
            logger.exception(f"Unexpected failure while invoicing customer {command.customer_id}")
            return Return.err(
                Error(
                    code="CREATE_INVOICE_FAILED",
                    message="Failed to create invoice",
                    reason=str(e),
                )
            )
