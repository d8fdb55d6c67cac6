"""PreviewInvoice Use Case

Dry run of invoice creation: same selection and aggregation, no writes.
"""

import logging
from typing import FrozenSet
from libs.result import Result, Return, Error
from src.app.repositories.order_repository import OrderRepository
from src.app.repositories.settings_repository import SettingsRepository
from src.app.services.document_store import DocumentStoreError
from src.app.use_cases.store_errors import store_error
from .aggregation import CurrencyPolicy, MissingExchangeRateError
from .consolidation import OrderConsolidator
from .dtos import AggregatedItemDTO, CreateInvoiceCommandDTO, InvoicePreviewResponseDTO

logger = logging.getLogger(__name__)


class PreviewInvoice:
    """
    Use Case: Show what an invoice for this customer would contain

    Never touches the counter and never writes. Empty results and a
    missing exchange rate are reported exactly as creation would.
    """

    def __init__(
        self,
        order_repo: OrderRepository,
        settings_repo: SettingsRepository,
        currency_policy: CurrencyPolicy,
        eligible_statuses: FrozenSet[str],
        local_currency: str = "LKR",
    ):
        self.consolidator = OrderConsolidator(
            order_repo=order_repo,
            settings_repo=settings_repo,
            currency_policy=currency_policy,
            eligible_statuses=eligible_statuses,
        )
        self.local_currency = local_currency

    async def execute(self, command: CreateInvoiceCommandDTO) -> Result[InvoicePreviewResponseDTO]:
        try:
            consolidation = await self.consolidator.consolidate(command)
        except MissingExchangeRateError as e:
            logger.warning(f"Preview for customer {command.customer_id} blocked: {e}")
            return Return.err(
                Error(
                    code="MISSING_EXCHANGE_RATE",
                    message=f"Cannot generate invoice. {e}.",
                    reason="Foreign-currency items present without a conversion rate",
                )
            )
        except DocumentStoreError as e:
            return Return.err(store_error(e))
        except Exception as e:
            return Return.err(
                Error(
                    code="PREVIEW_INVOICE_FAILED",
                    message="Failed to preview invoice",
                    reason=str(e),
                )
            )

        aggregation = consolidation.aggregation
        if consolidation.nothing_to_invoice:
            return Return.ok(
                InvoicePreviewResponseDTO(
                    customer_id=command.customer_id,
                    nothing_to_invoice=True,
                    message=consolidation.reason,
                    eligible_order_ids=consolidation.order_ids,
                    currency=self.local_currency,
                    skipped_items=aggregation.skipped_items if aggregation else 0,
                )
            )

        return Return.ok(
            InvoicePreviewResponseDTO(
                customer_id=command.customer_id,
                nothing_to_invoice=False,
                message=f"{len(aggregation.items)} rows from {aggregation.orders_consumed} orders",
                eligible_order_ids=consolidation.order_ids,
                items=[AggregatedItemDTO.from_item(item) for item in aggregation.items],
                total=aggregation.total,
                currency=self.local_currency,
                orders_consumed=aggregation.orders_consumed,
                skipped_items=aggregation.skipped_items,
            )
        )
