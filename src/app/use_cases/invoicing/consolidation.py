"""Order consolidation shared by invoice creation and preview

Reads the customer's orders, applies the eligibility rule, resolves the
exchange rate when foreign items are present, and aggregates.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import FrozenSet, List, Optional
from src.app.repositories.order_repository import OrderRepository
from src.app.repositories.settings_repository import SettingsRepository
from src.domain.order import Order
from .aggregation import (
    AggregationResult,
    CurrencyPolicy,
    MissingExchangeRateError,
    aggregate_line_items,
    requires_exchange_rate,
)
from .dtos import CreateInvoiceCommandDTO
from .eligibility import filter_eligible_orders


@dataclass
class Consolidation:
    """Eligible orders and their aggregation (None if no orders qualified)"""
    eligible_orders: List[Order]
    aggregation: Optional[AggregationResult]
    exchange_rate: Optional[Decimal] = None

    @property
    def order_ids(self) -> List[str]:
        return [order.id for order in self.eligible_orders]

    @property
    def nothing_to_invoice(self) -> bool:
        return self.aggregation is None or self.aggregation.is_empty

    @property
    def reason(self) -> str:
        if not self.eligible_orders:
            return "No eligible orders found for this customer"
        if self.nothing_to_invoice:
            return "No valid line items found in the eligible orders"
        return ""


class OrderConsolidator:
    """
    Selects and aggregates a customer's invoiceable orders

    Raises MissingExchangeRateError (with the settings path in the
    message) when foreign-currency items exist and no rate is stored.
    """

    def __init__(
        self,
        order_repo: OrderRepository,
        settings_repo: SettingsRepository,
        currency_policy: CurrencyPolicy,
        eligible_statuses: FrozenSet[str],
    ):
        self.order_repo = order_repo
        self.settings_repo = settings_repo
        self.currency_policy = currency_policy
        self.eligible_statuses = eligible_statuses

    async def consolidate(self, command: CreateInvoiceCommandDTO) -> Consolidation:
        predicate = command.eligibility_rule(self.eligible_statuses)
        orders = await self.order_repo.list_orders()
        eligible = filter_eligible_orders(orders, command.customer_id, predicate)
        if not eligible:
            return Consolidation(eligible_orders=[], aggregation=None)

        exchange_rate = None
        if requires_exchange_rate(eligible, self.currency_policy):
            exchange_rate = await self.settings_repo.get_exchange_rate()
            if exchange_rate is None:
                raise MissingExchangeRateError(
                    f"Missing {self.settings_repo.exchange_rate_path}"
                )

        aggregation = aggregate_line_items(eligible, self.currency_policy, exchange_rate)
        return Consolidation(
            eligible_orders=eligible,
            aggregation=aggregation,
            exchange_rate=exchange_rate,
        )
