"""Line item aggregation

Merges the line items of several orders into invoice rows expressed
in the local settlement currency.
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, FrozenSet, Iterable, List, Optional, Tuple
from src.domain.invoice import AggregatedLineItem
from src.domain.order import Order, OrderLineItem

logger = logging.getLogger(__name__)


class MissingExchangeRateError(Exception):
    """Foreign-currency items exist but no conversion rate is configured"""


@dataclass(frozen=True)
class CurrencyPolicy:
    """
    How item currencies are interpreted

    foreign_codes are matched case-insensitively after trimming, so
    "usd", "USD" and "$" all count as foreign by default.
    """
    default_currency: str = "LKR"
    foreign_codes: FrozenSet[str] = field(default_factory=lambda: frozenset({"USD", "$"}))

    def effective_currency(self, item: OrderLineItem) -> str:
        return (item.currency or self.default_currency or "").strip()

    def is_foreign(self, item: OrderLineItem) -> bool:
        codes = {code.strip().upper() for code in self.foreign_codes}
        return self.effective_currency(item).upper() in codes


@dataclass
class AggregationResult:
    """Aggregated rows plus traceability counts"""
    items: List[AggregatedLineItem]
    orders_consumed: int
    skipped_items: int = 0

    @property
    def total(self) -> Decimal:
        return sum((item.total for item in self.items), Decimal("0"))

    @property
    def is_empty(self) -> bool:
        return not self.items


def is_valid_item(item: OrderLineItem) -> bool:
    """Quantity must be positive and price non-negative"""
    return item.quantity > 0 and item.unit_price >= 0


def requires_exchange_rate(orders: Iterable[Order], policy: CurrencyPolicy) -> bool:
    """True if any valid item on these orders is priced in a foreign currency"""
    return any(
        policy.is_foreign(item)
        for order in orders
        for item in order.items
        if is_valid_item(item)
    )


def aggregate_line_items(
    orders: Iterable[Order],
    policy: CurrencyPolicy,
    exchange_rate: Optional[Decimal] = None,
) -> AggregationResult:
    """
    Aggregate order items by (item code, converted unit price)

    Invalid items (quantity <= 0 or negative price) are skipped silently
    and counted in skipped_items. Foreign prices are multiplied by
    exchange_rate before keying, so equal codes only merge when the
    converted prices match exactly.

    Raises:
        MissingExchangeRateError: a foreign item exists and exchange_rate is None
    """
    orders = list(orders)
    if exchange_rate is None and requires_exchange_rate(orders, policy):
        raise MissingExchangeRateError("Foreign-currency items require an exchange rate")

    rows: Dict[Tuple[str, Decimal], dict] = {}
    consumed_order_ids = set()
    skipped = 0

    for order in orders:
        for item in order.items:
            if not is_valid_item(item):
                skipped += 1
                continue

            unit_price = item.unit_price
            if policy.is_foreign(item):
                unit_price = unit_price * exchange_rate

            key = (item.key_code, unit_price)
            row = rows.get(key)
            if row is None:
                rows[key] = {
                    "item_code": item.key_code,
                    "description": item.description or "",
                    "quantity": item.quantity,
                    "unit_price": unit_price,
                }
            else:
                row["quantity"] += item.quantity
                if not row["description"] and item.description:
                    row["description"] = item.description

            consumed_order_ids.add(order.id)

    if skipped:
        logger.info(f"Skipped {skipped} invalid line items during aggregation")

    items = [
        AggregatedLineItem(
            item_code=row["item_code"],
            description=row["description"],
            quantity=row["quantity"],
            unit_price=row["unit_price"],
            total=row["unit_price"] * row["quantity"],
        )
        for row in rows.values()
    ]
    return AggregationResult(
        items=items,
        orders_consumed=len(consumed_order_ids),
        skipped_items=skipped,
    )
