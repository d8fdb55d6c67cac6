"""Order eligibility rules

Selects which of a customer's orders may be put on an invoice. Two
rules exist, one per invoice-generation entry point, both applied
through `filter_eligible_orders`.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Callable, FrozenSet, Iterable, List, Optional
from src.domain.order import Order, OrderStatus, normalize_status

EligibilityPredicate = Callable[[Order], bool]

ALL_STATUSES = "all"


@dataclass(frozen=True)
class ReadyOrdersRule:
    """
    Orders in an eligible workflow state that were never invoiced

    Used by the consolidated invoice flow (e.g. confirmed/ready orders).
    """
    eligible_statuses: FrozenSet[str] = field(
        default_factory=lambda: frozenset({OrderStatus.CONFIRMED.value, OrderStatus.READY.value})
    )

    def __call__(self, order: Order) -> bool:
        wanted = {normalize_status(s) for s in self.eligible_statuses}
        return normalize_status(order.status) in wanted and not order.is_invoiced


@dataclass(frozen=True)
class StatusDateRule:
    """
    Ad-hoc filter by exact status and inclusive date range

    status=None or "all" disables the status check. Statuses are compared
    after normalisation, so a value no order carries (e.g. "unpaid")
    simply selects nothing. The date check only applies when both bounds
    are given. Orders without a date never match an active date range.
    """
    status: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    def __post_init__(self):
        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise ValueError(f"start_date {self.start_date} is after end_date {self.end_date}")

    @property
    def status_filter(self) -> Optional[str]:
        if self.status is None:
            return None
        wanted = normalize_status(self.status)
        if wanted == ALL_STATUSES:
            return None
        return wanted

    def __call__(self, order: Order) -> bool:
        wanted = self.status_filter
        if wanted is not None and normalize_status(order.status) != wanted:
            return False
        if self.start_date is not None and self.end_date is not None:
            if order.ordered_on is None:
                return False
            return self.start_date <= order.ordered_on <= self.end_date
        return True


def filter_eligible_orders(
    orders: Iterable[Order],
    customer_id: str,
    predicate: EligibilityPredicate,
) -> List[Order]:
    """
    Keep the customer's orders accepted by the predicate

    Orders already invoiced are never returned, whatever the predicate.
    Order of encounter is preserved. An empty list is a normal result.
    """
    return [
        order for order in orders
        if order.customer_id == customer_id
        and not order.is_invoiced
        and predicate(order)
    ]
