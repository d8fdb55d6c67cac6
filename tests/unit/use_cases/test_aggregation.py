"""Unit tests for line item aggregation"""

import pytest
from decimal import Decimal

from src.app.use_cases.invoicing.aggregation import (
    CurrencyPolicy,
    MissingExchangeRateError,
    aggregate_line_items,
    requires_exchange_rate,
)
from src.domain.order import Order
from tests.fixtures.orders import item


def _order(order_id, items):
    return Order.from_document({"customerId": "C", "status": "confirmed", "items": items}, id=order_id)


@pytest.fixture
def policy():
    return CurrencyPolicy()


class TestAggregateLineItems:
    """Grouping by (code, converted price)"""

    def test_end_to_end_scenario_rows_and_total(self, policy):
        orders = [
            _order("a", [item("X1", 2, 100)]),
            _order("b", [item("X1", 1, 100), item("Y2", 1, 50)]),
        ]

        result = aggregate_line_items(orders, policy)

        rows = {(r.item_code, r.quantity, r.total) for r in result.items}
        assert rows == {("X1", 3, Decimal("300")), ("Y2", 1, Decimal("50"))}
        assert result.total == Decimal("350")
        assert result.orders_consumed == 2

    def test_same_code_different_price_stays_separate(self, policy):
        orders = [_order("a", [item("X1", 1, 100), item("X1", 1, 120)])]

        result = aggregate_line_items(orders, policy)

        assert sorted(r.unit_price for r in result.items) == [Decimal("100"), Decimal("120")]

    def test_invalid_items_skipped_and_counted(self, policy):
        orders = [
            _order("a", [item("X1", 0, 100), item("X2", -1, 100), item("X3", 1, -5)]),
            _order("b", [item("Y1", 2, 10)]),
        ]

        result = aggregate_line_items(orders, policy)

        assert [r.item_code for r in result.items] == ["Y1"]
        assert result.skipped_items == 3
        assert result.orders_consumed == 1

    def test_zero_price_item_is_valid(self, policy):
        result = aggregate_line_items([_order("a", [item("FREE", 2, 0)])], policy)

        assert result.items[0].total == Decimal("0")
        assert not result.is_empty

    def test_first_non_empty_description_wins(self, policy):
        orders = [
            _order("a", [item("X1", 1, 10, description="")]),
            _order("b", [item("X1", 1, 10, description="Cotton shirt")]),
            _order("c", [item("X1", 1, 10, description="Other text")]),
        ]

        result = aggregate_line_items(orders, policy)

        assert result.items[0].description == "Cotton shirt"
        assert result.items[0].quantity == 3

    def test_all_invalid_is_empty(self, policy):
        result = aggregate_line_items([_order("a", [item("X1", 0, 10)])], policy)

        assert result.is_empty
        assert result.total == Decimal("0")

    def test_aggregation_is_order_independent(self, policy):
        a = _order("a", [item("X1", 2, 100)])
        b = _order("b", [item("X1", 1, 100), item("Y2", 1, 50)])

        forward = aggregate_line_items([a, b], policy)
        backward = aggregate_line_items([b, a], policy)

        as_set = lambda r: {(i.item_code, i.quantity, i.unit_price) for i in r.items}
        assert as_set(forward) == as_set(backward)


class TestCurrencyConversion:
    """Foreign-priced items"""

    def test_usd_items_converted_before_keying(self, policy):
        orders = [
            _order("a", [item("X1", 1, 2, currency="USD")]),
            _order("b", [item("X1", 1, 600)]),
        ]

        result = aggregate_line_items(orders, policy, exchange_rate=Decimal("300"))

        assert len(result.items) == 1
        assert result.items[0].quantity == 2
        assert result.items[0].unit_price == Decimal("600")

    def test_dollar_symbol_and_lowercase_codes_are_foreign(self, policy):
        orders = [_order("a", [item("X1", 1, 1, currency="$"), item("X2", 1, 1, currency="usd")])]

        assert requires_exchange_rate(orders, policy)

    def test_missing_rate_with_foreign_item_fails(self, policy):
        orders = [_order("a", [item("X1", 1, 2, currency="USD")])]

        with pytest.raises(MissingExchangeRateError):
            aggregate_line_items(orders, policy)

    def test_invalid_foreign_item_does_not_require_rate(self, policy):
        orders = [_order("a", [item("X1", 0, 2, currency="USD"), item("X2", 1, 5)])]

        result = aggregate_line_items(orders, policy)

        assert [r.item_code for r in result.items] == ["X2"]

    def test_default_currency_can_be_foreign(self):
        policy = CurrencyPolicy(default_currency="USD")
        orders = [_order("a", [item("X1", 1, 2)])]

        result = aggregate_line_items(orders, policy, exchange_rate=Decimal("10"))

        assert result.items[0].unit_price == Decimal("20")
