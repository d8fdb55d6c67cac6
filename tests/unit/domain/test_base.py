"""Unit tests for shared record helpers"""

import pytest
from decimal import Decimal

from src.domain.base import money_to_json


class TestMoneyToJson:
    """Stored form of amounts"""

    @pytest.mark.parametrize(
        "amount, expected",
        [
            (Decimal("350"), 350),
            (Decimal("350.00"), 350),
            (Decimal("12.5"), 12.5),
            (Decimal("0.1"), 0.1),
        ],
    )
    def test_amounts_become_numbers(self, amount, expected):
        stored = money_to_json(amount)

        assert stored == expected
        assert type(stored) is type(expected)

    def test_amount_beyond_float_precision_kept_exact(self):
        amount = Decimal("3701.123456789012345678")

        assert money_to_json(amount) == "3701.123456789012345678"
