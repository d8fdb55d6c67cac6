"""Unit tests for the Invoice record"""

import pytest
from datetime import date
from decimal import Decimal
from pydantic import ValidationError

from src.domain.invoice import AggregatedLineItem, Invoice, InvoiceDefaults, InvoiceStatus


def _row(code, qty, price):
    price = Decimal(price)
    return AggregatedLineItem(
        item_code=code, description="", quantity=qty, unit_price=price, total=price * qty
    )


class TestInvoiceBuild:
    """Totals and defaults"""

    def test_build_sums_item_totals(self):
        invoice = Invoice.build(
            number=10000,
            customer_id="C",
            customer_name="Cotton Feel",
            items=[_row("X1", 3, "100"), _row("Y2", 1, "50")],
            source_order_ids=["a", "b"],
            orders_consumed=2,
            issue_date=date(2024, 11, 30),
            currency="LKR",
        )

        assert invoice.subtotal == Decimal("350")
        assert invoice.total == Decimal("350")
        assert invoice.status == InvoiceStatus.CREATED

    def test_mismatched_total_rejected(self):
        with pytest.raises(ValidationError):
            Invoice(
                number=1,
                customer_id="C",
                items=[_row("X1", 1, "10")],
                subtotal=Decimal("10"),
                total=Decimal("11"),
                issue_date=date(2024, 1, 1),
            )

    def test_row_total_must_match_quantity_times_price(self):
        with pytest.raises(ValidationError):
            AggregatedLineItem(item_code="X1", quantity=2, unit_price=Decimal("5"), total=Decimal("11"))

    def test_document_round_trip_uses_camel_case(self):
        invoice = Invoice.build(
            number=10001,
            customer_id="C",
            customer_name="",
            items=[_row("X1", 1, "10")],
            source_order_ids=["a"],
            orders_consumed=1,
            issue_date=date(2024, 1, 2),
            currency="LKR",
            source_collection="orders",
        )

        document = invoice.to_document()

        assert document["customerId"] == "C"
        assert document["issueDate"] == "2024-01-02"
        assert document["sourceOrderIds"] == ["a"]
        assert Invoice.from_document(document).total == invoice.total

    def test_amounts_are_stored_as_numbers(self):
        invoice = Invoice.build(
            number=10002,
            customer_id="C",
            customer_name="",
            items=[_row("X1", 3, "100"), _row("Y2", 1, "12.5")],
            source_order_ids=["a"],
            orders_consumed=1,
            issue_date=date(2024, 1, 2),
            currency="LKR",
        )

        document = invoice.to_document()

        assert document["total"] == 312.5
        assert document["subtotal"] == 312.5
        assert document["items"][0]["unitPrice"] == 100
        assert isinstance(document["items"][0]["total"], int)
        assert Invoice.from_document(document).total == Decimal("312.5")

    def test_default_policy(self):
        defaults = InvoiceDefaults()

        assert defaults.status == InvoiceStatus.CREATED
        assert defaults.currency == "LKR"


class TestInvoiceStatusTransitions:
    """Payment lifecycle"""

    def _invoice(self, status):
        return Invoice(
            number=1, customer_id="C", items=[], subtotal=Decimal("0"), total=Decimal("0"),
            issue_date=date(2024, 1, 1), status=status,
        )

    def test_created_can_move_to_pending_or_paid(self):
        invoice = self._invoice(InvoiceStatus.CREATED)

        assert invoice.can_transition_to(InvoiceStatus.PENDING)
        assert invoice.can_transition_to(InvoiceStatus.PAID)

    def test_paid_is_terminal(self):
        invoice = self._invoice(InvoiceStatus.PAID)

        assert not invoice.can_transition_to(InvoiceStatus.PENDING)
        assert not invoice.can_transition_to(InvoiceStatus.CREATED)
