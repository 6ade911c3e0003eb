"""
Totals calculator tests.

Verifies:
- Per-item discount and tax amounts
- Document total derives from the document subtotal, not from item totals
- Half-up rounding to 2 places at every step
"""

from decimal import Decimal

import pytest

from stockflow.money import money_float, round_money, to_decimal
from stockflow.services.pricing_service import (
    LineInput,
    balance,
    compute_document,
    compute_line,
    purchase_total,
)


class TestLineTotals:

    def test_discount_then_tax(self):
        line = compute_line(LineInput(
            quantity=2,
            unit_price=Decimal("100"),
            discount_percentage=Decimal("10"),
            tax_percentage=Decimal("5"),
        ))

        assert line.subtotal == Decimal("200.00")
        assert line.discount_amount == Decimal("20.00")
        assert line.taxable_amount == Decimal("180.00")
        assert line.tax_amount == Decimal("9.00")
        assert line.total == Decimal("189.00")

    def test_rounds_half_up(self):
        line = compute_line(LineInput(quantity=1, unit_price=Decimal("10.05"), tax_percentage=Decimal("5")))
        # 10.05 * 5% = 0.5025 -> 0.50
        assert line.tax_amount == Decimal("0.50")

        line = compute_line(LineInput(quantity=1, unit_price=Decimal("0.10"), tax_percentage=Decimal("25")))
        # 0.025 -> 0.03
        assert line.tax_amount == Decimal("0.03")


class TestDocumentTotals:

    def test_item_level_adjustments_do_not_flow_into_document_total(self):
        totals = compute_document([
            LineInput(
                quantity=2,
                unit_price=Decimal("100"),
                discount_percentage=Decimal("10"),
                tax_percentage=Decimal("5"),
            )
        ])

        assert totals.lines[0].total == Decimal("189.00")
        assert totals.subtotal == Decimal("200.00")
        assert totals.discount_amount == Decimal("0.00")
        assert totals.tax_amount == Decimal("0.00")
        assert totals.total_amount == Decimal("200.00")

    def test_document_discount_and_tax(self):
        totals = compute_document(
            [
                LineInput(quantity=3, unit_price=Decimal("33.33")),
                LineInput(quantity=1, unit_price=Decimal("0.01")),
            ],
            discount_percentage=Decimal("10"),
            tax_percentage=Decimal("18"),
        )

        assert totals.subtotal == Decimal("100.00")
        assert totals.discount_amount == Decimal("10.00")
        assert totals.taxable_amount == Decimal("90.00")
        assert totals.tax_amount == Decimal("16.20")
        assert totals.total_amount == Decimal("106.20")

    def test_empty_lines_rejected(self):
        with pytest.raises(ValueError):
            compute_document([])


class TestPurchaseTotals:

    def test_subtotals_and_sum(self):
        subtotals, total = purchase_total([(3, Decimal("12.50")), (2, Decimal("7.125"))])
        assert subtotals == [Decimal("37.50"), Decimal("14.26")]
        assert total == Decimal("51.76")

    def test_balance(self):
        assert balance(Decimal("189.00"), Decimal("100")) == Decimal("89.00")
        assert balance(Decimal("50"), Decimal("50")) == Decimal("0.00")


class TestMoneyHelpers:

    def test_float_input_uses_shortest_repr(self):
        assert to_decimal(0.1) == Decimal("0.1")
        assert round_money(2.675) == Decimal("2.68")

    def test_money_float(self):
        assert money_float(Decimal("189")) == 189.0
        assert money_float(None) is None
