# Overview: Line-item and document total calculator with fixed 2-place rounding.

"""
Totals calculator.

Rounding policy: every monetary output is rounded half-up to 2 decimals at
the point it is computed, and later steps consume the rounded value. The
document total is derived from the document subtotal (sum of item
quantity * unit price), NOT from the sum of item totals; item-level discount
and tax are reported per item only.

Pure functions, no database access.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from ..money import ZERO, round_money, to_decimal

HUNDRED = Decimal("100")


@dataclass(frozen=True)
class LineInput:
    quantity: int
    unit_price: Decimal
    discount_percentage: Decimal = ZERO
    tax_percentage: Decimal = ZERO


@dataclass(frozen=True)
class LineTotals:
    quantity: int
    unit_price: Decimal
    discount_percentage: Decimal
    tax_percentage: Decimal
    subtotal: Decimal
    discount_amount: Decimal
    taxable_amount: Decimal
    tax_amount: Decimal
    total: Decimal


@dataclass(frozen=True)
class DocumentTotals:
    lines: tuple[LineTotals, ...]
    subtotal: Decimal
    discount_percentage: Decimal
    discount_amount: Decimal
    taxable_amount: Decimal
    tax_percentage: Decimal
    tax_amount: Decimal
    total_amount: Decimal


def compute_line(line: LineInput) -> LineTotals:
    unit_price = round_money(line.unit_price)
    discount_pct = to_decimal(line.discount_percentage or ZERO)
    tax_pct = to_decimal(line.tax_percentage or ZERO)

    subtotal = round_money(line.quantity * unit_price)
    discount = round_money(subtotal * discount_pct / HUNDRED)
    taxable = round_money(subtotal - discount)
    tax = round_money(taxable * tax_pct / HUNDRED)
    total = round_money(taxable + tax)

    return LineTotals(
        quantity=line.quantity,
        unit_price=unit_price,
        discount_percentage=discount_pct,
        tax_percentage=tax_pct,
        subtotal=subtotal,
        discount_amount=discount,
        taxable_amount=taxable,
        tax_amount=tax,
        total=total,
    )


def compute_document(
    lines: Iterable[LineInput],
    *,
    discount_percentage: Decimal = ZERO,
    tax_percentage: Decimal = ZERO,
) -> DocumentTotals:
    """
    Compute item and document totals.

    Raises ValueError for an empty line list; sale creation requires at
    least one item and callers surface that as a validation error first.
    """
    computed = tuple(compute_line(line) for line in lines)
    if not computed:
        raise ValueError("at least one line is required")

    discount_pct = to_decimal(discount_percentage or ZERO)
    tax_pct = to_decimal(tax_percentage or ZERO)

    subtotal = round_money(sum((line.subtotal for line in computed), ZERO))
    discount = round_money(subtotal * discount_pct / HUNDRED)
    taxable = round_money(subtotal - discount)
    tax = round_money(taxable * tax_pct / HUNDRED)
    total = round_money(taxable + tax)

    return DocumentTotals(
        lines=computed,
        subtotal=subtotal,
        discount_percentage=discount_pct,
        discount_amount=discount,
        taxable_amount=taxable,
        tax_percentage=tax_pct,
        tax_amount=tax,
        total_amount=total,
    )


def purchase_total(lines: Iterable[tuple[int, Decimal]]) -> tuple[list[Decimal], Decimal]:
    """(quantity, purchase_price) pairs -> per-line subtotals and their sum."""
    subtotals = [round_money(qty * round_money(price)) for qty, price in lines]
    return subtotals, round_money(sum(subtotals, ZERO))


def balance(total: Decimal, paid: Decimal) -> Decimal:
    return round_money(to_decimal(total) - to_decimal(paid))
