from __future__ import annotations

from decimal import Decimal

import pytest

from billing.core.errors import ValidationError
from billing.core.invoice import Invoice, LineItem
from billing.core.totals import calculate_totals, fill_totals, line_amounts, totals_of


def test_single_item_example() -> None:
    t = calculate_totals([LineItem("Widget", 2, 100, igst_rate=18)])
    assert t.subtotal == Decimal("200.00")
    assert t.total_tax == Decimal("36.00")
    assert t.grand_total == Decimal("236.00")
    assert t.rounded_total == Decimal("236")
    assert t.round_off == Decimal("0.00")


def test_round_off_to_whole_rupees() -> None:
    t = calculate_totals([LineItem("Cable", 3, 33.33, igst_rate=18)])
    assert t.subtotal == Decimal("99.99")
    assert t.total_tax == Decimal("18.00")
    assert t.grand_total == Decimal("117.99")
    assert t.rounded_total == Decimal("118")
    assert t.round_off == Decimal("0.01")


def test_grand_total_is_sum_of_rounded_parts() -> None:
    items = [
        LineItem("A", 1.5, 10.01, cgst_rate=9, sgst_rate=9),
        LineItem("B", 7, 0.33, cgst_rate=2.5, sgst_rate=2.5),
        LineItem("C", 3, 19.99),
    ]
    t = calculate_totals(items)
    assert t.grand_total == t.subtotal + t.total_tax
    assert t.subtotal == t.subtotal.quantize(Decimal("0.01"))


def test_line_amounts() -> None:
    a = line_amounts(LineItem("Widget", 2, 100, cgst_rate=9, sgst_rate=9))
    assert a.net == Decimal("200")
    assert a.tax == Decimal("36")
    assert a.total == Decimal("236.00")


def test_negative_values_rejected() -> None:
    with pytest.raises(ValidationError):
        line_amounts(LineItem("Widget", -1, 100))


def test_empty_items_total_zero() -> None:
    t = calculate_totals([])
    assert t.grand_total == Decimal("0.00")


def test_fill_totals_only_when_missing() -> None:
    inv = Invoice("INV-1", "2025-10-05", "Acme", items=(LineItem("Widget", 2, 100, igst_rate=18),))
    filled = fill_totals(inv)
    assert (filled.subtotal, filled.total_tax, filled.grand_total) == (200.0, 36.0, 236.0)
    assert filled.items[0].line_total == 236.0

    given = Invoice("INV-1", "2025-10-05", "Acme", items=inv.items, subtotal=1, total_tax=2, grand_total=3)
    assert fill_totals(given) is given
    assert totals_of(given).grand_total == Decimal("3.00")
