from __future__ import annotations

from decimal import Decimal

from billing.core.currency import amount_in_words, fmt_inr, fmt_money, round_major, round_money, sum_money


def test_round_money_is_bankers_rounding() -> None:
    assert round_money(2.675) == 2.68
    assert round_money(0.125) == 0.12
    assert round_money(0.135) == 0.14


def test_round_major_rounds_halves_up() -> None:
    assert round_major(Decimal("235.50")) == Decimal("236")
    assert round_major(Decimal("235.49")) == Decimal("235")


def test_fmt_money_and_sum() -> None:
    assert fmt_money(5) == "5.00"
    assert fmt_money(1.5, width=8) == "    1.50"
    assert sum_money([0.1, 0.2, "0.3"]) == Decimal("0.60")


def test_fmt_inr_uses_indian_grouping() -> None:
    assert fmt_inr(999) == "999.00"
    assert fmt_inr(1000) == "1,000.00"
    assert fmt_inr(123456.78) == "1,23,456.78"
    assert fmt_inr(-1234567) == "-12,34,567.00"


def test_amount_in_words() -> None:
    assert amount_in_words(236) == "TWO HUNDRED THIRTY SIX RUPEES ONLY"
    assert amount_in_words(Decimal("1000")) == "ONE THOUSAND RUPEES ONLY"
    # fractional part is not spelled
    assert amount_in_words(1050.99) == "ONE THOUSAND FIFTY RUPEES ONLY"


def test_amount_in_words_custom_unit() -> None:
    assert amount_in_words(7, unit="DOLLARS", lang="en") == "SEVEN DOLLARS ONLY"
