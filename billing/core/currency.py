from __future__ import annotations

from decimal import Decimal, ROUND_DOWN, ROUND_HALF_EVEN, ROUND_HALF_UP, InvalidOperation
from typing import Optional, Iterable

from num2words import num2words


def to_decimal(x: object) -> Decimal:
	"""Best-effort conversion to Decimal via str to avoid binary float artifacts."""
	try:
		return Decimal(str(x))
	except (InvalidOperation, ValueError, TypeError):
		return Decimal("0")


def round_money(x: float | Decimal) -> float:
	"""Round to 2 decimals using banker's rounding (round-half-to-even) and return float."""
	return float(round_money_dec(x))


def round_money_dec(x: float | Decimal) -> Decimal:
	"""Round to 2 decimals and return Decimal for high-precision internal math."""
	d = to_decimal(x)
	return d.quantize(Decimal("0.01"), rounding=ROUND_HALF_EVEN)


def round_major(x: float | Decimal) -> Decimal:
	"""Round to a whole currency unit, halves away from zero (the printed grand total)."""
	return to_decimal(x).quantize(Decimal("1"), rounding=ROUND_HALF_UP)


def fmt_money(x: float | Decimal, width: Optional[int] = None) -> str:
	"""
	Format monetary value with two decimals. If width is provided, return a right-aligned string.
	"""
	s = f"{round_money_dec(x):.2f}"
	return s.rjust(width) if isinstance(width, int) and width > 0 else s


def fmt_inr(x: float | Decimal) -> str:
	"""Format with two decimals and Indian digit grouping, e.g. 1,23,456.78."""
	q = round_money_dec(x)
	sign = "-" if q < 0 else ""
	whole, frac = f"{abs(q):.2f}".split(".")
	if len(whole) > 3:
		head, tail = whole[:-3], whole[-3:]
		groups: list[str] = []
		while len(head) > 2:
			groups.insert(0, head[-2:])
			head = head[:-2]
		if head:
			groups.insert(0, head)
		whole = ",".join(groups + [tail])
	return f"{sign}{whole}.{frac}"


def sum_money(values: Iterable[float | Decimal]) -> Decimal:
	"""Accumulate monetary values using Decimal and banker's rounding at the end."""
	total = Decimal("0")
	for v in values:
		total += to_decimal(v)
	return round_money_dec(total)


def amount_in_words(amount: float | Decimal, unit: str = "RUPEES", lang: str = "en_IN") -> str:
	"""Spell the whole-unit part of an amount, e.g. 236 -> 'TWO HUNDRED THIRTY SIX RUPEES ONLY'."""
	whole = int(abs(to_decimal(amount)).to_integral_value(rounding=ROUND_DOWN))
	words = num2words(whole, lang=lang)
	words = words.replace("-", " ").replace(",", " ")
	words = " ".join(w for w in words.split() if w.lower() != "and")
	return f"{words.upper()} {unit} ONLY"
