from __future__ import annotations

from dataclasses import dataclass, replace
from decimal import Decimal
from typing import Iterable, List

from billing.core.currency import round_major, round_money_dec, to_decimal
from billing.core.errors import ValidationError
from billing.core.invoice import Invoice, LineItem


@dataclass(frozen=True)
class LineAmounts:
	net: Decimal
	tax: Decimal
	# rounded to 2 decimals
	total: Decimal


@dataclass(frozen=True)
class Totals:
	subtotal: Decimal
	total_tax: Decimal
	grand_total: Decimal

	@property
	def rounded_total(self) -> Decimal:
		return round_major(self.grand_total)

	@property
	def round_off(self) -> Decimal:
		return round_money_dec(self.rounded_total - self.grand_total)


def line_amounts(item: LineItem) -> LineAmounts:
	if item.quantity < 0 or item.unit_price < 0:
		raise ValidationError(f"Negative quantity or unit price for {item.product_name!r}")
	net = to_decimal(item.quantity) * to_decimal(item.unit_price)
	tax = net * to_decimal(item.tax_rate) / Decimal(100)
	return LineAmounts(net=net, tax=tax, total=round_money_dec(net + tax))


def calculate_totals(items: Iterable[LineItem]) -> Totals:
	"""Aggregate subtotal, tax and grand total; grand total is the sum of the rounded parts."""
	subtotal = Decimal("0")
	tax = Decimal("0")
	for it in items:
		amounts = line_amounts(it)
		subtotal += amounts.net
		tax += amounts.tax
	subtotal = round_money_dec(subtotal)
	tax = round_money_dec(tax)
	return Totals(subtotal=subtotal, total_tax=tax, grand_total=subtotal + tax)


def totals_of(invoice: Invoice) -> Totals:
	"""Totals as carried by the invoice, computing them when any aggregate is missing."""
	if invoice.has_totals():
		return Totals(
			subtotal=round_money_dec(invoice.subtotal),  # type: ignore[arg-type]
			total_tax=round_money_dec(invoice.total_tax),  # type: ignore[arg-type]
			grand_total=round_money_dec(invoice.grand_total),  # type: ignore[arg-type]
		)
	return calculate_totals(invoice.items)


def fill_totals(invoice: Invoice) -> Invoice:
	"""Fill subtotal/tax/grand total and per-item line totals when any aggregate is absent."""
	if invoice.has_totals():
		return invoice
	totals = calculate_totals(invoice.items)
	items: List[LineItem] = [
		replace(it, line_total=float(line_amounts(it).total)) for it in invoice.items
	]
	return replace(
		invoice,
		items=tuple(items),
		subtotal=float(totals.subtotal),
		total_tax=float(totals.total_tax),
		grand_total=float(totals.grand_total),
	)
