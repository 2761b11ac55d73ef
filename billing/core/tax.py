from __future__ import annotations

from dataclasses import replace
from enum import Enum
from typing import Iterable, List

from billing.core.errors import ValidationError
from billing.core.invoice import Invoice, LineItem


# GSTIN state code for same-state (CGST+SGST) supplies
HOME_STATE_PREFIX = "27"


class TaxRegime(str, Enum):
	"""Which GST fields an invoice carries: CGST+SGST (same state) or IGST (inter-state)."""

	SPLIT = "CGST_SGST"
	UNIFIED = "IGST"


def regime_for_tax_id(tax_id: str | None, home_prefix: str = HOME_STATE_PREFIX) -> TaxRegime:
	if (tax_id or "").strip().upper().startswith(home_prefix):
		return TaxRegime.SPLIT
	return TaxRegime.UNIFIED


def _normalize_item(item: LineItem, regime: TaxRegime) -> LineItem:
	# 0.0 counts as absent when the other regime carries a rate (stored items hold zeros)
	if regime is TaxRegime.SPLIT:
		half = item.igst_rate / 2 if item.igst_rate else 0.0
		if not (item.cgst_rate or item.sgst_rate):
			cgst = sgst = half
		else:
			cgst = item.cgst_rate if item.cgst_rate is not None else half
			sgst = item.sgst_rate if item.sgst_rate is not None else half
		return replace(item, cgst_rate=cgst, sgst_rate=sgst, igst_rate=0.0)
	if item.igst_rate:
		igst = item.igst_rate
	else:
		igst = (item.cgst_rate or 0.0) + (item.sgst_rate or 0.0)
	return replace(item, igst_rate=igst, cgst_rate=0.0, sgst_rate=0.0)


def normalize_items(
	items: Iterable[LineItem],
	tax_id: str | None,
	home_prefix: str = HOME_STATE_PREFIX,
) -> List[LineItem]:
	"""
	Rewrite every item's GST fields for the regime implied by the customer's GSTIN.

	Missing fields of the target regime are derived from the other regime
	(IGST halved into CGST/SGST, or CGST+SGST summed into IGST); the other
	regime's fields are zeroed.
	"""
	regime = regime_for_tax_id(tax_id, home_prefix)
	return [_normalize_item(it, regime) for it in items]


def detect_regime(items: Iterable[LineItem], fallback: TaxRegime = TaxRegime.UNIFIED) -> TaxRegime:
	"""Return the single regime carried by `items`; mixing regimes is rejected."""
	found: set[TaxRegime] = set()
	for n, it in enumerate(items, 1):
		split = bool(it.cgst_rate) or bool(it.sgst_rate)
		unified = bool(it.igst_rate)
		if split and unified:
			raise ValidationError(f"Item {n} ({it.product_name}) carries both CGST/SGST and IGST rates")
		if split:
			found.add(TaxRegime.SPLIT)
		elif unified:
			found.add(TaxRegime.UNIFIED)
	if len(found) > 1:
		raise ValidationError("Invoice mixes CGST/SGST and IGST items; normalize the items first")
	return found.pop() if found else fallback


def normalize_invoice(invoice: Invoice, home_prefix: str = HOME_STATE_PREFIX) -> Invoice:
	"""Invoice with its items normalized to the regime of its customer GSTIN."""
	return replace(invoice, items=tuple(normalize_items(invoice.items, invoice.customer_gst, home_prefix)))
