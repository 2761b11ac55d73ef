from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, Mapping, Optional, Tuple

from billing.core.errors import ValidationError


def _number(data: Mapping[str, Any], key: str, *, required: bool = False) -> Optional[float]:
	"""Read a non-negative number; blank or missing values are None unless required."""
	raw = data.get(key)
	if raw is None or (isinstance(raw, str) and not raw.strip()):
		if required:
			raise ValidationError(f"Missing required item field: {key}")
		return None
	try:
		value = float(raw)
	except (TypeError, ValueError):
		raise ValidationError(f"Item field {key} must be a number, got {raw!r}") from None
	if value < 0:
		raise ValidationError(f"Item field {key} must not be negative ({value})")
	return value


def _text(data: Mapping[str, Any], key: str) -> str:
	raw = data.get(key)
	return "" if raw is None else str(raw).strip()


@dataclass(frozen=True)
class LineItem:
	product_name: str
	quantity: float
	unit_price: float
	description: str = ""
	hsn_sac: str = ""
	# None means the rate was not supplied, which the tax normalizer treats differently from 0
	cgst_rate: Optional[float] = None
	sgst_rate: Optional[float] = None
	igst_rate: Optional[float] = None
	line_total: Optional[float] = None

	@classmethod
	def from_dict(cls, data: Mapping[str, Any]) -> "LineItem":
		name = _text(data, "product_name")
		if not name:
			raise ValidationError("Missing required item field: product_name")
		return cls(
			product_name=name,
			description=_text(data, "description"),
			hsn_sac=_text(data, "hsn_sac"),
			quantity=_number(data, "quantity", required=True),  # type: ignore[arg-type]
			unit_price=_number(data, "unit_price", required=True),  # type: ignore[arg-type]
			cgst_rate=_number(data, "cgst_rate"),
			sgst_rate=_number(data, "sgst_rate"),
			igst_rate=_number(data, "igst_rate"),
			line_total=_number(data, "line_total"),
		)

	@property
	def tax_rate(self) -> float:
		"""Sum of the populated GST rate fields, in percent."""
		return sum(r or 0.0 for r in (self.cgst_rate, self.sgst_rate, self.igst_rate))

	@property
	def label(self) -> str:
		"""Product name with the optional description appended."""
		if self.description:
			return f"{self.product_name} - {self.description}"
		return self.product_name

	def to_dict(self) -> Dict[str, Any]:
		return {
			"product_name": self.product_name,
			"description": self.description,
			"hsn_sac": self.hsn_sac,
			"quantity": self.quantity,
			"unit_price": self.unit_price,
			"cgst_rate": self.cgst_rate or 0.0,
			"sgst_rate": self.sgst_rate or 0.0,
			"igst_rate": self.igst_rate or 0.0,
			"line_total": self.line_total,
		}


@dataclass(frozen=True)
class Invoice:
	invoice_number: str
	invoice_date: str
	customer_name: str
	customer_address: str = ""
	customer_gst: str = ""
	items: Tuple[LineItem, ...] = field(default_factory=tuple)
	subtotal: Optional[float] = None
	total_tax: Optional[float] = None
	grand_total: Optional[float] = None

	@classmethod
	def from_dict(cls, data: Mapping[str, Any]) -> "Invoice":
		"""Build an invoice from the JSON shape used by the billing API.

		`total_gst` and `total` are accepted as aliases of total_tax and grand_total.
		A missing invoice date defaults to today.
		"""
		inv_date = _text(data, "invoice_date") or date.today().isoformat()
		try:
			date.fromisoformat(inv_date)
		except ValueError:
			raise ValidationError(f"invoice_date must be an ISO date (YYYY-MM-DD), got {inv_date!r}") from None

		raw_items = data.get("items") or []
		if not isinstance(raw_items, (list, tuple)):
			raise ValidationError("items must be a list")
		items = tuple(it if isinstance(it, LineItem) else LineItem.from_dict(it) for it in raw_items)

		def _agg(*keys: str) -> Optional[float]:
			for k in keys:
				if data.get(k) is not None:
					return _number(data, k)
			return None

		return cls(
			invoice_number=_text(data, "invoice_number"),
			invoice_date=inv_date,
			customer_name=_text(data, "customer_name"),
			customer_address=_text(data, "customer_address"),
			customer_gst=_text(data, "customer_gst"),
			items=items,
			subtotal=_agg("subtotal"),
			total_tax=_agg("total_tax", "total_gst"),
			grand_total=_agg("grand_total", "total"),
		)

	def to_dict(self) -> Dict[str, Any]:
		return {
			"invoice_number": self.invoice_number,
			"invoice_date": self.invoice_date,
			"customer_name": self.customer_name,
			"customer_address": self.customer_address,
			"customer_gst": self.customer_gst,
			"items": [it.to_dict() for it in self.items],
			"subtotal": self.subtotal,
			"total_gst": self.total_tax,
			"total": self.grand_total,
		}

	def has_totals(self) -> bool:
		return None not in (self.subtotal, self.total_tax, self.grand_total)
