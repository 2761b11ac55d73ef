from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional
import logging

from sqlmodel import Session, select
from sqlalchemy import delete, func

from billing.core.errors import ValidationError
from billing.core.invoice import Invoice, LineItem
from billing.core.numbering import next_invoice_number
from billing.core.settings import Settings
from billing.core.tax import normalize_items
from billing.core.totals import calculate_totals, line_amounts
from billing.data.db import get_session, session_scope
from billing.data.models import InvoiceItemRow, InvoiceRow, Party, Product

logger = logging.getLogger(__name__)


def _prepare(data: Mapping[str, Any], settings: Settings) -> Invoice:
	"""Parse request data, normalize GST fields to the customer's regime and compute totals."""
	if not str(data.get("customer_name") or "").strip():
		raise ValidationError("Missing customer_name")
	if not data.get("items"):
		raise ValidationError("Invoice needs at least one item")
	parsed = Invoice.from_dict(data)
	items = normalize_items(parsed.items, parsed.customer_gst, settings.home_state_prefix)
	totals = calculate_totals(items)
	return Invoice(
		invoice_number=parsed.invoice_number,
		invoice_date=parsed.invoice_date,
		customer_name=parsed.customer_name,
		customer_address=parsed.customer_address,
		customer_gst=parsed.customer_gst,
		items=tuple(items),
		subtotal=float(totals.subtotal),
		total_tax=float(totals.total_tax),
		grand_total=float(totals.grand_total),
	)


def _add_items(s: Session, invoice_id: int, items: Iterable[LineItem]) -> None:
	for it in items:
		s.add(InvoiceItemRow(
			invoice_id=invoice_id,
			product_name=it.product_name,
			hsn_sac=it.hsn_sac,
			description=it.description,
			quantity=it.quantity,
			unit_price=it.unit_price,
			cgst_rate=it.cgst_rate or 0.0,
			sgst_rate=it.sgst_rate or 0.0,
			igst_rate=it.igst_rate or 0.0,
			line_total=float(line_amounts(it).total),
		))


def _remember_party_and_products(s: Session, inv: Invoice) -> None:
	"""Upsert the HSN/SAC code of each product and the customer's details keyed by GSTIN."""
	for it in inv.items:
		if it.product_name and it.hsn_sac:
			s.merge(Product(product_name=it.product_name, hsn_sac=it.hsn_sac))
	if inv.customer_gst:
		s.merge(Party(gst=inv.customer_gst, name=inv.customer_name, address=inv.customer_address))


def create_invoice(data: Mapping[str, Any], settings: Optional[Settings] = None) -> InvoiceRow:
	"""
	Create an invoice and its items.

	data structure (the billing API's JSON shape):
	  {
		'invoice_number': str | None,  # generated from the sequence when absent
		'invoice_date': 'YYYY-MM-DD' | None,  # defaults to today
		'customer_name': str,  # required
		'customer_address': str, 'customer_gst': str,
		'items': [
		   {'product_name': str, 'description': str, 'hsn_sac': str,
		    'quantity': float, 'unit_price': float,
		    'cgst_rate': float, 'sgst_rate': float, 'igst_rate': float}, ...
		]  # required, non-empty
	  }
	GST fields are normalized to the customer's regime and totals are computed.
	"""
	settings = settings or Settings()
	inv = _prepare(data, settings)

	with session_scope() as s:
		number = inv.invoice_number or next_invoice_number(s, settings.invoice_prefix, date.today())
		dup = s.exec(select(InvoiceRow).where(InvoiceRow.invoice_number == number)).first()
		if dup:
			raise ValidationError(f"Invoice number already exists: {number}")

		row = InvoiceRow(
			invoice_number=number,
			invoice_date=inv.invoice_date,
			customer_name=inv.customer_name,
			customer_address=inv.customer_address,
			customer_gst=inv.customer_gst,
			subtotal=inv.subtotal or 0.0,
			total_gst=inv.total_tax or 0.0,
			total=inv.grand_total or 0.0,
			created_at=datetime.now(timezone.utc).isoformat(),
		)
		s.add(row)
		s.flush()
		s.refresh(row)
		_add_items(s, row.id, inv.items)  # type: ignore[arg-type]
		_remember_party_and_products(s, inv)

	logger.info("Created invoice %s (%s items)", row.invoice_number, len(inv.items))
	# After commit, the returned instance is detached but not expired (expire_on_commit=False)
	return row


def update_invoice(invoice_id: int, data: Mapping[str, Any], settings: Optional[Settings] = None) -> InvoiceRow:
	"""Replace an invoice's customer details and items; its number is kept."""
	settings = settings or Settings()
	with session_scope() as s:
		row = s.get(InvoiceRow, invoice_id)
		if not row:
			raise LookupError(f"Invoice not found: {invoice_id}")
		inv = _prepare({**data, "invoice_number": row.invoice_number}, settings)

		row.invoice_date = inv.invoice_date
		row.customer_name = inv.customer_name
		row.customer_address = inv.customer_address
		row.customer_gst = inv.customer_gst
		row.subtotal = inv.subtotal or 0.0
		row.total_gst = inv.total_tax or 0.0
		row.total = inv.grand_total or 0.0
		s.add(row)

		s.exec(delete(InvoiceItemRow).where(InvoiceItemRow.invoice_id == invoice_id))
		_add_items(s, invoice_id, inv.items)
		_remember_party_and_products(s, inv)
		s.flush()
		s.refresh(row)

	logger.info("Updated invoice %s", row.invoice_number)
	return row


def _to_invoice(row: InvoiceRow, items: Iterable[InvoiceItemRow]) -> Invoice:
	return Invoice(
		invoice_number=row.invoice_number,
		invoice_date=row.invoice_date,
		customer_name=row.customer_name,
		customer_address=row.customer_address or "",
		customer_gst=row.customer_gst or "",
		items=tuple(
			LineItem(
				product_name=it.product_name,
				description=it.description or "",
				hsn_sac=it.hsn_sac or "",
				quantity=float(it.quantity or 0.0),
				unit_price=float(it.unit_price or 0.0),
				cgst_rate=float(it.cgst_rate or 0.0),
				sgst_rate=float(it.sgst_rate or 0.0),
				igst_rate=float(it.igst_rate or 0.0),
				line_total=float(it.line_total or 0.0),
			)
			for it in items
		),
		subtotal=float(row.subtotal),
		total_tax=float(row.total_gst),
		grand_total=float(row.total),
	)


def get_invoice(invoice_id: int) -> Optional[Invoice]:
	"""Fetch an invoice with its items, ready for rendering. None if not found."""
	with get_session() as s:
		row = s.get(InvoiceRow, invoice_id)
		if not row:
			return None
		items = s.exec(
			select(InvoiceItemRow).where(InvoiceItemRow.invoice_id == invoice_id).order_by(InvoiceItemRow.id.asc())
		).all()
		return _to_invoice(row, items)


def list_invoices(query: str = "", limit: Optional[int] = None) -> List[Dict[str, Any]]:
	"""List invoices newest first as plain dicts.

	Applies case-insensitive filtering on invoice number and customer name when query provided.
	"""
	q = (query or "").strip().lower()
	with get_session() as s:
		stmt = select(InvoiceRow).order_by(InvoiceRow.invoice_date.desc(), InvoiceRow.id.desc())
		if q:
			like = f"%{q}%"
			stmt = stmt.where(
				(func.lower(InvoiceRow.invoice_number).like(like))
				| (func.lower(InvoiceRow.customer_name).like(like))
			)
		if isinstance(limit, int) and limit > 0:
			stmt = stmt.limit(limit)
		rows = s.exec(stmt).all()
		return [
			{
				"id": r.id,
				"invoice_number": r.invoice_number,
				"invoice_date": r.invoice_date,
				"customer_name": r.customer_name,
				"customer_gst": r.customer_gst,
				"subtotal": float(r.subtotal or 0.0),
				"total_gst": float(r.total_gst or 0.0),
				"total": float(r.total or 0.0),
				"file_path": r.file_path,
			}
			for r in rows
		]


def set_file_path(invoice_id: int, path: str) -> None:
	with session_scope() as s:
		row = s.get(InvoiceRow, invoice_id)
		if not row:
			raise LookupError(f"Invoice not found: {invoice_id}")
		row.file_path = str(path)
		s.add(row)


def get_party(gst: str) -> Optional[Party]:
	with get_session() as s:
		return s.get(Party, gst)


def get_product(product_name: str) -> Optional[Product]:
	with get_session() as s:
		return s.get(Product, product_name)


def delete_invoice(invoice_id: int) -> int:
	"""Delete a single invoice and all of its items. Returns 1 if deleted, 0 if not found."""
	with session_scope() as s:
		row = s.get(InvoiceRow, invoice_id)
		if not row:
			return 0
		# Remove dependent items first for compatibility across SQLite versions
		s.exec(delete(InvoiceItemRow).where(InvoiceItemRow.invoice_id == invoice_id))
		s.delete(row)
		s.flush()
		return 1


def delete_all_invoices() -> int:
	"""Remove every invoice and item; the number sequence is left untouched. Returns invoices removed."""
	with session_scope() as s:
		count = s.exec(select(func.count(InvoiceRow.id))).one()
		s.exec(delete(InvoiceItemRow))
		s.exec(delete(InvoiceRow))
	logger.info("Deleted %s invoices", count)
	return int(count)
