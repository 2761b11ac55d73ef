from typing import Optional

from sqlmodel import Field, SQLModel


class InvoiceRow(SQLModel, table=True):
	__tablename__ = "invoices"

	id: Optional[int] = Field(default=None, primary_key=True)
	invoice_number: str = Field(index=True, sa_column_kwargs={"unique": True})
	# ISO date text (YYYY-MM-DD)
	invoice_date: str = Field(index=True)
	customer_name: str
	customer_address: str = ""
	customer_gst: str = ""
	subtotal: float = 0.0
	total_gst: float = 0.0
	total: float = 0.0
	file_path: Optional[str] = None
	created_at: str = ""


class InvoiceItemRow(SQLModel, table=True):
	__tablename__ = "invoice_items"

	id: Optional[int] = Field(default=None, primary_key=True)
	invoice_id: int = Field(foreign_key="invoices.id", index=True)
	product_name: str
	hsn_sac: str = ""
	description: str = ""
	quantity: float = 0.0
	unit_price: float = 0.0
	cgst_rate: float = 0.0
	sgst_rate: float = 0.0
	igst_rate: float = 0.0
	# quantity * unit_price plus GST, computed when the invoice is saved
	line_total: float = 0.0


class Party(SQLModel, table=True):
	"""Last known name and address for a customer GSTIN."""

	__tablename__ = "parties"

	gst: str = Field(primary_key=True)
	name: str = ""
	address: str = ""


class Product(SQLModel, table=True):
	__tablename__ = "products"

	product_name: str = Field(primary_key=True)
	hsn_sac: str = ""
