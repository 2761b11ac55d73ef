from __future__ import annotations

from datetime import date
from pathlib import Path
import sys

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from billing.core.settings import load_settings
from billing.data.db import create_db_and_tables
from billing.data.repo import create_invoice, get_invoice, list_invoices


def main() -> None:
    create_db_and_tables()
    settings = load_settings()
    row = create_invoice({
        'invoice_date': date.today().isoformat(),
        'customer_name': 'Test User',
        'customer_address': 'Somewhere',
        'customer_gst': '29AAAAA0000A1Z5',
        'items': [
            {'product_name': 'Widget', 'hsn_sac': '8471', 'quantity': 2, 'unit_price': 10, 'igst_rate': 18},
            {'product_name': 'Service', 'hsn_sac': '9983', 'quantity': 1, 'unit_price': 5, 'cgst_rate': 9, 'sgst_rate': 9},
        ],
    }, settings)
    print("Invoice:", row.id, row.invoice_number, row.total)
    inv = get_invoice(row.id)  # type: ignore[arg-type]
    print("Items:", [(it.product_name, it.igst_rate) for it in inv.items] if inv else None)
    print("Invoices count:", len(list_invoices()))


if __name__ == "__main__":
    main()
