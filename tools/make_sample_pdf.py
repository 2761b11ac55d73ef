from __future__ import annotations

from datetime import date as _date
from pathlib import Path
import sys

# Ensure we can import the billing package when running this script directly
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from billing.core.invoice import Invoice
from billing.core.settings import load_settings
from billing.core.tax import normalize_invoice
from billing.pdf.layout import LayoutOptions
from billing.pdf.pdf_draw import layout_and_render


def _items(n: int) -> list[dict]:
    rows = [
        {"product_name": "Copper wire", "description": "2.5 sq mm, 90 m coil", "hsn_sac": "8544", "quantity": 4, "unit_price": 1850.00},
        {"product_name": "MCB", "description": "32A double pole", "hsn_sac": "8536", "quantity": 6, "unit_price": 412.50},
        {"product_name": "LED panel", "description": "18W round, cool white", "hsn_sac": "9405", "quantity": 12, "unit_price": 365.00},
        {"product_name": "Installation", "description": "labour, per point", "hsn_sac": "9954", "quantity": 18, "unit_price": 150.00},
        {"product_name": "Conduit pipe", "description": "25 mm PVC, 3 m length", "hsn_sac": "3917", "quantity": 20, "unit_price": 96.75},
    ]
    out = []
    for i in range(n):
        r = dict(rows[i % len(rows)])
        r["igst_rate"] = 18
        out.append(r)
    return out


def main() -> None:
    # optional item count to exercise the shared row height, e.g. `make_sample_pdf.py 45`
    n = int(sys.argv[1]) if len(sys.argv) > 1 else 5
    settings = load_settings()
    data = {
        "invoice_number": "SAMPLE-0001",
        "invoice_date": _date.today().isoformat(),
        "customer_name": "Sample Customer Pvt Ltd",
        "customer_address": "Plot 12, Industrial Estate\nPune 411019",
        "customer_gst": "27ABCDE1234F1Z5",
        "items": _items(n),
    }
    # customer_gst is same-state, so IGST is split the way the store would
    inv = normalize_invoice(Invoice.from_dict(data), settings.home_state_prefix)

    out_dir = ROOT / "tmp"
    out_dir.mkdir(parents=True, exist_ok=True)
    out = out_dir / f"sample_{n}.pdf"
    layout_and_render(inv, settings.company_profile(), out, options=LayoutOptions.from_settings(settings))
    print(f"Wrote {out}")


if __name__ == "__main__":
    main()
