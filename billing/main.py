from __future__ import annotations

# Allow running this file directly (python billing/main.py) by ensuring the project root is on sys.path
import os
import sys
if __package__ in (None, ""):
    sys.path.append(os.path.dirname(os.path.dirname(__file__)))

import argparse
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from billing.core.currency import fmt_inr
from billing.core.errors import BillingError
from billing.core.invoice import Invoice
from billing.core.settings import Settings, load_settings
from billing.core.tax import normalize_invoice
from billing.data.db import create_db_and_tables
from billing.data.repo import create_invoice, get_invoice, list_invoices, set_file_path, update_invoice
from billing.pdf.layout import LayoutOptions
from billing.pdf.pdf_draw import generate_and_save_pdf, layout_and_render

logger = logging.getLogger(__name__)


def _read_json(path: str) -> Dict[str, Any]:
    with Path(path).open("r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise BillingError(f"{path}: expected a JSON object")
    return data


def save_and_render(invoice_id: int, settings: Settings) -> Path:
    """Render a stored invoice into the storage tree and remember where it went."""
    invoice = get_invoice(invoice_id)
    if invoice is None:
        raise LookupError(f"Invoice not found: {invoice_id}")
    out = generate_and_save_pdf(
        invoice,
        settings.company_profile(),
        settings.output_root(),
        options=LayoutOptions.from_settings(settings),
    )
    set_file_path(invoice_id, str(out))
    return out


def _cmd_render(args: argparse.Namespace, settings: Settings) -> int:
    # same GST normalization the store applies when an invoice is saved
    invoice = normalize_invoice(Invoice.from_dict(_read_json(args.invoice)), settings.home_state_prefix)
    options = LayoutOptions.from_settings(settings)
    if args.output:
        out = layout_and_render(invoice, settings.company_profile(), args.output, options=options)
    else:
        out = generate_and_save_pdf(invoice, settings.company_profile(), settings.output_root(), options=options)
    print(out)
    return 0


def _cmd_create(args: argparse.Namespace, settings: Settings) -> int:
    create_db_and_tables()
    row = create_invoice(_read_json(args.invoice), settings)
    out = save_and_render(row.id, settings)  # type: ignore[arg-type]
    print(f"{row.id}\t{row.invoice_number}\t{out}")
    return 0


def _cmd_update(args: argparse.Namespace, settings: Settings) -> int:
    create_db_and_tables()
    row = update_invoice(args.id, _read_json(args.invoice), settings)
    out = save_and_render(args.id, settings)
    print(f"{row.id}\t{row.invoice_number}\t{out}")
    return 0


def _cmd_show(args: argparse.Namespace, settings: Settings) -> int:
    create_db_and_tables()
    invoice = get_invoice(args.id)
    if invoice is None:
        logger.error("Invoice not found: %s", args.id)
        return 1
    print(json.dumps(invoice.to_dict(), indent=2, ensure_ascii=False))
    return 0


def _cmd_list(args: argparse.Namespace, settings: Settings) -> int:
    create_db_and_tables()
    for r in list_invoices(args.query, args.limit):
        print(f"{r['id']}\t{r['invoice_number']}\t{r['invoice_date']}\t{r['customer_name']}\t{fmt_inr(r['total'])}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="billing", description="Single-page GST tax invoices")
    p.add_argument("--settings", help="path to settings.json (default: next to the project)")
    p.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    sub = p.add_subparsers(dest="command", required=True)

    r = sub.add_parser("render", help="render an invoice JSON file to PDF")
    r.add_argument("invoice")
    r.add_argument("-o", "--output", help="output PDF path (default: the storage tree)")
    r.set_defaults(func=_cmd_render)

    c = sub.add_parser("create", help="store an invoice and render it")
    c.add_argument("invoice")
    c.set_defaults(func=_cmd_create)

    u = sub.add_parser("update", help="replace a stored invoice's details and re-render it")
    u.add_argument("id", type=int)
    u.add_argument("invoice")
    u.set_defaults(func=_cmd_update)

    s = sub.add_parser("show", help="print a stored invoice as JSON")
    s.add_argument("id", type=int)
    s.set_defaults(func=_cmd_show)

    ls = sub.add_parser("list", help="list stored invoices, newest first")
    ls.add_argument("query", nargs="?", default="")
    ls.add_argument("--limit", type=int, default=None)
    ls.set_defaults(func=_cmd_list)
    return p


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    settings = load_settings(args.settings)
    try:
        return args.func(args, settings)
    except (BillingError, LookupError, json.JSONDecodeError) as e:
        logger.error("%s", e)
        return 1
    except OSError:
        logger.exception("Command %s failed", args.command)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
