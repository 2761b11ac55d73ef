from __future__ import annotations

import re
import sys
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from billing.core.invoice import Invoice

PDF_SUFFIX = ".pdf"
SAFE_NAME_MAX = 50
_UNSAFE_CHARS = re.compile(r'[/\\:?<>|"]')


def is_frozen() -> bool:
    return bool(getattr(sys, "frozen", False))


def base_path() -> Path:
    """Return the base path for bundled resources (assets) depending on runtime.

    - In PyInstaller onefile, resources are extracted to sys._MEIPASS.
    - In dev, use project root.
    """
    if is_frozen():
        meipass = getattr(sys, "_MEIPASS", None)
        if meipass:
            return Path(meipass)
    return Path(__file__).resolve().parents[2]


def resource_path(rel: str | Path) -> Path:
    """Resolve a resource path (e.g., 'assets/logo.png') for current runtime."""
    return base_path() / Path(rel)


def user_writable_dir() -> Path:
    """Directory suitable for user-writable files (settings.json, the database, PDFs)."""
    if is_frozen():
        return Path(sys.executable).resolve().parent
    return Path(__file__).resolve().parents[2]


def settings_path() -> Path:
    """Location for settings.json that is readable and writable."""
    return user_writable_dir() / "settings.json"


def default_storage_root() -> Path:
    return user_writable_dir() / "storage" / "invoices"


def safe_name(s: str | None) -> str:
    """Make a customer name usable as a single path component (max 50 chars)."""
    return _UNSAFE_CHARS.sub("_", s or "unknown")[:SAFE_NAME_MAX] or "unknown"


def invoice_output_path(invoice: "Invoice", root: str | Path) -> Path:
    """<root>/<invoice date>/<customer>/<invoice number>.pdf"""
    folder = Path(root) / safe_name(invoice.invoice_date) / safe_name(invoice.customer_name or "customer")
    number = _UNSAFE_CHARS.sub("_", invoice.invoice_number or "invoice")
    return folder / f"{number}{PDF_SUFFIX}"
