from __future__ import annotations

from pathlib import Path

from billing.core.invoice import Invoice
from billing.core.paths import SAFE_NAME_MAX, invoice_output_path, safe_name


def test_safe_name_replaces_unsafe_characters() -> None:
    assert safe_name('a/b\\c:d?e<f>g|h"i') == "a_b_c_d_e_f_g_h_i"
    assert safe_name("Acme Traders") == "Acme Traders"


def test_safe_name_blank_and_long() -> None:
    assert safe_name("") == "unknown"
    assert safe_name(None) == "unknown"
    assert len(safe_name("x" * 80)) == SAFE_NAME_MAX


def test_invoice_output_path(tmp_path: Path) -> None:
    inv = Invoice("INV/2025:7", "2025-10-05", "Acme <North>")
    assert invoice_output_path(inv, tmp_path) == tmp_path / "2025-10-05" / "Acme _North_" / "INV_2025_7.pdf"
    unnamed = Invoice("INV-1", "2025-10-05", "")
    assert invoice_output_path(unnamed, tmp_path).parent.name == "customer"
