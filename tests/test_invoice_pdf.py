from __future__ import annotations

import io
import math
from pathlib import Path

import pytest
from pypdf import PdfReader

from billing.core.errors import LayoutOverflowError, OutputError, ValidationError
from billing.core.settings import CompanyProfile
from billing.pdf.layout import LayoutOptions
from billing.pdf.pdf_draw import generate_and_save_pdf, layout_and_render


def _a4_size_points() -> tuple[float, float]:
    # ReportLab A4 in points
    return (595.2755905511812, 841.8897637795277)


@pytest.fixture
def company() -> CompanyProfile:
    return CompanyProfile(name="Sharma Electricals", address="Station Road, Pune", tax_id="27AAAAA0000A1Z5")


def _many_items(n: int) -> list[dict]:
    return [{"product_name": f"Item {i}", "quantity": 1, "unit_price": 10, "igst_rate": 18} for i in range(n)]


def test_invoice_pdf_single_a4_page(tmp_path: Path, invoice_data, company) -> None:
    out_pdf = tmp_path / "invoice.pdf"
    result = layout_and_render(invoice_data, company, out_pdf)
    assert result == out_pdf

    reader = PdfReader(str(out_pdf))
    assert len(reader.pages) == 1

    page = reader.pages[0]
    box = page.mediabox
    width = float(box.right - box.left)
    height = float(box.top - box.bottom)
    a4w, a4h = _a4_size_points()
    # Allow a small tolerance for float conversions
    assert math.isclose(width, a4w, rel_tol=0, abs_tol=1.0)
    assert math.isclose(height, a4h, rel_tol=0, abs_tol=1.0)

    text = page.extract_text() or ""
    assert "TAX INVOICE" in text
    assert "Invoice No: INV-202510-0042" in text
    assert "236.00" in text
    assert "TWO HUNDRED THIRTY SIX RUPEES ONLY" in text
    # inter-state customer: IGST column only
    assert "IGST%" in text and "CGST%" not in text


def test_render_to_stream(invoice_data, company) -> None:
    buf = io.BytesIO()
    assert layout_and_render(invoice_data, company, buf) is buf
    assert buf.getvalue().startswith(b"%PDF")
    assert len(PdfReader(io.BytesIO(buf.getvalue())).pages) == 1


def test_zero_items_fails_before_drawing(tmp_path: Path, invoice_data, company) -> None:
    out_pdf = tmp_path / "empty.pdf"
    with pytest.raises(ValidationError):
        layout_and_render({**invoice_data, "items": []}, company, out_pdf)
    assert not out_pdf.exists()


def test_many_items_still_one_page(tmp_path: Path, invoice_data, company) -> None:
    out_pdf = tmp_path / "many.pdf"
    layout_and_render({**invoice_data, "items": _many_items(60)}, company, out_pdf)
    assert len(PdfReader(str(out_pdf)).pages) == 1


def test_overflow_fail_policy_leaves_no_file(tmp_path: Path, invoice_data, company) -> None:
    out_pdf = tmp_path / "overflow.pdf"
    with pytest.raises(LayoutOverflowError):
        layout_and_render(
            {**invoice_data, "items": _many_items(60)},
            company,
            out_pdf,
            options=LayoutOptions(overflow_policy="fail"),
        )
    assert not out_pdf.exists()


def test_unopenable_output_raises_output_error(tmp_path: Path, invoice_data, company) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("a file, not a directory")
    with pytest.raises(OutputError) as exc:
        layout_and_render(invoice_data, company, blocker / "invoice.pdf")
    assert isinstance(exc.value, OSError)


def test_corrupt_logo_still_renders(tmp_path: Path, invoice_data) -> None:
    logo = tmp_path / "logo.png"
    logo.write_bytes(b"\x00\x01 definitely not an image")
    out_pdf = tmp_path / "logo.pdf"
    layout_and_render(invoice_data, CompanyProfile(name="Sharma Electricals", logo_path=str(logo)), out_pdf)
    assert len(PdfReader(str(out_pdf)).pages) == 1


def test_generate_and_save_pdf_path(tmp_path: Path, invoice_data, company) -> None:
    data = {**invoice_data, "customer_name": "Acme/Traders: North"}
    out = generate_and_save_pdf(data, company, tmp_path)
    assert out == tmp_path / "2025-10-05" / "Acme_Traders_ North" / "INV-202510-0042.pdf"
    assert out.is_file()
