from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Iterator

import pytest

from billing.data import db
from billing.pdf.measure import TextMeasure


class FixedMeasure(TextMeasure):
    """Every character is half the font size wide."""

    def width(self, text: str, font: str, size: float) -> float:
        return len(text or "") * size * 0.5


@pytest.fixture
def fixed_measure() -> FixedMeasure:
    return FixedMeasure()


@pytest.fixture
def invoice_data() -> Dict[str, Any]:
    return {
        "invoice_number": "INV-202510-0042",
        "invoice_date": "2025-10-05",
        "customer_name": "Acme Traders",
        "customer_address": "12 Market Road\nNagpur",
        "customer_gst": "29ABCDE1234F1Z5",
        "items": [
            {"product_name": "Widget", "hsn_sac": "8471", "quantity": 2, "unit_price": 100, "igst_rate": 18},
        ],
    }


@pytest.fixture
def temp_db(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterator[Path]:
    # monkeypatch restores the previous engine singleton afterwards
    monkeypatch.setattr(db, "_ENGINE", None)
    path = tmp_path / "billing.db"
    engine = db.configure_engine(f"sqlite:///{path.as_posix()}")
    db.create_db_and_tables()
    yield path
    engine.dispose()
