from __future__ import annotations

from datetime import date

import pytest

from billing.core.errors import ValidationError
from billing.core.invoice import Invoice, LineItem


def test_from_dict_accepts_api_aliases(invoice_data) -> None:
    inv = Invoice.from_dict({**invoice_data, "subtotal": 200, "total_gst": 36, "total": 236})
    assert inv.total_tax == 36
    assert inv.grand_total == 236
    assert inv.has_totals()
    assert inv.items[0].igst_rate == 18
    assert inv.items[0].cgst_rate is None


def test_from_dict_defaults_date_to_today() -> None:
    inv = Invoice.from_dict({"customer_name": "Acme", "items": []})
    assert inv.invoice_date == date.today().isoformat()
    assert not inv.has_totals()


def test_from_dict_rejects_bad_date(invoice_data) -> None:
    with pytest.raises(ValidationError):
        Invoice.from_dict({**invoice_data, "invoice_date": "05-10-2025"})


@pytest.mark.parametrize(
    "item",
    [
        {"quantity": 1, "unit_price": 10},
        {"product_name": "Widget", "unit_price": 10},
        {"product_name": "Widget", "quantity": "two", "unit_price": 10},
        {"product_name": "Widget", "quantity": 1, "unit_price": -10},
    ],
)
def test_item_validation(item) -> None:
    with pytest.raises(ValidationError):
        LineItem.from_dict(item)


def test_label_and_to_dict() -> None:
    it = LineItem.from_dict({"product_name": " Widget ", "description": "blue", "quantity": "2", "unit_price": 5})
    assert it.label == "Widget - blue"
    assert it.to_dict()["quantity"] == 2.0
    assert LineItem("Widget", 1, 1).label == "Widget"
