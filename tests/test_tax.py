from __future__ import annotations

import pytest

from billing.core.errors import ValidationError
from billing.core.invoice import Invoice, LineItem
from billing.core.tax import TaxRegime, detect_regime, normalize_invoice, normalize_items, regime_for_tax_id


def _item(**rates) -> LineItem:
    return LineItem(product_name="Widget", quantity=1, unit_price=100, **rates)


def test_regime_for_tax_id() -> None:
    assert regime_for_tax_id("27ABCDE1234F1Z5") is TaxRegime.SPLIT
    assert regime_for_tax_id(" 27abcde1234f1z5") is TaxRegime.SPLIT
    assert regime_for_tax_id("29ABCDE1234F1Z5") is TaxRegime.UNIFIED
    assert regime_for_tax_id("") is TaxRegime.UNIFIED
    assert regime_for_tax_id(None) is TaxRegime.UNIFIED
    assert regime_for_tax_id("29ABCDE1234F1Z5", home_prefix="29") is TaxRegime.SPLIT


def test_same_state_splits_igst() -> None:
    [it] = normalize_items([_item(igst_rate=18)], "27ABCDE1234F1Z5")
    assert (it.cgst_rate, it.sgst_rate, it.igst_rate) == (9, 9, 0)


def test_same_state_keeps_given_split_rates() -> None:
    [it] = normalize_items([_item(cgst_rate=6, igst_rate=18)], "27ABCDE1234F1Z5")
    assert (it.cgst_rate, it.sgst_rate, it.igst_rate) == (6, 9, 0)


def test_other_state_sums_into_igst() -> None:
    [it] = normalize_items([_item(cgst_rate=9, sgst_rate=9)], "29ABCDE1234F1Z5")
    assert (it.cgst_rate, it.sgst_rate, it.igst_rate) == (0, 0, 18)


def test_missing_rates_become_zero() -> None:
    [split] = normalize_items([_item()], "27X")
    [unified] = normalize_items([_item()], "")
    assert split.tax_rate == 0
    assert unified.igst_rate == 0


def test_normalized_tax_rate_is_preserved() -> None:
    items = [_item(igst_rate=18), _item(cgst_rate=2.5, sgst_rate=2.5)]
    for tax_id in ("27ABCDE1234F1Z5", "07ABCDE1234F1Z5"):
        out = normalize_items(items, tax_id)
        assert [it.tax_rate for it in out] == [18, 5]


def test_detect_regime() -> None:
    assert detect_regime([_item(cgst_rate=9, sgst_rate=9)]) is TaxRegime.SPLIT
    assert detect_regime([_item(igst_rate=18)]) is TaxRegime.UNIFIED
    assert detect_regime([_item()], fallback=TaxRegime.SPLIT) is TaxRegime.SPLIT


def test_detect_regime_rejects_mixed_items() -> None:
    with pytest.raises(ValidationError):
        detect_regime([_item(cgst_rate=9, sgst_rate=9), _item(igst_rate=18)])
    with pytest.raises(ValidationError):
        detect_regime([_item(cgst_rate=9, igst_rate=18)])


def test_stored_zero_rates_are_rederived_on_regime_change() -> None:
    stored_unified = _item(cgst_rate=0.0, sgst_rate=0.0, igst_rate=18.0)
    [split] = normalize_items([stored_unified], "27ABCDE1234F1Z5")
    assert (split.cgst_rate, split.sgst_rate, split.igst_rate) == (9, 9, 0)

    stored_split = _item(cgst_rate=9.0, sgst_rate=9.0, igst_rate=0.0)
    [unified] = normalize_items([stored_split], "29ABCDE1234F1Z5")
    assert (unified.cgst_rate, unified.sgst_rate, unified.igst_rate) == (0, 0, 18)


def test_normalize_invoice_uses_customer_gstin() -> None:
    inv = Invoice("INV-1", "2025-10-05", "Acme", customer_gst="27ABCDE1234F1Z5", items=(_item(igst_rate=18),))
    [it] = normalize_invoice(inv).items
    assert (it.cgst_rate, it.sgst_rate, it.igst_rate) == (9, 9, 0)
