from __future__ import annotations

from datetime import date

from billing.core.numbering import next_invoice_number, peek_next_invoice_number
from billing.data.db import session_scope

TODAY = date(2025, 10, 5)


def test_sequence_per_prefix(temp_db) -> None:
    with session_scope() as s:
        assert next_invoice_number(s, "INV-", TODAY) == "INV-202510-0001"
        assert next_invoice_number(s, "INV-", TODAY) == "INV-202510-0002"
        assert next_invoice_number(s, "CN-", TODAY) == "CN-202510-0001"
    with session_scope() as s:
        assert peek_next_invoice_number(s, "INV-", TODAY) == "INV-202510-0003"
        assert peek_next_invoice_number(s, "INV-", TODAY) == "INV-202510-0003"


def test_rolled_back_number_is_reused(temp_db) -> None:
    try:
        with session_scope() as s:
            assert next_invoice_number(s, "INV-", TODAY) == "INV-202510-0001"
            raise RuntimeError("abort")
    except RuntimeError:
        pass
    with session_scope() as s:
        assert next_invoice_number(s, "INV-", TODAY) == "INV-202510-0001"
