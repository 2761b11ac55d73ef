from __future__ import annotations

import json
from pathlib import Path

from billing.core.settings import Settings, load_settings, save_settings


def test_missing_file_writes_defaults(tmp_path: Path) -> None:
    p = tmp_path / "cfg" / "settings.json"
    s = load_settings(p)
    assert s == Settings()
    assert json.loads(p.read_text(encoding="utf-8"))["overflow_policy"] == "draw"


def test_round_trip(tmp_path: Path) -> None:
    p = tmp_path / "settings.json"
    s = Settings(company_name="Sharma Electricals", bank_ifsc="SBIN0000001", overflow_policy="fail")
    save_settings(s, p)
    assert load_settings(p) == s
    assert not p.with_suffix(".json.tmp").exists()


def test_unknown_keys_and_bad_policy(tmp_path: Path, caplog) -> None:
    p = tmp_path / "settings.json"
    p.write_text(json.dumps({"company_name": "X", "theme": "dark", "overflow_policy": "paginate"}), encoding="utf-8")
    s = load_settings(p)
    assert s.company_name == "X"
    assert s.overflow_policy == "draw"
    assert "overflow_policy" in caplog.text


def test_corrupt_file_falls_back_without_overwriting(tmp_path: Path) -> None:
    p = tmp_path / "settings.json"
    p.write_text("{not json", encoding="utf-8")
    assert load_settings(p) == Settings()
    assert p.read_text(encoding="utf-8") == "{not json"


def test_company_profile_and_output_root(tmp_path: Path) -> None:
    s = Settings(
        company_name="Sharma Electricals",
        company_gst="27AAAAA0000A1Z5",
        bank_name="State Bank",
        bank_account="000111",
        bank_ifsc="SBIN0000001",
        footer_note="",
        storage_root=str(tmp_path),
    )
    company = s.company_profile()
    assert company.tax_id == "27AAAAA0000A1Z5"
    assert company.bank.routing_code == "SBIN0000001"
    assert company.footer_note is None
    assert s.output_root() == tmp_path
    assert Settings().output_root().parts[-2:] == ("storage", "invoices")
