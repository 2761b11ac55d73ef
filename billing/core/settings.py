from __future__ import annotations

from dataclasses import dataclass, asdict, field
from pathlib import Path
from typing import Any, Dict, Optional, Union
import json
import logging

from billing.core.paths import default_storage_root, resource_path, settings_path

logger = logging.getLogger(__name__)

# Path to the settings.json (runtime-aware)
SETTINGS_PATH = settings_path()

DEFAULT_FOOTER_NOTE = "This is a computer-generated invoice and does not require a physical signature."
OVERFLOW_POLICIES = ("draw", "fail")


@dataclass(frozen=True)
class BankDetails:
	name: str = ""
	account_number: str = ""
	routing_code: str = ""
	branch: str = ""
	beneficiary: str = ""


@dataclass(frozen=True)
class CompanyProfile:
	"""Static supplier details injected into every render call."""

	name: str
	address: str = ""
	email: str = ""
	mobile: str = ""
	tax_id: str = ""
	logo_path: Optional[str] = None
	footer_note: Optional[str] = None
	bank: BankDetails = field(default_factory=BankDetails)


@dataclass
class Settings:
	company_name: str = "Your Company"
	company_address: str = ""
	company_email: str = ""
	company_mobile: str = ""
	company_gst: str = ""
	# Optional absolute/relative path to a logo image
	logo_path: Optional[str] = None
	footer_note: str = DEFAULT_FOOTER_NOTE
	bank_name: str = ""
	bank_account: str = ""
	bank_ifsc: str = ""
	bank_branch: str = ""
	bank_beneficiary: str = ""
	# Customer GSTINs starting with this state code are billed CGST+SGST, others IGST
	home_state_prefix: str = "27"
	invoice_prefix: str = "INV-"
	# Root directory for generated PDFs; if None, defaults to <project>/storage/invoices
	storage_root: Optional[str] = None
	# What to do when the items table cannot hold every row: "draw" past the frame or "fail"
	overflow_policy: str = "draw"
	currency_unit: str = "RUPEES"
	words_lang: str = "en_IN"

	@classmethod
	def from_dict(cls, data: Dict[str, Any]) -> "Settings":
		# Merge provided values over defaults, ignore unknown keys
		defaults = asdict(cls())
		merged: Dict[str, Any] = {**defaults, **{k: v for k, v in data.items() if k in defaults}}
		if merged["overflow_policy"] not in OVERFLOW_POLICIES:
			logger.warning("Unknown overflow_policy %r; using 'draw'", merged["overflow_policy"])
			merged["overflow_policy"] = "draw"
		return cls(**merged)

	def to_dict(self) -> Dict[str, Any]:
		return asdict(self)

	def company_profile(self) -> CompanyProfile:
		logo = self.logo_path
		if logo and not Path(logo).exists():
			rp = resource_path(logo)
			if rp.exists():
				logo = str(rp)
		return CompanyProfile(
			name=self.company_name,
			address=self.company_address,
			email=self.company_email,
			mobile=self.company_mobile,
			tax_id=self.company_gst,
			logo_path=logo,
			footer_note=self.footer_note or None,
			bank=BankDetails(
				name=self.bank_name,
				account_number=self.bank_account,
				routing_code=self.bank_ifsc,
				branch=self.bank_branch,
				beneficiary=self.bank_beneficiary,
			),
		)

	def output_root(self) -> Path:
		return Path(self.storage_root) if self.storage_root else default_storage_root()


def _coerce_path(path: Optional[Union[str, Path]]) -> Path:
	return Path(path) if path is not None else SETTINGS_PATH


def load_settings(path: Optional[Union[str, Path]] = None) -> Settings:
	"""
	Load settings from JSON (UTF-8). If the file is missing, write defaults and return them.
	"""
	p = _coerce_path(path)
	if not p.exists():
		settings = Settings()
		save_settings(settings, p)
		return settings

	try:
		with p.open("r", encoding="utf-8") as f:
			raw: Dict[str, Any] = json.load(f)
	except (json.JSONDecodeError, OSError):
		# If unreadable/corrupt, fall back to defaults (do not overwrite automatically)
		logger.warning("Could not read settings from %s; using defaults", p)
		return Settings()

	return Settings.from_dict(raw if isinstance(raw, dict) else {})


def save_settings(settings: Settings, path: Optional[Union[str, Path]] = None) -> None:
	"""Save settings to JSON (UTF-8), creating parent dirs if needed."""
	p = _coerce_path(path)
	p.parent.mkdir(parents=True, exist_ok=True)
	tmp = p.with_suffix(p.suffix + ".tmp")
	with tmp.open("w", encoding="utf-8", newline="\n") as f:
		json.dump(settings.to_dict(), f, indent=2, ensure_ascii=False)
		f.write("\n")
	tmp.replace(p)
