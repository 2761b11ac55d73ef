from __future__ import annotations


class BillingError(Exception):
	"""Base class for errors raised by the billing package."""


class ValidationError(BillingError, ValueError):
	"""Invoice data is unusable (missing fields, negative amounts, mixed tax regimes)."""


class RenderError(BillingError):
	"""The invoice document could not be produced."""


class RenderResourceError(RenderError):
	"""An optional resource (logo image) could not be read; callers draw a placeholder."""


class LayoutOverflowError(RenderError):
	"""More rows than the items table can hold at the minimum row height."""

	def __init__(self, item_count: int, capacity: int) -> None:
		super().__init__(f"{item_count} items do not fit the items table (capacity {capacity} rows)")
		self.item_count = item_count
		self.capacity = capacity


class OutputError(RenderError, OSError):
	"""The output file or stream could not be opened or written."""
