from __future__ import annotations

from datetime import date
from typing import Any, Optional

from sqlalchemy import text


def _exec(db_session: Any, sql: str, params: dict | None = None):
	# Go through the session's connection so the statement joins its transaction
	return db_session.connection().execute(text(sql), params or {})


def _ensure_table(db_session: Any) -> None:
	"""Create the sequences table if it doesn't exist (SQLite-safe)."""
	# Raw SQL keeps this independent of ORM models.
	_exec(
		db_session,
		"CREATE TABLE IF NOT EXISTS invoice_sequences ("
		" prefix TEXT PRIMARY KEY,"
		" last INTEGER NOT NULL"
		")",
	)


def _format(prefix: str, n: int, today: Optional[date] = None, width: int = 4) -> str:
	d = today or date.today()
	return f"{prefix}{d:%Y%m}-{n:0{width}d}"


def _current(db_session: Any, prefix: str) -> int:
	row = _exec(
		db_session,
		"SELECT last FROM invoice_sequences WHERE prefix = :p",
		{"p": prefix},
	).fetchone()
	return int(row[0]) if row and row[0] is not None else 0


def next_invoice_number(db_session: Any, prefix: str = "INV-", today: Optional[date] = None) -> str:
	"""
	Return the next sequential invoice number like 'INV-202510-0001'.

	The counter is shared by all months of a prefix and is incremented inside
	the caller's session; it becomes durable when that session commits.
	"""
	_ensure_table(db_session)

	updated = _exec(
		db_session,
		"UPDATE invoice_sequences SET last = last + 1 WHERE prefix = :p",
		{"p": prefix},
	)
	if getattr(updated, "rowcount", 0) == 0:
		_exec(
			db_session,
			"INSERT INTO invoice_sequences(prefix, last) VALUES (:p, :val)",
			{"p": prefix, "val": 1},
		)
		current = 1
	else:
		current = _current(db_session, prefix)

	return _format(prefix, current, today)


def peek_next_invoice_number(db_session: Any, prefix: str = "INV-", today: Optional[date] = None) -> str:
	"""Return the next invoice number without mutating the sequence."""
	_ensure_table(db_session)
	return _format(prefix, _current(db_session, prefix) + 1, today)
