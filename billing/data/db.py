from __future__ import annotations

from pathlib import Path
from typing import Generator, Optional
from contextlib import contextmanager

from sqlmodel import SQLModel, Session, create_engine

from billing.core.paths import user_writable_dir


DB_PATH = user_writable_dir() / "billing.db"

_ENGINE = None


def _sqlite_url(path: Path) -> str:
	# Use posix path for SQLAlchemy URL compatibility on Windows
	return f"sqlite:///{path.as_posix()}"


def configure_engine(url: Optional[str] = None, echo: bool = False):
	"""Replace the engine singleton, e.g. to point tests at a temporary database."""
	global _ENGINE
	if _ENGINE is not None:
		_ENGINE.dispose()
	_ENGINE = create_engine(url or _sqlite_url(DB_PATH), echo=echo, connect_args={"check_same_thread": False})
	return _ENGINE


def get_engine(echo: bool = False):
	"""Return a singleton SQLAlchemy engine for the project SQLite DB."""
	if _ENGINE is None:
		return configure_engine(echo=echo)
	return _ENGINE


def create_db_and_tables(echo: bool = False) -> None:
	"""Create the SQLite database file and all SQLModel tables."""
	# Ensure models are imported so metadata has all tables
	import billing.data.models  # noqa: F401

	engine = get_engine(echo=echo)
	if engine.url.database and engine.url.database != ":memory:":
		Path(engine.url.database).parent.mkdir(parents=True, exist_ok=True)
	SQLModel.metadata.create_all(engine)


def get_session(echo: bool = False) -> Session:
	"""Create a new SQLModel Session bound to the project engine.

	expire_on_commit=False so returned instances keep attribute values after commit
	(avoids refresh on closed sessions when callers use detached instances).
	"""
	return Session(get_engine(echo=echo), expire_on_commit=False)


@contextmanager
def session_scope(echo: bool = False) -> Generator[Session, None, None]:
	"""Context manager-style generator for sessions.

	Usage:
		with session_scope() as s:
			... use s ...
	"""
	session = get_session(echo=echo)
	try:
		yield session
		session.commit()
	except Exception:
		session.rollback()
		raise
	finally:
		session.close()
