"""Dialect-aware INSERT for ON CONFLICT upserts.

PostgreSQL in production, SQLite for the test suite. Both dialects expose
``on_conflict_do_update`` / ``on_conflict_do_nothing`` with ``index_elements``.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

_INSERTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


def upsert_insert(db: AsyncSession, model: Any) -> Any:  # noqa: ANN401
    """Return an INSERT construct supporting ON CONFLICT for the session's dialect."""
    dialect = db.get_bind().dialect.name
    factory = _INSERTS.get(dialect)
    if factory is None:
        msg = f"ON CONFLICT upserts are not supported on dialect '{dialect}'"
        raise RuntimeError(msg)
    return factory(model)
