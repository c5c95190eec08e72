"""Store: the narrow capability surface over the SQLite engine.

Callers see only ``exec``, ``prepare`` (bind/step/reset/finalize), and a
``transaction()`` context manager. SQLAlchemy types stay behind this
boundary; statements may be given as SQL text or as Core constructs.

Usage::

    with store.transaction() as txn:
        stmt = txn.prepare(insert(partners))
        for row in rows:
            stmt.bind(row)
            stmt.step()
            stmt.reset()
        stmt.finalize()
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

from sqlalchemy import text

if TYPE_CHECKING:
    from sqlalchemy.engine import Connection, Engine
    from sqlalchemy.sql import Executable

logger = logging.getLogger(__name__)

Row = tuple[Any, ...]


def _coerce(sql: str | Executable) -> Executable:
    return text(sql) if isinstance(sql, str) else sql


def _run(conn: Connection, sql: str | Executable, params: Mapping[str, Any] | None) -> list[Row]:
    result = conn.execute(_coerce(sql), dict(params) if params else None)
    if not result.returns_rows:
        return []
    return [tuple(row) for row in result]


class PreparedStatement:
    """A statement bound to one transaction, re-bound and stepped per row."""

    def __init__(self, conn: Connection, sql: str | Executable) -> None:
        self._conn = conn
        self._statement = _coerce(sql)
        self._params: dict[str, Any] | None = None
        self._finalized = False

    def bind(self, params: Mapping[str, Any]) -> PreparedStatement:
        if self._finalized:
            raise RuntimeError("statement already finalized")
        self._params = dict(params)
        return self

    def step(self) -> list[Row]:
        """Execute with the current bindings."""
        if self._finalized:
            raise RuntimeError("statement already finalized")
        result = self._conn.execute(self._statement, self._params)
        if not result.returns_rows:
            return []
        return [tuple(row) for row in result]

    def reset(self) -> None:
        self._params = None

    def finalize(self) -> None:
        self._params = None
        self._finalized = True

    @property
    def finalized(self) -> bool:
        return self._finalized


class StoreTransaction:
    """Statements issued here commit or roll back together."""

    def __init__(self, conn: Connection) -> None:
        self._conn = conn

    def exec(self, sql: str | Executable, params: Mapping[str, Any] | None = None) -> list[Row]:
        return _run(self._conn, sql, params)

    def prepare(self, sql: str | Executable) -> PreparedStatement:
        return PreparedStatement(self._conn, sql)


class Store:
    """Shared handle to one opened store."""

    def __init__(self, engine: Engine, *, location: str) -> None:
        self._engine = engine
        self.location = location

    def exec(self, sql: str | Executable, params: Mapping[str, Any] | None = None) -> list[Row]:
        """Run one statement in its own short transaction."""
        with self._engine.begin() as conn:
            return _run(conn, sql, params)

    def scalar(self, sql: str | Executable, params: Mapping[str, Any] | None = None) -> Any:
        rows = self.exec(sql, params)
        return rows[0][0] if rows else None

    @contextmanager
    def transaction(self) -> Iterator[StoreTransaction]:
        """BEGIN on entry, COMMIT on clean exit, ROLLBACK on any exception."""
        with self._engine.begin() as conn:
            try:
                yield StoreTransaction(conn)
            except Exception:
                logger.debug("Rolling back transaction on %s", self.location)
                raise

    def dispose(self) -> None:
        self._engine.dispose()
