"""Database engine setup for the folklore store.

The store is a single SQLite file named after the schema version, e.g.
``folklore_v1.2.sqlite3``. Journal mode is WAL where the file system
supports it and DELETE otherwise.

The pysqlite driver normally defers BEGIN until the first DML statement,
which would let DDL autocommit. The driver's own transaction handling is
turned off and SQLAlchemy emits BEGIN itself, so ``engine.begin()`` wraps
schema creation in a real transaction.
"""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path
from typing import Any

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.pool import StaticPool

from folkstore.infrastructure.database.schema import SCHEMA_VERSION, metadata

logger = logging.getLogger(__name__)


def store_filename(basename: str) -> str:
    """File name for the current schema version."""
    return f"{basename}_v{SCHEMA_VERSION}.sqlite3"


def _apply_journal_mode(dbapi_conn: Any) -> str:
    """Try WAL; fall back to DELETE when WAL is refused or unsupported."""
    cursor = dbapi_conn.cursor()
    try:
        try:
            row = cursor.execute("PRAGMA journal_mode=WAL").fetchone()
        except sqlite3.DatabaseError:
            row = None
        mode = str(row[0]).lower() if row else ""
        if mode not in ("wal", "memory"):
            logger.debug("WAL journal mode unavailable (got %r), using DELETE", mode)
            row = cursor.execute("PRAGMA journal_mode=DELETE").fetchone()
            mode = str(row[0]).lower() if row else "delete"
        return mode
    finally:
        cursor.close()


def create_db_engine(db_path: Path | None) -> Engine:
    """Create a SQLite engine; ``None`` gives a transient in-memory store.

    The in-memory variant pins a single connection (``StaticPool``) so every
    caller sees the same database.
    """
    if db_path is None:
        engine = create_engine(
            "sqlite://",
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
            echo=False,
        )
    else:
        engine = create_engine(f"sqlite:///{db_path}", echo=False)

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_conn: Any, _: Any) -> None:
        dbapi_conn.isolation_level = None
        mode = _apply_journal_mode(dbapi_conn)
        logger.debug("SQLite connection opened (journal_mode=%s)", mode)

    @event.listens_for(engine, "begin")
    def _do_begin(conn: Connection) -> None:
        conn.exec_driver_sql("BEGIN")

    return engine


def create_schema(engine: Engine) -> None:
    """Create all tables inside one transaction.

    Idempotent: existing tables are left alone. If any statement fails the
    whole transaction rolls back and the error propagates.
    """
    logger.debug("Creating schema (version %s)", SCHEMA_VERSION)
    with engine.begin() as conn:
        metadata.create_all(conn)


def journal_mode(engine: Engine) -> str:
    """Report the journal mode currently in effect."""
    with engine.connect() as conn:
        return str(conn.execute(text("PRAGMA journal_mode")).scalar()).lower()
