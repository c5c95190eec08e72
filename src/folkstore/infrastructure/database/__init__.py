"""SQLite store: schema, engine setup, the Store adapter, and its lifecycle."""

from folkstore.infrastructure.database.engine import (
    create_db_engine,
    create_schema,
    journal_mode,
    store_filename,
)
from folkstore.infrastructure.database.lifecycle import StoreManager, StoreState
from folkstore.infrastructure.database.schema import (
    SCHEMA_VERSION,
    artists,
    certificates,
    metadata,
    partners,
    projects,
)
from folkstore.infrastructure.database.store import PreparedStatement, Store, StoreTransaction

__all__ = [
    "SCHEMA_VERSION",
    "PreparedStatement",
    "Store",
    "StoreManager",
    "StoreState",
    "StoreTransaction",
    "artists",
    "certificates",
    "create_db_engine",
    "create_schema",
    "journal_mode",
    "metadata",
    "partners",
    "projects",
    "store_filename",
]
