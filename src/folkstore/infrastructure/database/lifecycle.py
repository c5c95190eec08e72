"""StoreManager: open the store once, however many callers ask at once.

State machine: ``UNINITIALIZED → INITIALIZING → READY``.

INVARIANT: at most one initialization is in flight. Callers that arrive
while it runs await the same task; callers after it completes get the cached
handle. A failed attempt returns the manager to ``UNINITIALIZED`` so the
next caller starts over; no attempt is ever retried on its own.
"""

from __future__ import annotations

import asyncio
import logging
from enum import StrEnum
from typing import TYPE_CHECKING

from folkstore.errors import InitializationError
from folkstore.infrastructure.database.engine import (
    create_db_engine,
    create_schema,
    journal_mode,
    store_filename,
)
from folkstore.infrastructure.database.store import Store

if TYPE_CHECKING:
    from pathlib import Path

    from folkstore.config.settings import FolkSettings

logger = logging.getLogger(__name__)

TRANSIENT_LOCATION = ":memory:"


def _consume_failure(task: asyncio.Future[Store]) -> None:
    # Waiters may all be cancelled before a failed attempt finishes.
    if not task.cancelled():
        task.exception()


class StoreState(StrEnum):
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"


class StoreManager:
    """Owns the backend's single store handle."""

    def __init__(
        self,
        *,
        directory: Path | None = None,
        basename: str = "folklore",
        transient: bool = False,
    ) -> None:
        if directory is None and not transient:
            raise ValueError("a storage directory is required unless transient=True")
        self._directory = directory
        self._basename = basename
        self._transient = transient
        self._state = StoreState.UNINITIALIZED
        self._store: Store | None = None
        self._pending: asyncio.Future[Store] | None = None

    @classmethod
    def from_settings(cls, settings: FolkSettings) -> StoreManager:
        return cls(
            directory=settings.storage_dir,
            basename=settings.storage.basename,
            transient=settings.storage.transient,
        )

    @property
    def state(self) -> StoreState:
        return self._state

    @property
    def location(self) -> str:
        if self._transient or self._directory is None:
            return TRANSIENT_LOCATION
        return str(self._directory / store_filename(self._basename))

    async def get_store(self) -> Store:
        """Return the ready store, initializing it on first use."""
        if self._store is not None:
            return self._store
        if self._pending is None:
            self._state = StoreState.INITIALIZING
            self._pending = asyncio.ensure_future(self._initialize())
            self._pending.add_done_callback(_consume_failure)
        return await asyncio.shield(self._pending)

    async def _initialize(self) -> Store:
        try:
            store = self._open()
        except Exception as exc:
            self._pending = None
            self._state = StoreState.UNINITIALIZED
            logger.error("Store initialization failed at %s: %s", self.location, exc)
            msg = f"Store initialization failed: {exc}"
            raise InitializationError(msg) from exc

        self._store = store
        self._state = StoreState.READY
        return store

    def _open(self) -> Store:
        if self._transient or self._directory is None:
            engine = create_db_engine(None)
            logger.info("Transient store mounted")
        else:
            self._directory.mkdir(parents=True, exist_ok=True)
            engine = create_db_engine(self._directory / store_filename(self._basename))
            logger.info("Persistent store mounted at %s", self.location)

        try:
            create_schema(engine)
            logger.debug("Store ready (journal_mode=%s)", journal_mode(engine))
        except Exception:
            engine.dispose()
            raise
        return Store(engine, location=self.location)

    def dispose(self) -> None:
        """Release the engine. Only called when the backend shuts down."""
        if self._store is not None:
            self._store.dispose()
        self._store = None
        self._pending = None
        self._state = StoreState.UNINITIALIZED
