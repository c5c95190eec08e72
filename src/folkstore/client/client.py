"""DatabaseClient: typed calls to a shared backend.

Each client context creates its own DatabaseClient; all of them can point
at the same :class:`~folkstore.server.Backend`. If the backend cannot
accept a connection the client is created disabled and logs a warning;
every call on a disabled client raises NotOperationalError.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from pydantic import TypeAdapter

from folkstore.client.broker import DEFAULT_TIMEOUT_MS, RequestBroker
from folkstore.domain.messages import Action
from folkstore.domain.records import SeedApplied, SeedResult, SeedSkipped, TableCounts
from folkstore.errors import TransportUnavailableError

if TYPE_CHECKING:
    from folkstore.server.multiplexer import Backend

logger = logging.getLogger(__name__)

_seed_result = TypeAdapter(SeedResult)


class DatabaseClient:
    def __init__(self, broker: RequestBroker) -> None:
        self._broker = broker

    @classmethod
    def connect(
        cls,
        backend: Backend | None,
        *,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
    ) -> DatabaseClient:
        """Connect to *backend*, or return a disabled client if that fails."""
        port = None
        if backend is None:
            logger.warning("No database backend available; client disabled")
        else:
            try:
                port = backend.connect()
            except TransportUnavailableError as exc:
                logger.warning("Database backend unavailable; client disabled: %s", exc)
        return cls(RequestBroker(port, timeout_ms=timeout_ms))

    @property
    def operational(self) -> bool:
        return self._broker.operational

    @property
    def broker(self) -> RequestBroker:
        return self._broker

    async def query(self, action: str, payload: Any = None) -> Any:
        """Generic call; returns the reply data as sent by the backend."""
        return await self._broker.call(action, payload if payload is not None else {})

    async def seed_data(self) -> SeedSkipped | SeedApplied:
        return _seed_result.validate_python(await self.query(Action.SEED_DATA))

    async def query_counts(self) -> TableCounts:
        return TableCounts.model_validate(await self.query(Action.QUERY_COUNTS))

    async def ping(self, timeout_ms: int | None = None) -> bool:
        """True once the backend's ``Ready`` greeting has arrived.

        Nothing is sent; a backend configured without a greeting never
        reports ready and this returns False after the timeout.
        """
        return await self._broker.wait_ready(timeout_ms)

    async def aclose(self) -> None:
        await self._broker.aclose()

    async def __aenter__(self) -> DatabaseClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
