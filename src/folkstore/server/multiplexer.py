"""Backend: one shared store, any number of client connections.

Each :meth:`Backend.connect` creates a message channel, keeps one end, and
starts a serving task that reads that end in arrival order. Every inbound
message first awaits the store (single-flight initialization), then is
dispatched by action:

- ``SEED_DATA``    → :class:`BootstrapSeeder`
- ``QUERY_COUNTS`` → :func:`query_counts`
- anything else    → ``connected`` / ``Ready`` (liveness, not an error)

INVARIANT: no exception escapes a connection. Failures become ``error``
replies carrying the request's id (or ``None``) and the connection keeps
serving.

Store statements run on the event loop thread, so handlers from different
connections never interleave statements. Moving store work onto worker
threads would need a lock around every store access.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any

import structlog

from folkstore.domain.messages import Action, CallMessage, ReplyMessage
from folkstore.errors import TransportUnavailableError
from folkstore.infrastructure.bootstrap import source_from_settings
from folkstore.infrastructure.database.lifecycle import StoreManager
from folkstore.infrastructure.transport import MessageChannel, MessagePort, PortClosedError
from folkstore.services.counts import query_counts
from folkstore.services.seeder import BootstrapSeeder

if TYPE_CHECKING:
    from folkstore.config.settings import FolkSettings
    from folkstore.infrastructure.bootstrap import BootstrapSource
    from folkstore.infrastructure.database.store import Store

logger = logging.getLogger(__name__)
log = structlog.get_logger(__name__)

Handler = Callable[["Store", CallMessage], Awaitable[Any]]


class Backend:
    """Connection multiplexer and owner of the store lifecycle."""

    def __init__(
        self,
        stores: StoreManager,
        seeder: BootstrapSeeder,
        *,
        greet_on_connect: bool = True,
    ) -> None:
        self._stores = stores
        self._seeder = seeder
        self._greet_on_connect = greet_on_connect
        self._connections: dict[int, tuple[MessagePort, asyncio.Task[None]]] = {}
        self._ids = itertools.count(1)
        self._closed = False
        self._handlers: dict[str, Handler] = {
            Action.SEED_DATA: self._handle_seed,
            Action.QUERY_COUNTS: self._handle_counts,
        }

    @classmethod
    def from_settings(
        cls,
        settings: FolkSettings,
        *,
        source: BootstrapSource | None = None,
    ) -> Backend:
        return cls(
            StoreManager.from_settings(settings),
            BootstrapSeeder(source or source_from_settings(settings)),
            greet_on_connect=settings.backend.greet_on_connect,
        )

    @property
    def stores(self) -> StoreManager:
        return self._stores

    @property
    def connection_count(self) -> int:
        return len(self._connections)

    def warm_up(self) -> asyncio.Future[Store]:
        """Start store initialization ahead of the first request."""
        return asyncio.ensure_future(self._stores.get_store())

    def connect(self) -> MessagePort:
        """Open a connection and return the client's end of it.

        Raises TransportUnavailableError if the backend is closed or no
        event loop is running to serve the connection.
        """
        if self._closed:
            raise TransportUnavailableError("backend is closed")
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError as exc:
            raise TransportUnavailableError("no running event loop to serve connections") from exc

        conn_id = next(self._ids)
        channel = MessageChannel(f"conn-{conn_id}")
        port = channel.port2
        task = loop.create_task(self._serve(conn_id, port), name=f"folkstore-conn-{conn_id}")
        self._connections[conn_id] = (port, task)
        task.add_done_callback(lambda _t: self._connections.pop(conn_id, None))
        log.debug("connection.open", conn_id=conn_id)

        if self._greet_on_connect:
            port.post_message(ReplyMessage.ready().to_wire())
        return channel.port1

    async def _serve(self, conn_id: int, port: MessagePort) -> None:
        async for message in port:
            reply = await self.handle_message(message)
            try:
                port.post_message(reply.to_wire())
            except PortClosedError:
                log.debug("connection.reply_dropped", conn_id=conn_id, id=reply.id)
                break
        log.debug("connection.closed", conn_id=conn_id)

    async def handle_message(self, message: Any) -> ReplyMessage:
        """Produce the reply for one inbound message. Never raises."""
        request_id = message.get("id") if isinstance(message, dict) else None
        try:
            store = await self._stores.get_store()
            request = CallMessage.model_validate(message)
            handler = self._handlers.get(request.action or "")
            if handler is None:
                return ReplyMessage.ready(request.id)
            data = await handler(store, request)
            return ReplyMessage.success(request.id, data)
        except Exception as exc:
            logger.error("Request %s failed: %s", request_id, exc, exc_info=True)
            return ReplyMessage.error(request_id if isinstance(request_id, str) else None, str(exc))

    async def _handle_seed(self, store: Store, request: CallMessage) -> dict[str, Any]:
        result = await self._seeder.seed(store)
        log.info("action.seed", id=request.id, status=result.status)
        return result.model_dump(mode="json")

    async def _handle_counts(self, store: Store, request: CallMessage) -> dict[str, Any]:
        return query_counts(store).model_dump(mode="json")

    async def aclose(self) -> None:
        """Stop serving every connection and release the store."""
        self._closed = True
        connections = list(self._connections.values())
        for port, _task in connections:
            port.close()
        tasks = [task for _port, task in connections]
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._stores.dispose()

    async def __aenter__(self) -> Backend:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()
