"""RequestBroker: correlated, timed-out calls over one message port.

Every call gets a fresh 128-bit random id and an entry in the pending
registry. Whichever comes first, the matching reply or the timer, removes
the entry and settles the caller; the loser finds nothing and is ignored.
Replies whose id is not pending (late, duplicate, or unknown) are dropped
and logged as orphans. ``connected`` messages never settle a call; the
first one marks the backend as ready (see :meth:`RequestBroker.wait_ready`).

A timeout only abandons the call locally. The backend is not told and may
still finish the work; its reply is then an orphan.
"""

from __future__ import annotations

import asyncio
import uuid
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import structlog
from pydantic import ValidationError

from folkstore.domain.messages import CallMessage, ReplyMessage, ReplyStatus
from folkstore.errors import BackendError, NotOperationalError, RequestTimeoutError
from folkstore.infrastructure.transport import PortClosedError

if TYPE_CHECKING:
    from folkstore.infrastructure.transport import MessagePort

log = structlog.get_logger(__name__)

DEFAULT_TIMEOUT_MS = 10_000


@dataclass
class PendingCall:
    """Registry entry for one outstanding call."""

    action: str
    future: asyncio.Future[Any]
    timer: asyncio.TimerHandle | None = None

    def cancel_timer(self) -> None:
        if self.timer is not None:
            self.timer.cancel()
            self.timer = None


class RequestBroker:
    """Client end of one backend connection.

    Must be created inside a running event loop when given a port; the
    broker starts a task that reads replies for as long as the port is open.
    With ``port=None`` the broker is permanently disabled and every call
    fails with NotOperationalError.
    """

    def __init__(self, port: MessagePort | None, *, timeout_ms: int = DEFAULT_TIMEOUT_MS) -> None:
        self._port = port
        self._timeout_ms = timeout_ms
        self._pending: dict[str, PendingCall] = {}
        self._ready = asyncio.Event()
        self._reader: asyncio.Task[None] | None = None
        if port is not None:
            self._reader = asyncio.get_running_loop().create_task(self._read_replies(port))

    @property
    def operational(self) -> bool:
        return self._port is not None and not self._port.closed

    @property
    def timeout_ms(self) -> int:
        return self._timeout_ms

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def _new_id(self) -> str:
        request_id = uuid.uuid4().hex
        while request_id in self._pending:
            request_id = uuid.uuid4().hex
        return request_id

    async def call(self, action: str, payload: Any = None) -> Any:
        """Send *action* and wait for its reply.

        Returns the reply's ``data``. Raises NotOperationalError without sending anything
        if there is no open connection, RequestTimeoutError when the deadline
        passes, and BackendError when the backend reports a failure.
        """
        port = self._port
        if port is None or port.closed:
            raise NotOperationalError("Database backend not operational")

        loop = asyncio.get_running_loop()
        request_id = self._new_id()
        entry = PendingCall(action=action, future=loop.create_future())
        self._pending[request_id] = entry

        message = CallMessage(id=request_id, action=action, payload=payload)
        try:
            port.post_message(message.to_wire())
        except PortClosedError as exc:
            self._pending.pop(request_id, None)
            raise NotOperationalError("Database backend not operational") from exc

        entry.timer = loop.call_later(self._timeout_ms / 1000, self._expire, request_id)
        try:
            return await entry.future
        finally:
            # Only still registered if the caller was cancelled.
            if self._pending.get(request_id) is entry:
                del self._pending[request_id]
            entry.cancel_timer()

    def _expire(self, request_id: str) -> None:
        entry = self._pending.pop(request_id, None)
        if entry is None:
            return
        entry.timer = None
        log.warning("request.timeout", id=request_id, action=entry.action, timeout_ms=self._timeout_ms)
        if not entry.future.done():
            entry.future.set_exception(RequestTimeoutError(entry.action, self._timeout_ms))

    async def _read_replies(self, port: MessagePort) -> None:
        async for message in port:
            self._on_message(message)
        self._fail_pending(NotOperationalError("Database backend connection closed"))

    def _on_message(self, message: Any) -> None:
        try:
            reply = ReplyMessage.model_validate(message)
        except ValidationError:
            log.warning("reply.invalid", message=message)
            return

        if reply.status == ReplyStatus.CONNECTED:
            log.debug("backend.connected", id=reply.id, message=reply.message)
            self._ready.set()
            return

        entry = self._pending.pop(reply.id, None) if reply.id is not None else None
        if entry is None:
            log.debug("reply.orphaned", id=reply.id, status=str(reply.status))
            return

        entry.cancel_timer()
        if entry.future.done():
            return
        if reply.status == ReplyStatus.SUCCESS:
            entry.future.set_result(reply.data)
        else:
            entry.future.set_exception(BackendError(reply.message or "Unknown backend error"))

    @property
    def ready(self) -> bool:
        """True once the backend has sent its ``connected`` greeting."""
        return self._ready.is_set()

    async def wait_ready(self, timeout_ms: int | None = None) -> bool:
        """Wait for the ``connected`` greeting; False if none arrives in time.

        Sends nothing. Raises NotOperationalError when there is no open
        connection to wait on.
        """
        if not self.operational:
            raise NotOperationalError("Database backend not operational")
        if self._ready.is_set():
            return True
        wait_ms = self._timeout_ms if timeout_ms is None else timeout_ms
        try:
            await asyncio.wait_for(self._ready.wait(), wait_ms / 1000)
        except TimeoutError:
            log.debug("backend.not_ready", timeout_ms=wait_ms)
            return False
        return True

    def _fail_pending(self, exc: Exception) -> None:
        pending = list(self._pending.values())
        self._pending.clear()
        for entry in pending:
            entry.cancel_timer()
            if not entry.future.done():
                entry.future.set_exception(exc)

    async def aclose(self) -> None:
        """Close the connection and fail whatever is still pending."""
        if self._port is not None:
            self._port.close()
        if self._reader is not None:
            await self._reader
            self._reader = None
        self._fail_pending(NotOperationalError("Database backend connection closed"))
