"""In-process message channels between clients and the backend.

A :class:`MessageChannel` is a pair of entangled :class:`MessagePort`
objects. Posting on one port queues a deep copy of the message on the
other, so sender and receiver never share mutable state. There is no
framing and no request queue beyond each port's inbox: a port is read in
arrival order by whoever owns it.

Closing either end closes both; readers see the iteration end, and
messages posted towards a closed port are dropped.
"""

from __future__ import annotations

import asyncio
import copy
import logging
from collections.abc import AsyncIterator
from typing import Any

logger = logging.getLogger(__name__)

_CLOSED = object()


class PortClosedError(RuntimeError):
    """Raised when posting from a port that has been closed."""


class MessagePort:
    """One end of a message channel."""

    def __init__(self, name: str = "port") -> None:
        self.name = name
        self._inbox: asyncio.Queue[Any] = asyncio.Queue()
        self._peer: MessagePort | None = None
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def post_message(self, message: Any) -> None:
        """Queue a copy of *message* on the peer port."""
        if self._closed:
            raise PortClosedError(f"{self.name} is closed")
        peer = self._peer
        if peer is None or peer._closed:
            logger.debug("Dropping message posted towards closed peer of %s", self.name)
            return
        peer._inbox.put_nowait(copy.deepcopy(message))

    async def receive(self) -> Any:
        """Wait for the next message. Raises PortClosedError once closed."""
        if self._closed and self._inbox.empty():
            raise PortClosedError(f"{self.name} is closed")
        item = await self._inbox.get()
        if item is _CLOSED:
            raise PortClosedError(f"{self.name} is closed")
        return item

    async def __aiter__(self) -> AsyncIterator[Any]:
        while True:
            try:
                yield await self.receive()
            except PortClosedError:
                return

    def close(self) -> None:
        """Close both ends of the channel."""
        if self._closed:
            return
        self._closed = True
        self._inbox.put_nowait(_CLOSED)
        if self._peer is not None:
            self._peer.close()


class MessageChannel:
    """Two entangled ports: ``port1`` for one side, ``port2`` for the other."""

    def __init__(self, name: str = "channel") -> None:
        self.port1 = MessagePort(f"{name}:1")
        self.port2 = MessagePort(f"{name}:2")
        self.port1._peer = self.port2
        self.port2._peer = self.port1
