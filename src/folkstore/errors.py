"""Error hierarchy shared by the client and backend halves of the bridge.

Backend-side failures never escape the connection boundary: the multiplexer
turns them into ``error`` replies, which the client re-raises as
:class:`BackendError`. Every other class here is raised client-side or
inside the backend before it is converted.
"""

from __future__ import annotations


class FolkstoreError(Exception):
    """Base class for all folkstore errors."""


class NotOperationalError(FolkstoreError):
    """No backend connection is available; nothing was sent."""


class RequestTimeoutError(FolkstoreError):
    """No reply arrived before the request deadline."""

    def __init__(self, action: str | None, timeout_ms: int) -> None:
        super().__init__(f"Query timeout for action: {action}")
        self.action = action
        self.timeout_ms = timeout_ms


class BackendError(FolkstoreError):
    """The backend answered with an ``error`` reply."""


class InitializationError(FolkstoreError):
    """Opening the store or creating its schema failed."""


class SeedError(FolkstoreError):
    """The bootstrap transaction was rolled back."""


class BootstrapFetchError(FolkstoreError):
    """The bootstrap document could not be retrieved."""


class TransportUnavailableError(FolkstoreError):
    """The backend cannot accept new connections."""
