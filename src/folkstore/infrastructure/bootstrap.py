"""Bootstrap sources: where the seed document's bytes come from.

The seeder only needs ``await source.fetch() -> bytes``. Sources:

- :class:`FileBootstrapSource` reads a local JSON file.
- :class:`HttpBootstrapSource` GETs a URL with httpx.
- :class:`StaticBootstrapSource` serves bytes already in memory.

Every failure to retrieve the blob is reported as
:class:`~folkstore.errors.BootstrapFetchError`.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

import httpx

from folkstore.errors import BootstrapFetchError

if TYPE_CHECKING:
    from folkstore.config.settings import FolkSettings

logger = logging.getLogger(__name__)


class BootstrapSource(Protocol):
    """Anything that can deliver the bootstrap document as bytes."""

    async def fetch(self) -> bytes: ...


class FileBootstrapSource:
    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    async def fetch(self) -> bytes:
        try:
            return self.path.read_bytes()
        except OSError as exc:
            msg = f"Failed to fetch bootstrap data from {self.path}: {exc}"
            raise BootstrapFetchError(msg) from exc

    def __repr__(self) -> str:
        return f"FileBootstrapSource({str(self.path)!r})"


class HttpBootstrapSource:
    """Fetch the document over HTTP.

    *transport* is passed to ``httpx.AsyncClient``; tests hand in an
    ``httpx.MockTransport``.
    """

    def __init__(
        self,
        url: str,
        *,
        timeout_sec: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.url = url
        self._timeout = httpx.Timeout(timeout_sec)
        self._transport = transport

    async def fetch(self) -> bytes:
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.get(self.url)
                response.raise_for_status()
                return response.content
        except httpx.HTTPStatusError as exc:
            msg = f"Failed to fetch bootstrap data from {self.url}: HTTP {exc.response.status_code}"
            raise BootstrapFetchError(msg) from exc
        except httpx.HTTPError as exc:
            msg = f"Failed to fetch bootstrap data from {self.url}: {exc}"
            raise BootstrapFetchError(msg) from exc

    def __repr__(self) -> str:
        return f"HttpBootstrapSource({self.url!r})"


class StaticBootstrapSource:
    def __init__(self, data: bytes | str) -> None:
        self._data = data.encode("utf-8") if isinstance(data, str) else data

    async def fetch(self) -> bytes:
        return self._data


def source_for_location(location: str, *, timeout_sec: float = 10.0) -> BootstrapSource:
    """Pick a source from a URL or filesystem path."""
    if location.startswith(("http://", "https://")):
        return HttpBootstrapSource(location, timeout_sec=timeout_sec)
    return FileBootstrapSource(Path(location))


def source_from_settings(settings: FolkSettings) -> BootstrapSource:
    return source_for_location(
        settings.bootstrap_location,
        timeout_sec=settings.bootstrap.timeout_sec,
    )
