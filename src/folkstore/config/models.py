"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults live here, folkstore.toml only holds
overrides. An empty file (or none at all) is a valid configuration.
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel


class StorageConfig(BaseModel):
    """[storage] section."""

    model_config = {"frozen": True}

    directory: Path | None = None  # None → <root>/.folkstore
    basename: str = "folklore"
    transient: bool = False


class BootstrapConfig(BaseModel):
    """[bootstrap] section.

    ``location`` is either an http(s) URL or a filesystem path; relative
    paths resolve against the settings root.
    """

    model_config = {"frozen": True}

    location: str = "data/init-data.json"
    timeout_sec: float = 10.0


class ClientConfig(BaseModel):
    """[client] section."""

    model_config = {"frozen": True}

    request_timeout_ms: int = 10_000


class BackendConfig(BaseModel):
    """[backend] section."""

    model_config = {"frozen": True}

    greet_on_connect: bool = True


class LoggingConfig(BaseModel):
    """[logging] section.

    ``trace_messages`` lets per-message broker and multiplexer events
    (connection open/close, orphaned replies) through at DEBUG; otherwise
    they stay quiet even with ``--verbose``.
    """

    model_config = {"frozen": True}

    trace_messages: bool = False
