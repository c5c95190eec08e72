"""Shared pytest fixtures and test helpers for folkstore tests."""

from __future__ import annotations

import asyncio
import copy
import json
import logging
from collections.abc import Generator
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from folkstore.config.logging import MESSAGE_LOGGERS
from folkstore.config.settings import FolkSettings
from folkstore.infrastructure.bootstrap import StaticBootstrapSource
from folkstore.infrastructure.database.lifecycle import StoreManager
from folkstore.infrastructure.database.store import Store
from folkstore.server.multiplexer import Backend
from folkstore.services.seeder import BootstrapSeeder

SAMPLE_DOCUMENT: dict[str, Any] = {
    "manifest": {"version": "1.0.0"},
    "partners": [
        {
            "p_id": 1,
            "name_json": {"en": "Lanna Weavers Guild", "th": "กลุ่มทอผ้าล้านนา"},
            "type": "guild",
            "country_code": "TH",
            "next_cycle_date": "2026-01-15",
            "contact_enc": "enc:9f2c",
        }
    ],
    "projects": [
        {
            "pr_id": 1,
            "p_id": 1,
            "title_json": {"en": "Shadow Puppet Archive"},
            "is_outbound": True,
            "status": "active",
            "meta_json": {"year": 2025, "tags": ["nang yai"]},
        }
    ],
    "artists": [],
}


def sample_document(**overrides: Any) -> dict[str, Any]:
    """A deep copy of SAMPLE_DOCUMENT with top-level keys replaced."""
    doc = copy.deepcopy(SAMPLE_DOCUMENT)
    doc.update(overrides)
    return doc


def document_bytes(doc: dict[str, Any] | None = None) -> bytes:
    return json.dumps(doc if doc is not None else SAMPLE_DOCUMENT).encode("utf-8")


def make_backend(
    tmp_path: Path,
    doc: dict[str, Any] | None = None,
    *,
    greet_on_connect: bool = True,
) -> Backend:
    """Backend over a store in *tmp_path* seeded from an in-memory document."""
    return Backend(
        StoreManager(directory=tmp_path / ".folkstore"),
        BootstrapSeeder(StaticBootstrapSource(document_bytes(doc))),
        greet_on_connect=greet_on_connect,
    )


@pytest.fixture(autouse=True)
def _restore_logging() -> Generator[None]:
    """Restore root logger state after each test."""
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    watched = [logging.getLogger(name) for name in ("folkstore", *MESSAGE_LOGGERS)]
    levels = [lg.level for lg in watched]
    yield
    root.handlers = original_handlers
    root.setLevel(original_level)
    for lg, level in zip(watched, levels, strict=True):
        lg.setLevel(level)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep FOLKSTORE_* variables from the outer environment out of tests."""
    monkeypatch.delenv("FOLKSTORE_CONFIG", raising=False)
    monkeypatch.delenv("FOLKSTORE_ROOT", raising=False)


@pytest.fixture
def cli_runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def settings(tmp_path: Path) -> FolkSettings:
    return FolkSettings.from_cli(root=tmp_path)


@pytest.fixture
def store_manager(tmp_path: Path) -> Generator[StoreManager]:
    manager = StoreManager(directory=tmp_path / ".folkstore")
    try:
        yield manager
    finally:
        manager.dispose()


@pytest.fixture
def store(store_manager: StoreManager) -> Store:
    """An opened store with the schema created and no rows."""
    return asyncio.run(store_manager.get_store())


@pytest.fixture
def bootstrap_file(tmp_path: Path) -> Path:
    """The sample document at the default bootstrap location."""
    path = tmp_path / "data" / "init-data.json"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(document_bytes())
    return path


@pytest.fixture
def _isolated_root(tmp_path: Path, bootstrap_file: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Run the CLI from a temp root that holds the default bootstrap file.

    Use via ``@pytest.mark.usefixtures("_isolated_root")`` on command test
    classes.
    """
    monkeypatch.chdir(tmp_path)
