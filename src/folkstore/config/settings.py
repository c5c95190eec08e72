"""Unified settings — CLI flags, env vars, and TOML config in one object.

Priority chain (highest to lowest):
  1. Init kwargs  — CLI flags passed by Click
  2. Env vars     — ``FOLKSTORE_*`` prefix, ``__`` for nested sections
  3. TOML file    — ``folkstore.toml`` discovered via walk-up
  4. Code defaults — baked into the section models
"""

from __future__ import annotations

import threading
import tomllib
from pathlib import Path
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from folkstore.config.discovery import STORE_DIRNAME, config_root, find_config
from folkstore.config.models import (
    BackendConfig,
    BootstrapConfig,
    ClientConfig,
    LoggingConfig,
    StorageConfig,
)


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Read settings from a ``folkstore.toml`` file."""

    def __init__(self, settings_cls: type[BaseSettings], toml_path: Path | None) -> None:
        super().__init__(settings_cls)
        self._data: dict[str, Any] = {}
        if toml_path and toml_path.is_file():
            raw = toml_path.read_text(encoding="utf-8")
            try:
                self._data = tomllib.loads(raw)
            except tomllib.TOMLDecodeError as exc:
                import click

                msg = f"Invalid TOML in {toml_path}: {exc}"
                raise click.ClickException(msg) from exc

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        """Return ``(value, field_name, value_is_complex)``."""
        val = self._data.get(field_name)
        return val, field_name, field_name in self._data

    def __call__(self) -> dict[str, Any]:
        return self._data


# TOML path handed to settings_customise_sources during construction.
_tls = threading.local()


class FolkSettings(BaseSettings):
    """Unified, frozen settings for the CLI, the backend, and clients.

    Attributes:
        root: Directory that anchors relative paths (parent of
            ``folkstore.toml``, or CWD if no config was found).
        config_path: The TOML file in effect, if any.
    """

    model_config = {
        "frozen": True,
        "env_prefix": "FOLKSTORE_",
        "env_nested_delimiter": "__",
    }

    root: Path = Field(default_factory=Path.cwd)
    config_path: Path | None = None

    # --- CLI flags ---
    json_output: bool = False
    verbose: bool = False
    log_json: bool = False

    # --- TOML sections ---
    storage: StorageConfig = Field(default_factory=StorageConfig)
    bootstrap: BootstrapConfig = Field(default_factory=BootstrapConfig)
    client: ClientConfig = Field(default_factory=ClientConfig)
    backend: BackendConfig = Field(default_factory=BackendConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Insert TOML source between env vars and defaults."""
        toml_path = getattr(_tls, "toml_path", None)
        return (
            init_settings,
            env_settings,
            TomlSettingsSource(settings_cls, toml_path),
        )

    @classmethod
    def from_cli(
        cls,
        *,
        config_path: str | None = None,
        root: Path | None = None,
        **cli_flags: Any,
    ) -> FolkSettings:
        """Construct settings from a CLI invocation (or a test).

        Discovers ``folkstore.toml`` via walk-up (or explicit *config_path*),
        resolves *root* from the config file's location, and merges
        CLI flags as highest-priority overrides.
        """
        toml_path: Path | None = None
        if config_path:
            p = Path(config_path)
            if p.is_file():
                toml_path = p
        else:
            toml_path = find_config(root)

        resolved_root = root
        if resolved_root is None:
            resolved_root = config_root(toml_path) if toml_path else Path.cwd()

        _tls.toml_path = toml_path
        try:
            return cls(root=resolved_root, config_path=toml_path, **cli_flags)
        finally:
            _tls.toml_path = None

    @property
    def storage_dir(self) -> Path:
        """Directory holding the store file."""
        directory = self.storage.directory
        if directory is None:
            return self.root / STORE_DIRNAME
        return directory if directory.is_absolute() else self.root / directory

    @property
    def bootstrap_location(self) -> str:
        """Bootstrap URL, or an absolute path for file locations."""
        location = self.bootstrap.location
        if location.startswith(("http://", "https://")):
            return location
        path = Path(location)
        return str(path if path.is_absolute() else self.root / path)
