"""Locate folkstore.toml.

Each directory from the start upwards is checked for ``folkstore.toml``
and then ``.folkstore/folkstore.toml`` (config kept beside the store).
``FOLKSTORE_CONFIG`` short-circuits the search; ``--config`` bypasses it.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from pathlib import Path

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "folkstore.toml"
CONFIG_ENV_VAR = "FOLKSTORE_CONFIG"
STORE_DIRNAME = ".folkstore"


def config_candidates(directory: Path) -> tuple[Path, Path]:
    """Files checked in one directory, highest priority first."""
    return directory / CONFIG_FILENAME, directory / STORE_DIRNAME / CONFIG_FILENAME


def _walk_up(start: Path) -> Iterator[Path]:
    current = start.resolve()
    yield current
    yield from current.parents


def find_config(start: Path | None = None) -> Path | None:
    """Return the config file in effect for *start* (default: cwd), if any."""
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        path = Path(env_path).expanduser()
        if path.is_file():
            return path
        logger.warning("%s=%s is not a file; ignoring config", CONFIG_ENV_VAR, env_path)
        return None

    for directory in _walk_up(start or Path.cwd()):
        for candidate in config_candidates(directory):
            if candidate.is_file():
                return candidate
    return None


def config_root(config_path: Path) -> Path:
    """Directory that anchors relative paths for *config_path*.

    A config inside ``.folkstore/`` belongs to the directory holding the store
    directory, not to the store directory itself.
    """
    parent = config_path.parent
    return parent.parent if parent.name == STORE_DIRNAME else parent
