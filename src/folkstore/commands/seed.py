"""seed — load the bootstrap document into an empty store."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import click

from folkstore.commands._base import FolkCommand
from folkstore.commands._context import AppContext

if TYPE_CHECKING:
    from folkstore.client.client import DatabaseClient


async def _seed(client: DatabaseClient) -> dict[str, Any]:
    result = await client.seed_data()
    return result.model_dump(mode="json")


@click.command(
    cls=FolkCommand,
    examples="""\
  # Seed from the configured bootstrap location
  folkstore seed

  # Seed from an explicit file or URL
  folkstore seed --source data/init-data.json
  folkstore seed --source https://example.org/data/init-data.json""",
)
@click.option("--source", default=None, help="Bootstrap file path or http(s) URL.")
@click.pass_obj
def seed(app: AppContext, source: str | None) -> None:
    """Seed the store once; later runs report the existing data."""
    bootstrap = None
    if source is not None:
        from folkstore.infrastructure.bootstrap import source_for_location

        bootstrap = source_for_location(source, timeout_sec=app.settings.bootstrap.timeout_sec)
    app.emit(app.exchange("seed", _seed, source=bootstrap))
