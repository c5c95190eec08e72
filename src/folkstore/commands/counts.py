"""counts — report row counts for partners, projects, and artists."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import click

from folkstore.commands._base import FolkCommand
from folkstore.commands._context import AppContext

if TYPE_CHECKING:
    from folkstore.client.client import DatabaseClient


async def _counts(client: DatabaseClient) -> dict[str, Any]:
    return (await client.query_counts()).model_dump()


@click.command(
    cls=FolkCommand,
    examples="""\
  folkstore counts
  folkstore --json counts""",
)
@click.pass_obj
def counts(app: AppContext) -> None:
    """Show how many partners, projects, and artists are stored."""
    app.emit(app.exchange("counts", _counts))
