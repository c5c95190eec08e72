"""ping — wait for the backend's Ready greeting."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import click

from folkstore.commands._base import FolkCommand
from folkstore.commands._context import AppContext

if TYPE_CHECKING:
    from folkstore.client.client import DatabaseClient


async def _ping(client: DatabaseClient) -> dict[str, Any]:
    return {"ready": await client.ping()}


@click.command(cls=FolkCommand, examples="  folkstore ping")
@click.pass_obj
def ping(app: AppContext) -> None:
    """Confirm the backend greets a new connection as ready."""
    app.emit(app.exchange("ping", _ping))
