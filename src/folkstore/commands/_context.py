"""AppContext — shared Click context for all commands.

Created once by the root CLI group and passed to subcommands via
``@click.pass_obj``. Each command runs one exchange: start an in-process
backend, connect a client, make the call, shut both down.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any

import click

from folkstore.errors import FolkstoreError
from folkstore.output.formatters import CommandError, CommandResult, format_result

if TYPE_CHECKING:
    from folkstore.client.client import DatabaseClient
    from folkstore.config.settings import FolkSettings
    from folkstore.infrastructure.bootstrap import BootstrapSource

ClientCall = Callable[["DatabaseClient"], Awaitable[Any]]


class AppContext:
    """Shared context flowing through Click's command hierarchy.

    Nothing touches the store until a command actually runs, so
    ``--help`` and ``--version`` stay free of I/O.
    """

    def __init__(self, settings: FolkSettings) -> None:
        self.settings = settings

        from folkstore.config.logging import configure_logging

        configure_logging(
            verbose=settings.verbose,
            log_json=settings.log_json,
            trace_messages=settings.logging.trace_messages,
        )

    def exchange(
        self,
        op: str,
        call: ClientCall,
        *,
        source: BootstrapSource | None = None,
    ) -> CommandResult:
        """Run *call* against a fresh backend and wrap the outcome."""
        return asyncio.run(self._exchange(op, call, source))

    async def _exchange(
        self,
        op: str,
        call: ClientCall,
        source: BootstrapSource | None,
    ) -> CommandResult:
        from folkstore.client.client import DatabaseClient
        from folkstore.server.multiplexer import Backend

        backend = Backend.from_settings(self.settings, source=source)
        try:
            async with DatabaseClient.connect(
                backend, timeout_ms=self.settings.client.request_timeout_ms
            ) as client:
                data = await call(client)
        except FolkstoreError as exc:
            error = CommandError(kind=type(exc).__name__, message=str(exc))
            return CommandResult(ok=False, op=op, error=error)
        finally:
            await backend.aclose()
        return CommandResult(ok=True, op=op, data=data)

    def emit(self, result: CommandResult) -> None:
        """Print a result; failures go to stderr with exit code 1."""
        output = format_result(result, json_output=self.settings.json_output)
        if result.ok:
            click.echo(output)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
