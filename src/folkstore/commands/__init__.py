"""Subcommand modules for folkstore.

register_commands() uses deferred imports to keep ``folkstore --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all commands on the root CLI group."""
    from folkstore.commands.counts import counts
    from folkstore.commands.ping import ping
    from folkstore.commands.seed import seed

    cli.add_command(seed)
    cli.add_command(counts)
    cli.add_command(ping)
