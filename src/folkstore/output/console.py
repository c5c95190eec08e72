"""Rich Console factory and theme for folkstore output.

Consoles render to a StringIO buffer so formatting stays a pure
``-> str`` function. In non-TTY environments (tests, pipes) Rich drops
color codes on its own.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

FOLK_THEME = Theme(
    {
        "folk.ok": "bold green",
        "folk.error": "bold red",
        "folk.op": "bold cyan",
        "folk.key": "dim",
    }
)


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    return Console(
        file=StringIO(),
        theme=FOLK_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()
