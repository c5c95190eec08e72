"""CommandResult and its Rich/JSON renderings.

Every CLI command produces one CommandResult: the reply data on success,
or the error message and its kind on failure.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel
from rich.text import Text

from folkstore.output.console import create_console, get_output


class CommandError(BaseModel):
    model_config = {"frozen": True}

    kind: str
    message: str


class CommandResult(BaseModel):
    """Outcome of one CLI command."""

    model_config = {"frozen": True}

    ok: bool
    op: str
    data: Any = None
    error: CommandError | None = None


def _field(console: Any, key: str, value: Any, indent: int = 2) -> None:
    pad = " " * indent
    if isinstance(value, dict):
        console.print(Text(f"{pad}{key}:", style="folk.key"))
        for sub_key, sub_value in value.items():
            _field(console, sub_key, sub_value, indent + 2)
        return
    line = Text(f"{pad}{key}: ", style="folk.key")
    line.append(str(value))
    console.print(line)


def format_result(result: CommandResult, *, json_output: bool = False) -> str:
    """Format a CommandResult for display."""
    if json_output:
        return result.model_dump_json(indent=2, exclude_none=True)

    console = create_console()
    if result.ok:
        console.print(Text("OK", style="folk.ok"), Text(f"  {result.op}", style="folk.op"))
        if isinstance(result.data, dict):
            for key, value in result.data.items():
                _field(console, key, value)
        elif result.data is not None:
            _field(console, "result", result.data)
    else:
        kind = result.error.kind if result.error else "Error"
        message = result.error.message if result.error else "Unknown error"
        console.print(Text("ERROR", style="folk.error"), Text(f"  {result.op}", style="folk.op"))
        _field(console, kind, message)
    return get_output(console).rstrip("\n")
