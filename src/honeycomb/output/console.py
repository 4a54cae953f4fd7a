"""Rich Console factory and theme for honeycomb output.

Consoles render into a StringIO buffer so formatters keep a plain
``-> str`` contract.  Rich drops color codes when it sees no terminal,
which covers tests and pipes.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

HB_THEME = Theme(
    {
        "hb.ok": "bold green",
        "hb.error": "bold red",
        "hb.warning": "bold yellow",
        "hb.op": "bold cyan",
        "hb.key": "dim",
        "hb.policy": "bold blue",
        "hb.path": "dim",
        "hb.span": "magenta",
        "hb.action.inserted": "green",
        "hb.action.removed": "yellow",
        "hb.status.found": "green",
        "hb.status.not_found": "dim",
    }
)


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer."""
    return Console(
        file=StringIO(),
        theme=HB_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()


def style_for(prefix: str, value: str) -> str:
    """Theme style for an enum-like *value*, e.g. ``style_for("action", "removed")``."""
    name = f"hb.{prefix}.{value}"
    return name if name in HB_THEME.styles else ""
