"""Rich console and theme for result output.

Consoles render into a StringIO buffer so renderers can return plain
strings. Color is disabled automatically when output is not a TTY.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

TASKNAV_THEME = Theme(
    {
        "nav.ok": "bold green",
        "nav.error": "bold red",
        "nav.warning": "bold yellow",
        "nav.op": "bold cyan",
        "nav.key": "dim",
        "nav.line": "bold blue",
        "nav.path": "underline",
        "nav.content": "bold",
    }
)


def create_console(*, no_color: bool = False, width: int = 120) -> Console:
    return Console(
        file=StringIO(),
        theme=TASKNAV_THEME,
        no_color=no_color,
        highlight=False,
        width=width,
    )


def get_output(console: Console) -> str:
    """Return everything *console* has rendered so far."""
    buffer = console.file
    if not isinstance(buffer, StringIO):
        msg = "Console is not backed by a StringIO buffer"
        raise TypeError(msg)
    return buffer.getvalue()
