"""Rich Console factory and theme for obzctl output.

Consoles render into a StringIO buffer so renderers return plain strings.
Rich drops color codes on its own when output is not a terminal (tests,
pipes).
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

OBZ_THEME = Theme(
    {
        "obz.ok": "bold green",
        "obz.error": "bold red",
        "obz.warning": "bold yellow",
        "obz.op": "bold cyan",
        "obz.key": "dim",
        "obz.id": "bold blue",
        "obz.path": "dim",
        "obz.name": "bold",
        "obz.empty": "dim",
    }
)


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Console writing to an in-memory buffer (120 columns unless *width*)."""
    return Console(
        file=StringIO(),
        theme=OBZ_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Text rendered so far by a console from :func:`create_console`."""
    buffer = console.file
    if not isinstance(buffer, StringIO):
        raise TypeError("console was not created by create_console()")
    return buffer.getvalue()
