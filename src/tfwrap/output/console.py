"""Buffered Rich console used by the human-readable renderers.

Renderers draw into an in-memory console and hand back plain text, so
``format_result`` stays a ``ServiceResult -> str`` function and the CLI
decides where the text goes. Rich drops colour codes on its own when the
buffer is not a terminal, which covers pipes and CliRunner.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

# Status, field labels, and the parts of a variable row.
TFWRAP_THEME = Theme(
    {
        "tfw.ok": "bold green",
        "tfw.error": "bold red",
        "tfw.op": "bold cyan",
        "tfw.key": "dim",
        "tfw.name": "bold blue",
        "tfw.path": "dim",
        "tfw.default": "magenta",
        "tfw.doc": "italic dim",
    }
)

_DEFAULT_WIDTH = 120


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """A themed console writing into a fresh buffer.

    A fixed default width keeps tables identical between terminals and
    test runs.
    """
    return Console(
        file=StringIO(),
        theme=TFWRAP_THEME,
        no_color=no_color,
        highlight=False,
        width=width or _DEFAULT_WIDTH,
    )


def get_output(console: Console) -> str:
    """Everything rendered so far on a :func:`create_console` console."""
    buffer = console.file
    if not isinstance(buffer, StringIO):
        msg = "console was not created by create_console()"
        raise TypeError(msg)
    return buffer.getvalue()
