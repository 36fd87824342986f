"""Rich Console factory and theme for deriva output.

Consoles render to a StringIO buffer so formatters keep a
``format_result() -> str`` contract.  In non-TTY environments (tests,
pipes) Rich disables color codes automatically.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

DERIVA_THEME = Theme(
    {
        "deriva.ok": "bold green",
        "deriva.error": "bold red",
        "deriva.warning": "bold yellow",
        "deriva.op": "bold cyan",
        "deriva.key": "dim",
        "deriva.type": "bold blue",
        "deriva.law": "magenta",
        "deriva.kind.exact": "green",
        "deriva.kind.absent": "dim",
        "deriva.kind.nested": "cyan",
        "deriva.kind.recursive": "red",
    }
)


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer."""
    return Console(
        file=StringIO(),
        theme=DERIVA_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()


def style_for_kind(kind: str) -> str:
    """Rich style name for a field classification kind."""
    return f"deriva.kind.{kind}"
