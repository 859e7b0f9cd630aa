"""Rich Console factory and theme for itemctl output.

Consoles render into a StringIO buffer so renderers keep a
``ServiceResult -> str`` contract. Outside a terminal (tests, pipes) Rich
drops color codes on its own.
"""

from __future__ import annotations

from io import StringIO

from rich.console import Console
from rich.theme import Theme

from itemctl.domain.items import DEFAULT_STATUS, PROCESSED

ITEM_THEME = Theme(
    {
        "item.ok": "bold green",
        "item.error": "bold red",
        "item.warning": "bold yellow",
        "item.op": "bold cyan",
        "item.key": "dim",
        "item.id": "bold blue",
        "item.name": "bold",
        "item.status.new": "yellow",
        "item.status.processed": "green",
    }
)

_STATUS_STYLES: dict[str, str] = {
    DEFAULT_STATUS: "item.status.new",
    PROCESSED: "item.status.processed",
}


def create_console(*, no_color: bool = False, width: int | None = None) -> Console:
    """Create a Console that renders to a StringIO buffer."""
    return Console(
        file=StringIO(),
        theme=ITEM_THEME,
        no_color=no_color,
        highlight=False,
        width=width or 120,
    )


def get_output(console: Console) -> str:
    """Extract rendered text from a StringIO-backed Console."""
    assert isinstance(console.file, StringIO)
    return console.file.getvalue()


def style_for_status(status: str) -> str:
    """Return the Rich style name for an item status (empty if unstyled)."""
    return _STATUS_STYLES.get(status, "")
