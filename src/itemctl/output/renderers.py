"""Operation-specific Rich renderers for ServiceResult.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from itemctl.output.console import create_console, get_output, style_for_status

if TYPE_CHECKING:
    from rich.console import Console

    from itemctl.services.result import ServiceResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich."""
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Render minimal output for ``--quiet`` mode."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op}: {msg}"

    items = result.data.get("items")
    if isinstance(items, list):
        return "\n".join(str(item["id"]) for item in items if item.get("id") is not None)
    if result.data.get("id") is not None:
        return str(result.data["id"])
    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    console.print(Text("OK", style="item.ok"), Text(f"  {result.op}", style="item.op"))


def _field(console: Console, key: str, value: Any) -> None:
    k = Text(f"  {key}: ", style="item.key")
    if key == "id":
        v = Text(str(value), style="item.id")
    elif key == "name":
        v = Text(str(value), style="item.name")
    elif key == "status":
        v = Text(str(value), style=style_for_status(str(value)))
    else:
        v = Text(str(value))
    console.print(k, v, sep="")


def _render_meta(console: Console, result: ServiceResult) -> None:
    if not result.meta:
        return
    console.print(Text("  meta:", style="dim"))
    for k, v in result.meta.items():
        console.print(f"    {k}: {v}")


def _items_table(items: list[dict[str, Any]]) -> Table:
    table = Table(show_header=True, header_style="bold", box=None, pad_edge=False)
    table.add_column("ID", style="item.id", no_wrap=True)
    table.add_column("Name", style="item.name")
    table.add_column("Status")
    table.add_column("Email")
    table.add_column("Description", overflow="fold")
    for item in items:
        status = str(item.get("status", ""))
        table.add_row(
            str(item.get("id", "")),
            str(item.get("name", "")),
            Text(status, style=style_for_status(status)),
            str(item.get("email", "")),
            str(item.get("description", "")),
        )
    return table


# ── Renderers ─────────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool) -> None:
    msg = result.error.message if result.error else "Unknown error"
    console.print(
        Text("ERROR", style="item.error"),
        Text(f"  {result.op}", style="item.op"),
        Text(f"  {msg}"),
    )
    if verbose and result.error and result.error.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in result.error.detail.items():
            console.print(f"    {k}: {v}")


def _render_item(result: ServiceResult, console: Console, *, verbose: bool) -> None:
    _status_line(console, result)
    for key in ("id", "name", "status", "email", "description"):
        if key in result.data:
            _field(console, key, result.data[key])


def _render_items(result: ServiceResult, console: Console, *, verbose: bool) -> None:
    _status_line(console, result)
    items = result.data.get("items", [])
    if not items:
        console.print(Text("  No items.", style="dim"))
    else:
        console.print(_items_table(items))
    console.print(Text(f"  count: {result.data.get('count', len(items))}", style="item.key"))
    if verbose:
        _render_meta(console, result)


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool) -> None:
    _status_line(console, result)
    for key, value in result.data.items():
        _field(console, key, value)
    for warning in result.warnings:
        console.print(Text(f"  WARNING: {warning}", style="item.warning"))
    if verbose:
        _render_meta(console, result)


_OP_RENDERERS: dict[str, Callable[..., None]] = {
    "get_item": _render_item,
    "create_item": _render_item,
    "update_item": _render_item,
    "list_items": _render_items,
    "process_items": _render_items,
}
