"""Command: mark every stored item as PROCESSED."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from itemctl.commands._base import ItemCommand

if TYPE_CHECKING:
    from itemctl.commands._context import AppContext


@click.command(
    cls=ItemCommand,
    examples="""\
  itemctl process
  itemctl process --delay-ms 0 --workers 8
  itemctl --json process --timeout 30""",
)
@click.option(
    "--delay-ms",
    type=click.IntRange(min=0),
    default=None,
    help="Per-item delay before fetching (default from config: 100).",
)
@click.option("--workers", type=click.IntRange(min=1), default=None, help="Worker pool size.")
@click.option(
    "--timeout",
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help="Seconds to wait for the batch before giving up.",
)
@click.pass_obj
def process(
    app: AppContext,
    delay_ms: int | None,
    workers: int | None,
    timeout: float | None,
) -> None:
    """Transition every stored item to PROCESSED in parallel."""
    app.override_processor(delay_ms=delay_ms, max_workers=workers)
    wait = timeout if timeout is not None else app.settings.processor.timeout
    app.emit(app.service.process(timeout=wait))
