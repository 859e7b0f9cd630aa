"""serve — run the HTTP API under uvicorn."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from itemctl.commands._base import ItemCommand

if TYPE_CHECKING:
    from itemctl.commands._context import AppContext


@click.command(
    cls=ItemCommand,
    examples="""\
  # Serve on the configured address (default 127.0.0.1:8080)
  itemctl serve

  # Listen on all interfaces
  itemctl serve --host 0.0.0.0 --port 9000""",
)
@click.option("--host", default=None, help="Bind address (default from config).")
@click.option("--port", default=None, type=click.IntRange(1, 65535), help="Listen port.")
@click.pass_obj
def serve(app: AppContext, host: str | None, port: int | None) -> None:
    """Serve the item REST API over HTTP."""
    import uvicorn

    from itemctl.api import create_app

    server = app.settings.server
    http_app = create_app(app.service)
    # log_config=None keeps the structlog handler installed by AppContext.
    uvicorn.run(
        http_app,
        host=host or server.host,
        port=port or server.port,
        log_config=None,
    )
