"""AppContext — shared Click context for all commands.

Created once by the root CLI group and passed to subcommands via
``@click.pass_obj``. The runtime (database, worker pool, service) is built
lazily so ``--help`` and ``--version`` never touch the database.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import click

from itemctl.output.formatters import OutputSettings, format_result

if TYPE_CHECKING:
    from itemctl.config.settings import ItemSettings
    from itemctl.infrastructure.runtime import Runtime
    from itemctl.services.items import ItemService
    from itemctl.services.result import ServiceResult


class AppContext:
    """Shared context flowing through Click's command hierarchy."""

    def __init__(self, settings: ItemSettings) -> None:
        self.settings = settings
        self._runtime: Runtime | None = None

        from itemctl.config.logging import configure_logging

        configure_logging(verbose=settings.verbose, log_json=settings.log_json)

    @property
    def runtime(self) -> Runtime:
        """The process runtime (created lazily on first access)."""
        if self._runtime is None:
            from itemctl.infrastructure.runtime import Runtime

            self._runtime = Runtime(self.settings)
        return self._runtime

    @property
    def service(self) -> ItemService:
        return self.runtime.service

    def override_processor(self, **changes: Any) -> None:
        """Apply per-command processor overrides before the runtime exists.

        ``None`` values are ignored so unset options keep configured values.
        """
        updates = {k: v for k, v in changes.items() if v is not None}
        if not updates:
            return
        if self._runtime is not None:
            msg = "processor settings cannot change after the runtime is built"
            raise RuntimeError(msg)
        processor = self.settings.processor.model_validate(
            {**self.settings.processor.model_dump(), **updates}
        )
        self.settings = self.settings.model_copy(update={"processor": processor})

    def close(self) -> None:
        """Release the runtime, if one was built."""
        if self._runtime is not None:
            self._runtime.close()
            self._runtime = None

    def emit(self, result: ServiceResult) -> None:
        """Format and output a ServiceResult with correct exit semantics.

        * Success: writes to stdout; warnings go to stderr in text mode.
        * Failure: writes to stderr, exits with code 1.
        """
        settings = OutputSettings(
            json_output=self.settings.json_output,
            quiet=self.settings.quiet,
            verbose=self.settings.verbose,
        )
        output = format_result(result, settings=settings)
        if result.ok:
            click.echo(output)
            if not settings.json_output:
                for warning in result.warnings:
                    click.echo(f"WARNING: {warning}", err=True)
        else:
            click.echo(output, err=True)
            raise SystemExit(1)
