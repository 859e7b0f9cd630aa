"""Select the output mode for a ServiceResult: JSON, quiet, or rich text."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from itemctl.output.renderers import render_quiet, render_result

if TYPE_CHECKING:
    from itemctl.services.result import ServiceResult


@dataclass(frozen=True)
class OutputSettings:
    json_output: bool = False
    quiet: bool = False
    verbose: bool = False


def format_result(result: ServiceResult, *, settings: OutputSettings | None = None) -> str:
    """Format a ServiceResult for display.

    ``--json`` wins over ``--quiet``; quiet mode prints ids only.
    """
    settings = settings or OutputSettings()
    if settings.json_output:
        return result.model_dump_json(indent=2)
    if settings.quiet:
        return render_quiet(result)
    return render_result(result, verbose=settings.verbose)
