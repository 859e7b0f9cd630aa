"""Subcommand modules for itemctl.

register_commands() uses deferred imports to keep ``itemctl --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register the ``item`` group and the standalone commands on the root group."""
    from itemctl.commands.item import item
    from itemctl.commands.process import process
    from itemctl.commands.serve import serve

    cli.add_command(item)
    cli.add_command(process)
    cli.add_command(serve)
