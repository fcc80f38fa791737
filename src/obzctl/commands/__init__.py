"""Subcommand modules for obzctl.

register_commands() imports command modules inside the function so
importing the package stays cheap.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Attach the ``board`` and ``archive`` groups and the ``check`` command."""
    from obzctl.commands.archive import archive
    from obzctl.commands.board import board
    from obzctl.commands.check import check

    cli.add_command(board)
    cli.add_command(archive)
    cli.add_command(check)
