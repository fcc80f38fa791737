"""Command: validate board files and the board store."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from obzctl.commands._base import ObzCommand

if TYPE_CHECKING:
    from obzctl.commands._context import AppContext


@click.command(
    cls=ObzCommand,
    examples="""\
  obzctl check boards/core.obf
  obzctl check exports/ --errors-only
  obzctl check --stored
  obzctl --json check core.obz --min-severity error""",
)
@click.argument("paths", nargs=-1, type=click.Path(exists=True, path_type=Path))
@click.option("--stored", is_flag=True, help="Also check every stored board.")
@click.option(
    "--min-severity",
    type=click.Choice(["warning", "error"]),
    default="warning",
    help="Hide issues below this severity.",
)
@click.option("--errors-only", is_flag=True, help="Shortcut for --min-severity error.")
@click.pass_obj
def check(
    app: AppContext,
    paths: tuple[Path, ...],
    stored: bool,
    min_severity: str,
    errors_only: bool,
) -> None:
    """Check .obf/.obz files (directories are searched) for problems."""
    from obzctl.services.check import CheckService

    if not paths and not stored:
        raise click.UsageError("Give at least one PATH or --stored.")
    threshold = "error" if errors_only else min_severity
    app.emit(CheckService(app.workspace).check(paths, stored=stored, min_severity=threshold))
