"""Command group: pack stored boards into ``.obz`` files and unpack them."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import click

from obzctl.commands._base import ObzGroup

if TYPE_CHECKING:
    from obzctl.commands._context import AppContext


@click.group(
    cls=ObzGroup,
    examples="""\
  obzctl archive pack core food -o core.obz --root core
  obzctl archive pack -o everything.obz
  obzctl archive unpack downloads/communikate.obz
  obzctl archive unpack single.obf --no-save""",
)
def archive() -> None:
    """Read and write OBZ archives."""


@archive.command(
    examples="""\
  obzctl archive pack core food -o core.obz
  obzctl archive pack core food -o core.obz --root food
  obzctl --json archive pack -o all.obz""",
)
@click.argument("board_ids", nargs=-1)
@click.option(
    "-o",
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    required=True,
    help="Archive file to write.",
)
@click.option("--root", default=None, help="Root board id (defaults to the first board).")
@click.pass_obj
def pack(app: AppContext, board_ids: tuple[str, ...], output: Path, root: str | None) -> None:
    """Pack stored boards into an archive; all boards when none are named."""
    from obzctl.services.archive import ArchiveService

    app.emit(ArchiveService(app.workspace).pack(list(board_ids), output, root=root))


@archive.command(
    examples="""\
  obzctl archive unpack core.obz
  obzctl -v archive unpack core.obz --no-save""",
)
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--save/--no-save", default=True, help="Store the unpacked boards.")
@click.pass_obj
def unpack(app: AppContext, path: Path, save: bool) -> None:
    """Read an .obz (or .obf) file and store its boards."""
    from obzctl.services.archive import ArchiveService

    app.emit(ArchiveService(app.workspace).unpack(path, save=save))
