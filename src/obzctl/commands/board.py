"""Command group: stored boards and their buttons, images, and sounds."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

import click

from obzctl.commands._base import ObzGroup

if TYPE_CHECKING:
    from obzctl.commands._context import AppContext
    from obzctl.services.board import BoardService


def _service(app: AppContext) -> BoardService:
    from obzctl.services.board import BoardService

    return BoardService(app.workspace)


def _parse_assignments(pairs: tuple[str, ...]) -> dict[str, Any]:
    """``KEY=VALUE`` pairs; VALUE is parsed as JSON when possible."""
    fields: dict[str, Any] = {}
    for pair in pairs:
        key, sep, raw = pair.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"expected KEY=VALUE, got {pair!r}", param_hint="--set")
        try:
            fields[key] = json.loads(raw)
        except ValueError:
            fields[key] = raw
    return fields


def _collect(**options: Any) -> dict[str, Any]:
    return {key: value for key, value in options.items() if value is not None}


_BOARD_EXAMPLES = """\
  obzctl board create "Core Words" --rows 4 --columns 6
  obzctl board list
  obzctl board show core
  obzctl board button add core --label yes --background-color "rgb(0, 200, 0)"
  obzctl board image add core --url https://example.com/yes.png --id img-yes
  obzctl board resize core --rows 5"""


@click.group(cls=ObzGroup, examples=_BOARD_EXAMPLES)
def board() -> None:
    """Create, inspect, and edit stored boards."""


# ---------------------------------------------------------------------------
# Boards
# ---------------------------------------------------------------------------


@board.command(
    examples="""\
  obzctl board create "Core Words"
  obzctl board create "Food" --id food --rows 4 --columns 5 --locale fr"""
)
@click.argument("name")
@click.option("--id", "board_id", default=None, help="Board id (generated when omitted).")
@click.option("--locale", default=None, help="Locale tag; defaults to [board] locale.")
@click.option("--rows", type=click.IntRange(min=1), default=None, help="Grid rows.")
@click.option("--columns", type=click.IntRange(min=1), default=None, help="Grid columns.")
@click.option("--description", "description_html", default=None, help="Description HTML.")
@click.option("--url", default=None, help="Canonical URL of the board.")
@click.pass_obj
def create(
    app: AppContext,
    name: str,
    board_id: str | None,
    locale: str | None,
    rows: int | None,
    columns: int | None,
    description_html: str | None,
    url: str | None,
) -> None:
    """Create an empty board."""
    app.emit(
        _service(app).create(
            name,
            board_id=board_id,
            locale=locale,
            rows=rows,
            columns=columns,
            description_html=description_html,
            url=url,
        )
    )


@board.command(examples="  obzctl board show core\n  obzctl -v board show core")
@click.argument("board_id")
@click.pass_obj
def show(app: AppContext, board_id: str) -> None:
    """Show a board and its grid."""
    app.emit(_service(app).show(board_id))


@board.command(name="list", examples="  obzctl board list\n  obzctl -q board list")
@click.pass_obj
def list_cmd(app: AppContext) -> None:
    """List stored boards."""
    app.emit(_service(app).list())


@board.command(examples="  obzctl board delete food")
@click.argument("board_id")
@click.pass_obj
def delete(app: AppContext, board_id: str) -> None:
    """Delete a stored board."""
    app.emit(_service(app).delete(board_id))


@board.command(
    examples="  obzctl board resize core --rows 5\n  obzctl board resize core --columns 2"
)
@click.argument("board_id")
@click.option("--rows", type=click.IntRange(min=1), default=None)
@click.option("--columns", type=click.IntRange(min=1), default=None)
@click.pass_obj
def resize(app: AppContext, board_id: str, rows: int | None, columns: int | None) -> None:
    """Resize the grid, keeping the top-left cells."""
    if rows is None and columns is None:
        raise click.UsageError("Give --rows and/or --columns.")
    app.emit(_service(app).resize(board_id, rows=rows, columns=columns))


# ---------------------------------------------------------------------------
# Buttons
# ---------------------------------------------------------------------------


def _button_options(func: Any) -> Any:
    options = [
        click.option("--label", default=None),
        click.option("--vocalization", default=None, help="Text spoken instead of the label."),
        click.option("--image-id", default=None),
        click.option("--sound-id", default=None),
        click.option("--background-color", default=None, help="rgb(r, g, b) or rgba(r, g, b, a)"),
        click.option("--border-color", default=None),
        click.option("--action", default=None, help="e.g. :speak, :clear, :home"),
        click.option("--load-board", "load_board_id", default=None, help="Board id to open."),
        click.option(
            "--set", "assignments", multiple=True, metavar="KEY=VALUE", help="Any other field."
        ),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _button_fields(
    assignments: tuple[str, ...], load_board_id: str | None, **options: Any
) -> dict[str, Any]:
    fields = _collect(**options)
    if load_board_id is not None:
        fields["load_board"] = {"id": load_board_id}
    fields.update(_parse_assignments(assignments))
    return fields


@board.group(
    cls=ObzGroup,
    examples="""\
  obzctl board button add core --label hello
  obzctl board button update core btn1 --label hi --set top=0.1
  obzctl board button remove core btn1""",
)
def button() -> None:
    """Add, update, and remove buttons."""


@button.command(
    name="add",
    examples="""\
  obzctl board button add core --label yes
  obzctl board button add core --id more --label more --load-board food""",
)
@click.argument("board_id")
@click.option("--id", "button_id", default=None, help="Button id (generated when omitted).")
@_button_options
@click.pass_obj
def button_add(
    app: AppContext,
    board_id: str,
    button_id: str | None,
    assignments: tuple[str, ...],
    load_board_id: str | None,
    **options: Any,
) -> None:
    """Add a button in the first empty cell."""
    fields = _button_fields(assignments, load_board_id, id=button_id, **options)
    app.emit(_service(app).add_button(board_id, fields))


@button.command(
    name="update",
    examples="""\
  obzctl board button update core yes --label "yes please"
  obzctl board button update core yes --clear image_id""",
)
@click.argument("board_id")
@click.argument("button_id")
@_button_options
@click.option("--clear", "cleared", multiple=True, metavar="FIELD", help="Remove a field.")
@click.pass_obj
def button_update(
    app: AppContext,
    board_id: str,
    button_id: str,
    assignments: tuple[str, ...],
    load_board_id: str | None,
    cleared: tuple[str, ...],
    **options: Any,
) -> None:
    """Change fields of an existing button."""
    changes = _button_fields(assignments, load_board_id, **options)
    changes.update(dict.fromkeys(cleared))
    if not changes:
        raise click.UsageError("Nothing to change.")
    app.emit(_service(app).update_button(board_id, button_id, changes))


@button.command(name="remove", examples="  obzctl board button remove core yes")
@click.argument("board_id")
@click.argument("button_id")
@click.pass_obj
def button_remove(app: AppContext, board_id: str, button_id: str) -> None:
    """Remove a button and clear its grid cells."""
    app.emit(_service(app).remove_button(board_id, button_id))


# ---------------------------------------------------------------------------
# Images and sounds
# ---------------------------------------------------------------------------


@board.group(
    cls=ObzGroup,
    examples="""\
  obzctl board image add core --url https://example.com/cat.png
  obzctl board image add core --symbol-set arasaac --symbol-filename cat.png
  obzctl board image remove core img1""",
)
def image() -> None:
    """Add and remove images."""


@image.command(name="add", examples="  obzctl board image add core --path images/cat.png")
@click.argument("board_id")
@click.option("--id", "image_id", default=None)
@click.option("--url", default=None)
@click.option("--data-url", default=None)
@click.option("--path", default=None, help="Path of the image inside an .obz archive.")
@click.option("--content-type", default=None)
@click.option("--width", type=click.IntRange(min=1), default=None)
@click.option("--height", type=click.IntRange(min=1), default=None)
@click.option("--symbol-set", default=None)
@click.option("--symbol-filename", default=None)
@click.pass_obj
def image_add(
    app: AppContext,
    board_id: str,
    image_id: str | None,
    symbol_set: str | None,
    symbol_filename: str | None,
    **options: Any,
) -> None:
    """Add an image (needs a url, data url, path, or symbol)."""
    fields = _collect(id=image_id, **options)
    if symbol_set or symbol_filename:
        fields["symbol"] = {"set": symbol_set, "filename": symbol_filename}
    app.emit(_service(app).add_image(board_id, fields))


@image.command(name="remove", examples="  obzctl board image remove core img1")
@click.argument("board_id")
@click.argument("image_id")
@click.pass_obj
def image_remove(app: AppContext, board_id: str, image_id: str) -> None:
    """Remove an image no button uses."""
    app.emit(_service(app).remove_image(board_id, image_id))


@board.group(
    cls=ObzGroup,
    examples="""\
  obzctl board sound add core --url https://example.com/yes.mp3 --duration 1.2
  obzctl board sound remove core snd1""",
)
def sound() -> None:
    """Add and remove sounds."""


@sound.command(name="add", examples="  obzctl board sound add core --path sounds/yes.mp3")
@click.argument("board_id")
@click.option("--id", "sound_id", default=None)
@click.option("--url", default=None)
@click.option("--data-url", default=None)
@click.option("--path", default=None, help="Path of the sound inside an .obz archive.")
@click.option("--content-type", default=None)
@click.option("--duration", type=click.FloatRange(min=0, min_open=True), default=None)
@click.pass_obj
def sound_add(app: AppContext, board_id: str, sound_id: str | None, **options: Any) -> None:
    """Add a sound (needs a url, data url, or path)."""
    app.emit(_service(app).add_sound(board_id, _collect(id=sound_id, **options)))


@sound.command(name="remove", examples="  obzctl board sound remove core snd1")
@click.argument("board_id")
@click.argument("sound_id")
@click.pass_obj
def sound_remove(app: AppContext, board_id: str, sound_id: str) -> None:
    """Remove a sound no button uses."""
    app.emit(_service(app).remove_sound(board_id, sound_id))
