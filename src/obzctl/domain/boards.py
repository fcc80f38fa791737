"""Board construction and pure mutators.

Every function takes a :class:`~obzctl.domain.schema.Board` and returns a
new one; the input is never modified. Results are re-validated before they
are returned, and any failure surfaces as
:class:`~obzctl.domain.errors.BoardError` (with the
:class:`~obzctl.domain.errors.ValidationError` as ``__cause__`` when the
schema rejected the result).

Partial resources may be given as mappings or as models. A missing or
empty ``id`` gets a generated one. In ``update_*`` changes, a ``None`` value
clears the field.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import BaseModel

from obzctl.domain.errors import BoardError, ValidationError
from obzctl.domain.ids import generate_id, generate_unique_id, is_id_used
from obzctl.domain.schema import Board, Button, Grid, Image, Sound
from obzctl.domain.types import OBF_FORMAT_VERSION
from obzctl.domain.validation import validate_board_or_raise

DEFAULT_BOARD_NAME = "Untitled Board"
DEFAULT_LOCALE = "en"
DEFAULT_ROWS = 3
DEFAULT_COLUMNS = 3

type Partial = Mapping[str, Any] | BaseModel


def _as_dict(value: Partial) -> dict[str, Any]:
    if isinstance(value, BaseModel):
        return value.model_dump()
    return dict(value)


def _commit(payload: dict[str, Any]) -> Board:
    try:
        return validate_board_or_raise(payload)
    except ValidationError as exc:
        raise BoardError(str(exc)) from exc


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------


def create_board(
    name: str,
    *,
    board_id: str | None = None,
    locale: str = DEFAULT_LOCALE,
    rows: int = DEFAULT_ROWS,
    columns: int = DEFAULT_COLUMNS,
    description_html: str | None = None,
    url: str | None = None,
    buttons: Iterable[Partial] = (),
    images: Iterable[Partial] = (),
    sounds: Iterable[Partial] = (),
) -> Board:
    """Create a board with an empty ``rows`` x ``columns`` grid.

    Initial buttons are stored but not placed on the grid.
    """
    payload: dict[str, Any] = {
        "format": OBF_FORMAT_VERSION,
        "id": board_id or generate_id(),
        "locale": locale,
        "name": name,
        "buttons": [_as_dict(b) for b in buttons],
        "images": [_as_dict(i) for i in images],
        "sounds": [_as_dict(s) for s in sounds],
        "grid": {
            "rows": rows,
            "columns": columns,
            "order": [[None] * columns for _ in range(max(rows, 0))],
        },
    }
    if description_html:
        payload["description_html"] = description_html
    if url:
        payload["url"] = url
    return _commit(payload)


def create_board_from_data(data: Mapping[str, Any]) -> Board:
    """Fill in missing required fields around partial board data.

    Missing ``name`` becomes ``"Untitled Board"``; missing ``id``, ``locale``
    and ``grid`` get the :func:`create_board` defaults. Everything else in
    *data* is kept, including ``ext_*`` keys.
    """
    payload = dict(data)
    payload["format"] = OBF_FORMAT_VERSION
    payload["id"] = payload.get("id") or generate_id()
    payload["locale"] = payload.get("locale") or DEFAULT_LOCALE
    payload["name"] = payload.get("name") or DEFAULT_BOARD_NAME
    payload["buttons"] = payload.get("buttons") or []
    payload["images"] = payload.get("images") or []
    payload["sounds"] = payload.get("sounds") or []
    if not payload.get("grid"):
        payload["grid"] = Grid.empty(DEFAULT_ROWS, DEFAULT_COLUMNS).model_dump()
    return _commit(payload)


# ---------------------------------------------------------------------------
# Grid helpers
# ---------------------------------------------------------------------------


def find_first_empty_cell(grid: Grid) -> tuple[int, int] | None:
    """Return ``(row, column)`` of the first ``None`` cell, row-major."""
    for row, column, cell in grid.cells():
        if cell is None:
            return row, column
    return None


def placed_button_ids(board: Board) -> set[str]:
    """IDs of buttons that occupy at least one grid cell."""
    return {cell for _, _, cell in board.grid.cells() if cell is not None}


def unplaced_buttons(board: Board) -> list[Button]:
    """Buttons that exist on the board but have no grid cell."""
    placed = placed_button_ids(board)
    return [button for button in board.buttons if button.id not in placed]


def update_grid(board: Board, *, rows: int | None = None, columns: int | None = None) -> Board:
    """Resize the grid, keeping the overlapping top-left rectangle.

    New cells are empty; cells outside the new bounds are dropped. Buttons
    whose only cell was dropped stay on the board unplaced.
    """
    new_rows = board.grid.rows if rows is None else rows
    new_columns = board.grid.columns if columns is None else columns
    old = board.grid
    order = [
        [
            old.order[r][c] if r < old.rows and c < old.columns else None
            for c in range(new_columns)
        ]
        for r in range(max(new_rows, 0))
    ]
    payload = board.model_dump()
    payload["grid"] = {"rows": new_rows, "columns": new_columns, "order": order}
    return _commit(payload)


# ---------------------------------------------------------------------------
# Buttons
# ---------------------------------------------------------------------------


def add_button(board: Board, button: Partial) -> Board:
    """Append *button* and place it in the first empty cell, if any."""
    data = _as_dict(button)
    button_id = data.get("id")
    if button_id and is_id_used(str(button_id), board.buttons):
        raise BoardError(f'Button ID "{button_id}" is already used')
    data["id"] = str(button_id) if button_id else generate_unique_id(board.buttons)

    payload = board.model_dump()
    payload["buttons"].append(data)
    position = find_first_empty_cell(board.grid)
    if position is not None:
        row, column = position
        payload["grid"]["order"][row][column] = data["id"]
    return _commit(payload)


def update_button(board: Board, button_id: str, changes: Partial) -> Board:
    """Merge *changes* into the button; its ``id`` never changes."""
    return _update_member(board, "buttons", "Button", button_id, changes)


def remove_button(board: Board, button_id: str) -> Board:
    """Remove the button and clear every grid cell that referenced it."""
    if not is_id_used(button_id, board.buttons):
        raise BoardError(f'Button with ID "{button_id}" not found')
    payload = board.model_dump()
    payload["buttons"] = [b for b in payload["buttons"] if b["id"] != button_id]
    payload["grid"]["order"] = [
        [None if cell == button_id else cell for cell in row] for row in payload["grid"]["order"]
    ]
    return _commit(payload)


# ---------------------------------------------------------------------------
# Images and sounds
# ---------------------------------------------------------------------------


def _add_member(board: Board, key: str, kind: str, item: Partial) -> Board:
    existing: list[Image] | list[Sound] = getattr(board, key)
    data = _as_dict(item)
    item_id = data.get("id")
    if item_id and is_id_used(str(item_id), existing):
        raise BoardError(f'{kind} ID "{item_id}" is already used')
    data["id"] = str(item_id) if item_id else generate_unique_id(existing)
    payload = board.model_dump()
    payload[key].append(data)
    return _commit(payload)


def _update_member(board: Board, key: str, kind: str, item_id: str, changes: Partial) -> Board:
    payload = board.model_dump()
    members: list[dict[str, Any]] = payload[key]
    for index, member in enumerate(members):
        if member["id"] == item_id:
            break
    else:
        raise BoardError(f'{kind} with ID "{item_id}" not found')

    merged = {**member, **_as_dict(changes), "id": item_id}
    members[index] = {name: value for name, value in merged.items() if value is not None}
    return _commit(payload)


def _remove_member(board: Board, key: str, kind: str, ref_field: str, item_id: str) -> Board:
    if not is_id_used(item_id, getattr(board, key)):
        raise BoardError(f'{kind} with ID "{item_id}" not found')
    refs = sum(1 for button in board.buttons if getattr(button, ref_field) == item_id)
    if refs:
        raise BoardError(
            f'Cannot remove {kind.lower()} "{item_id}" because it is referenced by {refs} button(s)'
        )
    payload = board.model_dump()
    payload[key] = [m for m in payload[key] if m["id"] != item_id]
    return _commit(payload)


def add_image(board: Board, image: Partial) -> Board:
    return _add_member(board, "images", "Image", image)


def update_image(board: Board, image_id: str, changes: Partial) -> Board:
    return _update_member(board, "images", "Image", image_id, changes)


def remove_image(board: Board, image_id: str) -> Board:
    """Remove an image no button references."""
    return _remove_member(board, "images", "Image", "image_id", image_id)


def add_sound(board: Board, sound: Partial) -> Board:
    return _add_member(board, "sounds", "Sound", sound)


def update_sound(board: Board, sound_id: str, changes: Partial) -> Board:
    return _update_member(board, "sounds", "Sound", sound_id, changes)


def remove_sound(board: Board, sound_id: str) -> Board:
    """Remove a sound no button references."""
    return _remove_member(board, "sounds", "Sound", "sound_id", sound_id)
