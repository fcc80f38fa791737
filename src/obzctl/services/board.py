"""BoardService — create, inspect, and edit stored boards.

Pipeline for every edit: LOAD → MUTATE (pure domain function) → SAVE →
RESPOND. The mutators validate their output, so nothing invalid is ever
saved.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from obzctl.domain import boards as board_ops
from obzctl.domain.errors import BoardError, ObfError
from obzctl.domain.resolve import resolve_button, uses_absolute_positioning
from obzctl.domain.schema import Board
from obzctl.services.base import BaseService
from obzctl.services.contracts import BoardListData, BoardSummary, dump_validated
from obzctl.services.result import ServiceResult


def _position_of(board: Board, button_id: str) -> list[int] | None:
    for row, column, cell in board.grid.cells():
        if cell == button_id:
            return [row, column]
    return None


class BoardService(BaseService):
    """Board CRUD plus button, image, sound, and grid edits."""

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _edit(
        self,
        op: str,
        board_id: str,
        mutate: Callable[[Board], Board],
        respond: Callable[[Board, Board], dict[str, Any]],
    ) -> ServiceResult:
        storage = self._workspace.storage
        try:
            board = storage.load_board(board_id)
            if board is None:
                return self._not_found(op, "Board", board_id)
            updated = mutate(board)
            storage.save_board(updated)
        except ObfError as exc:
            return self._failure(op, exc)

        data = {"board_id": board_id, **respond(board, updated)}
        before = {button.id for button in board_ops.unplaced_buttons(board)}
        warnings = [
            f'Button "{button.id}" has no grid cell'
            for button in board_ops.unplaced_buttons(updated)
            if button.id not in before
        ]
        return ServiceResult(ok=True, op=op, data=data, warnings=warnings)

    # ------------------------------------------------------------------
    # Boards
    # ------------------------------------------------------------------

    def create(
        self,
        name: str,
        *,
        board_id: str | None = None,
        locale: str | None = None,
        rows: int | None = None,
        columns: int | None = None,
        description_html: str | None = None,
        url: str | None = None,
    ) -> ServiceResult:
        """Create and store an empty board; defaults come from ``[board]``."""
        op = "board_create"
        defaults = self._workspace.settings.board
        storage = self._workspace.storage
        try:
            if board_id and storage.load_board(board_id) is not None:
                raise BoardError(f'Board with ID "{board_id}" already exists')
            board = board_ops.create_board(
                name,
                board_id=board_id,
                locale=locale or defaults.locale,
                rows=rows or defaults.rows,
                columns=columns or defaults.columns,
                description_html=description_html,
                url=url,
            )
            storage.save_board(board)
        except ObfError as exc:
            return self._failure(op, exc)
        return ServiceResult(ok=True, op=op, data={"board": board.to_dict()})

    def show(self, board_id: str) -> ServiceResult:
        op = "board_show"
        try:
            board = self._workspace.storage.load_board(board_id)
        except ObfError as exc:
            return self._failure(op, exc)
        if board is None:
            return self._not_found(op, "Board", board_id)
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "board": board.to_dict(),
                "buttons": [resolve_button(board, button) for button in board.buttons],
                "unplaced": [button.id for button in board_ops.unplaced_buttons(board)],
                "absolute_layout": bool(board.buttons)
                and uses_absolute_positioning(board.buttons),
            },
        )

    def list(self) -> ServiceResult:
        op = "board_list"
        try:
            boards = self._workspace.storage.list_boards()
        except ObfError as exc:
            return self._failure(op, exc)
        items = [BoardSummary.of(board) for board in sorted(boards, key=lambda b: b.name)]
        return ServiceResult(
            ok=True,
            op=op,
            data=dump_validated(BoardListData, {"count": len(items), "items": items}),
        )

    def delete(self, board_id: str) -> ServiceResult:
        op = "board_delete"
        storage = self._workspace.storage
        try:
            if storage.load_board(board_id) is None:
                return self._not_found(op, "Board", board_id)
            storage.delete_board(board_id)
        except ObfError as exc:
            return self._failure(op, exc)
        return ServiceResult(ok=True, op=op, data={"board_id": board_id})

    def resize(
        self, board_id: str, *, rows: int | None = None, columns: int | None = None
    ) -> ServiceResult:
        """Change grid dimensions, keeping the top-left overlap."""
        return self._edit(
            "board_resize",
            board_id,
            lambda board: board_ops.update_grid(board, rows=rows, columns=columns),
            lambda _, new: {"rows": new.grid.rows, "columns": new.grid.columns},
        )

    # ------------------------------------------------------------------
    # Buttons
    # ------------------------------------------------------------------

    def add_button(self, board_id: str, fields: Mapping[str, Any]) -> ServiceResult:
        """Add a button and place it in the first empty cell."""

        def respond(old: Board, new: Board) -> dict[str, Any]:
            button = new.buttons[-1]
            return {"button": button.to_dict(), "position": _position_of(new, button.id)}

        return self._edit(
            "button_add", board_id, lambda board: board_ops.add_button(board, fields), respond
        )

    def update_button(
        self, board_id: str, button_id: str, changes: Mapping[str, Any]
    ) -> ServiceResult:
        return self._edit(
            "button_update",
            board_id,
            lambda board: board_ops.update_button(board, button_id, changes),
            lambda _, new: {
                "button": next(b.to_dict() for b in new.buttons if b.id == button_id),
                "fields": sorted(changes),
            },
        )

    def remove_button(self, board_id: str, button_id: str) -> ServiceResult:
        return self._edit(
            "button_remove",
            board_id,
            lambda board: board_ops.remove_button(board, button_id),
            lambda old, _: {"button_id": button_id, "position": _position_of(old, button_id)},
        )

    # ------------------------------------------------------------------
    # Images and sounds
    # ------------------------------------------------------------------

    def add_image(self, board_id: str, fields: Mapping[str, Any]) -> ServiceResult:
        return self._edit(
            "image_add",
            board_id,
            lambda board: board_ops.add_image(board, fields),
            lambda _, new: {"image": new.images[-1].to_dict()},
        )

    def remove_image(self, board_id: str, image_id: str) -> ServiceResult:
        return self._edit(
            "image_remove",
            board_id,
            lambda board: board_ops.remove_image(board, image_id),
            lambda _, __: {"image_id": image_id},
        )

    def add_sound(self, board_id: str, fields: Mapping[str, Any]) -> ServiceResult:
        return self._edit(
            "sound_add",
            board_id,
            lambda board: board_ops.add_sound(board, fields),
            lambda _, new: {"sound": new.sounds[-1].to_dict()},
        )

    def remove_sound(self, board_id: str, sound_id: str) -> ServiceResult:
        return self._edit(
            "sound_remove",
            board_id,
            lambda board: board_ops.remove_sound(board, sound_id),
            lambda _, __: {"sound_id": sound_id},
        )
