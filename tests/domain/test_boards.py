"""Tests for board construction and the pure mutators."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from obzctl.domain.boards import (
    DEFAULT_BOARD_NAME,
    add_button,
    add_image,
    add_sound,
    create_board,
    create_board_from_data,
    find_first_empty_cell,
    placed_button_ids,
    remove_button,
    remove_image,
    remove_sound,
    unplaced_buttons,
    update_button,
    update_grid,
    update_image,
    update_sound,
)
from obzctl.domain.errors import BoardError, ValidationError
from obzctl.domain.ids import ID_LENGTH
from obzctl.domain.schema import Board, Button, Grid

IMAGE = {"id": "img", "url": "https://example.com/cat.png"}
SOUND = {"id": "snd", "path": "sounds/yes.mp3"}


class TestCreateBoard:
    def test_defaults(self) -> None:
        board = create_board("Core")
        assert board.name == "Core"
        assert board.locale == "en"
        assert board.format == "open-board-0.1"
        assert len(board.id) == ID_LENGTH
        assert board.grid == Grid.empty(3, 3)
        assert board.buttons == []

    def test_explicit_values(self) -> None:
        board = create_board(
            "Food", board_id="food", locale="fr", rows=2, columns=4, url="https://x.org/food"
        )
        assert board.id == "food"
        assert board.locale == "fr"
        assert (board.grid.rows, board.grid.columns) == (2, 4)
        assert board.url == "https://x.org/food"

    def test_initial_buttons_are_unplaced(self) -> None:
        board = create_board("Core", buttons=[{"id": "a"}, Button(id="b")])
        assert [b.id for b in board.buttons] == ["a", "b"]
        assert placed_button_ids(board) == set()

    def test_invalid_dimensions(self) -> None:
        with pytest.raises(BoardError) as exc_info:
            create_board("Core", rows=0)
        assert isinstance(exc_info.value.__cause__, ValidationError)


class TestCreateBoardFromData:
    def test_fills_missing_fields(self) -> None:
        board = create_board_from_data({"ext_source": "import"})
        assert board.name == DEFAULT_BOARD_NAME
        assert board.locale == "en"
        assert board.grid.rows == 3
        assert board.extensions == {"ext_source": "import"}

    def test_keeps_given_fields(self) -> None:
        data = {
            "id": "b1",
            "name": "Given",
            "buttons": [{"id": "x"}],
            "grid": {"rows": 1, "columns": 1, "order": [["x"]]},
        }
        board = create_board_from_data(data)
        assert board.id == "b1"
        assert board.grid.order == [["x"]]


class TestGridHelpers:
    def test_first_empty_cell_row_major(self) -> None:
        grid = Grid.model_validate({"rows": 2, "columns": 2, "order": [["a", "b"], [None, None]]})
        assert find_first_empty_cell(grid) == (1, 0)

    def test_full_grid(self) -> None:
        grid = Grid.model_validate({"rows": 1, "columns": 1, "order": [["a"]]})
        assert find_first_empty_cell(grid) is None

    def test_shrink_drops_cells(self, make_board: Callable[..., Board]) -> None:
        board = make_board(buttons=["a", "b", "c", "d"], columns=2)
        smaller = update_grid(board, columns=1)
        assert smaller.grid.order == [["a"], ["c"]]
        assert [b.id for b in unplaced_buttons(smaller)] == ["b", "d"]
        assert len(smaller.buttons) == 4

    def test_grow_adds_empty_cells(self, make_board: Callable[..., Board]) -> None:
        board = make_board(buttons=["a", "b"], columns=2)
        bigger = update_grid(board, rows=2, columns=3)
        assert bigger.grid.order == [["a", "b", None], [None, None, None]]

    def test_invalid_resize(self, make_board: Callable[..., Board]) -> None:
        with pytest.raises(BoardError):
            update_grid(make_board(), rows=0)


class TestButtons:
    def test_add_places_in_first_empty_cell(self, make_board: Callable[..., Board]) -> None:
        board = make_board(buttons=["a"], columns=2)
        updated = add_button(board, {"id": "b", "label": "bee"})
        assert updated.grid.order == [["a", "b"]]
        assert updated.buttons[-1].label == "bee"

    def test_add_does_not_modify_input(self, make_board: Callable[..., Board]) -> None:
        board = make_board(buttons=["a"], columns=2)
        add_button(board, {"id": "b"})
        assert [b.id for b in board.buttons] == ["a"]
        assert board.grid.order == [["a", None]]

    def test_add_generates_id(self, make_board: Callable[..., Board]) -> None:
        updated = add_button(make_board(buttons=[]), {"label": "hi"})
        assert len(updated.buttons[0].id) == ID_LENGTH

    def test_add_accepts_model(self, make_board: Callable[..., Board]) -> None:
        updated = add_button(make_board(buttons=[]), Button(id="m", label="model"))
        assert updated.buttons[0].id == "m"

    def test_add_to_full_grid_leaves_unplaced(self, make_board: Callable[..., Board]) -> None:
        board = make_board(buttons=["a", "b"], columns=2)
        updated = add_button(board, {"id": "c"})
        assert [b.id for b in unplaced_buttons(updated)] == ["c"]

    def test_add_duplicate_id(self, make_board: Callable[..., Board]) -> None:
        with pytest.raises(BoardError, match='Button ID "a" is already used'):
            add_button(make_board(buttons=["a"]), {"id": "a"})

    def test_add_invalid_button(self, make_board: Callable[..., Board]) -> None:
        with pytest.raises(BoardError) as exc_info:
            add_button(make_board(), {"id": "z", "background_color": "green"})
        assert isinstance(exc_info.value.__cause__, ValidationError)

    def test_update_merges(self, make_board: Callable[..., Board]) -> None:
        board = make_board(buttons=[{"id": "a", "label": "old", "vocalization": "say"}])
        updated = update_button(board, "a", {"label": "new"})
        button = updated.buttons[0]
        assert (button.label, button.vocalization) == ("new", "say")

    def test_update_none_clears(self, make_board: Callable[..., Board]) -> None:
        board = make_board(buttons=[{"id": "a", "label": "x", "vocalization": "say"}])
        updated = update_button(board, "a", {"vocalization": None})
        assert updated.buttons[0].vocalization is None

    def test_update_keeps_id(self, make_board: Callable[..., Board]) -> None:
        updated = update_button(make_board(buttons=["a"]), "a", {"id": "other"})
        assert updated.buttons[0].id == "a"

    def test_update_unknown(self, make_board: Callable[..., Board]) -> None:
        with pytest.raises(BoardError, match='Button with ID "nope" not found'):
            update_button(make_board(), "nope", {"label": "x"})

    def test_remove_clears_cells(self, make_board: Callable[..., Board]) -> None:
        board = make_board(buttons=["a", "b"], columns=2)
        updated = remove_button(board, "a")
        assert [b.id for b in updated.buttons] == ["b"]
        assert updated.grid.order == [[None, "b"]]

    def test_remove_unknown(self, make_board: Callable[..., Board]) -> None:
        with pytest.raises(BoardError):
            remove_button(make_board(), "ghost")


class TestImagesAndSounds:
    def test_add_image(self, make_board: Callable[..., Board]) -> None:
        updated = add_image(make_board(), IMAGE)
        assert updated.images[0].id == "img"

    def test_add_image_duplicate(self, make_board: Callable[..., Board]) -> None:
        board = add_image(make_board(), IMAGE)
        with pytest.raises(BoardError, match='Image ID "img" is already used'):
            add_image(board, IMAGE)

    def test_add_image_without_source(self, make_board: Callable[..., Board]) -> None:
        with pytest.raises(BoardError):
            add_image(make_board(), {"id": "bare"})

    def test_update_image(self, make_board: Callable[..., Board]) -> None:
        board = add_image(make_board(), IMAGE)
        updated = update_image(board, "img", {"width": 64, "height": 64})
        assert (updated.images[0].width, updated.images[0].height) == (64, 64)

    def test_update_image_removing_last_source(self, make_board: Callable[..., Board]) -> None:
        board = add_image(make_board(), IMAGE)
        with pytest.raises(BoardError):
            update_image(board, "img", {"url": None})

    def test_remove_referenced_image(self, make_board: Callable[..., Board]) -> None:
        board = make_board(buttons=[{"id": "a", "image_id": "img"}, {"id": "b", "image_id": "img"}])
        board = add_image(board, IMAGE)
        with pytest.raises(BoardError, match="referenced by 2 button"):
            remove_image(board, "img")

    def test_remove_unreferenced_image(self, make_board: Callable[..., Board]) -> None:
        board = add_image(make_board(), IMAGE)
        assert remove_image(board, "img").images == []

    def test_remove_unknown_image(self, make_board: Callable[..., Board]) -> None:
        with pytest.raises(BoardError, match='Image with ID "img" not found'):
            remove_image(make_board(), "img")

    def test_sound_lifecycle(self, make_board: Callable[..., Board]) -> None:
        board = add_sound(make_board(), SOUND)
        board = update_sound(board, "snd", {"duration": 1.5})
        assert board.sounds[0].duration == 1.5
        board = update_button(board, "yes", {"sound_id": "snd"})
        with pytest.raises(BoardError, match='Cannot remove sound "snd"'):
            remove_sound(board, "snd")
        board = update_button(board, "yes", {"sound_id": None})
        assert remove_sound(board, "snd").sounds == []
