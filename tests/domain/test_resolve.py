"""Tests for asset source resolution and localized button text."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from obzctl.domain.resolve import (
    get_image,
    get_sound,
    localize,
    resolve_asset_source,
    resolve_button,
    text_to_speak,
    uses_absolute_positioning,
)
from obzctl.domain.schema import Board, Button, Image, Sound


class TestResolveAssetSource:
    def test_data_first(self) -> None:
        image = Image(id="i", data="AAAA", path="images/i.png", url="https://example.com/i.png")
        assert resolve_asset_source(image, {"images/i.png": b"raw"}) == "AAAA"

    def test_file_before_url(self) -> None:
        image = Image(id="i", path="images/i.png", url="https://example.com/i.png")
        assert resolve_asset_source(image, {"images/i.png": b"raw"}) == b"raw"

    def test_url_when_path_missing_from_files(self) -> None:
        image = Image(id="i", path="images/i.png", url="https://example.com/i.png")
        assert resolve_asset_source(image, {}) == "https://example.com/i.png"

    def test_nothing_resolvable(self) -> None:
        sound = Sound(id="s", path="sounds/s.mp3")
        assert resolve_asset_source(sound) is None


class TestText:
    def test_text_to_speak_prefers_vocalization(self) -> None:
        assert text_to_speak(Button(id="a", label="hi", vocalization="hello")) == "hello"
        assert text_to_speak(Button(id="a", label="hi")) == "hi"
        assert text_to_speak(Button(id="a")) is None

    def test_localize(self, board_document: Callable[..., dict[str, Any]]) -> None:
        board = Board.model_validate(
            board_document(locale="es", strings={"es": {"yes": "sí"}, "fr": {"yes": "oui"}})
        )
        assert localize(board, "yes") == "sí"
        assert localize(board, "no") == "no"
        assert localize(board, None) is None

    def test_localize_without_strings(self, make_board: Callable[..., Board]) -> None:
        assert localize(make_board(), "yes") == "yes"


class TestLayout:
    def test_absolute_positioning(self) -> None:
        placed = Button(id="a", top=0, left=0, width=0.5, height=0.5)
        assert uses_absolute_positioning([placed])
        assert not uses_absolute_positioning([placed, Button(id="b")])


class TestResolveButton:
    def test_flattened_view(self, board_document: Callable[..., dict[str, Any]]) -> None:
        doc = board_document(
            buttons=[
                {
                    "id": "cat",
                    "label": "cat",
                    "image_id": "img",
                    "sound_id": "snd",
                    "load_board": {"id": "animals"},
                }
            ],
            images=[{"id": "img", "path": "images/cat.png"}],
            sounds=[{"id": "snd", "url": "https://example.com/cat.mp3"}],
        )
        board = Board.model_validate(doc)
        assert get_image(board, "img") is not None
        assert get_sound(board, "missing") is None

        view = resolve_button(board, board.buttons[0], {"images/cat.png": b"12345"})
        assert view == {
            "id": "cat",
            "label": "cat",
            "vocalization": None,
            "speaks": "cat",
            "image": "<5 bytes>",
            "sound": "https://example.com/cat.mp3",
            "action": None,
            "load_board": {"id": "animals"},
        }

    def test_unknown_image_reference(self, make_board: Callable[..., Board]) -> None:
        board = make_board(buttons=[{"id": "a", "image_id": "nope"}])
        assert resolve_button(board, board.buttons[0])["image"] is None
