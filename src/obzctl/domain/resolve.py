"""Read-side helpers: asset sources, localized text, layout mode."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from obzctl.domain.schema import Asset, Board, Button, Image, Sound

type AssetFiles = Mapping[str, bytes] | Mapping[str, str]


def resolve_asset_source(asset: Asset, files: AssetFiles | None = None) -> str | bytes | None:
    """Pick the content for *asset*: inline ``data``, then ``files[path]``, then ``url``."""
    if asset.data:
        return asset.data
    if asset.path and files and asset.path in files:
        return files[asset.path]
    return asset.url or None


def get_image(board: Board, image_id: str | None) -> Image | None:
    if image_id is None:
        return None
    return next((image for image in board.images if image.id == image_id), None)


def get_sound(board: Board, sound_id: str | None) -> Sound | None:
    if sound_id is None:
        return None
    return next((sound for sound in board.sounds if sound.id == sound_id), None)


def localize(board: Board, message: str | None) -> str | None:
    """Look *message* up in ``strings[board.locale]``; fall back to itself."""
    if message is None or not board.strings:
        return message
    return board.strings.get(board.locale, {}).get(message) or message


def text_to_speak(button: Button) -> str | None:
    return button.vocalization or button.label


def uses_absolute_positioning(buttons: Iterable[Button]) -> bool:
    """True when every button declares ``top``, ``left``, ``width`` and ``height``."""
    return all(button.has_position for button in buttons)


def resolve_button(
    board: Board, button: Button, files: AssetFiles | None = None
) -> dict[str, Any]:
    """Flatten a button for display: localized text and resolved asset sources.

    Binary sources are reported by size rather than inlined.
    """

    def _source(asset: Asset | None) -> str | None:
        if asset is None:
            return None
        source = resolve_asset_source(asset, files)
        if isinstance(source, bytes):
            return f"<{len(source)} bytes>"
        return source

    return {
        "id": button.id,
        "label": localize(board, button.label),
        "vocalization": localize(board, button.vocalization),
        "speaks": localize(board, text_to_speak(button)),
        "image": _source(get_image(board, button.image_id)),
        "sound": _source(get_sound(board, button.sound_id)),
        "action": button.action,
        "load_board": button.load_board.to_dict() if button.load_board else None,
    }
