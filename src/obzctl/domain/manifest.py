"""Manifest construction and editing.

A manifest maps board ids to their archive paths (``boards/{id}.obf``) and
names the root board by path. Image and sound paths are collected from
assets that carry a ``path``; when two assets share an id the first one
seen wins.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from obzctl.domain.errors import ObzError, ValidationError
from obzctl.domain.schema import Board, Manifest
from obzctl.domain.types import BOARD_PATH_TEMPLATE, OBF_FORMAT_VERSION
from obzctl.domain.validation import validate_manifest_or_raise


def board_path(board_id: str) -> str:
    """Archive path of a board: ``boards/{id}.obf``."""
    return BOARD_PATH_TEMPLATE.format(board_id=board_id)


def _commit(payload: dict[str, Any]) -> Manifest:
    try:
        return validate_manifest_or_raise(payload)
    except ValidationError as exc:
        raise ObzError(str(exc)) from exc


def _collect_asset_paths(
    boards: Sequence[Board],
    images: dict[str, str],
    sounds: dict[str, str],
) -> None:
    for board in boards:
        for image in board.images:
            if image.path:
                images.setdefault(image.id, image.path)
        for sound in board.sounds:
            if sound.path:
                sounds.setdefault(sound.id, sound.path)


def _paths_payload(
    boards: dict[str, str], images: dict[str, str], sounds: dict[str, str]
) -> dict[str, Any]:
    paths: dict[str, Any] = {"boards": boards}
    if images:
        paths["images"] = images
    if sounds:
        paths["sounds"] = sounds
    return paths


def create_manifest(boards: Sequence[Board], *, root_board_id: str | None = None) -> Manifest:
    """Build a manifest for *boards*; the root defaults to the first board.

    Raises:
        ObzError: No boards were given, or the root id is not among them.
    """
    if not boards:
        raise ObzError("Cannot create manifest with no boards")

    root_id = root_board_id or boards[0].id
    if not any(board.id == root_id for board in boards):
        raise ObzError(f'Root board with ID "{root_id}" not found')

    board_paths = {board.id: board_path(board.id) for board in boards}
    images: dict[str, str] = {}
    sounds: dict[str, str] = {}
    _collect_asset_paths(boards, images, sounds)

    return _commit(
        {
            "format": OBF_FORMAT_VERSION,
            "root": board_path(root_id),
            "paths": _paths_payload(board_paths, images, sounds),
        }
    )


def update_manifest_root(manifest: Manifest, root_board_id: str) -> Manifest:
    """Point ``root`` at a board already listed in the manifest."""
    if root_board_id not in manifest.paths.boards:
        raise ObzError(f'Board with ID "{root_board_id}" not found in manifest')
    payload = manifest.model_dump()
    payload["root"] = manifest.paths.boards[root_board_id]
    return _commit(payload)


def add_board_to_manifest(manifest: Manifest, board: Board) -> Manifest:
    """List *board* and merge its asset paths (existing entries are kept)."""
    board_paths = {**manifest.paths.boards, board.id: board_path(board.id)}
    images = dict(manifest.paths.images or {})
    sounds = dict(manifest.paths.sounds or {})
    _collect_asset_paths([board], images, sounds)
    return _commit(
        {
            "format": manifest.format,
            "root": manifest.root,
            "paths": _paths_payload(board_paths, images, sounds),
        }
    )


def remove_board_from_manifest(manifest: Manifest, board_id: str) -> Manifest:
    """Drop a non-root board from ``paths.boards``."""
    path = manifest.paths.boards.get(board_id)
    if path is None:
        raise ObzError(f'Board with ID "{board_id}" not found in manifest')
    if manifest.root == path:
        raise ObzError(f'Cannot remove root board "{board_id}" from manifest')
    payload = manifest.model_dump()
    del payload["paths"]["boards"][board_id]
    return _commit(payload)
