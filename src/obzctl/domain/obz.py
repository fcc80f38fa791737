"""OBZ aggregate: a manifest, its boards, and optional binary files.

Invariants held by every value these functions return:

- the manifest validates and its root names a board present in the set,
- every board key is listed in ``manifest.paths.boards``,
- no raw id occurs twice anywhere in the aggregate, whatever the resource
  type (a board and a button sharing ``"home"`` is a collision).
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from obzctl.domain.errors import ObzError, ValidationError
from obzctl.domain.manifest import board_path, create_manifest
from obzctl.domain.schema import Board, Obz
from obzctl.domain.types import ResourceType
from obzctl.domain.validation import validate_obz_or_raise

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DuplicateId:
    """A raw id and every ``kind:board[:id]`` location where it occurs."""

    id: str
    locations: tuple[str, ...]

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "locations": list(self.locations)}


@dataclass(frozen=True)
class IdUniquenessResult:
    """Outcome of the global id check; ``duplicates`` is empty on success."""

    success: bool
    error: str | None = None
    duplicates: tuple[DuplicateId, ...] = field(default_factory=tuple)


# ---------------------------------------------------------------------------
# Global id uniqueness
# ---------------------------------------------------------------------------


def find_duplicate_ids(obz: Obz) -> list[DuplicateId]:
    """Every id occurring at more than one location, in first-seen order."""
    seen: dict[str, list[str]] = {}
    for key, board in obz.boards.items():
        seen.setdefault(board.id, []).append(f"{ResourceType.BOARD}:{key}")
        for kind, items in (
            (ResourceType.BUTTON, board.buttons),
            (ResourceType.IMAGE, board.images),
            (ResourceType.SOUND, board.sounds),
        ):
            for item in items:
                seen.setdefault(item.id, []).append(f"{kind}:{key}:{item.id}")
    return [
        DuplicateId(id=raw, locations=tuple(locations))
        for raw, locations in seen.items()
        if len(locations) > 1
    ]


def validate_obz_id_uniqueness(obz: Obz) -> IdUniquenessResult:
    duplicates = find_duplicate_ids(obz)
    if not duplicates:
        return IdUniquenessResult(success=True)
    ids = ", ".join(d.id for d in duplicates)
    return IdUniquenessResult(
        success=False,
        error=f"Found {len(duplicates)} duplicate IDs in OBZ: {ids}",
        duplicates=tuple(duplicates),
    )


# ---------------------------------------------------------------------------
# Construction and editing
# ---------------------------------------------------------------------------


def _commit(payload: Mapping[str, Any], *, check_ids: bool = True) -> Obz:
    try:
        obz = validate_obz_or_raise(payload)
    except ValidationError as exc:
        raise ObzError(str(exc)) from exc
    if check_ids:
        result = validate_obz_id_uniqueness(obz)
        if not result.success:
            raise ObzError(f"Invalid OBZ: {result.error}", result.duplicates)
    return obz


def create_obz(
    boards: Sequence[Board],
    *,
    root_board_id: str | None = None,
    files: Mapping[str, bytes] | None = None,
) -> Obz:
    """Assemble an OBZ from boards; the root defaults to the first board.

    Raises:
        ObzError: Empty input, unknown root, repeated board id, or any id
            collision across the set (``duplicates`` is populated).
    """
    if not boards:
        raise ObzError("Cannot create OBZ with no boards")

    by_id: dict[str, Board] = {}
    for board in boards:
        if board.id in by_id:
            raise ObzError(f'Board with ID "{board.id}" already exists in OBZ')
        by_id[board.id] = board

    manifest = create_manifest(boards, root_board_id=root_board_id)
    obz = _commit({"manifest": manifest, "boards": by_id, "files": dict(files) if files else None})
    logger.debug("Assembled OBZ with %d board(s), root %s", len(by_id), manifest.root)
    return obz


def add_board(obz: Obz, board: Board) -> Obz:
    """Add a board under a new id; only ``paths.boards`` is extended."""
    if board.id in obz.boards:
        raise ObzError(f'Board with ID "{board.id}" already exists in OBZ')
    manifest = obz.manifest.model_copy(
        update={
            "paths": obz.manifest.paths.model_copy(
                update={"boards": {**obz.manifest.paths.boards, board.id: board_path(board.id)}}
            )
        }
    )
    return _commit(
        {"manifest": manifest, "boards": {**obz.boards, board.id: board}, "files": obz.files}
    )


def remove_board(obz: Obz, board_id: str) -> Obz:
    """Remove a non-root board and its manifest entry."""
    if board_id not in obz.boards:
        raise ObzError(f'Board with ID "{board_id}" not found in OBZ')
    if obz.manifest.root == obz.manifest.paths.boards.get(board_id):
        raise ObzError(f'Cannot remove root board "{board_id}" from OBZ')

    boards = {key: value for key, value in obz.boards.items() if key != board_id}
    board_paths = {
        key: value for key, value in obz.manifest.paths.boards.items() if key != board_id
    }
    manifest = obz.manifest.model_copy(
        update={"paths": obz.manifest.paths.model_copy(update={"boards": board_paths})}
    )
    # Removing a board cannot introduce a collision.
    return _commit({"manifest": manifest, "boards": boards, "files": obz.files}, check_ids=False)


def update_root_board(obz: Obz, board_id: str) -> Obz:
    """Make an existing board the root."""
    if board_id not in obz.boards:
        raise ObzError(f'Board with ID "{board_id}" not found in OBZ')
    manifest = obz.manifest.model_copy(
        update={"root": obz.manifest.paths.boards.get(board_id, board_path(board_id))}
    )
    return _commit(
        {"manifest": manifest, "boards": obz.boards, "files": obz.files}, check_ids=False
    )


# ---------------------------------------------------------------------------
# Lookup
# ---------------------------------------------------------------------------


def get_board_by_path(obz: Obz, path: str) -> Board | None:
    """Board whose manifest path equals *path*, if any."""
    for board_id, candidate in obz.manifest.paths.boards.items():
        if candidate == path:
            return obz.boards.get(board_id)
    return None


def get_root_board(obz: Obz) -> Board:
    """The board the manifest root points at."""
    board = get_board_by_path(obz, obz.manifest.root)
    if board is None:
        raise ObzError(f'Root board "{obz.manifest.root}" not found in OBZ')
    return board
