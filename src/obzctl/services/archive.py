"""OBZ archive packing and unpacking.

Container layout::

    manifest.json          pretty-printed manifest (indent=2, UTF-8)
    boards/{id}.obf        one pretty-printed board per manifest entry
    <anything else>        additional files, bytes copied verbatim

Module-level functions are the core: they take and return domain values
and raise :class:`~obzctl.domain.errors.ArchiveError` (chaining the
original failure) on any problem. :class:`ArchiveService` wraps them for
the CLI with file I/O and storage.
"""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from obzctl.config.logging import get_logger
from obzctl.domain.errors import ArchiveError, ObfError, ValidationError
from obzctl.domain.manifest import board_path, create_manifest
from obzctl.domain.obz import create_obz, get_root_board
from obzctl.domain.schema import Board, Manifest, Obz
from obzctl.domain.types import MANIFEST_FILENAME, FileKind
from obzctl.domain.validation import (
    validate_board_or_raise,
    validate_manifest_or_raise,
    validate_obz_or_raise,
)
from obzctl.infrastructure.codec import ArchiveCodec, ZipCodec
from obzctl.services.base import BaseService
from obzctl.services.result import ServiceResult

log = get_logger(__name__)

_DEFAULT_CODEC = ZipCodec()


@dataclass(frozen=True)
class UnpackResult:
    """Decoded archive content; ``files`` is None when there are no extras."""

    manifest: Manifest
    boards: dict[str, Board]
    files: dict[str, bytes] | None = None


def _encode_json(document: Mapping[str, Any]) -> bytes:
    return json.dumps(document, indent=2, ensure_ascii=False).encode("utf-8")


def _decode_json(data: bytes) -> Any:
    return json.loads(data.decode("utf-8"))


# ---------------------------------------------------------------------------
# Pack
# ---------------------------------------------------------------------------


def pack_obz(
    boards: Sequence[Board],
    *,
    root_board_id: str | None = None,
    additional_files: Mapping[str, bytes] | None = None,
    codec: ArchiveCodec = _DEFAULT_CODEC,
) -> bytes:
    """Derive a manifest for *boards* and write the archive.

    Additional files are written last, so a colliding path replaces a
    generated entry.
    """
    try:
        if not boards:
            raise ValueError("Cannot pack OBZ with no boards")
        manifest = create_manifest(boards, root_board_id=root_board_id)
        entries: dict[str, bytes] = {MANIFEST_FILENAME: _encode_json(manifest.to_dict())}
        for board in boards:
            entries[board_path(board.id)] = _encode_json(board.to_dict())
        if additional_files:
            entries.update(additional_files)
        archive = codec.compress(entries)
    except Exception as exc:
        raise ArchiveError(f"Failed to pack OBZ: {exc}") from exc
    log.debug("packed_obz", boards=len(boards), entries=len(entries), size=len(archive))
    return archive


def pack_obz_object(obz: Obz, *, codec: ArchiveCodec = _DEFAULT_CODEC) -> bytes:
    """Write an existing aggregate as-is, without re-deriving its manifest."""
    try:
        entries: dict[str, bytes] = {MANIFEST_FILENAME: _encode_json(obz.manifest.to_dict())}
        for board_id, board in obz.boards.items():
            path = obz.manifest.paths.boards.get(board_id, board_path(board_id))
            entries[path] = _encode_json(board.to_dict())
        if obz.files:
            entries.update(obz.files)
        archive = codec.compress(entries)
    except Exception as exc:
        raise ArchiveError(f"Failed to pack OBZ object: {exc}") from exc
    log.debug("packed_obz_object", boards=len(obz.boards), size=len(archive))
    return archive


# ---------------------------------------------------------------------------
# Unpack
# ---------------------------------------------------------------------------


def _unpack(data: bytes, codec: ArchiveCodec) -> UnpackResult:
    if not data:
        raise ValueError("Archive data is empty")
    entries = codec.decompress(bytes(data))

    raw_manifest = entries.get(MANIFEST_FILENAME)
    if raw_manifest is None:
        raise ValueError(f"Invalid OBZ: missing {MANIFEST_FILENAME}")
    manifest = validate_manifest_or_raise(_decode_json(raw_manifest))

    boards: dict[str, Board] = {}
    for board_id, path in manifest.paths.boards.items():
        raw_board = entries.get(path)
        if raw_board is None:
            raise ValueError(f"Missing board file: {path}")
        try:
            boards[board_id] = validate_board_or_raise(_decode_json(raw_board))
        except (ValueError, ValidationError) as exc:
            raise ValueError(f"Invalid board in {path}: {exc}") from exc

    board_paths = set(manifest.paths.boards.values())
    extras = {
        path: content
        for path, content in entries.items()
        if path != MANIFEST_FILENAME and path not in board_paths
    }
    return UnpackResult(manifest=manifest, boards=boards, files=extras or None)


def unpack_obz(data: bytes, *, codec: ArchiveCodec = _DEFAULT_CODEC) -> UnpackResult:
    """Read and validate an archive.

    Raises:
        ArchiveError: Empty or corrupt container, missing or invalid
            manifest, or a missing or invalid board file.
    """
    try:
        result = _unpack(data, codec)
    except Exception as exc:
        raise ArchiveError(f"Failed to unpack OBZ: {exc}") from exc
    log.debug(
        "unpacked_obz",
        boards=len(result.boards),
        files=len(result.files or {}),
        root=result.manifest.root,
    )
    return result


def unpack_to_obz_object(data: bytes, *, codec: ArchiveCodec = _DEFAULT_CODEC) -> Obz:
    """Unpack into a validated :class:`Obz` aggregate."""
    result = unpack_obz(data, codec=codec)
    try:
        return validate_obz_or_raise(
            {"manifest": result.manifest, "boards": result.boards, "files": result.files}
        )
    except ValidationError as exc:
        raise ArchiveError(f"Failed to unpack OBZ: {exc}") from exc


# ---------------------------------------------------------------------------
# Single files
# ---------------------------------------------------------------------------


def read_board_file(data: bytes) -> Board:
    """Parse one ``.obf`` document (UTF-8 JSON).

    Raises:
        ArchiveError: The bytes are not UTF-8 JSON.
        ValidationError: The document is not a valid board.
    """
    try:
        document = _decode_json(data)
    except ValueError as exc:
        raise ArchiveError(f"Failed to read board: {exc}") from exc
    return validate_board_or_raise(document)


def load_board_set(path: Path, *, codec: ArchiveCodec = _DEFAULT_CODEC) -> Obz:
    """Read an ``.obf`` or ``.obz`` file into an aggregate.

    A single board becomes a one-board OBZ rooted at that board.
    """
    try:
        data = path.read_bytes()
    except OSError as exc:
        raise ArchiveError(f"Failed to read {path}: {exc}") from exc
    if path.suffix.lower() == FileKind.OBF:
        return create_obz([read_board_file(data)])
    return unpack_to_obz_object(data, codec=codec)


# ---------------------------------------------------------------------------
# ArchiveService
# ---------------------------------------------------------------------------


class ArchiveService(BaseService):
    """Pack stored boards into ``.obz`` files and unpack them back."""

    def pack(
        self,
        board_ids: Sequence[str],
        output: Path,
        *,
        root: str | None = None,
    ) -> ServiceResult:
        """Pack stored boards (all of them when *board_ids* is empty)."""
        op = "archive_pack"
        storage = self._workspace.storage
        try:
            if board_ids:
                boards: list[Board] = []
                for board_id in board_ids:
                    board = storage.load_board(board_id)
                    if board is None:
                        return self._not_found(op, "Board", board_id)
                    boards.append(board)
            else:
                boards = storage.list_boards()
            # Checks global id uniqueness before anything is written.
            create_obz(boards, root_board_id=root)
            archive = pack_obz(boards, root_board_id=root, codec=self._workspace.codec)
        except ObfError as exc:
            return self._failure(op, exc)

        try:
            output.parent.mkdir(parents=True, exist_ok=True)
            output.write_bytes(archive)
        except OSError as exc:
            return self._failure(op, ArchiveError(f"Failed to write {output}: {exc}"))

        return ServiceResult(
            ok=True,
            op=op,
            data={
                "path": str(output),
                "boards": [board.id for board in boards],
                "root": root or boards[0].id,
                "size": len(archive),
            },
        )

    def unpack(self, path: Path, *, save: bool = True) -> ServiceResult:
        """Read an ``.obz`` (or ``.obf``) file and optionally store its boards."""
        op = "archive_unpack"
        warnings: list[str] = []
        try:
            obz = load_board_set(path, codec=self._workspace.codec)
            root_board = get_root_board(obz)
            if save:
                storage = self._workspace.storage
                for board in obz.boards.values():
                    if storage.load_board(board.id) is not None:
                        warnings.append(f'Overwrote stored board "{board.id}"')
                    storage.save_board(board)
                storage.save_obz(obz)
        except ObfError as exc:
            return self._failure(op, exc)

        return ServiceResult(
            ok=True,
            op=op,
            data={
                "path": str(path),
                "root": root_board.id,
                "manifest": obz.manifest.to_dict(),
                "boards": [
                    {"id": board.id, "name": board.name, "buttons": len(board.buttons)}
                    for board in obz.boards.values()
                ],
                "files": sorted(obz.files or {}),
                "saved": save,
            },
            warnings=warnings,
        )
