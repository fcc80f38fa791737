"""JSON-file storage backend.

Layout under the storage root::

    {root}/boards/{board_id}.json
    {root}/obzs/{key}.json

Keys are percent-encoded into a single filename component, so an OBZ key
such as ``boards/home.obf`` becomes ``boards%2Fhome.obf.json`` and no key
can address a path outside its directory.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from pathlib import Path
from urllib.parse import quote

from obzctl.domain.errors import StorageError, ValidationError
from obzctl.domain.schema import Board, Obz
from obzctl.infrastructure.storage import records

logger = logging.getLogger(__name__)

BOARDS_DIR = "boards"
OBZS_DIR = "obzs"
RECORD_SUFFIX = ".json"


class FileStorage:
    """Store each board and OBZ as a pretty-printed JSON file."""

    def __init__(self, root: Path) -> None:
        self._root = Path(root)

    @property
    def root(self) -> Path:
        return self._root

    # ------------------------------------------------------------------
    # Paths
    # ------------------------------------------------------------------

    def _record_path(self, kind: str, key: str) -> Path:
        if not key:
            raise StorageError(f"Empty {kind} key")
        directory = self._root / kind
        path = directory / f"{quote(key, safe='')}{RECORD_SUFFIX}"
        if not path.resolve().is_relative_to(directory.resolve()):
            raise StorageError(f"Key {key!r} escapes the storage directory")
        return path

    # ------------------------------------------------------------------
    # Generic record I/O
    # ------------------------------------------------------------------

    def _write(self, kind: str, key: str, text: str) -> None:
        path = self._record_path(kind, key)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(text, encoding="utf-8")
        except OSError as exc:
            raise StorageError(f'Failed to save {kind[:-1]} "{key}"') from exc

    def _read[T](self, kind: str, key: str, parse: Callable[[str], T]) -> T | None:
        path = self._record_path(kind, key)
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise StorageError(f'Failed to load {kind[:-1]} "{key}"') from exc
        try:
            return parse(text)
        except (ValueError, ValidationError) as exc:
            raise StorageError(f'Failed to load {kind[:-1]} "{key}"') from exc

    def _delete(self, kind: str, key: str) -> None:
        path = self._record_path(kind, key)
        try:
            path.unlink(missing_ok=True)
        except OSError as exc:
            raise StorageError(f'Failed to delete {kind[:-1]} "{key}"') from exc

    def _list[T](self, kind: str, parse: Callable[[str], T]) -> list[T]:
        directory = self._root / kind
        if not directory.is_dir():
            return []
        items: list[T] = []
        try:
            paths = sorted(directory.glob(f"*{RECORD_SUFFIX}"))
        except OSError as exc:
            raise StorageError(f"Failed to list {kind}") from exc
        for path in paths:
            try:
                items.append(parse(path.read_text(encoding="utf-8")))
            except (OSError, ValueError, ValidationError) as exc:
                logger.warning("Skipping unreadable %s record %s: %s", kind, path.name, exc)
        return items

    # ------------------------------------------------------------------
    # StorageAdapter
    # ------------------------------------------------------------------

    def save_board(self, board: Board) -> None:
        self._write(BOARDS_DIR, board.id, records.dump_board(board))

    def load_board(self, board_id: str) -> Board | None:
        return self._read(BOARDS_DIR, board_id, records.load_board)

    def delete_board(self, board_id: str) -> None:
        self._delete(BOARDS_DIR, board_id)

    def list_boards(self) -> list[Board]:
        return self._list(BOARDS_DIR, records.load_board)

    def save_obz(self, obz: Obz) -> None:
        self._write(OBZS_DIR, obz.manifest.root, records.dump_obz(obz))

    def load_obz(self, key: str) -> Obz | None:
        return self._read(OBZS_DIR, key, records.load_obz)

    def delete_obz(self, key: str) -> None:
        self._delete(OBZS_DIR, key)

    def list_obzs(self) -> list[Obz]:
        return self._list(OBZS_DIR, records.load_obz)

    def close(self) -> None:
        """Nothing to release; present for the adapter contract."""
