"""Storage adapter contract shared by every backend."""

from __future__ import annotations

from typing import Protocol

from obzctl.domain.schema import Board, Obz


class StorageAdapter(Protocol):
    """Persist boards by ``board.id`` and OBZ aggregates by ``manifest.root``.

    ``load_*`` returns ``None`` for an unknown key and ``delete_*`` of an
    unknown key is a no-op; any other backend failure raises
    :class:`~obzctl.domain.errors.StorageError`. Concurrent writes to the
    same key are last-write-wins.
    """

    def save_board(self, board: Board) -> None: ...

    def load_board(self, board_id: str) -> Board | None: ...

    def delete_board(self, board_id: str) -> None: ...

    def list_boards(self) -> list[Board]: ...

    def save_obz(self, obz: Obz) -> None: ...

    def load_obz(self, key: str) -> Obz | None: ...

    def delete_obz(self, key: str) -> None: ...

    def list_obzs(self) -> list[Obz]: ...

    def close(self) -> None: ...
