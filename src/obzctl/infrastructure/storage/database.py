"""SQLite storage backend via SQLAlchemy Core.

The engine is opened lazily on first use and cached. If opening fails the
cache stays empty, so the next call retries instead of reusing a broken
engine.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from sqlalchemy import Table, delete, select
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from obzctl.domain.errors import StorageError, ValidationError
from obzctl.domain.schema import Board, Obz
from obzctl.infrastructure.database.engine import init_database
from obzctl.infrastructure.database.schema import boards, obzs
from obzctl.infrastructure.storage import records

logger = logging.getLogger(__name__)


def _now() -> str:
    return datetime.now(UTC).isoformat()


class DatabaseStorage:
    """Store boards and OBZ aggregates as JSON documents in SQLite."""

    def __init__(self, db_path: Path) -> None:
        self._db_path = Path(db_path)
        self._engine: Engine | None = None

    @property
    def db_path(self) -> Path:
        return self._db_path

    @property
    def engine(self) -> Engine:
        """The SQLAlchemy engine, created on first access."""
        if self._engine is None:
            try:
                engine = init_database(self._db_path)
            except (OSError, SQLAlchemyError) as exc:
                raise StorageError(f"Failed to open database {self._db_path}") from exc
            logger.debug("Opened board database at %s", self._db_path)
            self._engine = engine
        return self._engine

    def close(self) -> None:
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None

    # ------------------------------------------------------------------
    # Generic record I/O
    # ------------------------------------------------------------------

    def _upsert(self, table: Table, values: dict[str, Any], what: str) -> None:
        key_column = next(iter(table.primary_key.columns)).name
        stmt = sqlite_insert(table).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=[key_column],
            set_={name: value for name, value in values.items() if name != key_column},
        )
        try:
            with self.engine.begin() as conn:
                conn.execute(stmt)
        except SQLAlchemyError as exc:
            raise StorageError(f"Failed to save {what}") from exc

    def _fetch[T](self, table: Table, key: str, parse: Callable[[str], T], what: str) -> T | None:
        key_column = next(iter(table.primary_key.columns))
        try:
            with self.engine.connect() as conn:
                row = conn.execute(select(table.c.document).where(key_column == key)).first()
        except SQLAlchemyError as exc:
            raise StorageError(f"Failed to load {what}") from exc
        if row is None:
            return None
        try:
            return parse(row.document)
        except (ValueError, ValidationError) as exc:
            raise StorageError(f"Failed to load {what}") from exc

    def _remove(self, table: Table, key: str, what: str) -> None:
        key_column = next(iter(table.primary_key.columns))
        try:
            with self.engine.begin() as conn:
                conn.execute(delete(table).where(key_column == key))
        except SQLAlchemyError as exc:
            raise StorageError(f"Failed to delete {what}") from exc

    def _all[T](self, table: Table, parse: Callable[[str], T], what: str) -> list[T]:
        key_column = next(iter(table.primary_key.columns))
        try:
            with self.engine.connect() as conn:
                rows = conn.execute(
                    select(key_column.label("key"), table.c.document).order_by(key_column)
                ).all()
        except SQLAlchemyError as exc:
            raise StorageError(f"Failed to list {what}") from exc
        items: list[T] = []
        for row in rows:
            try:
                items.append(parse(row.document))
            except (ValueError, ValidationError) as exc:
                logger.warning("Skipping unreadable %s record %s: %s", what, row.key, exc)
        return items

    # ------------------------------------------------------------------
    # StorageAdapter
    # ------------------------------------------------------------------

    def save_board(self, board: Board) -> None:
        self._upsert(
            boards,
            {
                "id": board.id,
                "name": board.name,
                "document": records.dump_board(board),
                "updated": _now(),
            },
            f'board "{board.id}"',
        )

    def load_board(self, board_id: str) -> Board | None:
        return self._fetch(boards, board_id, records.load_board, f'board "{board_id}"')

    def delete_board(self, board_id: str) -> None:
        self._remove(boards, board_id, f'board "{board_id}"')

    def list_boards(self) -> list[Board]:
        return self._all(boards, records.load_board, "boards")

    def save_obz(self, obz: Obz) -> None:
        key = obz.manifest.root
        self._upsert(
            obzs,
            {"key": key, "root": key, "document": records.dump_obz(obz), "updated": _now()},
            f'OBZ "{key}"',
        )

    def load_obz(self, key: str) -> Obz | None:
        return self._fetch(obzs, key, records.load_obz, f'OBZ "{key}"')

    def delete_obz(self, key: str) -> None:
        self._remove(obzs, key, f'OBZ "{key}"')

    def list_obzs(self) -> list[Obz]:
        return self._all(obzs, records.load_obz, "OBZs")
