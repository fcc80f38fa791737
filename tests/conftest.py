"""Shared pytest fixtures for obzctl tests."""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from obzctl.config.logging import LOGGER_NAME
from obzctl.config.models import StorageConfig
from obzctl.config.settings import ObzSettings
from obzctl.domain.schema import Board
from obzctl.infrastructure.workspace import Workspace


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the developer's OBZCTL_* environment out of every test."""
    for name in list(os.environ):
        if name.startswith("OBZCTL_"):
            monkeypatch.delenv(name)


@pytest.fixture(autouse=True)
def _restore_logging() -> Generator[None]:
    """Undo configure_logging() calls made by the CLI or the test."""
    root = logging.getLogger()
    original_handlers = root.handlers[:]
    original_level = root.level
    obz = logging.getLogger(LOGGER_NAME)
    obz_level = obz.level
    yield
    root.handlers = original_handlers
    root.setLevel(original_level)
    obz.setLevel(obz_level)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def settings(tmp_path: Path) -> ObzSettings:
    """Settings rooted at a temp directory with the file backend."""
    return ObzSettings.from_cli(workspace_root=tmp_path)


@pytest.fixture
def workspace(settings: ObzSettings) -> Generator[Workspace]:
    ws = Workspace(settings)
    try:
        yield ws
    finally:
        ws.close()


@pytest.fixture
def sqlite_workspace(tmp_path: Path) -> Generator[Workspace]:
    settings = ObzSettings.from_cli(
        workspace_root=tmp_path, storage=StorageConfig(backend="sqlite")
    )
    ws = Workspace(settings)
    try:
        yield ws
    finally:
        ws.close()


@pytest.fixture
def _isolated_workspace(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Change CWD to a temp directory so the CLI stores boards there.

    Use via ``@pytest.mark.usefixtures("_isolated_workspace")`` on command
    test classes.
    """
    monkeypatch.chdir(tmp_path)


# ---------------------------------------------------------------------------
# Board documents
# ---------------------------------------------------------------------------


def _board_document(
    board_id: str, buttons: list[dict[str, Any]], columns: int, **extra: Any
) -> dict[str, Any]:
    name = extra.pop("name", board_id.title())
    cells: list[str | None] = [b["id"] for b in buttons]
    rows = max(1, -(-len(cells) // columns))
    cells += [None] * (rows * columns - len(cells))
    return {
        "format": "open-board-0.1",
        "id": board_id,
        "locale": "en",
        "name": name,
        "buttons": buttons,
        "grid": {
            "rows": rows,
            "columns": columns,
            "order": [cells[r * columns : (r + 1) * columns] for r in range(rows)],
        },
        **extra,
    }


@pytest.fixture
def board_document() -> Callable[..., dict[str, Any]]:
    """Factory for raw board dicts; buttons fill the grid row by row.

    ``board_document("core", ["yes", "no"], columns=2)`` gives a 1x2 board.
    Button entries may be ids or full button dicts.
    """

    def factory(
        board_id: str = "core",
        buttons: list[str | dict[str, Any]] | None = None,
        *,
        columns: int = 2,
        **extra: Any,
    ) -> dict[str, Any]:
        entries = buttons if buttons is not None else ["yes", "no"]
        normalized = [
            entry if isinstance(entry, dict) else {"id": entry, "label": entry} for entry in entries
        ]
        return _board_document(board_id, normalized, columns, **extra)

    return factory


@pytest.fixture
def make_board(board_document: Callable[..., dict[str, Any]]) -> Callable[..., Board]:
    """Factory for validated :class:`Board` values (see ``board_document``)."""

    def factory(*args: Any, **kwargs: Any) -> Board:
        return Board.model_validate(board_document(*args, **kwargs))

    return factory
