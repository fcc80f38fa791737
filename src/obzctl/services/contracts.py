"""Typed payload contracts for service results.

Payloads are validated before they leave the service layer so shape
regressions (``items`` vs ``boards``) fail in tests, not in renderers.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict

from obzctl.domain.schema import Board


def dump_validated[T: BaseModel](model_cls: type[T], data: dict[str, Any]) -> dict[str, Any]:
    """Validate *data* against *model_cls* and return a normalized payload dict."""
    return model_cls.model_validate(data).model_dump(mode="python")


class BoardSummary(BaseModel):
    """One row of ``board list``."""

    id: str
    name: str
    locale: str
    rows: int
    columns: int
    buttons: int
    images: int
    sounds: int

    @classmethod
    def of(cls, board: Board) -> BoardSummary:
        return cls(
            id=board.id,
            name=board.name,
            locale=board.locale,
            rows=board.grid.rows,
            columns=board.grid.columns,
            buttons=len(board.buttons),
            images=len(board.images),
            sounds=len(board.sounds),
        )


class BoardListData(BaseModel):
    """Payload contract for ``BoardService.list``."""

    count: int
    items: list[BoardSummary]


class CheckIssue(BaseModel):
    """One finding returned by ``CheckService.check``."""

    model_config = ConfigDict(extra="allow")

    category: str
    severity: Literal["warning", "error"]
    path: str
    message: str


class CheckResultData(BaseModel):
    """Payload contract for ``CheckService.check``."""

    checked: int
    count: int
    issues: list[CheckIssue]
