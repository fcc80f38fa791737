"""BaseService — foundation for all obzctl services.

Every service receives a :class:`Workspace` at construction time and
reports domain failures as ``ServiceResult(ok=False)`` instead of raising.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from obzctl.domain.errors import (
    ArchiveError,
    BoardError,
    ObfError,
    ObzError,
    StorageError,
    ValidationError,
)
from obzctl.services.result import ServiceResult

if TYPE_CHECKING:
    from obzctl.infrastructure.workspace import Workspace

logger = logging.getLogger(__name__)

# Error codes, most specific class first.
ERROR_CODES: tuple[tuple[type[ObfError], str], ...] = (
    (ValidationError, "VALIDATION_FAILED"),
    (BoardError, "BOARD_ERROR"),
    (ObzError, "OBZ_ERROR"),
    (ArchiveError, "ARCHIVE_ERROR"),
    (StorageError, "STORAGE_ERROR"),
)
NOT_FOUND = "NOT_FOUND"


def error_code(exc: ObfError) -> str:
    for exc_type, code in ERROR_CODES:
        if isinstance(exc, exc_type):
            return code
    return "ERROR"


def error_detail(exc: BaseException) -> dict[str, Any]:
    """Structured detail for *exc*, following ``__cause__`` for issues."""
    detail: dict[str, Any] = {}
    current: BaseException | None = exc
    while current is not None:
        if isinstance(current, ValidationError) and current.issues and "issues" not in detail:
            detail["issues"] = [issue.to_dict() for issue in current.issues]
        if isinstance(current, ObzError) and current.duplicates and "duplicates" not in detail:
            detail["duplicates"] = [dup.to_dict() for dup in current.duplicates]
        current = current.__cause__
    return detail


class BaseService:
    """Abstract base for service-layer classes.

    Usage::

        class BoardService(BaseService):
            def show(self, board_id: str) -> ServiceResult:
                board = self._workspace.storage.load_board(board_id)
                ...
    """

    def __init__(self, workspace: Workspace) -> None:
        self._workspace = workspace

    def _failure(self, op: str, exc: ObfError) -> ServiceResult:
        """Translate a domain exception into a failed result."""
        logger.debug("%s failed: %s", op, exc, exc_info=True)
        return ServiceResult.fail(op, error_code(exc), str(exc), detail=error_detail(exc))

    def _not_found(self, op: str, what: str, key: str) -> ServiceResult:
        return ServiceResult.fail(op, NOT_FOUND, f'{what} "{key}" not found', detail={"id": key})
