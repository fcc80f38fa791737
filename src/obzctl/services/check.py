"""CheckService — lint ``.obf`` / ``.obz`` files and stored boards.

Reports findings without modifying anything. Categories:

- ``format``: the file cannot be read as JSON or as a zip container
- ``schema``: the document fails validation (one issue per location)
- ``id_uniqueness``: an id is used more than once across an OBZ
- ``references``: a button names an image or sound the board lacks
- ``layout``: a button has no grid cell
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Iterator, Sequence
from pathlib import Path
from typing import Any

from obzctl.domain.boards import unplaced_buttons
from obzctl.domain.errors import ArchiveError, ObfError, ValidationError
from obzctl.domain.obz import find_duplicate_ids
from obzctl.domain.schema import Board, Obz
from obzctl.domain.types import FileKind
from obzctl.domain.validation import ValidationIssue, validate_board, validate_obz_or_raise
from obzctl.services.archive import unpack_obz
from obzctl.services.base import BaseService
from obzctl.services.contracts import CheckResultData, dump_validated
from obzctl.services.result import ServiceResult

SEVERITY_ERROR = "error"
SEVERITY_WARNING = "warning"

CAT_FORMAT = "format"
CAT_SCHEMA = "schema"
CAT_IDS = "id_uniqueness"
CAT_REFERENCES = "references"
CAT_LAYOUT = "layout"

_SUFFIXES = {kind.value for kind in FileKind}


def _issue(category: str, severity: str, path: str, message: str, **extra: Any) -> dict[str, Any]:
    return {"category": category, "severity": severity, "path": path, "message": message, **extra}


def _schema_issues(issues: Iterable[ValidationIssue], where: str) -> list[dict[str, Any]]:
    return [
        _issue(CAT_SCHEMA, SEVERITY_ERROR, where, issue.message, location=issue.path)
        for issue in issues
    ]


def _cause_chain(exc: BaseException) -> Iterator[BaseException]:
    current: BaseException | None = exc
    while current is not None:
        yield current
        current = current.__cause__


def board_warnings(board: Board, where: str) -> list[dict[str, Any]]:
    """Non-fatal findings for a valid board."""
    issues: list[dict[str, Any]] = []
    image_ids = {image.id for image in board.images}
    sound_ids = {sound.id for sound in board.sounds}
    for button in board.buttons:
        if button.image_id and button.image_id not in image_ids:
            issues.append(
                _issue(
                    CAT_REFERENCES,
                    SEVERITY_WARNING,
                    where,
                    f'Button "{button.id}" references unknown image "{button.image_id}"',
                )
            )
        if button.sound_id and button.sound_id not in sound_ids:
            issues.append(
                _issue(
                    CAT_REFERENCES,
                    SEVERITY_WARNING,
                    where,
                    f'Button "{button.id}" references unknown sound "{button.sound_id}"',
                )
            )
    for button in unplaced_buttons(board):
        if not button.has_position:
            issues.append(
                _issue(
                    CAT_LAYOUT, SEVERITY_WARNING, where, f'Button "{button.id}" has no grid cell'
                )
            )
    return issues


class CheckService(BaseService):
    """Validates board files and the board store."""

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def check(
        self,
        paths: Sequence[Path] = (),
        *,
        stored: bool = False,
        min_severity: str = SEVERITY_WARNING,
    ) -> ServiceResult:
        """Report issues for *paths* (files or directories).

        With *stored*, every board in the configured storage is checked too.
        Issues below *min_severity* are dropped.
        """
        op = "check"
        issues: list[dict[str, Any]] = []
        checked = 0
        for path in self._expand(paths):
            checked += 1
            issues.extend(self._check_file(path))
        if stored:
            try:
                boards = self._workspace.storage.list_boards()
            except ObfError as exc:
                return self._failure(op, exc)
            for board in boards:
                checked += 1
                issues.extend(board_warnings(board, f"storage:{board.id}"))

        if min_severity == SEVERITY_ERROR:
            issues = [i for i in issues if i["severity"] == SEVERITY_ERROR]

        data = dump_validated(
            CheckResultData, {"checked": checked, "count": len(issues), "issues": issues}
        )
        return ServiceResult(ok=True, op=op, data=data)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    @staticmethod
    def _expand(paths: Iterable[Path]) -> Iterator[Path]:
        for path in paths:
            if path.is_dir():
                yield from sorted(
                    p for p in path.rglob("*") if p.is_file() and p.suffix.lower() in _SUFFIXES
                )
            else:
                yield path

    def _check_file(self, path: Path) -> list[dict[str, Any]]:
        where = str(path)
        try:
            data = path.read_bytes()
        except OSError as exc:
            return [_issue(CAT_FORMAT, SEVERITY_ERROR, where, f"Cannot read file: {exc}")]
        if path.suffix.lower() == FileKind.OBZ:
            return self._check_obz(data, where)
        return self._check_obf(data, where)

    def _check_obf(self, data: bytes, where: str) -> list[dict[str, Any]]:
        try:
            document = json.loads(data.decode("utf-8"))
        except ValueError as exc:
            return [_issue(CAT_FORMAT, SEVERITY_ERROR, where, f"Not a JSON document: {exc}")]
        result = validate_board(document)
        if not result.success:
            return _schema_issues(result.details, where)
        return board_warnings(Board.model_validate(document), where)

    def _check_obz(self, data: bytes, where: str) -> list[dict[str, Any]]:
        try:
            unpacked = unpack_obz(data, codec=self._workspace.codec)
        except ArchiveError as exc:
            for cause in _cause_chain(exc):
                if isinstance(cause, ValidationError) and cause.issues:
                    return _schema_issues(cause.issues, where)
            return [_issue(CAT_FORMAT, SEVERITY_ERROR, where, str(exc))]

        try:
            obz = validate_obz_or_raise(
                {"manifest": unpacked.manifest, "boards": unpacked.boards, "files": unpacked.files}
            )
        except ValidationError as exc:
            return _schema_issues(exc.issues, where)
        return self._obz_findings(obz, where)

    @staticmethod
    def _obz_findings(obz: Obz, where: str) -> list[dict[str, Any]]:
        issues = [
            _issue(
                CAT_IDS,
                SEVERITY_ERROR,
                where,
                f'ID "{dup.id}" is used {len(dup.locations)} times',
                locations=list(dup.locations),
            )
            for dup in find_duplicate_ids(obz)
        ]
        for key, board in obz.boards.items():
            issues.extend(board_warnings(board, f"{where}!{obz.manifest.paths.boards[key]}"))
        return issues
