"""Tests for ServiceResult, ServiceError and the BaseService helpers."""

from __future__ import annotations

import json

import pydantic
import pytest

from obzctl.domain.errors import (
    ArchiveError,
    BoardError,
    ObfError,
    ObzError,
    StorageError,
    ValidationError,
)
from obzctl.domain.obz import DuplicateId
from obzctl.domain.validation import ValidationIssue
from obzctl.services.base import error_code, error_detail
from obzctl.services.result import ServiceError, ServiceResult


class TestServiceResult:
    def test_success_construction(self) -> None:
        result = ServiceResult(ok=True, op="board_create", data={"board": {"id": "core"}})
        assert result.ok is True
        assert result.warnings == []
        assert result.error is None

    def test_fail(self) -> None:
        result = ServiceResult.fail("board_show", "NOT_FOUND", "missing", detail={"id": "x"})
        assert result.ok is False
        assert result.error == ServiceError(code="NOT_FOUND", message="missing", detail={"id": "x"})

    def test_json_serialization(self) -> None:
        result = ServiceResult(ok=True, op="check", data={"count": 0}, warnings=["w"])
        parsed = json.loads(result.model_dump_json())
        assert parsed["data"] == {"count": 0}
        assert parsed["warnings"] == ["w"]

    def test_frozen(self) -> None:
        result = ServiceResult(ok=True, op="check")
        with pytest.raises(pydantic.ValidationError):
            result.ok = False  # type: ignore[misc]


class TestErrorMapping:
    @pytest.mark.parametrize(
        ("exc", "code"),
        [
            (ValidationError("v"), "VALIDATION_FAILED"),
            (BoardError("b"), "BOARD_ERROR"),
            (ObzError("o"), "OBZ_ERROR"),
            (ArchiveError("a"), "ARCHIVE_ERROR"),
            (StorageError("s"), "STORAGE_ERROR"),
        ],
    )
    def test_codes(self, exc: ObfError, code: str) -> None:
        assert error_code(exc) == code

    def test_detail_follows_cause_chain(self) -> None:
        issue = ValidationIssue("buttons.0.id", "Field required")
        try:
            try:
                raise ValidationError("Invalid board", [issue])
            except ValidationError as inner:
                raise BoardError("Invalid board") from inner
        except BoardError as exc:
            detail = error_detail(exc)
        assert detail == {"issues": [{"path": "buttons.0.id", "message": "Field required"}]}

    def test_detail_duplicates(self) -> None:
        exc = ObzError("dupes", [DuplicateId("a", ("button:x:a", "button:y:a"))])
        assert error_detail(exc) == {
            "duplicates": [{"id": "a", "locations": ["button:x:a", "button:y:a"]}]
        }

    def test_detail_empty(self) -> None:
        assert error_detail(StorageError("disk")) == {}
