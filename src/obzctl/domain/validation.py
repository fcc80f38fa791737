"""Validation entry points for OBF documents.

Two flavours per resource:

- ``validate_<x>(candidate)`` never raises; it returns a
  :class:`ValidationResult` with the ordered issue list.
- ``validate_<x>_or_raise(candidate)`` returns the parsed model or raises
  :class:`~obzctl.domain.errors.ValidationError`.

The pydantic models in :mod:`obzctl.domain.schema` carry all of the rules;
this module only normalises pydantic's error report into
``(path, message)`` pairs.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import pydantic
from pydantic import BaseModel

from obzctl.domain.errors import ValidationError
from obzctl.domain.schema import (
    Board,
    Button,
    Grid,
    Image,
    Manifest,
    Obz,
    Sound,
    is_color,
)


@dataclass(frozen=True)
class ValidationIssue:
    """One diagnostic: dotted location and human message."""

    path: str
    message: str

    def __str__(self) -> str:
        return f"{self.path}: {self.message}" if self.path else self.message

    def to_dict(self) -> dict[str, str]:
        return {"path": self.path, "message": self.message}


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of a non-raising validation call."""

    success: bool
    error: str | None = None
    details: tuple[ValidationIssue, ...] = ()


def issues_from_exception(exc: pydantic.ValidationError) -> tuple[ValidationIssue, ...]:
    """Flatten a pydantic error report into ordered issues."""
    return tuple(
        ValidationIssue(
            path=".".join(str(part) for part in err["loc"]),
            message=err["msg"],
        )
        for err in exc.errors(include_url=False)
    )


def format_issues(issues: tuple[ValidationIssue, ...]) -> str:
    """Join issues into the ``"path: message; ..."`` summary."""
    return "; ".join(str(issue) for issue in issues)


def validate[M: BaseModel](model_cls: type[M], candidate: Any) -> ValidationResult:
    """Validate *candidate* against *model_cls* without raising."""
    if isinstance(candidate, model_cls):
        candidate = candidate.model_dump()
    try:
        model_cls.model_validate(candidate)
    except pydantic.ValidationError as exc:
        issues = issues_from_exception(exc)
        return ValidationResult(success=False, error=format_issues(issues), details=issues)
    return ValidationResult(success=True)


def validate_or_raise[M: BaseModel](model_cls: type[M], candidate: Any, *, label: str) -> M:
    """Parse *candidate* into *model_cls* or raise :class:`ValidationError`."""
    if isinstance(candidate, model_cls):
        # Instances are re-checked from their dump.
        candidate = candidate.model_dump()
    try:
        return model_cls.model_validate(candidate)
    except pydantic.ValidationError as exc:
        issues = issues_from_exception(exc)
        raise ValidationError(f"Invalid {label}: {format_issues(issues)}", issues) from exc


# ---------------------------------------------------------------------------
# Per-resource wrappers
# ---------------------------------------------------------------------------


def validate_board(candidate: Any) -> ValidationResult:
    return validate(Board, candidate)


def validate_button(candidate: Any) -> ValidationResult:
    return validate(Button, candidate)


def validate_image(candidate: Any) -> ValidationResult:
    return validate(Image, candidate)


def validate_sound(candidate: Any) -> ValidationResult:
    return validate(Sound, candidate)


def validate_grid(candidate: Any) -> ValidationResult:
    return validate(Grid, candidate)


def validate_manifest(candidate: Any) -> ValidationResult:
    return validate(Manifest, candidate)


def validate_obz(candidate: Any) -> ValidationResult:
    return validate(Obz, candidate)


def validate_color(candidate: Any) -> ValidationResult:
    """Check a single colour string (``rgb(...)`` / ``rgba(...)``)."""
    if isinstance(candidate, str) and is_color(candidate):
        return ValidationResult(success=True)
    issue = ValidationIssue(
        path="",
        message="Color must be rgb(r, g, b) or rgba(r, g, b, a) with 0 <= a <= 1",
    )
    return ValidationResult(success=False, error=str(issue), details=(issue,))


def validate_board_or_raise(candidate: Any) -> Board:
    return validate_or_raise(Board, candidate, label="board")


def validate_button_or_raise(candidate: Any) -> Button:
    return validate_or_raise(Button, candidate, label="button")


def validate_image_or_raise(candidate: Any) -> Image:
    return validate_or_raise(Image, candidate, label="image")


def validate_sound_or_raise(candidate: Any) -> Sound:
    return validate_or_raise(Sound, candidate, label="sound")


def validate_grid_or_raise(candidate: Any) -> Grid:
    return validate_or_raise(Grid, candidate, label="grid")


def validate_manifest_or_raise(candidate: Any) -> Manifest:
    return validate_or_raise(Manifest, candidate, label="manifest")


def validate_obz_or_raise(candidate: Any) -> Obz:
    return validate_or_raise(Obz, candidate, label="obz")
