"""Error taxonomy shared by every layer.

Each failure kind is its own exception class so callers can react to
the category without parsing messages. Causes are chained with
``raise ... from exc``; inspect ``__cause__`` for the originating error.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from obzctl.domain.obz import DuplicateId
    from obzctl.domain.validation import ValidationIssue


class ObfError(Exception):
    """Base class for all obzctl errors."""


class ValidationError(ObfError):
    """A candidate value failed schema or invariant checks.

    ``issues`` holds the ordered ``(path, message)`` diagnostics.
    """

    def __init__(self, message: str, issues: Iterable[ValidationIssue] = ()) -> None:
        super().__init__(message)
        self.issues: tuple[ValidationIssue, ...] = tuple(issues)


class BoardError(ObfError):
    """A board mutation precondition failed."""


class ObzError(ObfError):
    """An OBZ aggregate precondition failed.

    ``duplicates`` is populated when the global ID check rejects the OBZ.
    """

    def __init__(self, message: str, duplicates: Iterable[DuplicateId] = ()) -> None:
        super().__init__(message)
        self.duplicates: tuple[DuplicateId, ...] = tuple(duplicates)


class ArchiveError(ObfError):
    """Packing or unpacking an OBZ archive failed."""


class StorageError(ObfError):
    """A storage backend failed for a reason other than not-found."""
