"""Board and OBZ persistence backends."""

from __future__ import annotations

from typing import TYPE_CHECKING

from obzctl.infrastructure.storage.database import DatabaseStorage
from obzctl.infrastructure.storage.filesystem import FileStorage
from obzctl.infrastructure.storage.interface import StorageAdapter

if TYPE_CHECKING:
    from obzctl.config.settings import ObzSettings

DATABASE_FILENAME = "obzctl.db"


def create_storage(settings: ObzSettings) -> StorageAdapter:
    """Build the backend named by ``settings.storage.backend``."""
    root = settings.storage_root
    if settings.storage.backend == "sqlite":
        return DatabaseStorage(root / DATABASE_FILENAME)
    return FileStorage(root)


__all__ = [
    "DATABASE_FILENAME",
    "DatabaseStorage",
    "FileStorage",
    "StorageAdapter",
    "create_storage",
]
