"""Workspace — the single dependency injected into every service.

Owns the storage adapter and the archive codec for one CLI invocation.
The adapter is built on first access so commands that only read files
(``check``, ``archive unpack --no-save``) never touch the store.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Self

from obzctl.infrastructure.codec import ArchiveCodec, ZipCodec
from obzctl.infrastructure.storage import create_storage

if TYPE_CHECKING:
    from types import TracebackType

    from obzctl.config.settings import ObzSettings
    from obzctl.infrastructure.storage.interface import StorageAdapter


class Workspace:
    """Caller-owned context: settings, storage, and codec."""

    def __init__(
        self,
        settings: ObzSettings,
        *,
        storage: StorageAdapter | None = None,
        codec: ArchiveCodec | None = None,
    ) -> None:
        self._settings = settings
        self._storage = storage
        self._codec = codec or ZipCodec(settings.archive.compression_level)

    @property
    def settings(self) -> ObzSettings:
        return self._settings

    @property
    def root(self) -> Path:
        return self._settings.workspace_root

    @property
    def storage(self) -> StorageAdapter:
        """The configured storage backend (created lazily)."""
        if self._storage is None:
            self._storage = create_storage(self._settings)
        return self._storage

    @property
    def codec(self) -> ArchiveCodec:
        return self._codec

    def close(self) -> None:
        if self._storage is not None:
            self._storage.close()

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
