"""Zip container codec for OBZ archives.

The codec only moves bytes: ``compress`` turns a path-to-bytes mapping into
a zip file and ``decompress`` does the reverse. It knows nothing about
manifests or boards. Archive services accept any object satisfying
:class:`ArchiveCodec`, so tests can swap in an in-memory fake.
"""

from __future__ import annotations

import zipfile
from collections.abc import Mapping
from io import BytesIO
from typing import Protocol

DEFAULT_COMPRESSION_LEVEL = 6


class ArchiveCodec(Protocol):
    def compress(self, files: Mapping[str, bytes]) -> bytes: ...

    def decompress(self, data: bytes) -> dict[str, bytes]: ...


class ZipCodec:
    """Deflate-compressed zip archives held entirely in memory."""

    def __init__(self, compression_level: int = DEFAULT_COMPRESSION_LEVEL) -> None:
        self.compression_level = compression_level

    def compress(self, files: Mapping[str, bytes]) -> bytes:
        buffer = BytesIO()
        with zipfile.ZipFile(
            buffer,
            "w",
            compression=zipfile.ZIP_DEFLATED,
            compresslevel=self.compression_level,
        ) as zf:
            for name, content in files.items():
                zf.writestr(name, content)
        return buffer.getvalue()

    def decompress(self, data: bytes) -> dict[str, bytes]:
        """Read every file entry; directory entries are skipped.

        Raises:
            zipfile.BadZipFile: *data* is not a zip archive.
        """
        with zipfile.ZipFile(BytesIO(data)) as zf:
            return {info.filename: zf.read(info) for info in zf.infolist() if not info.is_dir()}
