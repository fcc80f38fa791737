"""Pydantic configuration models with code-baked defaults.

Sparse TOML contract: defaults baked here, obzctl.toml only contains
overrides. An empty (or absent) config file is valid.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

from obzctl.infrastructure.codec import DEFAULT_COMPRESSION_LEVEL

# --- obzctl.toml sections ---


class StorageConfig(BaseModel):
    """[storage] section.

    ``path`` is relative to the workspace root unless absolute; the
    default is ``.obzctl`` beside ``obzctl.toml``.
    """

    model_config = {"frozen": True}

    backend: Literal["file", "sqlite"] = "file"
    path: str = ".obzctl"


class BoardConfig(BaseModel):
    """[board] section — defaults for ``board create``."""

    model_config = {"frozen": True}

    locale: str = "en"
    rows: int = Field(default=3, gt=0)
    columns: int = Field(default=3, gt=0)


class ArchiveConfig(BaseModel):
    """[archive] section."""

    model_config = {"frozen": True}

    compression_level: int = Field(default=DEFAULT_COMPRESSION_LEVEL, ge=0, le=9)
