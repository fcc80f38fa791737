"""Format constants and resource classification enums."""

from __future__ import annotations

from enum import StrEnum

OBF_FORMAT_VERSION = "open-board-0.1"

MANIFEST_FILENAME = "manifest.json"
BOARD_PATH_TEMPLATE = "boards/{board_id}.obf"

# Button/board keys carrying this prefix are opaque extension data.
EXTENSION_PREFIX = "ext_"


class ResourceType(StrEnum):
    """Resource kinds that share the global OBZ id namespace."""

    BOARD = "board"
    BUTTON = "button"
    IMAGE = "image"
    SOUND = "sound"


class FileKind(StrEnum):
    """Single-file formats accepted by the loaders."""

    OBF = ".obf"
    OBZ = ".obz"
