"""JSON text encoding of stored boards and OBZ aggregates.

Boards are stored in their OBF layout. An OBZ record holds the manifest,
the boards keyed by id, and ``files`` with each payload base64-encoded.
Decoding re-validates, so a hand-edited record cannot load as an invalid
model.
"""

from __future__ import annotations

import base64
import json
from typing import Any

from obzctl.domain.schema import Board, Obz
from obzctl.domain.validation import validate_board_or_raise, validate_obz_or_raise


def dump_board(board: Board) -> str:
    return json.dumps(board.to_dict(), indent=2, ensure_ascii=False)


def load_board(text: str) -> Board:
    """Parse a stored board.

    Raises:
        json.JSONDecodeError: The record is not JSON.
        obzctl.domain.errors.ValidationError: The record is not a valid board.
    """
    return validate_board_or_raise(json.loads(text))


def dump_obz(obz: Obz) -> str:
    record: dict[str, Any] = {
        "manifest": obz.manifest.to_dict(),
        "boards": {key: board.to_dict() for key, board in obz.boards.items()},
    }
    if obz.files:
        record["files"] = {
            path: base64.b64encode(content).decode("ascii") for path, content in obz.files.items()
        }
    return json.dumps(record, indent=2, ensure_ascii=False)


def load_obz(text: str) -> Obz:
    """Parse a stored OBZ, decoding ``files`` back to bytes."""
    record = json.loads(text)
    if isinstance(record, dict) and record.get("files"):
        record["files"] = {
            path: base64.b64decode(content, validate=True)
            for path, content in record["files"].items()
        }
    return validate_obz_or_raise(record)
