"""OBF schema models — Board, Button, Image, Sound, Grid, License, Manifest, Obz.

Field names map 1:1 to the JSON keys of the Open Board Format so that
``Model.model_validate(json.loads(text))`` parses a document and
``model.to_dict()`` produces one. All models are frozen; a "changed"
board is always a new value built by :mod:`obzctl.domain.boards`.

Cross-field rules live on the models as ``model_validator`` hooks:

- Button: positioning quad is all-or-nothing.
- Image / Sound: at least one content source.
- Grid: ``order`` is exactly ``rows`` x ``columns``.
- Board: unique IDs per collection, grid cells reference real buttons.
- Manifest: ``root`` is one of the board paths.

Optional fields that are ``None`` are omitted on output. ``ext_*`` keys on
Board and Button are lifted into the ``extensions`` side-map on input and
flattened back on output; other unknown keys are ignored.
"""

from __future__ import annotations

import re
from collections import Counter
from collections.abc import Iterable, Iterator
from typing import Annotated, Any, ClassVar, Literal, Self
from urllib.parse import urlsplit

from pydantic import (
    AfterValidator,
    BaseModel,
    BeforeValidator,
    Field,
    SerializerFunctionWrapHandler,
    field_validator,
    model_serializer,
    model_validator,
)
from pydantic_core import PydanticCustomError

from obzctl.domain.types import EXTENSION_PREFIX

# ---------------------------------------------------------------------------
# Field-level formats
# ---------------------------------------------------------------------------

RGB_COLOR_PATTERN = re.compile(r"^rgb\(\s*\d+\s*,\s*\d+\s*,\s*\d+\s*\)$")
RGBA_COLOR_PATTERN = re.compile(
    r"^rgba\(\s*\d+\s*,\s*\d+\s*,\s*\d+\s*,\s*(?:0|0?\.\d+|1(?:\.0)?)\s*\)$"
)
_EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")


def is_color(value: str) -> bool:
    """Return True for ``rgb(r, g, b)`` or ``rgba(r, g, b, a)`` with 0 <= a <= 1."""
    return bool(RGB_COLOR_PATTERN.fullmatch(value) or RGBA_COLOR_PATTERN.fullmatch(value))


def _check_color(value: str) -> str:
    if not is_color(value):
        raise PydanticCustomError(
            "color",
            "Color must be rgb(r, g, b) or rgba(r, g, b, a) with 0 <= a <= 1",
        )
    return value


def _check_url(value: str) -> str:
    parts = urlsplit(value)
    if not parts.scheme or not (parts.netloc or parts.path):
        raise PydanticCustomError("url", "Invalid URL")
    return value


def _check_email(value: str) -> str:
    if not _EMAIL_PATTERN.fullmatch(value):
        raise PydanticCustomError("email", "Invalid email")
    return value


def _coerce_identifier(value: Any) -> Any:
    # Legacy boards carry numeric ids.
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return value


Identifier = Annotated[str, BeforeValidator(_coerce_identifier), Field(min_length=1)]
OptionalIdentifier = Annotated[str | None, BeforeValidator(_coerce_identifier)]
GridCell = Annotated[str | None, BeforeValidator(_coerce_identifier)]
Color = Annotated[str, AfterValidator(_check_color)]
Url = Annotated[str, AfterValidator(_check_url)]
Email = Annotated[str, AfterValidator(_check_email)]
# Strict: numeric strings and booleans are not numbers.
UnitInterval = Annotated[float, Field(ge=0.0, le=1.0, strict=True)]
PositiveInt = Annotated[int, Field(gt=0, strict=True)]
PositiveFloat = Annotated[float, Field(gt=0, strict=True)]


def _duplicates(values: Iterable[str]) -> list[str]:
    counts = Counter(values)
    return [value for value, count in counts.items() if count > 1]


# ---------------------------------------------------------------------------
# Base classes
# ---------------------------------------------------------------------------


class ObfModel(BaseModel):
    """Frozen base for every OBF document model."""

    model_config = {"frozen": True, "extra": "ignore"}

    @model_serializer(mode="wrap")
    def _serialize(self, handler: SerializerFunctionWrapHandler) -> dict[str, Any]:
        data = handler(self)
        extensions = data.pop("extensions", None) or {}
        output = {key: value for key, value in data.items() if value is not None}
        output.update(extensions)
        return output

    def to_dict(self) -> dict[str, Any]:
        """JSON-compatible dict in OBF key layout."""
        return self.model_dump(mode="json")


class ExtensibleModel(ObfModel):
    """Model that carries opaque ``ext_*`` fields in a side-map."""

    extensions: dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _lift_extensions(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        lifted = {
            key: value
            for key, value in data.items()
            if isinstance(key, str) and key.startswith(EXTENSION_PREFIX)
        }
        if not lifted:
            return data
        rest = {key: value for key, value in data.items() if key not in lifted}
        rest["extensions"] = {**(rest.get("extensions") or {}), **lifted}
        return rest

    @field_validator("extensions")
    @classmethod
    def _check_extension_keys(cls, value: dict[str, Any]) -> dict[str, Any]:
        bad = sorted(key for key in value if not key.startswith(EXTENSION_PREFIX))
        if bad:
            raise PydanticCustomError(
                "extension_key",
                "Extension keys must start with 'ext_': {keys}",
                {"keys": ", ".join(bad)},
            )
        return value


# ---------------------------------------------------------------------------
# Leaf models
# ---------------------------------------------------------------------------


class License(ObfModel):
    """Attribution metadata for a board or asset."""

    type: str
    copyright_notice_url: Url | None = None
    source_url: Url | None = None
    author_name: str | None = None
    author_url: Url | None = None
    author_email: Email | None = None


class Symbol(ObfModel):
    """Reference into a named external symbol set."""

    set: str
    filename: str


class LoadBoard(ObfModel):
    """Link from a button to another board (by id, name, path, or URL)."""

    id: str | None = None
    name: str | None = None
    data_url: Url | None = None
    url: Url | None = None
    path: str | None = None


class Button(ExtensibleModel):
    """One cell's content on a board."""

    id: Identifier
    label: str | None = None
    vocalization: str | None = None
    image_id: OptionalIdentifier = None
    sound_id: OptionalIdentifier = None
    background_color: Color | None = None
    border_color: Color | None = None
    action: str | None = None
    actions: list[str] | None = None
    load_board: LoadBoard | None = None
    top: UnitInterval | None = None
    left: UnitInterval | None = None
    width: UnitInterval | None = None
    height: UnitInterval | None = None

    @property
    def has_position(self) -> bool:
        """True when the full absolute-positioning quad is present."""
        return None not in (self.top, self.left, self.width, self.height)

    @model_validator(mode="after")
    def _check_position(self) -> Self:
        quad = (self.top, self.left, self.width, self.height)
        if any(v is not None for v in quad) and None in quad:
            raise PydanticCustomError(
                "partial_position",
                "If any positioning property is defined, all must be defined "
                "(top, left, width, height)",
            )
        return self


class Asset(ObfModel):
    """Shared shape of Image and Sound descriptors."""

    SOURCE_FIELDS: ClassVar[tuple[str, ...]] = ("url", "data_url", "path", "data")

    id: Identifier
    url: Url | None = None
    data_url: Url | None = None
    path: str | None = None
    data: str | None = None
    content_type: str | None = None
    license: License | None = None

    @model_validator(mode="after")
    def _require_source(self) -> Self:
        if not any(getattr(self, name) for name in self.SOURCE_FIELDS):
            kind = type(self).__name__
            raise PydanticCustomError(
                "missing_source",
                "{kind} must have at least one of: {fields}",
                {"kind": kind, "fields": ", ".join(self.SOURCE_FIELDS)},
            )
        return self


class Image(Asset):
    """Image descriptor; ``symbol`` counts as a content source."""

    SOURCE_FIELDS: ClassVar[tuple[str, ...]] = ("url", "data_url", "path", "data", "symbol")

    symbol: Symbol | None = None
    width: PositiveInt | None = None
    height: PositiveInt | None = None


class Sound(Asset):
    """Sound descriptor."""

    duration: PositiveFloat | None = None


class Grid(ObfModel):
    """Row-major layout of button ids (``None`` marks an empty cell)."""

    rows: PositiveInt
    columns: PositiveInt
    order: list[list[GridCell]]

    @classmethod
    def empty(cls, rows: int, columns: int) -> Grid:
        """Build a grid with every cell empty."""
        return cls(rows=rows, columns=columns, order=[[None] * columns for _ in range(rows)])

    def cells(self) -> Iterator[tuple[int, int, str | None]]:
        """Yield ``(row, column, button_id)`` in row-major order."""
        for r, row in enumerate(self.order):
            for c, cell in enumerate(row):
                yield r, c, cell

    @model_validator(mode="after")
    def _check_dimensions(self) -> Self:
        if len(self.order) != self.rows or any(len(row) != self.columns for row in self.order):
            raise PydanticCustomError(
                "grid_dimensions",
                "Grid order dimensions must match rows and columns",
            )
        return self


# ---------------------------------------------------------------------------
# Board
# ---------------------------------------------------------------------------


class Board(ExtensibleModel):
    """A single communication board (one ``.obf`` document)."""

    # Must stay in step with types.OBF_FORMAT_VERSION.
    format: Literal["open-board-0.1"]
    id: Identifier
    locale: str
    name: str
    url: Url | None = None
    description_html: str | None = None
    buttons: list[Button]
    images: list[Image] = Field(default_factory=list)
    sounds: list[Sound] = Field(default_factory=list)
    grid: Grid
    strings: dict[str, dict[str, str]] | None = None
    license: License | None = None

    @model_validator(mode="after")
    def _check_integrity(self) -> Self:
        collections = {
            "button": [b.id for b in self.buttons],
            "image": [i.id for i in self.images],
            "sound": [s.id for s in self.sounds],
        }
        for kind, ids in collections.items():
            dupes = _duplicates(ids)
            if dupes:
                raise PydanticCustomError(
                    "duplicate_id",
                    "Duplicate {kind} id(s): {ids}",
                    {"kind": kind, "ids": ", ".join(dupes)},
                )

        known = {button.id for button in self.buttons}
        dangling = sorted(
            {cell for _, _, cell in self.grid.cells() if cell is not None and cell not in known}
        )
        if dangling:
            raise PydanticCustomError(
                "dangling_grid_reference",
                "Grid references unknown button id(s): {ids}",
                {"ids": ", ".join(dangling)},
            )
        return self


# ---------------------------------------------------------------------------
# Manifest / Obz
# ---------------------------------------------------------------------------


class ManifestPaths(ObfModel):
    """ID to archive-path tables."""

    boards: dict[str, str] = Field(default_factory=dict)
    images: dict[str, str] | None = None
    sounds: dict[str, str] | None = None


class Manifest(ObfModel):
    """The ``manifest.json`` cross-reference table of an OBZ."""

    format: Literal["open-board-0.1"]
    root: str
    paths: ManifestPaths

    @model_validator(mode="after")
    def _check_root(self) -> Self:
        if self.root not in self.paths.boards.values():
            raise PydanticCustomError(
                "unknown_root",
                "Manifest root '{root}' is not listed in paths.boards",
                {"root": self.root},
            )
        return self


class Obz(ObfModel):
    """In-memory OBZ aggregate: manifest, boards by id, and binary assets."""

    manifest: Manifest
    boards: dict[str, Board]
    files: dict[str, bytes] | None = None

    @model_validator(mode="after")
    def _check_board_paths(self) -> Self:
        missing = sorted(key for key in self.boards if key not in self.manifest.paths.boards)
        if missing:
            raise PydanticCustomError(
                "unlisted_board",
                "Board(s) missing from manifest paths.boards: {ids}",
                {"ids": ", ".join(missing)},
            )
        return self


__all__ = [
    "Asset",
    "Board",
    "Button",
    "Color",
    "ExtensibleModel",
    "Grid",
    "Identifier",
    "Image",
    "License",
    "LoadBoard",
    "Manifest",
    "ManifestPaths",
    "Obz",
    "ObfModel",
    "RGBA_COLOR_PATTERN",
    "RGB_COLOR_PATTERN",
    "Sound",
    "Symbol",
    "is_color",
]
