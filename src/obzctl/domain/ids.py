"""ID generation and lookup helpers.

Generated IDs are 16 lowercase base-36 characters. Callers may supply
any non-empty string instead; uniqueness is only checked against the
collection the ID is being added to.
"""

from __future__ import annotations

import secrets
import string
from collections.abc import Iterable
from typing import Protocol

ID_ALPHABET = string.ascii_lowercase + string.digits
ID_LENGTH = 16


class HasId(Protocol):
    id: str


def generate_id() -> str:
    """Return a fresh random ID."""
    return "".join(secrets.choice(ID_ALPHABET) for _ in range(ID_LENGTH))


def is_id_used(identifier: str, collection: Iterable[HasId]) -> bool:
    """Check whether *identifier* is already taken in *collection*."""
    return any(item.id == identifier for item in collection)


def generate_unique_id(collection: Iterable[HasId]) -> str:
    """Generate an ID not present in *collection*."""
    taken = {item.id for item in collection}
    candidate = generate_id()
    while candidate in taken:
        candidate = generate_id()
    return candidate
