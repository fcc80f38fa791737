"""SQLAlchemy Core table definitions for the board store.

Documents are stored whole as JSON text; the extra columns exist for
listing without parsing every row.
"""

from __future__ import annotations

from sqlalchemy import Column, MetaData, Table, Text

metadata = MetaData()

boards = Table(
    "boards",
    metadata,
    Column("id", Text, primary_key=True),
    Column("name", Text, nullable=False),
    Column("document", Text, nullable=False),  # Board JSON
    Column("updated", Text, nullable=False),  # ISO-8601 UTC
)

obzs = Table(
    "obzs",
    metadata,
    Column("key", Text, primary_key=True),  # manifest.root
    Column("root", Text, nullable=False),
    Column("document", Text, nullable=False),  # Obz JSON, files base64-encoded
    Column("updated", Text, nullable=False),
)
