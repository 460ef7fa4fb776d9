"""SQLAlchemy tables mirroring the JSON collection files.

Every collection gets its own table with the same shape: the record identifier
as primary key, an insertion counter that preserves collection order, and the
record itself as a JSON document.
"""
from __future__ import annotations

import re

from sqlalchemy import (
    Column,
    DateTime,
    Integer,
    JSON,
    MetaData,
    String,
    Table,
    func,
)

metadata = MetaData()

_TABLE_NAME = re.compile(r"[a-z][a-z0-9_]{0,62}")


def records_table(name: str) -> Table:
    """Return the table backing collection ``name``, declaring it on first use."""
    if not _TABLE_NAME.fullmatch(name or ""):
        raise ValueError(f"Invalid collection name: {name!r}")
    existing = metadata.tables.get(name)
    if existing is not None:
        return existing
    return Table(
        name,
        metadata,
        Column("id", String(64), primary_key=True),
        Column("seq", Integer, nullable=False, index=True),
        Column("data", JSON, nullable=False, default=dict),
        Column("created_at", DateTime(timezone=True), server_default=func.now(), nullable=False),
        Column("updated_at", DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False),
    )
