"""
Generic record store contract shared by the JSON-file and SQL backends.

A store holds one named collection of records (plain dicts) keyed by their
``"id"`` field. Queries evaluate predicates in collection (insertion) order,
and every record handed out is a copy, so callers can only change state
through ``create``, ``update`` or ``delete``.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from typing import Any, Callable, Iterable, Mapping, Optional

Record = dict[str, Any]
Predicate = Callable[[Record], bool]

ID_FIELD = "id"
MAX_ID_LENGTH = 64


class StorageError(Exception):
    """Base class for record store failures."""


class StorageUnavailableError(StorageError):
    """Raised when the backing medium cannot be written."""

    def __init__(self, collection: str, message: str):
        super().__init__(f"[{collection}] {message}")
        self.collection = collection


class DuplicateRecordError(StorageError):
    """Raised when ``create`` receives an identifier already present."""

    def __init__(self, collection: str, record_id: str):
        super().__init__(f"[{collection}] record {record_id!r} already exists")
        self.collection = collection
        self.record_id = record_id


def record_id_of(record: Mapping[str, Any]) -> str:
    """Validate and return the identifier of a record about to be stored."""
    if not isinstance(record, Mapping):
        raise ValueError(f"Record must be a mapping, got {type(record).__name__}")
    value = record.get(ID_FIELD)
    if not isinstance(value, str) or not value:
        raise ValueError("Record must carry a non-empty string 'id'")
    if len(value) > MAX_ID_LENGTH:
        raise ValueError(f"Record id longer than {MAX_ID_LENGTH} characters")
    return value


def to_stored(record: Mapping[str, Any]) -> Record:
    """
    The JSON form of ``record``, i.e. exactly what the backing medium holds:
    tuples become lists and non-string keys become strings.
    """
    try:
        return json.loads(json.dumps(dict(record), ensure_ascii=False))
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Record is not JSON serialisable: {exc}") from exc


def merge_fields(current: Record, record_id: str, fields: Mapping[str, Any]) -> Record:
    """Shallow-merge ``fields`` onto ``current``; the identifier cannot change."""
    if ID_FIELD in fields and fields[ID_FIELD] != record_id:
        raise ValueError(f"Cannot change identifier {record_id!r} to {fields[ID_FIELD]!r}")
    merged = dict(current)
    merged.update(to_stored(fields))
    merged[ID_FIELD] = record_id
    return merged


def matches_equals(record: Mapping[str, Any], equals: Mapping[str, Any]) -> bool:
    return all(field in record and record[field] == value for field, value in equals.items())


def sort_records(records: Iterable[Record], field: str, descending: bool = False) -> list[Record]:
    """
    Stable sort on one field. Records missing the field (or holding None)
    always come last, whatever the direction.
    """
    records = list(records)
    present = [r for r in records if r.get(field) is not None]
    missing = [r for r in records if r.get(field) is None]
    present.sort(key=lambda r: r[field], reverse=descending)
    return present + missing


class RecordStore(ABC):
    """Persistent, ordered collection of uniquely identified records."""

    backend = "abstract"

    def __init__(self, name: str):
        self.name = name

    # -------------------------- queries --------------------------
    @abstractmethod
    def find_all(self) -> list[Record]:
        """Every record, in insertion order."""

    @abstractmethod
    def find_by_id(self, record_id: str) -> Optional[Record]:
        ...

    def find_one(self, predicate: Predicate) -> Optional[Record]:
        for record in self.find_all():
            if predicate(record):
                return record
        return None

    def find_many(self, predicate: Predicate) -> list[Record]:
        return [record for record in self.find_all() if predicate(record)]

    def find_by(self, order_by: str | None = None, descending: bool = False, **equals: Any) -> list[Record]:
        """Records whose fields equal ``equals``, optionally sorted by ``order_by``."""
        found = self.find_many(lambda record: matches_equals(record, equals))
        if order_by:
            found = sort_records(found, order_by, descending)
        return found

    def exists(self, record_id: str) -> bool:
        return self.find_by_id(record_id) is not None

    def count(self) -> int:
        return len(self.find_all())

    def count_where(self, predicate: Predicate) -> int:
        return len(self.find_many(predicate))

    # -------------------------- mutations --------------------------
    @abstractmethod
    def create(self, record: Mapping[str, Any]) -> Record:
        ...

    @abstractmethod
    def update(self, record_id: str, fields: Mapping[str, Any]) -> Optional[Record]:
        ...

    @abstractmethod
    def delete(self, record_id: str) -> bool:
        ...

    def reload(self) -> None:
        """Re-read the backing medium. Stores without local state do nothing."""

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name!r} backend={self.backend}>"
