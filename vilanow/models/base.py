"""Entity model base: named queries composed over one record store."""
from __future__ import annotations

from datetime import datetime
from typing import Any, Iterable, Mapping, Optional

from vilanow.core.utils import parse_iso, utc_now, utc_now_iso
from vilanow.repositories.base import Predicate, Record, RecordStore, sort_records


def contains_ci(haystack: Any, needle: str) -> bool:
    """Case-insensitive substring test that tolerates missing fields."""
    return needle.lower() in str(haystack or "").lower()


def is_after(value: str | None, now: datetime) -> bool:
    parsed = parse_iso(value)
    return parsed is not None and parsed > now


def as_number(value: Any) -> Optional[float]:
    """Numeric field value, or None for missing or non-numeric data."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value


class EntityModel:
    """
    Wraps a ``RecordStore`` for one entity kind.

    Subclasses only add queries built from the store primitives, so ordering
    and copy guarantees of the store carry over unchanged.
    """

    collection: str = ""

    def __init__(self, store: RecordStore):
        self.store = store

    # -------------------------- delegated primitives --------------------------
    def find_all(self) -> list[Record]:
        return self.store.find_all()

    def find_by_id(self, record_id: str) -> Optional[Record]:
        return self.store.find_by_id(record_id)

    def find_one(self, predicate: Predicate) -> Optional[Record]:
        return self.store.find_one(predicate)

    def find_many(self, predicate: Predicate) -> list[Record]:
        return self.store.find_many(predicate)

    def find_by(self, order_by: str | None = None, descending: bool = False, **equals: Any) -> list[Record]:
        return self.store.find_by(order_by=order_by, descending=descending, **equals)

    def create(self, record: Mapping[str, Any]) -> Record:
        return self.store.create(record)

    def update(self, record_id: str, fields: Mapping[str, Any]) -> Optional[Record]:
        return self.store.update(record_id, fields)

    def delete(self, record_id: str) -> bool:
        return self.store.delete(record_id)

    def count(self) -> int:
        return self.store.count()

    def count_where(self, predicate: Predicate) -> int:
        return self.store.count_where(predicate)

    def reload(self) -> None:
        self.store.reload()

    # -------------------------- helpers --------------------------
    @staticmethod
    def _sorted(records: Iterable[Record], field: str, descending: bool = False) -> list[Record]:
        return sort_records(records, field, descending)

    @staticmethod
    def _now(now: datetime | None = None) -> datetime:
        return now or utc_now()

    def touch(self, record_id: str, fields: Mapping[str, Any]) -> Optional[Record]:
        """``update`` that also stamps ``updatedAt``."""
        return self.update(record_id, {**fields, "updatedAt": utc_now_iso()})

    def increment_field(self, record_id: str, field: str, amount: int | float = 1) -> Optional[Record]:
        """Read, add ``amount`` to a numeric field, write back. Not atomic across writers."""
        record = self.find_by_id(record_id)
        if not record:
            return None
        return self.touch(record_id, {field: (record.get(field) or 0) + amount})

    def delete_many(self, records: Iterable[Record]) -> int:
        removed = 0
        for record in records:
            if self.delete(record["id"]):
                removed += 1
        return removed
