"""
JSON-file persistence: one file per collection.

The whole collection lives in memory and the whole file is rewritten on every
mutation, before the mutating call returns. Writes go to a temporary file in
the same directory that then replaces the target, so a crash leaves either the
previous or the new contents on disk.
"""

from __future__ import annotations

import copy
import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Any, Mapping, Optional

from .base import (
    ID_FIELD,
    DuplicateRecordError,
    Predicate,
    Record,
    RecordStore,
    StorageUnavailableError,
    merge_fields,
    record_id_of,
    to_stored,
)

logger = logging.getLogger(__name__)


class CorruptCollectionError(ValueError):
    """File exists but does not hold a JSON array of objects."""


class JsonFileAdapter:
    """Reads and rewrites one collection file."""

    def __init__(self, path: str | Path):
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.exists()

    def read(self) -> list[Record]:
        with self.path.open("r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, list) or not all(isinstance(item, dict) for item in data):
            raise CorruptCollectionError(f"{self.path} does not contain a list of records")
        return data

    def write(self, records: list[Record]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = json.dumps(records, ensure_ascii=False, indent=2)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{self.path.name}.", suffix=".tmp", dir=str(self.path.parent))
        tmp_path = Path(tmp_name)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            tmp_path.replace(self.path)
        finally:
            if tmp_path.exists():
                tmp_path.unlink()


class JsonRecordStore(RecordStore):
    """In-memory collection synchronised to a JSON file on every write."""

    backend = "json"

    def __init__(self, name: str, adapter: JsonFileAdapter):
        super().__init__(name)
        self.adapter = adapter
        self._records: list[Record] = []
        self._lock = threading.RLock()
        self._load()

    @classmethod
    def in_directory(cls, name: str, data_dir: str | Path) -> "JsonRecordStore":
        return cls(name, JsonFileAdapter(Path(data_dir) / f"{name}.json"))

    # -------------------------- lifecycle --------------------------
    def _load(self) -> None:
        with self._lock:
            if not self.adapter.exists():
                self._records = []
                try:
                    self.adapter.write(self._records)
                except OSError as exc:
                    logger.warning("[%s] Could not create %s (%s); serving an empty collection", self.name, self.adapter.path, exc)
                return
            try:
                self._records = self.adapter.read()
            except (OSError, ValueError) as exc:
                # json.JSONDecodeError and CorruptCollectionError are both ValueErrors
                logger.warning("[%s] Unreadable collection file %s (%s); starting empty", self.name, self.adapter.path, exc)
                self._records = []
                return
            logger.info("[%s] Loaded %d records from %s", self.name, len(self._records), self.adapter.path)

    def reload(self) -> None:
        self._load()

    def _persist(self, records: list[Record]) -> None:
        try:
            self.adapter.write(records)
        except OSError as exc:
            raise StorageUnavailableError(self.name, f"could not write {self.adapter.path}: {exc}") from exc

    def _index_of(self, record_id: str) -> int:
        for index, record in enumerate(self._records):
            if record.get(ID_FIELD) == record_id:
                return index
        return -1

    # -------------------------- queries --------------------------
    def find_all(self) -> list[Record]:
        with self._lock:
            return copy.deepcopy(self._records)

    def find_by_id(self, record_id: str) -> Optional[Record]:
        with self._lock:
            index = self._index_of(record_id)
            return copy.deepcopy(self._records[index]) if index >= 0 else None

    def find_one(self, predicate: Predicate) -> Optional[Record]:
        with self._lock:
            for record in self._records:
                candidate = copy.deepcopy(record)
                if predicate(candidate):
                    return candidate
        return None

    def find_many(self, predicate: Predicate) -> list[Record]:
        return [record for record in self.find_all() if predicate(record)]

    def count(self) -> int:
        with self._lock:
            return len(self._records)

    # -------------------------- mutations --------------------------
    def create(self, record: Mapping[str, Any]) -> Record:
        record_id = record_id_of(record)
        stored = to_stored(record)
        with self._lock:
            if self._index_of(record_id) >= 0:
                raise DuplicateRecordError(self.name, record_id)
            self._persist(self._records + [stored])
            self._records.append(stored)
            return copy.deepcopy(stored)

    def update(self, record_id: str, fields: Mapping[str, Any]) -> Optional[Record]:
        with self._lock:
            index = self._index_of(record_id)
            if index < 0:
                return None
            merged = merge_fields(self._records[index], record_id, fields)
            candidate = list(self._records)
            candidate[index] = merged
            self._persist(candidate)
            self._records = candidate
            return copy.deepcopy(merged)

    def delete(self, record_id: str) -> bool:
        with self._lock:
            index = self._index_of(record_id)
            if index < 0:
                return False
            candidate = self._records[:index] + self._records[index + 1 :]
            self._persist(candidate)
            self._records = candidate
            return True
