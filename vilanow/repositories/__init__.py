"""
Persistence adapters.

Every domain model stores its records through a ``RecordStore``: today a JSON
file per collection or a table in a SQL database. Models and services depend
on the store interface, never on the file or the database directly.
"""

from .base import (
    DuplicateRecordError,
    Predicate,
    Record,
    RecordStore,
    StorageError,
    StorageUnavailableError,
)
from .json_storage import JsonFileAdapter, JsonRecordStore
from .sql_storage import SQLRecordStore

__all__ = [
    "DuplicateRecordError",
    "JsonFileAdapter",
    "JsonRecordStore",
    "Predicate",
    "Record",
    "RecordStore",
    "SQLRecordStore",
    "StorageError",
    "StorageUnavailableError",
]
