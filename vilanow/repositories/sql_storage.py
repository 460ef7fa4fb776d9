"""SQL-backed record store (SQLAlchemy Core over one table per collection).

Nothing is cached in process: every call opens a session, runs its statements
and commits before returning. Driver errors propagate unchanged as
``SQLAlchemyError``; the only translation is a primary-key clash on insert,
which becomes ``DuplicateRecordError`` like in the JSON store.
"""
from __future__ import annotations

import copy
import logging
from datetime import datetime, timezone
from typing import Any, Mapping, Optional

from sqlalchemy import delete, func, insert, select, update
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from vilanow.db.models import records_table
from vilanow.db.session import get_session

from .base import (
    DuplicateRecordError,
    Record,
    RecordStore,
    merge_fields,
    matches_equals,
    record_id_of,
    sort_records,
    to_stored,
)

logger = logging.getLogger(__name__)


class SQLRecordStore(RecordStore):
    """CRUD helpers translating the record store primitives into SQL."""

    backend = "sql"

    def __init__(self, name: str, engine: Engine):
        super().__init__(name)
        self.engine = engine
        self.table = records_table(name)
        self._provision()

    def _provision(self) -> None:
        try:
            self.table.create(bind=self.engine, checkfirst=True)
        except SQLAlchemyError as exc:
            logger.warning("[%s] Could not provision table (%s); queries will fail until the database is reachable", self.name, exc)

    @staticmethod
    def _row_to_record(row) -> Record:
        return copy.deepcopy(dict(row.data or {}))

    def _equality_clause(self, field: str, value: Any):
        """SQL comparison for one JSON field, or None when it must be checked in Python."""
        element = self.table.c.data[field]
        if isinstance(value, bool):
            return element.as_boolean() == value
        if isinstance(value, int):
            return element.as_integer() == value
        if isinstance(value, float):
            return element.as_float() == value
        if isinstance(value, str):
            return element.as_string() == value
        return None

    def _ordered(self, stmt):
        """Collection order. Concurrent creates may share a ``seq``; created_at then id break the tie."""
        return stmt.order_by(self.table.c.seq, self.table.c.created_at, self.table.c.id)

    # -------------------------- queries --------------------------
    def find_all(self) -> list[Record]:
        with get_session(self.engine) as session:
            rows = session.execute(self._ordered(select(self.table.c.data))).all()
            return [self._row_to_record(row) for row in rows]

    def find_by_id(self, record_id: str) -> Optional[Record]:
        with get_session(self.engine) as session:
            row = session.execute(select(self.table.c.data).where(self.table.c.id == record_id)).first()
            return self._row_to_record(row) if row else None

    def find_by(self, order_by: str | None = None, descending: bool = False, **equals: Any) -> list[Record]:
        stmt = self._ordered(select(self.table.c.data))
        for field, value in equals.items():
            if field == "id" and isinstance(value, str):
                stmt = stmt.where(self.table.c.id == value)
                continue
            clause = self._equality_clause(field, value)
            if clause is not None:
                stmt = stmt.where(clause)
        with get_session(self.engine) as session:
            rows = session.execute(stmt).all()
        # JSON casts are lenient (e.g. "1" == 1 on some dialects); re-check strictly.
        found = [r for r in (self._row_to_record(row) for row in rows) if matches_equals(r, equals)]
        if order_by:
            found = sort_records(found, order_by, descending)
        return found

    def count(self) -> int:
        with get_session(self.engine) as session:
            return int(session.execute(select(func.count()).select_from(self.table)).scalar_one())

    # -------------------------- mutations --------------------------
    def create(self, record: Mapping[str, Any]) -> Record:
        record_id = record_id_of(record)
        stored = to_stored(record)
        now = datetime.now(timezone.utc)
        with get_session(self.engine) as session:
            if session.execute(select(self.table.c.id).where(self.table.c.id == record_id)).first():
                raise DuplicateRecordError(self.name, record_id)
            next_seq = session.execute(select(func.coalesce(func.max(self.table.c.seq), 0) + 1)).scalar_one()
            try:
                session.execute(
                    insert(self.table).values(id=record_id, seq=next_seq, data=stored, created_at=now, updated_at=now)
                )
                session.commit()
            except IntegrityError as exc:
                session.rollback()
                raise DuplicateRecordError(self.name, record_id) from exc
        return copy.deepcopy(stored)

    def update(self, record_id: str, fields: Mapping[str, Any]) -> Optional[Record]:
        with get_session(self.engine) as session:
            row = session.execute(
                select(self.table.c.data).where(self.table.c.id == record_id).with_for_update()
            ).first()
            if not row:
                return None
            merged = merge_fields(self._row_to_record(row), record_id, fields)
            session.execute(
                update(self.table)
                .where(self.table.c.id == record_id)
                .values(data=merged, updated_at=datetime.now(timezone.utc))
            )
            session.commit()
        return copy.deepcopy(merged)

    def delete(self, record_id: str) -> bool:
        with get_session(self.engine) as session:
            result = session.execute(delete(self.table).where(self.table.c.id == record_id))
            session.commit()
            return bool(result.rowcount)
