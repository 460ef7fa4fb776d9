"""Create the table of every collection in the database behind DATABASE_URL."""
from __future__ import annotations

from typing import Optional

from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from vilanow.db.models import metadata, records_table
from vilanow.db.session import get_engine
from vilanow.models import ALL_MODELS


def create_all(engine: Optional[Engine] = None) -> list[str]:
    """Declare one table per collection and create the missing ones. Returns the table names."""
    engine = engine or get_engine()
    names = [records_table(model.collection).name for model in ALL_MODELS]
    metadata.create_all(bind=engine, tables=[metadata.tables[name] for name in names])
    return names


if __name__ == "__main__":
    try:
        created = create_all()
        print(f"Database tables ready: {len(created)} collections.")
    except (SQLAlchemyError, RuntimeError) as exc:
        raise SystemExit(f"Failed to create tables: {exc}") from exc
