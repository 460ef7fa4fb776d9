"""Engine/session helpers for the SQL backend."""
from __future__ import annotations

from contextlib import contextmanager
from functools import lru_cache
from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from vilanow.core.config import get_settings

_ENGINES: list[Engine] = []


@lru_cache
def get_engine(url: str | None = None) -> Engine:
    """One engine per database URL; defaults to DATABASE_URL from settings."""
    url = (url or get_settings().database_url or "").strip()
    if not url:
        raise RuntimeError("DATABASE_URL must be configured to use the SQL backend.")
    engine = create_engine(url, future=True, pool_pre_ping=True)
    _ENGINES.append(engine)
    return engine


@lru_cache
def _get_sessionmaker(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


@contextmanager
def get_session(engine: Engine) -> Iterator[Session]:
    session: Session = _get_sessionmaker(engine)()
    try:
        yield session
    finally:
        session.close()


def dispose_engines() -> None:
    """Dispose every engine built so far and reset the caches."""
    while _ENGINES:
        _ENGINES.pop().dispose()
    get_engine.cache_clear()
    _get_sessionmaker.cache_clear()
