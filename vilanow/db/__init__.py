"""Database helpers (engine/session/table export) for the SQL record stores."""

from .session import get_engine, get_session, dispose_engines
from .models import metadata, records_table

__all__ = ["get_engine", "get_session", "dispose_engines", "metadata", "records_table"]
