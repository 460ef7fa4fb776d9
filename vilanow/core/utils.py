"""
Utility helpers shared across stores, models and services.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def new_id() -> str:
    """Identifier for a new record. Callers assign ids; stores never do."""
    return str(uuid.uuid4())


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def utc_now_iso() -> str:
    return utc_now().isoformat()


def parse_iso(value: str | None) -> datetime | None:
    """
    Parse an ISO-8601 timestamp as stored in records.

    Naive values are treated as UTC. Returns None for empty or malformed input.
    """
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def configure_logging(level: str = "INFO") -> None:
    """Install a single stream handler on the root logger, once."""
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(level=level, format=LOG_FORMAT)
    else:
        root.setLevel(level)
