"""
Configuration helpers for the VilaNow backend.

Settings are read once from environment variables so that stores, services
and routers never fetch os.environ directly.
"""

from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
import os

BACKEND_JSON = "json"
BACKEND_SQL = "sql"
BACKENDS = {BACKEND_JSON, BACKEND_SQL}

DEFAULT_DATA_DIR = Path(__file__).resolve().parents[2] / "data"


@dataclass(frozen=True)
class Settings:
    """Typed view of environment variables."""

    app_env: str
    data_dir: Path
    database_url: str
    storage_backend: str
    storage_overrides: dict = field(default_factory=dict)
    session_ttl_seconds: int = 7 * 24 * 3600
    signup_bonus_credits: int = 10
    interest_unlock_cost: int = 5
    log_level: str = "INFO"
    cors_origins: tuple = ()
    paystack_secret_key: str = ""

    def backend_for(self, collection: str) -> str:
        """Backend chosen for one collection, honouring per-collection overrides."""
        return self.storage_overrides.get(collection, self.storage_backend)


def _parse_overrides(raw: str | None) -> dict:
    """Parse ``"transactions=sql,sessions=json"`` into a mapping."""
    overrides: dict = {}
    for chunk in (raw or "").split(","):
        name, sep, backend = chunk.partition("=")
        name = name.strip()
        backend = backend.strip().lower()
        if not sep or not name:
            continue
        if backend not in BACKENDS:
            raise ValueError(f"Unknown storage backend {backend!r} for collection {name!r}")
        overrides[name] = backend
    return overrides


@lru_cache
def get_settings() -> Settings:
    """Read the current environment and build a Settings instance."""
    def _int(value: str | None, default: int = 0) -> int:
        try:
            return int(value)
        except (TypeError, ValueError):
            return default

    database_url = (os.getenv("DATABASE_URL") or "").strip()
    backend = (os.getenv("STORAGE_BACKEND") or "").strip().lower()
    if not backend:
        backend = BACKEND_SQL if database_url else BACKEND_JSON
    if backend not in BACKENDS:
        raise ValueError(f"STORAGE_BACKEND must be one of {sorted(BACKENDS)}, got {backend!r}")

    origins = tuple(o.strip().rstrip("/") for o in (os.getenv("CORS_ORIGINS") or "").split(",") if o.strip())

    return Settings(
        app_env=(os.getenv("APP_ENV") or "dev").lower(),
        data_dir=Path(os.getenv("DATA_DIR") or DEFAULT_DATA_DIR),
        database_url=database_url,
        storage_backend=backend,
        storage_overrides=_parse_overrides(os.getenv("STORAGE_OVERRIDES")),
        session_ttl_seconds=_int(os.getenv("SESSION_TTL_SECONDS"), 7 * 24 * 3600),
        signup_bonus_credits=_int(os.getenv("SIGNUP_BONUS_CREDITS"), 10),
        interest_unlock_cost=_int(os.getenv("INTEREST_UNLOCK_COST"), 5),
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
        cors_origins=origins,
        paystack_secret_key=(os.getenv("PAYSTACK_SECRET_KEY") or "").strip(),
    )
