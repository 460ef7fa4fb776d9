"""Session helpers (issue tokens, cookies, validation)."""
from __future__ import annotations

from datetime import datetime, timedelta

from fastapi import Request, Response

from vilanow.core.config import Settings
from vilanow.core.security import new_session_token
from vilanow.core.utils import new_id, parse_iso, utc_now
from vilanow.models.sessions import SessionModel
from vilanow.repositories.base import Record

SESSION_COOKIE_NAME = "session"


def issue_session(sessions: SessionModel, user_id: str, ttl_seconds: int) -> Record:
    """Create a new session record for ``user_id`` and return it."""
    now = utc_now()
    ttl = max(60, ttl_seconds)
    return sessions.create(
        {
            "id": new_id(),
            "userId": user_id,
            "token": new_session_token(),
            "createdAt": now.isoformat(),
            "expiresAt": (now + timedelta(seconds=ttl)).isoformat(),
        }
    )


def resolve_session(sessions: SessionModel, token: str | None, now: datetime | None = None) -> Record | None:
    """Return the live session for ``token``; expired sessions are deleted on sight."""
    if not token:
        return None
    session = sessions.find_by_token(token)
    if not session:
        return None
    expires_at = parse_iso(session.get("expiresAt"))
    if not expires_at or expires_at <= (now or utc_now()):
        sessions.delete(session["id"])
        return None
    return session


def delete_session(sessions: SessionModel, token: str | None) -> bool:
    if not token:
        return False
    session = sessions.find_by_token(token)
    if not session:
        return False
    return sessions.delete(session["id"])


def token_from_request(request: Request) -> str | None:
    """Bearer token from the Authorization header, else the session cookie."""
    header = request.headers.get("authorization") or ""
    scheme, _, credentials = header.partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()
    return request.cookies.get(SESSION_COOKIE_NAME)


def set_session_cookie(response: Response, token: str, settings: Settings) -> None:
    response.set_cookie(
        SESSION_COOKIE_NAME,
        token,
        httponly=True,
        secure=settings.app_env == "prod",
        samesite="strict",
        max_age=settings.session_ttl_seconds,
        path="/",
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(SESSION_COOKIE_NAME, path="/")
