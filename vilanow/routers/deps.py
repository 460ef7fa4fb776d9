"""Shared router helpers: service lookup, current user, error translation."""
from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from fastapi import HTTPException, Request

from vilanow.models.users import ROLE_ADMIN, ROLE_AGENT
from vilanow.repositories.base import DuplicateRecordError, Record, StorageUnavailableError
from vilanow.services.errors import (
    ConflictError,
    InvalidRequestError,
    NotAuthorizedError,
    NotFoundError,
    ServiceError,
    ServiceUnavailableError,
)
from vilanow.services.session_service import token_from_request


def app_state(request: Request, name: str):
    value = getattr(getattr(request.app, "state", None), name, None)
    if value is None:
        raise RuntimeError(f"{name} not configured on app.state")
    return value


def current_user(request: Request) -> Record:
    """Dependency: the authenticated user, or 401."""
    user = app_state(request, "auth_service").current_user(token_from_request(request))
    if not user:
        raise HTTPException(401, "Authentication required")
    return user


def current_agent(request: Request) -> Record:
    user = current_user(request)
    if user.get("role") not in (ROLE_AGENT, ROLE_ADMIN):
        raise HTTPException(403, "Agent account required")
    return user


@contextmanager
def http_errors() -> Iterator[None]:
    """Translate service/storage exceptions raised inside the block into HTTP errors."""
    try:
        yield
    except NotFoundError as exc:
        raise HTTPException(404, exc.message) from exc
    except NotAuthorizedError as exc:
        raise HTTPException(403, exc.message) from exc
    except ConflictError as exc:
        raise HTTPException(409, exc.message) from exc
    except ServiceUnavailableError as exc:
        raise HTTPException(503, exc.message) from exc
    except (InvalidRequestError, ServiceError) as exc:
        raise HTTPException(400, exc.message) from exc
    except DuplicateRecordError as exc:
        raise HTTPException(409, "Record already exists") from exc
    except StorageUnavailableError as exc:
        raise HTTPException(503, "Storage unavailable") from exc


def current_admin(request: Request) -> Record:
    user = current_user(request)
    if user.get("role") != ROLE_ADMIN:
        raise HTTPException(403, "Admin account required")
    return user
