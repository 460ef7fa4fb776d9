from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request, Response

from vilanow.core.rate_limiter import rate_limit_ip
from vilanow.repositories.base import Record
from vilanow.routers.deps import app_state, current_user
from vilanow.routers.schemas import LoginRequest, PasswordChangeRequest, RegisterRequest
from vilanow.services.auth_service import (
    AccountExistsError,
    InvalidCredentialsError,
    LoginSuccess,
    RegistrationError,
    public_user,
)
from vilanow.services.session_service import clear_session_cookie, set_session_cookie, token_from_request

router = APIRouter(prefix="/auth", tags=["auth"])


def _session_payload(result: LoginSuccess) -> dict:
    return {"user": result.user, "token": result.session_token, "expiresAt": result.expires_at}


@router.post("/register", status_code=201)
def register(body: RegisterRequest, request: Request, response: Response):
    rate_limit_ip(request, "register", limit=10, window_seconds=3600)
    svc = app_state(request, "auth_service")
    try:
        result = svc.register(body.name, body.email, body.password, phone=body.phone, role=body.role)
    except RegistrationError as exc:
        raise HTTPException(400, exc.message) from exc
    except AccountExistsError as exc:
        raise HTTPException(409, "Account already exists") from exc
    set_session_cookie(response, result.session_token, app_state(request, "settings"))
    return _session_payload(result)


@router.post("/login")
def login(body: LoginRequest, request: Request, response: Response):
    rate_limit_ip(request, "login", limit=20, window_seconds=300)
    svc = app_state(request, "auth_service")
    try:
        result = svc.login(body.email, body.password)
    except InvalidCredentialsError as exc:
        raise HTTPException(401, "Invalid credentials") from exc
    set_session_cookie(response, result.session_token, app_state(request, "settings"))
    return _session_payload(result)


@router.post("/logout")
def logout(request: Request, response: Response):
    app_state(request, "auth_service").logout(token_from_request(request))
    clear_session_cookie(response)
    return {"ok": True}


@router.get("/me")
def me(user: Record = Depends(current_user)):
    return public_user(user)


@router.post("/password")
def change_password(body: PasswordChangeRequest, request: Request, user: Record = Depends(current_user)):
    svc = app_state(request, "auth_service")
    try:
        svc.change_password(user["id"], body.current_password, body.new_password)
    except InvalidCredentialsError as exc:
        raise HTTPException(401, "Invalid credentials") from exc
    except RegistrationError as exc:
        raise HTTPException(400, exc.message) from exc
    return {"ok": True}


@router.post("/logout-all")
def logout_all(request: Request, response: Response, user: Record = Depends(current_user)):
    ended = app_state(request, "auth_service").logout_everywhere(user["id"])
    clear_session_cookie(response)
    return {"sessionsEnded": ended}
