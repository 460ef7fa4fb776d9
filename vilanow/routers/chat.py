from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from vilanow.repositories.base import Record
from vilanow.routers.deps import app_state, current_user, http_errors
from vilanow.routers.schemas import MessageIn

router = APIRouter(prefix="/chat", tags=["chat"])


@router.get("/sessions")
def sessions(request: Request, user: Record = Depends(current_user)):
    return app_state(request, "chat_service").sessions_for(user["id"])


@router.get("/sessions/{session_id}/messages")
def messages(session_id: str, request: Request, user: Record = Depends(current_user)):
    with http_errors():
        return app_state(request, "chat_service").messages(user, session_id)


@router.post("/sessions/{session_id}/messages", status_code=201)
def send_message(session_id: str, body: MessageIn, request: Request, user: Record = Depends(current_user)):
    with http_errors():
        return app_state(request, "chat_service").send(user, session_id, body.message)
