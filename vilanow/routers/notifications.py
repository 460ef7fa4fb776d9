from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from vilanow.repositories.base import Record
from vilanow.routers.deps import app_state, current_user

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("")
def list_notifications(request: Request, unread: bool = False, user: Record = Depends(current_user)):
    model = app_state(request, "registry").notifications
    items = model.find_unread(user["id"]) if unread else model.find_by_user(user["id"])
    return {"items": items, "unread": len(model.find_unread(user["id"]))}


@router.post("/read-all")
def read_all(request: Request, user: Record = Depends(current_user)):
    return {"updated": app_state(request, "registry").notifications.mark_all_read(user["id"])}


@router.delete("")
def clear(request: Request, user: Record = Depends(current_user)):
    return {"deleted": app_state(request, "registry").notifications.delete_by_user(user["id"])}
