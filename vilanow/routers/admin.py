from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from vilanow.repositories.base import Record
from vilanow.routers.deps import app_state, current_admin, http_errors
from vilanow.routers.schemas import SettingUpdate

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(current_admin)])


@router.get("/kyc/pending")
def pending_kyc(request: Request):
    return app_state(request, "admin_service").pending_kyc()


@router.get("/flags")
def pending_flags(request: Request, severity: Optional[str] = None):
    return app_state(request, "admin_service").pending_flags(severity)


@router.get("/actions")
def recent_actions(request: Request, limit: int = Query(50, ge=1, le=500)):
    return app_state(request, "admin_service").recent_actions(limit)


@router.get("/settings")
def list_settings(request: Request):
    return app_state(request, "admin_service").settings()


@router.put("/settings/{key}")
def update_setting(key: str, body: SettingUpdate, request: Request, admin: Record = Depends(current_admin)):
    with http_errors():
        return app_state(request, "admin_service").set_setting(admin, key, body.value)
