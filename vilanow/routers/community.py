from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Request

from vilanow.repositories.base import Record
from vilanow.routers.deps import app_state, current_agent, current_user, http_errors

router = APIRouter(tags=["community"])


@router.get("/groups")
def my_groups(request: Request, user: Record = Depends(current_user)):
    return app_state(request, "community_service").my_groups(user)


@router.get("/groups/{group_id}/messages")
def group_messages(group_id: str, request: Request, user: Record = Depends(current_user)):
    with http_errors():
        return app_state(request, "community_service").group_messages(user, group_id)


@router.get("/marketplace/offers")
def marketplace_offers(
    request: Request,
    type: Optional[str] = None,
    agentId: Optional[str] = None,
    agent: Record = Depends(current_agent),
):
    return app_state(request, "community_service").offers(type_=type, agent_id=agentId)


@router.get("/marketplace/collaborations")
def collaborations(request: Request, pending: bool = False, agent: Record = Depends(current_agent)):
    return app_state(request, "community_service").collaborations(agent, pending=pending)
