from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request

from vilanow.repositories.base import Record
from vilanow.routers.deps import app_state, current_user

router = APIRouter(prefix="/gamification", tags=["gamification"])


@router.get("/challenges")
def challenges(
    request: Request,
    agentId: Optional[str] = None,
    completed: Optional[bool] = None,
    user: Record = Depends(current_user),
):
    return app_state(request, "gamification_service").challenges(user, agent_id=agentId, completed=completed)


@router.get("/quests")
def quests(
    request: Request,
    userId: Optional[str] = None,
    type: Optional[str] = None,
    completed: Optional[bool] = None,
    user: Record = Depends(current_user),
):
    return app_state(request, "gamification_service").quests(user, user_id=userId, type_=type, completed=completed)


@router.get("/badges")
def badges(request: Request, agentId: Optional[str] = None, user: Record = Depends(current_user)):
    return app_state(request, "gamification_service").badges(user, agent_id=agentId)


@router.get("/territories")
def territories(
    request: Request,
    agentId: Optional[str] = None,
    area: Optional[str] = None,
    user: Record = Depends(current_user),
):
    return app_state(request, "gamification_service").territories(user, agent_id=agentId, area=area)


@router.get("/leaderboard")
def leaderboard(request: Request, sortBy: str = "xp", limit: int = Query(10, ge=1, le=100)):
    return app_state(request, "gamification_service").leaderboard(sort_by=sortBy, limit=limit)
