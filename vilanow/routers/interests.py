from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Request

from vilanow.repositories.base import Record
from vilanow.routers.deps import app_state, current_agent, current_user, http_errors
from vilanow.routers.schemas import InterestIn, InterestUpdate, as_changes

router = APIRouter(prefix="/interests", tags=["interests"])


@router.get("")
def list_interests(
    request: Request,
    propertyId: Optional[str] = None,
    status: Optional[str] = None,
    user: Record = Depends(current_user),
):
    with http_errors():
        return app_state(request, "interest_service").list_for(user, property_id=propertyId, status=status)


@router.post("", status_code=201)
def express_interest(body: InterestIn, request: Request, user: Record = Depends(current_user)):
    with http_errors():
        result = app_state(request, "interest_service").express(
            user["id"], body.propertyId, body.message, body.seriousnessScore
        )
    return {"interest": result.interest, "chatSession": result.chat_session}


@router.put("/{interest_id}")
def update_interest(interest_id: str, body: InterestUpdate, request: Request, user: Record = Depends(current_user)):
    with http_errors():
        return app_state(request, "interest_service").update(user, interest_id, as_changes(body))


@router.post("/{interest_id}/unlock")
def unlock_interest(interest_id: str, request: Request, agent: Record = Depends(current_agent)):
    with http_errors():
        result = app_state(request, "interest_service").unlock(agent["id"], interest_id)
    return {
        "interest": result.interest,
        "chatSessionId": result.chat_session_id,
        "creditsRemaining": result.credits_remaining,
    }
