from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Request

from vilanow.repositories.base import Record
from vilanow.routers.deps import app_state, current_agent, current_user, http_errors
from vilanow.routers.schemas import InspectionIn, InspectionUpdate, as_changes

router = APIRouter(prefix="/inspections", tags=["inspections"])


@router.post("", status_code=201)
def schedule_inspection(body: InspectionIn, request: Request, user: Record = Depends(current_user)):
    with http_errors():
        return app_state(request, "inspection_service").schedule(
            user, body.interestId, body.scheduledDate, body.scheduledTime, body.notes
        )


@router.get("/my")
def my_inspections(request: Request, user: Record = Depends(current_user)):
    return app_state(request, "inspection_service").mine(user["id"])


@router.get("/agent")
def agent_inspections(
    request: Request,
    status: Optional[str] = None,
    upcoming: bool = False,
    agent: Record = Depends(current_agent),
):
    return app_state(request, "inspection_service").for_agent(agent["id"], status=status, upcoming=upcoming)


@router.get("/property/{property_id}")
def property_inspections(property_id: str, request: Request, user: Record = Depends(current_user)):
    with http_errors():
        return app_state(request, "inspection_service").for_property(user, property_id)


@router.put("/{inspection_id}")
def update_inspection(inspection_id: str, body: InspectionUpdate, request: Request, user: Record = Depends(current_user)):
    with http_errors():
        return app_state(request, "inspection_service").update(user, inspection_id, as_changes(body))


@router.delete("/{inspection_id}")
def cancel_inspection(inspection_id: str, request: Request, user: Record = Depends(current_user)):
    with http_errors():
        app_state(request, "inspection_service").cancel(user, inspection_id)
    return {"cancelled": True}
