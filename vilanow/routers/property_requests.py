from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Request

from vilanow.models.property_requests import RequestFilters
from vilanow.repositories.base import Record
from vilanow.routers.deps import app_state, current_user, http_errors
from vilanow.routers.schemas import PropertyRequestIn, StatusChange, as_fields

router = APIRouter(prefix="/property-requests", tags=["property-requests"])


@router.get("")
def list_requests(
    request: Request,
    location: Optional[str] = None,
    type: Optional[str] = None,
    minBudget: Optional[float] = None,
    maxBudget: Optional[float] = None,
    bedrooms: Optional[int] = None,
    seekerId: Optional[str] = None,
    status: Optional[str] = "active",
):
    filters = RequestFilters(
        location=location,
        type=type,
        min_budget=minBudget,
        max_budget=maxBudget,
        bedrooms=bedrooms,
        seeker_id=seekerId,
        status=status or None,
    )
    return app_state(request, "request_service").search(filters)


@router.get("/{request_id}")
def get_request(request_id: str, request: Request):
    with http_errors():
        return app_state(request, "request_service").get(request_id)


@router.post("", status_code=201)
def create_request(body: PropertyRequestIn, request: Request, user: Record = Depends(current_user)):
    with http_errors():
        return app_state(request, "request_service").post(user, as_fields(body))


@router.put("/{request_id}/status")
def change_status(request_id: str, body: StatusChange, request: Request, user: Record = Depends(current_user)):
    with http_errors():
        return app_state(request, "request_service").set_status(user, request_id, body.status)
