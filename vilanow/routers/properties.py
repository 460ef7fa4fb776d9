from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Request

from vilanow.models.properties import PropertyFilters
from vilanow.repositories.base import Record
from vilanow.routers.deps import app_state, current_agent, current_user, http_errors
from vilanow.routers.schemas import PropertyIn, PropertyUpdate, as_changes, as_fields

router = APIRouter(prefix="/properties", tags=["properties"])


@router.get("")
def list_properties(
    request: Request,
    location: Optional[str] = None,
    type: Optional[str] = None,
    minPrice: Optional[float] = None,
    maxPrice: Optional[float] = None,
    bedrooms: Optional[int] = None,
    agentId: Optional[str] = None,
    featured: Optional[bool] = None,
    status: Optional[str] = "available",
):
    filters = PropertyFilters(
        location=location,
        type=type,
        min_price=minPrice,
        max_price=maxPrice,
        bedrooms=bedrooms,
        agent_id=agentId,
        featured=featured,
        status=status or None,
    )
    return app_state(request, "property_service").search(filters)


@router.get("/{property_id}")
def get_property(property_id: str, request: Request):
    with http_errors():
        return app_state(request, "property_service").get(property_id, count_view=True)


@router.post("", status_code=201)
def create_property(body: PropertyIn, request: Request, agent: Record = Depends(current_agent)):
    with http_errors():
        return app_state(request, "property_service").publish(agent, as_fields(body))


@router.put("/{property_id}")
def update_property(property_id: str, body: PropertyUpdate, request: Request, user: Record = Depends(current_user)):
    with http_errors():
        return app_state(request, "property_service").edit(user, property_id, as_changes(body))


@router.delete("/{property_id}")
def delete_property(property_id: str, request: Request, user: Record = Depends(current_user)):
    with http_errors():
        return {"deleted": app_state(request, "property_service").remove(user, property_id)}
