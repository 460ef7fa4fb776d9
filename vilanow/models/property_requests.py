"""Requests seekers post describing the property they are looking for."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from vilanow.repositories.base import Record

from .base import EntityModel, as_number, contains_ci

STATUS_ACTIVE = "active"
STATUSES = {STATUS_ACTIVE, "fulfilled", "expired"}


@dataclass
class RequestFilters:
    location: Optional[str] = None
    type: Optional[str] = None
    min_budget: Optional[float] = None
    max_budget: Optional[float] = None
    bedrooms: Optional[int] = None
    seeker_id: Optional[str] = None
    status: Optional[str] = None

    def matches(self, request: Record) -> bool:
        if self.location and not contains_ci(request.get("location"), self.location):
            return False
        if self.type and request.get("type") != self.type:
            return False
        # budget ranges overlap
        if self.min_budget and (as_number(request.get("maxBudget")) or 0) < self.min_budget:
            return False
        if self.max_budget and (as_number(request.get("minBudget")) or 0) > self.max_budget:
            return False
        if self.bedrooms and request.get("bedrooms") != self.bedrooms:
            return False
        if self.seeker_id and request.get("seekerId") != self.seeker_id:
            return False
        if self.status and request.get("status") != self.status:
            return False
        return True


class PropertyRequestModel(EntityModel):
    collection = "property_requests"

    def find_by_seeker(self, seeker_id: str) -> list[Record]:
        return self.find_many(lambda request: request.get("seekerId") == seeker_id)

    def find_by_location(self, location: str) -> list[Record]:
        return self.search(RequestFilters(location=location))

    def find_by_type(self, type_: str) -> list[Record]:
        return self.find_many(lambda request: request.get("type") == type_)

    def find_active(self) -> list[Record]:
        return self.find_many(lambda request: request.get("status") == STATUS_ACTIVE)

    def find_by_budget_range(self, min_budget: float | None = None, max_budget: float | None = None) -> list[Record]:
        return self.search(RequestFilters(min_budget=min_budget, max_budget=max_budget))

    def search(self, filters: RequestFilters) -> list[Record]:
        return self.find_many(filters.matches)

    def find_matching(self, listing: Record) -> list[Record]:
        """Active requests a new listing could satisfy."""
        price = as_number(listing.get("price"))
        bedrooms = as_number(listing.get("bedrooms"))

        def _fits(request: Record) -> bool:
            if request.get("status") != STATUS_ACTIVE:
                return False
            if request.get("type") and request.get("type") != listing.get("type"):
                return False
            location = (request.get("location") or "").strip()
            if location and not (contains_ci(listing.get("location"), location) or contains_ci(listing.get("area"), location)):
                return False
            min_budget = as_number(request.get("minBudget"))
            max_budget = as_number(request.get("maxBudget"))
            if (min_budget or max_budget) and price is None:
                return False
            if min_budget and price < min_budget:
                return False
            if max_budget and price > max_budget:
                return False
            wanted_bedrooms = as_number(request.get("bedrooms"))
            if wanted_bedrooms and bedrooms and bedrooms < wanted_bedrooms:
                return False
            return True

        return self.find_many(_fits)

    def increment_matches(self, request_id: str) -> Optional[Record]:
        return self.increment_field(request_id, "matches")
