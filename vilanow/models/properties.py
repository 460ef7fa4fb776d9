"""Property listings."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from vilanow.repositories.base import Record

from .base import EntityModel, as_number, contains_ci

STATUS_AVAILABLE = "available"


@dataclass
class PropertyFilters:
    location: Optional[str] = None
    type: Optional[str] = None
    min_price: Optional[float] = None
    max_price: Optional[float] = None
    bedrooms: Optional[int] = None
    agent_id: Optional[str] = None
    featured: Optional[bool] = None
    status: Optional[str] = None

    def matches(self, prop: Record) -> bool:
        price = as_number(prop.get("price"))
        if self.location and not (contains_ci(prop.get("location"), self.location) or contains_ci(prop.get("area"), self.location)):
            return False
        if self.type and prop.get("type") != self.type:
            return False
        if self.min_price and (price is None or price < self.min_price):
            return False
        if self.max_price and (price is None or price > self.max_price):
            return False
        if self.bedrooms and prop.get("bedrooms") != self.bedrooms:
            return False
        if self.agent_id and prop.get("agentId") != self.agent_id:
            return False
        if self.featured is not None and bool(prop.get("featured")) != self.featured:
            return False
        if self.status and prop.get("status") != self.status:
            return False
        return True


class PropertyModel(EntityModel):
    collection = "properties"

    def find_by_agent(self, agent_id: str) -> list[Record]:
        return self.find_many(lambda prop: prop.get("agentId") == agent_id)

    def find_by_location(self, location: str) -> list[Record]:
        return self.search(PropertyFilters(location=location))

    def find_by_type(self, type_: str) -> list[Record]:
        return self.find_many(lambda prop: prop.get("type") == type_)

    def find_featured(self) -> list[Record]:
        return self.find_many(lambda prop: bool(prop.get("featured")))

    def find_available(self) -> list[Record]:
        return self.find_many(lambda prop: prop.get("status") == STATUS_AVAILABLE)

    def find_by_price_range(self, min_price: float | None = None, max_price: float | None = None) -> list[Record]:
        return self.search(PropertyFilters(min_price=min_price, max_price=max_price))

    def search(self, filters: PropertyFilters) -> list[Record]:
        return self.find_many(filters.matches)

    def increment_views(self, property_id: str) -> Optional[Record]:
        return self.increment_field(property_id, "views")
