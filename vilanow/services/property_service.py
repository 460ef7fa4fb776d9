"""Listing use cases: publish, edit, remove and view properties."""

from __future__ import annotations

import logging
from typing import Any

from vilanow.core.utils import new_id, utc_now_iso
from vilanow.models.base import as_number
from vilanow.models.properties import STATUS_AVAILABLE, PropertyFilters
from vilanow.models.users import ROLE_ADMIN, ROLE_AGENT
from vilanow.registry import ModelRegistry
from vilanow.repositories.base import Record
from vilanow.services.errors import InvalidRequestError, NotAuthorizedError, NotFoundError
from vilanow.services.notification_service import NotificationService

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("title", "type", "price", "location")
PROTECTED_FIELDS = {"id", "agentId", "createdAt", "views"}
NUMERIC_FIELDS = ("price", "bedrooms", "bathrooms")


def _check_numbers(fields: dict[str, Any]) -> None:
    for name in NUMERIC_FIELDS:
        if name in fields and fields[name] is not None and as_number(fields[name]) is None:
            raise InvalidRequestError(f"{name} must be a number")
    if "price" in fields and as_number(fields["price"]) is not None and fields["price"] <= 0:
        raise InvalidRequestError("price must be positive")


class PropertyService:
    def __init__(self, registry: ModelRegistry, notifier: NotificationService):
        self.registry = registry
        self.notifier = notifier

    def search(self, filters: PropertyFilters) -> list[Record]:
        return self.registry.properties.search(filters)

    def get(self, property_id: str, *, count_view: bool = False) -> Record:
        prop = self.registry.properties.find_by_id(property_id)
        if not prop:
            raise NotFoundError("Property not found")
        if count_view:
            prop = self.registry.properties.increment_views(property_id) or prop
        return prop

    def _owned(self, user: Record, property_id: str) -> Record:
        prop = self.registry.properties.find_by_id(property_id)
        if not prop:
            raise NotFoundError("Property not found")
        if prop.get("agentId") != user["id"] and user.get("role") != ROLE_ADMIN:
            raise NotAuthorizedError("Not authorized to modify this property")
        return prop

    def publish(self, agent: Record, data: dict[str, Any]) -> Record:
        """Create a listing, then bump the match counter of every request it satisfies."""
        if agent.get("role") not in (ROLE_AGENT, ROLE_ADMIN):
            raise NotAuthorizedError("Only agents can list properties")
        missing = [name for name in REQUIRED_FIELDS if data.get(name) in (None, "")]
        if missing:
            raise InvalidRequestError(f"Missing fields: {', '.join(missing)}")
        _check_numbers(data)
        now = utc_now_iso()
        fields = {key: value for key, value in data.items() if key not in PROTECTED_FIELDS}
        record = {
            "status": STATUS_AVAILABLE,
            "featured": False,
            "area": "",
            "images": [],
            **fields,
            "id": new_id(),
            "agentId": agent["id"],
            "views": 0,
            "createdAt": now,
            "updatedAt": now,
        }
        prop = self.registry.properties.create(record)
        self.registry.users.increment_field(agent["id"], "totalListings")
        self.notifier.property_listed(agent_id=agent["id"], property_id=prop["id"], property_title=prop.get("title", ""))
        matched = self._match_requests(prop)
        logger.info("Agent %s listed property %s (%d matching requests)", agent["id"], prop["id"], matched)
        return prop

    def _match_requests(self, prop: Record) -> int:
        matched = 0
        for request in self.registry.property_requests.find_matching(prop):
            if self.registry.property_requests.increment_matches(request["id"]) is None:
                continue
            matched += 1
            self.notifier.request_matched(
                seeker_id=request.get("seekerId", ""),
                request_id=request["id"],
                property_id=prop["id"],
                property_title=prop.get("title", ""),
            )
        return matched

    def edit(self, user: Record, property_id: str, changes: dict[str, Any]) -> Record:
        self._owned(user, property_id)
        fields = {key: value for key, value in changes.items() if key not in PROTECTED_FIELDS}
        _check_numbers(fields)
        updated = self.registry.properties.touch(property_id, fields)
        if updated is None:
            raise NotFoundError("Property not found")
        return updated

    def remove(self, user: Record, property_id: str) -> bool:
        self._owned(user, property_id)
        return self.registry.properties.delete(property_id)
