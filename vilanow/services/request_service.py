"""Property request use cases (seekers describing what they want)."""

from __future__ import annotations

from typing import Any

from vilanow.core.utils import new_id, utc_now_iso
from vilanow.models.property_requests import STATUS_ACTIVE, STATUSES, RequestFilters
from vilanow.models.users import ROLE_ADMIN
from vilanow.registry import ModelRegistry
from vilanow.repositories.base import Record
from vilanow.services.errors import InvalidRequestError, NotAuthorizedError, NotFoundError

PROTECTED_FIELDS = {"id", "seekerId", "createdAt", "matches"}


class RequestService:
    def __init__(self, registry: ModelRegistry):
        self.registry = registry

    def search(self, filters: RequestFilters) -> list[Record]:
        return self.registry.property_requests.search(filters)

    def get(self, request_id: str) -> Record:
        request = self.registry.property_requests.find_by_id(request_id)
        if not request:
            raise NotFoundError("Property request not found")
        return request

    def post(self, seeker: Record, data: dict[str, Any]) -> Record:
        if not (data.get("location") or "").strip():
            raise InvalidRequestError("Location is required")
        min_budget = data.get("minBudget") or 0
        max_budget = data.get("maxBudget") or 0
        if max_budget and min_budget > max_budget:
            raise InvalidRequestError("minBudget cannot exceed maxBudget")
        now = utc_now_iso()
        fields = {key: value for key, value in data.items() if key not in PROTECTED_FIELDS}
        return self.registry.property_requests.create(
            {
                "status": STATUS_ACTIVE,
                **fields,
                "id": new_id(),
                "seekerId": seeker["id"],
                "seekerName": seeker.get("name", ""),
                "matches": 0,
                "createdAt": now,
                "updatedAt": now,
            }
        )

    def set_status(self, user: Record, request_id: str, status: str) -> Record:
        if status not in STATUSES:
            raise InvalidRequestError(f"Unknown status {status!r}")
        request = self.get(request_id)
        if request.get("seekerId") != user["id"] and user.get("role") != ROLE_ADMIN:
            raise NotAuthorizedError("Not authorized to modify this request")
        updated = self.registry.property_requests.touch(request_id, {"status": status})
        if updated is None:
            raise NotFoundError("Property request not found")
        return updated
