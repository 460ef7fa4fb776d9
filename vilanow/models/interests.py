"""Interests a seeker expresses in a listing."""
from __future__ import annotations

from typing import Optional

from vilanow.repositories.base import Record

from .base import EntityModel

STATUS_PENDING = "pending"
STATUS_CONTACTED = "contacted"
STATUS_VIEWING_SCHEDULED = "viewing-scheduled"
STATUSES = {STATUS_PENDING, STATUS_CONTACTED, STATUS_VIEWING_SCHEDULED, "closed"}


class InterestModel(EntityModel):
    collection = "interests"

    def find_by_property(self, property_id: str) -> list[Record]:
        return self.find_many(lambda interest: interest.get("propertyId") == property_id)

    def find_by_seeker(self, seeker_id: str) -> list[Record]:
        return self.find_many(lambda interest: interest.get("seekerId") == seeker_id)

    def find_by_status(self, status: str) -> list[Record]:
        return self.find_many(lambda interest: interest.get("status") == status)

    def find_unlocked(self) -> list[Record]:
        return self.find_many(lambda interest: bool(interest.get("unlocked")))

    def find_pending(self) -> list[Record]:
        return self.find_by_status(STATUS_PENDING)

    def find_existing(self, property_id: str, seeker_id: str) -> Optional[Record]:
        return self.find_one(
            lambda interest: interest.get("propertyId") == property_id and interest.get("seekerId") == seeker_id
        )
