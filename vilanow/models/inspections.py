"""Property viewings scheduled between a seeker and an agent."""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from vilanow.repositories.base import Record

from .base import EntityModel

STATUS_PENDING = "pending"
STATUS_CONFIRMED = "confirmed"
STATUS_RESCHEDULED = "rescheduled"
STATUS_CANCELLED = "cancelled"
STATUS_COMPLETED = "completed"
STATUSES = {STATUS_PENDING, STATUS_CONFIRMED, STATUS_RESCHEDULED, STATUS_CANCELLED, STATUS_COMPLETED}
CLOSED_STATUSES = {STATUS_CANCELLED, STATUS_COMPLETED}


class InspectionModel(EntityModel):
    collection = "inspections"

    def _by_date(self, records: list[Record]) -> list[Record]:
        return self._sorted(records, "scheduledDate")

    def find_by_property(self, property_id: str) -> list[Record]:
        return self._by_date(self.find_many(lambda i: i.get("propertyId") == property_id))

    def find_by_agent(self, agent_id: str) -> list[Record]:
        return self._by_date(self.find_many(lambda i: i.get("agentId") == agent_id))

    def find_by_seeker(self, seeker_id: str) -> list[Record]:
        return self._by_date(self.find_many(lambda i: i.get("seekerId") == seeker_id))

    def find_by_interest(self, interest_id: str) -> Optional[Record]:
        return self.find_one(lambda i: i.get("interestId") == interest_id)

    def find_upcoming(self, agent_id: str, now: datetime | None = None) -> list[Record]:
        today = self._now(now).date().isoformat()
        return self._by_date(
            self.find_many(
                lambda i: i.get("agentId") == agent_id
                and (i.get("scheduledDate") or "") >= today
                and i.get("status") not in CLOSED_STATUSES
            )
        )

    def find_pending(self, agent_id: str) -> list[Record]:
        return self.find_many(lambda i: i.get("agentId") == agent_id and i.get("status") == STATUS_PENDING)
