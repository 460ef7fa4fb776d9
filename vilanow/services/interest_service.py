"""Interest use cases: a seeker expresses interest, the listing agent unlocks it.

Each step is a separate store call. There is no multi-record transaction, so
every write touches one record and is ordered so that a failure part-way
leaves each record individually consistent.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from vilanow.core.config import Settings
from vilanow.core.utils import new_id, utc_now_iso
from vilanow.models.credits import TX_COMPLETED, TX_CREDIT_SPENT
from vilanow.models.interests import STATUS_CONTACTED, STATUS_PENDING, STATUSES
from vilanow.models.properties import STATUS_AVAILABLE
from vilanow.models.users import ROLE_ADMIN, ROLE_AGENT
from vilanow.registry import ModelRegistry
from vilanow.repositories.base import Record
from vilanow.services.errors import (
    ConflictError,
    InvalidRequestError,
    NotAuthorizedError,
    NotFoundError,
    ServiceError,
)
from vilanow.services.notification_service import NotificationService

logger = logging.getLogger(__name__)

PROTECTED_FIELDS = {"id", "propertyId", "seekerId", "createdAt", "unlocked"}
DEFAULT_SERIOUSNESS = 5


class InsufficientCreditsError(ServiceError):
    """Raised when an agent cannot pay for an unlock."""


@dataclass
class ExpressResult:
    interest: Record
    chat_session: Record


@dataclass
class UnlockResult:
    interest: Record
    chat_session_id: Optional[str]
    credits_remaining: int


def mask_phone(phone: str | None) -> str:
    digits = phone or ""
    return "******" + digits[-4:]


class InterestService:
    def __init__(self, registry: ModelRegistry, settings: Settings, notifier: NotificationService):
        self.registry = registry
        self.settings = settings
        self.notifier = notifier

    def _unlock_cost(self) -> int:
        return int(self.registry.app_settings.get_value("interest_unlock_cost", self.settings.interest_unlock_cost))

    # -------------------------------------- queries --------------------------------------
    def list_for(self, user: Record, *, property_id: str | None = None, status: str | None = None) -> list[Record]:
        """Interests visible to ``user``: own ones for seekers, their listings' for agents."""
        interests = self.registry.interests
        if property_id:
            prop = self.registry.properties.find_by_id(property_id)
            if not prop:
                raise NotFoundError("Property not found")
            if prop.get("agentId") == user["id"] or user.get("role") == ROLE_ADMIN:
                found = interests.find_by_property(property_id)
            else:
                found = [i for i in interests.find_by_property(property_id) if i.get("seekerId") == user["id"]]
        elif user.get("role") == ROLE_ADMIN:
            found = interests.find_all()
        elif user.get("role") == ROLE_AGENT:
            own = {p["id"] for p in self.registry.properties.find_by_agent(user["id"])}
            found = interests.find_many(lambda interest: interest.get("propertyId") in own)
        else:
            found = interests.find_by_seeker(user["id"])
        if status:
            found = [i for i in found if i.get("status") == status]
        return [self._present(i, user) for i in found]

    def _present(self, interest: Record, viewer: Record) -> Record:
        out = dict(interest)
        if viewer["id"] != interest.get("seekerId") and not interest.get("unlocked"):
            out["seekerPhone"] = mask_phone(interest.get("seekerPhone"))
        chat = self.registry.chat_sessions.find_by_interest(interest["id"])
        out["chatSessionId"] = chat["id"] if chat else None
        return out

    # -------------------------------------- express --------------------------------------
    def express(self, seeker_id: str, property_id: str, message: str = "", seriousness_score: int | None = None) -> ExpressResult:
        prop = self.registry.properties.find_by_id(property_id)
        if not prop:
            raise NotFoundError("Property not found")
        if prop.get("status") != STATUS_AVAILABLE:
            raise InvalidRequestError("This property is no longer available")
        seeker = self.registry.users.find_by_id(seeker_id)
        if not seeker:
            raise NotFoundError("User not found")
        if prop.get("agentId") == seeker_id:
            raise InvalidRequestError("Agents cannot express interest in their own listings")
        if self.registry.interests.find_existing(property_id, seeker_id):
            raise ConflictError("You have already expressed interest in this property")

        now = utc_now_iso()
        interest = self.registry.interests.create(
            {
                "id": new_id(),
                "propertyId": property_id,
                "seekerId": seeker_id,
                "seekerName": seeker.get("name", ""),
                "seekerPhone": seeker.get("phone", ""),
                "message": message or "",
                "seriousnessScore": seriousness_score or DEFAULT_SERIOUSNESS,
                "unlocked": False,
                "status": STATUS_PENDING,
                "createdAt": now,
                "updatedAt": now,
            }
        )
        chat_session = self.registry.chat_sessions.create(
            {
                "id": new_id(),
                "participantIds": [seeker_id, prop["agentId"]],
                "propertyId": property_id,
                "interestId": interest["id"],
                "createdAt": now,
                "lastMessageAt": now,
                "updatedAt": now,
            }
        )
        self.registry.chat_messages.create(
            {
                "id": new_id(),
                "sessionId": chat_session["id"],
                "senderId": seeker_id,
                "senderName": seeker.get("name", ""),
                "message": message or f'Hi, I\'m interested in your property "{prop.get("title", "")}". I\'d like to know more about it.',
                "type": "text",
                "timestamp": now,
                "read": False,
            }
        )
        self.notifier.interest_expressed(
            agent_id=prop["agentId"],
            seeker_id=seeker_id,
            seeker_name=seeker.get("name", ""),
            property_id=property_id,
            property_title=prop.get("title", ""),
            chat_session_id=chat_session["id"],
        )
        agent = self.registry.users.find_by_id(prop["agentId"])
        if agent and agent.get("role") == ROLE_AGENT:
            self.registry.users.increment_field(agent["id"], "totalInterests")
        logger.info("Seeker %s expressed interest %s in property %s", seeker_id, interest["id"], property_id)
        return ExpressResult(interest=interest, chat_session=chat_session)

    # -------------------------------------- update --------------------------------------
    def update(self, user: Record, interest_id: str, changes: dict[str, Any]) -> Record:
        interest = self.registry.interests.find_by_id(interest_id)
        if not interest:
            raise NotFoundError("Interest not found")
        prop = self.registry.properties.find_by_id(interest["propertyId"])
        allowed = (
            (prop is not None and prop.get("agentId") == user["id"])
            or interest.get("seekerId") == user["id"]
            or user.get("role") == ROLE_ADMIN
        )
        if not allowed:
            raise NotAuthorizedError("Not authorized to update this interest")
        fields = {key: value for key, value in changes.items() if key not in PROTECTED_FIELDS}
        if "status" in fields and fields["status"] not in STATUSES:
            raise InvalidRequestError(f"Unknown interest status {fields['status']!r}")
        updated = self.registry.interests.touch(interest_id, fields)
        if updated is None:
            raise NotFoundError("Interest not found")
        return updated

    # -------------------------------------- unlock --------------------------------------
    def unlock(self, agent_id: str, interest_id: str) -> UnlockResult:
        interest = self.registry.interests.find_by_id(interest_id)
        if not interest:
            raise NotFoundError("Interest not found")
        prop = self.registry.properties.find_by_id(interest["propertyId"])
        if not prop or prop.get("agentId") != agent_id:
            raise NotAuthorizedError("Not authorized to unlock this interest")
        if interest.get("unlocked"):
            raise ConflictError("Interest is already unlocked")
        agent = self.registry.users.find_by_id(agent_id)
        cost = self._unlock_cost()
        balance = int((agent or {}).get("credits") or 0)
        if not agent or balance < cost:
            raise InsufficientCreditsError("Insufficient credits to unlock interest")

        updated_agent = self.registry.users.adjust_credits(agent_id, -cost)
        now = utc_now_iso()
        self.registry.transactions.create(
            {
                "id": new_id(),
                "userId": agent_id,
                "type": TX_CREDIT_SPENT,
                "amount": 0,
                "credits": cost,
                "description": f"Unlocked interest on {prop.get('title', '')}",
                "status": TX_COMPLETED,
                "timestamp": now,
                "metadata": {"interestId": interest_id},
            }
        )
        updated = self.registry.interests.touch(interest_id, {"unlocked": True, "status": STATUS_CONTACTED})
        chat = self.registry.chat_sessions.find_by_interest(interest_id)
        self.notifier.interest_unlocked(
            seeker_id=interest["seekerId"],
            agent_name=agent.get("name", ""),
            property_title=prop.get("title", ""),
            chat_session_id=chat["id"] if chat else "",
        )
        remaining = int((updated_agent or {}).get("credits") or 0)
        logger.info("Agent %s unlocked interest %s (%d credits left)", agent_id, interest_id, remaining)
        return UnlockResult(interest=updated, chat_session_id=chat["id"] if chat else None, credits_remaining=remaining)
