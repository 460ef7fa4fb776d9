"""Agent-to-agent marketplace: offers and collaborations."""
from __future__ import annotations

from vilanow.repositories.base import Record

from .base import EntityModel


def _involves(collab: Record, agent_id: str) -> bool:
    return collab.get("initiatorId") == agent_id or collab.get("partnerId") == agent_id


class MarketplaceOfferModel(EntityModel):
    collection = "marketplace_offers"

    def find_by_agent(self, agent_id: str) -> list[Record]:
        return self.find_many(lambda offer: offer.get("agentId") == agent_id)

    def find_active(self) -> list[Record]:
        return self.find_many(lambda offer: offer.get("status") == "active")

    def find_by_type(self, type_: str) -> list[Record]:
        return self.find_many(lambda offer: offer.get("type") == type_)


class CollaborationModel(EntityModel):
    collection = "collaborations"

    def find_by_agent(self, agent_id: str) -> list[Record]:
        return self.find_many(lambda collab: _involves(collab, agent_id))

    def find_pending(self, agent_id: str) -> list[Record]:
        return self.find_many(lambda collab: collab.get("partnerId") == agent_id and collab.get("status") == "pending")

    def find_active(self, agent_id: str) -> list[Record]:
        return self.find_many(lambda collab: _involves(collab, agent_id) and collab.get("status") == "accepted")
