"""Agent community: groups with their chat, marketplace offers and collaborations."""

from __future__ import annotations

from vilanow.models.users import ROLE_ADMIN
from vilanow.registry import ModelRegistry
from vilanow.repositories.base import Record
from vilanow.services.errors import NotAuthorizedError, NotFoundError


def _is_member(group: Record, user_id: str) -> bool:
    return any(member.get("id") == user_id for member in group.get("members") or [])


class CommunityService:
    def __init__(self, registry: ModelRegistry):
        self.registry = registry

    def my_groups(self, user: Record) -> list[Record]:
        return self.registry.groups.find_by_member(user["id"])

    def group_messages(self, user: Record, group_id: str) -> list[Record]:
        group = self.registry.groups.find_by_id(group_id)
        if not group:
            raise NotFoundError("Group not found")
        if not _is_member(group, user["id"]) and user.get("role") != ROLE_ADMIN:
            raise NotAuthorizedError("Only group members can read its messages")
        return self.registry.group_messages.find_by_group(group_id)

    def offers(self, type_: str | None = None, agent_id: str | None = None) -> list[Record]:
        model = self.registry.marketplace_offers
        offers = model.find_by_agent(agent_id) if agent_id else model.find_active()
        if type_:
            offers = [offer for offer in offers if offer.get("type") == type_]
        return offers

    def collaborations(self, user: Record, pending: bool = False) -> list[Record]:
        model = self.registry.collaborations
        return model.find_pending(user["id"]) if pending else model.find_by_agent(user["id"])
