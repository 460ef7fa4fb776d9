"""Read side of agent gamification: quests, challenges, badges, territories and the leaderboard."""

from __future__ import annotations

from typing import Optional

from vilanow.models.users import ROLE_AGENT
from vilanow.registry import ModelRegistry
from vilanow.repositories.base import Record
from vilanow.services.auth_service import public_user

LEADERBOARD_FIELDS = {"xp", "level", "totalListings", "totalInterests", "credits"}


def _completed(records: list[Record], completed: Optional[bool]) -> list[Record]:
    if completed is None:
        return records
    return [record for record in records if bool(record.get("completed")) == completed]


class GamificationService:
    def __init__(self, registry: ModelRegistry):
        self.registry = registry

    def challenges(self, user: Record, agent_id: str | None = None, completed: Optional[bool] = None) -> list[Record]:
        model = self.registry.challenges
        if agent_id:
            challenges = model.find_by_agent(agent_id)
        elif user.get("role") == ROLE_AGENT:
            challenges = model.find_by_agent(user["id"])
        else:
            challenges = model.find_all()
        return _completed(challenges, completed)

    def quests(
        self, user: Record, user_id: str | None = None, type_: str | None = None, completed: Optional[bool] = None
    ) -> list[Record]:
        quests = self.registry.quests.find_by_user(user_id or user["id"])
        if type_:
            quests = [quest for quest in quests if quest.get("type") == type_]
        return _completed(quests, completed)

    def badges(self, user: Record, agent_id: str | None = None) -> list[Record]:
        return self.registry.badges.find_by_agent(agent_id or user["id"])

    def territories(self, user: Record, agent_id: str | None = None, area: str | None = None) -> list[Record]:
        model = self.registry.territories
        if agent_id:
            return model.find_by_agent(agent_id)
        if area:
            return model.find_by_area(area)
        if user.get("role") == ROLE_AGENT:
            return model.find_by_agent(user["id"])
        return model.find_all()

    def leaderboard(self, sort_by: str = "xp", limit: int = 10) -> list[Record]:
        if sort_by not in LEADERBOARD_FIELDS:
            sort_by = "xp"
        return [public_user(agent) for agent in self.registry.users.leaderboard(sort_by, max(limit, 0))]
