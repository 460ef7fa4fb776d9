"""Quests, agent challenges, territories and badges."""
from __future__ import annotations

from datetime import datetime

from vilanow.repositories.base import Record

from .base import EntityModel, contains_ci, is_after


class QuestModel(EntityModel):
    collection = "quests"

    def find_by_user(self, user_id: str) -> list[Record]:
        return self.find_many(lambda quest: quest.get("userId") == user_id)

    def find_active(self, user_id: str, now: datetime | None = None) -> list[Record]:
        moment = self._now(now)
        return self.find_many(
            lambda quest: quest.get("userId") == user_id
            and not quest.get("completed")
            and is_after(quest.get("expiresAt"), moment)
        )

    def find_completed(self, user_id: str) -> list[Record]:
        return self.find_many(lambda quest: quest.get("userId") == user_id and bool(quest.get("completed")))


class ChallengeModel(EntityModel):
    collection = "challenges"

    def find_by_agent(self, agent_id: str) -> list[Record]:
        return self.find_many(lambda challenge: challenge.get("agentId") == agent_id)

    def find_active(self, agent_id: str, now: datetime | None = None) -> list[Record]:
        moment = self._now(now)
        return self.find_many(
            lambda challenge: challenge.get("agentId") == agent_id
            and not challenge.get("completed")
            and is_after(challenge.get("deadline"), moment)
        )


class TerritoryModel(EntityModel):
    collection = "territories"

    def find_by_agent(self, agent_id: str) -> list[Record]:
        return self.find_many(lambda territory: territory.get("agentId") == agent_id)

    def find_by_area(self, area: str) -> list[Record]:
        return self.find_many(lambda territory: contains_ci(territory.get("area"), area))


class BadgeModel(EntityModel):
    collection = "badges"

    def find_by_agent(self, agent_id: str) -> list[Record]:
        return self.find_many(lambda badge: badge.get("agentId") == agent_id)

    def has_badge(self, agent_id: str, badge: str) -> bool:
        return self.find_one(lambda b: b.get("agentId") == agent_id and b.get("badge") == badge) is not None
