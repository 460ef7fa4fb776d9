"""User accounts (seekers, agents, admins) and their credit balances."""
from __future__ import annotations

from typing import Optional

from vilanow.repositories.base import Record

from .base import EntityModel, as_number

ROLE_SEEKER = "seeker"
ROLE_AGENT = "agent"
ROLE_ADMIN = "admin"
ROLES = {ROLE_SEEKER, ROLE_AGENT, ROLE_ADMIN}


class UserModel(EntityModel):
    collection = "users"

    def find_by_email(self, email: str) -> Optional[Record]:
        needle = (email or "").strip().lower()
        if not needle:
            return None
        return self.find_one(lambda user: (user.get("email") or "").lower() == needle)

    def find_agents(self) -> list[Record]:
        return self.find_many(lambda user: user.get("role") == ROLE_AGENT)

    def find_seekers(self) -> list[Record]:
        return self.find_many(lambda user: user.get("role") == ROLE_SEEKER)

    def find_admins(self) -> list[Record]:
        return self.find_many(lambda user: user.get("role") == ROLE_ADMIN)

    def find_active_users(self) -> list[Record]:
        return self.find_many(lambda user: bool(user.get("active")))

    def credits_of(self, user_id: str) -> int:
        user = self.find_by_id(user_id)
        return int((user or {}).get("credits") or 0)

    def adjust_credits(self, user_id: str, delta: int) -> Optional[Record]:
        """Add ``delta`` (may be negative) to the user's credit balance."""
        return self.increment_field(user_id, "credits", delta)

    def leaderboard(self, sort_by: str = "xp", limit: int = 10) -> list[Record]:
        """Active agents ranked by a numeric field, highest first."""
        agents = [agent for agent in self.find_agents() if agent.get("active", True)]
        agents.sort(key=lambda agent: as_number(agent.get(sort_by)) or 0, reverse=True)
        return agents[:limit]
