"""Login sessions (opaque bearer tokens)."""
from __future__ import annotations

from datetime import datetime
from typing import Optional

from vilanow.repositories.base import Record

from .base import EntityModel, is_after


class SessionModel(EntityModel):
    collection = "sessions"

    def find_by_user(self, user_id: str) -> list[Record]:
        return self.find_many(lambda session: session.get("userId") == user_id)

    def find_by_token(self, token: str) -> Optional[Record]:
        if not token:
            return None
        return self.find_one(lambda session: session.get("token") == token)

    def find_active(self, now: datetime | None = None) -> list[Record]:
        moment = self._now(now)
        return self.find_many(lambda session: is_after(session.get("expiresAt"), moment))

    def clean_expired(self, now: datetime | None = None) -> int:
        moment = self._now(now)
        return self.delete_many(self.find_many(lambda session: not is_after(session.get("expiresAt"), moment)))

    def delete_by_user(self, user_id: str) -> int:
        return self.delete_many(self.find_by_user(user_id))
