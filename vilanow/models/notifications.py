"""In-app notifications."""
from __future__ import annotations

from vilanow.repositories.base import Record

from .base import EntityModel

TYPES = {"info", "success", "warning", "error", "interest", "chat", "system"}


class NotificationModel(EntityModel):
    collection = "notifications"

    def find_by_user(self, user_id: str) -> list[Record]:
        mine = self.find_many(lambda n: n.get("userId") == user_id)
        return self._sorted(mine, "createdAt", descending=True)

    def find_unread(self, user_id: str) -> list[Record]:
        return self.find_many(lambda n: n.get("userId") == user_id and not n.get("read"))

    def mark_all_read(self, user_id: str) -> int:
        unread = self.find_unread(user_id)
        for notification in unread:
            self.update(notification["id"], {"read": True})
        return len(unread)

    def delete_by_user(self, user_id: str) -> int:
        return self.delete_many(self.find_by_user(user_id))
