"""Agent groups and group chat messages."""
from __future__ import annotations

from vilanow.repositories.base import Record

from .base import EntityModel


class GroupModel(EntityModel):
    collection = "groups"

    def find_by_member(self, user_id: str) -> list[Record]:
        return self.find_many(
            lambda group: any(member.get("id") == user_id for member in group.get("members") or [])
        )

    def find_by_creator(self, user_id: str) -> list[Record]:
        return self.find_many(lambda group: group.get("createdBy") == user_id)


class GroupMessageModel(EntityModel):
    collection = "group_messages"

    def find_by_group(self, group_id: str) -> list[Record]:
        return self._sorted(self.find_many(lambda message: message.get("groupId") == group_id), "timestamp")
