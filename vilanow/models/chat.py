"""Chat sessions between seekers and agents, and their messages."""
from __future__ import annotations

from typing import Optional

from vilanow.repositories.base import Record

from .base import EntityModel


class ChatSessionModel(EntityModel):
    collection = "chat_sessions"

    def find_by_participant(self, user_id: str) -> list[Record]:
        return self.find_many(lambda session: user_id in (session.get("participantIds") or []))

    def find_by_property(self, property_id: str) -> list[Record]:
        return self.find_many(lambda session: session.get("propertyId") == property_id)

    def find_by_interest(self, interest_id: str) -> Optional[Record]:
        return self.find_one(lambda session: session.get("interestId") == interest_id)


class ChatMessageModel(EntityModel):
    collection = "chat_messages"

    def find_by_session(self, session_id: str) -> list[Record]:
        messages = self.find_many(lambda message: message.get("sessionId") == session_id)
        return self._sorted(messages, "timestamp")

    def find_unread(self, user_id: str) -> list[Record]:
        return self.find_many(lambda message: not message.get("read") and message.get("senderId") != user_id)

    def mark_as_read(self, message_id: str) -> bool:
        return self.update(message_id, {"read": True}) is not None
