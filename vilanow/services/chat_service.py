"""Chat use cases between the participants of an interest."""

from __future__ import annotations

from vilanow.core.utils import new_id, utc_now_iso
from vilanow.models.users import ROLE_ADMIN
from vilanow.registry import ModelRegistry
from vilanow.repositories.base import Record, sort_records
from vilanow.services.errors import InvalidRequestError, NotAuthorizedError, NotFoundError
from vilanow.services.notification_service import NotificationService

MAX_MESSAGE_LENGTH = 4000


class ChatService:
    def __init__(self, registry: ModelRegistry, notifier: NotificationService):
        self.registry = registry
        self.notifier = notifier

    def sessions_for(self, user_id: str) -> list[Record]:
        sessions = self.registry.chat_sessions.find_by_participant(user_id)
        return sort_records(sessions, "lastMessageAt", descending=True)

    def _session_for(self, user: Record, session_id: str) -> Record:
        session = self.registry.chat_sessions.find_by_id(session_id)
        if not session:
            raise NotFoundError("Chat session not found")
        if user["id"] not in (session.get("participantIds") or []) and user.get("role") != ROLE_ADMIN:
            raise NotAuthorizedError("Not a participant of this chat")
        return session

    def messages(self, user: Record, session_id: str, *, mark_read: bool = True) -> list[Record]:
        self._session_for(user, session_id)
        messages = self.registry.chat_messages.find_by_session(session_id)
        if mark_read:
            for message in messages:
                if not message.get("read") and message.get("senderId") != user["id"]:
                    self.registry.chat_messages.mark_as_read(message["id"])
                    message["read"] = True
        return messages

    def send(self, user: Record, session_id: str, text: str) -> Record:
        session = self._session_for(user, session_id)
        body = (text or "").strip()
        if not body:
            raise InvalidRequestError("Message cannot be empty")
        if len(body) > MAX_MESSAGE_LENGTH:
            raise InvalidRequestError(f"Message longer than {MAX_MESSAGE_LENGTH} characters")
        now = utc_now_iso()
        message = self.registry.chat_messages.create(
            {
                "id": new_id(),
                "sessionId": session_id,
                "senderId": user["id"],
                "senderName": user.get("name", ""),
                "message": body,
                "type": "text",
                "timestamp": now,
                "read": False,
            }
        )
        self.registry.chat_sessions.update(session_id, {"lastMessageAt": now, "updatedAt": now})
        for participant in session.get("participantIds") or []:
            if participant != user["id"]:
                self.notifier.new_message(
                    recipient_id=participant,
                    sender_name=user.get("name", ""),
                    chat_session_id=session_id,
                    text=body,
                )
        return message
