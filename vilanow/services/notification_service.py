"""Notification use cases: one helper per event the marketplace announces.

Notifications are best effort: a storage failure is logged and reported as
``None`` so that the business operation that triggered it still succeeds.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from sqlalchemy.exc import SQLAlchemyError

from vilanow.core.utils import new_id, utc_now_iso
from vilanow.models.notifications import TYPES, NotificationModel
from vilanow.repositories.base import Record, StorageError

logger = logging.getLogger(__name__)

PREVIEW_LENGTH = 100


class NotificationService:
    def __init__(self, notifications: NotificationModel):
        self.notifications = notifications

    def send(
        self,
        user_id: str,
        title: str,
        message: str,
        type_: str = "info",
        metadata: dict[str, Any] | None = None,
    ) -> Optional[Record]:
        if type_ not in TYPES:
            raise ValueError(f"Unknown notification type {type_!r}")
        try:
            return self.notifications.create(
                {
                    "id": new_id(),
                    "userId": user_id,
                    "title": title,
                    "message": message,
                    "type": type_,
                    "read": False,
                    "metadata": metadata or {},
                    "createdAt": utc_now_iso(),
                }
            )
        except (StorageError, SQLAlchemyError) as exc:
            logger.error("Failed to notify user %s: %s", user_id, exc)
            return None

    def interest_expressed(self, *, agent_id: str, seeker_id: str, seeker_name: str, property_id: str, property_title: str, chat_session_id: str) -> None:
        self.send(
            agent_id,
            "New interest received",
            f'{seeker_name} has expressed interest in your property "{property_title}". A chat has been started.',
            "interest",
            {"propertyId": property_id, "seekerId": seeker_id, "chatSessionId": chat_session_id},
        )
        self.send(
            seeker_id,
            "Interest sent",
            f'You\'ve expressed interest in "{property_title}". A chat has been started with the agent.',
            "success",
            {"propertyId": property_id, "agentId": agent_id, "chatSessionId": chat_session_id},
        )

    def interest_unlocked(self, *, seeker_id: str, agent_name: str, property_title: str, chat_session_id: str) -> Optional[Record]:
        return self.send(
            seeker_id,
            "An agent viewed your interest",
            f'{agent_name} has unlocked your interest in "{property_title}". Expect a message soon!',
            "info",
            {"chatSessionId": chat_session_id},
        )

    def new_message(self, *, recipient_id: str, sender_name: str, chat_session_id: str, text: str) -> Optional[Record]:
        preview = text if len(text) <= PREVIEW_LENGTH else text[:PREVIEW_LENGTH] + "..."
        return self.send(recipient_id, f"New message from {sender_name}", preview, "chat", {"chatSessionId": chat_session_id})

    def property_listed(self, *, agent_id: str, property_id: str, property_title: str) -> Optional[Record]:
        return self.send(
            agent_id,
            "Property listed",
            f'Your property "{property_title}" is now live and visible to clients.',
            "success",
            {"propertyId": property_id},
        )

    def request_matched(self, *, seeker_id: str, request_id: str, property_id: str, property_title: str) -> Optional[Record]:
        return self.send(
            seeker_id,
            "A new listing matches your request",
            f'"{property_title}" matches what you are looking for.',
            "info",
            {"requestId": request_id, "propertyId": property_id},
        )

    def inspection_scheduled(self, *, agent_id: str, seeker_name: str, inspection: Record, property_title: str) -> Optional[Record]:
        return self.send(
            agent_id,
            "Inspection scheduled",
            f'{seeker_name} has scheduled an inspection for "{property_title}" on '
            f'{inspection.get("scheduledDate")} at {inspection.get("scheduledTime")}',
            "info",
            {"inspectionId": inspection["id"], "propertyId": inspection.get("propertyId")},
        )

    def inspection_rescheduled(self, *, agent_id: str, seeker_name: str, inspection: Record) -> Optional[Record]:
        return self.send(
            agent_id,
            "Inspection rescheduled",
            f'{seeker_name} has rescheduled the inspection to {inspection.get("scheduledDate")} at {inspection.get("scheduledTime")}',
            "info",
            {"inspectionId": inspection["id"], "propertyId": inspection.get("propertyId")},
        )

    def inspection_status_changed(self, *, seeker_id: str, inspection: Record, property_title: str) -> Optional[Record]:
        status = inspection.get("status", "")
        messages = {
            "confirmed": f'Your inspection for "{property_title}" has been confirmed!',
            "cancelled": f'Your inspection for "{property_title}" has been cancelled by the agent.',
            "completed": f'Your inspection for "{property_title}" has been marked as completed.',
        }
        if status not in messages:
            return None
        return self.send(
            seeker_id,
            f"Inspection {status}",
            messages[status],
            "success" if status == "confirmed" else "info",
            {"inspectionId": inspection["id"], "propertyId": inspection.get("propertyId")},
        )

    def inspection_cancelled(self, *, recipient_id: str, cancelled_by: str, inspection: Record, property_title: str) -> Optional[Record]:
        return self.send(
            recipient_id,
            "Inspection cancelled",
            f'{cancelled_by} has cancelled the inspection for "{property_title}"',
            "warning",
            {"inspectionId": inspection["id"], "propertyId": inspection.get("propertyId")},
        )
