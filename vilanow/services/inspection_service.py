"""Property viewings: seekers book them against an interest, agents confirm or close them."""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from typing import Any, Optional

from vilanow.core.utils import new_id, utc_now, utc_now_iso
from vilanow.models.inspections import (
    STATUS_CANCELLED,
    STATUS_PENDING,
    STATUS_RESCHEDULED,
    STATUSES,
)
from vilanow.models.interests import STATUS_CONTACTED, STATUS_VIEWING_SCHEDULED
from vilanow.models.users import ROLE_ADMIN
from vilanow.registry import ModelRegistry
from vilanow.repositories.base import Record
from vilanow.services.errors import ConflictError, InvalidRequestError, NotAuthorizedError, NotFoundError
from vilanow.services.notification_service import NotificationService

logger = logging.getLogger(__name__)

DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
TIME_RE = re.compile(r"^([01]?[0-9]|2[0-3]):[0-5][0-9]$")


def _scheduled_at(date: str, time: str) -> datetime:
    if not DATE_RE.match(date or ""):
        raise InvalidRequestError("Invalid date format. Use YYYY-MM-DD")
    if not TIME_RE.match(time or ""):
        raise InvalidRequestError("Invalid time format. Use HH:MM (24-hour)")
    hour, minute = time.split(":")
    try:
        return datetime.fromisoformat(f"{date}T{int(hour):02d}:{minute}").replace(tzinfo=timezone.utc)
    except ValueError as exc:
        raise InvalidRequestError(f"Invalid date {date!r}") from exc


def _property_summary(prop: Optional[Record]) -> Optional[Record]:
    if not prop:
        return None
    return {key: prop.get(key) for key in ("id", "title", "location", "price", "images")}


def _person_summary(user: Optional[Record]) -> Optional[Record]:
    if not user:
        return None
    return {key: user.get(key) for key in ("id", "name", "phone", "avatar")}


class InspectionService:
    def __init__(self, registry: ModelRegistry, notifier: NotificationService):
        self.registry = registry
        self.notifier = notifier

    def _get(self, inspection_id: str) -> Record:
        inspection = self.registry.inspections.find_by_id(inspection_id)
        if not inspection:
            raise NotFoundError("Inspection not found")
        return inspection

    def schedule(
        self,
        seeker: Record,
        interest_id: str,
        scheduled_date: str,
        scheduled_time: str,
        notes: str = "",
        *,
        now: datetime | None = None,
    ) -> Record:
        """Book a viewing for one of the seeker's interests and move the interest to viewing-scheduled."""
        if _scheduled_at(scheduled_date, scheduled_time) <= (now or utc_now()):
            raise InvalidRequestError("Inspection date must be in the future")
        interest = self.registry.interests.find_by_id(interest_id)
        if not interest:
            raise NotFoundError("Interest not found")
        if interest.get("seekerId") != seeker["id"]:
            raise NotAuthorizedError("Not authorized to schedule inspection for this interest")
        if self.registry.inspections.find_by_interest(interest_id):
            raise ConflictError("Inspection already scheduled for this interest")
        prop = self.registry.properties.find_by_id(interest["propertyId"])
        if not prop:
            raise NotFoundError("Property not found")

        stamp = utc_now_iso()
        inspection = self.registry.inspections.create(
            {
                "id": new_id(),
                "interestId": interest_id,
                "propertyId": prop["id"],
                "seekerId": seeker["id"],
                "seekerName": seeker.get("name", ""),
                "seekerPhone": seeker.get("phone", ""),
                "agentId": prop.get("agentId"),
                "scheduledDate": scheduled_date,
                "scheduledTime": scheduled_time,
                "status": STATUS_PENDING,
                "notes": notes or "",
                "createdAt": stamp,
                "updatedAt": stamp,
            }
        )
        self.registry.interests.touch(interest_id, {"status": STATUS_VIEWING_SCHEDULED})
        self.notifier.inspection_scheduled(
            agent_id=prop.get("agentId", ""),
            seeker_name=seeker.get("name", ""),
            inspection=inspection,
            property_title=prop.get("title", ""),
        )
        logger.info("Seeker %s scheduled inspection %s for property %s", seeker["id"], inspection["id"], prop["id"])
        return inspection

    def mine(self, seeker_id: str) -> list[Record]:
        return [
            {**inspection, "property": _property_summary(self.registry.properties.find_by_id(inspection["propertyId"]))}
            for inspection in self.registry.inspections.find_by_seeker(seeker_id)
        ]

    def for_agent(self, agent_id: str, status: str | None = None, upcoming: bool = False) -> list[Record]:
        model = self.registry.inspections
        inspections = model.find_upcoming(agent_id) if upcoming else model.find_by_agent(agent_id)
        if status:
            inspections = [inspection for inspection in inspections if inspection.get("status") == status]
        return [
            {
                **inspection,
                "property": _property_summary(self.registry.properties.find_by_id(inspection["propertyId"])),
                "seeker": _person_summary(self.registry.users.find_by_id(inspection["seekerId"])),
            }
            for inspection in inspections
        ]

    def for_property(self, user: Record, property_id: str) -> list[Record]:
        prop = self.registry.properties.find_by_id(property_id)
        if not prop:
            raise NotFoundError("Property not found")
        if prop.get("agentId") != user["id"] and user.get("role") != ROLE_ADMIN:
            raise NotAuthorizedError("Not authorized to view inspections for this property")
        return [
            {**inspection, "seeker": _person_summary(self.registry.users.find_by_id(inspection["seekerId"]))}
            for inspection in self.registry.inspections.find_by_property(property_id)
        ]

    def _roles(self, user: Record, inspection: Record) -> tuple[Optional[Record], bool, bool]:
        prop = self.registry.properties.find_by_id(inspection["propertyId"])
        is_agent = prop is not None and prop.get("agentId") == user["id"]
        is_seeker = inspection.get("seekerId") == user["id"]
        return prop, is_agent, is_seeker

    def update(self, user: Record, inspection_id: str, changes: dict[str, Any], *, now: datetime | None = None) -> Record:
        """
        Seekers reschedule (date and time together); agents set the status or
        their own notes. Anything else in ``changes`` is ignored.
        """
        inspection = self._get(inspection_id)
        prop, is_agent, is_seeker = self._roles(user, inspection)
        if not (is_agent or is_seeker or user.get("role") == ROLE_ADMIN):
            raise NotAuthorizedError("Not authorized to update this inspection")

        fields: dict[str, Any] = {}
        rescheduled = False
        if is_seeker and changes.get("scheduledDate") and changes.get("scheduledTime"):
            if _scheduled_at(changes["scheduledDate"], changes["scheduledTime"]) <= (now or utc_now()):
                raise InvalidRequestError("Inspection date must be in the future")
            fields.update(
                scheduledDate=changes["scheduledDate"],
                scheduledTime=changes["scheduledTime"],
                status=STATUS_RESCHEDULED,
            )
            if changes.get("notes"):
                fields["notes"] = changes["notes"]
            rescheduled = True
        status_changed = False
        if is_agent:
            status = changes.get("status")
            if status:
                if status not in STATUSES:
                    raise InvalidRequestError(f"Unknown inspection status {status!r}")
                fields["status"] = status
                status_changed = True
            if changes.get("agentNotes"):
                fields["agentNotes"] = changes["agentNotes"]

        updated = self.registry.inspections.touch(inspection_id, fields)
        if updated is None:
            raise NotFoundError("Inspection not found")
        if rescheduled:
            self.notifier.inspection_rescheduled(
                agent_id=inspection.get("agentId", ""), seeker_name=inspection.get("seekerName", ""), inspection=updated
            )
        if status_changed:
            self.notifier.inspection_status_changed(
                seeker_id=inspection.get("seekerId", ""),
                inspection=updated,
                property_title=(prop or {}).get("title", ""),
            )
        return updated

    def cancel(self, user: Record, inspection_id: str) -> Record:
        """Mark the inspection cancelled (it is kept) and return the interest to contacted."""
        inspection = self._get(inspection_id)
        prop, is_agent, is_seeker = self._roles(user, inspection)
        if not (is_agent or is_seeker or user.get("role") == ROLE_ADMIN):
            raise NotAuthorizedError("Not authorized to cancel this inspection")
        updated = self.registry.inspections.touch(inspection_id, {"status": STATUS_CANCELLED})
        if updated is None:
            raise NotFoundError("Inspection not found")
        if inspection.get("interestId"):
            self.registry.interests.touch(inspection["interestId"], {"status": STATUS_CONTACTED})
        self.notifier.inspection_cancelled(
            recipient_id=inspection.get("agentId", "") if is_seeker else inspection.get("seekerId", ""),
            cancelled_by=inspection.get("seekerName", "") if is_seeker else "The agent",
            inspection=updated,
            property_title=(prop or {}).get("title", ""),
        )
        logger.info("User %s cancelled inspection %s", user["id"], inspection_id)
        return updated
