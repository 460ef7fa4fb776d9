"""Back-office queues and runtime settings. Every settings change is written to the audit trail."""

from __future__ import annotations

import logging
from typing import Any

from vilanow.core.utils import new_id, utc_now_iso
from vilanow.registry import ModelRegistry
from vilanow.repositories.base import Record
from vilanow.services.errors import NotFoundError

logger = logging.getLogger(__name__)


class AdminService:
    def __init__(self, registry: ModelRegistry):
        self.registry = registry

    def pending_kyc(self) -> list[Record]:
        return self.registry.kyc.find_pending()

    def pending_flags(self, severity: str | None = None) -> list[Record]:
        flags = self.registry.flags.find_pending()
        if severity:
            flags = [flag for flag in flags if flag.get("severity") == severity]
        return flags

    def recent_actions(self, limit: int = 50) -> list[Record]:
        return self.registry.admin_actions.find_recent(limit)

    def settings(self) -> list[Record]:
        return self.registry.app_settings.find_all()

    def set_setting(self, admin: Record, key: str, value: Any) -> Record:
        previous = self.registry.app_settings.get_value(key)
        updated = self.registry.app_settings.set_value(key, value, updated_by=admin["id"])
        if updated is None:
            raise NotFoundError(f"Unknown setting {key!r}")
        self.registry.admin_actions.create(
            {
                "id": new_id(),
                "adminId": admin["id"],
                "action": "update_setting",
                "targetType": "setting",
                "targetId": updated["id"],
                "details": {"key": key, "from": previous, "to": value},
                "createdAt": utc_now_iso(),
            }
        )
        logger.info("Admin %s set %s to %r", admin["id"], key, value)
        return updated
