"""Back-office records: KYC submissions, moderation flags, audit trail, runtime settings."""
from __future__ import annotations

from typing import Any, Optional

from vilanow.core.utils import utc_now_iso
from vilanow.repositories.base import Record

from .base import EntityModel

DEFAULT_SETTINGS = (
    {"id": "s1", "key": "maintenance_mode", "value": False, "description": "Enable maintenance mode"},
    {"id": "s2", "key": "max_listings_per_agent", "value": 50, "description": "Maximum listings per agent"},
    {"id": "s3", "key": "interest_unlock_cost", "value": 5, "description": "Credits to unlock an interest"},
    {"id": "s4", "key": "featured_listing_cost", "value": 10, "description": "Credits to feature a listing"},
)


class KYCModel(EntityModel):
    collection = "kyc"

    def find_by_agent(self, agent_id: str) -> Optional[Record]:
        return self.find_one(lambda kyc: kyc.get("agentId") == agent_id)

    def find_pending(self) -> list[Record]:
        return self.find_by_status("pending")

    def find_by_status(self, status: str) -> list[Record]:
        return self.find_many(lambda kyc: kyc.get("status") == status)


class FlagModel(EntityModel):
    collection = "flags"

    def find_pending(self) -> list[Record]:
        return self.find_many(lambda flag: flag.get("status") == "pending")

    def find_by_entity(self, entity_type: str, entity_id: str) -> list[Record]:
        return self.find_many(lambda flag: flag.get("entityType") == entity_type and flag.get("entityId") == entity_id)

    def find_by_severity(self, severity: str) -> list[Record]:
        return self.find_many(lambda flag: flag.get("severity") == severity)


class AdminActionModel(EntityModel):
    collection = "admin_actions"

    def find_by_admin(self, admin_id: str) -> list[Record]:
        return self.find_many(lambda action: action.get("adminId") == admin_id)

    def find_by_action(self, action: str) -> list[Record]:
        return self.find_many(lambda a: a.get("action") == action)

    def find_recent(self, limit: int = 50) -> list[Record]:
        return self._sorted(self.find_all(), "createdAt", descending=True)[:limit]


class SettingModel(EntityModel):
    collection = "settings"

    def seed_defaults(self) -> int:
        if self.count():
            return 0
        now = utc_now_iso()
        for setting in DEFAULT_SETTINGS:
            self.create({**setting, "updatedAt": now})
        return len(DEFAULT_SETTINGS)

    def find_by_key(self, key: str) -> Optional[Record]:
        return self.find_one(lambda setting: setting.get("key") == key)

    def get_value(self, key: str, default: Any = None) -> Any:
        setting = self.find_by_key(key)
        return setting.get("value", default) if setting else default

    def set_value(self, key: str, value: Any, updated_by: str | None = None) -> Optional[Record]:
        setting = self.find_by_key(key)
        if not setting:
            return None
        return self.touch(setting["id"], {"value": value, "updatedBy": updated_by})
