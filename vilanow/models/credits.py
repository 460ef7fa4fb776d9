"""Credit bundles on sale and the ledger of credit/wallet transactions."""
from __future__ import annotations

from typing import Optional

from vilanow.core.utils import utc_now_iso
from vilanow.repositories.base import Record

from .base import EntityModel

TX_CREDIT_PURCHASE = "credit_purchase"
TX_CREDIT_SPENT = "credit_spent"
TX_WALLET_LOAD = "wallet_load"
TX_WALLET_DEBIT = "wallet_debit"

TX_PENDING = "pending"
TX_COMPLETED = "completed"
TX_FAILED = "failed"

DEFAULT_BUNDLES = (
    {"id": "bundle-1", "credits": 10, "price": 1000, "bonus": 0},
    {"id": "bundle-2", "credits": 25, "price": 2000, "bonus": 5, "popular": True},
    {"id": "bundle-3", "credits": 50, "price": 3500, "bonus": 10},
    {"id": "bundle-4", "credits": 100, "price": 6000, "bonus": 25},
)


class CreditBundleModel(EntityModel):
    collection = "credit_bundles"

    def seed_defaults(self) -> int:
        """Install the default bundles into an empty collection. Returns how many were added."""
        if self.count():
            return 0
        now = utc_now_iso()
        for bundle in DEFAULT_BUNDLES:
            self.create({**bundle, "active": True, "createdAt": now})
        return len(DEFAULT_BUNDLES)

    def find_active(self) -> list[Record]:
        return self.find_many(lambda bundle: bool(bundle.get("active")))


class TransactionModel(EntityModel):
    collection = "transactions"

    def find_by_user(self, user_id: str) -> list[Record]:
        return self._sorted(self.find_many(lambda tx: tx.get("userId") == user_id), "timestamp", descending=True)

    def find_by_type(self, type_: str) -> list[Record]:
        return self.find_many(lambda tx: tx.get("type") == type_)

    def find_by_status(self, status: str) -> list[Record]:
        return self._sorted(self.find_many(lambda tx: tx.get("status") == status), "timestamp", descending=True)

    def find_pending(self) -> list[Record]:
        return self.find_by_status(TX_PENDING)

    def find_completed(self) -> list[Record]:
        return self.find_by_status(TX_COMPLETED)

    def find_by_reference(self, reference: str) -> Optional[Record]:
        if not reference:
            return None
        return self.find_one(lambda tx: tx.get("reference") == reference)
