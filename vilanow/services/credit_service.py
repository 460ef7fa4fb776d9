"""Credit balance use cases: bundles, purchases and the transaction history."""

from __future__ import annotations

import logging
import secrets
import threading
import time
from dataclasses import dataclass
from typing import Optional

from vilanow.core.utils import new_id, utc_now_iso
from vilanow.models.credits import TX_COMPLETED, TX_CREDIT_PURCHASE, TX_FAILED, TX_PENDING
from vilanow.registry import ModelRegistry
from vilanow.repositories.base import Record
from vilanow.services.errors import InvalidRequestError, NotFoundError, ServiceUnavailableError
from vilanow.services.payments import FINAL_FAILURES, PaymentVerifier

logger = logging.getLogger(__name__)


def payment_reference(prefix: str = "CREDIT") -> str:
    """Gateway reference such as ``CREDIT_1714557600000_3f9a1c2b``."""
    return f"{prefix}_{int(time.time() * 1000)}_{secrets.token_hex(4)}"


@dataclass
class PurchaseResult:
    transaction: Record
    reference: str


@dataclass
class ConfirmResult:
    transaction: Record
    new_balance: int
    credited: bool


class CreditService:
    def __init__(self, registry: ModelRegistry, verifier: Optional[PaymentVerifier] = None):
        self.registry = registry
        self.verifier = verifier
        self._confirm_lock = threading.Lock()

    def bundles(self) -> list[Record]:
        return self.registry.credit_bundles.find_active()

    def balance(self, user_id: str) -> int:
        return self.registry.users.credits_of(user_id)

    def history(self, user_id: str) -> list[Record]:
        return self.registry.transactions.find_by_user(user_id)

    def purchase(self, user_id: str, bundle_id: str) -> PurchaseResult:
        """
        Open a pending purchase for a bundle.

        No credits move here. The client pays the gateway using the returned
        reference and then calls :meth:`confirm`.
        """
        if self.verifier is None:
            raise ServiceUnavailableError("Payments are not configured")
        bundle = self.registry.credit_bundles.find_by_id(bundle_id)
        if not bundle or not bundle.get("active"):
            raise NotFoundError("Credit bundle not found or inactive")
        if not self.registry.users.find_by_id(user_id):
            raise NotFoundError("User not found")

        reference = payment_reference()
        total = int(bundle.get("credits") or 0) + int(bundle.get("bonus") or 0)
        transaction = self.registry.transactions.create(
            {
                "id": new_id(),
                "userId": user_id,
                "type": TX_CREDIT_PURCHASE,
                "amount": bundle.get("price", 0),
                "credits": total,
                "description": f"Purchased {bundle.get('credits', 0)} credits + {bundle.get('bonus', 0)} bonus",
                "status": TX_PENDING,
                "bundleId": bundle_id,
                "reference": reference,
                "timestamp": utc_now_iso(),
            }
        )
        logger.info("User %s opened purchase %s for bundle %s", user_id, reference, bundle_id)
        return PurchaseResult(transaction=transaction, reference=reference)

    def confirm(self, user_id: str, reference: str) -> ConfirmResult:
        """
        Verify a pending purchase with the gateway and credit the buyer once.

        Confirming an already completed purchase returns it unchanged.
        """
        if self.verifier is None:
            raise ServiceUnavailableError("Payments are not configured")
        with self._confirm_lock:
            transaction = self.registry.transactions.find_by_reference(reference)
            if not transaction or transaction.get("userId") != user_id:
                raise NotFoundError("Transaction not found")
            if transaction.get("status") == TX_COMPLETED:
                return ConfirmResult(transaction, self.balance(user_id), credited=False)
            if transaction.get("status") != TX_PENDING:
                raise InvalidRequestError(f"Payment {transaction.get('status')}")

            verification = self.verifier.verify(reference)
            if verification.status in FINAL_FAILURES:
                self.registry.transactions.update(transaction["id"], {"status": TX_FAILED})
                logger.info("Payment %s for user %s %s", reference, user_id, verification.status)
                raise InvalidRequestError(f"Payment {verification.status}")
            if not verification.succeeded:
                raise InvalidRequestError("Payment not completed yet")
            if verification.amount < (transaction.get("amount") or 0):
                logger.warning(
                    "Payment %s paid %s, expected %s", reference, verification.amount, transaction.get("amount")
                )
                raise InvalidRequestError("Paid amount does not match the bundle price")

            completed = self.registry.transactions.update(
                transaction["id"],
                {"status": TX_COMPLETED, "gatewayId": verification.gateway_id, "completedAt": utc_now_iso()},
            )
            updated = self.registry.users.adjust_credits(user_id, int(transaction.get("credits") or 0))
        new_balance = int((updated or {}).get("credits") or 0)
        logger.info("User %s confirmed purchase %s (+%s credits)", user_id, reference, transaction.get("credits"))
        return ConfirmResult(completed or transaction, new_balance, credited=True)
