"""
Payment gateway verification.

A purchase is only credited after the gateway confirms the charge for its
reference. ``PaymentVerifier`` is the seam; ``PaystackVerifier`` talks to the
Paystack REST API and tests pass their own implementation.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Protocol

import httpx

from vilanow.services.errors import ServiceUnavailableError

logger = logging.getLogger(__name__)

PAYMENT_SUCCESS = "success"
PAYMENT_FAILED = "failed"
PAYMENT_ABANDONED = "abandoned"
FINAL_FAILURES = {PAYMENT_FAILED, PAYMENT_ABANDONED}


@dataclass(frozen=True)
class PaymentVerification:
    status: str
    amount: float = 0.0
    gateway_id: Optional[str] = None
    message: str = ""

    @property
    def succeeded(self) -> bool:
        return self.status == PAYMENT_SUCCESS


class PaymentVerifier(Protocol):
    def verify(self, reference: str) -> PaymentVerification:
        ...


class PaystackVerifier:
    """Verifies a charge with ``GET /transaction/verify/{reference}``."""

    def __init__(self, secret_key: str, *, base_url: str = "https://api.paystack.co", timeout: float = 15.0):
        if not secret_key:
            raise ValueError("Paystack secret key is required")
        self._secret_key = secret_key
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout

    def verify(self, reference: str) -> PaymentVerification:
        url = f"{self._base_url}/transaction/verify/{reference}"
        headers = {"Authorization": f"Bearer {self._secret_key}"}
        try:
            resp = httpx.get(url, headers=headers, timeout=self._timeout)
            resp.raise_for_status()
            body = resp.json()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning("Payment verification for %s failed: %s", reference, exc)
            raise ServiceUnavailableError("Payment gateway unavailable") from exc

        data = body.get("data") or {}
        # amounts come back in kobo
        return PaymentVerification(
            status=str(data.get("status") or PAYMENT_FAILED),
            amount=(data.get("amount") or 0) / 100,
            gateway_id=str(data["id"]) if data.get("id") is not None else None,
            message=body.get("message", ""),
        )
