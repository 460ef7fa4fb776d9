from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from vilanow.core.config import Settings
from vilanow.registry import build_registry
from vilanow.services.payments import PaymentVerification


@pytest.fixture()
def settings(tmp_path):
    return Settings(
        app_env="test",
        data_dir=tmp_path / "data",
        database_url="",
        storage_backend="json",
    )


@pytest.fixture()
def registry(settings):
    return build_registry(settings)


class StubVerifier:
    """Payment gateway double: answers with whatever status was recorded for a reference."""

    def __init__(self):
        self.outcomes = {}
        self.calls = []

    def pay(self, reference, amount, status="success"):
        self.outcomes[reference] = PaymentVerification(status=status, amount=amount, gateway_id="gw-1")

    def verify(self, reference):
        self.calls.append(reference)
        return self.outcomes.get(reference, PaymentVerification(status="ongoing"))


@pytest.fixture()
def payments():
    return StubVerifier()
