from __future__ import annotations

import httpx
import pytest

from vilanow.services import payments
from vilanow.services.errors import ServiceUnavailableError
from vilanow.services.payments import PaystackVerifier


def _respond(monkeypatch, status_code=200, body=None, error=None):
    seen = {}

    def _get(url, headers=None, timeout=None):
        seen.update(url=url, headers=headers)
        if error is not None:
            raise error
        return httpx.Response(status_code, json=body or {}, request=httpx.Request("GET", url))

    monkeypatch.setattr(payments.httpx, "get", _get)
    return seen


def test_successful_charge_is_converted_from_kobo(monkeypatch):
    seen = _respond(monkeypatch, body={"status": True, "message": "ok", "data": {"id": 42, "status": "success", "amount": 250000}})
    result = PaystackVerifier("sk_test", base_url="https://gateway.test/").verify("CREDIT_1_ab")

    assert seen["url"] == "https://gateway.test/transaction/verify/CREDIT_1_ab"
    assert seen["headers"] == {"Authorization": "Bearer sk_test"}
    assert result.succeeded
    assert result.amount == 2500
    assert result.gateway_id == "42"


def test_abandoned_charge_is_not_a_success(monkeypatch):
    _respond(monkeypatch, body={"status": True, "data": {"status": "abandoned", "amount": 100000}})
    result = PaystackVerifier("sk_test").verify("CREDIT_1_ab")
    assert result.status == "abandoned"
    assert not result.succeeded


@pytest.mark.parametrize(
    "kwargs",
    [
        {"status_code": 500},
        {"error": httpx.ConnectTimeout("timed out")},
    ],
)
def test_gateway_failures_are_reported_as_unavailable(monkeypatch, kwargs):
    _respond(monkeypatch, **kwargs)
    with pytest.raises(ServiceUnavailableError):
        PaystackVerifier("sk_test").verify("CREDIT_1_ab")


def test_secret_key_is_required():
    with pytest.raises(ValueError):
        PaystackVerifier("")
