"""Tests for the billing endpoints."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from app.core.errors import InvalidWebhookError, PaymentsUnavailableError
from app.main import app
from app.services.payment_service import get_payment_service


@pytest.fixture
def payments():
    mock = MagicMock()
    mock.create_checkout_session = AsyncMock(
        return_value="https://checkout.stripe.test/cs_1"
    )
    mock.handle_webhook = AsyncMock()
    app.dependency_overrides[get_payment_service] = lambda: mock
    return mock


class TestBillingConfig:
    """Tests for GET /billing/config."""

    async def test_reports_public_key(self, api_client, monkeypatch):
        from pydantic import SecretStr

        from app.core.config import settings

        monkeypatch.setattr(settings, "stripe_publishable_key", "pk_test_1")
        monkeypatch.setattr(settings, "stripe_secret_key", SecretStr("sk_test_1"))

        response = await api_client.get("/api/v1/billing/config")

        assert response.status_code == 200
        assert response.json()["data"] == {
            "stripe_public_key": "pk_test_1",
            "payments_enabled": True,
        }


class TestCheckoutSession:
    """Tests for POST /billing/checkout-session."""

    async def test_returns_url(self, api_client, payments, current_user):
        response = await api_client.post(
            "/api/v1/billing/checkout-session", json={"package_id": 2}
        )

        assert response.status_code == 200
        assert response.json()["data"]["url"].startswith("https://checkout")
        user_id, package_id, document = payments.create_checkout_session.await_args.args
        assert user_id == current_user.id
        assert package_id == 2
        assert document["store"]["packages"]

    async def test_payments_disabled(self, api_client, payments):
        payments.create_checkout_session.side_effect = PaymentsUnavailableError()
        response = await api_client.post(
            "/api/v1/billing/checkout-session", json={"package_id": 1}
        )
        assert response.status_code == 503


class TestWebhook:
    """Tests for POST /billing/webhook."""

    async def test_acknowledges_delivery(self, api_client, payments):
        response = await api_client.post(
            "/api/v1/billing/webhook",
            content=b'{"id": "evt_1"}',
            headers={"Stripe-Signature": "t=1,v1=abc"},
        )

        assert response.status_code == 200
        assert response.json() == {"received": True}
        payments.handle_webhook.assert_awaited_once_with(b'{"id": "evt_1"}', "t=1,v1=abc")

    async def test_bad_signature(self, api_client, payments):
        payments.handle_webhook.side_effect = InvalidWebhookError("Invalid signature")
        response = await api_client.post("/api/v1/billing/webhook", content=b"{}")
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_WEBHOOK"
