"""Tests for the register and login endpoints.

Account services are patched; their behavior is covered in
test_account_service.py.
"""

from datetime import UTC, datetime
from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import jwt
import pytest

from app.core.config import settings
from app.core.errors import AccountBannedError, ConflictError, UnauthorizedError

_REGISTER = "/api/v1/auth/register"
_LOGIN = "/api/v1/auth/login"

_BODY = {
    "username": "newbie",
    "email": "newbie@example.com",
    "password": "Tomato-pass-123",
}


def _user(**overrides):
    fields = {
        "id": 42,
        "username": "newbie",
        "email": "newbie@example.com",
        "country": None,
        "balance": 25,
        "is_admin": False,
        "status": "active",
        "referral_code": "CAFEBABE",
        "referrals": 0,
        "last_reward_claim": None,
        "created_at": datetime(2026, 1, 1, tzinfo=UTC),
    }
    fields.update(overrides)
    return SimpleNamespace(**fields)


@pytest.fixture
def not_breached():
    with patch(
        "app.api.v1.auth.check_password_breached",
        new_callable=AsyncMock,
        return_value=False,
    ) as mock:
        yield mock


class TestRegister:
    """Tests for POST /auth/register."""

    async def test_success_returns_token_and_profile(self, api_client, not_breached):
        with patch(
            "app.api.v1.auth.register_user",
            new_callable=AsyncMock,
            return_value=_user(),
        ) as register:
            response = await api_client.post(_REGISTER, json=_BODY)

        assert response.status_code == 201
        data = response.json()["data"]
        assert data["user"]["balance"] == 25
        assert "password_hash" not in data["user"]
        claims = jwt.decode(
            data["token"],
            settings.auth_secret.get_secret_value(),
            algorithms=["HS256"],
            audience=settings.auth_audience,
        )
        assert claims["sub"] == "42"
        assert "adm" not in claims
        # The effective document is passed for grant amounts.
        assert register.await_args.args[2]["costs"]["newUserPoints"] == 25

    async def test_weak_password(self, api_client, not_breached):
        body = {**_BODY, "password": "onlyletters"}
        response = await api_client.post(_REGISTER, json=body)
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    async def test_breached_password(self, api_client, not_breached):
        not_breached.return_value = True
        response = await api_client.post(_REGISTER, json=_BODY)
        assert response.status_code == 422
        assert response.json()["error"]["code"] == "PASSWORD_BREACHED"

    async def test_duplicate_username(self, api_client, not_breached):
        with patch(
            "app.api.v1.auth.register_user",
            new_callable=AsyncMock,
            side_effect=ConflictError("USERNAME_TAKEN", "Username already exists."),
        ):
            response = await api_client.post(_REGISTER, json=_BODY)
        assert response.status_code == 409
        assert response.json()["error"]["code"] == "USERNAME_TAKEN"

    async def test_invalid_email(self, api_client, not_breached):
        response = await api_client.post(_REGISTER, json={**_BODY, "email": "nope"})
        assert response.status_code == 400


class TestLogin:
    """Tests for POST /auth/login."""

    async def test_success(self, api_client):
        with patch(
            "app.api.v1.auth.authenticate",
            new_callable=AsyncMock,
            return_value=_user(is_admin=True),
        ):
            response = await api_client.post(
                _LOGIN, json={"identifier": "newbie", "password": "x"}
            )

        assert response.status_code == 200
        token = response.json()["data"]["token"]
        claims = jwt.decode(token, options={"verify_signature": False})
        assert claims["adm"] is True

    async def test_bad_credentials(self, api_client):
        with patch(
            "app.api.v1.auth.authenticate",
            new_callable=AsyncMock,
            side_effect=UnauthorizedError("Invalid credentials"),
        ):
            response = await api_client.post(
                _LOGIN, json={"identifier": "newbie", "password": "x"}
            )
        assert response.status_code == 401

    async def test_banned(self, api_client):
        with patch(
            "app.api.v1.auth.authenticate",
            new_callable=AsyncMock,
            side_effect=AccountBannedError(),
        ):
            response = await api_client.post(
                _LOGIN, json={"identifier": "newbie", "password": "x"}
            )
        assert response.status_code == 403
        assert response.json()["error"]["code"] == "ACCOUNT_BANNED"
