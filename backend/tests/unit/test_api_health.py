"""Tests for GET /api/v1/health."""

from unittest.mock import AsyncMock

import pytest
from pydantic import SecretStr
from sqlalchemy.exc import OperationalError

from app.api.deps import get_db
from app.core.config import settings
from app.main import app


@pytest.fixture
def session():
    mock = AsyncMock()
    app.dependency_overrides[get_db] = lambda: mock
    return mock


class TestHealth:
    """Tests for dependency health reporting."""

    async def test_all_operational(self, api_client, session, monkeypatch):
        monkeypatch.setattr(settings, "generation_provider", "gemini")
        monkeypatch.setattr(settings, "google_api_key", SecretStr("key"))
        monkeypatch.setattr(settings, "stripe_secret_key", SecretStr("sk_test"))

        response = await api_client.get("/api/v1/health")

        assert response.status_code == 200
        body = response.json()
        assert body["database"]["ok"] is True
        assert body["ai_service"]["ok"] is True
        assert body["payment_service"]["ok"] is True

    async def test_reports_missing_keys(self, api_client, session, monkeypatch):
        monkeypatch.setattr(settings, "generation_provider", "gemini")
        monkeypatch.setattr(settings, "google_api_key", SecretStr(""))
        monkeypatch.setattr(settings, "stripe_secret_key", SecretStr(""))

        body = (await api_client.get("/api/v1/health")).json()

        assert body["ai_service"] == {"ok": False, "message": "GOOGLE_API_KEY is not set."}
        assert body["payment_service"]["ok"] is False

    async def test_database_down(self, api_client, session):
        """A failed database check is reported, not raised."""
        session.execute.side_effect = OperationalError("SELECT 1", {}, Exception())

        response = await api_client.get("/api/v1/health")

        assert response.status_code == 200
        assert response.json()["database"]["ok"] is False
        session.rollback.assert_awaited_once()
