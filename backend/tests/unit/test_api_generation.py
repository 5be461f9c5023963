"""Tests for POST /api/v1/ai/generate.

The gateway is replaced through dependency overrides; gateway behavior
itself is covered in test_generation_gateway.py.
"""

from unittest.mock import AsyncMock, MagicMock

import pytest

from app.api.deps import get_current_user, get_generation_gateway
from app.core.errors import (
    ContentBlockedError,
    InsufficientBalanceError,
    InvalidOperationError,
    ProviderUnavailableError,
)
from app.main import app
from app.schemas.generation import Artifact, GenerationOutput, GenerationResponse

_URL = "/api/v1/ai/generate"


@pytest.fixture
def gateway():
    mock = MagicMock()
    mock.generate = AsyncMock(
        return_value=GenerationResponse(
            result=GenerationOutput(artifact=Artifact(mime_type="image/png", data="AAA=")),
            balance=5,
        )
    )
    app.dependency_overrides[get_generation_gateway] = lambda: mock
    return mock


class TestGenerateEndpoint:
    """Tests for the generate endpoint."""

    async def test_success_returns_result_and_balance(
        self, api_client, gateway, current_user
    ):
        response = await api_client.post(
            _URL, json={"kind": "image_generate", "prompt": "a tomato"}
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert data["balance"] == 5
        assert data["result"]["artifact"]["mime_type"] == "image/png"
        caller, request = gateway.generate.await_args.args
        assert caller is current_user
        assert request.kind == "image_generate"

    async def test_request_connection_released_before_charging(
        self, api_client, gateway, request_session
    ):
        """The request session is committed before the ledger runs."""
        commits_seen = []

        async def generate(caller, request):
            commits_seen.append(request_session.commit.await_count)
            return GenerationResponse(result=GenerationOutput(text="ok"), balance=9)

        gateway.generate.side_effect = generate

        response = await api_client.post(
            _URL, json={"kind": "tweet_generate", "idea": "tomatoes"}
        )

        assert response.status_code == 200
        assert commits_seen == [1]

    @pytest.mark.parametrize(
        ("error", "status", "code"),
        [
            (InsufficientBalanceError(balance=3, required=5), 402, "INSUFFICIENT_BALANCE"),
            (InvalidOperationError("Invalid AI operation type: 'x'", 10), 400, "INVALID_OPERATION"),
            (ContentBlockedError(balance=10), 422, "CONTENT_BLOCKED"),
            (ProviderUnavailableError(balance=10), 503, "PROVIDER_UNAVAILABLE"),
        ],
    )
    async def test_failures_use_error_envelope(
        self, api_client, gateway, error, status, code
    ):
        """Every failure reports its code and the caller's balance."""
        gateway.generate.side_effect = error

        response = await api_client.post(_URL, json={"kind": "image_generate"})

        assert response.status_code == status
        body = response.json()["error"]
        assert body["code"] == code
        assert "balance" in body["details"][0]

    async def test_unknown_fields_rejected(self, api_client, gateway):
        """Extra request fields are a validation error."""
        response = await api_client.post(
            _URL, json={"kind": "image_generate", "price": 0}
        )
        assert response.status_code == 400
        gateway.generate.assert_not_awaited()

    async def test_requires_authentication(self, api_client, gateway):
        """Without a bearer token the call is rejected before the gateway."""
        app.dependency_overrides.pop(get_current_user)

        response = await api_client.post(_URL, json={"kind": "image_generate"})

        assert response.status_code == 401
        gateway.generate.assert_not_awaited()
