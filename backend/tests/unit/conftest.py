"""Shared fixtures for unit tests that never touch a database.

FakeSession stands in for AsyncSession where services own their
transactions (config store, ledger). Repository calls are patched per test,
so the session only needs to record commit/rollback.
"""

from collections.abc import AsyncGenerator
from datetime import UTC, datetime
from types import SimpleNamespace
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import ASGITransport, AsyncClient

from app.services.config_document import Document, default_document, effective_document


class FakeSession:
    """Async context manager recording transaction boundaries."""

    def __init__(self) -> None:
        self.commit = AsyncMock()
        self.rollback = AsyncMock()
        self.flush = AsyncMock()
        self.execute = AsyncMock()
        self.add = MagicMock()

    async def __aenter__(self) -> "FakeSession":
        return self

    async def __aexit__(self, *exc_info: Any) -> bool:
        return False


class StubConfigStore:
    """In-memory stand-in for ConfigStore."""

    def __init__(self, document: dict[str, Any] | None = None) -> None:
        self.document = effective_document(document)
        self.puts: list[dict[str, Any]] = []

    async def get(self) -> Document:
        return effective_document(self.document)

    async def put(self, document: dict[str, Any]) -> Document:
        self.puts.append(document)
        self.document = effective_document(document)
        return await self.get()


@pytest.fixture
def fake_session() -> FakeSession:
    """A single FakeSession shared by every factory() call."""
    return FakeSession()


@pytest.fixture
def fake_session_factory(fake_session: FakeSession) -> MagicMock:
    """Session factory returning the shared FakeSession."""
    return MagicMock(return_value=fake_session)


@pytest.fixture
def stub_config_store() -> StubConfigStore:
    """Config store serving the compiled-in defaults."""
    return StubConfigStore(default_document())


@pytest.fixture
def make_config_store():
    """Factory for config stores serving a given (partial) document."""
    return StubConfigStore


@pytest.fixture
def current_user() -> SimpleNamespace:
    """Authenticated caller returned by the get_current_user override."""
    return SimpleNamespace(
        id=1,
        username="tester",
        email="tester@example.com",
        country=None,
        balance=10,
        is_admin=False,
        is_banned=False,
        status="active",
        referral_code="ABCD1234",
        referrals=0,
        last_reward_claim=None,
        created_at=datetime(2026, 1, 1, tzinfo=UTC),
    )


@pytest.fixture
def request_session() -> MagicMock:
    """Stand-in for the request-scoped session yielded by get_db."""
    session = MagicMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    return session


@pytest.fixture
async def api_client(
    current_user: SimpleNamespace,
    stub_config_store: StubConfigStore,
    request_session: MagicMock,
) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client over the real app with database-free overrides.

    get_db yields ``request_session``, the config store is in-memory and
    get_current_user returns ``current_user``. Tests override further
    dependencies (gateway, payments) through ``app.dependency_overrides``.
    """
    from app.api.deps import get_current_user, get_db
    from app.main import app
    from app.services.config_store import get_config_store

    async def override_get_db() -> AsyncGenerator[MagicMock, None]:
        yield request_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_config_store] = lambda: stub_config_store
    app.dependency_overrides[get_current_user] = lambda: current_user

    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
