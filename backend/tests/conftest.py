"""Shared test fixtures.

Database-backed fixtures use a separate ``<db>_test`` PostgreSQL database
and skip cleanly when PostgreSQL is not reachable on port 5432. Everything
else runs against mocks and dependency overrides.
"""

import socket
from collections.abc import AsyncGenerator, Iterator
from datetime import UTC, datetime, timedelta
from typing import Any

import jwt
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from pydantic import SecretStr
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from app.core.config import settings
from app.core.rate_limiting import limiter
from app.models.base import Base
from app.providers import factory
from app.providers.generation.mock_adapter import MockGenerationProvider
from app.services.config_store import reset_config_store
from app.services.ledger_service import reset_ledger_service
from app.services.payment_service import reset_payment_service

# Use separate test database
TEST_DATABASE_URL = settings.database_url.replace(
    settings.database_name, f"{settings.database_name}_test"
)

# Security: This is a test-only secret. Production uses a real secret from env.
TEST_AUTH_SECRET = "test-secret-key-that-is-at-least-32-characters-long"  # nosec B105  # gitleaks:allow

TEST_PASSWORD = "Tomato-pass-123"  # nosec B105


def create_test_jwt(
    user_id: int,
    *,
    is_admin: bool = False,
    secret: str = TEST_AUTH_SECRET,
    expires_delta: timedelta | None = None,
    audience: str | None = None,
) -> str:
    """Create a signed JWT for test authentication.

    Args:
        user_id: User id to encode in the sub claim.
        is_admin: Adds the adm claim.
        secret: Signing secret (must match settings.auth_secret in tests).
        expires_delta: Time until expiration. Defaults to 1 hour.
        audience: Override the aud claim (for rejection tests).

    Returns:
        Encoded JWT string.
    """
    now = datetime.now(UTC)
    payload: dict[str, Any] = {
        "sub": str(user_id),
        "aud": audience or settings.auth_audience,
        "iss": settings.auth_issuer,
        "exp": now + (expires_delta or timedelta(hours=1)),
        "iat": now,
    }
    if is_admin:
        payload["adm"] = True
    return jwt.encode(payload, secret, algorithm="HS256")


def auth_headers(user_id: int, *, is_admin: bool = False) -> dict[str, str]:
    """Authorization header for a test user."""
    return {"Authorization": f"Bearer {create_test_jwt(user_id, is_admin=is_admin)}"}


def _is_postgres_available() -> bool:
    """Check if PostgreSQL is accepting connections.

    Returns:
        True if PostgreSQL is reachable on port 5432, False otherwise.
    """
    try:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        sock.settimeout(1)
        result = sock.connect_ex(("127.0.0.1", 5432))
        sock.close()
        return result == 0
    except OSError:
        return False


# Check once at module load time
_POSTGRES_AVAILABLE = _is_postgres_available()


def skip_if_no_postgres() -> None:
    """Skip test if PostgreSQL is not available.

    Called by fixtures that require database connection.
    """
    if not _POSTGRES_AVAILABLE:
        pytest.skip(
            "PostgreSQL not available on port 5432. "
            "Start database with: docker compose up -d"
        )


@pytest.fixture(autouse=True)
def _test_settings() -> Iterator[None]:
    """Test auth secret, no rate limiting, fresh service singletons."""
    original_secret = settings.auth_secret
    original_limiter_enabled = limiter.enabled
    settings.auth_secret = SecretStr(TEST_AUTH_SECRET)
    limiter.enabled = False

    yield

    settings.auth_secret = original_secret
    limiter.enabled = original_limiter_enabled
    reset_config_store()
    reset_ledger_service()
    reset_payment_service()
    factory.reset_providers()


@pytest.fixture
def mock_provider() -> Iterator[MockGenerationProvider]:
    """Mock generation provider injected into the factory singleton.

    Yields:
        MockGenerationProvider instance.
    """
    mock = MockGenerationProvider()
    factory._generation_provider = mock

    yield mock

    factory.reset_providers()


@pytest_asyncio.fixture(scope="function")
async def db_engine():
    """Create test database engine.

    Skips test if PostgreSQL is not available (e.g., Docker not running).
    """
    skip_if_no_postgres()

    engine = create_async_engine(TEST_DATABASE_URL, echo=False)

    async with engine.begin() as conn:
        await conn.exec_driver_sql("CREATE EXTENSION IF NOT EXISTS pgcrypto")
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def session_factory(db_engine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the test database."""
    return async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest_asyncio.fixture(scope="function")
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Create test database session."""
    async with session_factory() as session:
        yield session
        await session.rollback()


async def create_user(
    db: AsyncSession,
    *,
    username: str = "tester",
    balance: int = 0,
    is_admin: bool = False,
    status: str = "active",
    referral_code: str | None = None,
):
    """Insert a committed user row for database-backed tests."""
    from app.models import User

    user = User(
        username=username,
        email=f"{username}@example.com",
        password_hash="not-a-real-hash",  # nosec B106
        balance=balance,
        is_admin=is_admin,
        status=status,
        referral_code=referral_code or username.upper()[:16],
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


@pytest_asyncio.fixture
async def client(
    session_factory: async_sessionmaker[AsyncSession],
    mock_provider: MockGenerationProvider,  # noqa: ARG001 - injects provider
) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client wired to the test database.

    Sets up:
    - get_db, config store, ledger and payments bound to the test database
    - mock generation provider
    - httpx.AsyncClient with ASGI transport (no auth header by default)

    Yields:
        Configured AsyncClient.
    """
    from app.api.deps import get_db
    from app.main import app
    from app.services.config_store import ConfigStore, get_config_store
    from app.services.ledger_service import LedgerService, get_ledger_service

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    config_store = ConfigStore(session_factory)
    ledger = LedgerService(session_factory, timeout_seconds=5.0)

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_config_store] = lambda: config_store
    app.dependency_overrides[get_ledger_service] = lambda: ledger

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def bearer_headers():
    """Factory for Authorization headers: bearer_headers(user_id, is_admin=...)."""
    return auth_headers
