"""Tests for application configuration.

Settings for database, connection pool, authentication, the generation provider and
Stripe. Tests cover defaults and validation.
"""

import pytest
from pydantic import SecretStr, ValidationError

from app.core.config import _INSECURE_DEFAULT_PASSWORD, Settings

# Reusable test constants
_SECURE_DB_PASSWORD = "my-secure-production-password-123!"
_TEST_AUTH_SECRET = "a" * 64
_PRODUCTION = "production"


class TestDefaults:
    """Tests for default values."""

    def test_lock_strategy_by_default(self):
        assert Settings().ledger_strategy == "lock"

    def test_database_url(self):
        s = Settings(database_host="db", database_name="tomato")
        assert s.database_url.startswith("postgresql+asyncpg://")
        assert s.database_url.endswith("@db:5432/tomato")

    def test_payments_disabled_without_key(self):
        assert Settings(stripe_secret_key=SecretStr("")).payments_enabled is False
        assert Settings(stripe_secret_key=SecretStr("sk_x")).payments_enabled is True

    def test_pool_limits_configurable(self):
        s = Settings(database_pool_size=20, database_max_overflow=5)
        assert (s.database_pool_size, s.database_max_overflow) == (20, 5)

    def test_settings_and_login_exempt_from_maintenance(self):
        exempt = Settings().maintenance_exempt_paths
        assert "/api/v1/settings" in exempt
        assert "/api/v1/auth/login" in exempt


class TestValidation:
    """Tests for check_production_security()."""

    def test_rejects_non_positive_timeout(self):
        with pytest.raises(ValidationError, match="PROVIDER_TIMEOUT_SECONDS"):
            Settings(provider_timeout_seconds=0)

    @pytest.mark.parametrize(
        ("pool_size", "max_overflow"), [(0, 10), (5, -1)]
    )
    def test_rejects_invalid_pool_limits(self, pool_size, max_overflow):
        with pytest.raises(ValidationError, match="DATABASE_POOL_SIZE"):
            Settings(database_pool_size=pool_size, database_max_overflow=max_overflow)

    def test_rejects_unknown_strategy(self):
        with pytest.raises(ValidationError):
            Settings(ledger_strategy="optimistic")

    def test_rejects_wildcard_origin(self):
        with pytest.raises(ValidationError, match="wildcard"):
            Settings(allowed_origins=["*"])

    def test_allows_default_password_in_development(self):
        """Default password is allowed in development environment."""
        s = Settings(
            environment="development",
            database_password=_INSECURE_DEFAULT_PASSWORD,
        )
        assert s.database_password == _INSECURE_DEFAULT_PASSWORD

    def test_rejects_default_password_in_production(self):
        with pytest.raises(ValidationError, match="default database password"):
            Settings(
                environment=_PRODUCTION,
                database_password=_INSECURE_DEFAULT_PASSWORD,
                auth_secret=SecretStr(_TEST_AUTH_SECRET),
            )

    def test_requires_auth_secret_in_production(self):
        with pytest.raises(ValidationError, match="AUTH_SECRET must be set"):
            Settings(
                environment=_PRODUCTION,
                database_password=_SECURE_DB_PASSWORD,
                auth_secret=SecretStr(""),
            )

    def test_rejects_short_auth_secret_in_production(self):
        with pytest.raises(ValidationError, match="at least 32"):
            Settings(
                environment=_PRODUCTION,
                database_password=_SECURE_DB_PASSWORD,
                auth_secret=SecretStr("short"),
            )

    def test_valid_production_settings(self):
        s = Settings(
            environment=_PRODUCTION,
            database_password=_SECURE_DB_PASSWORD,
            auth_secret=SecretStr(_TEST_AUTH_SECRET),
        )
        assert s.environment == _PRODUCTION
