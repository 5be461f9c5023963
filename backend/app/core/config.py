"""Application configuration loaded from environment variables.

Settings for database, connection pool, authentication, the generation
provider and Stripe payments. Uses pydantic-settings for validation and
.env file support.

These are static per-deployment settings. Runtime-editable pricing, store
catalog and maintenance state live in the configuration document served by
``app.services.config_store``.
"""

from typing import Literal

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Known insecure default password that must not be used in production
# Security: Runtime check in check_production_security() prevents use in production
_INSECURE_DEFAULT_PASSWORD = "tomato_dev_password"  # nosec B105

# Minimum length for AUTH_SECRET in production (256 bits = 32 bytes)
_MIN_AUTH_SECRET_LENGTH = 32


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Database
    database_host: str = "localhost"
    database_port: int = 5432
    database_name: str = "tomato_ai"
    database_user: str = "tomato_user"
    database_password: str = _INSECURE_DEFAULT_PASSWORD

    # Connection pool. A metered call holds one connection (the ledger's)
    # for up to provider_timeout_seconds, so pool_size + max_overflow bounds
    # the number of concurrent generations.
    database_pool_size: int = 10
    database_max_overflow: int = 10
    database_pool_timeout_seconds: float = 30.0

    # CORS (Security)
    # Never set to ["*"]: credentials are allowed on CORS requests.
    allowed_origins: list[str] = ["http://localhost:8080"]

    # Application
    environment: str = "development"
    log_level: str = "INFO"

    # Authentication (bearer JWT)
    auth_secret: SecretStr = SecretStr("")
    auth_issuer: str = "tomato-ai"
    auth_audience: str = "tomato-ai"
    auth_token_ttl_hours: int = 24 * 7

    # Generation provider
    generation_provider: Literal["gemini", "mock"] = "gemini"
    google_api_key: SecretStr = SecretStr("")
    provider_timeout_seconds: float = 120.0

    # Ledger strategy for metered calls:
    # - lock: row lock held across the provider call, rollback on failure
    # - compensate: debit committed first, compensating refund on failure
    ledger_strategy: Literal["lock", "compensate"] = "lock"

    # Payments (Stripe)
    stripe_secret_key: SecretStr = SecretStr("")
    stripe_publishable_key: str = ""
    stripe_webhook_secret: SecretStr = SecretStr("")
    stripe_currency: str = "usd"

    # Frontend URL (Stripe success / cancel redirects)
    frontend_url: str = "http://localhost:8080"

    # Maintenance mode allow-list. Paths reachable by anyone while the
    # configuration document has maintenance.enabled = true.
    maintenance_exempt_paths: list[str] = [
        "/api/v1/settings",
        "/api/v1/auth/login",
        "/api/v1/billing/webhook",
        "/api/v1/health",
    ]

    # Rate Limiting (Security)
    # Format: "count/period" (e.g., "10/minute", "100/hour")
    rate_limit_generation: str = "20/minute"
    rate_limit_auth: str = "10/minute"
    rate_limit_enabled: bool = True  # Disable for testing

    @property
    def database_url(self) -> str:
        """Async database URL for SQLAlchemy."""
        return (
            f"postgresql+asyncpg://{self.database_user}:{self.database_password}"
            f"@{self.database_host}:{self.database_port}/{self.database_name}"
        )

    @property
    def payments_enabled(self) -> bool:
        """True when a Stripe secret key is configured."""
        return bool(self.stripe_secret_key.get_secret_value())

    @model_validator(mode="after")
    def check_production_security(self) -> "Settings":
        """Validate configuration invariants.

        Checks:
        - Provider timeout must be positive (all environments)
        - Token TTL must be positive (all environments)
        - Pool size >= 1 and overflow >= 0 (all environments)
        - CORS must not use wildcard origin (incompatible with credentials)
        - Database password must not be the default in production
        - AUTH_SECRET must be set and >= 32 chars in production
        """
        if self.provider_timeout_seconds <= 0:
            msg = (
                "PROVIDER_TIMEOUT_SECONDS must be positive. "
                f"Got: {self.provider_timeout_seconds}"
            )
            raise ValueError(msg)
        if self.auth_token_ttl_hours <= 0:
            msg = (
                "AUTH_TOKEN_TTL_HOURS must be positive. "
                f"Got: {self.auth_token_ttl_hours}"
            )
            raise ValueError(msg)

        if self.database_pool_size < 1 or self.database_max_overflow < 0:
            msg = (
                "DATABASE_POOL_SIZE must be at least 1 and "
                "DATABASE_MAX_OVERFLOW must not be negative. "
                f"Got: {self.database_pool_size}, {self.database_max_overflow}"
            )
            raise ValueError(msg)

        if "*" in self.allowed_origins:
            msg = (
                "ALLOWED_ORIGINS must not contain '*' (wildcard). "
                "Credentialed CORS requests are incompatible with wildcard origins."
            )
            raise ValueError(msg)

        if self.environment == "production":
            if self.database_password == _INSECURE_DEFAULT_PASSWORD:
                msg = (
                    "Cannot use default database password in production. "
                    "Set DATABASE_PASSWORD environment variable to a secure value."
                )
                raise ValueError(msg)

            secret_value = self.auth_secret.get_secret_value()
            if not secret_value:
                msg = (
                    "AUTH_SECRET must be set in production. "
                    'Generate with: python -c "import secrets; '
                    'print(secrets.token_hex(32))"'
                )
                raise ValueError(msg)
            if len(secret_value) < _MIN_AUTH_SECRET_LENGTH:
                msg = (
                    f"AUTH_SECRET must be at least {_MIN_AUTH_SECRET_LENGTH} "
                    "characters for adequate security."
                )
                raise ValueError(msg)

        return self


settings = Settings()
