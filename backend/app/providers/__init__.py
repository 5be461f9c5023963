"""Provider abstraction layer.

Exports:
    Error classes for provider error handling
    ProviderConfig for configuration
    Factory functions for provider instances
"""

from app.providers.config import ProviderConfig
from app.providers.errors import (
    AuthenticationError,
    ContentFilterError,
    NoOutputError,
    ProviderError,
    RateLimitError,
    TransientError,
)
from app.providers.factory import get_generation_provider, reset_providers

__all__ = [
    # Config
    "ProviderConfig",
    # Errors
    "ProviderError",
    "RateLimitError",
    "AuthenticationError",
    "ContentFilterError",
    "NoOutputError",
    "TransientError",
    # Factory
    "get_generation_provider",
    "reset_providers",
]
