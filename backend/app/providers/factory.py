"""Provider factory functions.

Singleton pattern for the generation provider instance.
"""

from app.providers.config import ProviderConfig
from app.providers.generation.base import GenerationProvider
from app.providers.generation.gemini_adapter import GeminiGenerationAdapter
from app.providers.generation.mock_adapter import MockGenerationProvider

_generation_provider: GenerationProvider | None = None


def get_generation_provider(
    config: ProviderConfig | None = None,
) -> GenerationProvider:
    """Get or create the generation provider singleton.

    One adapter (and its HTTP client) is shared by the whole process.

    Args:
        config: Optional provider configuration. If None and no provider
            exists, loads from environment.

    Returns:
        GenerationProvider instance.

    Raises:
        ValueError: If the configured provider is unknown.
    """
    global _generation_provider

    if _generation_provider is None:
        if config is None:
            config = ProviderConfig.from_env()

        if config.generation_provider == "gemini":
            _generation_provider = GeminiGenerationAdapter(config)
        elif config.generation_provider == "mock":
            _generation_provider = MockGenerationProvider()
        else:
            raise ValueError(
                f"Unknown generation provider: {config.generation_provider}"
            )

    return _generation_provider


def reset_providers() -> None:
    """Reset provider singletons.

    Used in tests to ensure isolation between test cases.
    """
    global _generation_provider
    _generation_provider = None
