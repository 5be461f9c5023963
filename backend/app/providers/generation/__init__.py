"""Generation provider module.

Provider interface plus the Gemini and mock adapters.
"""

from app.providers.generation.base import GenerationProvider, ProviderOutput
from app.providers.generation.gemini_adapter import GeminiGenerationAdapter
from app.providers.generation.mock_adapter import MockGenerationProvider

__all__ = [
    "GenerationProvider",
    "ProviderOutput",
    "GeminiGenerationAdapter",
    "MockGenerationProvider",
]
