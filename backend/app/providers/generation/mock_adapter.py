"""Mock generation provider for testing.

MockGenerationProvider enables unit testing without hitting real APIs.
"""

import asyncio
from typing import Any

from app.providers.generation.base import GenerationProvider, ProviderOutput

MOCK_PNG = b"\x89PNG\r\n\x1a\nmock-image"
MOCK_AUDIO = b"RIFFmock-audio"


class MockGenerationProvider(GenerationProvider):
    """Mock provider for testing.

    Returns canned artifacts, and can simulate blocks, empty outputs and
    slow calls.

    Attributes:
        calls: Record of all method invocations for test assertions.
        error: Exception raised by every call when set.
        delay_seconds: Artificial latency before each call returns.
    """

    @property
    def provider_name(self) -> str:
        """Return 'mock' for testing."""
        return "mock"

    def __init__(
        self,
        error: Exception | None = None,
        delay_seconds: float = 0.0,
    ) -> None:
        # Don't call super().__init__() - we don't need a config for mock
        self.error = error
        self.delay_seconds = delay_seconds
        self.calls: list[dict[str, Any]] = []

    async def _record(self, method: str, **kwargs: Any) -> None:
        self.calls.append({"method": method, **kwargs})
        if self.delay_seconds:
            await asyncio.sleep(self.delay_seconds)
        if self.error is not None:
            raise self.error

    async def generate_image(
        self,
        prompt: str,
        *,
        model: str | None = None,
        aspect_ratio: str | None = None,
    ) -> ProviderOutput:
        """Return a fixed PNG payload."""
        await self._record(
            "generate_image", prompt=prompt, model=model, aspect_ratio=aspect_ratio
        )
        return ProviderOutput.binary(MOCK_PNG, "image/png")

    async def edit_image(
        self,
        prompt: str,
        *,
        image: bytes,
        mime_type: str,
    ) -> ProviderOutput:
        """Echo the source image back."""
        await self._record("edit_image", prompt=prompt, mime_type=mime_type)
        return ProviderOutput.binary(image, mime_type)

    async def synthesize_speech(
        self,
        text: str,
        *,
        voice: str | None = None,
    ) -> ProviderOutput:
        """Return a fixed audio payload."""
        await self._record("synthesize_speech", text=text, voice=voice)
        return ProviderOutput.binary(MOCK_AUDIO, "audio/wav")

    async def generate_text(self, prompt: str) -> ProviderOutput:
        """Return a deterministic text derived from the prompt."""
        await self._record("generate_text", prompt=prompt)
        return ProviderOutput.of_text(f"Mock text ({len(prompt)} chars)")
