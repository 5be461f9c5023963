"""Abstract base class and output type for generation providers.

The generation gateway treats a provider as a black box that returns an
output, raises ContentFilterError for a safety block, raises NoOutputError
for an empty success, or raises another ProviderError.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from app.providers.config import ProviderConfig


@dataclass(frozen=True)
class ProviderOutput:
    """Uniform provider result.

    Exactly one of ``data`` (binary payload with its MIME type) or ``text``
    is set.

    Attributes:
        mime_type: MIME type of ``data`` (image/png, audio/...).
        data: Raw bytes of an image or audio payload.
        text: Plain text output.
    """

    mime_type: str | None = None
    data: bytes | None = None
    text: str | None = None

    @classmethod
    def binary(cls, data: bytes, mime_type: str) -> "ProviderOutput":
        """Build a binary output."""
        return cls(mime_type=mime_type, data=data)

    @classmethod
    def of_text(cls, text: str) -> "ProviderOutput":
        """Build a text output."""
        return cls(text=text)

    @property
    def is_binary(self) -> bool:
        return self.data is not None


class GenerationProvider(ABC):
    """Abstract base class for media/text generation providers.

    Implemented by GeminiGenerationAdapter and MockGenerationProvider.
    """

    def __init__(self, config: "ProviderConfig") -> None:
        """Initialize with provider configuration.

        Args:
            config: Provider configuration (keys, model names).
        """
        self.config = config

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Short provider identifier used in logs."""
        ...

    @abstractmethod
    async def generate_image(
        self,
        prompt: str,
        *,
        model: str | None = None,
        aspect_ratio: str | None = None,
    ) -> ProviderOutput:
        """Generate one image from a text prompt.

        Raises:
            ContentFilterError: Prompt or output blocked by safety filters.
            NoOutputError: No image returned.
            ProviderError: Any other provider failure.
        """
        ...

    @abstractmethod
    async def edit_image(
        self,
        prompt: str,
        *,
        image: bytes,
        mime_type: str,
    ) -> ProviderOutput:
        """Apply an instruction-based edit to an image."""
        ...

    @abstractmethod
    async def synthesize_speech(
        self,
        text: str,
        *,
        voice: str | None = None,
    ) -> ProviderOutput:
        """Convert text to spoken audio."""
        ...

    @abstractmethod
    async def generate_text(self, prompt: str) -> ProviderOutput:
        """Generate plain text for a prompt."""
        ...
