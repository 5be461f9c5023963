"""Google Gemini generation adapter.

Uses the unified google-genai SDK for all four operation families:
- images: Imagen via ``models.generate_images``
- image edits: Gemini image model with ``response_modalities=["IMAGE"]``
- speech: Gemini TTS model with ``response_modalities=["AUDIO"]``
- text: plain ``generate_content``

Safety blocks are reported by the SDK in three ways (prompt feedback,
candidate finish reason, filtered-image reasons) and sometimes as an API
error whose message mentions safety. All of them become ContentFilterError.
"""

import time
from typing import TYPE_CHECKING, Any

import structlog
from google import genai
from google.genai import types

from app.providers.errors import (
    AuthenticationError,
    ContentFilterError,
    NoOutputError,
    ProviderError,
    RateLimitError,
    TransientError,
)
from app.providers.generation.base import GenerationProvider, ProviderOutput

if TYPE_CHECKING:
    from app.providers.config import ProviderConfig

logger = structlog.get_logger()

_BLOCKED_FINISH_REASONS = frozenset(
    {
        "SAFETY",
        "PROHIBITED_CONTENT",
        "BLOCKLIST",
        "SPII",
        "IMAGE_SAFETY",
        "IMAGE_PROHIBITED_CONTENT",
    }
)


def _classify_gemini_error(error: Exception) -> ProviderError:
    """Map Gemini exceptions to internal error taxonomy."""
    error_msg = str(error).lower()
    if "safety" in error_msg or "blocked" in error_msg:
        return ContentFilterError(str(error))
    if "resource" in error_msg and "exhausted" in error_msg:
        return RateLimitError(str(error))
    if "permission" in error_msg or "unauthenticated" in error_msg:
        return AuthenticationError(str(error))
    if "unavailable" in error_msg or "503" in error_msg or "deadline" in error_msg:
        return TransientError(str(error))
    return ProviderError(str(error))


def _enum_name(value: Any) -> str | None:
    if value is None:
        return None
    return getattr(value, "name", None) or str(value)


def _check_content_blocked(response: Any) -> None:
    """Raise ContentFilterError if a generate_content response was blocked."""
    feedback = getattr(response, "prompt_feedback", None)
    if feedback is not None and feedback.block_reason:
        raise ContentFilterError(
            f"Prompt blocked: {_enum_name(feedback.block_reason)}"
        )
    for candidate in response.candidates or []:
        reason = _enum_name(candidate.finish_reason)
        if reason in _BLOCKED_FINISH_REASONS:
            raise ContentFilterError(f"Output blocked: {reason}")


def _extract_inline_data(response: Any) -> ProviderOutput:
    """Return the first inline-data part of the first candidate."""
    _check_content_blocked(response)
    if not response.candidates:
        raise NoOutputError("No candidates returned")
    content = response.candidates[0].content
    for part in (content.parts if content else None) or []:
        inline = part.inline_data
        if inline is not None and inline.data:
            return ProviderOutput.binary(
                inline.data, inline.mime_type or "application/octet-stream"
            )
    raise NoOutputError("No inline data in response")


class GeminiGenerationAdapter(GenerationProvider):
    """Google Gemini adapter using unified google-genai SDK."""

    @property
    def provider_name(self) -> str:
        """Return 'gemini' for logging."""
        return "gemini"

    def __init__(self, config: "ProviderConfig") -> None:
        """Initialize Gemini adapter.

        Args:
            config: Provider configuration with Google API key.
        """
        super().__init__(config)
        self.client = genai.Client(api_key=config.google_api_key)

    async def _call(self, operation: str, model: str, coro_factory: Any) -> Any:
        """Run one SDK call with timing, logging and error classification."""
        logger.info(
            "generation_request_start",
            provider="gemini",
            operation=operation,
            model=model,
        )
        start_time = time.monotonic()
        try:
            response = await coro_factory()
        except Exception as e:
            latency_ms = (time.monotonic() - start_time) * 1000
            logger.error(
                "generation_request_failed",
                provider="gemini",
                operation=operation,
                model=model,
                error=str(e),
                error_type=type(e).__name__,
                latency_ms=latency_ms,
            )
            raise _classify_gemini_error(e) from e

        logger.info(
            "generation_request_complete",
            provider="gemini",
            operation=operation,
            model=model,
            latency_ms=(time.monotonic() - start_time) * 1000,
        )
        return response

    async def generate_image(
        self,
        prompt: str,
        *,
        model: str | None = None,
        aspect_ratio: str | None = None,
    ) -> ProviderOutput:
        """Generate one PNG image with Imagen."""
        model_name = model or self.config.image_model
        if model_name not in self.config.allowed_image_models:
            raise ProviderError(f"Image model not allowed: {model_name}")

        config = types.GenerateImagesConfig(
            number_of_images=1,
            aspect_ratio=aspect_ratio,
            output_mime_type="image/png",
            include_rai_reason=True,
        )
        response = await self._call(
            "image_generate",
            model_name,
            lambda: self.client.aio.models.generate_images(
                model=model_name, prompt=prompt, config=config
            ),
        )

        images = response.generated_images or []
        for generated in images:
            if generated.image is not None and generated.image.image_bytes:
                return ProviderOutput.binary(
                    generated.image.image_bytes,
                    generated.image.mime_type or "image/png",
                )
        if any(generated.rai_filtered_reason for generated in images):
            raise ContentFilterError("Image filtered by safety settings")
        raise NoOutputError("No image returned")

    async def edit_image(
        self,
        prompt: str,
        *,
        image: bytes,
        mime_type: str,
    ) -> ProviderOutput:
        """Edit an image with the Gemini image model."""
        model_name = self.config.image_edit_model
        contents = [
            types.Part.from_bytes(data=image, mime_type=mime_type),
            types.Part.from_text(text=prompt),
        ]
        config = types.GenerateContentConfig(response_modalities=["IMAGE", "TEXT"])
        response = await self._call(
            "image_edit",
            model_name,
            lambda: self.client.aio.models.generate_content(
                model=model_name, contents=contents, config=config
            ),
        )
        return _extract_inline_data(response)

    async def synthesize_speech(
        self,
        text: str,
        *,
        voice: str | None = None,
    ) -> ProviderOutput:
        """Synthesize speech with a prebuilt voice."""
        model_name = self.config.tts_model
        config = types.GenerateContentConfig(
            response_modalities=["AUDIO"],
            speech_config=types.SpeechConfig(
                voice_config=types.VoiceConfig(
                    prebuilt_voice_config=types.PrebuiltVoiceConfig(
                        voice_name=voice or self.config.default_voice
                    )
                )
            ),
        )
        response = await self._call(
            "text_to_speech",
            model_name,
            lambda: self.client.aio.models.generate_content(
                model=model_name, contents=text, config=config
            ),
        )
        return _extract_inline_data(response)

    async def generate_text(self, prompt: str) -> ProviderOutput:
        """Generate text with the default text model."""
        model_name = self.config.text_model
        response = await self._call(
            "text_generate",
            model_name,
            lambda: self.client.aio.models.generate_content(
                model=model_name, contents=prompt
            ),
        )
        _check_content_blocked(response)
        text = response.text
        if not text or not text.strip():
            raise NoOutputError("Empty text returned")
        return ProviderOutput.of_text(text)
