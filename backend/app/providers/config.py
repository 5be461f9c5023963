"""Provider configuration management.

Centralized configuration for the generation provider.
"""

import os
from dataclasses import dataclass, field

DEFAULT_IMAGE_MODEL = "imagen-4.0-generate-001"
DEFAULT_IMAGE_EDIT_MODEL = "gemini-2.5-flash-image"
DEFAULT_TTS_MODEL = "gemini-2.5-flash-preview-tts"
DEFAULT_TEXT_MODEL = "gemini-2.5-flash"
DEFAULT_VOICE = "Kore"


@dataclass
class ProviderConfig:
    """Centralized provider configuration.

    Attributes:
        generation_provider: Which provider to use ("gemini", "mock").
        google_api_key: Google AI API key (loaded from environment).
        image_model: Default model for image generation.
        image_edit_model: Model for instruction-based image edits.
        tts_model: Model for speech synthesis.
        text_model: Model for rewrites and tweet generation.
        default_voice: Prebuilt voice used when the request names none.
        allowed_image_models: Image models a request may select.
    """

    generation_provider: str = "gemini"
    google_api_key: str | None = None

    image_model: str = DEFAULT_IMAGE_MODEL
    image_edit_model: str = DEFAULT_IMAGE_EDIT_MODEL
    tts_model: str = DEFAULT_TTS_MODEL
    text_model: str = DEFAULT_TEXT_MODEL
    default_voice: str = DEFAULT_VOICE
    allowed_image_models: frozenset[str] = field(
        default_factory=lambda: frozenset(
            {DEFAULT_IMAGE_MODEL, "imagen-4.0-fast-generate-001"}
        )
    )

    @classmethod
    def from_env(cls) -> "ProviderConfig":
        """Load configuration from environment variables.

        Returns:
            ProviderConfig instance with values from environment.
        """
        return cls(
            generation_provider=os.getenv("GENERATION_PROVIDER", "gemini"),
            google_api_key=os.getenv("GOOGLE_API_KEY") or None,
            image_model=os.getenv("GEMINI_IMAGE_MODEL", DEFAULT_IMAGE_MODEL),
            image_edit_model=os.getenv(
                "GEMINI_IMAGE_EDIT_MODEL", DEFAULT_IMAGE_EDIT_MODEL
            ),
            tts_model=os.getenv("GEMINI_TTS_MODEL", DEFAULT_TTS_MODEL),
            text_model=os.getenv("GEMINI_TEXT_MODEL", DEFAULT_TEXT_MODEL),
            default_voice=os.getenv("GEMINI_DEFAULT_VOICE", DEFAULT_VOICE),
        )
