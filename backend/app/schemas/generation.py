"""Generation API request/response schemas.

``kind`` is accepted as a free string so unknown operation kinds reach the
cost resolver and are rejected as INVALID_OPERATION (not a generic
validation error). Per-kind required parameters are checked by the gateway
before any ledger activity.
"""

from pydantic import BaseModel, ConfigDict, Field

# Inline image payloads arrive base64-encoded in the JSON body.
# ~10 MB request limit, matching the body size the frontend sends.
_MAX_IMAGE_B64_LEN = 10 * 1024 * 1024
_MAX_TEXT_LEN = 20_000
_MAX_PROMPT_LEN = 4_000


class GenerationRequest(BaseModel):
    """Request body for POST /api/v1/ai/generate.

    Attributes:
        kind: image_generate, image_edit, text_to_speech, text_rewrite,
            tweet_generate.
        remove_watermark: Selects the higher-priced no-watermark tier for
            image kinds.
        prompt: Image prompt or edit instruction.
        aspect_ratio: Image aspect ratio (e.g. "1:1", "16:9").
        model: Optional image model override.
        image: Base64 source image for image_edit.
        image_mime_type: MIME type of ``image``.
        text: Input text for speech synthesis and rewriting.
        voice: Prebuilt voice name for speech synthesis.
        style: Target style for rewriting.
        idea: Topic for tweet generation.
    """

    model_config = ConfigDict(extra="forbid")

    kind: str = Field(min_length=1, max_length=50)
    remove_watermark: bool = False

    prompt: str | None = Field(None, max_length=_MAX_PROMPT_LEN)
    aspect_ratio: str | None = Field(None, max_length=10)
    model: str | None = Field(None, max_length=100)
    image: str | None = Field(None, max_length=_MAX_IMAGE_B64_LEN)
    image_mime_type: str | None = Field(None, max_length=50)
    text: str | None = Field(None, max_length=_MAX_TEXT_LEN)
    voice: str | None = Field(None, max_length=50)
    style: str | None = Field(None, max_length=100)
    idea: str | None = Field(None, max_length=_MAX_PROMPT_LEN)


class Artifact(BaseModel):
    """Binary generation output.

    Attributes:
        mime_type: MIME type reported by the provider (image/png, audio/...).
        data: Base64-encoded payload.
    """

    mime_type: str
    data: str


class GenerationOutput(BaseModel):
    """Exactly one of ``artifact`` or ``text`` is set."""

    artifact: Artifact | None = None
    text: str | None = None


class GenerationResponse(BaseModel):
    """Response for a successful metered call.

    Attributes:
        result: The normalized provider output.
        balance: Caller's balance after the charge.
    """

    result: GenerationOutput
    balance: int
