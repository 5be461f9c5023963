"""Cost resolver: operation request to integer point price.

Prices come from the ``costs`` section of the effective configuration
document. The resolver is a pure function of (request, document) so the
same inputs always yield the same price.

Pricing rules:
- Fixed-price kinds read one flat integer key. For image kinds the
  remove-watermark modifier selects the ``*_noWatermark`` key instead.
- Speech synthesis is usage-scaled: one unit per started block of 100
  characters, ``ceil(len(text) / 100) * costs.textToSpeech``. Integer
  ceiling division keeps an empty text at exactly 0 blocks.
"""

from collections.abc import Mapping
from enum import StrEnum
from typing import Any

from app.core.errors import InvalidOperationError, NoPricingConfigError
from app.schemas.generation import GenerationRequest

TTS_BLOCK_CHARS = 100


class OperationKind(StrEnum):
    """Metered operation kinds accepted by the generation gateway."""

    IMAGE_GENERATE = "image_generate"
    IMAGE_EDIT = "image_edit"
    TEXT_TO_SPEECH = "text_to_speech"
    TEXT_REWRITE = "text_rewrite"
    TWEET_GENERATE = "tweet_generate"


# kind -> (base key, no-watermark key or None)
_FIXED_PRICE_KEYS: dict[OperationKind, tuple[str, str | None]] = {
    OperationKind.IMAGE_GENERATE: ("imageCreate", "imageCreate_noWatermark"),
    OperationKind.IMAGE_EDIT: ("imageEdit", "imageEdit_noWatermark"),
    OperationKind.TEXT_REWRITE: ("contentRewrite", None),
    OperationKind.TWEET_GENERATE: ("tweetGenerator", None),
}

_TTS_PRICE_KEY = "textToSpeech"

# Parameters that must be non-empty before the ledger is touched.
_REQUIRED_PARAMS: dict[OperationKind, tuple[str, ...]] = {
    OperationKind.IMAGE_GENERATE: ("prompt",),
    OperationKind.IMAGE_EDIT: ("prompt", "image"),
    OperationKind.TEXT_TO_SPEECH: (),
    OperationKind.TEXT_REWRITE: ("text", "style"),
    OperationKind.TWEET_GENERATE: ("idea",),
}


def parse_kind(kind: str) -> OperationKind:
    """Map a request's kind string to an OperationKind.

    Raises:
        InvalidOperationError: If the kind is not supported.
    """
    try:
        return OperationKind(kind)
    except ValueError:
        raise InvalidOperationError(f"Invalid AI operation type: '{kind}'") from None


def validate_parameters(request: GenerationRequest) -> OperationKind:
    """Check the kind and its required parameters.

    Speech synthesis has no required parameter: an empty text is a valid
    request priced at 0.

    Args:
        request: Incoming generation request.

    Returns:
        The parsed operation kind.

    Raises:
        InvalidOperationError: Unknown kind or a missing parameter.
    """
    kind = parse_kind(request.kind)
    missing = [name for name in _REQUIRED_PARAMS[kind] if not getattr(request, name)]
    if missing:
        raise InvalidOperationError(
            f"Missing required parameter(s) for {kind.value}: {', '.join(missing)}"
        )
    return kind


def price_for_key(costs: Mapping[str, Any], key: str) -> int:
    """Read a non-negative integer amount from the costs section.

    Integral floats (e.g. 5.0 after a JSON round trip) are accepted.

    Raises:
        NoPricingConfigError: Missing, boolean, negative or non-integral value.
    """
    value = costs.get(key)
    # bool is an int subclass; a True price is a configuration mistake.
    if isinstance(value, bool) or value is None:
        raise NoPricingConfigError(key)
    if isinstance(value, float):
        if not value.is_integer():
            raise NoPricingConfigError(key)
        value = int(value)
    if not isinstance(value, int) or value < 0:
        raise NoPricingConfigError(key)
    return value


def speech_blocks(text: str | None) -> int:
    """Number of billable 100-character blocks, rounded up."""
    length = len(text or "")
    return (length + TTS_BLOCK_CHARS - 1) // TTS_BLOCK_CHARS


def resolve_cost(request: GenerationRequest, document: Mapping[str, Any]) -> int:
    """Resolve the point price of an operation request.

    Args:
        request: Operation request (kind, modifier, parameters).
        document: Effective configuration document.

    Returns:
        Non-negative integer price in points.

    Raises:
        InvalidOperationError: If the kind is not supported.
        NoPricingConfigError: If the price key holds a non-integer or
            negative value.
    """
    kind = parse_kind(request.kind)
    costs = document.get("costs") or {}

    if kind is OperationKind.TEXT_TO_SPEECH:
        unit = price_for_key(costs, _TTS_PRICE_KEY)
        return speech_blocks(request.text) * unit

    base_key, no_watermark_key = _FIXED_PRICE_KEYS[kind]
    key = no_watermark_key if request.remove_watermark and no_watermark_key else base_key
    return price_for_key(costs, key)
