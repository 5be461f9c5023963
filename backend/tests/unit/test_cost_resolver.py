"""Tests for the cost resolver.

Covers the pricing table, speech ceiling division, the no-watermark
modifier and invalid price values.
"""

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from app.core.errors import InvalidOperationError, NoPricingConfigError
from app.schemas.generation import GenerationRequest
from app.services.config_document import default_document
from app.services.cost_resolver import (
    OperationKind,
    parse_kind,
    price_for_key,
    resolve_cost,
    speech_blocks,
    validate_parameters,
)


def _doc(**costs) -> dict:
    doc = default_document()
    doc["costs"].update(costs)
    return doc


class TestFixedPrices:
    """Tests for flat-priced operation kinds."""

    @pytest.mark.parametrize(
        ("kind", "expected"),
        [
            ("image_generate", 5),
            ("image_edit", 2),
            ("text_rewrite", 1),
            ("tweet_generate", 1),
        ],
    )
    def test_default_prices(self, kind, expected):
        """Each kind reads its own cost key."""
        request = GenerationRequest(kind=kind)
        assert resolve_cost(request, default_document()) == expected

    def test_admin_price_change_is_used(self):
        """A changed cost key changes the resolved price."""
        request = GenerationRequest(kind="image_edit")
        assert resolve_cost(request, _doc(imageEdit=7)) == 7

    def test_zero_price_is_valid(self):
        """A free operation resolves to 0."""
        request = GenerationRequest(kind="tweet_generate")
        assert resolve_cost(request, _doc(tweetGenerator=0)) == 0


class TestWatermarkModifier:
    """Tests for the remove-watermark price tier."""

    def test_image_generate_no_watermark(self):
        """remove_watermark selects imageCreate_noWatermark."""
        request = GenerationRequest(kind="image_generate", remove_watermark=True)
        assert resolve_cost(request, default_document()) == 15

    def test_image_edit_no_watermark(self):
        """remove_watermark selects imageEdit_noWatermark."""
        request = GenerationRequest(kind="image_edit", remove_watermark=True)
        assert resolve_cost(request, default_document()) == 8

    def test_modifier_ignored_for_text_kinds(self):
        """Text kinds have no watermark tier."""
        request = GenerationRequest(kind="text_rewrite", remove_watermark=True)
        assert resolve_cost(request, default_document()) == 1


class TestSpeechPricing:
    """Tests for usage-scaled speech synthesis pricing."""

    @pytest.mark.parametrize(
        ("length", "expected"),
        [(0, 0), (1, 1), (99, 1), (100, 1), (101, 2), (200, 2), (250, 3)],
    )
    def test_blocks_round_up(self, length, expected):
        """Each started 100-character block is billed once."""
        request = GenerationRequest(kind="text_to_speech", text="a" * length)
        assert resolve_cost(request, default_document()) == expected

    def test_unit_price_multiplies_blocks(self):
        """Block count is multiplied by costs.textToSpeech."""
        request = GenerationRequest(kind="text_to_speech", text="a" * 101)
        assert resolve_cost(request, _doc(textToSpeech=3)) == 6

    def test_missing_text_is_zero_blocks(self):
        """No text means nothing to bill."""
        assert speech_blocks(None) == 0

    @given(st.text(max_size=1000))
    @settings(max_examples=200)
    def test_blocks_cover_text_exactly(self, text):
        """Blocks are the smallest count whose capacity holds the text."""
        blocks = speech_blocks(text)
        assert blocks * 100 >= len(text)
        assert max(blocks - 1, 0) * 100 < len(text) or blocks == 0


class TestInvalidPrices:
    """Tests for malformed cost values."""

    @pytest.mark.parametrize("value", [-1, 2.5, "5", None, True, [5], {"a": 1}])
    def test_invalid_value_raises(self, value):
        """Non-integer or negative prices are a configuration error."""
        with pytest.raises(NoPricingConfigError) as exc_info:
            price_for_key({"imageCreate": value}, "imageCreate")
        assert "imageCreate" in exc_info.value.message

    def test_integral_float_accepted(self):
        """5.0 is read as 5."""
        assert price_for_key({"imageCreate": 5.0}, "imageCreate") == 5

    def test_invalid_tts_unit_raises(self):
        """A bad textToSpeech unit is rejected even for empty text."""
        request = GenerationRequest(kind="text_to_speech", text="")
        with pytest.raises(NoPricingConfigError):
            resolve_cost(request, _doc(textToSpeech=-2))


class TestKindValidation:
    """Tests for parse_kind() and validate_parameters()."""

    def test_unknown_kind_raises(self):
        """Unknown kinds are InvalidOperationError."""
        with pytest.raises(InvalidOperationError) as exc_info:
            parse_kind("video_generate")
        assert "video_generate" in exc_info.value.message

    def test_resolve_cost_rejects_unknown_kind(self):
        """resolve_cost() validates the kind too."""
        with pytest.raises(InvalidOperationError):
            resolve_cost(GenerationRequest(kind="nope"), default_document())

    def test_valid_request_returns_kind(self):
        """A complete request parses to its OperationKind."""
        request = GenerationRequest(kind="image_generate", prompt="a tomato")
        assert validate_parameters(request) is OperationKind.IMAGE_GENERATE

    @pytest.mark.parametrize(
        ("payload", "missing"),
        [
            ({"kind": "image_generate"}, "prompt"),
            ({"kind": "image_edit", "prompt": "x"}, "image"),
            ({"kind": "text_rewrite", "text": "x"}, "style"),
            ({"kind": "tweet_generate"}, "idea"),
        ],
    )
    def test_missing_parameter_raises(self, payload, missing):
        """Each kind's required parameters are enforced."""
        with pytest.raises(InvalidOperationError) as exc_info:
            validate_parameters(GenerationRequest(**payload))
        assert missing in exc_info.value.message

    def test_speech_without_text_is_valid(self):
        """Empty speech requests are allowed (priced at 0)."""
        request = GenerationRequest(kind="text_to_speech")
        assert validate_parameters(request) is OperationKind.TEXT_TO_SPEECH
