"""Generation gateway: metered entry point for every AI operation.

Flow per request:
    validate kind + parameters -> read configuration -> resolve price
    -> LedgerService.charge_and_run(provider call) -> map outcome

Provider failures are classified by the adapter (ContentFilterError,
NoOutputError, other ProviderError) and mapped here onto the API error
taxonomy. Anything unexpected, including a timeout, is treated as a
provider outage so the charge is always rolled back or refunded. Failed
calls are never retried automatically.
"""

import base64
import binascii
import logging
from typing import Protocol

from app.core.errors import (
    APIError,
    ContentBlockedError,
    InvalidOperationError,
    NoOutputProducedError,
    ProviderUnavailableError,
)
from app.prompts.text_generation import build_rewrite_prompt, build_tweets_prompt
from app.providers.errors import ContentFilterError, NoOutputError
from app.providers.generation.base import GenerationProvider, ProviderOutput
from app.schemas.generation import (
    Artifact,
    GenerationOutput,
    GenerationRequest,
    GenerationResponse,
)
from app.services.config_store import ConfigStore
from app.services.cost_resolver import OperationKind, resolve_cost, validate_parameters
from app.services.ledger_service import LedgerService

logger = logging.getLogger(__name__)

_DEFAULT_EDIT_MIME_TYPE = "image/png"


class Caller(Protocol):
    """Authenticated identity snapshot used by the gateway."""

    id: int
    balance: int


def _decode_image(encoded: str) -> bytes:
    # Accept data URLs as sent by browsers: "data:image/png;base64,...."
    if encoded.startswith("data:") and "," in encoded:
        encoded = encoded.split(",", 1)[1]
    try:
        return base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError):
        raise InvalidOperationError("Source image is not valid base64") from None


def normalize_output(output: ProviderOutput) -> GenerationOutput:
    """Wrap provider output in the uniform result envelope."""
    if output.data is not None:
        return GenerationOutput(
            artifact=Artifact(
                mime_type=output.mime_type or "application/octet-stream",
                data=base64.b64encode(output.data).decode("ascii"),
            )
        )
    return GenerationOutput(text=output.text)


def map_provider_error(error: Exception, balance: int) -> APIError:
    """Map a failed call's exception to the API taxonomy.

    Args:
        error: Exception raised by the provider call (or its timeout).
        balance: Caller's unchanged balance.

    Returns:
        The APIError to raise.
    """
    if isinstance(error, ContentFilterError):
        logger.info("Generation blocked by safety filter: %s", error)
        return ContentBlockedError(balance=balance)
    if isinstance(error, NoOutputError):
        logger.warning("Provider returned no usable output: %s", error)
        return NoOutputProducedError(balance=balance)
    logger.error(
        "Generation failed (%s); charge reverted",
        type(error).__name__,
        exc_info=error,
    )
    return ProviderUnavailableError(balance=balance)


class GenerationGateway:
    """Orchestrates pricing, charging and the provider call.

    Args:
        config_store: Source of the effective configuration document.
        ledger: Charge-and-run implementation.
        provider: Generation provider adapter.
    """

    def __init__(
        self,
        config_store: ConfigStore,
        ledger: LedgerService,
        provider: GenerationProvider,
    ) -> None:
        self._config_store = config_store
        self._ledger = ledger
        self._provider = provider

    async def generate(
        self, caller: Caller, request: GenerationRequest
    ) -> GenerationResponse:
        """Run one metered operation for the caller.

        Args:
            caller: Authenticated user snapshot (id + balance).
            request: Operation request.

        Returns:
            Normalized result plus the post-charge balance.

        Raises:
            InvalidOperationError: Unknown kind or unusable parameters.
            NoPricingConfigError: Price key holds an invalid value.
            InsufficientBalanceError: Balance below the resolved price.
            ContentBlockedError: Provider safety block (no charge).
            NoOutputProducedError: Empty provider result (no charge).
            ProviderUnavailableError: Any other failure (no charge).
        """
        try:
            kind = validate_parameters(request)
            image = _decode_image(request.image) if request.image else None
        except InvalidOperationError as exc:
            exc.details = [{"balance": caller.balance}]
            raise

        document = await self._config_store.get()
        price = resolve_cost(request, document)

        try:
            outcome = await self._ledger.charge_and_run(
                caller.id,
                price,
                lambda: self._invoke(kind, request, image),
                description=f"{kind.value} ({price} points)",
            )
        except APIError:
            raise
        except Exception as exc:
            # Commit or refund failures inside the ledger itself.
            logger.exception("Ledger failed while charging for %s", kind.value)
            raise ProviderUnavailableError(balance=caller.balance) from exc
        if outcome.error is not None:
            raise map_provider_error(outcome.error, outcome.balance) from outcome.error

        assert outcome.result is not None
        return GenerationResponse(
            result=normalize_output(outcome.result),
            balance=outcome.balance,
        )

    async def _invoke(
        self,
        kind: OperationKind,
        request: GenerationRequest,
        image: bytes | None,
    ) -> ProviderOutput:
        provider = self._provider
        if kind is OperationKind.IMAGE_GENERATE:
            output = await provider.generate_image(
                request.prompt or "",
                model=request.model,
                aspect_ratio=request.aspect_ratio,
            )
        elif kind is OperationKind.IMAGE_EDIT:
            output = await provider.edit_image(
                request.prompt or "",
                image=image or b"",
                mime_type=request.image_mime_type or _DEFAULT_EDIT_MIME_TYPE,
            )
        elif kind is OperationKind.TEXT_TO_SPEECH:
            output = await provider.synthesize_speech(
                request.text or "", voice=request.voice
            )
        elif kind is OperationKind.TEXT_REWRITE:
            output = await provider.generate_text(
                build_rewrite_prompt(request.text or "", request.style or "")
            )
        else:
            output = await provider.generate_text(
                build_tweets_prompt(request.idea or "")
            )

        # An empty success is a billing failure; raising here rolls back.
        if not output.data and not (output.text and output.text.strip()):
            raise NoOutputError(f"Empty {kind.value} output")
        return output
