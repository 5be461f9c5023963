"""Payment service: Stripe Checkout for point packages.

Checkout: the package is looked up in the effective configuration
document's ``store.packages`` and sold as a one-item ``payment`` session
whose metadata carries ``{userId, packageId, points}``.

Settlement: Stripe delivers ``checkout.session.completed`` through a
signed webhook, at least once. The points are credited through the
ledger's idempotent purchase credit, keyed on the checkout session id, so
a redelivered event never credits twice.

The stripe SDK is synchronous; calls run in a worker thread.
"""

import asyncio
import logging
from collections.abc import Mapping
from typing import Any

import stripe

from app.core.config import settings
from app.core.errors import (
    InvalidWebhookError,
    NotFoundError,
    PaymentsUnavailableError,
)
from app.services.ledger_service import LedgerService, get_ledger_service

logger = logging.getLogger(__name__)

# Events that settle a purchase. Async payment methods complete the
# session first and report the payment later.
_SETTLEMENT_EVENTS = frozenset(
    {"checkout.session.completed", "checkout.session.async_payment_succeeded"}
)


def find_package(document: Mapping[str, Any], package_id: int) -> dict[str, Any]:
    """Look up a store package by id.

    Raises:
        NotFoundError: No package with that id.
    """
    packages = (document.get("store") or {}).get("packages") or []
    for package in packages:
        if isinstance(package, Mapping) and package.get("id") == package_id:
            return dict(package)
    raise NotFoundError("Package", str(package_id))


class PaymentService:
    """Stripe checkout creation and webhook settlement.

    Args:
        ledger: Ledger used for purchase credits.
        secret_key: Stripe secret API key (empty disables payments).
        webhook_secret: Endpoint signing secret.
        currency: ISO currency code for package prices.
        frontend_url: Base URL for success/cancel redirects.
    """

    def __init__(
        self,
        ledger: LedgerService,
        *,
        secret_key: str,
        webhook_secret: str,
        currency: str = "usd",
        frontend_url: str = "http://localhost:8080",
    ) -> None:
        self._ledger = ledger
        self._secret_key = secret_key
        self._webhook_secret = webhook_secret
        self._currency = currency
        self._frontend_url = frontend_url.rstrip("/")

    @property
    def enabled(self) -> bool:
        return bool(self._secret_key)

    async def create_checkout_session(
        self,
        user_id: int,
        package_id: int,
        document: Mapping[str, Any],
    ) -> str:
        """Create a hosted checkout session for a store package.

        Args:
            user_id: Buyer.
            package_id: Id of an entry in ``store.packages``.
            document: Effective configuration document.

        Returns:
            Checkout URL to redirect the user to.

        Raises:
            PaymentsUnavailableError: Stripe not configured or call failed.
            NotFoundError: Unknown package id.
        """
        if not self.enabled:
            raise PaymentsUnavailableError()

        package = find_package(document, package_id)
        points = int(package["points"])
        unit_amount = int(round(float(package["price"]) * 100))

        try:
            session = await asyncio.to_thread(
                stripe.checkout.Session.create,
                api_key=self._secret_key,
                mode="payment",
                payment_method_types=["card"],
                line_items=[
                    {
                        "price_data": {
                            "currency": self._currency,
                            "unit_amount": unit_amount,
                            "product_data": {
                                "name": f"{points:,} Points Package",
                                "description": (
                                    f"Get {points:,} points to use on Tomato AI."
                                ),
                            },
                        },
                        "quantity": 1,
                    }
                ],
                success_url=(
                    f"{self._frontend_url}/#store?payment_success=true"
                    "&session_id={CHECKOUT_SESSION_ID}"
                ),
                cancel_url=f"{self._frontend_url}/#store?payment_cancelled=true",
                metadata={
                    "userId": str(user_id),
                    "packageId": str(package_id),
                    "points": str(points),
                },
            )
        except stripe.StripeError as exc:
            logger.exception("Failed to create checkout session")
            raise PaymentsUnavailableError(
                "Failed to create checkout session."
            ) from exc

        logger.info(
            "Checkout session %s created for user %s (package %s)",
            session.id,
            user_id,
            package_id,
        )
        return str(session.url)

    def verify_event(self, payload: bytes, signature: str | None) -> Any:
        """Verify a webhook signature and parse the event.

        Raises:
            PaymentsUnavailableError: Webhook secret not configured.
            InvalidWebhookError: Missing/invalid signature or bad payload.
        """
        if not self.enabled or not self._webhook_secret:
            raise PaymentsUnavailableError("Webhook not configured.")
        if not signature:
            raise InvalidWebhookError("Missing Stripe-Signature header")
        try:
            return stripe.Webhook.construct_event(
                payload, signature, self._webhook_secret
            )
        except stripe.SignatureVerificationError as exc:
            logger.warning("Webhook signature verification failed")
            raise InvalidWebhookError("Invalid signature") from exc
        except ValueError as exc:
            logger.warning("Webhook payload could not be parsed")
            raise InvalidWebhookError() from exc

    async def handle_webhook(self, payload: bytes, signature: str | None) -> None:
        """Verify and apply one webhook delivery.

        Unknown users, malformed metadata and duplicate deliveries are
        logged and acknowledged so Stripe stops retrying them.
        """
        event = self.verify_event(payload, signature)
        event_type = event["type"]
        if event_type not in _SETTLEMENT_EVENTS:
            logger.info("Ignoring Stripe event type %s", event_type)
            return

        # StripeObject supports item access and ``in`` but not dict.get().
        session = event["data"]["object"]
        session_id = str(session["id"])
        payment_status = (
            session["payment_status"] if "payment_status" in session else None
        )
        if payment_status not in ("paid", "no_payment_required"):
            logger.info("Checkout session %s not paid yet", session_id)
            return

        try:
            metadata = session["metadata"]
            user_id = int(metadata["userId"])
            points = int(metadata["points"])
        except (KeyError, TypeError, ValueError):
            logger.error("Checkout session %s has invalid metadata", session_id)
            return

        try:
            await self._ledger.credit_purchase(user_id, points, session_id)
        except NotFoundError:
            logger.error(
                "Checkout session %s references unknown user %s",
                session_id,
                user_id,
            )


_payment_service: PaymentService | None = None


def get_payment_service() -> PaymentService:
    """Get the process-wide payment service."""
    global _payment_service
    if _payment_service is None:
        _payment_service = PaymentService(
            get_ledger_service(),
            secret_key=settings.stripe_secret_key.get_secret_value(),
            webhook_secret=settings.stripe_webhook_secret.get_secret_value(),
            currency=settings.stripe_currency,
            frontend_url=settings.frontend_url,
        )
    return _payment_service


def reset_payment_service() -> None:
    """Reset the payment service singleton (for testing)."""
    global _payment_service
    _payment_service = None
