"""Billing endpoints: Stripe configuration, checkout and webhook."""

from fastapi import APIRouter, Request

from app.api.deps import ConfigStoreDep, CurrentUser, PaymentDep
from app.core.config import settings
from app.core.responses import DataResponse
from app.schemas.billing import (
    BillingConfigResponse,
    CheckoutRequest,
    CheckoutResponse,
)

router = APIRouter()


@router.get("/config")
async def get_billing_config() -> DataResponse[BillingConfigResponse]:
    """Public payment configuration for the frontend."""
    return DataResponse(
        data=BillingConfigResponse(
            stripe_public_key=settings.stripe_publishable_key,
            payments_enabled=settings.payments_enabled,
        )
    )


@router.post("/checkout-session")
async def create_checkout_session(
    body: CheckoutRequest,
    user: CurrentUser,
    payments: PaymentDep,
    config_store: ConfigStoreDep,
) -> DataResponse[CheckoutResponse]:
    """Create a Stripe Checkout session for a store package."""
    document = await config_store.get()
    url = await payments.create_checkout_session(user.id, body.package_id, document)
    return DataResponse(data=CheckoutResponse(url=url))


@router.post("/webhook")
async def stripe_webhook(request: Request, payments: PaymentDep) -> dict:
    """Stripe webhook receiver.

    Authenticated by the Stripe-Signature header, not a bearer token.
    Responds with Stripe's conventional acknowledgement body.
    """
    payload = await request.body()
    await payments.handle_webhook(payload, request.headers.get("stripe-signature"))
    return {"received": True}
