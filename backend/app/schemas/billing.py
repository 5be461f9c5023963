"""Billing request/response schemas."""

from pydantic import BaseModel, ConfigDict


class CheckoutRequest(BaseModel):
    """Request body for POST /billing/checkout-session.

    Attributes:
        package_id: Id of an entry in the document's store.packages list.
    """

    model_config = ConfigDict(extra="forbid")

    package_id: int


class CheckoutResponse(BaseModel):
    """Stripe-hosted checkout URL."""

    url: str


class BillingConfigResponse(BaseModel):
    """Public payment configuration for the frontend."""

    stripe_public_key: str
    payments_enabled: bool
