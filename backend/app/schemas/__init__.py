"""Pydantic request/response schemas for API endpoints."""

from app.schemas.auth import (
    AuthResponse,
    LoginRequest,
    RegisterRequest,
    RewardResponse,
    UserPublic,
)
from app.schemas.billing import (
    BillingConfigResponse,
    CheckoutRequest,
    CheckoutResponse,
)
from app.schemas.generation import (
    Artifact,
    GenerationOutput,
    GenerationRequest,
    GenerationResponse,
)
from app.schemas.settings import SettingsUpdate

__all__ = [
    # Auth
    "AuthResponse",
    "LoginRequest",
    "RegisterRequest",
    "RewardResponse",
    "UserPublic",
    # Billing
    "BillingConfigResponse",
    "CheckoutRequest",
    "CheckoutResponse",
    # Generation
    "Artifact",
    "GenerationOutput",
    "GenerationRequest",
    "GenerationResponse",
    # Settings
    "SettingsUpdate",
]
