"""API error classes.

Each class maps to one HTTP status and error code; main.py renders them
into the error envelope.

The metered-call taxonomy (InvalidOperation, InsufficientBalance,
ContentBlocked, NoOutputProduced, ProviderUnavailable) carries the caller's
unchanged balance in ``details`` so clients can render it without a refetch.
"""

from datetime import datetime
from typing import Any


class APIError(Exception):
    """Base class for API errors.

    All API errors have a code, message, and HTTP status.
    Subclasses set default status_code.

    Attributes:
        code: Machine-readable error code (e.g., "NOT_FOUND").
        message: Human-readable error message.
        status_code: HTTP status code to return.
        details: Optional list of additional error details.
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: list[dict] | None = None,
    ) -> None:
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(message)


def _balance_details(balance: int | None) -> list[dict] | None:
    if balance is None:
        return None
    return [{"balance": balance}]


class ValidationError(APIError):
    """Field validation failed (400)."""

    def __init__(
        self,
        message: str,
        details: list[dict] | None = None,
    ) -> None:
        super().__init__(
            code="VALIDATION_ERROR",
            message=message,
            status_code=400,
            details=details,
        )


class UnauthorizedError(APIError):
    """Authentication required (401).

    Use when no valid auth credentials provided.
    """

    def __init__(self, message: str = "Authentication required") -> None:
        super().__init__(
            code="UNAUTHORIZED",
            message=message,
            status_code=401,
        )


class ForbiddenError(APIError):
    """Not allowed to access resource (403).

    Use when auth is valid but user lacks permission.
    """

    def __init__(self, message: str = "Access denied") -> None:
        super().__init__(
            code="FORBIDDEN",
            message=message,
            status_code=403,
        )


class AdminRequiredError(ForbiddenError):
    """Admin access required (403).

    Raised by the require_admin dependency when the caller lacks privilege.
    """

    def __init__(self) -> None:
        APIError.__init__(
            self,
            code="ADMIN_REQUIRED",
            message="Admin access required",
            status_code=403,
        )


class AccountBannedError(ForbiddenError):
    """Banned accounts cannot authenticate (403)."""

    def __init__(self) -> None:
        APIError.__init__(
            self,
            code="ACCOUNT_BANNED",
            message="This account has been banned.",
            status_code=403,
        )


class NotFoundError(APIError):
    """Resource not found (404)."""

    def __init__(self, resource: str, resource_id: str | None = None) -> None:
        if resource_id:
            message = f"{resource} with id '{resource_id}' not found"
        else:
            message = f"{resource} not found"
        super().__init__(
            code="NOT_FOUND",
            message=message,
            status_code=404,
        )


class ConflictError(APIError):
    """Duplicate or conflicting resource (409).

    Accepts custom code for specific conflict types
    (USERNAME_TAKEN, EMAIL_TAKEN).
    """

    def __init__(
        self,
        code: str,
        message: str,
        details: list[dict] | None = None,
    ) -> None:
        super().__init__(
            code=code,
            message=message,
            status_code=409,
            details=details,
        )


class InvalidOperationError(APIError):
    """Unrecognized operation kind or unusable parameters (400).

    Raised by the cost resolver before any ledger mutation.
    """

    def __init__(self, message: str, balance: int | None = None) -> None:
        super().__init__(
            code="INVALID_OPERATION",
            message=message,
            status_code=400,
            details=_balance_details(balance),
        )


class InsufficientBalanceError(APIError):
    """Resolved price exceeds the caller's balance (402).

    Args:
        balance: Current balance in points.
        required: Price of the requested operation in points.
    """

    def __init__(self, balance: int, required: int) -> None:
        super().__init__(
            code="INSUFFICIENT_BALANCE",
            message="Insufficient points",
            status_code=402,
            details=[{"balance": balance, "required": required}],
        )


class ContentBlockedError(APIError):
    """Provider refused the request on safety grounds (422).

    No points are charged.
    """

    def __init__(self, balance: int | None = None) -> None:
        super().__init__(
            code="CONTENT_BLOCKED",
            message=(
                "Request blocked due to safety settings. Please modify your prompt."
            ),
            status_code=422,
            details=_balance_details(balance),
        )


class NoOutputProducedError(APIError):
    """Provider succeeded but returned nothing usable (502).

    No points are charged.
    """

    def __init__(self, balance: int | None = None) -> None:
        super().__init__(
            code="NO_OUTPUT_PRODUCED",
            message="The AI service returned no output. Please try again.",
            status_code=502,
            details=_balance_details(balance),
        )


class ProviderUnavailableError(APIError):
    """Provider call failed, timed out, or raised something unexpected (503).

    No points are charged. Retryable by the end user.
    """

    def __init__(self, balance: int | None = None) -> None:
        super().__init__(
            code="PROVIDER_UNAVAILABLE",
            message="An error occurred during AI generation. Please try again.",
            status_code=503,
            details=_balance_details(balance),
        )


class NoPricingConfigError(APIError):
    """Price key present in the document but not a non-negative integer (503).

    Security: The key name is intentionally included in the message.
    Admins need the detail to fix the configuration document.

    Args:
        key: Key under the document's ``costs`` section.
    """

    def __init__(self, key: str) -> None:
        super().__init__(
            code="NO_PRICING_CONFIG",
            message=f"No valid price configured for '{key}'",
            status_code=503,
        )


class ConfigurationUnavailableError(APIError):
    """Configuration document could not be persisted (503)."""

    def __init__(self, message: str = "Failed to save settings") -> None:
        super().__init__(
            code="CONFIGURATION_UNAVAILABLE",
            message=message,
            status_code=503,
        )


class ServiceUnderMaintenanceError(APIError):
    """Maintenance gate rejection (503).

    Details carry the bilingual maintenance message and the minimal theme
    the client needs to render a maintenance page.

    Args:
        notice: Maintenance payload (messages + theme).
    """

    def __init__(self, notice: dict[str, Any]) -> None:
        super().__init__(
            code="SERVICE_UNDER_MAINTENANCE",
            message="Under maintenance",
            status_code=503,
            details=[notice],
        )


class RewardCooldownError(APIError):
    """Daily reward already claimed within the last 24 hours (429).

    Args:
        next_claim_at: Earliest time the reward can be claimed again.
    """

    def __init__(self, next_claim_at: datetime) -> None:
        super().__init__(
            code="REWARD_COOLDOWN",
            message="Daily reward already claimed. Come back later.",
            status_code=429,
            details=[{"next_claim_at": next_claim_at.isoformat()}],
        )


class PaymentsUnavailableError(APIError):
    """Payment processor not configured or unreachable (503)."""

    def __init__(self, message: str = "Payment service is not configured.") -> None:
        super().__init__(
            code="PAYMENTS_UNAVAILABLE",
            message=message,
            status_code=503,
        )


class InvalidWebhookError(APIError):
    """Webhook payload or signature rejected (400)."""

    def __init__(self, message: str = "Invalid webhook payload") -> None:
        super().__init__(
            code="INVALID_WEBHOOK",
            message=message,
            status_code=400,
        )
