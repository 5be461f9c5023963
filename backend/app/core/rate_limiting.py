"""Rate limiting configuration using slowapi.

Security: Prevents API abuse and provider cost explosion by limiting
request frequency on generation and auth endpoints.

Requests carrying a valid bearer token are keyed on the JWT subject
(per-user), so users behind a shared IP do not starve each other.
Unauthenticated requests fall back to IP-based keying.

Usage in routers:
    from app.core.rate_limiting import limiter

    @router.post("/generate")
    @limiter.limit(lambda: settings.rate_limit_generation)
    async def generate(request: Request, ...):
        ...
"""

from fastapi import Request, Response
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.responses import JSONResponse

from app.core.auth import token_claims
from app.core.config import settings

_DEFAULT_RETRY_AFTER_SECONDS = 60


def _rate_limit_key_func(request: Request) -> str:
    """Get rate limit key from request.

    Key format:
    - valid bearer JWT: "user:{sub}"
    - no/invalid JWT: "unauth:{ip}"

    Args:
        request: The incoming request.

    Returns:
        Rate limit key string.
    """
    # No ban/existence check here; full auth happens in deps.py.
    claims = token_claims(request)
    if claims is not None:
        sub = str(claims.get("sub", ""))
        if sub.isdigit() and len(sub) <= 20:
            return f"user:{sub}"

    return f"unauth:{get_remote_address(request)}"


# Global limiter instance
# Configured with in-memory storage (suitable for single-instance deployment)
# For multi-instance, configure Redis storage via RATELIMIT_STORAGE_URL
limiter = Limiter(
    key_func=_rate_limit_key_func,
    enabled=settings.rate_limit_enabled,
)


def _retry_after_seconds(exc: RateLimitExceeded) -> int:
    limit = getattr(exc, "limit", None)
    item = getattr(limit, "limit", None)
    try:
        return int(item.get_expiry())  # type: ignore[union-attr]
    except (AttributeError, TypeError, ValueError):
        return _DEFAULT_RETRY_AFTER_SECONDS


def rate_limit_exceeded_handler(
    _request: Request,
    exc: RateLimitExceeded,
) -> Response:
    """Handle rate limit exceeded errors.

    Security: Returns 429 Too Many Requests with standard error envelope.

    Args:
        request: The incoming request.
        exc: The rate limit exception.

    Returns:
        JSONResponse with 429 status and retry-after header.
    """
    return JSONResponse(
        status_code=429,
        content={
            "error": {
                "code": "RATE_LIMITED",
                "message": f"Rate limit exceeded: {exc.detail}",
            }
        },
        headers={"Retry-After": str(_retry_after_seconds(exc))},
    )
