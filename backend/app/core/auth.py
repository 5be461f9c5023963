"""Authentication helpers for JWT handling and passwords.

Shared utilities used by auth endpoints and request dependencies.

Pipeline:
- create_jwt / decode_jwt: signed, expiring bearer tokens (HS256)
- bearer_token: extract the token from the Authorization header
- hash_password / verify_password: bcrypt
- validate_password_strength: format rules (sync, no network)
- check_password_breached: HIBP k-anonymity check (async, network)
- DUMMY_HASH: timing-safe constant for user enumeration defense
"""

import hashlib
import logging
import re
from datetime import UTC, datetime, timedelta
from typing import Any

import bcrypt
import httpx
import jwt
from fastapi import Request

from app.core.config import settings
from app.core.errors import ValidationError

logger = logging.getLogger(__name__)

# bcrypt cost factor for password hashing
_BCRYPT_ROUNDS = 12

# HIBP API timeout in seconds
_HIBP_TIMEOUT = 5.0

# Pre-computed bcrypt hash for timing-safe comparison on user-not-found.
# Security: prevents user enumeration via response time differences.
DUMMY_HASH = b"$2b$12$ZP2PVB8yI35X.mkRqcUPUuSzJA1CNRt4dZ7X3cyrfJu.2S3w.Qen2"

# Claim set only on administrator tokens.
ADMIN_CLAIM = "adm"


def create_jwt(
    *,
    user_id: int,
    is_admin: bool = False,
    secret: str | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    """Create a signed JWT with standard claims.

    Args:
        user_id: Numeric user id (stored as a string in ``sub``).
        is_admin: Adds the ``adm`` claim when True.
        secret: HMAC signing secret. Defaults to settings.auth_secret.
        expires_delta: Time until expiration. Defaults to the configured TTL.

    Returns:
        Encoded JWT string.
    """
    now = datetime.now(UTC)
    payload: dict[str, Any] = {
        "sub": str(user_id),
        "aud": settings.auth_audience,
        "iss": settings.auth_issuer,
        "exp": now
        + (expires_delta or timedelta(hours=settings.auth_token_ttl_hours)),
        "iat": now,
    }
    if is_admin:
        payload[ADMIN_CLAIM] = True
    return jwt.encode(
        payload,
        secret or settings.auth_secret.get_secret_value(),
        algorithm="HS256",
    )


def decode_jwt(token: str) -> dict[str, Any]:
    """Verify a token's signature and exp/aud/iss claims.

    Raises:
        jwt.InvalidTokenError: For any invalid, expired or foreign token.
    """
    return jwt.decode(
        token,
        settings.auth_secret.get_secret_value(),
        algorithms=["HS256"],
        audience=settings.auth_audience,
        issuer=settings.auth_issuer,
        options={"require": ["sub", "exp", "iat"]},
    )


def bearer_token(request: Request) -> str | None:
    """Return the bearer token from the Authorization header, if any."""
    header = request.headers.get("authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def token_claims(request: Request) -> dict[str, Any] | None:
    """Decode the request's bearer token, or None if absent or invalid.

    For callers that only need a hint (rate-limit keys, maintenance
    bypass). Authentication itself goes through get_current_user.
    """
    token = bearer_token(request)
    if token is None:
        return None
    try:
        return decode_jwt(token)
    except jwt.InvalidTokenError:
        return None


def hash_password(password: str) -> str:
    """Hash a password with bcrypt."""
    return bcrypt.hashpw(
        password.encode(), bcrypt.gensalt(rounds=_BCRYPT_ROUNDS)
    ).decode()


def verify_password(password: str, password_hash: str | None) -> bool:
    """Check a password against a stored hash.

    Always runs a bcrypt comparison (against DUMMY_HASH when there is no
    stored hash) so response time does not reveal whether the account exists.
    """
    if password_hash is None:
        bcrypt.checkpw(password.encode(), DUMMY_HASH)
        return False
    return bcrypt.checkpw(password.encode(), password_hash.encode())


def validate_password_strength(password: str) -> None:
    """Validate password meets strength requirements.

    8-128 chars, at least one letter and one number.

    Args:
        password: Plain-text password to validate.

    Raises:
        ValidationError: If password doesn't meet requirements.
    """
    if len(password) < 8:
        raise ValidationError("Password must be at least 8 characters")
    if len(password) > 128:
        raise ValidationError("Password must be at most 128 characters")
    if not re.search(r"[a-zA-Z]", password):
        raise ValidationError("Password must contain at least one letter")
    if not re.search(r"\d", password):
        raise ValidationError("Password must contain at least one number")


async def _fetch_hibp_range(prefix: str) -> str | None:
    """Fetch HIBP range response for a SHA-1 prefix.

    Only the first 5 chars of the SHA-1 hash are sent; matching
    suffixes are checked locally.

    Args:
        prefix: First 5 chars of SHA-1 hex digest (uppercase).

    Returns:
        Response text or None on error.
    """
    try:
        async with httpx.AsyncClient() as client:
            response = await client.get(
                f"https://api.pwnedpasswords.com/range/{prefix}",
                headers={"Add-Padding": "true"},
                timeout=_HIBP_TIMEOUT,
            )
            response.raise_for_status()
            return response.text
    except httpx.HTTPError:
        logger.warning("HIBP API request failed")
        return None


async def check_password_breached(password: str) -> bool:
    """Check if password appears in HIBP breach database.

    Fails open: if HIBP is unavailable, allows the password so an HIBP
    outage never blocks registration.

    Args:
        password: Plain-text password to check.

    Returns:
        True if password found in breach database, False otherwise.
    """
    sha1 = hashlib.sha1(password.encode()).hexdigest().upper()  # nosec B324
    prefix = sha1[:5]
    suffix = sha1[5:]

    text = await _fetch_hibp_range(prefix)
    if text is None:
        return False

    for line in text.splitlines():
        parts = line.split(":")
        if len(parts) == 2 and parts[0] == suffix:
            return True

    return False
