"""Account service: registration and credential checks.

Registration runs in the request's transaction: the user row, the signup
grant, and both sides of a referral bonus commit together or not at all.
Starting balances are granted through the ledger so every point a user
holds is traceable to a point_transactions row.
"""

import logging
import secrets
from collections.abc import Mapping
from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import hash_password, verify_password
from app.core.errors import AccountBannedError, ConflictError, UnauthorizedError
from app.models.user import User
from app.repositories.user_repository import UserRepository
from app.schemas.auth import RegisterRequest
from app.services.cost_resolver import price_for_key
from app.services.ledger_service import credit

logger = logging.getLogger(__name__)

_REFERRAL_CODE_BYTES = 4
_REFERRAL_CODE_ATTEMPTS = 5


def _conflict_for(existing: User, username: str) -> ConflictError:
    if existing.username == username:
        return ConflictError("USERNAME_TAKEN", "Username already exists.")
    return ConflictError("EMAIL_TAKEN", "Email already exists.")


async def _new_referral_code(db: AsyncSession) -> str:
    for _ in range(_REFERRAL_CODE_ATTEMPTS):
        code = secrets.token_hex(_REFERRAL_CODE_BYTES).upper()
        if await UserRepository.get_by_referral_code(db, code) is None:
            return code
    # Astronomically unlikely; the unique constraint is the final guard.
    return secrets.token_hex(_REFERRAL_CODE_BYTES * 2).upper()


async def register_user(
    db: AsyncSession,
    body: RegisterRequest,
    document: Mapping[str, Any],
) -> User:
    """Create an account and grant its starting balance.

    Starting balance is ``costs.newUserPoints``. A known referral code adds
    ``costs.referralBonus`` to both the new user and the referrer, and bumps
    the referrer's counter. Unknown referral codes are ignored.

    Args:
        db: Request session (committed by the caller's dependency).
        body: Validated registration request.
        document: Effective configuration document.

    Returns:
        The created user with its granted balance.

    Raises:
        ConflictError: Username or email already in use.
        NoPricingConfigError: Grant amounts misconfigured.
    """
    existing = await UserRepository.find_conflict(
        db, username=body.username, email=body.email
    )
    if existing is not None:
        raise _conflict_for(existing, body.username)

    costs = document.get("costs") or {}
    signup_points = price_for_key(costs, "newUserPoints")

    referrer = None
    if body.referral_code:
        referrer = await UserRepository.get_by_referral_code(db, body.referral_code)
        if referrer is None:
            logger.info("Registration with unknown referral code ignored")

    try:
        user = await UserRepository.create(
            db,
            username=body.username,
            email=body.email,
            password_hash=hash_password(body.password),
            referral_code=await _new_referral_code(db),
            country=body.country,
        )
    except IntegrityError as exc:
        # Lost a race with a concurrent registration.
        raise ConflictError(
            "USERNAME_TAKEN", "Username or email already exists."
        ) from exc

    user.balance = await credit(
        db,
        user_id=user.id,
        amount=signup_points,
        transaction_type="signup_grant",
        description="Welcome points",
    )

    if referrer is not None and not referrer.is_banned:
        bonus = price_for_key(costs, "referralBonus")
        await credit(
            db,
            user_id=referrer.id,
            amount=bonus,
            transaction_type="referral_bonus",
            reference_id=f"referrer:{user.id}",
            description=f"Referral of {user.username}",
        )
        await UserRepository.increment_referrals(db, referrer.id)
        user.balance = await credit(
            db,
            user_id=user.id,
            amount=bonus,
            transaction_type="referral_bonus",
            reference_id=f"referee:{user.id}",
            description="Referral signup bonus",
        )
        logger.info("Awarded %d referral points to user %s", bonus, referrer.id)

    logger.info("Registered user %s", user.id)
    return user


async def authenticate(db: AsyncSession, identifier: str, password: str) -> User:
    """Verify credentials for login.

    Args:
        db: Async database session.
        identifier: Username or email.
        password: Plain-text password.

    Returns:
        The authenticated user.

    Raises:
        UnauthorizedError: Unknown account or wrong password.
        AccountBannedError: Credentials valid but the account is banned.
    """
    user = await UserRepository.get_by_identifier(db, identifier)
    if not verify_password(password, user.password_hash if user else None):
        raise UnauthorizedError("Invalid credentials")
    assert user is not None
    if user.is_banned:
        raise AccountBannedError()
    return user
