"""Daily reward: a free points grant with a 24 hour cooldown.

The user row is locked while the cooldown is checked, so two concurrent
claims cannot both succeed.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import NotFoundError, RewardCooldownError
from app.repositories.user_repository import UserRepository
from app.services.cost_resolver import price_for_key
from app.services.ledger_service import credit

logger = logging.getLogger(__name__)

REWARD_COOLDOWN = timedelta(hours=24)


@dataclass(frozen=True)
class RewardResult:
    """Outcome of a successful claim."""

    awarded: int
    balance: int
    next_claim_at: datetime


async def claim_daily_reward(
    db: AsyncSession,
    user_id: int,
    document: Mapping[str, Any],
    *,
    now: datetime | None = None,
) -> RewardResult:
    """Grant ``costs.dailyRewardPoints`` if the cooldown has elapsed.

    Args:
        db: Request session (committed by the caller's dependency).
        user_id: Claiming user.
        document: Effective configuration document.
        now: Current time (injectable for tests).

    Returns:
        Points awarded, new balance and the next eligible claim time.

    Raises:
        RewardCooldownError: Claimed less than 24 hours ago.
        NotFoundError: User does not exist.
    """
    now = now or datetime.now(UTC)
    user = await UserRepository.get_for_update(db, user_id)
    if user is None:
        raise NotFoundError("User", str(user_id))

    last = user.last_reward_claim
    if last is not None and now - last < REWARD_COOLDOWN:
        raise RewardCooldownError(next_claim_at=last + REWARD_COOLDOWN)

    points = price_for_key(document.get("costs") or {}, "dailyRewardPoints")
    balance = await credit(
        db,
        user_id=user_id,
        amount=points,
        transaction_type="daily_reward",
        description="Daily reward",
    )
    await UserRepository.set_last_reward_claim(db, user_id, now)
    logger.info("Daily reward of %d granted to user %s", points, user_id)
    return RewardResult(
        awarded=points, balance=balance, next_claim_at=now + REWARD_COOLDOWN
    )
