"""Daily reward endpoint."""

from fastapi import APIRouter

from app.api.deps import ConfigStoreDep, CurrentUser, DbSession
from app.core.responses import DataResponse
from app.schemas.auth import RewardResponse
from app.services.reward_service import claim_daily_reward

router = APIRouter()


@router.post("/daily")
async def claim_daily(
    user: CurrentUser,
    db: DbSession,
    config_store: ConfigStoreDep,
) -> DataResponse[RewardResponse]:
    """Grant the daily points reward (once per 24 hours)."""
    document = await config_store.get()
    result = await claim_daily_reward(db, user.id, document)
    return DataResponse(
        data=RewardResponse(
            awarded=result.awarded,
            balance=result.balance,
            next_claim_at=result.next_claim_at,
        )
    )
