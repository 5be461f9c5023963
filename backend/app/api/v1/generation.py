"""Metered AI generation endpoint."""

from fastapi import APIRouter, Request

from app.api.deps import CurrentUser, DbSession, GatewayDep
from app.core.config import settings
from app.core.rate_limiting import limiter
from app.core.responses import DataResponse
from app.schemas.generation import GenerationRequest, GenerationResponse

router = APIRouter()


@router.post("/generate")
@limiter.limit(lambda: settings.rate_limit_generation)
async def generate(
    request: Request,  # noqa: ARG001 - required by @limiter.limit()
    body: GenerationRequest,
    user: CurrentUser,
    db: DbSession,
    gateway: GatewayDep,
) -> DataResponse[GenerationResponse]:
    """Run one metered generation operation.

    Success returns the artifact or text together with the post-charge
    balance. Every failure leaves the balance unchanged and reports it in
    the error details.
    """
    # The ledger charges in its own session. End the request transaction
    # so its pooled connection is returned before the provider call.
    await db.commit()
    return DataResponse(data=await gateway.generate(user, body))
