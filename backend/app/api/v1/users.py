"""Current user endpoint."""

from fastapi import APIRouter

from app.api.deps import CurrentUser
from app.core.responses import DataResponse
from app.schemas.auth import UserPublic

router = APIRouter()


@router.get("/me")
async def get_me(user: CurrentUser) -> DataResponse[UserPublic]:
    """Return the caller's profile and balance."""
    return DataResponse(data=UserPublic.from_user(user))
