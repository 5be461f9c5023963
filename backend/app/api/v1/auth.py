"""Authentication endpoints: register and login.

Security considerations:
- login: constant-time comparison via DUMMY_HASH prevents user enumeration
- register: bcrypt cost 12, HIBP breach check, username/email uniqueness
"""

from fastapi import APIRouter, Request

from app.api.deps import ConfigStoreDep, DbSession
from app.core.auth import (
    check_password_breached,
    create_jwt,
    validate_password_strength,
)
from app.core.config import settings
from app.core.errors import APIError
from app.core.rate_limiting import limiter
from app.core.responses import DataResponse
from app.models import User
from app.schemas.auth import AuthResponse, LoginRequest, RegisterRequest, UserPublic
from app.services.account_service import authenticate, register_user

_PASSWORD_BREACHED_MSG = (  # nosec B105
    "This password has appeared in a data breach. Please choose a different one."
)

router = APIRouter()


def _auth_response(user: User) -> AuthResponse:
    token = create_jwt(user_id=user.id, is_admin=user.is_admin)
    return AuthResponse(token=token, user=UserPublic.from_user(user))


@router.post("/register", status_code=201)
@limiter.limit(lambda: settings.rate_limit_auth)
async def register(
    request: Request,  # noqa: ARG001 - required by @limiter.limit()
    body: RegisterRequest,
    db: DbSession,
    config_store: ConfigStoreDep,
) -> DataResponse[AuthResponse]:
    """Create an account, grant starting points and issue a token."""
    validate_password_strength(body.password)

    if await check_password_breached(body.password):
        raise APIError(
            code="PASSWORD_BREACHED",
            message=_PASSWORD_BREACHED_MSG,
            status_code=422,
        )

    document = await config_store.get()
    user = await register_user(db, body, document)
    return DataResponse(data=_auth_response(user))


@router.post("/login")
@limiter.limit(lambda: settings.rate_limit_auth)
async def login(
    request: Request,  # noqa: ARG001 - required by @limiter.limit()
    body: LoginRequest,
    db: DbSession,
) -> DataResponse[AuthResponse]:
    """Verify credentials and issue a bearer token.

    Reachable during maintenance so administrators can sign in.
    """
    user = await authenticate(db, body.identifier, body.password)
    return DataResponse(data=_auth_response(user))
