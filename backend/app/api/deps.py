"""Shared dependencies for API endpoints.

Authentication, admission control and service wiring. Services (config
store, ledger, provider) are resolved here so app.dependency_overrides can
replace them.
"""

from typing import Annotated

import jwt
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import ADMIN_CLAIM, bearer_token, decode_jwt, token_claims
from app.core.config import settings
from app.core.database import get_db
from app.core.errors import AccountBannedError, AdminRequiredError, UnauthorizedError
from app.models import User
from app.providers.factory import get_generation_provider
from app.providers.generation.base import GenerationProvider
from app.repositories.user_repository import UserRepository
from app.services.config_store import ConfigStore, get_config_store
from app.services.generation_gateway import GenerationGateway
from app.services.ledger_service import LedgerService, get_ledger_service
from app.services.maintenance_gate import check_admission, is_maintenance_enabled
from app.services.payment_service import PaymentService, get_payment_service

DbSession = Annotated[AsyncSession, Depends(get_db)]


async def get_current_user(request: Request, db: DbSession) -> User:
    """Resolve the authenticated caller from the bearer token.

    Validation steps:
    1. Read ``Authorization: Bearer <jwt>``
    2. Verify signature (HS256) and exp, aud, iss claims
    3. Load the user row (balance snapshot, privilege, status)
    4. Reject banned accounts

    Security: every 401 uses the same message regardless of why the token
    was rejected.

    Args:
        request: HTTP request (injected by FastAPI).
        db: Database session (injected).

    Returns:
        The current user.

    Raises:
        UnauthorizedError: Missing/invalid token or unknown user.
        AccountBannedError: The account is banned.
    """
    token = bearer_token(request)
    if token is None:
        raise UnauthorizedError()
    try:
        payload = decode_jwt(token)
        user_id = int(payload["sub"])
    except (jwt.InvalidTokenError, KeyError, ValueError) as exc:
        raise UnauthorizedError() from exc

    user = await UserRepository.get_by_id(db, user_id)
    if user is None:
        raise UnauthorizedError()
    if user.is_banned:
        raise AccountBannedError()
    return user


CurrentUser = Annotated[User, Depends(get_current_user)]


def require_admin(user: CurrentUser) -> User:
    """Require administrator privilege.

    Raises:
        AdminRequiredError: Caller is not an administrator.
    """
    if not user.is_admin:
        raise AdminRequiredError()
    return user


AdminUser = Annotated[User, Depends(require_admin)]
ConfigStoreDep = Annotated[ConfigStore, Depends(get_config_store)]
LedgerDep = Annotated[LedgerService, Depends(get_ledger_service)]
PaymentDep = Annotated[PaymentService, Depends(get_payment_service)]


def get_provider() -> GenerationProvider:
    """Process-wide generation provider."""
    return get_generation_provider()


ProviderDep = Annotated[GenerationProvider, Depends(get_provider)]


def get_generation_gateway(
    config_store: ConfigStoreDep,
    ledger: LedgerDep,
    provider: ProviderDep,
) -> GenerationGateway:
    """Build the generation gateway from its injected collaborators."""
    return GenerationGateway(config_store, ledger, provider)


GatewayDep = Annotated[GenerationGateway, Depends(get_generation_gateway)]


async def _is_verified_admin(request: Request, db: AsyncSession) -> bool:
    claims = token_claims(request)
    if not claims or not claims.get(ADMIN_CLAIM):
        return False
    # The claim is only a hint; confirm against the current user row.
    try:
        user = await UserRepository.get_by_id(db, int(claims["sub"]))
    except (KeyError, ValueError):
        return False
    return user is not None and user.is_admin and not user.is_banned


async def enforce_maintenance(
    request: Request,
    config_store: ConfigStoreDep,
    db: DbSession,
) -> None:
    """Router-level admission control for maintenance mode.

    Raises:
        ServiceUnderMaintenanceError: Maintenance is on, the path is not
            allow-listed and the caller is not an administrator.
    """
    document = await config_store.get()
    if not is_maintenance_enabled(document):
        return
    check_admission(
        document,
        path=request.url.path,
        is_admin=await _is_verified_admin(request, db),
        exempt_paths=settings.maintenance_exempt_paths,
    )
