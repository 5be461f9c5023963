"""Configuration document endpoints.

GET is public and stays reachable during maintenance so clients can render
the maintenance page. PUT replaces the stored document (admin only).
"""

from typing import Any

from fastapi import APIRouter

from app.api.deps import AdminUser, ConfigStoreDep
from app.core.responses import DataResponse
from app.schemas.settings import SettingsUpdate

router = APIRouter()


@router.get("")
async def get_settings(config_store: ConfigStoreDep) -> DataResponse[dict[str, Any]]:
    """Return the effective configuration document."""
    return DataResponse(data=await config_store.get())


@router.put("")
async def update_settings(
    body: SettingsUpdate,
    admin: AdminUser,  # noqa: ARG001 - enforces admin privilege
    config_store: ConfigStoreDep,
) -> DataResponse[dict[str, Any]]:
    """Persist a new configuration document verbatim.

    Missing keys are backfilled from the compiled-in defaults on the next
    read; the response is that freshly merged document.
    """
    return DataResponse(data=await config_store.put(body.settings))
