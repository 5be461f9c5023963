"""Configuration document request schemas."""

from typing import Any

from pydantic import BaseModel, ConfigDict


class SettingsUpdate(BaseModel):
    """Request body for PUT /api/v1/settings.

    The document is stored verbatim; missing keys are backfilled from the
    compiled-in defaults on read.

    Attributes:
        settings: Full or partial configuration document.
    """

    model_config = ConfigDict(extra="forbid")

    settings: dict[str, Any]
