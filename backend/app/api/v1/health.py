"""Dependency health endpoint."""

import logging

from fastapi import APIRouter
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from app.api.deps import DbSession
from app.core.config import settings

logger = logging.getLogger(__name__)

router = APIRouter()


def _status(ok: bool, message: str) -> dict:
    return {"ok": ok, "message": message}


@router.get("")
async def health(db: DbSession) -> dict:
    """Report database, AI provider and payment processor status."""
    try:
        await db.execute(text("SELECT 1"))
        database = _status(True, "Connected successfully.")
    except (SQLAlchemyError, OSError):
        logger.exception("Health check database query failed")
        await db.rollback()
        database = _status(False, "Database unreachable.")

    if settings.generation_provider == "mock":
        ai_service = _status(True, "Mock provider.")
    elif settings.google_api_key.get_secret_value():
        ai_service = _status(True, "Operational.")
    else:
        ai_service = _status(False, "GOOGLE_API_KEY is not set.")

    if settings.payments_enabled:
        payment_service = _status(True, "Operational.")
    else:
        payment_service = _status(
            False, "STRIPE_SECRET_KEY is not set. Payment features are disabled."
        )

    return {
        "database": database,
        "ai_service": ai_service,
        "payment_service": payment_service,
    }
