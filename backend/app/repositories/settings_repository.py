"""Repository for the configuration document row.

Provides database access for the singleton ``settings`` row (id=1).
"""

from typing import Any

from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.app_settings import SETTINGS_ROW_ID, AppSettings


class SettingsRepository:
    """Stateless repository for the configuration document.

    All methods are static, with no instance state. Pass an AsyncSession
    for every call so the caller controls transaction boundaries.
    """

    @staticmethod
    async def load(db: AsyncSession) -> dict[str, Any] | None:
        """Read the persisted document.

        Returns:
            Stored document, or None when the row has not been seeded.
        """
        stmt = select(AppSettings.settings_data).where(
            AppSettings.id == SETTINGS_ROW_ID
        )
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def seed(db: AsyncSession, document: dict[str, Any]) -> None:
        """Insert the document unless a row already exists.

        ON CONFLICT DO NOTHING keeps concurrent first boots from clobbering
        each other or an admin write that raced the seed.
        """
        stmt = (
            insert(AppSettings)
            .values(id=SETTINGS_ROW_ID, settings_data=document)
            .on_conflict_do_nothing(index_elements=[AppSettings.id])
        )
        await db.execute(stmt)

    @staticmethod
    async def save(db: AsyncSession, document: dict[str, Any]) -> None:
        """Persist the document verbatim, creating the row if needed."""
        stmt = insert(AppSettings).values(id=SETTINGS_ROW_ID, settings_data=document)
        stmt = stmt.on_conflict_do_update(
            index_elements=[AppSettings.id],
            set_={
                "settings_data": stmt.excluded.settings_data,
                "updated_at": func.now(),
            },
        )
        await db.execute(stmt)
