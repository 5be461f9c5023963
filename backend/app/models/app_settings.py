"""Configuration document storage - singleton row keyed at id=1.

The document is stored verbatim as JSONB. Defaults backfill happens on read
in ConfigStore, never in the database.
"""

from typing import Any

from sqlalchemy import CheckConstraint, Integer
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, TimestampMixin

SETTINGS_ROW_ID = 1


class AppSettings(Base, TimestampMixin):
    """Process-wide configuration document.

    Attributes:
        id: Always 1.
        settings_data: Persisted (possibly partial) configuration document.
    """

    __tablename__ = "settings"
    __table_args__ = (
        CheckConstraint(f"id = {SETTINGS_ROW_ID}", name="ck_settings_singleton"),
    )

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=False,
    )
    settings_data: Mapped[dict[str, Any]] = mapped_column(
        JSONB,
        nullable=False,
    )
