"""SQLAlchemy ORM models for Tomato AI.

All models are exported from this module for convenient imports:
    from app.models import User, AppSettings, PointTransaction

Models are organized by domain:
- user.py: User (Tier 0)
- app_settings.py: AppSettings (Tier 0 - configuration document singleton)
- ledger.py: PointTransaction (Tier 1 - append-only point ledger)
"""

from app.models.app_settings import SETTINGS_ROW_ID, AppSettings
from app.models.base import Base, TimestampMixin
from app.models.ledger import TRANSACTION_TYPES, PointTransaction
from app.models.user import USER_STATUSES, User

__all__ = [
    # Base classes
    "Base",
    "TimestampMixin",
    # Tier 0
    "User",
    "USER_STATUSES",
    "AppSettings",
    "SETTINGS_ROW_ID",
    # Tier 1 - Ledger
    "PointTransaction",
    "TRANSACTION_TYPES",
]
