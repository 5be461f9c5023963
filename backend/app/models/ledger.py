"""Point ledger ORM model (append-only, no TimestampMixin).

PointTransaction records every balance change made by the ledger. Rows are
written inside the same transaction as the balance update, so a rolled-back
charge leaves no trace. Records are never updated or deleted.
"""

import uuid
from datetime import datetime

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
    func,
    text,
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base

_DEFAULT_UUID = text("gen_random_uuid()")

TRANSACTION_TYPES = (
    "usage_debit",
    "refund",
    "purchase",
    "signup_grant",
    "referral_bonus",
    "daily_reward",
    "admin_adjustment",
)


class PointTransaction(Base):
    """Append-only ledger of all balance changes.

    Positive amounts = credits (purchases, grants, refunds).
    Negative amounts = debits (usage charges).

    Attributes:
        id: UUID primary key.
        user_id: FK to users table.
        amount: Signed point amount (+credit, -debit).
        transaction_type: One of TRANSACTION_TYPES.
        reference_id: Links to source (Stripe session id, debit id for refunds).
        description: Human-readable description.
        created_at: Transaction timestamp.
    """

    __tablename__ = "point_transactions"
    __table_args__ = (
        CheckConstraint(
            "transaction_type IN ("
            + ", ".join(f"'{t}'" for t in TRANSACTION_TYPES)
            + ")",
            name="ck_point_txn_type_valid",
        ),
        # Stripe delivers webhooks at least once; a session id may be
        # credited only once.
        UniqueConstraint(
            "transaction_type",
            "reference_id",
            name="uq_point_txn_type_reference",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        server_default=_DEFAULT_UUID,
    )
    user_id: Mapped[int] = mapped_column(
        BigInteger,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    amount: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )
    transaction_type: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
    )
    reference_id: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
    )
    description: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
