"""User model - accounts and point balances.

The ``balance`` column is mutated only through LedgerRepository, always
inside a transaction that also appends a PointTransaction row.
"""

from datetime import datetime

from sqlalchemy import (
    BigInteger,
    Boolean,
    CheckConstraint,
    Integer,
    String,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, TimestampMixin

USER_STATUSES = ("active", "pending", "banned")


class User(Base, TimestampMixin):
    """User account.

    Attributes:
        id: Numeric primary key.
        username: Unique login name.
        email: Unique email address.
        password_hash: bcrypt hash.
        country: Optional country supplied at registration.
        balance: Non-negative point balance.
        is_admin: Administrators bypass maintenance gating.
        status: active, pending or banned. Banned users cannot authenticate.
        referral_code: Unique code other users may register with.
        referrals: Number of successful referrals.
        last_reward_claim: When the daily reward was last granted.
    """

    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("balance >= 0", name="ck_users_balance_nonneg"),
        CheckConstraint(
            "status IN ('active', 'pending', 'banned')",
            name="ck_users_status_valid",
        ),
    )

    id: Mapped[int] = mapped_column(
        BigInteger,
        primary_key=True,
        autoincrement=True,
    )
    username: Mapped[str] = mapped_column(
        String(50),
        unique=True,
        nullable=False,
    )
    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
    )
    password_hash: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    country: Mapped[str | None] = mapped_column(
        String(100),
        nullable=True,
    )
    balance: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        server_default=text("0"),
        default=0,
    )
    is_admin: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        server_default=text("false"),
        default=False,
    )
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        server_default=text("'active'"),
        default="active",
    )
    referral_code: Mapped[str] = mapped_column(
        String(16),
        unique=True,
        nullable=False,
    )
    referrals: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        server_default=text("0"),
        default=0,
    )
    last_reward_claim: Mapped[datetime | None] = mapped_column(
        nullable=True,
    )

    @property
    def is_banned(self) -> bool:
        """True when the account may not authenticate."""
        return self.status == "banned"
