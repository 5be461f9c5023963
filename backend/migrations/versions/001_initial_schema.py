"""Create users, settings and point_transactions tables.

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-18

- pgcrypto: gen_random_uuid() for ledger row ids
- users: accounts with a non-negative point balance
- settings: singleton configuration document (id = 1)
- point_transactions: append-only ledger of balance changes
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "001_initial_schema"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

_TRANSACTION_TYPES = (
    "usage_debit",
    "refund",
    "purchase",
    "signup_grant",
    "referral_bonus",
    "daily_reward",
    "admin_adjustment",
)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    ]


def upgrade() -> None:
    op.execute("CREATE EXTENSION IF NOT EXISTS pgcrypto")

    op.create_table(
        "users",
        sa.Column("id", sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column("username", sa.String(50), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("country", sa.String(100), nullable=True),
        sa.Column("balance", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_admin", sa.Boolean(), nullable=False, server_default="false"),
        sa.Column(
            "status", sa.String(20), nullable=False, server_default="'active'"
        ),
        sa.Column("referral_code", sa.String(16), nullable=False),
        sa.Column("referrals", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("last_reward_claim", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.CheckConstraint("balance >= 0", name="ck_users_balance_nonneg"),
        sa.CheckConstraint(
            "status IN ('active', 'pending', 'banned')",
            name="ck_users_status_valid",
        ),
        sa.UniqueConstraint("username", name="users_username_key"),
        sa.UniqueConstraint("email", name="users_email_key"),
        sa.UniqueConstraint("referral_code", name="users_referral_code_key"),
    )

    op.create_table(
        "settings",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=False),
        sa.Column("settings_data", postgresql.JSONB(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint("id = 1", name="ck_settings_singleton"),
    )

    op.create_table(
        "point_transactions",
        sa.Column(
            "id",
            sa.UUID(),
            primary_key=True,
            server_default=sa.text("gen_random_uuid()"),
        ),
        sa.Column(
            "user_id",
            sa.BigInteger(),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("amount", sa.Integer(), nullable=False),
        sa.Column("transaction_type", sa.String(20), nullable=False),
        sa.Column("reference_id", sa.String(255), nullable=True),
        sa.Column("description", sa.String(255), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.CheckConstraint(
            "transaction_type IN ("
            + ", ".join(f"'{t}'" for t in _TRANSACTION_TYPES)
            + ")",
            name="ck_point_txn_type_valid",
        ),
        sa.UniqueConstraint(
            "transaction_type",
            "reference_id",
            name="uq_point_txn_type_reference",
        ),
    )
    op.create_index(
        "ix_point_transactions_user_id", "point_transactions", ["user_id"]
    )


def downgrade() -> None:
    op.drop_index("ix_point_transactions_user_id", table_name="point_transactions")
    op.drop_table("point_transactions")
    op.drop_table("settings")
    op.drop_table("users")
