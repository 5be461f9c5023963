"""Repository for point balances and ledger rows.

Provides database access for the point_transactions table and the balance
operations on the users table. Every balance mutation in the application
goes through this class.
"""

from typing import Any, cast

from sqlalchemy import exists, select, text
from sqlalchemy.engine import CursorResult
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.ledger import PointTransaction
from app.models.user import User


class LedgerRepository:
    """Stateless repository for PointTransaction and balance operations.

    All methods are static, with no instance state. Pass an AsyncSession
    for every call so the caller controls transaction boundaries.
    """

    @staticmethod
    async def get_balance(db: AsyncSession, user_id: int) -> int | None:
        """Read the user's current balance without locking.

        Args:
            db: Async database session.
            user_id: User to query balance for.

        Returns:
            Current balance, or None if the user does not exist.
        """
        stmt = select(User.balance).where(User.id == user_id)
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def lock_balance(db: AsyncSession, user_id: int) -> int | None:
        """Read the balance under a row-level exclusive lock.

        SELECT ... FOR UPDATE: concurrent lockers for the same user block
        until this transaction commits or rolls back.

        Args:
            db: Async database session (inside an open transaction).
            user_id: User row to lock.

        Returns:
            Current balance, or None if the user does not exist.
        """
        stmt = select(User.balance).where(User.id == user_id).with_for_update()
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def debit_locked(db: AsyncSession, *, user_id: int, amount: int) -> int:
        """Debit a balance whose row is already locked by this transaction.

        Args:
            db: Async database session holding the row lock.
            user_id: User to debit.
            amount: Points to remove (zero allowed).

        Returns:
            New balance after debiting.

        Raises:
            ValueError: If amount is negative.
        """
        if amount < 0:
            raise ValueError("debit amount must be non-negative")
        result = await db.execute(
            text(
                "UPDATE users SET balance = balance - :amount "
                "WHERE id = :user_id RETURNING balance"
            ),
            {"amount": amount, "user_id": user_id},
        )
        new_balance: int = result.scalar_one()
        return new_balance

    @staticmethod
    async def atomic_debit(
        db: AsyncSession,
        *,
        user_id: int,
        amount: int,
    ) -> int | None:
        """Atomically debit a balance without a prior lock.

        Uses WHERE balance >= amount to prevent overdraft.

        Args:
            db: Async database session.
            user_id: User to debit.
            amount: Points to remove (zero allowed).

        Returns:
            New balance, or None if the balance was insufficient (or the
            user does not exist).

        Raises:
            ValueError: If amount is negative.
        """
        if amount < 0:
            raise ValueError("atomic_debit amount must be non-negative")
        result = cast(
            CursorResult[Any],
            await db.execute(
                text(
                    "UPDATE users SET balance = balance - :amount "
                    "WHERE id = :user_id AND balance >= :amount "
                    "RETURNING balance"
                ),
                {"amount": amount, "user_id": user_id},
            ),
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def atomic_credit(
        db: AsyncSession,
        *,
        user_id: int,
        amount: int,
    ) -> int | None:
        """Atomically credit a user's balance.

        Args:
            db: Async database session.
            user_id: User to credit.
            amount: Points to add (zero allowed).

        Returns:
            New balance after crediting, or None if the user does not exist.

        Raises:
            ValueError: If amount is negative.
        """
        if amount < 0:
            raise ValueError("atomic_credit amount must be non-negative")
        result = await db.execute(
            text(
                "UPDATE users SET balance = balance + :amount "
                "WHERE id = :user_id RETURNING balance"
            ),
            {"amount": amount, "user_id": user_id},
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def record(
        db: AsyncSession,
        *,
        user_id: int,
        amount: int,
        transaction_type: str,
        reference_id: str | None = None,
        description: str | None = None,
    ) -> PointTransaction:
        """Append a ledger row.

        Args:
            db: Async database session.
            user_id: Account owner.
            amount: Signed amount (+credit, -debit).
            transaction_type: One of TRANSACTION_TYPES.
            reference_id: Links to source (Stripe session, debit id).
            description: Human-readable description.

        Returns:
            The pending PointTransaction (flushed).
        """
        txn = PointTransaction(
            user_id=user_id,
            amount=amount,
            transaction_type=transaction_type,
            reference_id=reference_id,
            description=description,
        )
        db.add(txn)
        await db.flush()
        return txn

    @staticmethod
    async def reference_exists(
        db: AsyncSession, *, transaction_type: str, reference_id: str
    ) -> bool:
        """Check whether a (type, reference) ledger row already exists.

        Used for webhook idempotency before attempting a purchase credit.
        """
        stmt = select(
            exists().where(
                PointTransaction.transaction_type == transaction_type,
                PointTransaction.reference_id == reference_id,
            )
        )
        result = await db.execute(stmt)
        return bool(result.scalar())
