"""Ledger service: charge-and-run and balance credits.

Every balance mutation in the application goes through this module, and
each one appends a point_transactions row inside the same database
transaction (a rolled-back charge leaves no row behind).

Two charging strategies, both guaranteeing that after a metered call the
balance is either ``before - price`` (success) or ``before`` (any failure):

``lock`` (default):
    SELECT ... FOR UPDATE, check, debit, run the provider call while the
    row lock is held, then COMMIT on success or ROLLBACK on failure. The
    debit is never visible unless the call succeeded, and concurrent calls
    from the same user are totally ordered by the lock.

``compensate``:
    Conditional debit (``WHERE balance >= price``) committed in a short
    transaction, provider call outside any lock, compensating refund in a
    second transaction if the call fails. Shorter lock hold times, with a
    brief window where a reversible debit is visible.

The provider call is always bounded by ``timeout_seconds``; a timeout is
an ordinary failure and resolves to the "balance unchanged" end state.
"""

import asyncio
import logging
import uuid
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Generic, Literal, TypeVar

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.core.config import settings
from app.core.database import async_session_factory
from app.core.errors import InsufficientBalanceError, NotFoundError
from app.repositories.ledger_repository import LedgerRepository

logger = logging.getLogger(__name__)

T = TypeVar("T")

LedgerStrategy = Literal["lock", "compensate"]


@dataclass(frozen=True)
class ChargeOutcome(Generic[T]):
    """Result of a charge-and-run.

    Attributes:
        balance: Durable balance after the transaction resolved (post-debit
            on success, pre-debit on failure).
        result: Value returned by the work on success.
        error: Exception raised by the work (or its timeout) on failure.
    """

    balance: int
    result: T | None = None
    error: Exception | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


async def credit(
    db: AsyncSession,
    *,
    user_id: int,
    amount: int,
    transaction_type: str,
    reference_id: str | None = None,
    description: str | None = None,
) -> int:
    """Credit points inside the caller's transaction and record the row.

    Used by registration grants and daily rewards, whose surrounding
    transaction also touches the user row. The caller commits.

    Args:
        db: Async database session (caller owns the transaction).
        user_id: User to credit.
        amount: Points to add (zero allowed).
        transaction_type: Ledger row type (signup_grant, referral_bonus, ...).
        reference_id: Optional link to the source of the credit.
        description: Human-readable description.

    Returns:
        New balance.

    Raises:
        NotFoundError: If the user does not exist.
    """
    new_balance = await LedgerRepository.atomic_credit(
        db, user_id=user_id, amount=amount
    )
    if new_balance is None:
        raise NotFoundError("User", str(user_id))
    await LedgerRepository.record(
        db,
        user_id=user_id,
        amount=amount,
        transaction_type=transaction_type,
        reference_id=reference_id,
        description=description,
    )
    return new_balance


class LedgerService:
    """Owns charge transactions for metered calls and purchase credits.

    Args:
        session_factory: Factory for sessions owned by the service (each
            charge needs its own transaction, independent of the request's).
        strategy: "lock" or "compensate" (see module docstring).
        timeout_seconds: Upper bound on the wrapped provider call.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        *,
        strategy: LedgerStrategy = "lock",
        timeout_seconds: float = 120.0,
    ) -> None:
        if timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be positive")
        self._session_factory = session_factory
        self.strategy = strategy
        self.timeout_seconds = timeout_seconds

    async def charge_and_run(
        self,
        user_id: int,
        price: int,
        work: Callable[[], Awaitable[T]],
        *,
        description: str | None = None,
    ) -> ChargeOutcome[T]:
        """Debit ``price`` and run ``work``; keep the debit only on success.

        A price of 0 runs the same path (lock, check, zero debit, call).

        Args:
            user_id: User being charged.
            price: Non-negative resolved price.
            work: Zero-argument coroutine factory (the provider call).
            description: Ledger row description.

        Returns:
            ChargeOutcome with the resolved balance and either the work's
            result or its error.

        Raises:
            InsufficientBalanceError: Balance below price; nothing mutated
                and ``work`` never called.
            NotFoundError: User row does not exist.
            ValueError: Negative price.
        """
        if price < 0:
            raise ValueError("price must be non-negative")
        if self.strategy == "compensate":
            return await self._charge_compensating(user_id, price, work, description)
        return await self._charge_locked(user_id, price, work, description)

    async def _run(self, work: Callable[[], Awaitable[T]]) -> T:
        return await asyncio.wait_for(work(), timeout=self.timeout_seconds)

    async def _charge_locked(
        self,
        user_id: int,
        price: int,
        work: Callable[[], Awaitable[T]],
        description: str | None,
    ) -> ChargeOutcome[T]:
        # Cancellation propagates; leaving the session block rolls back.
        async with self._session_factory() as session:
            balance = await LedgerRepository.lock_balance(session, user_id)
            if balance is None:
                await session.rollback()
                raise NotFoundError("User", str(user_id))
            if balance < price:
                await session.rollback()
                raise InsufficientBalanceError(balance=balance, required=price)

            new_balance = await LedgerRepository.debit_locked(
                session, user_id=user_id, amount=price
            )
            await LedgerRepository.record(
                session,
                user_id=user_id,
                amount=-price,
                transaction_type="usage_debit",
                reference_id=str(uuid.uuid4()),
                description=description,
            )

            try:
                result = await self._run(work)
            except Exception as exc:
                await session.rollback()
                logger.info(
                    "Charge of %d rolled back for user %s (%s)",
                    price,
                    user_id,
                    type(exc).__name__,
                )
                return ChargeOutcome(balance=balance, error=exc)

            await session.commit()

        logger.info(
            "Charged %d points to user %s, balance %d", price, user_id, new_balance
        )
        return ChargeOutcome(balance=new_balance, result=result)

    async def _charge_compensating(
        self,
        user_id: int,
        price: int,
        work: Callable[[], Awaitable[T]],
        description: str | None,
    ) -> ChargeOutcome[T]:
        reference = str(uuid.uuid4())
        async with self._session_factory() as session:
            new_balance = await LedgerRepository.atomic_debit(
                session, user_id=user_id, amount=price
            )
            if new_balance is None:
                balance = await LedgerRepository.get_balance(session, user_id)
                await session.rollback()
                if balance is None:
                    raise NotFoundError("User", str(user_id))
                raise InsufficientBalanceError(balance=balance, required=price)
            await LedgerRepository.record(
                session,
                user_id=user_id,
                amount=-price,
                transaction_type="usage_debit",
                reference_id=reference,
                description=description,
            )
            await session.commit()

        try:
            result = await self._run(work)
        except asyncio.CancelledError:
            # Refund must complete even though this task is being cancelled.
            await asyncio.shield(self._refund(user_id, price, reference))
            raise
        except Exception as exc:
            restored = await self._refund(user_id, price, reference)
            return ChargeOutcome(balance=restored, error=exc)

        logger.info(
            "Charged %d points to user %s, balance %d", price, user_id, new_balance
        )
        return ChargeOutcome(balance=new_balance, result=result)

    async def _refund(self, user_id: int, price: int, reference: str) -> int:
        try:
            async with self._session_factory() as session:
                restored = await credit(
                    session,
                    user_id=user_id,
                    amount=price,
                    transaction_type="refund",
                    reference_id=reference,
                    description="Refund for failed generation",
                )
                await session.commit()
        except Exception:
            # The usage_debit row with this reference has no matching refund.
            logger.error(
                "Refund of %d points to user %s failed; debit %s is stranded",
                price,
                user_id,
                reference,
                exc_info=True,
            )
            raise

        logger.info(
            "Refunded %d points to user %s, balance %d", price, user_id, restored
        )
        return restored

    async def credit_purchase(
        self, user_id: int, points: int, session_id: str
    ) -> int | None:
        """Credit purchased points exactly once per checkout session.

        Idempotency key is the checkout session id, enforced by a unique
        (transaction_type, reference_id) constraint. A concurrent duplicate
        delivery loses the insert race and is rolled back.

        Args:
            user_id: Buyer.
            points: Points to credit.
            session_id: Stripe checkout session id.

        Returns:
            New balance, or None if this session was already credited.

        Raises:
            NotFoundError: If the user does not exist.
            ValueError: If points is negative.
        """
        if points < 0:
            raise ValueError("points must be non-negative")
        async with self._session_factory() as session:
            if await LedgerRepository.reference_exists(
                session, transaction_type="purchase", reference_id=session_id
            ):
                logger.warning("Duplicate purchase credit ignored: %s", session_id)
                return None
            try:
                new_balance = await credit(
                    session,
                    user_id=user_id,
                    amount=points,
                    transaction_type="purchase",
                    reference_id=session_id,
                    description=f"Purchase of {points} points",
                )
                await session.commit()
            except IntegrityError:
                await session.rollback()
                logger.warning("Duplicate purchase credit ignored: %s", session_id)
                return None

        logger.info(
            "Credited %d purchased points to user %s (session %s)",
            points,
            user_id,
            session_id,
        )
        return new_balance


_ledger_service: LedgerService | None = None


def get_ledger_service() -> LedgerService:
    """Get the process-wide ledger service."""
    global _ledger_service
    if _ledger_service is None:
        _ledger_service = LedgerService(
            async_session_factory,
            strategy=settings.ledger_strategy,
            timeout_seconds=settings.provider_timeout_seconds,
        )
    return _ledger_service


def reset_ledger_service() -> None:
    """Reset the ledger service singleton (for testing)."""
    global _ledger_service
    _ledger_service = None
