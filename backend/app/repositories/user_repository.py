"""Repository for User operations.

Provides database access for the users table. Balance columns are not
written here; LedgerRepository owns them.
"""

from datetime import datetime

from sqlalchemy import or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import User


class UserRepository:
    """Stateless repository for User table operations.

    All methods are static, with no instance state. Pass an AsyncSession
    for every call so the caller controls transaction boundaries.
    """

    @staticmethod
    async def get_by_id(db: AsyncSession, user_id: int) -> User | None:
        """Fetch a user by primary key.

        Args:
            db: Async database session.
            user_id: Numeric primary key.

        Returns:
            User if found, None otherwise.
        """
        return await db.get(User, user_id)

    @staticmethod
    async def get_by_identifier(db: AsyncSession, identifier: str) -> User | None:
        """Fetch a user by username or email.

        Args:
            db: Async database session.
            identifier: Username or email address.

        Returns:
            User if found, None otherwise.
        """
        stmt = select(User).where(
            or_(User.username == identifier, User.email == identifier.lower())
        )
        result = await db.execute(stmt)
        return result.scalars().first()

    @staticmethod
    async def find_conflict(
        db: AsyncSession, *, username: str, email: str
    ) -> User | None:
        """Return an existing user sharing the username or email, if any."""
        stmt = select(User).where(
            or_(User.username == username, User.email == email.lower())
        )
        result = await db.execute(stmt)
        return result.scalars().first()

    @staticmethod
    async def get_by_referral_code(db: AsyncSession, code: str) -> User | None:
        """Fetch the owner of a referral code (case-insensitive).

        Args:
            db: Async database session.
            code: Referral code supplied at registration.

        Returns:
            User if found, None otherwise.
        """
        stmt = select(User).where(User.referral_code == code.upper())
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def create(
        db: AsyncSession,
        *,
        username: str,
        email: str,
        password_hash: str,
        referral_code: str,
        country: str | None = None,
    ) -> User:
        """Create a new user with a zero balance.

        Email is normalized to lowercase before storage. The starting
        balance is granted afterwards through the ledger so it is recorded.

        Returns:
            Created User with database-generated fields.
        """
        user = User(
            username=username,
            email=email.lower(),
            password_hash=password_hash,
            referral_code=referral_code,
            country=country,
            balance=0,
        )
        db.add(user)
        await db.flush()
        await db.refresh(user)
        return user

    @staticmethod
    async def increment_referrals(db: AsyncSession, user_id: int) -> None:
        """Bump a referrer's successful referral counter."""
        await db.execute(
            update(User)
            .where(User.id == user_id)
            .values(referrals=User.referrals + 1)
        )

    @staticmethod
    async def get_for_update(db: AsyncSession, user_id: int) -> User | None:
        """Fetch a user under a row-level exclusive lock.

        Args:
            db: Async database session (inside an open transaction).
            user_id: Numeric primary key.

        Returns:
            User if found, None otherwise.
        """
        stmt = (
            select(User)
            .where(User.id == user_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def set_last_reward_claim(
        db: AsyncSession, user_id: int, claimed_at: datetime
    ) -> None:
        """Record when the daily reward was granted."""
        await db.execute(
            update(User).where(User.id == user_id).values(last_reward_claim=claimed_at)
        )
