"""Authentication and user schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from app.models.user import User


class RegisterRequest(BaseModel):
    """Request body for POST /auth/register."""

    model_config = ConfigDict(extra="forbid")

    username: str = Field(min_length=3, max_length=50, pattern=r"^[A-Za-z0-9_.-]+$")
    email: EmailStr
    password: str = Field(min_length=8, max_length=128)
    country: str | None = Field(None, max_length=100)
    referral_code: str | None = Field(None, max_length=16)


class LoginRequest(BaseModel):
    """Request body for POST /auth/login.

    Attributes:
        identifier: Username or email.
        password: Plain-text password.
    """

    model_config = ConfigDict(extra="forbid")

    identifier: str = Field(min_length=1, max_length=255)
    password: str = Field(min_length=1, max_length=128)


class UserPublic(BaseModel):
    """User fields safe to return to the account owner."""

    id: int
    username: str
    email: str
    country: str | None
    balance: int
    is_admin: bool
    status: str
    referral_code: str
    referrals: int
    last_reward_claim: datetime | None
    created_at: datetime

    @classmethod
    def from_user(cls, user: User) -> "UserPublic":
        """Build from an ORM row (never exposes password_hash)."""
        return cls(
            id=user.id,
            username=user.username,
            email=user.email,
            country=user.country,
            balance=user.balance,
            is_admin=user.is_admin,
            status=user.status,
            referral_code=user.referral_code,
            referrals=user.referrals,
            last_reward_claim=user.last_reward_claim,
            created_at=user.created_at,
        )


class AuthResponse(BaseModel):
    """Token + profile returned by register and login."""

    token: str
    user: UserPublic


class RewardResponse(BaseModel):
    """Response for POST /rewards/daily."""

    awarded: int
    balance: int
    next_claim_at: datetime
