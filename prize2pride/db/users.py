from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from prize2pride.learning.tiers import SubscriptionTier
from prize2pride.learning.usage import SubscriptionUsageState

from . import User


XP_PER_LEVEL = 500


@dataclass(slots=True)
class XpAward:
    """Experience totals after an award."""

    xp: int
    level: int
    leveled_up: bool


def level_for_xp(xp: int) -> int:
    return max(0, xp) // XP_PER_LEVEL + 1


async def get_user(session: AsyncSession, user_id: int, *, for_update: bool = False) -> Optional[User]:
    """Load a user, optionally locking the row for the rest of the transaction."""
    stmt = select(User).where(User.id == user_id)
    if for_update:
        stmt = stmt.with_for_update()
    result = await session.execute(stmt)
    return result.scalars().first()


async def get_or_create_user(
    session: AsyncSession,
    user_id: Optional[int] = None,
    name: Optional[str] = None,
    tier: SubscriptionTier = SubscriptionTier.FREEMIUM,
) -> User:
    """Fetch a user by id or create one with the given details."""
    if user_id is not None:
        user = await session.get(User, user_id)
        if user is not None:
            if name is not None and user.name != name:
                user.name = name
                user.updated_at = datetime.now(timezone.utc)
                await session.flush()
            return user

    now = datetime.now(timezone.utc)
    user = User(
        name=name,
        xp=0,
        level=1,
        subscription_tier=SubscriptionTier.parse(tier).value,
        subscription_status="active",
        daily_usage_minutes=0,
        last_usage_reset_date=None,
        created_at=now,
        updated_at=now,
    )
    if user_id is not None:
        user.id = user_id
    session.add(user)
    await session.flush()
    return user


async def award_xp(session: AsyncSession, user: User, amount: int) -> XpAward:
    """Add experience to a user and recompute their level."""
    previous_level = user.level
    user.xp = user.xp + amount
    user.level = level_for_xp(user.xp)
    user.updated_at = datetime.now(timezone.utc)
    await session.flush()
    return XpAward(xp=user.xp, level=user.level, leveled_up=user.level > previous_level)


async def set_subscription_tier(
    session: AsyncSession,
    user: User,
    tier: SubscriptionTier,
    status: str = "active",
    now: Optional[datetime] = None,
) -> None:
    """Move ``user`` to ``tier``; the daily usage counter is left as is."""
    user.subscription_tier = SubscriptionTier.parse(tier).value
    user.subscription_status = status
    user.updated_at = now or datetime.now(timezone.utc)
    await session.flush()


def to_usage_state(user: Optional[User]) -> SubscriptionUsageState:
    """Build the metering state for a user; unknown users start on freemium."""
    if user is None:
        return SubscriptionUsageState()
    return SubscriptionUsageState(
        tier=SubscriptionTier.parse(user.subscription_tier),
        daily_usage_minutes=user.daily_usage_minutes or 0,
        last_usage_reset_date=user.last_usage_reset_date,
    )


async def store_usage_state(session: AsyncSession, user: User, state: SubscriptionUsageState) -> None:
    """Persist the counters of ``state`` onto ``user``."""
    user.daily_usage_minutes = state.daily_usage_minutes
    user.last_usage_reset_date = state.last_usage_reset_date
    user.updated_at = datetime.now(timezone.utc)
    await session.flush()
