"""Subscription usage surface: access checks, usage logging and plan changes."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional, Union

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from prize2pride.db import UsageSession
from prize2pride.db.users import get_user, set_subscription_tier, store_usage_state, to_usage_state
from prize2pride.learning.errors import (
    InsufficientTierError,
    InvalidInputError,
    LimitExceededError,
    UserNotFoundError,
)
from prize2pride.learning.tiers import SubscriptionTier, TierPackage, list_packages, package_for
from prize2pride.learning.usage import (
    REASON_INSUFFICIENT_TIER,
    AccessDecision,
    UsageStatus,
    check_access,
    get_status,
    log_usage,
)


LOGGER = logging.getLogger(__name__)

SESSION_TYPES = frozenset({"lesson", "chat", "practice", "vocabulary"})
MIN_SESSION_MINUTES = 1
MAX_SESSION_MINUTES = 480


@dataclass(slots=True)
class SubscriptionOverview:
    """Current plan and today's usage for display."""

    tier: SubscriptionTier
    status: str
    usage: UsageStatus
    features: tuple[str, ...]

    @property
    def daily_limit_minutes(self) -> int:
        return self.usage.limit

    @property
    def remaining_minutes(self) -> int:
        return self.usage.remaining_minutes


@dataclass(slots=True)
class UsageLogResult:
    success: bool
    minutes_logged: int


def _validate_session(session_type: str, duration_minutes: int) -> None:
    if session_type not in SESSION_TYPES:
        raise InvalidInputError(
            f"Unknown session type {session_type!r}; expected one of {sorted(SESSION_TYPES)}."
        )
    if isinstance(duration_minutes, bool) or not isinstance(duration_minutes, int):
        raise InvalidInputError(f"durationMinutes must be an integer, got {duration_minutes!r}")
    if not MIN_SESSION_MINUTES <= duration_minutes <= MAX_SESSION_MINUTES:
        raise InvalidInputError(
            f"durationMinutes must be between {MIN_SESSION_MINUTES} and {MAX_SESSION_MINUTES}, "
            f"got {duration_minutes}."
        )


class SubscriptionService:
    """Applies the usage meter to persisted subscription state."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    @staticmethod
    def get_packages() -> List[TierPackage]:
        return list_packages()

    async def get_subscription(self, user_id: int, now: Optional[datetime] = None) -> SubscriptionOverview:
        """Return the user's plan and usage; never writes to the database."""
        if now is None:
            now = datetime.now(timezone.utc)

        async with self._session_factory() as session:
            user = await get_user(session, user_id)
            state = to_usage_state(user)
            status = user.subscription_status if user is not None else "active"

        usage = get_status(state, now)
        return SubscriptionOverview(
            tier=usage.tier,
            status=status,
            usage=usage,
            features=package_for(usage.tier).features,
        )

    async def check_access(
        self,
        user_id: int,
        now: Optional[datetime] = None,
        required_tier: Union[SubscriptionTier, str, None] = None,
        duration_minutes: Optional[int] = None,
    ) -> AccessDecision:
        if now is None:
            now = datetime.now(timezone.utc)

        async with self._session_factory() as session:
            user = await get_user(session, user_id)
            state = to_usage_state(user)

        return check_access(state, now, duration_minutes or 0, required_tier)

    async def require_access(
        self,
        user_id: int,
        required_tier: Union[SubscriptionTier, str, None] = None,
        duration_minutes: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> AccessDecision:
        """Like :meth:`check_access` but raise when access is denied."""
        decision = await self.check_access(
            user_id,
            now=now,
            required_tier=required_tier,
            duration_minutes=duration_minutes,
        )
        if decision.allowed:
            return decision
        if decision.reason == REASON_INSUFFICIENT_TIER:
            raise InsufficientTierError(decision.required_tier.value, decision.current_tier.value)
        raise LimitExceededError(
            remaining_minutes=decision.remaining_minutes,
            daily_limit=decision.daily_limit,
            requested_minutes=duration_minutes or 0,
        )

    async def log_usage(
        self,
        user_id: int,
        session_type: str,
        duration_minutes: int,
        lesson_id: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> UsageLogResult:
        """Charge ``duration_minutes`` against the user's daily allowance."""
        _validate_session(session_type, duration_minutes)
        if now is None:
            now = datetime.now(timezone.utc)

        async with self._session_factory() as session:
            async with session.begin():
                user = await get_user(session, user_id, for_update=True)
                if user is None:
                    raise UserNotFoundError(user_id)

                state = to_usage_state(user)
                try:
                    new_state = log_usage(state, now, duration_minutes)
                except LimitExceededError as exc:
                    LOGGER.info(
                        "Rejected %s minutes of %s for user %s: %s minutes remaining of %s.",
                        duration_minutes,
                        session_type,
                        user_id,
                        exc.remaining_minutes,
                        exc.daily_limit,
                    )
                    raise

                await store_usage_state(session, user, new_state)
                session.add(
                    UsageSession(
                        user_id=user.id,
                        session_type=session_type,
                        duration_minutes=duration_minutes,
                        lesson_id=lesson_id,
                        logged_at=now,
                    )
                )
                await session.flush()

        LOGGER.debug(
            "Logged %s minutes of %s for user %s (%s today).",
            duration_minutes,
            session_type,
            user_id,
            new_state.daily_usage_minutes,
        )
        return UsageLogResult(success=True, minutes_logged=duration_minutes)

    async def change_tier(
        self,
        user_id: int,
        tier: Union[SubscriptionTier, str],
        now: Optional[datetime] = None,
    ) -> SubscriptionOverview:
        """Switch the user to ``tier`` and return the refreshed overview."""
        new_tier = SubscriptionTier.parse(tier)
        if now is None:
            now = datetime.now(timezone.utc)

        async with self._session_factory() as session:
            async with session.begin():
                user = await get_user(session, user_id, for_update=True)
                if user is None:
                    raise UserNotFoundError(user_id)
                previous = user.subscription_tier
                await set_subscription_tier(session, user, new_tier, now=now)

        LOGGER.info("User %s moved from %s to %s.", user_id, previous, new_tier.value)
        return await self.get_subscription(user_id, now=now)

    async def cancel_subscription(self, user_id: int, now: Optional[datetime] = None) -> None:
        """Mark a paid subscription as cancelled at the end of the billing period."""
        if now is None:
            now = datetime.now(timezone.utc)

        async with self._session_factory() as session:
            async with session.begin():
                user = await get_user(session, user_id, for_update=True)
                if user is None:
                    raise UserNotFoundError(user_id)
                if SubscriptionTier.parse(user.subscription_tier) is SubscriptionTier.FREEMIUM:
                    raise InvalidInputError("Cannot cancel free subscription")
                user.subscription_status = "cancelled"
                user.updated_at = now
                await session.flush()

        LOGGER.info("User %s cancelled their subscription.", user_id)
