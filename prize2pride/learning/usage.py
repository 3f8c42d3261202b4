"""Daily usage metering for subscription tiers.

Usage counters roll over at midnight UTC. Every read and write treats a
counter whose reset date lies before today as zero; only the write-side
helpers return a state with the rollover applied.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date, datetime, timezone
from typing import Optional, Union

from .errors import InvalidInputError, LimitExceededError
from .tiers import UNLIMITED, SubscriptionTier, limit_for, meets_tier


REASON_INSUFFICIENT_TIER = "insufficient tier"
REASON_DAILY_LIMIT = "daily limit reached"


@dataclass(frozen=True, slots=True)
class SubscriptionUsageState:
    tier: SubscriptionTier = SubscriptionTier.FREEMIUM
    daily_usage_minutes: int = 0
    last_usage_reset_date: Optional[date] = None


@dataclass(frozen=True, slots=True)
class UsageStatus:
    tier: SubscriptionTier
    used_minutes_today: int
    remaining_minutes: int
    is_unlimited: bool
    limit: int


@dataclass(frozen=True, slots=True)
class AccessDecision:
    """Outcome of an access check, detailed enough to render a message."""

    allowed: bool
    reason: Optional[str] = None
    remaining_minutes: Optional[int] = None
    daily_limit: Optional[int] = None
    required_tier: Optional[SubscriptionTier] = None
    current_tier: Optional[SubscriptionTier] = None


def usage_day(now: datetime) -> date:
    """Return the UTC calendar day that ``now`` falls on."""
    if now.tzinfo is None:
        return now.date()
    return now.astimezone(timezone.utc).date()


def needs_reset(state: SubscriptionUsageState, now: datetime) -> bool:
    last_reset = state.last_usage_reset_date
    if isinstance(last_reset, datetime):
        last_reset = usage_day(last_reset)
    return last_reset is None or last_reset < usage_day(now)


def used_minutes_today(state: SubscriptionUsageState, now: datetime) -> int:
    if needs_reset(state, now):
        return 0
    return max(0, state.daily_usage_minutes)


def _remaining(limit: int, used: int) -> int:
    if limit == UNLIMITED:
        return UNLIMITED
    return max(0, limit - used)


def _validate_minutes(minutes: int, name: str) -> None:
    if isinstance(minutes, bool) or not isinstance(minutes, int):
        raise InvalidInputError(f"{name} must be an integer, got {minutes!r}")
    if minutes < 0:
        raise InvalidInputError(f"{name} must not be negative, got {minutes}")


def get_status(state: SubscriptionUsageState, now: datetime) -> UsageStatus:
    """Report today's usage without changing ``state``."""
    tier = SubscriptionTier.parse(state.tier)
    limit = limit_for(tier).daily_limit_minutes
    used = used_minutes_today(state, now)
    return UsageStatus(
        tier=tier,
        used_minutes_today=used,
        remaining_minutes=_remaining(limit, used),
        is_unlimited=limit == UNLIMITED,
        limit=limit,
    )


def check_access(
    state: SubscriptionUsageState,
    now: datetime,
    requested_minutes: int = 0,
    required_tier: Union[SubscriptionTier, str, None] = None,
) -> AccessDecision:
    """Decide whether ``requested_minutes`` of use may start now."""
    _validate_minutes(requested_minutes, "requested_minutes")
    tier = SubscriptionTier.parse(state.tier)

    if required_tier is not None:
        required = SubscriptionTier.parse(required_tier)
        if not meets_tier(tier, required):
            return AccessDecision(
                allowed=False,
                reason=REASON_INSUFFICIENT_TIER,
                required_tier=required,
                current_tier=tier,
            )

    status = get_status(state, now)
    if not status.is_unlimited and status.used_minutes_today + requested_minutes > status.limit:
        return AccessDecision(
            allowed=False,
            reason=REASON_DAILY_LIMIT,
            remaining_minutes=status.remaining_minutes,
            daily_limit=status.limit,
            current_tier=tier,
        )

    return AccessDecision(
        allowed=True,
        remaining_minutes=status.remaining_minutes,
        daily_limit=status.limit,
        current_tier=tier,
    )


def reset_if_needed(state: SubscriptionUsageState, now: datetime) -> SubscriptionUsageState:
    """Return ``state`` with the daily counter rolled over when a new day began."""
    if not needs_reset(state, now):
        return state
    return replace(state, daily_usage_minutes=0, last_usage_reset_date=usage_day(now))


def log_usage(state: SubscriptionUsageState, now: datetime, minutes: int) -> SubscriptionUsageState:
    """Return the state after consuming ``minutes`` today.

    Raises :class:`LimitExceededError` when the tier's cap would be crossed; the
    given state is left untouched in every case.
    """
    _validate_minutes(minutes, "minutes")
    status = get_status(state, now)
    if not status.is_unlimited and status.used_minutes_today + minutes > status.limit:
        raise LimitExceededError(
            remaining_minutes=status.remaining_minutes,
            daily_limit=status.limit,
            requested_minutes=minutes,
        )

    if needs_reset(state, now):
        return replace(
            state,
            tier=status.tier,
            daily_usage_minutes=minutes,
            last_usage_reset_date=usage_day(now),
        )
    return replace(
        state,
        tier=status.tier,
        daily_usage_minutes=max(0, state.daily_usage_minutes) + minutes,
    )
