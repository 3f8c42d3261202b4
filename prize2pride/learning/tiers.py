"""Subscription tiers, their ranking and their daily usage allowances."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Union

from .errors import InvalidInputError


UNLIMITED = -1


class SubscriptionTier(str, Enum):
    FREEMIUM = "freemium"
    BRONZE = "bronze"
    SILVER = "silver"
    GOLD = "gold"
    DIAMOND = "diamond"
    VIP_MILLIONAIRE = "vip_millionaire"

    @classmethod
    def parse(cls, value: Union["SubscriptionTier", str, None]) -> "SubscriptionTier":
        """Coerce a stored tier name, falling back to freemium when unset."""
        if isinstance(value, cls):
            return value
        if not value:
            return cls.FREEMIUM
        try:
            return cls(value)
        except ValueError as exc:
            raise InvalidInputError(f"Unknown subscription tier: {value!r}") from exc


# Rank is explicit so reordering the enum can never change access rules.
TIER_RANK: Mapping[SubscriptionTier, int] = {
    SubscriptionTier.FREEMIUM: 0,
    SubscriptionTier.BRONZE: 1,
    SubscriptionTier.SILVER: 2,
    SubscriptionTier.GOLD: 3,
    SubscriptionTier.DIAMOND: 4,
    SubscriptionTier.VIP_MILLIONAIRE: 5,
}


def tier_rank(tier: Union[SubscriptionTier, str, None]) -> int:
    return TIER_RANK[SubscriptionTier.parse(tier)]


def meets_tier(
    current: Union[SubscriptionTier, str, None],
    required: Union[SubscriptionTier, str, None],
) -> bool:
    """Return True when ``current`` ranks at or above ``required``."""
    return tier_rank(current) >= tier_rank(required)


@dataclass(frozen=True, slots=True)
class TierLimit:
    daily_limit_minutes: int

    @property
    def is_unlimited(self) -> bool:
        return self.daily_limit_minutes == UNLIMITED


TIER_LIMITS: Mapping[SubscriptionTier, TierLimit] = {
    SubscriptionTier.FREEMIUM: TierLimit(60),
    SubscriptionTier.BRONZE: TierLimit(480),
    SubscriptionTier.SILVER: TierLimit(960),
    SubscriptionTier.GOLD: TierLimit(UNLIMITED),
    SubscriptionTier.DIAMOND: TierLimit(UNLIMITED),
    SubscriptionTier.VIP_MILLIONAIRE: TierLimit(UNLIMITED),
}


def limit_for(tier: Union[SubscriptionTier, str, None]) -> TierLimit:
    return TIER_LIMITS[SubscriptionTier.parse(tier)]


@dataclass(frozen=True, slots=True)
class TierPackage:
    """Catalogue entry shown on the pricing page."""

    tier: SubscriptionTier
    daily_limit_minutes: int
    price_monthly: int
    price_yearly: int
    features: tuple[str, ...]

    @property
    def is_unlimited(self) -> bool:
        return self.daily_limit_minutes == UNLIMITED


_PRICING: Mapping[SubscriptionTier, tuple[int, int, tuple[str, ...]]] = {
    SubscriptionTier.FREEMIUM: (
        0,
        0,
        ("1 Hour Daily", "A1 Lessons", "Basic Vocabulary", "Community Forum"),
    ),
    SubscriptionTier.BRONZE: (
        5,
        50,
        ("8 Hours Daily", "A1-A2 Lessons", "Extended Vocabulary", "Progress Tracking"),
    ),
    SubscriptionTier.SILVER: (
        10,
        100,
        ("16 Hours Daily", "A1-B1 Lessons", "Full Vocabulary", "AI Conversations"),
    ),
    SubscriptionTier.GOLD: (
        50,
        500,
        ("Unlimited", "A1-B2 Lessons", "Premium Hosts", "Certificates"),
    ),
    SubscriptionTier.DIAMOND: (
        50,
        500,
        ("Unlimited", "All Lessons", "All 64 Hosts", "Extended Tutoring"),
    ),
    SubscriptionTier.VIP_MILLIONAIRE: (
        100,
        1000,
        ("Unlimited Everything", "Exclusive Content", "24/7 Support", "Gold Certificates"),
    ),
}


TIER_PACKAGES: Mapping[SubscriptionTier, TierPackage] = {
    tier: TierPackage(
        tier=tier,
        daily_limit_minutes=TIER_LIMITS[tier].daily_limit_minutes,
        price_monthly=monthly,
        price_yearly=yearly,
        features=features,
    )
    for tier, (monthly, yearly, features) in _PRICING.items()
}


def list_packages() -> list[TierPackage]:
    """Return every package ordered from the lowest to the highest tier."""
    return sorted(TIER_PACKAGES.values(), key=lambda package: TIER_RANK[package.tier])


def package_for(tier: Union[SubscriptionTier, str, None]) -> TierPackage:
    return TIER_PACKAGES[SubscriptionTier.parse(tier)]
