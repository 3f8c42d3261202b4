from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest

from prize2pride.learning.errors import InvalidInputError, LimitExceededError
from prize2pride.learning.tiers import (
    TIER_LIMITS,
    TIER_RANK,
    UNLIMITED,
    SubscriptionTier,
    list_packages,
    meets_tier,
    tier_rank,
)
from prize2pride.learning.usage import (
    REASON_DAILY_LIMIT,
    REASON_INSUFFICIENT_TIER,
    SubscriptionUsageState,
    check_access,
    get_status,
    log_usage,
    reset_if_needed,
    usage_day,
)


NOW = datetime(2026, 3, 10, 15, 30, tzinfo=timezone.utc)
TODAY = date(2026, 3, 10)
YESTERDAY = date(2026, 3, 9)

UNLIMITED_TIERS = [SubscriptionTier.GOLD, SubscriptionTier.DIAMOND, SubscriptionTier.VIP_MILLIONAIRE]


def test_tier_limits_table() -> None:
    assert {tier.value: limit.daily_limit_minutes for tier, limit in TIER_LIMITS.items()} == {
        "freemium": 60,
        "bronze": 480,
        "silver": 960,
        "gold": -1,
        "diamond": -1,
        "vip_millionaire": -1,
    }


def test_tier_ranking_is_explicit() -> None:
    ordered = sorted(TIER_RANK, key=TIER_RANK.__getitem__)

    assert [tier.value for tier in ordered] == [
        "freemium",
        "bronze",
        "silver",
        "gold",
        "diamond",
        "vip_millionaire",
    ]
    assert tier_rank("silver") == 2
    assert meets_tier(SubscriptionTier.DIAMOND, SubscriptionTier.GOLD)
    assert meets_tier("gold", "gold")
    assert not meets_tier("bronze", "silver")


def test_unknown_tier_is_rejected_and_missing_tier_defaults_to_freemium() -> None:
    assert SubscriptionTier.parse(None) is SubscriptionTier.FREEMIUM
    assert SubscriptionTier.parse("") is SubscriptionTier.FREEMIUM
    with pytest.raises(InvalidInputError):
        SubscriptionTier.parse("platinum")


def test_packages_are_listed_in_rank_order() -> None:
    packages = list_packages()

    assert [package.tier for package in packages] == sorted(TIER_RANK, key=TIER_RANK.__getitem__)
    assert packages[0].price_monthly == 0
    assert packages[-1].price_yearly == 1000
    assert [package.is_unlimited for package in packages] == [False, False, False, True, True, True]


def test_usage_day_uses_utc_calendar() -> None:
    eastern = timezone(timedelta(hours=-5))

    assert usage_day(datetime(2026, 3, 10, 23, 30, tzinfo=eastern)) == date(2026, 3, 11)
    assert usage_day(datetime(2026, 3, 10, 23, 30)) == date(2026, 3, 10)


def test_status_for_usage_logged_today() -> None:
    state = SubscriptionUsageState(SubscriptionTier.FREEMIUM, 25, TODAY)

    status = get_status(state, NOW)

    assert status.used_minutes_today == 25
    assert status.remaining_minutes == 35
    assert status.limit == 60
    assert status.is_unlimited is False


@pytest.mark.parametrize("stored_minutes", [0, 59, 60, 5000])
def test_stale_counter_reads_as_zero(stored_minutes: int) -> None:
    state = SubscriptionUsageState(SubscriptionTier.FREEMIUM, stored_minutes, YESTERDAY)

    status = get_status(state, NOW)

    assert status.used_minutes_today == 0
    assert status.remaining_minutes == 60
    assert state.daily_usage_minutes == stored_minutes


def test_missing_reset_date_reads_as_zero() -> None:
    state = SubscriptionUsageState(SubscriptionTier.BRONZE, 300, None)

    assert get_status(state, NOW).used_minutes_today == 0


def test_remaining_minutes_never_negative() -> None:
    state = SubscriptionUsageState(SubscriptionTier.FREEMIUM, 75, TODAY)

    assert get_status(state, NOW).remaining_minutes == 0


def test_get_status_is_idempotent() -> None:
    state = SubscriptionUsageState(SubscriptionTier.SILVER, 100, YESTERDAY)

    assert get_status(state, NOW) == get_status(state, NOW)
    assert state == SubscriptionUsageState(SubscriptionTier.SILVER, 100, YESTERDAY)


def test_bronze_limit_blocks_check_and_log() -> None:
    state = SubscriptionUsageState(SubscriptionTier.BRONZE, 470, TODAY)

    decision = check_access(state, NOW, requested_minutes=20)
    assert decision.allowed is False
    assert decision.reason == REASON_DAILY_LIMIT
    assert decision.remaining_minutes == 10
    assert decision.daily_limit == 480

    with pytest.raises(LimitExceededError) as excinfo:
        log_usage(state, NOW, 20)

    assert excinfo.value.remaining_minutes == 10
    assert excinfo.value.daily_limit == 480
    assert excinfo.value.requested_minutes == 20
    assert "10 minutes remaining" in str(excinfo.value)
    assert state == SubscriptionUsageState(SubscriptionTier.BRONZE, 470, TODAY)


def test_usage_up_to_the_limit_is_allowed() -> None:
    state = SubscriptionUsageState(SubscriptionTier.BRONZE, 470, TODAY)

    assert check_access(state, NOW, requested_minutes=10).allowed is True
    assert log_usage(state, NOW, 10).daily_usage_minutes == 480


@pytest.mark.parametrize("tier", UNLIMITED_TIERS)
def test_unlimited_tiers_always_allow(tier: SubscriptionTier) -> None:
    state = SubscriptionUsageState(tier, 100_000, TODAY)

    decision = check_access(state, NOW, requested_minutes=10_000)
    status = get_status(state, NOW)

    assert decision.allowed is True
    assert status.is_unlimited is True
    assert status.remaining_minutes == UNLIMITED
    assert status.limit == UNLIMITED
    assert log_usage(state, NOW, 480).daily_usage_minutes == 100_480


def test_insufficient_tier_is_denied_before_usage_check() -> None:
    state = SubscriptionUsageState(SubscriptionTier.FREEMIUM, 0, TODAY)

    decision = check_access(state, NOW, requested_minutes=5, required_tier="silver")

    assert decision.allowed is False
    assert decision.reason == REASON_INSUFFICIENT_TIER
    assert decision.required_tier is SubscriptionTier.SILVER
    assert decision.current_tier is SubscriptionTier.FREEMIUM


def test_higher_tier_passes_tier_gate() -> None:
    state = SubscriptionUsageState(SubscriptionTier.GOLD, 0, TODAY)

    assert check_access(state, NOW, required_tier=SubscriptionTier.SILVER).allowed is True
    assert check_access(state, NOW, required_tier=SubscriptionTier.GOLD).allowed is True


def test_check_access_uses_virtual_reset() -> None:
    state = SubscriptionUsageState(SubscriptionTier.FREEMIUM, 60, YESTERDAY)

    assert check_access(state, NOW, requested_minutes=60).allowed is True


def test_log_usage_after_reset_sets_instead_of_adding() -> None:
    state = SubscriptionUsageState(SubscriptionTier.FREEMIUM, 55, YESTERDAY)

    logged = log_usage(state, NOW, 10)

    assert logged.daily_usage_minutes == 10
    assert logged.last_usage_reset_date == TODAY
    assert state.daily_usage_minutes == 55


def test_log_usage_on_same_day_adds() -> None:
    state = SubscriptionUsageState(SubscriptionTier.SILVER, 100, TODAY)

    logged = log_usage(state, NOW, 30)

    assert logged.daily_usage_minutes == 130
    assert logged.last_usage_reset_date == TODAY


@pytest.mark.parametrize("tier", [SubscriptionTier.FREEMIUM, SubscriptionTier.BRONZE])
@pytest.mark.parametrize("reset_date", [TODAY, YESTERDAY])
def test_check_access_and_log_usage_agree(tier: SubscriptionTier, reset_date: date) -> None:
    limit = TIER_LIMITS[tier].daily_limit_minutes
    for used in range(0, limit + 20, limit // 6):
        for requested in range(0, limit + 20, limit // 4):
            state = SubscriptionUsageState(tier, used, reset_date)
            allowed = check_access(state, NOW, requested_minutes=requested).allowed
            try:
                log_usage(state, NOW, requested)
            except LimitExceededError:
                logged = False
            else:
                logged = True
            assert allowed is logged, (tier, reset_date, used, requested)


@pytest.mark.parametrize("minutes", [-1, 1.5, True])
def test_invalid_minutes_are_rejected(minutes) -> None:
    state = SubscriptionUsageState(SubscriptionTier.FREEMIUM, 0, TODAY)

    with pytest.raises(InvalidInputError):
        log_usage(state, NOW, minutes)
    with pytest.raises(InvalidInputError):
        check_access(state, NOW, requested_minutes=minutes)


def test_reset_if_needed_rolls_counter_over() -> None:
    stale = SubscriptionUsageState(SubscriptionTier.BRONZE, 400, YESTERDAY)
    current = SubscriptionUsageState(SubscriptionTier.BRONZE, 400, TODAY)

    assert reset_if_needed(stale, NOW) == SubscriptionUsageState(SubscriptionTier.BRONZE, 0, TODAY)
    assert reset_if_needed(current, NOW) is current


def test_midnight_boundary_starts_a_new_day() -> None:
    state = SubscriptionUsageState(SubscriptionTier.FREEMIUM, 60, TODAY)
    last_minute = datetime(2026, 3, 10, 23, 59, tzinfo=timezone.utc)
    midnight = datetime(2026, 3, 11, 0, 0, tzinfo=timezone.utc)

    assert check_access(state, last_minute, requested_minutes=1).allowed is False
    assert check_access(state, midnight, requested_minutes=1).allowed is True


def test_reset_timestamp_counts_on_its_utc_day() -> None:
    # 23:00 in UTC-5 on the 10th is already the 11th in UTC.
    reset_at = datetime(2026, 3, 10, 23, 0, tzinfo=timezone(timedelta(hours=-5)))
    state = SubscriptionUsageState(SubscriptionTier.FREEMIUM, 50, reset_at)
    now = datetime(2026, 3, 11, 10, 0, tzinfo=timezone.utc)

    assert get_status(state, now).used_minutes_today == 50
    assert reset_if_needed(state, now) is state
