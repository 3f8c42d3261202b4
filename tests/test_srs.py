from __future__ import annotations

from dataclasses import replace
from datetime import datetime, timedelta, timezone

import pytest

from prize2pride.learning.errors import InvalidInputError
from prize2pride.learning.srs import (
    SchedulerPolicy,
    VocabularyReviewState,
    VocabularyStatus,
    apply_review,
    ease_adjustment,
    get_due_items,
    new_review_state,
)


NOW = datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)


def _state(**overrides) -> VocabularyReviewState:
    return replace(new_review_state(NOW), **overrides)


def test_new_review_state_defaults() -> None:
    state = new_review_state(NOW)

    assert state.ease_factor == 250
    assert state.ease == 2.5
    assert state.interval_days == 1
    assert state.repetitions == 0
    assert state.status is VocabularyStatus.NEW
    assert state.last_reviewed_at is None
    assert state.next_review_date == NOW


def test_ease_adjustment_matches_sm2_in_hundredths() -> None:
    assert [ease_adjustment(q) for q in range(6)] == [-80, -54, -32, -14, 0, 10]


def test_three_easy_reviews_follow_interval_progression() -> None:
    state = new_review_state(NOW)
    intervals = []
    for _ in range(3):
        state = apply_review(state, 5, NOW)
        intervals.append(state.interval_days)

    assert intervals == [1, 6, 15]
    assert state.repetitions == 3


def test_review_scenario_success_then_failure() -> None:
    state = new_review_state(NOW)

    state = apply_review(state, 5, NOW)
    assert (state.interval_days, state.repetitions, state.status) == (1, 1, VocabularyStatus.LEARNING)
    assert state.next_review_date == NOW + timedelta(days=1)

    day_one = NOW + timedelta(days=1)
    state = apply_review(state, 5, day_one)
    assert (state.interval_days, state.repetitions, state.status) == (6, 2, VocabularyStatus.REVIEW)
    assert state.next_review_date == day_one + timedelta(days=6)
    ease_before_failure = state.ease_factor

    day_seven = NOW + timedelta(days=7)
    state = apply_review(state, 2, day_seven)
    assert (state.interval_days, state.repetitions, state.status) == (1, 0, VocabularyStatus.LEARNING)
    assert state.ease_factor < ease_before_failure
    assert state.ease_factor == 218
    assert state.last_reviewed_at == day_seven


@pytest.mark.parametrize("quality", [0, 1, 2])
def test_failed_review_resets_progress(quality: int) -> None:
    state = _state(ease_factor=230, interval_days=40, repetitions=6, status=VocabularyStatus.MASTERED)

    reviewed = apply_review(state, quality, NOW)

    assert reviewed.repetitions == 0
    assert reviewed.interval_days == 1
    assert reviewed.status is VocabularyStatus.LEARNING
    assert reviewed.ease_factor == 230 + ease_adjustment(quality)
    assert reviewed.next_review_date == NOW + timedelta(days=1)


def test_ease_never_drops_below_floor() -> None:
    state = new_review_state(NOW)
    for day in range(30):
        state = apply_review(state, day % 3, NOW + timedelta(days=day))
        assert state.ease_factor >= 130

    assert state.ease_factor == 130


def test_good_review_lowers_ease_but_keeps_progress() -> None:
    state = _state(ease_factor=250, interval_days=6, repetitions=2, status=VocabularyStatus.REVIEW)

    reviewed = apply_review(state, 3, NOW)

    assert reviewed.repetitions == 3
    assert reviewed.interval_days == 15
    assert reviewed.ease_factor == 236


def test_interval_grows_with_previous_ease() -> None:
    state = _state(ease_factor=236, interval_days=15, repetitions=3, status=VocabularyStatus.REVIEW)

    reviewed = apply_review(state, 4, NOW)

    assert reviewed.interval_days == 35  # round(15 * 2.36) = 35.4
    assert reviewed.ease_factor == 236


def test_half_intervals_round_up() -> None:
    state = _state(ease_factor=250, interval_days=15, repetitions=3, status=VocabularyStatus.REVIEW)

    assert apply_review(state, 4, NOW).interval_days == 38


def test_unbounded_policy_lets_ease_grow() -> None:
    policy = SchedulerPolicy(max_ease_factor=None)
    state = new_review_state(NOW)
    for _ in range(3):
        state = apply_review(state, 5, NOW, policy=policy)

    assert state.ease_factor == 280
    assert state.interval_days == 16  # round(6 * 2.7)


def test_item_is_mastered_after_long_interval_and_enough_repetitions() -> None:
    state = new_review_state(NOW)
    statuses = []
    for _ in range(4):
        state = apply_review(state, 5, NOW)
        statuses.append(state.status)

    assert statuses == [
        VocabularyStatus.LEARNING,
        VocabularyStatus.REVIEW,
        VocabularyStatus.REVIEW,
        VocabularyStatus.MASTERED,
    ]
    assert state.interval_days == 38


def test_mastery_thresholds_are_configurable() -> None:
    policy = SchedulerPolicy(mastery_interval_days=10, mastery_repetitions=3)
    state = new_review_state(NOW)
    for _ in range(3):
        state = apply_review(state, 5, NOW, policy=policy)

    assert state.status is VocabularyStatus.MASTERED


def test_success_never_downgrades_status() -> None:
    state = _state(ease_factor=250, interval_days=60, repetitions=1, status=VocabularyStatus.MASTERED)

    reviewed = apply_review(state, 4, NOW)

    assert reviewed.status is VocabularyStatus.MASTERED


def test_corrupted_interval_is_clamped() -> None:
    state = _state(ease_factor=250, interval_days=0, repetitions=3, status=VocabularyStatus.REVIEW)

    reviewed = apply_review(state, 4, NOW)

    assert reviewed.interval_days == 3  # round(1 * 2.5), halves up
    assert reviewed.interval_days >= 1


def test_apply_review_does_not_mutate_input() -> None:
    state = new_review_state(NOW)
    snapshot = replace(state)

    apply_review(state, 5, NOW)

    assert state == snapshot


def test_apply_review_is_deterministic_for_same_inputs() -> None:
    state = _state(ease_factor=210, interval_days=9, repetitions=4, status=VocabularyStatus.REVIEW)

    assert apply_review(state, 3, NOW) == apply_review(state, 3, NOW)


@pytest.mark.parametrize("quality", [-1, 6, 2.5, True, "5"])
def test_invalid_quality_is_rejected(quality) -> None:
    with pytest.raises(InvalidInputError):
        apply_review(new_review_state(NOW), quality, NOW)


def test_get_due_items_orders_most_overdue_first() -> None:
    tomorrow = _state(next_review_date=NOW + timedelta(days=1))
    yesterday = _state(next_review_date=NOW - timedelta(days=1))
    three_days_ago = _state(next_review_date=NOW - timedelta(days=3))

    due = get_due_items([tomorrow, yesterday, three_days_ago], NOW)

    assert due == [three_days_ago, yesterday]


def test_get_due_items_includes_items_due_exactly_now() -> None:
    exactly_now = _state(next_review_date=NOW, repetitions=1)
    later = _state(next_review_date=NOW + timedelta(seconds=1))

    assert get_due_items([later, exactly_now], NOW) == [exactly_now]


def test_get_due_items_keeps_input_order_for_equal_due_dates() -> None:
    first = _state(next_review_date=NOW - timedelta(hours=1), repetitions=1)
    second = _state(next_review_date=NOW - timedelta(hours=1), repetitions=2)

    assert get_due_items([first, second], NOW) == [first, second]
    assert get_due_items([second, first], NOW) == [second, first]


def test_get_due_items_accepts_naive_timestamps_as_utc() -> None:
    naive = _state(next_review_date=datetime(2026, 3, 2, 8, 0))

    assert get_due_items([naive], NOW) == [naive]
