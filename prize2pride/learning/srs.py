"""Spaced-repetition scheduling for vocabulary flashcards (SM-2 family).

Ease factors are kept as integers multiplied by 100 so that repeated reviews
never accumulate floating point drift. The SM-2 ease adjustment
``0.1 - (5 - q) * (0.08 + (5 - q) * 0.02)`` becomes
``10 - (5 - q) * (8 + (5 - q) * 2)`` in that domain and stays exact.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Iterable, Mapping, Optional

from .errors import InvalidInputError


DEFAULT_EASE_FACTOR = 250
MIN_EASE_FACTOR = 130
MIN_QUALITY = 0
MAX_QUALITY = 5
PASSING_QUALITY = 3


class VocabularyStatus(str, Enum):
    NEW = "new"
    LEARNING = "learning"
    REVIEW = "review"
    MASTERED = "mastered"


_STATUS_RANK: Mapping[VocabularyStatus, int] = {
    VocabularyStatus.NEW: 0,
    VocabularyStatus.LEARNING: 1,
    VocabularyStatus.REVIEW: 2,
    VocabularyStatus.MASTERED: 3,
}


@dataclass(frozen=True, slots=True)
class SchedulerPolicy:
    """Tunable thresholds of the scheduler.

    The ease factor is capped at its starting value of 2.50 by default, which
    keeps three "Easy" reviews on intervals of 1, 6 and 15 days. Classic SM-2
    lets ease grow without bound and would give 16 for the third interval;
    pass ``max_ease_factor=None`` (or set ``MAX_EASE_FACTOR=none``) for that.
    """

    min_ease_factor: int = MIN_EASE_FACTOR
    max_ease_factor: Optional[int] = DEFAULT_EASE_FACTOR
    mastery_interval_days: int = 21
    mastery_repetitions: int = 4

    def clamp_ease(self, ease_factor: int) -> int:
        ease_factor = max(self.min_ease_factor, ease_factor)
        if self.max_ease_factor is not None:
            ease_factor = min(self.max_ease_factor, ease_factor)
        return ease_factor


DEFAULT_POLICY = SchedulerPolicy()


@dataclass(frozen=True, slots=True)
class VocabularyReviewState:
    """Scheduling state of one vocabulary item for one user."""

    ease_factor: int
    interval_days: int
    repetitions: int
    next_review_date: datetime
    last_reviewed_at: Optional[datetime] = None
    status: VocabularyStatus = VocabularyStatus.NEW

    @property
    def ease(self) -> float:
        """Ease factor as a real multiplier."""
        return self.ease_factor / 100

    def is_due(self, now: datetime) -> bool:
        return _as_utc(self.next_review_date) <= _as_utc(now)


def _as_utc(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def new_review_state(now: Optional[datetime] = None) -> VocabularyReviewState:
    """Return the state of an item freshly added to a user's collection."""
    if now is None:
        now = datetime.now(timezone.utc)
    return VocabularyReviewState(
        ease_factor=DEFAULT_EASE_FACTOR,
        interval_days=1,
        repetitions=0,
        next_review_date=now,
        last_reviewed_at=None,
        status=VocabularyStatus.NEW,
    )


def validate_quality(quality: int) -> int:
    if isinstance(quality, bool) or not isinstance(quality, int):
        raise InvalidInputError(f"Quality must be an integer between 0 and 5, got {quality!r}")
    if quality < MIN_QUALITY or quality > MAX_QUALITY:
        raise InvalidInputError(f"Quality must be between 0 and 5, got {quality}")
    return quality


def ease_adjustment(quality: int) -> int:
    """SM-2 ease delta for ``quality`` expressed in hundredths."""
    miss = MAX_QUALITY - quality
    return 10 - miss * (8 + miss * 2)


def _grown_interval(interval_days: int, ease_factor: int) -> int:
    # round(interval * ease / 100) with halves rounded up, in integers.
    return max(1, (interval_days * ease_factor + 50) // 100)


def _derived_status(repetitions: int, interval_days: int, policy: SchedulerPolicy) -> VocabularyStatus:
    if repetitions >= policy.mastery_repetitions and interval_days >= policy.mastery_interval_days:
        return VocabularyStatus.MASTERED
    if repetitions >= 2:
        return VocabularyStatus.REVIEW
    return VocabularyStatus.LEARNING


def apply_review(
    state: VocabularyReviewState,
    quality: int,
    now: Optional[datetime] = None,
    policy: SchedulerPolicy = DEFAULT_POLICY,
) -> VocabularyReviewState:
    """Return the scheduling state that follows a review rated ``quality``.

    Ratings below 3 reset the item to the learning phase. Ratings of 3 or more
    advance the repetition count and grow the interval: 1 day, then 6 days,
    then the previous interval times the ease factor.
    """
    validate_quality(quality)
    if now is None:
        now = datetime.now(timezone.utc)

    ease_factor = policy.clamp_ease(state.ease_factor)
    interval = max(1, state.interval_days)
    repetitions = max(0, state.repetitions)

    if quality < PASSING_QUALITY:
        repetitions = 0
        interval = 1
        status = VocabularyStatus.LEARNING
    else:
        repetitions += 1
        if repetitions == 1:
            interval = 1
        elif repetitions == 2:
            interval = 6
        else:
            interval = _grown_interval(interval, ease_factor)
        derived = _derived_status(repetitions, interval, policy)
        current = max(VocabularyStatus(state.status), VocabularyStatus.LEARNING, key=_STATUS_RANK.__getitem__)
        status = max(current, derived, key=_STATUS_RANK.__getitem__)

    ease_factor = policy.clamp_ease(ease_factor + ease_adjustment(quality))

    return replace(
        state,
        ease_factor=ease_factor,
        interval_days=interval,
        repetitions=repetitions,
        next_review_date=now + timedelta(days=interval),
        last_reviewed_at=now,
        status=status,
    )


def get_due_items(
    items: Iterable[VocabularyReviewState],
    now: Optional[datetime] = None,
) -> list[VocabularyReviewState]:
    """Return the items due at ``now``, most overdue first."""
    if now is None:
        now = datetime.now(timezone.utc)
    due = [item for item in items if item.is_due(now)]
    due.sort(key=lambda item: _as_utc(item.next_review_date))
    return due
