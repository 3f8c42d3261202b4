"""Configuration helpers for the Prize2Pride runtime."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Optional

from prize2pride.learning.srs import DEFAULT_EASE_FACTOR, MIN_EASE_FACTOR, SchedulerPolicy


DEFAULT_MASTERY_INTERVAL_DAYS = 21
DEFAULT_MASTERY_REPETITIONS = 4
DEFAULT_REVIEW_XP_REWARD = 5
DEFAULT_DUE_FLASHCARDS_LIMIT = 20


def _int_from_env(name: str, default: int, minimum: int) -> int:
    raw = os.getenv(name, str(default))
    try:
        value = int(raw)
    except ValueError as exc:
        raise RuntimeError(f"{name} must be an integer.") from exc
    if value < minimum:
        raise RuntimeError(f"{name} must be at least {minimum}.")
    return value


def _max_ease_from_env() -> Optional[int]:
    raw = os.getenv("MAX_EASE_FACTOR", str(DEFAULT_EASE_FACTOR)).strip().lower()
    if raw in {"", "none", "unbounded"}:
        return None
    return _int_from_env("MAX_EASE_FACTOR", DEFAULT_EASE_FACTOR, MIN_EASE_FACTOR)


@dataclass(frozen=True)
class AppSettings:
    """Strongly typed application settings loaded from environment variables."""

    app_name: str
    app_env: str
    log_level: str
    mastery_interval_days: int
    mastery_repetitions: int
    max_ease_factor: Optional[int]
    review_xp_reward: int
    due_flashcards_limit: int

    @classmethod
    def from_env(cls) -> AppSettings:
        """Construct settings directly from environment variables."""
        return cls(
            app_name=os.getenv("APP_NAME", "Prize2Pride"),
            app_env=os.getenv("APP_ENV", "development"),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            mastery_interval_days=_int_from_env("MASTERY_INTERVAL_DAYS", DEFAULT_MASTERY_INTERVAL_DAYS, 1),
            mastery_repetitions=_int_from_env("MASTERY_REPETITIONS", DEFAULT_MASTERY_REPETITIONS, 1),
            max_ease_factor=_max_ease_from_env(),
            review_xp_reward=_int_from_env("REVIEW_XP_REWARD", DEFAULT_REVIEW_XP_REWARD, 0),
            due_flashcards_limit=_int_from_env("DUE_FLASHCARDS_LIMIT", DEFAULT_DUE_FLASHCARDS_LIMIT, 1),
        )

    def scheduler_policy(self) -> SchedulerPolicy:
        return SchedulerPolicy(
            max_ease_factor=self.max_ease_factor,
            mastery_interval_days=self.mastery_interval_days,
            mastery_repetitions=self.mastery_repetitions,
        )
