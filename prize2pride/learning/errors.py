"""Exceptions raised by the scheduling and usage-metering core."""

from __future__ import annotations

from typing import Optional


class Prize2PrideError(Exception):
    """Base class for recoverable learning-core errors."""


class InvalidInputError(Prize2PrideError, ValueError):
    """Raised when an argument is outside the accepted domain."""


class LimitExceededError(Prize2PrideError):
    """Raised when logging usage would exceed the tier's daily cap."""

    def __init__(self, remaining_minutes: int, daily_limit: int, requested_minutes: int) -> None:
        self.remaining_minutes = remaining_minutes
        self.daily_limit = daily_limit
        self.requested_minutes = requested_minutes
        super().__init__(f"Daily limit exceeded. You have {remaining_minutes} minutes remaining.")


class InsufficientTierError(Prize2PrideError):
    """Raised when tier-gated content is requested by a lower tier."""

    def __init__(self, required_tier: str, current_tier: str) -> None:
        self.required_tier = required_tier
        self.current_tier = current_tier
        super().__init__(f"This content requires {required_tier} subscription or higher")


class NotInCollectionError(Prize2PrideError, LookupError):
    """Raised when a user reviews a vocabulary item missing from their collection."""

    def __init__(self, user_id: int, vocabulary_id: int) -> None:
        self.user_id = user_id
        self.vocabulary_id = vocabulary_id
        super().__init__(f"Vocabulary {vocabulary_id} is not in the collection of user {user_id}.")


class UserNotFoundError(Prize2PrideError, LookupError):
    """Raised when an operation needs a persisted user that does not exist."""

    def __init__(self, user_id: Optional[int]) -> None:
        self.user_id = user_id
        super().__init__(f"User {user_id} not found.")
