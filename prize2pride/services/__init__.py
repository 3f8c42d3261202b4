"""Application services that persist the learning core's decisions."""

from .flashcards import DueFlashcard, FlashcardService, ReviewOutcome
from .subscription import SubscriptionOverview, SubscriptionService, UsageLogResult

__all__ = [
    "DueFlashcard",
    "FlashcardService",
    "ReviewOutcome",
    "SubscriptionOverview",
    "SubscriptionService",
    "UsageLogResult",
]
