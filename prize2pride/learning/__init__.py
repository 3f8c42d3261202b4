"""Pure scheduling and usage-metering logic for the Prize2Pride platform."""

from .errors import (
    InsufficientTierError,
    InvalidInputError,
    LimitExceededError,
    NotInCollectionError,
    Prize2PrideError,
    UserNotFoundError,
)
from .srs import (
    DEFAULT_POLICY,
    SchedulerPolicy,
    VocabularyReviewState,
    VocabularyStatus,
    apply_review,
    get_due_items,
    new_review_state,
)
from .tiers import TIER_LIMITS, UNLIMITED, SubscriptionTier, TierLimit, list_packages
from .usage import (
    AccessDecision,
    SubscriptionUsageState,
    UsageStatus,
    check_access,
    get_status,
    log_usage,
    reset_if_needed,
)

__all__ = [
    "AccessDecision",
    "DEFAULT_POLICY",
    "InsufficientTierError",
    "InvalidInputError",
    "LimitExceededError",
    "NotInCollectionError",
    "Prize2PrideError",
    "SchedulerPolicy",
    "SubscriptionTier",
    "SubscriptionUsageState",
    "TIER_LIMITS",
    "TierLimit",
    "UNLIMITED",
    "UsageStatus",
    "UserNotFoundError",
    "VocabularyReviewState",
    "VocabularyStatus",
    "apply_review",
    "check_access",
    "get_due_items",
    "get_status",
    "list_packages",
    "log_usage",
    "new_review_state",
    "reset_if_needed",
]
