"""Flashcard review surface: load the schedule, apply a review, persist it."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from prize2pride.db.users import award_xp, get_user
from prize2pride.db.vocabulary import (
    add_vocabulary_to_user,
    get_due_user_vocabulary,
    get_user_vocabulary,
    record_vocabulary_review,
    to_review_state,
)
from prize2pride.learning.errors import NotInCollectionError, UserNotFoundError
from prize2pride.learning.srs import (
    DEFAULT_POLICY,
    PASSING_QUALITY,
    SchedulerPolicy,
    VocabularyReviewState,
    apply_review,
    validate_quality,
)


LOGGER = logging.getLogger(__name__)

DEFAULT_REVIEW_XP = 5


@dataclass(slots=True)
class ReviewOutcome:
    """Schedule produced by a review and the XP granted for it."""

    vocabulary_id: int
    state: VocabularyReviewState
    xp_awarded: int


@dataclass(slots=True)
class DueFlashcard:
    vocabulary_id: int
    word: str
    definition: str
    example: Optional[str]
    state: VocabularyReviewState


class FlashcardService:
    """Coordinates the review scheduler with vocabulary persistence."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        policy: SchedulerPolicy = DEFAULT_POLICY,
        review_xp_reward: int = DEFAULT_REVIEW_XP,
        due_limit: int = 20,
    ) -> None:
        self._session_factory = session_factory
        self._policy = policy
        self._review_xp_reward = review_xp_reward
        self._due_limit = due_limit

    async def add_to_collection(
        self,
        user_id: int,
        vocabulary_id: int,
        now: Optional[datetime] = None,
    ) -> bool:
        """Add a vocabulary entry to the user's flashcards; return True when new."""
        async with self._session_factory() as session:
            async with session.begin():
                _, created = await add_vocabulary_to_user(session, user_id, vocabulary_id, now=now)
        if created:
            LOGGER.info("User %s added vocabulary %s to their collection.", user_id, vocabulary_id)
        return created

    async def review_flashcard(
        self,
        user_id: int,
        vocabulary_id: int,
        quality: int,
        now: Optional[datetime] = None,
    ) -> ReviewOutcome:
        """Apply a quality rating to a flashcard and award XP for a passing review."""
        validate_quality(quality)
        if now is None:
            now = datetime.now(timezone.utc)

        async with self._session_factory() as session:
            async with session.begin():
                record = await get_user_vocabulary(session, user_id, vocabulary_id, for_update=True)
                if record is None:
                    LOGGER.warning(
                        "User %s reviewed vocabulary %s outside of their collection.",
                        user_id,
                        vocabulary_id,
                    )
                    raise NotInCollectionError(user_id, vocabulary_id)

                state = apply_review(to_review_state(record), quality, now, policy=self._policy)
                await record_vocabulary_review(session, record, state, quality)

                xp_awarded = 0
                if quality >= PASSING_QUALITY and self._review_xp_reward:
                    user = await get_user(session, user_id, for_update=True)
                    if user is None:
                        raise UserNotFoundError(user_id)
                    award = await award_xp(session, user, self._review_xp_reward)
                    xp_awarded = self._review_xp_reward
                    if award.leveled_up:
                        LOGGER.info("User %s reached level %s.", user_id, award.level)

        LOGGER.debug(
            "Reviewed vocabulary %s for user %s: quality=%s interval=%s status=%s",
            vocabulary_id,
            user_id,
            quality,
            state.interval_days,
            state.status.value,
        )
        return ReviewOutcome(vocabulary_id=vocabulary_id, state=state, xp_awarded=xp_awarded)

    async def get_due_flashcards(
        self,
        user_id: int,
        now: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> List[DueFlashcard]:
        async with self._session_factory() as session:
            records = await get_due_user_vocabulary(
                session,
                user_id,
                now=now,
                limit=limit or self._due_limit,
            )
            return [
                DueFlashcard(
                    vocabulary_id=record.vocabulary_id,
                    word=record.vocabulary.word,
                    definition=record.vocabulary.definition,
                    example=record.vocabulary.example,
                    state=to_review_state(record),
                )
                for record in records
            ]
