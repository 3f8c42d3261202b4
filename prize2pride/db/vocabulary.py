"""Helpers for persisting vocabulary collections and their review schedules."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from prize2pride.learning.errors import InvalidInputError
from prize2pride.learning.srs import VocabularyReviewState, VocabularyStatus, new_review_state

from . import UserVocabulary, Vocabulary, VocabularyReview


PROFICIENCY_LEVELS = ("A1", "A2", "B1", "B2", "C1", "C2")


def _as_utc(moment: Optional[datetime]) -> Optional[datetime]:
    if moment is None:
        return None
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


async def create_vocabulary(
    session: AsyncSession,
    word: str,
    definition: str,
    example: Optional[str] = None,
    level: str = "A1",
) -> Vocabulary:
    """Insert a shared vocabulary entry."""
    if level not in PROFICIENCY_LEVELS:
        raise InvalidInputError(f"Unknown proficiency level: {level!r}")
    vocabulary = Vocabulary(
        word=word.strip(),
        definition=definition.strip(),
        example=example.strip() if isinstance(example, str) else example,
        level=level,
        created_at=datetime.now(timezone.utc),
    )
    session.add(vocabulary)
    await session.flush()
    return vocabulary


async def get_user_vocabulary(
    session: AsyncSession,
    user_id: int,
    vocabulary_id: int,
    *,
    for_update: bool = False,
) -> Optional[UserVocabulary]:
    stmt = select(UserVocabulary).where(
        UserVocabulary.user_id == user_id,
        UserVocabulary.vocabulary_id == vocabulary_id,
    )
    if for_update:
        stmt = stmt.with_for_update()
    result = await session.execute(stmt)
    return result.scalars().first()


async def add_vocabulary_to_user(
    session: AsyncSession,
    user_id: int,
    vocabulary_id: int,
    now: Optional[datetime] = None,
) -> tuple[UserVocabulary, bool]:
    """Attach a vocabulary entry to a user's collection unless already present."""
    if now is None:
        now = datetime.now(timezone.utc)

    existing = await get_user_vocabulary(session, user_id, vocabulary_id)
    if existing is not None:
        return existing, False

    state = new_review_state(now)
    record = UserVocabulary(
        user_id=user_id,
        vocabulary_id=vocabulary_id,
        ease_factor=state.ease_factor,
        interval=state.interval_days,
        repetitions=state.repetitions,
        next_review_at=state.next_review_date,
        last_reviewed_at=None,
        status=state.status.value,
        created_at=now,
        updated_at=now,
    )
    session.add(record)
    await session.flush()
    return record, True


async def list_user_vocabulary(session: AsyncSession, user_id: int) -> Sequence[UserVocabulary]:
    stmt = (
        select(UserVocabulary)
        .options(selectinload(UserVocabulary.vocabulary))
        .where(UserVocabulary.user_id == user_id)
        .order_by(UserVocabulary.created_at, UserVocabulary.id)
    )
    result = await session.execute(stmt)
    return result.scalars().all()


async def get_due_user_vocabulary(
    session: AsyncSession,
    user_id: int,
    now: Optional[datetime] = None,
    limit: int = 20,
) -> Sequence[UserVocabulary]:
    """Return the user's due items, most overdue first."""
    if now is None:
        now = datetime.now(timezone.utc)

    stmt = (
        select(UserVocabulary)
        .options(selectinload(UserVocabulary.vocabulary))
        .where(UserVocabulary.user_id == user_id, UserVocabulary.next_review_at <= now)
        .order_by(UserVocabulary.next_review_at, UserVocabulary.id)
        .limit(limit)
    )
    result = await session.execute(stmt)
    return result.scalars().all()


def to_review_state(record: UserVocabulary) -> VocabularyReviewState:
    return VocabularyReviewState(
        ease_factor=record.ease_factor,
        interval_days=record.interval,
        repetitions=record.repetitions,
        next_review_date=_as_utc(record.next_review_at),
        last_reviewed_at=_as_utc(record.last_reviewed_at),
        status=VocabularyStatus(record.status),
    )


async def record_vocabulary_review(
    session: AsyncSession,
    record: UserVocabulary,
    state: VocabularyReviewState,
    quality: int,
) -> None:
    """Persist the outcome of a review together with a history entry."""
    reviewed_at = state.last_reviewed_at or datetime.now(timezone.utc)

    record.ease_factor = state.ease_factor
    record.interval = state.interval_days
    record.repetitions = state.repetitions
    record.next_review_at = state.next_review_date
    record.last_reviewed_at = state.last_reviewed_at
    record.status = state.status.value
    record.updated_at = reviewed_at

    session.add(
        VocabularyReview(
            user_vocabulary_id=record.id,
            quality=quality,
            reviewed_at=reviewed_at,
        )
    )
    await session.flush()
