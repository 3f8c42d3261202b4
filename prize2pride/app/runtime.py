"""Bootstrap logic for wiring the learning services."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from prize2pride.app.settings import AppSettings
from prize2pride.db import get_session_factory, run_migrations_if_needed
from prize2pride.services import FlashcardService, SubscriptionService


LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class Runtime:
    settings: AppSettings
    session_factory: async_sessionmaker[AsyncSession]
    flashcards: FlashcardService
    subscriptions: SubscriptionService


def _configure_logging(log_level: str) -> None:
    """Set up project-wide logging configuration."""
    logging.basicConfig(
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        level=log_level,
    )


def build_runtime(
    settings: AppSettings,
    session_factory: async_sessionmaker[AsyncSession],
) -> Runtime:
    """Create the services around an existing session factory."""
    return Runtime(
        settings=settings,
        session_factory=session_factory,
        flashcards=FlashcardService(
            session_factory,
            policy=settings.scheduler_policy(),
            review_xp_reward=settings.review_xp_reward,
            due_limit=settings.due_flashcards_limit,
        ),
        subscriptions=SubscriptionService(session_factory),
    )


def bootstrap(
    settings: AppSettings,
    session_factory: Optional[async_sessionmaker[AsyncSession]] = None,
) -> Runtime:
    """Configure logging, migrate the schema and return ready-to-use services."""
    _configure_logging(settings.log_level)

    try:
        run_migrations_if_needed()
    except Exception:
        LOGGER.exception("Database migrations failed. Aborting startup.")
        raise

    runtime = build_runtime(settings, session_factory or get_session_factory())
    LOGGER.info("%s services ready in %s mode.", settings.app_name, settings.app_env)
    return runtime
