# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""FastAPI dependency injection definitions.

This module provides dependency functions for FastAPI endpoints.
Dependencies are used to:
- Get database sessions
- Get the application-wide settings, vocabulary and narrative generator
- Get service instances

The settings, vocabulary and narrative generator are stored on
``app.state`` by the application factory, so tests can inject their own
by passing them to ``create_app``.

Example:
    @router.get("/streaks/{student_id}")
    async def get_streak(
        student_id: str,
        db: AsyncSession = Depends(get_db),
    ):
        ...
"""

from typing import AsyncGenerator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.config import Settings
from src.core.intelligence.narrative import NarrativeGenerator
from src.core.wellbeing import WellbeingVocabulary
from src.domains.analytics import WellbeingAnalyticsService
from src.domains.wellbeing import EmotionSubmissionService, StreakService
from src.infrastructure.database.connection import get_session


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Get a database session.

    The session commits when the request succeeds and rolls back when it
    raises.

    Yields:
        AsyncSession for the wellbeing database.
    """
    async with get_session() as session:
        yield session


def get_app_settings(request: Request) -> Settings:
    """Get the settings the application was created with."""
    return request.app.state.settings


def get_vocabulary(request: Request) -> WellbeingVocabulary:
    """Get the wellbeing vocabulary loaded at startup."""
    return request.app.state.vocabulary


def get_narrative_generator(request: Request) -> NarrativeGenerator:
    """Get the narrative generator configured at startup."""
    return request.app.state.narrative_generator


def get_submission_service(
    db: AsyncSession = Depends(get_db),
    vocabulary: WellbeingVocabulary = Depends(get_vocabulary),
    settings: Settings = Depends(get_app_settings),
) -> EmotionSubmissionService:
    """Get emotion submission service instance.

    Args:
        db: Database session.
        vocabulary: Accepted mood tags.
        settings: Application settings.

    Returns:
        Configured EmotionSubmissionService instance.
    """
    return EmotionSubmissionService(db, vocabulary, settings.wellbeing)


def get_streak_service(db: AsyncSession = Depends(get_db)) -> StreakService:
    """Get streak service instance."""
    return StreakService(db)


def get_analytics_service(
    db: AsyncSession = Depends(get_db),
    generator: NarrativeGenerator = Depends(get_narrative_generator),
    vocabulary: WellbeingVocabulary = Depends(get_vocabulary),
    settings: Settings = Depends(get_app_settings),
) -> WellbeingAnalyticsService:
    """Get wellbeing analytics service instance.

    Args:
        db: Database session.
        generator: Narrative generator.
        vocabulary: Mood tags and danger keywords.
        settings: Application settings.

    Returns:
        Configured WellbeingAnalyticsService instance.
    """
    return WellbeingAnalyticsService(db, generator, vocabulary, settings)
