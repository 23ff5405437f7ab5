# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pytest configuration and shared fixtures.

This module provides fixtures used across all test types:
- Settings pointing at an in-memory SQLite database
- An engine and session built from the ORM metadata
- A seeded class with students and a milestone catalog
"""

from collections.abc import AsyncGenerator, Awaitable, Callable
from dataclasses import dataclass
from datetime import datetime

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from src.core.config.settings import (
    DatabaseSettings,
    NarrativeSettings,
    Settings,
    WellbeingSettings,
)
from src.core.wellbeing import WellbeingVocabulary
from src.infrastructure.database.connection import (
    create_engine_for_url,
    create_sessionmaker,
    create_tables,
)
from src.infrastructure.database.models import (
    EmotionRecord,
    Milestone,
    SchoolClass,
    Student,
)

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


# =============================================================================
# Marker Configuration
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test (in-memory database)"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture
def settings() -> Settings:
    """Provide settings for an in-memory database and a short narrative timeout."""
    return Settings(
        environment="development",
        debug=True,
        log_level="DEBUG",
        database=DatabaseSettings(url=TEST_DATABASE_URL, create_tables=True),
        narrative=NarrativeSettings(enabled=False, timeout=0.5),
        wellbeing=WellbeingSettings(timezone="UTC", submission_points=10),
    )


@pytest.fixture
def vocabulary() -> WellbeingVocabulary:
    """Provide the default wellbeing vocabulary."""
    return WellbeingVocabulary()


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture
async def engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create a fresh in-memory database with all tables."""
    engine = create_engine_for_url(TEST_DATABASE_URL)
    await create_tables(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Provide the session factory bound to the test engine."""
    return create_sessionmaker(engine)


@pytest.fixture
async def db_session(
    sessionmaker: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Provide a session; tests commit explicitly when they need to."""
    async with sessionmaker() as session:
        yield session


# =============================================================================
# Seed Data
# =============================================================================


@dataclass
class SeededSchool:
    """IDs of the seeded class, students and milestones."""

    class_id: str
    an_id: str
    binh_id: str
    chi_id: str
    milestone_3_id: str
    milestone_7_id: str
    milestone_5_id: str


@pytest.fixture
async def school(sessionmaker: async_sessionmaker[AsyncSession]) -> SeededSchool:
    """Seed class 7A with three students and a milestone catalog.

    Catalog: 3 days (+20 points), 7 days (+50 points) and an inactive
    5-day milestone.
    """
    async with sessionmaker() as session:
        school_class = SchoolClass(name="7A")
        session.add(school_class)
        await session.flush()

        an = Student(student_code="HS001", name="Nguyen Van An", class_id=school_class.id)
        binh = Student(student_code="HS002", name="Tran Thi Binh", class_id=school_class.id)
        chi = Student(student_code="HS003", name="Le Minh Chi", class_id=school_class.id)
        m3 = Milestone(
            name="3-day streak",
            description="Three days in a row",
            day_count=3,
            reward_points=20,
            reward_message="Great start!",
            display_order=1,
        )
        m5 = Milestone(
            name="5-day streak",
            description="Retired milestone",
            day_count=5,
            reward_points=30,
            is_active=False,
            display_order=2,
        )
        m7 = Milestone(
            name="7-day streak",
            description="A full week",
            day_count=7,
            reward_points=50,
            display_order=3,
        )
        session.add_all([an, binh, chi, m3, m5, m7])
        await session.commit()

        return SeededSchool(
            class_id=school_class.id,
            an_id=an.id,
            binh_id=binh.id,
            chi_id=chi.id,
            milestone_3_id=m3.id,
            milestone_7_id=m7.id,
            milestone_5_id=m5.id,
        )


@pytest.fixture
def add_emotions(
    sessionmaker: async_sessionmaker[AsyncSession],
) -> Callable[..., Awaitable[None]]:
    """Insert emotion records directly, bypassing the submission rules.

    Each row is (student_id, mood, submitted_at, message).
    """

    async def _add(*rows: tuple[str, str, datetime, str]) -> None:
        async with sessionmaker() as session:
            session.add_all(
                [
                    EmotionRecord(
                        student_id=student_id,
                        mood=mood,
                        submitted_at=submitted_at,
                        message=message,
                    )
                    for student_id, mood, submitted_at, message in rows
                ]
            )
            await session.commit()

    return _add
