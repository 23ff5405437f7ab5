# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""ORM models for MoodPulse.

Importing this package registers every table on ``Base.metadata``.
"""

from src.infrastructure.database.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin
from src.infrastructure.database.models.school import SchoolClass, Student
from src.infrastructure.database.models.wellbeing import (
    EmotionRecord,
    Milestone,
    StreakMilestone,
    StudentStreak,
)

__all__ = [
    "Base",
    "TimestampMixin",
    "UUIDPrimaryKeyMixin",
    "SchoolClass",
    "Student",
    "EmotionRecord",
    "Milestone",
    "StreakMilestone",
    "StudentStreak",
]
