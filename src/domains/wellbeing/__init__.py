# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Wellbeing domain package.

This package provides the student-facing check-in functionality:
- Emotion submission with the one-per-day guard and points
- Streak tracking and milestone awards
- Check-in history
"""

from src.domains.wellbeing.exceptions import (
    ClassNotFoundError,
    DuplicateSubmissionError,
    InvalidMoodError,
    StreakConflictError,
    StudentNotFoundError,
    WellbeingServiceError,
)
from src.domains.wellbeing.streak_service import StreakService
from src.domains.wellbeing.submission_service import EmotionSubmissionService

__all__ = [
    "EmotionSubmissionService",
    "StreakService",
    "WellbeingServiceError",
    "StudentNotFoundError",
    "ClassNotFoundError",
    "InvalidMoodError",
    "DuplicateSubmissionError",
    "StreakConflictError",
]
