# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Wellbeing core for MoodPulse.

Pure, storage-independent rules:
- RiskClassifier: check-in history -> risk level and score
- record_submission: streak state transition and milestone award
- WellbeingVocabulary: injectable mood tags and danger keywords

Example:
    from src.core.wellbeing import RiskClassifier, load_vocabulary

    classifier = RiskClassifier(load_vocabulary())
    assessment = classifier.classify(student_id, history)
"""

from src.core.wellbeing.constants import (
    DEFAULT_DANGER_KEYWORDS,
    DEFAULT_MOOD_TAGS,
    DEFAULT_NEGATIVE_MOODS,
    RISK_LEVEL_PRIORITY,
    MoodTag,
    RiskLevel,
    RiskThresholds,
)
from src.core.wellbeing.context import (
    AchievedMilestone,
    EmotionSubmission,
    MilestoneRule,
    RiskAssessment,
    StreakState,
    StreakUpdate,
    StudentRisk,
)
from src.core.wellbeing.risk import (
    RiskClassifier,
    consecutive_negative_days,
    dangerous_messages,
    decide_risk,
    negative_ratio,
)
from src.core.wellbeing.streak import (
    advance_streak,
    award_milestone,
    find_milestone,
    record_submission,
)
from src.core.wellbeing.vocabulary import (
    VocabularyError,
    WellbeingVocabulary,
    load_vocabulary,
)

__all__ = [
    # Constants
    "MoodTag",
    "RiskLevel",
    "RiskThresholds",
    "RISK_LEVEL_PRIORITY",
    "DEFAULT_MOOD_TAGS",
    "DEFAULT_NEGATIVE_MOODS",
    "DEFAULT_DANGER_KEYWORDS",
    # Context
    "EmotionSubmission",
    "RiskAssessment",
    "MilestoneRule",
    "AchievedMilestone",
    "StreakState",
    "StreakUpdate",
    "StudentRisk",
    # Risk
    "RiskClassifier",
    "negative_ratio",
    "dangerous_messages",
    "consecutive_negative_days",
    "decide_risk",
    # Streak
    "advance_streak",
    "award_milestone",
    "find_milestone",
    "record_submission",
    # Vocabulary
    "WellbeingVocabulary",
    "VocabularyError",
    "load_vocabulary",
]
