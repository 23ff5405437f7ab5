# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Constants for the wellbeing core.

This module defines the enums and thresholds used by the risk classifier
and the streak engine. Mood tags and danger keywords listed here are only
defaults: the active values come from WellbeingVocabulary, which may be
overridden from YAML.
"""

from enum import Enum


class MoodTag(str, Enum):
    """Mood categories a student picks when checking in."""

    HAPPY = "happy"
    NEUTRAL = "neutral"
    SAD = "sad"
    ANGRY = "angry"
    TIRED = "tired"


class RiskLevel(str, Enum):
    """Coarse wellbeing concern level derived from recent check-ins."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


# =============================================================================
# Thresholds
# =============================================================================

class RiskThresholds:
    """Thresholds and weights for the risk heuristic."""

    # High: either signal is enough
    CONSECUTIVE_DAYS_HIGH = 3
    NEGATIVE_RATIO_HIGH = 60.0

    # Medium
    NEGATIVE_RATIO_MEDIUM = 40.0
    CONSECUTIVE_DAYS_MEDIUM = 2

    # Scores
    CRITICAL_SCORE = 100.0
    HIGH_BASE_SCORE = 70.0
    HIGH_SCORE_PER_DAY = 5.0  # Not clamped at 100
    MEDIUM_BASE_SCORE = 40.0
    MEDIUM_RATIO_WEIGHT = 0.5
    LOW_SCORE = 0.0

    RATIO_DECIMALS = 1


# Ordering used when a list of assessments is grouped by level
RISK_LEVEL_PRIORITY = {
    RiskLevel.CRITICAL: 4,
    RiskLevel.HIGH: 3,
    RiskLevel.MEDIUM: 2,
    RiskLevel.LOW: 1,
}


# =============================================================================
# Default vocabulary
# =============================================================================

DEFAULT_MOOD_TAGS: tuple[str, ...] = tuple(tag.value for tag in MoodTag)

DEFAULT_NEGATIVE_MOODS: tuple[str, ...] = (
    MoodTag.SAD.value,
    MoodTag.ANGRY.value,
    MoodTag.TIRED.value,
)

# Phrases (Vietnamese) indicating self-harm, suicidal ideation or a wish to
# drop out of school. Matched case-insensitively as substrings.
DEFAULT_DANGER_KEYWORDS: tuple[str, ...] = (
    "tự tử",
    "tự hại",
    "không muốn sống",
    "muốn chết",
    "tự sát",
    "giết mình",
    "chán sống",
    "bỏ học",
    "bỏ đi",
    "ghét bản thân",
)


# =============================================================================
# Milestone display defaults
# =============================================================================

DEFAULT_MILESTONE_ICON = "🏆"
DEFAULT_MILESTONE_COLOR = "#FFD700"
