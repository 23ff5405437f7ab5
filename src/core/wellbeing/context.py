# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Wellbeing data structures.

These dataclasses are the storage-independent shapes exchanged between
the pure wellbeing core (risk classifier, streak engine) and the domain
services that load and persist them:
- EmotionSubmission: one check-in, input to the classifier
- RiskAssessment: classifier output, never persisted
- StreakState / MilestoneRule: streak engine input and output
"""

from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from typing import Any

from src.core.wellbeing.constants import (
    DEFAULT_MILESTONE_COLOR,
    DEFAULT_MILESTONE_ICON,
    RiskLevel,
)


@dataclass(frozen=True)
class EmotionSubmission:
    """A single emotion check-in.

    Attributes:
        student_id: The submitting student's ID.
        mood: Mood tag.
        submitted_at: When the check-in was stored (UTC).
        message: Optional free-text note, empty when absent.
        id: Record ID, if persisted.
    """

    student_id: str
    mood: str
    submitted_at: datetime
    message: str = ""
    id: str | None = None


@dataclass
class RiskAssessment:
    """Risk signals and classification for one student over a window.

    Attributes:
        student_id: The student's ID.
        window_emotions: Number of submissions in the window.
        negative_count: Submissions with a negative mood.
        negative_ratio: Percentage of negative submissions, 1 decimal.
        consecutive_negative_days: Longest run of negative days.
        has_dangerous_keyword: Whether any message matched a danger keyword.
        risk_level: Resulting level.
        risk_score: Resulting score. Nominally 0-100, high level may exceed it.
        dangerous_messages: Messages that matched a danger keyword.
    """

    student_id: str
    window_emotions: int = 0
    negative_count: int = 0
    negative_ratio: float = 0.0
    consecutive_negative_days: int = 0
    has_dangerous_keyword: bool = False
    risk_level: RiskLevel = RiskLevel.LOW
    risk_score: float = 0.0
    dangerous_messages: list[str] = field(default_factory=list)

    @property
    def is_concerning(self) -> bool:
        """Check whether the student should be surfaced to teachers."""
        return self.risk_level != RiskLevel.LOW

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-friendly dictionary."""
        data = asdict(self)
        data["risk_level"] = self.risk_level.value
        return data


@dataclass(frozen=True)
class MilestoneRule:
    """A catalog milestone as seen by the streak engine.

    Attributes:
        id: Milestone ID.
        day_count: Streak length that triggers the award.
        reward_points: Points credited on award.
        is_active: Inactive milestones are never awarded.
        display_order: Position in catalog listings.
        name: Display name.
        description: Display description.
        reward_message: Message shown when awarded.
        icon: Display icon.
        color: Display color.
    """

    id: str
    day_count: int
    reward_points: int = 0
    is_active: bool = True
    display_order: int = 0
    name: str = ""
    description: str = ""
    reward_message: str = ""
    icon: str = DEFAULT_MILESTONE_ICON
    color: str = DEFAULT_MILESTONE_COLOR


@dataclass(frozen=True)
class AchievedMilestone:
    """A milestone a student has been awarded."""

    milestone_id: str
    achieved_at: datetime


@dataclass(frozen=True)
class StreakState:
    """Consecutive-day submission state of one student.

    Invariants: longest_streak >= current_streak, and each milestone ID
    appears at most once in achieved_milestones.

    Attributes:
        student_id: The student's ID.
        current_streak: Consecutive calendar days with a submission.
        longest_streak: Best current_streak ever reached.
        last_submission_day: Calendar day of the latest counted submission.
        total_submissions: Submissions counted by the engine.
        achieved_milestones: Awarded milestones, oldest first.
    """

    student_id: str
    current_streak: int = 0
    longest_streak: int = 0
    last_submission_day: date | None = None
    total_submissions: int = 0
    achieved_milestones: tuple[AchievedMilestone, ...] = ()

    @property
    def achieved_ids(self) -> frozenset[str]:
        """IDs of all awarded milestones."""
        return frozenset(m.milestone_id for m in self.achieved_milestones)

    def has_milestone(self, milestone_id: str) -> bool:
        """Check whether a milestone was already awarded."""
        return milestone_id in self.achieved_ids


@dataclass(frozen=True)
class StreakUpdate:
    """Result of recording one submission in the streak engine.

    Attributes:
        state: The new streak state.
        awarded_milestone: Milestone awarded by this submission, if any.
        advanced: False when the submission fell on the already-counted day.
    """

    state: StreakState
    awarded_milestone: MilestoneRule | None = None
    advanced: bool = True


@dataclass
class StudentRisk:
    """A risk assessment labelled with the student's display name."""

    student_id: str
    name: str
    assessment: RiskAssessment

    def to_dict(self) -> dict[str, Any]:
        """Flatten into a single JSON-friendly dictionary."""
        return {"name": self.name, **self.assessment.to_dict()}
