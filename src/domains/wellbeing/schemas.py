# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Wellbeing API schemas.

Request/response schemas for emotion check-ins and streaks. Fields are
snake_case in Python and camelCase on the wire, matching what the
student and teacher dashboards consume.
"""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base schema serialised with camelCase keys."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# =============================================================================
# Check-ins
# =============================================================================


class EmotionSubmitRequest(CamelModel):
    """Request to record today's emotion."""

    student_id: str = Field(description="Submitting student ID")
    mood: str = Field(min_length=1, max_length=20, description="Mood tag")
    message: str | None = Field(
        default=None,
        max_length=1000,
        description="Optional free-text note; null and absent are stored as empty",
    )


class EmotionResponse(CamelModel):
    """A stored emotion check-in."""

    id: str = Field(description="Record ID")
    student_id: str = Field(description="Student ID")
    mood: str = Field(description="Mood tag")
    message: str = Field(description="Free-text note, empty when absent")
    submitted_at: datetime = Field(description="Submission time (UTC)")


class StreakSummary(CamelModel):
    """Streak counters after a submission."""

    current_streak: int = Field(description="Consecutive days with a check-in")
    longest_streak: int = Field(description="Best streak reached")
    total_submissions: int = Field(description="Check-ins counted by the streak")


class MilestoneAward(CamelModel):
    """Milestone awarded by a submission."""

    id: str = Field(description="Milestone ID")
    name: str = Field(description="Display name")
    description: str = Field(description="Display description")
    day_count: int = Field(description="Streak length that triggered it")
    icon: str = Field(description="Display icon")
    reward_points: int = Field(description="Points credited")
    reward_message: str = Field(default="", description="Congratulation message")


class EmotionSubmitResponse(CamelModel):
    """Result of a successful check-in."""

    message: str = Field(description="Confirmation shown to the student")
    emotion: EmotionResponse = Field(description="The stored check-in")
    points_earned: int = Field(description="Points credited by this check-in, rewards included")
    total_points: int = Field(description="Student point balance afterwards")
    streak: StreakSummary = Field(description="Updated streak counters")
    milestone_achieved: MilestoneAward | None = Field(
        default=None,
        description="Milestone newly awarded by this check-in",
    )


class TodayCheckResponse(CamelModel):
    """Whether the student has checked in today."""

    has_submitted_today: bool = Field(description="True once today's check-in exists")
    emotion: EmotionResponse | None = Field(default=None, description="Today's check-in")


class EmotionHistoryResponse(CamelModel):
    """Recent check-ins of one student, newest first."""

    student_id: str = Field(description="Student ID")
    emotions: list[EmotionResponse] = Field(description="Check-ins, newest first")
    total: int = Field(description="Number of check-ins returned")


# =============================================================================
# Streaks
# =============================================================================


class AchievedMilestoneResponse(CamelModel):
    """A milestone the student has achieved, with catalog display data."""

    milestone_id: str = Field(description="Milestone ID")
    name: str = Field(description="Display name")
    description: str = Field(description="Display description")
    day_count: int = Field(description="Streak length threshold")
    icon: str = Field(description="Display icon")
    color: str = Field(description="Display color")
    reward_points: int = Field(description="Points credited on award")
    achieved_at: datetime = Field(description="When it was awarded")


class StreakResponse(CamelModel):
    """Streak summary of one student."""

    student_id: str = Field(description="Student ID")
    current_streak: int = Field(description="Consecutive days with a check-in")
    longest_streak: int = Field(description="Best streak reached")
    total_submissions: int = Field(description="Check-ins counted by the streak")
    last_submission_day: date | None = Field(
        default=None,
        description="Calendar day of the latest counted check-in",
    )
    milestones_achieved: list[AchievedMilestoneResponse] = Field(
        default_factory=list,
        description="Achieved milestones, oldest first",
    )
