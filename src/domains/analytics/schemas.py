# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Analytics API schemas.

Request/response schemas for the teacher-facing class overview, class
risk analysis and single-student analysis.
"""

from datetime import datetime

from pydantic import Field

from src.core.wellbeing import StudentRisk
from src.domains.wellbeing.schemas import CamelModel


class ClassAnalysisRequest(CamelModel):
    """Request for a class risk analysis."""

    class_id: str = Field(description="Class ID")
    days: int | None = Field(
        default=None,
        ge=1,
        description="Window length in days; 1 means today. Defaults to settings.",
    )


class DateRange(CamelModel):
    """Analysis window boundaries."""

    start: datetime = Field(description="Window start (UTC, inclusive)")
    end: datetime = Field(description="Window end (UTC, exclusive)")


class ConcerningStudentResponse(CamelModel):
    """Risk signals of one student."""

    student_id: str = Field(description="Student ID")
    name: str = Field(description="Student display name")
    risk_level: str = Field(description="low, medium, high or critical")
    risk_score: float = Field(description="Risk score, nominally 0-100")
    negative_ratio: float = Field(description="Percentage of negative check-ins")
    consecutive_negative_days: int = Field(description="Longest run of negative days")
    has_dangerous_keywords: bool = Field(description="Danger keyword in a message")
    dangerous_messages: list[str] = Field(description="Messages with danger keywords")
    total_emotions: int = Field(description="Check-ins in the window")

    @classmethod
    def from_student_risk(cls, risk: StudentRisk) -> "ConcerningStudentResponse":
        """Build from a labelled risk assessment."""
        a = risk.assessment
        return cls(
            student_id=risk.student_id,
            name=risk.name,
            risk_level=a.risk_level.value,
            risk_score=a.risk_score,
            negative_ratio=a.negative_ratio,
            consecutive_negative_days=a.consecutive_negative_days,
            has_dangerous_keywords=a.has_dangerous_keyword,
            dangerous_messages=list(a.dangerous_messages),
            total_emotions=a.window_emotions,
        )


class NarrativeFields(CamelModel):
    """Narrative text merged into an analysis response."""

    summary: str = Field(default="", description="Narrative summary, empty when unavailable")
    insights: list[str] = Field(default_factory=list, description="Observed patterns")
    suggestions: list[str] = Field(default_factory=list, description="Suggested actions")
    narrative_available: bool = Field(
        default=False,
        description="True only when the text came from the narrative generator",
    )
    note: str | None = Field(
        default=None,
        description="Why the narrative is missing, when it is",
    )


class ClassAnalysisResponse(NarrativeFields):
    """Class risk analysis with optional narrative."""

    class_id: str = Field(description="Class ID")
    class_name: str = Field(description="Class name")
    period_days: int = Field(description="Window length in days")
    date_range: DateRange = Field(description="Window boundaries")
    total_submissions: int = Field(description="Check-ins in the window")
    emotion_distribution: dict[str, int] = Field(description="Mood tag -> count")
    emotion_percentages: dict[str, float] = Field(description="Mood tag -> percentage")
    concerning_students: list[ConcerningStudentResponse] = Field(
        description="Students needing attention, highest risk first",
    )


class DailyMoodCounts(CamelModel):
    """Mood counts of one calendar day."""

    date: str = Field(description="Day key, YYYY-MM-DD")
    counts: dict[str, int] = Field(description="Mood tag -> count")
    total: int = Field(description="Check-ins that day")


class StudentSubmissionStatus(CamelModel):
    """Whether a student checked in today."""

    student_id: str = Field(description="Student ID")
    name: str = Field(description="Student display name")
    submitted: bool = Field(description="True if checked in today")
    mood: str | None = Field(default=None, description="Today's mood, if any")


class RecentEmotion(CamelModel):
    """A check-in shown in the class feed."""

    id: str = Field(description="Record ID")
    student_id: str = Field(description="Student ID")
    student_name: str = Field(description="Student display name")
    mood: str = Field(description="Mood tag")
    message: str = Field(description="Free-text note")
    submitted_at: datetime = Field(description="Submission time (UTC)")


class ClassOverviewResponse(CamelModel):
    """Class mood overview for the teacher dashboard."""

    class_id: str = Field(description="Class ID")
    class_name: str = Field(description="Class name")
    period_days: int = Field(description="Window length in days")
    date_range: DateRange = Field(description="Window boundaries")
    total_students: int = Field(description="Students in the class")
    total_emotions: int = Field(description="Check-ins in the window")
    emotion_distribution: dict[str, int] = Field(description="Mood tag -> count")
    daily_trends: list[DailyMoodCounts] = Field(description="Per-day counts, oldest first")
    submission_status: list[StudentSubmissionStatus] = Field(
        description="Today's check-in status per student",
    )
    submitted_today: int = Field(description="Students who checked in today")
    recent_emotions: list[RecentEmotion] = Field(description="Latest check-ins, newest first")


class StudentAnalysisResponse(NarrativeFields):
    """Single-student analysis with optional narrative."""

    student_id: str = Field(description="Student ID")
    name: str = Field(description="Student display name")
    period_days: int = Field(description="Window length in days")
    date_range: DateRange = Field(description="Window boundaries")
    total_submissions: int = Field(description="Check-ins in the window")
    emotion_distribution: dict[str, int] = Field(description="Mood tag -> count")
    emotion_percentages: dict[str, float] = Field(description="Mood tag -> percentage")
    daily_breakdown: list[DailyMoodCounts] = Field(description="Per-day counts, oldest first")
    risk: ConcerningStudentResponse = Field(description="Risk assessment of the student")
