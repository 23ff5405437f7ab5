# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Wellbeing analytics service for teachers.

This service provides:
- Class overview: mood distribution, daily trends, today's check-in status
- Class analysis: risk report plus an optional narrative
- Student analysis: one student's risk, trend and optional narrative

The narrative generator is called with a hard timeout. Its failure never
fails the request: the structured statistics are returned with a note
explaining that the narrative is unavailable.

Usage:
    from src.domains.analytics import WellbeingAnalyticsService

    service = WellbeingAnalyticsService(db, generator, vocabulary, settings)
    analysis = await service.class_analysis(class_id, days=7)
"""

import asyncio
import logging
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession

from src.core.config.settings import Settings
from src.core.intelligence.narrative import (
    Narrative,
    NarrativeContext,
    NarrativeGenerator,
)
from src.core.wellbeing import RiskClassifier, StudentRisk, WellbeingVocabulary
from src.domains.analytics.risk_aggregator import (
    ClassRiskAggregator,
    ClassRiskReport,
    daily_breakdown,
    mood_percentages,
    sample_messages,
    tally_moods,
)
from src.domains.analytics.schemas import (
    ClassAnalysisResponse,
    ClassOverviewResponse,
    ConcerningStudentResponse,
    DailyMoodCounts,
    DateRange,
    NarrativeFields,
    RecentEmotion,
    StudentAnalysisResponse,
    StudentSubmissionStatus,
)
from src.domains.wellbeing.exceptions import StudentNotFoundError
from src.infrastructure.database.models import Student
from src.utils.datetime import get_zone, utc_now, window_bounds

logger = logging.getLogger(__name__)

NARRATIVE_UNAVAILABLE_NOTE = (
    "Narrative analysis is not available. The statistics below are complete."
)
NARRATIVE_FAILED_NOTE = (
    "Narrative analysis is temporarily unavailable. The statistics below are complete."
)
NO_CLASS_DATA_NOTE = "No emotion data to analyse for this period."
NO_CLASS_DATA_SUGGESTION = "Encourage students to share their feelings every day."
NO_STUDENT_DATA_SUGGESTION = "Encourage the student to share their feelings more often."

RECENT_EMOTIONS_LIMIT = 50
STUDENT_MESSAGE_SAMPLE = 15


class WellbeingAnalyticsService:
    """Service for teacher-facing wellbeing analytics.

    Attributes:
        db: Async database session.
    """

    def __init__(
        self,
        db: AsyncSession,
        narrative_generator: NarrativeGenerator,
        vocabulary: WellbeingVocabulary,
        settings: Settings,
    ) -> None:
        """Initialize the analytics service.

        Args:
            db: Async database session.
            narrative_generator: Source of narrative text.
            vocabulary: Mood tags and danger keywords.
            settings: Application settings.
        """
        self.db = db
        self._narrative = narrative_generator
        self._vocabulary = vocabulary
        self._narrative_timeout = settings.narrative.timeout
        self._classifier = RiskClassifier(vocabulary, get_zone(settings.wellbeing.timezone))
        self._aggregator = ClassRiskAggregator(db, self._classifier, settings.wellbeing)

    async def class_overview(
        self,
        class_id: str,
        days: int | None = None,
        now: datetime | None = None,
    ) -> ClassOverviewResponse:
        """Get a class mood overview.

        Args:
            class_id: Class ID.
            days: Window length; 1 means today.
            now: Reference time, defaults to utc_now().

        Returns:
            Distribution, daily trends and today's check-in status.

        Raises:
            ClassNotFoundError: If the class does not exist.
        """
        now = now or utc_now()
        report = await self._aggregator.aggregate(class_id, days, now)
        tz = self._aggregator.timezone

        today_start, today_end = window_bounds(1, now, tz)
        if report.window_days == 1:
            today = report.submissions
        else:
            today = await self._aggregator.load_submissions(
                list(report.names), today_start, today_end
            )
        # Newest first, so the earliest check-in of the day wins
        today_mood: dict[str, str] = {}
        for submission in today:
            today_mood[submission.student_id] = submission.mood

        status = [
            StudentSubmissionStatus(
                student_id=r.student_id,
                name=r.name,
                submitted=r.student_id in today_mood,
                mood=today_mood.get(r.student_id),
            )
            for r in report.students
        ]

        return ClassOverviewResponse(
            class_id=report.class_id,
            class_name=report.class_name,
            period_days=report.window_days,
            date_range=DateRange(start=report.window_start, end=report.window_end),
            total_students=len(report.students),
            total_emotions=report.total_submissions,
            emotion_distribution=report.emotion_counts,
            daily_trends=[
                DailyMoodCounts(date=day, counts=counts, total=sum(counts.values()))
                for day, counts in daily_breakdown(report.submissions, self._vocabulary, tz)
            ],
            submission_status=status,
            submitted_today=sum(1 for s in status if s.submitted),
            recent_emotions=[
                RecentEmotion(
                    id=s.id or "",
                    student_id=s.student_id,
                    student_name=report.names.get(s.student_id, s.student_id),
                    mood=s.mood,
                    message=s.message,
                    submitted_at=s.submitted_at,
                )
                for s in report.submissions[:RECENT_EMOTIONS_LIMIT]
            ],
        )

    async def class_analysis(
        self,
        class_id: str,
        days: int | None = None,
        now: datetime | None = None,
    ) -> ClassAnalysisResponse:
        """Analyse a class: risk report merged with an optional narrative.

        Args:
            class_id: Class ID.
            days: Window length; 1 means today.
            now: Reference time, defaults to utc_now().

        Returns:
            Distribution, concerning students and narrative or fallback note.

        Raises:
            ClassNotFoundError: If the class does not exist.
        """
        report = await self._aggregator.aggregate(class_id, days, now)

        if report.total_submissions == 0:
            narrative_fields = NarrativeFields(
                summary=NO_CLASS_DATA_NOTE,
                suggestions=[NO_CLASS_DATA_SUGGESTION],
            )
        else:
            narrative_fields = await self._narrate(self._class_context(report))

        return ClassAnalysisResponse(
            class_id=report.class_id,
            class_name=report.class_name,
            period_days=report.window_days,
            date_range=DateRange(start=report.window_start, end=report.window_end),
            total_submissions=report.total_submissions,
            emotion_distribution=report.emotion_counts,
            emotion_percentages=report.emotion_percentages,
            concerning_students=[
                ConcerningStudentResponse.from_student_risk(r) for r in report.concerning
            ],
            **narrative_fields.model_dump(),
        )

    async def student_analysis(
        self,
        student_id: str,
        days: int | None = None,
        now: datetime | None = None,
    ) -> StudentAnalysisResponse:
        """Analyse a single student over a window.

        Args:
            student_id: Student ID.
            days: Window length; 1 means today.
            now: Reference time, defaults to utc_now().

        Returns:
            Risk, distribution, daily breakdown and narrative or fallback note.

        Raises:
            StudentNotFoundError: If the student does not exist.
        """
        student = await self.db.get(Student, student_id)
        if student is None:
            raise StudentNotFoundError(student_id)

        tz = self._aggregator.timezone
        window = self._aggregator.resolve_window(days)
        start, end = window_bounds(window, now, tz)
        submissions = await self._aggregator.load_submissions([student.id], start, end)

        name = student.display_name
        risk = StudentRisk(
            student_id=student.id,
            name=name,
            assessment=self._classifier.classify(student.id, submissions),
        )
        counts = tally_moods(submissions, self._vocabulary)
        percentages = mood_percentages(counts)

        if not submissions:
            narrative_fields = NarrativeFields(
                summary=f"{name} has no emotion data in the last {window} days.",
                suggestions=[NO_STUDENT_DATA_SUGGESTION],
            )
        else:
            context = NarrativeContext(
                scope="student",
                subject=name,
                window_days=window,
                total_submissions=len(submissions),
                emotion_counts=counts,
                percentages=percentages,
                concerning=[risk] if risk.assessment.is_concerning else [],
                messages=sample_messages(
                    submissions,
                    {student.id: name},
                    set(),
                    per_group=STUDENT_MESSAGE_SAMPLE,
                    total=STUDENT_MESSAGE_SAMPLE,
                ),
            )
            narrative_fields = await self._narrate(context)

        return StudentAnalysisResponse(
            student_id=student.id,
            name=name,
            period_days=window,
            date_range=DateRange(start=start, end=end),
            total_submissions=len(submissions),
            emotion_distribution=counts,
            emotion_percentages=percentages,
            daily_breakdown=[
                DailyMoodCounts(date=day, counts=day_counts, total=sum(day_counts.values()))
                for day, day_counts in daily_breakdown(submissions, self._vocabulary, tz)
            ],
            risk=ConcerningStudentResponse.from_student_risk(risk),
            **narrative_fields.model_dump(),
        )

    def _class_context(self, report: ClassRiskReport) -> NarrativeContext:
        """Narrative input for a class report."""
        return NarrativeContext(
            scope="class",
            subject=report.class_name,
            window_days=report.window_days,
            total_submissions=report.total_submissions,
            emotion_counts=report.emotion_counts,
            percentages=report.emotion_percentages,
            concerning=report.concerning,
            messages=report.message_sample,
        )

    async def _narrate(self, context: NarrativeContext) -> NarrativeFields:
        """Generate a narrative, degrading to a note on failure or timeout."""
        try:
            narrative: Narrative | None = await asyncio.wait_for(
                self._narrative.generate(context),
                timeout=self._narrative_timeout,
            )
        except asyncio.TimeoutError:
            logger.warning(
                "Narrative generation timed out: scope=%s, subject=%s, timeout=%.1fs",
                context.scope,
                context.subject,
                self._narrative_timeout,
            )
            return NarrativeFields(note=NARRATIVE_FAILED_NOTE)
        except Exception as e:
            logger.warning(
                "Narrative generation failed: scope=%s, subject=%s, error=%s",
                context.scope,
                context.subject,
                str(e),
            )
            return NarrativeFields(note=NARRATIVE_FAILED_NOTE)

        if narrative is None:
            return NarrativeFields(note=NARRATIVE_UNAVAILABLE_NOTE)

        return NarrativeFields(
            summary=narrative.summary,
            insights=narrative.insights,
            suggestions=narrative.suggestions,
            narrative_available=True,
        )

