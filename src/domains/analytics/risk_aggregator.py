# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Class risk aggregation.

This module composes the risk classifier over every student of a class
within an analysis window:
- One batched query loads the window's check-ins for the whole class
- Each student is classified independently
- Concerning students are sorted by risk score, highest first; equal
  scores keep the class roster order
- Mood tallies and a prioritised message sample feed the narrative

Usage:
    from src.domains.analytics import ClassRiskAggregator

    aggregator = ClassRiskAggregator(db, classifier, settings.wellbeing)
    report = await aggregator.aggregate(class_id, window_days=7)
    for student in report.concerning:
        print(student.name, student.assessment.risk_score)
"""

import logging
from collections import defaultdict
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import datetime, tzinfo

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.config.settings import WellbeingSettings
from src.core.wellbeing import (
    EmotionSubmission,
    RiskClassifier,
    StudentRisk,
    WellbeingVocabulary,
)
from src.domains.wellbeing.exceptions import ClassNotFoundError
from src.infrastructure.database.models import EmotionRecord, SchoolClass, Student
from src.utils.datetime import day_key, ensure_utc, get_zone, window_bounds

logger = logging.getLogger(__name__)


# =============================================================================
# Aggregation helpers
# =============================================================================


def tally_moods(
    submissions: Iterable[EmotionSubmission],
    vocabulary: WellbeingVocabulary,
) -> dict[str, int]:
    """Count check-ins per mood tag, every vocabulary tag included."""
    counts = vocabulary.empty_distribution()
    for submission in submissions:
        counts[submission.mood] = counts.get(submission.mood, 0) + 1
    return counts


def mood_percentages(counts: dict[str, int]) -> dict[str, float]:
    """Percentage of the total per mood tag, 1 decimal; zeros when empty."""
    total = sum(counts.values())
    if total == 0:
        return {mood: 0.0 for mood in counts}
    return {mood: round(100.0 * count / total, 1) for mood, count in counts.items()}


def daily_breakdown(
    submissions: Iterable[EmotionSubmission],
    vocabulary: WellbeingVocabulary,
    tz: tzinfo,
) -> list[tuple[str, dict[str, int]]]:
    """Mood counts per calendar day, oldest day first."""
    by_day: dict[str, list[EmotionSubmission]] = defaultdict(list)
    for submission in submissions:
        by_day[day_key(submission.submitted_at, tz)].append(submission)
    return [(day, tally_moods(by_day[day], vocabulary)) for day in sorted(by_day)]


def format_message(name: str, submission: EmotionSubmission) -> str:
    """Render one message for a narrative prompt."""
    return f'{name} ({submission.mood}): "{submission.message}"'


def sample_messages(
    submissions: Sequence[EmotionSubmission],
    names: dict[str, str],
    concerning_ids: set[str],
    per_group: int = 10,
    total: int = 20,
) -> list[str]:
    """Pick messages for the narrative, concerning students first.

    Takes up to per_group non-empty messages from concerning students,
    then up to per_group from the others, in submission order, and caps
    the result at total.

    Args:
        submissions: Window check-ins, newest first.
        names: Student ID -> display name.
        concerning_ids: IDs of students with a non-low risk level.
        per_group: Cap per group.
        total: Cap on the combined sample.

    Returns:
        Formatted messages.
    """
    with_message = [s for s in submissions if s.message and s.message.strip()]
    concerning = [s for s in with_message if s.student_id in concerning_ids][:per_group]
    others = [s for s in with_message if s.student_id not in concerning_ids][:per_group]
    return [
        format_message(names.get(s.student_id, s.student_id), s)
        for s in concerning + others
    ][:total]


# =============================================================================
# Report
# =============================================================================


@dataclass
class ClassRiskReport:
    """Risk picture of a class over a window.

    Attributes:
        class_id: Class ID.
        class_name: Class name.
        window_days: Window length in days.
        window_start: Window start (UTC, inclusive).
        window_end: Window end (UTC, exclusive).
        students: Per-student assessments in roster order.
        concerning: Non-low assessments, highest score first.
        emotion_counts: Mood tag -> count over the class.
        message_sample: Prioritised, formatted messages.
        submissions: Window check-ins, newest first.
        names: Student ID -> display name.
    """

    class_id: str
    class_name: str
    window_days: int
    window_start: datetime
    window_end: datetime
    students: list[StudentRisk] = field(default_factory=list)
    concerning: list[StudentRisk] = field(default_factory=list)
    emotion_counts: dict[str, int] = field(default_factory=dict)
    message_sample: list[str] = field(default_factory=list)
    submissions: list[EmotionSubmission] = field(default_factory=list)
    names: dict[str, str] = field(default_factory=dict)

    @property
    def total_submissions(self) -> int:
        """Check-ins in the window."""
        return len(self.submissions)

    @property
    def emotion_percentages(self) -> dict[str, float]:
        """Mood tag -> percentage of total, 1 decimal."""
        return mood_percentages(self.emotion_counts)


class ClassRiskAggregator:
    """Runs the risk classifier over a whole class.

    Attributes:
        db: Async database session.
    """

    def __init__(
        self,
        db: AsyncSession,
        classifier: RiskClassifier,
        settings: WellbeingSettings,
    ) -> None:
        """Initialize the aggregator.

        Args:
            db: Async database session.
            classifier: Risk classifier; its vocabulary is reused for tallies.
            settings: Wellbeing rules (timezone, windows, sample sizes).
        """
        self.db = db
        self._classifier = classifier
        self._settings = settings
        self._tz = get_zone(settings.timezone)

    @property
    def timezone(self) -> tzinfo:
        """Timezone defining the calendar day."""
        return self._tz

    def resolve_window(self, window_days: int | None) -> int:
        """Apply the default and the upper bound to a requested window."""
        days = window_days or self._settings.default_window_days
        return max(1, min(days, self._settings.max_window_days))

    async def aggregate(
        self,
        class_id: str,
        window_days: int | None = None,
        now: datetime | None = None,
    ) -> ClassRiskReport:
        """Build the risk report of a class.

        Args:
            class_id: Class ID.
            window_days: Window length; 1 means today. Defaults to settings.
            now: Reference time, defaults to utc_now().

        Returns:
            ClassRiskReport for the window.

        Raises:
            ClassNotFoundError: If the class does not exist.
        """
        school_class = await self.db.get(SchoolClass, class_id)
        if school_class is None:
            raise ClassNotFoundError(class_id)

        days = self.resolve_window(window_days)
        start, end = window_bounds(days, now, self._tz)

        students = await self._get_students(class_id)
        names = {s.id: s.display_name for s in students}
        submissions = await self.load_submissions(list(names), start, end)

        by_student: dict[str, list[EmotionSubmission]] = defaultdict(list)
        for submission in submissions:
            by_student[submission.student_id].append(submission)

        assessed = [
            StudentRisk(
                student_id=s.id,
                name=names[s.id],
                assessment=self._classifier.classify(s.id, by_student.get(s.id, [])),
            )
            for s in students
        ]
        concerning = sorted(
            (r for r in assessed if r.assessment.is_concerning),
            key=lambda r: r.assessment.risk_score,
            reverse=True,
        )

        report = ClassRiskReport(
            class_id=class_id,
            class_name=school_class.name,
            window_days=days,
            window_start=start,
            window_end=end,
            students=assessed,
            concerning=concerning,
            emotion_counts=tally_moods(submissions, self._classifier.vocabulary),
            message_sample=sample_messages(
                submissions,
                names,
                {r.student_id for r in concerning},
                per_group=self._settings.message_sample_per_group,
                total=self._settings.message_sample_total,
            ),
            submissions=submissions,
            names=names,
        )

        logger.info(
            "Class risk aggregated: class_id=%s, days=%d, students=%d, submissions=%d, concerning=%d",
            class_id,
            days,
            len(students),
            report.total_submissions,
            len(concerning),
        )
        return report

    async def load_submissions(
        self,
        student_ids: list[str],
        start: datetime,
        end: datetime,
    ) -> list[EmotionSubmission]:
        """Load check-ins of the given students in [start, end), newest first."""
        if not student_ids:
            return []

        stmt = (
            select(EmotionRecord)
            .where(
                EmotionRecord.student_id.in_(student_ids),
                EmotionRecord.submitted_at >= start,
                EmotionRecord.submitted_at < end,
            )
            .order_by(EmotionRecord.submitted_at.desc(), EmotionRecord.id)
        )
        result = await self.db.execute(stmt)
        return [
            EmotionSubmission(
                id=r.id,
                student_id=r.student_id,
                mood=r.mood,
                message=r.message or "",
                submitted_at=ensure_utc(r.submitted_at),
            )
            for r in result.scalars().all()
        ]

    async def _get_students(self, class_id: str) -> list[Student]:
        """Class roster in a stable order."""
        stmt = (
            select(Student)
            .where(Student.class_id == class_id)
            .order_by(Student.created_at, Student.id)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())
