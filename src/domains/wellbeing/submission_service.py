# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Emotion submission service.

This module provides the EmotionSubmissionService class for:
- Accepting a daily emotion check-in and crediting submission points
- Running the streak engine on the accepted check-in
- Checking whether a student has checked in today
- Listing a student's recent check-ins

Everything a submission writes (record, points, streak, milestone) is
flushed in the caller's transaction and commits or rolls back together.
"""

import logging
from datetime import datetime, timedelta

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.config.settings import WellbeingSettings
from src.core.wellbeing import WellbeingVocabulary
from src.domains.wellbeing.exceptions import (
    DuplicateSubmissionError,
    InvalidMoodError,
    StudentNotFoundError,
)
from src.domains.wellbeing.schemas import (
    EmotionHistoryResponse,
    EmotionResponse,
    EmotionSubmitRequest,
    EmotionSubmitResponse,
    MilestoneAward,
    StreakSummary,
    TodayCheckResponse,
)
from src.domains.wellbeing.streak_service import StreakService
from src.infrastructure.database.models import EmotionRecord, Student
from src.utils.datetime import day_start, ensure_utc, get_zone, local_day, utc_now

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 30


def to_emotion_response(record: EmotionRecord) -> EmotionResponse:
    """Convert an emotion row to its API shape."""
    return EmotionResponse(
        id=record.id,
        student_id=record.student_id,
        mood=record.mood,
        message=record.message or "",
        submitted_at=ensure_utc(record.submitted_at),
    )


class EmotionSubmissionService:
    """Service for emotion check-ins.

    Attributes:
        db: Async database session.
    """

    def __init__(
        self,
        db: AsyncSession,
        vocabulary: WellbeingVocabulary,
        settings: WellbeingSettings,
    ) -> None:
        """Initialize the submission service.

        Args:
            db: Async database session.
            vocabulary: Accepted mood tags.
            settings: Wellbeing rules (timezone, points, daily guard).
        """
        self.db = db
        self._vocabulary = vocabulary
        self._settings = settings
        self._tz = get_zone(settings.timezone)
        self._streaks = StreakService(db)

    async def submit(
        self,
        request: EmotionSubmitRequest,
        now: datetime | None = None,
    ) -> EmotionSubmitResponse:
        """Record a student's emotion check-in.

        Args:
            request: Check-in data.
            now: Submission time, defaults to utc_now().

        Returns:
            The stored check-in with points, streak and any milestone.

        Raises:
            InvalidMoodError: If the mood is not in the vocabulary.
            StudentNotFoundError: If the student does not exist.
            DuplicateSubmissionError: If the student already checked in today
                and the daily guard is on.
            StreakConflictError: If a concurrent submission won the race.
        """
        now = ensure_utc(now) if now is not None else utc_now()
        mood = request.mood.strip().lower()
        if not self._vocabulary.is_valid_mood(mood):
            raise InvalidMoodError(mood, self._vocabulary.mood_tags)

        # Row lock serialises concurrent submissions of one student
        student = await self._get_student(request.student_id, for_update=True)
        today = local_day(now, self._tz)

        if self._settings.one_submission_per_day:
            existing = await self._get_emotion_on_day(student.id, now)
            if existing is not None:
                raise DuplicateSubmissionError(student.id, today.isoformat())

        record = EmotionRecord(
            student_id=student.id,
            mood=mood,
            message=(request.message or "").strip(),
            submitted_at=now,
        )
        self.db.add(record)
        student.points += self._settings.submission_points
        await self.db.flush()

        update = await self._streaks.record_submission(student, today, now)
        awarded = update.awarded_milestone

        points_earned = self._settings.submission_points
        if awarded is not None:
            points_earned += awarded.reward_points

        logger.info(
            "Emotion submitted: student_id=%s, mood=%s, streak=%d, milestone=%s",
            student.id,
            mood,
            update.state.current_streak,
            awarded.id if awarded else None,
        )

        return EmotionSubmitResponse(
            message=self._confirmation_message(points_earned, awarded is not None),
            emotion=to_emotion_response(record),
            points_earned=points_earned,
            total_points=student.points,
            streak=StreakSummary(
                current_streak=update.state.current_streak,
                longest_streak=update.state.longest_streak,
                total_submissions=update.state.total_submissions,
            ),
            milestone_achieved=(
                MilestoneAward(
                    id=awarded.id,
                    name=awarded.name,
                    description=awarded.description,
                    day_count=awarded.day_count,
                    icon=awarded.icon,
                    reward_points=awarded.reward_points,
                    reward_message=awarded.reward_message,
                )
                if awarded is not None
                else None
            ),
        )

    async def has_submitted_today(
        self,
        student_id: str,
        now: datetime | None = None,
    ) -> TodayCheckResponse:
        """Check whether a student has checked in today.

        Args:
            student_id: Student ID.
            now: Reference time, defaults to utc_now().

        Returns:
            Flag and today's check-in if present.

        Raises:
            StudentNotFoundError: If the student does not exist.
        """
        await self._get_student(student_id)
        record = await self._get_emotion_on_day(student_id, now or utc_now())
        return TodayCheckResponse(
            has_submitted_today=record is not None,
            emotion=to_emotion_response(record) if record is not None else None,
        )

    async def list_student_emotions(
        self,
        student_id: str,
        limit: int = DEFAULT_HISTORY_LIMIT,
    ) -> EmotionHistoryResponse:
        """List a student's most recent check-ins.

        Args:
            student_id: Student ID.
            limit: Maximum number of check-ins.

        Returns:
            Check-ins, newest first.

        Raises:
            StudentNotFoundError: If the student does not exist.
        """
        await self._get_student(student_id)
        stmt = (
            select(EmotionRecord)
            .where(EmotionRecord.student_id == student_id)
            .order_by(EmotionRecord.submitted_at.desc())
            .limit(limit)
        )
        result = await self.db.execute(stmt)
        emotions = [to_emotion_response(r) for r in result.scalars().all()]
        return EmotionHistoryResponse(
            student_id=student_id,
            emotions=emotions,
            total=len(emotions),
        )

    def _confirmation_message(self, points: int, milestone: bool) -> str:
        """Message shown to the student after a check-in."""
        message = f"Emotion submitted successfully! You earned {points} points! 🌟"
        if milestone:
            message += " You reached a new streak milestone! 🏆"
        return message

    async def _get_student(self, student_id: str, for_update: bool = False) -> Student:
        """Load a student or raise StudentNotFoundError."""
        stmt = select(Student).where(Student.id == student_id)
        if for_update:
            stmt = stmt.with_for_update()
        result = await self.db.execute(stmt)
        student = result.scalar_one_or_none()
        if student is None:
            raise StudentNotFoundError(student_id)
        return student

    async def _get_emotion_on_day(
        self,
        student_id: str,
        now: datetime,
    ) -> EmotionRecord | None:
        """Get the student's first check-in on the local day containing now."""
        today = local_day(now, self._tz)
        start = day_start(today, self._tz)
        end = day_start(today + timedelta(days=1), self._tz)
        stmt = (
            select(EmotionRecord)
            .where(
                EmotionRecord.student_id == student_id,
                EmotionRecord.submitted_at >= start,
                EmotionRecord.submitted_at < end,
            )
            .order_by(EmotionRecord.submitted_at)
            .limit(1)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()
