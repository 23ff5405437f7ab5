# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Streak service: persistence around the streak update engine.

This module provides the StreakService class for:
- Recording a submission in the student's streak (read, compute, write)
- Awarding milestones exactly once and crediting their reward points
- Reading the streak summary with achieved milestone display data

The streak row is loaded FOR UPDATE and carries an optimistic version
counter, so two concurrent submissions for the same student cannot both
commit a stale streak. A unique (streak, milestone) constraint backs the
at-most-once award.
"""

import logging
from datetime import date, datetime

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from src.core.wellbeing import (
    AchievedMilestone,
    MilestoneRule,
    StreakState,
    StreakUpdate,
    record_submission,
)
from src.domains.wellbeing.exceptions import StreakConflictError, StudentNotFoundError
from src.domains.wellbeing.schemas import AchievedMilestoneResponse, StreakResponse
from src.infrastructure.database.models import (
    Milestone,
    StreakMilestone,
    Student,
    StudentStreak,
)
from src.utils.datetime import ensure_utc, utc_now

logger = logging.getLogger(__name__)


def to_milestone_rule(milestone: Milestone) -> MilestoneRule:
    """Convert a catalog row to the engine's milestone shape."""
    return MilestoneRule(
        id=milestone.id,
        day_count=milestone.day_count,
        reward_points=milestone.reward_points,
        is_active=milestone.is_active,
        display_order=milestone.display_order,
        name=milestone.name,
        description=milestone.description,
        reward_message=milestone.reward_message,
        icon=milestone.icon,
        color=milestone.color,
    )


def to_streak_state(row: StudentStreak) -> StreakState:
    """Convert a streak row to the engine's state shape."""
    return StreakState(
        student_id=row.student_id,
        current_streak=row.current_streak,
        longest_streak=row.longest_streak,
        last_submission_day=row.last_submission_day,
        total_submissions=row.total_submissions,
        achieved_milestones=tuple(
            AchievedMilestone(
                milestone_id=m.milestone_id,
                achieved_at=ensure_utc(m.achieved_at),
            )
            for m in row.milestones_achieved
        ),
    )


class StreakService:
    """Service for reading and updating student streaks.

    Attributes:
        db: Async database session.
    """

    def __init__(self, db: AsyncSession) -> None:
        """Initialize streak service.

        Args:
            db: Async database session.
        """
        self.db = db

    async def record_submission(
        self,
        student: Student,
        submission_day: date,
        now: datetime | None = None,
    ) -> StreakUpdate:
        """Apply an accepted submission to the student's streak.

        Must run in the same transaction that stored the submission.
        Reward points of an awarded milestone are added to the student.

        Args:
            student: The submitting student, already loaded in this session.
            submission_day: Calendar day of the submission.
            now: Award timestamp, defaults to utc_now().

        Returns:
            StreakUpdate with the new state and any awarded milestone.

        Raises:
            StreakConflictError: If a concurrent submission updated the
                same streak first.
        """
        now = now or utc_now()
        row = await self._get_streak_row(student.id, for_update=True)
        prior = to_streak_state(row) if row is not None else None

        catalog = await self._get_active_milestones()
        update = record_submission(prior, student.id, submission_day, catalog, now)
        state, awarded = update.state, update.awarded_milestone

        if row is None:
            row = StudentStreak(student_id=student.id)
            self.db.add(row)

        row.current_streak = state.current_streak
        row.longest_streak = state.longest_streak
        row.last_submission_day = state.last_submission_day
        row.total_submissions = state.total_submissions

        if awarded is not None:
            row.milestones_achieved.append(
                StreakMilestone(milestone_id=awarded.id, achieved_at=now)
            )
            if awarded.reward_points > 0:
                student.points += awarded.reward_points

        try:
            await self.db.flush()
        except (StaleDataError, IntegrityError) as e:
            logger.warning(
                "Streak update conflict: student_id=%s, day=%s",
                student.id,
                submission_day,
            )
            raise StreakConflictError(student.id) from e

        if not update.advanced:
            logger.info(
                "Streak already counted for day: student_id=%s, day=%s",
                student.id,
                submission_day,
            )
        elif prior is not None and prior.current_streak > 1 and state.current_streak == 1:
            logger.info(
                "Streak reset: student_id=%s, previous=%d, day=%s",
                student.id,
                prior.current_streak,
                submission_day,
            )

        if awarded is not None:
            logger.info(
                "Milestone awarded: student_id=%s, milestone=%s, day_count=%d, points=%d",
                student.id,
                awarded.id,
                awarded.day_count,
                awarded.reward_points,
            )

        return update

    async def get_streak(self, student_id: str) -> StreakResponse:
        """Get a student's streak summary.

        A student who never submitted gets zero counters; no row is created.

        Args:
            student_id: Student ID.

        Returns:
            Streak summary with achieved milestones.

        Raises:
            StudentNotFoundError: If the student does not exist.
        """
        student = await self.db.get(Student, student_id)
        if student is None:
            raise StudentNotFoundError(student_id)

        row = await self._get_streak_row(student_id)
        if row is None:
            return StreakResponse(
                student_id=student_id,
                current_streak=0,
                longest_streak=0,
                total_submissions=0,
            )

        return StreakResponse(
            student_id=student_id,
            current_streak=row.current_streak,
            longest_streak=row.longest_streak,
            total_submissions=row.total_submissions,
            last_submission_day=row.last_submission_day,
            milestones_achieved=[
                AchievedMilestoneResponse(
                    milestone_id=m.milestone_id,
                    name=m.milestone.name,
                    description=m.milestone.description,
                    day_count=m.milestone.day_count,
                    icon=m.milestone.icon,
                    color=m.milestone.color,
                    reward_points=m.milestone.reward_points,
                    achieved_at=ensure_utc(m.achieved_at),
                )
                for m in row.milestones_achieved
            ],
        )

    async def _get_streak_row(
        self,
        student_id: str,
        for_update: bool = False,
    ) -> StudentStreak | None:
        """Load a student's streak row with its achievements."""
        stmt = (
            select(StudentStreak)
            .where(StudentStreak.student_id == student_id)
            .execution_options(populate_existing=True)
        )
        if for_update:
            stmt = stmt.with_for_update()
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def _get_active_milestones(self) -> list[MilestoneRule]:
        """Load the active milestone catalog."""
        stmt = (
            select(Milestone)
            .where(Milestone.is_active.is_(True))
            .order_by(Milestone.display_order)
        )
        result = await self.db.execute(stmt)
        return [to_milestone_rule(m) for m in result.scalars().all()]
