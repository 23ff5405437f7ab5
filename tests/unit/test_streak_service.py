# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for StreakService against an in-memory database."""

from datetime import date, datetime, time, timedelta, timezone
from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm.exc import StaleDataError

from src.core.wellbeing import StreakUpdate, record_submission
from src.domains.wellbeing import StreakConflictError, StreakService, StudentNotFoundError
from src.domains.wellbeing.streak_service import to_streak_state
from src.infrastructure.database.models import Milestone, StreakMilestone, Student, StudentStreak

DAY_ONE = date(2025, 3, 3)


def _at(day: date) -> datetime:
    return datetime.combine(day, time(8, 0), tzinfo=timezone.utc)


async def _record(
    sessionmaker: async_sessionmaker[AsyncSession],
    student_id: str,
    day: date,
) -> StreakUpdate:
    """Record one submission day in its own transaction."""
    async with sessionmaker() as session:
        student = await session.get(Student, student_id)
        update = await StreakService(session).record_submission(student, day, _at(day))
        await session.commit()
        return update


async def _points(sessionmaker: async_sessionmaker[AsyncSession], student_id: str) -> int:
    async with sessionmaker() as session:
        student = await session.get(Student, student_id)
        return student.points


class TestRecordSubmission:
    """Tests for StreakService.record_submission."""

    async def test_first_submission_creates_streak(self, sessionmaker, school) -> None:
        """Test that the first check-in starts a streak of one."""
        update = await _record(sessionmaker, school.an_id, DAY_ONE)

        assert update.advanced is True
        assert update.state.current_streak == 1
        assert update.state.longest_streak == 1
        assert update.state.total_submissions == 1
        assert update.state.last_submission_day == DAY_ONE
        assert update.awarded_milestone is None

    async def test_three_days_award_milestone_and_points(self, sessionmaker, school) -> None:
        """Test that the third consecutive day awards the 3-day milestone."""
        for offset in range(2):
            await _record(sessionmaker, school.an_id, DAY_ONE + timedelta(days=offset))

        update = await _record(sessionmaker, school.an_id, DAY_ONE + timedelta(days=2))

        assert update.state.current_streak == 3
        assert update.awarded_milestone is not None
        assert update.awarded_milestone.id == school.milestone_3_id
        assert update.awarded_milestone.reward_points == 20
        assert await _points(sessionmaker, school.an_id) == 20

    async def test_same_day_is_not_counted_twice(self, sessionmaker, school) -> None:
        """Test that a second submission on the same day changes nothing."""
        await _record(sessionmaker, school.an_id, DAY_ONE)

        update = await _record(sessionmaker, school.an_id, DAY_ONE)

        assert update.advanced is False
        assert update.state.current_streak == 1
        assert update.state.total_submissions == 1

    async def test_gap_resets_current_but_keeps_longest(self, sessionmaker, school) -> None:
        """Test that a missed day restarts the streak at one."""
        for offset in range(2):
            await _record(sessionmaker, school.an_id, DAY_ONE + timedelta(days=offset))

        update = await _record(sessionmaker, school.an_id, DAY_ONE + timedelta(days=5))

        assert update.state.current_streak == 1
        assert update.state.longest_streak == 2
        assert update.state.total_submissions == 3

    async def test_milestone_is_awarded_only_once(self, sessionmaker, school) -> None:
        """Test that reaching three days again after a reset awards nothing."""
        for offset in (0, 1, 2, 10, 11):
            await _record(sessionmaker, school.an_id, DAY_ONE + timedelta(days=offset))

        update = await _record(sessionmaker, school.an_id, DAY_ONE + timedelta(days=12))

        assert update.state.current_streak == 3
        assert update.awarded_milestone is None
        assert await _points(sessionmaker, school.an_id) == 20

        async with sessionmaker() as session:
            count = await session.scalar(select(func.count()).select_from(StreakMilestone))
        assert count == 1

    async def test_inactive_milestone_is_skipped(self, sessionmaker, school) -> None:
        """Test that the inactive 5-day milestone is never awarded."""
        updates = [
            await _record(sessionmaker, school.an_id, DAY_ONE + timedelta(days=offset))
            for offset in range(5)
        ]

        awarded = [u.awarded_milestone.id for u in updates if u.awarded_milestone]
        assert awarded == [school.milestone_3_id]

    async def test_seven_days_award_both_milestones(self, sessionmaker, school) -> None:
        """Test a full week: 3-day then 7-day milestones, rewards summed."""
        updates = [
            await _record(sessionmaker, school.an_id, DAY_ONE + timedelta(days=offset))
            for offset in range(7)
        ]

        awarded = [u.awarded_milestone.id for u in updates if u.awarded_milestone]
        assert awarded == [school.milestone_3_id, school.milestone_7_id]
        assert await _points(sessionmaker, school.an_id) == 70

    async def test_engine_receives_active_catalog(self, sessionmaker, school) -> None:
        """Test that the pure engine decides the update, over active milestones only."""
        with patch(
            "src.domains.wellbeing.streak_service.record_submission",
            wraps=record_submission,
        ) as engine:
            update = await _record(sessionmaker, school.an_id, DAY_ONE)

        engine.assert_called_once()
        prior, student_id, day, catalog, _ = engine.call_args.args
        assert prior is None
        assert student_id == school.an_id
        assert day == DAY_ONE
        assert {m.id for m in catalog} == {school.milestone_3_id, school.milestone_7_id}
        assert update.state.current_streak == 1

    async def test_same_day_picks_up_late_milestone(self, sessionmaker, school) -> None:
        """Test that a milestone added at the current length is awarded on resubmission."""
        day_two = DAY_ONE + timedelta(days=1)
        await _record(sessionmaker, school.an_id, DAY_ONE)
        await _record(sessionmaker, school.an_id, day_two)
        async with sessionmaker() as session:
            late = Milestone(
                name="2-day streak",
                description="Two days",
                day_count=2,
                reward_points=5,
            )
            session.add(late)
            await session.commit()

        update = await _record(sessionmaker, school.an_id, day_two)

        assert update.advanced is False
        assert update.state.total_submissions == 2
        assert update.awarded_milestone is not None
        assert update.awarded_milestone.id == late.id
        assert await _points(sessionmaker, school.an_id) == 5

    async def test_state_round_trips_through_storage(self, sessionmaker, school) -> None:
        """Test that a reloaded streak row converts back to the same state."""
        for offset in range(4):
            update = await _record(sessionmaker, school.an_id, DAY_ONE + timedelta(days=offset))

        async with sessionmaker() as session:
            row = await session.scalar(
                select(StudentStreak).where(StudentStreak.student_id == school.an_id)
            )
            reloaded = to_streak_state(row)

        assert reloaded.current_streak == update.state.current_streak == 4
        assert reloaded.longest_streak == update.state.longest_streak
        assert reloaded.total_submissions == update.state.total_submissions
        assert reloaded.last_submission_day == update.state.last_submission_day
        assert reloaded.achieved_ids == update.state.achieved_ids == {school.milestone_3_id}
        assert reloaded.achieved_milestones[0].achieved_at == _at(DAY_ONE + timedelta(days=2))

    async def test_stale_write_raises_conflict(
        self, db_session: AsyncSession, school
    ) -> None:
        """Test that a lost concurrent update surfaces as StreakConflictError."""
        student = await db_session.get(Student, school.an_id)
        service = StreakService(db_session)

        with patch.object(
            db_session, "flush", AsyncMock(side_effect=StaleDataError("stale"))
        ):
            with pytest.raises(StreakConflictError) as exc_info:
                await service.record_submission(student, DAY_ONE, _at(DAY_ONE))

        assert exc_info.value.student_id == school.an_id


class TestGetStreak:
    """Tests for StreakService.get_streak."""

    async def test_student_without_streak_gets_zeros(
        self, db_session: AsyncSession, school
    ) -> None:
        """Test zero counters for a student who never checked in."""
        result = await StreakService(db_session).get_streak(school.binh_id)

        assert result.current_streak == 0
        assert result.longest_streak == 0
        assert result.total_submissions == 0
        assert result.last_submission_day is None
        assert result.milestones_achieved == []

    async def test_unknown_student_raises(self, db_session: AsyncSession, school) -> None:
        """Test that an unknown student raises StudentNotFoundError."""
        with pytest.raises(StudentNotFoundError):
            await StreakService(db_session).get_streak("missing")

    async def test_achieved_milestones_carry_display_data(
        self, sessionmaker, school
    ) -> None:
        """Test that achievements are joined with catalog display fields."""
        for offset in range(3):
            await _record(sessionmaker, school.an_id, DAY_ONE + timedelta(days=offset))

        async with sessionmaker() as session:
            result = await StreakService(session).get_streak(school.an_id)

        assert result.current_streak == 3
        assert result.last_submission_day == DAY_ONE + timedelta(days=2)
        assert len(result.milestones_achieved) == 1
        achieved = result.milestones_achieved[0]
        assert achieved.milestone_id == school.milestone_3_id
        assert achieved.name == "3-day streak"
        assert achieved.day_count == 3
        assert achieved.icon == "🏆"
        assert achieved.color == "#FFD700"
        assert achieved.achieved_at == _at(DAY_ONE + timedelta(days=2))
