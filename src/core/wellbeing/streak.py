# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Streak update engine.

Pure transition functions applied once per accepted submission. Storage,
locking and point crediting are left to StreakService, which loads the
prior state, calls record_submission() and persists the result.

Transitions on current_streak, comparing the submission day with the
last counted day:
- no prior state: 1
- same day: unchanged, nothing else is counted
- previous day: +1
- anything else (gap, or a day in the past): reset to 1
"""

from collections.abc import Iterable
from dataclasses import replace
from datetime import date, datetime, timedelta

from src.core.wellbeing.context import (
    AchievedMilestone,
    MilestoneRule,
    StreakState,
    StreakUpdate,
)
from src.utils.datetime import utc_now


def advance_streak(
    state: StreakState | None,
    student_id: str,
    submission_day: date,
) -> tuple[StreakState, bool]:
    """Apply one submission day to a streak.

    Args:
        state: Prior state, or None for a first-ever submission.
        student_id: The student's ID, used when state is None.
        submission_day: Calendar day of the submission.

    Returns:
        Tuple of (new state, advanced). advanced is False when the day
        was already counted and the state is returned unchanged.
    """
    if state is None:
        return (
            StreakState(
                student_id=student_id,
                current_streak=1,
                longest_streak=1,
                last_submission_day=submission_day,
                total_submissions=1,
            ),
            True,
        )

    last_day = state.last_submission_day
    if last_day == submission_day:
        return state, False

    if last_day is not None and last_day + timedelta(days=1) == submission_day:
        current = state.current_streak + 1
    else:
        current = 1

    return (
        replace(
            state,
            current_streak=current,
            longest_streak=max(state.longest_streak, current),
            last_submission_day=submission_day,
            total_submissions=state.total_submissions + 1,
        ),
        True,
    )


def find_milestone(
    catalog: Iterable[MilestoneRule],
    day_count: int,
) -> MilestoneRule | None:
    """Find the active milestone triggered by a streak length."""
    matches = [m for m in catalog if m.is_active and m.day_count == day_count]
    if not matches:
        return None
    return min(matches, key=lambda m: m.display_order)


def award_milestone(
    state: StreakState,
    catalog: Iterable[MilestoneRule],
    now: datetime | None = None,
) -> tuple[StreakState, MilestoneRule | None]:
    """Award the milestone matching the current streak, at most once.

    Args:
        state: Streak state after advance_streak().
        catalog: Milestones to check.
        now: Award timestamp, defaults to utc_now().

    Returns:
        Tuple of (new state, awarded milestone or None).
    """
    milestone = find_milestone(catalog, state.current_streak)
    if milestone is None or state.has_milestone(milestone.id):
        return state, None

    achieved = AchievedMilestone(
        milestone_id=milestone.id,
        achieved_at=now or utc_now(),
    )
    return (
        replace(state, achieved_milestones=(*state.achieved_milestones, achieved)),
        milestone,
    )


def record_submission(
    state: StreakState | None,
    student_id: str,
    submission_day: date,
    catalog: Iterable[MilestoneRule],
    now: datetime | None = None,
) -> StreakUpdate:
    """Record one accepted submission in a student's streak.

    The milestone check runs on every call, including the same-day case,
    so a milestone added to the catalog after the student reached it is
    picked up on their next submission at that length.

    Args:
        state: Prior state, or None for a first-ever submission.
        student_id: The student's ID.
        submission_day: Calendar day of the submission.
        catalog: Milestones to check.
        now: Award timestamp, defaults to utc_now().

    Returns:
        StreakUpdate with the new state and any awarded milestone.
    """
    advanced_state, advanced = advance_streak(state, student_id, submission_day)
    final_state, milestone = award_milestone(advanced_state, catalog, now)
    return StreakUpdate(
        state=final_state,
        awarded_milestone=milestone,
        advanced=advanced,
    )
