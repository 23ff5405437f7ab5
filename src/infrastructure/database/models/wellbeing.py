# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Wellbeing models: emotion records, milestones and streaks.

Tables:
- emotion_records: Append-only daily check-ins
- milestones: Admin-curated streak rewards (read-only to the core)
- student_streaks: One streak state per student, optimistic-locked
- streak_milestones: Milestones a student has achieved, once each
"""

from datetime import date, datetime

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.core.wellbeing.constants import DEFAULT_MILESTONE_COLOR, DEFAULT_MILESTONE_ICON
from src.infrastructure.database.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin
from src.utils.datetime import utc_now


class EmotionRecord(UUIDPrimaryKeyMixin, Base):
    """One emotion submission. Never updated after insert."""

    __tablename__ = "emotion_records"
    __table_args__ = (
        Index("ix_emotion_records_student_submitted", "student_id", "submitted_at"),
    )

    student_id: Mapped[str] = mapped_column(
        ForeignKey("students.id", ondelete="CASCADE"),
        nullable=False,
    )
    mood: Mapped[str] = mapped_column(String(20), nullable=False)
    message: Mapped[str] = mapped_column(Text, default="", nullable=False)
    submitted_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        index=True,
        nullable=False,
    )


class Milestone(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A one-time reward for reaching a streak length."""

    __tablename__ = "milestones"
    __table_args__ = (
        Index("ix_milestones_active_order", "is_active", "display_order"),
    )

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    description: Mapped[str] = mapped_column(Text, default="", nullable=False)
    day_count: Mapped[int] = mapped_column(Integer, unique=True, nullable=False)
    reward_points: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    reward_message: Mapped[str] = mapped_column(Text, default="", nullable=False)
    icon: Mapped[str] = mapped_column(String(16), default=DEFAULT_MILESTONE_ICON, nullable=False)
    color: Mapped[str] = mapped_column(String(16), default=DEFAULT_MILESTONE_COLOR, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    display_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)


class StudentStreak(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """Consecutive-day submission state of one student.

    ``version`` is the optimistic concurrency token: a flush that finds a
    different version in the row raises StaleDataError.
    """

    __tablename__ = "student_streaks"

    student_id: Mapped[str] = mapped_column(
        ForeignKey("students.id", ondelete="CASCADE"),
        unique=True,
        nullable=False,
    )
    current_streak: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    longest_streak: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    last_submission_day: Mapped[date | None] = mapped_column(Date, nullable=True)
    total_submissions: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    milestones_achieved: Mapped[list["StreakMilestone"]] = relationship(
        back_populates="streak",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="StreakMilestone.achieved_at",
    )

    __mapper_args__ = {"version_id_col": version}


class StreakMilestone(UUIDPrimaryKeyMixin, Base):
    """A milestone achieved by a student; unique per (streak, milestone)."""

    __tablename__ = "streak_milestones"
    __table_args__ = (
        UniqueConstraint("streak_id", "milestone_id", name="uq_streak_milestone"),
    )

    streak_id: Mapped[str] = mapped_column(
        ForeignKey("student_streaks.id", ondelete="CASCADE"),
        nullable=False,
    )
    milestone_id: Mapped[str] = mapped_column(
        ForeignKey("milestones.id", ondelete="CASCADE"),
        nullable=False,
    )
    achieved_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
    )

    streak: Mapped[StudentStreak] = relationship(back_populates="milestones_achieved")
    milestone: Mapped[Milestone] = relationship(lazy="selectin")
