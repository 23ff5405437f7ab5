# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for class risk aggregation."""

from datetime import datetime, timedelta, timezone

import pytest

from src.core.config.settings import WellbeingSettings
from src.core.wellbeing import EmotionSubmission, RiskClassifier, RiskLevel, WellbeingVocabulary
from src.domains.analytics import (
    ClassRiskAggregator,
    daily_breakdown,
    mood_percentages,
    sample_messages,
    tally_moods,
)
from src.domains.analytics.risk_aggregator import format_message
from src.domains.wellbeing import ClassNotFoundError
from src.infrastructure.database.models import SchoolClass, Student

NOW = datetime(2025, 3, 10, 10, 0, tzinfo=timezone.utc)


def _day(offset: int, hour: int = 8) -> datetime:
    """A timestamp offset days before NOW's date, at the given hour."""
    return datetime(2025, 3, 10, hour, 0, tzinfo=timezone.utc) - timedelta(days=offset)


@pytest.fixture
async def seeded_week(school, add_emotions):
    """A week of check-ins: An high risk, Binh critical, Chi fine."""
    await add_emotions(
        (school.an_id, "sad", _day(3), "mệt quá"),
        (school.an_id, "sad", _day(2), ""),
        (school.an_id, "sad", _day(1), "không muốn đi học"),
        (school.an_id, "happy", _day(0), ""),
        (school.binh_id, "happy", _day(1), "em muốn chết"),
        (school.chi_id, "happy", _day(0), "vui"),
        # Outside the 7-day window
        (school.chi_id, "sad", _day(12), "old"),
    )
    return school


def _aggregator(db_session, **overrides) -> ClassRiskAggregator:
    return ClassRiskAggregator(
        db_session,
        RiskClassifier(WellbeingVocabulary()),
        WellbeingSettings(**overrides),
    )


class TestAggregate:
    """Tests for ClassRiskAggregator.aggregate."""

    async def test_concerning_sorted_by_score(self, db_session, seeded_week) -> None:
        """Test the critical student first, then the high one."""
        report = await _aggregator(db_session).aggregate(seeded_week.class_id, 7, NOW)

        assert [r.student_id for r in report.concerning] == [
            seeded_week.binh_id,
            seeded_week.an_id,
        ]
        binh, an = report.concerning
        assert binh.assessment.risk_level == RiskLevel.CRITICAL
        assert binh.name == "Tran Thi Binh"
        assert an.assessment.risk_level == RiskLevel.HIGH
        assert an.assessment.risk_score == 85.0
        assert an.assessment.negative_ratio == 75.0

    async def test_equal_scores_keep_roster_order(
        self, db_session, school, add_emotions
    ) -> None:
        """Test that students with the same score stay in roster order."""
        await add_emotions(
            *[
                row
                for student_id in (school.an_id, school.binh_id, school.chi_id)
                for row in (
                    (student_id, "sad", _day(1), ""),
                    (student_id, "happy", _day(0), ""),
                )
            ]
        )

        report = await _aggregator(db_session).aggregate(school.class_id, 7, NOW)

        assert [r.assessment.risk_score for r in report.concerning] == [65.0, 65.0, 65.0]
        assert [r.student_id for r in report.concerning] == [
            r.student_id for r in report.students
        ]

    async def test_every_student_is_assessed(self, db_session, seeded_week) -> None:
        """Test that students without concern still appear in the roster."""
        report = await _aggregator(db_session).aggregate(seeded_week.class_id, 7, NOW)

        by_id = {r.student_id: r for r in report.students}
        assert set(by_id) == {seeded_week.an_id, seeded_week.binh_id, seeded_week.chi_id}
        assert by_id[seeded_week.chi_id].assessment.risk_level == RiskLevel.LOW

    async def test_window_excludes_old_checkins(self, db_session, seeded_week) -> None:
        """Test counts over the 7-day window only."""
        report = await _aggregator(db_session).aggregate(seeded_week.class_id, 7, NOW)

        assert report.total_submissions == 6
        assert report.emotion_counts == {
            "happy": 3,
            "neutral": 0,
            "sad": 3,
            "angry": 0,
            "tired": 0,
        }
        assert report.emotion_percentages["sad"] == 50.0

    async def test_one_day_window_is_today(self, db_session, seeded_week) -> None:
        """Test that days=1 covers today's check-ins only."""
        report = await _aggregator(db_session).aggregate(seeded_week.class_id, 1, NOW)

        assert report.window_days == 1
        assert report.total_submissions == 2
        assert report.concerning == []

    async def test_default_window_from_settings(self, db_session, seeded_week) -> None:
        """Test that no window falls back to the configured default."""
        aggregator = _aggregator(db_session, default_window_days=2)

        report = await aggregator.aggregate(seeded_week.class_id, None, NOW)

        assert report.window_days == 2
        assert report.window_start == datetime(2025, 3, 8, tzinfo=timezone.utc)

    async def test_message_sample_puts_concerning_first(
        self, db_session, seeded_week
    ) -> None:
        """Test that concerning students' messages lead the sample."""
        report = await _aggregator(db_session).aggregate(seeded_week.class_id, 7, NOW)

        assert report.message_sample[-1] == 'Le Minh Chi (happy): "vui"'
        assert 'Tran Thi Binh (happy): "em muốn chết"' in report.message_sample[:3]
        assert len(report.message_sample) == 4

    async def test_unknown_class_raises(self, db_session, school) -> None:
        """Test that a missing class raises ClassNotFoundError."""
        with pytest.raises(ClassNotFoundError):
            await _aggregator(db_session).aggregate("missing", 7, NOW)

    async def test_other_classes_are_ignored(self, sessionmaker, db_session, seeded_week, add_emotions) -> None:
        """Test that a student of another class does not leak in."""
        async with sessionmaker() as session:
            other = SchoolClass(name="8B")
            session.add(other)
            await session.flush()
            outsider = Student(student_code="HS900", name="Outsider", class_id=other.id)
            session.add(outsider)
            await session.commit()
        await add_emotions((outsider.id, "angry", _day(0), "muốn chết"))

        report = await _aggregator(db_session).aggregate(seeded_week.class_id, 7, NOW)

        assert outsider.id not in {r.student_id for r in report.students}
        assert report.total_submissions == 6

    async def test_empty_class(self, sessionmaker, db_session) -> None:
        """Test a class without students."""
        async with sessionmaker() as session:
            empty = SchoolClass(name="Empty")
            session.add(empty)
            await session.commit()

        report = await _aggregator(db_session).aggregate(empty.id, 7, NOW)

        assert report.students == []
        assert report.total_submissions == 0
        assert report.emotion_percentages["happy"] == 0.0


class TestHelpers:
    """Tests for the aggregation helpers."""

    def test_mood_percentages_round_to_one_decimal(self) -> None:
        """Test percentage rounding."""
        assert mood_percentages({"happy": 1, "sad": 2}) == {"happy": 33.3, "sad": 66.7}

    def test_tally_includes_every_tag(self) -> None:
        """Test that unused tags count zero."""
        counts = tally_moods([], WellbeingVocabulary())

        assert counts == {"happy": 0, "neutral": 0, "sad": 0, "angry": 0, "tired": 0}

    def test_daily_breakdown_oldest_first(self) -> None:
        """Test per-day grouping order."""
        submissions = [
            EmotionSubmission("s1", "sad", _day(0)),
            EmotionSubmission("s1", "happy", _day(2)),
            EmotionSubmission("s2", "happy", _day(2, hour=15)),
        ]

        days = daily_breakdown(submissions, WellbeingVocabulary(), timezone.utc)

        assert [day for day, _ in days] == ["2025-03-08", "2025-03-10"]
        assert days[0][1]["happy"] == 2

    def test_sample_caps(self) -> None:
        """Test the per-group and total caps."""
        submissions = [
            EmotionSubmission(f"s{i % 2}", "sad", _day(0), f"note {i}") for i in range(30)
        ]
        names = {"s0": "A", "s1": "B"}

        sample = sample_messages(submissions, names, {"s0"}, per_group=10, total=15)

        assert len(sample) == 15
        assert all(line.startswith("A (sad)") for line in sample[:10])
        assert all(line.startswith("B (sad)") for line in sample[10:])

    def test_messages_are_quoted_as_stored(self) -> None:
        """Test that message text is quoted without trimming."""
        submission = EmotionSubmission("s1", "tired", _day(0), " mệt quá ")

        assert format_message("An", submission) == 'An (tired): " mệt quá "'

    def test_sample_skips_blank_messages(self) -> None:
        """Test that empty and whitespace messages are not sampled."""
        submissions = [
            EmotionSubmission("s1", "happy", _day(0), "  "),
            EmotionSubmission("s1", "happy", _day(1), ""),
        ]

        assert sample_messages(submissions, {"s1": "A"}, set()) == []
