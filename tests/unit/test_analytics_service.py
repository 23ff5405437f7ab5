# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for WellbeingAnalyticsService."""

import asyncio
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest

from src.core.intelligence import LLMError, Narrative, NarrativeContext, NullNarrativeGenerator
from src.domains.analytics import WellbeingAnalyticsService
from src.domains.analytics.service import (
    NARRATIVE_FAILED_NOTE,
    NARRATIVE_UNAVAILABLE_NOTE,
    NO_CLASS_DATA_NOTE,
)
from src.domains.wellbeing import ClassNotFoundError, StudentNotFoundError

NOW = datetime(2025, 3, 10, 10, 0, tzinfo=timezone.utc)


def _day(offset: int) -> datetime:
    return datetime(2025, 3, 10, 8, 0, tzinfo=timezone.utc) - timedelta(days=offset)


class SlowGenerator:
    """Generator that never answers in time."""

    async def generate(self, context: NarrativeContext) -> Narrative | None:
        await asyncio.sleep(5)
        return Narrative(summary="too late")


@pytest.fixture
async def seeded(school, add_emotions):
    """An sad three days running, Binh fine, Chi silent."""
    await add_emotions(
        (school.an_id, "sad", _day(2), "mệt"),
        (school.an_id, "sad", _day(1), ""),
        (school.an_id, "sad", _day(0), "buồn"),
        (school.binh_id, "happy", _day(1), "vui"),
    )
    return school


@pytest.fixture
def generator() -> AsyncMock:
    """A narrative generator mock answering with a fixed narrative."""
    mock = AsyncMock()
    mock.generate.return_value = Narrative(
        summary="The class is mostly calm.",
        insights=["An has been sad for three days."],
        suggestions=["Talk to An privately."],
    )
    return mock


def _service(db_session, settings, vocabulary, generator) -> WellbeingAnalyticsService:
    return WellbeingAnalyticsService(db_session, generator, vocabulary, settings)


class TestClassAnalysis:
    """Tests for class_analysis."""

    async def test_statistics_merged_with_narrative(
        self, db_session, settings, vocabulary, generator, seeded
    ) -> None:
        """Test a successful analysis."""
        service = _service(db_session, settings, vocabulary, generator)

        result = await service.class_analysis(seeded.class_id, days=7, now=NOW)

        assert result.class_name == "7A"
        assert result.total_submissions == 4
        assert result.emotion_distribution["sad"] == 3
        assert result.emotion_percentages["sad"] == 75.0
        assert [s.student_id for s in result.concerning_students] == [seeded.an_id]
        assert result.concerning_students[0].risk_level == "high"
        assert result.concerning_students[0].risk_score == 85.0
        assert result.narrative_available is True
        assert result.summary == "The class is mostly calm."
        assert result.suggestions == ["Talk to An privately."]
        assert result.note is None

        context = generator.generate.call_args.args[0]
        assert context.scope == "class"
        assert context.subject == "7A"
        assert [r.student_id for r in context.concerning] == [seeded.an_id]

    async def test_generator_error_degrades_to_note(
        self, db_session, settings, vocabulary, generator, seeded
    ) -> None:
        """Test that a failing generator keeps the statistics."""
        generator.generate.side_effect = LLMError("provider down")
        service = _service(db_session, settings, vocabulary, generator)

        result = await service.class_analysis(seeded.class_id, days=7, now=NOW)

        assert result.narrative_available is False
        assert result.note == NARRATIVE_FAILED_NOTE
        assert result.summary == ""
        assert result.total_submissions == 4
        assert len(result.concerning_students) == 1

    async def test_generator_timeout_degrades_to_note(
        self, db_session, settings, vocabulary, seeded
    ) -> None:
        """Test that a slow generator is cut off."""
        service = _service(db_session, settings, vocabulary, SlowGenerator())

        result = await service.class_analysis(seeded.class_id, days=7, now=NOW)

        assert result.narrative_available is False
        assert result.note == NARRATIVE_FAILED_NOTE
        assert result.emotion_distribution["sad"] == 3

    async def test_null_generator_gives_unavailable_note(
        self, db_session, settings, vocabulary, seeded
    ) -> None:
        """Test the not-configured case."""
        service = _service(db_session, settings, vocabulary, NullNarrativeGenerator())

        result = await service.class_analysis(seeded.class_id, days=7, now=NOW)

        assert result.narrative_available is False
        assert result.note == NARRATIVE_UNAVAILABLE_NOTE

    async def test_empty_window_skips_generator(
        self, db_session, settings, vocabulary, generator, school
    ) -> None:
        """Test that no check-ins means no narrative call."""
        service = _service(db_session, settings, vocabulary, generator)

        result = await service.class_analysis(school.class_id, days=7, now=NOW)

        generator.generate.assert_not_called()
        assert result.total_submissions == 0
        assert result.summary == NO_CLASS_DATA_NOTE
        assert result.concerning_students == []

    async def test_unknown_class_raises(
        self, db_session, settings, vocabulary, generator, school
    ) -> None:
        """Test that a missing class raises ClassNotFoundError."""
        service = _service(db_session, settings, vocabulary, generator)

        with pytest.raises(ClassNotFoundError):
            await service.class_analysis("missing", days=7, now=NOW)


class TestClassOverview:
    """Tests for class_overview."""

    async def test_overview(self, db_session, settings, vocabulary, generator, seeded) -> None:
        """Test distribution, trends and today's status."""
        service = _service(db_session, settings, vocabulary, generator)

        result = await service.class_overview(seeded.class_id, days=7, now=NOW)

        assert result.total_students == 3
        assert result.total_emotions == 4
        assert [d.date for d in result.daily_trends] == [
            "2025-03-08",
            "2025-03-09",
            "2025-03-10",
        ]
        assert result.daily_trends[1].total == 2
        assert result.submitted_today == 1
        status = {s.student_id: s for s in result.submission_status}
        assert status[seeded.an_id].submitted is True
        assert status[seeded.an_id].mood == "sad"
        assert status[seeded.chi_id].submitted is False
        assert result.recent_emotions[0].student_name == "Nguyen Van An"
        assert result.recent_emotions[0].message == "buồn"
        generator.generate.assert_not_called()


class TestStudentAnalysis:
    """Tests for student_analysis."""

    async def test_student_with_data(
        self, db_session, settings, vocabulary, generator, seeded
    ) -> None:
        """Test risk, breakdown and narrative for one student."""
        service = _service(db_session, settings, vocabulary, generator)

        result = await service.student_analysis(seeded.an_id, days=7, now=NOW)

        assert result.name == "Nguyen Van An"
        assert result.total_submissions == 3
        assert result.risk.risk_level == "high"
        assert result.risk.consecutive_negative_days == 3
        assert len(result.daily_breakdown) == 3
        assert result.narrative_available is True
        context = generator.generate.call_args.args[0]
        assert context.scope == "student"
        assert context.messages == [
            'Nguyen Van An (sad): "buồn"',
            'Nguyen Van An (sad): "mệt"',
        ]

    async def test_student_without_data(
        self, db_session, settings, vocabulary, generator, seeded
    ) -> None:
        """Test a silent student: low risk, no narrative call."""
        service = _service(db_session, settings, vocabulary, generator)

        result = await service.student_analysis(seeded.chi_id, days=7, now=NOW)

        generator.generate.assert_not_called()
        assert result.total_submissions == 0
        assert result.risk.risk_level == "low"
        assert "no emotion data" in result.summary

    async def test_unknown_student_raises(
        self, db_session, settings, vocabulary, generator, school
    ) -> None:
        """Test that a missing student raises StudentNotFoundError."""
        service = _service(db_session, settings, vocabulary, generator)

        with pytest.raises(StudentNotFoundError):
            await service.student_analysis("missing", days=7, now=NOW)
