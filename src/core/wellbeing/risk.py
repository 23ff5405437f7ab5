# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Risk classification of a student's recent check-ins.

The classifier is a pure function of the submission history, the
vocabulary and the timezone defining a calendar day. It never raises for
well-formed input and an empty history classifies as low risk.

Decision rules, first match wins:
1. Any danger keyword in a message -> critical, score 100
2. >= 3 consecutive negative days or >= 60% negative -> high,
   score 70 + 5 * consecutive days
3. >= 40% negative or >= 2 consecutive negative days -> medium,
   score 40 + 0.5 * negative ratio
4. Otherwise -> low, score 0
"""

from collections.abc import Iterable, Sequence
from datetime import timezone, tzinfo

from src.core.wellbeing.constants import RiskLevel, RiskThresholds
from src.core.wellbeing.context import EmotionSubmission, RiskAssessment
from src.core.wellbeing.vocabulary import WellbeingVocabulary
from src.utils.datetime import day_key


def negative_ratio(
    history: Sequence[EmotionSubmission],
    vocabulary: WellbeingVocabulary,
) -> tuple[int, float]:
    """Count negative submissions and their percentage.

    Args:
        history: Submissions of one student.
        vocabulary: Defines which moods are negative.

    Returns:
        Tuple of (negative count, unrounded percentage). The percentage is
        0 for an empty history.
    """
    if not history:
        return 0, 0.0

    negative = sum(1 for e in history if vocabulary.is_negative(e.mood))
    return negative, 100.0 * negative / len(history)


def dangerous_messages(
    history: Iterable[EmotionSubmission],
    vocabulary: WellbeingVocabulary,
) -> list[str]:
    """Collect messages containing a danger keyword, in history order."""
    return [
        e.message
        for e in history
        if e.message and vocabulary.find_danger_keyword(e.message) is not None
    ]


def consecutive_negative_days(
    history: Iterable[EmotionSubmission],
    vocabulary: WellbeingVocabulary,
    tz: tzinfo = timezone.utc,
) -> int:
    """Longest run of negative days, walking days most recent first.

    A day is negative if any submission that day has a negative mood.
    Only days with at least one submission take part; a calendar day
    without submissions neither breaks nor extends a run.

    Args:
        history: Submissions of one student.
        vocabulary: Defines which moods are negative.
        tz: Timezone defining the calendar day.

    Returns:
        The maximum run length, 0 when no day is negative.
    """
    negative_by_day: dict[str, bool] = {}
    for emotion in history:
        key = day_key(emotion.submitted_at, tz)
        negative_by_day[key] = negative_by_day.get(key, False) or vocabulary.is_negative(
            emotion.mood
        )

    longest = 0
    run = 0
    for key in sorted(negative_by_day, reverse=True):
        if negative_by_day[key]:
            run += 1
            longest = max(longest, run)
        else:
            run = 0

    return longest


def decide_risk(
    ratio: float,
    negative_days: int,
    has_dangerous_keyword: bool,
) -> tuple[RiskLevel, float]:
    """Map risk signals to a level and score.

    Args:
        ratio: Unrounded negative percentage.
        negative_days: Longest run of negative days.
        has_dangerous_keyword: Whether a danger keyword matched.

    Returns:
        Tuple of (risk level, risk score).
    """
    if has_dangerous_keyword:
        return RiskLevel.CRITICAL, RiskThresholds.CRITICAL_SCORE

    if (
        negative_days >= RiskThresholds.CONSECUTIVE_DAYS_HIGH
        or ratio >= RiskThresholds.NEGATIVE_RATIO_HIGH
    ):
        score = RiskThresholds.HIGH_BASE_SCORE + RiskThresholds.HIGH_SCORE_PER_DAY * negative_days
        return RiskLevel.HIGH, score

    if (
        ratio >= RiskThresholds.NEGATIVE_RATIO_MEDIUM
        or negative_days >= RiskThresholds.CONSECUTIVE_DAYS_MEDIUM
    ):
        score = RiskThresholds.MEDIUM_BASE_SCORE + RiskThresholds.MEDIUM_RATIO_WEIGHT * ratio
        return RiskLevel.MEDIUM, score

    return RiskLevel.LOW, RiskThresholds.LOW_SCORE


class RiskClassifier:
    """Classifies a student's wellbeing risk from their check-in history.

    Example:
        classifier = RiskClassifier(vocabulary, tz=get_zone("Asia/Ho_Chi_Minh"))
        assessment = classifier.classify(student_id, history)
        if assessment.is_concerning:
            ...
    """

    def __init__(
        self,
        vocabulary: WellbeingVocabulary | None = None,
        tz: tzinfo = timezone.utc,
    ) -> None:
        """Initialize the classifier.

        Args:
            vocabulary: Moods and danger keywords, defaults when None.
            tz: Timezone defining the calendar day.
        """
        self._vocabulary = vocabulary or WellbeingVocabulary()
        self._tz = tz

    @property
    def vocabulary(self) -> WellbeingVocabulary:
        """The vocabulary used for classification."""
        return self._vocabulary

    def classify(
        self,
        student_id: str,
        history: Sequence[EmotionSubmission],
    ) -> RiskAssessment:
        """Classify one student's submissions within a window.

        Args:
            student_id: The student's ID.
            history: The student's submissions in the window, any order.

        Returns:
            RiskAssessment with the signals, level and score.
        """
        negative_count, ratio = negative_ratio(history, self._vocabulary)
        matched = dangerous_messages(history, self._vocabulary)
        negative_days = consecutive_negative_days(history, self._vocabulary, self._tz)

        level, score = decide_risk(ratio, negative_days, bool(matched))

        return RiskAssessment(
            student_id=student_id,
            window_emotions=len(history),
            negative_count=negative_count,
            negative_ratio=round(ratio, RiskThresholds.RATIO_DECIMALS),
            consecutive_negative_days=negative_days,
            has_dangerous_keyword=bool(matched),
            risk_level=level,
            risk_score=score,
            dangerous_messages=matched,
        )
