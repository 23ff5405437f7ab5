# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Narrative generation for wellbeing analyses.

The analytics service hands structured statistics to a NarrativeGenerator
and merges whatever text comes back. Nothing downstream depends on the
narrative for correctness; a generator may return None and the caller
substitutes a neutral note.

Implementations:
- LLMNarrativeGenerator: prompts an LLM through LLMClient, asks for JSON
- NullNarrativeGenerator: used when narrative generation is disabled or
  no provider is configured

build_narrative_generator() picks one once at startup.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Literal, Protocol

from src.core.intelligence.llm.client import LLMClient
from src.core.wellbeing.constants import RISK_LEVEL_PRIORITY, RiskLevel
from src.core.wellbeing.context import StudentRisk

if TYPE_CHECKING:
    from src.core.config.settings import Settings

logger = logging.getLogger(__name__)


@dataclass
class NarrativeContext:
    """Structured statistics a narrative is written from.

    Attributes:
        scope: Whether the analysis covers a class or a single student.
        subject: Class or student display name.
        window_days: Length of the analysis window.
        total_submissions: Check-ins in the window.
        emotion_counts: Mood tag -> count.
        percentages: Mood tag -> percentage of total, 1 decimal.
        concerning: Students needing attention, highest score first.
        messages: Sampled messages, already formatted for the prompt.
    """

    scope: Literal["class", "student"]
    subject: str
    window_days: int
    total_submissions: int
    emotion_counts: dict[str, int]
    percentages: dict[str, float]
    concerning: list[StudentRisk] = field(default_factory=list)
    messages: list[str] = field(default_factory=list)


@dataclass
class Narrative:
    """Generated narrative text.

    Attributes:
        summary: Overall summary paragraph.
        insights: Observed patterns and trends.
        suggestions: Concrete actions for the teacher.
    """

    summary: str
    insights: list[str] = field(default_factory=list)
    suggestions: list[str] = field(default_factory=list)


class NarrativeGenerator(Protocol):
    """Turns structured wellbeing statistics into narrative text."""

    async def generate(self, context: NarrativeContext) -> Narrative | None:
        """Generate a narrative, or None if unavailable."""
        ...


class NullNarrativeGenerator:
    """Generator that never produces a narrative."""

    async def generate(self, context: NarrativeContext) -> Narrative | None:
        return None


# =============================================================================
# Prompt building
# =============================================================================

SYSTEM_PROMPT = (
    "You are a school psychologist with twenty years of experience supporting "
    "lower secondary students. You answer in {language}, in a natural, "
    "professional, empathetic and practical tone."
)

RESPONSE_FORMAT_INSTRUCTIONS = (
    "Respond with a JSON object only, using the keys "
    '"summary" (string), "insights" (list of strings) and '
    '"suggestions" (list of strings). Write every value in {language}.'
)

_LEVEL_HEADINGS = {
    RiskLevel.CRITICAL: "CRITICAL (danger keywords in messages, act immediately)",
    RiskLevel.HIGH: "HIGH RISK",
    RiskLevel.MEDIUM: "MEDIUM RISK",
}


def format_window(window_days: int) -> str:
    """Describe an analysis window in words."""
    return "today" if window_days <= 1 else f"the last {window_days} days"


def format_distribution(context: NarrativeContext) -> list[str]:
    """Render one line per mood tag with percentage and count."""
    return [
        f"  - {mood}: {context.percentages.get(mood, 0.0)}% ({count} check-ins)"
        for mood, count in context.emotion_counts.items()
    ]


def format_concerning(concerning: list[StudentRisk]) -> list[str]:
    """Render concerning students grouped by level, most severe first."""
    if not concerning:
        return ["No student needs special attention. The class is stable."]

    lines = ["STUDENTS NEEDING ATTENTION:"]
    levels = sorted(
        {s.assessment.risk_level for s in concerning},
        key=lambda level: RISK_LEVEL_PRIORITY[level],
        reverse=True,
    )
    for level in levels:
        lines.append(f"{_LEVEL_HEADINGS.get(level, level.value.upper())}:")
        for student in concerning:
            a = student.assessment
            if a.risk_level != level:
                continue
            if level == RiskLevel.CRITICAL:
                lines.append(f"- {student.name}: dangerous wording in messages")
                if a.dangerous_messages:
                    lines.append(f'  Message: "{a.dangerous_messages[0]}"')
            else:
                lines.append(
                    f"- {student.name}: {a.negative_ratio}% negative check-ins, "
                    f"{a.consecutive_negative_days} consecutive negative days"
                )
    return lines


def build_class_prompt(context: NarrativeContext, language: str) -> str:
    """Build the user prompt for a class analysis."""
    lines = [
        f"Analyse the emotional check-ins of class {context.subject} "
        f"for {format_window(context.window_days)}.",
        "",
        "DATA:",
        f"- Total check-ins: {context.total_submissions}",
        "- Mood distribution:",
        *format_distribution(context),
        "",
        *format_concerning(context.concerning),
    ]

    if context.messages:
        lines += ["", "SAMPLE OF STUDENT MESSAGES:", *context.messages]

    lines += [
        "",
        "Provide:",
        "1. A short summary (2-3 sentences) of the overall emotional climate.",
        "2. Insights: at least 3 patterns, trends or notable points.",
        "3. Suggestions: 3-4 concrete actions the teacher can take now, "
        "each with the action, the reason and when to do it.",
    ]
    if context.concerning:
        lines.append(
            "Give specific suggestions for each student listed as needing attention."
        )

    lines += ["", RESPONSE_FORMAT_INSTRUCTIONS.format(language=language)]
    return "\n".join(lines)


def build_student_prompt(context: NarrativeContext, language: str) -> str:
    """Build the user prompt for a single-student analysis."""
    lines = [
        f"Analyse the emotional check-ins of student {context.subject} "
        f"for {format_window(context.window_days)}.",
        "",
        "STATISTICS:",
        f"- Total check-ins: {context.total_submissions}",
        *format_distribution(context),
    ]

    if context.concerning:
        lines += ["", *format_concerning(context.concerning)]

    if context.messages:
        lines += ["", "SOME MESSAGES:", *context.messages]

    lines += [
        "",
        "Provide:",
        "1. A summary (2-3 sentences) of the student's emotional situation.",
        "2. Insights on the emotional trend.",
        "3. 3-4 concrete suggestions to support the student.",
        "",
        RESPONSE_FORMAT_INSTRUCTIONS.format(language=language),
    ]
    return "\n".join(lines)


def parse_narrative(content: str) -> Narrative | None:
    """Parse the model output into a Narrative.

    JSON output is preferred; plain text is kept whole as the summary.

    Args:
        content: Raw completion text.

    Returns:
        Parsed Narrative, or None for empty output.
    """
    text = content.strip()
    if not text:
        return None

    # Strip a Markdown code fence around the JSON
    if text.startswith("```"):
        text = text.strip("`")
        if text.lower().startswith("json"):
            text = text[4:]
        text = text.strip()

    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        return Narrative(summary=content.strip())

    if not isinstance(data, dict) or not data.get("summary"):
        return Narrative(summary=content.strip())

    return Narrative(
        summary=str(data["summary"]),
        insights=[str(i) for i in data.get("insights") or []],
        suggestions=[str(s) for s in data.get("suggestions") or []],
    )


class LLMNarrativeGenerator:
    """Narrative generator backed by an LLM.

    Errors from the provider propagate; the analytics service applies the
    timeout and the fallback note.
    """

    def __init__(
        self,
        client: LLMClient,
        response_language: str = "Vietnamese",
        student_max_tokens: int = 500,
    ) -> None:
        """Initialize the generator.

        Args:
            client: LLM client used for completions.
            response_language: Language the narrative is written in.
            student_max_tokens: Token cap for single-student narratives.
        """
        self._client = client
        self._language = response_language
        self._student_max_tokens = student_max_tokens

    async def generate(self, context: NarrativeContext) -> Narrative | None:
        """Generate a narrative for a class or student analysis."""
        if context.scope == "class":
            prompt = build_class_prompt(context, self._language)
            max_tokens = None
        else:
            prompt = build_student_prompt(context, self._language)
            max_tokens = self._student_max_tokens

        response = await self._client.complete(
            prompt=prompt,
            system_prompt=SYSTEM_PROMPT.format(language=self._language),
            max_tokens=max_tokens,
        )

        logger.info(
            "Narrative generated: scope=%s, subject=%s, tokens=%d",
            context.scope,
            context.subject,
            response.total_tokens,
        )

        return parse_narrative(response.content)


def build_narrative_generator(settings: "Settings") -> NarrativeGenerator:
    """Create the narrative generator for the application.

    Args:
        settings: Application settings.

    Returns:
        An LLM-backed generator when enabled and configured, otherwise a
        NullNarrativeGenerator.
    """
    if not settings.narrative.enabled:
        logger.info("Narrative generation disabled")
        return NullNarrativeGenerator()

    if not settings.llm.is_configured:
        logger.warning(
            "Narrative generation enabled but no LLM provider configured "
            "(set LLM_API_KEY or LLM_API_BASE)"
        )
        return NullNarrativeGenerator()

    return LLMNarrativeGenerator(
        client=LLMClient(settings.llm),
        response_language=settings.narrative.response_language,
    )
