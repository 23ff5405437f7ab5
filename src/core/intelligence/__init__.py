# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Intelligence module for AI-powered narratives.

This module provides:
- LLMClient: LLM completions via LiteLLM (OpenAI, Anthropic, Ollama, ...)
- NarrativeGenerator: structured statistics -> narrative text

Example:
    >>> from src.core.intelligence import build_narrative_generator
    >>> generator = build_narrative_generator(settings)
    >>> narrative = await generator.generate(context)
"""

from src.core.intelligence.llm import LLMClient, LLMError, LLMResponse
from src.core.intelligence.narrative import (
    LLMNarrativeGenerator,
    Narrative,
    NarrativeContext,
    NarrativeGenerator,
    NullNarrativeGenerator,
    build_narrative_generator,
)

__all__ = [
    # LLM
    "LLMClient",
    "LLMError",
    "LLMResponse",
    # Narrative
    "Narrative",
    "NarrativeContext",
    "NarrativeGenerator",
    "LLMNarrativeGenerator",
    "NullNarrativeGenerator",
    "build_narrative_generator",
]
