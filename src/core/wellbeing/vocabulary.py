# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Wellbeing vocabulary: mood tags, negative moods and danger keywords.

The vocabulary is plain data injected into the risk classifier and the
submission service. Schools can localise it with a YAML file whose
content is deep-merged over the built-in defaults:

    moods:
      tags: [happy, neutral, sad, angry, tired]
      negative: [sad, angry, tired]
    risk:
      danger_keywords:
        - "tự tử"
        - "không muốn sống"

Lists replace the defaults rather than extending them.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from src.core.config.yaml_loader import deep_merge, load_yaml
from src.core.wellbeing.constants import (
    DEFAULT_DANGER_KEYWORDS,
    DEFAULT_MOOD_TAGS,
    DEFAULT_NEGATIVE_MOODS,
)

logger = logging.getLogger(__name__)


class VocabularyError(ValueError):
    """Raised when a vocabulary definition is inconsistent."""


@dataclass(frozen=True)
class WellbeingVocabulary:
    """Configurable words the wellbeing core reasons about.

    Attributes:
        mood_tags: Accepted mood tags, in display order.
        negative_moods: Subset of mood_tags counted as negative.
        danger_keywords: Lower-cased phrases that flag a message as critical.
    """

    mood_tags: tuple[str, ...] = DEFAULT_MOOD_TAGS
    negative_moods: frozenset[str] = frozenset(DEFAULT_NEGATIVE_MOODS)
    danger_keywords: tuple[str, ...] = DEFAULT_DANGER_KEYWORDS

    def __post_init__(self) -> None:
        if not self.mood_tags:
            raise VocabularyError("At least one mood tag is required")

        unknown = set(self.negative_moods) - set(self.mood_tags)
        if unknown:
            raise VocabularyError(
                f"Negative moods not in mood tags: {', '.join(sorted(unknown))}"
            )

        # Matching is case-insensitive; normalise once here
        object.__setattr__(
            self,
            "danger_keywords",
            tuple(k.strip().lower() for k in self.danger_keywords if k.strip()),
        )

    def is_valid_mood(self, mood: str) -> bool:
        """Check whether a mood tag is accepted."""
        return mood in self.mood_tags

    def is_negative(self, mood: str) -> bool:
        """Check whether a mood tag counts as negative."""
        return mood in self.negative_moods

    def find_danger_keyword(self, message: str | None) -> str | None:
        """Return the first danger keyword contained in a message.

        Args:
            message: Free-text note, possibly empty.

        Returns:
            The matching keyword, or None.
        """
        if not message:
            return None

        lowered = message.lower()
        for keyword in self.danger_keywords:
            if keyword in lowered:
                return keyword
        return None

    def empty_distribution(self) -> dict[str, int]:
        """Zero count for every mood tag, in display order."""
        return {tag: 0 for tag in self.mood_tags}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "WellbeingVocabulary":
        """Build a vocabulary from its YAML mapping form."""
        moods = data.get("moods") or {}
        risk = data.get("risk") or {}
        return cls(
            mood_tags=tuple(str(t) for t in moods.get("tags", DEFAULT_MOOD_TAGS)),
            negative_moods=frozenset(
                str(t) for t in moods.get("negative", DEFAULT_NEGATIVE_MOODS)
            ),
            danger_keywords=tuple(
                str(k) for k in risk.get("danger_keywords", DEFAULT_DANGER_KEYWORDS)
            ),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to the YAML mapping form."""
        return {
            "moods": {
                "tags": list(self.mood_tags),
                "negative": [t for t in self.mood_tags if t in self.negative_moods],
            },
            "risk": {"danger_keywords": list(self.danger_keywords)},
        }


def load_vocabulary(path: Path | None = None) -> WellbeingVocabulary:
    """Load the vocabulary, merging an optional YAML file over the defaults.

    Args:
        path: YAML override file, or None for the defaults.

    Returns:
        The resulting vocabulary.

    Raises:
        YAMLLoadError: If the file cannot be read or parsed.
        VocabularyError: If the merged vocabulary is inconsistent.
    """
    defaults = WellbeingVocabulary().to_dict()
    if path is None:
        return WellbeingVocabulary.from_dict(defaults)

    merged = deep_merge(defaults, load_yaml(path))
    vocabulary = WellbeingVocabulary.from_dict(merged)

    logger.info(
        "Loaded wellbeing vocabulary from %s: %d moods, %d danger keywords",
        path,
        len(vocabulary.mood_tags),
        len(vocabulary.danger_keywords),
    )
    return vocabulary
