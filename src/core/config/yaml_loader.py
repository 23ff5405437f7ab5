# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""YAML loading for localisable wellbeing data.

The mood vocabulary (tags, the negative subset and the danger-keyword
list) ships with built-in defaults. A school can point
WELLBEING_VOCABULARY_FILE at a YAML file such as config/wellbeing.yaml
to translate or extend those lists; load_vocabulary() reads the file with
load_yaml() and lays it over the defaults with deep_merge().

Example:
    >>> from pathlib import Path
    >>> overrides = load_yaml(Path("config/wellbeing.yaml"))
    >>> merged = deep_merge(
    ...     {"moods": {"tags": ["happy", "sad"]}, "risk": {"danger_keywords": []}},
    ...     overrides,
    ... )
"""

from pathlib import Path
from typing import Any

import yaml


class YAMLLoadError(Exception):
    """Raised when a vocabulary file is missing, unreadable or malformed.

    Attributes:
        path: The file that failed to load.
        reason: What went wrong.
    """

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to load YAML file '{path}': {reason}")


def load_yaml(path: Path) -> dict[str, Any]:
    """Read a vocabulary override file.

    The file must hold a mapping at the top level (``moods:``, ``risk:``).
    An empty file means "no overrides".

    Args:
        path: Path to the YAML file.

    Returns:
        The parsed mapping, or an empty dict for an empty file.

    Raises:
        YAMLLoadError: If the file is missing, is not a regular file,
            cannot be read, is not valid YAML or has a non-mapping root.
    """
    if not path.is_file():
        reason = "Path is not a file" if path.exists() else "File does not exist"
        raise YAMLLoadError(path, reason)

    try:
        parsed = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise YAMLLoadError(path, f"Cannot read file: {e}") from e
    except yaml.YAMLError as e:
        raise YAMLLoadError(path, f"Invalid YAML syntax: {e}") from e

    if parsed is None:
        return {}
    if not isinstance(parsed, dict):
        raise YAMLLoadError(
            path, f"YAML root must be a mapping, got {type(parsed).__name__}"
        )
    return parsed


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Lay override values over the defaults, section by section.

    Sections (nested mappings) merge key by key, so a file that only sets
    ``risk.danger_keywords`` keeps the default mood tags. Lists replace
    the default list whole: a school that lists its own danger keywords
    gets exactly those.

    Args:
        base: Default values.
        override: Values read from the file.

    Returns:
        A new dict; neither input is modified.
    """
    result = dict(base)
    for key, value in override.items():
        current = result.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            result[key] = deep_merge(current, value)
        else:
            result[key] = value
    return result
