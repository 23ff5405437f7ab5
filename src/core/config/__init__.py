# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Configuration package for MoodPulse.

This package provides centralized configuration management:
- Settings: Pydantic-based settings loaded from environment variables
- YAML loader: Utilities for loading localisable YAML data files

Example:
    >>> from src.core.config import get_settings
    >>> settings = get_settings()
    >>> print(settings.wellbeing.timezone)
    'UTC'
"""

from src.core.config.settings import (
    APISettings,
    CORSSettings,
    DatabaseSettings,
    LLMSettings,
    NarrativeSettings,
    RateLimitSettings,
    Settings,
    WellbeingSettings,
    clear_settings_cache,
    get_settings,
)
from src.core.config.yaml_loader import (
    YAMLLoadError,
    deep_merge,
    load_yaml,
)

__all__ = [
    # Settings
    "Settings",
    "get_settings",
    "clear_settings_cache",
    # Subsettings
    "DatabaseSettings",
    "LLMSettings",
    "NarrativeSettings",
    "WellbeingSettings",
    "RateLimitSettings",
    "CORSSettings",
    "APISettings",
    # YAML utilities
    "load_yaml",
    "deep_merge",
    "YAMLLoadError",
]
