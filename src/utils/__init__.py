# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Utility functions and helpers for MoodPulse.

This package contains cross-cutting utilities:
- logging: Structured logging with structlog
- datetime: Timezone-aware datetime and calendar-day operations
"""

from src.utils.datetime import (
    day_key,
    day_start,
    ensure_utc,
    get_zone,
    local_day,
    utc_now,
    window_bounds,
)
from src.utils.logging import bind_context, clear_context, setup_logging

__all__ = [
    # Logging
    "setup_logging",
    "bind_context",
    "clear_context",
    # Datetime
    "utc_now",
    "ensure_utc",
    "get_zone",
    "local_day",
    "day_key",
    "day_start",
    "window_bounds",
]
