# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Analytics domain package.

This package provides teacher-facing wellbeing analytics:
- ClassRiskAggregator: risk classifier over a class and window
- WellbeingAnalyticsService: class overview, class and student analysis

Usage:
    from src.domains.analytics import WellbeingAnalyticsService

    service = WellbeingAnalyticsService(db, generator, vocabulary, settings)
    analysis = await service.class_analysis(class_id, days=7)
"""

from src.domains.analytics.risk_aggregator import (
    ClassRiskAggregator,
    ClassRiskReport,
    daily_breakdown,
    mood_percentages,
    sample_messages,
    tally_moods,
)
from src.domains.analytics.service import WellbeingAnalyticsService

__all__ = [
    "ClassRiskAggregator",
    "ClassRiskReport",
    "WellbeingAnalyticsService",
    "daily_breakdown",
    "mood_percentages",
    "sample_messages",
    "tally_moods",
]
