# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Domain services layer for MoodPulse.

Each domain module provides services that orchestrate the stores and the
pure wellbeing engine.

Domains:
    wellbeing: Emotion submissions, streaks and milestone awards.
    analytics: Class and student risk analysis with narrative generation.
"""
