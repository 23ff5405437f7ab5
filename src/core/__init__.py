# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Core package for MoodPulse.

This package contains the core business logic and shared utilities:
- config: Application configuration and settings
- wellbeing: Risk classification and streak state machine (pure, no I/O)
- intelligence: LLM client and narrative generation
"""
