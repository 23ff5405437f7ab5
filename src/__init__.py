"""MoodPulse Backend.

School emotional-wellbeing tracker: daily mood check-ins, streaks and
milestones for students, and risk-aware class analysis for teachers.

Copyright (C) 2025 Global Digital Labs (gdlabs.io)
SPDX-License-Identifier: LGPL-3.0-or-later
"""

__version__ = "1.0.0"
