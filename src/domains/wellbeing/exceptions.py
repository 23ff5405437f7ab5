# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Exceptions for the wellbeing domain.

This module defines the exception hierarchy for check-in, streak and
analysis operations:
- WellbeingServiceError: Base exception for all wellbeing errors
- StudentNotFoundError / ClassNotFoundError: Unknown references
- InvalidMoodError: Mood tag outside the vocabulary
- DuplicateSubmissionError: Second check-in on the same calendar day
- StreakConflictError: Concurrent streak update lost the race
"""


class WellbeingServiceError(Exception):
    """Base exception for wellbeing service errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional error context.
    """

    def __init__(self, message: str, details: dict | None = None):
        """Initialize wellbeing error.

        Args:
            message: Human-readable error description.
            details: Optional dictionary with additional error context.
        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation with details if available."""
        if self.details:
            return f"{self.message} - Details: {self.details}"
        return self.message


class StudentNotFoundError(WellbeingServiceError):
    """Raised when a student does not exist."""

    def __init__(self, student_id: str):
        self.student_id = student_id
        super().__init__("Student not found", {"student_id": student_id})


class ClassNotFoundError(WellbeingServiceError):
    """Raised when a class does not exist."""

    def __init__(self, class_id: str):
        self.class_id = class_id
        super().__init__("Class not found", {"class_id": class_id})


class InvalidMoodError(WellbeingServiceError):
    """Raised when a mood tag is not in the vocabulary."""

    def __init__(self, mood: str, allowed: tuple[str, ...]):
        self.mood = mood
        self.allowed = allowed
        super().__init__(
            f"Invalid mood '{mood}'",
            {"allowed": list(allowed)},
        )


class DuplicateSubmissionError(WellbeingServiceError):
    """Raised when a student already checked in today."""

    def __init__(self, student_id: str, day: str):
        self.student_id = student_id
        self.day = day
        super().__init__(
            "You have already shared your emotion today. Come back tomorrow!",
            {"student_id": student_id, "day": day},
        )


class StreakConflictError(WellbeingServiceError):
    """Raised when a concurrent submission updated the same streak.

    The whole submission transaction is rolled back; retrying is safe.
    """

    def __init__(self, student_id: str):
        self.student_id = student_id
        super().__init__("Concurrent streak update", {"student_id": student_id})
