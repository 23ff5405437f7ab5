# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Streak API endpoints.

This module provides:
- GET /{student_id} - Streak counters and achieved milestones
"""

from fastapi import APIRouter, Depends, HTTPException, status

from src.api.dependencies import get_streak_service
from src.domains.wellbeing import StreakService, StudentNotFoundError
from src.domains.wellbeing.schemas import StreakResponse

router = APIRouter()


@router.get(
    "/{student_id}",
    response_model=StreakResponse,
    summary="Get streak",
    description="Current and longest streak with achieved milestones.",
)
async def get_streak(
    student_id: str,
    service: StreakService = Depends(get_streak_service),
) -> StreakResponse:
    """Get a student's streak summary."""
    try:
        return await service.get_streak(student_id)
    except StudentNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Student not found",
        )
