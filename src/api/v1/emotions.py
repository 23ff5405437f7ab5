# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Emotion check-in API endpoints.

This module provides endpoints for student check-ins:
- POST / - Submit today's emotion (rate limited)
- GET /check/{student_id} - Has the student checked in today?
- GET /students/{student_id} - Recent check-ins, newest first

Example:
    POST /api/v1/emotions
    {"studentId": "...", "mood": "happy", "message": "Great day"}
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import get_db, get_submission_service
from src.api.middleware.rate_limit import limiter, submission_limit
from src.domains.wellbeing import (
    DuplicateSubmissionError,
    EmotionSubmissionService,
    InvalidMoodError,
    StudentNotFoundError,
)
from src.domains.wellbeing.schemas import (
    EmotionHistoryResponse,
    EmotionSubmitRequest,
    EmotionSubmitResponse,
    TodayCheckResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "",
    response_model=EmotionSubmitResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Submit emotion",
    description="Record today's emotion check-in, update the streak and award points.",
)
@limiter.limit(submission_limit)
async def submit_emotion(
    request: Request,
    data: EmotionSubmitRequest,
    service: EmotionSubmissionService = Depends(get_submission_service),
    db: AsyncSession = Depends(get_db),
) -> EmotionSubmitResponse:
    """Submit an emotion check-in.

    Args:
        request: HTTP request (used by the rate limiter).
        data: Check-in data.
        service: Submission service.
        db: Database session, committed once the check-in is complete.

    Returns:
        Stored check-in with points, streak and any milestone award.

    Raises:
        HTTPException: If the mood is invalid, the student does not exist
            or the student already checked in today.
    """
    try:
        response = await service.submit(data)
    except InvalidMoodError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=e.message,
        )
    except StudentNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Student not found",
        )
    except DuplicateSubmissionError as e:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=e.message,
        )

    await db.commit()
    return response


@router.get(
    "/check/{student_id}",
    response_model=TodayCheckResponse,
    summary="Check today's submission",
    description="Whether the student has already checked in today.",
)
async def check_today(
    student_id: str,
    service: EmotionSubmissionService = Depends(get_submission_service),
) -> TodayCheckResponse:
    """Check whether a student has checked in today."""
    try:
        return await service.has_submitted_today(student_id)
    except StudentNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Student not found",
        )


@router.get(
    "/students/{student_id}",
    response_model=EmotionHistoryResponse,
    summary="List student emotions",
    description="Recent check-ins of a student, newest first.",
)
async def list_student_emotions(
    student_id: str,
    limit: Annotated[int, Query(ge=1, le=100, description="Maximum results")] = 30,
    service: EmotionSubmissionService = Depends(get_submission_service),
) -> EmotionHistoryResponse:
    """List a student's recent check-ins.

    Args:
        student_id: Student ID.
        limit: Maximum number of check-ins.
        service: Submission service.

    Returns:
        Check-ins, newest first.
    """
    try:
        return await service.list_student_emotions(student_id, limit=limit)
    except StudentNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Student not found",
        )
