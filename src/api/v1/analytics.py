# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Wellbeing analytics API endpoints.

This module provides endpoints for teachers:
- GET /classes/{class_id} - Class mood overview and today's check-in status
- POST /classes/analysis - Class risk analysis with optional narrative
- POST /students/{student_id} - Single student analysis with optional narrative

A missing or failing narrative never fails these endpoints; the response
carries ``narrativeAvailable=false`` and a note instead.

Example:
    POST /api/v1/analytics/classes/analysis
    {"classId": "...", "days": 7}
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status

from src.api.dependencies import get_analytics_service
from src.domains.analytics import WellbeingAnalyticsService
from src.domains.analytics.schemas import (
    ClassAnalysisRequest,
    ClassAnalysisResponse,
    ClassOverviewResponse,
    StudentAnalysisResponse,
)
from src.domains.wellbeing import ClassNotFoundError, StudentNotFoundError

logger = logging.getLogger(__name__)

router = APIRouter()

DaysQuery = Annotated[
    int | None,
    Query(ge=1, description="Window length in days; 1 means today"),
]


@router.get(
    "/classes/{class_id}",
    response_model=ClassOverviewResponse,
    summary="Class overview",
    description="Mood distribution, daily trends and today's check-in status.",
)
async def get_class_overview(
    class_id: str,
    days: DaysQuery = None,
    service: WellbeingAnalyticsService = Depends(get_analytics_service),
) -> ClassOverviewResponse:
    """Get a class mood overview."""
    try:
        return await service.class_overview(class_id, days=days)
    except ClassNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Class not found",
        )


@router.post(
    "/classes/analysis",
    response_model=ClassAnalysisResponse,
    summary="Analyse class",
    description="Risk classification of every student plus a narrative summary.",
)
async def analyze_class(
    data: ClassAnalysisRequest,
    service: WellbeingAnalyticsService = Depends(get_analytics_service),
) -> ClassAnalysisResponse:
    """Analyse a class over a window.

    Args:
        data: Class and window.
        service: Analytics service.

    Returns:
        Distribution, concerning students and narrative or fallback note.

    Raises:
        HTTPException: If the class does not exist.
    """
    logger.info("Class analysis requested: class_id=%s, days=%s", data.class_id, data.days)

    try:
        return await service.class_analysis(data.class_id, days=data.days)
    except ClassNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Class not found",
        )


@router.post(
    "/students/{student_id}",
    response_model=StudentAnalysisResponse,
    summary="Analyse student",
    description="Risk, trend and narrative for a single student.",
)
async def analyze_student(
    student_id: str,
    days: DaysQuery = None,
    service: WellbeingAnalyticsService = Depends(get_analytics_service),
) -> StudentAnalysisResponse:
    """Analyse a single student over a window."""
    try:
        return await service.student_analysis(student_id, days=days)
    except StudentNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Student not found",
        )
