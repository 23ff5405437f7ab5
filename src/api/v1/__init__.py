# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""API v1 routes package.

This package contains all v1 API endpoint definitions.
Each module provides a FastAPI router for a specific domain.

Modules:
    emotions: Emotion check-in endpoints (submit, today check, history).
    streaks: Streak summary endpoints.
    analytics: Teacher analytics endpoints (overview, class and student analysis).
"""

from fastapi import APIRouter

from src.api.v1 import analytics, emotions, streaks

# Create the main v1 router
router = APIRouter(prefix="/api/v1")

# Include domain routers
router.include_router(emotions.router, prefix="/emotions", tags=["Emotions"])
router.include_router(streaks.router, prefix="/streaks", tags=["Streaks"])
router.include_router(analytics.router, prefix="/analytics", tags=["Analytics"])

__all__ = ["router"]
