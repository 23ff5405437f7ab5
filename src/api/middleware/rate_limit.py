# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Rate limiting middleware using slowapi.

This module provides rate limiting for the check-in endpoint so a single
client cannot flood the emotion store. Limits are applied per client IP.

Example:
    @router.post("")
    @limiter.limit(submission_limit)
    async def submit_emotion(request: Request, ...):
        ...
"""

import logging

from fastapi import Request, Response
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from src.core.config import get_settings

logger = logging.getLogger(__name__)


def get_client_identifier(request: Request) -> str:
    """Get a unique identifier for the client.

    Args:
        request: HTTP request.

    Returns:
        Client identifier string.
    """
    return f"ip:{get_remote_address(request)}"


def submission_limit() -> str:
    """Current submission limit, read from settings on every check."""
    return f"{get_settings().rate_limit.submissions_per_minute}/minute"


# Create the limiter instance
limiter = Limiter(
    key_func=get_client_identifier,
    storage_uri=get_settings().rate_limit.storage_uri,
)


async def rate_limit_exceeded_handler(
    request: Request,
    exc: RateLimitExceeded,
) -> Response:
    """Handle rate limit exceeded errors.

    Returns a 429 Too Many Requests response with retry information.

    Args:
        request: HTTP request.
        exc: Rate limit exceeded exception.

    Returns:
        JSON response with error details.
    """
    logger.warning(
        "Rate limit exceeded: %s for %s",
        exc.detail,
        get_client_identifier(request),
    )

    return Response(
        content='{"detail": "Too many requests. Please try again later."}',
        status_code=429,
        media_type="application/json",
        headers={"Retry-After": "60"},
    )
