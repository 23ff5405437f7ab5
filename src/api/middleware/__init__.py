# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""API middleware components.

This package provides middleware for request processing:
- RequestContextMiddleware: Request id and logging context.
- limiter: Rate limiting per client.

Exports:
    RequestContextMiddleware: Logging context middleware.
    limiter: Shared slowapi limiter.
    rate_limit_exceeded_handler: 429 response builder.
"""

from src.api.middleware.rate_limit import (
    limiter,
    rate_limit_exceeded_handler,
    submission_limit,
)
from src.api.middleware.request_context import RequestContextMiddleware

__all__ = [
    "RequestContextMiddleware",
    "limiter",
    "rate_limit_exceeded_handler",
    "submission_limit",
]
