# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""ASGI entry point.

Run with ``uvicorn src.main:app`` or ``python -m src.main``.
"""

from src.api.app import create_app
from src.core.config import get_settings

app = create_app()


def run() -> None:
    """Serve the API with uvicorn using the API_* settings."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "src.main:app",
        host=settings.api.host,
        port=settings.api.port,
        workers=settings.api.workers,
        reload=settings.api.reload,
    )


if __name__ == "__main__":
    run()
