# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Database infrastructure for the wellbeing stores.

Example:
    from src.infrastructure.database import init_database, get_session

    await init_database(settings)

    async with get_session() as session:
        result = await session.execute(select(EmotionRecord))
"""

from src.infrastructure.database.connection import (
    DatabaseError,
    check_database_connection,
    close_database,
    create_engine_for_url,
    create_sessionmaker,
    create_tables,
    get_engine,
    get_session,
    get_sessionmaker,
    init_database,
    session_scope,
)

__all__ = [
    "DatabaseError",
    "check_database_connection",
    "close_database",
    "create_engine_for_url",
    "create_sessionmaker",
    "create_tables",
    "get_engine",
    "get_session",
    "get_sessionmaker",
    "init_database",
    "session_scope",
]
