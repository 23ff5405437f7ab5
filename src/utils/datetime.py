# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""DateTime utilities for MoodPulse.

This module provides standardized datetime operations to ensure consistency
across the entire codebase. All datetime operations should use these utilities.

Design Decisions:
-----------------
1. All timestamps are stored in UTC
2. All Python datetimes are timezone-aware (with timezone.utc)
3. A "calendar day" (streaks, day keys, analysis windows) is always taken
   in the configured wellbeing timezone, never in server-local time

Usage:
------
    from src.utils.datetime import utc_now, local_day

    now = utc_now()
    today = local_day(now, get_zone("Asia/Ho_Chi_Minh"))
"""

from datetime import date, datetime, time, timedelta, timezone, tzinfo
from functools import lru_cache
from zoneinfo import ZoneInfo


def utc_now() -> datetime:
    """Get current UTC time as timezone-aware datetime.

    Returns:
        Timezone-aware datetime representing current UTC time.
    """
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """Ensure a datetime is timezone-aware UTC.

    Args:
        dt: A datetime object (naive or aware) or None.

    Returns:
        Timezone-aware UTC datetime or None.

    Note:
        - If dt is None, returns None
        - If dt is naive, assumes UTC and adds tzinfo
        - If dt is aware, converts to UTC
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        # Naive datetime - assume UTC
        return dt.replace(tzinfo=timezone.utc)

    return dt.astimezone(timezone.utc)


@lru_cache(maxsize=32)
def get_zone(name: str) -> tzinfo:
    """Resolve an IANA timezone name.

    Args:
        name: Timezone name such as "UTC" or "Asia/Ho_Chi_Minh".

    Returns:
        tzinfo for the zone.
    """
    if name.upper() == "UTC":
        return timezone.utc
    return ZoneInfo(name)


def local_day(dt: datetime, tz: tzinfo = timezone.utc) -> date:
    """Get the calendar day a timestamp falls on in a timezone.

    Args:
        dt: Timestamp (naive values are treated as UTC).
        tz: Timezone defining the calendar day.

    Returns:
        The calendar date, time-of-day stripped.
    """
    return ensure_utc(dt).astimezone(tz).date()


def day_key(dt: datetime, tz: tzinfo = timezone.utc) -> str:
    """Format the calendar day of a timestamp as YYYY-MM-DD.

    Args:
        dt: Timestamp.
        tz: Timezone defining the calendar day.

    Returns:
        ISO date string usable as a sortable grouping key.
    """
    return local_day(dt, tz).isoformat()


def day_start(day: date, tz: tzinfo = timezone.utc) -> datetime:
    """Get local midnight of a calendar day, expressed in UTC.

    Args:
        day: Calendar day.
        tz: Timezone defining the calendar day.

    Returns:
        Timezone-aware UTC datetime.
    """
    return datetime.combine(day, time.min, tzinfo=tz).astimezone(timezone.utc)


def window_bounds(
    days: int,
    now: datetime | None = None,
    tz: tzinfo = timezone.utc,
) -> tuple[datetime, datetime]:
    """Compute the [start, end) range of an analysis window.

    A one-day window means "today": local midnight to the next local
    midnight. Longer windows start at local midnight ``days`` days ago
    and end now.

    Args:
        days: Window length in days (>= 1).
        now: Reference time, defaults to utc_now().
        tz: Timezone defining the calendar day.

    Returns:
        Tuple of (start, end) timezone-aware UTC datetimes.
    """
    now = ensure_utc(now) if now is not None else utc_now()
    today = local_day(now, tz)

    if days <= 1:
        return day_start(today, tz), day_start(today + timedelta(days=1), tz)

    start = day_start(today - timedelta(days=days), tz)
    # End is exclusive; keep a check-in stamped exactly at now
    return start, now + timedelta(microseconds=1)

