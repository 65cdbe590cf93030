# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""DateTime utilities for the engine.

Design Decisions:
-----------------
1. All timestamps are stored in UTC and are timezone-aware.
2. Calendar dates (session dates, exam dates, attendance dates) are plain
   ``date`` values interpreted in the school's local zone, so "today" for
   future-date checks is computed in that zone, not in UTC.

Usage:
------
    from src.utils.datetime import utc_now, local_today

    created_at: datetime = Field(default_factory=utc_now)
    if session_date > local_today("Europe/London"):
        ...
"""

from collections.abc import Iterator
from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo


def utc_now() -> datetime:
    """Get current UTC time as timezone-aware datetime.

    Returns:
        Timezone-aware datetime representing current UTC time.
    """
    return datetime.now(timezone.utc)


def local_today(tz_name: str = "UTC") -> date:
    """Get today's calendar date in the given IANA zone.

    Args:
        tz_name: IANA zone name such as "Europe/London".

    Returns:
        The local calendar date.
    """
    return utc_now().astimezone(ZoneInfo(tz_name)).date()


def is_future_date(value: date, today: date) -> bool:
    """Whether a calendar date lies strictly after today."""
    return value > today


def iter_dates(start: date, end: date) -> Iterator[date]:
    """Iterate calendar dates from start to end, both inclusive.

    Yields nothing when end is before start.
    """
    cursor = start
    while cursor <= end:
        yield cursor
        cursor += timedelta(days=1)
