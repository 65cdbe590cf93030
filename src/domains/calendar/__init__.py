# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""School calendar domain.

Resolves whether a date is an instructional day for a class from
holidays, schedule overrides, class schedules and session defaults.
"""

from src.domains.calendar.resolver import (
    CalendarResolver,
    DateRange,
    DayResolution,
    HolidayRule,
    OverrideRule,
    ScheduleConfig,
    SessionRule,
    parse_weekdays,
    serialize_weekdays,
)
from src.domains.calendar.service import CalendarRangeError, CalendarService

__all__ = [
    "CalendarRangeError",
    "CalendarResolver",
    "CalendarService",
    "DateRange",
    "DayResolution",
    "HolidayRule",
    "OverrideRule",
    "ScheduleConfig",
    "SessionRule",
    "parse_weekdays",
    "serialize_weekdays",
]
