# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Enumerations shared by the engine schemas and the record store.

Values are the strings persisted in the database and exchanged over the
API, so renaming a value is a data migration.
"""

from datetime import date
from enum import Enum


class Track(str, Enum):
    """Independent curriculum tracks a student progresses along."""

    HIFZ = "hifz"
    TILAWAH = "tilawah"
    REVISION = "revision"


class SessionGrade(str, Enum):
    """Teacher's grade for a recitation session."""

    EXCELLENT = "Excellent"
    GOOD = "Good"
    FAIR = "Fair"
    POOR = "Poor"


class AbsenceReason(str, Enum):
    """Closed set of reasons for missing an exam."""

    SICK = "Sick"
    PARENT_REQUEST = "Parent Request"
    NOT_NOTIFIED = "School Not Notified"
    OTHER = "Other"


class Weekday(str, Enum):
    """Day of the week, in ``date.weekday()`` order."""

    MONDAY = "Monday"
    TUESDAY = "Tuesday"
    WEDNESDAY = "Wednesday"
    THURSDAY = "Thursday"
    FRIDAY = "Friday"
    SATURDAY = "Saturday"
    SUNDAY = "Sunday"

    @classmethod
    def of(cls, value: date) -> "Weekday":
        """Weekday of a calendar date."""
        return list(cls)[value.weekday()]


def enum_values(enum_cls: type[Enum]) -> list[str]:
    """Persisted values of an enum, for ``sqlalchemy.Enum(values_callable=...)``."""
    return [member.value for member in enum_cls]
