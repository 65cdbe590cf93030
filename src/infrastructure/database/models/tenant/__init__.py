# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Per-institution engine tables.

- progress: curriculum sessions and positions
- exam: exam performance entries
- schedule: academic sessions, class schedules, overrides and holidays
"""

from src.infrastructure.database.models.tenant.exam import ExamEntry
from src.infrastructure.database.models.tenant.progress import (
    CurriculumPosition,
    CurriculumSession,
)
from src.infrastructure.database.models.tenant.schedule import (
    AcademicHoliday,
    AcademicSession,
    ClassSchedule,
    ScheduleOverride,
)

__all__ = [
    # Progress
    "CurriculumSession",
    "CurriculumPosition",
    # Exams
    "ExamEntry",
    # Schedule
    "AcademicSession",
    "ClassSchedule",
    "ScheduleOverride",
    "AcademicHoliday",
]
