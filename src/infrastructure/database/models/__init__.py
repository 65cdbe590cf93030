# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""ORM models for the engine record store.

- base: Declarative base and shared mixins
- tenant: Per-institution tables (progress, exams, schedule configuration)

Importing this package registers every table on ``Base.metadata``.
"""

from src.infrastructure.database.models.base import (
    Base,
    SoftDeleteMixin,
    TimestampMixin,
    UUIDPrimaryKeyMixin,
    new_id,
)
from src.infrastructure.database.models.tenant import (
    AcademicHoliday,
    AcademicSession,
    ClassSchedule,
    CurriculumPosition,
    CurriculumSession,
    ExamEntry,
    ScheduleOverride,
)

__all__ = [
    "Base",
    "SoftDeleteMixin",
    "TimestampMixin",
    "UUIDPrimaryKeyMixin",
    "new_id",
    "AcademicHoliday",
    "AcademicSession",
    "ClassSchedule",
    "CurriculumPosition",
    "CurriculumSession",
    "ExamEntry",
    "ScheduleOverride",
]
