# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Calendar service.

Loads a class's schedule configuration from the record store and answers
instructional-day questions with CalendarResolver. The service is
read-only; schedule rows are maintained by administrative planning tools.
"""

from __future__ import annotations

import logging
from datetime import date

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.domains.calendar.resolver import (
    CalendarResolver,
    DateRange,
    HolidayRule,
    OverrideRule,
    ScheduleConfig,
    SessionRule,
    parse_weekdays,
    serialize_weekdays,
)
from src.domains.errors import EngineValidationError
from src.infrastructure.database.models.tenant.schedule import (
    AcademicHoliday,
    AcademicSession,
    ClassSchedule,
    ScheduleOverride,
)
from src.models.calendar import InstructionalDayCountResponse, InstructionalDayResponse

logger = logging.getLogger(__name__)


class CalendarRangeError(EngineValidationError):
    """Raised when a date range ends before it starts."""

    def __init__(self) -> None:
        super().__init__("end_date", "End date cannot be before start date")


class CalendarService:
    """Service answering instructional-day questions for a class.

    Attributes:
        db: Async database session.
        resolver: Layered day resolver.
    """

    def __init__(self, db: AsyncSession, resolver: CalendarResolver | None = None) -> None:
        self.db = db
        self.resolver = resolver or CalendarResolver()

    async def is_instructional_day(self, class_id: str, day: date) -> InstructionalDayResponse:
        """Decide whether ``day`` is a school day for the class.

        Never fails for missing configuration: a class without any schedule
        data has no constraint.
        """
        config = await self.load_config(class_id)
        resolution = self.resolver.resolve(config, day)

        logger.debug(
            "Resolved %s for class %s: valid=%s by %s",
            day.isoformat(),
            class_id,
            resolution.valid,
            resolution.decided_by,
        )

        return InstructionalDayResponse(
            class_id=class_id,
            date=day,
            valid=resolution.valid,
            reason=resolution.reason,
            decided_by=resolution.decided_by,
            school_days=(
                serialize_weekdays(resolution.school_days)
                if resolution.school_days is not None
                else None
            ),
        )

    async def count_instructional_days(
        self,
        class_id: str,
        start_date: date,
        end_date: date,
    ) -> InstructionalDayCountResponse:
        """Count school days in an inclusive date range.

        Raises:
            CalendarRangeError: If end_date is before start_date.
        """
        if end_date < start_date:
            raise CalendarRangeError()

        config = await self.load_config(class_id)
        count = self.resolver.count(config, start_date, end_date)

        return InstructionalDayCountResponse(
            class_id=class_id,
            start_date=start_date,
            end_date=end_date,
            instructional_days=count,
        )

    async def load_config(self, class_id: str) -> ScheduleConfig:
        """Snapshot every schedule rule that applies to the class."""
        result = await self.db.execute(
            select(ClassSchedule).where(ClassSchedule.class_id == class_id)
        )
        schedule = result.scalar_one_or_none()
        if schedule is None:
            logger.debug("No schedule configured for class %s", class_id)
            return ScheduleConfig(class_id=class_id)

        institution_id = schedule.institution_id

        holidays_result = await self.db.execute(
            select(AcademicHoliday)
            .where(
                AcademicHoliday.institution_id == institution_id,
                AcademicHoliday.deleted_at.is_(None),
            )
            .order_by(AcademicHoliday.start_date, AcademicHoliday.id)
        )
        overrides_result = await self.db.execute(
            select(ScheduleOverride).where(
                ScheduleOverride.institution_id == institution_id,
                ScheduleOverride.deleted_at.is_(None),
                or_(
                    ScheduleOverride.class_id.is_(None),
                    ScheduleOverride.class_id == class_id,
                ),
            )
        )
        sessions_result = await self.db.execute(
            select(AcademicSession)
            .where(
                AcademicSession.institution_id == institution_id,
                AcademicSession.deleted_at.is_(None),
            )
            .order_by(AcademicSession.start_date, AcademicSession.id)
        )

        return ScheduleConfig(
            class_id=class_id,
            holidays=tuple(
                HolidayRule(
                    id=h.id,
                    title=h.title,
                    dates=DateRange(h.start_date, h.end_date),
                )
                for h in holidays_result.scalars().all()
            ),
            overrides=tuple(
                OverrideRule(
                    id=o.id,
                    title=o.title,
                    dates=DateRange(o.start_date, o.end_date),
                    school_days=parse_weekdays(o.school_days),
                    class_id=o.class_id,
                )
                for o in overrides_result.scalars().all()
            ),
            class_days=parse_weekdays(schedule.school_days),
            sessions=tuple(
                SessionRule(
                    id=s.id,
                    name=s.name,
                    dates=DateRange(s.start_date, s.end_date),
                    school_days=parse_weekdays(s.default_school_days),
                )
                for s in sessions_result.scalars().all()
            ),
        )
