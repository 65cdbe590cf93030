# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Attendance date checks.

Attendance for a future date is always rejected. A non-instructional day
produces a warning the caller shows before saving, or a rejection when
``calendar.enforce_instructional_days`` is enabled.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date

from src.core.config import get_settings
from src.core.config.settings import CalendarSettings
from src.domains.calendar.service import CalendarService
from src.domains.errors import EngineValidationError
from src.models.calendar import AttendanceDateCheckResponse
from src.utils.datetime import is_future_date, local_today

logger = logging.getLogger(__name__)


class AttendanceDateError(EngineValidationError):
    """Raised when attendance cannot be recorded for a date."""

    def __init__(self, message: str) -> None:
        super().__init__("date", message)


class AttendanceValidator:
    """Checks a proposed attendance date for a class.

    Attributes:
        calendar: Calendar service used to resolve school days.
        settings: Calendar settings (timezone, enforcement).
    """

    def __init__(
        self,
        calendar: CalendarService,
        settings: CalendarSettings | None = None,
        today: Callable[[], date] | None = None,
    ) -> None:
        self.calendar = calendar
        self.settings = settings or get_settings().calendar
        self._today = today or (lambda: local_today(self.settings.timezone))

    async def check(self, class_id: str, day: date) -> AttendanceDateCheckResponse:
        """Check whether attendance may be recorded on ``day``.

        Returns:
            Accepted result, carrying a warning for non-school days.

        Raises:
            AttendanceDateError: If the date is in the future, or is not a
                school day while enforcement is enabled.
        """
        if is_future_date(day, self._today()):
            raise AttendanceDateError("Cannot record attendance for future dates")

        resolution = await self.calendar.is_instructional_day(class_id, day)
        if resolution.valid:
            return AttendanceDateCheckResponse(class_id=class_id, date=day, accepted=True)

        warning = f"{day.isoformat()} is not a school day"
        if resolution.reason:
            warning = f"{warning} ({resolution.reason})"

        if self.settings.enforce_instructional_days:
            raise AttendanceDateError(warning)

        logger.warning("Attendance for class %s on non-school day: %s", class_id, warning)
        return AttendanceDateCheckResponse(
            class_id=class_id,
            date=day,
            accepted=True,
            warning=warning,
        )
