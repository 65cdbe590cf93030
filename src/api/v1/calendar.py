# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""School calendar API endpoints.

This module provides read-only calendar endpoints:
- GET /classes/{class_id}/days/{day} - Is the date a school day
- GET /classes/{class_id}/days - Count school days in a range
- GET /classes/{class_id}/attendance-check/{day} - Check an attendance date
"""

import logging
from datetime import date
from typing import Annotated

from fastapi import APIRouter, Query
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import RecordDB
from src.domains.attendance.validator import AttendanceValidator
from src.domains.calendar.service import CalendarService
from src.models.calendar import (
    AttendanceDateCheckResponse,
    InstructionalDayCountResponse,
    InstructionalDayResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_service(db: AsyncSession) -> CalendarService:
    """Get calendar service instance."""
    return CalendarService(db=db)


def _get_validator(db: AsyncSession) -> AttendanceValidator:
    """Get attendance validator backed by the calendar service."""
    return AttendanceValidator(calendar=_get_service(db))


@router.get(
    "/classes/{class_id}/days/{day}",
    response_model=InstructionalDayResponse,
    summary="Is instructional day",
    description="Resolve holidays, overrides, class and session schedules for a date.",
)
async def is_instructional_day(class_id: str, day: date, db: RecordDB) -> InstructionalDayResponse:
    service = _get_service(db)
    return await service.is_instructional_day(class_id, day)


@router.get(
    "/classes/{class_id}/days",
    response_model=InstructionalDayCountResponse,
    summary="Count instructional days",
)
async def count_instructional_days(
    class_id: str,
    db: RecordDB,
    start_date: Annotated[date, Query()],
    end_date: Annotated[date, Query()],
) -> InstructionalDayCountResponse:
    service = _get_service(db)
    return await service.count_instructional_days(class_id, start_date, end_date)


@router.get(
    "/classes/{class_id}/attendance-check/{day}",
    response_model=AttendanceDateCheckResponse,
    summary="Check attendance date",
    description="Reject future dates; warn (or reject, when enforced) on non-school days.",
)
async def check_attendance_date(
    class_id: str,
    day: date,
    db: RecordDB,
) -> AttendanceDateCheckResponse:
    validator = _get_validator(db)
    return await validator.check(class_id, day)
