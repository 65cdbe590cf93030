# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""School calendar schemas."""

import datetime as dt

from pydantic import BaseModel, Field

from src.models.enums import Weekday


class InstructionalDayResponse(BaseModel):
    """Whether a date is a school day for a class."""

    class_id: str
    date: dt.date
    valid: bool
    reason: str | None = None
    decided_by: str = Field(description="Rule layer that produced the answer")
    school_days: list[Weekday] | None = Field(
        default=None,
        description="Weekday set of the deciding layer, when it has one",
    )


class InstructionalDayCountResponse(BaseModel):
    """Number of school days in an inclusive date range."""

    class_id: str
    start_date: dt.date
    end_date: dt.date
    instructional_days: int


class AttendanceDateCheckResponse(BaseModel):
    """Outcome of checking an attendance date before it is written."""

    class_id: str
    date: dt.date
    accepted: bool
    warning: str | None = None
