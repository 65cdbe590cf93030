# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Curriculum progress schemas.

Range and date rules are enforced by the position tracker, not here, so
that every rejection carries the same field-identifying error shape.
"""

from datetime import date, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from src.models.enums import SessionGrade, Track


class PositionOutcome(str, Enum):
    """What a recorded session did to the stored position."""

    ADVANCED = "advanced"  # passed and moved the position forward
    HELD = "held"  # passed, but at or behind the stored position
    REPEAT = "repeat"  # not passed; position untouched


class CurriculumUnitResponse(BaseModel):
    """One curriculum unit from the reference table."""

    model_config = ConfigDict(from_attributes=True)

    ordinal: int
    name: str
    group: int = Field(description="Juz the unit starts in")
    unit_length: int = Field(description="Number of ayahs")


class RecordSessionRequest(BaseModel):
    """Request to record one recitation session."""

    student_id: str = Field(min_length=1, max_length=64)
    class_id: str = Field(min_length=1, max_length=64)
    semester_id: str = Field(min_length=1, max_length=64)
    track: Track
    session_date: date
    unit_ordinal: int = Field(description="Surah number")
    range_from: int = Field(description="First ayah covered")
    range_to: int = Field(description="Last ayah covered")
    grade: SessionGrade | None = Field(
        default=None,
        description="Teacher's grade; the configured default is used when omitted",
    )
    passed: bool = True
    notes: str | None = None
    recorded_by: str | None = Field(default=None, max_length=64)


class SessionRecordResponse(BaseModel):
    """A stored session record."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    student_id: str
    class_id: str
    semester_id: str
    track: Track
    session_date: date
    unit_ordinal: int
    unit_name: str
    unit_group: int
    range_from: int
    range_to: int
    grade: SessionGrade
    passed: bool
    notes: str | None = None
    recorded_by: str | None = None
    created_at: datetime


class PositionResponse(BaseModel):
    """Furthest verified position on one track."""

    student_id: str
    track: Track
    unit_ordinal: int
    unit_name: str
    unit_group: int
    offset: int = Field(description="Last completed ayah within the unit")
    updated_at: datetime | None = None


class RecordSessionResponse(BaseModel):
    """Result of recording a session."""

    record: SessionRecordResponse
    outcome: PositionOutcome
    position: PositionResponse | None = Field(
        default=None,
        description="Stored position for the session's track after the write",
    )


class StudentPositionsResponse(BaseModel):
    """Positions of one student on every track.

    A track the student has not started maps to None.
    """

    student_id: str
    is_new: bool
    positions: dict[Track, PositionResponse | None]

    def for_track(self, track: Track) -> PositionResponse | None:
        return self.positions.get(track)


class SessionHistoryResponse(BaseModel):
    """Session records, most recent first."""

    items: list[SessionRecordResponse]
    total: int
