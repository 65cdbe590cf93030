# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Curriculum progress tables.

- CurriculumSession: immutable history of recitation sessions
- CurriculumPosition: furthest verified position per (student, track)
"""

from datetime import date, datetime

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    Enum,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from src.infrastructure.database.models.base import (
    Base,
    SoftDeleteMixin,
    TimestampMixin,
    UUIDPrimaryKeyMixin,
)
from src.models.enums import SessionGrade, Track, enum_values
from src.utils.datetime import utc_now

TrackColumn = Enum(
    Track,
    name="curriculum_track",
    native_enum=False,
    length=20,
    values_callable=enum_values,
)


class CurriculumSession(UUIDPrimaryKeyMixin, TimestampMixin, SoftDeleteMixin, Base):
    """One recorded recitation session.

    Rows are never edited in place; corrections are new rows and
    administrative removal sets ``deleted_at``.
    """

    __tablename__ = "curriculum_sessions"
    __table_args__ = (
        CheckConstraint("range_from >= 1", name="range_from_positive"),
        CheckConstraint("range_from <= range_to", name="range_ordered"),
        Index("ix_curriculum_sessions_student_track_date", "student_id", "track", "session_date"),
        Index("ix_curriculum_sessions_class_date", "class_id", "session_date"),
    )

    student_id: Mapped[str] = mapped_column(String(64), nullable=False)
    class_id: Mapped[str] = mapped_column(String(64), nullable=False)
    semester_id: Mapped[str] = mapped_column(String(64), nullable=False)
    track: Mapped[Track] = mapped_column(TrackColumn, nullable=False)
    session_date: Mapped[date] = mapped_column(Date, nullable=False)
    unit_ordinal: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_name: Mapped[str] = mapped_column(String(50), nullable=False)
    unit_group: Mapped[int] = mapped_column(Integer, nullable=False)
    range_from: Mapped[int] = mapped_column(Integer, nullable=False)
    range_to: Mapped[int] = mapped_column(Integer, nullable=False)
    grade: Mapped[SessionGrade] = mapped_column(
        Enum(
            SessionGrade,
            name="session_grade",
            native_enum=False,
            length=20,
            values_callable=enum_values,
        ),
        nullable=False,
    )
    passed: Mapped[bool] = mapped_column(Boolean, nullable=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    recorded_by: Mapped[str | None] = mapped_column(String(64), nullable=True)


class CurriculumPosition(UUIDPrimaryKeyMixin, Base):
    """Furthest verified (unit, offset) for one student on one track.

    ``version`` is bumped on every write; updates are conditional on the
    version that was read, which makes the write a compare-and-set.
    """

    __tablename__ = "curriculum_positions"
    __table_args__ = (
        UniqueConstraint("student_id", "track", name="uq_curriculum_positions_student_track"),
        CheckConstraint("unit_offset >= 1", name="offset_positive"),
    )

    student_id: Mapped[str] = mapped_column(String(64), nullable=False)
    track: Mapped[Track] = mapped_column(TrackColumn, nullable=False)
    unit_ordinal: Mapped[int] = mapped_column(Integer, nullable=False)
    offset: Mapped[int] = mapped_column("unit_offset", Integer, nullable=False)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )
