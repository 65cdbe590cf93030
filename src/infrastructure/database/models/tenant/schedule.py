# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""School calendar configuration tables.

Weekday sets are stored as JSON arrays of day names ("Monday", ...) and
converted to ``Weekday`` sets by the calendar domain. All date ranges are
inclusive on both ends.
"""

from datetime import date

from sqlalchemy import JSON, CheckConstraint, Date, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from src.infrastructure.database.models.base import (
    Base,
    SoftDeleteMixin,
    TimestampMixin,
    UUIDPrimaryKeyMixin,
)


class AcademicSession(UUIDPrimaryKeyMixin, TimestampMixin, SoftDeleteMixin, Base):
    """Academic session (school year) carrying the default school days."""

    __tablename__ = "academic_sessions"
    __table_args__ = (
        CheckConstraint("start_date <= end_date", name="range_ordered"),
        Index("ix_academic_sessions_institution", "institution_id", "start_date"),
    )

    institution_id: Mapped[str] = mapped_column(String(64), nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    default_school_days: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)


class ClassSchedule(TimestampMixin, Base):
    """Per-class schedule settings.

    Also records which institution a class belongs to, so the resolver can
    find institution-wide holidays and overrides for a class.
    """

    __tablename__ = "class_schedules"

    class_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    institution_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    school_days: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)


class ScheduleOverride(UUIDPrimaryKeyMixin, TimestampMixin, SoftDeleteMixin, Base):
    """Time-boxed replacement of the weekly school-day pattern.

    ``class_id`` NULL means the override applies to every class of the
    institution.
    """

    __tablename__ = "schedule_overrides"
    __table_args__ = (
        CheckConstraint("start_date <= end_date", name="range_ordered"),
        Index("ix_schedule_overrides_institution", "institution_id", "start_date"),
    )

    institution_id: Mapped[str] = mapped_column(String(64), nullable=False)
    class_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    session_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    title: Mapped[str] = mapped_column(String(150), nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    school_days: Mapped[list[str]] = mapped_column(JSON, nullable=False)


class AcademicHoliday(UUIDPrimaryKeyMixin, TimestampMixin, SoftDeleteMixin, Base):
    """Institution-wide closure such as "Eid Break"."""

    __tablename__ = "academic_holidays"
    __table_args__ = (
        CheckConstraint("start_date <= end_date", name="range_ordered"),
        Index("ix_academic_holidays_institution", "institution_id", "start_date"),
    )

    institution_id: Mapped[str] = mapped_column(String(64), nullable=False)
    session_id: Mapped[str | None] = mapped_column(String(36), nullable=True)
    title: Mapped[str] = mapped_column(String(150), nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
