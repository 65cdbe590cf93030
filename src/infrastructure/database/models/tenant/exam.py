# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Exam performance table.

Entries sharing (class_id, subject, exam_date, semester_id, max_score)
form one exam batch; there is no separate batch table.
"""

from datetime import date
from decimal import Decimal

from sqlalchemy import Boolean, CheckConstraint, Date, Enum, Index, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from src.infrastructure.database.models.base import (
    Base,
    TimestampMixin,
    UUIDPrimaryKeyMixin,
)
from src.models.enums import AbsenceReason, enum_values


class ExamEntry(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """One student's result in one exam."""

    __tablename__ = "exam_entries"
    __table_args__ = (
        CheckConstraint("max_score > 0", name="max_score_positive"),
        CheckConstraint(
            "(is_absent AND score IS NULL AND absence_reason IS NOT NULL) OR "
            "(NOT is_absent AND score IS NOT NULL AND absence_reason IS NULL)",
            name="score_xor_absence",
        ),
        Index(
            "ix_exam_entries_batch",
            "class_id",
            "subject",
            "exam_date",
            "semester_id",
            "max_score",
        ),
        Index("ix_exam_entries_class_semester", "class_id", "semester_id"),
    )

    student_id: Mapped[str] = mapped_column(String(64), nullable=False)
    class_id: Mapped[str] = mapped_column(String(64), nullable=False)
    semester_id: Mapped[str] = mapped_column(String(64), nullable=False)
    subject: Mapped[str] = mapped_column(String(100), nullable=False)
    exam_date: Mapped[date] = mapped_column(Date, nullable=False)
    max_score: Mapped[Decimal] = mapped_column(Numeric(7, 2), nullable=False)
    score: Mapped[Decimal | None] = mapped_column(Numeric(7, 2), nullable=True)
    is_absent: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    absence_reason: Mapped[AbsenceReason | None] = mapped_column(
        Enum(
            AbsenceReason,
            name="absence_reason",
            native_enum=False,
            length=30,
            values_callable=enum_values,
        ),
        nullable=True,
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    recorded_by: Mapped[str | None] = mapped_column(String(64), nullable=True)
