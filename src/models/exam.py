# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Exam performance schemas.

An exam batch is the set of entries sharing class, subject, exam date,
semester and max score. ``ExamBatchKey`` is that shared tuple and is the
identity used for bulk edit and delete.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field

from src.models.enums import AbsenceReason

# Scores are stored as NUMERIC(7, 2).
Score = Annotated[Decimal, Field(max_digits=7, decimal_places=2)]


class ExamBatchKey(BaseModel):
    """Identity of an exam batch."""

    model_config = ConfigDict(frozen=True)

    class_id: str
    subject: str
    exam_date: date
    semester_id: str
    max_score: Score


class ExamEntryInput(BaseModel):
    """One student's line in a new exam batch.

    Exactly one of ``score`` or (``is_absent`` with ``absence_reason``)
    must be populated.
    """

    student_id: str = Field(min_length=1, max_length=64)
    score: Score | None = None
    is_absent: bool = False
    absence_reason: AbsenceReason | None = None
    notes: str | None = None


class RecordExamBatchRequest(BaseModel):
    """Request to record an exam for a set of students."""

    class_id: str = Field(min_length=1, max_length=64)
    subject: str
    exam_date: date
    semester_id: str = Field(min_length=1, max_length=64)
    max_score: Score
    entries: list[ExamEntryInput]
    recorded_by: str | None = Field(default=None, max_length=64)

    def batch_key(self) -> ExamBatchKey:
        return ExamBatchKey(
            class_id=self.class_id,
            subject=self.subject.strip(),
            exam_date=self.exam_date,
            semester_id=self.semester_id,
            max_score=self.max_score,
        )


class ExamBatchPatch(BaseModel):
    """Batch-level fields to change on every entry of a batch."""

    subject: str | None = None
    exam_date: date | None = None
    semester_id: str | None = None
    max_score: Score | None = None

    def has_changes(self) -> bool:
        return any(
            value is not None
            for value in (self.subject, self.exam_date, self.semester_id, self.max_score)
        )


class ExamEntryPatch(BaseModel):
    """New score/absence state for a single entry."""

    score: Score | None = None
    is_absent: bool = False
    absence_reason: AbsenceReason | None = None
    notes: str | None = None


class ExamEntryResponse(BaseModel):
    """A stored exam entry."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    student_id: str
    class_id: str
    semester_id: str
    subject: str
    exam_date: date
    max_score: Decimal
    score: Decimal | None = None
    is_absent: bool
    absence_reason: AbsenceReason | None = None
    notes: str | None = None
    recorded_by: str | None = None
    created_at: datetime
    updated_at: datetime


class ExamBatchResponse(BaseModel):
    """An exam batch and its entries."""

    key: ExamBatchKey
    entries: list[ExamEntryResponse]


class ExamBatchDeleteResponse(BaseModel):
    """Result of deleting an exam batch."""

    key: ExamBatchKey
    deleted_count: int


class ExamPerformanceRow(ExamEntryResponse):
    """Exam entry with its derived percentage.

    ``percentage`` is None for absent rows.
    """

    percentage: Decimal | None = None


class StudentRankingRow(BaseModel):
    """One student's aggregate line in a class ranking.

    Students whose entries in scope are all absences have no percentage
    and no rank.
    """

    student_id: str
    total_score: Decimal
    total_max_score: Decimal
    overall_percentage: Decimal | None = None
    rank: int | None = None
    subject_count: int = 0
    exams_taken: int = 0
    exams_absent: int = 0


class ClassRankingResponse(BaseModel):
    """Competition-ranked table for a class."""

    class_id: str
    semester_id: str | None = None
    rows: list[StudentRankingRow]
    ranked_count: int


class StudentRankResponse(BaseModel):
    """A single student's place in the class ranking."""

    class_id: str
    student_id: str
    semester_id: str | None = None
    rank: int | None = None
    ranked_count: int
    overall_percentage: Decimal | None = None
