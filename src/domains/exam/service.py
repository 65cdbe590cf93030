# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Exam performance service.

This module provides the ExamRankingService class for:
- Recording an exam for a whole class as one atomic batch
- Editing or deleting a batch, or a single entry within it
- Projecting entries with their percentage
- Competition-ranking students of a class across all subjects

A batch is identified by (class_id, subject, exam_date, semester_id,
max_score). Every entry of a batch is validated before any row is added,
and the batch is committed in a single transaction.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date
from decimal import Decimal

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.config import get_settings
from src.core.config.settings import ExamSettings
from src.domains.errors import EngineNotFoundError, EngineValidationError
from src.domains.exam.ranking import percentage, rank_students
from src.infrastructure.database.models.tenant.exam import ExamEntry
from src.models.enums import AbsenceReason
from src.models.exam import (
    ClassRankingResponse,
    ExamBatchDeleteResponse,
    ExamBatchKey,
    ExamBatchPatch,
    ExamBatchResponse,
    ExamEntryInput,
    ExamEntryPatch,
    ExamEntryResponse,
    ExamPerformanceRow,
    RecordExamBatchRequest,
    StudentRankResponse,
)
from src.utils.datetime import is_future_date, local_today

logger = logging.getLogger(__name__)


class ExamValidationError(EngineValidationError):
    """Raised when exam data is invalid; nothing is written."""

    pass


class ExamBatchNotFoundError(EngineNotFoundError):
    """Raised when no entry matches a batch key."""

    def __init__(self, key: ExamBatchKey) -> None:
        super().__init__(
            "exam batch",
            f"{key.class_id}/{key.subject}/{key.exam_date.isoformat()}/"
            f"{key.semester_id}/{key.max_score}",
        )
        self.key = key


class ExamEntryNotFoundError(EngineNotFoundError):
    """Raised when an exam entry does not exist."""

    def __init__(self, entry_id: str) -> None:
        super().__init__("exam entry", entry_id)


class RankedStudentNotFoundError(EngineNotFoundError):
    """Raised when a student has no exam entries in the ranking scope."""

    def __init__(self, student_id: str) -> None:
        super().__init__("student exam results", student_id)


class ExamRankingService:
    """Service for exam batches, performance and class ranking.

    Attributes:
        db: Async database session.
        settings: Exam settings (max score limit, ranking precision).
    """

    def __init__(
        self,
        db: AsyncSession,
        settings: ExamSettings | None = None,
        today: Callable[[], date] | None = None,
    ) -> None:
        """Initialize the exam ranking service.

        Args:
            db: Async database session.
            settings: Exam settings; application settings by default.
            today: Returns the school-local current date.
        """
        self.db = db
        self.settings = settings or get_settings().exam
        self._today = today or (lambda: local_today(get_settings().calendar.timezone))

    # =========================================================================
    # Batch commands
    # =========================================================================

    async def record_batch(self, request: RecordExamBatchRequest) -> ExamBatchResponse:
        """Record an exam for a set of students, all or nothing.

        Args:
            request: Batch-level fields and one entry per student.

        Returns:
            The created batch.

        Raises:
            ExamValidationError: If any batch field or entry is invalid.
                The first failing entry aborts the whole batch.
        """
        key = request.batch_key()
        self._validate_batch_fields(key.subject, key.exam_date, key.max_score)

        if not request.entries:
            raise ExamValidationError("entries", "At least one student entry is required")

        seen: set[str] = set()
        for index, entry in enumerate(request.entries):
            if entry.student_id in seen:
                raise ExamValidationError(
                    f"entries[{index}].student_id",
                    f"Student {entry.student_id} appears more than once in the batch",
                )
            seen.add(entry.student_id)
            self._validate_entry(entry, key.max_score, prefix=f"entries[{index}].")

        rows = [
            ExamEntry(
                student_id=entry.student_id,
                class_id=key.class_id,
                semester_id=key.semester_id,
                subject=key.subject,
                exam_date=key.exam_date,
                max_score=key.max_score,
                score=None if entry.is_absent else entry.score,
                is_absent=entry.is_absent,
                absence_reason=entry.absence_reason if entry.is_absent else None,
                notes=_clean_notes(entry.notes),
                recorded_by=request.recorded_by,
            )
            for entry in request.entries
        ]

        try:
            self.db.add_all(rows)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        for row in rows:
            await self.db.refresh(row)

        logger.info(
            "Recorded exam batch: %s on %s for class %s (%d entries)",
            key.subject,
            key.exam_date.isoformat(),
            key.class_id,
            len(rows),
        )

        return ExamBatchResponse(
            key=key,
            entries=[ExamEntryResponse.model_validate(r) for r in rows],
        )

    async def get_batch(self, key: ExamBatchKey) -> ExamBatchResponse:
        """Get every entry of a batch.

        Raises:
            ExamBatchNotFoundError: If no entry matches the key.
        """
        rows = await self._load_batch(key)
        return ExamBatchResponse(
            key=key,
            entries=[ExamEntryResponse.model_validate(r) for r in rows],
        )

    async def edit_batch(self, key: ExamBatchKey, patch: ExamBatchPatch) -> ExamBatchResponse:
        """Change batch-level fields on every entry of a batch.

        Individual scores are never touched, so a new max score must still
        cover every existing score.

        Args:
            key: Current batch identity.
            patch: Fields to change.

        Returns:
            The batch under its new key.

        Raises:
            ExamValidationError: If the patch is empty or invalid.
            ExamBatchNotFoundError: If no entry matches the key.
        """
        if not patch.has_changes():
            raise ExamValidationError("patch", "No batch fields to update")

        new_key = ExamBatchKey(
            class_id=key.class_id,
            subject=patch.subject.strip() if patch.subject is not None else key.subject,
            exam_date=patch.exam_date or key.exam_date,
            semester_id=patch.semester_id or key.semester_id,
            max_score=patch.max_score if patch.max_score is not None else key.max_score,
        )
        self._validate_batch_fields(new_key.subject, new_key.exam_date, new_key.max_score)

        rows = await self._load_batch(key)

        if new_key != key and await self._batch_exists(new_key):
            raise ExamValidationError(
                "patch",
                f"Another {new_key.subject} batch on {new_key.exam_date.isoformat()} "
                f"with max score {new_key.max_score} already exists for this class",
            )

        for row in rows:
            if row.score is not None and row.score > new_key.max_score:
                raise ExamValidationError(
                    "max_score",
                    f"Max score {new_key.max_score} is below the recorded score "
                    f"{row.score} of student {row.student_id}",
                )

        try:
            for row in rows:
                row.subject = new_key.subject
                row.exam_date = new_key.exam_date
                row.semester_id = new_key.semester_id
                row.max_score = new_key.max_score
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        for row in rows:
            await self.db.refresh(row)

        logger.info(
            "Updated exam batch for class %s: %s on %s (%d entries)",
            key.class_id,
            new_key.subject,
            new_key.exam_date.isoformat(),
            len(rows),
        )

        return ExamBatchResponse(
            key=new_key,
            entries=[ExamEntryResponse.model_validate(r) for r in rows],
        )

    async def delete_batch(self, key: ExamBatchKey) -> ExamBatchDeleteResponse:
        """Delete every entry of a batch.

        Raises:
            ExamBatchNotFoundError: If no entry matches the key.
        """
        try:
            result = await self.db.execute(delete(ExamEntry).where(*_batch_conditions(key)))
            deleted = result.rowcount
            if not deleted:
                raise ExamBatchNotFoundError(key)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info(
            "Deleted exam batch for class %s: %s on %s (%d entries)",
            key.class_id,
            key.subject,
            key.exam_date.isoformat(),
            deleted,
        )
        return ExamBatchDeleteResponse(key=key, deleted_count=deleted)

    # =========================================================================
    # Entry commands
    # =========================================================================

    async def edit_entry(self, entry_id: str, patch: ExamEntryPatch) -> ExamEntryResponse:
        """Change one student's score, absence or notes.

        Raises:
            ExamEntryNotFoundError: If the entry does not exist.
            ExamValidationError: If the new state is invalid.
        """
        entry = await self._get_entry(entry_id)

        self._validate_entry(patch, entry.max_score)

        entry.is_absent = patch.is_absent
        entry.score = None if patch.is_absent else patch.score
        entry.absence_reason = patch.absence_reason if patch.is_absent else None
        entry.notes = _clean_notes(patch.notes)

        try:
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise
        await self.db.refresh(entry)

        logger.info("Updated exam entry %s for student %s", entry_id, entry.student_id)
        return ExamEntryResponse.model_validate(entry)

    async def delete_entry(self, entry_id: str) -> None:
        """Delete one exam entry.

        Raises:
            ExamEntryNotFoundError: If the entry does not exist.
        """
        entry = await self._get_entry(entry_id)

        try:
            await self.db.delete(entry)
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info("Deleted exam entry %s for student %s", entry_id, entry.student_id)

    # =========================================================================
    # Queries
    # =========================================================================

    async def compute_performance(
        self,
        class_id: str,
        semester_id: str | None = None,
        subject: str | None = None,
    ) -> list[ExamPerformanceRow]:
        """List exam entries with their percentage.

        Absent rows carry no percentage.

        Returns:
            Rows ordered by exam date (newest first), then student id.
        """
        entries = await self._load_scope(class_id, semester_id, subject)
        rows = []
        for entry in entries:
            row = ExamPerformanceRow.model_validate(entry)
            if not entry.is_absent and entry.score is not None:
                row.percentage = percentage(
                    entry.score, entry.max_score, self.settings.ranking_precision
                )
            rows.append(row)

        logger.debug("Computed performance for class %s: %d rows", class_id, len(rows))
        return rows

    async def compute_ranking(
        self,
        class_id: str,
        semester_id: str | None = None,
    ) -> ClassRankingResponse:
        """Rank the students of a class across every subject in scope.

        Args:
            class_id: Class identifier.
            semester_id: Restrict to one semester; all semesters when None.

        Returns:
            Ranked rows first, then absentee-only students without a rank.
        """
        entries = await self._load_scope(class_id, semester_id)
        rows = rank_students(entries, self.settings.ranking_precision)
        ranked_count = sum(1 for row in rows if row.rank is not None)

        logger.debug(
            "Computed ranking for class %s: %d ranked of %d students",
            class_id,
            ranked_count,
            len(rows),
        )
        return ClassRankingResponse(
            class_id=class_id,
            semester_id=semester_id,
            rows=rows,
            ranked_count=ranked_count,
        )

    async def get_student_rank(
        self,
        class_id: str,
        student_id: str,
        semester_id: str | None = None,
    ) -> StudentRankResponse:
        """Get one student's place in the class ranking.

        Raises:
            RankedStudentNotFoundError: If the student has no entries in scope.
        """
        ranking = await self.compute_ranking(class_id, semester_id)
        row = next((r for r in ranking.rows if r.student_id == student_id), None)
        if row is None:
            raise RankedStudentNotFoundError(student_id)

        return StudentRankResponse(
            class_id=class_id,
            student_id=student_id,
            semester_id=semester_id,
            rank=row.rank,
            ranked_count=ranking.ranked_count,
            overall_percentage=row.overall_percentage,
        )

    # =========================================================================
    # Helpers
    # =========================================================================

    def _validate_batch_fields(self, subject: str, exam_date: date, max_score: Decimal) -> None:
        if not subject or not subject.strip():
            raise ExamValidationError("subject", "Subject is required")
        if is_future_date(exam_date, self._today()):
            raise ExamValidationError("exam_date", "Exam date cannot be in the future")
        limit = self.settings.max_score_limit
        if max_score <= 0 or max_score > limit:
            raise ExamValidationError("max_score", f"Max score must be between 1 and {limit}")

    def _validate_entry(
        self,
        entry: ExamEntryInput | ExamEntryPatch,
        max_score: Decimal,
        prefix: str = "",
    ) -> None:
        """Check the score/absence state of one entry."""
        if entry.is_absent:
            if entry.absence_reason is None:
                raise ExamValidationError(
                    f"{prefix}absence_reason", "Absence reason is required for absent students"
                )
            if entry.absence_reason == AbsenceReason.OTHER and not _clean_notes(entry.notes):
                raise ExamValidationError(
                    f"{prefix}notes", "Notes are required when the absence reason is Other"
                )
            return

        if entry.score is None:
            raise ExamValidationError(f"{prefix}score", "Score is required for present students")
        if entry.score < 0 or entry.score > max_score:
            raise ExamValidationError(
                f"{prefix}score", f"Score must be between 0 and {max_score}"
            )

    async def _get_entry(self, entry_id: str) -> ExamEntry:
        result = await self.db.execute(select(ExamEntry).where(ExamEntry.id == entry_id))
        entry = result.scalar_one_or_none()
        if entry is None:
            raise ExamEntryNotFoundError(entry_id)
        return entry

    async def _load_batch(self, key: ExamBatchKey) -> list[ExamEntry]:
        result = await self.db.execute(
            select(ExamEntry)
            .where(*_batch_conditions(key))
            .order_by(ExamEntry.student_id)
        )
        rows = list(result.scalars().all())
        if not rows:
            raise ExamBatchNotFoundError(key)
        return rows

    async def _batch_exists(self, key: ExamBatchKey) -> bool:
        result = await self.db.execute(
            select(ExamEntry.id).where(*_batch_conditions(key)).limit(1)
        )
        return result.first() is not None

    async def _load_scope(
        self,
        class_id: str,
        semester_id: str | None = None,
        subject: str | None = None,
    ) -> list[ExamEntry]:
        query = select(ExamEntry).where(ExamEntry.class_id == class_id)
        if semester_id:
            query = query.where(ExamEntry.semester_id == semester_id)
        if subject:
            query = query.where(ExamEntry.subject == subject)
        query = query.order_by(ExamEntry.exam_date.desc(), ExamEntry.student_id)

        result = await self.db.execute(query)
        return list(result.scalars().all())


def _batch_conditions(key: ExamBatchKey) -> list:
    return [
        ExamEntry.class_id == key.class_id,
        ExamEntry.subject == key.subject,
        ExamEntry.exam_date == key.exam_date,
        ExamEntry.semester_id == key.semester_id,
        ExamEntry.max_score == key.max_score,
    ]


def _clean_notes(notes: str | None) -> str | None:
    if notes is None:
        return None
    notes = notes.strip()
    return notes or None
