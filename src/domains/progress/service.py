# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Position tracker for sequential memorization/recitation curricula.

This module provides the PositionTracker class for:
- Recording recitation sessions (passed or repeat) as immutable history
- Advancing a student's per-track position on passed sessions
- Reading positions and session history for teacher and admin views

A position is the pair (unit ordinal, offset). It only ever moves forward:
a passed session that lands at or behind the stored position is kept as
history but leaves the position alone. The position write is a versioned
compare-and-set inside the same transaction as the session insert.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date, datetime
from typing import NamedTuple

from sqlalchemy import select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.config import get_settings
from src.core.config.settings import ProgressSettings
from src.domains.curriculum.reference import (
    CurriculumReference,
    CurriculumUnit,
    get_curriculum_reference,
)
from src.domains.errors import (
    ConcurrencyConflictError,
    EngineNotFoundError,
    EngineValidationError,
)
from src.infrastructure.database.models.base import new_id
from src.infrastructure.database.models.tenant.progress import (
    CurriculumPosition,
    CurriculumSession,
)
from src.models.enums import SessionGrade, Track
from src.models.progress import (
    PositionOutcome,
    PositionResponse,
    RecordSessionRequest,
    RecordSessionResponse,
    SessionRecordResponse,
    StudentPositionsResponse,
)
from src.utils.datetime import is_future_date, local_today, utc_now

logger = logging.getLogger(__name__)

# One optimistic attempt plus one retry with the freshly read position
MAX_POSITION_ATTEMPTS = 2


class SessionValidationError(EngineValidationError):
    """Raised when a session or history request is invalid."""

    pass


class SessionRecordNotFoundError(EngineNotFoundError):
    """Raised when a session record does not exist or was deleted."""

    def __init__(self, record_id: str) -> None:
        super().__init__("session record", record_id)


class PositionConflictError(ConcurrencyConflictError):
    """Raised when the position compare-and-set loses twice."""

    def __init__(self, student_id: str, track: Track) -> None:
        super().__init__(
            f"Position for student {student_id} on {track.value} changed concurrently; "
            "resubmit the session"
        )
        self.student_id = student_id
        self.track = track


class CurriculumPoint(NamedTuple):
    """Comparable curriculum position; tuple order is curriculum order."""

    unit_ordinal: int
    offset: int


@dataclass(frozen=True)
class StoredPosition:
    """Snapshot of a position row as read inside the current transaction."""

    id: str
    unit_ordinal: int
    offset: int
    version: int
    updated_at: datetime | None

    @property
    def point(self) -> CurriculumPoint:
        return CurriculumPoint(self.unit_ordinal, self.offset)


class PositionTracker:
    """Service owning per-student, per-track curriculum positions.

    Attributes:
        db: Async database session.
        reference: Curriculum reference used to validate units and ranges.
        settings: Progress settings (default grade, history limits).
    """

    def __init__(
        self,
        db: AsyncSession,
        reference: CurriculumReference | None = None,
        settings: ProgressSettings | None = None,
        today: Callable[[], date] | None = None,
    ) -> None:
        """Initialize the position tracker.

        Args:
            db: Async database session.
            reference: Curriculum reference; the Qur'an table by default.
            settings: Progress settings; application settings by default.
            today: Returns the school-local current date.
        """
        self.db = db
        self.reference = reference or get_curriculum_reference()
        self.settings = settings or get_settings().progress
        self._today = today or (lambda: local_today(get_settings().calendar.timezone))

    # =========================================================================
    # Commands
    # =========================================================================

    async def record_session(self, request: RecordSessionRequest) -> RecordSessionResponse:
        """Record a session and advance the position when it was passed.

        The session row is written whether or not the student passed. Both
        the insert and the position update commit together or not at all.

        Args:
            request: Session data.

        Returns:
            The stored record, what happened to the position, and the
            position for the session's track after the write.

        Raises:
            SessionValidationError: If the date is in the future or the
                ayah range is invalid.
            UnknownUnitError: If the surah number is not in the curriculum.
            PositionConflictError: If concurrent writers won twice.
        """
        unit = self._validate_session(request)

        record = CurriculumSession(
            student_id=request.student_id,
            class_id=request.class_id,
            semester_id=request.semester_id,
            track=request.track,
            session_date=request.session_date,
            unit_ordinal=unit.ordinal,
            unit_name=unit.name,
            unit_group=unit.group,
            range_from=request.range_from,
            range_to=request.range_to,
            grade=request.grade or SessionGrade(self.settings.default_grade),
            passed=request.passed,
            notes=request.notes,
            recorded_by=request.recorded_by,
        )

        try:
            self.db.add(record)
            await self.db.flush()

            if request.passed:
                outcome, stored = await self._advance_position(
                    request.student_id,
                    request.track,
                    CurriculumPoint(unit.ordinal, request.range_to),
                )
            else:
                outcome = PositionOutcome.REPEAT
                stored = await self._load_position(request.student_id, request.track)

            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        await self.db.refresh(record)

        logger.info(
            "Recorded %s session for student %s: surah %d ayah %d-%d (%s)",
            request.track.value,
            request.student_id,
            unit.ordinal,
            request.range_from,
            request.range_to,
            outcome.value,
        )

        return RecordSessionResponse(
            record=SessionRecordResponse.model_validate(record),
            outcome=outcome,
            position=self._to_position(request.student_id, request.track, stored),
        )

    async def delete_session(self, record_id: str) -> None:
        """Administratively delete a session record.

        The stored position is never moved back by a deletion.

        Raises:
            SessionRecordNotFoundError: If the record does not exist or
                was already deleted.
        """
        result = await self.db.execute(
            select(CurriculumSession).where(
                CurriculumSession.id == record_id,
                CurriculumSession.deleted_at.is_(None),
            )
        )
        record = result.scalar_one_or_none()
        if record is None:
            raise SessionRecordNotFoundError(record_id)

        try:
            record.deleted_at = utc_now()
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        logger.info("Deleted session record %s for student %s", record_id, record.student_id)

    # =========================================================================
    # Queries
    # =========================================================================

    async def get_position(self, student_id: str) -> StudentPositionsResponse:
        """Get the student's position on every track.

        Args:
            student_id: Student identifier.

        Returns:
            One entry per track; None where the track has not started.
        """
        result = await self.db.execute(
            select(CurriculumPosition).where(CurriculumPosition.student_id == student_id)
        )
        rows = {row.track: row for row in result.scalars().all()}
        return self._to_student_positions(student_id, rows)

    async def get_history(
        self,
        student_id: str,
        track: Track | None = None,
        limit: int | None = None,
    ) -> list[SessionRecordResponse]:
        """Get a student's session history, most recent first.

        Every call reads the store afresh; no cursor is kept.

        Args:
            student_id: Student identifier.
            track: Restrict to one track.
            limit: Maximum rows; the configured default when omitted.

        Raises:
            SessionValidationError: If limit is outside 1..max_history_limit.
        """
        if limit is None:
            limit = self.settings.history_limit
        if limit < 1 or limit > self.settings.max_history_limit:
            raise SessionValidationError(
                "limit",
                f"Limit must be between 1 and {self.settings.max_history_limit}",
            )

        query = select(CurriculumSession).where(
            CurriculumSession.student_id == student_id,
            CurriculumSession.deleted_at.is_(None),
        )
        if track is not None:
            query = query.where(CurriculumSession.track == track)

        query = query.order_by(
            CurriculumSession.session_date.desc(),
            CurriculumSession.created_at.desc(),
        ).limit(limit)

        result = await self.db.execute(query)
        records = result.scalars().all()

        logger.debug("Loaded %d history rows for student %s", len(records), student_id)
        return [SessionRecordResponse.model_validate(r) for r in records]

    async def list_class_sessions(
        self,
        class_id: str,
        semester_id: str | None = None,
        student_id: str | None = None,
    ) -> list[SessionRecordResponse]:
        """List session records for a class, most recent first."""
        conditions = [
            CurriculumSession.class_id == class_id,
            CurriculumSession.deleted_at.is_(None),
        ]
        if semester_id:
            conditions.append(CurriculumSession.semester_id == semester_id)
        if student_id:
            conditions.append(CurriculumSession.student_id == student_id)

        result = await self.db.execute(
            select(CurriculumSession)
            .where(*conditions)
            .order_by(
                CurriculumSession.session_date.desc(),
                CurriculumSession.created_at.desc(),
            )
        )
        return [SessionRecordResponse.model_validate(r) for r in result.scalars().all()]

    async def get_class_positions(self, class_id: str) -> list[StudentPositionsResponse]:
        """Positions of every student with a session in the class.

        Returns:
            One entry per student, ordered by student id.
        """
        students_result = await self.db.execute(
            select(CurriculumSession.student_id)
            .where(
                CurriculumSession.class_id == class_id,
                CurriculumSession.deleted_at.is_(None),
            )
            .distinct()
            .order_by(CurriculumSession.student_id)
        )
        student_ids = list(students_result.scalars().all())
        if not student_ids:
            return []

        positions_result = await self.db.execute(
            select(CurriculumPosition).where(CurriculumPosition.student_id.in_(student_ids))
        )
        by_student: dict[str, dict[Track, CurriculumPosition]] = {}
        for row in positions_result.scalars().all():
            by_student.setdefault(row.student_id, {})[row.track] = row

        return [
            self._to_student_positions(student_id, by_student.get(student_id, {}))
            for student_id in student_ids
        ]

    # =========================================================================
    # Position compare-and-set
    # =========================================================================

    async def _advance_position(
        self,
        student_id: str,
        track: Track,
        candidate: CurriculumPoint,
    ) -> tuple[PositionOutcome, StoredPosition | None]:
        """Move the position to ``candidate`` if it is ahead of the stored one.

        A lost compare-and-set is retried once against the freshly read
        position; the decision is recomputed, so the retry may end in HELD.
        """
        for attempt in range(1, MAX_POSITION_ATTEMPTS + 1):
            current = await self._load_position(student_id, track)
            if current is not None and candidate <= current.point:
                return PositionOutcome.HELD, current

            if await self._compare_and_set(student_id, track, current, candidate):
                return PositionOutcome.ADVANCED, await self._load_position(student_id, track)

            logger.warning(
                "Position conflict for student %s on %s (attempt %d of %d)",
                student_id,
                track.value,
                attempt,
                MAX_POSITION_ATTEMPTS,
            )

        raise PositionConflictError(student_id, track)

    async def _load_position(self, student_id: str, track: Track) -> StoredPosition | None:
        result = await self.db.execute(
            select(CurriculumPosition)
            .where(
                CurriculumPosition.student_id == student_id,
                CurriculumPosition.track == track,
            )
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        row = result.scalar_one_or_none()
        if row is None:
            return None
        return StoredPosition(
            id=row.id,
            unit_ordinal=row.unit_ordinal,
            offset=row.offset,
            version=row.version,
            updated_at=row.updated_at,
        )

    async def _compare_and_set(
        self,
        student_id: str,
        track: Track,
        expected: StoredPosition | None,
        candidate: CurriculumPoint,
    ) -> bool:
        """Write ``candidate`` only if the row still matches ``expected``.

        Returns:
            True if this call performed the write.
        """
        table = CurriculumPosition.__table__
        now = utc_now()

        if expected is None:
            stmt = self._insert_if_absent().values(
                id=new_id(),
                student_id=student_id,
                track=track,
                unit_ordinal=candidate.unit_ordinal,
                unit_offset=candidate.offset,
                version=1,
                updated_at=now,
            )
        else:
            stmt = (
                update(table)
                .where(
                    table.c.id == expected.id,
                    table.c.version == expected.version,
                )
                .values(
                    unit_ordinal=candidate.unit_ordinal,
                    unit_offset=candidate.offset,
                    version=expected.version + 1,
                    updated_at=now,
                )
            )

        result = await self.db.execute(stmt)
        return result.rowcount == 1

    def _insert_if_absent(self):
        """INSERT that silently does nothing when the (student, track) row exists."""
        table = CurriculumPosition.__table__
        dialect = self.db.get_bind().dialect.name
        if dialect == "postgresql":
            stmt = pg_insert(table)
        elif dialect == "sqlite":
            stmt = sqlite_insert(table)
        else:
            raise NotImplementedError(f"Unsupported dialect for position writes: {dialect}")
        return stmt.on_conflict_do_nothing(index_elements=["student_id", "track"])

    # =========================================================================
    # Validation and mapping
    # =========================================================================

    def _validate_session(self, request: RecordSessionRequest) -> CurriculumUnit:
        """Check date, unit and range before anything is written."""
        if is_future_date(request.session_date, self._today()):
            raise SessionValidationError("session_date", "Date cannot be in the future")

        unit = self.reference.require_unit(request.unit_ordinal)

        if request.range_from < 1:
            raise SessionValidationError("range_from", "Ayah values must be positive numbers")
        if request.range_to < 1:
            raise SessionValidationError("range_to", "Ayah values must be positive numbers")
        if request.range_to > unit.unit_length:
            raise SessionValidationError(
                "range_to", f"{unit.name} has {unit.unit_length} ayahs"
            )
        if request.range_from > request.range_to:
            raise SessionValidationError(
                "range_from", "Ayah From cannot be greater than Ayah To"
            )

        return unit

    def _to_position(
        self,
        student_id: str,
        track: Track,
        stored: StoredPosition | CurriculumPosition | None,
    ) -> PositionResponse | None:
        if stored is None:
            return None
        unit = self.reference.get_unit(stored.unit_ordinal)
        return PositionResponse(
            student_id=student_id,
            track=track,
            unit_ordinal=stored.unit_ordinal,
            unit_name=unit.name if unit else "",
            unit_group=unit.group if unit else 0,
            offset=stored.offset,
            updated_at=stored.updated_at,
        )

    def _to_student_positions(
        self,
        student_id: str,
        rows: dict[Track, CurriculumPosition],
    ) -> StudentPositionsResponse:
        positions = {
            track: self._to_position(student_id, track, rows.get(track)) for track in Track
        }
        return StudentPositionsResponse(
            student_id=student_id,
            is_new=not rows,
            positions=positions,
        )
