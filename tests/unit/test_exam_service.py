# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the exam ranking service.

Runs against an in-memory SQLite record store.
"""

from datetime import date, timedelta
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import func, select

from src.domains.exam.service import (
    ExamBatchNotFoundError,
    ExamEntryNotFoundError,
    ExamRankingService,
    ExamValidationError,
    RankedStudentNotFoundError,
)
from src.infrastructure.database.models import ExamEntry
from src.models.enums import AbsenceReason
from src.models.exam import (
    ExamBatchPatch,
    ExamEntryInput,
    ExamEntryPatch,
    RecordExamBatchRequest,
)


@pytest.fixture
def exam_service(db_session, exam_settings, fixed_today):
    """Create exam service on the in-memory store."""
    return ExamRankingService(db=db_session, settings=exam_settings, today=fixed_today)


@pytest.fixture
def make_batch(sample_class_id, sample_semester_id, today):
    """Build batch requests with sensible defaults."""

    def _make(entries, **overrides) -> RecordExamBatchRequest:
        data = {
            "class_id": sample_class_id,
            "subject": "Fiqh",
            "exam_date": today,
            "semester_id": sample_semester_id,
            "max_score": Decimal("100"),
            "entries": entries,
            "recorded_by": "teacher-1",
        }
        data.update(overrides)
        return RecordExamBatchRequest(**data)

    return _make


def present(student_id: str, score: str) -> ExamEntryInput:
    return ExamEntryInput(student_id=student_id, score=Decimal(score))


def missing(student_id: str, reason: AbsenceReason | None = AbsenceReason.SICK, notes=None) -> ExamEntryInput:
    return ExamEntryInput(student_id=student_id, is_absent=True, absence_reason=reason, notes=notes)


async def count_entries(db_session) -> int:
    result = await db_session.execute(select(func.count()).select_from(ExamEntry))
    return result.scalar_one()


class TestRecordBatch:
    """Tests for atomic batch creation."""

    @pytest.mark.asyncio
    async def test_record_batch_success(self, exam_service, make_batch, db_session):
        request = make_batch([present("s1", "80"), present("s2", "92.5"), missing("s3")])

        batch = await exam_service.record_batch(request)

        assert batch.key == request.batch_key()
        assert len(batch.entries) == 3
        assert await count_entries(db_session) == 3

        by_student = {e.student_id: e for e in batch.entries}
        assert by_student["s2"].score == Decimal("92.5")
        assert by_student["s3"].is_absent is True
        assert by_student["s3"].score is None
        assert by_student["s3"].absence_reason == AbsenceReason.SICK
        assert by_student["s1"].recorded_by == "teacher-1"

    @pytest.mark.asyncio
    async def test_missing_absence_reason_rejects_whole_batch(
        self, exam_service, make_batch, db_session
    ):
        """One bad entry out of twenty persists nothing."""
        entries = [present(f"s{i:02d}", "70") for i in range(1, 21)]
        entries[14] = missing("s15", reason=None)

        with pytest.raises(ExamValidationError) as exc_info:
            await exam_service.record_batch(make_batch(entries))

        assert exc_info.value.field == "entries[14].absence_reason"
        assert await count_entries(db_session) == 0

    @pytest.mark.asyncio
    async def test_other_reason_requires_notes(self, exam_service, make_batch):
        with pytest.raises(ExamValidationError) as exc_info:
            await exam_service.record_batch(
                make_batch([present("s1", "50"), missing("s2", AbsenceReason.OTHER, notes="  ")])
            )

        assert exc_info.value.field == "entries[1].notes"

    @pytest.mark.asyncio
    async def test_other_reason_with_notes_accepted(self, exam_service, make_batch):
        batch = await exam_service.record_batch(
            make_batch([missing("s1", AbsenceReason.OTHER, notes="Travelling")])
        )

        assert batch.entries[0].notes == "Travelling"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("score", ["-1", "100.01"])
    async def test_score_out_of_range_rejected(self, exam_service, make_batch, db_session, score):
        with pytest.raises(ExamValidationError) as exc_info:
            await exam_service.record_batch(make_batch([present("s1", "50"), present("s2", score)]))

        assert exc_info.value.field == "entries[1].score"
        assert await count_entries(db_session) == 0

    @pytest.mark.asyncio
    async def test_boundary_scores_accepted(self, exam_service, make_batch):
        batch = await exam_service.record_batch(make_batch([present("s1", "0"), present("s2", "100")]))

        assert len(batch.entries) == 2

    @pytest.mark.asyncio
    async def test_present_entry_requires_score(self, exam_service, make_batch):
        with pytest.raises(ExamValidationError) as exc_info:
            await exam_service.record_batch(make_batch([ExamEntryInput(student_id="s1")]))

        assert exc_info.value.field == "entries[0].score"

    @pytest.mark.asyncio
    async def test_duplicate_student_rejected(self, exam_service, make_batch):
        with pytest.raises(ExamValidationError) as exc_info:
            await exam_service.record_batch(make_batch([present("s1", "50"), present("s1", "60")]))

        assert exc_info.value.field == "entries[1].student_id"

    @pytest.mark.asyncio
    async def test_empty_batch_rejected(self, exam_service, make_batch):
        with pytest.raises(ExamValidationError) as exc_info:
            await exam_service.record_batch(make_batch([]))

        assert exc_info.value.field == "entries"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("max_score", ["0", "1001"])
    async def test_max_score_bounds(self, exam_service, make_batch, max_score):
        with pytest.raises(ExamValidationError) as exc_info:
            await exam_service.record_batch(
                make_batch([present("s1", "0")], max_score=Decimal(max_score))
            )

        assert exc_info.value.field == "max_score"

    @pytest.mark.asyncio
    async def test_future_exam_date_rejected(self, exam_service, make_batch, today):
        with pytest.raises(ExamValidationError) as exc_info:
            await exam_service.record_batch(
                make_batch([present("s1", "50")], exam_date=today + timedelta(days=1))
            )

        assert exc_info.value.field == "exam_date"

    @pytest.mark.asyncio
    async def test_blank_subject_rejected(self, exam_service, make_batch):
        with pytest.raises(ExamValidationError) as exc_info:
            await exam_service.record_batch(make_batch([present("s1", "50")], subject="   "))

        assert exc_info.value.field == "subject"

    def test_scores_limited_to_two_decimal_places(self, make_batch):
        with pytest.raises(PydanticValidationError) as exc_info:
            make_batch([{"student_id": "s1", "score": "10.005"}], max_score=Decimal("10.005"))

        fields = {error["loc"][-1] for error in exc_info.value.errors()}
        assert fields == {"max_score", "score"}

        with pytest.raises(PydanticValidationError):
            ExamEntryPatch(score=Decimal("9.999"))
        with pytest.raises(PydanticValidationError):
            ExamBatchPatch(max_score=Decimal("50.125"))

    @pytest.mark.asyncio
    async def test_returned_key_addresses_stored_batch(self, exam_service, make_batch):
        created = await exam_service.record_batch(
            make_batch([present("s1", "10.25")], max_score=Decimal("10.25"))
        )

        assert created.entries[0].max_score == created.key.max_score

        fetched = await exam_service.get_batch(created.key)
        assert fetched.entries[0].score == Decimal("10.25")


class TestEditBatch:
    """Tests for batch-level edits."""

    @pytest.mark.asyncio
    async def test_edit_rekeys_every_entry(self, exam_service, make_batch):
        created = await exam_service.record_batch(make_batch([present("s1", "40"), missing("s2")]))

        edited = await exam_service.edit_batch(
            created.key,
            ExamBatchPatch(subject="Aqeedah", max_score=Decimal("50")),
        )

        assert edited.key.subject == "Aqeedah"
        assert edited.key.max_score == Decimal("50")
        assert {e.subject for e in edited.entries} == {"Aqeedah"}
        assert {e.student_id: e.score for e in edited.entries}["s1"] == Decimal("40")

        with pytest.raises(ExamBatchNotFoundError):
            await exam_service.get_batch(created.key)

        fetched = await exam_service.get_batch(edited.key)
        assert len(fetched.entries) == 2

    @pytest.mark.asyncio
    async def test_max_score_below_existing_score_rejected(self, exam_service, make_batch):
        created = await exam_service.record_batch(make_batch([present("s1", "80")]))

        with pytest.raises(ExamValidationError) as exc_info:
            await exam_service.edit_batch(created.key, ExamBatchPatch(max_score=Decimal("50")))

        assert exc_info.value.field == "max_score"
        unchanged = await exam_service.get_batch(created.key)
        assert unchanged.entries[0].max_score == Decimal("100")

    @pytest.mark.asyncio
    async def test_rekey_onto_existing_batch_rejected(self, exam_service, make_batch, db_session):
        fiqh = await exam_service.record_batch(make_batch([present("s1", "90")]))
        aqidah = await exam_service.record_batch(
            make_batch([present("s1", "10")], subject="Aqidah")
        )

        with pytest.raises(ExamValidationError) as exc_info:
            await exam_service.edit_batch(aqidah.key, ExamBatchPatch(subject="Fiqh"))

        assert exc_info.value.field == "patch"
        assert [e.student_id for e in (await exam_service.get_batch(fiqh.key)).entries] == ["s1"]
        assert [e.score for e in (await exam_service.get_batch(aqidah.key)).entries] == [
            Decimal("10")
        ]
        assert await count_entries(db_session) == 2

    @pytest.mark.asyncio
    async def test_patch_matching_current_key_allowed(self, exam_service, make_batch):
        created = await exam_service.record_batch(make_batch([present("s1", "40")]))

        edited = await exam_service.edit_batch(created.key, ExamBatchPatch(subject="Fiqh"))

        assert edited.key == created.key
        assert len(edited.entries) == 1

    @pytest.mark.asyncio
    async def test_empty_patch_rejected(self, exam_service, make_batch):
        created = await exam_service.record_batch(make_batch([present("s1", "80")]))

        with pytest.raises(ExamValidationError) as exc_info:
            await exam_service.edit_batch(created.key, ExamBatchPatch())

        assert exc_info.value.field == "patch"

    @pytest.mark.asyncio
    async def test_unknown_batch(self, exam_service, make_batch):
        key = make_batch([present("s1", "1")]).batch_key()

        with pytest.raises(ExamBatchNotFoundError):
            await exam_service.edit_batch(key, ExamBatchPatch(subject="Seerah"))


class TestEntryCommands:
    """Tests for single-entry edits and deletes."""

    @pytest.mark.asyncio
    async def test_edit_entry_score(self, exam_service, make_batch):
        created = await exam_service.record_batch(make_batch([present("s1", "40"), present("s2", "60")]))
        entry = next(e for e in created.entries if e.student_id == "s1")

        updated = await exam_service.edit_entry(entry.id, ExamEntryPatch(score=Decimal("45")))

        assert updated.score == Decimal("45")
        assert updated.subject == "Fiqh"

    @pytest.mark.asyncio
    async def test_edit_entry_to_absent(self, exam_service, make_batch):
        created = await exam_service.record_batch(make_batch([present("s1", "40")]))

        updated = await exam_service.edit_entry(
            created.entries[0].id,
            ExamEntryPatch(is_absent=True, absence_reason=AbsenceReason.PARENT_REQUEST),
        )

        assert updated.is_absent is True
        assert updated.score is None
        assert updated.absence_reason == AbsenceReason.PARENT_REQUEST

    @pytest.mark.asyncio
    async def test_edit_entry_score_above_max_rejected(self, exam_service, make_batch):
        created = await exam_service.record_batch(
            make_batch([present("s1", "10")], max_score=Decimal("20"))
        )

        with pytest.raises(ExamValidationError) as exc_info:
            await exam_service.edit_entry(created.entries[0].id, ExamEntryPatch(score=Decimal("21")))

        assert exc_info.value.field == "score"

    @pytest.mark.asyncio
    async def test_edit_unknown_entry(self, exam_service):
        with pytest.raises(ExamEntryNotFoundError):
            await exam_service.edit_entry("missing", ExamEntryPatch(score=Decimal("1")))

    @pytest.mark.asyncio
    async def test_delete_entry(self, exam_service, make_batch, db_session):
        created = await exam_service.record_batch(make_batch([present("s1", "40"), present("s2", "60")]))

        await exam_service.delete_entry(created.entries[0].id)

        assert await count_entries(db_session) == 1
        with pytest.raises(ExamEntryNotFoundError):
            await exam_service.delete_entry(created.entries[0].id)

    @pytest.mark.asyncio
    async def test_delete_entry_failed_commit_rolls_back(self, exam_settings, fixed_today):
        entry = MagicMock(student_id="s1")
        result = MagicMock()
        result.scalar_one_or_none.return_value = entry
        db = MagicMock()
        db.execute = AsyncMock(return_value=result)
        db.delete = AsyncMock()
        db.commit = AsyncMock(side_effect=RuntimeError("store unavailable"))
        db.rollback = AsyncMock()
        service = ExamRankingService(db=db, settings=exam_settings, today=fixed_today)

        with pytest.raises(RuntimeError):
            await service.delete_entry("entry-1")

        db.delete.assert_awaited_once_with(entry)
        db.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_delete_batch(self, exam_service, make_batch, db_session, today):
        created = await exam_service.record_batch(make_batch([present("s1", "40"), missing("s2")]))
        await exam_service.record_batch(
            make_batch([present("s1", "70")], exam_date=today - timedelta(days=7))
        )

        result = await exam_service.delete_batch(created.key)

        assert result.deleted_count == 2
        assert await count_entries(db_session) == 1
        with pytest.raises(ExamBatchNotFoundError):
            await exam_service.delete_batch(created.key)


class TestPerformanceAndRanking:
    """Tests for read-side projections."""

    @pytest_asyncio.fixture
    async def seeded(self, exam_service, make_batch, today, sample_semester_id):
        """Two subjects this semester, one in an earlier semester."""
        await exam_service.record_batch(
            make_batch(
                [present("s1", "85"), present("s2", "85"), present("s3", "90"), missing("s4")],
                subject="Fiqh",
                exam_date=today - timedelta(days=10),
            )
        )
        await exam_service.record_batch(
            make_batch(
                [present("s1", "40"), present("s2", "35"), present("s3", "45"), missing("s4")],
                subject="Seerah",
                max_score=Decimal("50"),
                exam_date=today - timedelta(days=2),
            )
        )
        await exam_service.record_batch(
            make_batch(
                [present("s2", "100")],
                subject="Tajweed",
                semester_id="semester-2024-autumn",
                exam_date=today - timedelta(days=120),
            )
        )
        return exam_service

    @pytest.mark.asyncio
    async def test_performance_rows(self, seeded, sample_class_id, sample_semester_id):
        rows = await seeded.compute_performance(sample_class_id, semester_id=sample_semester_id)

        assert len(rows) == 8
        assert [r.subject for r in rows[:4]] == ["Seerah"] * 4
        assert [r.student_id for r in rows[:4]] == ["s1", "s2", "s3", "s4"]

        seerah_s1 = rows[0]
        assert seerah_s1.percentage == Decimal("80.00")
        absent_row = rows[3]
        assert absent_row.is_absent is True
        assert absent_row.percentage is None

    @pytest.mark.asyncio
    async def test_performance_subject_filter(self, seeded, sample_class_id):
        rows = await seeded.compute_performance(sample_class_id, subject="Tajweed")

        assert [r.student_id for r in rows] == ["s2"]
        assert rows[0].percentage == Decimal("100.00")

    @pytest.mark.asyncio
    async def test_ranking_within_semester(self, seeded, sample_class_id, sample_semester_id):
        """s3: 135/150, s1: 125/150, s2: 120/150, s4 absent throughout."""
        ranking = await seeded.compute_ranking(sample_class_id, semester_id=sample_semester_id)

        assert [r.student_id for r in ranking.rows] == ["s3", "s1", "s2", "s4"]
        assert [r.rank for r in ranking.rows] == [1, 2, 3, None]
        assert ranking.rows[0].overall_percentage == Decimal("90.00")
        assert ranking.rows[1].overall_percentage == Decimal("83.33")
        assert ranking.rows[3].exams_absent == 2
        assert ranking.ranked_count == 3

    @pytest.mark.asyncio
    async def test_ranking_all_semesters(self, seeded, sample_class_id):
        """Adding Tajweed lifts s2 to 220/250 = 88.00."""
        ranking = await seeded.compute_ranking(sample_class_id)

        assert [r.student_id for r in ranking.rows[:3]] == ["s3", "s2", "s1"]
        assert ranking.rows[1].overall_percentage == Decimal("88.00")
        assert ranking.rows[1].subject_count == 3

    @pytest.mark.asyncio
    async def test_tied_students_share_rank(self, exam_service, make_batch, sample_class_id):
        await exam_service.record_batch(
            make_batch([present("a", "85"), present("b", "85"), present("c", "90")])
        )

        ranking = await exam_service.compute_ranking(sample_class_id)

        assert {r.student_id: r.rank for r in ranking.rows} == {"c": 1, "a": 2, "b": 2}

    @pytest.mark.asyncio
    async def test_student_rank(self, seeded, sample_class_id, sample_semester_id):
        rank = await seeded.get_student_rank(sample_class_id, "s1", semester_id=sample_semester_id)

        assert rank.rank == 2
        assert rank.ranked_count == 3
        assert rank.overall_percentage == Decimal("83.33")

    @pytest.mark.asyncio
    async def test_student_rank_unranked(self, seeded, sample_class_id):
        rank = await seeded.get_student_rank(sample_class_id, "s4")

        assert rank.rank is None
        assert rank.overall_percentage is None

    @pytest.mark.asyncio
    async def test_student_rank_unknown(self, seeded, sample_class_id):
        with pytest.raises(RankedStudentNotFoundError):
            await seeded.get_student_rank(sample_class_id, "nobody")

    @pytest.mark.asyncio
    async def test_empty_class(self, exam_service):
        ranking = await exam_service.compute_ranking("empty-class")

        assert ranking.rows == []
        assert ranking.ranked_count == 0
