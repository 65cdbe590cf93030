# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for exam aggregation and competition ranking."""

from dataclasses import dataclass
from decimal import Decimal

import pytest

from src.domains.exam.ranking import (
    aggregate,
    competition_ranks,
    percentage,
    quantizer,
    rank_students,
)


@dataclass
class Entry:
    student_id: str
    subject: str
    max_score: Decimal
    score: Decimal | None
    is_absent: bool = False


def scored(student_id: str, score: str, max_score: str = "100", subject: str = "Fiqh") -> Entry:
    return Entry(student_id, subject, Decimal(max_score), Decimal(score))


def absent(student_id: str, max_score: str = "100", subject: str = "Fiqh") -> Entry:
    return Entry(student_id, subject, Decimal(max_score), None, is_absent=True)


def ranks_by_student(rows) -> dict[str, int | None]:
    return {row.student_id: row.rank for row in rows}


class TestPercentage:
    """Tests for percentage rounding."""

    def test_quantizer(self):
        assert quantizer(2) == Decimal("0.01")
        assert quantizer(0) == Decimal("1")

    def test_rounds_half_up(self):
        assert percentage(Decimal("2"), Decimal("3")) == Decimal("66.67")
        assert percentage(Decimal("1"), Decimal("8")) == Decimal("12.50")
        assert percentage(Decimal("1"), Decimal("8"), precision=1) == Decimal("12.5")
        assert percentage(Decimal("1"), Decimal("16"), precision=2) == Decimal("6.25")
        assert percentage(Decimal("1"), Decimal("16"), precision=1) == Decimal("6.3")

    def test_full_marks(self):
        assert percentage(Decimal("50"), Decimal("50")) == Decimal("100.00")


class TestCompetitionRanks:
    """Tests for tie-aware rank assignment."""

    def test_ties_share_rank_and_skip(self):
        values = [Decimal(v) for v in ("90", "90", "85", "80", "80", "80", "70")]

        assert competition_ranks(values) == [1, 1, 3, 4, 4, 4, 7]

    def test_all_distinct(self):
        values = [Decimal(v) for v in ("3", "2", "1")]

        assert competition_ranks(values) == [1, 2, 3]

    def test_all_tied(self):
        assert competition_ranks([Decimal("50")] * 4) == [1, 1, 1, 1]

    def test_empty(self):
        assert competition_ranks([]) == []


class TestRankStudents:
    """Tests for the class ranking table."""

    def test_two_tied_below_leader(self):
        """90 ranks first; both 85s share second."""
        rows = rank_students([scored("a", "85"), scored("b", "85"), scored("c", "90")])

        assert ranks_by_student(rows) == {"c": 1, "a": 2, "b": 2}
        assert rows[1].overall_percentage == Decimal("85.00")

    def test_tied_at_top(self):
        rows = rank_students([scored("a", "85"), scored("b", "85")])

        assert [r.rank for r in rows] == [1, 1]
        assert [r.student_id for r in rows] == ["a", "b"]

    def test_rank_is_one_plus_strictly_greater(self):
        entries = [
            scored("a", "95"),
            scored("b", "95"),
            scored("c", "80"),
            scored("d", "70"),
        ]

        rows = rank_students(entries)
        percentages = {r.student_id: r.overall_percentage for r in rows}

        for row in rows:
            greater = sum(1 for p in percentages.values() if p > row.overall_percentage)
            assert row.rank == greater + 1

        assert ranks_by_student(rows) == {"a": 1, "b": 1, "c": 3, "d": 4}

    def test_tie_decided_at_two_decimals(self):
        """66.666.. and 66.67 are equal once rounded to two places."""
        entries = [
            scored("a", "2", max_score="3"),
            scored("b", "66.67"),
            scored("c", "66.66"),
        ]

        rows = rank_students(entries)

        assert ranks_by_student(rows) == {"a": 1, "b": 1, "c": 3}

    def test_configurable_precision(self):
        entries = [scored("a", "85.04"), scored("b", "85.01")]

        assert ranks_by_student(rank_students(entries, precision=2)) == {"a": 1, "b": 2}
        assert ranks_by_student(rank_students(entries, precision=1)) == {"a": 1, "b": 1}

    def test_aggregates_across_subjects(self):
        """Totals are sums of scores and max scores, not averages of percentages."""
        entries = [
            scored("a", "40", max_score="50", subject="Fiqh"),
            scored("a", "90", max_score="100", subject="Seerah"),
            scored("b", "45", max_score="50", subject="Fiqh"),
            scored("b", "60", max_score="100", subject="Seerah"),
        ]

        rows = rank_students(entries)
        by_student = {r.student_id: r for r in rows}

        assert by_student["a"].total_score == Decimal("130")
        assert by_student["a"].total_max_score == Decimal("150")
        assert by_student["a"].overall_percentage == Decimal("86.67")
        assert by_student["b"].overall_percentage == Decimal("70.00")
        assert by_student["a"].subject_count == 2
        assert ranks_by_student(rows) == {"a": 1, "b": 2}

    def test_absences_excluded_from_totals(self):
        entries = [
            scored("a", "80", subject="Fiqh"),
            absent("a", max_score="50", subject="Seerah"),
        ]

        row = rank_students(entries)[0]

        assert row.total_max_score == Decimal("100")
        assert row.overall_percentage == Decimal("80.00")
        assert row.exams_taken == 1
        assert row.exams_absent == 1
        assert row.subject_count == 2

    def test_absentee_only_student_unranked_and_last(self):
        entries = [
            absent("a"),
            scored("b", "50"),
            scored("c", "70"),
        ]

        rows = rank_students(entries)

        assert [r.student_id for r in rows] == ["c", "b", "a"]
        assert rows[-1].rank is None
        assert rows[-1].overall_percentage is None
        assert rows[-1].total_score == Decimal("0")
        assert [r.rank for r in rows[:2]] == [1, 2]

    def test_empty_scope(self):
        assert rank_students([]) == []


class TestAggregate:
    """Tests for per-student totals."""

    def test_groups_by_student(self):
        totals = aggregate([scored("a", "10"), scored("a", "20"), scored("b", "5")])

        assert set(totals) == {"a", "b"}
        assert totals["a"].total_score == Decimal("30")
        assert totals["a"].exams_taken == 2

    @pytest.mark.parametrize("precision", [0, 2, 4])
    def test_no_exams_taken_has_no_percentage(self, precision):
        totals = aggregate([absent("a")])

        assert totals["a"].overall_percentage(precision) is None
