# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Aggregation and competition ranking of exam results.

These functions work on already-loaded entries and never touch the
record store. Percentages are compared after rounding to a fixed number
of decimal places, and equal rounded percentages share a rank:

    90.00 -> 1
    85.00 -> 2
    85.00 -> 2
    70.00 -> 4

Each rank is one plus the number of students strictly ahead.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Protocol

from src.models.exam import StudentRankingRow

HUNDRED = Decimal("100")


class ScoredEntry(Protocol):
    """The fields of an exam entry that ranking reads."""

    student_id: str
    subject: str
    max_score: Decimal
    score: Decimal | None
    is_absent: bool


def quantizer(precision: int) -> Decimal:
    """Decimal exponent for ``precision`` places (2 -> Decimal("0.01"))."""
    return Decimal(1).scaleb(-precision)


def percentage(score: Decimal, max_score: Decimal, precision: int = 2) -> Decimal:
    """score / max_score * 100, rounded half-up to ``precision`` places."""
    value = Decimal(score) / Decimal(max_score) * HUNDRED
    return value.quantize(quantizer(precision), rounding=ROUND_HALF_UP)


@dataclass
class StudentTotals:
    """Running totals for one student over the entries in scope."""

    student_id: str
    total_score: Decimal = Decimal("0")
    total_max_score: Decimal = Decimal("0")
    exams_taken: int = 0
    exams_absent: int = 0
    subjects: set[str] = field(default_factory=set)

    def add(self, entry: ScoredEntry) -> None:
        self.subjects.add(entry.subject)
        if entry.is_absent or entry.score is None:
            self.exams_absent += 1
            return
        self.total_score += Decimal(entry.score)
        self.total_max_score += Decimal(entry.max_score)
        self.exams_taken += 1

    def overall_percentage(self, precision: int) -> Decimal | None:
        """None when the student sat no exam in scope."""
        if self.exams_taken == 0 or self.total_max_score <= 0:
            return None
        return percentage(self.total_score, self.total_max_score, precision)


def aggregate(entries: Iterable[ScoredEntry]) -> dict[str, StudentTotals]:
    """Sum every student's non-absent scores and max scores across subjects."""
    totals: dict[str, StudentTotals] = {}
    for entry in entries:
        student = totals.get(entry.student_id)
        if student is None:
            student = totals[entry.student_id] = StudentTotals(entry.student_id)
        student.add(entry)
    return totals


def competition_ranks(percentages: list[Decimal]) -> list[int]:
    """Rank values that are already sorted in descending order.

    Equal values share a rank, and the next distinct value is ranked one
    plus the count of values strictly greater than it.
    """
    ranks: list[int] = []
    for index, value in enumerate(percentages):
        if index > 0 and value == percentages[index - 1]:
            ranks.append(ranks[-1])
        else:
            ranks.append(index + 1)
    return ranks


def rank_students(
    entries: Iterable[ScoredEntry],
    precision: int = 2,
) -> list[StudentRankingRow]:
    """Build the class ranking table from exam entries.

    Ranked students come first, best percentage first, ties by student id.
    Students whose entries are all absences follow with no rank.
    """
    totals = aggregate(entries)

    ranked: list[tuple[Decimal, StudentTotals]] = []
    unranked: list[StudentTotals] = []
    for student in totals.values():
        overall = student.overall_percentage(precision)
        if overall is None:
            unranked.append(student)
        else:
            ranked.append((overall, student))

    ranked.sort(key=lambda item: (-item[0], item[1].student_id))
    unranked.sort(key=lambda student: student.student_id)

    ranks = competition_ranks([overall for overall, _ in ranked])

    rows = [
        _to_row(student, overall, rank)
        for (overall, student), rank in zip(ranked, ranks)
    ]
    rows.extend(_to_row(student, None, None) for student in unranked)
    return rows


def _to_row(
    student: StudentTotals,
    overall: Decimal | None,
    rank: int | None,
) -> StudentRankingRow:
    return StudentRankingRow(
        student_id=student.student_id,
        total_score=student.total_score,
        total_max_score=student.total_max_score,
        overall_percentage=overall,
        rank=rank,
        subject_count=len(student.subjects),
        exams_taken=student.exams_taken,
        exams_absent=student.exams_absent,
    )
