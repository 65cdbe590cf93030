# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Exam domain: atomic exam batches, performance and competition ranking."""

from src.domains.exam.ranking import competition_ranks, percentage, rank_students
from src.domains.exam.service import (
    ExamBatchNotFoundError,
    ExamEntryNotFoundError,
    ExamRankingService,
    ExamValidationError,
    RankedStudentNotFoundError,
)

__all__ = [
    "ExamBatchNotFoundError",
    "ExamEntryNotFoundError",
    "ExamRankingService",
    "ExamValidationError",
    "RankedStudentNotFoundError",
    "competition_ranks",
    "percentage",
    "rank_students",
]
