# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Exam performance API endpoints.

This module provides endpoints for exam batches and ranking:
- POST /batches - Record an exam batch (all or nothing)
- GET /batches - Get a batch by its key
- PATCH /batches - Edit batch-level fields
- DELETE /batches - Delete a batch
- PATCH /entries/{entry_id} - Edit one entry
- DELETE /entries/{entry_id} - Delete one entry
- GET /classes/{class_id}/performance - Entries with percentages
- GET /classes/{class_id}/ranking - Class ranking
- GET /classes/{class_id}/ranking/{student_id} - One student's rank

A batch is addressed by the query parameters class_id, subject,
exam_date, semester_id and max_score.
"""

import logging
from datetime import date
from decimal import Decimal
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import RecordDB
from src.domains.exam.service import ExamRankingService
from src.models.exam import (
    ClassRankingResponse,
    ExamBatchDeleteResponse,
    ExamBatchKey,
    ExamBatchPatch,
    ExamBatchResponse,
    ExamEntryPatch,
    ExamEntryResponse,
    ExamPerformanceRow,
    RecordExamBatchRequest,
    StudentRankResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_service(db: AsyncSession) -> ExamRankingService:
    """Get exam ranking service instance.

    Args:
        db: Record store session.

    Returns:
        Configured ExamRankingService instance.
    """
    return ExamRankingService(db=db)


def batch_key(
    class_id: Annotated[str, Query()],
    subject: Annotated[str, Query()],
    exam_date: Annotated[date, Query()],
    semester_id: Annotated[str, Query()],
    max_score: Annotated[Decimal, Query(max_digits=7, decimal_places=2)],
) -> ExamBatchKey:
    """Build a batch key from query parameters."""
    return ExamBatchKey(
        class_id=class_id,
        subject=subject,
        exam_date=exam_date,
        semester_id=semester_id,
        max_score=max_score,
    )


BatchKey = Annotated[ExamBatchKey, Depends(batch_key)]


@router.post(
    "/batches",
    response_model=ExamBatchResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record exam batch",
    description="Record an exam for a set of students. Any invalid entry rejects the whole batch.",
)
async def record_batch(data: RecordExamBatchRequest, db: RecordDB) -> ExamBatchResponse:
    """Record an exam batch.

    Args:
        data: Batch fields and entries.
        db: Database session.

    Returns:
        The created batch.
    """
    logger.info(
        "Recording exam batch: %s for class %s (%d entries)",
        data.subject,
        data.class_id,
        len(data.entries),
    )

    service = _get_service(db)
    return await service.record_batch(data)


@router.get("/batches", response_model=ExamBatchResponse, summary="Get exam batch")
async def get_batch(key: BatchKey, db: RecordDB) -> ExamBatchResponse:
    service = _get_service(db)
    return await service.get_batch(key)


@router.patch("/batches", response_model=ExamBatchResponse, summary="Edit exam batch")
async def edit_batch(key: BatchKey, patch: ExamBatchPatch, db: RecordDB) -> ExamBatchResponse:
    """Change subject, date, semester or max score on every entry of a batch."""
    service = _get_service(db)
    return await service.edit_batch(key, patch)


@router.delete("/batches", response_model=ExamBatchDeleteResponse, summary="Delete exam batch")
async def delete_batch(key: BatchKey, db: RecordDB) -> ExamBatchDeleteResponse:
    service = _get_service(db)
    return await service.delete_batch(key)


@router.patch(
    "/entries/{entry_id}",
    response_model=ExamEntryResponse,
    summary="Edit exam entry",
)
async def edit_entry(entry_id: str, patch: ExamEntryPatch, db: RecordDB) -> ExamEntryResponse:
    """Change one student's score, absence or notes."""
    service = _get_service(db)
    return await service.edit_entry(entry_id, patch)


@router.delete(
    "/entries/{entry_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete exam entry",
)
async def delete_entry(entry_id: str, db: RecordDB) -> Response:
    service = _get_service(db)
    await service.delete_entry(entry_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/classes/{class_id}/performance",
    response_model=list[ExamPerformanceRow],
    summary="Exam performance",
    description="Exam entries with their percentage; absent rows have none.",
)
async def compute_performance(
    class_id: str,
    db: RecordDB,
    semester_id: Annotated[str | None, Query()] = None,
    subject: Annotated[str | None, Query()] = None,
) -> list[ExamPerformanceRow]:
    service = _get_service(db)
    return await service.compute_performance(class_id, semester_id=semester_id, subject=subject)


@router.get(
    "/classes/{class_id}/ranking",
    response_model=ClassRankingResponse,
    summary="Class ranking",
    description="Competition ranking across all subjects in scope.",
)
async def compute_ranking(
    class_id: str,
    db: RecordDB,
    semester_id: Annotated[str | None, Query()] = None,
) -> ClassRankingResponse:
    service = _get_service(db)
    return await service.compute_ranking(class_id, semester_id=semester_id)


@router.get(
    "/classes/{class_id}/ranking/{student_id}",
    response_model=StudentRankResponse,
    summary="Student rank",
)
async def get_student_rank(
    class_id: str,
    student_id: str,
    db: RecordDB,
    semester_id: Annotated[str | None, Query()] = None,
) -> StudentRankResponse:
    service = _get_service(db)
    return await service.get_student_rank(class_id, student_id, semester_id=semester_id)
