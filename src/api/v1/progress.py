# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Curriculum progress API endpoints.

This module provides endpoints for recitation sessions and positions:
- POST /sessions - Record a session
- DELETE /sessions/{record_id} - Delete a session record
- GET /students/{student_id}/position - Positions on every track
- GET /students/{student_id}/history - Session history
- GET /classes/{class_id}/sessions - Class session history
- GET /classes/{class_id}/positions - Positions of every student in a class
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.dependencies import RecordDB
from src.domains.progress.service import PositionTracker
from src.models.enums import Track
from src.models.progress import (
    RecordSessionRequest,
    RecordSessionResponse,
    SessionHistoryResponse,
    StudentPositionsResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_service(db: AsyncSession) -> PositionTracker:
    """Get position tracker instance.

    Args:
        db: Record store session.

    Returns:
        Configured PositionTracker instance.
    """
    return PositionTracker(db=db)


@router.post(
    "/sessions",
    response_model=RecordSessionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Record session",
    description="Record a recitation session; a passed session advances the track position.",
)
async def record_session(data: RecordSessionRequest, db: RecordDB) -> RecordSessionResponse:
    """Record a recitation session.

    Args:
        data: Session data.
        db: Database session.

    Returns:
        The stored record, its outcome and the resulting position.
    """
    logger.info(
        "Recording %s session for student %s (surah %d)",
        data.track.value,
        data.student_id,
        data.unit_ordinal,
    )

    service = _get_service(db)
    return await service.record_session(data)


@router.delete(
    "/sessions/{record_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete session record",
)
async def delete_session(record_id: str, db: RecordDB) -> Response:
    """Administratively delete a session record; positions are unchanged."""
    service = _get_service(db)
    await service.delete_session(record_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get(
    "/students/{student_id}/position",
    response_model=StudentPositionsResponse,
    summary="Get student position",
)
async def get_position(student_id: str, db: RecordDB) -> StudentPositionsResponse:
    service = _get_service(db)
    return await service.get_position(student_id)


@router.get(
    "/students/{student_id}/history",
    response_model=SessionHistoryResponse,
    summary="Get session history",
    description="Session records of a student, most recent first.",
)
async def get_history(
    student_id: str,
    db: RecordDB,
    track: Annotated[Track | None, Query(description="Restrict to one track")] = None,
    limit: Annotated[int | None, Query(description="Maximum number of records")] = None,
) -> SessionHistoryResponse:
    service = _get_service(db)
    items = await service.get_history(student_id, track=track, limit=limit)
    return SessionHistoryResponse(items=items, total=len(items))


@router.get(
    "/classes/{class_id}/sessions",
    response_model=SessionHistoryResponse,
    summary="List class sessions",
)
async def list_class_sessions(
    class_id: str,
    db: RecordDB,
    semester_id: Annotated[str | None, Query()] = None,
    student_id: Annotated[str | None, Query()] = None,
) -> SessionHistoryResponse:
    service = _get_service(db)
    items = await service.list_class_sessions(
        class_id,
        semester_id=semester_id,
        student_id=student_id,
    )
    return SessionHistoryResponse(items=items, total=len(items))


@router.get(
    "/classes/{class_id}/positions",
    response_model=list[StudentPositionsResponse],
    summary="Get class positions",
)
async def get_class_positions(class_id: str, db: RecordDB) -> list[StudentPositionsResponse]:
    service = _get_service(db)
    return await service.get_class_positions(class_id)
