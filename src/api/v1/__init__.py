# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""API v1 routes package.

Each module provides a FastAPI router for one engine domain.

Modules:
    curriculum: Curriculum reference (surahs).
    progress: Recitation sessions and track positions.
    exams: Exam batches, performance and class ranking.
    calendar: Instructional days and attendance date checks.
"""

from fastapi import APIRouter

from src.api.v1 import calendar, curriculum, exams, progress

# Create the main v1 router
router = APIRouter(prefix="/api/v1")

# Include domain routers
router.include_router(curriculum.router, prefix="/curriculum", tags=["Curriculum"])
router.include_router(progress.router, prefix="/progress", tags=["Progress"])
router.include_router(exams.router, prefix="/exams", tags=["Exams"])
router.include_router(calendar.router, prefix="/calendar", tags=["Calendar"])
