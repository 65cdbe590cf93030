# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Curriculum progress domain.

Records recitation sessions and keeps each student's furthest verified
position per track.
"""

from src.domains.progress.service import (
    CurriculumPoint,
    PositionConflictError,
    PositionTracker,
    SessionRecordNotFoundError,
    SessionValidationError,
)

__all__ = [
    "CurriculumPoint",
    "PositionConflictError",
    "PositionTracker",
    "SessionRecordNotFoundError",
    "SessionValidationError",
]
