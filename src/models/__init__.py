# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pydantic request/response schemas for the engine.

- enums: Track, SessionGrade, AbsenceReason, Weekday
- progress: curriculum sessions and positions
- exam: exam batches, performance and ranking
- calendar: instructional-day checks
"""
