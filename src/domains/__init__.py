# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Domain services layer.

This package contains the curriculum progress and assessment engine.
Each domain module provides a service that owns one set of rules and
talks to the record store through an async session.

Domains:
    curriculum: Static curriculum reference (surahs, juz, ayah counts).
    progress: Per-student curriculum position tracking and session history.
    exam: Exam batches, performance projection and tie-aware class ranking.
    calendar: Layered resolution of instructional days.
    attendance: Attendance date checks built on the calendar resolver.
"""
