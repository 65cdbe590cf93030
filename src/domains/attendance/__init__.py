# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Attendance date validation against the school calendar."""

from src.domains.attendance.validator import AttendanceDateError, AttendanceValidator

__all__ = ["AttendanceDateError", "AttendanceValidator"]
