# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Curriculum domain package.

Provides the static curriculum reference (surahs with their juz and ayah
counts) consumed by the position tracker.
"""

from src.domains.curriculum.reference import (
    QURAN_SURAHS,
    CurriculumReference,
    CurriculumUnit,
    UnknownUnitError,
    get_curriculum_reference,
)

__all__ = [
    "QURAN_SURAHS",
    "CurriculumReference",
    "CurriculumUnit",
    "UnknownUnitError",
    "get_curriculum_reference",
]
