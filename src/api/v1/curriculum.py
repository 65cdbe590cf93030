# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Curriculum reference API endpoints.

- GET /units - List curriculum units, optionally by juz
- GET /units/{ordinal} - Get one unit
"""

from typing import Annotated

from fastapi import APIRouter, Query

from src.domains.curriculum.reference import get_curriculum_reference
from src.models.progress import CurriculumUnitResponse

router = APIRouter()


@router.get(
    "/units",
    response_model=list[CurriculumUnitResponse],
    summary="List curriculum units",
)
async def list_units(
    group: Annotated[int | None, Query(description="Juz number")] = None,
) -> list[CurriculumUnitResponse]:
    reference = get_curriculum_reference()
    units = reference.list_units() if group is None else reference.units_in_group(group)
    return [CurriculumUnitResponse.model_validate(unit) for unit in units]


@router.get(
    "/units/{ordinal}",
    response_model=CurriculumUnitResponse,
    summary="Get curriculum unit",
)
async def get_unit(ordinal: int) -> CurriculumUnitResponse:
    """Get one unit; an unknown ordinal is a validation error."""
    unit = get_curriculum_reference().require_unit(ordinal)
    return CurriculumUnitResponse.model_validate(unit)
