# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""FastAPI dependency injection definitions.

This module provides dependency functions for FastAPI endpoints:
- Record store sessions
- Application settings

Example:
    @router.get("/students/{student_id}/position")
    async def get_position(student_id: str, db: RecordDB):
        ...
"""

import logging
from typing import Annotated, AsyncGenerator

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.config import Settings, get_settings
from src.infrastructure.database.connection import get_session

logger = logging.getLogger(__name__)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Get a record store session.

    Yields:
        AsyncSession committed or rolled back when the request finishes.
    """
    async with get_session() as session:
        yield session


def get_app_settings() -> Settings:
    """Get application settings."""
    return get_settings()


RecordDB = Annotated[AsyncSession, Depends(get_db)]
AppSettings = Annotated[Settings, Depends(get_app_settings)]
