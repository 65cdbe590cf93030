# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Mapping of engine errors to HTTP responses.

- EngineValidationError -> 400 with ``{"detail": ..., "field": ...}``
- EngineNotFoundError -> 404
- ConcurrencyConflictError -> 409
- DatabaseError -> 503
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from src.domains.errors import (
    ConcurrencyConflictError,
    EngineNotFoundError,
    EngineValidationError,
)
from src.infrastructure.database.connection import DatabaseError

logger = logging.getLogger(__name__)


async def validation_error_handler(request: Request, exc: EngineValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": exc.message, "field": exc.field},
    )


async def not_found_error_handler(request: Request, exc: EngineNotFoundError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"detail": str(exc)},
    )


async def conflict_error_handler(request: Request, exc: ConcurrencyConflictError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={"detail": str(exc)},
    )


async def database_error_handler(request: Request, exc: DatabaseError) -> JSONResponse:
    logger.error("Database error on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"detail": "Record store unavailable"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the engine error handlers on an application."""
    app.add_exception_handler(EngineValidationError, validation_error_handler)
    app.add_exception_handler(EngineNotFoundError, not_found_error_handler)
    app.add_exception_handler(ConcurrencyConflictError, conflict_error_handler)
    app.add_exception_handler(DatabaseError, database_error_handler)
