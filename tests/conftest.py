# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Pytest configuration and shared fixtures.

This module provides fixtures used across all test types:
- An in-memory SQLite record store with every engine table
- Engine settings with their defaults
- A fixed "today" so future-date checks are deterministic
"""

from collections.abc import AsyncGenerator, Callable
from datetime import date

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.pool import StaticPool

from src.core.config import CalendarSettings, ExamSettings, ProgressSettings, clear_settings_cache
from src.infrastructure.database.connection import create_sessionmaker
from src.infrastructure.database.models import Base

# Wednesday
TODAY = date(2025, 3, 12)


# =============================================================================
# Marker Configuration
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test (requires services)"
    )


# =============================================================================
# Settings Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def _reset_settings_cache():
    """Drop cached settings so environment patches take effect per test."""
    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture
def progress_settings() -> ProgressSettings:
    return ProgressSettings()


@pytest.fixture
def exam_settings() -> ExamSettings:
    return ExamSettings()


@pytest.fixture
def calendar_settings() -> CalendarSettings:
    return CalendarSettings()


@pytest.fixture
def today() -> date:
    """The fixed school-local current date used by services under test."""
    return TODAY


@pytest.fixture
def fixed_today(today: date) -> Callable[[], date]:
    return lambda: today


# =============================================================================
# Record Store Fixtures
# =============================================================================


@pytest_asyncio.fixture(scope="function")
async def db_engine() -> AsyncGenerator[AsyncEngine, None]:
    """Create an in-memory SQLite engine with all tables."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(db_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Create an async session on the in-memory engine."""
    sessionmaker = create_sessionmaker(db_engine)
    async with sessionmaker() as session:
        yield session


# =============================================================================
# Helper Fixtures
# =============================================================================


@pytest.fixture
def sample_student_id() -> str:
    return "student-001"


@pytest.fixture
def sample_class_id() -> str:
    return "class-hifz-a"


@pytest.fixture
def sample_semester_id() -> str:
    return "semester-2025-spring"
