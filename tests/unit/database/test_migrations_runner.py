# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the programmatic migration runner."""

import pytest
from sqlalchemy import inspect
from sqlalchemy.ext.asyncio import create_async_engine

from src.infrastructure.database.migrations.runner import (
    MIGRATIONS,
    MigrationError,
    get_migration_status,
    get_pending_migrations,
    run_migrations,
)


class TestPendingMigrations:
    """Tests for revision selection."""

    def test_empty_database_needs_everything(self):
        assert get_pending_migrations(None) == MIGRATIONS

    def test_latest_needs_nothing(self):
        assert get_pending_migrations(MIGRATIONS[-1]) == []

    def test_target_revision(self):
        assert get_pending_migrations(None, MIGRATIONS[0]) == MIGRATIONS[:1]

    def test_unknown_current_revision(self):
        with pytest.raises(MigrationError, match="unknown revision"):
            get_pending_migrations("999_from_the_future")

    def test_unknown_target_revision(self):
        with pytest.raises(MigrationError, match="Unknown target"):
            get_pending_migrations(None, "999_from_the_future")


class TestRunMigrations:
    """Tests applying revisions to a SQLite file."""

    @pytest.mark.asyncio
    async def test_applies_schema_once(self, tmp_path):
        url = f"sqlite+aiosqlite:///{tmp_path / 'records.db'}"

        applied = await run_migrations(url)
        again = await run_migrations(url)
        status = await get_migration_status(url)

        assert applied == MIGRATIONS
        assert again == []
        assert status["current_version"] == MIGRATIONS[-1]
        assert status["is_up_to_date"] is True

        engine = create_async_engine(url)
        try:
            async with engine.connect() as conn:
                tables = await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names())
        finally:
            await engine.dispose()

        assert {"curriculum_sessions", "curriculum_positions", "exam_entries"} <= set(tables)
        assert "class_schedules" in tables
