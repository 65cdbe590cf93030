# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Initial engine schema.

Revision ID: 001_initial_schema
Revises: None
Create Date: 2025-06-02
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
    ]


def upgrade() -> None:
    """Create engine tables."""
    # =========================================================================
    # CURRICULUM PROGRESS
    # =========================================================================

    op.create_table(
        "curriculum_sessions",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("student_id", sa.String(64), nullable=False),
        sa.Column("class_id", sa.String(64), nullable=False),
        sa.Column("semester_id", sa.String(64), nullable=False),
        sa.Column("track", sa.String(20), nullable=False),
        sa.Column("session_date", sa.Date, nullable=False),
        sa.Column("unit_ordinal", sa.Integer, nullable=False),
        sa.Column("unit_name", sa.String(50), nullable=False),
        sa.Column("unit_group", sa.Integer, nullable=False),
        sa.Column("range_from", sa.Integer, nullable=False),
        sa.Column("range_to", sa.Integer, nullable=False),
        sa.Column("grade", sa.String(20), nullable=False),
        sa.Column("passed", sa.Boolean, nullable=False),
        sa.Column("notes", sa.Text, nullable=True),
        sa.Column("recorded_by", sa.String(64), nullable=True),
        *_timestamps(),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_curriculum_sessions"),
        sa.CheckConstraint("range_from >= 1", name="ck_curriculum_sessions_range_from_positive"),
        sa.CheckConstraint("range_from <= range_to", name="ck_curriculum_sessions_range_ordered"),
        sa.CheckConstraint(
            "track IN ('hifz', 'tilawah', 'revision')",
            name="ck_curriculum_sessions_curriculum_track",
        ),
        sa.CheckConstraint(
            "grade IN ('Excellent', 'Good', 'Fair', 'Poor')",
            name="ck_curriculum_sessions_session_grade",
        ),
    )
    op.create_index(
        "ix_curriculum_sessions_student_track_date",
        "curriculum_sessions",
        ["student_id", "track", "session_date"],
    )
    op.create_index(
        "ix_curriculum_sessions_class_date",
        "curriculum_sessions",
        ["class_id", "session_date"],
    )

    op.create_table(
        "curriculum_positions",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("student_id", sa.String(64), nullable=False),
        sa.Column("track", sa.String(20), nullable=False),
        sa.Column("unit_ordinal", sa.Integer, nullable=False),
        sa.Column("unit_offset", sa.Integer, nullable=False),
        sa.Column("version", sa.Integer, nullable=False, server_default="1"),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.PrimaryKeyConstraint("id", name="pk_curriculum_positions"),
        sa.UniqueConstraint(
            "student_id", "track", name="uq_curriculum_positions_student_track"
        ),
        sa.CheckConstraint("unit_offset >= 1", name="ck_curriculum_positions_offset_positive"),
        sa.CheckConstraint(
            "track IN ('hifz', 'tilawah', 'revision')",
            name="ck_curriculum_positions_curriculum_track",
        ),
    )

    # =========================================================================
    # EXAMS
    # =========================================================================

    op.create_table(
        "exam_entries",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("student_id", sa.String(64), nullable=False),
        sa.Column("class_id", sa.String(64), nullable=False),
        sa.Column("semester_id", sa.String(64), nullable=False),
        sa.Column("subject", sa.String(100), nullable=False),
        sa.Column("exam_date", sa.Date, nullable=False),
        sa.Column("max_score", sa.Numeric(7, 2), nullable=False),
        sa.Column("score", sa.Numeric(7, 2), nullable=True),
        sa.Column("is_absent", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("absence_reason", sa.String(30), nullable=True),
        sa.Column("notes", sa.Text, nullable=True),
        sa.Column("recorded_by", sa.String(64), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id", name="pk_exam_entries"),
        sa.CheckConstraint("max_score > 0", name="ck_exam_entries_max_score_positive"),
        sa.CheckConstraint(
            "(is_absent AND score IS NULL AND absence_reason IS NOT NULL) OR "
            "(NOT is_absent AND score IS NOT NULL AND absence_reason IS NULL)",
            name="ck_exam_entries_score_xor_absence",
        ),
        sa.CheckConstraint(
            "absence_reason IN ('Sick', 'Parent Request', 'School Not Notified', 'Other')",
            name="ck_exam_entries_absence_reason",
        ),
    )
    op.create_index(
        "ix_exam_entries_batch",
        "exam_entries",
        ["class_id", "subject", "exam_date", "semester_id", "max_score"],
    )
    op.create_index(
        "ix_exam_entries_class_semester",
        "exam_entries",
        ["class_id", "semester_id"],
    )

    # =========================================================================
    # SCHEDULE CONFIGURATION
    # =========================================================================

    op.create_table(
        "academic_sessions",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("institution_id", sa.String(64), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("start_date", sa.Date, nullable=False),
        sa.Column("end_date", sa.Date, nullable=False),
        sa.Column("default_school_days", sa.JSON, nullable=True),
        *_timestamps(),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_academic_sessions"),
        sa.CheckConstraint("start_date <= end_date", name="ck_academic_sessions_range_ordered"),
    )
    op.create_index(
        "ix_academic_sessions_institution",
        "academic_sessions",
        ["institution_id", "start_date"],
    )

    op.create_table(
        "class_schedules",
        sa.Column("class_id", sa.String(64), nullable=False),
        sa.Column("institution_id", sa.String(64), nullable=False),
        sa.Column("school_days", sa.JSON, nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("class_id", name="pk_class_schedules"),
    )
    op.create_index(
        "ix_class_schedules_institution_id",
        "class_schedules",
        ["institution_id"],
    )

    op.create_table(
        "schedule_overrides",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("institution_id", sa.String(64), nullable=False),
        sa.Column("class_id", sa.String(64), nullable=True),
        sa.Column("session_id", sa.String(36), nullable=True),
        sa.Column("title", sa.String(150), nullable=False),
        sa.Column("start_date", sa.Date, nullable=False),
        sa.Column("end_date", sa.Date, nullable=False),
        sa.Column("school_days", sa.JSON, nullable=False),
        *_timestamps(),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_schedule_overrides"),
        sa.CheckConstraint("start_date <= end_date", name="ck_schedule_overrides_range_ordered"),
    )
    op.create_index(
        "ix_schedule_overrides_institution",
        "schedule_overrides",
        ["institution_id", "start_date"],
    )

    op.create_table(
        "academic_holidays",
        sa.Column("id", sa.String(36), nullable=False),
        sa.Column("institution_id", sa.String(64), nullable=False),
        sa.Column("session_id", sa.String(36), nullable=True),
        sa.Column("title", sa.String(150), nullable=False),
        sa.Column("start_date", sa.Date, nullable=False),
        sa.Column("end_date", sa.Date, nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        *_timestamps(),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id", name="pk_academic_holidays"),
        sa.CheckConstraint("start_date <= end_date", name="ck_academic_holidays_range_ordered"),
    )
    op.create_index(
        "ix_academic_holidays_institution",
        "academic_holidays",
        ["institution_id", "start_date"],
    )


def downgrade() -> None:
    """Drop engine tables."""
    op.drop_table("academic_holidays")
    op.drop_table("schedule_overrides")
    op.drop_table("class_schedules")
    op.drop_table("academic_sessions")
    op.drop_table("exam_entries")
    op.drop_table("curriculum_positions")
    op.drop_table("curriculum_sessions")
