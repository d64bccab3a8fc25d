# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Initial schema: schools, classrooms, students and enrollment records.

Revision ID: 001_initial_schema
Revises: None
Create Date: 2025-06-02
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _id_column() -> sa.Column:
    return sa.Column(
        "id",
        postgresql.UUID(as_uuid=False),
        server_default=sa.text("gen_random_uuid()"),
        primary_key=True,
    )


def _timestamp_columns() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
    ]


def _audit_columns() -> list[sa.Column]:
    return [
        sa.Column("created_by", postgresql.UUID(as_uuid=False), nullable=False),
        sa.Column("updated_by", postgresql.UUID(as_uuid=False), nullable=True),
    ]


def upgrade() -> None:
    """Create all tables."""
    op.create_table(
        "schools",
        _id_column(),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("code", sa.String(50), unique=True, nullable=True),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default="true"),
        *_timestamp_columns(),
    )

    op.create_table(
        "classrooms",
        _id_column(),
        sa.Column(
            "school_id",
            postgresql.UUID(as_uuid=False),
            sa.ForeignKey("schools.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("grade", sa.String(20), nullable=False),
        sa.Column("capacity", sa.Integer, nullable=False),
        sa.Column("class_teacher", sa.String(255), nullable=True),
        sa.Column("resources", sa.JSON, nullable=False, server_default=sa.text("'{}'")),
        sa.Column("status", sa.String(20), nullable=False, server_default="ACTIVE"),
        *_timestamp_columns(),
        *_audit_columns(),
        sa.CheckConstraint(
            "capacity >= 1 AND capacity <= 100",
            name="ck_classrooms_capacity",
        ),
        sa.CheckConstraint(
            "status IN ('ACTIVE', 'ARCHIVED')",
            name="ck_classrooms_status",
        ),
    )
    op.create_index("ix_classrooms_school_id", "classrooms", ["school_id"])
    op.create_index("ix_classrooms_school_status", "classrooms", ["school_id", "status"])

    op.create_table(
        "students",
        _id_column(),
        sa.Column(
            "school_id",
            postgresql.UUID(as_uuid=False),
            sa.ForeignKey("schools.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("email", sa.String(255), unique=True, nullable=True),
        sa.Column("date_of_birth", sa.Date, nullable=True),
        sa.Column("registration_number", sa.String(30), unique=True, nullable=False),
        sa.Column("status", sa.String(20), nullable=False, server_default="ACTIVE"),
        *_timestamp_columns(),
        *_audit_columns(),
        sa.CheckConstraint(
            "status IN ('ACTIVE', 'TRANSFERRED', 'GRADUATED', 'INACTIVE')",
            name="ck_students_status",
        ),
    )
    op.create_index("ix_students_school_id", "students", ["school_id"])
    op.create_index("ix_students_school_status", "students", ["school_id", "status"])

    op.create_table(
        "enrollment_records",
        _id_column(),
        sa.Column(
            "student_id",
            postgresql.UUID(as_uuid=False),
            sa.ForeignKey("students.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column(
            "classroom_id",
            postgresql.UUID(as_uuid=False),
            sa.ForeignKey("classrooms.id", ondelete="RESTRICT"),
            nullable=False,
        ),
        sa.Column(
            "school_id",
            postgresql.UUID(as_uuid=False),
            sa.ForeignKey("schools.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("start_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default="true"),
        sa.Column("reason", sa.String(20), nullable=False, server_default="ENROLLMENT"),
        sa.Column("notes", sa.Text, nullable=True),
        *_timestamp_columns(),
        *_audit_columns(),
        sa.CheckConstraint(
            "is_active = (end_date IS NULL)",
            name="ck_enrollment_records_active_end_date",
        ),
        sa.CheckConstraint(
            "reason IN ('ENROLLMENT', 'TRANSFER', 'GRADUATION', 'WITHDRAWAL')",
            name="ck_enrollment_records_reason",
        ),
    )
    op.create_index(
        "ix_enrollment_records_student_active",
        "enrollment_records",
        ["student_id", "is_active"],
    )
    op.create_index(
        "ix_enrollment_records_classroom_active",
        "enrollment_records",
        ["classroom_id", "is_active"],
    )
    op.create_index(
        "ix_enrollment_records_school_active",
        "enrollment_records",
        ["school_id", "is_active"],
    )
    op.create_index(
        "ix_enrollment_records_student_start",
        "enrollment_records",
        ["student_id", sa.text("start_date DESC")],
    )
    op.create_index(
        "uq_enrollment_records_one_active_per_student",
        "enrollment_records",
        ["student_id"],
        unique=True,
        postgresql_where=sa.text("is_active"),
    )


def downgrade() -> None:
    """Drop all tables."""
    # Reverse order for foreign keys
    op.drop_table("enrollment_records")
    op.drop_table("students")
    op.drop_table("classrooms")
    op.drop_table("schools")
