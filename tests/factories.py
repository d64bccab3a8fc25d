# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Shared test helpers: transient ORM rows, mock query results and SQL probes."""

from datetime import datetime, timedelta, timezone
from typing import Any
from unittest.mock import MagicMock
from uuid import uuid4

from sqlalchemy import text

from src.infrastructure.database.models import Classroom, EnrollmentRecord, Student

ADMIN_ID = "550e8400-e29b-41d4-a716-4466554400aa"


def make_result(value: Any = None, *, count: int | None = None, items: list | None = None):
    """Build a mock SQLAlchemy result.

    Args:
        value: Returned by scalar_one_or_none().
        count: Returned by scalar_one().
        items: Returned by scalars().all().
    """
    result = MagicMock()
    result.scalar_one_or_none.return_value = value
    if count is not None:
        result.scalar_one.return_value = count
    if items is not None:
        result.scalars.return_value.all.return_value = items
    return result


def make_student(school_id: str, status: str = "ACTIVE", **overrides: Any) -> Student:
    """Create a transient student."""
    now = datetime.now(timezone.utc)
    return Student(
        id=overrides.get("id", str(uuid4())),
        school_id=school_id,
        first_name=overrides.get("first_name", "Ada"),
        last_name=overrides.get("last_name", "Lovelace"),
        registration_number=overrides.get("registration_number", f"REG-{uuid4().hex[:8]}"),
        status=status,
        created_by=ADMIN_ID,
        created_at=now,
        updated_at=now,
    )


def make_classroom(
    school_id: str,
    capacity: int = 30,
    status: str = "ACTIVE",
    **overrides: Any,
) -> Classroom:
    """Create a transient classroom."""
    now = datetime.now(timezone.utc)
    return Classroom(
        id=overrides.get("id", str(uuid4())),
        school_id=school_id,
        name=overrides.get("name", "Class 5A"),
        grade=overrides.get("grade", "5"),
        capacity=capacity,
        resources={},
        status=status,
        created_by=ADMIN_ID,
        created_at=now,
        updated_at=now,
    )


def make_record(
    student: Student,
    classroom: Classroom,
    *,
    is_active: bool = True,
    reason: str = "ENROLLMENT",
    days_ago: int = 10,
) -> EnrollmentRecord:
    """Create a transient enrollment record."""
    start = datetime.now(timezone.utc) - timedelta(days=days_ago)
    return EnrollmentRecord(
        id=str(uuid4()),
        student_id=student.id,
        classroom_id=classroom.id,
        school_id=classroom.school_id,
        start_date=start,
        end_date=None if is_active else start + timedelta(days=1),
        is_active=is_active,
        reason=reason,
        created_by=ADMIN_ID,
        created_at=start,
        updated_at=start,
    )


async def count_active(session, classroom_id: str) -> int:
    """Count active enrollment records of a classroom with plain SQL."""
    result = await session.execute(
        text("SELECT count(*) FROM enrollment_records WHERE classroom_id = :cid AND is_active"),
        {"cid": classroom_id},
    )
    return result.scalar_one()
