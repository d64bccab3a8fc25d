# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""SQLAlchemy ORM models.

Importing this package registers every table on Base.metadata.
"""

from src.infrastructure.database.models.base import (
    AuditMixin,
    Base,
    TimestampMixin,
    UUIDPrimaryKeyMixin,
    new_uuid,
)
from src.infrastructure.database.models.enrollment import EnrollmentRecord
from src.infrastructure.database.models.school import Classroom, School
from src.infrastructure.database.models.student import Student

__all__ = [
    "AuditMixin",
    "Base",
    "Classroom",
    "EnrollmentRecord",
    "School",
    "Student",
    "TimestampMixin",
    "UUIDPrimaryKeyMixin",
    "new_uuid",
]
